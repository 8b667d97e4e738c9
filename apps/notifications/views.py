import uuid
from dataclasses import asdict

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import OpenApiParameter, extend_schema

from apps.accounts.serializers import ErrorResponseSerializer, OkResponseSerializer
from apps.households.services import MembershipLedger
from config.runtime import AppConfig

from .models import ListAction
from .serializers import (
    RegisteredTokenSerializer,
    RegisterPushTokenSerializer,
    SendNotificationResultSerializer,
    SendNotificationSerializer,
)
from .services import (
    HouseholdListEvent,
    NotificationDispatcher,
    register_push_token,
    remove_push_token,
)

# Excludes nobody: no account has the nil UUID.
NOBODY = uuid.UUID(int=0)


@extend_schema(
    request=RegisterPushTokenSerializer,
    responses={200: RegisteredTokenSerializer, 400: ErrorResponseSerializer},
    description="Register a device push token for the caller. A token already "
                "registered moves to the caller.",
    tags=['notifications'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def register_token(request):
    serializer = RegisterPushTokenSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    push_token = register_push_token(user_id=request.user.id, **serializer.validated_data)
    return Response({'success': True, 'token_id': str(push_token.id)})


@extend_schema(
    request=None,
    responses={200: OkResponseSerializer},
    parameters=[OpenApiParameter('token', str, OpenApiParameter.PATH)],
    description="Forget one of the caller's device tokens.",
    tags=['notifications'],
)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def remove_token(request, token):
    remove_push_token(user_id=request.user.id, token=token)
    return Response({'ok': True})


@extend_schema(
    request=SendNotificationSerializer,
    responses={200: SendNotificationResultSerializer, 403: ErrorResponseSerializer},
    description="QA helper: push a custom message to a household the caller "
                "belongs to. Nobody is excluded unless exclude_user_id is set.",
    tags=['notifications'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def send_household_notification(request):
    serializer = SendNotificationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    extra = data.get('data', {})

    MembershipLedger(AppConfig.from_settings()).assert_member(
        household_id=data['household_id'],
        user_id=request.user.id,
    )

    event = HouseholdListEvent(
        action=extra.get('action_type', ListAction.ITEM_ADDED),
        household_id=data['household_id'],
        list_id=extra.get('list_id', ''),
        user_id=request.user.id,
        user_name=extra.get('user_name', ''),
        item_name=extra.get('item_name') or None,
        exclude_user_id=data.get('exclude_user_id', NOBODY),
    )
    result = NotificationDispatcher().deliver(event, title=data['title'], body=data['body'])
    return Response({'ok': True, 'result': asdict(result)})
