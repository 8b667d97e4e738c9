from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.serializers import ErrorResponseSerializer
from config.runtime import AppConfig

from .serializers import (
    AcceptInvitationSerializer,
    CreateHouseholdSerializer,
    HouseholdDeletedSerializer,
    HouseholdInvitationSerializer,
    HouseholdResultSerializer,
    HouseholdSerializer,
    InvitationCreatedSerializer,
    InvitationRevokedSerializer,
    InviteSerializer,
    MemberRemovedSerializer,
    MemberSerializer,
    MyHouseholdSerializer,
    RegisteredMemberSerializer,
    RegisterMemberSerializer,
    RenameHouseholdSerializer,
    RoleChangedSerializer,
    SearchUserResultSerializer,
    SearchUserSerializer,
    SetMemberRoleSerializer,
    SwitchHouseholdSerializer,
    UpdateHouseholdSerializer,
)
from .services import (
    InvitationResolver,
    MembershipLedger,
    create_household,
    list_members,
    list_my_households,
    list_my_members,
    register_member,
    rename_my_household,
    search_user_for_invite,
    switch_primary_household,
    update_household,
)


def _resolver():
    return InvitationResolver(AppConfig.from_settings())


def _ledger():
    return MembershipLedger(AppConfig.from_settings())


def _invitation_payload(issued):
    return {
        'ok': True,
        'invitation_id': str(issued.invitation.id),
        'token': issued.token,
        'email': issued.email,
        'phone': issued.phone,
        'method': issued.method,
    }


# =============================================================================
# The caller's households
# =============================================================================

@extend_schema(
    methods=['POST'],
    request=CreateHouseholdSerializer,
    responses={201: HouseholdSerializer, 400: ErrorResponseSerializer},
    description="Create a household owned by the caller. It becomes primary "
                "only if the caller has none.",
    tags=['households'],
)
@extend_schema(
    methods=['PATCH'],
    request=RenameHouseholdSerializer,
    responses={200: HouseholdResultSerializer, 404: ErrorResponseSerializer},
    description="Rename the caller's current household.",
    tags=['households'],
)
@api_view(['POST', 'PATCH'])
@permission_classes([IsAuthenticated])
def my_household(request):
    """Create or rename the caller's household."""
    if request.method == 'POST':
        serializer = CreateHouseholdSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        household = create_household(user_id=request.user.id, **serializer.validated_data)
        return Response(HouseholdSerializer(household).data, status=status.HTTP_201_CREATED)

    serializer = RenameHouseholdSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    household = rename_my_household(user_id=request.user.id, name=serializer.validated_data['name'])
    return Response({'ok': True, 'household': HouseholdSerializer(household).data})


@extend_schema(
    responses={200: MyHouseholdSerializer(many=True)},
    description="List every household the caller belongs to.",
    tags=['households'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_households(request):
    households = list_my_households(user_id=request.user.id)
    return Response(MyHouseholdSerializer(households, many=True).data)


@extend_schema(
    request=SwitchHouseholdSerializer,
    responses={200: HouseholdResultSerializer, 403: ErrorResponseSerializer},
    description="Make another of the caller's households primary.",
    tags=['households'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def switch_household(request):
    serializer = SwitchHouseholdSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    household = switch_primary_household(
        user_id=request.user.id,
        household_id=serializer.validated_data['household_id'],
    )
    return Response({'ok': True, 'household': HouseholdSerializer(household).data})


@extend_schema(
    responses={200: MemberSerializer(many=True), 404: ErrorResponseSerializer},
    description="List members of the caller's current household.",
    tags=['households'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_members(request):
    return Response(MemberSerializer(list_my_members(user_id=request.user.id), many=True).data)


@extend_schema(
    request=RegisterMemberSerializer,
    responses={
        201: RegisteredMemberSerializer,
        403: ErrorResponseSerializer,
        409: ErrorResponseSerializer,
    },
    description="Owner only: create an account directly inside the current household.",
    tags=['households'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def register_household_member(request):
    serializer = RegisterMemberSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    household, user = register_member(owner_id=request.user.id, **data)

    return Response({
        'ok': True,
        'household': HouseholdSerializer(household).data,
        'user': {
            'id': str(user.id),
            'email': user.email,
            'phone': data.get('phone') or None,
            'display_name': user.display_name,
        },
    }, status=status.HTTP_201_CREATED)


# =============================================================================
# Invitations
# =============================================================================

@extend_schema(
    request=InviteSerializer,
    responses={201: InvitationCreatedSerializer, 409: ErrorResponseSerializer},
    description="Invite someone by email or phone to the caller's current "
                "household. The returned token is shown only once.",
    tags=['households'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def invite(request):
    serializer = InviteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    issued = _resolver().invite(inviter_id=request.user.id, **serializer.validated_data)
    return Response(_invitation_payload(issued), status=status.HTTP_201_CREATED)


@extend_schema(
    request=AcceptInvitationSerializer,
    responses={
        200: HouseholdSerializer,
        404: ErrorResponseSerializer,
        409: ErrorResponseSerializer,
    },
    description="Accept an invitation by token. Accepting again once already "
                "a member succeeds.",
    tags=['households'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def accept_invitation(request):
    serializer = AcceptInvitationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    household = _resolver().accept_by_token(
        user_id=request.user.id,
        token=serializer.validated_data['token'],
    )
    return Response(HouseholdSerializer(household).data)


@extend_schema(
    request=SearchUserSerializer,
    responses={200: SearchUserResultSerializer},
    description="Check whether an email or phone belongs to an account before inviting.",
    tags=['households'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def search_user(request):
    serializer = SearchUserSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = search_user_for_invite(
        user_id=request.user.id,
        identifier=serializer.validated_data['identifier'],
        household_id=serializer.validated_data.get('household_id'),
    )
    return Response(SearchUserResultSerializer(result).data)


@extend_schema(
    methods=['GET'],
    responses={200: HouseholdInvitationSerializer(many=True), 403: ErrorResponseSerializer},
    description="Owner only: list invitations, newest first. Stale pending "
                "invitations are marked expired first.",
    tags=['households'],
)
@extend_schema(
    methods=['POST'],
    request=InviteSerializer,
    responses={201: InvitationCreatedSerializer, 409: ErrorResponseSerializer},
    description="Owner only: invite someone to this household.",
    tags=['households'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def household_invitations(request, household_id):
    resolver = _resolver()

    if request.method == 'GET':
        invitations = resolver.list_for_owner(owner_id=request.user.id, household_id=household_id)
        return Response(HouseholdInvitationSerializer(invitations, many=True).data)

    serializer = InviteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    issued = resolver.invite_to_household(
        owner_id=request.user.id,
        household_id=household_id,
        **serializer.validated_data,
    )
    return Response(_invitation_payload(issued), status=status.HTTP_201_CREATED)


@extend_schema(
    request=None,
    responses={
        200: InvitationRevokedSerializer,
        404: ErrorResponseSerializer,
        409: ErrorResponseSerializer,
    },
    description="Owner only: revoke a pending invitation.",
    tags=['households'],
)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def revoke_invitation(request, household_id, invitation_id):
    invitation = _resolver().revoke(
        owner_id=request.user.id,
        household_id=household_id,
        invitation_id=invitation_id,
    )
    return Response({'ok': True, 'invitation_id': str(invitation.id), 'status': invitation.status})


# =============================================================================
# A specific household
# =============================================================================

@extend_schema(
    methods=['PATCH'],
    request=UpdateHouseholdSerializer,
    responses={200: HouseholdResultSerializer, 403: ErrorResponseSerializer},
    description="Owner only: change name or currency.",
    tags=['households'],
)
@extend_schema(
    methods=['DELETE'],
    request=None,
    responses={200: HouseholdDeletedSerializer, 403: ErrorResponseSerializer},
    description="Owner only: delete the household with its lists, expenses "
                "and invitations.",
    tags=['households'],
)
@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def household_detail(request, household_id):
    if request.method == 'DELETE':
        _ledger().delete_household(owner_id=request.user.id, household_id=household_id)
        return Response({'ok': True, 'deleted_household_id': str(household_id)})

    serializer = UpdateHouseholdSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    household = update_household(
        owner_id=request.user.id,
        household_id=household_id,
        **serializer.validated_data,
    )
    return Response({'ok': True, 'household': HouseholdSerializer(household).data})


@extend_schema(
    responses={200: MemberSerializer(many=True), 403: ErrorResponseSerializer},
    description="List members of a household the caller belongs to.",
    tags=['households'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def household_members(request, household_id):
    members = list_members(household_id=household_id, user_id=request.user.id)
    return Response(MemberSerializer(members, many=True).data)


@extend_schema(
    request=None,
    responses={200: MemberRemovedSerializer, 403: ErrorResponseSerializer},
    description="Owner only: remove a member. The last owner cannot be removed.",
    tags=['households'],
)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def remove_household_member(request, household_id, member_user_id):
    _ledger().remove_member(
        owner_id=request.user.id,
        household_id=household_id,
        member_user_id=member_user_id,
    )
    return Response({'ok': True, 'removed_user_id': str(member_user_id)})


@extend_schema(
    request=SetMemberRoleSerializer,
    responses={200: RoleChangedSerializer, 403: ErrorResponseSerializer},
    description="Owner only: change a member's role. The last owner cannot "
                "be downgraded.",
    tags=['households'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def set_member_role(request, household_id, member_user_id):
    serializer = SetMemberRoleSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    member = _ledger().set_member_role(
        owner_id=request.user.id,
        household_id=household_id,
        member_user_id=member_user_id,
        role=serializer.validated_data['role'],
    )
    return Response({'ok': True, 'user_id': str(member.user_id), 'role': member.role})
