from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .serializers import (
    AuthResponseSerializer,
    ChangePasswordSerializer,
    ErrorResponseSerializer,
    HouseholdSummarySerializer,
    LoginSerializer,
    OkResponseSerializer,
    ProfileResponseSerializer,
    RefreshSerializer,
    RegisterSerializer,
    TokensResponseSerializer,
    UpdateProfileSerializer,
    UserSerializer,
)
from .services import (
    UNSET,
    change_password as change_password_service,
    get_profile,
    login_user,
    logout_session,
    refresh_session,
    register_user,
    update_profile as update_profile_service,
)


def _household_data(household):
    return HouseholdSummarySerializer(household).data if household else None


def _auth_payload(result):
    return {
        'access_token': result.tokens.access_token,
        'refresh_token': result.tokens.refresh_token,
        'user': UserSerializer(result.user).data,
        'household': _household_data(result.household),
    }


def _profile_payload(profile):
    return {
        'user': {
            'id': str(profile.user.id),
            'email': profile.user.email or '',
            'display_name': profile.user.display_name,
            'phone': profile.phone,
        },
        'household': _household_data(profile.household),
    }


@extend_schema(
    request=RegisterSerializer,
    responses={
        201: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        409: ErrorResponseSerializer,
    },
    description="Create an account with email and/or phone. A single pending "
                "invitation for the identifier is accepted automatically.",
    tags=['auth'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def register(request):
    """Register a new user account."""
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = register_user(**serializer.validated_data)

    return Response(_auth_payload(result), status=status.HTTP_201_CREATED)


@extend_schema(
    request=LoginSerializer,
    responses={
        200: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
    },
    description="Authenticate with email or phone and password.",
    tags=['auth'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def login(request):
    """Login with email or phone."""
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = login_user(**serializer.validated_data)

    return Response(_auth_payload(result))


@extend_schema(
    request=RefreshSerializer,
    responses={
        200: TokensResponseSerializer,
        401: ErrorResponseSerializer,
    },
    description="Rotate a refresh token. Reusing an already rotated token "
                "revokes the whole session.",
    tags=['auth'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def refresh(request):
    serializer = RefreshSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    tokens = refresh_session(refresh_token=serializer.validated_data['refresh_token'])

    return Response({
        'access_token': tokens.access_token,
        'refresh_token': tokens.refresh_token,
    })


@extend_schema(
    request=None,
    responses={200: OkResponseSerializer},
    description="Revoke the session of the current access token.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    logout_session(user_id=request.user.id, session_id=request.auth.get('sid'))
    return Response({'ok': True})


@extend_schema(
    methods=['GET'],
    responses={200: ProfileResponseSerializer},
    description="Get the current user's profile and resolved household.",
    tags=['auth'],
)
@extend_schema(
    methods=['PATCH'],
    request=UpdateProfileSerializer,
    responses={
        200: ProfileResponseSerializer,
        400: ErrorResponseSerializer,
        409: ErrorResponseSerializer,
    },
    description="Update display name, email or phone. Null removes an "
                "identifier as long as the other remains.",
    tags=['auth'],
)
@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def me(request):
    """Get or update the current user's profile."""
    if request.method == 'GET':
        return Response(_profile_payload(get_profile(user_id=request.user.id)))

    serializer = UpdateProfileSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    profile = update_profile_service(
        user_id=request.user.id,
        display_name=data.get('display_name', UNSET),
        email=data.get('email', UNSET),
        phone=data.get('phone', UNSET),
    )
    return Response(_profile_payload(profile))


@extend_schema(
    request=ChangePasswordSerializer,
    responses={
        200: OkResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
    },
    description="Change the current user's password.",
    tags=['auth'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def change_password(request):
    serializer = ChangePasswordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    change_password_service(
        user_id=request.user.id,
        current_password=serializer.validated_data['current_password'],
        new_password=serializer.validated_data['new_password'],
    )
    return Response({'ok': True})
