"""
Bearer authentication backed by refresh-token sessions.

simplejwt verifies the signature and expiry of the access token; this class
additionally requires the session named in the ``sid`` claim to be live.
"""

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed

from apps.accounts.models import User
from config.exceptions import UnauthorizedError
from config.runtime import AppConfig

from .services.sessions import SessionManager


class SessionJWTAuthentication(JWTAuthentication):
    """
    ``request.user`` is the token's user and ``request.auth`` the validated
    token, so views read the session id with ``request.auth.get('sid')``.
    """

    def get_user(self, validated_token):
        try:
            identity = SessionManager(AppConfig.from_settings()).validate(validated_token.payload)
        except UnauthorizedError as exc:
            raise AuthenticationFailed(exc.public_message, code='session_invalid')

        user = User.objects.filter(id=identity.user_id).first()
        if user is None or not user.is_active:
            raise AuthenticationFailed(UnauthorizedError.default_message, code='user_not_found')
        return user
