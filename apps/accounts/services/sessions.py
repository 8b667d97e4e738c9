"""
Session manager.

Issues refresh-token sessions, rotates them on use and signs the short-lived
access JWTs that reference them.
"""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from typing import Mapping

from django.core.exceptions import ValidationError
from django.db.models import Q
from django.utils import timezone
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from apps.accounts.models import AuthSession, User
from config.runtime import AppConfig

from .exceptions import (
    InvalidAccessTokenError,
    InvalidRefreshTokenError,
    RefreshTokenExpiredError,
    SessionExpiredError,
    SessionNotFoundError,
    SessionRevokedError,
    TokenReuseDetectedError,
)

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = 'access'


@dataclass(frozen=True)
class IssuedTokens:
    access_token: str
    refresh_token: str
    session_id: str


@dataclass(frozen=True)
class AuthIdentity:
    """Who is calling, as established from a validated access token."""
    user_id: str
    email: str
    session_id: str


def generate_refresh_token() -> str:
    """256-bit random token, base64url encoded."""
    return secrets.token_urlsafe(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


class SessionManager:
    def __init__(self, config: AppConfig):
        self.config = config

    def sign_access_token(self, *, user: User, session_id) -> str:
        token = AccessToken()
        token.set_exp(lifetime=self.config.access_token_ttl)
        token[api_settings.USER_ID_CLAIM] = str(user.id)
        token['email'] = user.email or ''
        token['sid'] = str(session_id)
        return str(token)

    def create_session(self, *, user: User) -> IssuedTokens:
        refresh_token = generate_refresh_token()
        session = AuthSession.objects.create(
            user=user,
            refresh_token_hash=hash_token(refresh_token),
            previous_refresh_token_hash=None,
            expires_at=timezone.now() + self.config.refresh_token_ttl,
        )
        return IssuedTokens(
            access_token=self.sign_access_token(user=user, session_id=session.id),
            refresh_token=refresh_token,
            session_id=str(session.id),
        )

    def refresh(self, *, refresh_token) -> IssuedTokens:
        """
        Rotate a refresh token.

        Presenting a token that was already rotated away revokes the whole
        session. The revocation is written before the error is raised and is
        not part of any enclosing transaction of this method.

        The rotation itself is a conditional update on the current hash, so
        when two requests race with the same token only one of them wins.

        Raises:
            InvalidRefreshTokenError: Unknown token, or lost a rotation race
            TokenReuseDetectedError: Token was superseded by an earlier rotation
            SessionRevokedError: Session was logged out or revoked
            RefreshTokenExpiredError: Session expired
        """
        if not refresh_token or not isinstance(refresh_token, str):
            raise InvalidRefreshTokenError("Missing refresh token")

        token_hash = hash_token(refresh_token)
        session = (
            AuthSession.objects
            .select_related('user')
            .filter(Q(refresh_token_hash=token_hash) | Q(previous_refresh_token_hash=token_hash))
            .first()
        )
        if session is None:
            raise InvalidRefreshTokenError("Invalid refresh token")

        now = timezone.now()

        if session.previous_refresh_token_hash == token_hash:
            AuthSession.objects.filter(id=session.id, revoked_at__isnull=True).update(
                revoked_at=now, updated_at=now
            )
            logger.warning("Refresh token reuse detected; session %s revoked", session.id)
            raise TokenReuseDetectedError("Refresh token reuse detected")

        if session.revoked_at is not None:
            raise SessionRevokedError("Session has been revoked")
        if session.is_expired(now):
            raise RefreshTokenExpiredError("Refresh token expired")
        if not session.user.is_active:
            raise InvalidRefreshTokenError("User is inactive")

        new_refresh_token = generate_refresh_token()
        rotated = (
            AuthSession.objects
            .filter(id=session.id, refresh_token_hash=token_hash, revoked_at__isnull=True)
            .update(
                previous_refresh_token_hash=token_hash,
                refresh_token_hash=hash_token(new_refresh_token),
                rotated_at=now,
                expires_at=now + self.config.refresh_token_ttl,
                updated_at=now,
            )
        )
        if rotated != 1:
            raise InvalidRefreshTokenError("Refresh token was rotated concurrently")

        return IssuedTokens(
            access_token=self.sign_access_token(user=session.user, session_id=session.id),
            refresh_token=new_refresh_token,
            session_id=str(session.id),
        )

    def validate(self, payload: Mapping) -> AuthIdentity:
        """Check that an access-token payload belongs to a live session."""
        session_id = payload.get('sid')
        if payload.get(api_settings.TOKEN_TYPE_CLAIM) != ACCESS_TOKEN_TYPE or not session_id:
            raise InvalidAccessTokenError("Invalid access token")

        try:
            session = (
                AuthSession.objects
                .only('id', 'user_id', 'revoked_at', 'expires_at')
                .get(id=session_id)
            )
        except (AuthSession.DoesNotExist, ValidationError, ValueError):
            raise SessionNotFoundError("Session not found")

        subject = payload.get(api_settings.USER_ID_CLAIM)
        if str(session.user_id) != str(subject):
            raise SessionNotFoundError("Session does not belong to token subject")
        if session.revoked_at is not None:
            raise SessionRevokedError("Session has been revoked")
        if session.is_expired():
            raise SessionExpiredError("Session expired")

        return AuthIdentity(
            user_id=str(subject),
            email=payload.get('email') or '',
            session_id=str(session.id),
        )

    def logout(self, *, user_id, session_id) -> None:
        """Revoke a session. Unknown or already revoked sessions are ignored."""
        if not session_id:
            return
        try:
            revoked = AuthSession.objects.filter(
                id=session_id, user_id=user_id, revoked_at__isnull=True
            ).update(revoked_at=timezone.now(), updated_at=timezone.now())
        except (ValidationError, ValueError):
            return
        if revoked:
            logger.info("Session %s logged out", session_id)
