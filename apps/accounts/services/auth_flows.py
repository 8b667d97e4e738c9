"""
Authentication flows.

Registration, login, token refresh, logout and profile management. Each
flow builds the components it needs from an ``AppConfig``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.households.services import invitations as household_invitations
from apps.households.services import membership as household_membership
from config.runtime import AppConfig

from .credentials import UNSET, CredentialStore, normalize_email, normalize_phone
from .exceptions import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    InvalidPhoneError,
    MissingIdentifierError,
    PhoneAlreadyRegisteredError,
    UnknownUserError,
)
from .sessions import IssuedTokens, SessionManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    tokens: IssuedTokens
    user: User
    household: Optional[object] = None


@dataclass(frozen=True)
class Profile:
    user: User
    phone: Optional[str]
    household: Optional[object]


def _config(config: Optional[AppConfig]) -> AppConfig:
    return config or AppConfig.from_settings()


def register_user(
    *,
    password: str,
    display_name: str,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    config: Optional[AppConfig] = None,
) -> AuthResult:
    """
    Register a new account and open its first session.

    No household is created. If exactly one pending invitation targets the
    email (or, failing that, the phone) it is accepted and its household
    becomes primary.

    Raises:
        MissingIdentifierError: Neither email nor phone
        InvalidPhoneError: Phone does not normalise
        EmailAlreadyRegisteredError / PhoneAlreadyRegisteredError: Taken
        PhoneAuthUnavailableError: Phone given without an encryption key
    """
    config = _config(config)
    credentials = CredentialStore(config)

    email = normalize_email(email)
    raw_phone = str(phone or '').strip()
    if not email and not raw_phone:
        raise MissingIdentifierError()

    normalized_phone = ''
    if raw_phone:
        normalized_phone = normalize_phone(raw_phone)
        if not normalized_phone:
            raise InvalidPhoneError()

    if email and credentials.email_taken(email):
        raise EmailAlreadyRegisteredError()
    if normalized_phone and credentials.phone_taken(normalized_phone):
        raise PhoneAlreadyRegisteredError()

    resolver = household_invitations.InvitationResolver(config, credentials=credentials)

    try:
        with transaction.atomic():
            user = credentials.create_user(
                email=email or None,
                phone=normalized_phone or None,
                display_name=display_name,
                password=password,
            )

            household = None
            if email:
                household = resolver.auto_accept_by_email(user=user, email=email)
            if household is None and normalized_phone:
                household = resolver.auto_accept_by_phone(user=user, phone=normalized_phone)

            tokens = SessionManager(config).create_session(user=user)
    except IntegrityError:
        # Lost a race with a concurrent registration for the same identifier.
        raise EmailAlreadyRegisteredError('Account already registered')

    logger.info("User %s registered", user.id)
    return AuthResult(tokens=tokens, user=user, household=household)


@transaction.atomic
def login_user(
    *,
    password: str,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    config: Optional[AppConfig] = None,
) -> AuthResult:
    """
    Authenticate with email or phone and open a new session.

    Every failure raises the same InvalidCredentialsError.
    """
    config = _config(config)
    credentials = CredentialStore(config)

    if email:
        user = credentials.find_by_email(email)
    elif phone:
        user = credentials.find_by_phone(phone)
    else:
        user = None

    if user is None:
        # Hash anyway so unknown accounts take as long as wrong passwords.
        User().set_password(password)
        raise InvalidCredentialsError()

    if not user.check_password(password) or not user.is_active:
        raise InvalidCredentialsError()

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    tokens = SessionManager(config).create_session(user=user)
    logger.info("User %s logged in", user.id)
    return AuthResult(tokens=tokens, user=user)


def refresh_session(*, refresh_token, config: Optional[AppConfig] = None) -> IssuedTokens:
    return SessionManager(_config(config)).refresh(refresh_token=refresh_token)


def logout_session(*, user_id, session_id, config: Optional[AppConfig] = None) -> None:
    SessionManager(_config(config)).logout(user_id=user_id, session_id=session_id)


def get_profile(*, user_id, config: Optional[AppConfig] = None) -> Profile:
    config = _config(config)
    credentials = CredentialStore(config)

    user = credentials.find_by_id(user_id)
    if user is None:
        raise UnknownUserError("User not found")

    ledger = household_membership.MembershipLedger(config)
    return Profile(
        user=user,
        phone=credentials.decrypted_phone(user),
        household=ledger.resolve_household_for_user(user.id),
    )


def update_profile(
    *,
    user_id,
    display_name=UNSET,
    email=UNSET,
    phone=UNSET,
    config: Optional[AppConfig] = None,
) -> Profile:
    """Apply a partial profile update; see ``CredentialStore.update_profile``."""
    config = _config(config)
    CredentialStore(config).update_profile(
        user_id=user_id,
        display_name=display_name,
        email=email,
        phone=phone,
    )
    return get_profile(user_id=user_id, config=config)


@transaction.atomic
def change_password(*, user_id, current_password: str, new_password: str) -> None:
    user = User.objects.select_for_update().filter(id=user_id).first()
    if user is None:
        raise UnknownUserError("User not found")

    if not user.check_password(current_password):
        raise InvalidCredentialsError()

    user.set_password(new_password)
    user.save(update_fields=['password', 'updated_at'])
    logger.info("User %s changed password", user.id)
