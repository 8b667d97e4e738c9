"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    MissingIdentifierError,
    InvalidEmailError,
    InvalidPhoneError,
    PhoneAuthUnavailableError,
    InvalidDisplayNameError,
    IdentifierRequiredError,
    EmailAlreadyRegisteredError,
    PhoneAlreadyRegisteredError,
    InvalidCredentialsError,
    UnknownUserError,
    InvalidRefreshTokenError,
    TokenReuseDetectedError,
    SessionRevokedError,
    RefreshTokenExpiredError,
    InvalidAccessTokenError,
    SessionNotFoundError,
    SessionExpiredError,
)
from .credentials import UNSET, CredentialStore, normalize_email, normalize_phone
from .sessions import AuthIdentity, IssuedTokens, SessionManager
from .auth_flows import (
    AuthResult,
    Profile,
    register_user,
    login_user,
    refresh_session,
    logout_session,
    get_profile,
    update_profile,
    change_password,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'MissingIdentifierError',
    'InvalidEmailError',
    'InvalidPhoneError',
    'PhoneAuthUnavailableError',
    'InvalidDisplayNameError',
    'IdentifierRequiredError',
    'EmailAlreadyRegisteredError',
    'PhoneAlreadyRegisteredError',
    'InvalidCredentialsError',
    'UnknownUserError',
    'InvalidRefreshTokenError',
    'TokenReuseDetectedError',
    'SessionRevokedError',
    'RefreshTokenExpiredError',
    'InvalidAccessTokenError',
    'SessionNotFoundError',
    'SessionExpiredError',
    # Components
    'UNSET',
    'CredentialStore',
    'normalize_email',
    'normalize_phone',
    'AuthIdentity',
    'IssuedTokens',
    'SessionManager',
    # Services
    'AuthResult',
    'Profile',
    'register_user',
    'login_user',
    'refresh_session',
    'logout_session',
    'get_profile',
    'update_profile',
    'change_password',
]
