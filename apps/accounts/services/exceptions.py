"""Domain-specific exceptions for accounts services."""

from config.exceptions import (
    BadRequestError,
    ConflictError,
    DomainError,
    UnauthorizedError,
)


class AccountsServiceError(DomainError):
    """Base exception for accounts services."""
    pass


class MissingIdentifierError(AccountsServiceError, BadRequestError):
    default_message = 'Email or phone is required'


class InvalidEmailError(AccountsServiceError, BadRequestError):
    default_message = 'Invalid email address'


class InvalidPhoneError(AccountsServiceError, BadRequestError):
    default_message = 'Invalid phone number'


class PhoneAuthUnavailableError(AccountsServiceError, BadRequestError):
    """Raised when a phone operation runs without a usable encryption key."""
    default_message = 'Phone authentication is not available'


class InvalidDisplayNameError(AccountsServiceError, BadRequestError):
    default_message = 'Display name must be at least 2 characters'


class IdentifierRequiredError(AccountsServiceError, BadRequestError):
    """Raised when a profile update would leave neither email nor phone."""
    default_message = 'User must keep an email or a phone number'


class EmailAlreadyRegisteredError(AccountsServiceError, ConflictError):
    default_message = 'This email is already registered'


class PhoneAlreadyRegisteredError(AccountsServiceError, ConflictError):
    default_message = 'This phone number is already registered'


class InvalidCredentialsError(AccountsServiceError, UnauthorizedError):
    """Raised on login or password change with wrong credentials."""
    default_message = 'Invalid credentials'


class UnknownUserError(AccountsServiceError, UnauthorizedError):
    """Raised when the authenticated user no longer exists."""
    pass


# Session errors. All render the same generic message to clients.

class InvalidRefreshTokenError(AccountsServiceError, UnauthorizedError):
    pass


class TokenReuseDetectedError(AccountsServiceError, UnauthorizedError):
    """Raised when a rotated refresh token is presented again."""
    pass


class SessionRevokedError(AccountsServiceError, UnauthorizedError):
    pass


class RefreshTokenExpiredError(AccountsServiceError, UnauthorizedError):
    pass


class InvalidAccessTokenError(AccountsServiceError, UnauthorizedError):
    pass


class SessionNotFoundError(AccountsServiceError, UnauthorizedError):
    pass


class SessionExpiredError(AccountsServiceError, UnauthorizedError):
    pass
