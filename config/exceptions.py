"""
Domain error taxonomy shared by every app.

Service modules raise subclasses of these errors and views let them
propagate; ``config.exception_handler`` turns them into JSON responses
with the matching HTTP status.
"""

from rest_framework import status


class DomainError(Exception):
    """Base class for business rule violations."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Request could not be processed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def public_message(self):
        return self.message


class BadRequestError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Invalid request'


class UnauthorizedError(DomainError):
    """
    Credential and token failures.

    The message shown to clients is always the class default so callers
    cannot tell a missing account from a wrong password, or a revoked
    session from an unknown token.
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Invalid or expired credentials'

    @property
    def public_message(self):
        return self.default_message


class ForbiddenError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'You do not have permission to perform this action'


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found'


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Conflict'

