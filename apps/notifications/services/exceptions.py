"""
Domain-specific exceptions for notifications app.
"""

from config.exceptions import BadRequestError, DomainError


class NotificationsServiceError(DomainError):
    """Base exception for all notifications service errors."""
    pass


class InvalidPushTokenError(NotificationsServiceError, BadRequestError):
    """Raised when a device token does not look like its declared provider's."""
    default_message = 'Invalid push token'

