"""
Domain-specific exceptions for lists app.
"""

from config.exceptions import DomainError, NotFoundError


class ListsServiceError(DomainError):
    """Base exception for all lists service errors."""
    pass


class ListNotFoundError(ListsServiceError, NotFoundError):
    """Raised for missing lists and for other users' personal lists."""
    default_message = 'List not found'


class ItemNotFoundError(ListsServiceError, NotFoundError):
    default_message = 'Item not found'
