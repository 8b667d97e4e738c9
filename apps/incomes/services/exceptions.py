"""
Domain-specific exceptions for incomes app.
"""

from config.exceptions import DomainError, NotFoundError


class IncomesServiceError(DomainError):
    """Base exception for all incomes service errors."""
    pass


class IncomeNotFoundError(IncomesServiceError, NotFoundError):
    default_message = 'Income not found'
