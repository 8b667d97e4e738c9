"""
Domain-specific exceptions for expenses app.
"""

from config.exceptions import BadRequestError, ConflictError, DomainError, NotFoundError


class ExpensesServiceError(DomainError):
    """Base exception for all expenses service errors."""
    pass


class ExpenseNotFoundError(ExpensesServiceError, NotFoundError):
    default_message = 'Expense not found'


class ShoppingExpenseDeleteError(ExpensesServiceError, ConflictError):
    """Raised when deleting an expense that a purchased list item produced."""
    default_message = 'Only manual expenses can be deleted'


class PayerNotMemberError(ExpensesServiceError, BadRequestError):
    default_message = 'Payer is not a member of this household'
