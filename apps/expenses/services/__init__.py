"""Services for expenses business logic."""

from .exceptions import (
    ExpensesServiceError,
    ExpenseNotFoundError,
    ShoppingExpenseDeleteError,
    PayerNotMemberError,
)
from .filters import ExpenseFilters, sum_amount
from .expense_management import (
    ExpenseScope,
    scoped_expenses,
    shopping_amount,
    record_shopping_expense,
    sync_shopping_expense,
    remove_shopping_expense,
    create_manual_expense,
    get_expense,
    delete_expense,
    list_expenses,
    summarize_expenses,
)
from .reports import UNCATEGORIZED, total_by_payer, total_by_category, balance

__all__ = [
    # Exceptions
    'ExpensesServiceError',
    'ExpenseNotFoundError',
    'ShoppingExpenseDeleteError',
    'PayerNotMemberError',
    # Filters
    'ExpenseFilters',
    'sum_amount',
    # Expenses
    'ExpenseScope',
    'scoped_expenses',
    'shopping_amount',
    'record_shopping_expense',
    'sync_shopping_expense',
    'remove_shopping_expense',
    'create_manual_expense',
    'get_expense',
    'delete_expense',
    'list_expenses',
    'summarize_expenses',
    # Reports
    'UNCATEGORIZED',
    'total_by_payer',
    'total_by_category',
    'balance',
]
