"""Services for incomes business logic."""

from .exceptions import IncomesServiceError, IncomeNotFoundError
from .income_management import (
    IncomeFilters,
    create_income,
    get_income,
    update_income,
    delete_income,
    list_incomes,
    sum_incomes,
    summarize_incomes,
)

__all__ = [
    # Exceptions
    'IncomesServiceError',
    'IncomeNotFoundError',
    # Services
    'IncomeFilters',
    'create_income',
    'get_income',
    'update_income',
    'delete_income',
    'list_incomes',
    'sum_incomes',
    'summarize_incomes',
]
