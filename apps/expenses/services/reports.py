"""
Household spending reports.

Per-payer and per-category totals cover shared-list purchases only.
The balance compares the caller's own income with what they paid.
"""

from typing import Optional

from django.db.models import F, Sum, Value
from django.db.models.functions import Coalesce

from apps.households.services import MembershipLedger
from apps.incomes.services import sum_incomes
from config.runtime import AppConfig

from .expense_management import ExpenseScope, scoped_expenses
from .filters import CENTS, ExpenseFilters, sum_amount

UNCATEGORIZED = '(uncategorized)'


def _report(household, date_from, date_to, items):
    return {
        'household_id': household.id,
        'date_from': date_from,
        'date_to': date_to,
        'items': items,
    }


def _shared_purchases(household, user_id, date_from, date_to):
    filters = ExpenseFilters(date_from=date_from, date_to=date_to)
    return filters.apply(scoped_expenses(household, user_id=user_id, scope=ExpenseScope.SHARED))


def total_by_payer(*, user_id, date_from=None, date_to=None, config: Optional[AppConfig] = None) -> dict:
    """Shared-list spending per payer, biggest spender first."""
    household = MembershipLedger(config or AppConfig.from_settings()).require_household_access(user_id)
    rows = (
        _shared_purchases(household, user_id, date_from, date_to)
        .values('payer_id')
        .annotate(display_name=F('payer__display_name'), total=Sum('amount'))
        .order_by('-total', 'display_name')
    )
    items = [
        {
            'payer_id': row['payer_id'],
            'display_name': row['display_name'],
            'total': row['total'].quantize(CENTS),
        }
        for row in rows
    ]
    return _report(household, date_from, date_to, items)


def total_by_category(*, user_id, date_from=None, date_to=None, config: Optional[AppConfig] = None) -> dict:
    """Shared-list spending per category; expenses without one are grouped together."""
    household = MembershipLedger(config or AppConfig.from_settings()).require_household_access(user_id)
    rows = (
        _shared_purchases(household, user_id, date_from, date_to)
        .annotate(label=Coalesce('category', Value(UNCATEGORIZED)))
        .values('label')
        .annotate(total=Sum('amount'))
        .order_by('-total', 'label')
    )
    items = [{'category': row['label'], 'total': row['total'].quantize(CENTS)} for row in rows]
    return _report(household, date_from, date_to, items)


def balance(*, user_id, date_from=None, date_to=None, config: Optional[AppConfig] = None) -> dict:
    """
    The caller's income minus the expenses they paid in their household.

    Amounts are summed as stored; no currency conversion takes place.
    """
    household = MembershipLedger(config or AppConfig.from_settings()).require_household_access(user_id)
    filters = ExpenseFilters(date_from=date_from, date_to=date_to, payer_id=user_id)
    expense = sum_amount(filters.apply(scoped_expenses(household, user_id=user_id)))
    income = sum_incomes(user_id=user_id, date_from=date_from, date_to=date_to)
    return {
        'user_id': user_id,
        'household_id': household.id,
        'currency': household.currency,
        'date_from': date_from,
        'date_to': date_to,
        'income': income,
        'expense': expense,
        'balance': income - expense,
    }
