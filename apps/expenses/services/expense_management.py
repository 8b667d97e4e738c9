"""
Expense management service.

Handles:
- Manual expenses entered by household members
- Expenses derived from purchased shopping items
- Household, shared-list, personal-list and per-payer totals
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from django.db import transaction
from django.utils import timezone

from apps.expenses.models import Expense, ExpenseSource
from apps.households.models import Household
from apps.households.services import MembershipLedger
from apps.lists.models import ShoppingItem
from config.runtime import AppConfig

from .exceptions import ExpenseNotFoundError, PayerNotMemberError, ShoppingExpenseDeleteError
from .filters import CENTS, ExpenseFilters, sum_amount

logger = logging.getLogger(__name__)


class ExpenseScope:
    HOUSEHOLD = 'household'
    SHARED = 'shared'
    PERSONAL = 'personal'
    MINE = 'mine'


def _household_for(user_id, config: Optional[AppConfig]) -> Household:
    ledger = MembershipLedger(config or AppConfig.from_settings())
    return ledger.require_household_access(user_id)


def scoped_expenses(household, *, user_id, scope: str = ExpenseScope.HOUSEHOLD):
    """
    Expenses of ``household`` visible under ``scope``.

    ``shared`` and ``personal`` only count shopping expenses whose item sits
    on a shared list or on one of the caller's personal lists.
    """
    queryset = Expense.objects.filter(household=household).select_related('payer')

    if scope == ExpenseScope.SHARED:
        items = ShoppingItem.objects.filter(list__owner__isnull=True)
    elif scope == ExpenseScope.PERSONAL:
        items = ShoppingItem.objects.filter(list__owner_id=user_id)
    elif scope == ExpenseScope.MINE:
        return queryset.filter(payer_id=user_id)
    else:
        return queryset

    return queryset.filter(
        source_type=ExpenseSource.SHOPPING_ITEM,
        source_id__in=items.values('id'),
    )


# =============================================================================
# Shopping expenses
# =============================================================================

def shopping_amount(item: ShoppingItem) -> Decimal:
    return (item.amount * item.price).quantize(CENTS, rounding=ROUND_HALF_UP)


def record_shopping_expense(*, item: ShoppingItem, household: Household, payer_id) -> Expense:
    """
    Create the expense for a purchased item, or refresh it if one is left over.

    Must run inside the transaction that marks the item purchased.
    """
    expense, _ = Expense.objects.update_or_create(
        source_type=ExpenseSource.SHOPPING_ITEM,
        source_id=item.id,
        defaults={
            'household': household,
            'payer_id': payer_id,
            'amount': shopping_amount(item),
            'currency': household.currency,
            'description': item.name[:120],
            'category': item.category or None,
            'occurred_at': item.purchased_at or timezone.now(),
        },
    )
    logger.info("Recorded shopping expense %s for item %s", expense.id, item.id)
    return expense


def sync_shopping_expense(item: ShoppingItem) -> None:
    """Carry edits of a purchased item over to its expense."""
    Expense.objects.filter(
        source_type=ExpenseSource.SHOPPING_ITEM,
        source_id=item.id,
    ).update(
        amount=shopping_amount(item),
        description=item.name[:120],
        category=item.category or None,
    )


def remove_shopping_expense(item_id) -> int:
    deleted, _ = Expense.objects.filter(
        source_type=ExpenseSource.SHOPPING_ITEM,
        source_id=item_id,
    ).delete()
    return deleted


# =============================================================================
# Manual expenses
# =============================================================================

@transaction.atomic
def create_manual_expense(
    *,
    user_id,
    amount: Decimal,
    description: str,
    category: Optional[str] = None,
    occurred_at=None,
    payer_id=None,
    config: Optional[AppConfig] = None,
) -> Expense:
    """
    Record a manual expense in the caller's household.

    The payer defaults to the caller and must belong to the household.
    The household currency is always used.

    Raises:
        NoHouseholdError: Caller has no household
        PayerNotMemberError: Payer is not a household member
    """
    ledger = MembershipLedger(config or AppConfig.from_settings())
    household = ledger.require_household_access(user_id)

    payer_id = payer_id or user_id
    if not ledger.is_member(household_id=household.id, user_id=payer_id):
        raise PayerNotMemberError()

    expense = Expense.objects.create(
        household=household,
        payer_id=payer_id,
        amount=Decimal(amount).quantize(CENTS),
        currency=household.currency,
        description=description.strip(),
        category=(category or '').strip() or None,
        occurred_at=occurred_at or timezone.now(),
        source_type=ExpenseSource.MANUAL,
    )
    logger.info("Manual expense %s created in household %s", expense.id, household.id)
    return expense


def get_expense(*, user_id, expense_id, config: Optional[AppConfig] = None) -> Expense:
    household = _household_for(user_id, config)
    expense = scoped_expenses(household, user_id=user_id).filter(id=expense_id).first()
    if expense is None:
        raise ExpenseNotFoundError()
    return expense


@transaction.atomic
def delete_expense(*, user_id, expense_id, config: Optional[AppConfig] = None) -> None:
    """
    Delete a manual expense.

    Raises:
        ExpenseNotFoundError: No such expense in the caller's household
        ShoppingExpenseDeleteError: The expense came from a purchased item
    """
    expense = get_expense(user_id=user_id, expense_id=expense_id, config=config)
    if expense.source_type != ExpenseSource.MANUAL:
        raise ShoppingExpenseDeleteError()
    expense.delete()
    logger.info("Expense %s deleted by %s", expense_id, user_id)


# =============================================================================
# Listings and totals
# =============================================================================

def list_expenses(
    *,
    user_id,
    filters: Optional[ExpenseFilters] = None,
    scope: str = ExpenseScope.HOUSEHOLD,
    config: Optional[AppConfig] = None,
) -> dict:
    """One page of expenses plus the number of rows matching the filters."""
    filters = filters or ExpenseFilters()
    household = _household_for(user_id, config)
    queryset = filters.apply(scoped_expenses(household, user_id=user_id, scope=scope))
    return {
        'total': queryset.count(),
        'items': list(filters.page(queryset)),
    }


def summarize_expenses(
    *,
    user_id,
    filters: Optional[ExpenseFilters] = None,
    scope: str = ExpenseScope.HOUSEHOLD,
    config: Optional[AppConfig] = None,
) -> dict:
    filters = filters or ExpenseFilters()
    household = _household_for(user_id, config)
    queryset = filters.apply(scoped_expenses(household, user_id=user_id, scope=scope))
    return {'total': sum_amount(queryset), 'currency': household.currency}
