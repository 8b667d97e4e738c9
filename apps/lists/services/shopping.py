"""
Shopping list service.

Handles:
- Shared and personal lists inside the caller's household
- Items, with purchase marking that records or removes the derived expense
- Keyset pages of pending items and of purchase history
- Push notifications for activity on shared lists
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from django.db import transaction
from django.db.models import DecimalField, ExpressionWrapper, F, Q, Sum
from django.utils import timezone

from apps.accounts.models import User
from apps.expenses.services import (
    record_shopping_expense,
    remove_shopping_expense,
    sync_shopping_expense,
)
from apps.households.models import Household
from apps.households.services import MembershipLedger
from apps.lists.models import ListScope, ShoppingItem, ShoppingList
from apps.notifications.models import ListAction
from apps.notifications.services import HouseholdListEvent, NotificationDispatcher
from config.runtime import AppConfig

from .cursors import CREATED_AT, PURCHASED_AT, decode_cursor, encode_cursor
from .exceptions import ItemNotFoundError, ListNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 30
MAX_PAGE_SIZE = 100

CENTS = Decimal('0.01')

ITEM_FIELDS = ('name', 'amount', 'price', 'category')


def clamp_limit(limit: Optional[int]) -> int:
    if not limit:
        return DEFAULT_PAGE_SIZE
    return max(1, min(int(limit), MAX_PAGE_SIZE))


def _household_for(user_id, config: Optional[AppConfig]) -> Household:
    ledger = MembershipLedger(config or AppConfig.from_settings())
    return ledger.require_household_access(user_id)


def _visible_lists(household, user_id):
    """Shared lists of the household plus the caller's personal ones."""
    return ShoppingList.objects.filter(household=household).filter(
        Q(owner__isnull=True) | Q(owner_id=user_id)
    )


def _get_list(user_id, list_id, config) -> ShoppingList:
    household = _household_for(user_id, config)
    shopping_list = (
        _visible_lists(household, user_id)
        .select_related('household')
        .filter(id=list_id)
        .first()
    )
    if shopping_list is None:
        raise ListNotFoundError()
    return shopping_list


def _get_item(shopping_list, item_id, *, for_update: bool = False) -> ShoppingItem:
    queryset = ShoppingItem.objects.filter(list=shopping_list, id=item_id)
    if for_update:
        queryset = queryset.select_for_update()
    item = queryset.first()
    if item is None:
        raise ItemNotFoundError()
    return item


def _notify(dispatcher, shopping_list, *, action, user_id, item_name):
    """Queue a push for household members; personal lists stay silent."""
    if not shopping_list.is_shared:
        return
    actor = User.objects.filter(id=user_id).first()
    event = HouseholdListEvent(
        action=action,
        household_id=shopping_list.household_id,
        list_id=shopping_list.id,
        user_id=user_id,
        user_name=actor.get_display_name() if actor else '',
        item_name=item_name,
    )
    (dispatcher or NotificationDispatcher()).notify_household_list_event(event)


# =============================================================================
# Lists
# =============================================================================

def list_lists(*, user_id, config: Optional[AppConfig] = None):
    """Lists the caller can see, newest first."""
    household = _household_for(user_id, config)
    return list(_visible_lists(household, user_id).order_by('-created_at'))


def create_list(
    *,
    user_id,
    name: str,
    scope: str = ListScope.SHARED,
    config: Optional[AppConfig] = None,
) -> ShoppingList:
    household = _household_for(user_id, config)
    shopping_list = ShoppingList.objects.create(
        household=household,
        name=name.strip(),
        created_by_id=user_id,
        owner_id=user_id if scope == ListScope.PERSONAL else None,
    )
    logger.info("%s list %s created in household %s", scope, shopping_list.id, household.id)
    return shopping_list


def get_list(*, user_id, list_id, config: Optional[AppConfig] = None) -> ShoppingList:
    """The list itself; items are fetched through the page functions."""
    return _get_list(user_id, list_id, config)


def update_list(*, user_id, list_id, name: Optional[str] = None, config: Optional[AppConfig] = None) -> ShoppingList:
    shopping_list = _get_list(user_id, list_id, config)
    if name is not None:
        shopping_list.name = name.strip()
        shopping_list.save(update_fields=['name', 'updated_at'])
    return shopping_list


def delete_list(*, user_id, list_id, config: Optional[AppConfig] = None) -> None:
    """Delete a list and its items. Expenses already recorded are kept."""
    shopping_list = _get_list(user_id, list_id, config)
    shopping_list.delete()
    logger.info("List %s deleted by %s", list_id, user_id)


# =============================================================================
# Items
# =============================================================================

@transaction.atomic
def add_item(
    *,
    user_id,
    list_id,
    name: str,
    amount: Decimal = Decimal('1'),
    price: Decimal = Decimal('0'),
    category: Optional[str] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
    config: Optional[AppConfig] = None,
) -> ShoppingItem:
    shopping_list = _get_list(user_id, list_id, config)
    item = ShoppingItem.objects.create(
        list=shopping_list,
        name=name.strip(),
        amount=amount,
        price=price,
        category=(category or '').strip() or None,
    )
    _notify(dispatcher, shopping_list, action=ListAction.ITEM_ADDED, user_id=user_id, item_name=item.name)
    return item


@transaction.atomic
def update_item(
    *,
    user_id,
    list_id,
    item_id,
    config: Optional[AppConfig] = None,
    **changes,
) -> ShoppingItem:
    """
    Edit name, amount, price or category of an item.

    When the item is already purchased its expense is updated to match.
    """
    shopping_list = _get_list(user_id, list_id, config)
    item = _get_item(shopping_list, item_id, for_update=True)

    update_fields = ['updated_at']
    for name in ITEM_FIELDS:
        if name not in changes:
            continue
        value = changes[name]
        if name == 'name':
            value = value.strip()
        elif name == 'category':
            value = (value or '').strip() or None
        setattr(item, name, value)
        update_fields.append(name)

    item.save(update_fields=update_fields)
    if item.purchased:
        sync_shopping_expense(item)
    return item


@transaction.atomic
def delete_item(
    *,
    user_id,
    list_id,
    item_id,
    dispatcher: Optional[NotificationDispatcher] = None,
    config: Optional[AppConfig] = None,
) -> None:
    """Delete an item together with the expense its purchase produced."""
    shopping_list = _get_list(user_id, list_id, config)
    item = _get_item(shopping_list, item_id, for_update=True)
    name = item.name

    if item.purchased:
        remove_shopping_expense(item.id)
    item.delete()

    _notify(dispatcher, shopping_list, action=ListAction.ITEM_DELETED, user_id=user_id, item_name=name)


@transaction.atomic
def set_purchased(
    *,
    user_id,
    list_id,
    item_id,
    purchased: bool,
    dispatcher: Optional[NotificationDispatcher] = None,
    config: Optional[AppConfig] = None,
) -> ShoppingItem:
    """
    Mark an item purchased or not.

    Marking purchased stamps the time and the buyer and records a shopping
    expense of ``amount * price`` in the household currency. Unmarking
    clears the stamp and deletes that expense. Repeating the current state
    changes nothing.
    """
    shopping_list = _get_list(user_id, list_id, config)
    item = _get_item(shopping_list, item_id, for_update=True)

    if item.purchased == purchased:
        return item

    if purchased:
        item.purchased = True
        item.purchased_at = timezone.now()
        item.purchased_by_id = user_id
        item.save(update_fields=['purchased', 'purchased_at', 'purchased_by', 'updated_at'])
        record_shopping_expense(item=item, household=shopping_list.household, payer_id=user_id)
        _notify(
            dispatcher, shopping_list,
            action=ListAction.ITEM_COMPLETED, user_id=user_id, item_name=item.name,
        )
    else:
        item.purchased = False
        item.purchased_at = None
        item.purchased_by = None
        item.save(update_fields=['purchased', 'purchased_at', 'purchased_by', 'updated_at'])
        remove_shopping_expense(item.id)

    return item


# =============================================================================
# Pages
# =============================================================================

def pending_items_page(
    *,
    user_id,
    list_id,
    limit: Optional[int] = None,
    cursor: Optional[str] = None,
    config: Optional[AppConfig] = None,
) -> dict:
    """
    Unpurchased items, oldest first.

    ``total`` and ``total_amount`` cover every pending item of the list,
    not just the page.
    """
    shopping_list = _get_list(user_id, list_id, config)
    limit = clamp_limit(limit)
    pending = ShoppingItem.objects.filter(list=shopping_list, purchased=False)

    totals = pending.aggregate(
        total_amount=Sum(
            ExpressionWrapper(
                F('amount') * F('price'),
                output_field=DecimalField(max_digits=26, decimal_places=4),
            )
        )
    )
    total_amount = (totals['total_amount'] or Decimal('0')).quantize(CENTS, rounding=ROUND_HALF_UP)

    queryset = pending.select_related('purchased_by')
    position = decode_cursor(cursor, CREATED_AT)
    if position is not None:
        queryset = queryset.filter(
            Q(created_at__gt=position.at) | Q(created_at=position.at, id__gt=position.id)
        )
    rows = list(queryset.order_by('created_at', 'id')[:limit + 1])

    next_cursor = None
    if len(rows) > limit:
        rows = rows[:limit]
        last = rows[-1]
        next_cursor = encode_cursor(CREATED_AT, last.created_at, last.id)

    return {
        'items': rows,
        'next_cursor': next_cursor,
        'total': pending.count(),
        'total_amount': total_amount,
    }


def history_page(
    *,
    user_id,
    list_id,
    date_from=None,
    date_to=None,
    limit: Optional[int] = None,
    cursor: Optional[str] = None,
    config: Optional[AppConfig] = None,
) -> dict:
    """Purchased items, most recent purchase first."""
    shopping_list = _get_list(user_id, list_id, config)
    limit = clamp_limit(limit)

    purchased = ShoppingItem.objects.filter(
        list=shopping_list,
        purchased=True,
        purchased_at__isnull=False,
    )
    if date_from is not None:
        purchased = purchased.filter(purchased_at__gte=date_from)
    if date_to is not None:
        purchased = purchased.filter(purchased_at__lte=date_to)

    queryset = purchased.select_related('purchased_by')
    position = decode_cursor(cursor, PURCHASED_AT)
    if position is not None:
        queryset = queryset.filter(
            Q(purchased_at__lt=position.at) | Q(purchased_at=position.at, id__lt=position.id)
        )
    rows = list(queryset.order_by('-purchased_at', '-id')[:limit + 1])

    next_cursor = None
    if len(rows) > limit:
        rows = rows[:limit]
        last = rows[-1]
        next_cursor = encode_cursor(PURCHASED_AT, last.purchased_at, last.id)

    return {
        'items': rows,
        'next_cursor': next_cursor,
        'total': purchased.count(),
    }
