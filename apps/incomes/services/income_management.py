"""
Personal income tracking.

Incomes belong to a single user. Their currency is taken from the
user's household when they have one.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.db import transaction
from django.db.models import DecimalField, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.households.services import MembershipLedger
from apps.incomes.models import Income, IncomeSource
from config.runtime import AppConfig

from .exceptions import IncomeNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
MAX_LIMIT = 200

CENTS = Decimal('0.01')

EDITABLE_FIELDS = ('amount', 'description', 'category', 'source', 'occurred_at')


@dataclass(frozen=True)
class IncomeFilters:
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    source: Optional[str] = None
    category: Optional[str] = None
    offset: int = 0
    limit: int = DEFAULT_LIMIT
    order: str = 'desc'

    def apply(self, queryset):
        if self.date_from is not None:
            queryset = queryset.filter(occurred_at__gte=self.date_from)
        if self.date_to is not None:
            queryset = queryset.filter(occurred_at__lte=self.date_to)
        if self.source:
            queryset = queryset.filter(source=self.source)
        if self.category:
            queryset = queryset.filter(category=self.category)
        return queryset

    def page(self, queryset):
        prefix = '' if self.order == 'asc' else '-'
        queryset = queryset.order_by(f'{prefix}occurred_at', f'{prefix}created_at')
        limit = max(1, min(self.limit, MAX_LIMIT))
        offset = max(0, self.offset)
        return queryset[offset:offset + limit]


def _currency_for(user_id, config: AppConfig) -> str:
    household = MembershipLedger(config).resolve_household_for_user(user_id)
    return household.currency if household else config.default_household_currency


def _total(queryset) -> Decimal:
    total = queryset.aggregate(
        total=Coalesce(
            Sum('amount'),
            Value(Decimal('0')),
            output_field=DecimalField(max_digits=14, decimal_places=2),
        )
    )['total']
    return Decimal(total).quantize(CENTS)


@transaction.atomic
def create_income(
    *,
    user_id,
    amount: Decimal,
    description: str,
    source: str = IncomeSource.OTHER,
    category: Optional[str] = None,
    occurred_at=None,
    config: Optional[AppConfig] = None,
) -> Income:
    config = config or AppConfig.from_settings()
    income = Income.objects.create(
        owner_id=user_id,
        amount=Decimal(amount).quantize(CENTS),
        currency=_currency_for(user_id, config),
        description=description.strip(),
        category=(category or '').strip() or None,
        source=source,
        occurred_at=occurred_at or timezone.now(),
    )
    logger.info("Income %s recorded for %s", income.id, user_id)
    return income


def get_income(*, user_id, income_id) -> Income:
    income = Income.objects.filter(owner_id=user_id, id=income_id).first()
    if income is None:
        raise IncomeNotFoundError()
    return income


@transaction.atomic
def update_income(*, user_id, income_id, **changes) -> Income:
    """
    Apply ``changes`` to one of the caller's incomes.

    Only amount, description, category, source and occurred_at can change;
    other keys are ignored.
    """
    income = get_income(user_id=user_id, income_id=income_id)

    update_fields = []
    for name in EDITABLE_FIELDS:
        if name not in changes:
            continue
        value = changes[name]
        if name == 'amount':
            value = Decimal(value).quantize(CENTS)
        elif name == 'description':
            value = value.strip()
        elif name == 'category':
            value = (value or '').strip() or None
        setattr(income, name, value)
        update_fields.append(name)

    if update_fields:
        income.save(update_fields=update_fields)
    return income


def delete_income(*, user_id, income_id) -> None:
    income = get_income(user_id=user_id, income_id=income_id)
    income.delete()
    logger.info("Income %s deleted by %s", income_id, user_id)


def list_incomes(*, user_id, filters: Optional[IncomeFilters] = None) -> dict:
    filters = filters or IncomeFilters()
    queryset = filters.apply(Income.objects.filter(owner_id=user_id))
    return {
        'total': queryset.count(),
        'items': list(filters.page(queryset)),
    }


def sum_incomes(*, user_id, date_from=None, date_to=None) -> Decimal:
    """Total income of ``user_id`` between the optional bounds."""
    filters = IncomeFilters(date_from=date_from, date_to=date_to)
    return _total(filters.apply(Income.objects.filter(owner_id=user_id)))


def summarize_incomes(
    *,
    user_id,
    filters: Optional[IncomeFilters] = None,
    config: Optional[AppConfig] = None,
) -> dict:
    filters = filters or IncomeFilters()
    total = _total(filters.apply(Income.objects.filter(owner_id=user_id)))
    return {'total': total, 'currency': _currency_for(user_id, config or AppConfig.from_settings())}
