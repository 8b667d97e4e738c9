"""Query filters shared by expense listings, summaries and reports."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.db.models import DecimalField, Sum, Value
from django.db.models.functions import Coalesce

DEFAULT_LIMIT = 50
MAX_LIMIT = 200

CENTS = Decimal('0.01')


@dataclass(frozen=True)
class ExpenseFilters:
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    payer_id: Optional[object] = None
    category: Optional[str] = None
    source_type: Optional[str] = None
    offset: int = 0
    limit: int = DEFAULT_LIMIT
    order: str = 'desc'

    def apply(self, queryset):
        """Narrow ``queryset`` by every filter that is set. Paging is not applied."""
        if self.date_from is not None:
            queryset = queryset.filter(occurred_at__gte=self.date_from)
        if self.date_to is not None:
            queryset = queryset.filter(occurred_at__lte=self.date_to)
        if self.payer_id is not None:
            queryset = queryset.filter(payer_id=self.payer_id)
        if self.category:
            queryset = queryset.filter(category=self.category)
        if self.source_type:
            queryset = queryset.filter(source_type=self.source_type)
        return queryset

    def page(self, queryset):
        """Order ``queryset`` and cut the requested window out of it."""
        prefix = '' if self.order == 'asc' else '-'
        queryset = queryset.order_by(f'{prefix}occurred_at', f'{prefix}created_at')
        limit = max(1, min(self.limit, MAX_LIMIT))
        offset = max(0, self.offset)
        return queryset[offset:offset + limit]


def sum_amount(queryset, field: str = 'amount') -> Decimal:
    """Sum of ``field`` over ``queryset`` rounded to cents; zero when empty."""
    total = queryset.aggregate(
        total=Coalesce(
            Sum(field),
            Value(Decimal('0')),
            output_field=DecimalField(max_digits=14, decimal_places=2),
        )
    )['total']
    return Decimal(total).quantize(CENTS)
