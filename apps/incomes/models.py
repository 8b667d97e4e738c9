# ==========================================
# apps/incomes/models.py
# ==========================================

from decimal import Decimal
import uuid

from django.core.validators import MinValueValidator
from django.db import models


class IncomeSource(models.TextChoices):
    SALARY = 'salary', 'Salary'
    GIFT = 'gift', 'Gift'
    REFUND = 'refund', 'Refund'
    OTHER = 'other', 'Other'


class Income(models.Model):
    """Money received by one user. Incomes are personal, not household data."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='incomes')

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
    )
    currency = models.CharField(max_length=3)
    description = models.CharField(max_length=120)
    category = models.CharField(max_length=80, null=True, blank=True)
    source = models.CharField(
        max_length=20,
        choices=IncomeSource.choices,
        default=IncomeSource.OTHER,
        db_index=True,
    )
    occurred_at = models.DateTimeField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'incomes'
        ordering = ['-occurred_at']
        indexes = [
            models.Index(fields=['owner', 'occurred_at']),
        ]

    def __str__(self):
        return f"{self.description} ({self.amount} {self.currency})"
