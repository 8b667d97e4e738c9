# ==========================================
# apps/expenses/models.py
# ==========================================

from decimal import Decimal
import uuid

from django.core.validators import MinValueValidator
from django.db import models


class ExpenseSource(models.TextChoices):
    SHOPPING_ITEM = 'shopping_item', 'Shopping item'
    MANUAL = 'manual', 'Manual'


class Expense(models.Model):
    """
    Money spent by a household member.

    Shopping expenses are derived from purchased list items and point back
    at the item through ``source_id``; there is at most one per item.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    household = models.ForeignKey(
        'households.Household',
        on_delete=models.CASCADE,
        related_name='expenses',
    )
    payer = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='expenses_paid',
    )

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
    )
    currency = models.CharField(max_length=3)
    description = models.CharField(max_length=120)
    category = models.CharField(max_length=80, null=True, blank=True)
    occurred_at = models.DateTimeField()

    source_type = models.CharField(
        max_length=20,
        choices=ExpenseSource.choices,
        default=ExpenseSource.MANUAL,
        db_index=True,
    )
    source_id = models.UUIDField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'expenses'
        ordering = ['-occurred_at']
        constraints = [
            models.UniqueConstraint(
                fields=['source_type', 'source_id'],
                name='uq_expenses_source',
            ),
        ]
        indexes = [
            models.Index(fields=['household', 'occurred_at']),
            models.Index(fields=['household', 'payer']),
        ]

    def __str__(self):
        return f"{self.description} ({self.amount} {self.currency})"
