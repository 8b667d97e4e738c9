# ==========================================
# apps/lists/models.py
# ==========================================

from decimal import Decimal
import uuid

from django.core.validators import MinValueValidator
from django.db import models


class ListScope(models.TextChoices):
    SHARED = 'shared', 'Shared'
    PERSONAL = 'personal', 'Personal'


class ShoppingList(models.Model):
    """
    A household shopping list.

    Lists without an owner are shared with the whole household; a list
    with an owner is personal and visible to that user only.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    household = models.ForeignKey(
        'households.Household',
        on_delete=models.CASCADE,
        related_name='shopping_lists',
    )
    name = models.CharField(max_length=140)
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='+',
    )
    owner = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='personal_lists',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'shopping_lists'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['household', 'owner']),
        ]

    def __str__(self):
        return self.name

    @property
    def scope(self):
        return ListScope.SHARED if self.owner_id is None else ListScope.PERSONAL

    @property
    def is_shared(self):
        return self.owner_id is None


class ShoppingItem(models.Model):
    """An item on a list. Purchasing it records an expense."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    list = models.ForeignKey(ShoppingList, on_delete=models.CASCADE, related_name='items')
    name = models.CharField(max_length=180)

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('1.00'),
        validators=[MinValueValidator(Decimal('0'))],
    )
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0'))],
    )
    category = models.CharField(max_length=80, null=True, blank=True)

    # Purchase state
    purchased = models.BooleanField(default=False, db_index=True)
    purchased_at = models.DateTimeField(null=True, blank=True)
    purchased_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'shopping_items'
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['list', 'purchased', 'created_at']),
            models.Index(fields=['list', 'purchased_at']),
        ]

    def __str__(self):
        return self.name

    @property
    def line_total(self) -> Decimal:
        return self.amount * self.price
