from decimal import Decimal

from rest_framework import serializers

from apps.accounts.models import User
from .models import ListScope, ShoppingItem, ShoppingList


class ItemBuyerSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'display_name']
        read_only_fields = fields


class ShoppingListSerializer(serializers.ModelSerializer):
    """List display. ``owner_id`` is null for shared lists."""

    household_id = serializers.UUIDField(read_only=True)
    owner_id = serializers.UUIDField(read_only=True, allow_null=True)
    created_by_id = serializers.UUIDField(read_only=True)
    scope = serializers.CharField(read_only=True)

    class Meta:
        model = ShoppingList
        fields = [
            'id',
            'household_id',
            'name',
            'scope',
            'owner_id',
            'created_by_id',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ShoppingItemSerializer(serializers.ModelSerializer):
    list_id = serializers.UUIDField(read_only=True)
    purchased_by = ItemBuyerSerializer(read_only=True, allow_null=True)

    class Meta:
        model = ShoppingItem
        fields = [
            'id',
            'list_id',
            'name',
            'amount',
            'price',
            'category',
            'purchased',
            'purchased_at',
            'purchased_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PendingItemsPageSerializer(serializers.Serializer):
    items = ShoppingItemSerializer(many=True)
    next_cursor = serializers.CharField(allow_null=True)
    total = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class HistoryPageSerializer(serializers.Serializer):
    items = ShoppingItemSerializer(many=True)
    next_cursor = serializers.CharField(allow_null=True)
    total = serializers.IntegerField()


# =============================================================================
# Input serializers
# =============================================================================

class CreateListSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=140)
    scope = serializers.ChoiceField(choices=ListScope.choices, default=ListScope.SHARED)


class UpdateListSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=140)


class AddItemSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=180)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=Decimal('1'))
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=Decimal('0'))
    category = serializers.CharField(max_length=80, required=False, allow_null=True, allow_blank=True)


class UpdateItemSerializer(serializers.Serializer):
    """Partial item edit; only the fields sent are changed."""
    name = serializers.CharField(max_length=180, required=False)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    category = serializers.CharField(max_length=80, required=False, allow_null=True, allow_blank=True)


class SetPurchasedSerializer(serializers.Serializer):
    purchased = serializers.BooleanField()


class PendingItemsQuerySerializer(serializers.Serializer):
    """
    Validate query parameters for the pending items page.

    Query Parameters:
        limit (int): Page size, 1 to 100
        cursor (str): ``next_cursor`` from the previous page
    """

    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)
    cursor = serializers.CharField(required=False, allow_blank=True)


class HistoryQuerySerializer(serializers.Serializer):
    """
    Validate query parameters for purchase history.

    Query Parameters:
        date_from (datetime): Purchased at or after
        date_to (datetime): Purchased at or before
        limit (int): Page size, 1 to 50
        cursor (str): ``next_cursor`` from the previous page
    """

    date_from = serializers.DateTimeField(required=False)
    date_to = serializers.DateTimeField(required=False)
    limit = serializers.IntegerField(min_value=1, max_value=50, required=False)
    cursor = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({
                'date_to': 'End date must be after start date'
            })
        return attrs
