from rest_framework import serializers

from apps.accounts.serializers import UserSerializer
from .models import Expense, ExpenseSource


class ExpenseSerializer(serializers.ModelSerializer):
    """Expense display with the paying member nested."""

    payer = UserSerializer(read_only=True)

    class Meta:
        model = Expense
        fields = [
            'id',
            'amount',
            'currency',
            'description',
            'category',
            'occurred_at',
            'source_type',
            'source_id',
            'payer',
            'created_at',
        ]
        read_only_fields = fields


class ExpensePageSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    items = ExpenseSerializer(many=True)


class TotalSerializer(serializers.Serializer):
    total = serializers.DecimalField(max_digits=14, decimal_places=2)
    currency = serializers.CharField()


class PayerTotalSerializer(serializers.Serializer):
    payer_id = serializers.UUIDField()
    display_name = serializers.CharField()
    total = serializers.DecimalField(max_digits=14, decimal_places=2)


class CategoryTotalSerializer(serializers.Serializer):
    category = serializers.CharField()
    total = serializers.DecimalField(max_digits=14, decimal_places=2)


class PayerReportSerializer(serializers.Serializer):
    household_id = serializers.UUIDField()
    date_from = serializers.DateTimeField(allow_null=True)
    date_to = serializers.DateTimeField(allow_null=True)
    items = PayerTotalSerializer(many=True)


class CategoryReportSerializer(serializers.Serializer):
    household_id = serializers.UUIDField()
    date_from = serializers.DateTimeField(allow_null=True)
    date_to = serializers.DateTimeField(allow_null=True)
    items = CategoryTotalSerializer(many=True)


class BalanceSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    household_id = serializers.UUIDField()
    currency = serializers.CharField()
    date_from = serializers.DateTimeField(allow_null=True)
    date_to = serializers.DateTimeField(allow_null=True)
    income = serializers.DecimalField(max_digits=14, decimal_places=2)
    expense = serializers.DecimalField(max_digits=14, decimal_places=2)
    balance = serializers.DecimalField(max_digits=15, decimal_places=2)


# =============================================================================
# Input serializers
# =============================================================================

class DateRangeSerializer(serializers.Serializer):
    """
    Validate an optional date range.

    Query Parameters:
        date_from (datetime): Occurred at or after
        date_to (datetime): Occurred at or before
    """

    date_from = serializers.DateTimeField(required=False)
    date_to = serializers.DateTimeField(required=False)

    def validate(self, attrs):
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({
                'date_to': 'End date must be after start date'
            })
        return attrs


class ExpenseFilterSerializer(DateRangeSerializer):
    """
    Validate query parameters for expense filtering.

    Query Parameters:
        payer_id (UUID): Paid by this member
        category (str): Exact category
        source_type (str): shopping_item or manual
        offset (int): Rows to skip
        limit (int): Page size, 1 to 200 (default 50)
        order (str): asc or desc by occurrence (default desc)
    """

    payer_id = serializers.UUIDField(required=False)
    category = serializers.CharField(max_length=80, required=False)
    source_type = serializers.ChoiceField(choices=ExpenseSource.choices, required=False)
    offset = serializers.IntegerField(min_value=0, default=0)
    limit = serializers.IntegerField(min_value=1, max_value=200, default=50)
    order = serializers.ChoiceField(choices=['asc', 'desc'], default='desc')


class CreateExpenseSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    description = serializers.CharField(max_length=120)
    category = serializers.CharField(max_length=80, required=False, allow_null=True, allow_blank=True)
    occurred_at = serializers.DateTimeField(required=False)
    payer_id = serializers.UUIDField(required=False)
