from rest_framework import serializers

from apps.expenses.serializers import DateRangeSerializer
from .models import Income, IncomeSource


class IncomeSerializer(serializers.ModelSerializer):

    class Meta:
        model = Income
        fields = [
            'id',
            'amount',
            'currency',
            'description',
            'category',
            'source',
            'occurred_at',
            'created_at',
        ]
        read_only_fields = fields


class IncomePageSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    items = IncomeSerializer(many=True)


# =============================================================================
# Input serializers
# =============================================================================

class IncomeFilterSerializer(DateRangeSerializer):
    """
    Validate query parameters for income filtering.

    Query Parameters:
        date_from (datetime): Received at or after
        date_to (datetime): Received at or before
        source (str): salary, gift, refund or other
        category (str): Exact category
        offset (int): Rows to skip
        limit (int): Page size, 1 to 200 (default 50)
        order (str): asc or desc by date received (default desc)
    """

    source = serializers.ChoiceField(choices=IncomeSource.choices, required=False)
    category = serializers.CharField(max_length=80, required=False)
    offset = serializers.IntegerField(min_value=0, default=0)
    limit = serializers.IntegerField(min_value=1, max_value=200, default=50)
    order = serializers.ChoiceField(choices=['asc', 'desc'], default='desc')


class CreateIncomeSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    description = serializers.CharField(max_length=120)
    source = serializers.ChoiceField(choices=IncomeSource.choices, default=IncomeSource.OTHER)
    category = serializers.CharField(max_length=80, required=False, allow_null=True, allow_blank=True)
    occurred_at = serializers.DateTimeField(required=False)


class UpdateIncomeSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    description = serializers.CharField(max_length=120, required=False)
    source = serializers.ChoiceField(choices=IncomeSource.choices, required=False)
    category = serializers.CharField(max_length=80, required=False, allow_null=True, allow_blank=True)
    occurred_at = serializers.DateTimeField(required=False)
