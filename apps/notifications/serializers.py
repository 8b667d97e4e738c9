from rest_framework import serializers

from .models import DeviceType, ListAction, PushToken, TokenType


class PushTokenSerializer(serializers.ModelSerializer):

    class Meta:
        model = PushToken
        fields = ['id', 'token_type', 'device_type', 'device_name', 'created_at']
        read_only_fields = fields


class RegisterPushTokenSerializer(serializers.Serializer):
    """The token type is inferred from the token when omitted."""
    token = serializers.CharField(max_length=255)
    device_type = serializers.ChoiceField(choices=DeviceType.choices)
    token_type = serializers.ChoiceField(choices=TokenType.choices, required=False)
    device_name = serializers.CharField(max_length=255, required=False, allow_blank=True)


class SendNotificationDataSerializer(serializers.Serializer):
    action_type = serializers.ChoiceField(choices=ListAction.choices, required=False)
    list_id = serializers.CharField(required=False, allow_blank=True)
    user_name = serializers.CharField(required=False, allow_blank=True)
    item_name = serializers.CharField(required=False, allow_blank=True)


class SendNotificationSerializer(serializers.Serializer):
    household_id = serializers.UUIDField()
    title = serializers.CharField(max_length=80)
    body = serializers.CharField(max_length=200)
    data = SendNotificationDataSerializer(required=False)
    exclude_user_id = serializers.UUIDField(required=False)


# =============================================================================
# Response serializers for API documentation
# =============================================================================

class RegisteredTokenSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    token_id = serializers.UUIDField()


class DeliveryResultSerializer(serializers.Serializer):
    exclude_user_id = serializers.CharField()
    member_count = serializers.IntegerField()
    tokens_found_count = serializers.IntegerField()
    expo_tokens_count = serializers.IntegerField()
    fcm_tokens_count = serializers.IntegerField()
    firebase_configured = serializers.BooleanField()
    invalid_tokens_removed = serializers.IntegerField()
    expo = serializers.DictField(allow_null=True)
    fcm = serializers.DictField(allow_null=True)
    short_circuit_reason = serializers.CharField()


class SendNotificationResultSerializer(serializers.Serializer):
    ok = serializers.BooleanField()
    result = DeliveryResultSerializer()
