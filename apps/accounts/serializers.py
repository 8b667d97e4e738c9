import re

from rest_framework import serializers

from .models import User

PHONE_PATTERN = r'^(\+[1-9]\d{7,14}|\d{6,15})$'


def validate_strong_password(value):
    """At least 8 characters with an uppercase, a lowercase and a digit. No spaces."""
    if re.search(r'\s', value):
        raise serializers.ValidationError('Password cannot contain spaces.')
    if (
        len(value) < 8
        or not re.search(r'[a-z]', value)
        or not re.search(r'[A-Z]', value)
        or not re.search(r'\d', value)
    ):
        raise serializers.ValidationError(
            'Password must have at least 8 characters, 1 uppercase, 1 lowercase and 1 number.'
        )
    return value


class UserSerializer(serializers.ModelSerializer):
    """Basic user info returned by auth endpoints."""

    email = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name']
        read_only_fields = fields

    def get_email(self, obj):
        return obj.email or ''


class HouseholdSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    currency = serializers.CharField()


class RegisterSerializer(serializers.Serializer):
    """Registration input. Email or phone is required."""

    email = serializers.EmailField(required=False)
    phone = serializers.RegexField(PHONE_PATTERN, required=False)
    password = serializers.CharField(
        write_only=True,
        validators=[validate_strong_password],
        style={'input_type': 'password'},
    )
    display_name = serializers.CharField(min_length=2, max_length=120)

    def validate(self, attrs):
        if not attrs.get('email') and not attrs.get('phone'):
            raise serializers.ValidationError('Either email or phone must be provided')
        return attrs


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False)
    phone = serializers.RegexField(PHONE_PATTERN, required=False)
    password = serializers.CharField(
        write_only=True,
        min_length=6,
        style={'input_type': 'password'},
    )

    def validate(self, attrs):
        if not attrs.get('email') and not attrs.get('phone'):
            raise serializers.ValidationError('Either email or phone must be provided')
        return attrs


class RefreshSerializer(serializers.Serializer):
    refresh_token = serializers.CharField()


class UpdateProfileSerializer(serializers.Serializer):
    """
    Partial profile update.

    ``email`` and ``phone`` accept null to remove the identifier, as long
    as the other one remains.
    """

    display_name = serializers.CharField(required=False, min_length=2, max_length=120)
    email = serializers.EmailField(required=False, allow_null=True)
    phone = serializers.RegexField(PHONE_PATTERN, required=False, allow_null=True)


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(
        write_only=True,
        min_length=6,
        style={'input_type': 'password'},
    )
    new_password = serializers.CharField(
        write_only=True,
        validators=[validate_strong_password],
        style={'input_type': 'password'},
    )


# Response serializers for API documentation

class AuthResponseSerializer(serializers.Serializer):
    access_token = serializers.CharField()
    refresh_token = serializers.CharField()
    user = UserSerializer()
    household = HouseholdSummarySerializer(allow_null=True)


class TokensResponseSerializer(serializers.Serializer):
    access_token = serializers.CharField()
    refresh_token = serializers.CharField()


class ProfileUserSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    email = serializers.CharField(allow_blank=True)
    display_name = serializers.CharField()
    phone = serializers.CharField(allow_null=True)


class ProfileResponseSerializer(serializers.Serializer):
    user = ProfileUserSerializer()
    household = HouseholdSummarySerializer(allow_null=True)


class OkResponseSerializer(serializers.Serializer):
    ok = serializers.BooleanField()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()
    status = serializers.IntegerField()
