from rest_framework import serializers

from apps.accounts.serializers import PHONE_PATTERN
from .models import Household, HouseholdInvitation, HouseholdRole

CURRENCY_PATTERN = r'^[A-Z]{3}$'


class HouseholdSerializer(serializers.ModelSerializer):
    """Household display."""

    class Meta:
        model = Household
        fields = ['id', 'name', 'currency', 'created_at', 'updated_at']
        read_only_fields = fields


class MyHouseholdSerializer(serializers.Serializer):
    """One entry of the caller's household list."""
    id = serializers.UUIDField()
    name = serializers.CharField()
    currency = serializers.CharField()
    role = serializers.ChoiceField(choices=HouseholdRole.choices)
    is_primary = serializers.BooleanField()


class MemberSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    email = serializers.CharField(allow_blank=True)
    display_name = serializers.CharField()
    role = serializers.ChoiceField(choices=HouseholdRole.choices)


class HouseholdInvitationSerializer(serializers.ModelSerializer):
    """Invitation as shown to household owners. Token hashes are never exposed."""

    household_id = serializers.UUIDField(read_only=True)
    invited_by_id = serializers.UUIDField(read_only=True, allow_null=True)
    accepted_by_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = HouseholdInvitation
        fields = [
            'id',
            'household_id',
            'status',
            'invited_identifier',
            'email',
            'created_at',
            'expires_at',
            'accepted_at',
            'invited_by_id',
            'accepted_by_id',
        ]
        read_only_fields = fields


# =============================================================================
# Input serializers
# =============================================================================

class CreateHouseholdSerializer(serializers.Serializer):
    """Name and currency fall back to the configured defaults."""
    name = serializers.CharField(required=False, min_length=2, max_length=120)
    currency = serializers.RegexField(CURRENCY_PATTERN, required=False)


class UpdateHouseholdSerializer(CreateHouseholdSerializer):
    pass


class RenameHouseholdSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=120)


class SwitchHouseholdSerializer(serializers.Serializer):
    household_id = serializers.UUIDField()


class InviteSerializer(serializers.Serializer):
    """Invite by email or phone; the invitee may not be registered yet."""

    email = serializers.EmailField(required=False)
    phone = serializers.RegexField(PHONE_PATTERN, required=False)

    def validate(self, attrs):
        if not attrs.get('email') and not attrs.get('phone'):
            raise serializers.ValidationError('Email or phone is required')
        return attrs


class AcceptInvitationSerializer(serializers.Serializer):
    token = serializers.CharField(min_length=10)


class SearchUserSerializer(serializers.Serializer):
    identifier = serializers.CharField()
    household_id = serializers.UUIDField(required=False)


class SetMemberRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=HouseholdRole.choices)


class RegisterMemberSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False)
    phone = serializers.RegexField(PHONE_PATTERN, required=False)
    password = serializers.CharField(
        write_only=True,
        min_length=6,
        style={'input_type': 'password'},
    )
    display_name = serializers.CharField(min_length=2, max_length=120)

    def validate(self, attrs):
        if not attrs.get('email') and not attrs.get('phone'):
            raise serializers.ValidationError('Either email or phone must be provided')
        return attrs


# =============================================================================
# Response serializers for API documentation
# =============================================================================

class InvitationCreatedSerializer(serializers.Serializer):
    ok = serializers.BooleanField()
    invitation_id = serializers.UUIDField()
    token = serializers.CharField()
    email = serializers.CharField(allow_null=True)
    phone = serializers.CharField(allow_null=True)
    method = serializers.ChoiceField(choices=['email', 'phone'])


class SearchUserResultSerializer(serializers.Serializer):
    exists = serializers.BooleanField()
    is_already_member = serializers.BooleanField()
    can_invite = serializers.BooleanField()
    display_name = serializers.CharField(allow_null=True)
    method = serializers.ChoiceField(choices=['email', 'phone'])


class HouseholdResultSerializer(serializers.Serializer):
    ok = serializers.BooleanField()
    household = HouseholdSerializer()


class RegisteredMemberSerializer(serializers.Serializer):
    ok = serializers.BooleanField()
    household = HouseholdSerializer()
    user = serializers.DictField()


class RoleChangedSerializer(serializers.Serializer):
    ok = serializers.BooleanField()
    user_id = serializers.UUIDField()
    role = serializers.ChoiceField(choices=HouseholdRole.choices)


class MemberRemovedSerializer(serializers.Serializer):
    ok = serializers.BooleanField()
    removed_user_id = serializers.UUIDField()


class InvitationRevokedSerializer(serializers.Serializer):
    ok = serializers.BooleanField()
    invitation_id = serializers.UUIDField()
    status = serializers.CharField()


class HouseholdDeletedSerializer(serializers.Serializer):
    ok = serializers.BooleanField()
    deleted_household_id = serializers.UUIDField()
