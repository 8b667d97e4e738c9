from django.contrib import admin

from .models import Household, HouseholdInvitation, HouseholdMember


class HouseholdMemberInline(admin.TabularInline):
    model = HouseholdMember
    extra = 0
    raw_id_fields = ['user']
    readonly_fields = ['created_at']


@admin.register(Household)
class HouseholdAdmin(admin.ModelAdmin):
    list_display = ['name', 'currency', 'member_count', 'created_at']
    search_fields = ['name']
    list_filter = ['currency', 'created_at']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [HouseholdMemberInline]

    def member_count(self, obj):
        return obj.memberships.count()
    member_count.short_description = 'Members'


@admin.register(HouseholdMember)
class HouseholdMemberAdmin(admin.ModelAdmin):
    list_display = ['user', 'household', 'role', 'created_at']
    list_filter = ['role', 'created_at']
    search_fields = ['user__email', 'user__display_name', 'household__name']
    raw_id_fields = ['user', 'household']


@admin.register(HouseholdInvitation)
class HouseholdInvitationAdmin(admin.ModelAdmin):
    """Invitations are read-only here; token hashes stay hidden."""

    list_display = ['invited_identifier', 'household', 'status', 'created_at', 'expires_at']
    list_filter = ['status', 'created_at']
    search_fields = ['invited_identifier', 'email', 'household__name']
    raw_id_fields = ['household', 'invited_by', 'accepted_by']
    exclude = ['token_hash', 'phone_lookup_hash']
    readonly_fields = ['created_at', 'accepted_at']
