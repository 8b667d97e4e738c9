# ==========================================
# apps/accounts/admin.py
# ==========================================

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils import timezone
from django.utils.html import format_html

from .models import AuthSession, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin for accounts identified by email and/or phone.

    Phone numbers are only shown as their lookup hash; the encrypted value
    is never editable here.
    """

    list_display = [
        'email',
        'display_name',
        'has_phone',
        'is_active_badge',
        'primary_household',
        'created_at',
        'last_login',
    ]

    list_filter = [
        'is_active',
        'is_staff',
        'is_superuser',
        'created_at',
    ]

    search_fields = [
        'email',
        'display_name',
    ]

    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'display_name', 'password', 'primary_household')
        }),
        ('Phone', {
            'fields': ('phone_lookup_hash',),
            'classes': ('collapse',),
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'display_name', 'password1', 'password2'),
        }),
    )

    readonly_fields = ['phone_lookup_hash', 'created_at', 'updated_at', 'last_login']
    filter_horizontal = ['groups', 'user_permissions']
    raw_id_fields = ['primary_household']

    def has_phone(self, obj):
        return bool(obj.phone_lookup_hash)
    has_phone.boolean = True
    has_phone.short_description = 'Phone'

    def is_active_badge(self, obj):
        """Display active status as colored badge."""
        if obj.is_active:
            return format_html(
                '<span style="background: #6B8E5E; color: white; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">Active</span>'
            )
        return format_html(
            '<span style="background: #B85C5C; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">Inactive</span>'
        )
    is_active_badge.short_description = 'Status'
    is_active_badge.admin_order_field = 'is_active'

    actions = ['activate_users', 'deactivate_users']

    @admin.action(description='Activate selected users')
    def activate_users(self, request, queryset):
        count = queryset.update(is_active=True)
        self.message_user(request, f'Activated {count} user(s).')

    @admin.action(description='Deactivate selected users')
    def deactivate_users(self, request, queryset):
        """Deactivate selected users, never superusers."""
        safe_queryset = queryset.filter(is_superuser=False)
        count = safe_queryset.update(is_active=False)
        skipped = queryset.count() - count
        msg = f'Deactivated {count} user(s).'
        if skipped:
            msg += f' Skipped {skipped} superuser(s).'
        self.message_user(request, msg)


@admin.register(AuthSession)
class AuthSessionAdmin(admin.ModelAdmin):
    """Refresh-token sessions. Tokens are stored hashed and never shown."""

    list_display = ['id', 'user', 'created_at', 'rotated_at', 'expires_at', 'is_revoked']
    list_filter = ['created_at', 'revoked_at']
    search_fields = ['user__email', 'user__display_name']
    raw_id_fields = ['user']
    readonly_fields = [
        'user', 'expires_at', 'rotated_at', 'revoked_at', 'created_at', 'updated_at',
    ]
    exclude = ['refresh_token_hash', 'previous_refresh_token_hash']
    ordering = ['-created_at']

    def is_revoked(self, obj):
        return obj.is_revoked
    is_revoked.boolean = True

    actions = ['revoke_sessions']

    @admin.action(description='Revoke selected sessions')
    def revoke_sessions(self, request, queryset):
        now = timezone.now()
        count = queryset.filter(revoked_at__isnull=True).update(revoked_at=now, updated_at=now)
        self.message_user(request, f'Revoked {count} session(s).')

    def has_add_permission(self, request):
        return False
