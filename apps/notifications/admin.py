from django.contrib import admin

from .models import PushToken


@admin.register(PushToken)
class PushTokenAdmin(admin.ModelAdmin):
    list_display = ['user', 'token_type', 'device_type', 'device_name', 'created_at']
    list_filter = ['token_type', 'device_type', 'created_at']
    search_fields = ['user__email', 'user__display_name', 'device_name']
    raw_id_fields = ['user']
    readonly_fields = ['created_at']
