from django.contrib import admin

from .models import Income


@admin.register(Income)
class IncomeAdmin(admin.ModelAdmin):
    list_display = ['description', 'owner', 'amount', 'currency', 'source', 'occurred_at']
    list_filter = ['source', 'currency', 'occurred_at']
    search_fields = ['description', 'category', 'owner__email']
    raw_id_fields = ['owner']
    readonly_fields = ['created_at']
