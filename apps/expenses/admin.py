from django.contrib import admin

from .models import Expense


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['description', 'household', 'payer', 'amount', 'currency', 'source_type', 'occurred_at']
    list_filter = ['source_type', 'currency', 'occurred_at']
    search_fields = ['description', 'category', 'payer__email', 'household__name']
    raw_id_fields = ['household', 'payer']
    readonly_fields = ['source_type', 'source_id', 'created_at']
    date_hierarchy = 'occurred_at'
