from django.contrib import admin

from .models import ShoppingItem, ShoppingList


class ShoppingItemInline(admin.TabularInline):
    model = ShoppingItem
    extra = 0
    raw_id_fields = ['purchased_by']
    readonly_fields = ['purchased_at', 'created_at']


@admin.register(ShoppingList)
class ShoppingListAdmin(admin.ModelAdmin):
    list_display = ['name', 'household', 'scope', 'item_count', 'created_at']
    search_fields = ['name', 'household__name']
    list_filter = ['created_at']
    raw_id_fields = ['household', 'created_by', 'owner']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [ShoppingItemInline]

    def item_count(self, obj):
        return obj.items.count()
    item_count.short_description = 'Items'


@admin.register(ShoppingItem)
class ShoppingItemAdmin(admin.ModelAdmin):
    list_display = ['name', 'list', 'amount', 'price', 'purchased', 'purchased_at']
    list_filter = ['purchased', 'category']
    search_fields = ['name', 'list__name']
    raw_id_fields = ['list', 'purchased_by']
