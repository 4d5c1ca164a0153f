from django.contrib import admin
from .models import Purchase, PurchaseItem


class PurchaseItemInline(admin.TabularInline):
    model = PurchaseItem
    extra = 0


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'supplier', 'status', 'total', 'order_date', 'received_date']
    list_filter = ['status', 'order_date']
    search_fields = ['order_number', 'supplier__name']
    inlines = [PurchaseItemInline]
