from django.contrib import admin
from .models import Sale, SaleItem


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    readonly_fields = ['product', 'product_name', 'product_sku', 'quantity', 'unit_price', 'mrp', 'gst_rate', 'tax_amount', 'subtotal']
    fields = readonly_fields
    can_delete = False


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'customer', 'user', 'total', 'payment_method', 'status', 'created_at']
    list_filter = ['status', 'payment_method', 'created_at']
    search_fields = ['order_number', 'customer__name', 'customer__phone']
    readonly_fields = ['order_number', 'subtotal', 'tax', 'round_off', 'total', 'change_due', 'created_at']
    date_hierarchy = 'created_at'
    inlines = [SaleItemInline]
