from django.contrib import admin
from .models import Category, TaxCategory, HsnCode, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name']


@admin.register(TaxCategory)
class TaxCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'rate', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name']


@admin.register(HsnCode)
class HsnCodeAdmin(admin.ModelAdmin):
    list_display = ['hsn_code', 'description', 'cgst_rate', 'sgst_rate', 'igst_rate', 'cess_rate', 'is_active']
    list_filter = ['is_active', 'tax_category']
    search_fields = ['hsn_code', 'description']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'sku', 'category', 'price', 'mrp', 'stock_quantity', 'hsn_code', 'is_active']
    list_filter = ['is_active', 'category']
    search_fields = ['name', 'sku', 'barcode', 'hsn_code']
    readonly_fields = ['created_at', 'updated_at']
    list_select_related = ['category']
