from django.contrib import admin
from .models import Customer, Supplier


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'email', 'tax_id', 'credit_limit', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'phone', 'email', 'tax_id', 'business_name']


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['name', 'contact_person', 'phone', 'gstin', 'supplier_type', 'is_active']
    list_filter = ['is_active', 'supplier_type']
    search_fields = ['name', 'phone', 'email', 'gstin']
