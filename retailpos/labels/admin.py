from django.contrib import admin
from .models import LabelTemplate, Printer, PrintJob


@admin.register(LabelTemplate)
class LabelTemplateAdmin(admin.ModelAdmin):
    list_display = ['name', 'width', 'height', 'barcode_type', 'is_default', 'is_active']
    list_filter = ['is_active', 'is_default', 'barcode_type']
    search_fields = ['name']


@admin.register(Printer)
class PrinterAdmin(admin.ModelAdmin):
    list_display = ['name', 'printer_type', 'connection', 'ip_address', 'is_default', 'is_active']
    list_filter = ['connection', 'is_active']


@admin.register(PrintJob)
class PrintJobAdmin(admin.ModelAdmin):
    list_display = ['id', 'template', 'user', 'printer_name', 'total_labels', 'status', 'created_at']
    list_filter = ['status']
    readonly_fields = ['created_at', 'printed_at']
