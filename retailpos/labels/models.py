from django.db import models, transaction
from decimal import Decimal
from retailpos.core.models import User


class LabelTemplate(models.Model):
    """Layout for printed product labels (sizes in mm)"""
    BARCODE_TYPE_CHOICES = [
        ('CODE128', 'Code 128'),
        ('EAN13', 'EAN-13'),
        ('CODE39', 'Code 39'),
        ('UPC', 'UPC'),
        ('QR', 'QR Code'),
    ]
    BARCODE_POSITION_CHOICES = [
        ('top', 'Top'),
        ('bottom', 'Bottom'),
        ('left', 'Left'),
        ('right', 'Right'),
    ]
    ALIGNMENT_CHOICES = [
        ('left', 'Left'),
        ('center', 'Center'),
        ('right', 'Right'),
    ]
    BORDER_STYLE_CHOICES = [
        ('none', 'None'),
        ('solid', 'Solid'),
        ('dashed', 'Dashed'),
        ('dotted', 'Dotted'),
    ]

    name = models.CharField(max_length=200, unique=True)
    description = models.TextField(blank=True)
    width = models.DecimalField(max_digits=6, decimal_places=2)
    height = models.DecimalField(max_digits=6, decimal_places=2)
    font_size = models.IntegerField(default=12)
    include_barcode = models.BooleanField(default=True)
    include_price = models.BooleanField(default=True)
    include_description = models.BooleanField(default=False)
    include_mrp = models.BooleanField(default=False)
    include_weight = models.BooleanField(default=False)
    include_logo = models.BooleanField(default=False)
    barcode_type = models.CharField(max_length=20, choices=BARCODE_TYPE_CHOICES, default='CODE128')
    barcode_position = models.CharField(max_length=20, choices=BARCODE_POSITION_CHOICES, default='bottom')
    text_alignment = models.CharField(max_length=10, choices=ALIGNMENT_CHOICES, default='center')
    border_style = models.CharField(max_length=10, choices=BORDER_STYLE_CHOICES, default='solid')
    border_width = models.IntegerField(default=1)
    background_color = models.CharField(max_length=20, default='#ffffff')
    text_color = models.CharField(max_length=20, default='#000000')
    custom_css = models.TextField(blank=True)
    is_default = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.width}x{self.height}mm)"

    def save(self, *args, **kwargs):
        # Only one default template
        with transaction.atomic():
            if self.is_default:
                LabelTemplate.objects.filter(is_default=True).exclude(pk=self.pk).update(is_default=False)
            super().save(*args, **kwargs)

    class Meta:
        db_table = 'label_templates'
        ordering = ['-is_default', 'name']


class Printer(models.Model):
    """Label / receipt printer"""
    CONNECTION_CHOICES = [
        ('usb', 'USB'),
        ('network', 'Network'),
        ('bluetooth', 'Bluetooth'),
    ]

    name = models.CharField(max_length=200)
    printer_type = models.CharField(max_length=50, default='thermal')
    connection = models.CharField(max_length=20, choices=CONNECTION_CHOICES, default='usb')
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    port = models.IntegerField(null=True, blank=True)
    paper_width = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal('80.00'))
    paper_height = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal('40.00'))
    is_default = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        with transaction.atomic():
            if self.is_default:
                Printer.objects.filter(is_default=True).exclude(pk=self.pk).update(is_default=False)
            super().save(*args, **kwargs)

    class Meta:
        db_table = 'printers'
        ordering = ['-is_default', 'name']


class PrintJob(models.Model):
    """Record of a label print run"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('completed', 'Completed'),
        ('failed', 'Failed'),
    ]
    ORIENTATION_CHOICES = [
        ('portrait', 'Portrait'),
        ('landscape', 'Landscape'),
    ]

    template = models.ForeignKey(LabelTemplate, on_delete=models.SET_NULL, null=True, blank=True, related_name='print_jobs')
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='print_jobs')
    printer_name = models.CharField(max_length=200, blank=True)
    product_ids = models.JSONField(default=list)
    copies = models.IntegerField(default=1)
    labels_per_row = models.IntegerField(default=2)
    paper_size = models.CharField(max_length=50, blank=True)
    orientation = models.CharField(max_length=20, choices=ORIENTATION_CHOICES, default='portrait')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    total_labels = models.IntegerField(default=0)
    custom_text = models.TextField(blank=True)
    print_settings = models.JSONField(default=dict, blank=True)
    error_message = models.TextField(blank=True, null=True)
    printed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Print job {self.id} ({self.total_labels} labels)"

    class Meta:
        db_table = 'print_jobs'
        ordering = ['-created_at']
