from django.db import models
from decimal import Decimal

from retailpos.core.validators import validate_hsn_code, validate_rate


class Category(models.Model):
    """Product categories"""
    name = models.CharField(max_length=200, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        ordering = ['name']


class TaxCategory(models.Model):
    """Named GST slab, e.g. 'GST 18%'"""
    name = models.CharField(max_length=100, unique=True)
    rate = models.DecimalField(max_digits=5, decimal_places=2, validators=[validate_rate])
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.rate}%)"

    class Meta:
        db_table = 'tax_categories'
        verbose_name_plural = 'tax categories'
        ordering = ['rate', 'name']


class HsnCode(models.Model):
    """HSN master with the GST rates that apply to the code"""
    hsn_code = models.CharField(max_length=8, unique=True, validators=[validate_hsn_code])
    description = models.TextField(blank=True)
    tax_category = models.ForeignKey(TaxCategory, on_delete=models.SET_NULL, null=True, blank=True, related_name='hsn_codes')
    cgst_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'), validators=[validate_rate])
    sgst_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'), validators=[validate_rate])
    igst_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'), validators=[validate_rate])
    cess_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'), validators=[validate_rate])
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.hsn_code

    @property
    def total_gst_rate(self):
        split = (self.cgst_rate or 0) + (self.sgst_rate or 0)
        return split if split else (self.igst_rate or Decimal('0.00'))

    class Meta:
        db_table = 'hsn_codes'
        verbose_name = 'HSN code'
        ordering = ['hsn_code']


class Product(models.Model):
    """Product master with stock and GST details"""
    WEIGHT_UNIT_CHOICES = [
        ('g', 'Gram'),
        ('kg', 'Kilogram'),
        ('ml', 'Millilitre'),
        ('l', 'Litre'),
        ('pcs', 'Pieces'),
    ]

    name = models.CharField(max_length=200, db_index=True)
    sku = models.CharField(max_length=100, unique=True, db_index=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    mrp = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    cost = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    wholesale_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    stock_quantity = models.IntegerField(default=0)
    alert_threshold = models.IntegerField(default=10)
    barcode = models.CharField(max_length=100, blank=True, db_index=True)
    weight = models.DecimalField(max_digits=10, decimal_places=3, null=True, blank=True)
    weight_unit = models.CharField(max_length=10, choices=WEIGHT_UNIT_CHOICES, default='g')
    hsn_code = models.CharField(max_length=8, blank=True)
    cgst_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'), validators=[validate_rate])
    sgst_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'), validators=[validate_rate])
    igst_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'), validators=[validate_rate])
    cess_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'), validators=[validate_rate])
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    supplier = models.ForeignKey('parties.Supplier', on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    image = models.ImageField(upload_to='products/', blank=True, null=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.sku})"

    @property
    def gst_rate(self):
        """Effective GST rate: CGST + SGST when split, else IGST"""
        split = (self.cgst_rate or 0) + (self.sgst_rate or 0)
        return split if split else (self.igst_rate or Decimal('0.00'))

    @property
    def is_low_stock(self):
        return self.stock_quantity <= self.alert_threshold

    class Meta:
        db_table = 'products'
        ordering = ['name']
