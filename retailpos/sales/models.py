from django.db import models
from decimal import Decimal, ROUND_HALF_UP
from retailpos.catalog.models import Product
from retailpos.parties.models import Customer
from retailpos.core.models import User


class Sale(models.Model):
    """Completed checkouts"""
    PAYMENT_METHOD_CHOICES = [
        ('cash', 'Cash'),
        ('card', 'Card'),
        ('upi', 'UPI'),
        ('cheque', 'Cheque'),
        ('credit', 'Credit'),
        ('mixed', 'Mixed'),
    ]

    STATUS_COMPLETED = 'completed'
    STATUS_PENDING = 'pending'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_PENDING, 'Pending'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    DISCOUNT_TYPE_CHOICES = [
        ('amount', 'Amount'),
        ('percentage', 'Percentage'),
    ]

    order_number = models.CharField(max_length=100, unique=True)
    customer = models.ForeignKey(Customer, on_delete=models.SET_NULL, null=True, blank=True, related_name='sales')
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='sales')
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    discount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    discount_type = models.CharField(max_length=20, choices=DISCOUNT_TYPE_CHOICES, default='amount')
    tax = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    round_off = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    amount_paid = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    change_due = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='cash')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_COMPLETED, db_index=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    def __str__(self):
        return self.order_number

    @property
    def discount_amount(self):
        """Rupee value of the discount, whatever the discount type"""
        if self.discount_type == 'percentage':
            return (self.subtotal * self.discount / Decimal('100')).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        return self.discount

    @property
    def taxable_amount(self):
        return self.subtotal - self.discount_amount - self.tax

    class Meta:
        db_table = 'sales'
        ordering = ['-created_at']


class SaleItem(models.Model):
    """Sale line items; name/sku are kept so receipts survive product deletion"""
    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.SET_NULL, null=True, blank=True, related_name='sale_items')
    product_name = models.CharField(max_length=200)
    product_sku = models.CharField(max_length=100, blank=True)
    quantity = models.IntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    mrp = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    hsn_code = models.CharField(max_length=8, blank=True)
    cgst_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    sgst_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    igst_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    gst_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    tax_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)

    def __str__(self):
        return f"{self.product_name} x{self.quantity}"

    @property
    def savings(self):
        """Per-line saving against MRP, zero when sold at or above MRP"""
        if self.mrp and self.mrp > self.unit_price:
            return (self.mrp - self.unit_price) * self.quantity
        return Decimal('0.00')

    class Meta:
        db_table = 'sale_items'
        ordering = ['id']
