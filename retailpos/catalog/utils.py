"""
Utility functions for catalog operations
"""
from django.utils import timezone
import uuid
from retailpos.catalog.models import Product


def generate_unique_sku(base_name=None):
    """Generate a unique SKU, e.g. RICE-20260101-1A2B3C4D"""
    prefix = ''.join(ch for ch in (base_name or '')[:4].upper() if ch.isalnum()) or 'PRD'
    timestamp = timezone.now().strftime('%Y%m%d')
    unique_id = str(uuid.uuid4())[:8].upper()
    sku = f"{prefix}-{timestamp}-{unique_id}"

    # Ensure uniqueness
    while Product.objects.filter(sku=sku).exists():
        unique_id = str(uuid.uuid4())[:8].upper()
        sku = f"{prefix}-{timestamp}-{unique_id}"

    return sku


def product_barcode_value(product, use_barcode=True):
    """Value encoded on a product's barcode: barcode, then SKU, then PROD{id:08d}"""
    if use_barcode and product.barcode:
        return product.barcode
    return product.sku or f"PROD{product.id:08d}"


def find_product_by_code(value):
    """Find an active product whose barcode or SKU equals value"""
    value = (value or '').strip()
    if not value:
        return None
    product = Product.objects.filter(barcode=value, is_active=True).first()
    if product is None:
        product = Product.objects.filter(sku__iexact=value, is_active=True).first()
    return product
