"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from retailpos.catalog.models import Category, TaxCategory, HsnCode, Product
from retailpos.parties.models import Customer, Supplier
from retailpos.sales.services import create_sale
from retailpos.purchasing.models import Purchase, PurchaseItem
from retailpos.labels.models import LabelTemplate, Printer
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='cashier',
                    is_active=True, is_superuser=False):
        """Create a test user with a POS role"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            is_active=is_active,
            is_superuser=is_superuser,
        )

    @staticmethod
    def create_admin(**kwargs):
        return TestDataFactory.create_user(role='admin', **kwargs)

    @staticmethod
    def create_manager(**kwargs):
        return TestDataFactory.create_user(role='manager', **kwargs)

    @staticmethod
    def create_category(name=None, description=None):
        """Create a test category"""
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        return Category.objects.create(
            name=name,
            description=description or f'Test category {name}'
        )

    @staticmethod
    def create_tax_category(name=None, rate=None):
        if not name:
            name = f'GST_{TestDataFactory.random_string(6)}'
        if rate is None:
            rate = Decimal('18.00')
        return TaxCategory.objects.create(name=name, rate=rate)

    @staticmethod
    def create_hsn_code(hsn_code='8517', cgst_rate=Decimal('9.00'), sgst_rate=Decimal('9.00'),
                        igst_rate=Decimal('18.00'), cess_rate=Decimal('0.00'), tax_category=None):
        """Create an HSN master row (default 8517 @ 18%)"""
        return HsnCode.objects.create(
            hsn_code=hsn_code,
            description=f'HSN {hsn_code}',
            tax_category=tax_category,
            cgst_rate=cgst_rate,
            sgst_rate=sgst_rate,
            igst_rate=igst_rate,
            cess_rate=cess_rate,
        )

    @staticmethod
    def create_product(name=None, sku=None, price=Decimal('100.00'), mrp=None, cost=None,
                       stock_quantity=50, alert_threshold=10, category=None, supplier=None,
                       barcode='', hsn_code='', cgst_rate=Decimal('0.00'), sgst_rate=Decimal('0.00'),
                       igst_rate=Decimal('0.00'), is_active=True, **extra):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        if not sku:
            sku = f'SKU-{TestDataFactory.random_string(8).upper()}'
        return Product.objects.create(
            name=name,
            sku=sku,
            price=price,
            mrp=mrp,
            cost=cost,
            stock_quantity=stock_quantity,
            alert_threshold=alert_threshold,
            category=category,
            supplier=supplier,
            barcode=barcode,
            hsn_code=hsn_code,
            cgst_rate=cgst_rate,
            sgst_rate=sgst_rate,
            igst_rate=igst_rate,
            is_active=is_active,
            **extra
        )

    @staticmethod
    def create_customer(name=None, phone=None, email=None):
        """Create a test customer"""
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'9{random.randint(100000000, 999999999)}'
        if not email:
            email = f'{name.lower()}@test.com'
        return Customer.objects.create(
            name=name,
            phone=phone,
            email=email
        )

    @staticmethod
    def create_supplier(name=None, phone=None, email=None, gstin=''):
        """Create a test supplier"""
        if not name:
            name = f'Supplier_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'9{random.randint(100000000, 999999999)}'
        if not email:
            email = f'{name.lower()}@test.com'
        return Supplier.objects.create(
            name=name,
            phone=phone,
            email=email,
            gstin=gstin
        )

    @staticmethod
    def create_sale(user, products_with_qty, customer=None, **kwargs):
        """
        Check out a sale through the sales service.
        products_with_qty: [(product, quantity), ...]
        """
        items = [{'product_id': product.id, 'quantity': qty} for product, qty in products_with_qty]
        return create_sale(
            user=user,
            items=items,
            customer_id=customer.id if customer else None,
            **kwargs
        )

    @staticmethod
    def create_purchase(user, supplier=None, items=None, status='pending'):
        """
        Create a purchase order.
        items: [(product, quantity, unit_cost), ...]
        """
        if not supplier:
            supplier = TestDataFactory.create_supplier()
        purchase = Purchase.objects.create(
            order_number=f'PO-{TestDataFactory.random_string(10)}',
            supplier=supplier,
            user=user,
            status=status,
        )
        total = Decimal('0.00')
        for product, quantity, unit_cost in items or []:
            unit_cost = Decimal(str(unit_cost))
            PurchaseItem.objects.create(
                purchase=purchase,
                product=product,
                product_name=product.name,
                quantity=quantity,
                unit_cost=unit_cost,
                subtotal=unit_cost * quantity,
            )
            total += unit_cost * quantity
        purchase.total = total
        purchase.save(update_fields=['total'])
        return purchase

    @staticmethod
    def create_label_template(name=None, width=Decimal('50.00'), height=Decimal('30.00'), **extra):
        if not name:
            name = f'Template_{TestDataFactory.random_string(6)}'
        return LabelTemplate.objects.create(name=name, width=width, height=height, **extra)

    @staticmethod
    def create_printer(name=None, **extra):
        if not name:
            name = f'Printer_{TestDataFactory.random_string(6)}'
        return Printer.objects.create(name=name, **extra)


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
