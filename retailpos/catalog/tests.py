"""
Test suite for the Catalog module
Tests: Categories, HSN codes, products, filters, stock adjustment and barcodes
"""
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from retailpos.core.models import AuditLog
from retailpos.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from retailpos.catalog.models import Product
from retailpos.catalog.barcodes import (
    EscPosCommands, generate_barcode_data_url, generate_barcode_svg, validate_barcode_value
)
from retailpos.catalog.utils import find_product_by_code, generate_unique_sku, product_barcode_value


class ProductModelTests(TestCase):
    """Test Product model helpers"""

    def test_gst_rate_prefers_split(self):
        product = TestDataFactory.create_product(cgst_rate=Decimal('6.00'), sgst_rate=Decimal('6.00'), igst_rate=Decimal('12.00'))
        self.assertEqual(product.gst_rate, Decimal('12.00'))

    def test_gst_rate_falls_back_to_igst(self):
        product = TestDataFactory.create_product(igst_rate=Decimal('28.00'))
        self.assertEqual(product.gst_rate, Decimal('28.00'))

    def test_is_low_stock(self):
        self.assertTrue(TestDataFactory.create_product(stock_quantity=10, alert_threshold=10).is_low_stock)
        self.assertFalse(TestDataFactory.create_product(stock_quantity=11, alert_threshold=10).is_low_stock)


class CatalogUtilsTests(TestCase):
    """Test SKU generation, code lookup and barcode helpers"""

    def test_generate_unique_sku(self):
        sku = generate_unique_sku('Rice Basmati')
        self.assertTrue(sku.startswith('RICE-'))
        self.assertNotEqual(sku, generate_unique_sku('Rice Basmati'))

    def test_generate_sku_without_name(self):
        self.assertTrue(generate_unique_sku().startswith('PRD-'))

    def test_find_by_barcode_then_sku(self):
        product = TestDataFactory.create_product(sku='TEA-001', barcode='8901234567890')
        self.assertEqual(find_product_by_code('8901234567890'), product)
        self.assertEqual(find_product_by_code('tea-001'), product)
        self.assertIsNone(find_product_by_code('missing'))

    def test_inactive_not_found(self):
        TestDataFactory.create_product(sku='OLD-1', is_active=False)
        self.assertIsNone(find_product_by_code('OLD-1'))

    def test_barcode_value(self):
        product = TestDataFactory.create_product(sku='ABC-1', barcode='123456789012')
        self.assertEqual(product_barcode_value(product), '123456789012')
        self.assertEqual(product_barcode_value(product, use_barcode=False), 'ABC-1')

    def test_validate_barcode_value(self):
        self.assertTrue(validate_barcode_value('8901234567890', 'EAN13'))
        self.assertFalse(validate_barcode_value('ABC', 'EAN13'))
        self.assertTrue(validate_barcode_value('ABC-123', 'CODE39'))
        self.assertFalse(validate_barcode_value('', 'CODE128'))
        self.assertTrue(validate_barcode_value('anything', 'QR'))

    def test_svg_is_deterministic(self):
        self.assertEqual(generate_barcode_svg('SKU-1'), generate_barcode_svg('SKU-1'))
        self.assertIn('SKU-1', generate_barcode_svg('SKU-1'))
        self.assertNotIn('<text', generate_barcode_svg('SKU-1', display_value=False))
        self.assertTrue(generate_barcode_data_url('SKU-1').startswith('data:image/svg+xml;base64,'))

    def test_escpos_label(self):
        commands = EscPosCommands.label(product_name='Tea', price='120.00', barcode='TEA1')
        self.assertTrue(commands.startswith(b'\x1b@'))
        self.assertIn(b'Tea', commands)
        self.assertIn(b'TEA1', commands)


class CategoryAPITests(TestCase):
    """Test Category API endpoints"""

    def setUp(self):
        self.manager = TestDataFactory.create_manager()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.manager)

    def test_create_category(self):
        response = self.client.post('/api/v1/categories/', {'name': 'Snacks'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['product_count'], 0)

    def test_blank_name(self):
        response = self.client.post('/api/v1/categories/', {'name': '  '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_with_counts(self):
        category = TestDataFactory.create_category()
        TestDataFactory.create_product(category=category)
        TestDataFactory.create_product(category=category)
        response = self.client.get('/api/v1/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['product_count'], 2)

    def test_delete_category_keeps_products(self):
        category = TestDataFactory.create_category()
        product = TestDataFactory.create_product(category=category)
        response = self.client.delete(f'/api/v1/categories/{category.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        product.refresh_from_db()
        self.assertIsNone(product.category)


class HsnCodeAPITests(TestCase):
    """Test HSN master endpoints"""

    def setUp(self):
        self.manager = TestDataFactory.create_manager()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.manager)

    def test_create_hsn(self):
        data = {'hsn_code': '1006', 'description': 'Rice', 'cgst_rate': '2.50', 'sgst_rate': '2.50', 'igst_rate': '5.00'}
        response = self.client.post('/api/v1/hsn-codes/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['total_gst_rate']), Decimal('5.00'))

    def test_invalid_hsn(self):
        response = self.client.post('/api/v1/hsn-codes/', {'hsn_code': '123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('hsn_code', response.data)

    def test_rate_out_of_range(self):
        response = self.client.post('/api/v1/hsn-codes/', {'hsn_code': '1006', 'igst_rate': '150'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_lookup(self):
        TestDataFactory.create_hsn_code()
        response = self.client.get('/api/v1/hsn-codes/lookup/8517/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['cgst_rate']), Decimal('9.00'))
        response = self.client.get('/api/v1/hsn-codes/lookup/9999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_search(self):
        TestDataFactory.create_hsn_code('8517')
        TestDataFactory.create_hsn_code('1006')
        response = self.client.get('/api/v1/hsn-codes/?search=85')
        self.assertEqual(len(response.data), 1)


class ProductAPITests(TestCase):
    """Test Product API endpoints"""

    def setUp(self):
        self.manager = TestDataFactory.create_manager()
        self.cashier = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.manager)
        self.category = TestDataFactory.create_category()

    def test_create_product(self):
        data = {
            'name': 'Tata Salt 1kg',
            'price': '28.00',
            'mrp': '30.00',
            'stock_quantity': 40,
            'category_id': self.category.id,
        }
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['sku'].startswith('TATA-'))
        self.assertEqual(response.data['category_name'], self.category.name)
        self.assertTrue(AuditLog.objects.filter(model_name='Product', action='create').exists())

    def test_create_product_copies_hsn_rates(self):
        TestDataFactory.create_hsn_code('8517')
        data = {'name': 'Phone', 'price': '9999.00', 'hsn_code': '8517'}
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['cgst_rate']), Decimal('9.00'))
        self.assertEqual(Decimal(response.data['gst_rate']), Decimal('18.00'))

    def test_explicit_rates_win_over_hsn(self):
        TestDataFactory.create_hsn_code('8517')
        data = {'name': 'Phone', 'price': '9999.00', 'hsn_code': '8517', 'igst_rate': '18.00'}
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(Decimal(response.data['cgst_rate']), Decimal('0.00'))
        self.assertEqual(Decimal(response.data['igst_rate']), Decimal('18.00'))

    def test_validation_errors(self):
        cases = [
            ({'name': '', 'price': '10'}, 'name'),
            ({'name': 'X', 'price': '-1'}, 'price'),
            ({'name': 'X', 'price': '100', 'mrp': '90'}, 'mrp'),
            ({'name': 'X', 'price': '10', 'hsn_code': '12'}, 'hsn_code'),
            ({'name': 'X', 'price': '10', 'stock_quantity': -5}, 'stock_quantity'),
        ]
        for data, field in cases:
            response = self.client.post('/api/v1/products/', data, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, data)
            self.assertIn(field, response.data)

    def test_duplicate_sku(self):
        TestDataFactory.create_product(sku='DUP-1')
        response = self.client.post('/api/v1/products/', {'name': 'X', 'price': '1', 'sku': 'dup-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('sku', response.data)

    def test_cashier_cannot_create(self):
        self.client.authenticate_user(self.cashier)
        response = self.client.post('/api/v1/products/', {'name': 'X', 'price': '1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_filters(self):
        TestDataFactory.create_product(name='Green Tea', stock_quantity=2, category=self.category)
        TestDataFactory.create_product(name='Black Coffee', stock_quantity=0)
        TestDataFactory.create_product(name='Green Apple', stock_quantity=100)

        response = self.client.get('/api/v1/products/?search=green tea')
        self.assertEqual([p['name'] for p in response.data], ['Green Tea'])
        response = self.client.get('/api/v1/products/?low_stock=true')
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/products/?out_of_stock=true')
        self.assertEqual(len(response.data), 1)
        response = self.client.get(f'/api/v1/products/?category={self.category.id}')
        self.assertEqual(len(response.data), 1)

    def test_price_change_is_audited(self):
        product = TestDataFactory.create_product(price=Decimal('10.00'))
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'price': '12.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        log = AuditLog.objects.get(action='price_change')
        self.assertEqual(log.changes['price'], {'old': '10.00', 'new': '12.00'})

    def test_blank_sku_on_update_keeps_existing(self):
        product = TestDataFactory.create_product(sku='KEEP-1')
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'sku': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['sku'], 'KEEP-1')

    def test_delete_product(self):
        product = TestDataFactory.create_product()
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(pk=product.pk).exists())

    def test_search_endpoint(self):
        TestDataFactory.create_product(name='Amul Butter', barcode='8901262150019')
        TestDataFactory.create_product(name='Amul Cheese', is_active=False)
        self.client.authenticate_user(self.cashier)
        response = self.client.get('/api/v1/products/search/?q=amul')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/products/search/?q=89012621')
        self.assertEqual(response.data[0]['name'], 'Amul Butter')

    def test_low_stock_endpoint(self):
        TestDataFactory.create_product(name='A', stock_quantity=5)
        TestDataFactory.create_product(name='B', stock_quantity=1)
        TestDataFactory.create_product(name='C', stock_quantity=50)
        response = self.client.get('/api/v1/products/low-stock/')
        self.assertEqual([p['name'] for p in response.data], ['B', 'A'])

    def test_barcode_lookup(self):
        product = TestDataFactory.create_product(barcode='8901030865278')
        response = self.client.get('/api/v1/products/barcode/8901030865278/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], product.id)
        response = self.client.get('/api/v1/products/barcode/0000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class StockAdjustmentTests(TestCase):
    """Test manual stock adjustments"""

    def setUp(self):
        self.manager = TestDataFactory.create_manager()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.manager)
        self.product = TestDataFactory.create_product(stock_quantity=10)

    def test_add_stock(self):
        response = self.client.post(
            f'/api/v1/products/{self.product.id}/adjust-stock/', {'quantity': 5, 'reason': 'recount'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stock_quantity'], 15)
        self.assertTrue(AuditLog.objects.filter(action='stock_adjust').exists())

    def test_cannot_go_negative(self):
        response = self.client.post(f'/api/v1/products/{self.product.id}/adjust-stock/', {'quantity': -11}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Insufficient stock', response.data['error'])
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)

    def test_zero_rejected(self):
        response = self.client.post(f'/api/v1/products/{self.product.id}/adjust-stock/', {'quantity': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cashier_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.post(f'/api/v1/products/{self.product.id}/adjust-stock/', {'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class BarcodeAPITests(TestCase):
    """Test barcode preview and label image endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(sku='SOAP-01', barcode='8901030865278', mrp=Decimal('120.00'))

    def test_formats(self):
        response = self.client.get('/api/v1/barcodes/formats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('EAN13', response.data)

    def test_generate(self):
        response = self.client.post('/api/v1/barcodes/generate/', {'value': '8901030865278', 'format': 'ean13'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['format'], 'EAN13')
        self.assertTrue(response.data['image'].startswith('data:image/svg+xml'))

    def test_generate_invalid_value(self):
        response = self.client.post('/api/v1/barcodes/generate/', {'value': 'abc', 'format': 'EAN13'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_product_barcode_uses_sku(self):
        response = self.client.get(f'/api/v1/products/{self.product.id}/barcode/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['value'], 'SOAP-01')

    def test_product_barcode_format_param(self):
        response = self.client.get(f'/api/v1/products/{self.product.id}/barcode/?format=ean13')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['format'], 'EAN13')
        self.assertTrue(response.data['image'].startswith('data:image/svg+xml'))

    def test_label_image(self):
        response = self.client.get(f'/api/v1/products/{self.product.id}/label-image/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['barcode'], '8901030865278')
        self.assertTrue(response.data['image'].startswith('data:image/png;base64,'))
