"""
Test suite for the Sales module
Tests: GST-inclusive totals, checkout, stock movement, status changes, deletion and receipts
"""
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from retailpos.core.models import AuditLog
from retailpos.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from retailpos.catalog.models import Product
from retailpos.sales.models import Sale, SaleItem
from retailpos.sales.services import (
    SaleError, calculate_totals, change_sale_status, delete_sale, discount_value, inclusive_tax
)
from retailpos.sales.receipts import gst_summary, qr_payload, render_receipt_html, render_receipt_pdf


class TaxCalculationTests(TestCase):
    """Test GST-inclusive price arithmetic"""

    def test_inclusive_tax(self):
        """18% inside 118 is 18"""
        self.assertEqual(inclusive_tax(Decimal('118.00'), Decimal('18')).quantize(Decimal('0.01')), Decimal('18.00'))

    def test_inclusive_tax_zero_rate(self):
        self.assertEqual(inclusive_tax(Decimal('100.00'), Decimal('0')), Decimal('0.00'))

    def test_percentage_discount(self):
        self.assertEqual(discount_value(Decimal('200.00'), Decimal('10'), 'percentage'), Decimal('20.00'))

    def test_discount_rejections(self):
        with self.assertRaises(SaleError):
            discount_value(Decimal('100.00'), Decimal('-1'), 'amount')
        with self.assertRaises(SaleError):
            discount_value(Decimal('100.00'), Decimal('101'), 'percentage')
        with self.assertRaises(SaleError):
            discount_value(Decimal('100.00'), Decimal('150'), 'amount')
        with self.assertRaises(SaleError):
            discount_value(Decimal('100.00'), Decimal('5'), 'bogus')

    def test_calculate_totals_without_discount(self):
        lines = [{'subtotal': Decimal('200.00'), 'gst_rate': Decimal('18.00')}]
        totals = calculate_totals(lines)
        self.assertEqual(totals['subtotal'], Decimal('200.00'))
        self.assertEqual(totals['tax'], Decimal('30.51'))
        self.assertEqual(totals['total'], Decimal('200.00'))
        self.assertEqual(totals['round_off'], Decimal('0.00'))
        self.assertEqual(lines[0]['tax_amount'], Decimal('30.51'))

    def test_calculate_totals_scales_tax_by_discount(self):
        lines = [{'subtotal': Decimal('200.00'), 'gst_rate': Decimal('18.00')}]
        totals = calculate_totals(lines, Decimal('10'), 'percentage')
        self.assertEqual(totals['discount_amount'], Decimal('20.00'))
        self.assertEqual(totals['tax'], Decimal('27.46'))
        self.assertEqual(totals['total'], Decimal('180.00'))

    def test_total_rounds_to_rupee(self):
        lines = [{'subtotal': Decimal('99.50'), 'gst_rate': Decimal('0')}]
        totals = calculate_totals(lines)
        self.assertEqual(totals['total'], Decimal('100.00'))
        self.assertEqual(totals['round_off'], Decimal('0.50'))

    def test_mixed_rates(self):
        lines = [
            {'subtotal': Decimal('118.00'), 'gst_rate': Decimal('18.00')},
            {'subtotal': Decimal('105.00'), 'gst_rate': Decimal('5.00')},
        ]
        totals = calculate_totals(lines)
        self.assertEqual(totals['tax'], Decimal('23.00'))
        self.assertEqual(totals['total'], Decimal('223.00'))


class SaleServiceTests(TestCase):
    """Test checkout and stock movement through the sales service"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(
            price=Decimal('100.00'), stock_quantity=10,
            cgst_rate=Decimal('9.00'), sgst_rate=Decimal('9.00'), hsn_code='8517'
        )

    def test_checkout_decrements_stock(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 3)])
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 7)
        self.assertEqual(sale.total, Decimal('300.00'))
        self.assertEqual(sale.items.count(), 1)

    def test_checkout_snapshots_product(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 1)])
        item = sale.items.get()
        self.assertEqual(item.product_name, self.product.name)
        self.assertEqual(item.product_sku, self.product.sku)
        self.assertEqual(item.hsn_code, '8517')
        self.assertEqual(item.gst_rate, Decimal('18.00'))
        self.assertEqual(item.tax_amount, Decimal('15.25'))

    def test_discount_amount_rounds_half_up(self):
        product = TestDataFactory.create_product(price=Decimal('100.50'), stock_quantity=5)
        sale = TestDataFactory.create_sale(
            self.user, [(product, 1)], discount=Decimal('5'), discount_type='percentage'
        )
        self.assertEqual(sale.discount_amount, Decimal('5.03'))
        self.assertEqual(sale.discount_amount, discount_value(sale.subtotal, sale.discount, 'percentage'))

    def test_same_product_twice_checks_combined_quantity(self):
        with self.assertRaises(SaleError):
            TestDataFactory.create_sale(self.user, [(self.product, 6), (self.product, 6)])
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)

    def test_insufficient_stock(self):
        with self.assertRaisesMessage(SaleError, 'Insufficient stock'):
            TestDataFactory.create_sale(self.user, [(self.product, 11)])
        self.assertEqual(Sale.objects.count(), 0)

    def test_inactive_product_rejected(self):
        inactive = TestDataFactory.create_product(is_active=False)
        with self.assertRaisesMessage(SaleError, 'not found or inactive'):
            TestDataFactory.create_sale(self.user, [(inactive, 1)])

    def test_zero_quantity_rejected(self):
        with self.assertRaises(SaleError):
            TestDataFactory.create_sale(self.user, [(self.product, 0)])

    def test_cannot_create_cancelled(self):
        with self.assertRaises(SaleError):
            TestDataFactory.create_sale(self.user, [(self.product, 1)], status='cancelled')

    def test_change_due(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 1)], amount_paid=Decimal('500'))
        self.assertEqual(sale.change_due, Decimal('400.00'))

    def test_cancel_restores_stock_once(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 4)])
        change_sale_status(sale, 'cancelled')
        change_sale_status(sale, 'cancelled')
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)

    def test_cancelled_sale_cannot_reopen(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 1)])
        change_sale_status(sale, 'cancelled')
        with self.assertRaises(SaleError):
            change_sale_status(sale, 'completed')

    def test_delete_restores_stock(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 5)])
        restored = delete_sale(sale)
        self.assertEqual(restored, 5)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)
        self.assertFalse(SaleItem.objects.exists())

    def test_delete_cancelled_sale_does_not_restore_twice(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 5)])
        change_sale_status(sale, 'cancelled')
        self.assertEqual(delete_sale(sale), 0)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)

    def test_items_survive_product_deletion(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 1)])
        self.product.delete()
        item = sale.items.get()
        self.assertIsNone(item.product)
        self.assertTrue(item.product_name)


class SaleAPITests(TestCase):
    """Test Sale API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.manager = TestDataFactory.create_manager()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer()
        self.product = TestDataFactory.create_product(price=Decimal('50.00'), stock_quantity=20)

    def _checkout(self, **overrides):
        data = {
            'customer_id': self.customer.id,
            'items': [{'product_id': self.product.id, 'quantity': 2}],
            'payment_method': 'upi',
        }
        data.update(overrides)
        return self.client.post('/api/v1/sales/', data, format='json')

    def test_create_sale(self):
        response = self._checkout()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['order_number'].startswith('SALE-'))
        self.assertEqual(response.data['customer_name'], self.customer.name)
        self.assertEqual(Decimal(response.data['total']), Decimal('100.00'))
        self.assertEqual(len(response.data['items']), 1)
        self.assertTrue(AuditLog.objects.filter(action='sale_create').exists())

    def test_create_sale_without_items(self):
        response = self._checkout(items=[])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Sale must have at least one item')

    def test_create_sale_rejects_list_body(self):
        data = [{'product_id': self.product.id, 'quantity': 1}]
        response = self.client.post('/api/v1/sales/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Sale data must be a JSON object')

    def test_create_sale_insufficient_stock(self):
        response = self._checkout(items=[{'product_id': self.product.id, 'quantity': 21}])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Insufficient stock', response.data['error'])

    def test_create_sale_unknown_customer(self):
        response = self._checkout(customer_id=99999)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_sale_invalid_payment_method(self):
        response = self._checkout(payment_method='barter')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('payment_method', response.data)

    def test_unauthenticated(self):
        self.client.logout()
        response = self.client.get('/api/v1/sales/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_sales(self):
        TestDataFactory.create_sale(self.user, [(self.product, 1)])
        TestDataFactory.create_sale(self.user, [(self.product, 2)], payment_method='card')
        response = self.client.get('/api/v1/sales/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertNotIn('items', response.data['results'][0])
        self.assertEqual(response.data['results'][0]['item_count'], 1)

        response = self.client.get('/api/v1/sales/?payment_method=card')
        self.assertEqual(response.data['count'], 1)

    def test_list_sales_pagination(self):
        for _ in range(3):
            TestDataFactory.create_sale(self.user, [(self.product, 1)])
        response = self.client.get('/api/v1/sales/?limit=2&offset=2')
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(len(response.data['results']), 1)

    def test_list_sales_invalid_date(self):
        response = self.client.get('/api/v1/sales/?date_from=01-01-2024')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid date format. Use YYYY-MM-DD')

    def test_recent_sales(self):
        for _ in range(3):
            TestDataFactory.create_sale(self.user, [(self.product, 1)])
        response = self.client.get('/api/v1/sales/recent/?limit=2')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_get_sale_detail(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 1)])
        response = self.client.get(f'/api/v1/sales/{sale.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order_number'], sale.order_number)
        self.assertIn('items', response.data)

    def test_get_missing_sale(self):
        response = self.client.get('/api/v1/sales/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Sale not found')

    def test_cashier_cannot_delete(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 1)])
        response = self.client.delete(f'/api/v1/sales/{sale.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Sale.objects.filter(pk=sale.pk).exists())

    def test_manager_deletes_sale(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 4)])
        self.client.authenticate_user(self.manager)
        response = self.client.delete(f'/api/v1/sales/{sale.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 20)
        self.assertTrue(AuditLog.objects.filter(action='sale_delete', object_reference=sale.order_number).exists())

    def test_cancel_sale(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 4)])
        self.client.authenticate_user(self.manager)
        response = self.client.patch(f'/api/v1/sales/{sale.id}/status/', {'status': 'cancelled'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'cancelled')
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 20)
        self.assertTrue(AuditLog.objects.filter(action='sale_cancel').exists())

    def test_cashier_cannot_change_status(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 1)])
        response = self.client.patch(f'/api/v1/sales/{sale.id}/status/', {'status': 'cancelled'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_reopen_cancelled_sale(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 1)])
        change_sale_status(sale, 'cancelled')
        self.client.authenticate_user(self.manager)
        response = self.client.patch(f'/api/v1/sales/{sale.id}/status/', {'status': 'completed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ReceiptTests(TestCase):
    """Test HTML and PDF receipts"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(
            name='Basmati Rice 5kg', price=Decimal('450.00'), mrp=Decimal('500.00'),
            cgst_rate=Decimal('2.50'), sgst_rate=Decimal('2.50'), hsn_code='1006'
        )
        self.sale = TestDataFactory.create_sale(self.user, [(self.product, 2)])

    def test_gst_summary_splits_cgst_sgst(self):
        rows = gst_summary(self.sale, list(self.sale.items.all()))
        labels = [label for label, _ in rows]
        self.assertEqual(labels, ['CGST (2.5%)', 'SGST (2.5%)'])
        self.assertEqual(sum(amount for _, amount in rows), self.sale.tax)

    def test_gst_summary_igst(self):
        product = TestDataFactory.create_product(igst_rate=Decimal('12.00'))
        sale = TestDataFactory.create_sale(self.user, [(product, 1)])
        rows = gst_summary(sale, list(sale.items.all()))
        self.assertEqual(len(rows), 1)
        self.assertTrue(rows[0][0].startswith('IGST'))

    def test_qr_payload(self):
        payload = qr_payload(self.sale)
        self.assertTrue(payload.startswith(f'BILL:{self.sale.order_number}|TOTAL:{self.sale.total}|DATE:'))

    def test_render_html(self):
        html = render_receipt_html(self.sale)
        self.assertIn(self.sale.order_number, html)
        self.assertIn('GRAND TOTAL', html)
        self.assertIn('You Save', html)
        self.assertIn('window.print', html)

    def test_render_pdf(self):
        pdf = render_receipt_pdf(self.sale)
        self.assertTrue(pdf.startswith(b'%PDF'))

    def test_receipt_endpoint(self):
        response = self.client.get(f'/api/v1/sales/{self.sale.id}/receipt/?autoprint=0')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/html; charset=utf-8')
        self.assertNotIn(b'window.print', response.content)

    def test_receipt_pdf_endpoint(self):
        response = self.client.get(f'/api/v1/sales/{self.sale.id}/receipt/pdf/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertIn(f'receipt-{self.sale.order_number}.pdf', response['Content-Disposition'])

    def test_receipt_missing_sale(self):
        response = self.client.get('/api/v1/sales/99999/receipt/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
