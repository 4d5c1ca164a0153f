"""
Test suite for the Purchasing module
Tests: Purchase order creation, status workflow, stock receiving and permissions
"""
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from django.utils import timezone
from datetime import timedelta
from retailpos.core.models import AuditLog
from retailpos.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from retailpos.purchasing.models import Purchase, PurchaseItem
from retailpos.purchasing.services import PurchaseError, create_purchase, change_purchase_status


class PurchaseModelTests(TestCase):
    """Test Purchase and PurchaseItem models"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product()

    def test_purchase_total(self):
        purchase = TestDataFactory.create_purchase(
            user=self.user,
            items=[(self.product, 10, '100.00'), (self.product, 5, '50.00')]
        )
        self.assertEqual(purchase.total, Decimal('1250.00'))
        self.assertEqual(purchase.items.count(), 2)

    def test_outstanding_quantity(self):
        purchase = TestDataFactory.create_purchase(user=self.user, items=[(self.product, 10, '20.00')])
        item = purchase.items.get()
        self.assertEqual(item.outstanding_quantity, 10)
        item.received_quantity = 4
        self.assertEqual(item.outstanding_quantity, 6)


class PurchaseServiceTests(TestCase):
    """Test the purchase status workflow"""

    def setUp(self):
        self.user = TestDataFactory.create_manager()
        self.supplier = TestDataFactory.create_supplier()
        self.product = TestDataFactory.create_product(stock_quantity=5)

    def _purchase(self, quantity=10):
        return create_purchase(
            user=self.user,
            supplier=self.supplier,
            items=[{'product': self.product, 'quantity': quantity, 'unit_cost': Decimal('40.00')}]
        )

    def test_create_purchase(self):
        purchase = self._purchase()
        self.assertEqual(purchase.status, Purchase.STATUS_PENDING)
        self.assertTrue(purchase.order_number.startswith('PO-'))
        self.assertEqual(purchase.total, Decimal('400.00'))
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 5)

    def test_create_purchase_requires_items(self):
        with self.assertRaises(PurchaseError):
            create_purchase(user=self.user, supplier=self.supplier, items=[])

    def test_receive_adds_stock(self):
        purchase = self._purchase()
        change_purchase_status(purchase, Purchase.STATUS_ORDERED)
        purchase, received = change_purchase_status(purchase, Purchase.STATUS_RECEIVED)
        self.assertEqual(received, {self.product.id: 10})
        self.assertIsNotNone(purchase.received_date)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 15)
        self.assertEqual(purchase.items.get().received_quantity, 10)

    def test_pending_can_be_received_directly(self):
        purchase = self._purchase()
        change_purchase_status(purchase, Purchase.STATUS_RECEIVED)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 15)

    def test_received_is_final(self):
        purchase = self._purchase()
        change_purchase_status(purchase, Purchase.STATUS_RECEIVED)
        with self.assertRaisesMessage(PurchaseError, 'Cannot change status from received to cancelled'):
            change_purchase_status(purchase, Purchase.STATUS_CANCELLED)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 15)

    def test_cancelled_cannot_be_received(self):
        purchase = self._purchase()
        change_purchase_status(purchase, Purchase.STATUS_CANCELLED)
        with self.assertRaises(PurchaseError):
            change_purchase_status(purchase, Purchase.STATUS_RECEIVED)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 5)

    def test_receive_skips_deleted_product(self):
        purchase = self._purchase()
        self.product.delete()
        purchase, received = change_purchase_status(purchase, Purchase.STATUS_RECEIVED)
        self.assertEqual(received, {})
        self.assertEqual(purchase.status, Purchase.STATUS_RECEIVED)


class PurchaseAPITests(TestCase):
    """Test Purchase API endpoints"""

    def setUp(self):
        self.manager = TestDataFactory.create_manager()
        self.cashier = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.manager)
        self.supplier = TestDataFactory.create_supplier()
        self.product = TestDataFactory.create_product(stock_quantity=0)

    def _payload(self, **overrides):
        data = {
            'supplier_id': self.supplier.id,
            'order_date': timezone.localdate().isoformat(),
            'items': [
                {'product_id': self.product.id, 'quantity': 12, 'unit_cost': '25.50'}
            ]
        }
        data.update(overrides)
        return data

    def test_create_purchase(self):
        response = self.client.post('/api/v1/purchases/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('order_number', response.data)
        self.assertEqual(response.data['supplier_name'], self.supplier.name)
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(Decimal(response.data['total']), Decimal('306.00'))

    def test_create_purchase_without_items(self):
        response = self.client.post('/api/v1/purchases/', self._payload(items=[]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data)

    def test_create_purchase_negative_cost(self):
        items = [{'product_id': self.product.id, 'quantity': 1, 'unit_cost': '-1.00'}]
        response = self.client.post('/api/v1/purchases/', self._payload(items=items), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_purchase_unknown_product(self):
        items = [{'product_id': 99999, 'quantity': 1, 'unit_cost': '1.00'}]
        response = self.client.post('/api/v1/purchases/', self._payload(items=items), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_expected_date_before_order_date(self):
        yesterday = (timezone.localdate() - timedelta(days=1)).isoformat()
        response = self.client.post('/api/v1/purchases/', self._payload(expected_date=yesterday), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('expected_date', response.data)

    def test_cashier_forbidden(self):
        self.client.authenticate_user(self.cashier)
        response = self.client.get('/api/v1/purchases/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_purchases(self):
        TestDataFactory.create_purchase(user=self.manager, supplier=self.supplier)
        TestDataFactory.create_purchase(user=self.manager, status='received')
        response = self.client.get('/api/v1/purchases/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

        response = self.client.get(f'/api/v1/purchases/?supplier={self.supplier.id}')
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/purchases/?status=received')
        self.assertEqual(len(response.data), 1)

    def test_get_purchase_detail(self):
        purchase = TestDataFactory.create_purchase(user=self.manager, items=[(self.product, 2, '10.00')])
        response = self.client.get(f'/api/v1/purchases/{purchase.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], purchase.id)
        self.assertEqual(len(response.data['items']), 1)

    def test_receive_via_status_endpoint(self):
        purchase = TestDataFactory.create_purchase(user=self.manager, items=[(self.product, 7, '10.00')])
        response = self.client.patch(f'/api/v1/purchases/{purchase.id}/status/', {'status': 'received'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'received')
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 7)
        self.assertTrue(AuditLog.objects.filter(action='stock_purchase').exists())

    def test_invalid_transition(self):
        purchase = TestDataFactory.create_purchase(user=self.manager, status='received')
        response = self.client.patch(f'/api/v1/purchases/{purchase.id}/status/', {'status': 'ordered'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Cannot change status', response.data['error'])

    def test_delete_pending_purchase(self):
        purchase = TestDataFactory.create_purchase(user=self.manager, items=[(self.product, 1, '10.00')])
        response = self.client.delete(f'/api/v1/purchases/{purchase.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(PurchaseItem.objects.exists())

    def test_delete_received_purchase_rejected(self):
        purchase = TestDataFactory.create_purchase(user=self.manager, status='received')
        response = self.client.delete(f'/api/v1/purchases/{purchase.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Purchase.objects.filter(pk=purchase.pk).exists())

    def test_missing_purchase(self):
        response = self.client.get('/api/v1/purchases/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
