"""
Test suite for the Parties module
Tests: Customer and supplier CRUD, search, validation and permissions
"""
from django.test import TestCase
from rest_framework import status
from retailpos.core.models import AuditLog
from retailpos.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from retailpos.parties.models import Customer, Supplier


class CustomerAPITests(TestCase):
    """Test Customer API endpoints"""

    def setUp(self):
        self.cashier = TestDataFactory.create_user()
        self.manager = TestDataFactory.create_manager()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.cashier)

    def test_cashier_creates_customer(self):
        data = {'name': 'Meera Iyer', 'phone': '+91 98450 12345', 'email': 'meera@example.com'}
        response = self.client.post('/api/v1/customers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Meera Iyer')
        self.assertTrue(AuditLog.objects.filter(model_name='Customer', action='create').exists())

    def test_blank_name_rejected(self):
        response = self.client.post('/api/v1/customers/', {'name': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data)

    def test_invalid_phone_rejected(self):
        response = self.client.post('/api/v1/customers/', {'name': 'A', 'phone': '12ab'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('phone', response.data)

    def test_gstin_normalised(self):
        data = {'name': 'Acme Traders', 'tax_id': '27aapfu0939f1zv'}
        response = self.client.post('/api/v1/customers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['tax_id'], '27AAPFU0939F1ZV')

    def test_invalid_gstin_rejected(self):
        response = self.client.post('/api/v1/customers/', {'name': 'Acme', 'tax_id': '27AAPFU0939'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('tax_id', response.data)

    def test_negative_credit_limit(self):
        response = self.client.post('/api/v1/customers/', {'name': 'A', 'credit_limit': '-5'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_with_search(self):
        TestDataFactory.create_customer(name='Priya Sharma', phone='9876543210')
        TestDataFactory.create_customer(name='Rahul Verma')
        response = self.client.get('/api/v1/customers/?search=priya')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/customers/?search=98765')
        self.assertEqual(response.data[0]['name'], 'Priya Sharma')

    def test_search_endpoint(self):
        TestDataFactory.create_customer(name='Priya Sharma', email='priya@shop.in')
        response = self.client.get('/api/v1/customers/search/?q=shop.in')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/customers/search/?q=')
        self.assertEqual(response.data, [])

    def test_cashier_cannot_update_or_delete(self):
        customer = TestDataFactory.create_customer()
        response = self.client.patch(f'/api/v1/customers/{customer.id}/', {'name': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.delete(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_manager_updates_and_deletes(self):
        customer = TestDataFactory.create_customer()
        self.client.authenticate_user(self.manager)
        response = self.client.patch(f'/api/v1/customers/{customer.id}/', {'address': 'MG Road, Pune'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['address'], 'MG Road, Pune')
        response = self.client.delete(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Customer.objects.filter(pk=customer.pk).exists())

    def test_delete_keeps_sales(self):
        customer = TestDataFactory.create_customer()
        product = TestDataFactory.create_product()
        sale = TestDataFactory.create_sale(self.cashier, [(product, 1)], customer=customer)
        self.client.authenticate_user(self.manager)
        self.client.delete(f'/api/v1/customers/{customer.id}/')
        sale.refresh_from_db()
        self.assertIsNone(sale.customer)

    def test_missing_customer(self):
        response = self.client.get('/api/v1/customers/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class SupplierAPITests(TestCase):
    """Test Supplier API endpoints"""

    def setUp(self):
        self.manager = TestDataFactory.create_manager()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.manager)

    def test_create_supplier(self):
        data = {'name': 'Sri Balaji Distributors', 'gstin': '29ABCDE1234F1Z5', 'supplier_type': 'wholesaler'}
        response = self.client.post('/api/v1/suppliers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['gstin'], '29ABCDE1234F1Z5')

    def test_invalid_gstin(self):
        response = self.client.post('/api/v1/suppliers/', {'name': 'Bad', 'gstin': 'NOTAGSTIN'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('gstin', response.data)

    def test_cashier_reads_only(self):
        TestDataFactory.create_supplier()
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/suppliers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        response = self.client.post('/api/v1/suppliers/', {'name': 'New'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_and_delete(self):
        supplier = TestDataFactory.create_supplier()
        response = self.client.put(
            f'/api/v1/suppliers/{supplier.id}/',
            {'name': 'Renamed Supplier', 'phone': '9988776655'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Renamed Supplier')
        response = self.client.delete(f'/api/v1/suppliers/{supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Supplier.objects.filter(pk=supplier.pk).exists())
