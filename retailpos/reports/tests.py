"""
Test suite for the Reports module
Tests: Dashboard stats, sales chart, top products, sales/payment/GST/inventory/customer reports
"""
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch
from retailpos.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from retailpos.sales.services import change_sale_status


class DashboardTests(TestCase):
    """Test dashboard endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.category = TestDataFactory.create_category(name='Groceries')
        self.rice = TestDataFactory.create_product(
            name='Rice', price=Decimal('60.00'), stock_quantity=100, category=self.category
        )
        self.oil = TestDataFactory.create_product(name='Oil', price=Decimal('150.00'), stock_quantity=5)

    def test_stats(self):
        TestDataFactory.create_sale(self.user, [(self.rice, 2)])
        TestDataFactory.create_sale(self.user, [(self.oil, 1)])
        response = self.client.get('/api/v1/dashboard/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_products'], 2)
        self.assertEqual(response.data['todays_sales'], 2)
        self.assertEqual(response.data['todays_revenue'], 270.0)
        self.assertEqual(response.data['low_stock_items'], 1)

    def test_stats_ignore_cancelled_sales(self):
        sale = TestDataFactory.create_sale(self.user, [(self.rice, 1)])
        change_sale_status(sale, 'cancelled')
        response = self.client.get('/api/v1/dashboard/stats/')
        self.assertEqual(response.data['todays_sales'], 0)

    def test_stats_fall_back_to_zeros(self):
        with patch('retailpos.reports.views.get_dashboard_stats', side_effect=RuntimeError('db down')):
            response = self.client.get('/api/v1/dashboard/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {
            'total_products': 0,
            'todays_sales': 0,
            'todays_revenue': 0.0,
            'low_stock_items': 0,
        })

    def test_sales_chart_includes_zero_days(self):
        TestDataFactory.create_sale(self.user, [(self.rice, 1)])
        response = self.client.get('/api/v1/dashboard/sales-chart/?days=7')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 7)
        today = timezone.localdate()
        self.assertEqual(response.data[0]['date'], (today - timedelta(days=6)).isoformat())
        self.assertEqual(response.data[-1]['date'], today.isoformat())
        self.assertEqual(response.data[-1]['sales'], 1)
        self.assertEqual(response.data[-1]['total'], 60.0)
        self.assertEqual(response.data[0]['sales'], 0)

    def test_top_products(self):
        TestDataFactory.create_sale(self.user, [(self.rice, 5), (self.oil, 1)])
        response = self.client.get('/api/v1/dashboard/top-products/?limit=1')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        top = response.data[0]
        self.assertEqual(top['product_id'], self.rice.id)
        self.assertEqual(top['category'], 'Groceries')
        self.assertEqual(top['sold_quantity'], 5)
        self.assertEqual(top['revenue'], 300.0)

    def test_top_products_invalid_date(self):
        response = self.client.get('/api/v1/dashboard/top-products/?date_from=yesterday')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid date format. Use YYYY-MM-DD')


class ReportsTests(TestCase):
    """Test report endpoints"""

    def setUp(self):
        self.manager = TestDataFactory.create_manager()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.manager)
        self.customer = TestDataFactory.create_customer(name='Asha')
        self.phone = TestDataFactory.create_product(
            price=Decimal('1180.00'), cost=Decimal('900.00'), mrp=Decimal('1299.00'), stock_quantity=10,
            hsn_code='8517', cgst_rate=Decimal('9.00'), sgst_rate=Decimal('9.00')
        )
        self.rice = TestDataFactory.create_product(
            price=Decimal('105.00'), cost=Decimal('80.00'), stock_quantity=0, hsn_code='1006',
            igst_rate=Decimal('5.00')
        )

    def test_cashier_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/reports/sales-summary/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_sales_summary(self):
        TestDataFactory.create_sale(self.manager, [(self.phone, 1)], customer=self.customer)
        TestDataFactory.create_sale(self.manager, [(self.phone, 2)], discount=Decimal('10'), discount_type='percentage')
        response = self.client.get('/api/v1/reports/sales-summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        summary = response.data['summary']
        self.assertEqual(summary['total_orders'], 2)
        self.assertEqual(summary['total_items_sold'], 3)
        self.assertEqual(summary['total_sales'], 1180.0 + 2124.0)
        self.assertEqual(summary['total_discount'], 236.0)
        self.assertEqual(len(response.data['daily_breakdown']), 1)

    def test_sales_summary_with_date_range(self):
        response = self.client.get('/api/v1/reports/sales-summary/?date_from=2024-01-01&date_to=2024-12-31')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['period'], {'from': '2024-01-01', 'to': '2024-12-31'})
        self.assertEqual(response.data['summary']['total_orders'], 0)

    def test_sales_summary_invalid_date(self):
        response = self.client.get('/api/v1/reports/sales-summary/?date_from=2024/01/01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid date format. Use YYYY-MM-DD')

    def test_payment_methods(self):
        TestDataFactory.create_sale(self.manager, [(self.phone, 1)], payment_method='upi')
        TestDataFactory.create_sale(self.manager, [(self.phone, 1)], payment_method='upi')
        TestDataFactory.create_sale(self.manager, [(self.phone, 1)], payment_method='cash')
        response = self.client.get('/api/v1/reports/payment-methods/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        methods = {row['payment_method']: row for row in response.data['methods']}
        self.assertEqual(methods['upi']['count'], 2)
        self.assertEqual(methods['upi']['total'], 2360.0)
        self.assertEqual(methods['cash']['count'], 1)

    def test_gst_summary(self):
        TestDataFactory.create_sale(self.manager, [(self.phone, 1)])
        self.rice.stock_quantity = 5
        self.rice.save()
        TestDataFactory.create_sale(self.manager, [(self.rice, 2)])
        response = self.client.get('/api/v1/reports/gst-summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        rows = {row['hsn_code']: row for row in response.data['rows']}

        phone = rows['8517']
        self.assertEqual(phone['gst_rate'], 18.0)
        self.assertEqual(phone['taxable_value'], 1000.0)
        self.assertEqual(phone['cgst'], 90.0)
        self.assertEqual(phone['sgst'], 90.0)
        self.assertEqual(phone['igst'], 0.0)

        rice = rows['1006']
        self.assertEqual(rice['igst'], 10.0)
        self.assertEqual(rice['cgst'], 0.0)
        self.assertEqual(rice['taxable_value'], 200.0)

        self.assertEqual(response.data['totals']['total_tax'], 190.0)

    def test_inventory_summary(self):
        response = self.client.get('/api/v1/reports/inventory-summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_products'], 2)
        self.assertEqual(response.data['total_stock_units'], 10)
        self.assertEqual(response.data['stock_value_cost'], 9000.0)
        self.assertEqual(response.data['stock_value_mrp'], 12990.0)
        self.assertEqual(response.data['out_of_stock_count'], 1)
        self.assertEqual(response.data['low_stock_count'], 2)

    def test_customer_summary(self):
        TestDataFactory.create_sale(self.manager, [(self.phone, 2)], customer=self.customer)
        other = TestDataFactory.create_customer(name='Ravi')
        cancelled = TestDataFactory.create_sale(self.manager, [(self.phone, 1)], customer=other)
        change_sale_status(cancelled, 'cancelled')
        response = self.client.get('/api/v1/reports/customers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        top = response.data['top_customers']
        self.assertEqual(len(top), 1)
        self.assertEqual(top[0]['name'], 'Asha')
        self.assertEqual(top[0]['total_spent'], 2360.0)
        self.assertEqual(top[0]['order_count'], 1)
