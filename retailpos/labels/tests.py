"""
Test suite for the Labels module
Tests: Label templates, printers, print jobs and label sheet layout
"""
import base64
import json
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from retailpos.core.models import AuditLog
from retailpos.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from retailpos.labels.models import LabelTemplate, Printer, PrintJob
from retailpos.labels.sheet import build_label_sheet, sheet_config, truncate


class LabelSheetTests(TestCase):
    """Test the sheet layout functions"""

    def setUp(self):
        self.product = TestDataFactory.create_product(
            name='Premium Darjeeling Tea Leaves 250g',
            price=Decimal('1250.00'),
            mrp=Decimal('1400.00'),
            description='First flush, hand picked from the estate gardens',
            barcode='8901234567890',
        )

    def test_truncate(self):
        self.assertEqual(truncate('short', 25), 'short')
        self.assertEqual(truncate('a' * 30, 25), 'a' * 25 + '...')
        self.assertEqual(truncate(None, 10), '')

    def test_defaults(self):
        config = sheet_config()
        self.assertEqual(config['sheet_width'], Decimal('160'))
        self.assertEqual(config['columns'], 2)
        self.assertEqual(config['copies'], 1)

    def test_template_then_request_override(self):
        template = TestDataFactory.create_label_template(width=Decimal('40.00'), font_size=9, include_mrp=True)
        config = sheet_config({'font_size': '14', 'columns': 3}, template=template)
        self.assertEqual(config['label_width'], Decimal('40.00'))
        self.assertEqual(config['font_size'], 14)
        self.assertEqual(config['columns'], 3)
        self.assertTrue(config['include_mrp'])

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            sheet_config({'columns': 'two'})
        with self.assertRaises(ValueError):
            sheet_config({'label_width': '0'})

    def test_copies_capped(self):
        self.assertEqual(sheet_config({'copies': 500})['copies'], 100)

    def test_build_sheet(self):
        config = sheet_config({'copies': 3, 'include_description': True, 'include_mrp': True})
        sheet = build_label_sheet([self.product], config)
        self.assertEqual(sheet['total_labels'], 3)
        self.assertEqual(sheet['grid_columns'], 'repeat(2, 1fr)')
        label = sheet['labels'][0]
        self.assertEqual(label['name'], 'Premium Darjeeling Tea Le...')
        self.assertTrue(label['description'].endswith('...'))
        self.assertEqual(label['price'], '₹1,250.00')
        self.assertEqual(label['mrp'], '₹1,400.00')
        self.assertEqual(label['barcode_value'], '8901234567890')
        self.assertIn('<svg', label['barcode_svg'])

    def test_build_sheet_without_barcode(self):
        config = sheet_config({'include_barcode': 'false', 'include_price': False})
        label = build_label_sheet([self.product], config)['labels'][0]
        self.assertIsNone(label['barcode_svg'])
        self.assertIsNone(label['price'])


class LabelTemplateAPITests(TestCase):
    """Test label template endpoints"""

    def setUp(self):
        self.manager = TestDataFactory.create_manager()
        self.cashier = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.manager)

    def test_create_template(self):
        data = {'name': 'Shelf 50x30', 'width': '50.00', 'height': '30.00', 'font_size': 10}
        response = self.client.post('/api/v1/label-templates/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Shelf 50x30')

    def test_create_template_invalid_size(self):
        data = {'name': 'Broken', 'width': '0', 'height': '30.00'}
        response = self.client.post('/api/v1/label-templates/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('width', response.data)

    def test_cashier_can_list_but_not_create(self):
        TestDataFactory.create_label_template()
        self.client.authenticate_user(self.cashier)
        response = self.client.get('/api/v1/label-templates/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        response = self.client.post('/api/v1/label-templates/', {'name': 'X', 'width': 10, 'height': 10}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_single_default(self):
        first = TestDataFactory.create_label_template(is_default=True)
        second = TestDataFactory.create_label_template(is_default=True)
        first.refresh_from_db()
        self.assertFalse(first.is_default)
        self.assertTrue(second.is_default)

    def test_update_and_delete(self):
        template = TestDataFactory.create_label_template()
        response = self.client.patch(f'/api/v1/label-templates/{template.id}/', {'font_size': 8}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['font_size'], 8)
        response = self.client.delete(f'/api/v1/label-templates/{template.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(LabelTemplate.objects.filter(pk=template.pk).exists())

    def test_export_template(self):
        template = TestDataFactory.create_label_template(name='Jewellery Tag')
        response = self.client.get(f'/api/v1/label-templates/{template.id}/export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('template_Jewellery_Tag.json', response['Content-Disposition'])
        data = json.loads(response.content)
        self.assertEqual(data['name'], 'Jewellery Tag')
        self.assertNotIn('id', data)
        self.assertNotIn('is_default', data)

    def test_import_renames_duplicates(self):
        TestDataFactory.create_label_template(name='Tag')
        payload = {'name': 'Tag', 'width': '40.00', 'height': '25.00'}
        response = self.client.post('/api/v1/label-templates/import/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Tag (imported)')
        response = self.client.post('/api/v1/label-templates/import/', payload, format='json')
        self.assertEqual(response.data['name'], 'Tag (imported 2)')

    def test_import_invalid(self):
        response = self.client.post('/api/v1/label-templates/import/', {'name': 'No size'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid template data')


class PrinterAPITests(TestCase):
    """Test printer endpoints"""

    def setUp(self):
        self.manager = TestDataFactory.create_manager()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.manager)

    def test_create_printer(self):
        data = {'name': 'Counter TSC', 'connection': 'usb'}
        response = self.client.post('/api/v1/printers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['printer_type'], 'thermal')

    def test_network_printer_requires_ip(self):
        data = {'name': 'Back office', 'connection': 'network'}
        response = self.client.post('/api/v1/printers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('ip_address', response.data)

    def test_printer_test_returns_commands(self):
        printer = TestDataFactory.create_printer(connection='network', ip_address='192.168.1.50', port=9100)
        response = self.client.post(f'/api/v1/printers/{printer.id}/test/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['connection_type'], 'network')
        commands = base64.b64decode(response.data['commands'])
        self.assertTrue(commands.startswith(b'\x1b@'))

    def test_printer_test_missing(self):
        response = self.client.post('/api/v1/printers/99999/test/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Printer not found')


class PrintLabelsAPITests(TestCase):
    """Test print jobs and label sheets"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.template = TestDataFactory.create_label_template(width=Decimal('50.00'), height=Decimal('30.00'))
        self.products = [TestDataFactory.create_product() for _ in range(3)]

    def test_print_labels(self):
        printer = TestDataFactory.create_printer(is_default=True)
        data = {
            'template_id': self.template.id,
            'product_ids': [p.id for p in self.products],
            'quantity': 2,
        }
        response = self.client.post('/api/v1/print-labels/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Print job created successfully')
        job = response.data['print_job']
        self.assertEqual(job['total_labels'], 6)
        self.assertEqual(job['paper_size'], '50x30')
        self.assertEqual(job['printer_name'], printer.name)
        self.assertEqual(job['status'], 'completed')
        self.assertTrue(AuditLog.objects.filter(action='label_print').exists())

    def test_print_labels_no_products(self):
        data = {'template_id': self.template.id, 'product_ids': []}
        response = self.client.post('/api/v1/print-labels/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'No products selected')

    def test_print_labels_missing_template(self):
        data = {'template_id': 99999, 'product_ids': [self.products[0].id]}
        response = self.client.post('/api/v1/print-labels/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Template not found')

    def test_print_labels_quantity_limit(self):
        data = {'template_id': self.template.id, 'product_ids': [self.products[0].id], 'quantity': 101}
        response = self.client.post('/api/v1/print-labels/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_print_job_list_and_sheet(self):
        data = {'template_id': self.template.id, 'product_ids': [self.products[0].id]}
        self.client.post('/api/v1/print-labels/', data, format='json')
        response = self.client.get('/api/v1/print-jobs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

        job = PrintJob.objects.get()
        response = self.client.get(f'/api/v1/print-jobs/{job.id}/sheet/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn(self.products[0].sku.encode(), response.content)

    def test_label_sheet(self):
        data = {
            'product_ids': [p.id for p in self.products],
            'columns': 3,
            'copies': 2,
        }
        response = self.client.post('/api/v1/labels/sheet/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn(b'repeat(3, 1fr)', response.content)
        self.assertEqual(response.content.count(b'class="product-label"'), 6)

    def test_label_sheet_bad_config(self):
        data = {'product_ids': [self.products[0].id], 'columns': 0}
        response = self.client.post('/api/v1/labels/sheet/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_label_sheet_no_products(self):
        response = self.client.post('/api/v1/labels/sheet/', {'product_ids': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/labels/sheet/', {'product_ids': [99999]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
