"""
Test suite for the Core module
Tests: Authentication, users and roles, settings, audit logs, formatting, validators and backups
"""
import json
import os
import shutil
import tempfile
from io import StringIO
from pathlib import Path
from decimal import Decimal
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.core.management.base import CommandError
from django.template import Context, Template
from django.test import TestCase, override_settings
from rest_framework import status
from retailpos.core.backup import (
    BackupManager, BackupError, JSON_EXPORT_FILENAME, MANIFEST_FILENAME,
    RESTORE_SCRIPT_FILENAME, CONFIG_DIRNAME, IMAGES_DIRNAME,
)
from retailpos.core.formatting import (
    format_inr, parse_inr, group_indian, number_to_words, amount_in_words, to_decimal,
)
from retailpos.core.models import AuditLog, Setting, User
from retailpos.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from retailpos.core.utils import create_audit_log, generate_order_number, get_receipt_settings
from retailpos.core.validators import validate_gstin, validate_hsn_code, validate_phone, validate_rate
from retailpos.sales.models import Sale, SaleItem

STRONG_PASSWORD = 'Counter!Pass2024'


class AuthenticationTests(TestCase):
    """Test login, registration, refresh and the current user endpoint"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(username='cashier1', password=STRONG_PASSWORD)

    def test_login_returns_tokens_and_user(self):
        response = self.client.post(
            '/api/v1/auth/login/',
            {'username': 'cashier1', 'password': STRONG_PASSWORD},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['username'], 'cashier1')
        self.assertEqual(response.data['user']['role'], 'cashier')

    def test_login_wrong_password(self):
        response = self.client.post(
            '/api/v1/auth/login/',
            {'username': 'cashier1', 'password': 'wrong'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh(self):
        login = self.client.post(
            '/api/v1/auth/login/',
            {'username': 'cashier1', 'password': STRONG_PASSWORD},
            format='json'
        )
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_refresh_with_garbage_token(self):
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': 'not-a-token'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_register_creates_cashier(self):
        data = {
            'username': 'newcashier',
            'email': 'new@shop.in',
            'password': STRONG_PASSWORD,
            'password_confirm': STRONG_PASSWORD,
            'role': 'admin',
        }
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertEqual(User.objects.get(username='newcashier').role, User.ROLE_CASHIER)

    def test_register_password_mismatch(self):
        data = {
            'username': 'mismatch',
            'password': STRONG_PASSWORD,
            'password_confirm': STRONG_PASSWORD + 'x',
        }
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(User.objects.filter(username='mismatch').exists())

    def test_register_duplicate_username(self):
        data = {
            'username': 'cashier1',
            'password': STRONG_PASSWORD,
            'password_confirm': STRONG_PASSWORD,
        }
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('username', response.data)

    def test_me_requires_auth(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_capabilities(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_admin'])
        self.assertFalse(response.data['can_access_reports'])
        self.assertFalse(response.data['can_manage_users'])

        self.client.authenticate_user(TestDataFactory.create_manager())
        response = self.client.get('/api/v1/auth/me/')
        self.assertTrue(response.data['can_access_reports'])
        self.assertTrue(response.data['can_manage_inventory'])
        self.assertFalse(response.data['can_manage_settings'])

        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get('/api/v1/auth/me/')
        self.assertTrue(response.data['is_admin'])
        self.assertTrue(response.data['can_manage_users'])


class UserManagementTests(TestCase):
    """Test user CRUD, status and role endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.manager = TestDataFactory.create_manager()
        self.cashier = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_list_users_with_role_filter(self):
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 3)
        response = self.client.get('/api/v1/users/?role=manager')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['id'], self.manager.id)

    def test_cashier_cannot_list(self):
        self.client.authenticate_user(self.cashier)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_creates_user(self):
        data = {
            'username': 'floor_manager',
            'password': STRONG_PASSWORD,
            'password_confirm': STRONG_PASSWORD,
            'role': 'manager',
        }
        response = self.client.post('/api/v1/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], 'manager')
        self.assertTrue(User.objects.get(username='floor_manager').check_password(STRONG_PASSWORD))

    def test_manager_cannot_create_user(self):
        self.client.authenticate_user(self.manager)
        data = {'username': 'x', 'password': STRONG_PASSWORD, 'password_confirm': STRONG_PASSWORD}
        response = self.client.post('/api/v1/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Only admins can create users')

    def test_roles(self):
        response = self.client.get('/api/v1/users/roles/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(set(response.data), {'admin', 'manager', 'cashier'})

    def test_cashier_sees_only_self(self):
        self.client.authenticate_user(self.cashier)
        response = self.client.get(f'/api/v1/users/{self.cashier.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cashier_cannot_promote_self(self):
        self.client.authenticate_user(self.cashier)
        response = self.client.patch(f'/api/v1/users/{self.cashier.id}/', {'role': 'admin'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.cashier.refresh_from_db()
        self.assertEqual(self.cashier.role, User.ROLE_CASHIER)

    def test_cashier_updates_own_profile(self):
        self.client.authenticate_user(self.cashier)
        response = self.client.patch(f'/api/v1/users/{self.cashier.id}/', {'first_name': 'Kiran'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['first_name'], 'Kiran')

    def test_delete_user(self):
        response = self.client.delete(f'/api/v1/users/{self.cashier.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=self.cashier.pk).exists())

    def test_cannot_delete_self(self):
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_manager_cannot_delete(self):
        self.client.authenticate_user(self.manager)
        response = self.client.delete(f'/api/v1/users/{self.cashier.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_status_requires_boolean(self):
        response = self.client.patch(f'/api/v1/users/{self.cashier.id}/status/', {'is_active': 'no'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.patch(f'/api/v1/users/{self.cashier.id}/status/', {'is_active': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_deactivate_user(self):
        response = self.client.patch(f'/api/v1/users/{self.cashier.id}/status/', {'is_active': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_active'])
        self.assertTrue(AuditLog.objects.filter(action='status_change', object_id=str(self.cashier.id)).exists())

    def test_cannot_deactivate_self(self):
        response = self.client.patch(f'/api/v1/users/{self.admin.id}/status/', {'is_active': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_change_role(self):
        response = self.client.patch(f'/api/v1/users/{self.cashier.id}/role/', {'role': 'manager'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], 'manager')
        self.assertTrue(AuditLog.objects.filter(action='role_change').exists())

    def test_change_role_invalid(self):
        response = self.client.patch(f'/api/v1/users/{self.cashier.id}/role/', {'role': 'owner'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_manager_cannot_change_role(self):
        self.client.authenticate_user(self.manager)
        response = self.client.patch(f'/api/v1/users/{self.cashier.id}/role/', {'role': 'admin'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class SettingsTests(TestCase):
    """Test generic settings and receipt settings"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.cashier = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_settings_admin_only(self):
        response = self.client.post('/api/v1/settings/', {'key': 'currency', 'value': 'INR'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.client.authenticate_user(self.cashier)
        response = self.client.get('/api/v1/settings/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_receipt_defaults(self):
        self.client.authenticate_user(self.cashier)
        response = self.client.get('/api/v1/settings/receipt/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['business_name'], 'My Retail Store')
        self.assertTrue(response.data['show_qr_code'])

    def test_update_receipt_settings(self):
        data = {
            'business_name': '  Lakshmi Stores  ',
            'tax_id': '27aapfu0939f1zv',
            'show_qr_code': False,
            'receipt_footer': 'Visit again',
        }
        response = self.client.put('/api/v1/settings/receipt/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['business_name'], 'Lakshmi Stores')
        self.assertEqual(response.data['tax_id'], '27AAPFU0939F1ZV')
        self.assertFalse(response.data['show_qr_code'])

        stored = get_receipt_settings()
        self.assertEqual(stored['receipt_footer'], 'Visit again')
        self.assertFalse(stored['show_qr_code'])
        self.assertTrue(Setting.objects.filter(key='receipt.business_name').exists())

    def test_omitted_fields_keep_stored_values(self):
        self.client.put('/api/v1/settings/receipt/', {'business_name': 'Shop', 'show_qr_code': False}, format='json')
        response = self.client.put('/api/v1/settings/receipt/', {'business_name': 'Shop & Co'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['business_name'], 'Shop & Co')
        self.assertFalse(response.data['show_qr_code'])
        self.assertFalse(get_receipt_settings()['show_qr_code'])

    def test_receipt_settings_invalid_gstin(self):
        data = {'business_name': 'Shop', 'tax_id': '27AAPFU0939'}
        response = self.client.put('/api/v1/settings/receipt/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('tax_id', response.data)

    def test_receipt_settings_blank_name(self):
        response = self.client.put('/api/v1/settings/receipt/', {'business_name': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_receipt_settings_cashier_forbidden(self):
        self.client.authenticate_user(self.cashier)
        response = self.client.put('/api/v1/settings/receipt/', {'business_name': 'Shop'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Admin access required.')


class AuditLogTests(TestCase):
    """Test audit log helpers and endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.cashier = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()

    def test_create_audit_log_skips_missing_fields(self):
        self.assertIsNone(create_audit_log(action='create', model_name='Product'))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_create_audit_log_with_user(self):
        log = create_audit_log(
            user=self.cashier, action='create', model_name='Product', object_id=12,
            object_name='Rice', object_reference='SKU-1'
        )
        self.assertEqual(log.object_id, '12')
        self.assertEqual(log.user, self.cashier)
        self.assertEqual(log.changes, {})

    def test_cashier_sees_own_logs(self):
        create_audit_log(user=self.cashier, action='create', model_name='Customer', object_id=1)
        create_audit_log(user=self.admin, action='delete', model_name='Product', object_id=2)
        self.client.authenticate_user(self.cashier)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/audit-logs/?model=Product')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['action'], 'delete')

    def test_detail_of_other_users_log_forbidden(self):
        log = create_audit_log(user=self.admin, action='delete', model_name='Product', object_id=2)
        self.client.authenticate_user(self.cashier)
        response = self.client.get(f'/api/v1/audit-logs/{log.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_invalid_date_filter(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/audit-logs/?date_from=01-01-2024')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid date format. Use YYYY-MM-DD')


class FormattingTests(TestCase):
    """Test rupee formatting and amount in words"""

    def test_group_indian(self):
        self.assertEqual(group_indian('999'), '999')
        self.assertEqual(group_indian('1000'), '1,000')
        self.assertEqual(group_indian('100000'), '1,00,000')
        self.assertEqual(group_indian('12345678'), '1,23,45,678')

    def test_format_inr(self):
        self.assertEqual(format_inr(12345678.9), '₹1,23,45,678.90')
        self.assertEqual(format_inr('0'), '₹0.00')
        self.assertEqual(format_inr(Decimal('-1500.5')), '-₹1,500.50')
        self.assertEqual(format_inr(1180, symbol=False), '1,180.00')

    def test_parse_inr(self):
        self.assertEqual(parse_inr('₹1,23,456.78'), Decimal('123456.78'))
        self.assertEqual(parse_inr('Rs. 2,500'), Decimal('2500.00'))
        self.assertEqual(parse_inr(format_inr('98765.43')), Decimal('98765.43'))
        with self.assertRaises(ValueError):
            parse_inr('')
        with self.assertRaises(ValueError):
            parse_inr('₹abc')

    def test_to_decimal(self):
        self.assertEqual(to_decimal('10.005'), Decimal('10.01'))
        self.assertEqual(to_decimal(None), Decimal('0.00'))

    def test_number_to_words(self):
        self.assertEqual(number_to_words(0), 'Zero')
        self.assertEqual(number_to_words(15), 'Fifteen')
        self.assertEqual(number_to_words(250000), 'Two Lakh Fifty Thousand')
        self.assertEqual(
            number_to_words(12345678),
            'One Crore Twenty Three Lakh Forty Five Thousand Six Hundred Seventy Eight'
        )
        self.assertEqual(number_to_words(-7), 'Minus Seven')

    def test_amount_in_words(self):
        self.assertEqual(amount_in_words(1250.50), 'One Thousand Two Hundred Fifty Rupees and Fifty Paise')
        self.assertEqual(amount_in_words(100), 'One Hundred Rupees')

    def test_template_filters(self):
        rendered = Template('{% load pos_formatting %}{{ value|inr }} / {{ value|amount_words }}').render(
            Context({'value': Decimal('1180')})
        )
        self.assertEqual(rendered, '₹1,180.00 / One Thousand One Hundred Eighty Rupees')


class ValidatorTests(TestCase):
    """Test GSTIN, HSN, phone and rate validators"""

    def test_gstin(self):
        validate_gstin('27AAPFU0939F1ZV')
        validate_gstin('29abcde1234f1z5')
        for bad in ('', '27AAPFU0939F1Z', '27AAPFU0939F0ZV', 'AAAAAAAAAAAAAAA'):
            with self.assertRaises(ValidationError):
                validate_gstin(bad)

    def test_hsn_code(self):
        for good in ('1006', '851712', '85171200'):
            validate_hsn_code(good)
        for bad in ('100', '10061', '85AB'):
            with self.assertRaises(ValidationError):
                validate_hsn_code(bad)

    def test_phone(self):
        validate_phone('+91 98450-12345')
        validate_phone('9876543210')
        with self.assertRaises(ValidationError):
            validate_phone('98450')
        with self.assertRaises(ValidationError):
            validate_phone('98450 abc 123')

    def test_rate(self):
        validate_rate(None)
        validate_rate(Decimal('0'))
        validate_rate(Decimal('28'))
        with self.assertRaises(ValidationError):
            validate_rate(Decimal('-1'))
        with self.assertRaises(ValidationError):
            validate_rate(Decimal('100.01'))


class OrderNumberTests(TestCase):
    """Test order number generation"""

    def test_prefix_and_uniqueness(self):
        user = TestDataFactory.create_user()
        product = TestDataFactory.create_product(stock_quantity=10)
        sale = TestDataFactory.create_sale(user, [(product, 1)])
        number = generate_order_number(Sale, 'ORD')
        self.assertTrue(number.startswith('ORD-'))
        self.assertNotEqual(number, sale.order_number)

        Sale.objects.filter(pk=sale.pk).update(order_number=number)
        self.assertNotEqual(generate_order_number(Sale, 'ORD'), number)


class BackupTests(TestCase):
    """Test the backup manager and management command"""

    def setUp(self):
        self.tmp = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, self.tmp, ignore_errors=True)
        self.media = self.tmp / 'media'
        (self.media / 'products').mkdir(parents=True)
        (self.media / 'products' / 'rice.jpg').write_bytes(b'fake image')
        self.backup_root = self.tmp / 'backups'
        self.override = override_settings(
            BACKUP_ROOT=self.backup_root,
            MEDIA_ROOT=self.media,
            BASE_DIR=self.tmp,
            BACKUP_CONFIG_FILES=['.env'],
        )
        self.override.enable()
        self.addCleanup(self.override.disable)
        (self.tmp / '.env').write_text('DEBUG=False\n')
        self.manager = BackupManager()

    def test_create_backup(self):
        Setting.objects.create(key='currency', value='INR')
        path = self.manager.create(name='nightly')
        self.assertTrue((path / JSON_EXPORT_FILENAME).is_file())
        self.assertTrue((path / CONFIG_DIRNAME / '.env').is_file())
        self.assertTrue((path / IMAGES_DIRNAME / 'products' / 'rice.jpg').is_file())

        script = path / RESTORE_SCRIPT_FILENAME
        self.assertTrue(script.is_file())
        self.assertEqual(os.stat(script).st_mode & 0o777, 0o755)

        manifest = json.loads((path / MANIFEST_FILENAME).read_text())
        self.assertEqual(manifest['backup_name'], 'nightly')
        self.assertIn('json_export', manifest['components'])
        self.assertEqual(manifest['components']['configuration']['files'], ['.env'])

        export = json.loads((path / JSON_EXPORT_FILENAME).read_text())
        self.assertEqual(export['version'], '1.0.0')
        keys = [row['key'] for row in export['tables']['settings']]
        self.assertIn('currency', keys)

    def test_create_without_optional_parts(self):
        path = self.manager.create(name='lean', include_json=False, include_images=False)
        self.assertFalse((path / JSON_EXPORT_FILENAME).exists())
        self.assertFalse((path / IMAGES_DIRNAME).exists())

    def test_duplicate_and_invalid_names(self):
        self.manager.create(name='dup', include_images=False)
        with self.assertRaises(BackupError):
            self.manager.create(name='dup')
        for bad in ('..', '../escape', 'a/b'):
            with self.assertRaises(BackupError):
                self.manager.create(name=bad)

    def test_list_delete_prune(self):
        for name in ('first', 'second', 'third'):
            self.manager.create(name=name, include_images=False)
        names = [backup['name'] for backup in self.manager.list()]
        self.assertEqual(names, ['third', 'second', 'first'])

        self.manager.delete('second')
        self.assertEqual([b['name'] for b in self.manager.list()], ['third', 'first'])
        with self.assertRaises(BackupError):
            self.manager.delete('second')

        self.assertEqual(self.manager.prune(1), ['first'])
        self.assertEqual([b['name'] for b in self.manager.list()], ['third'])

    def test_list_empty_root(self):
        self.assertEqual(self.manager.list(), [])

    def test_restore_json(self):
        Setting.objects.create(key='currency', value='INR')
        self.manager.create(name='before', include_images=False)
        Setting.objects.filter(key='currency').update(value='USD')
        Setting.objects.create(key='temporary', value='1')

        restored = self.manager.restore_json('before', tables=['settings'])
        self.assertEqual(restored, {'settings': 1})
        self.assertEqual(Setting.objects.get(key='currency').value, 'INR')
        self.assertFalse(Setting.objects.filter(key='temporary').exists())

    def test_restore_with_dangling_rows(self):
        user = TestDataFactory.create_user()
        product = TestDataFactory.create_product(stock_quantity=5)
        sale = TestDataFactory.create_sale(user, [(product, 1)])
        self.manager.create(name='with-sale', include_images=False)
        sale.delete()

        with self.assertRaises(BackupError):
            self.manager.restore_json('with-sale', tables=['sale_items'])
        self.assertFalse(SaleItem.objects.exists())

        with self.assertRaises(CommandError):
            call_command('backup', 'restore-json', 'with-sale', '--tables', 'sale_items', stdout=StringIO())

    def test_restore_without_export(self):
        self.manager.create(name='nojson', include_json=False, include_images=False)
        with self.assertRaises(BackupError):
            self.manager.restore_json('nojson')

    def test_command_create_and_list(self):
        out = StringIO()
        call_command('backup', 'create', '--name', 'cli', '--no-images', stdout=out)
        self.assertIn('Backup completed successfully', out.getvalue())

        out = StringIO()
        call_command('backup', 'list', stdout=out)
        self.assertIn('cli', out.getvalue())

    def test_command_delete_requires_name(self):
        with self.assertRaises(CommandError):
            call_command('backup', 'delete', stdout=StringIO())
        with self.assertRaises(CommandError):
            call_command('backup', 'delete', 'missing', stdout=StringIO())

    def test_command_prune(self):
        for name in ('a', 'b'):
            self.manager.create(name=name, include_images=False)
        out = StringIO()
        call_command('backup', 'prune', '--keep', '1', stdout=out)
        self.assertIn('Pruned 1 backup(s)', out.getvalue())
        self.assertEqual(len(self.manager.list()), 1)
