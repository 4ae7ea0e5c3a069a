"""
Test suite for Core module
Tests: registration, login, current user, admin user management, audit logs, helpers
"""
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth.models import AnonymousUser
from django.test import TestCase, RequestFactory
from rest_framework import status

from gastro.comparison.models import ProductSearch
from gastro.core.cache_signals import suspend_cache_signals
from gastro.core.models import User, AuditLog
from gastro.core.permissions import IsAdminRole, IsSupplierRole, IsSupplierOrAdmin, IsAdminOrReadOnly
from gastro.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from gastro.core.utils import parse_bool, parse_int, parse_decimal, parse_id_list, create_audit_log
from gastro.inventory.services import set_stock


class RegistrationTests(TestCase):
    """Test account registration and login"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_register_customer(self):
        data = {
            'username': 'buyer1',
            'email': 'buyer1@test.com',
            'password': 'Str0ng!Passw0rd',
            'password_confirm': 'Str0ng!Passw0rd',
            'name': 'Buyer One',
        }
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['role'], 'user')
        self.assertTrue(AuditLog.objects.filter(action='register', object_id=str(response.data['user']['id'])).exists())

    def test_register_supplier_requires_company_name(self):
        data = {
            'username': 'supp1',
            'email': 'supp1@test.com',
            'password': 'Str0ng!Passw0rd',
            'password_confirm': 'Str0ng!Passw0rd',
            'role': 'supplier',
        }
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('company_name', response.data)

    def test_register_cannot_self_assign_admin(self):
        data = {
            'username': 'sneaky',
            'email': 'sneaky@test.com',
            'password': 'Str0ng!Passw0rd',
            'password_confirm': 'Str0ng!Passw0rd',
            'role': 'admin',
        }
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(User.objects.filter(username='sneaky').exists())

    def test_register_password_mismatch(self):
        data = {
            'username': 'buyer2',
            'email': 'buyer2@test.com',
            'password': 'Str0ng!Passw0rd',
            'password_confirm': 'Different!Passw0rd',
        }
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login_returns_user(self):
        user = TestDataFactory.create_user(username='loginuser', password='Str0ng!Passw0rd')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'loginuser', 'password': 'Str0ng!Passw0rd'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['id'], user.id)
        self.assertIn('access', response.data)

    def test_login_wrong_password(self):
        TestDataFactory.create_user(username='loginuser2', password='Str0ng!Passw0rd')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'loginuser2', 'password': 'wrong'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class CurrentUserTests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_me_requires_auth(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_supplier_flags(self):
        supplier = TestDataFactory.create_supplier()
        self.client.authenticate_user(supplier)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_supplier'])
        self.assertFalse(response.data['is_admin'])
        self.assertTrue(response.data['can_access_supplier_dashboard'])
        self.assertFalse(response.data['can_access_admin_dashboard'])

    def test_me_admin_flags(self):
        admin = TestDataFactory.create_admin()
        self.client.authenticate_user(admin)
        response = self.client.get('/api/v1/auth/me/')
        self.assertTrue(response.data['is_admin'])
        self.assertTrue(response.data['can_access_admin_dashboard'])
        self.assertTrue(response.data['can_access_supplier_dashboard'])


class UserAdminTests(TestCase):
    """Test admin-only user management"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_non_admin_cannot_list_users(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user())
        response = client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_users_by_role(self):
        TestDataFactory.create_supplier()
        TestDataFactory.create_user()
        response = self.client.get('/api/v1/users/?role=supplier')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['role'], 'supplier')

    def test_change_role_is_audited(self):
        user = TestDataFactory.create_user()
        response = self.client.patch(f'/api/v1/users/{user.id}/', {'role': 'supplier'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertEqual(user.role, 'supplier')
        log = AuditLog.objects.get(action='role_change', object_id=str(user.id))
        self.assertEqual(log.changes['role'], {'old': 'user', 'new': 'supplier'})
        self.assertEqual(log.user, self.admin)

    def test_admin_can_create_admin(self):
        response = self.client.post('/api/v1/users/', {
            'username': 'admin2',
            'email': 'admin2@test.com',
            'password': 'Str0ng!Passw0rd',
            'password_confirm': 'Str0ng!Passw0rd',
            'role': 'admin',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(username='admin2').role, 'admin')

    def test_audit_log_list(self):
        create_audit_log(user=self.admin, action='update', model_name='Product', object_id=1)
        response = self.client.get('/api/v1/audit-logs/?model_name=Product')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)


class UtilsTests(TestCase):
    def test_parse_bool(self):
        self.assertTrue(parse_bool('true'))
        self.assertFalse(parse_bool('0'))
        self.assertIsNone(parse_bool(None))
        self.assertFalse(parse_bool('', False))

    def test_parse_int_bounds(self):
        self.assertEqual(parse_int('500', 50, minimum=1, maximum=200), 200)
        self.assertEqual(parse_int('abc', 50), 50)
        self.assertEqual(parse_int('-3', 0, minimum=0), 0)

    def test_parse_decimal_rejects_nan(self):
        self.assertIsNone(parse_decimal('NaN'))
        self.assertEqual(parse_decimal('12.5'), Decimal('12.5'))

    def test_parse_id_list_skips_junk(self):
        self.assertEqual(parse_id_list('1, 2,x,3'), [1, 2, 3])

    def test_audit_log_missing_fields_skipped(self):
        self.assertIsNone(create_audit_log(action='update', model_name='Product'))

    def test_display_name(self):
        supplier = TestDataFactory.create_supplier(company_name='Frio Ltda')
        self.assertEqual(supplier.display_name, 'Frio Ltda')
        self.assertTrue(supplier.is_supplier)


class PermissionTests(TestCase):
    def setUp(self):
        self.factory = RequestFactory()
        self.customer = TestDataFactory.create_user()
        self.supplier = TestDataFactory.create_supplier()
        self.admin = TestDataFactory.create_admin()
        self.superuser = TestDataFactory.create_user(is_superuser=True)

    def _allowed(self, permission, user, method='get'):
        request = getattr(self.factory, method)('/')
        request.user = user
        return permission().has_permission(request, None)

    def test_role_checks(self):
        self.assertTrue(self._allowed(IsSupplierRole, self.supplier))
        self.assertFalse(self._allowed(IsSupplierRole, self.admin))
        self.assertTrue(self._allowed(IsAdminRole, self.superuser))
        self.assertFalse(self._allowed(IsAdminRole, self.supplier))
        self.assertTrue(self._allowed(IsSupplierOrAdmin, self.admin))
        self.assertFalse(self._allowed(IsSupplierOrAdmin, self.customer))
        self.assertFalse(self._allowed(IsSupplierOrAdmin, AnonymousUser()))

    def test_read_only_for_non_admins(self):
        self.assertTrue(self._allowed(IsAdminOrReadOnly, AnonymousUser()))
        self.assertFalse(self._allowed(IsAdminOrReadOnly, self.supplier, method='post'))
        self.assertTrue(self._allowed(IsAdminOrReadOnly, self.admin, method='post'))


class CacheSignalTests(TestCase):
    """Cached dashboards and comparison stats are dropped when their sources change"""

    @patch('gastro.core.cache_signals.invalidate_dashboard_cache')
    def test_stock_change_invalidates_dashboards(self, mock_invalidate):
        product = TestDataFactory.create_product(stock=5)
        mock_invalidate.reset_mock()
        with self.captureOnCommitCallbacks(execute=True):
            set_stock(product, quantity=1)
        self.assertTrue(mock_invalidate.called)

    @patch('gastro.core.cache_signals.invalidate_dashboard_cache')
    def test_product_change_invalidates_dashboards(self, mock_invalidate):
        with self.captureOnCommitCallbacks(execute=True):
            TestDataFactory.create_product()
        self.assertTrue(mock_invalidate.called)

    @patch('gastro.core.cache_signals.invalidate_comparison_cache')
    def test_search_invalidates_comparison_stats(self, mock_invalidate):
        user = TestDataFactory.create_user()
        with self.captureOnCommitCallbacks(execute=True):
            ProductSearch.objects.create(user=user, query='forno combinado')
        self.assertTrue(mock_invalidate.called)

    @patch('gastro.core.cache_signals.invalidate_dashboard_cache')
    def test_suspended_signals_skip_invalidation(self, mock_invalidate):
        product = TestDataFactory.create_product(stock=5)
        mock_invalidate.reset_mock()
        with self.captureOnCommitCallbacks(execute=True):
            with suspend_cache_signals():
                set_stock(product, quantity=2)
        self.assertFalse(mock_invalidate.called)
