"""
Test suite for Commissions module
Tests: rule precedence, rounding, admin endpoints, supplier summary
"""
from decimal import Decimal

from django.test import TestCase, override_settings
from rest_framework import status

from gastro.commissions.models import CommissionSetting
from gastro.commissions.services import calculate_commission, resolve_commission, supplier_commission_summary
from gastro.core.models import AuditLog
from gastro.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class CalculateCommissionTests(TestCase):
    def test_rounds_half_up(self):
        self.assertEqual(calculate_commission(Decimal('10.10'), Decimal('5')), Decimal('0.51'))
        self.assertEqual(calculate_commission(Decimal('0.10'), Decimal('5')), Decimal('0.01'))

    def test_zero_rate(self):
        self.assertEqual(calculate_commission(Decimal('999.99'), Decimal('0')), Decimal('0.00'))


class ResolveCommissionTests(TestCase):
    """Most specific active rule wins"""

    def setUp(self):
        self.supplier = TestDataFactory.create_supplier()
        self.category = TestDataFactory.create_category()
        self.product = TestDataFactory.create_product(supplier=self.supplier, category=self.category)

    @override_settings(DEFAULT_COMMISSION_RATE='3.0')
    def test_default_when_no_rules(self):
        result = resolve_commission(self.product)
        self.assertEqual(result['rate'], Decimal('3.0'))
        self.assertEqual(result['type'], 'global')
        self.assertEqual(result['setting_id'], 0)

    def test_precedence(self):
        TestDataFactory.create_commission_setting(5)
        self.assertEqual(resolve_commission(self.product)['type'], 'global')

        TestDataFactory.create_commission_setting(4, category=self.category)
        self.assertEqual(resolve_commission(self.product)['type'], 'category')

        TestDataFactory.create_commission_setting(3, supplier=self.supplier)
        self.assertEqual(resolve_commission(self.product)['type'], 'supplier')

        TestDataFactory.create_commission_setting(2, category=self.category, supplier=self.supplier)
        self.assertEqual(resolve_commission(self.product)['rate'], Decimal('2.00'))

        TestDataFactory.create_product_commission(self.product, 1)
        result = resolve_commission(self.product)
        self.assertEqual(result['type'], 'product')
        self.assertEqual(result['rate'], Decimal('1.00'))

    def test_inactive_rules_ignored(self):
        TestDataFactory.create_commission_setting(5)
        TestDataFactory.create_commission_setting(9, supplier=self.supplier, active=False)
        self.assertEqual(resolve_commission(self.product)['rate'], Decimal('5.00'))

    def test_additional_category_matches(self):
        extra = TestDataFactory.create_category()
        self.product.additional_categories.add(extra)
        TestDataFactory.create_commission_setting(5)
        TestDataFactory.create_commission_setting(7, category=extra)
        self.assertEqual(resolve_commission(self.product)['rate'], Decimal('7.00'))

    def test_other_suppliers_rules_ignored(self):
        other = TestDataFactory.create_supplier()
        TestDataFactory.create_commission_setting(5)
        TestDataFactory.create_commission_setting(1, supplier=other)
        self.assertEqual(resolve_commission(self.product)['rate'], Decimal('5.00'))

    def test_newest_rule_wins_within_tier(self):
        TestDataFactory.create_commission_setting(5)
        newest = TestDataFactory.create_commission_setting(6)
        self.assertEqual(resolve_commission(self.product)['setting_id'], newest.id)


class SupplierSummaryTests(TestCase):
    def test_empty_catalogue(self):
        summary = supplier_commission_summary(TestDataFactory.create_supplier())
        self.assertEqual(summary['total_products'], 0)
        self.assertEqual(summary['avg_rate'], '0.0')

    def test_summary_values(self):
        supplier = TestDataFactory.create_supplier()
        category = TestDataFactory.create_category()
        TestDataFactory.create_commission_setting(5)
        first = TestDataFactory.create_product(supplier=supplier, category=category)
        TestDataFactory.create_product(supplier=supplier, category=category)
        third = TestDataFactory.create_product(supplier=supplier)
        TestDataFactory.create_product_commission(third, 8)
        TestDataFactory.create_sale(first, quantity=2, commission_rate=5)
        first.additional_categories.add(TestDataFactory.create_category())

        summary = supplier_commission_summary(supplier)
        self.assertEqual(summary['total_products'], 3)
        self.assertEqual(summary['avg_rate'], '6.0')
        self.assertEqual(summary['specific_rates_count'], 1)
        self.assertEqual(summary['most_common_rate'], '5.0')
        self.assertEqual(summary['most_common_rate_count'], 2)
        self.assertEqual(summary['categories_count'], 3)
        self.assertEqual(summary['total_commission'], Decimal('10.00'))


class CommissionAPITests(TestCase):
    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.supplier = TestDataFactory.create_supplier()
        self.category = TestDataFactory.create_category()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_supplier_cannot_manage_settings(self):
        self.client.authenticate_user(self.supplier)
        response = self.client.post('/api/v1/commission-settings/', {'rate': '5.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_setting_is_audited(self):
        response = self.client.post('/api/v1/commission-settings/', {
            'rate': '4.50', 'supplier': self.supplier.id, 'category': self.category.id
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['type'], 'specific')
        self.assertTrue(AuditLog.objects.filter(action='commission_change', model_name='CommissionSetting').exists())

    def test_rate_out_of_range(self):
        response = self.client.post('/api/v1/commission-settings/', {'rate': '150'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_setting_cannot_target_customer(self):
        customer = TestDataFactory.create_user()
        response = self.client.post('/api/v1/commission-settings/', {
            'rate': '4.00', 'supplier': customer.id
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_product_override_unique_while_active(self):
        product = TestDataFactory.create_product(supplier=self.supplier)
        first = self.client.post('/api/v1/product-commission-settings/', {
            'product': product.id, 'rate': '2.00'
        }, format='json')
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(first.data['supplier'], self.supplier.id)
        second = self.client.post('/api/v1/product-commission-settings/', {
            'product': product.id, 'rate': '3.00'
        }, format='json')
        self.assertEqual(second.status_code, status.HTTP_400_BAD_REQUEST)

    def test_product_rate_is_public(self):
        product = TestDataFactory.create_product(supplier=self.supplier)
        CommissionSetting.objects.create(rate=Decimal('6.00'), supplier=self.supplier)
        self.client.logout()
        response = self.client.get(f'/api/v1/products/{product.id}/commission-rate/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['rate'], '6.00')
        self.assertEqual(response.data['type'], 'supplier')

    def test_supplier_applicable_settings(self):
        TestDataFactory.create_commission_setting(5)
        TestDataFactory.create_commission_setting(3, supplier=self.supplier)
        TestDataFactory.create_commission_setting(1, supplier=TestDataFactory.create_supplier())
        self.client.authenticate_user(self.supplier)
        response = self.client.get('/api/v1/supplier/commission-settings/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s['type'] for s in response.data], ['supplier', 'global'])
        self.assertEqual(response.data[0]['priority'], 2)

    def test_applicable_settings_skip_unrelated_categories(self):
        own_category = TestDataFactory.create_category()
        extra_category = TestDataFactory.create_category()
        other_category = TestDataFactory.create_category()
        product = TestDataFactory.create_product(supplier=self.supplier, category=own_category)
        product.additional_categories.add(extra_category)
        global_rule = TestDataFactory.create_commission_setting(5)
        TestDataFactory.create_commission_setting(4, category=other_category)
        TestDataFactory.create_commission_setting(2, category=other_category, supplier=self.supplier)
        extra_rule = TestDataFactory.create_commission_setting(6, category=extra_category)
        own_rule = TestDataFactory.create_commission_setting(3, category=own_category, supplier=self.supplier)
        self.client.authenticate_user(self.supplier)
        response = self.client.get('/api/v1/supplier/commission-settings/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([(s['id'], s['type']) for s in response.data],
                         [(own_rule.id, 'specific'), (extra_rule.id, 'category'), (global_rule.id, 'global')])

    def test_admin_summary_needs_supplier(self):
        response = self.client.get('/api/v1/supplier/commission-summary/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get(f'/api/v1/supplier/commission-summary/?supplier={self.supplier.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
