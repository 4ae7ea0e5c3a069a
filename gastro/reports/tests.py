"""
Test suite for Reports module
Tests: admin dashboard, supplier dashboard, marketplace stats, date range parsing
"""
from datetime import date
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from gastro.comparison.services import compare_group
from gastro.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from gastro.reports.services import admin_dashboard, supplier_dashboard, marketplace_stats


class AdminDashboardTests(TestCase):
    def setUp(self):
        self.supplier = TestDataFactory.create_supplier(company_name='Inox Brasil')
        self.other = TestDataFactory.create_supplier()
        self.buyer = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(supplier=self.supplier, price=Decimal('500.00'))
        self.cheap = TestDataFactory.create_product(supplier=self.other, price=Decimal('50.00'))
        TestDataFactory.create_sale(self.product, quantity=2, buyer=self.buyer)
        TestDataFactory.create_sale(self.cheap, quantity=3, buyer=self.buyer)
        self.client = AuthenticatedAPIClient()

    def test_totals(self):
        data = admin_dashboard()
        self.assertEqual(data['total_sales'], 2)
        self.assertEqual(data['total_revenue'], '1150.00')
        self.assertEqual(data['total_commission'], '57.50')
        self.assertEqual(data['total_units'], 5)
        self.assertEqual(data['supplier_count'], 2)
        self.assertEqual(data['customer_count'], 1)
        self.assertEqual(data['product_count'], 2)

    def test_top_lists(self):
        data = admin_dashboard()
        self.assertEqual(data['top_suppliers'][0]['supplier_name'], 'Inox Brasil')
        self.assertEqual(data['top_products'][0]['product_id'], self.cheap.id)
        self.assertEqual(data['sales_by_month'][-1]['month'], timezone.now().strftime('%Y-%m'))

    def test_date_range_excludes_sales(self):
        data = admin_dashboard(date_from=date(2000, 1, 1), date_to=date(2000, 1, 31))
        self.assertEqual(data['total_sales'], 0)
        self.assertEqual(data['total_revenue'], '0.00')

    def test_endpoint_admin_only(self):
        self.client.authenticate_user(self.supplier)
        response = self.client.get('/api/v1/reports/admin-dashboard/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get('/api/v1/reports/admin-dashboard/?date_from=2024-01-01&date_to=2099-12-31')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_sales'], 2)

    def test_invalid_dates(self):
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get('/api/v1/reports/admin-dashboard/?date_from=2024-13-01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/reports/admin-dashboard/?date_from=2024-05-01&date_to=2024-01-01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class SupplierDashboardTests(TestCase):
    def setUp(self):
        self.supplier = TestDataFactory.create_supplier()
        self.product = TestDataFactory.create_product(supplier=self.supplier, price=Decimal('200.00'))
        TestDataFactory.create_product(supplier=self.supplier, stock=0)
        TestDataFactory.create_product(supplier=self.supplier, active=False)
        TestDataFactory.create_sale(self.product, quantity=2, commission_rate=10)
        TestDataFactory.create_sale(TestDataFactory.create_product(), quantity=1)
        self.client = AuthenticatedAPIClient()

    def test_supplier_figures(self):
        data = supplier_dashboard(self.supplier)
        self.assertEqual(data['revenue'], '400.00')
        self.assertEqual(data['commission_paid'], '40.00')
        self.assertEqual(data['net_revenue'], '360.00')
        self.assertEqual(data['units_sold'], 2)
        self.assertEqual(data['products'], {'total': 3, 'active': 2, 'inactive': 1})
        self.assertEqual(data['stock_status']['out_of_stock'], 1)
        self.assertEqual(data['stock_status']['in_stock'], 1)
        self.assertEqual(len(data['recent_sales']), 1)
        self.assertEqual(data['commission_summary']['total_products'], 3)

    def test_endpoint_uses_caller(self):
        self.client.authenticate_user(self.supplier)
        response = self.client.get('/api/v1/reports/supplier-dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['sales_count'], 1)

    def test_customer_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/reports/supplier-dashboard/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_must_pick_supplier(self):
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get('/api/v1/reports/supplier-dashboard/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get(f'/api/v1/reports/supplier-dashboard/?supplier={self.supplier.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['revenue'], '400.00')


class MarketplaceStatsTests(TestCase):
    def setUp(self):
        self.category = TestDataFactory.create_category(name='Cocção')
        self.low = TestDataFactory.create_product(category=self.category, price=Decimal('750.00'))
        self.high = TestDataFactory.create_product(category=self.category, price=Decimal('1000.00'))
        self.group = TestDataFactory.create_group(category=self.category, products=[self.low, self.high])
        self.user = TestDataFactory.create_user()

    def test_empty_marketplace(self):
        self.group.delete()
        data = marketplace_stats()
        self.assertEqual(data['total_savings'], '0.00')
        self.assertEqual(data['avg_savings_percentage'], 0)
        self.assertEqual(data['recent_savings'], [])

    def test_savings_figures(self):
        compare_group(self.group, user=self.user)
        data = marketplace_stats()
        self.assertEqual(data['total_savings'], '250.00')
        self.assertEqual(data['avg_savings_percentage'], 25)
        self.assertEqual(data['total_products_compared'], 2)
        self.assertEqual(data['total_comparisons'], 1)
        self.assertEqual(data['top_categories'][0]['id'], self.category.id)
        self.assertEqual(data['top_categories'][0]['search_count'], 1)

        saving = data['recent_savings'][0]
        self.assertEqual(saving['amount'], '250.00')
        self.assertEqual(saving['percentage'], 25)
        self.assertEqual(saving['product_slug'], self.low.slug)

    def test_selected_product_used_for_savings(self):
        comparison = compare_group(self.group, user=self.user)['comparison']
        comparison.selected_product = self.high
        comparison.save()
        data = marketplace_stats()
        self.assertEqual(data['recent_savings'][0]['amount'], '0.00')

    def test_endpoint_public(self):
        response = AuthenticatedAPIClient().get('/api/v1/reports/marketplace-stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('top_categories', response.data)
