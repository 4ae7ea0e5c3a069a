"""
Test suite for Suppliers module
Tests: directory metrics, filtering, sorting, public info
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from gastro.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from gastro.suppliers.services import list_suppliers, supplier_profiles, supplier_categories


class SupplierProfileTests(TestCase):
    def setUp(self):
        self.fridge = TestDataFactory.create_category(name='Refrigeração')
        self.oven = TestDataFactory.create_category(name='Cocção')
        self.supplier = TestDataFactory.create_supplier(company_name='Frio Total')
        TestDataFactory.create_product(supplier=self.supplier, category=self.fridge, rating=Decimal('4.0'))
        TestDataFactory.create_product(supplier=self.supplier, category=self.oven, rating=Decimal('4.5'))
        TestDataFactory.create_product(supplier=self.supplier, category=self.fridge, rating=Decimal('0'))
        TestDataFactory.create_product(supplier=self.supplier, category=self.oven, rating=Decimal('1.0'),
                                       active=False)

    def test_metrics_from_active_products(self):
        profile = supplier_profiles([self.supplier])[0]
        self.assertEqual(profile.products_count, 3)
        self.assertEqual(profile.rating, '4.3')
        self.assertEqual(profile.categories, ['Refrigeração', 'Cocção'])
        self.assertTrue(profile.verified)

    def test_supplier_without_products(self):
        profile = supplier_profiles([TestDataFactory.create_supplier()])[0]
        self.assertEqual(profile.products_count, 0)
        self.assertEqual(profile.rating, '0.0')
        self.assertEqual(profile.categories, [])

    def test_categories_include_additional(self):
        bar = TestDataFactory.create_category(name='Bar')
        product = TestDataFactory.create_product(supplier=self.supplier, category=self.fridge)
        product.additional_categories.add(bar)
        names = [c.name for c in supplier_categories(self.supplier)]
        self.assertEqual(names, ['Bar', 'Cocção', 'Refrigeração'])


class SupplierDirectoryTests(TestCase):
    def setUp(self):
        self.fridge = TestDataFactory.create_category(name='Refrigeração')
        self.oven = TestDataFactory.create_category(name='Cocção')
        self.cold = TestDataFactory.create_supplier(company_name='Frio Total')
        self.hot = TestDataFactory.create_supplier(company_name='Forno Forte')
        TestDataFactory.create_product(supplier=self.cold, category=self.fridge, rating=Decimal('3.0'))
        TestDataFactory.create_product(supplier=self.hot, category=self.oven, rating=Decimal('5.0'))
        TestDataFactory.create_product(supplier=self.hot, category=self.oven, rating=Decimal('4.0'))
        self.client = AuthenticatedAPIClient()

    def test_only_suppliers_listed(self):
        TestDataFactory.create_user()
        TestDataFactory.create_admin()
        ids = [s.id for s in list_suppliers()]
        self.assertEqual(set(ids), {self.cold.id, self.hot.id})

    def test_sort_by_rating_default(self):
        self.assertEqual([s.id for s in list_suppliers()], [self.hot.id, self.cold.id])

    def test_filter_by_category_substring(self):
        self.assertEqual([s.id for s in list_suppliers(category='refriger')], [self.cold.id])

    def test_search_company_name(self):
        self.assertEqual([s.id for s in list_suppliers(search='forno')], [self.hot.id])

    def test_list_endpoint_hides_email(self):
        response = self.client.get('/api/v1/suppliers/?sort_by=products')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['id'], self.hot.id)
        self.assertEqual(response.data[0]['products_count'], 2)
        self.assertNotIn('email', response.data[0])
        self.assertNotIn('password', response.data[0])

    def test_detail_only_for_suppliers(self):
        response = self.client.get(f'/api/v1/suppliers/{self.cold.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['categories'], ['Refrigeração'])

        customer = TestDataFactory.create_user()
        response = self.client.get(f'/api/v1/suppliers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_supplier_categories_endpoint(self):
        response = self.client.get(f'/api/v1/suppliers/{self.hot.id}/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['name'] for c in response.data], ['Cocção'])

    def test_suppliers_info(self):
        customer = TestDataFactory.create_user()
        response = self.client.get(f'/api/v1/suppliers-info/?ids={self.cold.id},{self.hot.id},{customer.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s['id'] for s in response.data], sorted([self.cold.id, self.hot.id]))
        self.assertEqual(set(response.data[0].keys()), {'id', 'name', 'company_name', 'cnpj', 'phone'})

    def test_suppliers_info_requires_ids(self):
        response = self.client.get('/api/v1/suppliers-info/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
