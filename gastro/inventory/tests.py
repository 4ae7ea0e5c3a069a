"""
Test suite for Inventory module
Tests: stock status, atomic decrements, bulk updates, low stock alerts
"""
from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from gastro.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from gastro.inventory.models import Stock, StockAdjustment, compute_stock_status
from gastro.inventory.services import (
    InsufficientStockError, decrement_stock, set_stock, low_stock_products
)
from gastro.catalog.models import Product


class StockStatusTests(TestCase):
    def test_status_thresholds(self):
        self.assertEqual(compute_stock_status(0, 5), Stock.STATUS_OUT_OF_STOCK)
        self.assertEqual(compute_stock_status(4, 5), Stock.STATUS_LOW_STOCK)
        self.assertEqual(compute_stock_status(5, 5), Stock.STATUS_IN_STOCK)

    def test_product_gets_stock_row(self):
        product = TestDataFactory.create_product(stock=0)
        self.assertEqual(Stock.objects.filter(product=product).count(), 1)
        self.assertEqual(product.stock.status, Stock.STATUS_OUT_OF_STOCK)

    def test_negative_quantity_clamped(self):
        product = TestDataFactory.create_product()
        stock = set_stock(product, quantity=-3)
        self.assertEqual(stock.quantity, 0)


class StockServiceTests(TestCase):
    def setUp(self):
        self.product = TestDataFactory.create_product(stock=5, low_stock_threshold=3)

    def test_decrement_records_adjustment(self):
        stock = decrement_stock(self.product, 3)
        self.assertEqual(stock.quantity, 2)
        self.assertEqual(stock.status, Stock.STATUS_LOW_STOCK)
        adjustment = StockAdjustment.objects.get(product=self.product)
        self.assertEqual(adjustment.delta, -3)
        self.assertEqual(adjustment.previous_quantity, 5)
        self.assertEqual(adjustment.reason, 'sale')

    def test_decrement_beyond_available_raises(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            decrement_stock(self.product, 6)
        self.assertEqual(ctx.exception.available, 5)
        self.assertEqual(Stock.objects.get(product=self.product).quantity, 5)

    def test_decrement_to_zero(self):
        stock = decrement_stock(self.product, 5)
        self.assertEqual(stock.quantity, 0)
        self.assertEqual(stock.status, Stock.STATUS_OUT_OF_STOCK)

    def test_decrement_touches_last_update(self):
        earlier = timezone.now() - timedelta(days=2)
        Stock.objects.filter(product=self.product).update(last_stock_update=earlier)
        decrement_stock(self.product, 1)
        self.assertGreater(Stock.objects.get(product=self.product).last_stock_update, earlier)

    def test_set_stock_unchanged_quantity_not_logged(self):
        set_stock(self.product, quantity=5, low_stock_threshold=8)
        self.assertFalse(StockAdjustment.objects.filter(product=self.product).exists())
        self.assertEqual(Stock.objects.get(product=self.product).status, Stock.STATUS_LOW_STOCK)

    def test_low_stock_ordered_by_urgency(self):
        supplier = self.product.supplier
        urgent = TestDataFactory.create_product(supplier=supplier, stock=1, low_stock_threshold=10)
        TestDataFactory.create_product(supplier=supplier, stock=50, low_stock_threshold=10)
        set_stock(self.product, quantity=2, low_stock_threshold=4)
        result = low_stock_products(Product.objects.filter(supplier=supplier))
        self.assertEqual([s.product_id for s in result], [urgent.id, self.product.id])


class InventoryAPITests(TestCase):
    def setUp(self):
        self.supplier = TestDataFactory.create_supplier()
        self.other = TestDataFactory.create_supplier()
        self.mine = TestDataFactory.create_product(supplier=self.supplier, stock=20, low_stock_threshold=5)
        self.theirs = TestDataFactory.create_product(supplier=self.other, stock=2, low_stock_threshold=5)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.supplier)

    def test_customer_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/inventory/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_supplier_sees_own_stock(self):
        response = self.client.get('/api/v1/inventory/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['product_id'] for row in response.data], [self.mine.id])

    def test_bulk_update_mixed_rows(self):
        response = self.client.post('/api/v1/inventory/bulk-update/', {'items': [
            {'id': self.mine.id, 'stock': 3},
            {'id': self.theirs.id, 'stock': 100},
            {'id': 999999, 'stock': 1},
            {'id': self.mine.id},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['updated'], 1)
        self.assertEqual(response.data['failed'], 3)
        first = response.data['results'][0]
        self.assertTrue(first['success'])
        self.assertEqual(first['stock_status'], Stock.STATUS_LOW_STOCK)
        self.assertEqual(Stock.objects.get(product=self.theirs).quantity, 2)

    def test_bulk_update_requires_items(self):
        response = self.client.post('/api/v1/inventory/bulk-update/', {'items': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_low_stock_endpoint(self):
        set_stock(self.mine, quantity=1)
        response = self.client.get('/api/v1/inventory/low-stock/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['product_id'], self.mine.id)

    def test_history_lists_adjustments(self):
        set_stock(self.mine, quantity=7, user=self.supplier, reason='restock')
        response = self.client.get('/api/v1/inventory/history/?reason=restock')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['delta'], -13)
        self.assertEqual(response.data[0]['created_by_username'], self.supplier.username)

    def test_summary_counts(self):
        TestDataFactory.create_product(supplier=self.supplier, stock=0)
        response = self.client.get('/api/v1/inventory/summary/')
        self.assertEqual(response.data['in_stock'], 1)
        self.assertEqual(response.data['out_of_stock'], 1)
        self.assertEqual(response.data['total'], 2)

    def test_admin_filters_by_supplier(self):
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get(f'/api/v1/inventory/?supplier={self.other.id}')
        self.assertEqual([row['product_id'] for row in response.data], [self.theirs.id])
