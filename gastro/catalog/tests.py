"""
Test suite for Catalog module
Tests: categories, product listing and filters, ownership rules, images, price range helper
"""
from decimal import Decimal
from io import BytesIO

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from PIL import Image
from rest_framework import status

from gastro.catalog.models import Category, Product, ProductImage
from gastro.catalog.utils import normalize_price_range
from gastro.core.models import AuditLog
from gastro.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from gastro.inventory.models import Stock, StockAdjustment


def make_png(size=(4, 4)):
    buffer = BytesIO()
    Image.new('RGB', size, color=(200, 30, 30)).save(buffer, format='PNG')
    return buffer.getvalue()


class PriceRangeTests(TestCase):
    def test_defaults_when_missing(self):
        self.assertEqual(normalize_price_range(None, None), (Decimal('0'), Decimal('999999')))

    def test_negative_min_and_zero_max(self):
        self.assertEqual(normalize_price_range('-5', '0'), (Decimal('0'), Decimal('999999')))

    def test_swapped_when_min_above_max(self):
        self.assertEqual(normalize_price_range('500', '100'), (Decimal('100'), Decimal('500')))

    def test_clamped_to_ceiling(self):
        low, high = normalize_price_range('2000000', '3000000')
        self.assertEqual(low, Decimal('1000000'))
        self.assertEqual(high, Decimal('1000000'))

    def test_nan_min_is_zero(self):
        self.assertEqual(normalize_price_range('NaN', '10')[0], Decimal('0'))


class ProductModelTests(TestCase):
    def test_slug_is_unique(self):
        supplier = TestDataFactory.create_supplier()
        category = TestDataFactory.create_category()
        first = TestDataFactory.create_product(supplier=supplier, category=category, name='Forno Combinado')
        second = TestDataFactory.create_product(supplier=supplier, category=category, name='Forno Combinado')
        self.assertEqual(first.slug, 'forno-combinado')
        self.assertEqual(second.slug, 'forno-combinado-2')

    def test_discount_computed_from_original_price(self):
        product = TestDataFactory.create_product(price=Decimal('80.00'), original_price=Decimal('100.00'))
        self.assertEqual(product.discount, 20)

    def test_stock_row_created(self):
        product = TestDataFactory.create_product(stock=3, low_stock_threshold=5)
        self.assertEqual(product.stock.quantity, 3)
        self.assertEqual(product.stock.status, Stock.STATUS_LOW_STOCK)

    def test_category_products_count(self):
        category = TestDataFactory.create_category()
        TestDataFactory.create_product(category=category)
        TestDataFactory.create_product(category=category, active=False)
        category.refresh_from_db()
        self.assertEqual(category.products_count, 1)

    def test_single_primary_image(self):
        product = TestDataFactory.create_product()
        first = ProductImage.objects.create(product=product, image_url='https://img.test/1.png', is_primary=True)
        ProductImage.objects.create(product=product, image_url='https://img.test/2.png', is_primary=True)
        first.refresh_from_db()
        self.assertFalse(first.is_primary)
        self.assertEqual(product.images.filter(is_primary=True).count(), 1)


class CategoryAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_list_is_public(self):
        TestDataFactory.create_category(name='Refrigeração')
        response = self.client.get('/api/v1/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_detail_by_slug(self):
        category = TestDataFactory.create_category(name='Cocção', slug='coccao')
        response = self.client.get('/api/v1/categories/coccao/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], category.id)

    def test_supplier_cannot_create_category(self):
        self.client.authenticate_user(TestDataFactory.create_supplier())
        response = self.client.post('/api/v1/categories/', {'name': 'Bar'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_creates_category(self):
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.post('/api/v1/categories/', {'name': 'Lavagem', 'icon': 'sink'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['slug'], 'lavagem')


class ProductListTests(TestCase):
    """Test product search, filters and sorting"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.supplier = TestDataFactory.create_supplier()
        self.fridge = TestDataFactory.create_category(name='Refrigeração')
        self.oven = TestDataFactory.create_category(name='Cocção')
        self.cheap = TestDataFactory.create_product(
            supplier=self.supplier, category=self.fridge, name='Freezer Horizontal',
            price=Decimal('1500.00'), rating=Decimal('4.50'))
        self.expensive = TestDataFactory.create_product(
            supplier=self.supplier, category=self.oven, name='Forno Combinado Elétrico',
            price=Decimal('25000.00'), rating=Decimal('3.00'), stock=0)
        self.hidden = TestDataFactory.create_product(
            supplier=self.supplier, category=self.fridge, name='Freezer Antigo', active=False)

    def test_only_active_products_listed(self):
        response = self.client.get('/api/v1/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [p['id'] for p in response.data['results']]
        self.assertNotIn(self.hidden.id, ids)
        self.assertEqual(response.data['count'], 2)

    def test_search_requires_every_word(self):
        response = self.client.get('/api/v1/products/', {'search': 'forno elétrico'})
        self.assertEqual([p['id'] for p in response.data['results']], [self.expensive.id])

    def test_category_matches_additional_categories(self):
        self.expensive.additional_categories.add(self.fridge)
        response = self.client.get(f'/api/v1/products/?category={self.fridge.id}')
        ids = {p['id'] for p in response.data['results']}
        self.assertEqual(ids, {self.cheap.id, self.expensive.id})

    def test_category_zero_means_all(self):
        response = self.client.get('/api/v1/products/?category=0')
        self.assertEqual(response.data['count'], 2)

    def test_price_range_swapped(self):
        response = self.client.get('/api/v1/products/?min_price=2000&max_price=1000')
        self.assertEqual([p['id'] for p in response.data['results']], [self.cheap.id])

    def test_sort_price_desc(self):
        response = self.client.get('/api/v1/products/?sort=price_desc')
        self.assertEqual(response.data['results'][0]['id'], self.expensive.id)
        self.assertEqual(response.data['sort'], 'price_desc')

    def test_in_stock_filter(self):
        response = self.client.get('/api/v1/products/?in_stock=true')
        self.assertEqual([p['id'] for p in response.data['results']], [self.cheap.id])

    def test_pagination(self):
        response = self.client.get('/api/v1/products/?limit=1&offset=1&sort=price_asc')
        self.assertEqual(len(response.data['results']), 1)
        self.assertEqual(response.data['results'][0]['id'], self.expensive.id)
        self.assertEqual(response.data['count'], 2)

    def test_product_suppliers_cheapest_first(self):
        other = TestDataFactory.create_supplier()
        rival = TestDataFactory.create_product(
            supplier=other, category=self.fridge, name='FREEZER HORIZONTAL', price=Decimal('1200.00'))
        response = self.client.get(f'/api/v1/products/{self.cheap.slug}/suppliers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['suppliers'][0]['id'], rival.id)
        self.assertTrue(response.data['suppliers'][0]['is_best_price'])
        self.assertFalse(response.data['suppliers'][1]['is_best_price'])
        self.assertNotIn('email', response.data['suppliers'][0]['supplier'])


class ProductWriteTests(TestCase):
    """Test product create/update ownership rules"""

    def setUp(self):
        self.supplier = TestDataFactory.create_supplier()
        self.other_supplier = TestDataFactory.create_supplier()
        self.category = TestDataFactory.create_category()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.supplier)

    def test_supplier_creates_own_product(self):
        data = {
            'name': 'Liquidificador Industrial',
            'category': self.category.id,
            'price': '899.90',
            'supplier': self.other_supplier.id,
            'features': ['2L', 'Inox'],
            'stock': 7,
        }
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        product = Product.objects.get(pk=response.data['id'])
        self.assertEqual(product.supplier, self.supplier)
        self.assertEqual(product.stock.quantity, 7)
        self.assertEqual(response.data['stock_quantity'], 7)

    def test_stock_change_records_adjustment(self):
        product = TestDataFactory.create_product(supplier=self.supplier, category=self.category, stock=10)
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'stock': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stock_quantity'], 3)
        adjustment = StockAdjustment.objects.get(product=product)
        self.assertEqual(adjustment.previous_quantity, 10)
        self.assertEqual(adjustment.new_quantity, 3)
        self.assertEqual(adjustment.delta, -7)
        self.assertEqual(adjustment.reason, 'manual')
        self.assertEqual(adjustment.created_by, self.supplier)

    def test_customer_cannot_create_product(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.post('/api/v1/products/', {
            'name': 'X', 'category': self.category.id, 'price': '10.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_invalid_price_rejected(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Free', 'category': self.category.id, 'price': '0'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price', response.data)

    def test_cannot_edit_other_suppliers_product(self):
        product = TestDataFactory.create_product(supplier=self.other_supplier, category=self.category)
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'price': '1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_price_change_audited(self):
        product = TestDataFactory.create_product(supplier=self.supplier, category=self.category,
                                                 price=Decimal('100.00'))
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'price': '120.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        log = AuditLog.objects.get(action='price_change', object_id=str(product.id))
        self.assertEqual(log.changes['price'], {'old': '100.00', 'new': '120.00'})

    def test_delete_deactivates(self):
        product = TestDataFactory.create_product(supplier=self.supplier, category=self.category)
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        product.refresh_from_db()
        self.assertFalse(product.active)

    def test_supplier_products_includes_inactive(self):
        TestDataFactory.create_product(supplier=self.supplier, category=self.category, active=False)
        TestDataFactory.create_product(supplier=self.other_supplier, category=self.category)
        response = self.client.get('/api/v1/supplier/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)


class ProductImageTests(TestCase):
    def setUp(self):
        self.supplier = TestDataFactory.create_supplier()
        self.product = TestDataFactory.create_product(supplier=self.supplier)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.supplier)

    def test_upload_valid_image(self):
        upload = SimpleUploadedFile('photo.png', make_png(), content_type='image/png')
        response = self.client.post('/api/v1/products/upload-image/', {
            'image': upload, 'product_id': self.product.id, 'is_primary': 'true'
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_primary'])
        self.assertEqual(response.data['image_type'], 'image/png')

        image_response = self.client.get(f'/api/v1/products/{self.product.id}/image/')
        self.assertEqual(image_response.status_code, status.HTTP_200_OK)
        self.assertEqual(image_response['Content-Type'], 'image/png')

    def test_upload_rejects_non_image(self):
        upload = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')
        response = self.client.post('/api/v1/products/upload-image/', {
            'image': upload, 'product_id': self.product.id
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_upload_rejects_corrupt_image(self):
        upload = SimpleUploadedFile('fake.png', b'not really a png', content_type='image/png')
        response = self.client.post('/api/v1/products/upload-image/', {
            'image': upload, 'product_id': self.product.id
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(MAX_PRODUCT_IMAGES=1)
    def test_image_limit(self):
        ProductImage.objects.create(product=self.product, image_url='https://img.test/1.png')
        response = self.client.post(f'/api/v1/products/{self.product.id}/images/', {
            'image_url': 'https://img.test/2.png'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_image_requires_url_or_data(self):
        response = self.client.post(f'/api/v1/products/{self.product.id}/images/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
