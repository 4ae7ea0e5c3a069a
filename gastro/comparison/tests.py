"""
Test suite for Comparison module
Tests: group statistics, highlighting, comparisons, searches, name-based comparison
"""
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from gastro.catalog.models import Product
from gastro.comparison.models import ProductGroup, ProductGroupItem, ProductComparison, ProductSearch
from gastro.comparison.services import (
    ComparisonError, compare_group, compare_by_name, savings_percentage, add_product_to_group,
    rank_items, refresh_group_stats, remove_item_from_group
)
from gastro.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class SavingsTests(TestCase):
    def test_savings_percentage(self):
        self.assertEqual(savings_percentage(Decimal('75'), Decimal('100')), 25)
        self.assertEqual(savings_percentage(Decimal('100'), Decimal('0')), 0)


class GroupStatsTests(TestCase):
    def setUp(self):
        self.category = TestDataFactory.create_category()
        self.a = TestDataFactory.create_product(category=self.category, price=Decimal('100.00'))
        self.b = TestDataFactory.create_product(category=self.category, price=Decimal('200.00'))
        self.c = TestDataFactory.create_product(category=self.category, price=Decimal('300.00'))
        self.group = TestDataFactory.create_group(name='Chapa Bifeteira', category=self.category,
                                                  products=[self.a, self.b, self.c])

    def test_price_statistics(self):
        self.assertEqual(self.group.min_price, Decimal('100.00'))
        self.assertEqual(self.group.max_price, Decimal('300.00'))
        self.assertEqual(self.group.avg_price, Decimal('200.00'))
        self.assertEqual(self.group.products_count, 3)
        self.assertEqual(self.group.suppliers_count, 3)

    def test_single_highlighted_cheapest(self):
        highlighted = ProductGroupItem.objects.filter(group=self.group, is_highlighted=True)
        self.assertEqual(list(highlighted.values_list('product_id', flat=True)), [self.a.id])
        item = ProductGroupItem.objects.get(group=self.group, product=self.c)
        self.assertEqual(item.price_difference, Decimal('50.00'))

    def test_price_change_moves_highlight(self):
        self.c.price = Decimal('50.00')
        self.c.save()
        self.group.refresh_from_db()
        self.assertEqual(self.group.min_price, Decimal('50.00'))
        item = ProductGroupItem.objects.get(group=self.group, is_highlighted=True)
        self.assertEqual(item.product_id, self.c.id)

    def test_inactive_product_leaves_stats(self):
        self.a.active = False
        self.a.save()
        self.group.refresh_from_db()
        self.assertEqual(self.group.products_count, 2)
        self.assertEqual(self.group.min_price, Decimal('200.00'))

    def test_duplicate_membership_rejected(self):
        with self.assertRaises(ComparisonError):
            add_product_to_group(self.group, self.a)

    def test_slug_generated(self):
        self.assertEqual(self.group.slug, 'chapa-bifeteira')
        self.assertEqual(self.group.display_name, 'Chapa Bifeteira')


class RankItemsTests(TestCase):
    def setUp(self):
        now = timezone.now()
        self.a = TestDataFactory.create_product(price=Decimal('300.00'), rating=Decimal('4.00'))
        self.b = TestDataFactory.create_product(price=Decimal('100.00'), rating=Decimal('5.00'))
        self.c = TestDataFactory.create_product(price=Decimal('200.00'), rating=Decimal('3.00'))
        for days, product in ((3, self.a), (2, self.b), (1, self.c)):
            Product.objects.filter(pk=product.pk).update(created_at=now - timedelta(days=days))
        group = TestDataFactory.create_group(products=[self.a, self.b, self.c])
        for product, sales in ((self.a, 1), (self.b, 10), (self.c, 5)):
            ProductGroupItem.objects.filter(group=group, product=product).update(total_sales=sales)
        items = {i.product_id: i for i in group.items.select_related('product')}
        self.items = [items[self.a.id], items[self.b.id], items[self.c.id]]

    def ranked(self, sort_type):
        return [item.product_id for item in rank_items(self.items, sort_type)]

    def test_orderings(self):
        self.assertEqual(self.ranked('price_asc'), [self.b.id, self.c.id, self.a.id])
        self.assertEqual(self.ranked('price_desc'), [self.a.id, self.c.id, self.b.id])
        self.assertEqual(self.ranked('rating_desc'), [self.b.id, self.a.id, self.c.id])
        self.assertEqual(self.ranked('newest'), [self.c.id, self.b.id, self.a.id])
        self.assertEqual(self.ranked('popularity'), [self.b.id, self.c.id, self.a.id])

    def test_unknown_sort_falls_back_to_price(self):
        self.assertEqual(self.ranked('cheapest_first'), self.ranked('price_asc'))
        self.assertEqual(self.ranked(None), [self.b.id, self.c.id, self.a.id])

    def test_equal_prices_keep_input_order(self):
        for item in self.items:
            item.product.price = Decimal('150.00')
        self.assertEqual(self.ranked('price_asc'), [self.a.id, self.b.id, self.c.id])
        self.items.reverse()
        self.assertEqual(self.ranked('price_asc'), [self.c.id, self.b.id, self.a.id])
        self.assertEqual(self.ranked('price_desc'), [self.c.id, self.b.id, self.a.id])


class GroupHighlightEdgeTests(TestCase):
    def test_tie_highlights_earliest_added(self):
        first = TestDataFactory.create_product(price=Decimal('100.00'))
        second = TestDataFactory.create_product(price=Decimal('100.00'))
        group = TestDataFactory.create_group(products=[second, first])
        highlighted = ProductGroupItem.objects.filter(group=group, is_highlighted=True)
        self.assertEqual(list(highlighted.values_list('product_id', flat=True)), [second.id])

        refresh_group_stats(group)
        highlighted = ProductGroupItem.objects.filter(group=group, is_highlighted=True)
        self.assertEqual(list(highlighted.values_list('product_id', flat=True)), [second.id])

    def test_group_emptied_by_removal(self):
        product = TestDataFactory.create_product(price=Decimal('100.00'))
        group = TestDataFactory.create_group(products=[product])
        remove_item_from_group(group.items.get())
        group.refresh_from_db()
        self.assertIsNone(group.min_price)
        self.assertIsNone(group.max_price)
        self.assertIsNone(group.avg_price)
        self.assertEqual(group.products_count, 0)
        self.assertEqual(group.suppliers_count, 0)
        self.assertFalse(group.items.exists())

    def test_group_emptied_by_deactivation(self):
        product = TestDataFactory.create_product(price=Decimal('100.00'))
        group = TestDataFactory.create_group(products=[product])
        self.assertTrue(group.items.get().is_highlighted)
        product.active = False
        product.save()
        group.refresh_from_db()
        self.assertIsNone(group.min_price)
        self.assertEqual(group.products_count, 0)
        self.assertFalse(group.items.filter(is_highlighted=True).exists())


class CompareGroupTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.cheap = TestDataFactory.create_product(price=Decimal('80.00'), rating=Decimal('3.0'))
        self.rated = TestDataFactory.create_product(price=Decimal('120.00'), rating=Decimal('4.8'))
        self.empty = TestDataFactory.create_product(price=Decimal('100.00'), stock=0)
        self.group = TestDataFactory.create_group(products=[self.cheap, self.rated, self.empty])

    def test_cheapest_and_best_rated(self):
        result = compare_group(self.group)
        self.assertEqual(result['cheapest_item'].product_id, self.cheap.id)
        self.assertEqual(result['best_rated_item'].product_id, self.rated.id)
        self.assertEqual(result['summary']['max_savings'], Decimal('40.00'))
        self.assertEqual(result['summary']['max_savings_percentage'], 33)
        self.assertIsNone(result['comparison'])

    def test_filters_applied(self):
        result = compare_group(self.group, filters={'in_stock': 'true', 'max_price': '100'})
        self.assertEqual([i.product_id for i in result['items']], [self.cheap.id])

    def test_records_for_signed_in_user(self):
        result = compare_group(self.group, user=self.user)
        comparison = result['comparison']
        self.assertEqual(comparison.details.count(), 3)
        self.assertEqual(comparison.details.get(price_rank=1).product_id, self.cheap.id)
        self.assertEqual(ProductSearch.objects.filter(user=self.user, group=self.group).count(), 1)
        self.group.refresh_from_db()
        self.assertEqual(self.group.comparison_count, 1)

    def test_inactive_group_rejected(self):
        self.group.is_active = False
        self.group.save()
        with self.assertRaises(ComparisonError):
            compare_group(self.group)


class CompareByNameTests(TestCase):
    def test_only_names_with_several_offers(self):
        TestDataFactory.create_product(name='Fritadeira 10L', price=Decimal('900.00'))
        TestDataFactory.create_product(name='fritadeira  10l', price=Decimal('700.00'))
        TestDataFactory.create_product(name='Fritadeira 20L', price=Decimal('1500.00'))
        result = compare_by_name(name='fritadeira')
        self.assertEqual(len(result), 1)
        self.assertEqual(result[0]['min_price'], Decimal('700.00'))
        self.assertEqual(result[0]['savings'], Decimal('200.00'))
        self.assertEqual(result[0]['savings_percentage'], 22)

    def test_requires_name_or_category(self):
        with self.assertRaises(ComparisonError):
            compare_by_name()


class ComparisonAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_admin()
        self.category = TestDataFactory.create_category(name='Refrigeração', slug='refrigeracao')
        self.p1 = TestDataFactory.create_product(category=self.category, price=Decimal('1000.00'))
        self.p2 = TestDataFactory.create_product(category=self.category, price=Decimal('1200.00'))
        self.group = TestDataFactory.create_group(name='Freezer 500L', category=self.category,
                                                  products=[self.p1, self.p2])

    def test_group_list_public(self):
        response = self.client.get('/api/v1/product-groups/?category=refrigeracao')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_group_detail_by_slug(self):
        response = self.client.get(f'/api/v1/product-groups/{self.group.slug}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['items']), 2)

    def test_group_create_requires_admin(self):
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/v1/product-groups/', {'name': 'Batedeira'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_adds_and_removes_item(self):
        self.client.authenticate_user(self.admin)
        p3 = TestDataFactory.create_product(category=self.category, price=Decimal('900.00'))
        response = self.client.post(f'/api/v1/product-groups/{self.group.id}/items/',
                                    {'product_id': p3.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_highlighted'])

        duplicate = self.client.post(f'/api/v1/product-groups/{self.group.id}/items/',
                                     {'product_id': p3.id}, format='json')
        self.assertEqual(duplicate.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.delete(f'/api/v1/product-groups/{self.group.id}/items/{response.data["id"]}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.group.refresh_from_db()
        self.assertEqual(self.group.min_price, Decimal('1000.00'))

    def test_anonymous_compare_not_recorded(self):
        response = self.client.get(f'/api/v1/product-groups/{self.group.id}/compare/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['comparison_id'])
        self.assertEqual(response.data['cheapest_item']['product']['id'], self.p1.id)
        self.assertFalse(ProductComparison.objects.exists())

    def test_compare_history_and_select(self):
        self.client.authenticate_user(self.user)
        response = self.client.get(f'/api/v1/product-groups/{self.group.id}/compare/?sort=price_desc')
        comparison_id = response.data['comparison_id']
        self.assertIsNotNone(comparison_id)
        self.assertEqual(response.data['items'][0]['product']['id'], self.p2.id)

        history = self.client.get('/api/v1/comparisons/')
        self.assertEqual([c['id'] for c in history.data], [comparison_id])

        bad = self.client.post(f'/api/v1/comparisons/{comparison_id}/select/', {'product_id': 999999}, format='json')
        self.assertEqual(bad.status_code, status.HTTP_400_BAD_REQUEST)
        good = self.client.post(f'/api/v1/comparisons/{comparison_id}/select/', {'product_id': self.p1.id},
                                format='json')
        self.assertEqual(good.status_code, status.HTTP_200_OK)
        self.assertEqual(good.data['selected_product'], self.p1.id)

    def test_other_users_comparison_forbidden(self):
        comparison = compare_group(self.group, user=self.user)['comparison']
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get(f'/api/v1/comparisons/{comparison.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_group_search(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/product-groups/search/?q=freezer')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_matches'], 1)
        self.assertIsNotNone(response.data['search_id'])
        self.group.refresh_from_db()
        self.assertEqual(self.group.search_relevance, 1)

    def test_compare_products_by_name(self):
        TestDataFactory.create_product(name='Forno Turbo', price=Decimal('3000.00'))
        TestDataFactory.create_product(name='Forno Turbo', price=Decimal('2500.00'))
        response = self.client.get('/api/v1/compare-products/?name=turbo')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['savings'], '500.00')

    def test_compare_products_requires_input(self):
        response = self.client.get('/api/v1/compare-products/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_group_404(self):
        response = self.client.get('/api/v1/product-groups/999999/compare/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(ProductGroup.objects.filter(pk=999999).exists())
