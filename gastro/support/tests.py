"""
Test suite for Support (FAQ) module
"""
from django.test import TestCase
from rest_framework import status

from gastro.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from gastro.support.models import FaqCategory


class FaqTests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.payments = TestDataFactory.create_faq_category(name='Pagamentos', sort_order=2)
        self.shipping = TestDataFactory.create_faq_category(name='Entrega', sort_order=1)
        self.visible = TestDataFactory.create_faq_item(self.payments, question='Quais cartões são aceitos?')
        self.hidden = TestDataFactory.create_faq_item(self.payments, active=False)

    def test_categories_ordered_with_active_counts(self):
        response = self.client.get('/api/v1/faq/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['name'] for c in response.data], ['Entrega', 'Pagamentos'])
        self.assertEqual(response.data[1]['items_count'], 1)

    def test_category_by_slug_lists_active_items(self):
        response = self.client.get(f'/api/v1/faq/categories/{self.payments.slug}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([i['id'] for i in response.data['items']], [self.visible.id])

    def test_items_filtered_by_category_slug(self):
        TestDataFactory.create_faq_item(self.shipping)
        response = self.client.get(f'/api/v1/faq/items/?category={self.payments.slug}')
        self.assertEqual([i['id'] for i in response.data], [self.visible.id])

    def test_inactive_item_hidden_from_public(self):
        response = self.client.get(f'/api/v1/faq/items/{self.hidden.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get(f'/api/v1/faq/items/{self.hidden.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_only_admin_writes(self):
        response = self.client.post('/api/v1/faq/categories/', {'name': 'Conta'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        self.client.authenticate_user(TestDataFactory.create_supplier())
        response = self.client.post('/api/v1/faq/categories/', {'name': 'Conta'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.post('/api/v1/faq/categories/', {'name': 'Minha Conta'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(FaqCategory.objects.get(pk=response.data['id']).slug, 'minha-conta')

    def test_admin_updates_item(self):
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.patch(f'/api/v1/faq/items/{self.hidden.id}/', {'active': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['active'])
