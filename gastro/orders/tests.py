"""
Test suite for Orders module
Tests: cart operations, checkout, sales recording, payment intents
"""
from decimal import Decimal
from unittest.mock import patch, MagicMock

import requests
from django.test import TestCase, override_settings
from rest_framework import status

from gastro.comparison.models import ProductGroupItem
from gastro.core.models import AuditLog
from gastro.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from gastro.inventory.models import Stock
from gastro.orders.models import Cart, CartItem, Order, Sale, generate_order_number
from gastro.orders.services import (
    CheckoutError, PaymentError, PaymentNotConfigured, checkout, create_payment_intent, to_minor_units
)

SHIPPING = {
    'name': 'Restaurante Sabor',
    'address': 'Rua das Flores, 100',
    'city': 'São Paulo',
    'state': 'SP',
    'zip_code': '01000-000',
    'phone': '11999990000',
}


class OrderNumberTests(TestCase):
    def test_format(self):
        number = generate_order_number()
        prefix, date_part, suffix = number.split('-')
        self.assertEqual(prefix, 'ORD')
        self.assertEqual(len(date_part), 8)
        self.assertEqual(len(suffix), 8)
        self.assertNotEqual(number, generate_order_number())


class CheckoutServiceTests(TestCase):
    def setUp(self):
        self.buyer = TestDataFactory.create_user()
        self.supplier_a = TestDataFactory.create_supplier()
        self.supplier_b = TestDataFactory.create_supplier()
        self.oven = TestDataFactory.create_product(supplier=self.supplier_a, price=Decimal('1000.00'), stock=5)
        self.mixer = TestDataFactory.create_product(supplier=self.supplier_b, price=Decimal('250.00'), stock=2)
        TestDataFactory.create_commission_setting(5)

    def test_checkout_creates_order_and_sales(self):
        group = TestDataFactory.create_group(products=[self.oven])
        TestDataFactory.create_cart(self.buyer, [(self.oven, 2), (self.mixer, 1)])

        order = checkout(self.buyer, SHIPPING)

        self.assertEqual(order.total, Decimal('2250.00'))
        self.assertTrue(order.order_number.startswith('ORD-'))
        sales = order.sales.order_by('id')
        self.assertEqual(sales.count(), 2)
        self.assertEqual(sales[0].commission_amount, Decimal('100.00'))
        self.assertEqual(sales[0].supplier, self.supplier_a)
        self.assertEqual(Stock.objects.get(product=self.oven).quantity, 3)
        self.assertEqual(Stock.objects.get(product=self.mixer).quantity, 1)
        self.assertEqual(ProductGroupItem.objects.get(group=group, product=self.oven).total_sales, 2)
        cart = Cart.objects.get(user=self.buyer, status='active')
        self.assertEqual(cart.items.count(), 0)

    def test_empty_cart_rejected(self):
        with self.assertRaises(CheckoutError):
            checkout(self.buyer, SHIPPING)

    def test_missing_shipping_rejected(self):
        TestDataFactory.create_cart(self.buyer, [(self.oven, 1)])
        with self.assertRaises(CheckoutError) as ctx:
            checkout(self.buyer, dict(SHIPPING, city=' '))
        self.assertEqual(ctx.exception.details, ['city'])

    def test_insufficient_stock_leaves_nothing_behind(self):
        TestDataFactory.create_cart(self.buyer, [(self.oven, 1), (self.mixer, 3)])
        with self.assertRaises(CheckoutError) as ctx:
            checkout(self.buyer, SHIPPING)
        self.assertEqual(ctx.exception.details[0]['available'], 2)
        self.assertFalse(Order.objects.exists())
        self.assertFalse(Sale.objects.exists())
        self.assertEqual(Stock.objects.get(product=self.oven).quantity, 5)
        self.assertEqual(CartItem.objects.filter(cart__user=self.buyer).count(), 2)

    def test_inactive_product_rejected(self):
        TestDataFactory.create_cart(self.buyer, [(self.oven, 1)])
        self.oven.active = False
        self.oven.save()
        with self.assertRaises(CheckoutError) as ctx:
            checkout(self.buyer, SHIPPING)
        self.assertEqual(ctx.exception.details, [self.oven.name])


class CartAPITests(TestCase):
    def setUp(self):
        self.buyer = TestDataFactory.create_user()
        self.supplier_a = TestDataFactory.create_supplier()
        self.supplier_b = TestDataFactory.create_supplier()
        self.p1 = TestDataFactory.create_product(supplier=self.supplier_a, price=Decimal('100.00'))
        self.p2 = TestDataFactory.create_product(supplier=self.supplier_a, price=Decimal('50.00'))
        self.p3 = TestDataFactory.create_product(supplier=self.supplier_b, price=Decimal('30.00'))
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.buyer)

    def test_cart_requires_auth(self):
        self.client.logout()
        response = self.client.get('/api/v1/cart/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_add_groups_by_supplier(self):
        for product, quantity in ((self.p1, 1), (self.p2, 2), (self.p3, 1)):
            response = self.client.post('/api/v1/cart/items/', {
                'product_id': product.id, 'quantity': quantity
            }, format='json')
            self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        self.assertEqual(response.data['total_items'], 4)
        self.assertEqual(response.data['total_price'], '230.00')
        suppliers = response.data['suppliers']
        self.assertEqual([s['supplier_id'] for s in suppliers], [self.supplier_a.id, self.supplier_b.id])
        self.assertEqual(suppliers[0]['subtotal'], '200.00')
        self.assertTrue(AuditLog.objects.filter(action='cart_add', user=self.buyer).exists())

    def test_adding_twice_increments(self):
        self.client.post('/api/v1/cart/items/', {'product_id': self.p1.id, 'quantity': 1}, format='json')
        response = self.client.post('/api/v1/cart/items/', {'product_id': self.p1.id, 'quantity': 2},
                                    format='json')
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['items'][0]['quantity'], 3)

    def test_add_unknown_product(self):
        response = self.client.post('/api/v1/cart/items/', {'product_id': 999999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_add_inactive_product(self):
        hidden = TestDataFactory.create_product(active=False)
        response = self.client.post('/api/v1/cart/items/', {'product_id': hidden.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_to_zero_removes_line(self):
        cart = TestDataFactory.create_cart(self.buyer, [(self.p1, 2)])
        item = cart.items.get()
        response = self.client.patch(f'/api/v1/cart/items/{item.id}/', {'quantity': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'], [])
        self.assertFalse(CartItem.objects.filter(pk=item.pk).exists())

    def test_cannot_touch_other_users_item(self):
        other_cart = TestDataFactory.create_cart(TestDataFactory.create_user(), [(self.p1, 1)])
        item = other_cart.items.get()
        response = self.client.delete(f'/api/v1/cart/items/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_clear_cart(self):
        TestDataFactory.create_cart(self.buyer, [(self.p1, 1), (self.p3, 1)])
        response = self.client.delete('/api/v1/cart/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_items'], 0)

    def test_checkout_endpoint(self):
        TestDataFactory.create_cart(self.buyer, [(self.p1, 1), (self.p3, 2)])
        response = self.client.post('/api/v1/cart/checkout/', SHIPPING, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total'], '160.00')
        self.assertEqual(len(response.data['sales']), 2)
        self.assertEqual(len(response.data['suppliers']), 2)
        self.assertTrue(AuditLog.objects.filter(action='cart_checkout',
                                                object_reference=response.data['order_number']).exists())

        orders = self.client.get('/api/v1/orders/')
        self.assertEqual([o['id'] for o in orders.data], [response.data['id']])

    def test_checkout_validation_errors(self):
        response = self.client.post('/api/v1/cart/checkout/', {'name': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('address', response.data)

        response = self.client.post('/api/v1/cart/checkout/', SHIPPING, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cart is empty')

    def test_checkout_insufficient_stock_details(self):
        TestDataFactory.create_cart(self.buyer, [(self.p1, 50)])
        response = self.client.post('/api/v1/cart/checkout/', SHIPPING, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['details'][0]['product_id'], self.p1.id)

    def test_orders_are_private(self):
        TestDataFactory.create_cart(self.buyer, [(self.p1, 1)])
        order = checkout(self.buyer, SHIPPING)
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class SaleAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.supplier = TestDataFactory.create_supplier()
        self.product = TestDataFactory.create_product(supplier=self.supplier, price=Decimal('200.00'))
        TestDataFactory.create_commission_setting(5)

    def test_anonymous_direct_sale(self):
        response = self.client.post('/api/v1/sales/', {'product': self.product.id, 'quantity': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['buyer'])
        self.assertEqual(response.data['total_price'], '400.00')
        self.assertEqual(response.data['commission_amount'], '20.00')
        self.assertEqual(response.data['net_amount'], '380.00')

    def test_explicit_amounts_kept(self):
        response = self.client.post('/api/v1/sales/', {
            'product': self.product.id, 'quantity': 1, 'total_price': '150.00',
            'commission_rate': '10.00', 'commission_amount': '15.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['commission_rate'], '10.00')

    def test_list_requires_auth(self):
        response = self.client.get('/api/v1/sales/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_supplier_sees_own_sales(self):
        TestDataFactory.create_sale(self.product)
        TestDataFactory.create_sale(TestDataFactory.create_product())
        self.client.authenticate_user(self.supplier)
        response = self.client.get('/api/v1/sales/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['supplier'], self.supplier.id)

    def test_admin_filters_by_product(self):
        TestDataFactory.create_sale(self.product)
        TestDataFactory.create_sale(TestDataFactory.create_product())
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get(f'/api/v1/sales/?product={self.product.id}')
        self.assertEqual(len(response.data), 1)


class PaymentIntentTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_minor_units(self):
        self.assertEqual(to_minor_units('10.005'), 1001)
        with self.assertRaises(ValueError):
            to_minor_units('-1')
        with self.assertRaises(ValueError):
            to_minor_units('abc')

    @override_settings(STRIPE_SECRET_KEY='')
    def test_not_configured(self):
        with self.assertRaises(PaymentNotConfigured):
            create_payment_intent('10.00')
        response = self.client.post('/api/v1/payments/intent/', {'amount': '10.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)

    @override_settings(STRIPE_SECRET_KEY='sk_test_123', PAYMENT_CURRENCY='brl')
    @patch('gastro.orders.services.requests.post')
    def test_intent_created_and_linked(self, mock_post):
        mock_post.return_value = MagicMock(status_code=200, json=lambda: {
            'id': 'pi_123', 'client_secret': 'pi_123_secret'
        })
        buyer_cart = TestDataFactory.create_cart(self.user, [(TestDataFactory.create_product(), 1)])
        self.assertTrue(buyer_cart.items.exists())
        order = checkout(self.user, SHIPPING)

        response = self.client.post('/api/v1/payments/intent/', {
            'amount': '100.00', 'order_id': order.id
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['client_secret'], 'pi_123_secret')
        self.assertEqual(response.data['amount'], 10000)
        _, kwargs = mock_post.call_args
        self.assertEqual(kwargs['data']['amount'], 10000)
        self.assertEqual(kwargs['data']['metadata[order_number]'], order.order_number)
        order.refresh_from_db()
        self.assertEqual(order.payment_intent_id, 'pi_123')

    @override_settings(STRIPE_SECRET_KEY='sk_test_123')
    @patch('gastro.orders.services.requests.post')
    def test_provider_error(self, mock_post):
        mock_post.return_value = MagicMock(status_code=402, json=lambda: {
            'error': {'message': 'Your card was declined.'}
        })
        with self.assertRaises(PaymentError):
            create_payment_intent('10.00')
        response = self.client.post('/api/v1/payments/intent/', {'amount': '10.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['error'], 'Your card was declined.')

    @override_settings(STRIPE_SECRET_KEY='sk_test_123')
    @patch('gastro.orders.services.requests.post', side_effect=requests.exceptions.ConnectionError('down'))
    def test_provider_unreachable(self, mock_post):
        response = self.client.post('/api/v1/payments/intent/', {'amount': '10.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)

    @override_settings(STRIPE_SECRET_KEY='sk_test_123')
    @patch('gastro.orders.services.requests.post')
    def test_unreadable_provider_response(self, mock_post):
        mock_post.return_value = MagicMock(status_code=200)
        mock_post.return_value.json.side_effect = ValueError('No JSON object could be decoded')
        response = self.client.post('/api/v1/payments/intent/', {'amount': '10.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['error'], 'Invalid response from payment provider')

    @override_settings(STRIPE_SECRET_KEY='sk_test_123')
    def test_invalid_amount(self):
        response = self.client.post('/api/v1/payments/intent/', {'amount': '0'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
