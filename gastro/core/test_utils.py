"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from gastro.catalog.models import Category, Product
from gastro.commissions.models import CommissionSetting, ProductCommissionSetting
from gastro.comparison.models import ProductGroup, ProductGroupItem
from gastro.chat.models import ChatConversation, ChatMessage
from gastro.inventory.models import Stock
from gastro.orders.models import Cart, CartItem, Sale
from gastro.support.models import FaqCategory, FaqItem
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='user', name=None,
                    company_name=None, is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            name=name or username,
            company_name=company_name,
            is_staff=is_staff,
            is_superuser=is_superuser
        )
        return user

    @staticmethod
    def create_supplier(username=None, company_name=None, **kwargs):
        """Create a supplier account"""
        if not username:
            username = f'supplier_{TestDataFactory.random_string(6)}'
        return TestDataFactory.create_user(
            username=username,
            role='supplier',
            company_name=company_name or f'Company {username}',
            **kwargs
        )

    @staticmethod
    def create_admin(username=None, **kwargs):
        """Create an admin account"""
        if not username:
            username = f'admin_{TestDataFactory.random_string(6)}'
        return TestDataFactory.create_user(username=username, role='admin', is_staff=True, **kwargs)

    @staticmethod
    def create_category(name=None, slug=None, icon=''):
        """Create a test category"""
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        return Category.objects.create(name=name, slug=slug or '', icon=icon)

    @staticmethod
    def create_product(supplier=None, category=None, name=None, price=Decimal('100.00'), stock=10,
                       low_stock_threshold=None, active=True, rating=Decimal('0.00'), **kwargs):
        """Create a test product with its stock row"""
        if not supplier:
            supplier = TestDataFactory.create_supplier()
        if not category:
            category = TestDataFactory.create_category()
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        product = Product.objects.create(
            name=name,
            category=category,
            supplier=supplier,
            price=Decimal(str(price)),
            rating=Decimal(str(rating)),
            active=active,
            **kwargs
        )
        stock_row, _ = Stock.objects.get_or_create(product=product)
        stock_row.quantity = stock
        if low_stock_threshold is not None:
            stock_row.low_stock_threshold = low_stock_threshold
        stock_row.save()
        product.refresh_from_db()
        return product

    @staticmethod
    def create_commission_setting(rate, category=None, supplier=None, active=True):
        """Create a commission rule; scope follows from category/supplier"""
        return CommissionSetting.objects.create(
            rate=Decimal(str(rate)),
            category=category,
            supplier=supplier,
            active=active
        )

    @staticmethod
    def create_product_commission(product, rate, active=True):
        return ProductCommissionSetting.objects.create(
            product=product,
            supplier=product.supplier,
            rate=Decimal(str(rate)),
            active=active
        )

    @staticmethod
    def create_group(name=None, category=None, products=None):
        """Create a product group, optionally with member products (stats refreshed)"""
        from gastro.comparison.services import refresh_group_stats
        if not name:
            name = f'Group_{TestDataFactory.random_string(6)}'
        group = ProductGroup.objects.create(name=name, category=category)
        for product in products or []:
            ProductGroupItem.objects.create(group=group, product=product, supplier=product.supplier)
        refresh_group_stats(group)
        group.refresh_from_db()
        return group

    @staticmethod
    def create_cart(user, items=None):
        """Create the active cart; items is a list of (product, quantity)"""
        cart, _ = Cart.objects.get_or_create(user=user, status='active')
        for product, quantity in items or []:
            CartItem.objects.create(cart=cart, product=product, quantity=quantity)
        return cart

    @staticmethod
    def create_sale(product, quantity=1, buyer=None, commission_rate=Decimal('5.00')):
        """Create a completed sale line"""
        total = product.price * quantity
        rate = Decimal(str(commission_rate))
        return Sale.objects.create(
            product=product,
            supplier=product.supplier,
            buyer=buyer,
            quantity=quantity,
            unit_price=product.price,
            total_price=total,
            commission_rate=rate,
            commission_amount=(total * rate / 100).quantize(Decimal('0.01'))
        )

    @staticmethod
    def create_conversation(participants, subject='Support'):
        conversation = ChatConversation.objects.create(subject=subject, participant=participants[0])
        conversation.participants.add(*participants)
        return conversation

    @staticmethod
    def create_message(conversation, sender, receiver=None, message='Hello'):
        return ChatMessage.objects.create(
            conversation=conversation,
            sender=sender,
            receiver=receiver,
            message=message
        )

    @staticmethod
    def create_faq_category(name=None, sort_order=0):
        if not name:
            name = f'Faq_{TestDataFactory.random_string(6)}'
        return FaqCategory.objects.create(name=name, sort_order=sort_order)

    @staticmethod
    def create_faq_item(category, question=None, answer='Answer', active=True, sort_order=0):
        return FaqItem.objects.create(
            category=category,
            question=question or f'Question {TestDataFactory.random_string(6)}?',
            answer=answer,
            active=active,
            sort_order=sort_order
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
