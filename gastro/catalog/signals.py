"""
Keep Category.products_count in sync with the products table
"""
import logging

from django.db.models.signals import post_save, post_delete, post_init
from django.dispatch import receiver

from .models import Category, Product

logger = logging.getLogger(__name__)


@receiver(post_init, sender=Product)
def remember_original_category(sender, instance, **kwargs):
    instance._original_category_id = instance.category_id


def _refresh_counts(category_ids):
    for category in Category.objects.filter(pk__in=[c for c in category_ids if c]):
        category.refresh_products_count()


@receiver(post_save, sender=Product)
def product_saved(sender, instance, **kwargs):
    _refresh_counts({instance.category_id, getattr(instance, '_original_category_id', None)})
    instance._original_category_id = instance.category_id


@receiver(post_delete, sender=Product)
def product_deleted(sender, instance, **kwargs):
    _refresh_counts({instance.category_id})
