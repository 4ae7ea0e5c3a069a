"""
Cache invalidation signals
Automatically invalidate cache when data changes
"""
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import (
    invalidate_products_cache, invalidate_comparison_cache, invalidate_dashboard_cache
)

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()

PRODUCT_MODELS = {'Product', 'Category', 'ProductImage', 'Stock'}
COMPARISON_MODELS = {'ProductGroup', 'ProductGroupItem', 'ProductComparison', 'ProductSearch'}
# Model name -> app label; supplier dashboards also carry product and stock counts
DASHBOARD_MODELS = {'Sale': 'orders', 'Order': 'orders', 'Product': 'catalog', 'Stock': 'inventory'}


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Remember to manually invalidate cache after the block!
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


def _on_commit(func):
    # Invalidate after commit so the cache is not repopulated with stale rows
    transaction.on_commit(func)


@receiver([post_save, post_delete])
def invalidate_products_cache_signal(sender, instance, **kwargs):
    """Invalidate product lists when catalog or stock rows change"""
    if is_suspended() or sender.__name__ not in PRODUCT_MODELS:
        return
    if sender._meta.app_label not in ('catalog', 'inventory'):
        return
    try:
        _on_commit(invalidate_products_cache)
    except Exception as e:
        logger.warning(f"Error in invalidate_products_cache signal: {e}")


@receiver([post_save, post_delete])
def invalidate_comparison_cache_signal(sender, instance, **kwargs):
    """Invalidate comparison results and marketplace stats when groups change"""
    if is_suspended() or sender.__name__ not in COMPARISON_MODELS:
        return
    if sender._meta.app_label != 'comparison':
        return
    try:
        _on_commit(invalidate_comparison_cache)
    except Exception as e:
        logger.warning(f"Error in invalidate_comparison_cache signal: {e}")


@receiver([post_save, post_delete])
def invalidate_dashboard_cache_signal(sender, instance, **kwargs):
    """Invalidate dashboards when orders, sales, products or stock change"""
    if is_suspended() or DASHBOARD_MODELS.get(sender.__name__) != sender._meta.app_label:
        return
    try:
        _on_commit(invalidate_dashboard_cache)
    except Exception as e:
        logger.warning(f"Error in invalidate_dashboard_cache signal: {e}")
