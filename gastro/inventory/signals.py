from django.db.models.signals import post_save
from django.dispatch import receiver

from gastro.catalog.models import Product
from .models import Stock


@receiver(post_save, sender=Product)
def ensure_stock_row(sender, instance, created, **kwargs):
    """Every product has exactly one stock row"""
    if created:
        Stock.objects.get_or_create(product=instance)
