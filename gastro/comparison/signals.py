"""
Keep group price statistics current when member products change
"""
from django.db.models.signals import post_save
from django.dispatch import receiver

from gastro.catalog.models import Product
from .services import refresh_groups_for_product


@receiver(post_save, sender=Product)
def product_changed(sender, instance, created, **kwargs):
    if created:
        return
    refresh_groups_for_product(instance)
