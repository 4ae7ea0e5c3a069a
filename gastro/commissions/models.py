from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.db.models import Q

RATE_VALIDATORS = [MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]


class CommissionSetting(models.Model):
    """
    Marketplace commission rule. The scope is given by which of
    supplier / category are set: both (specific), supplier only,
    category only, or neither (global).
    """
    category = models.ForeignKey('catalog.Category', on_delete=models.CASCADE, null=True, blank=True,
                                 related_name='commission_settings')
    supplier = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, null=True, blank=True,
                                 related_name='commission_settings', limit_choices_to={'role': 'supplier'})
    rate = models.DecimalField(max_digits=5, decimal_places=2, validators=RATE_VALIDATORS,
                               help_text="Commission percentage")
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def scope(self):
        if self.supplier_id and self.category_id:
            return 'specific'
        if self.supplier_id:
            return 'supplier'
        if self.category_id:
            return 'category'
        return 'global'

    def __str__(self):
        return f"{self.scope} commission {self.rate}%"

    class Meta:
        db_table = 'commission_settings'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['supplier', 'category', 'active'], name='idx_commission_scope'),
        ]


class ProductCommissionSetting(models.Model):
    """Per-product override that beats every other commission rule"""
    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='commission_overrides')
    supplier = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE,
                                 related_name='product_commission_settings')
    rate = models.DecimalField(max_digits=5, decimal_places=2, validators=RATE_VALIDATORS)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.product.name}: {self.rate}%"

    class Meta:
        db_table = 'product_commission_settings'
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['product'], condition=Q(active=True),
                                    name='uniq_active_product_commission'),
        ]
