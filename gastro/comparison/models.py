from django.conf import settings
from django.db import models

from gastro.catalog.models import unique_slug


class ProductGroup(models.Model):
    """Equivalent products from different suppliers, compared side by side"""
    name = models.CharField(max_length=255, db_index=True)
    display_name = models.CharField(max_length=255, blank=True)
    slug = models.SlugField(max_length=280, unique=True, blank=True)
    category = models.ForeignKey('catalog.Category', on_delete=models.SET_NULL, null=True, blank=True,
                                 related_name='product_groups')
    description = models.TextField(blank=True)
    features = models.JSONField(default=list, blank=True)
    thumbnail_url = models.URLField(max_length=500, blank=True)
    min_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    max_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    avg_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    products_count = models.IntegerField(default=0)
    suppliers_count = models.IntegerField(default=0)
    comparison_count = models.IntegerField(default=0)
    search_relevance = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.display_name or self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(ProductGroup, self.name, self.pk, max_length=280)
        if not self.display_name:
            self.display_name = self.name
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'product_groups'
        ordering = ['-search_relevance', 'name']


class ProductGroupItem(models.Model):
    """Membership of a product in a group, with its price position"""
    group = models.ForeignKey(ProductGroup, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='group_items')
    supplier = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='group_items')
    price_difference = models.DecimalField(max_digits=8, decimal_places=2, default=0,
                                           help_text="Percent above (+) or below (-) the group average")
    is_highlighted = models.BooleanField(default=False)
    match_confidence = models.IntegerField(default=100)
    total_sales = models.IntegerField(default=0)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.group} / {self.product}"

    class Meta:
        db_table = 'product_group_items'
        ordering = ['sort_order', 'id']
        unique_together = [['group', 'product']]


class ProductSearch(models.Model):
    """A search or comparison performed by a signed-in user"""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='product_searches')
    query = models.CharField(max_length=255, blank=True)
    category = models.ForeignKey('catalog.Category', on_delete=models.SET_NULL, null=True, blank=True,
                                 related_name='searches')
    group = models.ForeignKey(ProductGroup, on_delete=models.SET_NULL, null=True, blank=True, related_name='searches')
    filters = models.JSONField(default=dict, blank=True)
    results_count = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'product_searches'
        ordering = ['-created_at']


class ProductComparison(models.Model):
    """Stored result of comparing a group's offers"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('processing', 'Processing'),
        ('completed', 'Completed'),
        ('failed', 'Failed'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='product_comparisons')
    search = models.ForeignKey(ProductSearch, on_delete=models.SET_NULL, null=True, blank=True, related_name='comparisons')
    group = models.ForeignKey(ProductGroup, on_delete=models.CASCADE, related_name='comparisons')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    sort_type = models.CharField(max_length=20, default='price_asc')
    filters = models.JSONField(default=dict, blank=True)
    products_compared = models.IntegerField(default=0)
    selected_product = models.ForeignKey('catalog.Product', on_delete=models.SET_NULL, null=True, blank=True,
                                         related_name='selected_in_comparisons')
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'product_comparisons'
        ordering = ['-created_at']


class ProductComparisonDetail(models.Model):
    """One product's line in a stored comparison"""
    comparison = models.ForeignKey(ProductComparison, on_delete=models.CASCADE, related_name='details')
    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='comparison_details')
    supplier = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='comparison_details')
    price = models.DecimalField(max_digits=12, decimal_places=2)
    price_rank = models.IntegerField()
    stock_status = models.CharField(max_length=20, blank=True)
    highlighted_features = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = 'product_comparison_details'
        ordering = ['price_rank']
