from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import models
from django.utils.text import slugify


def unique_slug(model, value, instance_pk=None, max_length=220):
    """Slugify value and append -2, -3... until it is unique for model"""
    base = slugify(value)[:max_length] or 'item'
    slug = base
    counter = 1
    queryset = model.objects.all()
    if instance_pk:
        queryset = queryset.exclude(pk=instance_pk)
    while queryset.filter(slug=slug).exists():
        counter += 1
        suffix = f"-{counter}"
        slug = f"{base[:max_length - len(suffix)]}{suffix}"
    return slug


class Category(models.Model):
    """Equipment categories (Refrigeração, Cocção, ...)"""
    name = models.CharField(max_length=200, db_index=True)
    slug = models.SlugField(max_length=220, unique=True, blank=True)
    description = models.TextField(blank=True)
    icon = models.CharField(max_length=100, blank=True)
    products_count = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Category, self.name, self.pk)
        super().save(*args, **kwargs)

    def refresh_products_count(self):
        """Recount active products whose primary category is this one"""
        count = self.products.filter(active=True).count()
        Category.objects.filter(pk=self.pk).update(products_count=count)
        self.products_count = count
        return count

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        ordering = ['name']


class Product(models.Model):
    """A supplier's listing of a piece of equipment"""
    name = models.CharField(max_length=255, db_index=True)
    slug = models.SlugField(max_length=280, unique=True, blank=True)
    description = models.TextField(blank=True)
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='products')
    additional_categories = models.ManyToManyField(Category, blank=True, related_name='secondary_products')
    supplier = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='products',
                                 limit_choices_to={'role': 'supplier'})
    price = models.DecimalField(max_digits=12, decimal_places=2)
    original_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    discount = models.IntegerField(null=True, blank=True, help_text="Discount percentage over original price")
    rating = models.DecimalField(max_digits=3, decimal_places=2, default=Decimal('0.00'))
    ratings_count = models.IntegerField(default=0)
    features = models.JSONField(default=list, blank=True)
    image_url = models.URLField(max_length=500, blank=True)
    active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Product, self.name, self.pk, max_length=280)
        if self.discount is None and self.original_price and self.price is not None:
            original = Decimal(self.original_price)
            if original > Decimal(self.price):
                pct = (original - Decimal(self.price)) / original * 100
                self.discount = int(pct.quantize(Decimal('1'), rounding=ROUND_HALF_UP))
        super().save(*args, **kwargs)

    @property
    def normalized_name(self):
        return ' '.join(self.name.lower().split())

    def category_ids(self):
        """Primary plus additional category ids"""
        ids = [self.category_id] if self.category_id else []
        ids.extend(c.pk for c in self.additional_categories.all() if c.pk not in ids)
        return ids

    class Meta:
        db_table = 'products'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['supplier', 'active'], name='idx_products_supplier_active'),
            models.Index(fields=['price'], name='idx_products_price'),
        ]


class ProductImage(models.Model):
    """Gallery image for a product, either hosted (URL) or stored inline as base64"""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='images')
    image_url = models.URLField(max_length=500, blank=True)
    image_data = models.TextField(blank=True, help_text="Base64-encoded image bytes")
    image_type = models.CharField(max_length=50, blank=True, help_text="MIME type, e.g. image/png")
    is_primary = models.BooleanField(default=False)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Image {self.sort_order} of {self.product.name}"

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        if self.is_primary:
            ProductImage.objects.filter(product_id=self.product_id, is_primary=True).exclude(pk=self.pk).update(is_primary=False)

    class Meta:
        db_table = 'product_images'
        ordering = ['sort_order', 'id']
