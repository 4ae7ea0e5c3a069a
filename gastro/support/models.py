from django.db import models

from gastro.catalog.models import unique_slug


class FaqCategory(models.Model):
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=220, unique=True, blank=True)
    description = models.TextField(blank=True)
    icon = models.CharField(max_length=100, blank=True)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(FaqCategory, self.name, self.pk)
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'faq_categories'
        ordering = ['sort_order', 'name']
        verbose_name_plural = 'FAQ categories'


class FaqItem(models.Model):
    category = models.ForeignKey(FaqCategory, on_delete=models.CASCADE, related_name='items')
    question = models.CharField(max_length=500)
    answer = models.TextField()
    sort_order = models.IntegerField(default=0)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.question

    class Meta:
        db_table = 'faq_items'
        ordering = ['sort_order', 'id']
