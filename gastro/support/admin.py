from django.contrib import admin
from .models import FaqCategory, FaqItem


class FaqItemInline(admin.StackedInline):
    model = FaqItem
    extra = 0


@admin.register(FaqCategory)
class FaqCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'sort_order']
    prepopulated_fields = {'slug': ('name',)}
    inlines = [FaqItemInline]


@admin.register(FaqItem)
class FaqItemAdmin(admin.ModelAdmin):
    list_display = ['question', 'category', 'sort_order', 'active']
    list_filter = ['category', 'active']
    search_fields = ['question', 'answer']
