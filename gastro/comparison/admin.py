from django.contrib import admin
from .models import ProductGroup, ProductGroupItem, ProductSearch, ProductComparison, ProductComparisonDetail


class ProductGroupItemInline(admin.TabularInline):
    model = ProductGroupItem
    extra = 0
    fields = ['product', 'supplier', 'price_difference', 'is_highlighted', 'match_confidence', 'total_sales', 'sort_order']
    readonly_fields = ['supplier', 'price_difference', 'is_highlighted', 'sort_order']


@admin.register(ProductGroup)
class ProductGroupAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'min_price', 'max_price', 'products_count', 'suppliers_count',
                    'comparison_count', 'is_active']
    list_filter = ['is_active', 'category']
    search_fields = ['name', 'display_name', 'slug']
    readonly_fields = ['min_price', 'max_price', 'avg_price', 'products_count', 'suppliers_count',
                       'comparison_count', 'search_relevance', 'created_at', 'updated_at']
    inlines = [ProductGroupItemInline]


class ProductComparisonDetailInline(admin.TabularInline):
    model = ProductComparisonDetail
    extra = 0


@admin.register(ProductComparison)
class ProductComparisonAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'group', 'status', 'sort_type', 'products_compared', 'created_at']
    list_filter = ['status', 'sort_type', 'created_at']
    inlines = [ProductComparisonDetailInline]


@admin.register(ProductSearch)
class ProductSearchAdmin(admin.ModelAdmin):
    list_display = ['query', 'user', 'category', 'results_count', 'created_at']
    list_filter = ['created_at']
    search_fields = ['query', 'user__username']
