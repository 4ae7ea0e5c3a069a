import django_filters
from django.db.models import Q, Count

from gastro.core.utils import parse_bool
from .models import Product
from .utils import normalize_price_range, price_filter_requested

SORT_OPTIONS = {
    'price_asc': ['price', 'id'],
    'price_desc': ['-price', 'id'],
    'rating_desc': ['-rating', '-ratings_count', 'id'],
    'newest': ['-created_at', '-id'],
    'popularity': ['-sales_count', '-rating', 'id'],
}


class ProductFilter(django_filters.FilterSet):
    """Marketplace product search and filters using django-filter"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.NumberFilter(method='filter_category', label='Category ID')
    supplier = django_filters.NumberFilter(field_name='supplier_id', lookup_expr='exact')
    min_rating = django_filters.NumberFilter(field_name='rating', lookup_expr='gte')
    has_discount = django_filters.CharFilter(method='filter_has_discount', label='Has discount')
    in_stock = django_filters.CharFilter(method='filter_in_stock', label='In stock')
    features = django_filters.CharFilter(method='filter_features', label='Feature')
    active = django_filters.CharFilter(method='filter_active', label='Active')
    sort = django_filters.CharFilter(method='filter_sort', label='Sort')

    class Meta:
        model = Product
        fields = ['search', 'category', 'supplier', 'min_rating', 'has_discount',
                  'in_stock', 'features', 'active', 'sort']

    def filter_queryset(self, queryset):
        queryset = super().filter_queryset(queryset)
        if price_filter_requested(self.data):
            low, high = normalize_price_range(self.data.get('min_price'), self.data.get('max_price'))
            queryset = queryset.filter(price__gte=low, price__lte=high)
        if not self.data.get('sort'):
            queryset = queryset.order_by('-created_at', '-id')
        return queryset

    def filter_search(self, queryset, name, value):
        """Every word must appear in the name or the description"""
        words = (value or '').split()
        for word in words:
            queryset = queryset.filter(Q(name__icontains=word) | Q(description__icontains=word))
        return queryset

    def filter_category(self, queryset, name, value):
        """Primary or additional category; 0 means all categories"""
        if not value:
            return queryset
        return queryset.filter(
            Q(category_id=value) | Q(additional_categories__id=value)
        ).distinct()

    def filter_has_discount(self, queryset, name, value):
        flag = parse_bool(value)
        if flag is None:
            return queryset
        if flag:
            return queryset.filter(discount__gt=0)
        return queryset.filter(Q(discount__isnull=True) | Q(discount=0))

    def filter_in_stock(self, queryset, name, value):
        flag = parse_bool(value)
        if flag is None:
            return queryset
        if flag:
            return queryset.filter(stock__quantity__gt=0)
        return queryset.filter(Q(stock__isnull=True) | Q(stock__quantity__lte=0))

    def filter_features(self, queryset, name, value):
        for feature in [f.strip() for f in (value or '').split(',') if f.strip()]:
            queryset = queryset.filter(features__icontains=feature)
        return queryset

    def filter_active(self, queryset, name, value):
        flag = parse_bool(value)
        if flag is None:
            return queryset
        return queryset.filter(active=flag)

    def filter_sort(self, queryset, name, value):
        ordering = SORT_OPTIONS.get(value, SORT_OPTIONS['newest'])
        if value == 'popularity':
            queryset = queryset.annotate(sales_count=Count('sales', distinct=True))
        return queryset.order_by(*ordering)

