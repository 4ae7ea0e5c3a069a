from rest_framework import serializers

from gastro.catalog.serializers import ProductListSerializer
from gastro.core.serializers import PublicUserSerializer
from .models import ProductGroup, ProductGroupItem, ProductSearch, ProductComparison, ProductComparisonDetail


class ProductGroupSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)

    class Meta:
        model = ProductGroup
        fields = ['id', 'name', 'display_name', 'slug', 'category', 'category_name', 'description',
                  'features', 'thumbnail_url', 'min_price', 'max_price', 'avg_price', 'products_count',
                  'suppliers_count', 'comparison_count', 'search_relevance', 'is_active',
                  'created_at', 'updated_at']
        read_only_fields = ['slug', 'min_price', 'max_price', 'avg_price', 'products_count',
                            'suppliers_count', 'comparison_count', 'search_relevance',
                            'created_at', 'updated_at']

    def validate_features(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('Features must be a list')
        return value


class ProductGroupItemSerializer(serializers.ModelSerializer):
    product = ProductListSerializer(read_only=True)
    supplier = PublicUserSerializer(read_only=True)

    class Meta:
        model = ProductGroupItem
        fields = ['id', 'group', 'product', 'supplier', 'price_difference', 'is_highlighted',
                  'match_confidence', 'total_sales', 'sort_order', 'created_at']
        read_only_fields = fields


class GroupItemCreateSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    match_confidence = serializers.IntegerField(required=False, min_value=0, max_value=100, default=100)


class ComparedItemSerializer(ProductGroupItemSerializer):
    """Group item annotated by compare_group()"""
    price_rank = serializers.IntegerField(read_only=True)
    savings = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    savings_percentage = serializers.IntegerField(read_only=True)
    stock_status = serializers.CharField(read_only=True)

    class Meta(ProductGroupItemSerializer.Meta):
        fields = ProductGroupItemSerializer.Meta.fields + ['price_rank', 'savings', 'savings_percentage',
                                                           'stock_status']
        read_only_fields = fields


class ProductSearchSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductSearch
        fields = ['id', 'query', 'category', 'group', 'filters', 'results_count', 'created_at']


class ProductComparisonDetailSerializer(serializers.ModelSerializer):
    product = ProductListSerializer(read_only=True)

    class Meta:
        model = ProductComparisonDetail
        fields = ['id', 'product', 'supplier', 'price', 'price_rank', 'stock_status', 'highlighted_features']


class ProductComparisonSerializer(serializers.ModelSerializer):
    group_name = serializers.CharField(source='group.display_name', read_only=True)

    class Meta:
        model = ProductComparison
        fields = ['id', 'group', 'group_name', 'search', 'status', 'sort_type', 'filters',
                  'products_compared', 'selected_product', 'expires_at', 'created_at']
        read_only_fields = fields


class ProductComparisonDetailedSerializer(ProductComparisonSerializer):
    details = ProductComparisonDetailSerializer(many=True, read_only=True)

    class Meta(ProductComparisonSerializer.Meta):
        fields = ProductComparisonSerializer.Meta.fields + ['details']
        read_only_fields = fields


class NameComparisonSerializer(serializers.Serializer):
    """One entry of the name-based comparison"""
    name = serializers.CharField()
    normalized_name = serializers.CharField()
    products = ProductListSerializer(many=True)
    min_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    max_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    savings = serializers.DecimalField(max_digits=12, decimal_places=2)
    savings_percentage = serializers.IntegerField()
