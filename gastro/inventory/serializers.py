from rest_framework import serializers
from .models import Stock, StockAdjustment


class StockSerializer(serializers.ModelSerializer):
    product_id = serializers.IntegerField(source='product.id', read_only=True)
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_slug = serializers.CharField(source='product.slug', read_only=True)
    supplier_id = serializers.IntegerField(source='product.supplier_id', read_only=True)
    active = serializers.BooleanField(source='product.active', read_only=True)

    class Meta:
        model = Stock
        fields = ['id', 'product_id', 'product_name', 'product_slug', 'supplier_id', 'active',
                  'quantity', 'low_stock_threshold', 'status', 'last_stock_update']
        read_only_fields = ['status', 'last_stock_update']


class StockAdjustmentSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = StockAdjustment
        fields = ['id', 'product', 'product_name', 'previous_quantity', 'new_quantity', 'delta',
                  'reason', 'notes', 'created_by', 'created_by_username', 'created_at']
        read_only_fields = fields


class BulkStockRowSerializer(serializers.Serializer):
    """One row of a bulk inventory update"""
    id = serializers.IntegerField()
    stock = serializers.IntegerField(required=False, min_value=0)
    low_stock_threshold = serializers.IntegerField(required=False, min_value=0)

    def validate(self, attrs):
        if 'stock' not in attrs and 'low_stock_threshold' not in attrs:
            raise serializers.ValidationError('Nothing to update: provide stock or low_stock_threshold')
        return attrs
