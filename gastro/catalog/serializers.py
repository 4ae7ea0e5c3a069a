from django.conf import settings
from django.db import transaction
from rest_framework import serializers

from gastro.core.serializers import PublicUserSerializer
from gastro.inventory.models import Stock
from gastro.inventory.services import set_stock
from .models import Category, Product, ProductImage


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'description', 'icon', 'products_count', 'is_active',
                  'created_at', 'updated_at']
        read_only_fields = ['products_count', 'created_at', 'updated_at']
        extra_kwargs = {'slug': {'required': False}}


class ProductImageSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductImage
        fields = ['id', 'product', 'image_url', 'image_data', 'image_type', 'is_primary',
                  'sort_order', 'created_at']
        read_only_fields = ['product', 'created_at']

    def validate(self, attrs):
        image_url = attrs.get('image_url', getattr(self.instance, 'image_url', ''))
        image_data = attrs.get('image_data', getattr(self.instance, 'image_data', ''))
        if not image_url and not image_data:
            raise serializers.ValidationError('Either image_url or image_data is required')
        return attrs


class ProductSerializer(serializers.ModelSerializer):
    """Full product representation used for detail, create and update"""
    category_name = serializers.CharField(source='category.name', read_only=True)
    supplier_name = serializers.SerializerMethodField()
    additional_categories = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(), many=True, required=False
    )
    stock = serializers.IntegerField(write_only=True, required=False, min_value=0)
    low_stock_threshold = serializers.IntegerField(write_only=True, required=False, min_value=0)
    stock_quantity = serializers.SerializerMethodField()
    stock_status = serializers.SerializerMethodField()
    images = ProductImageSerializer(many=True, read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'slug', 'description', 'category', 'category_name',
                  'additional_categories', 'supplier', 'supplier_name', 'price', 'original_price',
                  'discount', 'rating', 'ratings_count', 'features', 'image_url', 'active',
                  'stock', 'low_stock_threshold', 'stock_quantity', 'stock_status', 'images',
                  'created_at', 'updated_at']
        read_only_fields = ['slug', 'created_at', 'updated_at']
        extra_kwargs = {'supplier': {'required': False}}

    def get_supplier_name(self, obj):
        return obj.supplier.display_name if obj.supplier_id else None

    def _stock(self, obj):
        try:
            return obj.stock
        except Stock.DoesNotExist:
            return None

    def get_stock_quantity(self, obj):
        stock = self._stock(obj)
        return stock.quantity if stock else 0

    def get_stock_status(self, obj):
        stock = self._stock(obj)
        return stock.status if stock else Stock.STATUS_OUT_OF_STOCK

    def validate_price(self, value):
        if value <= 0:
            raise serializers.ValidationError('Price must be greater than zero')
        return value

    def validate_rating(self, value):
        if value < 0 or value > 5:
            raise serializers.ValidationError('Rating must be between 0 and 5')
        return value

    def validate_discount(self, value):
        if value is not None and (value < 0 or value > 100):
            raise serializers.ValidationError('Discount must be between 0 and 100')
        return value

    def validate_features(self, value):
        if not isinstance(value, list) or not all(isinstance(f, str) for f in value):
            raise serializers.ValidationError('Features must be a list of strings')
        return [f.strip() for f in value if f.strip()]

    def validate_supplier(self, value):
        if value is not None and value.role != 'supplier':
            raise serializers.ValidationError('Products must belong to a supplier account')
        return value

    def validate(self, attrs):
        if not self.instance and not attrs.get('supplier'):
            raise serializers.ValidationError({'supplier': 'This field is required.'})
        return attrs

    def _save_stock(self, product, quantity, threshold):
        request = self.context.get('request')
        set_stock(product, quantity=quantity, low_stock_threshold=threshold, reason='manual',
                  user=request.user if request else None)
        product.refresh_from_db()

    @transaction.atomic
    def create(self, validated_data):
        quantity = validated_data.pop('stock', 0)
        threshold = validated_data.pop('low_stock_threshold', None)
        product = super().create(validated_data)
        self._save_stock(product, quantity, threshold)
        return product

    @transaction.atomic
    def update(self, instance, validated_data):
        quantity = validated_data.pop('stock', None)
        threshold = validated_data.pop('low_stock_threshold', None)
        product = super().update(instance, validated_data)
        if quantity is not None or threshold is not None:
            self._save_stock(product, quantity, threshold)
        return product


class ProductListSerializer(serializers.ModelSerializer):
    """Lighter product representation for listings"""
    category_name = serializers.CharField(source='category.name', read_only=True)
    supplier_name = serializers.SerializerMethodField()
    stock_quantity = serializers.SerializerMethodField()
    stock_status = serializers.SerializerMethodField()
    additional_categories = serializers.PrimaryKeyRelatedField(many=True, read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'slug', 'category', 'category_name', 'additional_categories',
                  'supplier', 'supplier_name', 'price', 'original_price', 'discount', 'rating',
                  'ratings_count', 'features', 'image_url', 'active', 'stock_quantity',
                  'stock_status', 'created_at']

    def get_supplier_name(self, obj):
        return obj.supplier.display_name if obj.supplier_id else None

    def get_stock_quantity(self, obj):
        try:
            return obj.stock.quantity
        except Stock.DoesNotExist:
            return 0

    def get_stock_status(self, obj):
        try:
            return obj.stock.status
        except Stock.DoesNotExist:
            return Stock.STATUS_OUT_OF_STOCK


class ProductSupplierOptionSerializer(ProductListSerializer):
    """A product offer from one supplier, as shown on the 'other suppliers' panel"""
    supplier = PublicUserSerializer(read_only=True)
    is_best_price = serializers.SerializerMethodField()

    class Meta(ProductListSerializer.Meta):
        fields = ProductListSerializer.Meta.fields + ['is_best_price']

    def get_is_best_price(self, obj):
        return obj.pk == self.context.get('best_price_id')


def max_images_reached(product):
    return product.images.count() >= settings.MAX_PRODUCT_IMAGES
