from rest_framework import serializers

from gastro.catalog.models import Product
from gastro.catalog.serializers import ProductListSerializer
from .models import CartItem, Order, Sale


class CartItemSerializer(serializers.ModelSerializer):
    product = ProductListSerializer(read_only=True)
    line_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = ['id', 'product', 'quantity', 'line_total', 'created_at', 'updated_at']


class CartItemCreateSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)

    def validate_product_id(self, value):
        if not Product.objects.filter(pk=value).exists():
            raise serializers.ValidationError('Product not found')
        return value


class CartItemUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


class SupplierGroupSerializer(serializers.Serializer):
    supplier_id = serializers.IntegerField()
    supplier_name = serializers.CharField()
    items = CartItemSerializer(many=True)
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2)


class CartSerializer(serializers.Serializer):
    id = serializers.IntegerField(source='cart.id')
    items = CartItemSerializer(many=True)
    total_items = serializers.IntegerField()
    total_price = serializers.DecimalField(max_digits=14, decimal_places=2)
    suppliers = SupplierGroupSerializer(many=True)


class CheckoutSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    address = serializers.CharField(max_length=500)
    city = serializers.CharField(max_length=120)
    state = serializers.CharField(max_length=60)
    zip_code = serializers.CharField(max_length=20)
    phone = serializers.CharField(max_length=30)


class SaleSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    supplier_name = serializers.CharField(source='supplier.display_name', read_only=True)
    buyer_name = serializers.SerializerMethodField()
    order_number = serializers.CharField(source='order.order_number', read_only=True, default=None)
    net_amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Sale
        fields = ['id', 'product', 'product_name', 'supplier', 'supplier_name', 'buyer', 'buyer_name',
                  'order', 'order_number', 'quantity', 'unit_price', 'total_price', 'commission_rate',
                  'commission_amount', 'net_amount', 'status', 'created_at']
        read_only_fields = fields

    def get_buyer_name(self, obj):
        return obj.buyer.display_name if obj.buyer_id else None


class SaleCreateSerializer(serializers.Serializer):
    """Direct sale record; omitted money fields are computed"""
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.select_related('supplier'))
    quantity = serializers.IntegerField(min_value=1)
    total_price = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, min_value=0)
    commission_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False,
                                               min_value=0, max_value=100)
    commission_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, min_value=0)


class SupplierSalesGroupSerializer(serializers.Serializer):
    supplier_id = serializers.IntegerField()
    supplier_name = serializers.CharField()
    items = SaleSerializer(many=True)
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2)


class OrderSerializer(serializers.ModelSerializer):
    sales = SaleSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = ['id', 'order_number', 'buyer', 'status', 'shipping_name', 'shipping_address',
                  'shipping_city', 'shipping_state', 'shipping_zip_code', 'shipping_phone',
                  'subtotal', 'total', 'payment_intent_id', 'sales', 'created_at', 'updated_at']
        read_only_fields = fields


class PaymentIntentSerializer(serializers.Serializer):
    amount = serializers.CharField()
    order_id = serializers.IntegerField(required=False)
