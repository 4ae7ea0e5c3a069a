from rest_framework import serializers
from .models import CommissionSetting, ProductCommissionSetting


class CommissionSettingSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    supplier_name = serializers.CharField(source='supplier.display_name', read_only=True, default=None)
    type = serializers.CharField(source='scope', read_only=True)

    class Meta:
        model = CommissionSetting
        fields = ['id', 'category', 'category_name', 'supplier', 'supplier_name', 'rate', 'type',
                  'active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_supplier(self, value):
        if value is not None and value.role != 'supplier':
            raise serializers.ValidationError('Commission settings can only target supplier accounts')
        return value


class ApplicableCommissionSettingSerializer(CommissionSettingSerializer):
    """A setting as it applies to one supplier, with its precedence"""
    priority = serializers.IntegerField(read_only=True)

    class Meta(CommissionSettingSerializer.Meta):
        fields = CommissionSettingSerializer.Meta.fields + ['priority']


class ProductCommissionSettingSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)

    class Meta:
        model = ProductCommissionSetting
        fields = ['id', 'product', 'product_name', 'supplier', 'rate', 'active', 'created_at', 'updated_at']
        read_only_fields = ['supplier', 'created_at', 'updated_at']

    def validate(self, attrs):
        product = attrs.get('product', getattr(self.instance, 'product', None))
        active = attrs.get('active', getattr(self.instance, 'active', True))
        if product is not None and active:
            clashing = ProductCommissionSetting.objects.filter(product=product, active=True)
            if self.instance is not None:
                clashing = clashing.exclude(pk=self.instance.pk)
            if clashing.exists():
                raise serializers.ValidationError({'product': 'This product already has an active commission setting'})
        return attrs

    def create(self, validated_data):
        validated_data['supplier'] = validated_data['product'].supplier
        return super().create(validated_data)

    def update(self, instance, validated_data):
        if 'product' in validated_data:
            validated_data['supplier'] = validated_data['product'].supplier
        return super().update(instance, validated_data)


class CommissionRateSerializer(serializers.Serializer):
    rate = serializers.DecimalField(max_digits=5, decimal_places=2)
    type = serializers.CharField()
    setting_id = serializers.IntegerField()


class CommissionSummarySerializer(serializers.Serializer):
    avg_rate = serializers.CharField()
    specific_rates_count = serializers.IntegerField()
    total_commission = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_products = serializers.IntegerField()
    categories_count = serializers.IntegerField()
    most_common_rate = serializers.CharField()
    most_common_rate_count = serializers.IntegerField()
