from rest_framework import serializers

from gastro.core.models import User


class SupplierProfileSerializer(serializers.ModelSerializer):
    """Public supplier card; email and password never leave the server"""
    products_count = serializers.IntegerField(read_only=True)
    rating = serializers.CharField(read_only=True)
    categories = serializers.ListField(child=serializers.CharField(), read_only=True)
    verified = serializers.BooleanField(read_only=True)
    joined_date = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'name', 'company_name', 'phone', 'role', 'products_count',
                  'rating', 'categories', 'verified', 'joined_date', 'created_at']


class SupplierInfoSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'name', 'company_name', 'cnpj', 'phone']
