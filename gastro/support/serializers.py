from rest_framework import serializers

from .models import FaqCategory, FaqItem


class FaqItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = FaqItem
        fields = ['id', 'category', 'question', 'answer', 'sort_order', 'active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class FaqCategorySerializer(serializers.ModelSerializer):
    items_count = serializers.SerializerMethodField()

    class Meta:
        model = FaqCategory
        fields = ['id', 'name', 'slug', 'description', 'icon', 'sort_order', 'items_count',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        extra_kwargs = {'slug': {'required': False}}

    def get_items_count(self, obj):
        return obj.items.filter(active=True).count()


class FaqCategoryDetailSerializer(FaqCategorySerializer):
    items = serializers.SerializerMethodField()

    class Meta(FaqCategorySerializer.Meta):
        fields = FaqCategorySerializer.Meta.fields + ['items']

    def get_items(self, obj):
        return FaqItemSerializer(obj.items.filter(active=True), many=True).data
