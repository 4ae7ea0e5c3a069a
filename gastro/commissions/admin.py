from django.contrib import admin
from .models import CommissionSetting, ProductCommissionSetting


@admin.register(CommissionSetting)
class CommissionSettingAdmin(admin.ModelAdmin):
    list_display = ['id', 'supplier', 'category', 'rate', 'active', 'created_at']
    list_filter = ['active', 'category', 'created_at']
    search_fields = ['supplier__username', 'supplier__company_name', 'category__name']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(ProductCommissionSetting)
class ProductCommissionSettingAdmin(admin.ModelAdmin):
    list_display = ['product', 'supplier', 'rate', 'active', 'created_at']
    list_filter = ['active', 'created_at']
    search_fields = ['product__name', 'supplier__username']
    readonly_fields = ['created_at', 'updated_at']
