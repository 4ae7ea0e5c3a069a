from django.contrib import admin
from .models import Stock, StockAdjustment


@admin.register(Stock)
class StockAdmin(admin.ModelAdmin):
    list_display = ['product', 'quantity', 'low_stock_threshold', 'status', 'last_stock_update']
    list_filter = ['status']
    search_fields = ['product__name', 'product__supplier__username']
    readonly_fields = ['status', 'last_stock_update']


@admin.register(StockAdjustment)
class StockAdjustmentAdmin(admin.ModelAdmin):
    list_display = ['product', 'previous_quantity', 'new_quantity', 'delta', 'reason', 'created_by', 'created_at']
    list_filter = ['reason', 'created_at']
    search_fields = ['product__name', 'notes']
    readonly_fields = ['created_at']
