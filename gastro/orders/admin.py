from django.contrib import admin
from .models import Cart, CartItem, Order, Sale


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'status', 'created_at']
    list_filter = ['status']
    inlines = [CartItemInline]


class SaleInline(admin.TabularInline):
    model = Sale
    extra = 0
    readonly_fields = ['product', 'supplier', 'quantity', 'total_price', 'commission_rate', 'commission_amount']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'buyer', 'status', 'total', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['order_number', 'shipping_name']
    inlines = [SaleInline]


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ['id', 'product', 'supplier', 'buyer', 'quantity', 'total_price', 'commission_amount',
                    'status', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['product__name']
