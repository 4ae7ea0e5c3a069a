from django.urls import path
from . import views

urlpatterns = [
    path('cart/', views.cart_detail, name='cart-detail'),
    path('cart/items/', views.cart_add_item, name='cart-add-item'),
    path('cart/items/<int:pk>/', views.cart_item_detail, name='cart-item-detail'),
    path('cart/checkout/', views.cart_checkout, name='cart-checkout'),
    path('orders/', views.order_list, name='order-list'),
    path('orders/<int:pk>/', views.order_detail, name='order-detail'),
    path('sales/', views.sale_list_create, name='sale-list-create'),
    path('payments/intent/', views.payment_intent, name='payment-intent'),
]
