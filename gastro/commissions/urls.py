from django.urls import path
from .views import (
    commission_setting_list_create, commission_setting_detail,
    product_commission_setting_list_create, product_commission_setting_detail,
    product_commission_rate, supplier_commission_settings, supplier_commission_summary_view,
)

urlpatterns = [
    path('commission-settings/', commission_setting_list_create, name='commission-setting-list-create'),
    path('commission-settings/<int:pk>/', commission_setting_detail, name='commission-setting-detail'),
    path('product-commission-settings/', product_commission_setting_list_create,
         name='product-commission-setting-list-create'),
    path('product-commission-settings/<int:pk>/', product_commission_setting_detail,
         name='product-commission-setting-detail'),
    path('products/<int:pk>/commission-rate/', product_commission_rate, name='product-commission-rate'),
    path('supplier/commission-settings/', supplier_commission_settings, name='supplier-commission-settings'),
    path('supplier/commission-summary/', supplier_commission_summary_view, name='supplier-commission-summary'),
]
