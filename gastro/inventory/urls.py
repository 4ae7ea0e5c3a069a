from django.urls import path
from .views import stock_list, bulk_update_stock, low_stock, stock_history, stock_summary

urlpatterns = [
    path('inventory/', stock_list, name='stock-list'),
    path('inventory/bulk-update/', bulk_update_stock, name='stock-bulk-update'),
    path('inventory/low-stock/', low_stock, name='stock-low'),
    path('inventory/history/', stock_history, name='stock-history'),
    path('inventory/summary/', stock_summary, name='stock-summary'),
]
