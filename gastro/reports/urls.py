from django.urls import path
from . import views

urlpatterns = [
    path('reports/admin-dashboard/', views.admin_dashboard_view, name='admin-dashboard'),
    path('reports/supplier-dashboard/', views.supplier_dashboard_view, name='supplier-dashboard'),
    path('reports/marketplace-stats/', views.marketplace_stats_view, name='marketplace-stats'),
]
