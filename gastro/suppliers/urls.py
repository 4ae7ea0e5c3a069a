from django.urls import path
from . import views

urlpatterns = [
    path('suppliers/', views.supplier_list, name='supplier-list'),
    path('suppliers/<int:pk>/', views.supplier_detail, name='supplier-detail'),
    path('suppliers/<int:pk>/categories/', views.supplier_category_list, name='supplier-categories'),
    path('suppliers-info/', views.suppliers_info, name='suppliers-info'),
]
