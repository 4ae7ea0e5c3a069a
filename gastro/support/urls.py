from django.urls import path
from . import views

urlpatterns = [
    path('faq/categories/', views.faq_category_list_create, name='faq-category-list-create'),
    path('faq/categories/<str:id_or_slug>/', views.faq_category_detail, name='faq-category-detail'),
    path('faq/items/', views.faq_item_list_create, name='faq-item-list-create'),
    path('faq/items/<int:pk>/', views.faq_item_detail, name='faq-item-detail'),
]
