from django.urls import path
from .views import (
    product_group_list_create, product_group_detail, product_group_items, product_group_item_delete,
    product_group_refresh, product_group_compare, product_group_search,
    compare_products, comparison_history, comparison_detail, comparison_select,
)

urlpatterns = [
    path('product-groups/', product_group_list_create, name='product-group-list-create'),
    path('product-groups/search/', product_group_search, name='product-group-search'),
    path('product-groups/<int:pk>/items/', product_group_items, name='product-group-items'),
    path('product-groups/<int:pk>/items/<int:item_id>/', product_group_item_delete, name='product-group-item-delete'),
    path('product-groups/<int:pk>/compare/', product_group_compare, name='product-group-compare'),
    path('product-groups/<int:pk>/refresh/', product_group_refresh, name='product-group-refresh'),
    path('product-groups/<str:id_or_slug>/', product_group_detail, name='product-group-detail'),

    path('compare-products/', compare_products, name='compare-products'),
    path('comparisons/', comparison_history, name='comparison-history'),
    path('comparisons/<int:pk>/', comparison_detail, name='comparison-detail'),
    path('comparisons/<int:pk>/select/', comparison_select, name='comparison-select'),
]
