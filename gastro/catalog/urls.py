from django.urls import path
from .views import (
    category_list_create, category_detail,
    product_list_create, product_detail, product_by_slug, product_suppliers,
    supplier_products,
    product_images, product_image_detail, upload_product_image, product_primary_image,
)

urlpatterns = [
    # Category endpoints
    path('categories/', category_list_create, name='category-list-create'),
    path('categories/<str:id_or_slug>/', category_detail, name='category-detail'),

    # Product endpoints (fixed paths before the slug catch-all)
    path('products/', product_list_create, name='product-list-create'),
    path('products/upload-image/', upload_product_image, name='product-upload-image'),
    path('products/<int:pk>/', product_detail, name='product-detail'),
    path('products/<int:pk>/images/', product_images, name='product-images'),
    path('products/<int:pk>/image/', product_primary_image, name='product-primary-image'),
    path('products/<slug:slug>/', product_by_slug, name='product-by-slug'),
    path('products/<slug:slug>/suppliers/', product_suppliers, name='product-suppliers'),
    path('product-images/<int:pk>/', product_image_detail, name='product-image-detail'),

    # Supplier-owned products
    path('supplier/products/', supplier_products, name='supplier-products'),
]
