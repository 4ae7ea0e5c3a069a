import logging

from django.http import HttpResponse, HttpResponseRedirect
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response

from gastro.core.cache_utils import get_cached_products_list, cache_products_list
from gastro.core.permissions import (
    IsAdminOrReadOnly, IsSupplierOrAdmin, IsSupplierOrAdminOrReadOnly, is_admin_user
)
from gastro.core.utils import create_audit_log, parse_bool, parse_int
from .filters import ProductFilter, SORT_OPTIONS
from .models import Category, Product, ProductImage
from .serializers import (
    CategorySerializer, ProductSerializer, ProductListSerializer,
    ProductSupplierOptionSerializer, ProductImageSerializer, max_images_reached
)
from .validators import validate_image_upload, decode_image_data, ImageValidationError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


def _get_category(id_or_slug):
    if str(id_or_slug).isdigit():
        return get_object_or_404(Category, pk=int(id_or_slug))
    return get_object_or_404(Category, slug=id_or_slug)


def _can_edit_product(user, product):
    return is_admin_user(user) or product.supplier_id == user.id


def _product_queryset():
    return Product.objects.select_related('category', 'supplier', 'stock').prefetch_related('additional_categories')


# Category views
@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def category_list_create(request):
    """List categories or create a new category (admin)"""
    if request.method == 'GET':
        categories = Category.objects.all()
        if not parse_bool(request.query_params.get('include_inactive'), False):
            categories = categories.filter(is_active=True)
        serializer = CategorySerializer(categories, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = CategorySerializer(data=request.data)
        if serializer.is_valid():
            category = serializer.save()
            create_audit_log(request=request, action='create', model_name='Category',
                             object_id=category.id, object_name=category.name)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAdminOrReadOnly])
def category_detail(request, id_or_slug):
    """Retrieve a category by id or slug, or update it (admin)"""
    category = _get_category(id_or_slug)

    if request.method == 'GET':
        return Response(CategorySerializer(category).data)

    serializer = CategorySerializer(category, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        create_audit_log(request=request, action='update', model_name='Category',
                         object_id=category.id, object_name=category.name,
                         changes={'fields': sorted(request.data.keys())})
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Product views
@api_view(['GET', 'POST'])
@permission_classes([IsSupplierOrAdminOrReadOnly])
def product_list_create(request):
    """
    List active products with filters, or create a product.

    Query params: category, supplier, search, min_price, max_price, min_rating,
    has_discount, in_stock, features, sort, limit, offset
    """
    if request.method == 'GET':
        params = request.query_params
        limit = parse_int(params.get('limit'), DEFAULT_PAGE_SIZE, minimum=1, maximum=MAX_PAGE_SIZE)
        offset = parse_int(params.get('offset'), 0, minimum=0)

        filters_dict = {key: params.get(key) for key in sorted(params.keys())}
        cached_data, cache_key = get_cached_products_list(filters_dict)
        if cached_data is not None:
            return Response(cached_data)

        queryset = _product_queryset().filter(active=True)
        product_filter = ProductFilter(params, queryset=queryset)
        if not product_filter.is_valid():
            return Response(product_filter.errors, status=status.HTTP_400_BAD_REQUEST)
        queryset = product_filter.qs

        total = queryset.count()
        page = queryset[offset:offset + limit]
        data = {
            'results': ProductListSerializer(page, many=True).data,
            'count': total,
            'limit': limit,
            'offset': offset,
            'sort': params.get('sort') if params.get('sort') in SORT_OPTIONS else 'newest',
        }
        cache_products_list(cache_key, data)
        return Response(data)
    else:  # POST
        data = request.data.copy() if hasattr(request.data, 'copy') else dict(request.data)
        if not is_admin_user(request.user):
            # Suppliers always list under their own account
            data['supplier'] = request.user.id
        serializer = ProductSerializer(data=data, context={'request': request})
        if serializer.is_valid():
            product = serializer.save()
            create_audit_log(request=request, action='create', model_name='Product',
                             object_id=product.id, object_name=product.name,
                             changes={'price': str(product.price), 'supplier': product.supplier_id})
            logger.info(f"Product {product.id} created by user {request.user.id}")
            return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsSupplierOrAdminOrReadOnly])
def product_detail(request, pk):
    """Retrieve, update or deactivate a product. Suppliers may only touch their own."""
    product = get_object_or_404(_product_queryset(), pk=pk)

    if request.method == 'GET':
        if not product.active and not (request.user.is_authenticated and _can_edit_product(request.user, product)):
            return Response({'error': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(ProductSerializer(product).data)

    if not _can_edit_product(request.user, product):
        return Response({'error': 'You can only modify your own products'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'DELETE':
        product.active = False
        product.save(update_fields=['active', 'updated_at'])
        create_audit_log(request=request, action='delete', model_name='Product',
                         object_id=product.id, object_name=product.name)
        return Response(status=status.HTTP_204_NO_CONTENT)

    data = request.data.copy() if hasattr(request.data, 'copy') else dict(request.data)
    if not is_admin_user(request.user):
        data.pop('supplier', None)
    old_price = product.price
    serializer = ProductSerializer(product, data=data, partial=True, context={'request': request})
    if serializer.is_valid():
        product = serializer.save()
        if product.price != old_price:
            create_audit_log(request=request, action='price_change', model_name='Product',
                             object_id=product.id, object_name=product.name,
                             changes={'price': {'old': str(old_price), 'new': str(product.price)}})
        else:
            create_audit_log(request=request, action='update', model_name='Product',
                             object_id=product.id, object_name=product.name,
                             changes={'fields': sorted(data.keys())})
        return Response(ProductSerializer(product).data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([AllowAny])
def product_by_slug(request, slug):
    """Retrieve an active product by slug"""
    product = get_object_or_404(_product_queryset(), slug=slug, active=True)
    return Response(ProductSerializer(product).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def product_suppliers(request, slug):
    """The same product as offered by every supplier, cheapest first"""
    base_product = get_object_or_404(Product, slug=slug)
    normalized = base_product.normalized_name
    candidates = _product_queryset().filter(active=True, name__icontains=base_product.name.strip())
    offers = [p for p in candidates if p.normalized_name == normalized]
    if base_product.pk not in {p.pk for p in offers}:
        offers.append(base_product)
    offers.sort(key=lambda p: (p.price, p.pk))

    serializer = ProductSupplierOptionSerializer(
        offers, many=True, context={'best_price_id': offers[0].pk if offers else None}
    )
    return Response({
        'product': ProductListSerializer(base_product).data,
        'suppliers': serializer.data,
        'count': len(offers),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSupplierOrAdmin])
def supplier_products(request):
    """Products owned by the current supplier, including inactive ones (admin may pass ?supplier=)"""
    queryset = _product_queryset()
    if is_admin_user(request.user):
        supplier_id = parse_int(request.query_params.get('supplier'))
        if supplier_id:
            queryset = queryset.filter(supplier_id=supplier_id)
    else:
        queryset = queryset.filter(supplier=request.user)

    params = request.query_params.copy()
    params.pop('supplier', None)
    product_filter = ProductFilter(params, queryset=queryset)
    if not product_filter.is_valid():
        return Response(product_filter.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer = ProductListSerializer(product_filter.qs, many=True)
    return Response(serializer.data)


# Product image views
@api_view(['GET', 'POST'])
@permission_classes([IsSupplierOrAdminOrReadOnly])
def product_images(request, pk):
    """List a product's images or attach a new one"""
    product = get_object_or_404(Product, pk=pk)

    if request.method == 'GET':
        return Response(ProductImageSerializer(product.images.all(), many=True).data)

    if not _can_edit_product(request.user, product):
        return Response({'error': 'You can only modify your own products'}, status=status.HTTP_403_FORBIDDEN)
    if max_images_reached(product):
        return Response({'error': 'Maximum number of images reached for this product'},
                        status=status.HTTP_400_BAD_REQUEST)
    serializer = ProductImageSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save(product=product)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsSupplierOrAdminOrReadOnly])
def product_image_detail(request, pk):
    """Retrieve, update or delete a product image"""
    image = get_object_or_404(ProductImage.objects.select_related('product'), pk=pk)

    if request.method == 'GET':
        return Response(ProductImageSerializer(image).data)

    if not _can_edit_product(request.user, image.product):
        return Response({'error': 'You can only modify your own products'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'DELETE':
        image.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = ProductImageSerializer(image, data=request.data, partial=(request.method == 'PATCH'))
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsSupplierOrAdmin])
@parser_classes([MultiPartParser, FormParser])
def upload_product_image(request):
    """
    Upload an image file for a product.

    Multipart fields: image (file), product_id, is_primary, sort_order
    """
    product_id = parse_int(request.data.get('product_id'))
    if not product_id:
        return Response({'error': 'product_id is required'}, status=status.HTTP_400_BAD_REQUEST)
    product = get_object_or_404(Product, pk=product_id)
    if not _can_edit_product(request.user, product):
        return Response({'error': 'You can only modify your own products'}, status=status.HTTP_403_FORBIDDEN)
    if max_images_reached(product):
        return Response({'error': 'Maximum number of images reached for this product'},
                        status=status.HTTP_400_BAD_REQUEST)

    try:
        image_data, image_type = validate_image_upload(request.FILES.get('image'))
    except ImageValidationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    image = ProductImage.objects.create(
        product=product,
        image_data=image_data,
        image_type=image_type,
        is_primary=parse_bool(request.data.get('is_primary'), False),
        sort_order=parse_int(request.data.get('sort_order'), 0),
    )
    return Response(ProductImageSerializer(image).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([AllowAny])
def product_primary_image(request, pk):
    """Serve the product's primary image bytes, or redirect to its hosted URL"""
    product = get_object_or_404(Product, pk=pk)
    image = product.images.filter(is_primary=True).first() or product.images.first()

    if image is None:
        if product.image_url:
            return HttpResponseRedirect(product.image_url)
        return Response({'error': 'Product has no image'}, status=status.HTTP_404_NOT_FOUND)
    if image.image_data:
        return HttpResponse(decode_image_data(image.image_data), content_type=image.image_type or 'image/jpeg')
    return HttpResponseRedirect(image.image_url)
