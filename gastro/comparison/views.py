import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response

from gastro.catalog.models import Category, Product
from gastro.core.cache_utils import get_cached_comparison, cache_comparison
from gastro.core.permissions import IsAdminOrReadOnly, IsAdminRole, is_admin_user
from gastro.core.utils import create_audit_log, parse_int
from .models import ProductGroup, ProductGroupItem, ProductComparison
from .serializers import (
    ProductGroupSerializer, ProductGroupItemSerializer, GroupItemCreateSerializer,
    ComparedItemSerializer, ProductComparisonSerializer, ProductComparisonDetailedSerializer,
    NameComparisonSerializer
)
from .services import (
    ComparisonError, compare_group, search_groups, compare_by_name,
    add_product_to_group, remove_item_from_group, refresh_group_stats
)

logger = logging.getLogger(__name__)


def _get_group(id_or_slug):
    if str(id_or_slug).isdigit():
        return get_object_or_404(ProductGroup, pk=int(id_or_slug))
    return get_object_or_404(ProductGroup, slug=id_or_slug)


def _resolve_category(value):
    """Category by id or slug; None when not given, False when unknown"""
    if not value:
        return None
    lookup = {'pk': int(value)} if str(value).isdigit() else {'slug': value}
    return Category.objects.filter(**lookup).first() or False


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def product_group_list_create(request):
    """List active product groups (optionally by category) or create one (admin)"""
    if request.method == 'GET':
        groups = ProductGroup.objects.select_related('category')
        if not (is_admin_user(request.user) and request.query_params.get('include_inactive') == 'true'):
            groups = groups.filter(is_active=True)
        category = _resolve_category(request.query_params.get('category'))
        if category is False:
            return Response([])
        if category is not None:
            groups = groups.filter(category=category)
        serializer = ProductGroupSerializer(groups, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = ProductGroupSerializer(data=request.data)
        if serializer.is_valid():
            group = serializer.save()
            create_audit_log(request=request, action='create', model_name='ProductGroup',
                             object_id=group.id, object_name=group.name)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAdminOrReadOnly])
def product_group_detail(request, id_or_slug):
    """Retrieve a group by id or slug, or update it (admin)"""
    group = _get_group(id_or_slug)

    if request.method == 'GET':
        data = ProductGroupSerializer(group).data
        items = group.items.select_related('product', 'product__supplier', 'product__stock', 'product__category', 'supplier')
        data['items'] = ProductGroupItemSerializer(items, many=True).data
        return Response(data)

    serializer = ProductGroupSerializer(group, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        create_audit_log(request=request, action='group_update', model_name='ProductGroup',
                         object_id=group.id, object_name=group.name,
                         changes={'fields': sorted(request.data.keys())})
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def product_group_items(request, pk):
    """
    List a group's items or add a product to the group (admin).

    GET accepts ?sort=price_asc|price_desc|sales_desc|rating_desc
    """
    group = get_object_or_404(ProductGroup, pk=pk)

    if request.method == 'GET':
        items = group.items.select_related('product', 'product__supplier', 'product__stock', 'product__category', 'supplier')
        sort = request.query_params.get('sort')
        ordering = {
            'price_asc': ['product__price', 'id'],
            'price_desc': ['-product__price', 'id'],
            'sales_desc': ['-total_sales', 'id'],
            'rating_desc': ['-product__rating', 'id'],
        }.get(sort, ['sort_order', 'id'])
        serializer = ProductGroupItemSerializer(items.order_by(*ordering), many=True)
        return Response(serializer.data)

    payload = GroupItemCreateSerializer(data=request.data)
    if not payload.is_valid():
        return Response(payload.errors, status=status.HTTP_400_BAD_REQUEST)
    product = get_object_or_404(Product, pk=payload.validated_data['product_id'])
    try:
        item = add_product_to_group(group, product, payload.validated_data['match_confidence'])
    except ComparisonError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='group_update', model_name='ProductGroup',
                     object_id=group.id, object_name=group.name, changes={'added_product': product.id})
    return Response(ProductGroupItemSerializer(item).data, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminOrReadOnly])
def product_group_item_delete(request, pk, item_id):
    """Remove an item from a group"""
    item = get_object_or_404(ProductGroupItem, pk=item_id, group_id=pk)
    product_id = item.product_id
    group = remove_item_from_group(item)
    create_audit_log(request=request, action='group_update', model_name='ProductGroup',
                     object_id=group.id, object_name=group.name, changes={'removed_product': product_id})
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def product_group_refresh(request, pk):
    """Recompute a group's price statistics"""
    group = refresh_group_stats(get_object_or_404(ProductGroup, pk=pk))
    return Response(ProductGroupSerializer(group).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def product_group_compare(request, pk):
    """
    Compare the offers in a group.

    Query params: sort, max_results, min_price, max_price, supplier, in_stock
    """
    group = get_object_or_404(ProductGroup, pk=pk)
    params = request.query_params
    filters = {key: params.get(key) for key in ('min_price', 'max_price', 'supplier', 'in_stock') if params.get(key)}
    try:
        result = compare_group(
            group,
            sort_type=params.get('sort', 'price_asc'),
            max_results=parse_int(params.get('max_results'), None, minimum=1, maximum=50),
            filters=filters,
            user=request.user,
        )
    except ComparisonError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    cheapest = result['cheapest_item']
    best_rated = result['best_rated_item']
    return Response({
        'group': ProductGroupSerializer(result['group']).data,
        'items': ComparedItemSerializer(result['items'], many=True).data,
        'cheapest_item': ComparedItemSerializer(cheapest).data if cheapest else None,
        'best_rated_item': ComparedItemSerializer(best_rated).data if best_rated else None,
        'summary': result['summary'],
        'comparison_id': result['comparison'].id if result['comparison'] else None,
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def product_group_search(request):
    """Search product groups: ?q=&category=&sort=&max_results="""
    params = request.query_params
    category = _resolve_category(params.get('category'))
    if category is False:
        return Response({'groups': [], 'search_id': None, 'total_matches': 0})
    result = search_groups(
        query=params.get('q', ''),
        category=category,
        sort_type=params.get('sort', 'relevance'),
        max_results=parse_int(params.get('max_results'), None, minimum=1, maximum=100),
        user=request.user,
    )
    return Response({
        'groups': ProductGroupSerializer(result['groups'], many=True).data,
        'search_id': result['search_id'],
        'total_matches': result['total_matches'],
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def compare_products(request):
    """Name-based comparison across suppliers: ?name=&category=<slug>&limit=5"""
    name = request.query_params.get('name', '').strip()
    category_value = request.query_params.get('category', '').strip()
    limit = parse_int(request.query_params.get('limit'), 5, minimum=1, maximum=50)
    if not name and not category_value:
        return Response({'error': 'Provide a product name or a category'}, status=status.HTTP_400_BAD_REQUEST)

    cached_data, cache_key = get_cached_comparison(name, category_value, limit)
    if cached_data is not None:
        return Response(cached_data)

    category = _resolve_category(category_value)
    if category is False:
        return Response([])
    try:
        comparisons = compare_by_name(name=name, category=category, limit=limit)
    except ComparisonError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    data = NameComparisonSerializer(comparisons, many=True).data
    cache_comparison(cache_key, data)
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def comparison_history(request):
    """The caller's stored comparisons, newest first"""
    comparisons = ProductComparison.objects.filter(user=request.user).select_related('group')
    limit = parse_int(request.query_params.get('limit'), 50, minimum=1, maximum=200)
    serializer = ProductComparisonSerializer(comparisons[:limit], many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def comparison_detail(request, pk):
    """A stored comparison with its per-product lines"""
    comparison = get_object_or_404(ProductComparison.objects.select_related('group'), pk=pk)
    if comparison.user_id != request.user.id and not is_admin_user(request.user):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    return Response(ProductComparisonDetailedSerializer(comparison).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def comparison_select(request, pk):
    """Record which product the user picked from a comparison"""
    comparison = get_object_or_404(ProductComparison, pk=pk, user=request.user)
    product_id = parse_int(request.data.get('product_id'))
    if not product_id or not comparison.details.filter(product_id=product_id).exists():
        return Response({'error': 'product_id must be one of the compared products'},
                        status=status.HTTP_400_BAD_REQUEST)
    comparison.selected_product_id = product_id
    comparison.save(update_fields=['selected_product'])
    return Response(ProductComparisonSerializer(comparison).data)
