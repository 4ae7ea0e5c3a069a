from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from gastro.core.permissions import IsAdminOrReadOnly, is_admin_user
from gastro.core.utils import create_audit_log
from .models import FaqCategory, FaqItem
from .serializers import FaqCategorySerializer, FaqCategoryDetailSerializer, FaqItemSerializer


def _get_category(id_or_slug):
    if str(id_or_slug).isdigit():
        return get_object_or_404(FaqCategory, pk=int(id_or_slug))
    return get_object_or_404(FaqCategory, slug=id_or_slug)


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def faq_category_list_create(request):
    if request.method == 'GET':
        serializer = FaqCategorySerializer(FaqCategory.objects.all(), many=True)
        return Response(serializer.data)

    serializer = FaqCategorySerializer(data=request.data)
    if serializer.is_valid():
        category = serializer.save()
        create_audit_log(request=request, action='create', model_name='FaqCategory',
                         object_id=category.id, object_name=category.name)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAdminOrReadOnly])
def faq_category_detail(request, id_or_slug):
    """A FAQ category by id or slug, with its active questions"""
    category = _get_category(id_or_slug)
    if request.method == 'GET':
        return Response(FaqCategoryDetailSerializer(category).data)

    serializer = FaqCategorySerializer(category, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def faq_item_list_create(request):
    """Active FAQ items, optionally ?category=<id or slug>"""
    if request.method == 'GET':
        items = FaqItem.objects.select_related('category')
        if not is_admin_user(request.user):
            items = items.filter(active=True)
        category = request.query_params.get('category')
        if category:
            lookup = {'category_id': int(category)} if category.isdigit() else {'category__slug': category}
            items = items.filter(**lookup)
        serializer = FaqItemSerializer(items, many=True)
        return Response(serializer.data)

    serializer = FaqItemSerializer(data=request.data)
    if serializer.is_valid():
        item = serializer.save()
        create_audit_log(request=request, action='create', model_name='FaqItem',
                         object_id=item.id, object_name=item.question[:255])
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAdminOrReadOnly])
def faq_item_detail(request, pk):
    item = get_object_or_404(FaqItem, pk=pk)
    if request.method == 'GET':
        if not item.active and not is_admin_user(request.user):
            return Response({'error': 'Not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(FaqItemSerializer(item).data)

    serializer = FaqItemSerializer(item, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
