import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from gastro.catalog.serializers import CategorySerializer
from gastro.core.models import User
from gastro.core.utils import parse_id_list
from .serializers import SupplierProfileSerializer, SupplierInfoSerializer
from .services import list_suppliers, supplier_profiles, supplier_categories

logger = logging.getLogger(__name__)


def _get_supplier(pk):
    return get_object_or_404(User, pk=pk, role=User.ROLE_SUPPLIER, is_active=True)


@api_view(['GET'])
@permission_classes([AllowAny])
def supplier_list(request):
    """Supplier directory: ?category=&search=&sort_by=rating|products|newest"""
    params = request.query_params
    suppliers = list_suppliers(
        category=params.get('category', '').strip(),
        search=params.get('search', '').strip(),
        sort_by=params.get('sort_by', 'rating'),
    )
    return Response(SupplierProfileSerializer(suppliers, many=True).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def supplier_detail(request, pk):
    supplier = supplier_profiles([_get_supplier(pk)])[0]
    return Response(SupplierProfileSerializer(supplier).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def supplier_category_list(request, pk):
    categories = supplier_categories(_get_supplier(pk))
    return Response(CategorySerializer(categories, many=True).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def suppliers_info(request):
    """Minimal public info for the suppliers in a cart: ?ids=1,2,3"""
    raw_ids = request.query_params.get('ids', '').strip()
    if not raw_ids:
        return Response({'error': 'ids query parameter is required'}, status=status.HTTP_400_BAD_REQUEST)
    ids = parse_id_list(raw_ids)
    suppliers = User.objects.filter(role=User.ROLE_SUPPLIER, id__in=ids).order_by('id')
    return Response(SupplierInfoSerializer(suppliers, many=True).data)
