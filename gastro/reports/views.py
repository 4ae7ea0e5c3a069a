import logging
from datetime import datetime

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response

from gastro.core.cache_utils import get_cached_dashboard_kpis, cache_dashboard_kpis
from gastro.core.models import User
from gastro.core.permissions import IsAdminRole, IsSupplierOrAdmin, is_admin_user
from gastro.core.utils import parse_int
from .services import admin_dashboard, supplier_dashboard, marketplace_stats

logger = logging.getLogger(__name__)


def _parse_period(params):
    """(date_from, date_to) from YYYY-MM-DD query params; raises ValueError on bad input"""
    date_from = params.get('date_from')
    date_to = params.get('date_to')
    date_from = datetime.strptime(date_from, '%Y-%m-%d').date() if date_from else None
    date_to = datetime.strptime(date_to, '%Y-%m-%d').date() if date_to else None
    if date_from and date_to and date_from > date_to:
        raise ValueError('date_from must not be after date_to')
    return date_from, date_to


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_dashboard_view(request):
    """Marketplace-wide sales, commission and top sellers"""
    try:
        date_from, date_to = _parse_period(request.query_params)
    except ValueError as e:
        return Response({'error': f'Invalid date range: {str(e)}'}, status=status.HTTP_400_BAD_REQUEST)

    cached_data, cache_key = get_cached_dashboard_kpis('admin', date_from, date_to)
    if cached_data is not None:
        logger.info(f"Admin dashboard cache HIT (user: {request.user.username})")
        return Response(cached_data)

    data = admin_dashboard(date_from, date_to)
    cache_dashboard_kpis(cache_key, data)
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSupplierOrAdmin])
def supplier_dashboard_view(request):
    """Revenue, stock and commission overview for a supplier (admins pass ?supplier=)"""
    try:
        date_from, date_to = _parse_period(request.query_params)
    except ValueError as e:
        return Response({'error': f'Invalid date range: {str(e)}'}, status=status.HTTP_400_BAD_REQUEST)

    if is_admin_user(request.user):
        supplier_id = parse_int(request.query_params.get('supplier'))
        if not supplier_id:
            return Response({'error': 'supplier query parameter is required'},
                            status=status.HTTP_400_BAD_REQUEST)
        supplier = get_object_or_404(User, pk=supplier_id, role=User.ROLE_SUPPLIER)
    else:
        supplier = request.user

    cached_data, cache_key = get_cached_dashboard_kpis('supplier', date_from, date_to, supplier.id)
    if cached_data is not None:
        return Response(cached_data)

    data = supplier_dashboard(supplier, date_from, date_to)
    cache_dashboard_kpis(cache_key, data)
    return Response(data)


@api_view(['GET'])
@permission_classes([AllowAny])
def marketplace_stats_view(request):
    return Response(marketplace_stats())
