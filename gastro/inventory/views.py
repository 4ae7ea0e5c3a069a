import logging

from django.db.models import Count
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from gastro.catalog.models import Product
from gastro.core.permissions import IsSupplierOrAdmin, is_admin_user
from gastro.core.utils import create_audit_log, parse_int
from .models import Stock, StockAdjustment
from .serializers import StockSerializer, StockAdjustmentSerializer, BulkStockRowSerializer
from .services import set_stock, low_stock_products

logger = logging.getLogger(__name__)


def _scoped_products(request):
    """Suppliers see their own products; admins see all (or one supplier via ?supplier=)"""
    products = Product.objects.all()
    if is_admin_user(request.user):
        supplier_id = parse_int(request.query_params.get('supplier'))
        if supplier_id:
            products = products.filter(supplier_id=supplier_id)
        return products
    return products.filter(supplier=request.user)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSupplierOrAdmin])
def stock_list(request):
    """Stock for the caller's products, optionally by status"""
    stocks = Stock.objects.select_related('product').filter(product__in=_scoped_products(request))
    stock_status = request.query_params.get('status')
    if stock_status:
        stocks = stocks.filter(status=stock_status)
    stocks = stocks.order_by('product__name')
    serializer = StockSerializer(stocks, many=True)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsSupplierOrAdmin])
def bulk_update_stock(request):
    """
    Update stock and/or low-stock threshold for many products at once.

    Body: {"items": [{"id": 1, "stock": 10, "low_stock_threshold": 3}, ...]}
    (a bare list is accepted too). Each row succeeds or fails on its own.
    """
    rows = request.data.get('items') if isinstance(request.data, dict) else request.data
    if not isinstance(rows, list) or not rows:
        return Response({'error': 'A non-empty list of items is required'}, status=status.HTTP_400_BAD_REQUEST)

    is_admin = is_admin_user(request.user)
    results = []
    for raw in rows:
        row = BulkStockRowSerializer(data=raw)
        row_id = raw.get('id') if isinstance(raw, dict) else None
        if not row.is_valid():
            results.append({'id': row_id, 'success': False, 'message': row.errors})
            continue

        data = row.validated_data
        product = Product.objects.filter(pk=data['id']).first()
        if product is None:
            results.append({'id': data['id'], 'success': False, 'message': 'Product not found'})
            continue
        if not is_admin and product.supplier_id != request.user.id:
            results.append({'id': data['id'], 'success': False, 'message': 'Product belongs to another supplier'})
            continue

        stock = set_stock(
            product,
            quantity=data.get('stock'),
            low_stock_threshold=data.get('low_stock_threshold'),
            reason='bulk_update',
            user=request.user,
        )
        results.append({
            'id': product.id,
            'success': True,
            'stock': stock.quantity,
            'low_stock_threshold': stock.low_stock_threshold,
            'stock_status': stock.status,
        })

    succeeded = sum(1 for r in results if r['success'])
    create_audit_log(
        request=request, action='bulk_stock_update', model_name='Stock',
        object_id='bulk', changes={'rows': len(results), 'succeeded': succeeded}
    )
    logger.info(f"Bulk stock update by user {request.user.id}: {succeeded}/{len(results)} rows applied")
    return Response({'results': results, 'updated': succeeded, 'failed': len(results) - succeeded})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSupplierOrAdmin])
def low_stock(request):
    """Active products below their low-stock threshold, most urgent first"""
    stocks = low_stock_products(_scoped_products(request))
    serializer = StockSerializer(stocks, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSupplierOrAdmin])
def stock_history(request):
    """Stock adjustment history, newest first"""
    adjustments = StockAdjustment.objects.select_related('product', 'created_by').filter(
        product__in=_scoped_products(request)
    )
    product_id = parse_int(request.query_params.get('product'))
    if product_id:
        adjustments = adjustments.filter(product_id=product_id)
    reason = request.query_params.get('reason')
    if reason:
        adjustments = adjustments.filter(reason=reason)
    limit = parse_int(request.query_params.get('limit'), 100, minimum=1, maximum=500)
    serializer = StockAdjustmentSerializer(adjustments[:limit], many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSupplierOrAdmin])
def stock_summary(request):
    """Count of products per stock status"""
    counts = {
        Stock.STATUS_IN_STOCK: 0,
        Stock.STATUS_LOW_STOCK: 0,
        Stock.STATUS_OUT_OF_STOCK: 0,
    }
    rows = Stock.objects.filter(product__in=_scoped_products(request).filter(active=True)) \
        .values('status').annotate(count=Count('id'))
    for row in rows:
        counts[row['status']] = row['count']
    counts['total'] = sum(counts.values())
    return Response(counts)
