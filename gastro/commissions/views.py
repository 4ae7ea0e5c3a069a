import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response

from gastro.catalog.models import Product
from gastro.core.models import User
from gastro.core.permissions import IsAdminRole, IsSupplierOrAdmin, is_admin_user
from gastro.core.utils import create_audit_log, parse_bool, parse_int
from .models import CommissionSetting, ProductCommissionSetting
from .serializers import (
    CommissionSettingSerializer, ApplicableCommissionSettingSerializer,
    ProductCommissionSettingSerializer, CommissionRateSerializer, CommissionSummarySerializer
)
from .services import (
    applicable_settings, resolve_commission, supplier_category_ids, supplier_commission_summary
)

logger = logging.getLogger(__name__)


def _target_supplier(request):
    """The caller for suppliers; admins pick one with ?supplier="""
    if not is_admin_user(request.user):
        return request.user, None
    supplier_id = parse_int(request.query_params.get('supplier'))
    if not supplier_id:
        return None, Response({'error': 'supplier query parameter is required'},
                              status=status.HTTP_400_BAD_REQUEST)
    return get_object_or_404(User, pk=supplier_id, role=User.ROLE_SUPPLIER), None


# CommissionSetting views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def commission_setting_list_create(request):
    """List commission settings (filter by category, supplier, active) or create one"""
    if request.method == 'GET':
        settings_qs = CommissionSetting.objects.select_related('category', 'supplier')
        category_id = parse_int(request.query_params.get('category'))
        if category_id:
            settings_qs = settings_qs.filter(category_id=category_id)
        supplier_id = parse_int(request.query_params.get('supplier'))
        if supplier_id:
            settings_qs = settings_qs.filter(supplier_id=supplier_id)
        active = parse_bool(request.query_params.get('active'))
        if active is not None:
            settings_qs = settings_qs.filter(active=active)
        serializer = CommissionSettingSerializer(settings_qs, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = CommissionSettingSerializer(data=request.data)
        if serializer.is_valid():
            setting = serializer.save()
            create_audit_log(request=request, action='commission_change', model_name='CommissionSetting',
                             object_id=setting.id, object_name=str(setting),
                             changes={'rate': str(setting.rate), 'type': setting.scope})
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def commission_setting_detail(request, pk):
    """Retrieve, update or delete a commission setting"""
    setting = get_object_or_404(CommissionSetting, pk=pk)

    if request.method == 'GET':
        return Response(CommissionSettingSerializer(setting).data)
    elif request.method == 'PATCH':
        old_rate = setting.rate
        serializer = CommissionSettingSerializer(setting, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='commission_change', model_name='CommissionSetting',
                             object_id=setting.id, object_name=str(setting),
                             changes={'rate': {'old': str(old_rate), 'new': str(setting.rate)},
                                      'active': setting.active})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='CommissionSetting',
                         object_id=setting.id, object_name=str(setting))
        setting.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# ProductCommissionSetting views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def product_commission_setting_list_create(request):
    """List or create product-specific commission overrides"""
    if request.method == 'GET':
        overrides = ProductCommissionSetting.objects.select_related('product')
        product_id = parse_int(request.query_params.get('product'))
        if product_id:
            overrides = overrides.filter(product_id=product_id)
        supplier_id = parse_int(request.query_params.get('supplier'))
        if supplier_id:
            overrides = overrides.filter(supplier_id=supplier_id)
        serializer = ProductCommissionSettingSerializer(overrides, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = ProductCommissionSettingSerializer(data=request.data)
        if serializer.is_valid():
            override = serializer.save()
            create_audit_log(request=request, action='commission_change', model_name='ProductCommissionSetting',
                             object_id=override.id, object_name=override.product.name,
                             changes={'rate': str(override.rate)})
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def product_commission_setting_detail(request, pk):
    """Retrieve, update or delete a product commission override"""
    override = get_object_or_404(ProductCommissionSetting, pk=pk)

    if request.method == 'GET':
        return Response(ProductCommissionSettingSerializer(override).data)
    elif request.method == 'PATCH':
        serializer = ProductCommissionSettingSerializer(override, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        override.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([AllowAny])
def product_commission_rate(request, pk):
    """Effective commission rate for a product"""
    product = get_object_or_404(Product, pk=pk)
    result = resolve_commission(product)
    return Response(CommissionRateSerializer(result).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSupplierOrAdmin])
def supplier_commission_settings(request):
    """Settings that apply to the supplier, most specific first"""
    supplier, error = _target_supplier(request)
    if error:
        return error
    settings_list = applicable_settings(supplier, category_ids=supplier_category_ids(supplier))
    serializer = ApplicableCommissionSettingSerializer(settings_list, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSupplierOrAdmin])
def supplier_commission_summary_view(request):
    """Average, most common and total commission for the supplier"""
    supplier, error = _target_supplier(request)
    if error:
        return error
    summary = supplier_commission_summary(supplier)
    return Response(CommissionSummarySerializer(summary).data)
