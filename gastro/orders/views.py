import logging

from django.db.models import Prefetch
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response

from gastro.catalog.models import Product
from gastro.core.permissions import is_admin_user, is_supplier_user
from gastro.core.utils import create_audit_log, parse_int
from .models import CartItem, Order, Sale
from .serializers import (
    CartSerializer, CartItemSerializer, CartItemCreateSerializer, CartItemUpdateSerializer,
    CheckoutSerializer, OrderSerializer, SaleSerializer, SaleCreateSerializer,
    SupplierSalesGroupSerializer, PaymentIntentSerializer
)
from .services import (
    CheckoutError, PaymentError, PaymentNotConfigured, get_active_cart, add_to_cart,
    update_cart_item, cart_summary, checkout, group_by_supplier, record_direct_sale,
    create_payment_intent
)

logger = logging.getLogger(__name__)


def _cart_response(cart, status_code=status.HTTP_200_OK):
    return Response(CartSerializer(cart_summary(cart)).data, status=status_code)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def cart_detail(request):
    """Current cart grouped by supplier, or clear it"""
    cart = get_active_cart(request.user)
    if request.method == 'DELETE':
        removed = cart.items.count()
        cart.items.all().delete()
        if removed:
            create_audit_log(request=request, action='cart_remove', model_name='Cart',
                             object_id=cart.id, changes={'cleared_items': removed})
    return _cart_response(cart)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_add_item(request):
    """Add a product to the cart: {product_id, quantity}"""
    serializer = CartItemCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    product = Product.objects.get(pk=serializer.validated_data['product_id'])
    cart = get_active_cart(request.user)
    try:
        item = add_to_cart(cart, product, serializer.validated_data['quantity'])
    except CheckoutError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='cart_add', model_name='CartItem', object_id=item.id,
                     object_name=product.name, changes={'quantity': item.quantity})
    return _cart_response(cart, status.HTTP_201_CREATED)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def cart_item_detail(request, pk):
    """Change a line's quantity (below 1 removes it) or remove it"""
    item = get_object_or_404(CartItem.objects.select_related('cart', 'product'), pk=pk,
                             cart__user=request.user, cart__status='active')
    cart = item.cart

    if request.method == 'PATCH':
        serializer = CartItemUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        quantity = serializer.validated_data['quantity']
        old_quantity = item.quantity
        result = update_cart_item(item, quantity)
        create_audit_log(request=request, action='cart_update' if result else 'cart_remove',
                         model_name='CartItem', object_id=pk, object_name=item.product.name,
                         changes={'quantity': {'old': old_quantity, 'new': max(quantity, 0)}})
        return _cart_response(cart)

    product_name = item.product.name
    item.delete()
    create_audit_log(request=request, action='cart_remove', model_name='CartItem', object_id=pk,
                     object_name=product_name)
    return _cart_response(cart)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_checkout(request):
    """Checkout the cart with shipping info; returns the order with sales grouped by supplier"""
    serializer = CheckoutSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        order = checkout(request.user, serializer.validated_data)
    except CheckoutError as e:
        logger.info(f"Checkout rejected for user {request.user.id}: {str(e)}")
        payload = {'error': str(e)}
        if e.details:
            payload['details'] = e.details
        return Response(payload, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request=request, action='cart_checkout', model_name='Order', object_id=order.id,
                     object_name=order.order_number, object_reference=order.order_number,
                     changes={'total': str(order.total), 'lines': order.sales.count()})

    sales = list(order.sales.select_related('product', 'product__supplier', 'supplier', 'buyer'))
    data = OrderSerializer(order).data
    data['suppliers'] = SupplierSalesGroupSerializer(
        group_by_supplier(sales, lambda s: s.total_price), many=True
    ).data
    return Response(data, status=status.HTTP_201_CREATED)


def _orders_for(user):
    sales = Prefetch('sales', queryset=Sale.objects.select_related('product', 'supplier', 'buyer', 'order'))
    orders = Order.objects.prefetch_related(sales)
    if is_admin_user(user):
        return orders
    return orders.filter(buyer=user)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_list(request):
    """The caller's orders; admins see all (filter ?buyer=, ?status=)"""
    orders = _orders_for(request.user)
    if is_admin_user(request.user):
        buyer_id = parse_int(request.query_params.get('buyer'))
        if buyer_id:
            orders = orders.filter(buyer_id=buyer_id)
    order_status = request.query_params.get('status')
    if order_status:
        orders = orders.filter(status=order_status)
    serializer = OrderSerializer(orders, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    order = get_object_or_404(_orders_for(request.user), pk=pk)
    return Response(OrderSerializer(order).data)


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def sale_list_create(request):
    """
    GET: suppliers see their own sales, admins see all and may filter by
    supplier, buyer and product. POST records a direct sale.
    """
    if request.method == 'GET':
        if not request.user.is_authenticated:
            return Response({'error': 'Authentication required'}, status=status.HTTP_401_UNAUTHORIZED)
        sales = Sale.objects.select_related('product', 'supplier', 'buyer', 'order')
        if is_admin_user(request.user):
            for param, field in (('supplier', 'supplier_id'), ('buyer', 'buyer_id'), ('product', 'product_id')):
                value = parse_int(request.query_params.get(param))
                if value:
                    sales = sales.filter(**{field: value})
        elif is_supplier_user(request.user):
            sales = sales.filter(supplier=request.user)
        else:
            sales = sales.filter(buyer=request.user)
        limit = parse_int(request.query_params.get('limit'), 100, minimum=1, maximum=500)
        serializer = SaleSerializer(sales[:limit], many=True)
        return Response(serializer.data)

    serializer = SaleCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    buyer = request.user if request.user.is_authenticated else None
    sale = record_direct_sale(
        data['product'],
        data['quantity'],
        buyer=buyer,
        total_price=data.get('total_price'),
        commission_rate=data.get('commission_rate'),
        commission_amount=data.get('commission_amount'),
    )
    create_audit_log(request=request, action='sale_create', model_name='Sale', object_id=sale.id,
                     object_name=sale.product.name, user=buyer,
                     changes={'total_price': str(sale.total_price),
                              'commission_amount': str(sale.commission_amount)})
    return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def payment_intent(request):
    """Create a Stripe PaymentIntent: {amount, order_id?}"""
    serializer = PaymentIntentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    order = None
    order_id = serializer.validated_data.get('order_id')
    if order_id:
        order = get_object_or_404(_orders_for(request.user), pk=order_id)

    metadata = {'user_id': request.user.id}
    if order:
        metadata['order_number'] = order.order_number
    try:
        intent = create_payment_intent(serializer.validated_data['amount'], metadata=metadata)
    except PaymentNotConfigured as e:
        return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except PaymentError as e:
        return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)

    if order:
        order.payment_intent_id = intent['payment_intent_id'] or ''
        order.save(update_fields=['payment_intent_id', 'updated_at'])
    create_audit_log(request=request, action='payment_intent', model_name='Order',
                     object_id=order.id if order else intent['payment_intent_id'],
                     object_reference=intent['payment_intent_id'],
                     changes={'amount': intent['amount'], 'currency': intent['currency']})
    return Response(intent, status=status.HTTP_201_CREATED)
