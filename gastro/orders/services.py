"""
Cart checkout and payments.

checkout() turns the buyer's active cart into one Order plus one Sale per
line. Stock, commission and group sales counters are all updated inside
the same transaction, so a failure on any line leaves nothing behind.
"""
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

import requests
from django.conf import settings
from django.db import transaction

from gastro.commissions.services import resolve_commission, calculate_commission
from gastro.comparison.services import record_sale
from gastro.inventory.services import decrement_stock, available_quantity, InsufficientStockError
from .models import Cart, CartItem, Order, Sale, generate_order_number

logger = logging.getLogger(__name__)

SHIPPING_FIELDS = ('name', 'address', 'city', 'state', 'zip_code', 'phone')


class CheckoutError(Exception):
    def __init__(self, message, details=None):
        self.details = details or []
        super().__init__(message)


class PaymentError(Exception):
    """Stripe rejected the request or could not be reached"""


class PaymentNotConfigured(PaymentError):
    pass


def get_active_cart(user):
    cart, _ = Cart.objects.get_or_create(user=user, status='active')
    return cart


def add_to_cart(cart, product, quantity=1):
    """Add a product, or increase its quantity when already in the cart"""
    if not product.active:
        raise CheckoutError(f"{product.name} is not available")
    item, created = CartItem.objects.get_or_create(cart=cart, product=product, defaults={'quantity': quantity})
    if not created:
        item.quantity += quantity
        item.save(update_fields=['quantity', 'updated_at'])
    return item


def update_cart_item(item, quantity):
    """Set a line's quantity; anything below 1 removes the line. Returns None when removed."""
    if quantity < 1:
        item.delete()
        return None
    item.quantity = quantity
    item.save(update_fields=['quantity', 'updated_at'])
    return item


def group_by_supplier(lines, price_of):
    """
    Bucket cart items or sales per supplier, preserving first-seen order.
    price_of(line) returns the line's total.
    """
    groups = {}
    for line in lines:
        supplier = line.product.supplier
        entry = groups.get(supplier.id)
        if entry is None:
            entry = groups[supplier.id] = {
                'supplier_id': supplier.id,
                'supplier_name': supplier.display_name,
                'items': [],
                'subtotal': Decimal('0.00'),
            }
        entry['items'].append(line)
        entry['subtotal'] += price_of(line)
    return list(groups.values())


def cart_summary(cart):
    items = list(cart.items.select_related('product', 'product__supplier', 'product__stock'))
    return {
        'cart': cart,
        'items': items,
        'total_items': sum(i.quantity for i in items),
        'total_price': sum((i.line_total for i in items), Decimal('0.00')),
        'suppliers': group_by_supplier(items, lambda i: i.line_total),
    }


def validate_shipping(data):
    missing = [field for field in SHIPPING_FIELDS if not str(data.get(field) or '').strip()]
    if missing:
        raise CheckoutError('Missing shipping information', details=missing)
    return {field: str(data[field]).strip() for field in SHIPPING_FIELDS}


def record_direct_sale(product, quantity, buyer=None, total_price=None, commission_rate=None,
                       commission_amount=None, order=None):
    """Store a sale line, resolving the commission when it is not given"""
    if total_price is None:
        total_price = product.price * quantity
    if commission_rate is None:
        commission_rate = resolve_commission(product)['rate']
    if commission_amount is None:
        commission_amount = calculate_commission(total_price, commission_rate)
    return Sale.objects.create(
        product=product,
        supplier_id=product.supplier_id,
        buyer=buyer,
        order=order,
        quantity=quantity,
        unit_price=product.price,
        total_price=total_price,
        commission_rate=commission_rate,
        commission_amount=commission_amount,
    )


@transaction.atomic
def checkout(user, shipping_data):
    """
    Convert the user's active cart into an Order.

    Raises CheckoutError for an empty cart, missing shipping data,
    unavailable products or insufficient stock.
    """
    shipping = validate_shipping(shipping_data)
    cart = Cart.objects.select_for_update().filter(user=user, status='active').first()
    items = list(cart.items.select_related('product', 'product__supplier')) if cart else []
    if not items:
        raise CheckoutError('Cart is empty')

    inactive = [i.product.name for i in items if not i.product.active]
    if inactive:
        raise CheckoutError('Some products are no longer available', details=inactive)

    short = [
        {'product_id': i.product_id, 'product_name': i.product.name,
         'requested': i.quantity, 'available': available_quantity(i.product)}
        for i in items if available_quantity(i.product) < i.quantity
    ]
    if short:
        raise CheckoutError('Insufficient stock', details=short)

    subtotal = sum((i.line_total for i in items), Decimal('0.00'))
    order = Order.objects.create(
        order_number=generate_order_number(),
        buyer=user,
        shipping_name=shipping['name'],
        shipping_address=shipping['address'],
        shipping_city=shipping['city'],
        shipping_state=shipping['state'],
        shipping_zip_code=shipping['zip_code'],
        shipping_phone=shipping['phone'],
        subtotal=subtotal,
        total=subtotal,
    )

    for item in items:
        try:
            decrement_stock(item.product, item.quantity, user=user, notes=order.order_number)
        except InsufficientStockError as e:
            # Lost a race with another checkout after the pre-check
            raise CheckoutError('Insufficient stock', details=[{
                'product_id': e.product.id, 'product_name': e.product.name,
                'requested': e.requested, 'available': e.available,
            }])
        record_direct_sale(item.product, item.quantity, buyer=user, order=order)
        record_sale(item.product, item.quantity)

    cart.items.all().delete()
    logger.info(f"Checkout completed: order {order.order_number}, {len(items)} lines, total {order.total}")
    return order


def to_minor_units(amount):
    """Positive amount in currency units to integer cents"""
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise ValueError('Invalid amount')
    if not value.is_finite() or value <= 0:
        raise ValueError('Amount must be greater than zero')
    return int((value * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def create_payment_intent(amount, metadata=None):
    """
    Create a Stripe PaymentIntent for amount (in currency units).
    Returns {'client_secret', 'payment_intent_id', 'amount', 'currency'}.
    """
    if not settings.STRIPE_SECRET_KEY:
        raise PaymentNotConfigured('Payments are not configured')
    cents = to_minor_units(amount)
    data = {
        'amount': cents,
        'currency': settings.PAYMENT_CURRENCY,
        'automatic_payment_methods[enabled]': 'true',
    }
    for key, value in (metadata or {}).items():
        data[f'metadata[{key}]'] = str(value)

    try:
        response = requests.post(
            f"{settings.STRIPE_API_URL}/payment_intents",
            auth=(settings.STRIPE_SECRET_KEY, ''),
            data=data,
            timeout=settings.PAYMENT_TIMEOUT_SECONDS,
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"Stripe request failed: {str(e)}")
        raise PaymentError('Payment provider unavailable')

    if response.status_code >= 400:
        try:
            message = response.json().get('error', {}).get('message', 'Payment failed')
        except ValueError:
            message = 'Payment failed'
        logger.warning(f"Stripe rejected payment intent ({response.status_code}): {message}")
        raise PaymentError(message)

    try:
        payload = response.json()
    except ValueError:
        logger.error(f"Stripe returned an unreadable body ({response.status_code})")
        raise PaymentError('Invalid response from payment provider')
    return {
        'client_secret': payload.get('client_secret'),
        'payment_intent_id': payload.get('id'),
        'amount': cents,
        'currency': settings.PAYMENT_CURRENCY,
    }
