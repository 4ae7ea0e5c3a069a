"""
Stock mutations. Every change goes through here so history stays complete.
"""
import logging

from django.db import transaction
from django.db.models import F

from .models import Stock, StockAdjustment

logger = logging.getLogger(__name__)


class InsufficientStockError(Exception):
    def __init__(self, product, requested, available):
        self.product = product
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {product.name}: requested {requested}, available {available}"
        )


def get_stock(product):
    stock, _ = Stock.objects.get_or_create(product=product)
    return stock


@transaction.atomic
def set_stock(product, quantity=None, low_stock_threshold=None, reason='manual', user=None, notes=''):
    """Set absolute quantity and/or threshold, recording an adjustment when quantity changes"""
    stock = Stock.objects.select_for_update().filter(product=product).first() or Stock(product=product)
    previous = stock.quantity

    if quantity is not None:
        stock.quantity = max(int(quantity), 0)
    if low_stock_threshold is not None:
        stock.low_stock_threshold = max(int(low_stock_threshold), 0)
    stock.save()

    if stock.quantity != previous:
        StockAdjustment.objects.create(
            product=product,
            previous_quantity=previous,
            new_quantity=stock.quantity,
            delta=stock.quantity - previous,
            reason=reason,
            notes=notes,
            created_by=user if user and user.is_authenticated else None,
        )
        if stock.status != Stock.STATUS_IN_STOCK:
            logger.info(f"Stock alert: product {product.id} is {stock.status} ({stock.quantity} left)")
    return stock


@transaction.atomic
def decrement_stock(product, quantity, user=None, reason='sale', notes=''):
    """
    Atomically remove quantity units. Raises InsufficientStockError
    when fewer units are available; the quantity never goes negative.
    """
    stock = get_stock(product)
    updated = Stock.objects.filter(pk=stock.pk, quantity__gte=quantity).update(
        quantity=F('quantity') - quantity
    )
    if not updated:
        stock.refresh_from_db()
        raise InsufficientStockError(product, quantity, stock.quantity)

    stock.refresh_from_db()
    stock.save(update_fields=['status', 'last_stock_update'])
    StockAdjustment.objects.create(
        product=product,
        previous_quantity=stock.quantity + quantity,
        new_quantity=stock.quantity,
        delta=-quantity,
        reason=reason,
        notes=notes,
        created_by=user if user and user.is_authenticated else None,
    )
    if stock.status != Stock.STATUS_IN_STOCK:
        logger.info(f"Stock alert: product {product.id} is {stock.status} ({stock.quantity} left)")
    return stock


def available_quantity(product):
    try:
        return product.stock.quantity
    except Stock.DoesNotExist:
        return 0


def low_stock_products(products_queryset):
    """
    Active products under their threshold, most urgent first
    (lowest quantity/threshold ratio).
    """
    stocks = Stock.objects.select_related('product', 'product__category').filter(
        product__in=products_queryset.filter(active=True),
        quantity__lt=F('low_stock_threshold'),
    )

    def urgency(stock):
        if stock.low_stock_threshold <= 0:
            return 0
        return stock.quantity / stock.low_stock_threshold

    return sorted(stocks, key=lambda s: (urgency(s), s.product_id))
