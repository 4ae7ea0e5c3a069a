"""
Commission resolution.

For a product, the first active rule that matches wins:

    product override > supplier+category > supplier > category > global

Category rules match the product's primary category or any of its
additional categories. Within one tier the newest rule wins. With no
rule at all the configured DEFAULT_COMMISSION_RATE applies.
"""
import logging
from collections import Counter
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db.models import Q, Sum

from gastro.catalog.models import Product
from .models import CommissionSetting, ProductCommissionSetting

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')
ONE_PLACE = Decimal('0.1')

SCOPE_PRIORITY = {
    'specific': 1,
    'supplier': 2,
    'category': 3,
    'global': 4,
}


class CommissionError(Exception):
    pass


def default_rate():
    return Decimal(str(settings.DEFAULT_COMMISSION_RATE))


def calculate_commission(total, rate):
    """total * rate / 100, rounded half-up to cents"""
    amount = Decimal(str(total)) * Decimal(str(rate)) / Decimal('100')
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def supplier_category_ids(supplier):
    """Primary and additional category ids across the supplier's products"""
    products = Product.objects.filter(supplier=supplier).prefetch_related('additional_categories')
    return {cid for p in products for cid in p.category_ids()}


def applicable_settings(supplier, category_ids=None):
    """
    Active settings that can apply to a supplier's products, tagged with
    type and priority and sorted most specific first.

    With category_ids, category-bound rules for other categories are left out.
    """
    queryset = CommissionSetting.objects.filter(active=True).filter(
        Q(supplier=supplier) | Q(supplier__isnull=True)
    ).select_related('category', 'supplier')

    tagged = []
    for setting in queryset:
        if category_ids is not None and setting.category_id is not None \
                and setting.category_id not in category_ids:
            continue
        setting.type = setting.scope
        setting.priority = SCOPE_PRIORITY[setting.type]
        tagged.append(setting)
    # Queryset is newest first; a stable sort keeps that inside each tier
    tagged.sort(key=lambda s: s.priority)
    return tagged


def _setting_matches(setting, category_ids):
    return setting.category_id is None or setting.category_id in category_ids


def resolve_commission(product, settings_cache=None):
    """
    Return {'rate': Decimal, 'type': str, 'setting_id': int} for a product.

    settings_cache may hold a precomputed applicable_settings() list for
    the product's supplier when resolving many products at once.
    """
    if not isinstance(product, Product):
        try:
            product = Product.objects.get(pk=product)
        except Product.DoesNotExist:
            raise CommissionError(f"Product {product} not found")

    override = ProductCommissionSetting.objects.filter(product=product, active=True).first()
    if override is not None:
        return {'rate': override.rate, 'type': 'product', 'setting_id': override.id}

    candidates = settings_cache if settings_cache is not None else applicable_settings(product.supplier_id)
    category_ids = set(product.category_ids())
    for setting in candidates:
        if _setting_matches(setting, category_ids):
            return {'rate': setting.rate, 'type': setting.type, 'setting_id': setting.id}

    logger.info(f"No commission rule matches product {product.id}; using default rate")
    return {'rate': default_rate(), 'type': 'global', 'setting_id': 0}


def supplier_commission_summary(supplier):
    """Aggregate view of the commission the supplier pays across their catalogue"""
    products = list(Product.objects.filter(supplier=supplier).prefetch_related('additional_categories'))
    if not products:
        return {
            'avg_rate': '0.0',
            'specific_rates_count': 0,
            'total_commission': Decimal('0.00'),
            'total_products': 0,
            'categories_count': 0,
            'most_common_rate': '0.0',
            'most_common_rate_count': 0,
        }

    from gastro.orders.models import Sale
    total_commission = Sale.objects.filter(supplier=supplier).aggregate(
        total=Sum('commission_amount')
    )['total'] or Decimal('0.00')

    cached = applicable_settings(supplier)
    rates = [resolve_commission(p, settings_cache=cached) for p in products]

    avg_rate = sum((r['rate'] for r in rates), Decimal('0')) / len(rates)
    specific_rates_count = sum(1 for r in rates if r['type'] != 'global')

    # Ties go to the rate seen first
    rate_counts = Counter(Decimal(r['rate']).quantize(ONE_PLACE) for r in rates)
    most_common_rate, most_common_count = Decimal('0.0'), 0
    for rate, count in rate_counts.items():
        if count > most_common_count:
            most_common_rate, most_common_count = rate, count

    categories = {cid for p in products for cid in p.category_ids()}

    return {
        'avg_rate': str(avg_rate.quantize(ONE_PLACE, rounding=ROUND_HALF_UP)),
        'specific_rates_count': specific_rates_count,
        'total_commission': total_commission,
        'total_products': len(products),
        'categories_count': len(categories),
        'most_common_rate': str(most_common_rate),
        'most_common_rate_count': most_common_count,
    }
