"""
Price comparison engine.

A ProductGroup gathers equivalent products from several suppliers. Its
price statistics (min / max / avg), the price position of each item and
the single highlighted (cheapest) item are recomputed by
refresh_group_stats() whenever membership or a member's price changes.
"""
import logging
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from gastro.catalog.models import Product
from gastro.core.utils import parse_bool, parse_decimal
from gastro.inventory.models import Stock
from .models import (
    ProductGroup, ProductGroupItem, ProductSearch, ProductComparison, ProductComparisonDetail
)

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')
COMPARISON_TTL = timedelta(days=7)
DEFAULT_COMPARE_RESULTS = 6
DEFAULT_SEARCH_RESULTS = 20

SORT_TYPES = ('price_asc', 'price_desc', 'rating_desc', 'newest', 'popularity')
GROUP_SORT_TYPES = ('relevance', 'newest', 'price_asc', 'price_desc', 'popularity')


class ComparisonError(Exception):
    pass


def _money(value):
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def savings_percentage(price, reference):
    """Whole-number percent saved by paying price instead of reference"""
    price = Decimal(str(price))
    reference = Decimal(str(reference))
    if reference <= 0:
        return 0
    pct = (reference - price) / reference * 100
    return int(pct.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


@transaction.atomic
def refresh_group_stats(group):
    """Recompute price statistics, per-item price positions and the highlighted item"""
    items = list(
        group.items.select_related('product').filter(product__active=True).order_by('created_at', 'id')
    )
    inactive = group.items.exclude(pk__in=[i.pk for i in items])
    inactive.update(is_highlighted=False)

    if not items:
        group.min_price = group.max_price = group.avg_price = None
        group.products_count = 0
        group.suppliers_count = 0
        group.save(update_fields=['min_price', 'max_price', 'avg_price', 'products_count',
                                  'suppliers_count', 'updated_at'])
        return group

    prices = [i.product.price for i in items]
    avg = _money(sum(prices, Decimal('0')) / len(prices))
    group.min_price = min(prices)
    group.max_price = max(prices)
    group.avg_price = avg
    group.products_count = len(items)
    group.suppliers_count = len({i.product.supplier_id for i in items})
    group.save(update_fields=['min_price', 'max_price', 'avg_price', 'products_count',
                              'suppliers_count', 'updated_at'])

    # Price ties keep insertion order; the earliest item gets the highlight
    ranked = sorted(items, key=lambda i: i.product.price)
    cheapest_id = ranked[0].pk
    for position, item in enumerate(ranked, start=1):
        item.price_difference = _money((item.product.price - avg) / avg * 100) if avg else Decimal('0.00')
        item.is_highlighted = item.pk == cheapest_id
        item.sort_order = position
        item.supplier_id = item.product.supplier_id
    ProductGroupItem.objects.bulk_update(
        ranked, ['price_difference', 'is_highlighted', 'sort_order', 'supplier']
    )
    logger.debug(f"Refreshed stats for group {group.id}: {len(items)} items, min {group.min_price}")
    return group


def add_product_to_group(group, product, match_confidence=100):
    if ProductGroupItem.objects.filter(group=group, product=product).exists():
        raise ComparisonError('Product is already in this group')
    item = ProductGroupItem.objects.create(
        group=group,
        product=product,
        supplier_id=product.supplier_id,
        match_confidence=match_confidence,
    )
    refresh_group_stats(group)
    item.refresh_from_db()
    return item


def remove_item_from_group(item):
    group = item.group
    item.delete()
    refresh_group_stats(group)
    return group


def _item_price(item):
    return item.product.price


def _item_rating(item):
    return item.product.rating


def rank_items(items, sort_type='price_asc'):
    """Order items by the requested criterion; unknown criteria fall back to price_asc"""
    items = list(items)
    if sort_type == 'price_desc':
        return sorted(items, key=_item_price, reverse=True)
    if sort_type == 'rating_desc':
        return sorted(items, key=_item_rating, reverse=True)
    if sort_type == 'newest':
        return sorted(items, key=lambda i: i.product.created_at, reverse=True)
    if sort_type == 'popularity':
        return sorted(items, key=lambda i: i.total_sales, reverse=True)
    return sorted(items, key=_item_price)


def cheapest_item(items):
    """First item with the lowest price"""
    best = None
    for item in items:
        if best is None or _item_price(item) < _item_price(best):
            best = item
    return best


def best_rated_item(items):
    """First item with the highest rating"""
    best = None
    for item in items:
        if best is None or _item_rating(item) > _item_rating(best):
            best = item
    return best


def _stock_status(product):
    try:
        return product.stock.status
    except Stock.DoesNotExist:
        return Stock.STATUS_OUT_OF_STOCK


def _apply_item_filters(items, filters):
    min_price = parse_decimal(filters.get('min_price'))
    max_price = parse_decimal(filters.get('max_price'))
    supplier_id = filters.get('supplier')
    in_stock = parse_bool(filters.get('in_stock'), False)

    result = []
    for item in items:
        price = _item_price(item)
        if min_price is not None and price < min_price:
            continue
        if max_price is not None and price > max_price:
            continue
        if supplier_id and str(item.product.supplier_id) != str(supplier_id):
            continue
        if in_stock and _stock_status(item.product) == Stock.STATUS_OUT_OF_STOCK:
            continue
        result.append(item)
    return result


def compare_group(group, sort_type='price_asc', max_results=None, filters=None, user=None):
    """
    Rank a group's offers and pick the cheapest and best-rated ones.

    When a signed-in user is given the search and the comparison are
    recorded and the group's comparison counter goes up.
    """
    if not group.is_active:
        raise ComparisonError('Product group is not active')
    filters = filters or {}
    sort_type = sort_type if sort_type in SORT_TYPES else 'price_asc'
    max_results = max_results or DEFAULT_COMPARE_RESULTS

    items = group.items.select_related('product', 'product__supplier', 'product__stock', 'product__category') \
        .filter(product__active=True).order_by('sort_order', 'id')
    items = _apply_item_filters(items, filters)
    items = rank_items(items, sort_type)[:max_results]

    price_ranks = {item.pk: rank for rank, item in enumerate(sorted(items, key=_item_price), start=1)}
    reference = group.max_price or Decimal('0')
    for item in items:
        item.price_rank = price_ranks[item.pk]
        item.savings = _money(reference - _item_price(item)) if reference else Decimal('0.00')
        item.savings_percentage = savings_percentage(_item_price(item), reference)
        item.stock_status = _stock_status(item.product)

    prices = [_item_price(i) for i in items]
    summary = {
        'min_price': min(prices) if prices else None,
        'max_price': max(prices) if prices else None,
        'avg_price': _money(sum(prices, Decimal('0')) / len(prices)) if prices else None,
        'max_savings': _money(max(prices) - min(prices)) if prices else Decimal('0.00'),
        'max_savings_percentage': savings_percentage(min(prices), max(prices)) if prices else 0,
    }

    comparison = None
    if user is not None and user.is_authenticated:
        comparison = _record_comparison(group, items, sort_type, filters, user)

    return {
        'group': group,
        'items': items,
        'cheapest_item': cheapest_item(items),
        'best_rated_item': best_rated_item(items),
        'summary': summary,
        'comparison': comparison,
    }


@transaction.atomic
def _record_comparison(group, items, sort_type, filters, user):
    search = ProductSearch.objects.create(
        user=user,
        query=group.name,
        category=group.category,
        group=group,
        filters={k: str(v) for k, v in filters.items()},
        results_count=len(items),
    )
    comparison = ProductComparison.objects.create(
        user=user,
        search=search,
        group=group,
        status='completed',
        sort_type=sort_type,
        filters=search.filters,
        products_compared=len(items),
        expires_at=timezone.now() + COMPARISON_TTL,
    )
    ProductComparisonDetail.objects.bulk_create([
        ProductComparisonDetail(
            comparison=comparison,
            product=item.product,
            supplier_id=item.product.supplier_id,
            price=_item_price(item),
            price_rank=item.price_rank,
            stock_status=item.stock_status,
            highlighted_features=list(item.product.features or [])[:5],
        )
        for item in items
    ])
    ProductGroup.objects.filter(pk=group.pk).update(comparison_count=F('comparison_count') + 1)
    group.comparison_count += 1
    return comparison


def search_groups(query='', category=None, sort_type='relevance', max_results=None, user=None):
    """
    Find active groups by name, display name or description.

    Returns {'groups': [...], 'search_id': int | None, 'total_matches': int}.
    """
    query = (query or '').strip()
    groups = ProductGroup.objects.filter(is_active=True).select_related('category')
    if query:
        groups = groups.filter(
            Q(name__icontains=query) | Q(display_name__icontains=query) | Q(description__icontains=query)
        )
    if category is not None:
        groups = groups.filter(category=category)

    sort_type = sort_type if sort_type in GROUP_SORT_TYPES else 'relevance'
    if sort_type == 'newest':
        groups = groups.order_by('-created_at', '-id')
    elif sort_type == 'price_asc':
        groups = groups.order_by(F('min_price').asc(nulls_last=True), 'id')
    elif sort_type == 'price_desc':
        groups = groups.order_by(F('max_price').desc(nulls_last=True), 'id')
    elif sort_type == 'popularity':
        groups = groups.order_by('-comparison_count', 'id')
    else:
        groups = groups.order_by('-search_relevance', 'id')

    total_matches = groups.count()
    results = list(groups[:max_results or DEFAULT_SEARCH_RESULTS])

    search_id = None
    if user is not None and user.is_authenticated:
        search = ProductSearch.objects.create(
            user=user,
            query=query,
            category=category,
            filters={'sort': sort_type},
            results_count=total_matches,
        )
        search_id = search.id
        ProductGroup.objects.filter(pk__in=[g.pk for g in results]).update(
            search_relevance=F('search_relevance') + 1
        )

    return {'groups': results, 'search_id': search_id, 'total_matches': total_matches}


def compare_by_name(name=None, category=None, limit=5):
    """
    Ad-hoc comparison without stored groups: active products sharing the
    same normalised name, cheapest first. Only names offered more than
    once are returned, at most `limit` of them.
    """
    name = (name or '').strip()
    if not name and category is None:
        raise ComparisonError('Provide a product name or a category')

    products = Product.objects.filter(active=True).select_related('supplier', 'category', 'stock')
    if name:
        products = products.filter(name__icontains=name)
    if category is not None:
        products = products.filter(Q(category=category) | Q(additional_categories=category)).distinct()

    grouped = {}
    for product in products.order_by('id'):
        grouped.setdefault(product.normalized_name, []).append(product)

    comparisons = []
    for normalized, offers in grouped.items():
        if len(offers) < 2:
            continue
        offers.sort(key=lambda p: (p.price, p.id))
        low, high = offers[0].price, offers[-1].price
        comparisons.append({
            'name': offers[0].name,
            'normalized_name': normalized,
            'products': offers,
            'min_price': low,
            'max_price': high,
            'savings': _money(high - low),
            'savings_percentage': savings_percentage(low, high),
        })
        if len(comparisons) >= limit:
            break
    return comparisons


def refresh_groups_for_product(product):
    for group in ProductGroup.objects.filter(items__product=product).distinct():
        refresh_group_stats(group)


def record_sale(product, quantity):
    """Add sold units to every group item of the product"""
    ProductGroupItem.objects.filter(product=product).update(total_sales=F('total_sales') + quantity)
