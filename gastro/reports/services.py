"""
Aggregations behind the dashboards and the public marketplace stats.
"""
import logging
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Sum, Count, Q, F
from django.db.models.functions import TruncMonth
from django.utils import timezone

from gastro.catalog.models import Category, Product
from gastro.commissions.services import supplier_commission_summary
from gastro.comparison.models import ProductGroup, ProductGroupItem, ProductComparison
from gastro.core.cache_utils import cached_query, MARKETPLACE_STATS_CACHE_TTL, MARKETPLACE_STATS_PREFIX
from gastro.core.models import User
from gastro.inventory.models import Stock
from gastro.orders.models import Sale

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
TOP_LIMIT = 5
TOP_CATEGORIES_LIMIT = 8
RECENT_SAVINGS_DAYS = 30
RECENT_SAVINGS_LIMIT = 5


def _sales_in_period(sales, date_from=None, date_to=None):
    if date_from:
        sales = sales.filter(created_at__date__gte=date_from)
    if date_to:
        sales = sales.filter(created_at__date__lte=date_to)
    return sales


def _totals(sales):
    totals = sales.aggregate(
        count=Count('id'),
        revenue=Sum('total_price'),
        units=Sum('quantity'),
        commission=Sum('commission_amount'),
    )
    revenue = totals['revenue'] or ZERO
    commission = totals['commission'] or ZERO
    return {
        'count': totals['count'],
        'revenue': revenue,
        'units': totals['units'] or 0,
        'commission': commission,
        'net': revenue - commission,
    }


def sales_by_month(sales, months=12):
    """Revenue, commission and count per month for the last `months` months"""
    since = (timezone.now() - timedelta(days=31 * months)).replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    rows = sales.filter(created_at__gte=since).annotate(month=TruncMonth('created_at')).values('month').annotate(
        revenue=Sum('total_price'),
        commission=Sum('commission_amount'),
        count=Count('id'),
    ).order_by('month')
    return [
        {
            'month': row['month'].strftime('%Y-%m'),
            'revenue': str(row['revenue'] or ZERO),
            'commission': str(row['commission'] or ZERO),
            'count': row['count'],
        }
        for row in rows
    ][-months:]


def admin_dashboard(date_from=None, date_to=None):
    sales = _sales_in_period(Sale.objects.filter(status='completed'), date_from, date_to)
    totals = _totals(sales)

    top_suppliers = sales.values('supplier_id', 'supplier__name', 'supplier__company_name').annotate(
        revenue=Sum('total_price'),
        commission=Sum('commission_amount'),
        sales_count=Count('id'),
    ).order_by('-revenue')[:TOP_LIMIT]

    top_products = sales.values('product_id', 'product__name', 'product__slug').annotate(
        units=Sum('quantity'),
        revenue=Sum('total_price'),
    ).order_by('-units', '-revenue')[:TOP_LIMIT]

    return {
        'period': {
            'from': date_from.isoformat() if date_from else None,
            'to': date_to.isoformat() if date_to else None,
        },
        'total_sales': totals['count'],
        'total_revenue': str(totals['revenue']),
        'total_commission': str(totals['commission']),
        'total_units': totals['units'],
        'supplier_count': User.objects.filter(role=User.ROLE_SUPPLIER, is_active=True).count(),
        'customer_count': User.objects.filter(role=User.ROLE_USER, is_active=True).count(),
        'product_count': Product.objects.filter(active=True).count(),
        'sales_by_month': sales_by_month(sales),
        'top_suppliers': [
            {
                'supplier_id': row['supplier_id'],
                'supplier_name': row['supplier__company_name'] or row['supplier__name'],
                'revenue': str(row['revenue'] or ZERO),
                'commission': str(row['commission'] or ZERO),
                'sales_count': row['sales_count'],
            }
            for row in top_suppliers
        ],
        'top_products': [
            {
                'product_id': row['product_id'],
                'product_name': row['product__name'],
                'product_slug': row['product__slug'],
                'units': row['units'],
                'revenue': str(row['revenue'] or ZERO),
            }
            for row in top_products
        ],
    }


def stock_status_summary(products):
    counts = dict(
        Stock.objects.filter(product__in=products).values_list('status').annotate(n=Count('id')).order_by()
    )
    without_stock_row = products.filter(stock__isnull=True).count()
    return {
        Stock.STATUS_IN_STOCK: counts.get(Stock.STATUS_IN_STOCK, 0),
        Stock.STATUS_LOW_STOCK: counts.get(Stock.STATUS_LOW_STOCK, 0),
        Stock.STATUS_OUT_OF_STOCK: counts.get(Stock.STATUS_OUT_OF_STOCK, 0) + without_stock_row,
    }


def supplier_dashboard(supplier, date_from=None, date_to=None, recent_limit=10):
    sales = _sales_in_period(
        Sale.objects.filter(supplier=supplier, status='completed'), date_from, date_to
    )
    totals = _totals(sales)
    products = Product.objects.filter(supplier=supplier)
    recent = sales.select_related('product', 'buyer').order_by('-created_at', '-id')[:recent_limit]
    commission = supplier_commission_summary(supplier)

    return {
        'period': {
            'from': date_from.isoformat() if date_from else None,
            'to': date_to.isoformat() if date_to else None,
        },
        'revenue': str(totals['revenue']),
        'units_sold': totals['units'],
        'sales_count': totals['count'],
        'commission_paid': str(totals['commission']),
        'net_revenue': str(totals['net']),
        'products': {
            'total': products.count(),
            'active': products.filter(active=True).count(),
            'inactive': products.filter(active=False).count(),
        },
        'stock_status': stock_status_summary(products.filter(active=True)),
        'sales_by_month': sales_by_month(sales),
        'recent_sales': [
            {
                'id': sale.id,
                'product_id': sale.product_id,
                'product_name': sale.product.name,
                'buyer_name': sale.buyer.display_name if sale.buyer_id else None,
                'quantity': sale.quantity,
                'total_price': str(sale.total_price),
                'commission_amount': str(sale.commission_amount),
                'created_at': sale.created_at.isoformat(),
            }
            for sale in recent
        ],
        'commission_summary': {
            key: str(value) if isinstance(value, Decimal) else value
            for key, value in commission.items()
        },
    }


def _percent(numerator, denominator):
    if not denominator:
        return Decimal('0')
    return numerator / denominator * 100


def _recent_savings():
    since = timezone.now() - timedelta(days=RECENT_SAVINGS_DAYS)
    comparisons = ProductComparison.objects.filter(
        created_at__gte=since, group__max_price__isnull=False
    ).select_related('group', 'selected_product').prefetch_related('details__product').order_by('-created_at')

    entries = []
    for comparison in comparisons:
        product = comparison.selected_product
        price = product.price if product else None
        if product is None:
            cheapest = comparison.details.all()[:1]
            if not cheapest:
                continue
            product, price = cheapest[0].product, cheapest[0].price
        max_price = comparison.group.max_price
        savings = max_price - price
        entries.append({
            'amount': str(savings),
            'percentage': int(_percent(savings, max_price).quantize(Decimal('1'), rounding=ROUND_HALF_UP)),
            'product': product.name,
            'product_slug': product.slug,
            'date': comparison.created_at.date().isoformat(),
        })
        if len(entries) >= RECENT_SAVINGS_LIMIT:
            break
    return entries


@cached_query(cache_ttl=MARKETPLACE_STATS_CACHE_TTL, key_prefix=MARKETPLACE_STATS_PREFIX)
def marketplace_stats():
    """Public savings figures shown on the landing page"""
    groups = ProductGroup.objects.filter(
        is_active=True, min_price__isnull=False, max_price__isnull=False
    ).values_list('min_price', 'max_price')

    total_savings = ZERO
    percentages = []
    for min_price, max_price in groups:
        total_savings += max_price - min_price
        if max_price > 0:
            percentages.append(_percent(max_price - min_price, max_price))
    avg_savings = sum(percentages, Decimal('0')) / len(percentages) if percentages else Decimal('0')

    top_categories = Category.objects.annotate(
        search_count=Count('searches')
    ).order_by('-search_count', 'name')[:TOP_CATEGORIES_LIMIT]

    return {
        'total_savings': str(total_savings),
        'avg_savings_percentage': int(avg_savings.quantize(Decimal('1'), rounding=ROUND_HALF_UP)),
        'total_products_compared': ProductGroupItem.objects.values('product_id').distinct().count(),
        'total_comparisons': ProductComparison.objects.count(),
        'top_categories': [
            {'id': c.id, 'name': c.name, 'slug': c.slug, 'search_count': c.search_count}
            for c in top_categories
        ],
        'recent_savings': _recent_savings(),
    }
