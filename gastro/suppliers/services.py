"""
Supplier directory metrics, computed from each supplier's active products.
"""
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Q

from gastro.catalog.models import Category, Product
from gastro.core.models import User

SORT_OPTIONS = ('rating', 'products', 'newest')


def _format_rating(ratings):
    if not ratings:
        return '0.0'
    avg = sum(ratings, Decimal('0')) / len(ratings)
    return str(avg.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


def supplier_profiles(suppliers):
    """
    Attach products_count, rating, categories, verified and joined_date
    to each supplier. Unrated products (rating 0) do not count towards
    the average.
    """
    suppliers = list(suppliers)
    ids = [s.id for s in suppliers]
    counts = defaultdict(int)
    ratings = defaultdict(list)
    category_ids = defaultdict(list)

    products = Product.objects.filter(active=True, supplier_id__in=ids).only('supplier_id', 'rating', 'category_id')
    for product in products.order_by('id'):
        counts[product.supplier_id] += 1
        if product.rating:
            ratings[product.supplier_id].append(product.rating)
        if product.category_id not in category_ids[product.supplier_id]:
            category_ids[product.supplier_id].append(product.category_id)

    names = dict(Category.objects.values_list('id', 'name'))
    for supplier in suppliers:
        supplier.products_count = counts[supplier.id]
        supplier.rating = _format_rating(ratings[supplier.id])
        supplier.categories = [names[c] for c in category_ids[supplier.id] if c in names]
        supplier.verified = True
        supplier.joined_date = supplier.created_at.date().isoformat()
    return suppliers


def list_suppliers(category=None, search=None, sort_by='rating'):
    suppliers = supplier_profiles(User.objects.filter(role=User.ROLE_SUPPLIER, is_active=True))

    if category:
        needle = category.lower()
        suppliers = [s for s in suppliers if any(needle in c.lower() for c in s.categories)]

    if search:
        needle = search.lower()
        suppliers = [
            s for s in suppliers
            if needle in (s.name or '').lower()
            or needle in (s.company_name or '').lower()
            or any(needle in c.lower() for c in s.categories)
        ]

    if sort_by == 'products':
        suppliers.sort(key=lambda s: s.products_count, reverse=True)
    elif sort_by == 'newest':
        suppliers.sort(key=lambda s: s.created_at, reverse=True)
    else:
        suppliers.sort(key=lambda s: Decimal(s.rating), reverse=True)
    return suppliers


def supplier_categories(supplier):
    """Categories (primary or additional) of the supplier's active products"""
    products = Product.objects.filter(supplier=supplier, active=True)
    return Category.objects.filter(
        Q(products__in=products) | Q(secondary_products__in=products)
    ).distinct().order_by('name')
