"""
Utility functions for catalog operations
"""
from decimal import Decimal

from gastro.core.utils import parse_decimal

PRICE_CEILING = Decimal('1000000')
OPEN_MAX_PRICE = Decimal('999999')


def normalize_price_range(min_price, max_price):
    """
    Turn raw min/max query values into a usable (min, max) pair.

    - missing, non-numeric or negative min -> 0
    - missing, non-numeric or non-positive max -> 999999
    - both clamped to 1,000,000
    - swapped when min > max
    """
    low = parse_decimal(min_price)
    high = parse_decimal(max_price)

    if low is None or low < 0:
        low = Decimal('0')
    if high is None or high <= 0:
        high = OPEN_MAX_PRICE

    low = min(low, PRICE_CEILING)
    high = min(high, PRICE_CEILING)

    if low > high:
        low, high = high, low
    return low, high


def price_filter_requested(params):
    return bool(params.get('min_price') or params.get('max_price'))
