"""
Caching utilities for expensive marketplace queries
Uses Redis (django-redis) when configured, any Django cache otherwise
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
PRODUCTS_LIST_CACHE_TTL = 120  # 2 minutes
COMPARISON_CACHE_TTL = 300  # 5 minutes
DASHBOARD_KPI_CACHE_TTL = 300  # 5 minutes
MARKETPLACE_STATS_CACHE_TTL = 600  # 10 minutes

PRODUCTS_LIST_PREFIX = "products_list"
COMPARISON_PREFIX = "product_comparison"
DASHBOARD_PREFIX = "dashboard_kpis"
MARKETPLACE_STATS_PREFIX = "marketplace_stats"


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=600, key_prefix="marketplace_stats")
        def get_marketplace_stats():
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result
        return wrapper
    return decorator


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern
    Redis is scanned with SCAN; other backends are cleared entirely
    """
    try:
        from django_redis import get_redis_connection
        redis_conn = get_redis_connection("default")
    except NotImplementedError:
        # Not a redis backend: no pattern support
        cache.clear()
        logger.debug(f"Cleared non-redis cache for pattern: {pattern}")
        return
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")
        return

    try:
        keys = []
        cursor = 0
        while True:
            cursor, partial_keys = redis_conn.scan(cursor, match=f"*{pattern}*", count=100)
            keys.extend(partial_keys)
            if cursor == 0:
                break

        if keys:
            redis_conn.delete(*keys)
            logger.info(f"Invalidated {len(keys)} cache keys matching pattern: {pattern}")
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")


def get_cached_products_list(filters_dict):
    """
    Get cached products list with filters
    Returns tuple: (cached_data, cache_key)
    """
    cache_key = make_cache_key(PRODUCTS_LIST_PREFIX, **filters_dict)
    cached_data = cache.get(cache_key)
    return cached_data, cache_key


def cache_products_list(cache_key, data, ttl=PRODUCTS_LIST_CACHE_TTL):
    """Cache products list data"""
    cache.set(cache_key, data, ttl)
    logger.debug(f"Cached products list: {cache_key}")


def get_cached_comparison(name, category_slug, limit):
    """Get cached name-based product comparison"""
    cache_key = make_cache_key(COMPARISON_PREFIX, name, category_slug, limit)
    return cache.get(cache_key), cache_key


def cache_comparison(cache_key, data, ttl=COMPARISON_CACHE_TTL):
    cache.set(cache_key, data, ttl)
    logger.debug(f"Cached product comparison: {cache_key}")


def get_cached_dashboard_kpis(scope, date_from, date_to, supplier_id=None):
    """Get cached dashboard KPIs"""
    cache_key = make_cache_key(DASHBOARD_PREFIX, scope, date_from, date_to, supplier_id)
    return cache.get(cache_key), cache_key


def cache_dashboard_kpis(cache_key, data, ttl=DASHBOARD_KPI_CACHE_TTL):
    """Cache dashboard KPIs data"""
    cache.set(cache_key, data, ttl)
    logger.debug(f"Cached dashboard KPIs: {cache_key}")


def invalidate_products_cache():
    """Invalidate all products-related cache"""
    invalidate_cache_pattern(PRODUCTS_LIST_PREFIX)
    invalidate_cache_pattern(COMPARISON_PREFIX)
    logger.info("Invalidated products cache")


def invalidate_comparison_cache():
    """Invalidate comparison results and the stats derived from groups"""
    invalidate_cache_pattern(COMPARISON_PREFIX)
    invalidate_cache_pattern(MARKETPLACE_STATS_PREFIX)
    logger.info("Invalidated comparison cache")


def invalidate_dashboard_cache():
    """Invalidate dashboard KPIs cache"""
    invalidate_cache_pattern(DASHBOARD_PREFIX)
    logger.info("Invalidated dashboard cache")
