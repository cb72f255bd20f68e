"""
Query options: named cache settings per logical resource.

The same registry drives two things:
- the client data layer, served at /api/query-options/ (query key,
  stale time, gc time, retry, refetch on window focus);
- server-side caching of the matching queries through cached_query.

Invalidation bumps a per-resource version so every cached variant of a
resource (one per filter combination) goes stale at once.
"""
import hashlib
import logging
from collections import namedtuple
from datetime import timedelta
from functools import wraps

from django.core.cache import cache

logger = logging.getLogger(__name__)

QueryOption = namedtuple(
    'QueryOption',
    ['key', 'stale_time', 'gc_time', 'retry', 'refetch_on_window_focus'],
)

MINUTE = timedelta(minutes=1)
HOUR = timedelta(hours=1)
DAY = timedelta(days=1)

QUERY_OPTIONS = {
    # Products are cached aggressively, admins invalidate on save
    'products': QueryOption(['products'], 3 * DAY, 7 * DAY, 3, False),
    'store_products': QueryOption(['storeProducts'], 3 * DAY, 7 * DAY, 3, False),
    # Fail fast on 404s
    'product': QueryOption(['product'], 3 * DAY, 7 * DAY, 0, False),
    'recommended_products': QueryOption(['recommendedProducts'], 30 * DAY, 60 * DAY, 3, False),

    # Reference data rarely changes
    'brands': QueryOption(['brands'], 7 * DAY, 14 * DAY, 3, False),
    'collections': QueryOption(['collections'], 7 * DAY, 14 * DAY, 3, False),
    'categories': QueryOption(['categories'], 7 * DAY, 14 * DAY, 3, False),
    'countries': QueryOption(['countries'], 7 * DAY, 14 * DAY, 3, False),
    'store_locations': QueryOption(['storeLocations'], 7 * DAY, 14 * DAY, 3, False),
    'product_attributes': QueryOption(['productAttributes'], 7 * DAY, 14 * DAY, 3, False),

    'brand_counts': QueryOption(['productBrandCounts'], 14 * DAY, 24 * DAY, 3, False),
    'collection_counts': QueryOption(['productCollectionCounts'], 14 * DAY, 24 * DAY, 3, False),
    'category_counts': QueryOption(['productCategoryCounts'], 14 * DAY, 24 * DAY, 3, False),

    # Fresh while editing
    'attribute_values': QueryOption(['attributeValues'], 5 * MINUTE, DAY, 3, False),
    # Values shown in filters depend on the current filter set
    'attribute_filter_values': QueryOption(['attributeFilterValues'], HOUR, 3 * HOUR, 3, False),

    'orders': QueryOption(['dashboardOrders'], DAY, 3 * DAY, 3, True),
    'totals': QueryOption(['dashboardTotals'], DAY, 3 * DAY, 3, False),
}

# Resources each model's changes make stale
MODEL_RESOURCES = {
    'Product': [
        'products', 'store_products', 'product', 'recommended_products',
        'brand_counts', 'collection_counts', 'category_counts',
        'attribute_filter_values', 'totals',
    ],
    'ProductVariation': [
        'products', 'store_products', 'product', 'recommended_products', 'product_attributes',
    ],
    'VariationAttribute': ['products', 'store_products', 'product', 'product_attributes'],
    'ProductStoreLocation': ['product'],
    'Brand': ['brands', 'store_products', 'product', 'brand_counts', 'totals'],
    'Collection': ['collections', 'store_products', 'product', 'collection_counts', 'totals'],
    'Category': ['categories', 'store_products', 'product', 'category_counts', 'totals'],
    'Country': ['countries', 'brands'],
    'StoreLocation': ['store_locations', 'product', 'totals'],
    'ProductAttribute': ['product_attributes', 'attribute_filter_values', 'product', 'totals'],
    'AttributeValue': ['attribute_values', 'attribute_filter_values', 'product_attributes', 'product'],
    'Order': ['orders', 'totals'],
    'OrderItem': ['orders'],
}


def get_query_option(name):
    try:
        return QUERY_OPTIONS[name]
    except KeyError:
        raise KeyError(f"Unknown query option: {name}")


def client_query_options():
    """Registry in the shape the client data layer expects (times in ms)."""
    return {
        name: {
            'queryKey': option.key,
            'staleTime': int(option.stale_time.total_seconds() * 1000),
            'gcTime': int(option.gc_time.total_seconds() * 1000),
            'retry': option.retry,
            'refetchOnWindowFocus': option.refetch_on_window_focus,
        }
        for name, option in QUERY_OPTIONS.items()
    }


def _version_key(name):
    return f"query_options:{name}:version"


def get_version(name):
    version = cache.get(_version_key(name))
    if version is None:
        version = 1
        cache.set(_version_key(name), version, None)
    return version


def make_cache_key(name, *params):
    """Cache key of one resource variant, hashed to keep it short."""
    version = get_version(name)
    key_data = f"{name}:{params}"
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"query_options:{name}:v{version}:{key_hash}"


def get_or_fetch(name, fetch, *params):
    """Return the cached result of fetch() for this resource variant."""
    option = get_query_option(name)
    cache_key = make_cache_key(name, *params)

    cached_data = cache.get(cache_key)
    if cached_data is not None:
        logger.debug("Cache HIT for %s: %s", name, cache_key)
        return cached_data

    logger.debug("Cache MISS for %s: %s", name, cache_key)
    result = fetch()
    cache.set(cache_key, result, int(option.stale_time.total_seconds()))
    return result


def cached_query(name):
    """
    Decorator caching a query function under a named resource.
    Positional and keyword arguments become part of the key.

    Usage:
        @cached_query('brands')
        def get_brands(active_only=True):
            ...
    """
    get_query_option(name)

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            params = args + tuple(sorted(kwargs.items()))
            return get_or_fetch(name, lambda: func(*args, **kwargs), *params)
        return wrapper
    return decorator


def invalidate(*names):
    """Invalidate and refetch: cached variants of each resource go stale."""
    for name in names:
        get_query_option(name)
        try:
            cache.incr(_version_key(name))
        except ValueError:
            cache.set(_version_key(name), 2, None)
    if names:
        logger.info("Invalidated query caches: %s", ', '.join(names))


def invalidate_for_model(model_name):
    resources = MODEL_RESOURCES.get(model_name, [])
    invalidate(*resources)
    return resources
