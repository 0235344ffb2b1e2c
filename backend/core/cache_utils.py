"""
Caching helpers for small, frequently read configuration
(price settings, paper types).
Backed by Redis (django-redis) when REDIS_URL is set, local memory otherwise.
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
PRICE_CONFIG_CACHE_TTL = 600  # 10 minutes
PAPER_TYPES_CACHE_TTL = 300  # 5 minutes


def make_cache_key(prefix, *args, **kwargs):
    """
    ``prefix`` alone for argument-less loaders, so keys such as
    ``price_config`` stay readable; otherwise ``prefix:<md5 of the arguments>``.
    """
    if not args and not kwargs:
        return prefix
    key_data = f"{args}:{sorted(kwargs.items())}"
    return f"{prefix}:{hashlib.md5(key_data.encode()).hexdigest()}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Cache the result of a loader function

    Usage:
        @cached_query(cache_ttl=PRICE_CONFIG_CACHE_TTL, key_prefix="price_config")
        def get_price_config():
            ...

        get_price_config.invalidate()  # called from post_save/post_delete signals
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)
            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result

        def invalidate(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)
            cache.delete(cache_key)
            logger.info(f"Invalidated cache {cache_key}")

        wrapper.invalidate = invalidate
        return wrapper
    return decorator
