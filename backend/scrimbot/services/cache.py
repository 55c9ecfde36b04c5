import time
import functools
import hashlib
import json
import logging

logger = logging.getLogger(__name__)


# cache utility
class SimpleTTLCache:
    def __init__(self, clock=time.time):
        self._store = {}
        self._clock = clock

    # return the cached value if exists
    def get(self, key):
        item = self._store.get(key)
        if not item:
            return None

        value, expires_at = item
        if self._clock() > expires_at:
            self._store.pop(key, None)
            return None

        return value

    # set value in cache with a ttl
    def set(self, key, value, ttl_seconds: int):
        self._store[key] = (value, self._clock() + ttl_seconds)

    # drop a single key, e.g. after the remote entity was deleted
    def invalidate(self, key):
        self._store.pop(key, None)

    # clear all cached items
    def clear(self):
        self._store.clear()

    async def get_or_fetch(self, key, loader, ttl_seconds: int):
        """
        Return the cached value for `key`, or await `loader()` and cache its
        result. Errors from the loader are not cached.
        """
        cached_value = self.get(key)
        if cached_value is not None:
            return cached_value

        logger.debug("cache miss: %s", key)
        value = await loader()
        self.set(key, value, ttl_seconds)
        return value


# global instance cache (shared)
CACHE = SimpleTTLCache()


# Helper functions
# make a unique cache key
def make_cache_key(func, args, kwargs):
    """
    Generate a deterministic cache key based on:
    - function module + name
    - args and kwargs
    """
    raw = {
        "func": f"{func.__module__}.{func.__qualname__}",
        "args": args,
        "kwargs": kwargs,
    }
    encoded = json.dumps(raw, sort_keys=True, default=str).encode()
    return hashlib.sha256(encoded).hexdigest()


# Decorators
def cached(ttl_seconds):
    """
    Decorator to cache an async client method in the client's `cache`.

    `ttl_seconds` is either a number or a callable returning one, so ttls
    can come from settings at call time. `self` is not part of the key:
    clients sharing a cache share results.

    Example usage:
        @cached(ttl_seconds=lambda: settings.LEAGUE_CACHE_TTL)
        async def get_match(self, match_id):
            ...
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            key = make_cache_key(func, args, kwargs)
            ttl = ttl_seconds() if callable(ttl_seconds) else ttl_seconds
            return await self.cache.get_or_fetch(
                key, lambda: func(self, *args, **kwargs), ttl
            )

        return wrapper

    return decorator
