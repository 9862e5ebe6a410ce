"""Expiring response cache on top of the persistent key-value store.

Entries live under the ``flight_cache_`` prefix so a full wipe is a prefix
scan. Expiry is lazy: a stale entry is removed the next time someone reads
it. A cache failure must never block a lookup, so every store or
serialization error is logged and reported as a miss.
"""

import logging
import time

from models import CacheEntry

logger = logging.getLogger(__name__)

CACHE_PREFIX = "flight_cache_"


class CacheManager:
    """Generic TTL cache keyed by logical request signature."""

    def __init__(self, store, clock=time.time):
        self.store = store
        self._clock = clock

    def _now_ms(self):
        return int(self._clock() * 1000)

    def _key(self, key):
        return f"{CACHE_PREFIX}{key}"

    def set(self, key, value, ttl_hours=24):
        """Store value for ttl_hours. Failures are logged, never raised."""
        entry = CacheEntry(
            payload=value,
            stored_at_ms=self._now_ms(),
            ttl_ms=int(ttl_hours * 60 * 60 * 1000),
        )
        try:
            self.store.set_json(self._key(key), entry.to_dict())
            logger.info(f"Cached '{key}' (expires in {ttl_hours}h)")
            return True
        except Exception as e:
            logger.warning(f"Failed to save cache entry '{key}': {e}")
            return False

    def get(self, key):
        """Return the cached value, or None on miss, expiry or corruption."""
        try:
            raw = self.store.get_json(self._key(key))
        except Exception as e:
            logger.warning(f"Error reading cache entry '{key}': {e}")
            self._discard(key)
            return None

        if raw is None:
            logger.debug(f"Cache miss for '{key}'")
            return None

        try:
            entry = CacheEntry.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Malformed cache entry '{key}': {e}")
            self._discard(key)
            return None

        if not entry.is_fresh(self._now_ms()):
            logger.info(f"Cache expired for '{key}'")
            self._discard(key)
            return None

        logger.info(f"Cache hit for '{key}'")
        return entry.payload

    def _discard(self, key):
        try:
            self.store.remove(self._key(key))
        except Exception as e:
            logger.warning(f"Failed to remove cache entry '{key}': {e}")

    def clear(self, key):
        """Remove one entry."""
        self._discard(key)

    def clear_all(self):
        """Remove every cache entry, leaving other stored state alone."""
        try:
            removed = self.store.remove_prefix(CACHE_PREFIX)
            logger.info(f"Cleared {removed} cache entries")
            return removed
        except Exception as e:
            logger.warning(f"Failed to clear cache: {e}")
            return 0

    def stats(self):
        """Count and list the cached keys (prefix stripped)."""
        try:
            keys = self.store.keys(CACHE_PREFIX)
        except Exception as e:
            logger.warning(f"Failed to list cache entries: {e}")
            keys = []
        return {
            "total": len(keys),
            "keys": sorted(k[len(CACHE_PREFIX):] for k in keys),
        }
