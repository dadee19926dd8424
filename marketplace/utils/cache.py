"""In-process TTL cache for hot read queries (featured and new product lists)."""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from loguru import logger

# TTL presets in seconds
CACHE_TTL = {
    "short": 60,
    "medium": 5 * 60,
    "long": 15 * 60,
    "very_long": 60 * 60,
}


class CACHE_KEYS:
    """Cache keys for common catalog queries."""

    FEATURED_PRODUCTS = "featured_products"
    NEW_PRODUCTS = "new_products"
    CATEGORIES = "categories"

    @staticmethod
    def product_by_id(product_id) -> str:
        return f"product_{product_id}"

    @staticmethod
    def products_by_category(category) -> str:
        return f"products_category_{category}"


@dataclass
class CacheEntry:
    value: Any
    stored_at: float
    ttl: float

    def expired(self, now: float) -> bool:
        return now - self.stored_at > self.ttl


class TTLCache:
    """Key/value store whose entries expire after a per-entry TTL.

    Expired entries are dropped lazily on read and in bulk by ``cleanup()``,
    which the scheduler runs periodically.
    """

    def __init__(self, default_ttl: float = CACHE_TTL["medium"], clock: Callable[[], float] = time.monotonic):
        """Initialize cache.

        Args:
            default_ttl: TTL in seconds used when ``set`` is called without one
            clock: Monotonic time source, injectable for tests
        """
        self.default_ttl = default_ttl
        self._clock = clock
        self._store: Dict[str, CacheEntry] = {}

    def set(self, key: str, value: Any, ttl: Optional[float] = None):
        """Store a value under key."""
        self._store[key] = CacheEntry(
            value=value,
            stored_at=self._clock(),
            ttl=self.default_ttl if ttl is None else ttl,
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or default if missing or expired."""
        entry = self._store.get(key)
        if entry is None:
            return default

        if entry.expired(self._clock()):
            del self._store[key]
            return default

        return entry.value

    def has(self, key: str) -> bool:
        entry = self._store.get(key)
        if entry is None:
            return False
        if entry.expired(self._clock()):
            del self._store[key]
            return False
        return True

    def delete(self, key: str):
        self._store.pop(key, None)

    def clear(self):
        self._store.clear()

    def cleanup(self) -> int:
        """Remove every expired entry.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [key for key, entry in self._store.items() if entry.expired(now)]
        for key in expired:
            del self._store[key]

        if expired:
            logger.debug(f"Cache cleanup removed {len(expired)} expired entries")
        return len(expired)

    def get_or_set(self, key: str, factory: Callable[[], Any], ttl: Optional[float] = None) -> Any:
        """Return the cached value or compute, store and return it.

        Args:
            key: Cache key
            factory: Zero-argument callable producing the value on a miss
            ttl: Optional TTL in seconds

        Returns:
            Cached or freshly computed value
        """
        if self.has(key):
            return self._store[key].value

        value = factory()
        self.set(key, value, ttl)
        return value

    def __len__(self) -> int:
        return len(self._store)
