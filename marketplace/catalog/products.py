"""Cached product listings."""

from datetime import datetime, timedelta
from typing import Callable, List, Optional

from ..storage.base import MarketplaceStore
from ..storage.models import Product
from ..utils.cache import CACHE_KEYS, CACHE_TTL, TTLCache

LISTING_LIMIT = 20
NEW_PRODUCT_DAYS = 30


class ProductCatalog:
    """Featured and new product lists served through the read-through cache."""

    def __init__(
        self,
        store: MarketplaceStore,
        cache: TTLCache,
        ttl: Optional[float] = CACHE_TTL["long"],
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.store = store
        self.cache = cache
        self.ttl = ttl
        self.clock = clock

    def get_featured(self) -> List[Product]:
        """Published featured products, newest first."""
        return self.cache.get_or_set(
            CACHE_KEYS.FEATURED_PRODUCTS,
            lambda: self.store.get_featured_products(limit=LISTING_LIMIT),
            self.ttl,
        )

    def get_new(self) -> List[Product]:
        """Published products created in the last 30 days, newest first."""
        return self.cache.get_or_set(
            CACHE_KEYS.NEW_PRODUCTS,
            lambda: self.store.get_new_products(
                since=self.clock() - timedelta(days=NEW_PRODUCT_DAYS), limit=LISTING_LIMIT
            ),
            self.ttl,
        )

    def invalidate(self):
        """Drop cached listings after catalog writes."""
        self.cache.delete(CACHE_KEYS.FEATURED_PRODUCTS)
        self.cache.delete(CACHE_KEYS.NEW_PRODUCTS)
