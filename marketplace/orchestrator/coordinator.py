"""Job coordination for the marketplace core."""

from datetime import datetime
from typing import Dict, Optional

from loguru import logger

from ..analysis.competitive import CompetitiveAnalyzer
from ..catalog.features import ProductFeatureService
from ..catalog.products import ProductCatalog
from ..pricing.bundles import BundleService
from ..pricing.quotes import QuoteService
from ..scoring.composite import CompositeScorer
from ..scoring.service import ProductScoreService
from ..storage.base import MarketplaceStore
from ..storage.database import Database
from ..utils.cache import TTLCache
from ..utils.config import get_config


class JobCoordinator:
    """Builds the services from configuration and runs the periodic jobs."""

    def __init__(self, config: Optional[Dict] = None, store: Optional[MarketplaceStore] = None):
        """Initialize job coordinator.

        Args:
            config: Optional configuration dictionary
            store: Optional storage port; a Database is created from config if omitted
        """
        if config is None:
            config = get_config().model_dump()

        self.config = config

        if store is None:
            db_config = config.get("database", {})
            store = Database(db_config.get("url", "sqlite:///data/db/marketplace.db"), echo=db_config.get("echo", False))
        self.store = store

        cache_config = config.get("cache", {})
        self.cache = TTLCache(default_ttl=cache_config.get("default_ttl_seconds", 300))

        self.score_service = ProductScoreService(
            self.store,
            CompositeScorer(config),
            batch_size=config.get("scoring", {}).get("batch_size", 50),
        )
        self.analyzer = CompetitiveAnalyzer(self.store, config)
        self.quotes = QuoteService(self.store, config)
        self.bundles = BundleService(self.store)
        self.features = ProductFeatureService(self.store)
        self.catalog = ProductCatalog(
            self.store, self.cache, ttl=cache_config.get("catalog_ttl_seconds", 900)
        )

    async def run_scoring(self) -> int:
        """Recalculate stored scores for every published product."""
        logger.info("Starting scoring run")
        start_time = datetime.utcnow()

        processed = await self.score_service.recalculate_all_scores()

        duration = (datetime.utcnow() - start_time).total_seconds()
        logger.info(f"Scored {processed} products in {duration:.1f}s")
        return processed

    async def run_competitor_identification(self) -> int:
        """Refresh competitor relationships of every published product.

        Returns:
            Number of products whose competitors were identified
        """
        logger.info("Starting competitor identification")

        product_ids = self.store.get_published_product_ids()
        if not product_ids:
            logger.info("No published products")
            return 0

        identified = 0
        for product_id in product_ids:
            try:
                self.analyzer.identify_competitors(product_id)
                identified += 1
            except Exception as e:
                logger.error(f"Error identifying competitors for product {product_id}: {e}")

        logger.info(f"Identified competitors for {identified} of {len(product_ids)} products")
        return identified

    async def expire_quotes(self) -> int:
        """Flip open quotes past their validity window to expired."""
        return self.quotes.expire_stale_quotes()

    async def cleanup_cache(self) -> int:
        """Drop expired cache entries."""
        removed = self.cache.cleanup()
        logger.debug(f"Cache holds {len(self.cache)} entries after cleanup")
        return removed
