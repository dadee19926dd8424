"""Score calculation and persistence for stored products."""

import asyncio
from typing import Dict, Optional

from loguru import logger

from ..errors import NotFoundError
from ..storage.base import MarketplaceStore
from ..storage.models import BuyerProfile, ProductScore
from .composite import SCORE_FIELDS, CompositeScorer, ScoreSet


class ProductScoreService:
    """Computes score sets from stored product data and upserts them."""

    def __init__(self, store: MarketplaceStore, scorer: Optional[CompositeScorer] = None, batch_size: int = 50):
        self.store = store
        self.scorer = scorer or CompositeScorer()
        self.batch_size = batch_size

    def calculate_scores(self, product_id: int, buyer_profile: Optional[BuyerProfile] = None) -> ScoreSet:
        """Calculate all scores for a product.

        The stored row is shared by every buyer, so only unpersonalized
        score sets are persisted.

        Args:
            product_id: Product to score
            buyer_profile: Optional buyer profile for personalization

        Returns:
            ScoreSet with breakdown

        Raises:
            NotFoundError: If the product does not exist
        """
        product = self.store.get_product(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)

        features = self.store.get_features(product_id)
        ratings = self.store.get_ratings(product_id)

        score_set = self.scorer.score_product(product, features, ratings, buyer_profile)

        if buyer_profile is None:
            self.store.upsert_scores(product_id, score_set.as_dict())

        logger.debug(f"Scored product {product_id}: overall={score_set.overall_score}")
        return score_set

    async def recalculate_all_scores(self, batch_size: Optional[int] = None) -> int:
        """Recalculate scores for every published product.

        Each batch runs concurrently and is awaited before the next starts.
        A failure for one product is logged and does not stop the run.

        Args:
            batch_size: Number of products to process at once

        Returns:
            Number of products processed, failed ones included
        """
        batch_size = batch_size or self.batch_size
        product_ids = self.store.get_published_product_ids()

        processed = 0
        failed = 0

        for start in range(0, len(product_ids), batch_size):
            batch = product_ids[start : start + batch_size]
            results = await asyncio.gather(*(self._calculate_safely(pid) for pid in batch))

            failed += results.count(None)
            processed += len(batch)
            logger.info(f"Processed {processed} of {len(product_ids)} products")

        if failed:
            logger.warning(f"Score recalculation finished with {failed} failures")

        return processed

    async def _calculate_safely(self, product_id: int) -> Optional[ScoreSet]:
        try:
            return self.calculate_scores(product_id)
        except Exception as e:
            logger.error(f"Failed to calculate scores for product {product_id}: {e}")
            return None

    def get_scores(self, product_id: int) -> Optional[ScoreSet]:
        """Get stored scores for a product, or None if never calculated."""
        row = self.store.get_scores(product_id)
        if row is None:
            return None
        return score_set_from_row(row)


def score_set_from_row(row: ProductScore) -> ScoreSet:
    values: Dict[str, int] = {name: getattr(row, name) or 0 for name in SCORE_FIELDS}
    return ScoreSet(**values, score_breakdown=row.score_breakdown or {})


def empty_scores() -> Dict[str, int]:
    return {name: 0 for name in SCORE_FIELDS}

