"""Competitor identification and competitive analysis."""

from typing import Dict, List, Optional

import numpy as np
from loguru import logger

from ..errors import NotFoundError
from ..scoring.composite import SCORE_FIELDS
from ..scoring.service import empty_scores, score_set_from_row
from ..storage.base import MarketplaceStore
from ..storage.models import CompetitorRelationship, Product
from .models import (
    CompetitorAnalysis,
    CompetitorProduct,
    FeatureComparison,
    MetricComparison,
    MetricValue,
    PriceComparison,
    ProductSnapshot,
    ScoreComparison,
)
from .similarity import market_overlap_score, similarity_score
from .suggestions import generate_improvement_suggestions


def _mean(values: List[float], default: float) -> float:
    if not values:
        return default
    return float(np.mean(values))


class CompetitiveAnalyzer:
    """Finds competing products and compares a product against them."""

    def __init__(self, store: MarketplaceStore, config: Optional[Dict] = None):
        """Initialize analyzer.

        Args:
            store: Storage port
            config: Optional configuration dictionary
        """
        self.store = store
        self.config = (config or {}).get("competitors", {})

        self.max_competitors = self.config.get("max_competitors", 5)
        self.premium_threshold = self.config.get("premium_threshold", 1.2)
        self.budget_threshold = self.config.get("budget_threshold", 0.8)

    def identify_competitors(self, product_id: int) -> List[CompetitorRelationship]:
        """Score every published same-category product against this one.

        Re-running replaces the stored scores of each pair. A failure to
        store one pair is logged and the remaining pairs still run.

        Args:
            product_id: Product to find competitors for

        Returns:
            Stored competitor relationships

        Raises:
            NotFoundError: If the product does not exist
        """
        product = self.store.get_product(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)

        candidates = self.store.get_category_products(product.category_id, exclude_id=product_id)
        relationships = []

        for competitor in candidates:
            similarity = similarity_score(product, competitor)
            overlap = market_overlap_score(product, competitor)

            try:
                relationships.append(
                    self.store.upsert_competitor_relationship(
                        product_id, competitor.id, similarity, overlap
                    )
                )
            except Exception as e:
                logger.error(f"Failed to store competitor {competitor.id} for product {product_id}: {e}")

        self.store.prune_competitor_relationships(product_id, [c.id for c in candidates])

        logger.info(f"Identified {len(relationships)} competitors for product {product_id}")
        return relationships

    def get_competitor_analysis(self, product_id: int) -> CompetitorAnalysis:
        """Compare a product with its most similar competitors.

        With no stored competitors the comparisons fall back to the product's
        own values and no suggestions are made.

        Raises:
            NotFoundError: If the product does not exist
        """
        product = self.store.get_product(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)

        relationships = self.store.get_competitor_relationships(product_id, limit=self.max_competitors)
        competitor_ids = [r.competitor_product_id for r in relationships]

        rivals = [p for p in self.store.get_products(competitor_ids) if p.status == "published"]
        snapshots = self._load_snapshots([product] + rivals)
        own = snapshots.pop(product_id)

        competitors = [
            self._competitor(own, snapshots[r.competitor_product_id], r)
            for r in relationships
            if r.competitor_product_id in snapshots
        ]

        price_comparison = self.compare_prices(own, competitors)
        feature_comparison = self.compare_features(own, competitors)
        metric_comparison = self.compare_metrics(own, competitors)
        score_comparison = self.compare_scores(own, competitors)

        return CompetitorAnalysis(
            product=own,
            competitors=competitors,
            market_position=self.determine_market_position(own, competitors),
            price_comparison=price_comparison,
            feature_comparison=feature_comparison,
            metric_comparison=metric_comparison,
            score_comparison=score_comparison,
            improvement_suggestions=generate_improvement_suggestions(
                price_comparison, feature_comparison, metric_comparison, score_comparison
            ),
        )

    def _load_snapshots(self, products: List[Product]) -> Dict[int, ProductSnapshot]:
        ids = [p.id for p in products]
        scores = self.store.get_scores_for_products(ids)
        features = self.store.get_features_for_products(ids)
        ratings = self.store.get_ratings_for_products(ids)

        snapshots = {}
        for product in products:
            row = scores.get(product.id)
            score_set = score_set_from_row(row) if row is not None else None
            product_ratings = ratings.get(product.id, [])

            snapshots[product.id] = ProductSnapshot(
                product=product,
                scores=score_set.scores() if score_set else empty_scores(),
                features=features.get(product.id, []),
                average_rating=_mean(product_ratings, 0.0),
                review_count=len(product_ratings),
                score_breakdown=score_set.score_breakdown if score_set else {},
            )
        return snapshots

    @staticmethod
    def _competitor(
        own: ProductSnapshot, snapshot: ProductSnapshot, relationship: CompetitorRelationship
    ) -> CompetitorProduct:
        own_price = own.product.price_cents or 0
        price_difference = (snapshot.product.price_cents or 0) - own_price

        return CompetitorProduct(
            product=snapshot.product,
            scores=snapshot.scores,
            features=snapshot.features,
            average_rating=snapshot.average_rating,
            review_count=snapshot.review_count,
            score_breakdown=snapshot.score_breakdown,
            similarity_score=relationship.similarity_score or 0.0,
            market_overlap_score=relationship.market_overlap_score or 0.0,
            price_difference=price_difference,
            price_difference_percentage=(price_difference / own_price) * 100 if own_price > 0 else 0.0,
            rating_difference=snapshot.average_rating - own.average_rating,
            score_differences={
                name.replace("_score", ""): snapshot.scores[name] - own.scores[name]
                for name in SCORE_FIELDS
            },
        )

    @staticmethod
    def determine_market_position(own: ProductSnapshot, competitors: List[CompetitorProduct]) -> str:
        """Rank by overall score: 1 is leader, 2-3 challenger, else follower."""
        ranked = sorted([own.overall_score] + [c.overall_score for c in competitors], reverse=True)
        rank = ranked.index(own.overall_score) + 1

        if rank == 1:
            return "leader"
        if rank <= 3:
            return "challenger"
        return "follower"

    def determine_price_position(self, your_price: int, competitor_prices: List[int]) -> str:
        if not competitor_prices:
            return "competitive"

        average = _mean(competitor_prices, your_price)
        if your_price > average * self.premium_threshold:
            return "premium"
        if your_price < average * self.budget_threshold:
            return "budget"
        return "competitive"

    def compare_prices(self, own: ProductSnapshot, competitors: List[CompetitorProduct]) -> PriceComparison:
        your_price = own.product.price_cents or 0
        prices = [c.product.price_cents or 0 for c in competitors]

        return PriceComparison(
            your_price=your_price,
            competitor_average=_mean(prices, your_price),
            market_low=min(prices) if prices else your_price,
            market_high=max(prices) if prices else your_price,
            position=self.determine_price_position(your_price, prices),
        )

    @staticmethod
    def compare_features(own: ProductSnapshot, competitors: List[CompetitorProduct]) -> List[FeatureComparison]:
        """Coverage of every competitor feature, most common first."""
        if not competitors:
            return []

        yours = own.feature_names
        names: List[str] = []
        for competitor in competitors:
            for name in sorted(competitor.feature_names):
                if name not in names:
                    names.append(name)

        comparison = []
        for name in names:
            having = sum(1 for c in competitors if name in c.feature_names)
            comparison.append(
                FeatureComparison(
                    feature_name=name,
                    your_product=name in yours,
                    competitors_with_feature=having,
                    total_competitors=len(competitors),
                    importance_score=having / len(competitors) * 100,
                )
            )

        comparison.sort(key=lambda f: f.importance_score, reverse=True)
        return comparison

    @staticmethod
    def compare_metrics(own: ProductSnapshot, competitors: List[CompetitorProduct]) -> MetricComparison:
        def metric(attr: str) -> MetricValue:
            yours = getattr(own.product, attr) or 0
            values = [getattr(c.product, attr) or 0 for c in competitors]
            return MetricValue(yours=yours, competitor_avg=_mean(values, yours))

        return MetricComparison(
            roi=metric("roi_percentage"),
            retention=metric("retention_rate"),
            implementation_time=metric("implementation_time_days"),
        )

    @staticmethod
    def compare_scores(own: ProductSnapshot, competitors: List[CompetitorProduct]) -> ScoreComparison:
        your_scores = dict(own.scores)

        average = {
            name: _mean([c.scores[name] for c in competitors], your_scores[name])
            for name in SCORE_FIELDS
        }

        if competitors:
            # First highest wins on ties
            leader = max(competitors, key=lambda c: c.overall_score)
            market_leader = dict(leader.scores)
        else:
            market_leader = dict(your_scores)

        return ScoreComparison(
            your_scores=your_scores,
            competitor_average=average,
            market_leader=market_leader,
        )
