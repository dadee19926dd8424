"""Feature scoring: listing completeness and capability richness."""

import re
from typing import Dict, List

from ..storage.models import Product, ProductFeature
from ..utils.numbers import clamp_score


class FeatureScorer:
    """Score how complete and feature-rich a product listing is.

    Factors:
    - Completeness of metrics, demo and long description (0-20 points)
    - Description quality by word count (0-10 points)
    - Feature count (0-20 points)
    - High-relevance features (0-10 points)

    Output: 0-100, starting from a base of 60.
    """

    BASE_SCORE = 60
    LONG_DESCRIPTION_CHARS = 500
    HIGH_RELEVANCE_THRESHOLD = 80
    MAX_HIGH_RELEVANCE_BONUS = 10

    def calculate(self, product: Product, features: List[ProductFeature]) -> int:
        """Calculate feature score.

        Args:
            product: Product to score
            features: Features of the product

        Returns:
            Integer score from 0-100
        """
        score = (
            self._completeness(product)
            + self._description_quality(product)
            + self._feature_count_bonus(features)
            + self._high_value_bonus(features)
        )
        return clamp_score(score)

    def factors(self, product: Product, features: List[ProductFeature]) -> Dict:
        return {
            "completeness": self._completeness(product),
            "description_quality": self._description_quality(product),
            "feature_count": self._feature_count_bonus(features),
            "high_value_features": self._high_value_bonus(features),
        }

    def _completeness(self, product: Product) -> int:
        score = self.BASE_SCORE

        if product.roi_percentage is not None:
            score += 4
        if product.retention_rate is not None:
            score += 4
        if product.quarter_over_quarter_change is not None:
            score += 3
        if product.demo_visual_url:
            score += 3
        if product.long_description and len(product.long_description) > self.LONG_DESCRIPTION_CHARS:
            score += 6

        return score

    def _description_quality(self, product: Product) -> int:
        if not product.long_description:
            return 0

        # Surrounding whitespace yields empty tokens that are counted as words
        word_count = len(re.split(r"\s+", product.long_description))
        if word_count > 200:
            return 10
        elif word_count > 100:
            return 5
        return 0

    def _feature_count_bonus(self, features: List[ProductFeature]) -> int:
        feature_count = len(features)
        if feature_count > 20:
            return 20
        elif feature_count > 10:
            return 15
        elif feature_count > 5:
            return 10
        return feature_count * 2

    def _high_value_bonus(self, features: List[ProductFeature]) -> int:
        high_relevance = [
            f for f in features if (f.relevance_score or 0) > self.HIGH_RELEVANCE_THRESHOLD
        ]
        return min(len(high_relevance) * 2, self.MAX_HIGH_RELEVANCE_BONUS)
