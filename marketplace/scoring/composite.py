"""Composite scoring engine that combines all scoring dimensions."""

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Mapping, Optional

from ..storage.models import BuyerProfile, Product, ProductFeature
from ..utils.numbers import round_half_up
from .feature import FeatureScorer
from .fit import FitScorer
from .integration import IntegrationScorer
from .review import ReviewScorer

SCORE_FIELDS = ("fit_score", "feature_score", "integration_score", "review_score", "overall_score")


@dataclass
class ScoreSet:
    """Complete set of derived scores for one product."""

    fit_score: int
    feature_score: int
    integration_score: int
    review_score: int
    overall_score: int

    score_breakdown: Dict = field(default_factory=dict)

    def as_dict(self) -> Dict:
        return asdict(self)

    def scores(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in SCORE_FIELDS}


class CompositeScorer:
    """Combines all scoring dimensions into the overall product score.

    Weighting:
    - Fit: 30%
    - Feature: 25%
    - Integration: 25%
    - Review: 20%
    """

    WEIGHTS = {
        "fit": 0.30,
        "feature": 0.25,
        "integration": 0.25,
        "review": 0.20,
    }

    def __init__(self, config: Optional[Dict] = None):
        """Initialize composite scorer.

        Args:
            config: Optional configuration dictionary
        """
        scoring_config = (config or {}).get("scoring", {})

        self.fit_scorer = FitScorer()
        self.feature_scorer = FeatureScorer()
        self.integration_scorer = IntegrationScorer(scoring_config)
        self.review_scorer = ReviewScorer()

    def calculate_overall_score(self, scores: Mapping[str, float]) -> int:
        """Weighted average of the four component scores.

        Args:
            scores: Mapping with fit_score, feature_score, integration_score
                and review_score

        Returns:
            Overall score from 0-100
        """
        overall = (
            scores["fit_score"] * self.WEIGHTS["fit"]
            + scores["feature_score"] * self.WEIGHTS["feature"]
            + scores["integration_score"] * self.WEIGHTS["integration"]
            + scores["review_score"] * self.WEIGHTS["review"]
        )
        return round_half_up(overall)

    def generate_score_breakdown(
        self,
        product: Product,
        features: List[ProductFeature],
        average_rating: float,
        review_count: int,
        buyer_profile: Optional[BuyerProfile] = None,
    ) -> Dict:
        """Explain every factor behind the four component scores.

        Args:
            product: Product instance
            features: Product features
            average_rating: Average review rating (1-5)
            review_count: Number of reviews
            buyer_profile: Optional buyer profile

        Returns:
            Mapping of score category to its score and named factors
        """
        return {
            "fit": {
                "score": self.fit_scorer.calculate(product, buyer_profile),
                "factors": self.fit_scorer.factors(product, buyer_profile),
            },
            "feature": {
                "score": self.feature_scorer.calculate(product, features),
                "factors": self.feature_scorer.factors(product, features),
            },
            "integration": {
                "score": self.integration_scorer.calculate(product, buyer_profile),
                "factors": self.integration_scorer.factors(product, buyer_profile),
            },
            "review": {
                "score": self.review_scorer.calculate(average_rating, review_count),
                "factors": self.review_scorer.factors(average_rating, review_count),
            },
        }

    def score_product(
        self,
        product: Product,
        features: List[ProductFeature],
        ratings: List[int],
        buyer_profile: Optional[BuyerProfile] = None,
    ) -> ScoreSet:
        """Calculate the complete score set for a product.

        Args:
            product: Product instance
            features: Product features
            ratings: Review ratings of the product
            buyer_profile: Optional buyer profile for personalization

        Returns:
            ScoreSet instance
        """
        review_count = len(ratings)
        average_rating = sum(ratings) / review_count if review_count else 0.0

        breakdown = self.generate_score_breakdown(
            product, features, average_rating, review_count, buyer_profile
        )

        scores = {
            "fit_score": breakdown["fit"]["score"],
            "feature_score": breakdown["feature"]["score"],
            "integration_score": breakdown["integration"]["score"],
            "review_score": breakdown["review"]["score"],
        }

        return ScoreSet(
            **scores,
            overall_score=self.calculate_overall_score(scores),
            score_breakdown=breakdown,
        )
