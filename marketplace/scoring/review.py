"""Review scoring from aggregated buyer ratings."""

from typing import Dict

from ..utils.numbers import clamp_score


class ReviewScorer:
    """Convert a 1-5 star average to a 0-100 score.

    Few reviews lower confidence, so the rescaled rating is multiplied by
    0.8 (<5 reviews), 0.9 (<10) or 0.95 (<20). Popularity never raises it.
    """

    CONFIDENCE_TIERS = ((5, 0.8), (10, 0.9), (20, 0.95))

    def calculate(self, average_rating: float, review_count: int) -> int:
        score = self.rating_factor(average_rating) * self.confidence(review_count)
        return clamp_score(score)

    def factors(self, average_rating: float, review_count: int) -> Dict:
        return {
            "average_rating": self.rating_factor(average_rating),
            "review_count": review_count,
            "confidence_adjustment": self.confidence(review_count),
        }

    @staticmethod
    def rating_factor(average_rating: float) -> float:
        return ((average_rating - 1) / 4) * 100

    def confidence(self, review_count: int) -> float:
        for threshold, multiplier in self.CONFIDENCE_TIERS:
            if review_count < threshold:
                return multiplier
        return 1.0
