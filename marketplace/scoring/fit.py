"""Fit scoring: how easily a product can be adopted."""

from typing import Dict, Optional

from ..storage.models import BuyerProfile, Product
from ..utils.numbers import clamp_score


class FitScorer:
    """Score implementation effort and deployment model.

    Factors:
    - Implementation time penalty (0-40 points)
    - Cloud/hybrid deployment bonus (0-10 points)
    - Access depth complexity penalty (0-20 points)
    - Buyer company size match (0-10 points)

    Output: 0-100, starting from 100.
    """

    # (threshold in days, penalty), evaluated top-down, first match wins
    IMPLEMENTATION_PENALTIES = ((90, 40), (30, 20), (7, 10))
    DEPLOYMENT_BONUS = {"cloud": 10, "hybrid": 5}
    POINTS_PER_DEPTH_LEVEL = 2
    MAX_COMPLEXITY_PENALTY = 20

    SMALL_COMPANY_SIZE = 50
    FAST_IMPLEMENTATION_DAYS = 14
    ENTERPRISE_COMPANY_SIZE = 500
    SLOW_IMPLEMENTATION_DAYS = 30

    def calculate(self, product: Product, buyer_profile: Optional[BuyerProfile] = None) -> int:
        """Calculate fit score.

        Args:
            product: Product to score
            buyer_profile: Optional buyer profile for personalization

        Returns:
            Integer score from 0-100
        """
        implementation_time = product.implementation_time_days

        score = 100
        score -= self._implementation_penalty(implementation_time)
        score += self.DEPLOYMENT_BONUS.get(product.cloud_client_classification, 0)
        score -= self._complexity_penalty(product.access_depth)
        score += self._buyer_match_bonus(implementation_time, buyer_profile)

        return clamp_score(score)

    def factors(self, product: Product, buyer_profile: Optional[BuyerProfile] = None) -> Dict:
        """Per-factor contributions, each expressed relative to 100."""
        implementation_time = product.implementation_time_days

        factors = {
            "implementation_time": 100 - self._implementation_penalty(implementation_time),
            "deployment_model": 100 + self.DEPLOYMENT_BONUS.get(product.cloud_client_classification, 0),
            "complexity": 100 - self._complexity_penalty(product.access_depth),
        }

        if self._has_buyer_size(buyer_profile) and implementation_time is not None:
            factors["buyer_match"] = 100 + self._buyer_match_bonus(implementation_time, buyer_profile)

        return factors

    def _implementation_penalty(self, implementation_time: Optional[int]) -> int:
        if implementation_time is None:
            return 0

        for threshold, penalty in self.IMPLEMENTATION_PENALTIES:
            if implementation_time > threshold:
                return penalty
        return 0

    def _complexity_penalty(self, access_depth: Optional[str]) -> int:
        if not access_depth:
            return 0

        depth_levels = len(access_depth.split(","))
        return min(depth_levels * self.POINTS_PER_DEPTH_LEVEL, self.MAX_COMPLEXITY_PENALTY)

    def _buyer_match_bonus(
        self, implementation_time: Optional[int], buyer_profile: Optional[BuyerProfile]
    ) -> int:
        if not self._has_buyer_size(buyer_profile) or implementation_time is None:
            return 0

        company_size = buyer_profile.company_size

        # Smaller companies prefer faster implementation
        if company_size < self.SMALL_COMPANY_SIZE and implementation_time < self.FAST_IMPLEMENTATION_DAYS:
            return 10
        # Larger companies can absorb longer rollouts
        if company_size > self.ENTERPRISE_COMPANY_SIZE and implementation_time > self.SLOW_IMPLEMENTATION_DAYS:
            return 5
        return 0

    @staticmethod
    def _has_buyer_size(buyer_profile: Optional[BuyerProfile]) -> bool:
        return buyer_profile is not None and bool(buyer_profile.company_size)
