"""Integration scoring: ease of fitting a product into an existing stack."""

from typing import Dict, Optional

from ..storage.models import BuyerProfile, Product
from ..utils.numbers import clamp_score


class IntegrationScorer:
    """Score integration ease and compatibility.

    Factors:
    - Deployment model: +10 cloud, +5 hybrid, -10 client-only or unknown
    - Category ecosystem bonus (configured per category key)
    - API availability in the access depth (+15)
    - Buyer interest in the product category (+10)

    Output: 0-100 around a neutral baseline of 70.
    """

    BASELINE = 70
    DEPLOYMENT_ADJUSTMENT = {"cloud": 10, "hybrid": 5}
    # Client-only and unclassified products integrate worse than the baseline
    OTHER_DEPLOYMENT_ADJUSTMENT = -10
    API_BONUS = 15
    BUYER_INTEREST_BONUS = 10

    DEFAULT_CATEGORY_BONUSES = {"devtools": 10, "hr": 5}

    def __init__(self, config: Optional[Dict] = None):
        """Initialize integration scorer.

        Args:
            config: Optional scoring configuration dictionary
        """
        self.category_bonuses = dict(self.DEFAULT_CATEGORY_BONUSES)
        if config:
            self.category_bonuses = dict(config.get("category_bonuses", self.category_bonuses))

    def calculate(self, product: Product, buyer_profile: Optional[BuyerProfile] = None) -> int:
        """Calculate integration score.

        Args:
            product: Product to score
            buyer_profile: Optional buyer profile for personalization

        Returns:
            Integer score from 0-100
        """
        score = (
            self.BASELINE
            + self._deployment_adjustment(product)
            + self._category_bonus(product)
            + self._api_bonus(product)
            + (self._buyer_compatibility(product, buyer_profile) or 0)
        )
        return clamp_score(score)

    def factors(self, product: Product, buyer_profile: Optional[BuyerProfile] = None) -> Dict:
        factors = {
            "deployment_type": self.BASELINE + self._deployment_adjustment(product),
            "category_ecosystem": self._category_bonus(product),
            "api_availability": self._api_bonus(product),
        }

        compatibility = self._buyer_compatibility(product, buyer_profile)
        if compatibility is not None:
            factors["buyer_compatibility"] = compatibility

        return factors

    def _deployment_adjustment(self, product: Product) -> int:
        return self.DEPLOYMENT_ADJUSTMENT.get(
            product.cloud_client_classification, self.OTHER_DEPLOYMENT_ADJUSTMENT
        )

    def _category_bonus(self, product: Product) -> int:
        return self.category_bonuses.get(product.category_key, 0)

    def _api_bonus(self, product: Product) -> int:
        if product.access_depth and "api" in product.access_depth.lower():
            return self.API_BONUS
        return 0

    def _buyer_compatibility(
        self, product: Product, buyer_profile: Optional[BuyerProfile]
    ) -> Optional[int]:
        """Bonus for buyer interest in the category, None when interests are unset."""
        if buyer_profile is None or buyer_profile.interests is None:
            return None

        category_key = product.category_key
        if category_key and category_key in buyer_profile.interests:
            return self.BUYER_INTEREST_BONUS
        return 0
