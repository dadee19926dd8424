"""Product feature classification and bulk creation."""

from typing import List, Optional, Sequence

from loguru import logger

from ..errors import NotFoundError
from ..storage.base import MarketplaceStore
from ..storage.models import FeatureInput, ProductFeature

# Checked in order, first match wins
FEATURE_CATEGORY_KEYWORDS = (
    ("core", ("core", "essential", "basic", "fundamental", "primary")),
    ("integration", ("integration", "api", "webhook", "connect", "sync")),
    ("analytics", ("analytics", "reporting", "dashboard", "metrics", "insights")),
    ("support", ("support", "help", "documentation", "training", "onboarding")),
    ("security", ("security", "encryption", "authentication", "authorization", "compliance")),
    ("automation", ("automation", "workflow", "trigger", "scheduled")),
    ("collaboration", ("collaboration", "team", "sharing", "permission")),
)
DEFAULT_FEATURE_CATEGORY = "general"


def categorize_feature(feature_name: str, feature_description: Optional[str] = None) -> str:
    """Classify a feature by substring keywords in its name and description."""
    text = f"{feature_name} {feature_description or ''}".lower()

    for category, keywords in FEATURE_CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category

    return DEFAULT_FEATURE_CATEGORY


class ProductFeatureService:
    def __init__(self, store: MarketplaceStore):
        self.store = store

    def create_bulk(self, product_id: int, features: Sequence[FeatureInput]) -> List[ProductFeature]:
        """Categorize and insert features for a product.

        Raises:
            NotFoundError: If the product does not exist
        """
        if not features:
            return []

        if self.store.get_product(product_id) is None:
            raise NotFoundError("Product", product_id)

        rows = [
            {
                "feature_name": f.feature_name,
                "feature_description": f.feature_description,
                "feature_category": categorize_feature(f.feature_name, f.feature_description),
                "relevance_score": f.relevance_score,
            }
            for f in features
        ]

        created = self.store.insert_features(product_id, rows)
        logger.debug(f"Added {len(created)} features to product {product_id}")
        return created

    def get_by_product(self, product_id: int) -> List[ProductFeature]:
        """Features of a product, most relevant first."""
        return self.store.get_features(product_id)
