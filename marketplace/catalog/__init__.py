"""Product catalog helpers: feature classification and cached listings"""

from .features import ProductFeatureService, categorize_feature
from .products import ProductCatalog

__all__ = ["ProductFeatureService", "categorize_feature", "ProductCatalog"]
