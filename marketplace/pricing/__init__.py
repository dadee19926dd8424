"""Bundle and quote pricing"""

from .bundles import BundlePrice, BundleService, ProductBundle, calculate_discount_percentage
from .quotes import QuoteService, calculate_quote_pricing, company_size_multiplier

__all__ = [
    "BundlePrice",
    "BundleService",
    "ProductBundle",
    "calculate_discount_percentage",
    "QuoteService",
    "calculate_quote_pricing",
    "company_size_multiplier",
]
