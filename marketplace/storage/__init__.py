"""Data storage and persistence layer"""

from .models import (
    BuyerProfile,
    Cart,
    CartItem,
    Category,
    CompetitorRelationship,
    FeatureInput,
    Order,
    OrderItem,
    Product,
    ProductFeature,
    ProductScore,
    Quote,
    QuoteRequest,
    Review,
)
from .base import MarketplaceStore
from .database import Database

__all__ = [
    "BuyerProfile",
    "Cart",
    "CartItem",
    "Category",
    "CompetitorRelationship",
    "FeatureInput",
    "Order",
    "OrderItem",
    "Product",
    "ProductFeature",
    "ProductScore",
    "Quote",
    "QuoteRequest",
    "Review",
    "MarketplaceStore",
    "Database",
]
