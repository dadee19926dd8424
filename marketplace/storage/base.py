"""Storage port consumed by the scoring, competitor and pricing services."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from .models import (
    Cart,
    CartItem,
    CompetitorRelationship,
    Product,
    ProductFeature,
    ProductScore,
    Quote,
)


class MarketplaceStore(ABC):
    """Narrow read/write interface over the relational store.

    Services depend on this interface only, so the rule engines can be
    exercised against any implementation (``Database`` for SQLAlchemy).
    """

    # Products ---------------------------------------------------------------

    @abstractmethod
    def get_product(self, product_id: int) -> Optional[Product]:
        """Get a single product by ID"""

    @abstractmethod
    def get_products(self, product_ids: Iterable[int]) -> List[Product]:
        """Get products by ID, silently skipping unknown IDs"""

    @abstractmethod
    def get_category_products(
        self, category_id: Optional[int], exclude_id: int, status: str = "published"
    ) -> List[Product]:
        """Get products of a category, excluding one product"""

    @abstractmethod
    def get_published_product_ids(self) -> List[int]:
        """Get IDs of every published product"""

    @abstractmethod
    def get_featured_products(self, limit: int = 20) -> List[Product]:
        """Get published featured products, newest first"""

    @abstractmethod
    def get_new_products(self, since: datetime, limit: int = 20) -> List[Product]:
        """Get published products created after a cutoff, newest first"""

    @abstractmethod
    def create_bundle_product(
        self,
        seller_id: int,
        name: str,
        description: str,
        price_cents: int,
        product_ids: List[int],
    ) -> Product:
        """Insert a bundle product and its bundle items atomically"""

    @abstractmethod
    def get_bundle_product_ids(self, bundle_id: int) -> List[int]:
        """Get component product IDs of a bundle"""

    # Features and reviews ---------------------------------------------------

    @abstractmethod
    def get_features(self, product_id: int) -> List[ProductFeature]:
        """Get features for a product by relevance, highest first"""

    @abstractmethod
    def get_features_for_products(self, product_ids: Iterable[int]) -> Dict[int, List[ProductFeature]]:
        """Get features for several products keyed by product ID"""

    @abstractmethod
    def insert_features(self, product_id: int, rows: List[Dict[str, Any]]) -> List[ProductFeature]:
        """Insert feature rows for a product"""

    @abstractmethod
    def get_ratings(self, product_id: int) -> List[int]:
        """Get review ratings for a product"""

    @abstractmethod
    def get_ratings_for_products(self, product_ids: Iterable[int]) -> Dict[int, List[int]]:
        """Get review ratings for several products keyed by product ID"""

    # Scores and competitors -------------------------------------------------

    @abstractmethod
    def get_scores(self, product_id: int) -> Optional[ProductScore]:
        """Get the stored score set for a product"""

    @abstractmethod
    def get_scores_for_products(self, product_ids: Iterable[int]) -> Dict[int, ProductScore]:
        """Get stored score sets keyed by product ID"""

    @abstractmethod
    def upsert_scores(self, product_id: int, scores: Dict[str, Any]) -> ProductScore:
        """Insert or replace the score set of a product"""

    @abstractmethod
    def get_competitor_relationships(self, product_id: int, limit: int = 5) -> List[CompetitorRelationship]:
        """Get competitor relationships by similarity, highest first"""

    @abstractmethod
    def upsert_competitor_relationship(
        self,
        product_id: int,
        competitor_product_id: int,
        similarity_score: float,
        market_overlap_score: float,
    ) -> CompetitorRelationship:
        """Insert or replace the relationship for a product pair"""

    @abstractmethod
    def prune_competitor_relationships(self, product_id: int, keep_ids: Iterable[int]) -> int:
        """Delete the product's relationships to competitors not in keep_ids"""

    # Quotes, carts and orders -----------------------------------------------

    @abstractmethod
    def get_quote(self, quote_id: int) -> Optional[Quote]:
        """Get a quote by ID"""

    @abstractmethod
    def get_quotes(self, buyer_id: Optional[int] = None, seller_id: Optional[int] = None) -> List[Quote]:
        """Get quotes for a buyer or seller, newest first"""

    @abstractmethod
    def insert_quote(self, **fields) -> Quote:
        """Insert a quote"""

    @abstractmethod
    def update_quote(self, quote_id: int, **fields) -> Optional[Quote]:
        """Update quote fields, returning the updated quote"""

    @abstractmethod
    def expire_quotes(self, now: datetime, statuses: Iterable[str]) -> int:
        """Mark quotes in the given statuses past valid_until as expired"""

    @abstractmethod
    def get_or_create_open_cart(self, buyer_id: int) -> Cart:
        """Get the buyer's open cart, creating one if absent"""

    @abstractmethod
    def add_cart_item(
        self, cart_id: int, product_id: int, quantity: int, unit_price_cents: int
    ) -> CartItem:
        """Insert a cart line item"""

    @abstractmethod
    def accept_quote_into_cart(
        self, quote_id: int, quantity: int, unit_price_cents: int
    ) -> Optional[CartItem]:
        """Mark a quote accepted and add a line item to the buyer's open cart atomically"""

    @abstractmethod
    def get_cart_items(self, cart_id: int) -> List[CartItem]:
        """Get line items of a cart"""

    @abstractmethod
    def count_co_purchases(self, product_ids: Iterable[int]) -> Dict[int, int]:
        """Count how often other products share an order with the given ones"""
