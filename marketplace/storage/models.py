"""Database models for the marketplace core."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


# ============================================================================
# Pydantic Models (for data transfer)
# ============================================================================


class BuyerProfile(BaseModel):
    """Buyer onboarding data used to personalise scores."""

    company_size: Optional[int] = None
    interests: Optional[List[str]] = None


class QuoteRequest(BaseModel):
    """Buyer request for an automated quote."""

    product_id: int
    buyer_id: int
    company_size: int = Field(ge=0)
    requirements: Dict[str, Any] = Field(default_factory=dict)
    buyer_company_info: Optional[Dict[str, Any]] = None
    additional_notes: Optional[str] = None


class FeatureInput(BaseModel):
    """Feature data supplied when bulk-creating product features."""

    feature_name: str
    feature_description: Optional[str] = None
    relevance_score: int = Field(default=50, ge=0, le=100)


# ============================================================================
# SQLAlchemy Models (for database)
# ============================================================================


class Category(Base):
    """Product category."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    key = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)

    def __repr__(self):
        return f"<Category(id={self.id}, key='{self.key}')>"


class Product(Base):
    """Product listed by a seller. Soft-deleted through ``status``."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    seller_id = Column(Integer, index=True, nullable=False)
    name = Column(String, nullable=False)
    short_description = Column(String)
    long_description = Column(Text)
    price_cents = Column(Integer, nullable=False, default=0)
    category_id = Column(Integer, ForeignKey("categories.id"), index=True)

    # Category-specific metrics (nullable - absent metrics are simply skipped)
    cloud_client_classification = Column(String)  # cloud, client, hybrid
    implementation_time_days = Column(Integer)
    access_depth = Column(String)  # comma-separated, e.g. "read,write,api"
    roi_percentage = Column(Float)
    retention_rate = Column(Float)
    quarter_over_quarter_change = Column(Float)
    demo_visual_url = Column(String)

    is_featured = Column(Boolean, default=False, index=True)
    is_bundle = Column(Boolean, default=False)
    status = Column(String, default="published", index=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Joined so that the category key survives session detachment
    category = relationship("Category", lazy="joined")
    features = relationship("ProductFeature", back_populates="product")
    reviews = relationship("Review", back_populates="product")
    score = relationship("ProductScore", back_populates="product", uselist=False)

    @property
    def category_key(self) -> str:
        return self.category.key if self.category is not None else ""

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', price_cents={self.price_cents})>"


class ProductFeature(Base):
    """Named capability of a product."""

    __tablename__ = "product_features"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    feature_name = Column(String, nullable=False)
    feature_description = Column(Text)
    feature_category = Column(String)
    relevance_score = Column(Integer, default=50)
    created_at = Column(DateTime, default=datetime.utcnow)

    product = relationship("Product", back_populates="features")

    def __repr__(self):
        return f"<ProductFeature(id={self.id}, name='{self.feature_name}', product_id={self.product_id})>"


class Review(Base):
    """Buyer review. Only rating aggregates are used by the engines."""

    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    buyer_id = Column(Integer, index=True, nullable=False)
    rating = Column(Integer, nullable=False)
    title = Column(String)
    body = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    product = relationship("Product", back_populates="reviews")


class ProductScore(Base):
    """Derived score set, one row per product."""

    __tablename__ = "product_scores"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), unique=True, nullable=False)

    fit_score = Column(Integer, default=0)
    feature_score = Column(Integer, default=0)
    integration_score = Column(Integer, default=0)
    review_score = Column(Integer, default=0)
    overall_score = Column(Integer, default=0, index=True)
    score_breakdown = Column(JSON)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    product = relationship("Product", back_populates="score")

    def __repr__(self):
        return f"<ProductScore(product_id={self.product_id}, overall={self.overall_score})>"


class CompetitorRelationship(Base):
    """Derived similarity between a product and one competitor."""

    __tablename__ = "competitor_relationships"
    __table_args__ = (
        UniqueConstraint("product_id", "competitor_product_id", name="uq_competitor_pair"),
    )

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    competitor_product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    similarity_score = Column(Float, index=True)
    market_overlap_score = Column(Float)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return (
            f"<CompetitorRelationship(product_id={self.product_id}, "
            f"competitor={self.competitor_product_id}, similarity={self.similarity_score})>"
        )


class Quote(Base):
    """Automated quote for a buyer. Prices are in major currency units."""

    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    buyer_id = Column(Integer, index=True, nullable=False)
    seller_id = Column(Integer, index=True, nullable=False)

    company_size = Column(Integer, nullable=False)
    requirements = Column(JSON)
    quoted_price = Column(Float, nullable=False)
    pricing_breakdown = Column(JSON)

    status = Column(String, default="pending", index=True)
    valid_until = Column(DateTime, nullable=False)
    estimated_response_date = Column(DateTime)
    buyer_company_info = Column(JSON)
    additional_notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Quote(id={self.id}, product_id={self.product_id}, status='{self.status}')>"


class Cart(Base):
    """Buyer cart. A buyer has at most one open cart."""

    __tablename__ = "carts"

    id = Column(Integer, primary_key=True)
    buyer_id = Column(Integer, index=True, nullable=False)
    status = Column(String, default="open")  # open, checked_out
    created_at = Column(DateTime, default=datetime.utcnow)

    items = relationship("CartItem", back_populates="cart")


class CartItem(Base):
    """Line item in a cart."""

    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, default=1)
    unit_price_cents = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    cart = relationship("Cart", back_populates="items")

    def __repr__(self):
        return f"<CartItem(id={self.id}, product_id={self.product_id}, unit_price_cents={self.unit_price_cents})>"


class Order(Base):
    """Completed order."""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    buyer_id = Column(Integer, index=True, nullable=False)
    status = Column(String, default="completed")  # completed, cancelled
    created_at = Column(DateTime, default=datetime.utcnow)

    items = relationship("OrderItem", back_populates="order")


class OrderItem(Base):
    """Product purchased within an order."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    quantity = Column(Integer, default=1)
    unit_price_cents = Column(Integer, default=0)

    order = relationship("Order", back_populates="items")


class BundleItem(Base):
    """Component product of a bundle product."""

    __tablename__ = "bundle_items"

    id = Column(Integer, primary_key=True)
    bundle_product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, default=1)
