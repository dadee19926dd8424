"""Database operations and management"""

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger
from sqlalchemy import create_engine, select
from sqlalchemy.orm import aliased, sessionmaker

from .base import MarketplaceStore
from .models import (
    Base,
    BundleItem,
    Cart,
    CartItem,
    CompetitorRelationship,
    OrderItem,
    Product,
    ProductFeature,
    ProductScore,
    Quote,
    Review,
)


class Database(MarketplaceStore):
    """SQLAlchemy implementation of the storage port"""

    def __init__(self, db_url: str = "sqlite:///data/db/marketplace.db", echo: bool = False):
        self.db_url = db_url
        connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
        self.engine = create_engine(db_url, echo=echo, connect_args=connect_args)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)
        logger.info(f"Database initialized: {db_url}")

    @contextmanager
    def session(self):
        """Context manager for database sessions"""
        session = self.Session()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database session error: {e}")
            raise
        finally:
            session.close()

    # Products ---------------------------------------------------------------

    def get_product(self, product_id: int) -> Optional[Product]:
        """Get a single product by ID"""
        with self.session() as session:
            product = session.query(Product).filter(Product.id == product_id).first()
            if product:
                session.expunge(product)
            return product

    def get_products(self, product_ids: Iterable[int]) -> List[Product]:
        """Get products by ID"""
        ids = list(product_ids)
        if not ids:
            return []

        with self.session() as session:
            products = session.query(Product).filter(Product.id.in_(ids)).all()
            session.expunge_all()
            return products

    def get_category_products(
        self, category_id: Optional[int], exclude_id: int, status: str = "published"
    ) -> List[Product]:
        """Get products in a category other than the given one"""
        with self.session() as session:
            query = session.query(Product).filter(Product.id != exclude_id)

            if category_id is None:
                query = query.filter(Product.category_id.is_(None))
            else:
                query = query.filter(Product.category_id == category_id)

            if status:
                query = query.filter(Product.status == status)

            products = query.order_by(Product.id).all()
            session.expunge_all()
            return products

    def get_published_product_ids(self) -> List[int]:
        """Get IDs of every published product"""
        with self.session() as session:
            rows = (
                session.query(Product.id)
                .filter(Product.status == "published")
                .order_by(Product.id)
                .all()
            )
            return [row[0] for row in rows]

    def get_featured_products(self, limit: int = 20) -> List[Product]:
        """Get featured products"""
        with self.session() as session:
            products = (
                session.query(Product)
                .filter(Product.is_featured.is_(True), Product.status == "published")
                .order_by(Product.created_at.desc())
                .limit(limit)
                .all()
            )
            session.expunge_all()
            return products

    def get_new_products(self, since: datetime, limit: int = 20) -> List[Product]:
        """Get recently created products"""
        with self.session() as session:
            products = (
                session.query(Product)
                .filter(Product.status == "published", Product.created_at >= since)
                .order_by(Product.created_at.desc())
                .limit(limit)
                .all()
            )
            session.expunge_all()
            return products

    def create_bundle_product(
        self,
        seller_id: int,
        name: str,
        description: str,
        price_cents: int,
        product_ids: List[int],
    ) -> Product:
        """Create a bundle product with its component items"""
        with self.session() as session:
            bundle = Product(
                seller_id=seller_id,
                name=name,
                short_description=description,
                long_description=description,
                price_cents=price_cents,
                is_bundle=True,
                status="published",
            )
            session.add(bundle)
            session.flush()  # Get the ID

            for product_id in product_ids:
                session.add(BundleItem(bundle_product_id=bundle.id, product_id=product_id, quantity=1))

            session.flush()
            session.expunge(bundle)
            logger.debug(f"Created bundle {bundle.id} with {len(product_ids)} products")
            return bundle

    def get_bundle_product_ids(self, bundle_id: int) -> List[int]:
        """Get component product IDs of a bundle"""
        with self.session() as session:
            rows = (
                session.query(BundleItem.product_id)
                .filter(BundleItem.bundle_product_id == bundle_id)
                .order_by(BundleItem.id)
                .all()
            )
            return [row[0] for row in rows]

    # Features and reviews ---------------------------------------------------

    def get_features(self, product_id: int) -> List[ProductFeature]:
        """Get features for a product"""
        return self.get_features_for_products([product_id]).get(product_id, [])

    def get_features_for_products(self, product_ids: Iterable[int]) -> Dict[int, List[ProductFeature]]:
        """Get features grouped by product"""
        ids = list(product_ids)
        if not ids:
            return {}

        with self.session() as session:
            features = (
                session.query(ProductFeature)
                .filter(ProductFeature.product_id.in_(ids))
                .order_by(ProductFeature.relevance_score.desc(), ProductFeature.id)
                .all()
            )
            session.expunge_all()

        grouped: Dict[int, List[ProductFeature]] = {}
        for feature in features:
            grouped.setdefault(feature.product_id, []).append(feature)
        return grouped

    def insert_features(self, product_id: int, rows: List[Dict[str, Any]]) -> List[ProductFeature]:
        """Insert feature rows for a product"""
        with self.session() as session:
            features = [ProductFeature(product_id=product_id, **row) for row in rows]
            session.add_all(features)
            session.flush()
            session.expunge_all()
            return features

    def get_ratings(self, product_id: int) -> List[int]:
        """Get review ratings for a product"""
        return self.get_ratings_for_products([product_id]).get(product_id, [])

    def get_ratings_for_products(self, product_ids: Iterable[int]) -> Dict[int, List[int]]:
        """Get review ratings grouped by product"""
        ids = list(product_ids)
        if not ids:
            return {}

        with self.session() as session:
            rows = (
                session.query(Review.product_id, Review.rating)
                .filter(Review.product_id.in_(ids), Review.rating.isnot(None))
                .all()
            )

        grouped: Dict[int, List[int]] = {}
        for product_id, rating in rows:
            grouped.setdefault(product_id, []).append(rating)
        return grouped

    # Scores and competitors -------------------------------------------------

    def get_scores(self, product_id: int) -> Optional[ProductScore]:
        """Get stored scores for a product"""
        return self.get_scores_for_products([product_id]).get(product_id)

    def get_scores_for_products(self, product_ids: Iterable[int]) -> Dict[int, ProductScore]:
        """Get stored scores keyed by product"""
        ids = list(product_ids)
        if not ids:
            return {}

        with self.session() as session:
            rows = session.query(ProductScore).filter(ProductScore.product_id.in_(ids)).all()
            session.expunge_all()
            return {row.product_id: row for row in rows}

    def upsert_scores(self, product_id: int, scores: Dict[str, Any]) -> ProductScore:
        """Insert or update the score row of a product"""
        with self.session() as session:
            row = session.query(ProductScore).filter(ProductScore.product_id == product_id).first()
            if row is None:
                row = ProductScore(product_id=product_id)
                session.add(row)

            for field, value in scores.items():
                setattr(row, field, value)
            row.updated_at = datetime.utcnow()

            session.flush()
            session.expunge(row)
            logger.debug(f"Upserted scores for product {product_id}")
            return row

    def get_competitor_relationships(self, product_id: int, limit: int = 5) -> List[CompetitorRelationship]:
        """Get top competitor relationships"""
        with self.session() as session:
            rows = (
                session.query(CompetitorRelationship)
                .filter(CompetitorRelationship.product_id == product_id)
                .order_by(CompetitorRelationship.similarity_score.desc(), CompetitorRelationship.id)
                .limit(limit)
                .all()
            )
            session.expunge_all()
            return rows

    def upsert_competitor_relationship(
        self,
        product_id: int,
        competitor_product_id: int,
        similarity_score: float,
        market_overlap_score: float,
    ) -> CompetitorRelationship:
        """Insert or update the relationship for a product pair"""
        with self.session() as session:
            row = (
                session.query(CompetitorRelationship)
                .filter(
                    CompetitorRelationship.product_id == product_id,
                    CompetitorRelationship.competitor_product_id == competitor_product_id,
                )
                .first()
            )
            if row is None:
                row = CompetitorRelationship(
                    product_id=product_id, competitor_product_id=competitor_product_id
                )
                session.add(row)

            row.similarity_score = similarity_score
            row.market_overlap_score = market_overlap_score
            row.updated_at = datetime.utcnow()

            session.flush()
            session.expunge(row)
            return row

    def prune_competitor_relationships(self, product_id: int, keep_ids: Iterable[int]) -> int:
        """Delete relationships to competitors outside keep_ids"""
        with self.session() as session:
            deleted = (
                session.query(CompetitorRelationship)
                .filter(
                    CompetitorRelationship.product_id == product_id,
                    CompetitorRelationship.competitor_product_id.notin_(list(keep_ids)),
                )
                .delete(synchronize_session=False)
            )
            if deleted:
                logger.debug(f"Pruned {deleted} stale competitors for product {product_id}")
            return deleted

    # Quotes, carts and orders -----------------------------------------------

    def get_quote(self, quote_id: int) -> Optional[Quote]:
        """Get a quote by ID"""
        with self.session() as session:
            quote = session.query(Quote).filter(Quote.id == quote_id).first()
            if quote:
                session.expunge(quote)
            return quote

    def get_quotes(self, buyer_id: Optional[int] = None, seller_id: Optional[int] = None) -> List[Quote]:
        """Get quotes filtered by buyer and/or seller"""
        with self.session() as session:
            query = session.query(Quote)

            if buyer_id is not None:
                query = query.filter(Quote.buyer_id == buyer_id)
            if seller_id is not None:
                query = query.filter(Quote.seller_id == seller_id)

            quotes = query.order_by(Quote.created_at.desc(), Quote.id.desc()).all()
            session.expunge_all()
            return quotes

    def insert_quote(self, **fields) -> Quote:
        """Insert a quote"""
        with self.session() as session:
            quote = Quote(**fields)
            session.add(quote)
            session.flush()
            session.expunge(quote)
            logger.debug(f"Created quote {quote.id} for product {quote.product_id}")
            return quote

    def update_quote(self, quote_id: int, **fields) -> Optional[Quote]:
        """Update a quote"""
        with self.session() as session:
            quote = session.query(Quote).filter(Quote.id == quote_id).first()
            if quote is None:
                return None

            for field, value in fields.items():
                setattr(quote, field, value)
            quote.updated_at = datetime.utcnow()

            session.flush()
            session.expunge(quote)
            return quote

    def expire_quotes(self, now: datetime, statuses: Iterable[str]) -> int:
        """Flag stale quotes as expired"""
        with self.session() as session:
            updated = (
                session.query(Quote)
                .filter(Quote.status.in_(list(statuses)), Quote.valid_until < now)
                .update({Quote.status: "expired", Quote.updated_at: now}, synchronize_session=False)
            )
            logger.info(f"Expired {updated} quotes")
            return updated

    def get_or_create_open_cart(self, buyer_id: int) -> Cart:
        """Get or create the buyer's open cart"""
        with self.session() as session:
            cart = self._open_cart(session, buyer_id)
            session.expunge(cart)
            return cart

    def add_cart_item(
        self, cart_id: int, product_id: int, quantity: int, unit_price_cents: int
    ) -> CartItem:
        """Add a line item to a cart"""
        with self.session() as session:
            item = self._insert_cart_item(session, cart_id, product_id, quantity, unit_price_cents)
            session.expunge(item)
            return item

    def accept_quote_into_cart(
        self, quote_id: int, quantity: int, unit_price_cents: int
    ) -> Optional[CartItem]:
        """Flag a quote accepted and add its product to the buyer's open cart in one transaction"""
        with self.session() as session:
            quote = session.query(Quote).filter(Quote.id == quote_id).first()
            if quote is None:
                return None

            quote.status = "accepted"
            quote.updated_at = datetime.utcnow()

            cart = self._open_cart(session, quote.buyer_id)
            item = self._insert_cart_item(
                session, cart.id, quote.product_id, quantity, unit_price_cents
            )
            session.expunge(item)
            return item

    def _open_cart(self, session, buyer_id: int) -> Cart:
        cart = (
            session.query(Cart)
            .filter(Cart.buyer_id == buyer_id, Cart.status == "open")
            .first()
        )
        if cart is None:
            cart = Cart(buyer_id=buyer_id, status="open")
            session.add(cart)
            session.flush()
            logger.debug(f"Created cart {cart.id} for buyer {buyer_id}")
        return cart

    def _insert_cart_item(
        self, session, cart_id: int, product_id: int, quantity: int, unit_price_cents: int
    ) -> CartItem:
        item = CartItem(
            cart_id=cart_id,
            product_id=product_id,
            quantity=quantity,
            unit_price_cents=unit_price_cents,
        )
        session.add(item)
        session.flush()
        return item

    def get_cart_items(self, cart_id: int) -> List[CartItem]:
        """Get cart line items"""
        with self.session() as session:
            items = (
                session.query(CartItem)
                .filter(CartItem.cart_id == cart_id)
                .order_by(CartItem.id)
                .all()
            )
            session.expunge_all()
            return items

    def count_co_purchases(self, product_ids: Iterable[int]) -> Dict[int, int]:
        """Count products appearing in the same orders as the given products"""
        ids = list(product_ids)
        if not ids:
            return {}

        with self.session() as session:
            source = aliased(OrderItem)
            order_ids = select(source.order_id).where(source.product_id.in_(ids)).distinct()
            rows = (
                session.query(OrderItem.product_id)
                .filter(OrderItem.order_id.in_(order_ids), OrderItem.product_id.notin_(ids))
                .all()
            )

        counts: Dict[int, int] = {}
        for (product_id,) in rows:
            counts[product_id] = counts.get(product_id, 0) + 1
        return counts

    def add(self, *instances):
        """Persist arbitrary model instances, returning them detached"""
        with self.session() as session:
            session.add_all(instances)
            session.flush()
            session.expunge_all()
        return instances[0] if len(instances) == 1 else list(instances)
