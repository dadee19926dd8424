"""Bundle pricing and bundle discovery."""

from dataclasses import dataclass, field
from typing import Dict, List

from loguru import logger

from ..errors import NotFoundError
from ..storage.base import MarketplaceStore
from ..storage.models import Product
from ..utils.numbers import round_half_up

# (minimum product count, discount percentage), largest first
DISCOUNT_TIERS = ((4, 15), (3, 10), (2, 5))


def calculate_discount_percentage(product_count: int) -> int:
    """Bundle discount: 5% for 2 products, 10% for 3, 15% for 4 or more."""
    for minimum, discount in DISCOUNT_TIERS:
        if product_count >= minimum:
            return discount
    return 0


def discounted(total_price: int, discount_percentage: int) -> int:
    return round_half_up(total_price * (1 - discount_percentage / 100))


@dataclass
class BundlePrice:
    total_price: int
    discounted_price: int
    discount_percentage: int

    @property
    def savings(self) -> int:
        return self.total_price - self.discounted_price


@dataclass
class ProductBundle:
    """A priced group of products, stored or suggested."""

    id: str
    name: str
    description: str
    products: List[Product] = field(default_factory=list)
    total_price: int = 0
    discounted_price: int = 0
    discount_percentage: int = 0

    @classmethod
    def from_products(cls, bundle_id: str, name: str, description: str, products: List[Product]):
        total = sum(p.price_cents or 0 for p in products)
        discount = calculate_discount_percentage(len(products))
        return cls(
            id=bundle_id,
            name=name,
            description=description,
            products=products,
            total_price=total,
            discounted_price=discounted(total, discount),
            discount_percentage=discount,
        )


class BundleService:
    """Prices bundles and proposes them from order history."""

    def __init__(self, store: MarketplaceStore):
        self.store = store

    def calculate_bundle_price(self, product_ids: List[int]) -> BundlePrice:
        """Price a bundle from the current product prices.

        Prices are read on every call. The discount tier follows the number
        of requested ids.

        Args:
            product_ids: Products in the bundle

        Returns:
            BundlePrice, all zeros for an empty list

        Raises:
            NotFoundError: If any product does not exist
        """
        if not product_ids:
            return BundlePrice(total_price=0, discounted_price=0, discount_percentage=0)

        prices = {p.id: p.price_cents or 0 for p in self.store.get_products(product_ids)}

        missing = [pid for pid in product_ids if pid not in prices]
        if missing:
            raise NotFoundError("Product", missing[0])

        total = sum(prices[pid] for pid in product_ids)
        discount = calculate_discount_percentage(len(product_ids))

        return BundlePrice(
            total_price=total,
            discounted_price=discounted(total, discount),
            discount_percentage=discount,
        )

    def create_bundle(self, seller_id: int, name: str, description: str, product_ids: List[int]) -> ProductBundle:
        """Store a bundle as a product priced at its discounted price.

        Raises:
            NotFoundError: If any component product does not exist
        """
        pricing = self.calculate_bundle_price(product_ids)

        bundle = self.store.create_bundle_product(
            seller_id=seller_id,
            name=name,
            description=description,
            price_cents=pricing.discounted_price,
            product_ids=list(product_ids),
        )
        logger.info(f"Created bundle {bundle.id} '{name}' at {pricing.discounted_price} cents")

        return ProductBundle(
            id=str(bundle.id),
            name=name,
            description=description,
            products=self._ordered_products(product_ids),
            total_price=pricing.total_price,
            discounted_price=pricing.discounted_price,
            discount_percentage=pricing.discount_percentage,
        )

    def get_bundle(self, bundle_id: int) -> ProductBundle:
        """Load a stored bundle, re-pricing it from current component prices.

        Raises:
            NotFoundError: If no bundle product has this id
        """
        bundle = self.store.get_product(bundle_id)
        if bundle is None or not bundle.is_bundle:
            raise NotFoundError("Bundle", bundle_id)

        product_ids = self.store.get_bundle_product_ids(bundle_id)
        pricing = self.calculate_bundle_price(product_ids)

        return ProductBundle(
            id=str(bundle.id),
            name=bundle.name,
            description=bundle.short_description or "",
            products=self._ordered_products(product_ids),
            total_price=pricing.total_price,
            discounted_price=pricing.discounted_price,
            discount_percentage=pricing.discount_percentage,
        )

    def get_frequently_bought_together(self, product_id: int, limit: int = 3) -> List[ProductBundle]:
        """Pair a product with the products most often ordered alongside it."""
        main = self.store.get_product(product_id)
        if main is None:
            raise NotFoundError("Product", product_id)

        companions = self._top_co_purchased([product_id], limit)

        return [
            ProductBundle.from_products(
                f"fbt-{product_id}-{companion.id}",
                f"{main.name} + {companion.name}",
                f"Frequently bought together - Save {calculate_discount_percentage(2)}%",
                [main, companion],
            )
            for companion in companions[:limit]
        ]

    def get_suggested_bundles(self, cart_product_ids: List[int], limit: int = 3) -> List[ProductBundle]:
        """Extend the cart contents with one frequently co-ordered product each."""
        if not cart_product_ids:
            return []

        cart_products = self._ordered_products(cart_product_ids)
        suggestions = self._top_co_purchased(cart_product_ids, limit)

        bundles = []
        for index, suggested in enumerate(suggestions[:limit]):
            products = cart_products + [suggested]
            discount = calculate_discount_percentage(len(products))
            bundles.append(
                ProductBundle.from_products(
                    f"suggested-{index}",
                    f"Bundle with {suggested.name}",
                    f"Save {discount}% when you add {suggested.name} to your cart",
                    products,
                )
            )
        return bundles

    def _top_co_purchased(self, product_ids: List[int], limit: int) -> List[Product]:
        counts = self.store.count_co_purchases(product_ids)
        if not counts:
            return []

        # Most frequent first, lower id on ties
        ranked = sorted(counts, key=lambda pid: (-counts[pid], pid))[: limit * 2]
        return self._ordered_products(ranked)

    def _ordered_products(self, product_ids: List[int]) -> List[Product]:
        by_id: Dict[int, Product] = {p.id: p for p in self.store.get_products(product_ids)}
        return [by_id[pid] for pid in product_ids if pid in by_id]
