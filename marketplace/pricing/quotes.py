"""Automated quote pricing and the quote lifecycle."""

from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional

from loguru import logger

from ..errors import InvalidQuoteStatusError, NotFoundError, QuoteExpiredError
from ..storage.base import MarketplaceStore
from ..storage.models import CartItem, Quote, QuoteRequest
from ..utils.numbers import round_half_up

OPEN_STATUSES = ("pending", "sent")

# (exclusive upper company size, price multiplier); larger companies get 3.0
COMPANY_SIZE_MULTIPLIERS = ((10, 0.8), (50, 1.0), (200, 1.5), (500, 2.0))
ENTERPRISE_MULTIPLIER = 3.0

FEATURE_SURCHARGE = 0.1
CUSTOM_IMPLEMENTATION_SURCHARGE = 0.5
# (licenses above, discount of the size-adjusted base)
VOLUME_DISCOUNTS = ((10, 0.15), (5, 0.1))
MINIMUM_PRICE_RATIO = 0.5


def company_size_multiplier(company_size: int) -> float:
    for upper, multiplier in COMPANY_SIZE_MULTIPLIERS:
        if company_size < upper:
            return multiplier
    return ENTERPRISE_MULTIPLIER


def calculate_quote_pricing(
    base_price: float, company_size: int, requirements: Optional[Mapping[str, Any]] = None
) -> Dict[str, float]:
    """Price a quote from the list price and the buyer's request.

    Every requirement key adds 10% of the base price, a truthy
    ``custom_implementation`` adds 50%, and more than 5 or 10 licenses
    (``license_count``) take 10% or 15% off the size-adjusted base.
    The total never drops below half the base price.

    Args:
        base_price: Product list price in major currency units
        company_size: Buyer company head count
        requirements: Buyer requirements

    Returns:
        Line items plus ``total``
    """
    requirements = requirements or {}
    multiplier = company_size_multiplier(company_size)

    breakdown: Dict[str, float] = {
        "base_price": base_price,
        "company_size_adjustment": base_price * (multiplier - 1),
        "feature_requirements": len(requirements) * base_price * FEATURE_SURCHARGE,
    }

    if requirements.get("custom_implementation"):
        breakdown["custom_implementation"] = base_price * CUSTOM_IMPLEMENTATION_SURCHARGE

    license_count = requirements.get("license_count") or 1
    for above, discount in VOLUME_DISCOUNTS:
        if license_count > above:
            breakdown["volume_discount"] = -base_price * multiplier * discount
            break

    breakdown["total"] = max(base_price * MINIMUM_PRICE_RATIO, sum(breakdown.values()))
    return breakdown


class QuoteService:
    """Creates quotes and moves them through their lifecycle."""

    def __init__(
        self,
        store: MarketplaceStore,
        config: Optional[Dict] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        pricing_config = (config or {}).get("pricing", {})

        self.store = store
        self.clock = clock
        self.validity_days = pricing_config.get("quote_validity_days", 30)
        self.response_days = pricing_config.get("quote_response_days", 3)

    def generate_quote(self, request: QuoteRequest) -> Quote:
        """Price and store a pending quote for a buyer request.

        Raises:
            NotFoundError: If the product does not exist
        """
        product = self.store.get_product(request.product_id)
        if product is None:
            raise NotFoundError("Product", request.product_id)

        base_price = (product.price_cents or 0) / 100
        breakdown = calculate_quote_pricing(base_price, request.company_size, request.requirements)
        now = self.clock()

        quote = self.store.insert_quote(
            product_id=request.product_id,
            buyer_id=request.buyer_id,
            seller_id=product.seller_id,
            company_size=request.company_size,
            requirements=request.requirements,
            quoted_price=breakdown["total"],
            pricing_breakdown=breakdown,
            status="pending",
            valid_until=now + timedelta(days=self.validity_days),
            estimated_response_date=now + timedelta(days=self.response_days),
            buyer_company_info=request.buyer_company_info,
            additional_notes=request.additional_notes,
            created_at=now,
            updated_at=now,
        )

        logger.info(f"Quote {quote.id} generated for product {request.product_id}: {breakdown['total']:.2f}")
        return quote

    def accept_quote(self, quote_id: int) -> CartItem:
        """Accept a quote and put the quoted product in the buyer's open cart.

        Raises:
            NotFoundError: If the quote does not exist
            QuoteExpiredError: If the validity window has passed
            InvalidQuoteStatusError: If the quote is not pending or sent
        """
        quote = self.get_by_id(quote_id)
        if quote is None:
            raise NotFoundError("Quote", quote_id)

        if self._is_expired(quote):
            raise QuoteExpiredError(quote_id)

        if quote.status not in OPEN_STATUSES:
            raise InvalidQuoteStatusError(quote_id, quote.status)

        item = self.store.accept_quote_into_cart(
            quote_id,
            quantity=1,
            unit_price_cents=round_half_up(quote.quoted_price * 100),
        )
        if item is None:
            raise NotFoundError("Quote", quote_id)

        logger.info(f"Quote {quote_id} accepted into cart {item.cart_id}")
        return item

    def reject_quote(self, quote_id: int) -> Quote:
        """Reject a pending or sent quote.

        Raises:
            NotFoundError: If the quote does not exist
            InvalidQuoteStatusError: If the quote is not pending or sent
        """
        quote = self.get_by_id(quote_id)
        if quote is None:
            raise NotFoundError("Quote", quote_id)

        if quote.status not in OPEN_STATUSES:
            raise InvalidQuoteStatusError(quote_id, quote.status, action="rejected")

        logger.info(f"Quote {quote_id} rejected")
        return self.store.update_quote(quote_id, status="rejected")

    def check_expiration(self, quote_id: int) -> bool:
        """True once the quote's validity window has passed."""
        quote = self.get_by_id(quote_id)
        if quote is None:
            raise NotFoundError("Quote", quote_id)
        return self._is_expired(quote)

    def extend_validity(self, quote_id: int, new_date: datetime) -> Quote:
        quote = self.store.update_quote(quote_id, valid_until=new_date)
        if quote is None:
            raise NotFoundError("Quote", quote_id)

        logger.info(f"Quote {quote_id} valid until {new_date.isoformat()}")
        return quote

    def get_by_id(self, quote_id: int) -> Optional[Quote]:
        return self.store.get_quote(quote_id)

    def get_by_buyer(self, buyer_id: int) -> List[Quote]:
        return self.store.get_quotes(buyer_id=buyer_id)

    def get_by_seller(self, seller_id: int) -> List[Quote]:
        return self.store.get_quotes(seller_id=seller_id)

    def expire_stale_quotes(self) -> int:
        """Mark open quotes past their validity window as expired."""
        return self.store.expire_quotes(self.clock(), OPEN_STATUSES)

    def _is_expired(self, quote: Quote) -> bool:
        return quote.valid_until is not None and self.clock() > quote.valid_until
