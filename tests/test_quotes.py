from datetime import datetime, timedelta

import pytest

from marketplace.errors import InvalidQuoteStatusError, NotFoundError, QuoteExpiredError
from marketplace.pricing import QuoteService, calculate_quote_pricing
from marketplace.storage import QuoteRequest

NOW = datetime(2025, 1, 1, 12, 0, 0)


@pytest.mark.parametrize(
    "company_size, expected",
    [(5, 80.0), (20, 100.0), (100, 150.0), (300, 200.0), (1000, 300.0)],
)
def test_company_size_multiplier(company_size, expected):
    assert calculate_quote_pricing(100.0, company_size)["total"] == pytest.approx(expected)


def test_quote_line_items():
    breakdown = calculate_quote_pricing(
        100.0, 100, {"custom_implementation": True, "license_count": 8}
    )

    assert breakdown["base_price"] == 100.0
    assert breakdown["company_size_adjustment"] == pytest.approx(50.0)
    assert breakdown["feature_requirements"] == pytest.approx(20.0)
    assert breakdown["custom_implementation"] == pytest.approx(50.0)
    assert breakdown["volume_discount"] == pytest.approx(-15.0)
    assert breakdown["total"] == pytest.approx(205.0)


def test_large_license_count_gets_bigger_discount():
    breakdown = calculate_quote_pricing(100.0, 20, {"license_count": 20})

    assert breakdown["volume_discount"] == pytest.approx(-15.0)
    assert "custom_implementation" not in calculate_quote_pricing(100.0, 20, {"custom_implementation": False})


@pytest.mark.parametrize(
    "company_size, requirements",
    [
        (0, {}),
        (5, {"license_count": 50}),
        (1000, {"license_count": 50, "custom_implementation": True}),
        (30, {"a": 1, "b": 2}),
    ],
)
def test_quote_total_never_below_half_base(company_size, requirements):
    assert calculate_quote_pricing(80.0, company_size, requirements)["total"] >= 40.0


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock(NOW)


@pytest.fixture
def service(db, clock):
    return QuoteService(db, clock=clock)


@pytest.fixture
def quote(service, make_product):
    product = make_product(seller_id=9, price_cents=12345)
    return service.generate_quote(QuoteRequest(product_id=product.id, buyer_id=3, company_size=20))


def test_generate_quote(quote):
    assert quote.status == "pending"
    assert quote.seller_id == 9
    assert quote.quoted_price == pytest.approx(123.45)
    assert quote.valid_until == NOW + timedelta(days=30)
    assert quote.estimated_response_date == NOW + timedelta(days=3)
    assert quote.pricing_breakdown["total"] == pytest.approx(123.45)


def test_generate_quote_for_unknown_product(service):
    with pytest.raises(NotFoundError):
        service.generate_quote(QuoteRequest(product_id=404, buyer_id=3, company_size=20))


def test_accept_quote_adds_one_cart_item(db, service, quote):
    item = service.accept_quote(quote.id)

    assert item.unit_price_cents == 12345
    assert item.quantity == 1
    assert service.get_by_id(quote.id).status == "accepted"

    cart = db.get_or_create_open_cart(3)
    assert [i.id for i in db.get_cart_items(cart.id)] == [item.id]


def test_accept_quote_reuses_open_cart(db, service, quote):
    cart = db.get_or_create_open_cart(3)

    item = service.accept_quote(quote.id)

    assert item.cart_id == cart.id


def test_accepting_twice_is_refused(service, quote):
    service.accept_quote(quote.id)

    with pytest.raises(InvalidQuoteStatusError):
        service.accept_quote(quote.id)


def test_failed_cart_insert_leaves_quote_pending(db, service, quote, monkeypatch):
    def broken_insert(*args, **kwargs):
        raise RuntimeError("cart table locked")

    monkeypatch.setattr(db, "_insert_cart_item", broken_insert)

    with pytest.raises(RuntimeError):
        service.accept_quote(quote.id)

    assert service.get_by_id(quote.id).status == "pending"

    monkeypatch.undo()
    item = service.accept_quote(quote.id)

    assert service.get_by_id(quote.id).status == "accepted"
    assert [i.id for i in db.get_cart_items(item.cart_id)] == [item.id]


def test_expired_quote_cannot_be_accepted(db, service, quote, clock):
    clock.now = NOW + timedelta(days=31)

    with pytest.raises(QuoteExpiredError):
        service.accept_quote(quote.id)

    assert service.get_by_id(quote.id).status == "pending"
    assert db.get_cart_items(db.get_or_create_open_cart(3).id) == []


def test_accept_unknown_quote(service):
    with pytest.raises(NotFoundError):
        service.accept_quote(404)


def test_reject_quote(service, quote):
    assert service.reject_quote(quote.id).status == "rejected"

    with pytest.raises(InvalidQuoteStatusError):
        service.accept_quote(quote.id)


def test_check_expiration_and_extend(service, quote, clock):
    clock.now = NOW + timedelta(days=31)
    assert service.check_expiration(quote.id)

    service.extend_validity(quote.id, NOW + timedelta(days=60))

    assert not service.check_expiration(quote.id)
    assert service.accept_quote(quote.id).unit_price_cents == 12345


def test_expire_stale_quotes(service, quote, clock):
    assert service.expire_stale_quotes() == 0

    clock.now = NOW + timedelta(days=31)

    assert service.expire_stale_quotes() == 1
    assert service.get_by_id(quote.id).status == "expired"


def test_quotes_by_buyer_and_seller(service, quote):
    assert [q.id for q in service.get_by_buyer(3)] == [quote.id]
    assert [q.id for q in service.get_by_seller(9)] == [quote.id]
    assert service.get_by_buyer(4) == []
