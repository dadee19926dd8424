import pytest

from marketplace.storage import Category, Database, Product


@pytest.fixture
def db():
    return Database("sqlite:///:memory:")


@pytest.fixture
def make_product(db):
    """Persist a product, filling in required columns."""

    def _make(**fields):
        fields.setdefault("seller_id", 1)
        fields.setdefault("name", "Product")
        fields.setdefault("price_cents", 10000)
        fields.setdefault("status", "published")
        return db.add(Product(**fields))

    return _make


@pytest.fixture
def devtools(db):
    return db.add(Category(key="devtools", name="Developer Tools"))
