import asyncio

import pytest

from marketplace.errors import NotFoundError
from marketplace.scoring import ProductScoreService
from marketplace.storage import BuyerProfile, ProductScore, Review


def test_calculate_scores_persists_score_set(db, make_product, devtools):
    product = make_product(
        category_id=devtools.id,
        cloud_client_classification="cloud",
        implementation_time_days=5,
        access_depth="read,api",
    )
    db.add(*[Review(product_id=product.id, buyer_id=i, rating=5) for i in range(20)])

    service = ProductScoreService(db)
    score_set = service.calculate_scores(product.id)

    stored = service.get_scores(product.id)
    assert stored.scores() == score_set.scores()
    assert stored.review_score == 100
    # 70 + 10 cloud + 10 devtools + 15 api, clamped
    assert stored.integration_score == 100
    assert stored.score_breakdown["integration"]["factors"]["category_ecosystem"] == 10


def test_calculate_scores_is_idempotent(db, make_product):
    product = make_product()
    service = ProductScoreService(db)

    first = service.calculate_scores(product.id)
    second = service.calculate_scores(product.id)

    assert first.scores() == second.scores()
    with db.session() as session:
        assert session.query(ProductScore).count() == 1


def test_personalized_scores_are_not_persisted(db, make_product):
    product = make_product(implementation_time_days=10)
    service = ProductScoreService(db)

    general = service.calculate_scores(product.id)
    personalized = service.calculate_scores(product.id, BuyerProfile(company_size=20))

    assert personalized.fit_score > general.fit_score
    assert service.get_scores(product.id).fit_score == general.fit_score


def test_calculate_scores_raises_for_unknown_product(db):
    with pytest.raises(NotFoundError):
        ProductScoreService(db).calculate_scores(999)


def test_get_scores_is_none_before_calculation(db, make_product):
    product = make_product()

    assert ProductScoreService(db).get_scores(product.id) is None


def test_recalculate_all_scores_skips_drafts(db, make_product):
    published = [make_product(name=f"P{i}") for i in range(5)]
    draft = make_product(name="Draft", status="draft")

    service = ProductScoreService(db)
    processed = asyncio.run(service.recalculate_all_scores(batch_size=2))

    assert processed == 5
    for product in published:
        assert service.get_scores(product.id) is not None
    assert service.get_scores(draft.id) is None


def test_recalculate_all_scores_survives_single_failure(db, make_product, monkeypatch):
    products = [make_product(name=f"P{i}") for i in range(3)]
    broken_id = products[1].id

    service = ProductScoreService(db)
    score_product = service.scorer.score_product

    def flaky(product, *args, **kwargs):
        if product.id == broken_id:
            raise ValueError("broken product data")
        return score_product(product, *args, **kwargs)

    monkeypatch.setattr(service.scorer, "score_product", flaky)

    processed = asyncio.run(service.recalculate_all_scores())

    assert processed == 3
    assert service.get_scores(broken_id) is None
    assert service.get_scores(products[0].id) is not None
    assert service.get_scores(products[2].id) is not None
