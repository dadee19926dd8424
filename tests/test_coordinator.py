import asyncio
from datetime import datetime, timedelta

from marketplace.orchestrator import JobCoordinator
from marketplace.storage import Quote


def test_jobs_run_against_injected_store(db, make_product, devtools):
    first = make_product(category_id=devtools.id, price_cents=1000)
    second = make_product(category_id=devtools.id, price_cents=1200)
    db.add(
        Quote(
            product_id=first.id,
            buyer_id=1,
            seller_id=1,
            company_size=10,
            quoted_price=10.0,
            status="pending",
            valid_until=datetime.utcnow() - timedelta(days=1),
        )
    )
    coordinator = JobCoordinator({}, store=db)

    assert asyncio.run(coordinator.run_scoring()) == 2
    assert asyncio.run(coordinator.run_competitor_identification()) == 2
    assert asyncio.run(coordinator.expire_quotes()) == 1

    assert coordinator.score_service.get_scores(first.id) is not None
    assert [r.competitor_product_id for r in db.get_competitor_relationships(second.id)] == [first.id]


def test_cleanup_cache_drops_expired_entries(db):
    coordinator = JobCoordinator({"cache": {"default_ttl_seconds": 0}}, store=db)
    coordinator.cache.set("stale", 1, ttl=-1)
    coordinator.cache.set("fresh", 2, ttl=60)

    assert asyncio.run(coordinator.cleanup_cache()) == 1
    assert len(coordinator.cache) == 1
