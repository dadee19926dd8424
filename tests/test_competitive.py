import pytest

from marketplace.analysis import (
    CompetitiveAnalyzer,
    description_similarity,
    market_overlap_score,
    metrics_similarity,
    price_similarity,
    similarity_score,
)
from marketplace.errors import NotFoundError
from marketplace.storage import Category, CompetitorRelationship, Product, ProductFeature


def scores(overall, review=70, integration=70):
    return {
        "fit_score": 70,
        "feature_score": 70,
        "integration_score": integration,
        "review_score": review,
        "overall_score": overall,
        "score_breakdown": {},
    }


def test_price_similarity():
    assert price_similarity(100, 200) == 0.5
    assert price_similarity(300, 300) == 1.0
    assert price_similarity(0, 100) == 0.0
    assert price_similarity(None, 100) == 0.0


def test_description_similarity_ignores_short_words_and_case():
    first = "Powerful analytics dashboard for a team"
    second = "Simple ANALYTICS dashboard to go"

    # {powerful, analytics, dashboard, team} vs {simple, analytics, dashboard}
    assert description_similarity(first, second) == pytest.approx(2 / 5)
    assert description_similarity("a an the", "analytics") == 0.0
    assert description_similarity(None, "analytics") == 0.0


def test_metrics_similarity_defaults_when_nothing_is_comparable():
    assert metrics_similarity(Product(), Product(roi_percentage=10.0)) == 0.5


def test_metrics_similarity_averages_available_ratios():
    product = Product(implementation_time_days=10, roi_percentage=100.0)
    competitor = Product(implementation_time_days=20, roi_percentage=100.0, retention_rate=0.9)

    assert metrics_similarity(product, competitor) == pytest.approx(0.75)


def test_similarity_and_overlap_scores():
    product = Product(price_cents=100, short_description="Powerful analytics dashboard")
    competitor = Product(price_cents=200, short_description="Simple analytics dashboard")

    assert similarity_score(product, competitor) == 50.0
    # Price ratio of exactly 0.5 earns no price range points
    assert market_overlap_score(product, competitor) == 62.5

    competitor.price_cents = 100
    assert market_overlap_score(product, competitor) == 87.5


def test_scores_stay_within_range_for_identical_products():
    product = Product(
        price_cents=5000,
        short_description="Automated invoice processing",
        implementation_time_days=7,
        roi_percentage=120.0,
        retention_rate=0.8,
    )

    assert similarity_score(product, product) == 100.0
    assert market_overlap_score(product, product) == 100.0


def test_identify_competitors_only_scores_published_same_category(db, make_product, devtools):
    other = db.add(Category(key="hr", name="HR"))
    product = make_product(category_id=devtools.id)
    rival = make_product(category_id=devtools.id)
    make_product(category_id=devtools.id, status="draft")
    make_product(category_id=other.id)

    relationships = CompetitiveAnalyzer(db).identify_competitors(product.id)

    assert [r.competitor_product_id for r in relationships] == [rival.id]


def test_identify_competitors_replaces_previous_scores(db, make_product, devtools):
    product = make_product(category_id=devtools.id, price_cents=1000)
    rival = make_product(category_id=devtools.id, price_cents=1000)
    analyzer = CompetitiveAnalyzer(db)

    first = analyzer.identify_competitors(product.id)
    second = analyzer.identify_competitors(product.id)

    assert first[0].competitor_product_id == rival.id
    assert second[0].similarity_score == first[0].similarity_score
    with db.session() as session:
        assert session.query(CompetitorRelationship).count() == 1


def test_identify_competitors_raises_for_unknown_product(db):
    with pytest.raises(NotFoundError):
        CompetitiveAnalyzer(db).identify_competitors(42)


def test_analysis_without_competitors_is_self_referential(db, make_product, devtools):
    product = make_product(category_id=devtools.id, price_cents=5000, roi_percentage=80.0)
    db.upsert_scores(product.id, scores(60))
    analyzer = CompetitiveAnalyzer(db)

    analyzer.identify_competitors(product.id)
    analysis = analyzer.get_competitor_analysis(product.id)

    assert analysis.competitors == []
    assert analysis.market_position == "leader"
    assert analysis.price_comparison.position == "competitive"
    assert analysis.price_comparison.competitor_average == 5000
    assert analysis.price_comparison.market_low == analysis.price_comparison.market_high == 5000
    assert analysis.feature_comparison == []
    assert analysis.metric_comparison.roi.competitor_avg == 80.0
    assert analysis.score_comparison.market_leader == analysis.score_comparison.your_scores
    assert analysis.score_comparison.competitor_average["overall_score"] == 60
    assert analysis.improvement_suggestions == []


def test_analysis_without_stored_scores_uses_zeros(db, make_product):
    product = make_product()

    analysis = CompetitiveAnalyzer(db).get_competitor_analysis(product.id)

    assert analysis.product.scores["overall_score"] == 0
    assert analysis.improvement_suggestions == []


def test_analysis_compares_against_competitors(db, make_product, devtools):
    product = make_product(category_id=devtools.id, price_cents=10000)
    leader = make_product(category_id=devtools.id, price_cents=20000, roi_percentage=200.0)
    runner_up = make_product(category_id=devtools.id, price_cents=15000, roi_percentage=100.0)

    db.upsert_scores(product.id, scores(50, review=40))
    db.upsert_scores(leader.id, scores(80, review=80))
    db.upsert_scores(runner_up.id, scores(70, review=70))

    db.add(
        ProductFeature(product_id=leader.id, feature_name="SSO"),
        ProductFeature(product_id=leader.id, feature_name="Audit log"),
        ProductFeature(product_id=runner_up.id, feature_name="SSO"),
    )

    analyzer = CompetitiveAnalyzer(db)
    analyzer.identify_competitors(product.id)
    analysis = analyzer.get_competitor_analysis(product.id)

    assert len(analysis.competitors) == 2
    assert analysis.market_position == "challenger"

    price = analysis.price_comparison
    assert price.competitor_average == 17500
    assert (price.market_low, price.market_high) == (15000, 20000)
    assert price.position == "budget"

    assert [(f.feature_name, f.importance_score) for f in analysis.feature_comparison] == [
        ("SSO", 100.0),
        ("Audit log", 50.0),
    ]

    assert analysis.metric_comparison.roi.yours == 0
    assert analysis.metric_comparison.roi.competitor_avg == 150.0

    assert analysis.score_comparison.market_leader["overall_score"] == 80
    assert analysis.score_comparison.competitor_average["review_score"] == 75.0

    by_id = {c.product.id: c for c in analysis.competitors}
    assert by_id[leader.id].price_difference == 10000
    assert by_id[leader.id].price_difference_percentage == 100.0
    assert by_id[leader.id].score_differences["overall"] == 30

    assert [(s.category, s.priority) for s in analysis.improvement_suggestions] == [
        ("features", "high"),
        ("support", "high"),
        ("marketing", "medium"),
    ]
    assert "SSO" in analysis.improvement_suggestions[0].suggestion
    assert "Audit log" not in analysis.improvement_suggestions[0].suggestion


def test_overpriced_product_with_weaker_scores_gets_pricing_advice(db, make_product, devtools):
    product = make_product(category_id=devtools.id, price_cents=30000)
    rival = make_product(category_id=devtools.id, price_cents=10000)
    db.upsert_scores(product.id, scores(50))
    db.upsert_scores(rival.id, scores(70))

    analyzer = CompetitiveAnalyzer(db)
    analyzer.identify_competitors(product.id)
    analysis = analyzer.get_competitor_analysis(product.id)

    assert analysis.price_comparison.position == "premium"
    assert analysis.improvement_suggestions[0].category == "pricing"
    assert analysis.summary()["market_position"] == "challenger"


def analysis_with_integration_gap(db, make_product, devtools, integration):
    product = make_product(category_id=devtools.id, price_cents=10000)
    rival = make_product(category_id=devtools.id, price_cents=10000)
    db.upsert_scores(product.id, scores(60, review=40, integration=integration))
    db.upsert_scores(rival.id, scores(60, review=70, integration=70))

    analyzer = CompetitiveAnalyzer(db)
    analyzer.identify_competitors(product.id)
    return analyzer.get_competitor_analysis(product.id)


def test_weak_integration_score_suggests_integration_work(db, make_product, devtools):
    analysis = analysis_with_integration_gap(db, make_product, devtools, integration=55)

    assert [(s.category, s.priority) for s in analysis.improvement_suggestions] == [
        ("support", "high"),
        ("features", "medium"),
    ]
    integration = analysis.improvement_suggestions[1]
    assert integration.suggestion == "Improve integration capabilities and API documentation"
    assert integration.based_on_metrics == ["integration_score"]


def test_integration_gap_of_exactly_ten_points_is_tolerated(db, make_product, devtools):
    analysis = analysis_with_integration_gap(db, make_product, devtools, integration=60)

    assert [(s.category, s.priority) for s in analysis.improvement_suggestions] == [
        ("support", "high"),
    ]


def test_archived_or_moved_competitors_drop_out(db, make_product, devtools):
    other = db.add(Category(key="hr", name="HR"))
    product = make_product(category_id=devtools.id)
    archived = make_product(category_id=devtools.id)
    moved = make_product(category_id=devtools.id)
    kept = make_product(category_id=devtools.id)
    analyzer = CompetitiveAnalyzer(db)
    analyzer.identify_competitors(product.id)

    with db.session() as session:
        session.query(Product).filter(Product.id == archived.id).update({"status": "archived"})
        session.query(Product).filter(Product.id == moved.id).update({"category_id": other.id})

    analysis = analyzer.get_competitor_analysis(product.id)
    assert sorted(c.product.id for c in analysis.competitors) == sorted([moved.id, kept.id])

    analyzer.identify_competitors(product.id)

    assert [r.competitor_product_id for r in db.get_competitor_relationships(product.id)] == [kept.id]
    assert [c.product.id for c in analyzer.get_competitor_analysis(product.id).competitors] == [kept.id]
