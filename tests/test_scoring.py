import pytest

from marketplace.scoring import (
    CompositeScorer,
    FeatureScorer,
    FitScorer,
    IntegrationScorer,
    ReviewScorer,
)
from marketplace.storage import BuyerProfile, Category, Product, ProductFeature


def test_overall_score_uses_fixed_weights_and_rounds_half_up():
    scorer = CompositeScorer()

    overall = scorer.calculate_overall_score(
        {"fit_score": 80, "feature_score": 60, "integration_score": 70, "review_score": 90}
    )

    assert overall == 75


def test_fit_carries_the_largest_weight():
    scorer = CompositeScorer()
    base = {"fit_score": 50, "feature_score": 50, "integration_score": 50, "review_score": 50}

    fit_raised = scorer.calculate_overall_score({**base, "fit_score": 60})
    review_raised = scorer.calculate_overall_score({**base, "review_score": 60})

    assert fit_raised > review_raised


def test_fit_score_penalizes_slow_client_products():
    product = Product(
        implementation_time_days=100,
        cloud_client_classification="client",
        access_depth="read,write,admin",
    )

    assert FitScorer().calculate(product) == 54


def test_fit_score_is_clamped_to_100():
    product = Product(implementation_time_days=2, cloud_client_classification="cloud")

    assert FitScorer().calculate(product) == 100


def test_fit_score_rewards_fast_rollout_for_small_buyers():
    product = Product(implementation_time_days=10, access_depth="read,write")
    scorer = FitScorer()

    assert scorer.calculate(product) == 86
    assert scorer.calculate(product, BuyerProfile(company_size=20)) == 96


def test_fit_score_rewards_long_rollout_for_enterprise_buyers():
    product = Product(implementation_time_days=45)

    assert FitScorer().calculate(product, BuyerProfile(company_size=1000)) == 85


def test_fit_factors_only_include_buyer_match_with_company_size():
    product = Product(implementation_time_days=10)
    scorer = FitScorer()

    assert "buyer_match" not in scorer.factors(product)
    assert "buyer_match" not in scorer.factors(product, BuyerProfile(interests=["hr"]))
    assert scorer.factors(product, BuyerProfile(company_size=20))["buyer_match"] == 110


def test_feature_score_of_bare_product_is_base():
    assert FeatureScorer().calculate(Product(), []) == 60


def test_feature_score_adds_metrics_and_high_relevance_features():
    product = Product(roi_percentage=150.0, retention_rate=0.9)
    features = [ProductFeature(feature_name=f"f{i}", relevance_score=90) for i in range(3)]

    # 60 base + 8 metrics + 6 feature count + 6 high relevance
    assert FeatureScorer().calculate(product, features) == 80


def test_feature_score_caps_high_relevance_bonus():
    features = [ProductFeature(feature_name=f"f{i}", relevance_score=95) for i in range(25)]

    factors = FeatureScorer().factors(Product(), features)

    assert factors["feature_count"] == 20
    assert factors["high_value_features"] == 10


def test_feature_score_rewards_long_descriptions():
    product = Product(long_description=" ".join(["word"] * 250))

    # 60 base + 6 length + 10 word count
    assert FeatureScorer().calculate(product, []) == 76


def test_integration_score_for_client_product_without_api():
    product = Product(cloud_client_classification="client")

    assert IntegrationScorer().calculate(product) == 60


def test_integration_score_uses_category_and_buyer_interest():
    product = Product(cloud_client_classification="hybrid", category=Category(key="hr", name="HR"))
    scorer = IntegrationScorer()

    assert scorer.calculate(product) == 80
    assert scorer.calculate(product, BuyerProfile(interests=["hr"])) == 90
    assert scorer.factors(product, BuyerProfile(interests=["devtools"]))["buyer_compatibility"] == 0


def test_empty_interest_list_still_records_buyer_compatibility():
    product = Product(cloud_client_classification="hybrid", category=Category(key="hr", name="HR"))
    scorer = IntegrationScorer()

    assert scorer.factors(product, BuyerProfile(interests=[]))["buyer_compatibility"] == 0
    assert "buyer_compatibility" not in scorer.factors(product, BuyerProfile(company_size=10))


def test_integration_api_detection_is_case_insensitive():
    product = Product(cloud_client_classification="client", access_depth="read,REST API")

    assert IntegrationScorer().factors(product)["api_availability"] == 15


def test_integration_category_bonuses_are_configurable():
    product = Product(cloud_client_classification="client", category=Category(key="crm", name="CRM"))
    scorer = IntegrationScorer({"category_bonuses": {"crm": 20}})

    assert scorer.calculate(product) == 80


@pytest.mark.parametrize(
    "average, count, expected",
    [
        (5, 20, 100),
        (1, 25, 0),
        (3, 20, 50),
        (5, 3, 80),
        (5, 7, 90),
        (5, 15, 95),
        (3, 3, 40),
        (0, 0, 0),
    ],
)
def test_review_score(average, count, expected):
    assert ReviewScorer().calculate(average, count) == expected


def test_few_reviews_never_score_above_many_reviews():
    scorer = ReviewScorer()

    assert scorer.calculate(4.5, 4) < scorer.calculate(4.5, 20)


def test_score_product_returns_bounded_scores_with_breakdown():
    product = Product(
        implementation_time_days=5,
        cloud_client_classification="cloud",
        access_depth="api",
        category=Category(key="devtools", name="Developer Tools"),
    )

    score_set = CompositeScorer().score_product(product, [], [5, 4, 5])

    for value in score_set.scores().values():
        assert 0 <= value <= 100
    assert set(score_set.score_breakdown) == {"fit", "feature", "integration", "review"}
    assert score_set.score_breakdown["review"]["factors"]["review_count"] == 3


def test_word_count_splits_on_whitespace_runs():
    padded = Product(long_description=" " + " ".join(["word"] * 100))
    exact = Product(long_description=" ".join(["word"] * 100))

    assert FeatureScorer().factors(padded, [])["description_quality"] == 5
    assert FeatureScorer().factors(exact, [])["description_quality"] == 0
