"""Rule-based improvement suggestions derived from a competitive comparison."""

from typing import List

from .models import (
    FeatureComparison,
    ImprovementSuggestion,
    MetricComparison,
    PriceComparison,
    ScoreComparison,
)

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}

IMPORTANT_FEATURE_THRESHOLD = 60
MAX_MISSING_FEATURES = 3
ROI_GAP_RATIO = 0.8
SCORE_GAP_POINTS = 10


def generate_improvement_suggestions(
    price_comparison: PriceComparison,
    feature_comparison: List[FeatureComparison],
    metric_comparison: MetricComparison,
    score_comparison: ScoreComparison,
) -> List[ImprovementSuggestion]:
    """Apply the fixed suggestion rules and sort by priority.

    Args:
        price_comparison: Price position against competitors
        feature_comparison: Feature coverage sorted by importance
        metric_comparison: ROI, retention and implementation time
        score_comparison: Own scores against competitor average

    Returns:
        Suggestions ordered high, medium, low
    """
    suggestions: List[ImprovementSuggestion] = []
    yours = score_comparison.your_scores
    average = score_comparison.competitor_average

    if price_comparison.position == "premium" and yours["overall_score"] < average["overall_score"]:
        suggestions.append(
            ImprovementSuggestion(
                category="pricing",
                priority="high",
                suggestion=(
                    "Consider reducing price to be more competitive. "
                    "Your premium pricing is not supported by higher scores."
                ),
                expected_impact="Increase conversion rate by 15-25%",
                based_on_metrics=["price_comparison", "overall_score"],
                estimated_effort="Low - pricing adjustment",
            )
        )

    missing = [
        f for f in feature_comparison
        if not f.your_product and f.importance_score > IMPORTANT_FEATURE_THRESHOLD
    ][:MAX_MISSING_FEATURES]

    if missing:
        names = ", ".join(f.feature_name for f in missing)
        suggestions.append(
            ImprovementSuggestion(
                category="features",
                priority="high",
                suggestion=f"Add these commonly expected features: {names}",
                expected_impact="Improve feature score by 10-20 points",
                based_on_metrics=["feature_comparison"],
                estimated_effort="Medium - feature development required",
            )
        )

    roi = metric_comparison.roi
    if roi.yours < roi.competitor_avg * ROI_GAP_RATIO:
        suggestions.append(
            ImprovementSuggestion(
                category="marketing",
                priority="medium",
                suggestion="Improve ROI messaging and case studies to match competitor claims",
                expected_impact="Increase buyer confidence and conversion",
                based_on_metrics=["roi_comparison"],
                estimated_effort="Low - marketing content update",
            )
        )

    if yours["review_score"] < average["review_score"] - SCORE_GAP_POINTS:
        suggestions.append(
            ImprovementSuggestion(
                category="support",
                priority="high",
                suggestion="Focus on improving customer satisfaction to boost review scores",
                expected_impact="Increase review score by 10-15 points",
                based_on_metrics=["review_score"],
                estimated_effort="Medium - customer success initiatives",
            )
        )

    if yours["integration_score"] < average["integration_score"] - SCORE_GAP_POINTS:
        suggestions.append(
            ImprovementSuggestion(
                category="features",
                priority="medium",
                suggestion="Improve integration capabilities and API documentation",
                expected_impact="Increase integration score by 10-15 points",
                based_on_metrics=["integration_score"],
                estimated_effort="High - technical development required",
            )
        )

    # sorted() is stable, so rule order is kept within a priority
    return sorted(suggestions, key=lambda s: PRIORITY_ORDER[s.priority])
