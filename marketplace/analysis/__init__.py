"""Competitive analysis against same-category products"""

from .competitive import CompetitiveAnalyzer
from .models import (
    CompetitorAnalysis,
    CompetitorProduct,
    FeatureComparison,
    ImprovementSuggestion,
    MetricComparison,
    PriceComparison,
    ProductSnapshot,
    ScoreComparison,
)
from .similarity import (
    description_similarity,
    market_overlap_score,
    metrics_similarity,
    price_similarity,
    similarity_score,
)
from .suggestions import generate_improvement_suggestions

__all__ = [
    "CompetitiveAnalyzer",
    "CompetitorAnalysis",
    "CompetitorProduct",
    "FeatureComparison",
    "ImprovementSuggestion",
    "MetricComparison",
    "PriceComparison",
    "ProductSnapshot",
    "ScoreComparison",
    "description_similarity",
    "market_overlap_score",
    "metrics_similarity",
    "price_similarity",
    "similarity_score",
    "generate_improvement_suggestions",
]
