"""Result records produced by the competitive analysis."""

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from ..storage.models import Product, ProductFeature


@dataclass
class ProductSnapshot:
    """A product together with its stored scores, features and ratings."""

    product: Product
    scores: Dict[str, int]
    features: List[ProductFeature] = field(default_factory=list)
    average_rating: float = 0.0
    review_count: int = 0
    score_breakdown: Dict = field(default_factory=dict)

    @property
    def overall_score(self) -> int:
        return self.scores["overall_score"]

    @property
    def feature_names(self) -> set:
        return {f.feature_name for f in self.features}


@dataclass
class CompetitorProduct(ProductSnapshot):
    similarity_score: float = 0.0
    market_overlap_score: float = 0.0
    price_difference: int = 0
    price_difference_percentage: float = 0.0
    rating_difference: float = 0.0
    score_differences: Dict[str, int] = field(default_factory=dict)


@dataclass
class PriceComparison:
    your_price: int
    competitor_average: float
    market_low: int
    market_high: int
    position: str


@dataclass
class FeatureComparison:
    feature_name: str
    your_product: bool
    competitors_with_feature: int
    total_competitors: int
    importance_score: float


@dataclass
class MetricValue:
    yours: float
    competitor_avg: float


@dataclass
class MetricComparison:
    roi: MetricValue
    retention: MetricValue
    implementation_time: MetricValue


@dataclass
class ScoreComparison:
    your_scores: Dict[str, float]
    competitor_average: Dict[str, float]
    market_leader: Dict[str, float]


@dataclass
class ImprovementSuggestion:
    category: str
    priority: str
    suggestion: str
    expected_impact: str
    based_on_metrics: List[str]
    estimated_effort: str


@dataclass
class CompetitorAnalysis:
    """Full competitive picture of one product against its top competitors."""

    product: ProductSnapshot
    competitors: List[CompetitorProduct]
    market_position: str
    price_comparison: PriceComparison
    feature_comparison: List[FeatureComparison]
    metric_comparison: MetricComparison
    score_comparison: ScoreComparison
    improvement_suggestions: List[ImprovementSuggestion]

    def summary(self, limit: Optional[int] = None) -> Dict:
        """Plain-dict view without ORM objects, suitable for logging or JSON."""
        competitors = self.competitors[:limit] if limit else self.competitors
        return {
            "product_id": self.product.product.id,
            "market_position": self.market_position,
            "competitors": [
                {
                    "product_id": c.product.id,
                    "name": c.product.name,
                    "similarity_score": c.similarity_score,
                    "market_overlap_score": c.market_overlap_score,
                    "overall_score": c.overall_score,
                }
                for c in competitors
            ],
            "price_comparison": asdict(self.price_comparison),
            "feature_comparison": [asdict(f) for f in self.feature_comparison],
            "metric_comparison": asdict(self.metric_comparison),
            "score_comparison": asdict(self.score_comparison),
            "improvement_suggestions": [asdict(s) for s in self.improvement_suggestions],
        }
