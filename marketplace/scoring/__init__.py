"""Scoring engine for product fit, features, integration and reviews"""

from .fit import FitScorer
from .feature import FeatureScorer
from .integration import IntegrationScorer
from .review import ReviewScorer
from .composite import CompositeScorer, ScoreSet
from .service import ProductScoreService

__all__ = [
    "FitScorer",
    "FeatureScorer",
    "IntegrationScorer",
    "ReviewScorer",
    "CompositeScorer",
    "ScoreSet",
    "ProductScoreService",
]
