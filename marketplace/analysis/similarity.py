"""Pairwise similarity measures between a product and a competitor."""

import re
from typing import List, Optional

import numpy as np

from ..storage.models import Product
from ..utils.numbers import round_to_cents

# Weights of the similarity score components
PRICE_WEIGHT = 0.3
DESCRIPTION_WEIGHT = 0.4
METRICS_WEIGHT = 0.3

# Market overlap points
SAME_CATEGORY_POINTS = 50
PRICE_RANGE_POINTS = 25
PRICE_RANGE_MIN_RATIO = 0.5
TARGET_MARKET_SHARE = 0.25

# Used when no metric pair is comparable
NEUTRAL_METRICS_SIMILARITY = 0.5

COMPARED_METRICS = ("implementation_time_days", "roi_percentage", "retention_rate")
MIN_WORD_LENGTH = 4


def _ratio(a: Optional[float], b: Optional[float]) -> float:
    """min/max ratio of two positive values, 0 when either is missing or zero."""
    if not a or not b:
        return 0.0
    return min(a, b) / max(a, b)


def price_similarity(price1: Optional[int], price2: Optional[int]) -> float:
    """Price similarity from 0-1."""
    return _ratio(price1, price2)


def _significant_words(text: Optional[str]) -> set:
    return {w for w in re.split(r"\s+", (text or "").lower()) if len(w) >= MIN_WORD_LENGTH}


def description_similarity(desc1: Optional[str], desc2: Optional[str]) -> float:
    """Jaccard index of the words longer than three characters, 0-1."""
    words1 = _significant_words(desc1)
    words2 = _significant_words(desc2)

    if not words1 or not words2:
        return 0.0

    return len(words1 & words2) / len(words1 | words2)


def metrics_similarity(product: Product, competitor: Product) -> float:
    """Mean ratio similarity over metrics both products report, 0-1."""
    similarities: List[float] = []

    for metric in COMPARED_METRICS:
        ours = getattr(product, metric)
        theirs = getattr(competitor, metric)
        if ours and theirs:
            similarities.append(_ratio(ours, theirs))

    if not similarities:
        return NEUTRAL_METRICS_SIMILARITY

    return float(np.mean(similarities))


def similarity_score(product: Product, competitor: Product) -> float:
    """Weighted similarity of two products, 0-100 with 2 decimals."""
    score = (
        price_similarity(product.price_cents, competitor.price_cents) * 100 * PRICE_WEIGHT
        + description_similarity(product.short_description, competitor.short_description) * 100 * DESCRIPTION_WEIGHT
        + metrics_similarity(product, competitor) * 100 * METRICS_WEIGHT
    )
    return round_to_cents(score)


def market_overlap_score(product: Product, competitor: Product) -> float:
    """How strongly two same-category products compete for buyers, 0-100.

    Same category gives 50 points, a price ratio above 0.5 adds up to 25,
    and description overlap adds a quarter of its percentage.
    """
    score = SAME_CATEGORY_POINTS

    ratio = price_similarity(product.price_cents, competitor.price_cents)
    if ratio > PRICE_RANGE_MIN_RATIO:
        score += PRICE_RANGE_POINTS * ratio

    description = description_similarity(product.short_description, competitor.short_description)
    score += description * 100 * TARGET_MARKET_SHARE

    return round_to_cents(score)
