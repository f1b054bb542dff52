# -*- coding: utf-8 -*-
"""
ESG Score Aggregator

Category (E/S/G) and total ESG scoring:

- Category score: weighted mean of indicator scores, where each weight is
  the indicator weight (1 when unset) times the sector multiplier. A
  category whose weights sum to 0 scores 0.
- Total score: sum of category score times category weight. Weights come
  either entirely from the caller (percentages, divided by 100) or
  entirely from the categories and configuration defaults, never mixed.
- Grade: first band, ordered by descending minimum, whose minimum is at
  most the total.

Calculated indicators (E2 energy intensity, E8 carbon intensity) are
recomputed from their inputs and revenue on every scoring pass.

Example:
    >>> from greenscore.scoring.aggregator import build_default_categories, score_esg
    >>> report = score_esg(build_default_categories(), sector="textile", revenue=5_000_000)
    >>> report.grade
    'CCC'

Author: GreenScore Platform Team
Status: Production Ready
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from greenscore.config import GreenScoreConfig, get_config
from greenscore.exceptions import ConfigurationError, ValidationError
from greenscore.metrics import observe_duration, record_esg_score
from greenscore.models import Category, CategoryId, CustomWeights, GradeBand, Indicator, ScoreReport
from greenscore.provenance import compute_hash, get_provenance_tracker
from greenscore.reference_data import load_esg_reference, load_grade_bands
from greenscore.scoring.indicator_scorer import IndicatorScorer, clamp_score, sector_multiplier

logger = logging.getLogger(__name__)

WeightsInput = Union[CustomWeights, Mapping[str, Any]]


# ---------------------------------------------------------------------------
# Category score
# ---------------------------------------------------------------------------


def aggregate_category(
    indicators: List[Indicator],
    sector: Optional[str] = None,
    scorer: Optional[IndicatorScorer] = None,
) -> float:
    """
    Weighted mean of indicator scores for one category.

    Indicators are scored without a multiplier; the sector multiplier only
    enters through the weights.
    """
    scorer = scorer or IndicatorScorer()
    weighted_sum = 0.0
    weight_total = 0.0
    for indicator in indicators:
        base = 1.0 if indicator.weight is None else indicator.weight
        weight = base * sector_multiplier(indicator.id, sector)
        weighted_sum += scorer.score(indicator) * weight
        weight_total += weight
    if weight_total == 0:
        return 0.0
    return weighted_sum / weight_total


# ---------------------------------------------------------------------------
# Total score
# ---------------------------------------------------------------------------


def _parse_custom_weights(custom_weights: WeightsInput) -> CustomWeights:
    if isinstance(custom_weights, CustomWeights):
        return custom_weights
    try:
        return CustomWeights(**{str(k).lower(): v for k, v in custom_weights.items()})
    except PydanticValidationError as e:
        raise ConfigurationError(
            message=f"Invalid custom ESG weights: {e.error_count()} error(s)",
            component="ScoreAggregator",
            context={
                "weights": dict(custom_weights),
                "errors": [f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()],
            },
        ) from e


def grade_for(total_score: float, bands: Optional[List[GradeBand]] = None) -> GradeBand:
    """Highest grade band whose minimum is at most the score."""
    bands = bands if bands is not None else load_grade_bands()
    for band in bands:
        if band.min <= total_score:
            return band
    return bands[-1]


def aggregate_total(
    categories: List[Category],
    sector: Optional[str] = None,
    custom_weights: Optional[WeightsInput] = None,
    config: Optional[GreenScoreConfig] = None,
    scorer: Optional[IndicatorScorer] = None,
) -> ScoreReport:
    """
    Combine category scores into the total score and grade.

    Args:
        categories: E/S/G categories with their indicators.
        sector: Sector key used for materiality multipliers.
        custom_weights: Optional ``{e, s, g}`` percentages replacing every
            default weight.
        config: Configuration holding the default E/S/G weights.
        scorer: Indicator scorer (packaged benchmarks by default).

    Returns:
        ScoreReport without a provenance hash.

    Raises:
        ConfigurationError: If custom weights miss a key, are negative or
            carry unknown keys.
        ValidationError: If two categories share the same id.
    """
    config = config or get_config()
    scorer = scorer or IndicatorScorer()

    category_scores: Dict[str, float] = {}
    for category in categories:
        if category.id.value in category_scores:
            raise ValidationError(
                message=f"Duplicate category id: {category.id.value}",
                component="ScoreAggregator",
                invalid_fields={"id": category.id.value},
            )
        category_scores[category.id.value] = aggregate_category(category.indicators, sector, scorer)

    if custom_weights is not None:
        parsed = _parse_custom_weights(custom_weights)
        percentages = {"E": parsed.e, "S": parsed.s, "G": parsed.g}
        weights = parsed.as_fractions()
        total = sum(category_scores.get(cid, 0.0) * pct for cid, pct in percentages.items()) / 100
    else:
        weights = config.default_category_weights()
        for category in categories:
            if category.weight is not None:
                weights[category.id.value] = category.weight
        total = sum(category_scores.get(cid, 0.0) * w for cid, w in weights.items())

    total = clamp_score(total)
    band = grade_for(total)
    return ScoreReport(
        total_score=total,
        category_scores=category_scores,
        grade=band.grade,
        grade_label=band.label,
        sector=sector or "",
        weights_used=weights,
    )


# ---------------------------------------------------------------------------
# Calculated indicators
# ---------------------------------------------------------------------------


def _indicator(categories: List[Category], indicator_id: str) -> Optional[Indicator]:
    for category in categories:
        for indicator in category.indicators:
            if indicator.id == indicator_id:
                return indicator
    return None


def _numeric(indicator: Optional[Indicator]) -> Optional[float]:
    if indicator is None or indicator.value is None or isinstance(indicator.value, bool):
        return None
    return float(indicator.value)


def calculate_automatic_kpis(categories: List[Category], revenue: float) -> List[Category]:
    """
    Recompute calculated indicators in place.

    - E2 energy intensity = E1 / revenue
    - E8 carbon intensity = (E6 + E7) / (revenue / 1e6)

    Nothing is changed when revenue is 0 or less, or when the inputs of
    an indicator are all missing.

    Returns:
        The same categories, for chaining.
    """
    if revenue is None or revenue <= 0:
        return categories

    e2 = _indicator(categories, "E2")
    e1 = _numeric(_indicator(categories, "E1"))
    if e2 is not None and e1 is not None:
        e2.value = e1 / revenue

    e8 = _indicator(categories, "E8")
    e6 = _numeric(_indicator(categories, "E6"))
    e7 = _numeric(_indicator(categories, "E7"))
    if e8 is not None and (e6 is not None or e7 is not None):
        e8.value = ((e6 or 0.0) + (e7 or 0.0)) / (revenue / 1e6)

    return categories


def build_default_categories() -> List[Category]:
    """Empty E/S/G categories holding the packaged indicator schema."""
    categories = []
    for pillar in load_esg_reference()["schema"]:
        categories.append(Category(
            id=CategoryId(pillar["id"]),
            label=pillar.get("label", ""),
            indicators=[Indicator(**item) for item in pillar["indicators"]],
        ))
    return categories


# ---------------------------------------------------------------------------
# Full scoring pass
# ---------------------------------------------------------------------------


def score_esg(
    categories: List[Category],
    sector: Optional[str] = None,
    revenue: float = 0.0,
    custom_weights: Optional[WeightsInput] = None,
    config: Optional[GreenScoreConfig] = None,
    scorer: Optional[IndicatorScorer] = None,
) -> ScoreReport:
    """
    Complete ESG scoring pass.

    Recomputes calculated indicators, scores every indicator, aggregates
    categories and the total, then attaches a provenance hash. The report
    is always rebuilt as a whole.

    Raises:
        ConfigurationError: On malformed custom weights.
    """
    config = config or get_config()
    start = time.perf_counter()

    calculate_automatic_kpis(categories, revenue)
    report = aggregate_total(categories, sector, custom_weights, config, scorer)

    weights_payload = (
        custom_weights.model_dump() if isinstance(custom_weights, CustomWeights)
        else dict(custom_weights) if custom_weights is not None else None
    )
    provenance_hash = compute_hash({
        "categories": [c.model_dump(mode="json") for c in categories],
        "sector": sector,
        "revenue": revenue,
        "custom_weights": weights_payload,
        "report": report.model_dump(mode="json", exclude={"provenance_hash"}),
    })
    report = report.model_copy(update={"provenance_hash": provenance_hash})

    if config.enable_provenance:
        get_provenance_tracker().record("esg_score", sector or "all", "score", provenance_hash)
    record_esg_score(report.grade)
    observe_duration("score_esg", time.perf_counter() - start)

    logger.info(
        "ESG score computed: %.1f (%s) sector=%s E=%.1f S=%.1f G=%.1f",
        report.total_score, report.grade, sector or "-",
        report.category_scores.get("E", 0.0),
        report.category_scores.get("S", 0.0),
        report.category_scores.get("G", 0.0),
    )
    return report


__all__ = [
    "aggregate_category",
    "aggregate_total",
    "grade_for",
    "calculate_automatic_kpis",
    "build_default_categories",
    "score_esg",
]
