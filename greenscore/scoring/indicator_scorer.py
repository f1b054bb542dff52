# -*- coding: utf-8 -*-
"""
Indicator Scorer

Normalizes one ESG indicator value into a 0-100 score against its
benchmark {min, max, optimal, inverse}.

    binary              True -> 100, anything else -> 0
    numeric/calculated  no value -> 0, no benchmark -> 50
    normal curve        v >= optimal -> 100, v <= min -> 0, linear between
    inverse curve       v <= optimal -> 100, v >= max -> 0, linear between

The result is multiplied by the sector materiality multiplier and clamped
to [0, 100].
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from greenscore.models import Benchmark, Indicator, IndicatorType
from greenscore.reference_data import load_benchmarks, load_esg_reference

logger = logging.getLogger(__name__)

#: Score of a valued indicator that has no benchmark.
NEUTRAL_SCORE = 50.0


def clamp_score(value: float) -> float:
    return max(0.0, min(100.0, value))


def curve_score(value: float, benchmark: Benchmark) -> float:
    """Raw (unclamped, unweighted) position of a value on its benchmark curve."""
    if benchmark.inverse:
        if value <= benchmark.optimal:
            return 100.0
        if value >= benchmark.max:
            return 0.0
        return 100.0 * (benchmark.max - value) / (benchmark.max - benchmark.optimal)

    if value >= benchmark.optimal:
        return 100.0
    if value <= benchmark.min:
        return 0.0
    return 100.0 * (value - benchmark.min) / (benchmark.optimal - benchmark.min)


def score_indicator(
    indicator: Indicator,
    benchmark: Optional[Benchmark] = None,
    multiplier: float = 1.0,
) -> float:
    """
    Score one indicator.

    Args:
        indicator: Indicator with its current value.
        benchmark: Scoring curve; None means no reference range.
        multiplier: Sector materiality multiplier.

    Returns:
        Score in [0, 100].
    """
    if indicator.type == IndicatorType.BINARY:
        raw = 100.0 if indicator.value is True else 0.0
    elif indicator.value is None:
        raw = 0.0
    elif benchmark is None:
        raw = NEUTRAL_SCORE
    else:
        raw = curve_score(float(indicator.value), benchmark)
    return clamp_score(raw * multiplier)


def sector_multiplier(indicator_id: str, sector: Optional[str]) -> float:
    """Materiality multiplier of an indicator for a sector (1.0 when unlisted)."""
    if not sector:
        return 1.0
    multipliers = load_esg_reference()["sector_multipliers"]
    return float(multipliers.get(sector.strip().lower(), {}).get(indicator_id, 1.0))


class IndicatorScorer:
    """Scores indicators against a benchmark table (packaged by default)."""

    def __init__(self, benchmarks: Optional[Dict[str, Benchmark]] = None):
        self.benchmarks = benchmarks if benchmarks is not None else load_benchmarks()

    def benchmark_for(self, indicator_id: str) -> Optional[Benchmark]:
        return self.benchmarks.get(indicator_id)

    def score(self, indicator: Indicator, multiplier: float = 1.0) -> float:
        return score_indicator(indicator, self.benchmark_for(indicator.id), multiplier)


__all__ = [
    "NEUTRAL_SCORE",
    "clamp_score",
    "curve_score",
    "score_indicator",
    "sector_multiplier",
    "IndicatorScorer",
]
