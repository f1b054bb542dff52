"""
GreenScore ESG Scoring

Indicator scoring against benchmarks, E/S/G aggregation, total score and
grade, plus materiality, alert and sector-comparison insights.
"""

from greenscore.scoring.indicator_scorer import IndicatorScorer, score_indicator, sector_multiplier
from greenscore.scoring.aggregator import (
    aggregate_category,
    aggregate_total,
    build_default_categories,
    calculate_automatic_kpis,
    grade_for,
    score_esg,
)
from greenscore.scoring.insights import (
    compare_to_sector,
    generate_esg_alerts,
    generate_materiality_matrix,
    get_sector_benchmarks,
)

__all__ = [
    "IndicatorScorer",
    "score_indicator",
    "sector_multiplier",
    "aggregate_category",
    "aggregate_total",
    "build_default_categories",
    "calculate_automatic_kpis",
    "grade_for",
    "score_esg",
    "compare_to_sector",
    "generate_esg_alerts",
    "generate_materiality_matrix",
    "get_sector_benchmarks",
]
