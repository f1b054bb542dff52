# -*- coding: utf-8 -*-
"""
ESG Insights

Read-only analyses over a scored ESG dataset:

- Double-materiality matrix (environmental impact vs financial risk)
- Regulatory and performance alerts (CBAM exposure, Tunisian RSE law,
  water stress, gender pay gap, environmental performance)
- Sector benchmarks and the gap of a score report to its sector
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from greenscore.models import (
    Category,
    CategoryId,
    EsgAlert,
    EsgAlertType,
    Indicator,
    MaterialityPoint,
    ScoreReport,
    SectorBenchmark,
    SectorComparison,
)
from greenscore.reference_data import load_compliance_rules, load_esg_reference

logger = logging.getLogger(__name__)


def _index(categories: List[Category]) -> Dict[str, Indicator]:
    return {i.id: i for c in categories for i in c.indicators}


def _number(indicators: Mapping[str, Indicator], indicator_id: str) -> Optional[float]:
    indicator = indicators.get(indicator_id)
    if indicator is None or indicator.value is None or isinstance(indicator.value, bool):
        return None
    return float(indicator.value)


# ---------------------------------------------------------------------------
# Materiality
# ---------------------------------------------------------------------------


def generate_materiality_matrix(categories: List[Category]) -> List[MaterialityPoint]:
    """Materiality positions of every valued indicator listed in the table."""
    positions = load_esg_reference()["materiality"]
    points = []
    for category in categories:
        for indicator in category.indicators:
            position = positions.get(indicator.id)
            if position is None or indicator.value is None:
                continue
            points.append(MaterialityPoint(
                id=indicator.id,
                label=indicator.label or indicator.id,
                environmental_impact=position["environmental_impact"],
                financial_risk=position["financial_risk"],
                category=CategoryId(position["category"]),
            ))
    return points


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------


def _alert(alert_id: str, rule: Dict[str, Any], **values: Any) -> EsgAlert:
    return EsgAlert(
        id=alert_id,
        type=EsgAlertType(rule["type"]),
        title=rule["title"],
        description=rule["description"].format(**values),
        regulation=rule["regulation"],
        action=rule.get("action"),
    )


def generate_esg_alerts(
    categories: List[Category],
    category_scores: Mapping[str, float],
) -> List[EsgAlert]:
    """
    Regulatory and performance alerts for an ESG dataset.

    Args:
        categories: Categories with indicator values.
        category_scores: Category scores keyed by E/S/G.

    Returns:
        Alerts in a fixed order; regenerated from scratch on each call.
    """
    rules = load_compliance_rules()["esg_alerts"]
    indicators = _index(categories)
    alerts: List[EsgAlert] = []

    rule = rules["macf-exposure"]
    emissions = (_number(indicators, "E6") or 0.0) + (_number(indicators, "E7") or 0.0)
    if emissions > rule["threshold"]:
        alerts.append(_alert("macf-exposure", rule, value=emissions))

    g4 = indicators.get("G4")
    g5 = indicators.get("G5")
    if g4 is None or g4.value is not True or g5 is None or g5.value is not True:
        alerts.append(_alert("rse-tunisia", rules["rse-tunisia"]))

    rule = rules["water-stress"]
    water = _number(indicators, "E4")
    recycling = _number(indicators, "E5") or 0.0
    if water is not None and water > rule["max_consumption"] and recycling < rule["min_recycling"]:
        alerts.append(_alert("water-stress", rule, value=water, recycling=recycling))

    rule = rules["gender-equality"]
    pay_gap = _number(indicators, "S3")
    if pay_gap is not None and pay_gap > rule["threshold"]:
        alerts.append(_alert("gender-equality", rule, value=pay_gap))

    rule = rules["env-performance"]
    e_score = category_scores.get("E", 0.0)
    if e_score >= rule["threshold"]:
        alerts.append(_alert("env-performance", rule, value=e_score))

    logger.debug("Generated %d ESG alerts", len(alerts))
    return alerts


# ---------------------------------------------------------------------------
# Sector comparison
# ---------------------------------------------------------------------------


def get_sector_benchmarks() -> List[SectorBenchmark]:
    return [
        SectorBenchmark(sector=sector, **values)
        for sector, values in load_esg_reference()["sector_benchmarks"].items()
    ]


def get_sector_benchmark(sector: Optional[str]) -> Optional[SectorBenchmark]:
    key = (sector or "").strip().lower()
    for benchmark in get_sector_benchmarks():
        if benchmark.sector == key:
            return benchmark
    return None


def compare_to_sector(report: ScoreReport, sector: Optional[str] = None) -> Optional[SectorComparison]:
    """
    Position a score report against its sector benchmark.

    Args:
        report: Computed score report.
        sector: Sector key; defaults to the report's sector.

    Returns:
        SectorComparison (positive gaps mean above the benchmark), or None
        when the sector has no benchmark.
    """
    benchmark = get_sector_benchmark(sector or report.sector)
    if benchmark is None:
        return None
    pillars = {"E": benchmark.e_score, "S": benchmark.s_score, "G": benchmark.g_score}
    return SectorComparison(
        sector=benchmark.sector,
        total_score=report.total_score,
        avg_score=benchmark.avg_score,
        top_score=benchmark.top_score,
        gap_to_average=report.total_score - benchmark.avg_score,
        gap_to_top=report.total_score - benchmark.top_score,
        category_gaps={
            cid: report.category_scores.get(cid, 0.0) - avg for cid, avg in pillars.items()
        },
    )


__all__ = [
    "generate_materiality_matrix",
    "generate_esg_alerts",
    "get_sector_benchmarks",
    "get_sector_benchmark",
    "compare_to_sector",
]
