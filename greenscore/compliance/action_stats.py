# -*- coding: utf-8 -*-
"""
RSE Action Backlog Statistics

Environmental ROI, CSRD progress, regional impact and budget figures over
an action backlog.

The environmental ROI keeps the historical reporting formula

    roi = ((co2_avoided * carbon_price - investment) / investment) * 100

over completed Environment actions; it is 0 when nothing was invested.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from greenscore.config import GreenScoreConfig, get_config
from greenscore.models import ActionRecord, ActionStatus, BudgetStats, CategoryId, EnvironmentalROI

logger = logging.getLogger(__name__)

CSRD_MARKER = "CSRD"


def calculate_environmental_roi(
    actions: List[ActionRecord],
    config: Optional[GreenScoreConfig] = None,
) -> EnvironmentalROI:
    """
    Carbon value generated by completed Environment actions.

    Args:
        actions: Action backlog.
        config: Configuration holding ``carbon_price_per_tonne``.

    Returns:
        EnvironmentalROI with investment, tCO2e avoided, ROI percent and
        the carbon value per tonne used.
    """
    config = config or get_config()
    completed = [
        a for a in actions
        if a.category == CategoryId.E and a.status == ActionStatus.DONE
    ]
    investment = sum(a.cost_estimated for a in completed)
    avoided = sum(a.co2_reduction_target or 0.0 for a in completed)
    price = config.carbon_price_per_tonne

    roi = 0.0
    if investment > 0:
        roi = ((avoided * price - investment) / investment) * 100

    logger.debug(
        "Environmental ROI: %d actions, investment=%.2f, avoided=%.2f t, roi=%.1f%%",
        len(completed), investment, avoided, roi,
    )
    return EnvironmentalROI(
        total_investment=investment,
        total_co2_avoided=avoided,
        roi_percent=roi,
        value_per_tonne=price,
    )


def calculate_csrd_progress(actions: List[ActionRecord]) -> int:
    """Percentage of CSRD-referenced actions that are done (0 when none)."""
    csrd = [
        a for a in actions
        if any(CSRD_MARKER in ref for ref in a.legislation_refs)
    ]
    if not csrd:
        return 0
    done = sum(1 for a in csrd if a.status == ActionStatus.DONE)
    return round(done / len(csrd) * 100)


def count_regional_impact_actions(actions: List[ActionRecord]) -> int:
    return sum(1 for a in actions if a.regional_impact)


def calculate_budget_stats(actions: List[ActionRecord]) -> BudgetStats:
    """Allocated budget (all actions) and spent budget (done actions)."""
    return BudgetStats(
        allocated=sum(a.cost_estimated for a in actions),
        spent=sum(a.cost_estimated for a in actions if a.status == ActionStatus.DONE),
    )


__all__ = [
    "calculate_environmental_roi",
    "calculate_csrd_progress",
    "count_regional_impact_actions",
    "calculate_budget_stats",
]
