# -*- coding: utf-8 -*-
"""
Batch Calculator

Element-wise application of the single-record calculator over a list of
activities. Records are independent, so they are calculated on a thread
pool.

Features:
- Results keep input order
- Error isolation (one failing record does not stop the batch)
- Per-scope totals
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from greenscore.calculation.core_calculator import EmissionsCalculator
from greenscore.config import GreenScoreConfig, get_config
from greenscore.metrics import observe_duration
from greenscore.models import ActivityRecord, CalculationResult, GHGScope, ScopeTotals

logger = logging.getLogger(__name__)


@dataclass
class BatchItem:
    """Outcome for one activity of a batch."""

    index: int
    activity: ActivityRecord
    result: Optional[CalculationResult] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.result is not None


@dataclass
class BatchResult:
    """
    Result of a batch calculation.

    Attributes:
        items: One BatchItem per input activity, in input order.
        duration_seconds: Wall-clock time of the batch.
    """

    items: List[BatchItem]
    duration_seconds: float = 0.0
    totals: ScopeTotals = field(default_factory=ScopeTotals)

    def __post_init__(self):
        self.totals = calculate_scope_totals(self.results)

    @property
    def results(self) -> List[CalculationResult]:
        return [item.result for item in self.items if item.result is not None]

    @property
    def successful_count(self) -> int:
        return sum(1 for item in self.items if item.succeeded)

    @property
    def failed_count(self) -> int:
        return sum(1 for item in self.items if not item.succeeded)

    def get_failed(self) -> List[BatchItem]:
        return [item for item in self.items if not item.succeeded]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_calculations": len(self.items),
            "successful_count": self.successful_count,
            "failed_count": self.failed_count,
            "total_emissions_kg_co2e": self.totals.total,
            "total_emissions_tonnes_co2e": self.totals.total / 1000,
            "scope_totals": self.totals.model_dump(),
            "duration_seconds": self.duration_seconds,
        }


def calculate_scope_totals(results: Iterable[CalculationResult]) -> ScopeTotals:
    """Sum emissions (kg) per GHG scope, plus the overall total."""
    sums = {scope: 0.0 for scope in GHGScope}
    for result in results:
        sums[result.ghg_scope] += result.co2_equivalent_kg
    return ScopeTotals(
        scope1=sums[GHGScope.SCOPE1],
        scope2=sums[GHGScope.SCOPE2],
        scope3=sums[GHGScope.SCOPE3],
        total=sum(sums.values()),
    )


class BatchCalculator:
    """Thread-pool batch calculator."""

    def __init__(
        self,
        calculator: Optional[EmissionsCalculator] = None,
        max_workers: Optional[int] = None,
        config: Optional[GreenScoreConfig] = None,
    ):
        """
        Initialize batch calculator.

        Args:
            calculator: Single-record calculator (auto-created if None).
            max_workers: Pool size, defaults to ``config.batch_max_workers``.
            config: Active configuration.
        """
        self.config = config or get_config()
        self.calculator = calculator or EmissionsCalculator(config=self.config)
        self.max_workers = max_workers or self.config.batch_max_workers

    def calculate_batch(self, activities: List[ActivityRecord]) -> BatchResult:
        """
        Calculate every activity.

        Args:
            activities: Activities to calculate.

        Returns:
            BatchResult whose items are in input order. A record whose
            calculation raised is kept as a failed item with its error.
        """
        start = time.perf_counter()
        logger.info("Starting batch calculation: %d activities", len(activities))

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self._safe_calculate, index, activity)
                for index, activity in enumerate(activities)
            ]
            items = [future.result() for future in futures]

        duration = time.perf_counter() - start
        observe_duration("calculate_batch", duration)
        batch = BatchResult(items=items, duration_seconds=duration)
        logger.info(
            "Batch calculation completed: %d ok, %d failed, %.3f kgCO2e in %.2fs",
            batch.successful_count, batch.failed_count, batch.totals.total, duration,
        )
        return batch

    def _safe_calculate(self, index: int, activity: ActivityRecord) -> BatchItem:
        try:
            return BatchItem(index=index, activity=activity, result=self.calculator.calculate(activity))
        except Exception as e:
            logger.error("Calculation failed for activity %d (%s): %s", index, activity.category, e)
            return BatchItem(index=index, activity=activity, error=f"Calculation failed: {e}")


__all__ = ["BatchItem", "BatchResult", "BatchCalculator", "calculate_scope_totals"]
