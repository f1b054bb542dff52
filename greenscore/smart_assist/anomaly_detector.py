# -*- coding: utf-8 -*-
"""
Anomaly Detector Engine - Smart Assist

Rule-based data-quality checks on a single activity record and duplicate
detection against an activity history. Findings are returned as
AnomalyDetection records graded by severity; they are never raised.

Rules:
    - Missing or zero quantity          -> missing_data, high
    - Missing or unparsable period      -> missing_data, medium
    - Negative quantity                 -> suspicious_value, high
    - Amount above the outlier ceiling  -> outlier, medium
    - Period end before period start    -> inconsistent, high
    - Period longer than max_period_days -> suspicious_value, low
    - Same supplier, period start and category as a history record
      -> duplicate, high when quantities match within epsilon, else medium

Example:
    >>> from greenscore.smart_assist.anomaly_detector import AnomalyDetector
    >>> from greenscore.models import ActivityRecord
    >>> detector = AnomalyDetector()
    >>> [a.type.value for a in detector.detect(ActivityRecord(category="diesel"))]
    ['missing_data', 'missing_data']

Author: GreenScore Platform Team
Status: Production Ready
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, List, Optional

from greenscore.config import GreenScoreConfig, get_config
from greenscore.metrics import record_anomaly
from greenscore.models import ActivityRecord, AnomalyDetection, AnomalyType, Severity

logger = logging.getLogger(__name__)


def parse_period_date(value: Optional[str]) -> Optional[date]:
    """Parse an ISO date or datetime string; None when absent or invalid."""
    if not value or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip()).date()
    except ValueError:
        return None


class AnomalyDetector:
    """Applies the anomaly rules with thresholds from the configuration."""

    def __init__(self, config: Optional[GreenScoreConfig] = None) -> None:
        self.config = config or get_config()
        logger.info(
            "AnomalyDetector initialized: outlier_ceiling=%.0f, max_period=%dd",
            self.config.outlier_amount_ceiling, self.config.max_period_days,
        )

    def detect(self, record: ActivityRecord) -> List[AnomalyDetection]:
        """
        Run every single-record rule.

        Args:
            record: Activity to check.

        Returns:
            Anomalies in rule order; empty when the record is clean.
        """
        anomalies: List[AnomalyDetection] = []

        if record.quantity is None or record.quantity == 0:
            anomalies.append(AnomalyDetection(
                type=AnomalyType.MISSING_DATA,
                severity=Severity.HIGH,
                message="Quantity is missing or zero",
                field="quantity",
                suggestion="Enter the consumed quantity from the source document",
            ))

        start = parse_period_date(record.period_start)
        end = parse_period_date(record.period_end)
        if start is None or end is None:
            anomalies.append(AnomalyDetection(
                type=AnomalyType.MISSING_DATA,
                severity=Severity.MEDIUM,
                message="Consumption period is missing or invalid",
                field="period_start",
                suggestion="Enter the period start and end dates (YYYY-MM-DD)",
            ))

        if record.quantity is not None and record.quantity < 0:
            anomalies.append(AnomalyDetection(
                type=AnomalyType.SUSPICIOUS_VALUE,
                severity=Severity.HIGH,
                message=f"Negative quantity: {record.quantity}",
                field="quantity",
                suggestion="Check the sign of the quantity; credit notes are entered separately",
            ))

        ceiling = self.config.outlier_amount_ceiling
        if record.monetary_amount is not None and record.monetary_amount > ceiling:
            anomalies.append(AnomalyDetection(
                type=AnomalyType.OUTLIER,
                severity=Severity.MEDIUM,
                message=f"Amount {record.monetary_amount} exceeds {ceiling:.0f}",
                field="monetary_amount",
                suggestion="Check the amount and its currency",
            ))

        if start is not None and end is not None:
            if end < start:
                anomalies.append(AnomalyDetection(
                    type=AnomalyType.INCONSISTENT,
                    severity=Severity.HIGH,
                    message="Period end is before period start",
                    field="period_end",
                    suggestion="Swap or correct the period dates",
                ))
            elif (end - start).days > self.config.max_period_days:
                anomalies.append(AnomalyDetection(
                    type=AnomalyType.SUSPICIOUS_VALUE,
                    severity=Severity.LOW,
                    message=f"Period of {(end - start).days} days exceeds {self.config.max_period_days} days",
                    field="period_end",
                    suggestion="Split the record into periods of one year or less",
                ))

        for anomaly in anomalies:
            record_anomaly(anomaly.type.value, anomaly.severity.value)
        if anomalies:
            logger.debug(
                "Record %s: %d anomalies (%s)",
                record.id or record.category, len(anomalies),
                ", ".join(a.type.value for a in anomalies),
            )
        return anomalies

    def check_duplicates(
        self,
        record: ActivityRecord,
        history: Iterable[ActivityRecord],
    ) -> List[AnomalyDetection]:
        """
        Compare a record against an activity history.

        A history entry is a duplicate when it has the same supplier, the
        same period start and the same GHG category (falling back to the
        activity category). Entries sharing the record's non-empty id are
        the record itself and are skipped.

        Returns:
            One duplicate anomaly per matching history entry.
        """
        if not record.supplier_name or not record.period_start:
            return []

        category = record.ghg_category or record.category
        quantity = record.quantity or 0.0
        anomalies: List[AnomalyDetection] = []

        for other in history:
            if record.id and other.id == record.id:
                continue
            if (
                other.supplier_name != record.supplier_name
                or other.period_start != record.period_start
                or (other.ghg_category or other.category) != category
            ):
                continue
            same_quantity = abs(quantity - (other.quantity or 0.0)) < self.config.duplicate_quantity_epsilon
            severity = Severity.HIGH if same_quantity else Severity.MEDIUM
            anomalies.append(AnomalyDetection(
                type=AnomalyType.DUPLICATE,
                severity=severity,
                message=(
                    f"Possible duplicate of record {other.id or '(unsaved)'}: "
                    f"same supplier, period and category"
                ),
                field="supplier_name",
                suggestion="Check that this document was not already entered",
            ))
            record_anomaly(AnomalyType.DUPLICATE.value, severity.value)

        return anomalies


__all__ = ["AnomalyDetector", "parse_period_date"]
