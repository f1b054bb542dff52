"""
GreenScore Smart Assist

Rule-based assistance for incoming activity records: GHG scope and
category inference, factor suggestion, anomaly and duplicate detection,
and a recommendation badge.
"""

from greenscore.smart_assist.classifier import infer_category, infer_scope
from greenscore.smart_assist.anomaly_detector import AnomalyDetector, parse_period_date
from greenscore.smart_assist.service import (
    SmartAssistService,
    field_suggestions,
    overall_confidence,
    recommendation_badge,
)

__all__ = [
    "infer_category",
    "infer_scope",
    "AnomalyDetector",
    "parse_period_date",
    "SmartAssistService",
    "field_suggestions",
    "overall_confidence",
    "recommendation_badge",
]
