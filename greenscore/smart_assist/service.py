# -*- coding: utf-8 -*-
"""
Smart Assist Service

Combines scope and category inference, a factor suggestion, anomaly
detection and missing-field suggestions into one SmartAssistResult with
an overall confidence and a recommendation badge.

    overall = 0.3 * scope + 0.4 * category + 0.3 * factor

Badge: manual_required whenever a high-severity anomaly exists, else
high (>= 0.8), medium (>= 0.6), low (>= 0.4), manual_required.
"""

from __future__ import annotations

import logging
import time
from datetime import date
from typing import Iterable, List, Optional

from greenscore.calculation.factor_resolver import FactorResolver
from greenscore.config import GreenScoreConfig, get_config
from greenscore.metrics import observe_duration, record_classification
from greenscore.models import (
    UNKNOWN_CATEGORY,
    ActivityRecord,
    AnomalyDetection,
    CategorySuggestion,
    ConfidenceBadge,
    FactorSuggestion,
    FieldSuggestion,
    Severity,
    SmartAssistResult,
)
from greenscore.reference_data import load_smart_assist_rules
from greenscore.smart_assist.anomaly_detector import AnomalyDetector
from greenscore.smart_assist.classifier import infer_category, infer_scope

logger = logging.getLogger(__name__)

SCOPE_WEIGHT = 0.3
CATEGORY_WEIGHT = 0.4
FACTOR_WEIGHT = 0.3

#: Factor confidence used when no factor could be suggested.
NO_FACTOR_CONFIDENCE = 0.5

#: (minimum overall confidence, badge), highest first.
BADGE_THRESHOLDS = (
    (0.8, ConfidenceBadge.HIGH),
    (0.6, ConfidenceBadge.MEDIUM),
    (0.4, ConfidenceBadge.LOW),
)


def overall_confidence(scope: float, category: float, factor: float) -> float:
    return SCOPE_WEIGHT * scope + CATEGORY_WEIGHT * category + FACTOR_WEIGHT * factor


def recommendation_badge(confidence: float, anomalies: Iterable[AnomalyDetection]) -> ConfidenceBadge:
    """Badge for an overall confidence, forced to manual on a high anomaly."""
    if any(a.severity == Severity.HIGH for a in anomalies):
        return ConfidenceBadge.MANUAL_REQUIRED
    for minimum, badge in BADGE_THRESHOLDS:
        if confidence >= minimum:
            return badge
    return ConfidenceBadge.MANUAL_REQUIRED


def field_suggestions(record: ActivityRecord, category: CategorySuggestion) -> List[FieldSuggestion]:
    """Values proposed for fields missing from the record."""
    suggestions: List[FieldSuggestion] = []

    if not record.unit.strip():
        unit = load_smart_assist_rules()["category_units"].get(category.category)
        if unit:
            suggestions.append(FieldSuggestion(
                field="unit",
                suggested_value=unit,
                confidence=0.80,
                reason=f"Standard unit for category '{category.category}'",
            ))

    if not record.period_start:
        first_of_month = date.today().replace(day=1)
        suggestions.append(FieldSuggestion(
            field="period_start",
            suggested_value=first_of_month.isoformat(),
            confidence=0.50,
            reason="First day of the current month",
        ))

    return suggestions


class SmartAssistService:
    """
    Classification service for incoming activity records.

    Attributes:
        resolver: Factor resolver used for the factor suggestion.
        detector: Anomaly detector.
    """

    def __init__(
        self,
        resolver: Optional[FactorResolver] = None,
        detector: Optional[AnomalyDetector] = None,
        config: Optional[GreenScoreConfig] = None,
    ):
        self.config = config or get_config()
        self.resolver = resolver or FactorResolver(config=self.config)
        self.detector = detector or AnomalyDetector(config=self.config)
        logger.info("SmartAssistService initialized")

    def suggest_factor(
        self,
        record: ActivityRecord,
        category: CategorySuggestion,
    ) -> Optional[FactorSuggestion]:
        """Resolve a factor for the suggested category; None when unknown."""
        if category.category == UNKNOWN_CATEGORY:
            return None
        probe = ActivityRecord(
            category=category.category,
            unit=record.unit,
            country_code=record.country_code,
            subcategory=record.subcategory,
            monetary_amount=record.monetary_amount,
            description=record.description,
        )
        factor = self.resolver.resolve(probe)
        return FactorSuggestion(
            factor_value=factor.factor_value,
            factor_unit=factor.factor_unit,
            source_name=factor.source_name,
            method=factor.method,
            confidence=factor.confidence_score,
        )

    def classify(
        self,
        record: ActivityRecord,
        document_type: Optional[str] = None,
        history: Optional[Iterable[ActivityRecord]] = None,
    ) -> SmartAssistResult:
        """
        Classify a record.

        Args:
            record: Activity to classify.
            document_type: Optional document type hint (e.g. ``fuel_invoice``).
            history: Optional previous records for duplicate detection.

        Returns:
            SmartAssistResult with suggestions, anomalies, confidence and badge.
        """
        start = time.perf_counter()

        scope = infer_scope(record, document_type)
        category = infer_category(record, document_type)
        factor = self.suggest_factor(record, category)

        anomalies = self.detector.detect(record)
        if history is not None:
            anomalies.extend(self.detector.check_duplicates(record, history))

        factor_confidence = factor.confidence if factor is not None else NO_FACTOR_CONFIDENCE
        confidence = overall_confidence(scope.confidence, category.confidence, factor_confidence)
        badge = recommendation_badge(confidence, anomalies)

        result = SmartAssistResult(
            scope_suggestion=scope,
            category_suggestion=category,
            emission_factor_suggestion=factor,
            anomalies=anomalies,
            field_suggestions=field_suggestions(record, category),
            overall_confidence=confidence,
            badge=badge,
        )

        record_classification(badge.value)
        observe_duration("classify", time.perf_counter() - start)
        logger.info(
            "Classified %s: %s / %s, confidence=%.2f, badge=%s, anomalies=%d",
            record.id or record.category, scope.scope.value, category.category,
            confidence, badge.value, len(anomalies),
        )
        return result


__all__ = [
    "SmartAssistService",
    "overall_confidence",
    "recommendation_badge",
    "field_suggestions",
]
