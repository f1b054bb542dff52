# -*- coding: utf-8 -*-
"""
Prometheus Metrics - GreenScore

10 Prometheus metrics for emissions, scoring and compliance monitoring.
Every helper is a no-op when ``enable_metrics`` is false in the active
configuration.

Metrics:
    1.  gs_calculations_total (Counter, labels: method, scope)
    2.  gs_factor_resolutions_total (Counter, labels: tier)
    3.  gs_fallback_resolutions_total (Counter)
    4.  gs_classifications_total (Counter, labels: badge)
    5.  gs_anomalies_total (Counter, labels: type, severity)
    6.  gs_esg_scores_total (Counter, labels: grade)
    7.  gs_compliance_checks_total (Counter, labels: level)
    8.  gs_compliance_alerts_total (Counter, labels: alert_id, level)
    9.  gs_actions_suggested_total (Counter, labels: category)
    10. gs_processing_duration_seconds (Histogram, labels: operation)

Author: GreenScore Platform Team
Status: Production Ready
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram

from greenscore.config import get_config

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

# 1. Emission calculations by factor method and GHG scope
gs_calculations_total = Counter(
    "gs_calculations_total",
    "Total emission calculations performed",
    labelnames=["method", "scope"],
)

# 2. Factor resolutions by winning tier
gs_factor_resolutions_total = Counter(
    "gs_factor_resolutions_total",
    "Total emission factor resolutions by tier",
    labelnames=["tier"],
)

# 3. Resolutions that reached the generic fallback
gs_fallback_resolutions_total = Counter(
    "gs_fallback_resolutions_total",
    "Total resolutions served by the generic fallback factor",
)

# 4. Smart-assist classifications by badge
gs_classifications_total = Counter(
    "gs_classifications_total",
    "Total smart-assist classifications by recommendation badge",
    labelnames=["badge"],
)

# 5. Anomalies by type and severity
gs_anomalies_total = Counter(
    "gs_anomalies_total",
    "Total anomalies detected",
    labelnames=["type", "severity"],
)

# 6. ESG score reports by grade
gs_esg_scores_total = Counter(
    "gs_esg_scores_total",
    "Total ESG score reports computed by grade",
    labelnames=["grade"],
)

# 7. Compliance checks by overall level
gs_compliance_checks_total = Counter(
    "gs_compliance_checks_total",
    "Total compliance checks by overall level",
    labelnames=["level"],
)

# 8. Compliance alerts by id and level
gs_compliance_alerts_total = Counter(
    "gs_compliance_alerts_total",
    "Total compliance alerts emitted",
    labelnames=["alert_id", "level"],
)

# 9. Suggested actions by ESG category
gs_actions_suggested_total = Counter(
    "gs_actions_suggested_total",
    "Total remediation actions suggested",
    labelnames=["category"],
)

# 10. Processing duration by operation
gs_processing_duration_seconds = Histogram(
    "gs_processing_duration_seconds",
    "GreenScore processing duration in seconds",
    labelnames=["operation"],
    buckets=(
        0.0005, 0.001, 0.005, 0.01, 0.025, 0.05,
        0.1, 0.25, 0.5, 1.0, 2.5, 5.0,
    ),
)


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def _enabled() -> bool:
    return get_config().enable_metrics


def record_calculation(method: str, scope: str) -> None:
    """Record an emission calculation.

    Args:
        method: Factor method (actual, technical, monetary, default).
        scope: GHG scope (scope1, scope2, scope3).
    """
    if not _enabled():
        return
    gs_calculations_total.labels(method=method, scope=scope).inc()


def record_resolution(tier: str) -> None:
    """Record which tier served an emission factor resolution.

    Args:
        tier: Tier name (reference, sector_library, monetary, default,
            fallback).
    """
    if not _enabled():
        return
    gs_factor_resolutions_total.labels(tier=tier).inc()
    if tier == "fallback":
        gs_fallback_resolutions_total.inc()


def record_classification(badge: str) -> None:
    """Record a smart-assist classification by badge."""
    if not _enabled():
        return
    gs_classifications_total.labels(badge=badge).inc()


def record_anomaly(anomaly_type: str, severity: str) -> None:
    """Record a detected anomaly."""
    if not _enabled():
        return
    gs_anomalies_total.labels(type=anomaly_type, severity=severity).inc()


def record_esg_score(grade: str) -> None:
    """Record a computed ESG score report by grade."""
    if not _enabled():
        return
    gs_esg_scores_total.labels(grade=grade).inc()


def record_compliance_check(level: str, alerts: list) -> None:
    """Record a compliance check and each alert it produced.

    Args:
        level: Overall compliance level.
        alerts: ComplianceAlert objects produced by the check.
    """
    if not _enabled():
        return
    gs_compliance_checks_total.labels(level=level).inc()
    for alert in alerts:
        gs_compliance_alerts_total.labels(
            alert_id=alert.id, level=alert.level.value,
        ).inc()


def record_suggested_actions(category: str, count: int = 1) -> None:
    """Record remediation actions suggested for an ESG category."""
    if not _enabled():
        return
    gs_actions_suggested_total.labels(category=category).inc(count)


def observe_duration(operation: str, seconds: float) -> None:
    """Record the duration of an operation.

    Args:
        operation: Operation name (calculate, classify, score_esg,
            check_compliance, suggest_actions).
        seconds: Elapsed wall-clock seconds.
    """
    if not _enabled():
        return
    gs_processing_duration_seconds.labels(operation=operation).observe(seconds)


__all__ = [
    "record_calculation",
    "record_resolution",
    "record_classification",
    "record_anomaly",
    "record_esg_score",
    "record_compliance_check",
    "record_suggested_actions",
    "observe_duration",
]
