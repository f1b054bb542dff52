# -*- coding: utf-8 -*-
"""
ComplianceEngine - Regulatory Threshold Checks

Evaluates aggregated ESG metrics, the RSE action backlog and the
governance status against a threshold table, emits graded alerts and
computes a capped compliance score.

Checks (in order, each independent):
    1.  action_completion      done / total < min rate (total > 0 only);
                               critical below half the minimum
    2.  blocked_actions        blocked / total > max ratio -> warning
    3.  emissions_intensity    above max; critical beyond max x multiplier
    4.  no_corrective_actions  total emissions above the high-emissions
                               threshold with no Environment action
                               targeting CO2 reduction -> critical; the
                               alert threshold is that emissions limit
    5.  water_intensity        above max; critical beyond max x multiplier
    6.  renewable_energy       below min -> warning
    7.  training_hours         below min -> warning
    8.  accident_rate          above max; critical beyond max x multiplier
    9.  women_management       below min -> warning
    10. board_independence     below min -> warning
    11. audit_committee        below min meetings -> warning
    12. article_2_governance   no RSE owner or no policy -> critical

Score:
    max(0, round((checks - 2 * critical - warnings) / checks * 100)),
    capped at ``governance_score_cap`` on a governance violation.

    ``checks`` is ``compliance_total_checks`` (10), not the twelve checks
    above. The audit_committee check only fires when ``audit_meetings``
    is supplied, and a warning there lowers the score like any other.
    Leave ``audit_meetings`` unset to keep the ten-metric scoring.

Level:
    critical if any critical alert, else warning if any warning, else
    conformant.

Zero-Hallucination Guarantees:
    - Deterministic comparisons only; identical inputs regenerate the
      identical alert list and score
    - Thresholds are validated before any check runs; a malformed table
      raises ConfigurationError and no partial report is produced
    - Every report carries a SHA-256 provenance hash (timestamps excluded)

Example:
    >>> from greenscore.compliance.compliance_engine import check_compliance
    >>> from greenscore.models import ComplianceMetrics, GovernanceStatus
    >>> report = check_compliance([], ComplianceMetrics(), governance=GovernanceStatus())
    >>> report.overall_level.value, report.score
    ('critical', 50)

Author: GreenScore Platform Team
Status: Production Ready
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from greenscore.config import GreenScoreConfig, get_config
from greenscore.exceptions import ConfigurationError
from greenscore.metrics import observe_duration, record_compliance_check
from greenscore.models import (
    ActionRecord,
    ActionStatus,
    CategoryId,
    ComplianceAlert,
    ComplianceLevel,
    ComplianceMetrics,
    ComplianceReport,
    ComplianceThresholds,
    GovernanceStatus,
)
from greenscore.provenance import compute_hash, get_provenance_tracker
from greenscore.reference_data import load_compliance_rules

logger = logging.getLogger(__name__)

ThresholdsInput = Union[ComplianceThresholds, Mapping[str, Any], None]
MetricsInput = Union[ComplianceMetrics, Mapping[str, Any]]
GovernanceInput = Union[GovernanceStatus, Mapping[str, Any], None]

#: Action fields excluded from the provenance hash.
_ACTION_TIMESTAMPS = {"created_at", "updated_at"}


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


def validate_thresholds(thresholds: ThresholdsInput) -> ComplianceThresholds:
    """
    Build the threshold table, rejecting malformed input up front.

    Unset fields take their documented defaults. Unknown keys, negative
    or non-numeric values, and percentages above 100 are rejected.

    Raises:
        ConfigurationError: On any invalid threshold.
    """
    if thresholds is None:
        return ComplianceThresholds()
    if isinstance(thresholds, ComplianceThresholds):
        return thresholds
    try:
        return ComplianceThresholds.model_validate(dict(thresholds), strict=True)
    except PydanticValidationError as e:
        raise ConfigurationError(
            message=f"Invalid compliance thresholds: {e.error_count()} error(s)",
            component="ComplianceEngine",
            context={
                "errors": [f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()],
            },
        ) from e


def validate_engine_config(config: GreenScoreConfig) -> None:
    """
    Reject scoring constants the engine cannot work with.

    Raises:
        ConfigurationError: If ``compliance_total_checks`` is not positive,
            ``governance_score_cap`` lies outside 0-100 or
            ``critical_multiplier`` is below 1.
    """
    errors = []
    if config.compliance_total_checks <= 0:
        errors.append(f"compliance_total_checks must be > 0, got {config.compliance_total_checks}")
    if not 0 <= config.governance_score_cap <= 100:
        errors.append(f"governance_score_cap must be within 0-100, got {config.governance_score_cap}")
    if config.critical_multiplier < 1:
        errors.append(f"critical_multiplier must be >= 1, got {config.critical_multiplier}")
    if errors:
        raise ConfigurationError(
            message=f"Invalid compliance configuration: {len(errors)} error(s)",
            component="ComplianceEngine",
            context={"errors": errors},
        )


def _as_metrics(metrics: MetricsInput) -> ComplianceMetrics:
    if isinstance(metrics, ComplianceMetrics):
        return metrics
    return ComplianceMetrics(**metrics)


def _as_governance(governance: GovernanceInput) -> Optional[GovernanceStatus]:
    if governance is None or isinstance(governance, GovernanceStatus):
        return governance
    return GovernanceStatus(**governance)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class ComplianceEngine:
    """
    Stateless compliance checker.

    All constants (score denominator, governance cap, critical multiplier,
    high-emissions threshold) come from the configuration.
    """

    def __init__(self, config: Optional[GreenScoreConfig] = None) -> None:
        self.config = config or get_config()
        validate_engine_config(self.config)
        self._texts: Dict[str, Dict[str, str]] = load_compliance_rules()["alerts"]
        logger.info(
            "ComplianceEngine initialized: checks=%d, governance_cap=%d, critical_x=%.1f",
            self.config.compliance_total_checks,
            self.config.governance_score_cap,
            self.config.critical_multiplier,
        )

    # -- alert construction ------------------------------------------------

    def _alert(
        self,
        alert_id: str,
        level: ComplianceLevel,
        value: Optional[float] = None,
        threshold: Optional[float] = None,
    ) -> ComplianceAlert:
        text = self._texts[alert_id]
        return ComplianceAlert(
            id=alert_id,
            level=level,
            title=text["title"],
            description=text["description"].format(value=value, threshold=threshold),
            regulation=text["regulation"],
            threshold=threshold,
            current_value=value,
            required_action=text.get("required_action"),
        )

    def _above(self, alert_id: str, value: Optional[float], maximum: float) -> Optional[ComplianceAlert]:
        """Upper-bound check, escalating beyond maximum x critical_multiplier."""
        if value is None or value <= maximum:
            return None
        level = (
            ComplianceLevel.CRITICAL
            if value > maximum * self.config.critical_multiplier
            else ComplianceLevel.WARNING
        )
        return self._alert(alert_id, level, value, maximum)

    def _below(self, alert_id: str, value: Optional[float], minimum: float) -> Optional[ComplianceAlert]:
        """Lower-bound check, always a warning."""
        if value is None or value >= minimum:
            return None
        return self._alert(alert_id, ComplianceLevel.WARNING, value, minimum)

    # -- individual checks -------------------------------------------------

    def check_action_completion(
        self, actions: List[ActionRecord], thresholds: ComplianceThresholds,
    ) -> Optional[ComplianceAlert]:
        if not actions:
            return None
        done = sum(1 for a in actions if a.status == ActionStatus.DONE)
        rate = done / len(actions) * 100
        minimum = thresholds.min_action_completion_rate
        if rate >= minimum:
            return None
        level = ComplianceLevel.CRITICAL if rate < minimum / 2 else ComplianceLevel.WARNING
        return self._alert("action_completion", level, rate, minimum)

    def check_blocked_actions(
        self, actions: List[ActionRecord], thresholds: ComplianceThresholds,
    ) -> Optional[ComplianceAlert]:
        if not actions:
            return None
        blocked = sum(1 for a in actions if a.status == ActionStatus.BLOCKED)
        ratio = blocked / len(actions) * 100
        if ratio <= thresholds.max_blocked_actions_ratio:
            return None
        return self._alert(
            "blocked_actions", ComplianceLevel.WARNING, ratio, thresholds.max_blocked_actions_ratio,
        )

    def check_corrective_actions(
        self, actions: List[ActionRecord], metrics: ComplianceMetrics,
    ) -> Optional[ComplianceAlert]:
        total = metrics.total_co2_emissions
        limit = self.config.high_emissions_threshold
        if total is None or total <= limit:
            return None
        has_reduction = any(
            a.category == CategoryId.E and (a.co2_reduction_target or 0) > 0
            for a in actions
        )
        if has_reduction:
            return None
        return self._alert("no_corrective_actions", ComplianceLevel.CRITICAL, total, limit)

    def check_governance(self, governance: Optional[GovernanceStatus]) -> Optional[ComplianceAlert]:
        if governance is None or governance.is_compliant:
            return None
        return self._alert("article_2_governance", ComplianceLevel.CRITICAL)

    # -- full run ----------------------------------------------------------

    def check_compliance(
        self,
        actions: List[ActionRecord],
        metrics: MetricsInput,
        thresholds: ThresholdsInput = None,
        governance: GovernanceInput = None,
    ) -> ComplianceReport:
        """
        Run every compliance check.

        Args:
            actions: RSE action backlog.
            metrics: Aggregated metrics; a check is skipped when its metric
                is None.
            thresholds: Threshold table; defaults apply to unset fields.
            governance: Governance status; the governance check only runs
                when it is given.

        Returns:
            Complete ComplianceReport.

        Raises:
            ConfigurationError: If the thresholds are malformed.
        """
        start = time.perf_counter()
        limits = validate_thresholds(thresholds)
        data = _as_metrics(metrics)
        status = _as_governance(governance)
        actions = list(actions)

        candidates = [
            self.check_action_completion(actions, limits),
            self.check_blocked_actions(actions, limits),
            self._above("emissions_intensity", data.emissions_intensity, limits.max_emissions_intensity),
            self.check_corrective_actions(actions, data),
            self._above("water_intensity", data.water_intensity, limits.max_water_intensity),
            self._below("renewable_energy", data.renewable_energy_pct, limits.min_renewable_energy_pct),
            self._below("training_hours", data.training_hours, limits.min_training_hours),
            self._above("accident_rate", data.accident_rate, limits.max_accident_rate),
            self._below("women_management", data.women_management_pct, limits.min_women_management_pct),
            self._below("board_independence", data.board_independence, limits.min_board_independence),
            self._below("audit_committee", data.audit_meetings, limits.min_audit_committee_meetings),
            self.check_governance(status),
        ]
        alerts = [alert for alert in candidates if alert is not None]

        critical = sum(1 for a in alerts if a.level == ComplianceLevel.CRITICAL)
        warnings = sum(1 for a in alerts if a.level == ComplianceLevel.WARNING)
        governance_violation = status is not None and not status.is_compliant

        score = self.compute_score(critical, warnings, governance_violation)
        if critical:
            level = ComplianceLevel.CRITICAL
        elif warnings:
            level = ComplianceLevel.WARNING
        else:
            level = ComplianceLevel.CONFORMANT

        provenance_hash = compute_hash({
            "actions": [a.model_dump(mode="json", exclude=_ACTION_TIMESTAMPS) for a in actions],
            "metrics": data.model_dump(mode="json"),
            "thresholds": limits.model_dump(mode="json"),
            "governance": status.model_dump(mode="json") if status is not None else None,
            "alerts": [a.model_dump(mode="json") for a in alerts],
            "score": score,
            "overall_level": level.value,
        })

        report = ComplianceReport(
            overall_level=level,
            alerts=alerts,
            score=score,
            critical_count=critical,
            warning_count=warnings,
            governance_violation=governance_violation,
            provenance_hash=provenance_hash,
        )

        if self.config.enable_provenance:
            get_provenance_tracker().record("compliance", "backlog", "check", provenance_hash)
        record_compliance_check(level.value, alerts)
        observe_duration("check_compliance", time.perf_counter() - start)

        logger.info(
            "Compliance checked: level=%s score=%d critical=%d warnings=%d governance_violation=%s",
            level.value, score, critical, warnings, governance_violation,
        )
        return report

    def compute_score(self, critical: int, warnings: int, governance_violation: bool) -> int:
        checks = self.config.compliance_total_checks
        score = max(0, round((checks - 2 * critical - warnings) / checks * 100))
        score = min(score, 100)
        if governance_violation:
            score = min(score, self.config.governance_score_cap)
        return score


def check_compliance(
    actions: List[ActionRecord],
    metrics: MetricsInput,
    thresholds: ThresholdsInput = None,
    governance: GovernanceInput = None,
    config: Optional[GreenScoreConfig] = None,
) -> ComplianceReport:
    """Run a compliance check with a throwaway engine."""
    return ComplianceEngine(config).check_compliance(actions, metrics, thresholds, governance)


__all__ = [
    "ComplianceEngine",
    "check_compliance",
    "validate_engine_config",
    "validate_thresholds",
]
