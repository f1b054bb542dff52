"""
GreenScore Compliance

Threshold-based compliance checks over ESG metrics and the RSE action
backlog, remediation action suggestions and backlog statistics.
"""

from greenscore.compliance.compliance_engine import (
    ComplianceEngine,
    check_compliance,
    validate_thresholds,
)
from greenscore.compliance.action_suggestions import (
    ActionSuggestionGenerator,
    instantiate_action,
    suggest_actions,
)
from greenscore.compliance.action_stats import (
    calculate_budget_stats,
    calculate_csrd_progress,
    calculate_environmental_roi,
    count_regional_impact_actions,
)

__all__ = [
    "ComplianceEngine",
    "check_compliance",
    "validate_thresholds",
    "ActionSuggestionGenerator",
    "instantiate_action",
    "suggest_actions",
    "calculate_budget_stats",
    "calculate_csrd_progress",
    "calculate_environmental_roi",
    "count_regional_impact_actions",
]
