# -*- coding: utf-8 -*-
"""
GreenScore Data Models

Pydantic v2 data models for the GreenScore engines: activity records and
emission factors for the calculation pipeline, smart-assist suggestions
and anomalies, ESG indicators and score reports, compliance thresholds,
alerts and reports, and RSE action records.

Enumerations (12):
    - GHGScope, FactorMethod, IndicatorType, CategoryId, AnomalyType,
      Severity, ConfidenceBadge, ComplianceLevel, ActionStatus,
      ActionPriority, EsgAlertType, Scope3Direction

Calculation models:
    - ActivityRecord, EmissionFactor, CalculationResult, ScopeTotals,
      LocalFactorRow, SectorFactor, Scope3Subcategory, Scope3Category,
      MonetaryFactor, AccountingEntry, MonetaryEmission

Smart-assist models:
    - AnomalyDetection, ScopeSuggestion, CategorySuggestion,
      FactorSuggestion, FieldSuggestion, SmartAssistResult

Scoring models:
    - Benchmark, Indicator, Category, CustomWeights, GradeBand,
      ScoreReport, MaterialityPoint, EsgAlert, SectorBenchmark,
      SectorComparison

Compliance models:
    - ComplianceThresholds, ComplianceMetrics, GovernanceStatus,
      ComplianceAlert, ComplianceReport, ActionTemplate,
      RemediationEntry, ActionRecord, EnvironmentalROI, BudgetStats

Author: GreenScore Platform Team
Status: Production Ready
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    """Return current UTC datetime with microseconds zeroed."""
    return datetime.now(timezone.utc).replace(microsecond=0)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class GHGScope(str, Enum):
    """GHG Protocol emission scope."""

    SCOPE1 = "scope1"
    SCOPE2 = "scope2"
    SCOPE3 = "scope3"


class FactorMethod(str, Enum):
    """Data quality method behind an emission factor.

    Declaration order is the resolution precedence: an ``actual`` factor
    outranks ``technical``, which outranks ``monetary``, which outranks
    ``default``.
    """

    ACTUAL = "actual"
    TECHNICAL = "technical"
    MONETARY = "monetary"
    DEFAULT = "default"


class IndicatorType(str, Enum):
    """How an ESG indicator value is obtained and scored."""

    NUMERIC = "numeric"
    CALCULATED = "calculated"
    BINARY = "binary"


class CategoryId(str, Enum):
    """ESG pillar."""

    E = "E"
    S = "S"
    G = "G"


class AnomalyType(str, Enum):
    """Kind of data-quality anomaly raised by smart-assist."""

    DUPLICATE = "duplicate"
    OUTLIER = "outlier"
    MISSING_DATA = "missing_data"
    INCONSISTENT = "inconsistent"
    SUSPICIOUS_VALUE = "suspicious_value"


class Severity(str, Enum):
    """Anomaly severity."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ConfidenceBadge(str, Enum):
    """Recommendation badge attached to a smart-assist result."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    MANUAL_REQUIRED = "manual_required"


class ComplianceLevel(str, Enum):
    """Overall or per-alert compliance level."""

    CONFORMANT = "conformant"
    WARNING = "warning"
    CRITICAL = "critical"


class ActionStatus(str, Enum):
    """Workflow status of an RSE action."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    DONE = "done"


class ActionPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EsgAlertType(str, Enum):
    """Display type of an ESG insight alert."""

    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"
    INFO = "info"


class Scope3Direction(str, Enum):
    UPSTREAM = "upstream"
    DOWNSTREAM = "downstream"


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Factor methods in resolution precedence order.
METHOD_PRECEDENCE: Tuple[FactorMethod, ...] = (
    FactorMethod.ACTUAL,
    FactorMethod.TECHNICAL,
    FactorMethod.MONETARY,
    FactorMethod.DEFAULT,
)

#: Human-readable methodology label per factor method.
METHODOLOGY_LABELS: Dict[FactorMethod, str] = {
    FactorMethod.ACTUAL: "GHG Protocol - Actual data (Tier 1)",
    FactorMethod.TECHNICAL: "GHG Protocol - Technical data (Tier 2)",
    FactorMethod.MONETARY: "GHG Protocol - Monetary ratios (Tier 3)",
    FactorMethod.DEFAULT: "GHG Protocol - Default factors",
}

#: Category returned when no activity category can be inferred.
UNKNOWN_CATEGORY: str = "autres"


# =============================================================================
# Calculation models
# =============================================================================


class ActivityRecord(BaseModel):
    """One measured or inferred activity (fuel burnt, kWh consumed, ...).

    Created by an external ingestion collaborator. The calculator attaches
    ``co2_equivalent_kg`` and fills ``ghg_scope`` / ``ghg_category`` when
    they were not supplied.

    Attributes:
        id: Caller-side identifier (free form).
        category: Activity category key (e.g. ``diesel``, ``electricite``,
            ``road_transport``).
        quantity: Measured quantity in ``unit``; None when unknown.
        unit: Unit of ``quantity`` as written on the source document.
        monetary_amount: Amount excluding tax, used by monetary factors.
        country_code: ISO country code for reference factor lookup.
        ghg_scope: Explicit scope; derived from the category when absent.
        ghg_category: Explicit GHG category; derived when absent.
        subcategory: Optional sub-category hint (sector library id or
            monetary ratio name).
        description: Free-text description (invoice line, account label).
        supplier_name: Supplier as read from the document.
        period_start: Start of the consumption period (ISO date string).
        period_end: End of the consumption period (ISO date string).
        co2_equivalent_kg: Emissions attached after calculation.
    """

    id: str = Field(default="", description="Caller-side identifier")
    category: str = Field(..., description="Activity category key")
    quantity: Optional[float] = Field(
        default=None, description="Measured quantity in unit",
    )
    unit: str = Field(default="", description="Unit of quantity")
    monetary_amount: Optional[float] = Field(
        default=None, description="Amount excluding tax for monetary factors",
    )
    country_code: Optional[str] = Field(
        default=None, description="ISO country code for factor lookup",
    )
    ghg_scope: Optional[GHGScope] = Field(default=None)
    ghg_category: Optional[str] = Field(default=None)
    subcategory: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    supplier_name: Optional[str] = Field(default=None)
    period_start: Optional[str] = Field(default=None)
    period_end: Optional[str] = Field(default=None)
    co2_equivalent_kg: Optional[float] = Field(default=None)

    model_config = {"extra": "forbid"}

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        """Validate category is non-empty."""
        if not v or not v.strip():
            raise ValueError("category must be non-empty")
        return v.strip()


class EmissionFactor(BaseModel):
    """Resolved emission factor. Immutable once resolved."""

    factor_value: float = Field(..., description="kgCO2e per unit of activity")
    factor_unit: str = Field(..., description="Unit of the factor, e.g. kgCO2e/litre")
    source_name: str = Field(..., description="Publishing body or dataset")
    source_reference: Optional[str] = Field(default=None)
    uncertainty_percent: float = Field(..., ge=0.0)
    method: FactorMethod
    confidence_score: float = Field(..., ge=0.0, le=1.0)

    model_config = {"extra": "forbid", "frozen": True}


class CalculationResult(BaseModel):
    """Emissions computed for one ActivityRecord.

    Attributes:
        co2_equivalent_kg: Emissions in kgCO2e.
        co2_equivalent_tonnes: Emissions in tCO2e.
        emission_factor: Factor used.
        formula: Human-readable calculation trace.
        methodology: GHG Protocol tier label for the factor method.
        ghg_scope: Scope supplied or derived from the category.
        ghg_category: Category supplied or derived from the activity.
        uncertainty_kg: Absolute uncertainty in kgCO2e.
        confidence_score: Confidence of the factor.
        normalized_quantity: Quantity after unit normalization.
        normalized_unit: Unit after unit normalization.
        calculation_steps: Ordered audit trail of the calculation.
        provenance_hash: SHA-256 of inputs and outputs.
    """

    co2_equivalent_kg: float
    co2_equivalent_tonnes: float
    emission_factor: EmissionFactor
    formula: str
    methodology: str
    ghg_scope: GHGScope
    ghg_category: str
    uncertainty_kg: float
    confidence_score: float
    normalized_quantity: float = 0.0
    normalized_unit: str = ""
    calculation_steps: List[Dict[str, Any]] = Field(default_factory=list)
    provenance_hash: str = ""

    model_config = {"extra": "forbid"}


class ScopeTotals(BaseModel):
    """Per-scope emission totals in kgCO2e."""

    scope1: float = 0.0
    scope2: float = 0.0
    scope3: float = 0.0
    total: float = 0.0


class LocalFactorRow(BaseModel):
    """One row of a reference (national/local) emission factor dataset."""

    id: str
    label: str = ""
    category: str
    country_code: str = "GLOBAL"
    factor_value: float
    factor_unit: str
    source_name: str
    source_reference: Optional[str] = None
    ghg_scope: Optional[GHGScope] = None
    is_active: bool = True
    is_default: bool = False

    model_config = {"extra": "forbid"}


class SectorFactor(BaseModel):
    """One method-specific factor of a Scope-3 sub-category."""

    value: float
    unit: str
    source: str
    uncertainty: float = Field(..., ge=0.0)


class Scope3Subcategory(BaseModel):
    """Sub-category of a GHG Protocol Scope-3 category."""

    id: str
    name: str
    unit: str = ""
    factors: Dict[FactorMethod, SectorFactor] = Field(default_factory=dict)

    def preferred_factor(self) -> Optional[Tuple[FactorMethod, SectorFactor]]:
        """Return the highest-precedence (method, factor) pair, if any."""
        for method in METHOD_PRECEDENCE:
            factor = self.factors.get(method)
            if factor is not None:
                return method, factor
        return None


class Scope3Category(BaseModel):
    """One of the 15 GHG Protocol Scope-3 categories."""

    id: str
    number: int = Field(..., ge=1, le=15)
    name: str
    short_name: str = ""
    direction: Scope3Direction
    default_method: FactorMethod
    subcategories: List[Scope3Subcategory] = Field(default_factory=list)


class MonetaryFactor(BaseModel):
    """Spend-based emission ratio in kgCO2e per currency unit."""

    category: str
    subcategory: str
    factor_value: float
    source: str
    description: str = ""
    ghg_scope: GHGScope = GHGScope.SCOPE3
    ghg_category: str = "achats_services"


class AccountingEntry(BaseModel):
    """One expense line of an accounting export."""

    date: str
    description: str
    amount_ht: float
    amount_ttc: Optional[float] = None
    currency: str = "TND"
    supplier_name: Optional[str] = None
    account_code: Optional[str] = None


class MonetaryEmission(BaseModel):
    """Spend-based emissions computed for one accounting entry."""

    entry: AccountingEntry
    factor: MonetaryFactor
    co2_kg: float
    uncertainty_percent: float


# =============================================================================
# Smart-assist models
# =============================================================================


class AnomalyDetection(BaseModel):
    """Rule-based data-quality finding. Never raised as an exception."""

    type: AnomalyType
    severity: Severity
    message: str
    field: Optional[str] = None
    suggestion: Optional[str] = None


class ScopeSuggestion(BaseModel):
    scope: GHGScope
    confidence: float = Field(..., ge=0.0, le=1.0)
    reason: str


class CategorySuggestion(BaseModel):
    category: str
    subcategory: Optional[str] = None
    confidence: float = Field(..., ge=0.0, le=1.0)
    reason: str


class FactorSuggestion(BaseModel):
    factor_value: float
    factor_unit: str
    source_name: str
    method: FactorMethod
    confidence: float = Field(..., ge=0.0, le=1.0)


class FieldSuggestion(BaseModel):
    """Suggested value for a field missing from the source document."""

    field: str
    suggested_value: Union[str, float]
    confidence: float = Field(..., ge=0.0, le=1.0)
    reason: str


class SmartAssistResult(BaseModel):
    """Combined smart-assist output for one activity record.

    Attributes:
        scope_suggestion: Inferred GHG scope with confidence and reason.
        category_suggestion: Inferred activity category.
        emission_factor_suggestion: Factor resolved for the suggested
            category.
        anomalies: Rule-based anomalies found in the record.
        field_suggestions: Values proposed for missing fields.
        overall_confidence: Weighted average of scope, category and
            factor confidences.
        badge: Recommendation badge.
    """

    scope_suggestion: ScopeSuggestion
    category_suggestion: CategorySuggestion
    emission_factor_suggestion: Optional[FactorSuggestion] = None
    anomalies: List[AnomalyDetection] = Field(default_factory=list)
    field_suggestions: List[FieldSuggestion] = Field(default_factory=list)
    overall_confidence: float = Field(..., ge=0.0, le=1.0)
    badge: ConfidenceBadge


# =============================================================================
# Scoring models
# =============================================================================


class Benchmark(BaseModel):
    """Reference range defining an indicator's scoring curve."""

    min: float
    max: float
    optimal: float
    inverse: bool = False

    model_config = {"extra": "forbid", "frozen": True}


class Indicator(BaseModel):
    """Single ESG indicator.

    ``calculated`` indicators are derived from sibling indicators and
    revenue; their value is overwritten on every scoring pass.
    """

    id: str
    type: IndicatorType = IndicatorType.NUMERIC
    value: Optional[Union[bool, float]] = None
    weight: Optional[float] = Field(default=None, ge=0.0)
    label: str = ""
    unit: str = ""

    model_config = {"extra": "forbid"}

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Validate id is non-empty."""
        if not v or not v.strip():
            raise ValueError("indicator id must be non-empty")
        return v.strip()


class Category(BaseModel):
    """ESG pillar with its indicators.

    ``weight`` is the fraction of the total score; None means the
    configured default for the pillar.
    """

    id: CategoryId
    weight: Optional[float] = Field(default=None, ge=0.0)
    label: str = ""
    indicators: List[Indicator] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


class CustomWeights(BaseModel):
    """Caller-supplied E/S/G weights expressed as percentages."""

    e: float = Field(..., ge=0.0)
    s: float = Field(..., ge=0.0)
    g: float = Field(..., ge=0.0)

    model_config = {"extra": "forbid"}

    def as_fractions(self) -> Dict[str, float]:
        """Return the weights keyed by category id, divided by 100."""
        return {"E": self.e / 100, "S": self.s / 100, "G": self.g / 100}


class GradeBand(BaseModel):
    min: float
    grade: str
    label: str


class ScoreReport(BaseModel):
    """Global ESG score. Recomputed as a whole on every indicator change."""

    total_score: float = Field(..., ge=0.0, le=100.0)
    category_scores: Dict[str, float]
    grade: str
    grade_label: str
    sector: str = ""
    weights_used: Dict[str, float] = Field(default_factory=dict)
    provenance_hash: str = ""

    model_config = {"extra": "forbid"}


class MaterialityPoint(BaseModel):
    id: str
    label: str
    environmental_impact: float
    financial_risk: float
    category: CategoryId


class EsgAlert(BaseModel):
    """Regulatory or performance insight derived from an ESG dataset."""

    id: str
    type: EsgAlertType
    title: str
    description: str
    regulation: str
    action: Optional[str] = None


class SectorBenchmark(BaseModel):
    sector: str
    avg_score: float
    top_score: float
    e_score: float
    s_score: float
    g_score: float


class SectorComparison(BaseModel):
    """Position of a score report against its sector benchmark."""

    sector: str
    total_score: float
    avg_score: float
    top_score: float
    gap_to_average: float
    gap_to_top: float
    category_gaps: Dict[str, float] = Field(default_factory=dict)


# =============================================================================
# Compliance models
# =============================================================================


class ComplianceThresholds(BaseModel):
    """Numeric limits for each compliance dimension.

    Every field is optional for the caller; unset fields fall back to the
    defaults below. Unknown keys and negative values are rejected.
    """

    max_emissions_intensity: float = Field(
        default=50.0, ge=0.0, description="tCO2e per M TND revenue",
    )
    max_water_intensity: float = Field(
        default=500.0, ge=0.0, description="m3 per M TND revenue",
    )
    min_renewable_energy_pct: float = Field(
        default=10.0, ge=0.0, le=100.0, description="% of total energy",
    )
    min_training_hours: float = Field(
        default=20.0, ge=0.0, description="Hours per employee",
    )
    max_accident_rate: float = Field(
        default=5.0, ge=0.0, description="Accidents per 100 employees",
    )
    min_women_management_pct: float = Field(
        default=25.0, ge=0.0, le=100.0, description="% women in management",
    )
    min_board_independence: float = Field(
        default=30.0, ge=0.0, le=100.0, description="% independent members",
    )
    min_audit_committee_meetings: float = Field(
        default=4.0, ge=0.0, description="Meetings per year",
    )
    min_action_completion_rate: float = Field(
        default=50.0, ge=0.0, le=100.0, description="% of actions done",
    )
    max_blocked_actions_ratio: float = Field(
        default=20.0, ge=0.0, le=100.0, description="% of actions blocked",
    )

    model_config = {"extra": "forbid"}


class ComplianceMetrics(BaseModel):
    """Aggregated metrics checked by the compliance engine.

    A check is skipped when its metric is None.
    """

    emissions_intensity: Optional[float] = None
    water_intensity: Optional[float] = None
    renewable_energy_pct: Optional[float] = None
    training_hours: Optional[float] = None
    accident_rate: Optional[float] = None
    women_management_pct: Optional[float] = None
    board_independence: Optional[float] = None
    audit_meetings: Optional[float] = None
    total_co2_emissions: Optional[float] = None

    model_config = {"extra": "forbid"}


class GovernanceStatus(BaseModel):
    """Presence of a named RSE owner and a documented sustainability policy."""

    has_rse_owner: bool = False
    has_sustainability_policy: bool = False

    model_config = {"extra": "forbid"}

    @property
    def is_compliant(self) -> bool:
        return self.has_rse_owner and self.has_sustainability_policy


class ComplianceAlert(BaseModel):
    """Graded alert produced by a single compliance check."""

    id: str
    level: ComplianceLevel
    title: str
    description: str
    regulation: str
    threshold: Optional[float] = None
    current_value: Optional[float] = None
    required_action: Optional[str] = None

    model_config = {"extra": "forbid"}


class ComplianceReport(BaseModel):
    """Complete result of one compliance check run.

    Attributes:
        overall_level: Worst level among the alerts.
        alerts: Alerts in check order.
        score: Compliance score between 0 and 100.
        critical_count: Number of critical alerts.
        warning_count: Number of warning alerts.
        governance_violation: Whether the governance check failed.
        checked_at: When the check ran (excluded from the provenance hash).
        provenance_hash: SHA-256 of inputs, alerts and score.
    """

    overall_level: ComplianceLevel
    alerts: List[ComplianceAlert] = Field(default_factory=list)
    score: int = Field(..., ge=0, le=100)
    critical_count: int = 0
    warning_count: int = 0
    governance_violation: bool = False
    checked_at: datetime = Field(default_factory=_utcnow)
    provenance_hash: str = ""

    model_config = {"extra": "forbid"}


class ActionTemplate(BaseModel):
    """Remediation action template from the suggestion library."""

    title: str
    description: str = ""
    priority: ActionPriority = ActionPriority.MEDIUM
    linked_indicator_id: str
    linked_indicator_label: str = ""
    legislation_refs: List[str] = Field(default_factory=list)
    cost_estimated: float = Field(default=0.0, ge=0.0)
    co2_reduction_target: Optional[float] = None
    kpi_impact_points: Optional[float] = None
    regional_impact: bool = False
    assigned_to: str = ""
    category: CategoryId

    model_config = {"extra": "forbid"}


class RemediationEntry(BaseModel):
    """Library entry: triggers its templates when the indicator scores low."""

    indicator_id: str
    label: str = ""
    threshold: Optional[float] = Field(default=None, ge=0.0, le=100.0)
    category: CategoryId
    actions: List[ActionTemplate] = Field(default_factory=list)


class ActionRecord(BaseModel):
    """RSE action in the backlog, human-created or suggested.

    Attributes:
        id: Unique action identifier.
        title: Short action title.
        description: What the action consists of.
        status: Workflow status.
        priority: Priority.
        linked_indicator_id: ESG indicator the action improves.
        linked_indicator_label: Label of that indicator.
        legislation_refs: Regulations motivating the action.
        cost_estimated: Estimated cost in the caller's currency.
        co2_reduction_target: Expected tCO2e reduction, if any.
        kpi_impact_points: Expected score points gained.
        regional_impact: Whether the action benefits the local region.
        assigned_to: Owner role.
        deadline: Optional ISO deadline.
        category: ESG pillar.
        is_suggestion: True when generated by the suggestion engine.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    id: str
    title: str
    description: str = ""
    status: ActionStatus = ActionStatus.TODO
    priority: ActionPriority = ActionPriority.MEDIUM
    linked_indicator_id: str = ""
    linked_indicator_label: str = ""
    legislation_refs: List[str] = Field(default_factory=list)
    cost_estimated: float = Field(default=0.0, ge=0.0)
    co2_reduction_target: Optional[float] = None
    kpi_impact_points: Optional[float] = None
    regional_impact: bool = False
    assigned_to: str = ""
    deadline: Optional[str] = None
    category: CategoryId
    is_suggestion: bool = False
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    model_config = {"extra": "forbid"}


class EnvironmentalROI(BaseModel):
    total_investment: float
    total_co2_avoided: float
    roi_percent: float
    value_per_tonne: float


class BudgetStats(BaseModel):
    allocated: float
    spent: float


__all__ = [
    # Enumerations
    "GHGScope",
    "FactorMethod",
    "IndicatorType",
    "CategoryId",
    "AnomalyType",
    "Severity",
    "ConfidenceBadge",
    "ComplianceLevel",
    "ActionStatus",
    "ActionPriority",
    "EsgAlertType",
    "Scope3Direction",
    # Constants
    "METHOD_PRECEDENCE",
    "METHODOLOGY_LABELS",
    "UNKNOWN_CATEGORY",
    # Calculation
    "ActivityRecord",
    "EmissionFactor",
    "CalculationResult",
    "ScopeTotals",
    "LocalFactorRow",
    "SectorFactor",
    "Scope3Subcategory",
    "Scope3Category",
    "MonetaryFactor",
    "AccountingEntry",
    "MonetaryEmission",
    # Smart assist
    "AnomalyDetection",
    "ScopeSuggestion",
    "CategorySuggestion",
    "FactorSuggestion",
    "FieldSuggestion",
    "SmartAssistResult",
    # Scoring
    "Benchmark",
    "Indicator",
    "Category",
    "CustomWeights",
    "GradeBand",
    "ScoreReport",
    "MaterialityPoint",
    "EsgAlert",
    "SectorBenchmark",
    "SectorComparison",
    # Compliance
    "ComplianceThresholds",
    "ComplianceMetrics",
    "GovernanceStatus",
    "ComplianceAlert",
    "ComplianceReport",
    "ActionTemplate",
    "RemediationEntry",
    "ActionRecord",
    "EnvironmentalROI",
    "BudgetStats",
]
