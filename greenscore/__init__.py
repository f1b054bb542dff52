"""
GreenScore: GHG Emissions, ESG Scoring and RSE Compliance
=========================================================

Computation core of a carbon accounting and ESG compliance platform:

- calculation: activity records -> emissions with tiered factor resolution
- smart_assist: scope/category inference, anomaly and duplicate detection
- scoring: indicator scores, E/S/G aggregation, grades and insights
- compliance: threshold checks, remediation suggestions, backlog stats
"""

from ._version import __version__

from greenscore.config import GreenScoreConfig, get_config, reset_config, set_config
from greenscore.exceptions import (
    ConfigurationError,
    GreenScoreException,
    ReferenceDataError,
    ValidationError,
)
from greenscore.models import (
    ActionRecord,
    ActivityRecord,
    CalculationResult,
    Category,
    CategoryId,
    ComplianceLevel,
    ComplianceReport,
    FactorMethod,
    GHGScope,
    Indicator,
    IndicatorType,
    ScoreReport,
    SmartAssistResult,
)
from greenscore.service import GreenScoreService

__author__ = "GreenScore Platform Team"
__license__ = "MIT"

__all__ = [
    "__version__",
    "GreenScoreService",
    # Configuration
    "GreenScoreConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Exceptions
    "GreenScoreException",
    "ConfigurationError",
    "ValidationError",
    "ReferenceDataError",
    # Models
    "ActionRecord",
    "ActivityRecord",
    "CalculationResult",
    "Category",
    "CategoryId",
    "ComplianceLevel",
    "ComplianceReport",
    "FactorMethod",
    "GHGScope",
    "Indicator",
    "IndicatorType",
    "ScoreReport",
    "SmartAssistResult",
]
