"""GreenScore Exception Hierarchy.

Exceptions raised by the GreenScore calculation, scoring and compliance
engines. Data-quality problems (unknown units, missing factors, missing
indicator values, negative quantities) are NOT exceptions: they degrade
into fallback factors, zero scores or anomaly records. The classes below
are reserved for caller contract violations and broken reference data.

Exception Hierarchy:
    GreenScoreException (base)
    ├── ConfigurationError
    ├── ValidationError
    └── ReferenceDataError

All exceptions include rich context:
- error_code: Unique error identifier
- component: Name of the engine that raised the error
- context: Dictionary with error-specific details
- timestamp: When the error occurred

Example:
    >>> from greenscore.exceptions import ConfigurationError
    >>> raise ConfigurationError(
    ...     message="Threshold must be non-negative",
    ...     component="ComplianceEngine",
    ...     context={"field": "max_water_intensity", "value": -1},
    ... )

Author: GreenScore Platform Team
Status: Production Ready
"""

import json
import re
from datetime import datetime
from typing import Any, Dict, Optional


# ==============================================================================
# Base Exception
# ==============================================================================

class GreenScoreException(Exception):
    """Base exception for all GreenScore errors.

    Attributes:
        message: Human-readable error message
        error_code: Unique error identifier (e.g., "GS_CONFIGURATION_ERROR")
        component: Name of the engine that raised the error (optional)
        context: Dictionary with error-specific details
        timestamp: When the error occurred
    """

    ERROR_PREFIX = "GS"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        component: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self._generate_error_code()
        self.component = component
        self.context = context or {}
        self.timestamp = datetime.now()

    def _generate_error_code(self) -> str:
        """Derive an error code like ``GS_CONFIGURATION_ERROR`` from the class name."""
        error_type = re.sub(r'(?<!^)(?=[A-Z])', '_', self.__class__.__name__).upper()
        return f"{self.ERROR_PREFIX}_{error_type}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "component": self.component,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def to_json(self) -> str:
        """Convert exception to JSON string."""
        return json.dumps(self.to_dict(), indent=2, default=str)

    def __str__(self) -> str:
        parts = [f"[{self.error_code}]"]
        if self.component:
            parts.append(f"Component: {self.component}")
        parts.append(self.message)
        return " - ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}', "
            f"component='{self.component}')"
        )


# ==============================================================================
# Concrete Exceptions
# ==============================================================================

class ConfigurationError(GreenScoreException):
    """Configuration supplied by the caller is malformed.

    Raised at check-time for malformed compliance thresholds, custom ESG
    weights that do not cover E/S/G, or invalid settings.

    Example:
        >>> raise ConfigurationError(
        ...     message="Unknown threshold key",
        ...     component="ComplianceEngine",
        ...     context={"unknown_keys": ["max_noise"]},
        ... )
    """
    pass


class ValidationError(GreenScoreException):
    """Input violates the caller contract of an engine operation.

    Example:
        >>> raise ValidationError(
        ...     message="Category id must be one of E, S, G",
        ...     component="ScoreAggregator",
        ...     invalid_fields={"id": "X"},
        ... )
    """

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        invalid_fields: Optional[Dict[str, Any]] = None,
    ):
        if invalid_fields:
            context = context or {}
            context["invalid_fields"] = invalid_fields
        super().__init__(message, component=component, context=context)


class ReferenceDataError(GreenScoreException):
    """A packaged reference table is missing or cannot be parsed.

    Example:
        >>> raise ReferenceDataError(
        ...     message="Reference table not found",
        ...     context={"file": "default_factors.yaml"},
        ... )
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        data_file: Optional[str] = None,
    ):
        if data_file:
            context = context or {}
            context["data_file"] = data_file
        super().__init__(message, component="ReferenceData", context=context)


# ==============================================================================
# Utilities
# ==============================================================================

def format_exception_chain(exc: BaseException) -> str:
    """Format an exception chain for logging or CLI display.

    Args:
        exc: Exception to format

    Returns:
        One line per exception in the ``__cause__`` chain
    """
    lines = []
    current: Optional[BaseException] = exc
    while current is not None:
        if isinstance(current, GreenScoreException):
            lines.append(str(current))
            if current.context:
                lines.append(f"  Context: {current.context}")
        else:
            lines.append(f"{type(current).__name__}: {current}")
        current = current.__cause__
    return "\n".join(lines)


__all__ = [
    "GreenScoreException",
    "ConfigurationError",
    "ValidationError",
    "ReferenceDataError",
    "format_exception_chain",
]
