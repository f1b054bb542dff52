# -*- coding: utf-8 -*-
"""
GreenScore Service Configuration

Centralized configuration for the GreenScore engines covering:
- Emission factor resolution defaults (country)
- Batch calculation worker pool sizing
- Smart-assist anomaly ceilings (outlier amount, period length, duplicates)
- ESG default category weights
- Compliance scoring constants (total checks, governance cap,
  critical escalation multiplier, high-emissions threshold)
- Environmental ROI carbon price
- Logging, metrics and provenance toggles

All settings can be overridden via environment variables with the
``GS_`` prefix (e.g. ``GS_CARBON_PRICE_PER_TONNE``).

Example:
    >>> from greenscore.config import get_config
    >>> cfg = get_config()
    >>> print(cfg.carbon_price_per_tonne, cfg.governance_score_cap)

Author: GreenScore Platform Team
Status: Production Ready
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Environment variable prefix
# ---------------------------------------------------------------------------

_ENV_PREFIX = "GS_"


# ---------------------------------------------------------------------------
# GreenScoreConfig
# ---------------------------------------------------------------------------


@dataclass
class GreenScoreConfig:
    """Complete configuration for the GreenScore engines.

    Attributes:
        default_country_code: Country used by the reference factor tier
            when an activity carries no country code.
        batch_max_workers: Thread pool size for batch calculations.
        outlier_amount_ceiling: Monetary amount above which smart-assist
            flags an ``outlier`` anomaly.
        max_period_days: Period length above which smart-assist flags a
            low-severity ``suspicious_value`` anomaly.
        duplicate_quantity_epsilon: Absolute quantity tolerance under which
            a duplicate is rated high severity.
        default_weight_e: Default Environment weight for the total score.
        default_weight_s: Default Social weight for the total score.
        default_weight_g: Default Governance weight for the total score.
        suggestion_threshold: Default indicator score under which a
            remediation library entry triggers.
        compliance_total_checks: Number of possible compliance checks used
            as the denominator of the compliance score.
        governance_score_cap: Maximum compliance score whenever a
            governance violation exists.
        critical_multiplier: Factor over a threshold beyond which a
            violation escalates from warning to critical.
        high_emissions_threshold: Total tCO2e above which a backlog without
            CO2-reduction actions raises a critical alert.
        carbon_price_per_tonne: Carbon price used by the environmental ROI.
        log_level: Logging level applied by the CLI.
        enable_metrics: Whether Prometheus metrics collection is enabled.
        enable_provenance: Whether operations are recorded in the
            provenance tracker.
    """

    # -- Factor resolution ---------------------------------------------------
    default_country_code: str = "TN"

    # -- Batch processing ----------------------------------------------------
    batch_max_workers: int = 4

    # -- Smart assist --------------------------------------------------------
    outlier_amount_ceiling: float = 1_000_000.0
    max_period_days: int = 365
    duplicate_quantity_epsilon: float = 0.01

    # -- ESG scoring ---------------------------------------------------------
    default_weight_e: float = 0.40
    default_weight_s: float = 0.30
    default_weight_g: float = 0.30
    suggestion_threshold: float = 50.0

    # -- Compliance ----------------------------------------------------------
    compliance_total_checks: int = 10
    governance_score_cap: int = 50
    critical_multiplier: float = 2.0
    high_emissions_threshold: float = 1000.0
    carbon_price_per_tonne: float = 80.0

    # -- Logging -------------------------------------------------------------
    log_level: str = "INFO"

    # -- Metrics / provenance ------------------------------------------------
    enable_metrics: bool = True
    enable_provenance: bool = True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def default_category_weights(self) -> Dict[str, float]:
        """Return the default E/S/G weights keyed by category id."""
        return {
            "E": self.default_weight_e,
            "S": self.default_weight_s,
            "G": self.default_weight_g,
        }

    @classmethod
    def from_env(cls) -> GreenScoreConfig:
        """Build a GreenScoreConfig from ``GS_<FIELD_UPPER>`` environment variables.

        Values are coerced to the type of the field default. Booleans
        accept ``true/1/yes`` (case-insensitive); unparsable numbers are
        logged and the default is kept.
        """
        overrides: Dict[str, Any] = {}
        for f in fields(cls):
            env_name = f"{_ENV_PREFIX}{f.name.upper()}"
            raw = os.environ.get(env_name)
            if raw is None:
                continue
            value = _coerce(raw, f.default)
            if value is None:
                logger.warning(
                    "Invalid value for %s=%s, using default %s",
                    env_name, raw, f.default,
                )
                continue
            overrides[f.name] = value

        config = cls(**overrides)
        logger.info(
            "GreenScoreConfig loaded (%d overrides): country=%s, workers=%d, "
            "weights=[E=%.2f S=%.2f G=%.2f], suggestion_threshold=%.1f, "
            "governance_cap=%d, critical_x=%.1f, carbon_price=%.2f, "
            "metrics=%s, provenance=%s",
            len(overrides),
            config.default_country_code,
            config.batch_max_workers,
            config.default_weight_e,
            config.default_weight_s,
            config.default_weight_g,
            config.suggestion_threshold,
            config.governance_score_cap,
            config.critical_multiplier,
            config.carbon_price_per_tonne,
            config.enable_metrics,
            config.enable_provenance,
        )
        return config


def _coerce(raw: str, default: Any) -> Any:
    """Parse ``raw`` to the type of ``default``; None when unparsable."""
    if isinstance(default, bool):
        return raw.strip().lower() in ("true", "1", "yes")
    try:
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
    except ValueError:
        return None
    return raw


# ---------------------------------------------------------------------------
# Thread-safe singleton accessor
# ---------------------------------------------------------------------------

_config_instance: Optional[GreenScoreConfig] = None
_config_lock = threading.Lock()


def get_config() -> GreenScoreConfig:
    """Return the singleton GreenScoreConfig, creating from env if needed.

    Returns:
        GreenScoreConfig singleton instance.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = GreenScoreConfig.from_env()
    return _config_instance


def set_config(config: GreenScoreConfig) -> None:
    """Replace the singleton GreenScoreConfig (useful for testing).

    Args:
        config: New configuration to install.
    """
    global _config_instance
    with _config_lock:
        _config_instance = config
    logger.info("GreenScoreConfig replaced programmatically")


def reset_config() -> None:
    """Reset the singleton (primarily for test teardown)."""
    global _config_instance
    with _config_lock:
        _config_instance = None


__all__ = [
    "GreenScoreConfig",
    "get_config",
    "set_config",
    "reset_config",
]
