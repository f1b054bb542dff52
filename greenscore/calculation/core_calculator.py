# -*- coding: utf-8 -*-
"""
Core Emission Calculation Engine

Combines a normalized activity quantity (or a monetary amount) with a
resolved emission factor to produce a CO2-equivalent result with its
uncertainty, scope, category and a human-readable audit trail.

GUARANTEES:
- Deterministic (same input and reference data -> same output)
- Linear in quantity: calculate(2q).co2_kg == 2 * calculate(q).co2_kg
- uncertainty_kg == co2_kg * uncertainty_percent / 100, exactly
- Never fails on a data miss: unknown units pass through, unknown
  categories resolve to the generic fallback factor
- SHA-256 provenance hash over inputs and outputs
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from greenscore.calculation.factor_resolver import FactorResolver, determine_category
from greenscore.calculation.unit_converter import UnitConverter
from greenscore.config import GreenScoreConfig, get_config
from greenscore.metrics import observe_duration, record_calculation
from greenscore.models import (
    METHODOLOGY_LABELS,
    ActivityRecord,
    CalculationResult,
    FactorMethod,
    GHGScope,
)
from greenscore.provenance import compute_hash, get_provenance_tracker
from greenscore.reference_data import load_default_factors

logger = logging.getLogger(__name__)


def determine_scope(activity: ActivityRecord, ghg_category: Optional[str] = None) -> GHGScope:
    """
    GHG scope of an activity.

    An explicit ``ghg_scope`` wins. Otherwise the raw category, then the
    derived GHG category, are looked up in the category -> scope table.
    Anything unlisted is Scope 3.
    """
    if activity.ghg_scope is not None:
        return activity.ghg_scope
    scopes = load_default_factors()["category_scopes"]
    for key in (activity.category.lower(), ghg_category):
        if key and key in scopes:
            return GHGScope(scopes[key])
    return GHGScope.SCOPE3


class EmissionsCalculator:
    """
    Single-record emissions calculator.

    Factor resolution is delegated to a FactorResolver and unit handling to
    a UnitConverter; both can be injected for tests or for a caller-owned
    reference provider.
    """

    def __init__(
        self,
        resolver: Optional[FactorResolver] = None,
        converter: Optional[UnitConverter] = None,
        config: Optional[GreenScoreConfig] = None,
    ):
        self.config = config or get_config()
        self.resolver = resolver or FactorResolver(config=self.config)
        self.converter = converter or UnitConverter()
        logger.info("EmissionsCalculator initialized")

    def determine_category(self, activity: ActivityRecord) -> str:
        return activity.ghg_category or determine_category(activity.category)

    def determine_scope(self, activity: ActivityRecord) -> GHGScope:
        return determine_scope(activity, self.determine_category(activity))

    def calculate(self, activity: ActivityRecord) -> CalculationResult:
        """
        Calculate the emissions of one activity.

        Steps:
        1. Normalize the quantity to its canonical unit
        2. Resolve the emission factor through the tier chain
        3. Multiply by the monetary amount (monetary factors) or by the
           normalized quantity (all other factors)
        4. Derive uncertainty, scope and category

        Args:
            activity: Activity to calculate. Not modified.

        Returns:
            CalculationResult with trace, steps and provenance hash.
        """
        start = time.perf_counter()
        steps: List[Dict[str, Any]] = []

        quantity = activity.quantity if activity.quantity is not None else 0.0
        normalized = self.converter.normalize(quantity, activity.unit)
        steps.append({
            "step": 1,
            "description": "Normalize quantity",
            "quantity": quantity,
            "unit": activity.unit,
            "normalized_quantity": normalized.value,
            "normalized_unit": normalized.unit,
            "conversion_factor": normalized.factor,
        })

        tier, factor = self.resolver.resolve_with_tier(activity)
        steps.append({
            "step": 2,
            "description": "Resolve emission factor",
            "tier": tier,
            "factor_value": factor.factor_value,
            "factor_unit": factor.factor_unit,
            "source": factor.source_name,
            "method": factor.method.value,
        })

        if factor.method == FactorMethod.MONETARY and activity.monetary_amount is not None:
            co2_kg = activity.monetary_amount * factor.factor_value
            formula = (
                f"{activity.monetary_amount} EUR × {factor.factor_value} "
                f"{factor.factor_unit} = {co2_kg:.2f} kgCO2e"
            )
        else:
            co2_kg = normalized.value * factor.factor_value
            formula = (
                f"{normalized.value} {normalized.unit} × {factor.factor_value} "
                f"{factor.factor_unit} = {co2_kg:.2f} kgCO2e"
            )
        steps.append({
            "step": 3,
            "description": "Calculate emissions",
            "formula": formula,
            "co2_equivalent_kg": co2_kg,
        })

        uncertainty_kg = co2_kg * factor.uncertainty_percent / 100
        steps.append({
            "step": 4,
            "description": "Apply uncertainty",
            "uncertainty_percent": factor.uncertainty_percent,
            "uncertainty_kg": uncertainty_kg,
        })

        ghg_category = self.determine_category(activity)
        ghg_scope = determine_scope(activity, ghg_category)

        provenance_hash = compute_hash({
            "activity": activity.model_dump(mode="json"),
            "factor": factor.model_dump(mode="json"),
            "co2_equivalent_kg": co2_kg,
            "ghg_scope": ghg_scope.value,
            "ghg_category": ghg_category,
        })

        result = CalculationResult(
            co2_equivalent_kg=co2_kg,
            co2_equivalent_tonnes=co2_kg / 1000,
            emission_factor=factor,
            formula=formula,
            methodology=METHODOLOGY_LABELS[factor.method],
            ghg_scope=ghg_scope,
            ghg_category=ghg_category,
            uncertainty_kg=uncertainty_kg,
            confidence_score=factor.confidence_score,
            normalized_quantity=normalized.value,
            normalized_unit=normalized.unit,
            calculation_steps=steps,
            provenance_hash=provenance_hash,
        )

        if self.config.enable_provenance:
            get_provenance_tracker().record(
                "calculation", activity.id or provenance_hash[:16],
                "calculate", provenance_hash,
            )
        record_calculation(factor.method.value, ghg_scope.value)
        elapsed = time.perf_counter() - start
        observe_duration("calculate", elapsed)

        logger.info(
            "Calculation completed: %s -> %.3f kgCO2e (%s, %s, tier=%s, %.2fms)",
            activity.id or activity.category, co2_kg, ghg_scope.value,
            factor.method.value, tier, elapsed * 1000,
        )
        return result


__all__ = ["EmissionsCalculator", "determine_scope"]
