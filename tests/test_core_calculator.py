# -*- coding: utf-8 -*-
"""
Emissions Calculator Tests

Covers the single-record pipeline:
- Reference scenario (100 litres of diesel)
- Linearity in quantity and exact uncertainty
- Unit normalization, monetary factors and scope determination
- Determinism of the provenance hash
"""

import pytest

from greenscore.calculation.core_calculator import EmissionsCalculator, determine_scope
from greenscore.models import ActivityRecord, FactorMethod, GHGScope
from greenscore.provenance import get_provenance_tracker


@pytest.fixture
def calculator():
    return EmissionsCalculator()


class TestReferenceScenario:
    """100 litres of diesel with the default 2.67 kgCO2e/litre factor."""

    def test_diesel_emissions(self, calculator, diesel_activity):
        """co2 is 267 kg in Scope 1."""
        result = calculator.calculate(diesel_activity)

        assert result.co2_equivalent_kg == pytest.approx(267.0)
        assert result.co2_equivalent_tonnes == pytest.approx(0.267)
        assert result.ghg_scope == GHGScope.SCOPE1
        assert result.ghg_category == "diesel"
        assert result.methodology == "GHG Protocol - Default factors"

    def test_uncertainty_is_exact(self, calculator, diesel_activity):
        """uncertainty_kg equals co2 times the factor uncertainty."""
        result = calculator.calculate(diesel_activity)

        expected = result.co2_equivalent_kg * result.emission_factor.uncertainty_percent / 100
        assert result.uncertainty_kg == expected
        assert result.uncertainty_kg == pytest.approx(13.35)

    def test_formula_and_steps(self, calculator, diesel_activity):
        """The trace names quantity, factor and result, in four steps."""
        result = calculator.calculate(diesel_activity)

        assert result.formula == "100.0 litres × 2.67 kgCO2e/litre = 267.00 kgCO2e"
        assert [s["step"] for s in result.calculation_steps] == [1, 2, 3, 4]
        assert result.calculation_steps[1]["tier"] == "default"

    def test_activity_not_mutated(self, calculator, diesel_activity):
        """The calculator leaves the input record untouched."""
        calculator.calculate(diesel_activity)

        assert diesel_activity.co2_equivalent_kg is None
        assert diesel_activity.ghg_scope is None


class TestCalculationProperties:
    """Algebraic guarantees of the calculator."""

    @pytest.mark.parametrize("factor", [0, 0.5, 2, 10])
    def test_linear_in_quantity(self, calculator, factor):
        """calculate(k*q) == k * calculate(q)."""
        base = calculator.calculate(ActivityRecord(category="essence", quantity=40, unit="litres"))
        scaled = calculator.calculate(
            ActivityRecord(category="essence", quantity=40 * factor, unit="litres")
        )

        assert scaled.co2_equivalent_kg == pytest.approx(factor * base.co2_equivalent_kg)

    def test_missing_quantity_counts_as_zero(self, calculator):
        """A record without quantity yields zero emissions."""
        result = calculator.calculate(ActivityRecord(category="diesel"))

        assert result.co2_equivalent_kg == 0

    def test_deterministic_hash(self, calculator, diesel_activity):
        """Same input gives the same provenance hash."""
        first = calculator.calculate(diesel_activity)
        second = calculator.calculate(diesel_activity.model_copy())

        assert first.provenance_hash == second.provenance_hash
        assert len(first.provenance_hash) == 64

    def test_hash_changes_with_input(self, calculator):
        """Different quantities give different hashes."""
        a = calculator.calculate(ActivityRecord(category="diesel", quantity=1, unit="litres"))
        b = calculator.calculate(ActivityRecord(category="diesel", quantity=2, unit="litres"))

        assert a.provenance_hash != b.provenance_hash

    def test_records_provenance(self, calculator, diesel_activity):
        """Each calculation is chained in the provenance tracker."""
        calculator.calculate(diesel_activity)

        chain = get_provenance_tracker().get_chain("calculation", "ACT-1")
        assert len(chain) == 1


class TestNormalizationAndMethods:
    """Units, monetary factors and fallback."""

    def test_mwh_normalized_before_factor(self, calculator):
        """1 MWh of electricity is 1000 kWh at 0.42 kgCO2e/kWh, Scope 2."""
        result = calculator.calculate(
            ActivityRecord(category="electricite", quantity=1, unit="MWh")
        )

        assert result.normalized_quantity == pytest.approx(1000)
        assert result.normalized_unit == "kWh"
        assert result.co2_equivalent_kg == pytest.approx(420)
        assert result.ghg_scope == GHGScope.SCOPE2

    def test_monetary_factor_uses_amount(self, calculator):
        """Spend-based factors multiply the monetary amount."""
        result = calculator.calculate(ActivityRecord(
            category="prestation",
            quantity=3,
            monetary_amount=1000,
            description="Licence logiciel",
        ))

        assert result.emission_factor.method == FactorMethod.MONETARY
        assert result.co2_equivalent_kg == pytest.approx(280)
        assert "EUR" in result.formula
        assert result.ghg_scope == GHGScope.SCOPE3

    def test_unknown_category_falls_back(self, calculator):
        """Unknown categories are calculated with the generic factor."""
        result = calculator.calculate(ActivityRecord(category="widgets", quantity=10))

        assert result.co2_equivalent_kg == pytest.approx(5)
        assert result.confidence_score == 0.3
        assert result.ghg_category == "autres"
        assert result.ghg_scope == GHGScope.SCOPE3


class TestDetermineScope:
    """Scope derivation order."""

    def test_explicit_scope_wins(self):
        """An explicit scope is never overridden."""
        activity = ActivityRecord(category="diesel", ghg_scope=GHGScope.SCOPE3)

        assert determine_scope(activity) == GHGScope.SCOPE3

    def test_category_table(self):
        """Raw categories are looked up case-insensitively."""
        assert determine_scope(ActivityRecord(category="Electricite")) == GHGScope.SCOPE2

    def test_derived_category_used(self):
        """The derived GHG category is consulted after the raw one."""
        activity = ActivityRecord(category="Gazole camion")

        assert determine_scope(activity, "diesel") == GHGScope.SCOPE1

    def test_unlisted_is_scope3(self):
        """Anything unlisted is Scope 3."""
        assert determine_scope(ActivityRecord(category="widgets")) == GHGScope.SCOPE3
