# -*- coding: utf-8 -*-
"""Tests for smart-assist scope and category inference."""

import pytest

from greenscore.models import ActivityRecord, GHGScope
from greenscore.smart_assist.classifier import infer_category, infer_scope, unit_in_class, unit_tokens


def _record(unit="", supplier=None, category="a_classer"):
    return ActivityRecord(category=category, unit=unit, supplier_name=supplier)


class TestUnitClasses:

    def test_tokens(self):
        assert unit_tokens(" kgCO2e/L ") == ["kgco2e", "l"]
        assert unit_tokens(None) == []

    @pytest.mark.parametrize("unit, class_name, expected", [
        ("kWh", "energy", True),
        ("kWh_PCS", "energy", True),
        ("litres", "volume", True),
        ("L", "volume", True),
        ("lb", "volume", False),
        ("m3", "gas_volume", True),
        ("km", "distance", True),
        ("t.km", "distance", True),
        ("TND", "currency", True),
        ("€", "currency", True),
        ("kg", "currency", False),
        ("kWh", "unknown_class", False),
    ])
    def test_unit_in_class(self, unit, class_name, expected):
        """Units match on listed tokens or contained fragments."""
        assert unit_in_class(unit, class_name) is expected


class TestInferScope:
    """Scope rule order: document, unit, supplier, default."""

    def test_document_type_first(self):
        """A known document type wins over the unit."""
        suggestion = infer_scope(_record(unit="litres"), document_type="electricity_bill")

        assert suggestion.scope == GHGScope.SCOPE2
        assert suggestion.confidence == 0.95
        assert "electricity_bill" in suggestion.reason

    def test_document_type_normalized(self):
        suggestion = infer_scope(_record(), document_type="  Fuel_Invoice ")

        assert suggestion.scope == GHGScope.SCOPE1

    @pytest.mark.parametrize("unit, scope, confidence", [
        ("kWh", GHGScope.SCOPE2, 0.85),
        ("litres", GHGScope.SCOPE1, 0.80),
        ("km", GHGScope.SCOPE3, 0.80),
        ("TND", GHGScope.SCOPE3, 0.70),
    ])
    def test_unit_rules(self, unit, scope, confidence):
        suggestion = infer_scope(_record(unit=unit))

        assert suggestion.scope == scope
        assert suggestion.confidence == confidence

    def test_supplier_rule(self):
        """Utility suppliers point to Scope 2 when the unit says nothing."""
        suggestion = infer_scope(_record(unit="kg", supplier="STEG Tunis"))

        assert suggestion.scope == GHGScope.SCOPE2
        assert suggestion.confidence == 0.90

    def test_default(self):
        """Without signals the suggestion is Scope 3 at 0.5."""
        suggestion = infer_scope(_record(unit="kg"))

        assert suggestion.scope == GHGScope.SCOPE3
        assert suggestion.confidence == 0.50


class TestInferCategory:
    """Category rule order: document, unit with supplier, default."""

    def test_document_type(self):
        suggestion = infer_category(_record(), document_type="purchase_invoice")

        assert suggestion.category == "achats_services"
        assert suggestion.subcategory == "Purchases and services"
        assert suggestion.confidence == 0.85

    def test_energy_unit(self):
        suggestion = infer_category(_record(unit="kWh"))

        assert suggestion.category == "electricite"
        assert suggestion.confidence == 0.90

    def test_gas_requires_gas_supplier(self):
        """Cubic metres only mean natural gas from a gas supplier."""
        assert infer_category(_record(unit="m3", supplier="Société Tunisienne Gaz")).category == "gaz_naturel"
        assert infer_category(_record(unit="m3")).category == "autres"

    def test_volume_with_supplier(self):
        assert infer_category(_record(unit="litres", supplier="Station Gazole")).category == "diesel"
        petrol = infer_category(_record(unit="litres", supplier="Sans Plomb Express"))
        assert petrol.category == "essence"
        assert petrol.confidence == 0.90

    def test_volume_alone_assumes_diesel(self):
        suggestion = infer_category(_record(unit="litres"))

        assert suggestion.category == "diesel"
        assert suggestion.confidence == 0.70

    def test_default(self):
        suggestion = infer_category(_record(unit="kg"))

        assert suggestion.category == "autres"
        assert suggestion.confidence == 0.40
        assert suggestion.reason == "Category not identified"
