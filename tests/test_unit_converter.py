# -*- coding: utf-8 -*-
"""Tests for the table-driven unit converter."""

import pytest

from greenscore.calculation.unit_converter import UnitConverter, normalize
from greenscore.reference_data import load_unit_conversions


class TestUnitConverter:
    """Unit normalization against the packaged conversion table."""

    def test_mwh_to_kwh(self):
        """MWh converts to kWh with factor 1000."""
        result = UnitConverter().normalize(2, "MWh")

        assert result.value == pytest.approx(2000)
        assert result.unit == "kWh"
        assert result.converted is True
        assert result.factor == 1000

    @pytest.mark.parametrize(
        "row", load_unit_conversions(), ids=lambda row: f"{row['from']}->{row['to']}",
    )
    def test_every_table_row(self, row):
        """Each table pair returns quantity times its factor in the target unit."""
        result = UnitConverter().normalize(2.5, row["from"])

        assert result.value == pytest.approx(2.5 * row["factor"])
        assert result.unit == row["to"]
        assert result.converted is True

    def test_matching_is_case_insensitive_and_trimmed(self):
        """Source units match regardless of case and surrounding spaces."""
        result = UnitConverter().normalize(1, "  mwh ")

        assert result.unit == "kWh"
        assert result.value == pytest.approx(1000)

    def test_unknown_unit_passes_through(self):
        """Unknown units are returned unchanged, never an error."""
        result = UnitConverter().normalize(42.5, "barrels")

        assert result.value == 42.5
        assert result.unit == "barrels"
        assert result.converted is False

    def test_empty_unit_passes_through(self):
        """An empty unit is treated as unknown."""
        result = UnitConverter().normalize(3, "")

        assert result.value == 3
        assert result.converted is False

    def test_linear_in_quantity(self):
        """Normalizing k*q gives k times the normalized q."""
        converter = UnitConverter()

        single = converter.normalize(7, "GJ").value
        scaled = converter.normalize(21, "GJ").value

        assert scaled == pytest.approx(3 * single)

    def test_first_row_wins(self):
        """Duplicate source units keep the first table row."""
        converter = UnitConverter([
            {"from": "box", "to": "kg", "factor": 2},
            {"from": "BOX", "to": "kg", "factor": 5},
        ])

        assert converter.normalize(1, "box").value == 2

    def test_is_known(self):
        """is_known reflects the conversion table."""
        converter = UnitConverter()

        assert converter.is_known("m3")
        assert not converter.is_known("furlong")

    def test_module_level_normalize(self):
        """The module helper uses the packaged table."""
        result = normalize(1, "tonne")

        assert result.value == pytest.approx(1000)
        assert result.unit == "kg"
