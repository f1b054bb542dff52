# -*- coding: utf-8 -*-
"""Tests for the GHG Protocol Scope-3 sector library."""

import pytest

from greenscore.calculation.scope3_library import Scope3Library
from greenscore.models import FactorMethod, Scope3Direction


@pytest.fixture
def library():
    return Scope3Library()


class TestScope3Library:
    """Category and sub-category queries."""

    def test_fifteen_categories(self, library):
        """The library holds the 15 categories, numbered 1 to 15."""
        assert sorted(c.number for c in library.categories) == list(range(1, 16))

    def test_upstream_and_downstream(self, library):
        """Categories 1-8 are upstream, 9-15 downstream."""
        upstream = library.get_upstream_categories()
        downstream = library.get_downstream_categories()

        assert [c.number for c in upstream] == list(range(1, 9))
        assert [c.number for c in downstream] == list(range(9, 16))
        assert all(c.direction == Scope3Direction.UPSTREAM for c in upstream)

    def test_lookup_by_number_and_id(self, library):
        category = library.get_category_by_number(4)

        assert category.id == "upstream_transport"
        assert library.get_category_by_id("upstream_transport") == category
        assert library.get_category_by_number(16) is None

    def test_find_subcategory_by_id_or_name(self, library):
        """Sub-categories match by id or case-insensitive name."""
        by_id = library.find_subcategory("road_transport")
        by_name = library.find_subcategory("ROAD TRANSPORT")

        assert by_id is not None
        assert by_id[1].id == by_name[1].id == "road_transport"
        assert library.find_subcategory("road") is None
        assert library.find_subcategory("") is None

    def test_preferred_factor_follows_precedence(self, library):
        """Actual data outranks monetary ratios."""
        _, steel = library.find_subcategory("steel")

        method, factor = steel.preferred_factor()

        assert method == FactorMethod.ACTUAL
        assert factor.value == 1.46

    def test_calculate_subcategory_emissions(self, library):
        """Emissions apply the requested method factor."""
        result = library.calculate_subcategory_emissions(
            "steel", "purchased_goods_services", 100, FactorMethod.MONETARY,
        )

        assert result.emissions == pytest.approx(89)
        assert result.uncertainty == 30
        assert result.unit == "kgCO2e/EUR"

    def test_calculate_missing_method_or_ids(self, library):
        """Unknown ids or absent method factors give None."""
        assert library.calculate_subcategory_emissions(
            "steel", "purchased_goods_services", 1, FactorMethod.TECHNICAL,
        ) is None
        assert library.calculate_subcategory_emissions(
            "steel", "capital_goods", 1, FactorMethod.ACTUAL,
        ) is None
        assert library.calculate_subcategory_emissions(
            "nope", "purchased_goods_services", 1, FactorMethod.ACTUAL,
        ) is None
