# -*- coding: utf-8 -*-
"""Tests for the tiered emission factor resolver."""

import pytest

from greenscore.calculation.factor_resolver import (
    DEFAULT_STRATEGIES,
    FactorResolver,
    InMemoryReferenceProvider,
    determine_category,
    load_local_factor_provider,
)
from greenscore.models import (
    ActivityRecord,
    FactorMethod,
    LocalFactorRow,
    Scope3Category,
    Scope3Subcategory,
    SectorFactor,
)


def _sector_category(category_id="custom_cat", sub_id="my_widget", value=9.9):
    return Scope3Category(
        id=category_id,
        number=1,
        name="Custom purchases",
        direction="upstream",
        default_method=FactorMethod.ACTUAL,
        subcategories=[
            Scope3Subcategory(
                id=sub_id,
                name="My widget",
                unit="unit",
                factors={
                    FactorMethod.ACTUAL: SectorFactor(
                        value=value, unit="kgCO2e/unit", source="Supplier EPD", uncertainty=5,
                    ),
                },
            ),
        ],
    )


def _row(row_id, country, value, is_default=False, is_active=True, category="electricite"):
    return LocalFactorRow(
        id=row_id,
        category=category,
        country_code=country,
        factor_value=value,
        factor_unit="kgCO2e/kWh",
        source_name=f"source-{row_id}",
        is_default=is_default,
        is_active=is_active,
    )


class TestDetermineCategory:
    """Free-text category mapping onto the default factor table."""

    def test_direct_hit(self):
        """A category present in the default table is kept."""
        assert determine_category("gaz_naturel") == "gaz_naturel"

    def test_keyword_rules(self):
        """Keyword rules map free text, first rule wins."""
        assert determine_category("Gazole camion") == "diesel"
        assert determine_category("Electricite bureau") == "electricite"
        assert determine_category("Livraison client") == "transport_routier"

    def test_unknown_and_empty(self):
        """Unmatched or empty text maps to autres."""
        assert determine_category("widgets") == "autres"
        assert determine_category("") == "autres"
        assert determine_category(None) == "autres"


class TestInMemoryReferenceProvider:
    """Row selection of the reference tier."""

    def test_country_row_beats_global(self):
        """A row for the requested country wins over a GLOBAL row."""
        provider = InMemoryReferenceProvider([
            _row("global", "GLOBAL", 0.5, is_default=True),
            _row("fr", "FR", 0.05),
        ])

        factor = provider.lookup_factor("electricite", "FR")

        assert factor.factor_value == 0.05
        assert factor.method == FactorMethod.ACTUAL
        assert factor.confidence_score == 0.95

    def test_default_row_beats_other_rows(self):
        """Among same-country rows the is_default row wins."""
        provider = InMemoryReferenceProvider([
            _row("a", "TN", 0.40),
            _row("b", "TN", 0.456, is_default=True),
        ])

        assert provider.lookup_factor("electricite", "TN").factor_value == 0.456

    def test_global_row_used_for_other_countries(self):
        """GLOBAL rows match any requested country."""
        provider = InMemoryReferenceProvider([_row("global", "GLOBAL", 0.5)])

        assert provider.lookup_factor("electricite", "DE").factor_value == 0.5

    def test_inactive_rows_ignored(self):
        """Inactive rows never match."""
        provider = InMemoryReferenceProvider([_row("old", "TN", 0.9, is_active=False)])

        assert provider.lookup_factor("electricite", "TN") is None

    def test_sector_category_by_category_or_sub_id(self):
        """Sector categories are found by their id or a sub-category id."""
        category = _sector_category()
        provider = InMemoryReferenceProvider(sector_categories=[category])

        assert provider.lookup_sector_category("custom_cat") is category
        assert provider.lookup_sector_category("my_widget") is category
        assert provider.lookup_sector_category("unknown") is None


class TestFactorResolver:
    """Tier precedence and totality of resolution."""

    def test_default_table_tier(self):
        """Diesel resolves from the default table without a provider."""
        tier, factor = FactorResolver().resolve_with_tier(
            ActivityRecord(category="diesel", quantity=1, unit="litres")
        )

        assert tier == "default"
        assert factor.factor_value == 2.67
        assert factor.method == FactorMethod.DEFAULT
        assert factor.confidence_score == 0.8

    def test_reference_tier_wins(self):
        """The packaged national rows take precedence over the default table."""
        resolver = FactorResolver(provider=load_local_factor_provider())

        tier, factor = resolver.resolve_with_tier(ActivityRecord(category="diesel"))

        assert tier == "reference"
        assert factor.factor_value == 2.68
        assert factor.method == FactorMethod.ACTUAL

    def test_sector_library_tier(self):
        """Scope-3 sub-category ids resolve from the sector library."""
        tier, factor = FactorResolver().resolve_with_tier(
            ActivityRecord(category="road_transport", quantity=10, unit="t.km")
        )

        assert tier == "sector_library"
        assert factor.factor_value == 0.111
        assert factor.method == FactorMethod.ACTUAL
        assert factor.confidence_score == 0.9
        assert factor.source_reference == "upstream_transport/road_transport"

    def test_provider_sector_category(self):
        """Sub-categories supplied through the provider resolve in the sector tier."""
        provider = InMemoryReferenceProvider(sector_categories=[_sector_category()])

        tier, factor = FactorResolver(provider=provider).resolve_with_tier(
            ActivityRecord(category="my_widget", quantity=4, unit="unit")
        )

        assert tier == "sector_library"
        assert factor.factor_value == 9.9
        assert factor.confidence_score == 0.9
        assert factor.source_reference == "custom_cat/my_widget"

    def test_provider_sector_category_by_category_id(self):
        """A category id picks the named sub-category from the provider."""
        provider = InMemoryReferenceProvider(sector_categories=[_sector_category()])

        factor = FactorResolver(provider=provider).resolve(
            ActivityRecord(category="custom_cat", subcategory="My widget")
        )

        assert factor.factor_value == 9.9

    def test_provider_shadows_packaged_library(self):
        """Provider sector data wins over the packaged sub-category of the same id."""
        provider = InMemoryReferenceProvider(
            sector_categories=[_sector_category("my_transport", "road_transport", 0.2)]
        )

        factor = FactorResolver(provider=provider).resolve(ActivityRecord(category="road_transport"))

        assert factor.factor_value == 0.2
        assert factor.source_reference == "my_transport/road_transport"

    def test_monetary_tier_requires_amount(self):
        """Spend-based ratios apply only when an amount is present."""
        resolver = FactorResolver()

        tier, factor = resolver.resolve_with_tier(ActivityRecord(
            category="prestation", monetary_amount=1000, description="Licence logiciel",
        ))
        assert tier == "monetary"
        assert factor.factor_value == 0.28
        assert factor.method == FactorMethod.MONETARY
        assert factor.uncertainty_percent == 25

        tier, _ = resolver.resolve_with_tier(ActivityRecord(category="prestation"))
        assert tier == "fallback"

    def test_generic_fallback(self):
        """Unknown categories always get the generic low-confidence factor."""
        factor = FactorResolver().resolve(ActivityRecord(category="widgets", quantity=3))

        assert factor.factor_value == 0.5
        assert factor.confidence_score == 0.3
        assert factor.method == FactorMethod.DEFAULT

    def test_fallback_logs_warning(self, caplog):
        """Falling back to the generic factor is logged as a warning."""
        with caplog.at_level("WARNING"):
            FactorResolver().resolve(ActivityRecord(category="widgets"))

        assert "generic fallback" in caplog.text

    def test_custom_chain_without_terminal_strategy(self):
        """A chain with no terminal strategy still resolves."""
        resolver = FactorResolver(strategies=[("none", lambda activity, sources: None)])

        tier, factor = resolver.resolve_with_tier(ActivityRecord(category="diesel"))

        assert tier == "fallback"
        assert factor.factor_value == 0.5

    def test_resolve_factor_from_arguments(self):
        """resolve_factor builds the activity from loose arguments."""
        factor = FactorResolver().resolve_factor("electricite")

        assert factor.factor_value == 0.42

    def test_default_chain_order(self):
        """The default chain runs from most to least specific."""
        assert [name for name, _ in DEFAULT_STRATEGIES] == [
            "reference", "sector_library", "monetary", "default", "fallback",
        ]

    @pytest.mark.parametrize("category", ["diesel", "road_transport", "widgets", "electricite"])
    def test_never_returns_none(self, category):
        """Resolution is total."""
        assert FactorResolver().resolve(ActivityRecord(category=category)) is not None
