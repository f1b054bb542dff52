# -*- coding: utf-8 -*-
"""Tests for spend-based ratios and the accounting CSV import."""

from datetime import date

import pytest

from greenscore.calculation.monetary_ratios import (
    calculate_monetary_emissions,
    find_monetary_factor,
    get_default_monetary_factor,
    parse_accounting_csv,
    process_accounting_entries,
)


class TestFindMonetaryFactor:
    """Sub-category, keyword and default matching."""

    def test_subcategory_exact_match(self):
        """An exact sub-category name wins over keywords."""
        factor = find_monetary_factor("Licence logiciel", subcategory="legal services")

        assert factor.subcategory == "Legal services"
        assert factor.factor_value == 0.12

    def test_keyword_match(self):
        """A keyword in the description selects its category."""
        factor = find_monetary_factor("Licence logiciel comptabilité")

        assert factor.category == "services_informatiques"
        assert factor.factor_value == 0.28

    def test_longest_keyword_wins(self):
        """When keywords of several categories match, the longest wins."""
        factor = find_monetary_factor("Maintenance bureau")

        assert factor.category == "maintenance"

    def test_default_when_nothing_matches(self):
        """Unmatched descriptions get the default ratio."""
        factor = find_monetary_factor("Divers")

        assert factor == get_default_monetary_factor()
        assert factor.factor_value == 0.20

    def test_none_description(self):
        assert find_monetary_factor(None).category == "autres"

    def test_calculate_monetary_emissions(self):
        """Emissions are amount times ratio with the flat uncertainty."""
        result = calculate_monetary_emissions(1000, find_monetary_factor("Assurance flotte"))

        assert result["co2_kg"] == pytest.approx(80)
        assert result["uncertainty_percent"] == 25


class TestParseAccountingCsv:
    """Accounting export parsing."""

    def test_semicolon_export_with_decimal_commas(self):
        """French exports use ';' and decimal commas."""
        content = (
            "Date;Libellé;Montant HT;Montant TTC;Fournisseur\n"
            "2024-01-15;Licence logiciel;1 200,50;1 428,60;Microsoft\n"
            "2024-01-20;Repas client;85,00;;Traiteur du Lac\n"
        )

        entries = parse_accounting_csv(content)

        assert len(entries) == 2
        assert entries[0].amount_ht == pytest.approx(1200.5)
        assert entries[0].amount_ttc == pytest.approx(1428.6)
        assert entries[0].supplier_name == "Microsoft"
        assert entries[0].currency == "TND"
        assert entries[1].amount_ttc is None

    def test_comma_export(self):
        """English exports use ','."""
        content = "date,description,amount_ht,currency\n2024-02-01,Hosting,100,EUR\n"

        entries = parse_accounting_csv(content)

        assert len(entries) == 1
        assert entries[0].description == "Hosting"
        assert entries[0].currency == "EUR"

    def test_invalid_rows_skipped(self):
        """Short rows and missing, unparsable or non-positive amounts are skipped."""
        content = (
            "date;description;montant_ht\n"
            "2024-01-01;ok;10\n"
            "2024-01-02;zero;0\n"
            "2024-01-03;negative;-5\n"
            "2024-01-04;text;abc\n"
            "2024-01-05;short\n"
            "2024-01-06;empty;\n"
        )

        entries = parse_accounting_csv(content)

        assert [e.description for e in entries] == ["ok"]

    def test_defaults_for_missing_cells(self):
        """Missing date and description get defaults."""
        content = "date;description;montant_ht\n;;50\n"

        entry = parse_accounting_csv(content)[0]

        assert entry.date == date.today().isoformat()
        assert entry.description == "Not specified"

    @pytest.mark.parametrize("content", ["", "date;description;montant_ht\n"])
    def test_no_data_rows(self, content):
        assert parse_accounting_csv(content) == []


class TestProcessAccountingEntries:

    def test_emissions_per_entry(self):
        """Each entry is matched on its description."""
        entries = parse_accounting_csv(
            "date;libellé;montant_ht\n2024-03-01;Repas séminaire;100\n2024-03-02;Divers;50\n"
        )

        results = process_accounting_entries(entries)

        assert [r.factor.category for r in results] == ["formation", "autres"]
        assert results[0].co2_kg == pytest.approx(15)
        assert results[1].co2_kg == pytest.approx(10)
        assert results[0].uncertainty_percent == 25
