# -*- coding: utf-8 -*-
"""Tests for the packaged reference tables."""

import pytest

from greenscore.exceptions import ReferenceDataError
from greenscore.reference_data import (
    load_action_library,
    load_benchmarks,
    load_default_factors,
    load_grade_bands,
    load_local_factor_rows,
    load_scope3_categories,
    load_table,
)


class TestPackagedTables:

    def test_default_factors(self):
        table = load_default_factors()

        assert table["factors"]["diesel"]["value"] == 2.67
        assert table["fallback"]["value"] == 0.5

    def test_scope3_categories_in_protocol_order(self):
        categories = load_scope3_categories()

        assert len(categories) == 15
        assert [c.number for c in categories] == list(range(1, 16))

    def test_grade_bands_descending(self):
        bands = load_grade_bands()

        assert bands[0].grade == "AAA"
        assert [b.min for b in bands] == sorted((b.min for b in bands), reverse=True)

    def test_models_validated(self):
        assert load_benchmarks()["E4"].inverse is True
        assert all(row.country_code == "TN" for row in load_local_factor_rows())
        assert {e.indicator_id for e in load_action_library()} >= {"E1", "E3", "S2", "G4"}

    def test_cached(self):
        assert load_default_factors() is load_default_factors()


class TestLoadTable:

    def test_missing_file(self, tmp_path):
        with pytest.raises(ReferenceDataError) as exc_info:
            load_table("absent.yaml", data_dir=tmp_path)

        assert exc_info.value.context["data_file"].endswith("absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        (tmp_path / "broken.yaml").write_text("factors: [", encoding="utf-8")

        with pytest.raises(ReferenceDataError):
            load_table("broken.yaml", data_dir=tmp_path)

    def test_not_a_mapping(self, tmp_path):
        (tmp_path / "list.yaml").write_text("- 1\n- 2\n", encoding="utf-8")

        with pytest.raises(ReferenceDataError, match="must be a mapping"):
            load_table("list.yaml", data_dir=tmp_path)
