# -*- coding: utf-8 -*-
"""
Reference Data Loader - GreenScore

Loads the static reference tables shipped under ``greenscore/data``:
default emission factors, unit conversions, the Scope-3 category library,
monetary ratios, national reference factors, smart-assist rules, ESG
benchmarks and schema, compliance alert texts and the remediation action
library.

Tables are parsed once per process and cached. A missing or malformed
file raises ReferenceDataError; the engines never run on partial tables.

Example:
    >>> from greenscore.reference_data import load_default_factors
    >>> table = load_default_factors()
    >>> table["factors"]["diesel"]["value"]
    2.67

Author: GreenScore Platform Team
Status: Production Ready
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from greenscore.exceptions import ReferenceDataError
from greenscore.models import (
    Benchmark,
    GradeBand,
    LocalFactorRow,
    RemediationEntry,
    Scope3Category,
)

logger = logging.getLogger(__name__)

#: Directory holding the packaged YAML tables.
DATA_DIR: Path = Path(__file__).parent / "data"


# ---------------------------------------------------------------------------
# Raw loading
# ---------------------------------------------------------------------------


def load_table(name: str, data_dir: Optional[Path] = None) -> Dict[str, Any]:
    """Load one YAML reference table.

    Args:
        name: File name inside the data directory (e.g. ``default_factors.yaml``).
        data_dir: Alternative directory, defaults to the packaged one.

    Returns:
        Parsed mapping.

    Raises:
        ReferenceDataError: If the file is missing, unparsable, or not a
            mapping at the top level.
    """
    path = (data_dir or DATA_DIR) / name
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ReferenceDataError(
            f"Reference table not found: {name}", data_file=str(path),
        ) from e
    except yaml.YAMLError as e:
        raise ReferenceDataError(
            f"Failed to parse reference table {name}: {e}", data_file=str(path),
        ) from e

    if not isinstance(data, dict):
        raise ReferenceDataError(
            f"Reference table {name} must be a mapping", data_file=str(path),
        )
    logger.debug("Loaded reference table %s (version %s)", name, data.get("version"))
    return data


def _require(table: Dict[str, Any], key: str, name: str) -> Any:
    if key not in table:
        raise ReferenceDataError(
            f"Reference table {name} is missing key '{key}'",
            context={"key": key},
            data_file=name,
        )
    return table[key]


# ---------------------------------------------------------------------------
# Cached accessors
# ---------------------------------------------------------------------------


@lru_cache(maxsize=None)
def load_default_factors() -> Dict[str, Any]:
    """Default factor table, generic fallback, category scopes and keywords."""
    name = "default_factors.yaml"
    table = load_table(name)
    for key in ("factors", "fallback", "category_scopes", "category_keywords"):
        _require(table, key, name)
    return table


@lru_cache(maxsize=None)
def load_unit_conversions() -> List[Dict[str, Any]]:
    name = "unit_conversions.yaml"
    return list(_require(load_table(name), "conversions", name))


@lru_cache(maxsize=None)
def load_scope3_categories() -> List[Scope3Category]:
    """Scope-3 categories validated into models, in GHG Protocol order."""
    name = "scope3_categories.yaml"
    raw = _require(load_table(name), "categories", name)
    try:
        categories = [Scope3Category(**item) for item in raw]
    except PydanticValidationError as e:
        raise ReferenceDataError(
            f"Invalid Scope-3 category table: {e}", data_file=name,
        ) from e
    logger.info("Loaded %d Scope-3 categories", len(categories))
    return categories


@lru_cache(maxsize=None)
def load_monetary_ratios() -> Dict[str, Any]:
    name = "monetary_ratios.yaml"
    table = load_table(name)
    for key in ("factors", "default_factor", "keywords", "csv_headers"):
        _require(table, key, name)
    return table


@lru_cache(maxsize=None)
def load_local_factor_rows() -> List[LocalFactorRow]:
    """National reference factor rows (Tunisian STEG / ADEME)."""
    name = "local_factors.yaml"
    raw = _require(load_table(name), "rows", name)
    try:
        return [LocalFactorRow(**row) for row in raw]
    except PydanticValidationError as e:
        raise ReferenceDataError(
            f"Invalid local factor table: {e}", data_file=name,
        ) from e


@lru_cache(maxsize=None)
def load_smart_assist_rules() -> Dict[str, Any]:
    name = "smart_assist_rules.yaml"
    table = load_table(name)
    for key in (
        "document_scopes", "unit_classes", "unit_scopes", "supplier_scopes",
        "default_scope", "document_categories", "unit_categories",
        "default_category", "category_units",
    ):
        _require(table, key, name)
    return table


@lru_cache(maxsize=None)
def load_esg_reference() -> Dict[str, Any]:
    """ESG benchmarks, sector multipliers, grades, schema and materiality."""
    name = "esg_reference.yaml"
    table = load_table(name)
    for key in (
        "benchmarks", "sector_multipliers", "grades", "schema",
        "materiality", "sector_benchmarks",
    ):
        _require(table, key, name)
    return table


@lru_cache(maxsize=None)
def load_benchmarks() -> Dict[str, Benchmark]:
    raw = load_esg_reference()["benchmarks"]
    return {indicator_id: Benchmark(**bounds) for indicator_id, bounds in raw.items()}


@lru_cache(maxsize=None)
def load_grade_bands() -> List[GradeBand]:
    """Grade bands ordered by descending minimum score."""
    bands = [GradeBand(**band) for band in load_esg_reference()["grades"]]
    return sorted(bands, key=lambda b: b.min, reverse=True)


@lru_cache(maxsize=None)
def load_compliance_rules() -> Dict[str, Any]:
    name = "compliance_rules.yaml"
    table = load_table(name)
    for key in ("alerts", "esg_alerts"):
        _require(table, key, name)
    return table


@lru_cache(maxsize=None)
def load_action_library() -> List[RemediationEntry]:
    name = "action_library.yaml"
    raw = _require(load_table(name), "entries", name)
    try:
        entries = [RemediationEntry(**entry) for entry in raw]
    except PydanticValidationError as e:
        raise ReferenceDataError(
            f"Invalid action library: {e}", data_file=name,
        ) from e
    logger.info("Loaded %d remediation library entries", len(entries))
    return entries


def clear_caches() -> None:
    """Drop every cached table so the next access re-reads the files."""
    for loader in (
        load_default_factors,
        load_unit_conversions,
        load_scope3_categories,
        load_monetary_ratios,
        load_local_factor_rows,
        load_smart_assist_rules,
        load_esg_reference,
        load_benchmarks,
        load_grade_bands,
        load_compliance_rules,
        load_action_library,
    ):
        loader.cache_clear()


__all__ = [
    "DATA_DIR",
    "load_table",
    "load_default_factors",
    "load_unit_conversions",
    "load_scope3_categories",
    "load_monetary_ratios",
    "load_local_factor_rows",
    "load_smart_assist_rules",
    "load_esg_reference",
    "load_benchmarks",
    "load_grade_bands",
    "load_compliance_rules",
    "load_action_library",
    "clear_caches",
]
