# -*- coding: utf-8 -*-
"""
Monetary Ratio Engine - Spend-Based Scope 3

Matches free-text purchase descriptions (invoice lines, accounting
labels) to spend-based emission ratios in kgCO2e per currency unit, and
converts accounting exports into spend-based emissions.

Matching order:
    1. Exact (case-insensitive) sub-category name, when supplied
    2. Accounting keyword contained in the description; the longest
       keyword wins, ties keep table order
    3. Default "autres" ratio (0.20 kgCO2e per currency unit)

Example:
    >>> from greenscore.calculation.monetary_ratios import find_monetary_factor
    >>> find_monetary_factor("Licence logiciel").category
    'services_informatiques'

Author: GreenScore Platform Team
Status: Production Ready
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import date
from typing import Dict, List, Optional

from greenscore.models import AccountingEntry, MonetaryEmission, MonetaryFactor
from greenscore.reference_data import load_monetary_ratios

logger = logging.getLogger(__name__)

#: Description used when an accounting row carries none.
UNSPECIFIED_DESCRIPTION = "Not specified"

#: Currency assumed when an accounting row carries none.
DEFAULT_CURRENCY = "TND"


# ---------------------------------------------------------------------------
# Table access
# ---------------------------------------------------------------------------


def get_monetary_factors() -> List[MonetaryFactor]:
    """Return every spend-based ratio in table order."""
    return [MonetaryFactor(**row) for row in load_monetary_ratios()["factors"]]


def get_default_monetary_factor() -> MonetaryFactor:
    return MonetaryFactor(**load_monetary_ratios()["default_factor"])


def get_monetary_uncertainty() -> float:
    """Uncertainty (percent) applied to every spend-based estimate."""
    return float(load_monetary_ratios().get("uncertainty_percent", 25))


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


def _match_keyword(text: str, keywords: Dict[str, str]) -> Optional[str]:
    best_keyword: Optional[str] = None
    for keyword in keywords:
        if keyword in text and (best_keyword is None or len(keyword) > len(best_keyword)):
            best_keyword = keyword
    return keywords[best_keyword] if best_keyword is not None else None


def find_monetary_factor(
    description: Optional[str],
    subcategory: Optional[str] = None,
) -> MonetaryFactor:
    """
    Find the spend-based ratio for a purchase description.

    Args:
        description: Free-text description or activity category.
        subcategory: Optional sub-category name for an exact match.

    Returns:
        The matching MonetaryFactor; the default ratio when nothing
        matches. Never None.
    """
    factors = get_monetary_factors()

    if subcategory:
        wanted = subcategory.strip().lower()
        for factor in factors:
            if factor.subcategory.lower() == wanted:
                logger.debug("Monetary factor matched by subcategory: %s", factor.subcategory)
                return factor

    text = (description or "").lower()
    category = _match_keyword(text, load_monetary_ratios()["keywords"])
    if category is not None:
        for factor in factors:
            if factor.category == category:
                logger.debug("Monetary factor matched by keyword: %s", factor.subcategory)
                return factor

    return get_default_monetary_factor()


def calculate_monetary_emissions(amount: float, factor: MonetaryFactor) -> Dict[str, float]:
    """Apply a spend-based ratio to an amount excluding tax."""
    return {
        "co2_kg": amount * factor.factor_value,
        "uncertainty_percent": get_monetary_uncertainty(),
    }


# ---------------------------------------------------------------------------
# Accounting import
# ---------------------------------------------------------------------------


def _parse_amount(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return None
    cleaned = "".join(raw.split()).replace(",", ".")
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def _column_index(headers: List[str], aliases: List[str]) -> int:
    for idx, header in enumerate(headers):
        if header in aliases:
            return idx
    return -1


def _cell(values: List[str], idx: int) -> Optional[str]:
    if idx < 0 or idx >= len(values):
        return None
    value = values[idx].strip().strip('"')
    return value or None


def parse_accounting_csv(content: str) -> List[AccountingEntry]:
    """
    Parse an accounting export into AccountingEntry rows.

    The delimiter is ``;`` when the header line contains one, ``,``
    otherwise. Header names are matched against French and English
    aliases. Rows with fewer than three cells, or whose amount excluding
    tax is missing, unparsable or not positive, are skipped. Decimal
    commas and thousands spaces are accepted in amounts.

    Args:
        content: Raw CSV text.

    Returns:
        Parsed entries in file order.
    """
    lines = [line for line in content.strip().splitlines() if line.strip()]
    if len(lines) < 2:
        return []

    delimiter = ";" if ";" in lines[0] else ","
    rows = list(csv.reader(io.StringIO("\n".join(lines)), delimiter=delimiter))
    headers = [h.strip().lower() for h in rows[0]]

    aliases = load_monetary_ratios()["csv_headers"]
    idx = {field: _column_index(headers, names) for field, names in aliases.items()}

    entries: List[AccountingEntry] = []
    skipped = 0
    for values in rows[1:]:
        if len(values) < 3:
            skipped += 1
            continue
        amount_ht = _parse_amount(_cell(values, idx["amount_ht"]))
        if amount_ht is None or amount_ht <= 0:
            skipped += 1
            continue

        amount_ttc = None
        if idx["amount_ttc"] >= 0:
            amount_ttc = _parse_amount(_cell(values, idx["amount_ttc"]))

        entries.append(AccountingEntry(
            date=_cell(values, idx["date"]) or date.today().isoformat(),
            description=_cell(values, idx["description"]) or UNSPECIFIED_DESCRIPTION,
            amount_ht=amount_ht,
            amount_ttc=amount_ttc,
            currency=_cell(values, idx["currency"]) or DEFAULT_CURRENCY,
            supplier_name=_cell(values, idx["supplier_name"]),
            account_code=_cell(values, idx["account_code"]),
        ))

    logger.info("Parsed %d accounting entries (%d rows skipped)", len(entries), skipped)
    return entries


def process_accounting_entries(entries: List[AccountingEntry]) -> List[MonetaryEmission]:
    """Compute spend-based emissions for each accounting entry, in order."""
    results = []
    for entry in entries:
        factor = find_monetary_factor(entry.description)
        emissions = calculate_monetary_emissions(entry.amount_ht, factor)
        results.append(MonetaryEmission(
            entry=entry,
            factor=factor,
            co2_kg=emissions["co2_kg"],
            uncertainty_percent=emissions["uncertainty_percent"],
        ))
    return results


__all__ = [
    "get_monetary_factors",
    "get_default_monetary_factor",
    "get_monetary_uncertainty",
    "find_monetary_factor",
    "calculate_monetary_emissions",
    "parse_accounting_csv",
    "process_accounting_entries",
]
