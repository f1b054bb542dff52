# -*- coding: utf-8 -*-
"""
Unit Normalization Engine

Converts an activity quantity into the canonical unit used for factor
lookup, from the packaged conversion table:

- Energy: kWh_PCS, MWh, GJ, TJ, thermie, tep, BTU -> kWh
- Volume: m3, gallon_us, gallon_uk -> litres
- Mass: tonne, t, lb -> kg
- Distance: km -> m, mile / nm -> km

GUARANTEES:
- Pure and deterministic (same input -> same output)
- Total: an unknown unit is passed through unchanged, never an error
- Linear: normalize(k * q, u).value == k * normalize(q, u).value
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from greenscore.reference_data import load_unit_conversions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedQuantity:
    """Quantity expressed in its canonical unit."""

    value: float
    unit: str
    converted: bool = False
    factor: float = 1.0


class UnitConverter:
    """
    Table-driven unit normalizer.

    Source units are matched case-insensitively after trimming. The first
    matching table row wins.
    """

    def __init__(self, conversions: Optional[List[Dict]] = None):
        """
        Initialize the converter.

        Args:
            conversions: Conversion rows ``{from, to, factor}``; defaults to
                the packaged ``unit_conversions.yaml`` table.
        """
        rows = conversions if conversions is not None else load_unit_conversions()
        self._table: Dict[str, Tuple[str, float]] = {}
        for row in rows:
            key = str(row["from"]).lower().strip()
            # first row wins
            self._table.setdefault(key, (str(row["to"]), float(row["factor"])))
        logger.debug("UnitConverter initialized with %d conversions", len(self._table))

    def normalize(self, quantity: float, unit: str) -> NormalizedQuantity:
        """
        Convert ``quantity`` from ``unit`` to its canonical unit.

        Args:
            quantity: Quantity in ``unit``.
            unit: Unit as written on the source document.

        Returns:
            NormalizedQuantity. For an unknown unit the input quantity and
            unit are returned unchanged with ``converted=False``.
        """
        key = (unit or "").lower().strip()
        match = self._table.get(key)
        if match is None:
            return NormalizedQuantity(value=quantity, unit=unit)
        target, factor = match
        return NormalizedQuantity(
            value=quantity * factor, unit=target, converted=True, factor=factor,
        )

    def is_known(self, unit: str) -> bool:
        """Check whether ``unit`` has a conversion row."""
        return (unit or "").lower().strip() in self._table

    def list_conversions(self) -> Dict[str, Tuple[str, float]]:
        """Return the conversion table keyed by lower-cased source unit."""
        return dict(self._table)


_default_converter: Optional[UnitConverter] = None


def normalize(quantity: float, unit: str) -> NormalizedQuantity:
    """Normalize with the packaged conversion table."""
    global _default_converter
    if _default_converter is None:
        _default_converter = UnitConverter()
    return _default_converter.normalize(quantity, unit)


__all__ = ["NormalizedQuantity", "UnitConverter", "normalize"]
