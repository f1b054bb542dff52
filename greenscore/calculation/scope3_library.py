# -*- coding: utf-8 -*-
"""
Scope-3 Sector Library

Queries over the 15 GHG Protocol Scope-3 categories and their
sub-categories. Each sub-category carries per-method emission factors
(actual, technical, monetary); the preferred factor follows method
precedence.

Example:
    >>> from greenscore.calculation.scope3_library import Scope3Library
    >>> lib = Scope3Library()
    >>> lib.get_category_by_number(4).id
    'upstream_transport'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from greenscore.models import (
    FactorMethod,
    Scope3Category,
    Scope3Direction,
    Scope3Subcategory,
)
from greenscore.reference_data import load_scope3_categories

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubcategoryEmissions:
    """Emissions of a quantity against one sub-category factor."""

    emissions: float
    uncertainty: float
    source: str
    unit: str


class Scope3Library:
    """Read-only view over the Scope-3 category library."""

    def __init__(self, categories: Optional[List[Scope3Category]] = None):
        self._categories: List[Scope3Category] = (
            list(categories) if categories is not None else load_scope3_categories()
        )

    @property
    def categories(self) -> List[Scope3Category]:
        return list(self._categories)

    def get_upstream_categories(self) -> List[Scope3Category]:
        return [c for c in self._categories if c.direction == Scope3Direction.UPSTREAM]

    def get_downstream_categories(self) -> List[Scope3Category]:
        return [c for c in self._categories if c.direction == Scope3Direction.DOWNSTREAM]

    def get_category_by_id(self, category_id: str) -> Optional[Scope3Category]:
        for category in self._categories:
            if category.id == category_id:
                return category
        return None

    def get_category_by_number(self, number: int) -> Optional[Scope3Category]:
        for category in self._categories:
            if category.number == number:
                return category
        return None

    def find_subcategory(
        self, key: Optional[str],
    ) -> Optional[Tuple[Scope3Category, Scope3Subcategory]]:
        """
        Find a sub-category by id or by exact (case-insensitive) name.

        Categories are scanned in GHG Protocol order and the first hit is
        returned, so the lookup is deterministic.

        Args:
            key: Sub-category id or display name.

        Returns:
            (category, subcategory) tuple, or None.
        """
        if not key or not key.strip():
            return None
        needle = key.strip().lower()
        for category in self._categories:
            for sub in category.subcategories:
                if sub.id == key.strip() or sub.name.lower() == needle:
                    return category, sub
        return None

    def calculate_subcategory_emissions(
        self,
        subcategory_id: str,
        category_id: str,
        quantity: float,
        method: FactorMethod,
    ) -> Optional[SubcategoryEmissions]:
        """
        Apply one method-specific sub-category factor to a quantity.

        Returns:
            SubcategoryEmissions, or None when the category, the
            sub-category or the requested method factor does not exist.
        """
        category = self.get_category_by_id(category_id)
        if category is None:
            return None
        sub = next((s for s in category.subcategories if s.id == subcategory_id), None)
        if sub is None:
            return None
        factor = sub.factors.get(FactorMethod(method))
        if factor is None:
            return None
        return SubcategoryEmissions(
            emissions=quantity * factor.value,
            uncertainty=factor.uncertainty,
            source=factor.source,
            unit=factor.unit,
        )


__all__ = ["Scope3Library", "SubcategoryEmissions"]
