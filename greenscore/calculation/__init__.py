"""
GreenScore Emission Calculation Engine

Deterministic GHG emissions calculation from activity records.

Key Guarantees:
- DETERMINISTIC: same input and reference data -> same output
- TOTAL: factor resolution always returns a factor (generic fallback)
- FULL PROVENANCE: SHA-256 hash on every calculation result

Components:
- UnitConverter: table-driven unit normalization
- FactorResolver: tiered emission factor resolution
- Scope3Library: GHG Protocol Scope-3 category library
- monetary_ratios: spend-based factors and accounting import
- EmissionsCalculator: single-record calculation
- BatchCalculator: thread-pool batch calculation
"""

from greenscore.calculation.unit_converter import NormalizedQuantity, UnitConverter, normalize
from greenscore.calculation.scope3_library import Scope3Library, SubcategoryEmissions
from greenscore.calculation.monetary_ratios import (
    calculate_monetary_emissions,
    find_monetary_factor,
    parse_accounting_csv,
    process_accounting_entries,
)
from greenscore.calculation.factor_resolver import (
    FactorResolver,
    InMemoryReferenceProvider,
    ReferenceDataProvider,
    determine_category,
    load_local_factor_provider,
)
from greenscore.calculation.core_calculator import EmissionsCalculator, determine_scope
from greenscore.calculation.batch_calculator import (
    BatchCalculator,
    BatchItem,
    BatchResult,
    calculate_scope_totals,
)

__all__ = [
    "NormalizedQuantity",
    "UnitConverter",
    "normalize",
    "Scope3Library",
    "SubcategoryEmissions",
    "calculate_monetary_emissions",
    "find_monetary_factor",
    "parse_accounting_csv",
    "process_accounting_entries",
    "FactorResolver",
    "InMemoryReferenceProvider",
    "ReferenceDataProvider",
    "determine_category",
    "load_local_factor_provider",
    "EmissionsCalculator",
    "determine_scope",
    "BatchCalculator",
    "BatchItem",
    "BatchResult",
    "calculate_scope_totals",
]
