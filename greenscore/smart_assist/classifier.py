# -*- coding: utf-8 -*-
"""
Scope / Category Classifier - Smart Assist

Infers the GHG scope and activity category of a record from weak signals
(document type hint, unit, supplier name). Each inference is an ordered
chain of rule functions returning a suggestion or None; the first match
wins and carries a fixed confidence and a textual reason.

Scope order:    document type -> unit -> supplier -> default (scope3, 0.50)
Category order: document type -> unit (+ supplier) -> default (autres, 0.40)

Rule tables live in ``data/smart_assist_rules.yaml``.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, List, Optional

from greenscore.models import ActivityRecord, CategorySuggestion, GHGScope, ScopeSuggestion
from greenscore.reference_data import load_smart_assist_rules

logger = logging.getLogger(__name__)

_TOKEN_SPLIT = re.compile(r"[\s/_]+")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def unit_tokens(unit: Optional[str]) -> List[str]:
    """Lower-cased unit tokens split on whitespace, ``/`` and ``_``."""
    return [t for t in _TOKEN_SPLIT.split((unit or "").lower().strip()) if t]


def unit_in_class(unit: Optional[str], class_name: str) -> bool:
    """Check whether a unit belongs to a named unit class."""
    unit_class = load_smart_assist_rules()["unit_classes"].get(class_name)
    if unit_class is None:
        return False
    text = (unit or "").lower().strip()
    if not text:
        return False
    if any(token in unit_class.get("tokens", []) for token in unit_tokens(text)):
        return True
    return any(fragment in text for fragment in unit_class.get("contains", []))


def _supplier_matches(supplier: Optional[str], keywords: List[str]) -> bool:
    text = (supplier or "").lower()
    return bool(text) and any(keyword in text for keyword in keywords)


def _document_key(document_type: Optional[str]) -> str:
    return (document_type or "").strip().lower()


# ---------------------------------------------------------------------------
# Scope rules
# ---------------------------------------------------------------------------

ScopeRule = Callable[[ActivityRecord, Optional[str]], Optional[ScopeSuggestion]]


def scope_from_document(record: ActivityRecord, document_type: Optional[str]) -> Optional[ScopeSuggestion]:
    key = _document_key(document_type)
    entry = load_smart_assist_rules()["document_scopes"].get(key)
    if entry is None:
        return None
    return ScopeSuggestion(
        scope=GHGScope(entry["scope"]),
        confidence=min(entry["confidence"], 0.95),
        reason=f"Document type '{key}' identified",
    )


def scope_from_unit(record: ActivityRecord, document_type: Optional[str]) -> Optional[ScopeSuggestion]:
    for rule in load_smart_assist_rules()["unit_scopes"]:
        if unit_in_class(record.unit, rule["unit"]):
            return ScopeSuggestion(
                scope=GHGScope(rule["scope"]),
                confidence=rule["confidence"],
                reason=rule["reason"],
            )
    return None


def scope_from_supplier(record: ActivityRecord, document_type: Optional[str]) -> Optional[ScopeSuggestion]:
    for rule in load_smart_assist_rules()["supplier_scopes"]:
        if _supplier_matches(record.supplier_name, rule["keywords"]):
            return ScopeSuggestion(
                scope=GHGScope(rule["scope"]),
                confidence=rule["confidence"],
                reason=rule["reason"],
            )
    return None


def default_scope(record: ActivityRecord, document_type: Optional[str]) -> ScopeSuggestion:
    entry = load_smart_assist_rules()["default_scope"]
    return ScopeSuggestion(
        scope=GHGScope(entry["scope"]),
        confidence=entry["confidence"],
        reason=entry["reason"],
    )


SCOPE_RULES: List[ScopeRule] = [
    scope_from_document,
    scope_from_unit,
    scope_from_supplier,
    default_scope,
]


def infer_scope(record: ActivityRecord, document_type: Optional[str] = None) -> ScopeSuggestion:
    """Suggest a GHG scope for a record. Always returns a suggestion."""
    for rule in SCOPE_RULES:
        suggestion = rule(record, document_type)
        if suggestion is not None:
            logger.debug("Scope rule %s -> %s", rule.__name__, suggestion.scope.value)
            return suggestion
    return default_scope(record, document_type)


# ---------------------------------------------------------------------------
# Category rules
# ---------------------------------------------------------------------------

CategoryRule = Callable[[ActivityRecord, Optional[str]], Optional[CategorySuggestion]]


def category_from_document(record: ActivityRecord, document_type: Optional[str]) -> Optional[CategorySuggestion]:
    rules = load_smart_assist_rules()
    key = _document_key(document_type)
    entry = rules["document_categories"].get(key)
    if entry is None:
        return None
    return CategorySuggestion(
        category=entry["category"],
        subcategory=entry.get("subcategory"),
        confidence=rules["document_category_confidence"],
        reason=f"Document type '{key}' identified",
    )


def category_from_unit(record: ActivityRecord, document_type: Optional[str]) -> Optional[CategorySuggestion]:
    for rule in load_smart_assist_rules()["unit_categories"]:
        if not unit_in_class(record.unit, rule["unit"]):
            continue
        suppliers = rule.get("suppliers")
        if suppliers and not _supplier_matches(record.supplier_name, suppliers):
            continue
        return CategorySuggestion(
            category=rule["category"],
            confidence=rule["confidence"],
            reason=rule["reason"],
        )
    return None


def default_category(record: ActivityRecord, document_type: Optional[str]) -> CategorySuggestion:
    entry: Dict[str, Any] = load_smart_assist_rules()["default_category"]
    return CategorySuggestion(
        category=entry["category"],
        confidence=entry["confidence"],
        reason=entry["reason"],
    )


CATEGORY_RULES: List[CategoryRule] = [
    category_from_document,
    category_from_unit,
    default_category,
]


def infer_category(record: ActivityRecord, document_type: Optional[str] = None) -> CategorySuggestion:
    """Suggest an activity category for a record. Always returns a suggestion."""
    for rule in CATEGORY_RULES:
        suggestion = rule(record, document_type)
        if suggestion is not None:
            logger.debug("Category rule %s -> %s", rule.__name__, suggestion.category)
            return suggestion
    return default_category(record, document_type)


__all__ = [
    "unit_tokens",
    "unit_in_class",
    "scope_from_document",
    "scope_from_unit",
    "scope_from_supplier",
    "default_scope",
    "SCOPE_RULES",
    "infer_scope",
    "category_from_document",
    "category_from_unit",
    "default_category",
    "CATEGORY_RULES",
    "infer_category",
]
