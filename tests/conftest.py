# -*- coding: utf-8 -*-
"""Pytest configuration and shared fixtures."""

from typing import List

import pytest

from greenscore.config import GreenScoreConfig, reset_config, set_config
from greenscore.models import (
    ActionRecord,
    ActionStatus,
    ActivityRecord,
    Category,
    CategoryId,
    Indicator,
)
from greenscore.provenance import reset_provenance_tracker
from greenscore.reference_data import clear_caches


@pytest.fixture(autouse=True)
def _isolated_state():
    """Fresh configuration, provenance chain and reference caches per test."""
    set_config(GreenScoreConfig())
    reset_provenance_tracker()
    clear_caches()
    yield
    reset_config()
    reset_provenance_tracker()


@pytest.fixture
def config() -> GreenScoreConfig:
    return GreenScoreConfig()


@pytest.fixture
def diesel_activity() -> ActivityRecord:
    """100 litres of diesel, the reference Scope 1 activity."""
    return ActivityRecord(id="ACT-1", category="diesel", quantity=100, unit="litres")


@pytest.fixture
def scenario_categories() -> List[Category]:
    """E=80, S=60, G=40 with the packaged benchmarks (total 62.0 with default weights)."""
    return [
        # Renewable share 40% against an optimum of 50%
        Category(id=CategoryId.E, indicators=[Indicator(id="E3", value=40.0)]),
        # Share of women 30% against an optimum of 50%
        Category(id=CategoryId.S, indicators=[Indicator(id="S2", value=30.0)]),
        # Women on the board 16% against an optimum of 40%
        Category(id=CategoryId.G, indicators=[Indicator(id="G1", value=16.0)]),
    ]


@pytest.fixture
def backlog() -> List[ActionRecord]:
    """Ten actions: five done, two blocked, three to do."""
    statuses = (
        [ActionStatus.DONE] * 5
        + [ActionStatus.BLOCKED] * 2
        + [ActionStatus.TODO] * 3
    )
    return [
        ActionRecord(
            id=f"A{n}",
            title=f"Action {n}",
            status=status,
            category=CategoryId.E,
        )
        for n, status in enumerate(statuses, start=1)
    ]
