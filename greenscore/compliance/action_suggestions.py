# -*- coding: utf-8 -*-
"""
Action Suggestion Generator

Matches underperforming indicators to the remediation library and emits
suggested RSE actions.

For every indicator, the first library entry for that indicator whose
trigger threshold exceeds the indicator score fires; every action
template of the entry becomes a new ActionRecord with status ``todo`` and
``is_suggestion=True``. Scores are computed without sector multiplier.
Suggestions are not deduplicated against an existing backlog.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import Counter
from typing import List, Optional

from greenscore.config import GreenScoreConfig, get_config
from greenscore.metrics import observe_duration, record_suggested_actions
from greenscore.models import (
    ActionRecord,
    ActionStatus,
    ActionTemplate,
    Category,
    Indicator,
    RemediationEntry,
)
from greenscore.reference_data import load_action_library
from greenscore.scoring.indicator_scorer import IndicatorScorer

logger = logging.getLogger(__name__)


def _generate_action_id() -> str:
    return f"ACT_{uuid.uuid4().hex}"


def instantiate_action(template: ActionTemplate) -> ActionRecord:
    """New suggested ActionRecord from a library template."""
    return ActionRecord(
        id=_generate_action_id(),
        status=ActionStatus.TODO,
        is_suggestion=True,
        **template.model_dump(),
    )


class ActionSuggestionGenerator:
    """Suggests remediation actions from indicator scores."""

    def __init__(
        self,
        library: Optional[List[RemediationEntry]] = None,
        scorer: Optional[IndicatorScorer] = None,
        config: Optional[GreenScoreConfig] = None,
    ):
        self.config = config or get_config()
        self.library = library if library is not None else load_action_library()
        self.scorer = scorer or IndicatorScorer()

    def threshold_for(self, entry: RemediationEntry) -> float:
        return entry.threshold if entry.threshold is not None else self.config.suggestion_threshold

    def matching_entry(self, indicator: Indicator) -> Optional[RemediationEntry]:
        """First library entry triggered by the indicator's current score."""
        score = self.scorer.score(indicator)
        for entry in self.library:
            if entry.indicator_id == indicator.id and score < self.threshold_for(entry):
                return entry
        return None

    def suggest(self, categories: List[Category]) -> List[ActionRecord]:
        """
        Suggest actions for every underperforming indicator.

        Args:
            categories: Scored ESG categories.

        Returns:
            New ActionRecords in category and indicator order.
        """
        start = time.perf_counter()
        actions: List[ActionRecord] = []
        for category in categories:
            for indicator in category.indicators:
                entry = self.matching_entry(indicator)
                if entry is None:
                    continue
                actions.extend(instantiate_action(template) for template in entry.actions)

        for category_id, count in Counter(a.category.value for a in actions).items():
            record_suggested_actions(category_id, count)
        observe_duration("suggest_actions", time.perf_counter() - start)
        logger.info("Suggested %d remediation actions", len(actions))
        return actions


def suggest_actions(
    categories: List[Category],
    config: Optional[GreenScoreConfig] = None,
) -> List[ActionRecord]:
    return ActionSuggestionGenerator(config=config).suggest(categories)


__all__ = ["ActionSuggestionGenerator", "instantiate_action", "suggest_actions"]
