# -*- coding: utf-8 -*-
"""
GreenScore Service Facade

Single entry point for UI and reporting collaborators. Wires the engines
together with one configuration and one reference-data provider and
exposes the in-process operations:

    calculate / calculate_batch   activity -> emissions
    classify                      activity -> smart-assist suggestions
    score_esg                     categories -> ESG score report
    check_compliance              backlog + metrics -> compliance report
    suggest_actions               categories -> suggested actions

Example:
    >>> from greenscore.service import GreenScoreService
    >>> from greenscore.models import ActivityRecord
    >>> service = GreenScoreService()
    >>> service.calculate(ActivityRecord(category="diesel", quantity=100, unit="litres")).co2_equivalent_kg
    267.0

Author: GreenScore Platform Team
Status: Production Ready
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from greenscore.calculation.batch_calculator import BatchCalculator, BatchResult
from greenscore.calculation.core_calculator import EmissionsCalculator
from greenscore.calculation.factor_resolver import FactorResolver, ReferenceDataProvider
from greenscore.calculation.monetary_ratios import parse_accounting_csv, process_accounting_entries
from greenscore.compliance.action_stats import calculate_environmental_roi
from greenscore.compliance.action_suggestions import ActionSuggestionGenerator
from greenscore.compliance.compliance_engine import (
    ComplianceEngine,
    GovernanceInput,
    MetricsInput,
    ThresholdsInput,
)
from greenscore.config import GreenScoreConfig, get_config
from greenscore.models import (
    ActionRecord,
    ActivityRecord,
    CalculationResult,
    Category,
    ComplianceReport,
    EnvironmentalROI,
    EsgAlert,
    MonetaryEmission,
    ScoreReport,
    SectorComparison,
    SmartAssistResult,
)
from greenscore.scoring.aggregator import WeightsInput, score_esg
from greenscore.scoring.indicator_scorer import IndicatorScorer
from greenscore.scoring.insights import compare_to_sector, generate_esg_alerts
from greenscore.smart_assist.service import SmartAssistService

logger = logging.getLogger(__name__)


class GreenScoreService:
    """
    Facade over the GreenScore engines.

    Attributes:
        config: Shared configuration.
        resolver: Factor resolver shared by calculation and smart assist.
    """

    def __init__(
        self,
        config: Optional[GreenScoreConfig] = None,
        provider: Optional[ReferenceDataProvider] = None,
    ):
        self.config = config or get_config()
        self.resolver = FactorResolver(provider=provider, config=self.config)
        self.calculator = EmissionsCalculator(resolver=self.resolver, config=self.config)
        self.batch_calculator = BatchCalculator(calculator=self.calculator, config=self.config)
        self.smart_assist = SmartAssistService(resolver=self.resolver, config=self.config)
        self.scorer = IndicatorScorer()
        self.compliance_engine = ComplianceEngine(config=self.config)
        self.suggestion_generator = ActionSuggestionGenerator(scorer=self.scorer, config=self.config)
        logger.info("GreenScoreService initialized")

    # -- emissions ---------------------------------------------------------

    @staticmethod
    def _attach(activity: ActivityRecord, result: CalculationResult) -> None:
        activity.co2_equivalent_kg = result.co2_equivalent_kg
        if activity.ghg_scope is None:
            activity.ghg_scope = result.ghg_scope
        if activity.ghg_category is None:
            activity.ghg_category = result.ghg_category

    def calculate(self, activity: ActivityRecord) -> CalculationResult:
        """Calculate one activity and attach the result to it."""
        result = self.calculator.calculate(activity)
        self._attach(activity, result)
        return result

    def calculate_batch(self, activities: List[ActivityRecord]) -> BatchResult:
        """Calculate activities in parallel; results keep input order."""
        batch = self.batch_calculator.calculate_batch(activities)
        for item in batch.items:
            if item.result is not None:
                self._attach(item.activity, item.result)
        return batch

    def import_accounting_csv(self, content: str) -> List[MonetaryEmission]:
        """Spend-based emissions for an accounting CSV export."""
        return process_accounting_entries(parse_accounting_csv(content))

    # -- smart assist ------------------------------------------------------

    def classify(
        self,
        record: ActivityRecord,
        document_type: Optional[str] = None,
        history: Optional[Iterable[ActivityRecord]] = None,
    ) -> SmartAssistResult:
        return self.smart_assist.classify(record, document_type, history)

    # -- ESG ---------------------------------------------------------------

    def score_esg(
        self,
        categories: List[Category],
        sector: Optional[str] = None,
        revenue: float = 0.0,
        custom_weights: Optional[WeightsInput] = None,
    ) -> ScoreReport:
        return score_esg(categories, sector, revenue, custom_weights, self.config, self.scorer)

    def esg_alerts(self, categories: List[Category], report: ScoreReport) -> List[EsgAlert]:
        return generate_esg_alerts(categories, report.category_scores)

    def compare_to_sector(self, report: ScoreReport) -> Optional[SectorComparison]:
        return compare_to_sector(report)

    # -- compliance --------------------------------------------------------

    def check_compliance(
        self,
        actions: List[ActionRecord],
        metrics: MetricsInput,
        thresholds: ThresholdsInput = None,
        governance: GovernanceInput = None,
    ) -> ComplianceReport:
        return self.compliance_engine.check_compliance(actions, metrics, thresholds, governance)

    def suggest_actions(self, categories: List[Category]) -> List[ActionRecord]:
        return self.suggestion_generator.suggest(categories)

    def environmental_roi(self, actions: List[ActionRecord]) -> EnvironmentalROI:
        return calculate_environmental_roi(actions, self.config)


__all__ = ["GreenScoreService"]
