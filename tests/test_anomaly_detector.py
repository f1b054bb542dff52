# -*- coding: utf-8 -*-
"""Tests for rule-based anomaly and duplicate detection."""

from datetime import date

import pytest

from greenscore.config import GreenScoreConfig
from greenscore.models import ActivityRecord, AnomalyType, Severity
from greenscore.smart_assist.anomaly_detector import AnomalyDetector, parse_period_date


def _record(**overrides):
    values = {
        "id": "R1",
        "category": "diesel",
        "quantity": 100.0,
        "unit": "litres",
        "supplier_name": "Station Gazole",
        "period_start": "2024-01-01",
        "period_end": "2024-01-31",
    }
    values.update(overrides)
    return ActivityRecord(**values)


@pytest.fixture
def detector():
    return AnomalyDetector()


class TestParsePeriodDate:

    def test_iso_date_and_datetime(self):
        assert parse_period_date("2024-03-15") == date(2024, 3, 15)
        assert parse_period_date("2024-03-15T08:30:00") == date(2024, 3, 15)

    @pytest.mark.parametrize("value", [None, "", "  ", "15/03/2024", "not a date"])
    def test_invalid(self, value):
        assert parse_period_date(value) is None


class TestDetect:
    """Single-record rules."""

    def test_clean_record(self, detector):
        """A complete, plausible record has no anomaly."""
        assert detector.detect(_record()) == []

    def test_missing_quantity_and_period(self, detector):
        """A bare record misses quantity (high) and period (medium)."""
        anomalies = detector.detect(ActivityRecord(category="diesel"))

        assert [(a.type, a.severity, a.field) for a in anomalies] == [
            (AnomalyType.MISSING_DATA, Severity.HIGH, "quantity"),
            (AnomalyType.MISSING_DATA, Severity.MEDIUM, "period_start"),
        ]

    def test_zero_quantity(self, detector):
        anomalies = detector.detect(_record(quantity=0))

        assert len(anomalies) == 1
        assert anomalies[0].severity == Severity.HIGH

    def test_negative_quantity(self, detector):
        anomalies = detector.detect(_record(quantity=-5))

        assert len(anomalies) == 1
        assert anomalies[0].type == AnomalyType.SUSPICIOUS_VALUE
        assert anomalies[0].severity == Severity.HIGH

    def test_unparsable_period(self, detector):
        anomalies = detector.detect(_record(period_end="31/01/2024"))

        assert [a.type for a in anomalies] == [AnomalyType.MISSING_DATA]

    def test_outlier_amount(self, detector):
        """Amounts above the ceiling are outliers; the ceiling itself is not."""
        anomalies = detector.detect(_record(monetary_amount=2_000_000))

        assert len(anomalies) == 1
        assert anomalies[0].type == AnomalyType.OUTLIER
        assert anomalies[0].severity == Severity.MEDIUM
        assert anomalies[0].field == "monetary_amount"
        assert detector.detect(_record(monetary_amount=1_000_000)) == []

    def test_end_before_start(self, detector):
        anomalies = detector.detect(_record(period_start="2024-02-01", period_end="2024-01-01"))

        assert len(anomalies) == 1
        assert anomalies[0].type == AnomalyType.INCONSISTENT
        assert anomalies[0].severity == Severity.HIGH

    def test_period_too_long(self, detector):
        """Periods over a year are suspicious; exactly 365 days is not."""
        anomalies = detector.detect(_record(period_start="2023-01-01", period_end="2024-06-01"))

        assert len(anomalies) == 1
        assert anomalies[0].type == AnomalyType.SUSPICIOUS_VALUE
        assert anomalies[0].severity == Severity.LOW
        assert detector.detect(_record(period_start="2023-01-01", period_end="2024-01-01")) == []

    def test_thresholds_from_config(self):
        detector = AnomalyDetector(GreenScoreConfig(max_period_days=10, outlier_amount_ceiling=100))

        anomalies = detector.detect(_record(monetary_amount=150))

        assert {a.type for a in anomalies} == {AnomalyType.OUTLIER, AnomalyType.SUSPICIOUS_VALUE}


class TestCheckDuplicates:
    """Duplicate detection against a history."""

    def test_identical_quantity_is_high(self, detector):
        anomalies = detector.check_duplicates(_record(id="NEW"), [_record(id="OLD")])

        assert len(anomalies) == 1
        assert anomalies[0].type == AnomalyType.DUPLICATE
        assert anomalies[0].severity == Severity.HIGH
        assert "OLD" in anomalies[0].message

    def test_different_quantity_is_medium(self, detector):
        anomalies = detector.check_duplicates(_record(id="NEW", quantity=120), [_record(id="OLD")])

        assert anomalies[0].severity == Severity.MEDIUM

    def test_quantity_within_epsilon(self, detector):
        anomalies = detector.check_duplicates(_record(id="NEW", quantity=100.005), [_record(id="OLD")])

        assert anomalies[0].severity == Severity.HIGH

    def test_same_id_is_skipped(self, detector):
        """The record itself is not its own duplicate."""
        assert detector.check_duplicates(_record(), [_record()]) == []

    def test_different_key_fields(self, detector):
        history = [
            _record(id="A", supplier_name="Other"),
            _record(id="B", period_start="2024-02-01"),
            _record(id="C", category="essence"),
        ]

        assert detector.check_duplicates(_record(id="NEW"), history) == []

    def test_ghg_category_takes_precedence(self, detector):
        record = _record(id="NEW", category="gasoil", ghg_category="diesel")

        assert len(detector.check_duplicates(record, [_record(id="OLD")])) == 1

    def test_requires_supplier_and_period(self, detector):
        record = _record(id="NEW", supplier_name=None)

        assert detector.check_duplicates(record, [_record(id="OLD")]) == []

    def test_one_anomaly_per_match(self, detector):
        history = [_record(id="A"), _record(id="B", quantity=50)]

        anomalies = detector.check_duplicates(_record(id="NEW"), history)

        assert [a.severity for a in anomalies] == [Severity.HIGH, Severity.MEDIUM]
