# -*- coding: utf-8 -*-
"""Tests for the GreenScore exception hierarchy.

Covers:
- Base exception context and error codes
- Concrete exception classes
- Serialization
- Exception chain formatting
"""

import json
from datetime import datetime

import pytest

from greenscore.exceptions import (
    ConfigurationError,
    GreenScoreException,
    ReferenceDataError,
    ValidationError,
    format_exception_chain,
)


# ==============================================================================
# Base Exception Tests
# ==============================================================================

class TestGreenScoreException:

    def test_basic_exception(self):
        """Message only: derived code, empty context."""
        exc = GreenScoreException("Something went wrong")

        assert exc.message == "Something went wrong"
        assert exc.error_code == "GS_GREEN_SCORE_EXCEPTION"
        assert exc.component is None
        assert exc.context == {}
        assert isinstance(exc.timestamp, datetime)

    def test_explicit_code_and_component(self):
        exc = GreenScoreException(
            message="Test error",
            error_code="GS_TEST_001",
            component="ComplianceEngine",
            context={"key": "value"},
        )

        assert str(exc) == "[GS_TEST_001] - Component: ComplianceEngine - Test error"
        assert "ComplianceEngine" in repr(exc)

    def test_to_dict_and_json(self):
        exc = ConfigurationError(message="Bad weights", component="ScoreAggregator", context={"e": -1})

        data = json.loads(exc.to_json())

        assert data["error_type"] == "ConfigurationError"
        assert data["error_code"] == "GS_CONFIGURATION_ERROR"
        assert data["component"] == "ScoreAggregator"
        assert data["context"] == {"e": -1}
        assert data == exc.to_dict()


# ==============================================================================
# Concrete Exceptions
# ==============================================================================

class TestConcreteExceptions:

    @pytest.mark.parametrize("cls", [ConfigurationError, ValidationError, ReferenceDataError])
    def test_hierarchy(self, cls):
        assert issubclass(cls, GreenScoreException)

    def test_validation_error_fields(self):
        exc = ValidationError(message="Bad id", component="ScoreAggregator", invalid_fields={"id": "X"})

        assert exc.error_code == "GS_VALIDATION_ERROR"
        assert exc.context["invalid_fields"] == {"id": "X"}

    def test_reference_data_error(self):
        exc = ReferenceDataError(message="Missing table", data_file="default_factors.yaml")

        assert exc.component == "ReferenceData"
        assert exc.context == {"data_file": "default_factors.yaml"}


# ==============================================================================
# Utilities
# ==============================================================================

class TestFormatExceptionChain:

    def test_single_exception(self):
        exc = ConfigurationError(message="Bad threshold", component="ComplianceEngine", context={"field": "x"})

        lines = format_exception_chain(exc).splitlines()

        assert lines[0] == "[GS_CONFIGURATION_ERROR] - Component: ComplianceEngine - Bad threshold"
        assert lines[1] == "  Context: {'field': 'x'}"

    def test_chained_cause(self):
        try:
            try:
                raise ValueError("root cause")
            except ValueError as e:
                raise ConfigurationError(message="Wrapped") from e
        except ConfigurationError as exc:
            text = format_exception_chain(exc)

        assert "Wrapped" in text
        assert text.endswith("ValueError: root cause")
