"""Tests for the ScreenFlow exception hierarchy."""
from __future__ import annotations

import pytest

from screenflow.core.exceptions import (
    AnnotationMissingError,
    ConfigValidationError,
    EmptyDatasetError,
    EmptyFieldError,
    InvalidDateFormatError,
    InvalidPredicateError,
    MissingColumnsError,
    PredicateEvaluationError,
    PredicateSyntaxError,
    ScreenFlowError,
    UnknownActionError,
    UnknownColumnError,
    UnsupportedFormatError,
)


@pytest.mark.parametrize(
    "exc_class",
    [
        ConfigValidationError,
        InvalidDateFormatError,
        EmptyFieldError,
        EmptyDatasetError,
    ],
)
def test_message_only_errors_are_screenflow_errors(exc_class: type[Exception]) -> None:
    assert isinstance(exc_class("boom"), ScreenFlowError)


def test_config_errors_share_a_family() -> None:
    for exc in (
        InvalidDateFormatError("bad", field="partitioning.pretest.start", value="2024/01/01"),
        EmptyFieldError("empty", field="screening_rules[1].rule_id"),
        MissingColumnsError(["action"]),
        UnknownColumnError("unknown", columns=["x"]),
    ):
        assert isinstance(exc, ConfigValidationError)


def test_config_error_carries_field_and_value() -> None:
    exc = InvalidDateFormatError("bad date", field="partitioning.pilot.end", value="01/02/2024")
    assert exc.field == "partitioning.pilot.end"
    assert exc.value == "01/02/2024"


def test_missing_columns_message_names_columns() -> None:
    exc = MissingColumnsError(["predicate", "action"])
    assert exc.columns == ["predicate", "action"]
    assert "predicate, action" in str(exc)


def test_invalid_predicate_cites_pattern_and_text() -> None:
    exc = InvalidPredicateError("system", "system('ls')")
    assert exc.pattern == "system"
    assert exc.predicate == "system('ls')"
    assert str(exc) == "Predicate contains disallowed pattern 'system': system('ls')"


def test_syntax_error_is_invalid_predicate() -> None:
    exc = PredicateSyntaxError("Expected column name", "age >= ", 7)
    assert isinstance(exc, InvalidPredicateError)
    assert exc.position == 7
    assert "position 7" in str(exc)


def test_evaluation_error_keeps_predicate() -> None:
    exc = PredicateEvaluationError("Unknown column 'x'", "x > 1")
    assert exc.predicate == "x > 1"
    assert not isinstance(exc, InvalidPredicateError)


def test_unknown_action_error() -> None:
    exc = UnknownActionError("drop", "r1")
    assert exc.action == "drop"
    assert exc.rule_id == "r1"
    assert "drop" in str(exc)


def test_annotation_missing_error_lists_columns() -> None:
    exc = AnnotationMissingError(["partition", "flag_q1"])
    assert exc.columns == ["partition", "flag_q1"]
    assert "flag_q1" in str(exc)


def test_unsupported_format_error() -> None:
    exc = UnsupportedFormatError(".sav", [".csv", ".xlsx"])
    assert exc.format == ".sav"
    assert exc.supported == [".csv", ".xlsx"]
    assert ".csv, .xlsx" in str(exc)


def test_catch_by_base() -> None:
    with pytest.raises(ScreenFlowError):
        raise EmptyDatasetError("no rows")
