"""Tests for predicate evaluation over DataFrames."""
from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from screenflow.core.exceptions import PredicateEvaluationError, PredicateSyntaxError
from screenflow.predicates import evaluate_predicate
from screenflow.predicates.evaluator import canonical_text


def _rows(result: np.ndarray) -> list[int]:
    """1-based row numbers where result is true."""
    return [i + 1 for i, v in enumerate(result) if v]


class TestNumeric:
    def test_comparisons(self) -> None:
        df = pd.DataFrame({"age": [18, 17, 25, 30, 16]})
        assert _rows(evaluate_predicate("age >= 18", df)) == [1, 3, 4]
        assert _rows(evaluate_predicate("age < 18", df)) == [2, 5]
        assert _rows(evaluate_predicate("age == 25", df)) == [3]
        assert _rows(evaluate_predicate("age != 25", df)) == [1, 2, 4, 5]

    def test_numeric_strings_are_coerced(self) -> None:
        df = pd.DataFrame({"age": ["18", "17", None]})
        assert _rows(evaluate_predicate("age >= 18", df)) == [1]

    def test_text_column_against_number_fails(self) -> None:
        df = pd.DataFrame({"age": ["eighteen", "17"]})
        with pytest.raises(PredicateEvaluationError, match="not numeric"):
            evaluate_predicate("age >= 18", df)

    def test_boolean_column(self) -> None:
        df = pd.DataFrame({"consent": [True, False, True]})
        assert _rows(evaluate_predicate("consent == 1", df)) == [1, 3]

    def test_returns_bool_array_of_dataset_length(self) -> None:
        df = pd.DataFrame({"x": [1, 2, 3]}, index=[10, 20, 30])
        result = evaluate_predicate("x > 1", df)
        assert result.dtype == bool
        assert result.shape == (3,)


class TestMissingValues:
    def test_comparison_with_missing_is_false(self) -> None:
        df = pd.DataFrame({"age": [20, np.nan, 15]})
        assert _rows(evaluate_predicate("age >= 18", df)) == [1]
        assert _rows(evaluate_predicate("age < 18", df)) == [3]

    def test_not_equal_with_missing_is_false(self) -> None:
        df = pd.DataFrame({"group": ["a", None, "b"]})
        assert _rows(evaluate_predicate("group != 'a'", df)) == [3]

    def test_not_negates_two_valued_result(self) -> None:
        df = pd.DataFrame({"age": [20, np.nan]})
        assert _rows(evaluate_predicate("NOT age >= 18", df)) == [2]

    def test_membership_with_missing_is_false(self) -> None:
        df = pd.DataFrame({"attn": [3, np.nan, 2]})
        assert _rows(evaluate_predicate("attn IN (3, 2)", df)) == [1, 3]

    def test_is_missing_uses_null_not_empty_string(self) -> None:
        df = pd.DataFrame({"comment": ["", None, "ok"]})
        assert _rows(evaluate_predicate("comment IS MISSING", df)) == [2]
        assert _rows(evaluate_predicate("comment IS NOT MISSING", df)) == [1, 3]

    def test_nullable_integer_column(self) -> None:
        df = pd.DataFrame({"age": pd.array([20, None, 15], dtype="Int64")})
        assert _rows(evaluate_predicate("age >= 18", df)) == [1]


class TestStrings:
    def test_string_equality(self) -> None:
        df = pd.DataFrame({"consent": ["yes", "no", "yes"]})
        assert _rows(evaluate_predicate("consent == 'yes'", df)) == [1, 3]

    def test_quoted_number_matches_numeric_column(self) -> None:
        df = pd.DataFrame({"attn": [3.0, 2.0, 3.0]})
        assert _rows(evaluate_predicate("attn == '3'", df)) == [1, 3]

    def test_membership_mixes_strings_and_numbers(self) -> None:
        df = pd.DataFrame({"answer": ["correct", "3", "wrong", "4"]})
        assert _rows(evaluate_predicate("answer IN ('correct', 3)", df)) == [1, 2]

    def test_membership_numeric_column(self) -> None:
        df = pd.DataFrame({"attn": [3, 3, 2, 3, 1, 3, 3, 2, 3, 3]})
        assert _rows(evaluate_predicate("attn IN (3)", df)) == [1, 2, 4, 6, 7, 9, 10]


class TestTemporal:
    @pytest.fixture
    def stamps(self) -> pd.DataFrame:
        return pd.DataFrame({
            "start_time": [
                "2024-01-15 08:00:00",
                "2024-01-15 14:00:00",
                "2024-01-16 09:00:00",
                None,
            ],
        })

    def test_date_literal_truncates_times(self, stamps: pd.DataFrame) -> None:
        result = evaluate_predicate(
            "start_time >= '2024-01-01' AND start_time <= '2024-01-15'", stamps
        )
        assert _rows(result) == [1, 2]

    def test_datetime_literal_separates_same_day(self, stamps: pd.DataFrame) -> None:
        result = evaluate_predicate(
            "start_time >= '2024-01-15 00:00:00' AND start_time <= '2024-01-15 12:00:00'",
            stamps,
        )
        assert _rows(result) == [1]

    def test_datetime_takes_precedence_when_mixed(self, stamps: pd.DataFrame) -> None:
        # '2024-01-15' becomes midnight, so nothing on that day is <= it
        result = evaluate_predicate(
            "start_time >= '2024-01-01 00:00:00' AND start_time <= '2024-01-15'", stamps
        )
        assert _rows(result) == []

    def test_datetime64_column(self) -> None:
        df = pd.DataFrame({"t": pd.to_datetime(["2024-03-01 10:00", "2024-03-02 10:00"])})
        assert _rows(evaluate_predicate("t < '2024-03-02'", df)) == [1]

    def test_timezone_aware_column(self) -> None:
        df = pd.DataFrame({
            "t": pd.to_datetime(["2024-03-01 10:00", "2024-03-03 10:00"]).tz_localize("UTC"),
        })
        assert _rows(evaluate_predicate("t <= '2024-03-02 00:00:00'", df)) == [1]

    def test_numeric_column_against_date_fails(self) -> None:
        df = pd.DataFrame({"t": [1, 2]})
        with pytest.raises(PredicateEvaluationError, match="numeric"):
            evaluate_predicate("t >= '2024-01-01'", df)

    def test_unparseable_dates_fail(self) -> None:
        df = pd.DataFrame({"t": ["yesterday", "2024-01-01"]})
        with pytest.raises(PredicateEvaluationError, match="not dates"):
            evaluate_predicate("t >= '2024-01-01'", df)

    def test_impossible_calendar_literal_fails(self) -> None:
        df = pd.DataFrame({"t": ["2024-01-01"]})
        with pytest.raises(PredicateEvaluationError, match="Malformed date literal"):
            evaluate_predicate("t >= '2024-13-45'", df)


class TestRowNumber:
    def test_row_number_is_one_based_position(self) -> None:
        df = pd.DataFrame({"x": list("abcde")}, index=[5, 4, 3, 2, 1])
        assert _rows(evaluate_predicate("row_number IN (1, 3)", df)) == [1, 3]

    def test_row_number_comparison(self) -> None:
        df = pd.DataFrame({"x": range(6)})
        assert _rows(evaluate_predicate("row_number > 4", df)) == [5, 6]


class TestLogic:
    def test_and_or_precedence(self) -> None:
        df = pd.DataFrame({"a": [1, 0, 0, 1], "b": [0, 1, 1, 1], "c": [0, 0, 1, 1]})
        result = evaluate_predicate("a == 1 OR b == 1 AND c == 1", df)
        assert _rows(result) == [1, 3, 4]

    def test_parenthesized(self) -> None:
        df = pd.DataFrame({"a": [1, 0, 0, 1], "b": [0, 1, 1, 1], "c": [0, 0, 1, 1]})
        result = evaluate_predicate("(a == 1 OR b == 1) AND c == 1", df)
        assert _rows(result) == [3, 4]

    def test_expert_scenario(self) -> None:
        df = pd.DataFrame({
            "age": [18, 17, 25, 30, 16, 40, 19, 50, 15, 55],
            "consent": ["y", "y", None, "y", "y", "y", "y", None, "y", "y"],
        })
        result = evaluate_predicate("age >= 18 AND consent IS NOT MISSING", df)
        assert _rows(result) == [1, 4, 6, 7, 10]


class TestErrors:
    def test_unknown_column(self) -> None:
        df = pd.DataFrame({"age": [1]})
        with pytest.raises(PredicateEvaluationError, match="Unknown column 'agee'"):
            evaluate_predicate("agee > 1", df)

    def test_syntax_error_is_not_evaluation_error(self) -> None:
        df = pd.DataFrame({"age": [1]})
        with pytest.raises(PredicateSyntaxError):
            evaluate_predicate("age >", df)


@pytest.mark.parametrize(
    ("value", "expected"),
    [(3, "3"), (3.0, "3"), (2.5, "2.5"), (np.int64(7), "7"), ("a", "a"), (True, "True")],
)
def test_canonical_text(value: object, expected: str) -> None:
    assert canonical_text(value) == expected
