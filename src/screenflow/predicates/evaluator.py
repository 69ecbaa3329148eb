"""Tree-walking evaluator for screening predicates.

Evaluates a parsed predicate against a pandas DataFrame column by column
and returns one boolean per row.

Missing values: a comparison or membership test against a missing value
is ``False`` for that row. Only ``IS MISSING`` / ``IS NOT MISSING`` look
at missingness directly. ``NOT`` negates the two-valued result, so
``NOT age > 18`` is ``True`` for a row with missing ``age``.

Temporal literals: a quoted literal shaped like ``YYYY-MM-DD`` or
``YYYY-MM-DD HH:MM:SS`` is compared as a date or timestamp. When a
predicate holds any timestamp literal, all of its temporal literals are
compared as timestamps (dates become midnight). Otherwise column values
are truncated to the day before comparison.
"""
from __future__ import annotations

import operator
import re
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

import numpy as np
import pandas as pd
import structlog
from numpy.typing import NDArray
from pandas.api.types import (
    is_bool_dtype,
    is_datetime64_any_dtype,
    is_numeric_dtype,
)

from screenflow.core.exceptions import PredicateEvaluationError
from screenflow.predicates.nodes import (
    ROW_NUMBER,
    And,
    Comparison,
    Literal,
    Membership,
    MissingCheck,
    Node,
    Not,
    Or,
    literals,
)
from screenflow.predicates.parser import parse_predicate

logger = structlog.get_logger(__name__)

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DATETIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")

_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
    "==": operator.eq,
    "!=": operator.ne,
}


def is_temporal_literal(text: str) -> bool:
    """Whether ``text`` is shaped like a date or timestamp literal."""
    return bool(DATE_PATTERN.match(text) or DATETIME_PATTERN.match(text))


def canonical_text(value: Any) -> str:
    """Text form used for string equality and set membership.

    Integral numbers drop their fractional part so that ``3.0`` matches
    ``'3'`` and ``3``.
    """
    if isinstance(value, bool | np.bool_):
        return str(bool(value))
    if isinstance(value, int | np.integer):
        return str(int(value))
    if isinstance(value, float | np.floating):
        number = float(value)
        return str(int(number)) if number.is_integer() else repr(number)
    if isinstance(value, datetime):
        if value.hour == value.minute == value.second == 0:
            return value.strftime("%Y-%m-%d")
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return str(value)


class _Evaluation:
    """State for evaluating one predicate against one dataset."""

    def __init__(self, predicate: str, tree: Node, dataset: pd.DataFrame) -> None:
        self.predicate = predicate
        self.dataset = dataset
        self.n_rows = len(dataset)
        temporal = [
            lit.value for lit in literals(tree)
            if lit.quoted and is_temporal_literal(str(lit.value))
        ]
        self.datetime_mode = any(DATETIME_PATTERN.match(str(t)) for t in temporal)

    def fail(self, message: str) -> PredicateEvaluationError:
        return PredicateEvaluationError(f"{message} in predicate: {self.predicate}", self.predicate)

    def column(self, name: str) -> pd.Series:
        if name == ROW_NUMBER:
            return pd.Series(np.arange(1, self.n_rows + 1), index=self.dataset.index)
        if name not in self.dataset.columns:
            raise self.fail(f"Unknown column '{name}'")
        return self.dataset[name]

    def run(self, node: Node) -> NDArray[np.bool_]:
        if isinstance(node, And):
            return np.logical_and.reduce([self.run(op) for op in node.operands])
        if isinstance(node, Or):
            return np.logical_or.reduce([self.run(op) for op in node.operands])
        if isinstance(node, Not):
            return ~self.run(node.operand)
        if isinstance(node, MissingCheck):
            missing = self.column(node.column).isna().to_numpy(dtype=bool)
            return ~missing if node.negated else missing
        if isinstance(node, Membership):
            return self._membership(node)
        return self._comparison(node)

    # -- comparisons ---------------------------------------------------------

    def _comparison(self, node: Comparison) -> NDArray[np.bool_]:
        series = self.column(node.column)
        present = ~series.isna().to_numpy(dtype=bool)
        compare = _OPERATORS[node.op]
        lit = node.literal

        if lit.quoted and is_temporal_literal(str(lit.value)):
            left = self._temporal_column(series, node.column)
            right = self._temporal_literal(str(lit.value), left)
            result = compare(left, right).to_numpy(dtype=bool)
        elif not lit.quoted:
            left_num = self._numeric_column(series, node.column)
            with np.errstate(invalid="ignore"):
                result = np.asarray(compare(left_num, lit.value), dtype=bool)
        else:
            texts = series.astype(object).map(canonical_text, na_action="ignore")
            texts = texts.where(present, "")
            result = compare(texts, lit.value).to_numpy(dtype=bool)
        return result & present

    def _numeric_column(self, series: pd.Series, name: str) -> NDArray[np.float64]:
        if is_datetime64_any_dtype(series):
            raise self.fail(f"Column '{name}' holds timestamps, compared with a number")
        if is_bool_dtype(series) or is_numeric_dtype(series):
            numeric = series
        else:
            try:
                numeric = pd.to_numeric(series, errors="raise")
            except (ValueError, TypeError) as exc:
                raise self.fail(f"Column '{name}' is not numeric") from exc
        return numeric.astype(object).to_numpy(dtype=float, na_value=np.nan)

    def _temporal_column(self, series: pd.Series, name: str) -> pd.Series:
        if is_datetime64_any_dtype(series):
            values = series
        elif series.isna().all():
            values = pd.Series(pd.NaT, index=series.index, dtype="datetime64[ns]")
        elif is_numeric_dtype(series):
            raise self.fail(f"Column '{name}' is numeric, compared with a date literal")
        else:
            try:
                values = pd.to_datetime(series, errors="raise", format="mixed")
            except (ValueError, TypeError) as exc:
                raise self.fail(f"Column '{name}' holds values that are not dates") from exc
        if not self.datetime_mode:
            values = values.dt.normalize()
        return values

    def _temporal_literal(self, text: str, column: pd.Series) -> pd.Timestamp:
        fmt = "%Y-%m-%d %H:%M:%S" if DATETIME_PATTERN.match(text) else "%Y-%m-%d"
        try:
            stamp = pd.Timestamp(datetime.strptime(text, fmt))
        except ValueError as exc:
            raise self.fail(f"Malformed date literal '{text}'") from exc
        tz = getattr(column.dt, "tz", None)
        return stamp.tz_localize(tz) if tz is not None else stamp

    # -- membership ----------------------------------------------------------

    def _membership(self, node: Membership) -> NDArray[np.bool_]:
        series = self.column(node.column)
        present = ~series.isna().to_numpy(dtype=bool)
        allowed = {_literal_text(lit) for lit in node.values}
        texts = series.astype(object).map(canonical_text, na_action="ignore")
        return texts.isin(allowed).to_numpy(dtype=bool) & present


def _literal_text(lit: Literal) -> str:
    return str(lit.value) if lit.quoted else canonical_text(lit.value)


def evaluate_predicate(predicate: str | Node, dataset: pd.DataFrame) -> NDArray[np.bool_]:
    """Evaluate a predicate to one boolean per dataset row.

    Args:
        predicate: Predicate text, or an already-parsed tree.
        dataset: Rows to evaluate against.

    Returns:
        Boolean array of length ``len(dataset)``.

    Raises:
        PredicateSyntaxError: If predicate text is not in the grammar.
        PredicateEvaluationError: On an unknown column, a type mismatch,
            or a malformed literal.
    """
    if isinstance(predicate, str):
        text, tree = predicate, parse_predicate(predicate)
    else:
        text, tree = repr(predicate), predicate

    evaluation = _Evaluation(text, tree, dataset)
    result = evaluation.run(tree)
    logger.debug("predicate_evaluated", predicate=text, n_true=int(result.sum()))
    return np.asarray(result, dtype=bool)
