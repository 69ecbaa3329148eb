"""Screening engine: applies a rule table to a dataset.

Adds partition, exclusion, flag and pool annotations to a copy of the
dataset. Original columns are never modified.
"""
from __future__ import annotations

import numpy as np
import pandas as pd
import structlog

from screenflow.core.enums import Action, Partition
from screenflow.core.exceptions import (
    ConfigValidationError,
    EmptyDatasetError,
    UnknownActionError,
)
from screenflow.predicates import evaluate_predicate, parse_predicate
from screenflow.predicates.nodes import referenced_columns
from screenflow.rules.table import RuleTable

logger = structlog.get_logger(__name__)

ANNOTATION_COLUMNS = ["partition", "excluded", "excluded_by", "pool_main", "pool_note"]

NO_RULES_NOTE = "No screening rules applied"


def annotation_columns(dataset: pd.DataFrame, rules: RuleTable | None = None) -> list[str]:
    """Annotation columns present on ``dataset``.

    These are the fixed annotation columns plus the ``flag_<rule_id>``
    column of every flag rule in ``rules``. Any other ``flag_*`` column is
    data.
    """
    names = set(ANNOTATION_COLUMNS)
    if rules is not None:
        names.update(r.flag_column for r in rules.with_action(Action.FLAG))
    return [c for c in dataset.columns if c in names]


def _check_flag_collisions(dataset: pd.DataFrame, rules: RuleTable) -> None:
    """Raise if a flag rule would replace a data column that a predicate reads."""
    read = {c for rule in rules for c in referenced_columns(parse_predicate(rule.predicate))}
    for rule in rules.with_action(Action.FLAG):
        if rule.flag_column in read and rule.flag_column in dataset.columns:
            raise ConfigValidationError(
                f"Flag rule {rule.rule_id} would overwrite column "
                f"'{rule.flag_column}', which a predicate reads",
                field="rule_id",
                value=rule.rule_id,
            )


def apply_screening(
    dataset: pd.DataFrame,
    rules: RuleTable,
    drop_excluded: bool = False,
) -> pd.DataFrame:
    """Apply rules and return an annotated copy of the dataset.

    Partition rules run first, then exclusion and flag rules, each phase in
    ``order`` (ties in table order). The first partition rule to match a
    row assigns it; the first exclusion rule the row fails excludes it.
    Every flag rule writes its own ``flag_<rule_id>`` column.

    Annotations already on the input (the fixed columns and the flag
    columns of ``rules``) are discarded and recomputed. Other columns,
    including unrelated ``flag_*`` columns, are kept as data.

    Args:
        dataset: Rows to screen.
        rules: Compiled rule table.
        drop_excluded: Also remove excluded rows (see
            :func:`drop_excluded_rows`).

    Returns:
        New DataFrame with the original columns followed by ``partition``,
        ``excluded``, ``excluded_by``, ``pool_main``, ``pool_note`` and one
        flag column per flag rule.

    Raises:
        EmptyDatasetError: If the dataset has no rows.
        ConfigValidationError: If a flag rule would overwrite a data column
            that a predicate reads.
        UnknownActionError: If a rule carries an unsupported action.
        PredicateEvaluationError: If a predicate cannot be evaluated.
    """
    if len(dataset) == 0:
        raise EmptyDatasetError("Cannot screen a dataset with zero rows")

    _check_flag_collisions(dataset, rules)
    stale = annotation_columns(dataset, rules)
    if stale:
        logger.info("stale_annotations_reset", columns=stale)
    base = dataset.drop(columns=stale)
    n_rows = len(base)

    partition = np.full(n_rows, Partition.UNASSIGNED.value, dtype=object)
    excluded = np.zeros(n_rows, dtype=bool)
    excluded_by = np.full(n_rows, None, dtype=object)
    flags: dict[str, np.ndarray] = {}

    if len(rules) == 0:
        partition[:] = Partition.MAIN.value
        notes = np.full(n_rows, NO_RULES_NOTE, dtype=object)
        logger.info("screening_applied", n_rows=n_rows, n_rules=0)
        return _assemble(base, partition, excluded, excluded_by, ~excluded, notes, flags)

    for rule in rules.execution_order():
        matches = evaluate_predicate(rule.predicate, base)
        if rule.action == Action.PARTITION:
            claim = matches & (partition == Partition.UNASSIGNED.value)
            partition[claim] = rule.assign_value.value
            logger.debug(
                "partition_rule_applied", rule_id=rule.rule_id, n_assigned=int(claim.sum())
            )
        elif rule.action == Action.EXCLUDE:
            newly = ~matches & ~excluded
            excluded[newly] = True
            excluded_by[newly] = rule.rule_id
            logger.debug("exclude_rule_applied", rule_id=rule.rule_id, n_excluded=int(newly.sum()))
        elif rule.action == Action.FLAG:
            flags[rule.flag_column] = ~matches
            logger.debug("flag_rule_applied", rule_id=rule.rule_id, n_flagged=int((~matches).sum()))
        else:
            raise UnknownActionError(str(rule.action), rule.rule_id)

    partition[partition == Partition.UNASSIGNED.value] = Partition.MAIN.value
    pool_main, pool_note = _derive_pool(partition, excluded, excluded_by)

    screened = _assemble(base, partition, excluded, excluded_by, pool_main, pool_note, flags)
    logger.info(
        "screening_applied",
        n_rows=n_rows,
        n_rules=len(rules),
        n_excluded=int(excluded.sum()),
        n_pool=int(pool_main.sum()),
    )
    if drop_excluded:
        return drop_excluded_rows(screened)
    return screened


def _derive_pool(
    partition: np.ndarray, excluded: np.ndarray, excluded_by: np.ndarray
) -> tuple[np.ndarray, np.ndarray]:
    pool_main = np.ones(len(partition), dtype=bool)
    pool_note = np.array([f"Declared partition: {p}" for p in partition], dtype=object)

    pool_main[partition == Partition.PRETEST.value] = False
    pool_main[excluded] = False
    pool_note[excluded] = [f"Excluded by: {rule_id}" for rule_id in excluded_by[excluded]]
    return pool_main, pool_note


def _assemble(
    base: pd.DataFrame,
    partition: np.ndarray,
    excluded: np.ndarray,
    excluded_by: np.ndarray,
    pool_main: np.ndarray,
    pool_note: np.ndarray,
    flags: dict[str, np.ndarray],
) -> pd.DataFrame:
    annotations = pd.DataFrame(
        {
            "partition": partition,
            "excluded": excluded,
            "excluded_by": excluded_by,
            "pool_main": pool_main,
            "pool_note": pool_note,
            **flags,
        },
        index=base.index,
    )
    return pd.concat([base, annotations], axis=1)


def drop_excluded_rows(screened: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of screened data without excluded rows.

    The original index is kept so remaining rows stay traceable to their
    source positions.

    Args:
        screened: Output of :func:`apply_screening`.

    Returns:
        New DataFrame holding only rows with ``excluded == False``.
    """
    keep = ~screened["excluded"].to_numpy(dtype=bool)
    n_dropped = int((~keep).sum())
    logger.info("excluded_rows_dropped", n_dropped=n_dropped, n_remaining=int(keep.sum()))
    return screened.loc[keep].copy()
