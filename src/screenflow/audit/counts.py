"""Row masks and counts read from screening annotations."""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from screenflow.core.enums import Action, Partition
from screenflow.core.exceptions import AnnotationMissingError
from screenflow.core.models import Rule
from screenflow.rules.table import RuleTable
from screenflow.screening.engine import ANNOTATION_COLUMNS


def require_annotations(screened: pd.DataFrame, rules: RuleTable) -> None:
    """Raise if ``screened`` lacks annotations written for ``rules``.

    Raises:
        AnnotationMissingError: Listing every absent column.
    """
    expected = ANNOTATION_COLUMNS + [r.flag_column for r in rules if r.action == Action.FLAG]
    missing = [c for c in expected if c not in screened.columns]
    if missing:
        raise AnnotationMissingError(missing)


def affected_mask(screened: pd.DataFrame, rule: Rule) -> NDArray[np.bool_]:
    """Rows a rule acted on.

    Exclusion rules: rows they excluded. Flag rules: rows they flagged.
    Partition rules: rows holding their partition label.
    """
    if rule.action == Action.EXCLUDE:
        return (screened["excluded_by"] == rule.rule_id).to_numpy(dtype=bool)
    if rule.action == Action.FLAG:
        return screened[rule.flag_column].to_numpy(dtype=bool)
    return (screened["partition"] == str(rule.assign_value)).to_numpy(dtype=bool)


@dataclass(frozen=True)
class ScreeningCounts:
    """Headline counts of one screened dataset."""

    n_total: int
    n_excluded: int
    n_pool: int
    n_pretest: int
    n_pilot: int
    n_main: int
    n_flagged: int
    n_flagged_in_pool: int

    @classmethod
    def from_screened(cls, screened: pd.DataFrame, rules: RuleTable) -> ScreeningCounts:
        require_annotations(screened, rules)
        pool = screened["pool_main"].to_numpy(dtype=bool)
        partition = screened["partition"]

        flagged = np.zeros(len(screened), dtype=bool)
        for rule in rules.with_action(Action.FLAG):
            flagged |= affected_mask(screened, rule)

        return cls(
            n_total=len(screened),
            n_excluded=int(screened["excluded"].to_numpy(dtype=bool).sum()),
            n_pool=int(pool.sum()),
            n_pretest=int((partition == Partition.PRETEST.value).sum()),
            n_pilot=int((partition == Partition.PILOT.value).sum()),
            n_main=int((partition == Partition.MAIN.value).sum()),
            n_flagged=int(flagged.sum()),
            n_flagged_in_pool=int((flagged & pool).sum()),
        )
