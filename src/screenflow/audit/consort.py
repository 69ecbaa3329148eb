"""CONSORT-style participant flow and per-rule accounting.

All counts are read from annotation columns; no predicate is evaluated.
"""
from __future__ import annotations

from itertools import combinations

import pandas as pd

from screenflow.audit.counts import ScreeningCounts, affected_mask, require_annotations
from screenflow.core.enums import Action, StepType
from screenflow.core.models import FlowStep, OverlapCount, ReasonCount, ScreeningLogEntry
from screenflow.rules.table import RuleTable

FLAG_NOTE = (
    "NOTE: Quality flags do not remove cases unless an exclusion rule "
    "is explicitly declared."
)
POOL_STEP = "Analysis-eligible pool (declared rules)"


def build_flow(screened: pd.DataFrame, rules: RuleTable) -> list[FlowStep]:
    """Build the sequential flow table.

    Exclusion steps reduce the remaining count; flag steps leave it
    unchanged. Partition rules add no step.

    Args:
        screened: Output of ``apply_screening`` (before any row removal).
        rules: Rule table the data was screened with.

    Returns:
        Steps numbered from 0: starting count, one step per exclusion or
        flag rule in execution order, a note, and the analysis-eligible
        pool count.
    """
    counts = ScreeningCounts.from_screened(screened, rules)
    remaining = counts.n_total
    steps = [FlowStep(
        step=0,
        step_type=StepType.COUNT,
        description="Starting cases",
        n_remaining=remaining,
    )]

    for rule in rules.execution_order():
        if rule.action == Action.EXCLUDE:
            n_affected = int(affected_mask(screened, rule).sum())
            remaining -= n_affected
            step_type, label = StepType.EXCLUSION, "Excluded"
        elif rule.action == Action.FLAG:
            n_affected = int(affected_mask(screened, rule).sum())
            step_type, label = StepType.FLAG, "Flagged"
        else:
            continue
        steps.append(FlowStep(
            step=len(steps),
            step_type=step_type,
            description=f"{label}: {rule.description}",
            n_affected=n_affected,
            n_remaining=remaining,
        ))

    steps.append(FlowStep(step=len(steps), step_type=StepType.NOTE, description=FLAG_NOTE))
    steps.append(FlowStep(
        step=len(steps),
        step_type=StepType.COUNT,
        description=POOL_STEP,
        n_remaining=counts.n_pool,
    ))
    return steps


def build_by_reason(screened: pd.DataFrame, rules: RuleTable) -> list[ReasonCount]:
    """One row per exclusion rule with the rows it excluded."""
    require_annotations(screened, rules)
    return [
        ReasonCount(
            rule_id=rule.rule_id,
            reason=rule.description,
            n_excluded=int(affected_mask(screened, rule).sum()),
        )
        for rule in rules.execution_order()
        if rule.action == Action.EXCLUDE
    ]


def build_overlap(screened: pd.DataFrame, rules: RuleTable) -> list[OverlapCount]:
    """Count rows affected by both rules of every exclude/flag pair.

    Pairs are unordered and listed once, in execution order.
    """
    require_annotations(screened, rules)
    filters = rules.execution_order().with_action(Action.EXCLUDE, Action.FLAG)
    masks = {rule.rule_id: affected_mask(screened, rule) for rule in filters}
    return [
        OverlapCount(
            rule_id_1=first.rule_id,
            rule_id_2=second.rule_id,
            n_overlap=int((masks[first.rule_id] & masks[second.rule_id]).sum()),
        )
        for first, second in combinations(filters, 2)
    ]


def build_screening_log(screened: pd.DataFrame, rules: RuleTable) -> list[ScreeningLogEntry]:
    """Per-rule match counts in execution order.

    ``n_match`` counts rows the rule acted on: rows holding its partition
    label, rows it excluded, or rows it flagged.
    """
    require_annotations(screened, rules)
    n_total = len(screened)
    entries = []
    for rule in rules.execution_order():
        n_match = int(affected_mask(screened, rule).sum())
        entries.append(ScreeningLogEntry(
            rule_id=rule.rule_id,
            category=rule.category,
            description=rule.description,
            action=rule.action,
            order=rule.order,
            n_match=n_match,
            n_no_match=n_total - n_match,
        ))
    return entries
