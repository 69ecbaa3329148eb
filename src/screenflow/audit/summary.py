"""Summary lines, warnings and the decision registry.

Every line here states a declared rule or an observed count. Nothing is
inferred about data quality.
"""
from __future__ import annotations

import pandas as pd

from screenflow.audit import artifacts
from screenflow.audit.counts import ScreeningCounts
from screenflow.core.enums import Action, Category, DecisionSource, Partition, Severity
from screenflow.core.models import DecisionEntry, ScreeningWarning, SummaryLine
from screenflow.rules.table import RuleTable


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _declares(rules: RuleTable, partition: Partition) -> int:
    return sum(
        1 for r in rules.with_action(Action.PARTITION) if r.assign_value == partition
    )


def build_summary(screened: pd.DataFrame, rules: RuleTable) -> list[SummaryLine]:
    """Ordered human-readable summary lines with counts."""
    counts = ScreeningCounts.from_screened(screened, rules)
    has_partitioning = len(rules.with_action(Action.PARTITION)) > 0
    # "present" means declared; the count is what the declaration matched
    has_pretest = _declares(rules, Partition.PRETEST) > 0
    has_pilot = _declares(rules, Partition.PILOT) > 0

    lines: list[tuple[str, int | None]] = [
        (f"Partitioning declared: {_yes_no(has_partitioning)}", None),
        (
            f"Pretest partition present: {_yes_no(has_pretest)}",
            counts.n_pretest if has_pretest else 0,
        ),
        (
            f"Pilot partition present: {_yes_no(has_pilot)}",
            counts.n_pilot if has_pilot else 0,
        ),
    ]
    if has_partitioning:
        lines += [
            ("  Pretest cases (declared partition):", counts.n_pretest),
            ("  Pilot cases (declared partition):", counts.n_pilot),
            ("  Main cases (default partition):", counts.n_main),
        ]
    lines += [
        ("Excluded cases (declared exclusion rules only):", counts.n_excluded),
        ("Flagged cases (declared quality checks):", counts.n_flagged),
        ("Flagged cases present in pool:", counts.n_flagged_in_pool),
        ("Analysis-eligible pool (declared rules):", counts.n_pool),
    ]
    return [
        SummaryLine(line_order=i, line_text=text, n=n)
        for i, (text, n) in enumerate(lines, start=1)
    ]


def build_warnings(screened: pd.DataFrame, rules: RuleTable) -> list[ScreeningWarning]:
    """Fact-only warnings about the screened state.

    Warning ids are assigned in a fixed check order, so identical input
    yields identical ids.
    """
    counts = ScreeningCounts.from_screened(screened, rules)
    found: list[tuple[Severity, str, str]] = []

    if len(rules.with_action(Action.PARTITION)) == 0:
        found.append((
            Severity.WARN,
            "No partitioning rules declared (pretest/pilot rules absent)",
            artifacts.SCREENING_SUMMARY,
        ))
    if counts.n_flagged_in_pool > 0:
        found.append((
            Severity.WARN,
            f"Quality flags present in analysis pool (n={counts.n_flagged_in_pool}). "
            "Flagged cases are NOT excluded unless an exclusion rule is declared.",
            artifacts.SCREENING_SUMMARY,
        ))
    if counts.n_excluded > 0:
        found.append((
            Severity.INFO,
            f"Exclusion rules applied (n={counts.n_excluded} cases excluded)",
            artifacts.CONSORT_BY_REASON,
        ))
    if len(rules) == 0:
        found.append((
            Severity.INFO,
            "No partitioning/eligibility/quality rules declared",
            artifacts.SCREENING_SUMMARY,
        ))

    return [
        ScreeningWarning(
            warning_id=f"W{i:03d}",
            severity=severity,
            message=message,
            related_artifact=artifact,
        )
        for i, (severity, message, artifact) in enumerate(found, start=1)
    ]


def build_decision_registry(screened: pd.DataFrame, rules: RuleTable) -> list[DecisionEntry]:
    """One row per tracked screening decision.

    Declaration keys are sourced from the rule table (``spec`` or
    ``not_declared``); the remaining keys are observed from annotations.
    """
    counts = ScreeningCounts.from_screened(screened, rules)

    def declared(key: str, n_rules: int, what: str) -> DecisionEntry:
        return DecisionEntry(
            decision_key=key,
            decision_value=n_rules > 0,
            decision_source=DecisionSource.SPEC if n_rules > 0 else DecisionSource.NOT_DECLARED,
            notes=f"{n_rules} {what} rule(s) declared",
        )

    def observed(key: str, value: bool, notes: str) -> DecisionEntry:
        return DecisionEntry(
            decision_key=key,
            decision_value=value,
            decision_source=DecisionSource.OBSERVED,
            notes=notes,
        )

    return [
        declared(
            "pretest_partitioning_declared",
            _declares(rules, Partition.PRETEST),
            "pretest partition",
        ),
        declared(
            "pilot_partitioning_declared", _declares(rules, Partition.PILOT), "pilot partition"
        ),
        declared(
            "eligibility_rules_declared",
            len(rules.with_category(Category.ELIGIBILITY)),
            "eligibility",
        ),
        declared("quality_rules_declared", len(rules.with_category(Category.QUALITY)), "quality"),
        declared("exclusions_declared", len(rules.with_action(Action.EXCLUDE)), "exclusion"),
        observed(
            "exclusions_applied",
            counts.n_excluded > 0,
            f"{counts.n_excluded} cases excluded",
        ),
        observed("flags_present", counts.n_flagged > 0, f"{counts.n_flagged} cases flagged"),
        observed(
            "flags_present_in_pool",
            counts.n_flagged_in_pool > 0,
            f"{counts.n_flagged_in_pool} flagged cases in analysis-eligible pool",
        ),
        observed(
            "pool_definition_declared",
            True,
            "pool_main is false for pretest partition and excluded cases; "
            f"{counts.n_pool} cases in analysis-eligible pool",
        ),
    ]
