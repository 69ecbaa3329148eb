"""Tests for summary lines, warnings and the decision registry."""
from __future__ import annotations

import re

import pandas as pd

from screenflow.audit import build_audit_report, build_decision_registry, build_summary
from screenflow.audit import build_warnings
from screenflow.audit.counts import ScreeningCounts
from screenflow.core.enums import DecisionSource, Severity
from screenflow.rules import RuleTable, compile_rules
from screenflow.screening import apply_screening

EVALUATIVE = re.compile(r"final sample|clean(ed)? data|validated|careless|invalid", re.IGNORECASE)


def test_counts(screened: pd.DataFrame, simple_rules: RuleTable) -> None:
    counts = ScreeningCounts.from_screened(screened, simple_rules)
    assert counts == ScreeningCounts(
        n_total=10, n_excluded=4, n_pool=4, n_pretest=3, n_pilot=0, n_main=7,
        n_flagged=3, n_flagged_in_pool=2,
    )


def test_summary_lines(screened: pd.DataFrame, simple_rules: RuleTable) -> None:
    lines = build_summary(screened, simple_rules)
    assert [line.line_order for line in lines] == list(range(1, 11))
    assert [(line.line_text, line.n) for line in lines] == [
        ("Partitioning declared: Yes", None),
        ("Pretest partition present: Yes", 3),
        ("Pilot partition present: No", 0),
        ("  Pretest cases (declared partition):", 3),
        ("  Pilot cases (declared partition):", 0),
        ("  Main cases (default partition):", 7),
        ("Excluded cases (declared exclusion rules only):", 4),
        ("Flagged cases (declared quality checks):", 3),
        ("Flagged cases present in pool:", 2),
        ("Analysis-eligible pool (declared rules):", 4),
    ]


def test_summary_without_partitioning(survey_df: pd.DataFrame) -> None:
    lines = build_summary(apply_screening(survey_df, RuleTable()), RuleTable())
    texts = [line.line_text for line in lines]
    assert texts[0] == "Partitioning declared: No"
    assert not any(t.startswith("  ") for t in texts)
    assert lines[-1].n == 10


def test_warnings_for_screened_run(screened: pd.DataFrame, simple_rules: RuleTable) -> None:
    warnings = build_warnings(screened, simple_rules)
    assert [(w.warning_id, w.severity) for w in warnings] == [
        ("W001", Severity.WARN),
        ("W002", Severity.INFO),
    ]
    assert warnings[0].message.startswith("Quality flags present in analysis pool (n=2)")
    assert warnings[0].related_artifact == "screening_summary.csv"
    assert warnings[1].message == "Exclusion rules applied (n=4 cases excluded)"
    assert warnings[1].related_artifact == "consort_by_reason.csv"


def test_warnings_for_empty_rule_table(survey_df: pd.DataFrame) -> None:
    warnings = build_warnings(apply_screening(survey_df, RuleTable()), RuleTable())
    assert [(w.warning_id, w.severity, w.related_artifact) for w in warnings] == [
        ("W001", Severity.WARN, "screening_summary.csv"),
        ("W002", Severity.INFO, "screening_summary.csv"),
    ]
    assert warnings[0].message == "No partitioning rules declared (pretest/pilot rules absent)"


def test_decision_registry(screened: pd.DataFrame, simple_rules: RuleTable) -> None:
    decisions = {d.decision_key: d for d in build_decision_registry(screened, simple_rules)}
    assert list(decisions) == [
        "pretest_partitioning_declared",
        "pilot_partitioning_declared",
        "eligibility_rules_declared",
        "quality_rules_declared",
        "exclusions_declared",
        "exclusions_applied",
        "flags_present",
        "flags_present_in_pool",
        "pool_definition_declared",
    ]
    assert decisions["pretest_partitioning_declared"].decision_source == DecisionSource.SPEC
    assert decisions["pilot_partitioning_declared"].decision_value is False
    assert (
        decisions["pilot_partitioning_declared"].decision_source == DecisionSource.NOT_DECLARED
    )
    assert decisions["exclusions_applied"].notes == "4 cases excluded"
    assert decisions["flags_present_in_pool"].decision_source == DecisionSource.OBSERVED
    assert decisions["pool_definition_declared"].decision_value is True


def test_language_is_non_evaluative(screened: pd.DataFrame, simple_rules: RuleTable) -> None:
    report = build_audit_report(screened, simple_rules)
    texts = (
        [line.line_text for line in report.summary]
        + [w.message for w in report.warnings]
        + [s.description for s in report.flow]
        + [d.notes for d in report.decisions]
    )
    assert not [t for t in texts if EVALUATIVE.search(t)]


def test_report_is_deterministic(screened: pd.DataFrame, simple_rules: RuleTable) -> None:
    assert build_audit_report(screened, simple_rules) == build_audit_report(
        screened.copy(), simple_rules
    )


def test_declared_partition_with_no_matches(survey_df: pd.DataFrame) -> None:
    config = {
        "partitioning": {
            "pretest": {
                "by": "date_range",
                "date_var": "start_time",
                "start": "2023-01-01",
                "end": "2023-01-31",
            },
        },
    }
    rules = compile_rules(config, survey_df)
    lines = build_summary(apply_screening(survey_df, rules), rules)
    assert (lines[1].line_text, lines[1].n) == ("Pretest partition present: Yes", 0)
    assert (lines[2].line_text, lines[2].n) == ("Pilot partition present: No", 0)
