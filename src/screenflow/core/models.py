"""Core Pydantic data models for ScreenFlow."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from screenflow.core.enums import (
    Action,
    Category,
    DecisionSource,
    Partition,
    Phase,
    ScaleType,
    Severity,
    StepType,
)


class Rule(BaseModel):
    """A single compiled screening rule.

    Attributes:
        rule_id: Stable, unique, human-legible identifier.
        category: Reporting classification (partition, eligibility, quality).
        description: Reviewer-facing explanation of the rule.
        fields_used: Comma-joined column names the predicate references.
        predicate: Expression in the screening predicate grammar.
        action: Execution semantics (partition, exclude, flag).
        order: Execution order within the rule's phase.
        assign_value: Partition label assigned by partition rules.
    """

    rule_id: str = Field(min_length=1)
    category: Category
    description: str = Field(min_length=1)
    fields_used: str = ""
    predicate: str = Field(min_length=1)
    action: Action
    order: int
    assign_value: Partition | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_assign_value(self) -> Rule:
        if self.action == Action.PARTITION:
            if self.assign_value in (None, Partition.UNASSIGNED):
                raise ValueError(
                    f"Partition rule {self.rule_id} needs assign_value pretest, pilot or main"
                )
        elif self.assign_value is not None:
            raise ValueError(
                f"Rule {self.rule_id} has action {self.action} and cannot set assign_value"
            )
        return self

    @property
    def phase(self) -> Phase:
        """Execution phase derived from the action."""
        return Phase.PARTITION if self.action == Action.PARTITION else Phase.FILTER

    @property
    def flag_column(self) -> str:
        """Name of the annotation column a flag rule writes."""
        return f"flag_{self.rule_id}"


# --- Configuration -----------------------------------------------------------


def _as_literal_text(value: Any) -> Any:
    """Render YAML-parsed dates back into the literal text they came from."""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    if value is None or isinstance(value, str):
        return value
    return str(value)


def _as_list(value: Any) -> Any:
    if value is None or isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]


class PartitionBlock(BaseModel):
    """Declaration of one partition (pretest or pilot).

    Attributes:
        by: Assignment method, ``date_range`` or ``ids``.
        date_var: Column holding the collection timestamp (date_range).
        start: Inclusive lower bound literal (date_range).
        end: Inclusive upper bound literal (date_range).
        ids: 1-based row numbers (ids).
    """

    by: str | None = None
    date_var: str | None = None
    start: str | None = None
    end: str | None = None
    ids: list[int | str] | None = None

    model_config = {"extra": "ignore"}

    @field_validator("start", "end", mode="before")
    @classmethod
    def _normalize_bound(cls, v: Any) -> Any:
        return _as_literal_text(v)

    @field_validator("ids", mode="before")
    @classmethod
    def _normalize_ids(cls, v: Any) -> Any:
        return _as_list(v)


class Partitioning(BaseModel):
    """Optional pretest and pilot partition declarations."""

    pretest: PartitionBlock | None = None
    pilot: PartitionBlock | None = None

    model_config = {"extra": "ignore"}

    def blocks(self) -> list[tuple[Partition, PartitionBlock]]:
        """Declared blocks in fixed pretest-then-pilot order."""
        declared = [(Partition.PRETEST, self.pretest), (Partition.PILOT, self.pilot)]
        return [(name, block) for name, block in declared if block is not None]


class Eligibility(BaseModel):
    """Design-defined eligibility declaration."""

    required_nonmissing: list[str] | None = None
    action: str | None = None

    model_config = {"extra": "ignore"}

    @field_validator("required_nonmissing", mode="before")
    @classmethod
    def _normalize_vars(cls, v: Any) -> Any:
        return _as_list(v)


class AttentionCheck(BaseModel):
    """One attention-check item and the responses that pass it."""

    var: str | None = None
    pass_values: list[int | float | str] | None = None
    description: str | None = None
    action: str | None = None

    model_config = {"extra": "ignore"}

    @field_validator("pass_values", mode="before")
    @classmethod
    def _normalize_values(cls, v: Any) -> Any:
        return _as_list(v)


class QualityFlags(BaseModel):
    """Researcher-declared quality checks."""

    attention_checks: list[AttentionCheck] = Field(default_factory=list)
    default_action: str | None = None

    model_config = {"extra": "ignore"}

    @field_validator("attention_checks", mode="before")
    @classmethod
    def _normalize_checks(cls, v: Any) -> Any:
        return [] if v is None else _as_list(v)


class SimpleModeConfig(BaseModel):
    """Declarative screening configuration.

    Each section is optional. An instance with no sections compiles to an
    empty rule table.
    """

    mode: Literal["simple"] = "simple"
    partitioning: Partitioning | None = None
    eligibility: Eligibility | None = None
    quality_flags: QualityFlags | None = None

    model_config = {"extra": "ignore"}

    def is_empty(self) -> bool:
        return self.partitioning is None and self.eligibility is None and self.quality_flags is None


class ExpertModeConfig(BaseModel):
    """Explicit rule table supplied by the researcher.

    Attributes:
        screening_rules: Rule rows as mappings, in caller-given order.
        columns: Column names of the rule table (union of row keys when
            built from mappings, the frame's columns when built from a
            DataFrame).
    """

    mode: Literal["expert"] = "expert"
    screening_rules: list[dict[str, Any]]
    columns: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _from_table(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        rules = data.get("screening_rules")
        if hasattr(rules, "to_dict") and hasattr(rules, "columns"):
            frame = rules.astype(object).where(rules.notna(), None)
            return {
                **data,
                "screening_rules": frame.to_dict(orient="records"),
                "columns": [str(c) for c in rules.columns],
            }
        if isinstance(rules, list) and not data.get("columns"):
            columns: list[str] = []
            for row in rules:
                if isinstance(row, dict):
                    columns.extend(str(k) for k in row if str(k) not in columns)
            return {**data, "columns": columns}
        return data


ScreeningConfig = SimpleModeConfig | ExpertModeConfig


# --- Audit report rows -------------------------------------------------------


class ScreeningLogEntry(BaseModel):
    """Per-rule match counts."""

    rule_id: str
    category: Category
    description: str
    action: Action
    order: int
    n_match: int
    n_no_match: int


class FlowStep(BaseModel):
    """One step of the CONSORT-style flow table.

    Note steps carry no counts.
    """

    step: int
    step_type: StepType
    description: str
    n_affected: int | None = None
    n_remaining: int | None = None


class ReasonCount(BaseModel):
    """Rows excluded by one exclusion rule."""

    rule_id: str
    reason: str
    n_excluded: int


class OverlapCount(BaseModel):
    """Rows affected by both rules of an exclude/flag pair."""

    rule_id_1: str
    rule_id_2: str
    n_overlap: int


class SummaryLine(BaseModel):
    """One human-readable summary line with an optional count."""

    line_order: int
    line_text: str
    n: int | None = None


class ScreeningWarning(BaseModel):
    """Fact-only notice about a valid configuration's resulting state.

    Attributes:
        warning_id: Stable identifier (``W001``, ``W002``, ...).
        severity: ``WARN`` or ``INFO``.
        message: Fact-only message text.
        related_artifact: Artifact where the fact is substantiated.
    """

    warning_id: str
    severity: Severity
    message: str
    related_artifact: str


class DecisionEntry(BaseModel):
    """One row of the decision registry."""

    decision_key: str
    decision_value: bool
    decision_source: DecisionSource
    notes: str


class DatasetLabels(BaseModel):
    """Optional per-column label metadata carried alongside a dataset.

    Attributes:
        variable_labels: Column name to variable label.
        value_labels: Column name to a map of response code to label.
    """

    variable_labels: dict[str, str] = Field(default_factory=dict)
    value_labels: dict[str, dict[str, str]] = Field(default_factory=dict)

    @field_validator("value_labels", mode="before")
    @classmethod
    def _stringify_codes(cls, v: Any) -> Any:
        if not isinstance(v, dict):
            return v
        return {
            str(column): (
                {_code_text(code): str(label) for code, label in mapping.items()}
                if isinstance(mapping, dict) else mapping
            )
            for column, mapping in v.items()
        }


def _code_text(code: Any) -> str:
    if isinstance(code, float) and code.is_integer():
        return str(int(code))
    return str(code)


class CodebookEntry(BaseModel):
    """Raw metadata inventory for one variable.

    Attributes:
        var_name: Column name.
        var_label: Variable label, if any.
        storage_class: pandas dtype name.
        response_scale_type: Classification of the response scale.
        n_options: Number of value labels.
        min_label: Smallest labelled code.
        max_label: Largest labelled code.
        value_labels_preview: First value labels as ``code=label`` pairs.
        n_non_missing: Count of non-missing values.
        n_missing: Count of missing values.
        pct_missing: Percentage missing, rounded to two decimals.
        distinct_values: Count of distinct non-missing values.
        source_file: File the dataset was read from, if known.
    """

    var_name: str
    var_label: str | None = None
    storage_class: str
    response_scale_type: ScaleType
    n_options: int = 0
    min_label: str | None = None
    max_label: str | None = None
    value_labels_preview: str | None = None
    n_non_missing: int
    n_missing: int
    pct_missing: float
    distinct_values: int
    source_file: str | None = None


class AuditReport(BaseModel):
    """All audit tables derived from one screened dataset and its rules."""

    screening_log: list[ScreeningLogEntry] = Field(default_factory=list)
    flow: list[FlowStep] = Field(default_factory=list)
    by_reason: list[ReasonCount] = Field(default_factory=list)
    overlap: list[OverlapCount] = Field(default_factory=list)
    summary: list[SummaryLine] = Field(default_factory=list)
    warnings: list[ScreeningWarning] = Field(default_factory=list)
    decisions: list[DecisionEntry] = Field(default_factory=list)
