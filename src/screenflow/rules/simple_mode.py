"""Compile declarative (simple-mode) screening configuration.

Sections compile in a fixed order (partitioning, eligibility, quality
flags) and share one increasing ``order`` counter.
"""
from __future__ import annotations

from datetime import datetime

import pandas as pd

from screenflow.core.enums import Action, Category, Partition
from screenflow.core.exceptions import (
    ConfigValidationError,
    InvalidDateFormatError,
    InvalidOptionError,
    MissingFieldError,
    UnknownColumnError,
)
from screenflow.core.models import (
    AttentionCheck,
    Eligibility,
    PartitionBlock,
    Partitioning,
    QualityFlags,
    Rule,
    SimpleModeConfig,
)
from screenflow.predicates import check_predicate
from screenflow.predicates.evaluator import DATE_PATTERN, DATETIME_PATTERN, canonical_text


PARTITION_METHODS = ["date_range", "ids"]
FILTER_ACTIONS = [Action.EXCLUDE.value, Action.FLAG.value]


def compile_simple(config: SimpleModeConfig, dataset: pd.DataFrame) -> list[Rule]:
    """Compile every declared section into rules.

    Args:
        config: Parsed simple-mode configuration.
        dataset: Dataset the rules will run against (used to check that
            referenced columns exist).

    Returns:
        Rules in category order with ``order`` 1..n.
    """
    rules: list[Rule] = []
    if config.partitioning is not None:
        rules.extend(_partition_rules(config.partitioning, dataset, len(rules) + 1))
    if config.eligibility is not None:
        rules.extend(_eligibility_rules(config.eligibility, dataset, len(rules) + 1))
    if config.quality_flags is not None:
        rules.extend(_quality_rules(config.quality_flags, dataset, len(rules) + 1))

    for rule in rules:
        check_predicate(rule.predicate)
    return rules


# -- partitioning --------------------------------------------------------------


def _partition_rules(
    partitioning: Partitioning, dataset: pd.DataFrame, start_order: int
) -> list[Rule]:
    rules = []
    for counter, (name, block) in enumerate(partitioning.blocks(), start=1):
        field = f"partitioning.{name}"
        if block.by is None:
            raise MissingFieldError(f"{field}.by is required", field=f"{field}.by")
        if block.by == "date_range":
            predicate, description, fields_used = _date_range(field, name, block, dataset)
        elif block.by == "ids":
            predicate, description, fields_used = _id_list(field, name, block)
        else:
            raise InvalidOptionError(
                f"{field}.by must be 'date_range' or 'ids', got '{block.by}'",
                field=f"{field}.by",
                value=block.by,
                allowed=PARTITION_METHODS,
            )
        rules.append(Rule(
            rule_id=f"partition_{name}_{counter:02d}",
            category=Category.PARTITION,
            description=description,
            fields_used=fields_used,
            predicate=predicate,
            action=Action.PARTITION,
            order=start_order + counter - 1,
            assign_value=name,
        ))
    return rules


def _date_range(
    field: str, name: Partition, block: PartitionBlock, dataset: pd.DataFrame
) -> tuple[str, str, str]:
    if not block.date_var:
        raise MissingFieldError(
            f"{field}.date_var is required for date_range", field=f"{field}.date_var"
        )
    if block.date_var not in dataset.columns:
        raise UnknownColumnError(
            f"{field}.date_var '{block.date_var}' not found in data",
            columns=[block.date_var],
            field=f"{field}.date_var",
        )
    for bound in ("start", "end"):
        _check_temporal_literal(f"{field}.{bound}", getattr(block, bound))

    var = block.date_var
    predicate = f"{var} >= '{block.start}' AND {var} <= '{block.end}'"
    description = f"Partition: {name} (date range {block.start} to {block.end})"
    return predicate, description, var


def _check_temporal_literal(field: str, value: str | None) -> None:
    if value is None:
        raise MissingFieldError(f"{field} is required for date_range", field=field)
    if DATETIME_PATTERN.match(value):
        fmt = "%Y-%m-%d %H:%M:%S"
    elif DATE_PATTERN.match(value):
        fmt = "%Y-%m-%d"
    else:
        raise InvalidDateFormatError(
            f"{field} must be YYYY-MM-DD or YYYY-MM-DD HH:MM:SS, got '{value}'",
            field=field,
            value=value,
        )
    try:
        datetime.strptime(value, fmt)
    except ValueError as exc:
        raise InvalidDateFormatError(
            f"{field} is not a valid calendar date: '{value}'", field=field, value=value
        ) from exc


def _id_list(field: str, name: Partition, block: PartitionBlock) -> tuple[str, str, str]:
    if not block.ids:
        raise ConfigValidationError(
            f"{field}.ids cannot be empty", field=f"{field}.ids", value=block.ids
        )
    ids: list[int] = []
    for raw in block.ids:
        try:
            row = int(raw)
        except ValueError as exc:
            raise ConfigValidationError(
                f"{field}.ids must be row numbers, got '{raw}'", field=f"{field}.ids", value=raw
            ) from exc
        if row < 1 or str(row) != str(raw).strip():
            raise ConfigValidationError(
                f"{field}.ids must be positive whole row numbers, got '{raw}'",
                field=f"{field}.ids",
                value=raw,
            )
        ids.append(row)

    predicate = f"row_number IN ({', '.join(str(i) for i in ids)})"
    description = f"Partition: {name} ({len(ids)} specified IDs)"
    return predicate, description, "row_number"


# -- eligibility ---------------------------------------------------------------


def _eligibility_rules(
    eligibility: Eligibility, dataset: pd.DataFrame, start_order: int
) -> list[Rule]:
    variables = eligibility.required_nonmissing
    if not variables:
        return []

    unknown = [v for v in variables if v not in dataset.columns]
    if unknown:
        raise UnknownColumnError(
            "eligibility.required_nonmissing references unknown columns: "
            + ", ".join(unknown),
            columns=unknown,
            field="eligibility.required_nonmissing",
        )
    action = _filter_action("eligibility.action", eligibility.action, default=Action.EXCLUDE)

    return [Rule(
        rule_id="eligibility_required_nonmissing_01",
        category=Category.ELIGIBILITY,
        description=f"Required non-missing: {', '.join(variables)}",
        fields_used=", ".join(variables),
        predicate=" AND ".join(f"{v} IS NOT MISSING" for v in variables),
        action=action,
        order=start_order,
    )]


# -- quality flags -------------------------------------------------------------


def _quality_rules(
    quality: QualityFlags, dataset: pd.DataFrame, start_order: int
) -> list[Rule]:
    default_action = _filter_action(
        "quality_flags.default_action", quality.default_action, default=Action.FLAG
    )
    rules = []
    for index, check in enumerate(quality.attention_checks, start=1):
        field = f"quality_flags.attention_checks[{index}]"
        _require_check_fields(field, check)
        if check.var not in dataset.columns:
            raise UnknownColumnError(
                f"{field}.var '{check.var}' not found in data",
                columns=[check.var],
                field=f"{field}.var",
            )
        action = _filter_action(f"{field}.action", check.action, default=default_action)
        values = ", ".join(_format_pass_value(f"{field}.pass_values", v) for v in check.pass_values)
        rules.append(Rule(
            rule_id=f"quality_attentioncheck_{check.var}_{index:02d}",
            category=Category.QUALITY,
            description=check.description,
            fields_used=check.var,
            predicate=f"{check.var} IN ({values})",
            action=action,
            order=start_order + index - 1,
        ))
    return rules


def _require_check_fields(field: str, check: AttentionCheck) -> None:
    for name in ("var", "pass_values", "description"):
        value = getattr(check, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise MissingFieldError(f"{field}.{name} is required", field=f"{field}.{name}")
    if not check.pass_values:
        raise ConfigValidationError(
            f"{field}.pass_values cannot be empty", field=f"{field}.pass_values", value=[]
        )


def _format_pass_value(field: str, value: int | float | str) -> str:
    """Strings are quoted, numbers bare."""
    if not isinstance(value, str):
        return canonical_text(value)
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    raise ConfigValidationError(
        f"{field} value mixes single and double quotes: {value}", field=field, value=value
    )


def _filter_action(field: str, value: str | None, default: Action) -> Action:
    if value is None:
        return default
    if value not in FILTER_ACTIONS:
        raise InvalidOptionError(
            f"{field} must be 'exclude' or 'flag', got '{value}'",
            field=field,
            value=value,
            allowed=FILTER_ACTIONS,
        )
    return Action(value)
