"""Compile an explicit (expert-mode) rule table."""
from __future__ import annotations

from typing import Any

import pandas as pd

from screenflow.core.enums import Action, Category, Partition
from screenflow.core.exceptions import (
    ConfigValidationError,
    DuplicateRuleIdError,
    EmptyFieldError,
    InvalidOptionError,
    MissingColumnsError,
)
from screenflow.core.models import ExpertModeConfig, Rule
from screenflow.predicates import check_predicate
from screenflow.predicates.nodes import referenced_columns


REQUIRED_COLUMNS = ("rule_id", "category", "description", "predicate", "action")
ASSIGNABLE_PARTITIONS = [Partition.PRETEST.value, Partition.PILOT.value, Partition.MAIN.value]


def _text(value: Any) -> str:
    if value is None or (pd.api.types.is_scalar(value) and pd.isna(value)):
        return ""
    return str(value).strip()


def compile_expert(config: ExpertModeConfig) -> list[Rule]:
    """Validate and normalize a caller-supplied rule table.

    Row order is preserved. ``order`` defaults to the 1-based row position,
    ``fields_used`` to the columns the predicate reads.

    Args:
        config: Expert-mode configuration holding the raw rule rows.

    Returns:
        One rule per row.

    Raises:
        MissingColumnsError: If a required column is absent.
        EmptyFieldError: If rule_id, description or predicate is blank.
        InvalidPredicateError: If a predicate fails the denylist or grammar.
        ConfigValidationError: On other invalid cell values.
    """
    if not config.screening_rules and not config.columns:
        return []

    missing = [c for c in REQUIRED_COLUMNS if c not in config.columns]
    if missing:
        raise MissingColumnsError(missing)

    rules: list[Rule] = []
    seen: set[str] = set()
    for position, row in enumerate(config.screening_rules, start=1):
        rule = _compile_row(position, row)
        if rule.rule_id in seen:
            raise DuplicateRuleIdError(
                f"screening_rules row {position}: duplicate rule_id '{rule.rule_id}'",
                field=f"screening_rules[{position}].rule_id",
                value=rule.rule_id,
            )
        seen.add(rule.rule_id)
        rules.append(rule)
    return rules


def _compile_row(position: int, row: dict[str, Any]) -> Rule:
    field = f"screening_rules[{position}]"

    rule_id = _text(row.get("rule_id"))
    if not rule_id:
        raise EmptyFieldError(
            f"screening_rules row {position}: rule_id cannot be empty",
            field=f"{field}.rule_id",
            value=row.get("rule_id"),
        )
    where = f"screening_rules row {position} (rule_id: {rule_id})"

    description = _text(row.get("description"))
    if not description:
        raise EmptyFieldError(
            f"{where}: description cannot be empty",
            field=f"{field}.description",
            value=row.get("description"),
        )
    predicate = _text(row.get("predicate"))
    if not predicate:
        raise EmptyFieldError(
            f"{where}: predicate cannot be empty",
            field=f"{field}.predicate",
            value=row.get("predicate"),
        )

    action = _option(where, f"{field}.action", row.get("action"), [a.value for a in Action])
    category = _option(
        where, f"{field}.category", row.get("category"), [c.value for c in Category]
    )
    tree = check_predicate(predicate)

    assign_value = None
    if action == Action.PARTITION:
        assign_value = _option(
            where, f"{field}.assign_value", row.get("assign_value"), ASSIGNABLE_PARTITIONS
        )

    return Rule(
        rule_id=rule_id,
        category=Category(category),
        description=description,
        fields_used=_text(row.get("fields_used")) or ", ".join(referenced_columns(tree)),
        predicate=predicate,
        action=Action(action),
        order=_order(where, f"{field}.order", row.get("order"), default=position),
        assign_value=assign_value,
    )


def _option(where: str, field: str, value: Any, allowed: list[str]) -> str:
    text = _text(value).lower()
    if text not in allowed:
        raise InvalidOptionError(
            f"{where}: {field.rsplit('.', 1)[-1]} must be one of "
            f"{', '.join(allowed)}, got '{_text(value)}'",
            field=field,
            value=value,
            allowed=allowed,
        )
    return text


def _order(where: str, field: str, value: Any, default: int) -> int:
    if not _text(value):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigValidationError(
            f"{where}: order must be an integer, got '{value}'", field=field, value=value
        ) from exc
    if not number.is_integer():
        raise ConfigValidationError(
            f"{where}: order must be an integer, got '{value}'", field=field, value=value
        )
    return int(number)
