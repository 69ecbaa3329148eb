"""Immutable, ordered rule table."""
from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import Any, overload

import pandas as pd

from screenflow.core.enums import Action, Category
from screenflow.core.models import Rule

RULE_COLUMNS = [
    "rule_id",
    "category",
    "description",
    "fields_used",
    "predicate",
    "action",
    "order",
    "assign_value",
]


class RuleTable(Sequence[Rule]):
    """Ordered sequence of compiled rules.

    Row order is the order the compiler produced. Application order is
    given by :meth:`execution_order`.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: tuple[Rule, ...] = tuple(rules)

    @overload
    def __getitem__(self, index: int) -> Rule: ...

    @overload
    def __getitem__(self, index: slice) -> RuleTable: ...

    def __getitem__(self, index: int | slice) -> Rule | RuleTable:
        if isinstance(index, slice):
            return RuleTable(self._rules[index])
        return self._rules[index]

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleTable):
            return NotImplemented
        return self._rules == other._rules

    def __hash__(self) -> int:
        return hash(self._rules)

    def __repr__(self) -> str:
        return f"RuleTable({[r.rule_id for r in self._rules]!r})"

    @property
    def rule_ids(self) -> list[str]:
        return [r.rule_id for r in self._rules]

    def with_action(self, *actions: Action) -> RuleTable:
        """Rules whose action is one of ``actions``, in table order."""
        return RuleTable(r for r in self._rules if r.action in actions)

    def with_category(self, category: Category) -> RuleTable:
        """Rules of one reporting category, in table order."""
        return RuleTable(r for r in self._rules if r.category == category)

    def execution_order(self) -> RuleTable:
        """Rules in application order.

        Partition-phase rules come first, then filter-phase rules; within a
        phase rules sort by ``order`` with ties kept in table order.
        """
        ranked = sorted(
            enumerate(self._rules),
            key=lambda item: (item[1].phase, item[1].order, item[0]),
        )
        return RuleTable(rule for _, rule in ranked)

    def to_records(self) -> list[dict[str, Any]]:
        return [rule.model_dump(mode="json") for rule in self._rules]

    def to_frame(self) -> pd.DataFrame:
        """Rule table as a DataFrame with a fixed column order (also when empty)."""
        frame = pd.DataFrame(self.to_records(), columns=RULE_COLUMNS)
        return frame.astype({"order": "int64"})

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> RuleTable:
        """Rebuild a table written by :meth:`to_frame`.

        Raises:
            pydantic.ValidationError: If a row is not a valid rule.
        """
        clean = frame.astype(object).where(frame.notna(), None)
        rules = []
        for row in clean.to_dict(orient="records"):
            row["fields_used"] = row.get("fields_used") or ""
            rules.append(Rule.model_validate(row))
        return cls(rules)
