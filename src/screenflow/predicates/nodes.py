"""Immutable syntax tree for screening predicates."""
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

ROW_NUMBER = "row_number"


@dataclass(frozen=True)
class Literal:
    """A quoted string or a bare number."""

    value: str | int | float
    quoted: bool

    @property
    def text(self) -> str:
        if self.quoted:
            return f"'{self.value}'"
        return str(self.value)


@dataclass(frozen=True)
class Comparison:
    column: str
    op: str
    literal: Literal


@dataclass(frozen=True)
class MissingCheck:
    column: str
    negated: bool


@dataclass(frozen=True)
class Membership:
    column: str
    values: tuple[Literal, ...]


@dataclass(frozen=True)
class Not:
    operand: Node


@dataclass(frozen=True)
class And:
    operands: tuple[Node, ...]


@dataclass(frozen=True)
class Or:
    operands: tuple[Node, ...]


Node = Comparison | MissingCheck | Membership | Not | And | Or


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all of its descendants, depth first."""
    yield node
    if isinstance(node, Not):
        yield from walk(node.operand)
    elif isinstance(node, And | Or):
        for operand in node.operands:
            yield from walk(operand)


def literals(node: Node) -> Iterator[Literal]:
    """Yield every literal in the tree."""
    for child in walk(node):
        if isinstance(child, Comparison):
            yield child.literal
        elif isinstance(child, Membership):
            yield from child.values


def referenced_columns(node: Node) -> list[str]:
    """Dataset columns the tree reads, in first-use order.

    ``row_number`` is positional and not reported.
    """
    seen: list[str] = []
    for child in walk(node):
        column = getattr(child, "column", None)
        if column and column != ROW_NUMBER and column not in seen:
            seen.append(column)
    return seen
