"""Restricted predicate language: denylist check, parser, and evaluator."""
from __future__ import annotations

from screenflow.predicates.evaluator import evaluate_predicate
from screenflow.predicates.nodes import Node
from screenflow.predicates.parser import parse_predicate
from screenflow.predicates.validator import validate_predicate

__all__ = [
    "check_predicate",
    "evaluate_predicate",
    "parse_predicate",
    "validate_predicate",
]


def check_predicate(predicate: str) -> Node:
    """Run the denylist check, then parse.

    Args:
        predicate: Predicate text from configuration.

    Returns:
        Parsed syntax tree.

    Raises:
        InvalidPredicateError: If a banned pattern is present or the text
            is outside the grammar.
    """
    validate_predicate(predicate)
    return parse_predicate(predicate)
