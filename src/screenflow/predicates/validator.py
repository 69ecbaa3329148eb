"""Denylist check for screening predicates.

Predicates in expert-mode rule tables often come from configuration files
written by collaborators, so every such predicate is checked for
code-execution tokens before it is parsed or evaluated.
"""
from __future__ import annotations

import re

from screenflow.core.exceptions import InvalidPredicateError

_WORD_PATTERNS = (
    "system",
    "eval",
    "parse",
    "source",
    "load",
    "save",
    "library",
    "require",
)
_TRAILING_WORD_PATTERNS = ("return", "function", "for", "while", "repeat", "if")
_LITERAL_PATTERNS = ("{", "}", "[[", "$")


def _word(token: str) -> re.Pattern[str]:
    return re.compile(rf"\b{token}\b", re.IGNORECASE)


# Checked in this order; the first hit is reported.
BANNED_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    *((token, _word(token)) for token in _WORD_PATTERNS),
    (":::", re.compile(re.escape(":::"))),
    *((token, _word(token)) for token in _TRAILING_WORD_PATTERNS),
    *((token, re.compile(re.escape(token))) for token in _LITERAL_PATTERNS),
)


def validate_predicate(predicate: str) -> None:
    """Reject predicates containing disallowed tokens.

    Matching is case-insensitive and word-bounded for keyword tokens.

    Args:
        predicate: Predicate text.

    Raises:
        InvalidPredicateError: If a banned token or character is present.
    """
    for token, regex in BANNED_PATTERNS:
        if regex.search(predicate):
            raise InvalidPredicateError(token, predicate)
