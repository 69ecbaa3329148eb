"""Tokenizer for the screening predicate grammar."""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from screenflow.core.exceptions import PredicateSyntaxError

KEYWORDS = frozenset({"AND", "OR", "NOT", "IN", "IS", "MISSING"})


class TokenKind(StrEnum):
    """Lexical category of a token."""

    IDENT = "ident"
    KEYWORD = "keyword"
    NUMBER = "number"
    STRING = "string"
    COMPARATOR = "comparator"
    LPAREN = "lparen"
    RPAREN = "rparen"
    COMMA = "comma"
    END = "end"


@dataclass(frozen=True)
class Token:
    """A lexed token with its source offset."""

    kind: TokenKind
    text: str
    position: int


_TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
    |(?P<number>-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)
    |(?P<string>'[^']*'|"[^"]*")
    |(?P<comparator>>=|<=|==|!=|>|<)
    |(?P<lparen>\()
    |(?P<rparen>\))
    |(?P<comma>,)
    |(?P<word>[A-Za-z_.][A-Za-z0-9_.]*)
    """,
    re.VERBOSE,
)


def tokenize(predicate: str) -> list[Token]:
    """Split predicate text into tokens, ending with an END token.

    Keywords are matched as uppercase only; ``and`` is an identifier.

    Args:
        predicate: Predicate text.

    Returns:
        Tokens in source order.

    Raises:
        PredicateSyntaxError: On a character no token can start with,
            including an unterminated quote.
    """
    tokens: list[Token] = []
    pos = 0
    while pos < len(predicate):
        match = _TOKEN_RE.match(predicate, pos)
        if match is None:
            raise PredicateSyntaxError(
                f"Unexpected character {predicate[pos]!r}", predicate, pos
            )
        group = match.lastgroup
        text = match.group()
        if group == "word":
            kind = TokenKind.KEYWORD if text in KEYWORDS else TokenKind.IDENT
            tokens.append(Token(kind, text, pos))
        elif group != "space":
            tokens.append(Token(TokenKind(group), text, pos))
        pos = match.end()
    tokens.append(Token(TokenKind.END, "", len(predicate)))
    return tokens
