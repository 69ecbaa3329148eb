"""Recursive-descent parser for screening predicates.

Grammar, lowest precedence first::

    expr       := and_expr ("OR" and_expr)*
    and_expr   := term ("AND" term)*
    term       := "NOT" term | atom
    atom       := "(" expr ")" | IDENT tail
    tail       := COMPARATOR literal
                | "IS" ["NOT"] "MISSING"
                | "IN" "(" literal ("," literal)* ")"
    literal    := STRING | NUMBER
"""
from __future__ import annotations

from screenflow.core.exceptions import PredicateSyntaxError
from screenflow.predicates.lexer import Token, TokenKind, tokenize
from screenflow.predicates.nodes import (
    And,
    Comparison,
    Literal,
    Membership,
    MissingCheck,
    Node,
    Not,
    Or,
)


class _Parser:
    def __init__(self, predicate: str) -> None:
        self._predicate = predicate
        self._tokens = tokenize(predicate)
        self._pos = 0

    @property
    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        token = self._current
        self._pos += 1
        return token

    def _error(self, message: str) -> PredicateSyntaxError:
        return PredicateSyntaxError(message, self._predicate, self._current.position)

    def _at_keyword(self, word: str) -> bool:
        return self._current.kind == TokenKind.KEYWORD and self._current.text == word

    def _expect_keyword(self, word: str) -> None:
        if not self._at_keyword(word):
            raise self._error(f"Expected {word}")
        self._advance()

    def _expect(self, kind: TokenKind, what: str) -> Token:
        if self._current.kind != kind:
            raise self._error(f"Expected {what}")
        return self._advance()

    def parse(self) -> Node:
        if self._current.kind == TokenKind.END:
            raise self._error("Empty predicate")
        node = self._expr()
        if self._current.kind != TokenKind.END:
            raise self._error(f"Unexpected token {self._current.text!r}")
        return node

    def _expr(self) -> Node:
        operands = [self._and_expr()]
        while self._at_keyword("OR"):
            self._advance()
            operands.append(self._and_expr())
        return operands[0] if len(operands) == 1 else Or(tuple(operands))

    def _and_expr(self) -> Node:
        operands = [self._term()]
        while self._at_keyword("AND"):
            self._advance()
            operands.append(self._term())
        return operands[0] if len(operands) == 1 else And(tuple(operands))

    def _term(self) -> Node:
        if self._at_keyword("NOT"):
            self._advance()
            return Not(self._term())
        return self._atom()

    def _atom(self) -> Node:
        if self._current.kind == TokenKind.LPAREN:
            self._advance()
            node = self._expr()
            self._expect(TokenKind.RPAREN, "')'")
            return node

        column = self._expect(TokenKind.IDENT, "column name").text

        if self._current.kind == TokenKind.COMPARATOR:
            op = self._advance().text
            return Comparison(column, op, self._literal())

        if self._at_keyword("IS"):
            self._advance()
            negated = self._at_keyword("NOT")
            if negated:
                self._advance()
            self._expect_keyword("MISSING")
            return MissingCheck(column, negated)

        if self._at_keyword("IN"):
            self._advance()
            self._expect(TokenKind.LPAREN, "'('")
            values = [self._literal()]
            while self._current.kind == TokenKind.COMMA:
                self._advance()
                values.append(self._literal())
            self._expect(TokenKind.RPAREN, "')'")
            return Membership(column, tuple(values))

        raise self._error(f"Expected comparator, IS or IN after {column!r}")

    def _literal(self) -> Literal:
        token = self._current
        if token.kind == TokenKind.STRING:
            self._advance()
            return Literal(token.text[1:-1], quoted=True)
        if token.kind == TokenKind.NUMBER:
            self._advance()
            text = token.text
            if "." in text or "e" in text.lower():
                return Literal(float(text), quoted=False)
            return Literal(int(text), quoted=False)
        raise self._error("Expected a quoted string or number")


def parse_predicate(predicate: str) -> Node:
    """Parse predicate text into a syntax tree.

    ``NOT`` binds tighter than ``AND``, which binds tighter than ``OR``.

    Args:
        predicate: Predicate text.

    Returns:
        Root node of the tree.

    Raises:
        PredicateSyntaxError: If the text is not in the grammar.
    """
    return _Parser(predicate).parse()
