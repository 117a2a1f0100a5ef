"""Directive grammar.

A directive is a short clause list attached to a declaration::

    name = "positive", shall = "return a positive value", cert { assert check() > 0 }

``name`` and exactly one of ``shall``/``cond`` are required, in that order.
The optional ``cert`` block holds ordinary Python statements that illustrate
the specification; they are parsed with libcst so they stay syntactically
valid, but they are never executed or checked against the statement.
"""

from __future__ import annotations

import ast
import io
import tokenize
from dataclasses import dataclass, field
from typing import Sequence, Union, cast

import libcst as cst

from specdoc.exceptions import SpecGrammarError

_SKIPPED_TOKENS = frozenset(
    {
        tokenize.NEWLINE,
        tokenize.NL,
        tokenize.INDENT,
        tokenize.DEDENT,
        tokenize.COMMENT,
        tokenize.ENDMARKER,
    }
)


@dataclass(frozen=True)
class Shall:
    """Mandatory behavior: "`ident` shall {text}"."""

    text: str

    @property
    def keyword(self) -> str:
        return "shall"

    def sentence(self, ident: str) -> str:
        return f"`{ident}` shall {self.text}"


@dataclass(frozen=True)
class Cond:
    """Conditional behavior: "If `ident` {text}"."""

    text: str

    @property
    def keyword(self) -> str:
        return "cond"

    def sentence(self, ident: str) -> str:
        return f"If `{ident}` {self.text}"


SpecStatement = Union[Shall, Cond]


@dataclass(frozen=True)
class Directive:
    name: str
    statement: SpecStatement
    cert: tuple[cst.BaseStatement, ...] = field(default_factory=tuple)


class _TokenCursor:
    def __init__(self, source: str, tokens: Sequence[tokenize.TokenInfo]) -> None:
        self.source = source
        self.tokens = list(tokens)
        self.index = 0
        self._line_offsets = _line_offsets(source)

    @property
    def at_end(self) -> bool:
        return self.index >= len(self.tokens)

    def peek(self, ahead: int = 0) -> tokenize.TokenInfo | None:
        position = self.index + ahead
        if position < len(self.tokens):
            return self.tokens[position]
        return None

    def advance(self) -> tokenize.TokenInfo | None:
        token = self.peek()
        if token is not None:
            self.index += 1
        return token

    def at_keyword(self, *keywords: str) -> str | None:
        """Return the keyword if the cursor sits on ``<keyword> =``."""
        token = self.peek()
        equals = self.peek(1)
        if token is None or token.type != tokenize.NAME or token.string not in keywords:
            return None
        if equals is None or equals.string != "=":
            return None
        return token.string

    def take_op(self, op: str) -> bool:
        token = self.peek()
        if token is not None and token.type == tokenize.OP and token.string == op:
            self.index += 1
            return True
        return False

    def take_name(self, name: str) -> bool:
        token = self.peek()
        if token is not None and token.type == tokenize.NAME and token.string == name:
            self.index += 1
            return True
        return False

    def take_str(self, message: str) -> str:
        token = self.peek()
        if token is None or token.type != tokenize.STRING:
            raise self.error(message)
        try:
            value = ast.literal_eval(token.string)
        except (ValueError, SyntaxError) as exc:
            raise self.error(message) from exc
        if not isinstance(value, str):
            raise self.error(message)
        self.index += 1
        return value

    def offset(self, position: tuple[int, int]) -> int:
        row, col = position
        return self._line_offsets[row - 1] + col

    def error(self, message: str) -> SpecGrammarError:
        token = self.peek()
        if token is None and self.tokens:
            token = self.tokens[-1]
        line = token.start[0] if token is not None else None
        return SpecGrammarError(message, line=line)


def _line_offsets(source: str) -> list[int]:
    offsets = [0]
    for line in source.splitlines(keepends=True):
        offsets.append(offsets[-1] + len(line))
    return offsets


def _tokenize(source: str) -> list[tokenize.TokenInfo]:
    try:
        return [
            token
            for token in tokenize.generate_tokens(io.StringIO(source).readline)
            if token.type not in _SKIPPED_TOKENS
        ]
    except (tokenize.TokenError, SyntaxError) as exc:
        raise SpecGrammarError("error tokenizing spec directive") from exc


def parse_directive(text: str) -> Directive:
    """Parse directive text into a :class:`Directive`.

    Raises :class:`SpecGrammarError` with a stable message on the first clause
    that does not match. Tokens left over after a complete directive are
    rejected.
    """
    source = text.strip()
    cursor = _TokenCursor(source, _tokenize(source))

    if not (cursor.take_name("name") and cursor.take_op("=")):
        raise cursor.error("expected spec name")
    name = cursor.take_str("error parsing spec name")

    if not cursor.take_op(","):
        raise cursor.error("expected spec shall or cond")
    keyword = cursor.at_keyword("shall", "cond")
    if keyword is None:
        raise cursor.error("expected spec shall or cond")
    cursor.index += 2
    text_value = cursor.take_str(f"error parsing spec {keyword} statement value")
    statement: SpecStatement = Shall(text_value) if keyword == "shall" else Cond(text_value)

    if cursor.at_end:
        return Directive(name=name, statement=statement)

    if not (cursor.take_op(",") and cursor.take_name("cert")):
        raise cursor.error("expected spec cert")
    cert = _parse_cert_block(cursor)

    if not cursor.at_end:
        raise cursor.error("unexpected tokens after spec directive")
    return Directive(name=name, statement=statement, cert=cert)


def _parse_cert_block(cursor: _TokenCursor) -> tuple[cst.BaseStatement, ...]:
    opening = cursor.peek()
    if opening is None or not cursor.take_op("{"):
        raise cursor.error("expected spec cert block")
    depth = 1
    closing: tokenize.TokenInfo | None = None
    while not cursor.at_end:
        token = cursor.advance()
        if token is None:
            break
        if token.type != tokenize.OP:
            continue
        if token.string == "{":
            depth += 1
        elif token.string == "}":
            depth -= 1
            if depth == 0:
                closing = token
                break
    if closing is None:
        raise cursor.error("error tokenizing spec directive")
    payload = cursor.source[cursor.offset(opening.end) : cursor.offset(closing.start)]
    return parse_cert_statements(payload, line=opening.start[0])


def _block_margin(source: str) -> str:
    for text in source.splitlines():
        if text.strip():
            return text[: len(text) - len(text.lstrip())]
    return ""


def parse_cert_statements(payload: str, *, line: int | None = None) -> tuple[cst.BaseStatement, ...]:
    """Parse the body of a ``cert { ... }`` block into one statement per element.

    ``a; b`` on a single line yields two statements, each without its
    trailing semicolon. An indented block is parsed as the body of an
    ``if`` so that string literals spanning lines are left as written.
    """
    source = payload.strip("\n")
    if not source.strip():
        return ()
    try:
        if _block_margin(source):
            wrapper = cst.parse_module(f"if True:\n{source}\n")
            body = cast(cst.If, wrapper.body[0]).body.body
        else:
            body = cst.parse_module(source + "\n").body
    except cst.ParserSyntaxError as exc:
        raise SpecGrammarError("error parsing spec cert statements", line=line) from exc
    statements: list[cst.BaseStatement] = []
    for stmt in body:
        if not isinstance(stmt, cst.SimpleStatementLine):
            statements.append(stmt)
            continue
        for index, small in enumerate(stmt.body):
            statements.append(
                cst.SimpleStatementLine(
                    body=[small.with_changes(semicolon=cst.MaybeSentinel.DEFAULT)],
                    leading_lines=stmt.leading_lines if index == 0 else (),
                )
            )
    return tuple(statements)


__all__ = [
    "Cond",
    "Directive",
    "Shall",
    "SpecStatement",
    "parse_cert_statements",
    "parse_directive",
]
