"""Exception types raised by specdoc."""

from __future__ import annotations


class SpecError(Exception):
    """Base class for specdoc failures."""


class SpecGrammarError(SpecError):
    """A directive does not match the spec clause grammar.

    The message is user facing and stable; callers surface it as the
    diagnostic for the declaration the directive was attached to.
    """

    def __init__(self, message: str, *, line: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line


class SpecDeclarationError(SpecError):
    """Declaration source is not a single parseable statement."""
