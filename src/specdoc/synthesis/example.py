"""Certification example rendering.

Cert statements are wrapped in a throwaway function, run through black with
its default mode, and unwrapped again so the rendered example does not depend
on how the author spaced the directive.
"""

from __future__ import annotations

import textwrap
from typing import Sequence

import black
import libcst as cst

from specdoc.logging import get_logger

_WRAPPER_HEADER = "def main():\n"
_MARGIN = "    "

logger = get_logger("example")


def wrap_statements(cert: Sequence[cst.BaseStatement]) -> str:
    """Return ``def main():`` with each statement's source as its body."""
    printer = cst.Module(body=[])
    parts = [_WRAPPER_HEADER]
    for stmt in cert:
        parts.append(textwrap.indent(printer.code_for_node(stmt), _MARGIN))
    return "".join(parts)


def unwrap_formatted(formatted: str) -> list[str] | None:
    lines = formatted.splitlines()
    if not lines or lines[0] != _WRAPPER_HEADER.rstrip("\n"):
        return None
    body = lines[1:]
    while body and not body[-1].strip():
        body.pop()
    if not body:
        return None
    return [line[len(_MARGIN) :] if line.startswith(_MARGIN) else line for line in body]


def render_example(cert: Sequence[cst.BaseStatement], *, fence_language: str = "python") -> str:
    """Render cert statements as a fenced code block.

    Returns ``""`` for an empty cert, and also when black rejects the source
    or returns something that no longer looks like the wrapper function.
    """
    if not cert:
        return ""
    source = wrap_statements(cert)
    try:
        formatted = black.format_str(source, mode=black.Mode())
    except Exception as exc:
        logger.debug("black could not format certification example: %s", exc)
        return ""
    lines = unwrap_formatted(formatted)
    if lines is None:
        logger.debug("black output for certification example was not usable")
        return ""
    return "\n".join([f"```{fence_language}", *lines, "```"])


__all__ = ["render_example", "unwrap_formatted", "wrap_statements"]
