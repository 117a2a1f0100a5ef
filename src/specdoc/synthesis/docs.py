from __future__ import annotations

from typing import Sequence

from specdoc.directive import Directive
from specdoc.synthesis.example import render_example
from specdoc.synthesis.model import GeneratedDoc
from specdoc.synthesis.title import spec_title


def spec_heading(decl_name: str, spec_name: str) -> str:
    return f"## SPEC-{decl_name}-{spec_name}"


def statement_line(decl_name: str, directive: Directive) -> str:
    return f"{directive.statement.sentence(decl_name)}.\n"


def synthesize(
    decl_name: str,
    directive: Directive,
    doc_lines: Sequence[str],
    *,
    fence_language: str = "python",
) -> GeneratedDoc:
    """Build the documentation section contributed by one directive."""
    return GeneratedDoc(
        title=spec_title(doc_lines),
        heading=spec_heading(decl_name, directive.name),
        statement_line=statement_line(decl_name, directive),
        example_block=render_example(directive.cert, fence_language=fence_language),
    )


def merge_doc_lines(existing: Sequence[str], generated: Sequence[str]) -> list[str]:
    """Append generated lines after the existing documentation.

    A blank line separates the two when the existing text does not already
    end with one.
    """
    merged = list(existing)
    if merged and merged[-1].strip() and generated:
        merged.append("")
    merged.extend(generated)
    return merged


__all__ = ["merge_doc_lines", "spec_heading", "statement_line", "synthesize"]
