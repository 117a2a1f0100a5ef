"""Documentation synthesis for spec directives."""

from specdoc.synthesis.docs import merge_doc_lines, spec_heading, statement_line, synthesize
from specdoc.synthesis.example import render_example
from specdoc.synthesis.model import GeneratedDoc
from specdoc.synthesis.title import SPEC_TITLE, spec_title

__all__ = [
    "GeneratedDoc",
    "SPEC_TITLE",
    "merge_doc_lines",
    "render_example",
    "spec_heading",
    "spec_title",
    "statement_line",
    "synthesize",
]
