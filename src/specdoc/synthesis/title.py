from __future__ import annotations

from typing import Iterable

SPEC_TITLE = "# Specifications"


def spec_title(doc_lines: Iterable[str]) -> str:
    """Return the section title, or ``""`` if the documentation already has it."""
    for line in doc_lines:
        if line == SPEC_TITLE:
            return ""
    return SPEC_TITLE


__all__ = ["SPEC_TITLE", "spec_title"]
