from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GeneratedDoc:
    title: str
    heading: str
    statement_line: str
    example_block: str

    def entries(self) -> tuple[str, str, str, str]:
        return (self.title, self.heading, self.statement_line, self.example_block)

    def lines(self) -> list[str]:
        """Documentation lines for the non-empty entries, in order."""
        lines: list[str] = []
        for entry in self.entries():
            if entry:
                lines.extend(entry.split("\n"))
        return lines
