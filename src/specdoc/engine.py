"""Module-level expansion of spec directive comments.

Directives are written as comments directly above a declaration::

    # spec: name = "positive", shall = "return a positive value"
    # spec: name = "empty", cond = "the input is empty, returns zero", cert {
    #     assert count("") == 0
    # }
    def count(text: str) -> int:
        ...

A directive whose ``cert`` block is still open continues on the next
comment line.
Directive comments are consumed; every declaration is expanded on its own,
so a bad directive only leaves its own declaration untouched.
"""

from __future__ import annotations

import io
import re
import tokenize
from dataclasses import dataclass, field
from pathlib import Path

import libcst as cst
from libcst.metadata import WhitespaceInclusivePositionProvider

from specdoc.config import SpecdocConfig
from specdoc.directive import Directive, parse_directive
from specdoc.exceptions import SpecGrammarError
from specdoc.logging import get_logger
from specdoc.processor import apply_directive

logger = get_logger("engine")


@dataclass(frozen=True)
class SpecDiagnostic:
    line: int
    message: str
    path: str = ""

    def render(self) -> str:
        prefix = f"{self.path}:" if self.path else ""
        return f"{prefix}{self.line}: {self.message}"


@dataclass(frozen=True)
class ExpansionResult:
    source: str
    changed: bool
    diagnostics: tuple[SpecDiagnostic, ...] = ()
    expanded: int = 0
    path: str = ""


@dataclass(frozen=True)
class _DirectiveComment:
    text: str
    offset: int


@dataclass
class _LeadingSplit:
    directives: list[_DirectiveComment] = field(default_factory=list)
    remaining: list[cst.EmptyLine] = field(default_factory=list)


def directive_pattern(marker: str) -> re.Pattern[str]:
    return re.compile(rf"^#\s*{re.escape(marker)}:\s*(.*)$")


def _attach_header_directives(module: cst.Module, pattern: re.Pattern[str]) -> cst.Module:
    """Move directive comments parsed into the module header onto the first statement."""
    header = list(module.header)
    for index, line in enumerate(header):
        if line.comment is not None and pattern.match(line.comment.value):
            break
    else:
        return module
    if not module.body:
        return module
    first = module.body[0]
    moved = first.with_changes(leading_lines=[*header[index:], *first.leading_lines])
    return module.with_changes(header=header[:index], body=[moved, *module.body[1:]])


def _cert_block_open(text: str) -> bool:
    """Whether ``text`` stops inside an unclosed ``cert { ... }`` block."""
    depth = 0
    previous = ""
    try:
        for token in tokenize.generate_tokens(io.StringIO(text).readline):
            if token.type == tokenize.OP and token.string == "{":
                if depth or previous == "cert":
                    depth += 1
            elif token.type == tokenize.OP and token.string == "}" and depth:
                depth -= 1
            if token.type not in (tokenize.NL, tokenize.NEWLINE, tokenize.COMMENT):
                previous = token.string
    except (tokenize.TokenError, SyntaxError) as exc:
        logger.debug("directive text is incomplete so far: %s", exc)
    return depth > 0


def _comment_body(line: cst.EmptyLine) -> str | None:
    if line.comment is None:
        return None
    return line.comment.value[1:]


class _SpecTransformer(cst.CSTTransformer):
    METADATA_DEPENDENCIES = (WhitespaceInclusivePositionProvider,)

    def __init__(self, *, config: SpecdocConfig, default_indent: str, path: str = "") -> None:
        super().__init__()
        self.config = config
        self.default_indent = default_indent
        self.path = path
        self.depth = 0
        self.expanded = 0
        self.diagnostics: list[SpecDiagnostic] = []
        self._pattern = directive_pattern(config.marker)

    def visit_IndentedBlock(self, node: cst.IndentedBlock) -> bool:
        self.depth += 1
        return True

    def leave_IndentedBlock(
        self, original_node: cst.IndentedBlock, updated_node: cst.IndentedBlock
    ) -> cst.IndentedBlock:
        self.depth -= 1
        return updated_node

    def on_leave(self, original_node: cst.CSTNode, updated_node: cst.CSTNode):
        updated = super().on_leave(original_node, updated_node)
        if isinstance(original_node, cst.BaseStatement) and isinstance(updated, cst.BaseStatement):
            return self._expand(original_node, updated)
        return updated

    def _split_leading(self, leading: list[cst.EmptyLine]) -> _LeadingSplit:
        split = _LeadingSplit()
        index = 0
        while index < len(leading):
            line = leading[index]
            match = self._pattern.match(line.comment.value) if line.comment else None
            if match is None:
                split.remaining.append(line)
                index += 1
                continue
            parts = [match.group(1)]
            offset = index
            index += 1
            while _cert_block_open("\n".join(parts)) and index < len(leading):
                body = _comment_body(leading[index])
                if body is None:
                    break
                parts.append(body)
                index += 1
            split.directives.append(_DirectiveComment(text="\n".join(parts), offset=offset))
        return split

    def _expand(self, original_node: cst.BaseStatement, updated: cst.BaseStatement) -> cst.BaseStatement:
        split = self._split_leading(list(updated.leading_lines))
        if not split.directives:
            return updated
        start_line = self.get_metadata(WhitespaceInclusivePositionProvider, original_node).start.line
        parsed: list[Directive] = []
        for comment in split.directives:
            try:
                parsed.append(parse_directive(comment.text))
            except SpecGrammarError as exc:
                line = start_line + comment.offset + ((exc.line or 1) - 1)
                logger.debug("directive on line %d rejected: %s", line, exc.message)
                self.diagnostics.append(SpecDiagnostic(line=line, message=exc.message, path=self.path))
                return updated
        node: cst.BaseStatement = updated.with_changes(leading_lines=split.remaining)
        indent = self.default_indent * (self.depth + 1)
        for directive in parsed:
            node = apply_directive(
                directive, node, indent=indent, fence_language=self.config.fence_language
            )
        self.expanded += len(parsed)
        return node


class SpecEngine:
    def __init__(self, config: SpecdocConfig | None = None) -> None:
        self.config = config or SpecdocConfig()

    def expand_source(self, source: str, *, path: str = "") -> ExpansionResult:
        try:
            module = cst.parse_module(source)
        except cst.ParserSyntaxError as exc:
            diagnostic = SpecDiagnostic(
                line=exc.raw_line, message=f"not valid Python: {exc.message}", path=path
            )
            return ExpansionResult(source=source, changed=False, diagnostics=(diagnostic,), path=path)
        module = _attach_header_directives(module, directive_pattern(self.config.marker))
        transformer = _SpecTransformer(
            config=self.config, default_indent=module.default_indent, path=path
        )
        new_module = cst.MetadataWrapper(module).visit(transformer)
        new_source = new_module.code
        return ExpansionResult(
            source=new_source,
            changed=new_source != source,
            diagnostics=tuple(transformer.diagnostics),
            expanded=transformer.expanded,
            path=path,
        )

    def expand_path(self, path: Path) -> ExpansionResult:
        source = path.read_text(encoding="utf-8")
        return self.expand_source(source, path=str(path))


__all__ = ["ExpansionResult", "SpecDiagnostic", "SpecEngine"]
