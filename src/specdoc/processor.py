"""Single-declaration processing."""

from __future__ import annotations

import libcst as cst

from specdoc.declaration import classify, reassemble
from specdoc.directive import Directive, parse_directive
from specdoc.exceptions import SpecDeclarationError
from specdoc.logging import get_logger
from specdoc.synthesis import merge_doc_lines, synthesize

logger = get_logger("processor")


def apply_directive(
    directive: Directive,
    node: cst.BaseStatement,
    *,
    indent: str = "    ",
    fence_language: str = "python",
) -> cst.BaseStatement:
    decl = classify(node)
    generated = synthesize(decl.name, directive, decl.doc_lines, fence_language=fence_language)
    logger.debug("SPEC-%s-%s attached to %s", decl.name, directive.name, type(decl).__name__)
    doc_lines = merge_doc_lines(decl.doc_lines, generated.lines())
    return reassemble(decl, doc_lines, indent=indent)


def process_node(
    directive: str,
    node: cst.BaseStatement,
    *,
    indent: str = "    ",
    fence_language: str = "python",
) -> cst.BaseStatement:
    """Parse ``directive`` and apply it to ``node``.

    Raises :class:`~specdoc.exceptions.SpecGrammarError` if the directive is
    malformed; the node is not touched in that case.
    """
    return apply_directive(
        parse_directive(directive), node, indent=indent, fence_language=fence_language
    )


def process(directive: str, declaration: str, *, fence_language: str = "python") -> str:
    """Apply ``directive`` to the single declaration in ``declaration`` source."""
    try:
        module = cst.parse_module(declaration)
    except cst.ParserSyntaxError as exc:
        raise SpecDeclarationError(f"declaration is not valid Python: {exc.message}") from exc
    if len(module.body) != 1:
        raise SpecDeclarationError(
            f"expected exactly one declaration, found {len(module.body)} statements"
        )
    updated = process_node(
        directive,
        module.body[0],
        indent=module.default_indent,
        fence_language=fence_language,
    )
    return module.with_changes(body=[updated]).code


__all__ = ["apply_directive", "process", "process_node"]
