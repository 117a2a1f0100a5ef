"""Declaration decomposition and reassembly.

A decorated statement is split into the fields that define its behavior
(name, type parameters, bases or parameters, body, decorators) and its
documentation. Reassembly rebuilds the node from those fields with a new
docstring; every other field is carried through untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence, Union, cast

import libcst as cst

from specdoc.logging import get_logger

PLACEHOLDER_NAME = "_"

ENUM_BASES = frozenset({"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag", "ReprEnum"})

logger = get_logger("declaration")


def _visibility(name: str) -> str:
    if name.startswith("_") and not (name.startswith("__") and name.endswith("__")):
        return "private"
    return "public"


@dataclass(frozen=True)
class EnumDecl:
    name: str
    type_parameters: cst.TypeParameters | None
    bases: tuple[cst.Arg, ...]
    keywords: tuple[cst.Arg, ...]
    body: cst.IndentedBlock
    decorators: tuple[cst.Decorator, ...]
    doc_lines: tuple[str, ...]
    docstring: cst.SimpleStatementLine | None
    leading_lines: tuple[cst.EmptyLine, ...]
    lines_after_decorators: tuple[cst.EmptyLine, ...]
    original: cst.ClassDef | None = field(default=None, repr=False, compare=False)

    @property
    def visibility(self) -> str:
        return _visibility(self.name)


@dataclass(frozen=True)
class ImplDecl:
    name: str
    type_parameters: cst.TypeParameters | None
    bases: tuple[cst.Arg, ...]
    keywords: tuple[cst.Arg, ...]
    body: cst.IndentedBlock
    decorators: tuple[cst.Decorator, ...]
    doc_lines: tuple[str, ...]
    docstring: cst.SimpleStatementLine | None
    leading_lines: tuple[cst.EmptyLine, ...]
    lines_after_decorators: tuple[cst.EmptyLine, ...]
    original: cst.ClassDef | None = field(default=None, repr=False, compare=False)

    @property
    def visibility(self) -> str:
        return _visibility(self.name)

    @property
    def interfaces(self) -> tuple[str, ...]:
        names = (dotted_name(arg.value) for arg in self.bases)
        return tuple(name for name in names if name)


@dataclass(frozen=True)
class FnDecl:
    name: str
    asynchronous: cst.Asynchronous | None
    type_parameters: cst.TypeParameters | None
    params: cst.Parameters
    returns: cst.Annotation | None
    body: cst.IndentedBlock
    decorators: tuple[cst.Decorator, ...]
    doc_lines: tuple[str, ...]
    docstring: cst.SimpleStatementLine | None
    leading_lines: tuple[cst.EmptyLine, ...]
    lines_after_decorators: tuple[cst.EmptyLine, ...]
    original: cst.FunctionDef | None = field(default=None, repr=False, compare=False)

    @property
    def visibility(self) -> str:
        return _visibility(self.name)

    @property
    def is_async(self) -> bool:
        return self.asynchronous is not None

    @property
    def variadic(self) -> tuple[str, ...]:
        """Names of the ``*args``/``**kwargs`` parameters, if any."""
        names: list[str] = []
        star_arg = self.params.star_arg
        if isinstance(star_arg, cst.Param):
            names.append(f"*{star_arg.name.value}")
        if self.params.star_kwarg is not None:
            names.append(f"**{self.params.star_kwarg.name.value}")
        return tuple(names)


@dataclass(frozen=True)
class OtherDecl:
    """Unrecognized statement shape, carried through as-is."""

    node: cst.BaseStatement
    name: str = PLACEHOLDER_NAME
    decorators: tuple[cst.Decorator, ...] = ()
    doc_lines: tuple[str, ...] = ()

    @property
    def visibility(self) -> str:
        return _visibility(self.name)


Declaration = Union[EnumDecl, ImplDecl, FnDecl, OtherDecl]


def dotted_name(expr: cst.BaseExpression) -> str | None:
    if isinstance(expr, cst.Name):
        return expr.value
    if isinstance(expr, cst.Attribute):
        parent = dotted_name(expr.value)
        if parent is None:
            return None
        return f"{parent}.{expr.attr.value}"
    return None


def is_docstring(stmt: cst.CSTNode) -> bool:
    if not isinstance(stmt, cst.SimpleStatementLine) or not stmt.body:
        return False
    expr = stmt.body[0]
    return isinstance(expr, cst.Expr) and isinstance(
        expr.value, (cst.SimpleString, cst.ConcatenatedString)
    )


def _is_enum_base(arg: cst.Arg) -> bool:
    name = dotted_name(arg.value)
    return name is not None and name.rpartition(".")[2] in ENUM_BASES


def _split_body(
    node: cst.ClassDef | cst.FunctionDef,
) -> tuple[cst.IndentedBlock, cst.SimpleStatementLine | None, tuple[str, ...]]:
    suite = node.body
    if isinstance(suite, cst.SimpleStatementSuite):
        line = cst.SimpleStatementLine(
            body=suite.body, trailing_whitespace=suite.trailing_whitespace
        )
        body = cst.IndentedBlock(body=[line])
    else:
        body = cast(cst.IndentedBlock, suite)
    docstring = node.get_docstring(clean=True)
    statements = list(body.body)
    if docstring is None or not statements or not is_docstring(statements[0]):
        return body, None, ()
    first = cast(cst.SimpleStatementLine, statements[0])
    return body.with_changes(body=statements[1:]), first, tuple(docstring.split("\n"))


def classify(node: cst.CSTNode) -> Declaration:
    """Decompose a statement into one of the recognized declaration shapes."""
    if isinstance(node, cst.ClassDef):
        body, docstring, doc_lines = _split_body(node)
        bases = tuple(node.bases)
        fields = dict(
            name=node.name.value,
            type_parameters=node.type_parameters,
            bases=bases,
            keywords=tuple(node.keywords),
            body=body,
            decorators=tuple(node.decorators),
            doc_lines=doc_lines,
            docstring=docstring,
            leading_lines=tuple(node.leading_lines),
            lines_after_decorators=tuple(node.lines_after_decorators),
            original=node,
        )
        if any(_is_enum_base(arg) for arg in bases):
            return EnumDecl(**fields)
        return ImplDecl(**fields)
    if isinstance(node, cst.FunctionDef):
        body, docstring, doc_lines = _split_body(node)
        return FnDecl(
            name=node.name.value,
            asynchronous=node.asynchronous,
            type_parameters=node.type_parameters,
            params=node.params,
            returns=node.returns,
            body=body,
            decorators=tuple(node.decorators),
            doc_lines=doc_lines,
            docstring=docstring,
            leading_lines=tuple(node.leading_lines),
            lines_after_decorators=tuple(node.lines_after_decorators),
            original=node,
        )
    if not isinstance(node, cst.BaseStatement):
        raise TypeError(f"expected a statement, got {type(node).__name__}")
    logger.debug("unrecognized declaration shape %s; using placeholder name", type(node).__name__)
    return OtherDecl(node=node)


def _escape_doc_line(line: str) -> str:
    return line.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')


def _trim_trailing_blank(lines: Sequence[str]) -> list[str]:
    trimmed = list(lines)
    while trimmed and not trimmed[-1].strip():
        trimmed.pop()
    return trimmed


def render_docstring(lines: Sequence[str], indent: str) -> str:
    """Render documentation lines as a triple-quoted literal at ``indent``."""
    lines = _trim_trailing_blank(lines)
    escaped = [_escape_doc_line(line) for line in lines]
    if len(escaped) <= 1:
        text = escaped[0] if escaped else ""
        if text.endswith('"'):
            text = text[:-1] + '\\"'
        return f'"""{text}"""'
    first, *rest = escaped
    rendered = [first] + [f"{indent}{line}" if line else "" for line in rest]
    return '"""' + "\n".join(rendered) + "\n" + indent + '"""'


def _docstring_statement(
    decl: EnumDecl | ImplDecl | FnDecl, doc_lines: Sequence[str], indent: str
) -> cst.SimpleStatementLine:
    expr = cst.Expr(cst.SimpleString(render_docstring(doc_lines, indent)))
    if decl.docstring is not None:
        return decl.docstring.with_changes(body=[expr])
    return cst.SimpleStatementLine(body=[expr])


def _with_docstring(
    decl: EnumDecl | ImplDecl | FnDecl, doc_lines: Sequence[str], indent: str
) -> cst.IndentedBlock:
    if not doc_lines:
        statements = list(decl.body.body)
        if decl.docstring is not None:
            statements.insert(0, decl.docstring)
        return decl.body.with_changes(body=statements)
    docstring = _docstring_statement(decl, doc_lines, indent)
    return decl.body.with_changes(body=[docstring, *decl.body.body])


def _as_comment_lines(doc_lines: Sequence[str]) -> list[cst.EmptyLine]:
    comments = []
    for line in _trim_trailing_blank(doc_lines):
        text = f"# {line}" if line else "#"
        comments.append(cst.EmptyLine(comment=cst.Comment(text)))
    return comments


def _renamed(original: cst.ClassDef | cst.FunctionDef | None, name: str) -> cst.Name:
    if original is None:
        return cst.Name(name)
    return original.name.with_changes(value=name)


def reassemble(decl: Declaration, doc_lines: Sequence[str], *, indent: str = "    ") -> cst.BaseStatement:
    """Rebuild the declaration with ``doc_lines`` as its complete documentation.

    ``indent`` is the absolute indentation of the declaration's body, used for
    the continuation lines of the docstring. Unrecognized shapes are returned
    unchanged with the documentation attached as comment lines above them.
    Whitespace and comments inside the header come from ``decl.original``
    when the declaration was produced by :func:`classify`.
    """
    if isinstance(decl, (EnumDecl, ImplDecl)):
        fields = dict(
            name=_renamed(decl.original, decl.name),
            type_parameters=decl.type_parameters,
            bases=decl.bases,
            keywords=decl.keywords,
            body=_with_docstring(decl, doc_lines, indent),
            decorators=decl.decorators,
            leading_lines=decl.leading_lines,
            lines_after_decorators=decl.lines_after_decorators,
        )
        if decl.original is None:
            return cst.ClassDef(**fields)
        return decl.original.with_changes(**fields)
    if isinstance(decl, FnDecl):
        fields = dict(
            name=_renamed(decl.original, decl.name),
            asynchronous=decl.asynchronous,
            type_parameters=decl.type_parameters,
            params=decl.params,
            returns=decl.returns,
            body=_with_docstring(decl, doc_lines, indent),
            decorators=decl.decorators,
            leading_lines=decl.leading_lines,
            lines_after_decorators=decl.lines_after_decorators,
        )
        if decl.original is None:
            return cst.FunctionDef(**fields)
        return decl.original.with_changes(**fields)
    if isinstance(decl, OtherDecl):
        node = decl.node
        if not doc_lines:
            return node
        leading = list(getattr(node, "leading_lines", ()))
        return node.with_changes(leading_lines=[*leading, *_as_comment_lines(doc_lines)])
    raise TypeError(f"unsupported declaration {type(decl).__name__}")


__all__ = [
    "Declaration",
    "ENUM_BASES",
    "EnumDecl",
    "FnDecl",
    "ImplDecl",
    "OtherDecl",
    "PLACEHOLDER_NAME",
    "classify",
    "dotted_name",
    "is_docstring",
    "reassemble",
    "render_docstring",
]
