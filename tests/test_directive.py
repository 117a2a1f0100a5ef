from __future__ import annotations

import libcst as cst
import pytest

from specdoc.directive import Cond, Shall, parse_cert_statements, parse_directive
from specdoc.exceptions import SpecGrammarError


def _code(stmt: cst.CSTNode) -> str:
    return cst.Module(body=[]).code_for_node(stmt).strip()


def test_parse_shall_directive() -> None:
    directive = parse_directive('name = "a", shall = "return a positive value"')
    assert directive.name == "a"
    assert directive.statement == Shall("return a positive value")
    assert directive.cert == ()


def test_parse_cond_directive_with_single_quotes() -> None:
    directive = parse_directive("name = 'b', cond = 'the input is empty, returns zero'")
    assert directive.statement == Cond("the input is empty, returns zero")


def test_parse_cert_block_keeps_statement_order() -> None:
    directive = parse_directive(
        'name = "b", cond = "the input is empty, returns zero", cert { x = f(""); assert x == 0; }'
    )
    assert [_code(stmt) for stmt in directive.cert] == ['x = f("")', "assert x == 0"]


def test_parse_empty_cert_block() -> None:
    directive = parse_directive('name = "a", shall = "work", cert {}')
    assert directive.cert == ()


def test_parse_cert_block_with_nested_braces() -> None:
    directive = parse_directive(
        'name = "a", shall = "work", cert { table = {"k": {1: 2}}; assert table["k"][1] == 2 }'
    )
    assert len(directive.cert) == 2
    assert _code(directive.cert[0]) == 'table = {"k": {1: 2}}'


def test_parse_multiline_cert_block() -> None:
    directive = parse_directive(
        'name = "loop", shall = "visit every item", cert {\n'
        "    for item in items:\n"
        "        visit(item)\n"
        "}"
    )
    assert len(directive.cert) == 1
    assert isinstance(directive.cert[0], cst.For)


def test_surrounding_whitespace_is_ignored() -> None:
    directive = parse_directive('\n   name = "a",\n   shall = "work"\n')
    assert directive.name == "a"


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ('shall = "x"', "expected spec name"),
        ('"a", shall = "x"', "expected spec name"),
        ('name "a", shall = "x"', "expected spec name"),
        ("", "expected spec name"),
        ('name = 5, shall = "x"', "error parsing spec name"),
        ('name = b"a", shall = "x"', "error parsing spec name"),
        ('name = other, shall = "x"', "error parsing spec name"),
        ('name = "a" shall = "x"', "expected spec shall or cond"),
        ('name = "a", should = "x"', "expected spec shall or cond"),
        ('name = "a", shall "x"', "expected spec shall or cond"),
        ('name = "a"', "expected spec shall or cond"),
        ('name = "a", shall = 1', "error parsing spec shall statement value"),
        ('name = "a", cond = None', "error parsing spec cond statement value"),
        ('name = "a", shall = "x" extra', "expected spec cert"),
        ('name = "a", shall = "x",', "expected spec cert"),
        ('name = "a", shall = "x", example { pass }', "expected spec cert"),
        ('name = "a", shall = "x", cert pass', "expected spec cert block"),
        ('name = "a", shall = "x", cert { def }', "error parsing spec cert statements"),
        ('name = "a", shall = "x", cert { pass', "error tokenizing spec directive"),
    ],
)
def test_grammar_errors_carry_specific_messages(text: str, message: str) -> None:
    with pytest.raises(SpecGrammarError) as exc:
        parse_directive(text)
    assert exc.value.message == message
    assert str(exc.value) == message


def test_trailing_tokens_after_cert_are_rejected() -> None:
    with pytest.raises(SpecGrammarError) as exc:
        parse_directive('name = "a", shall = "x", cert { pass } trailing')
    assert exc.value.message == "unexpected tokens after spec directive"


def test_grammar_error_reports_directive_line() -> None:
    with pytest.raises(SpecGrammarError) as exc:
        parse_directive('name = "a",\nshall = 3')
    assert exc.value.line == 2


def test_parse_cert_statements_splits_semicolons() -> None:
    statements = parse_cert_statements(" a = 1; b = 2 ")
    assert [_code(stmt) for stmt in statements] == ["a = 1", "b = 2"]


def test_parse_cert_statements_blank_payload() -> None:
    assert parse_cert_statements("   \n  ") == ()


def test_cert_block_with_flush_left_string_lines() -> None:
    directive = parse_directive(
        'name = "a", shall = "work", cert {\n'
        '    msg = """\n'
        "hello\n"
        '"""\n'
        "    assert msg\n"
        "}"
    )
    assert [_code(stmt) for stmt in directive.cert] == ['msg = """\nhello\n"""', "assert msg"]
