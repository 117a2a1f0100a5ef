from __future__ import annotations

import re

from typer.testing import CliRunner

from specdoc import cli

_ANSI_ESCAPE = re.compile(r"\x1B\[[0-9;]*m")

DIRECTED = '# spec: name = "a", shall = "work"\ndef f():\n    pass\n'
PLAIN = "def g():\n    pass\n"


def _strip_ansi(text: str) -> str:
    return _ANSI_ESCAPE.sub("", text)


def test_expand_prints_expanded_source(write_module) -> None:
    path = write_module("directed.py", DIRECTED)
    result = CliRunner().invoke(cli.app, ["expand", str(path)])
    assert result.exit_code == 0, result.output
    assert "## SPEC-f-a" in result.output
    assert path.read_text(encoding="utf-8") == DIRECTED


def test_expand_check_reports_files_that_would_change(write_module) -> None:
    directed = write_module("directed.py", DIRECTED)
    plain = write_module("plain.py", PLAIN)
    runner = CliRunner()

    changed = runner.invoke(cli.app, ["expand", "--check", str(directed), str(plain)])
    assert changed.exit_code == 1
    assert f"would expand {directed}" in changed.output
    assert "SPEC-f-a" not in changed.output

    unchanged = runner.invoke(cli.app, ["expand", "--check", str(plain)])
    assert unchanged.exit_code == 0


def test_expand_in_parallel_keeps_argument_order(write_module) -> None:
    paths = [
        write_module(f"mod{index}.py", DIRECTED.replace("def f", f"def f{index}"))
        for index in range(4)
    ]
    result = CliRunner().invoke(cli.app, ["expand", "--jobs", "3", *map(str, paths)])
    assert result.exit_code == 0, result.output
    positions = [result.output.index(f"## SPEC-f{index}-a") for index in range(4)]
    assert positions == sorted(positions)


def test_expand_reports_grammar_errors(write_module) -> None:
    path = write_module("bad.py", '# spec: name = 1, shall = "x"\ndef f():\n    pass\n')
    result = CliRunner().invoke(cli.app, ["expand", str(path)])
    assert result.exit_code == 1
    assert f"{path}:1: error parsing spec name" in result.output


def test_expand_uses_config_file(write_module, tmp_path) -> None:
    config = tmp_path / "custom.toml"
    config.write_text('marker = "req"\nfence_language = "pycon"\n', encoding="utf-8")
    path = write_module(
        "req.py", '# req: name = "a", shall = "work", cert { f() }\ndef f():\n    pass\n'
    )
    result = CliRunner().invoke(cli.app, ["expand", "--config", str(config), str(path)])
    assert result.exit_code == 0, result.output
    assert "```pycon" in result.output


def test_expand_rejects_invalid_config(write_module, tmp_path) -> None:
    config = tmp_path / "custom.toml"
    config.write_text('marker = "two words"\n', encoding="utf-8")
    path = write_module("plain.py", PLAIN)
    result = CliRunner().invoke(cli.app, ["expand", "--config", str(config), str(path)])
    assert result.exit_code == 2
    assert "invalid specdoc configuration" in _strip_ansi(result.output)


def test_render_applies_single_directive(write_module) -> None:
    path = write_module("decl.py", "def check() -> int:\n    return 1\n")
    result = CliRunner().invoke(
        cli.app,
        ["render", str(path), "--directive", 'name = "a", shall = "return a positive value"'],
    )
    assert result.exit_code == 0, result.output
    assert "`check` shall return a positive value." in result.output


def test_render_reports_grammar_error(write_module) -> None:
    path = write_module("decl.py", "def check() -> int:\n    return 1\n")
    result = CliRunner().invoke(
        cli.app, ["render", str(path), "--directive", 'name = "a", bogus = "x"']
    )
    assert result.exit_code == 1
    assert "expected spec shall or cond" in result.output
