from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

import typer

from specdoc.config import SpecdocConfig, load_config
from specdoc.engine import ExpansionResult, SpecEngine
from specdoc.exceptions import SpecError
from specdoc.logging import configure_logging, get_logger
from specdoc.processor import process

app = typer.Typer(add_completion=False, help="Attach spec directives to Python docstrings.")

logger = get_logger("cli")


def _load_config_or_exit(config: Optional[Path]) -> SpecdocConfig:
    try:
        return load_config(config_path=config)
    except ValueError as exc:
        typer.secho(str(exc), err=True, fg=typer.colors.RED)
        raise typer.Exit(code=2) from exc


def _expand_all(engine: SpecEngine, paths: List[Path], jobs: int) -> list[ExpansionResult]:
    if jobs <= 1 or len(paths) <= 1:
        return [engine.expand_path(path) for path in paths]
    with ThreadPoolExecutor(max_workers=jobs) as pool:
        return list(pool.map(engine.expand_path, paths))


@app.command()
def expand(
    paths: List[Path] = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    check: bool = typer.Option(False, "--check", help="Exit 1 if any file would change."),
    jobs: int = typer.Option(1, "--jobs", "-j", min=1, help="Files to process in parallel."),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to a specdoc TOML file."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Print each file with its spec directives expanded into docstrings."""
    configure_logging(verbose=verbose)
    engine = SpecEngine(_load_config_or_exit(config))
    results = _expand_all(engine, paths, jobs)

    failed = False
    would_change: list[str] = []
    for result in results:
        for diagnostic in result.diagnostics:
            typer.echo(diagnostic.render(), err=True)
            failed = True
        logger.info("%s: %d directive(s) expanded", result.path, result.expanded)
        if check:
            if result.changed:
                would_change.append(result.path)
            continue
        typer.echo(result.source, nl=False)

    for path in would_change:
        typer.echo(f"would expand {path}", err=True)
    if failed or would_change:
        raise typer.Exit(code=1)


@app.command()
def render(
    declaration: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    directive: str = typer.Option(..., "--directive", "-d", help="Directive clauses."),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to a specdoc TOML file."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Apply one directive to the single declaration in DECLARATION."""
    configure_logging(verbose=verbose)
    settings = _load_config_or_exit(config)
    source = declaration.read_text(encoding="utf-8")
    try:
        output = process(directive, source, fence_language=settings.fence_language)
    except SpecError as exc:
        typer.echo(f"{declaration}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(output, nl=False)


def main() -> None:  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
