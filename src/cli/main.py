"""dict-client command line.

Commands only parse options, call the lookup service and render; all
protocol work happens in `adapters.dict_protocol`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from adapters.json_exporter import export_report_json, report_to_json
from cli import doctor
from cli.ui_components import (
    build_databases_table,
    build_report_renderable,
    build_strategies_table,
)
from core.config import AppSettings
from core.domain.errors import DictConnectionError
from core.domain.models import ALL_DATABASES, FIRST_MATCH
from core.logging_config import setup_logging
from core.services.lookup import (
    LookupHooks,
    LookupRequest,
    list_databases,
    list_strategies,
    run_lookup,
)

logger = logging.getLogger(__name__)

app = typer.Typer(no_args_is_help=True, help="Query DICT (RFC 2229) dictionary servers.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

_DATABASE_HELP = f"Database, '{ALL_DATABASES}' (all) or '{FIRST_MATCH}' (first with a match)."


@dataclass
class CliState:
    settings: AppSettings
    json_output: bool = False
    verbose: bool = False


@contextmanager
def _handle_client_errors() -> Iterator[None]:
    try:
        yield
    except DictConnectionError as exc:
        _err_console.print(f"[red]Error:[/red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1) from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _hooks(state: CliState) -> LookupHooks:
    if not state.verbose:
        return LookupHooks()
    return LookupHooks(status=lambda message: _err_console.print(f"[dim]{escape(message)}[/dim]"))


@app.callback()
def main(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", "-H", help="DICT server (default from config: dict.org)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="DICT server port (default 2628)."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Socket deadline in seconds."),
    json_output: bool = typer.Option(False, "--json", help="Print JSON instead of tables."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
) -> None:
    """Query DICT (RFC 2229) dictionary servers."""

    overrides = {
        key: value
        for key, value in {"host": host, "port": port, "timeout_seconds": timeout}.items()
        if value is not None
    }
    try:
        settings = AppSettings(**overrides)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    setup_logging("DEBUG" if verbose else settings.log_level, json_output=settings.log_json)
    ctx.obj = CliState(settings=settings, json_output=json_output, verbose=verbose)


@app.command()
def databases(ctx: typer.Context) -> None:
    """List the databases offered by the server."""

    state: CliState = ctx.obj
    with _handle_client_errors():
        items = list_databases(settings=state.settings)

    if state.json_output:
        typer.echo(json.dumps([item.model_dump(mode="json") for item in items], ensure_ascii=False, indent=2))
        return
    _console.print(build_databases_table(items))


@app.command()
def strategies(ctx: typer.Context) -> None:
    """List the matching strategies offered by the server."""

    state: CliState = ctx.obj
    with _handle_client_errors():
        items = list_strategies(settings=state.settings)

    if state.json_output:
        typer.echo(json.dumps([item.model_dump(mode="json") for item in items], ensure_ascii=False, indent=2))
        return
    _console.print(build_strategies_table(items))


@app.command()
def match(
    ctx: typer.Context,
    word: str = typer.Argument(..., help="Word or pattern to match."),
    database: Optional[str] = typer.Option(None, "--database", "-d", help=_DATABASE_HELP),
    strategy: Optional[str] = typer.Option(None, "--strategy", "-s", help="Strategy, e.g. exact, prefix, '.' (default)."),
) -> None:
    """List words matching WORD."""

    state: CliState = ctx.obj
    request = LookupRequest(word=word, database=database, strategy=strategy, match_only=True)
    with _handle_client_errors():
        report = run_lookup(request, settings=state.settings, hooks=_hooks(state))

    if state.json_output:
        typer.echo(report_to_json(report), nl=False)
        return
    _console.print(build_report_renderable(report, match_only=True))


@app.command()
def define(
    ctx: typer.Context,
    word: str = typer.Argument(..., help="Word to define."),
    database: Optional[str] = typer.Option(None, "--database", "-d", help=_DATABASE_HELP),
    strategy: Optional[str] = typer.Option(None, "--strategy", "-s", help="Strategy used for suggestions."),
    suggest: Optional[bool] = typer.Option(
        None,
        "--suggest/--no-suggest",
        help="Ask for matches when nothing is defined (default from config).",
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Also write the report to a JSON file."),
) -> None:
    """Show the definitions of WORD."""

    state: CliState = ctx.obj
    request = LookupRequest(word=word, database=database, strategy=strategy, suggest=suggest)
    with _handle_client_errors():
        report = run_lookup(request, settings=state.settings, hooks=_hooks(state))

    if output is not None:
        path = export_report_json(report=report, output_path=output)
        logger.info("Report written to %s", path)
        _err_console.print(f"[green]Saved report to:[/green] {escape(str(path))}")

    if state.json_output:
        typer.echo(report_to_json(report), nl=False)
        return
    _console.print(build_report_renderable(report))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
