"""Doctor command for connectivity diagnostics and server configuration."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from adapters.dict_protocol import DictionaryConnection
from cli.ui_components import print_banner
from core.config import DEFAULT_PORT, AppSettings, write_user_env_vars
from core.domain.errors import DictConnectionError

app = typer.Typer(no_args_is_help=True, help="Connectivity diagnostics and configuration checks.")

_console = Console()


def _settings_from(ctx: typer.Context) -> AppSettings:
    state = ctx.find_root().obj
    return state.settings if state is not None else AppSettings()


@app.command()
def run(ctx: typer.Context) -> None:
    """Connect to the configured server and report what it offers."""

    settings = _settings_from(ctx)

    table = Table(title="dict-client Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Server", "OK", f"{settings.host}:{settings.port}")
    timeout = "none (blocking)" if settings.timeout_seconds is None else f"{settings.timeout_seconds:g}s"
    table.add_row("Timeout", "OK", timeout)

    try:
        conn = DictionaryConnection.from_settings(settings)
    except DictConnectionError as exc:
        table.add_row("Handshake", "FAIL", str(exc))
        _console.print(table)
        raise typer.Exit(code=1) from exc

    failed = False
    with conn:
        print_banner(_console, host=settings.host, port=settings.port, greeting=conn.banner.message)
        table.add_row("Handshake", "OK", f"{conn.banner.code} {conn.banner.message}")
        table.add_row("Capabilities", "OK", ", ".join(conn.capabilities) or "none advertised")
        try:
            databases = conn.databases()
            table.add_row("Databases", "OK", f"{len(databases)} available")
            strategies = conn.strategies()
            table.add_row("Strategies", "OK", ", ".join(s.name for s in strategies) or "none")
        except DictConnectionError as exc:
            failed = True
            table.add_row("Queries", "FAIL", str(exc))

    _console.print(table)
    if failed:
        raise typer.Exit(code=1)


@app.command(name="set-server")
def set_server(
    host: str = typer.Argument(..., help="DICT server host name."),
    port: int = typer.Option(DEFAULT_PORT, "--port", "-p", min=1, max=65535, help="DICT server port."),
    timeout: Optional[float] = typer.Option(None, "--timeout", min=0.1, help="Socket deadline in seconds."),
) -> None:
    """Store the default server in the user config .env."""

    env_path = write_user_env_vars(
        {
            "DICTCLIENT_HOST": host.strip(),
            "DICTCLIENT_PORT": str(port),
            "DICTCLIENT_TIMEOUT_SECONDS": None if timeout is None else f"{timeout:g}",
        }
    )
    _console.print(f"[green]Saved server config to:[/green] {env_path}")
