"""UI components for the CLI (Rich).

Why separate components:
- Keeps command logic apart from visual details.
- Tables/panels are reused by several commands (lookup, doctor).

Server text is always wrapped in `Text`, never interpolated into markup:
definitions routinely contain square brackets.
"""

from __future__ import annotations

from collections.abc import Iterable

from rich.align import Align
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import Database, Definition, LookupReport, MatchingStrategy


def print_banner(console: Console, *, host: str, port: int, greeting: str | None = None) -> None:
    """Print the session banner (server and its greeting)."""

    title = Text("dict-client", style="bold cyan")
    subtitle = Text(f"{host}:{port}", style="dim")
    parts: list[Text | str] = [title, "\n", subtitle]
    if greeting:
        parts += ["\n", Text(greeting, style="italic")]
    body = Align.center(Text.assemble(*parts), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_databases_table(databases: Iterable[Database]) -> Table:
    table = Table(title="Databases")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Description", style="white")
    for database in databases:
        table.add_row(Text(database.name), Text(database.description))
    return table


def build_strategies_table(strategies: Iterable[MatchingStrategy]) -> Table:
    table = Table(title="Strategies")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Description", style="white")
    for strategy in strategies:
        table.add_row(Text(strategy.name), Text(strategy.description))
    return table


def build_matches_table(report: LookupReport) -> Table:
    table = Table(title=Text(f"Matches for '{report.word}' ({report.strategy} in {report.database})"))
    table.add_column("#", style="dim", justify="right")
    table.add_column("Word", style="green")
    for index, word in enumerate(report.matches, start=1):
        table.add_row(str(index), Text(word))
    return table


def build_definition_panel(definition: Definition) -> Panel:
    """One panel per definition, titled with the source database."""

    title = Text.assemble(
        (definition.word, "bold yellow"),
        "  ",
        (definition.database.name, "cyan"),
    )
    subtitle = Text(definition.database.description, style="dim") if definition.database.description else None
    return Panel(Text(definition.text), title=title, subtitle=subtitle, border_style="yellow")


def build_report_renderable(report: LookupReport, *, match_only: bool = False) -> Group:
    """Definitions, or the match/suggestion list when nothing was defined."""

    if report.found:
        header = Text(
            f"{len(report.definitions)} definition(s) found for '{report.word}'",
            style="bold",
        )
        return Group(header, *(build_definition_panel(item) for item in report.definitions))

    if report.matches:
        if report.suggested:
            return Group(
                Text("No definitions found. Perhaps you mean:", style="yellow"),
                build_matches_table(report),
            )
        return Group(build_matches_table(report))

    what = "matches" if match_only else "definitions"
    return Group(Text(f"No {what} found for '{report.word}'.", style="yellow"))
