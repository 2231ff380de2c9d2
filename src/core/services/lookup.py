"""Lookup orchestration.

The CLI used to open connections and chain DEFINE/MATCH itself. These helpers
own that flow so any entry point (CLI, scripts, tests) gets the same
behaviour: open a client, define the word, fall back to MATCH suggestions
when nothing is found, always close the client.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from adapters.dict_protocol import connect as connect_client
from core.config import AppSettings
from core.domain.errors import DictConnectionError
from core.domain.models import LookupReport
from core.interfaces.dictionary import DictionaryClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[[AppSettings], DictionaryClient]


@dataclass
class LookupRequest:
    """Parameters of one lookup."""

    word: str
    database: str | None = None
    strategy: str | None = None
    # None: follow settings.suggest_on_miss
    suggest: bool | None = None
    match_only: bool = False


@dataclass
class LookupHooks:
    """Optional callbacks for UI layers (progress messages)."""

    status: Callable[[str], None] | None = None

    def notify(self, message: str) -> None:
        if self.status is not None:
            self.status(message)


def _default_factory(settings: AppSettings) -> DictionaryClient:
    return connect_client(settings)


@contextmanager
def _session(client: DictionaryClient) -> Iterator[DictionaryClient]:
    """Close `client` on exit; a failing close never hides the lookup's own error."""

    try:
        yield client
    except BaseException:
        try:
            client.close()
        except DictConnectionError as exc:
            logger.error("Could not close %r after a failed lookup: %s", client, exc)
        raise
    client.close()


def run_lookup(
    request: LookupRequest,
    *,
    settings: AppSettings | None = None,
    connect: ClientFactory | None = None,
    hooks: LookupHooks | None = None,
) -> LookupReport:
    """Run DEFINE (and MATCH when needed) on a fresh client.

    Raises whatever the client raises (`DictConnectionError`); the client is
    closed in every case.
    """

    settings = settings or AppSettings()
    connect = connect or _default_factory
    hooks = hooks or LookupHooks()

    database = request.database or settings.default_database
    strategy = request.strategy or settings.default_strategy
    suggest = settings.suggest_on_miss if request.suggest is None else request.suggest

    report = LookupReport(word=request.word, database=database, strategy=strategy)

    with _session(connect(settings)) as client:
        if request.match_only:
            hooks.notify(f"Matching '{request.word}' ({strategy}) in {database}")
            matches = client.match(request.word, strategy, database)
            return report.model_copy(update={"matches": list(matches)})

        hooks.notify(f"Defining '{request.word}' in {database}")
        report = report.model_copy(update={"definitions": client.define(request.word, database)})
        if report.found or not suggest:
            return report

        logger.info("No definitions for %r in %s, asking for suggestions", request.word, database)
        hooks.notify(f"No definitions found, matching '{request.word}' ({strategy})")
        matches = client.match(request.word, strategy, database)
        return report.model_copy(update={"matches": list(matches), "suggested": True})


def list_databases(*, settings: AppSettings | None = None, connect: ClientFactory | None = None):
    """Databases offered by the configured server, sorted by name."""

    settings = settings or AppSettings()
    with _session((connect or _default_factory)(settings)) as client:
        databases = client.databases()
    return [databases[name] for name in sorted(databases)]


def list_strategies(*, settings: AppSettings | None = None, connect: ClientFactory | None = None):
    """Strategies offered by the configured server, in server order."""

    settings = settings or AppSettings()
    with _session((connect or _default_factory)(settings)) as client:
        return list(client.strategies())
