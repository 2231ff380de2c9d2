"""DICT connection engine (RFC 2229).

One `DictionaryConnection` owns one TCP socket and a text reader/writer pair
bound to it. Every query is a single exchange: write one command, read the
status line, then drain the payload the status announces. A per-instance lock
covers the whole exchange, so threads sharing a connection are serialized
instead of interleaving on the socket.

Usage:

    with DictionaryConnection("dict.org") as conn:
        for definition in conn.define("cat"):
            print(definition.database.name, definition.text)
"""

from __future__ import annotations

import logging
import re
import socket
import threading
from collections.abc import Callable
from typing import TextIO, TypeVar

from adapters.dict_protocol.atoms import build_command, format_atom, quote_atom
from adapters.dict_protocol.responses import (
    DEFINE,
    DEFINITION_HEADER,
    MATCH,
    SHOW_DB,
    SHOW_STRATEGIES,
    Outcome,
    ResponsePlan,
    database_from_line,
    match_from_line,
    read_definitions,
    read_records,
    strategy_from_line,
)
from adapters.dict_protocol.status import read_status
from core.config import DEFAULT_PORT, AppSettings
from core.domain.errors import DictConnectionError, ErrorKind, ProtocolError
from core.domain.models import (
    ALL_DATABASES,
    DEFAULT_STRATEGY,
    Database,
    Definition,
    MatchingStrategy,
    Status,
)
from core.domain.ordered_set import OrderedSet

logger = logging.getLogger(__name__)

R = TypeVar("R")

BANNER_READY = 220
COMPLETION_OK = 250
QUIT_ACKS = frozenset({221, 226})

# "<auth.mime> <msg-id@host>" at the end of the 220 banner
_BANNER_RE = re.compile(r"<([^<>]*)>\s*(<[^<>]+>)\s*$")


def _name_of(entry: Database | MatchingStrategy | str) -> str:
    return entry if isinstance(entry, str) else entry.name


class DictionaryConnection:
    """Synchronous client connection to a DICT server.

    Raises `DictConnectionError` if the host cannot be reached or the server
    does not greet with 220. `timeout` is the socket's own deadline for
    connect and every read; `None` blocks until the server answers.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        *,
        timeout: float | None = None,
        encoding: str = "utf-8",
        quit_timeout: float = 2.0,
    ) -> None:
        self.host = host
        self.port = port
        self.capabilities: list[str] = []
        self.message_id: str | None = None

        self._encoding = encoding
        self._quit_timeout = quit_timeout
        self._lock = threading.Lock()
        self._closed = False
        self._broken = False
        # A data response may be followed by "250 ok"; it is read lazily
        # together with the next status line.
        self._completion_pending = False
        self._reader: TextIO | None = None
        self._writer: TextIO | None = None

        try:
            self._sock = socket.create_connection((host, port), timeout=timeout)
        except OSError as exc:
            raise DictConnectionError(
                f"Cannot connect to {host}:{port}: {exc}",
                kind=ErrorKind.IO,
            ) from exc

        try:
            self._reader = self._sock.makefile("r", encoding=encoding, errors="replace", newline="")
            self._writer = self._sock.makefile("w", encoding=encoding, newline="")
            self.banner: Status = read_status(self._reader)
        except (OSError, DictConnectionError) as exc:
            self._closed = True
            self._release(strict=False)
            raise DictConnectionError(
                f"Handshake with {host}:{port} failed: {exc}",
                kind=ErrorKind.HANDSHAKE,
            ) from exc

        if self.banner.code != BANNER_READY:
            self._closed = True
            self._release(strict=False)
            raise DictConnectionError(
                f"{host}:{port} did not accept the session",
                kind=ErrorKind.HANDSHAKE,
                status=self.banner,
            )

        match = _BANNER_RE.search(self.banner.message)
        if match:
            self.capabilities = [cap for cap in match.group(1).split(".") if cap]
            self.message_id = match.group(2)
        logger.info("Connected to %s:%s: %s", host, port, self.banner.message)

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> "DictionaryConnection":
        settings = settings or AppSettings()
        return cls(
            settings.host,
            settings.port,
            timeout=settings.timeout_seconds,
            encoding=settings.encoding,
            quit_timeout=settings.quit_timeout_seconds,
        )

    def __enter__(self) -> "DictionaryConnection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else ("broken" if self._broken else "open")
        return f"<{type(self).__name__} {self.host}:{self.port} {state}>"

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def usable(self) -> bool:
        return not (self._closed or self._broken)

    # ------------------------------------------------------------------ queries

    def databases(self) -> dict[str, Database]:
        """`SHOW DB`: database name -> Database, empty when the server has none."""

        records = self._query("SHOW DB", SHOW_DB, lambda reader, _: read_records(reader, database_from_line))
        return {database.name: database for database in records}

    def strategies(self) -> OrderedSet[MatchingStrategy]:
        """`SHOW STRATEGIES`, in the order the server lists them."""

        records = self._query(
            "SHOW STRATEGIES",
            SHOW_STRATEGIES,
            lambda reader, _: read_records(reader, strategy_from_line),
        )
        return OrderedSet(records)

    def match(
        self,
        word: str,
        strategy: MatchingStrategy | str = DEFAULT_STRATEGY,
        database: Database | str = ALL_DATABASES,
    ) -> OrderedSet[str]:
        """`MATCH db strategy "word"`: matched words, duplicates collapsed.

        `database` may be a selector (`*` all, `!` first with a match) and
        `strategy` may be `.` (server default); both are sent as given.
        """

        command = build_command(
            "MATCH",
            format_atom(_name_of(database)),
            format_atom(_name_of(strategy)),
            quote_atom(word),
            encoding=self._encoding,
        )
        words = self._query(command, MATCH, lambda reader, _: read_records(reader, match_from_line))
        return OrderedSet(words)

    def define(self, word: str, database: Database | str = ALL_DATABASES) -> list[Definition]:
        """`DEFINE db "word"`: one Definition per database block returned."""

        command = build_command(
            "DEFINE",
            format_atom(_name_of(database)),
            quote_atom(word),
            encoding=self._encoding,
        )
        return self._query(command, DEFINE, read_definitions)

    # ---------------------------------------------------------------- lifecycle

    def close(self) -> None:
        """Send QUIT and release the socket.

        Protocol and I/O problems while saying goodbye are logged and ignored.
        Only a failure to release the socket itself is raised.
        """

        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._quit()
            self._release(strict=True)
            logger.info("Disconnected from %s:%s", self.host, self.port)

    def _quit(self) -> None:
        try:
            self._writer.write("QUIT\r\n")
            self._writer.flush()
            if self._broken:
                return
            self._sock.settimeout(self._quit_timeout)
            status = self._read_response_status()
            if status.code not in QUIT_ACKS:
                logger.warning("Unexpected reply to QUIT: %s %s", status.code, status.message)
        except ProtocolError as exc:
            if exc.kind is not ErrorKind.DEFINITION_COUNT:
                logger.debug("Ignoring error while quitting %s:%s: %s", self.host, self.port, exc)
                return
            logger.warning(
                "%s:%s sent more definitions than it announced; the last DEFINE result is incomplete",
                self.host,
                self.port,
            )
        except (OSError, DictConnectionError) as exc:
            logger.debug("Ignoring error while quitting %s:%s: %s", self.host, self.port, exc)

    def _release(self, *, strict: bool) -> None:
        for stream in (self._reader, self._writer):
            if stream is None:
                continue
            try:
                stream.close()
            except OSError as exc:
                logger.debug("Ignoring error while closing stream: %s", exc)

        try:
            self._sock.close()
        except OSError as exc:
            if not strict:
                logger.debug("Ignoring error while closing socket: %s", exc)
                return
            logger.critical("Could not release socket for %s:%s: %s", self.host, self.port, exc)
            raise DictConnectionError(
                f"Could not release socket for {self.host}:{self.port}: {exc}",
                kind=ErrorKind.RESOURCE_RELEASE,
            ) from exc

    # ----------------------------------------------------------------- exchange

    def _query(
        self,
        command: str,
        plan: ResponsePlan,
        read_payload: Callable[[TextIO, Status], list[R]],
    ) -> list[R]:
        with self._lock:
            self._ensure_usable()
            try:
                self._send(command)
                status = self._read_response_status()
                outcome = plan.classify(status)
                if outcome is Outcome.EMPTY:
                    logger.debug("%s: no results (%s)", plan.command, status.code)
                    return []
                if outcome is not Outcome.DATA:
                    raise DictConnectionError(
                        f"{plan.command} failed",
                        kind=outcome,
                        status=status,
                    )
                payload = read_payload(self._reader, status)
                self._completion_pending = True
                return payload
            except DictConnectionError as exc:
                # A 4xx/5xx reply carries no payload, so the stream is still in sync.
                in_sync = (
                    not isinstance(exc, ProtocolError)
                    and exc.status is not None
                    and exc.status.category >= 4
                )
                if not in_sync:
                    self._broken = True
                raise

    def _ensure_usable(self) -> None:
        if self._closed:
            raise DictConnectionError(
                f"Connection to {self.host}:{self.port} is closed",
                kind=ErrorKind.CLOSED,
            )
        if self._broken:
            raise DictConnectionError(
                f"Connection to {self.host}:{self.port} is unusable after a previous error",
                kind=ErrorKind.CLOSED,
            )

    def _send(self, command: str) -> None:
        logger.debug(">>> %s", command)
        try:
            self._writer.write(command + "\r\n")
            self._writer.flush()
        except OSError as exc:
            raise DictConnectionError(
                f"I/O error while sending {command.split(' ', 1)[0]}: {exc}",
                kind=ErrorKind.IO,
            ) from exc

    def _read_response_status(self) -> Status:
        status = read_status(self._reader)
        if self._completion_pending:
            self._completion_pending = False
            if status.code == COMPLETION_OK:
                status = read_status(self._reader)
            elif status.code == DEFINITION_HEADER:
                raise ProtocolError(
                    "Server sent more definitions than it announced",
                    kind=ErrorKind.DEFINITION_COUNT,
                    status=status,
                )
        logger.debug("<<< %s %s", status.code, status.message)
        return status


def connect(
    settings: AppSettings | None = None,
    *,
    host: str | None = None,
    port: int | None = None,
) -> DictionaryConnection:
    """Open a connection from settings, with optional host/port overrides."""

    settings = settings or AppSettings()
    overrides = {key: value for key, value in {"host": host, "port": port}.items() if value is not None}
    if overrides:
        settings = settings.model_copy(update=overrides)
    return DictionaryConnection.from_settings(settings)
