"""Error taxonomy for the DICT engine.

Why here:
- Adapters raise these and entry points (CLI, services) catch them, so they
  live in the domain layer where both sides can import them.
- `ErrorKind` lets callers branch on the failure without parsing messages.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.domain.models import Status


class ErrorKind(str, Enum):
    """What went wrong during an exchange."""

    HANDSHAKE = "handshake"
    IO = "io"
    MALFORMED_STATUS = "malformed_status"
    MALFORMED_LINE = "malformed_line"
    TRUNCATED = "truncated"
    UNEXPECTED_STATUS = "unexpected_status"
    INVALID_DATABASE = "invalid_database"
    INVALID_STRATEGY = "invalid_strategy"
    DEFINITION_COUNT = "definition_count"
    CLOSED = "closed"
    RESOURCE_RELEASE = "resource_release"


class DictConnectionError(ConnectionError):
    """The current connection can no longer be trusted.

    Callers should close and discard the connection after catching this.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.IO,
        status: "Status | None" = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status = status

    def __str__(self) -> str:
        base = super().__str__()
        if self.status is not None:
            return f"{base} (server said: {self.status.code} {self.status.message})"
        return base


class ProtocolError(DictConnectionError):
    """The server sent something the protocol does not allow here."""
