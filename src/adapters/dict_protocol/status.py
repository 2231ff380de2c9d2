"""Line and status-line reading over the connection's text reader."""

from __future__ import annotations

from typing import TextIO

from core.domain.errors import DictConnectionError, ErrorKind, ProtocolError
from core.domain.models import Status


def read_line(reader: TextIO) -> str | None:
    """Read one line without its CRLF/LF; `None` when the peer closed."""

    try:
        raw = reader.readline()
    except OSError as exc:
        raise DictConnectionError(
            f"I/O error while reading from server: {exc}",
            kind=ErrorKind.IO,
        ) from exc
    if not raw:
        return None
    return raw.rstrip("\r\n")


def read_status(reader: TextIO) -> Status:
    """Read and parse the status line that starts every response."""

    line = read_line(reader)
    if line is None:
        raise ProtocolError(
            "Connection closed while waiting for a status line",
            kind=ErrorKind.TRUNCATED,
        )
    return Status.parse(line)
