"""Atom codec for DICT lines (RFC 2229 section 2.2).

A line is a sequence of atoms separated by whitespace. An atom that starts
with a double (or single) quote runs until the matching quote; inside it a
backslash escapes the next character.
"""

from __future__ import annotations

from core.domain.errors import ErrorKind, ProtocolError

MAX_COMMAND_LENGTH = 1024  # octets, CRLF included

_QUOTES = "\"'"


def _unterminated(line: str) -> ProtocolError:
    return ProtocolError(
        f"Unterminated quoted string in line: {line!r}",
        kind=ErrorKind.MALFORMED_LINE,
    )


def _scan(line: str, limit: int | None = None) -> tuple[list[str], str]:
    atoms: list[str] = []
    size = len(line)
    pos = 0

    while pos < size:
        if line[pos].isspace():
            pos += 1
            continue
        if limit is not None and len(atoms) >= limit:
            break

        current: list[str] = []
        quote = line[pos] if line[pos] in _QUOTES else None
        if quote is not None:
            pos += 1
            while True:
                if pos >= size:
                    raise _unterminated(line)
                ch = line[pos]
                pos += 1
                if ch == quote:
                    break
                if ch == "\\":
                    if pos >= size:
                        raise _unterminated(line)
                    ch = line[pos]
                    pos += 1
                current.append(ch)
        # quotes after the start of an atom are literal
        while pos < size and not line[pos].isspace():
            current.append(line[pos])
            pos += 1
        atoms.append("".join(current))

    return atoms, line[pos:].rstrip()


def split_atoms(line: str) -> list[str]:
    """Split a protocol line into atoms, unquoting quoted ones."""

    atoms, _ = _scan(line)
    return atoms


def split_leading_atoms(line: str, count: int) -> tuple[list[str], str]:
    """Take at most `count` atoms and return them with the untouched rest of the line."""

    return _scan(line, count)


def text_atom(text: str) -> str:
    """Free text such as a description: unquoted when it is one well-formed
    quoted atom, otherwise kept exactly as sent."""

    if text and text[0] in _QUOTES:
        try:
            atoms = split_atoms(text)
        except ProtocolError:
            return text
        if len(atoms) == 1:
            return atoms[0]
    return text


def quote_atom(value: str) -> str:
    """Always produce a double-quoted atom."""

    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_atom(value: str) -> str:
    """Bare atom when safe, quoted otherwise (identifiers, selectors)."""

    if value and not any(ch.isspace() or ch in _QUOTES or ch == "\\" for ch in value):
        return value
    return quote_atom(value)


def build_command(keyword: str, *args: str, encoding: str = "utf-8") -> str:
    """Join a command line and check it against the protocol limits.

    Raises:
        ValueError: an argument carries a line break, or the encoded line
            (with CRLF) exceeds `MAX_COMMAND_LENGTH` octets.
    """

    line = " ".join((keyword, *args))
    if "\r" in line or "\n" in line:
        raise ValueError("DICT command arguments cannot contain line breaks")
    if len(line.encode(encoding)) + 2 > MAX_COMMAND_LENGTH:
        raise ValueError(f"DICT command longer than {MAX_COMMAND_LENGTH} octets")
    return line
