"""Response plans and the multi-line reader shared by every query.

Each query is described by a `ResponsePlan` (which code means data follows,
which codes mean "nothing found", which error codes have a specific meaning)
plus a record builder that turns one data line into a value.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TextIO, TypeVar

from pydantic import ValidationError

from adapters.dict_protocol.atoms import split_atoms, split_leading_atoms, text_atom
from adapters.dict_protocol.status import read_line, read_status
from core.domain.errors import ErrorKind, ProtocolError
from core.domain.models import Database, Definition, MatchingStrategy, Status

R = TypeVar("R")

TERMINATOR = "."
DEFINITION_HEADER = 151


class Outcome(str, Enum):
    DATA = "data"
    EMPTY = "empty"


@dataclass(frozen=True)
class ResponsePlan:
    """Status-code table of one command."""

    command: str
    data_follows: int
    empty: frozenset[int] = frozenset()
    errors: Mapping[int, ErrorKind] = field(default_factory=dict)

    def classify(self, status: Status) -> Outcome | ErrorKind:
        if status.code == self.data_follows:
            return Outcome.DATA
        if status.code in self.empty:
            return Outcome.EMPTY
        return self.errors.get(status.code, ErrorKind.UNEXPECTED_STATUS)


SHOW_DB = ResponsePlan("SHOW DB", data_follows=110, empty=frozenset({554}))
SHOW_STRATEGIES = ResponsePlan("SHOW STRATEGIES", data_follows=111, empty=frozenset({555}))
MATCH = ResponsePlan(
    "MATCH",
    data_follows=152,
    empty=frozenset({552}),
    errors={550: ErrorKind.INVALID_DATABASE, 551: ErrorKind.INVALID_STRATEGY},
)
DEFINE = ResponsePlan(
    "DEFINE",
    data_follows=150,
    empty=frozenset({552}),
    errors={550: ErrorKind.INVALID_DATABASE},
)


def read_block(reader: TextIO) -> list[str]:
    """Read data lines up to the lone "." terminator (consumed, not returned).

    The whole block is drained before anything is parsed so a bad line never
    leaves the rest of the block in the socket.
    """

    lines: list[str] = []
    while True:
        line = read_line(reader)
        if line is None:
            raise ProtocolError(
                f"Connection closed after {len(lines)} data lines, before the end-of-data marker",
                kind=ErrorKind.TRUNCATED,
            )
        if line == TERMINATOR:
            return lines
        # RFC 2229 dot-stuffing
        if line.startswith(".."):
            line = line[1:]
        lines.append(line)


def read_records(reader: TextIO, build: Callable[[str], R]) -> list[R]:
    return [build(line) for line in read_block(reader)]


def _named_entry(model: type[Database] | type[MatchingStrategy], line: str):
    """`<name> <description>`: the description is the rest of the line."""

    atoms, rest = split_leading_atoms(line, 1)
    if not atoms:
        raise ProtocolError(
            f"Empty line in {model.__name__} listing",
            kind=ErrorKind.MALFORMED_LINE,
        )
    try:
        return model(name=atoms[0], description=text_atom(rest))
    except ValidationError as exc:
        raise ProtocolError(
            f"Invalid {model.__name__} entry {line!r}: {exc}",
            kind=ErrorKind.MALFORMED_LINE,
        ) from exc


def database_from_line(line: str) -> Database:
    return _named_entry(Database, line)


def strategy_from_line(line: str) -> MatchingStrategy:
    return _named_entry(MatchingStrategy, line)


def match_from_line(line: str) -> str:
    """`<database> <word>`: the word is the payload."""

    atoms = split_atoms(line)
    if len(atoms) < 2:
        raise ProtocolError(
            f"Match line needs a database and a word, got {atoms!r}",
            kind=ErrorKind.MALFORMED_LINE,
        )
    return atoms[1]


def announced_count(status: Status) -> int:
    """Number of definitions announced by a 150 status ("150 n definitions ...")."""

    atoms = split_atoms(status.message)
    try:
        count = int(atoms[0])
    except (IndexError, ValueError):
        count = -1
    if count < 0:
        raise ProtocolError(
            "DEFINE response does not announce a definition count",
            kind=ErrorKind.DEFINITION_COUNT,
            status=status,
        )
    return count


def definition_from_header(header: Status, body: list[str]) -> Definition:
    """Build a Definition from `151 "word" db "description"` and its body."""

    atoms, rest = split_leading_atoms(header.message, 2)
    if len(atoms) < 2:
        raise ProtocolError(
            f"Definition header needs a word and a database: {header.message!r}",
            kind=ErrorKind.MALFORMED_LINE,
            status=header,
        )
    word, db_name = atoms
    try:
        database = Database(name=db_name, description=text_atom(rest))
    except ValidationError as exc:
        raise ProtocolError(
            f"Invalid database in definition header: {header.message!r}",
            kind=ErrorKind.MALFORMED_LINE,
            status=header,
        ) from exc
    return Definition(word=word, database=database, text="\n".join(body))


def read_definitions(reader: TextIO, status: Status) -> list[Definition]:
    """Read exactly the announced number of 151 blocks."""

    expected = announced_count(status)
    definitions: list[Definition] = []
    for index in range(expected):
        header = read_status(reader)
        if header.code != DEFINITION_HEADER:
            raise ProtocolError(
                f"Expected definition {index + 1} of {expected}, got status {header.code}",
                kind=ErrorKind.DEFINITION_COUNT,
                status=header,
            )
        definitions.append(definition_from_header(header, read_block(reader)))
    return definitions
