"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Immutable value objects with validation at the edge, without coupling the
  core to socket or CLI code.
- `model_dump(mode="json")` gives the JSON exporter a stable shape for free.

Note:
- These models describe *what* the server returned, not *how* it was read.
  None of them keeps a reference to the connection that produced it.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from core.domain.errors import ErrorKind, ProtocolError


class Status(BaseModel):
    """First line of a server response: a 3-digit code and its message."""

    model_config = ConfigDict(frozen=True)

    code: int = Field(
        ...,
        ge=100,
        le=999,
        description="Numeric status code (RFC 2229 section 2.4).",
    )
    message: str = Field(
        default="",
        description="Free text following the code, quotes preserved.",
    )

    @classmethod
    def parse(cls, line: str) -> "Status":
        """Parse a raw status line (line terminator already removed)."""

        parts = line.split(None, 1)
        token = parts[0] if parts else ""
        # codes run from 100 to 999
        if len(token) != 3 or not (token.isascii() and token.isdigit()) or token[0] == "0":
            raise ProtocolError(
                f"Malformed status line: {line!r}",
                kind=ErrorKind.MALFORMED_STATUS,
            )
        message = parts[1].strip() if len(parts) > 1 else ""
        return cls(code=int(token), message=message)

    @property
    def category(self) -> int:
        """First digit: 1 = data follows, 2 = ok, 3 = continue, 4/5 = errors."""

        return self.code // 100


class _NamedEntry(BaseModel):
    """Identifier + description pair; equality by identifier only."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        min_length=1,
        description="Short identifier used in commands.",
    )
    description: str = Field(
        default="",
        description="Human readable description sent by the server.",
    )

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.name))

    def __str__(self) -> str:
        return self.name


class Database(_NamedEntry):
    """A dictionary database offered by the server (`SHOW DB`)."""


class MatchingStrategy(_NamedEntry):
    """A MATCH strategy offered by the server (`SHOW STRATEGIES`)."""


class Definition(BaseModel):
    """One definition block of a DEFINE response."""

    model_config = ConfigDict(frozen=True)

    word: str = Field(
        ...,
        description="Headword as announced by the server in the 151 header.",
    )
    database: Database = Field(
        ...,
        description="Database the definition was taken from.",
    )
    text: str = Field(
        default="",
        description="Body of the definition, one line per source line.",
    )


class LookupReport(BaseModel):
    """Aggregate produced by a lookup: definitions and/or suggestions.

    Why an aggregate:
    - Entry points (CLI tables, JSON export) render a single object instead
      of juggling loose collections.
    """

    word: str = Field(
        ...,
        description="Word that was looked up.",
    )
    database: str = Field(
        default="*",
        description="Database selector used for the lookup.",
    )
    strategy: str = Field(
        default=".",
        description="Strategy used for suggestions/matches.",
    )
    definitions: list[Definition] = Field(
        default_factory=list,
        description="Definitions returned by DEFINE.",
    )
    matches: list[str] = Field(
        default_factory=list,
        description="Words returned by MATCH, in server order.",
    )
    suggested: bool = Field(
        default=False,
        description="True when matches were fetched because DEFINE found nothing.",
    )
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the lookup finished (UTC).",
    )

    @property
    def found(self) -> bool:
        return bool(self.definitions)


ALL_DATABASES = Database(name="*", description="All databases")
FIRST_MATCH = Database(name="!", description="First database with a match")

DEFAULT_STRATEGY = MatchingStrategy(name=".", description="Server default strategy")
