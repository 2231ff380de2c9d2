"""Contract of a DICT client.

Why Protocol:
- Structural contract (duck typing) without a rigid base class.
- `DictionaryConnection` satisfies it, and so does any in-memory fake used by
  services and tests.
"""

from __future__ import annotations

from collections.abc import Set
from typing import Protocol, runtime_checkable

from core.domain.models import Database, Definition, MatchingStrategy


@runtime_checkable
class DictionaryClient(Protocol):
    """Minimal surface a lookup needs.

    Design rules:
    - Calls are synchronous; one request is in flight at a time.
    - Empty results come back as empty collections, never `None`.
    """

    def databases(self) -> dict[str, Database]:
        ...

    def strategies(self) -> Set[MatchingStrategy]:
        ...

    def match(
        self,
        word: str,
        strategy: MatchingStrategy | str = ...,
        database: Database | str = ...,
    ) -> Set[str]:
        ...

    def define(self, word: str, database: Database | str = ...) -> list[Definition]:
        ...

    def close(self) -> None:
        ...
