"""Insertion-ordered set used for strategy and match listings.

Servers return strategies in a meaningful order and matches in ranking
order, so a plain `set` would lose information while a `list` would allow
duplicates.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator, Set
from typing import Generic, TypeVar

T = TypeVar("T", bound=Hashable)


class OrderedSet(Set, Generic[T]):
    """Read-only set that iterates in insertion order.

    Compares equal to any other `Set` with the same members, so
    `OrderedSet(["cat"]) == {"cat"}` holds.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._items: dict[T, None] = dict.fromkeys(items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._items)!r})"
