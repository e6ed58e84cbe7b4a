"""
Identifier-indexed, order-preserving storage shared by every container level.

Localities, groups, individuals, loci and alleles are all addressed two ways:
by identifier and by position. OrderedRegistry keeps a single insertion-ordered
dict per level and derives positions from iteration order, so each level gets
both access paths (and consistent error reporting) without its own linear
scans.
"""

from __future__ import annotations

from typing import Generic, Hashable, Iterator, TypeVar

from popgenperm.core.errors import (
    DuplicateIdentifierError,
    IndexOutOfRangeError,
    NotFoundError,
)

__all__ = ['OrderedRegistry']

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class OrderedRegistry(Generic[K, V]):
    """
    Ordered mapping of identifier -> item with positional access.

    Args:
        what: Human-readable entity name used in duplicate errors ("group id")
        position_field: Parameter name reported on range errors ("group_position")
        not_found: NotFoundError subclass raised on identifier misses
    """

    def __init__(
        self,
        what: str,
        position_field: str,
        not_found: type[NotFoundError] = NotFoundError,
    ):
        self._items: dict[K, V] = {}
        self._what = what
        self._position_field = position_field
        self._not_found = not_found

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __iter__(self) -> Iterator[V]:
        return iter(self._items.values())

    def keys(self) -> list[K]:
        return list(self._items)

    def values(self) -> list[V]:
        return list(self._items.values())

    def items(self) -> list[tuple[K, V]]:
        return list(self._items.items())

    def check_key_free(self, key: K) -> None:
        if key in self._items:
            raise DuplicateIdentifierError(self._what, key)

    def check_position(self, position: int) -> None:
        if not 0 <= position < len(self._items):
            raise IndexOutOfRangeError(position, (0, len(self._items)), field=self._position_field)

    def add(self, key: K, item: V) -> None:
        self.check_key_free(key)
        self._items[key] = item

    def replace(self, key: K, item: V) -> None:
        """Swap the item stored under an existing key, keeping its position."""
        if key not in self._items:
            raise self._not_found(key)
        self._items[key] = item

    def position(self, key: K) -> int:
        for i, existing in enumerate(self._items):
            if existing == key:
                return i
        raise self._not_found(key)

    def get(self, key: K) -> V:
        try:
            return self._items[key]
        except KeyError:
            raise self._not_found(key) from None

    def key_at(self, position: int) -> K:
        self.check_position(position)
        return next(k for i, k in enumerate(self._items) if i == position)

    def get_at(self, position: int) -> V:
        return self._items[self.key_at(position)]

    def pop(self, key: K) -> V:
        if key not in self._items:
            raise self._not_found(key)
        return self._items.pop(key)

    def pop_at(self, position: int) -> V:
        return self._items.pop(self.key_at(position))

    def clear(self) -> None:
        self._items.clear()
