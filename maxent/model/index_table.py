#!filepath: maxent/model/index_table.py
from __future__ import annotations

import math
from typing import Generic, Hashable, Iterator, List, Optional, Sequence, TypeVar

from maxent.utils.errors import ConfigurationError, StructuralError

T = TypeVar("T", bound=Hashable)

DEFAULT_LOAD_FACTOR = 0.7


def stable_hash(key) -> int:
    """
    Process-stable 32-bit hash.

    str: s[0]*31^(n-1) + ... + s[n-1] in signed 32-bit arithmetic
    int: the value itself (truncated to 32 bits)
    other: hash()

    Python salts ``hash(str)`` per process, which would make the slot
    layout (and so structural equality) differ between runs.
    """
    if isinstance(key, str):
        h = 0
        for ch in key:
            h = (31 * h + ord(ch)) & 0xFFFFFFFF
    elif isinstance(key, int):
        h = key & 0xFFFFFFFF
    else:
        h = hash(key) & 0xFFFFFFFF

    return h - 0x100000000 if h & 0x80000000 else h


class IndexTable(Generic[T]):
    """
    IndexTable (FINAL / FROZEN)

    Open-addressing hash table mapping each entry of a key array to its
    position in that array.

    Construction:
    - capacity = ceil(n / load_factor) + 1, so at least one slot stays
      empty and every probe sequence terminates
    - home slot = (hash & 0x7FFFFFFF) % capacity, linear probing with wrap
    - keys must be unique; a duplicate raises StructuralError

    Lookup returns the original position or ``NOT_FOUND`` (-1).

    Equality is STRUCTURAL, not logical: two tables are equal only if
    their backing key arrays, value arrays and sizes are pairwise equal.
    Two tables holding the same mapping built with different load
    factors (or key orders) compare unequal.

    Immutable after construction; safe to share between threads.
    """

    NOT_FOUND = -1

    __slots__ = ("_keys", "_values", "_size")

    def __init__(self, keys: Sequence[T], load_factor: float = DEFAULT_LOAD_FACTOR):
        if not (0 < load_factor <= 1):
            raise ConfigurationError(
                f"The load factor must be larger than 0 and equal to or smaller than 1, got {load_factor}"
            )

        capacity = math.ceil(len(keys) / load_factor) + 1

        self._keys: List[Optional[T]] = [None] * capacity
        self._values: List[int] = [0] * capacity

        for i, key in enumerate(keys):
            if key is None:
                raise StructuralError("IndexTable keys must not be None")

            index = self._search(self._home(key), key, insert=True)
            if index == self.NOT_FOUND:
                raise StructuralError(f"Array must contain only unique keys! duplicate={key!r}")

            self._keys[index] = key
            self._values[index] = i

        self._size = len(keys)

    # ------------------------------------------------------------------
    # internal
    # ------------------------------------------------------------------
    def _home(self, key) -> int:
        return (stable_hash(key) & 0x7FFFFFFF) % len(self._keys)

    def _search(self, start: int, key, insert: bool) -> int:
        capacity = len(self._keys)
        index = start
        while True:
            current = self._keys[index]
            if current is None:
                return index if insert else self.NOT_FOUND
            if current == key:
                return self.NOT_FOUND if insert else index
            index = (index + 1) % capacity

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def get(self, key: T) -> int:
        if key is None:
            return self.NOT_FOUND
        index = self._search(self._home(key), key, insert=False)
        return self._values[index] if index != self.NOT_FOUND else self.NOT_FOUND

    def __getitem__(self, key: T) -> int:
        return self.get(key)

    def __contains__(self, key: T) -> bool:
        return self.get(key) != self.NOT_FOUND

    def __len__(self) -> int:
        return self._size

    @property
    def size(self) -> int:
        return self._size

    @property
    def capacity(self) -> int:
        return len(self._keys)

    def to_list(self) -> List[T]:
        """Keys ordered by their index."""
        out: List[Optional[T]] = [None] * self._size
        for key, value in zip(self._keys, self._values):
            if key is not None:
                out[value] = key
        return out  # type: ignore[return-value]

    def __iter__(self) -> Iterator[T]:
        return iter(self.to_list())

    # ------------------------------------------------------------------
    # structural equality
    # ------------------------------------------------------------------
    def __eq__(self, other) -> bool:
        if self is other:
            return True
        if not isinstance(other, IndexTable):
            return NotImplemented
        return (
            self._size == other._size
            and self._keys == other._keys
            and self._values == other._values
        )

    def __hash__(self) -> int:
        return hash((self._size, tuple(self._keys), tuple(self._values)))

    def __repr__(self) -> str:
        return f"IndexTable(size={self._size}, capacity={self.capacity})"
