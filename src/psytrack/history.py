"""Fixed-capacity FIFO history shared by the alert engine and time capsule."""

from __future__ import annotations

from typing import Generic, Iterable, Iterator, TypeVar

from psytrack.config import ConfigurationError

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """Append-only ring buffer that evicts the oldest item when full.

    Slots are addressed with index arithmetic over a preallocated list, so
    both ``append`` and eviction are O(1).  Iteration and indexing are
    oldest-first; negative indices count back from the newest item.
    """

    def __init__(self, capacity: int, items: Iterable[T] | None = None) -> None:
        if capacity < 1:
            raise ConfigurationError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._slots: list[T | None] = [None] * capacity
        self._head = 0  # index of the oldest item
        self._size = 0
        for item in items or ():
            self.append(item)

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, item: T) -> T | None:
        """Add *item* as the newest element; return the evicted item, if any."""
        evicted: T | None = None
        if self._size == self._capacity:
            evicted = self._slots[self._head]
            self._slots[self._head] = item
            self._head = (self._head + 1) % self._capacity
        else:
            self._slots[(self._head + self._size) % self._capacity] = item
            self._size += 1
        return evicted

    def clear(self) -> None:
        self._slots = [None] * self._capacity
        self._head = 0
        self._size = 0

    def newest(self) -> T | None:
        return self[-1] if self._size else None

    def tail(self, n: int) -> list[T]:
        """Return the *n* newest items, oldest first."""
        n = max(0, min(n, self._size))
        return [self[i] for i in range(self._size - n, self._size)]

    def to_list(self) -> list[T]:
        return list(self)

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0

    def __getitem__(self, index: int) -> T:
        if index < 0:
            index += self._size
        if not 0 <= index < self._size:
            raise IndexError("ring buffer index out of range")
        return self._slots[(self._head + index) % self._capacity]  # type: ignore[return-value]

    def __iter__(self) -> Iterator[T]:
        for i in range(self._size):
            yield self._slots[(self._head + i) % self._capacity]  # type: ignore[misc]

    def __repr__(self) -> str:
        return f"RingBuffer(capacity={self._capacity}, size={self._size})"
