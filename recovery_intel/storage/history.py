"""
Bounded per-subject history.

Each key owns a fixed-size FIFO window (``collections.deque(maxlen=N)``).
Appends for the same key are serialized with a per-key ``asyncio.Lock`` so
that ordering and eviction stay consistent under concurrent writers; reads
return an immutable snapshot and never block. Different keys share no
mutable state.
"""

import asyncio
import logging
from collections import deque
from typing import Generic, Hashable, Iterable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BoundedHistoryStore(Generic[T]):
    """
    In-memory ring buffer per key with FIFO eviction.

    A durable store can be swapped in by implementing the same
    append/extend/snapshot contract.
    """

    def __init__(self, window: int):
        """
        Args:
            window: Maximum number of items kept per key
        """
        if window < 1:
            raise ValueError("History window must be at least 1")
        self.window = window
        self._histories: dict[Hashable, deque] = {}
        self._locks: dict[Hashable, asyncio.Lock] = {}

    def _lock_for(self, key: Hashable) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks.setdefault(key, asyncio.Lock())
        return lock

    def _history_for(self, key: Hashable) -> deque:
        history = self._histories.get(key)
        if history is None:
            history = self._histories.setdefault(key, deque(maxlen=self.window))
        return history

    async def append(self, key: Hashable, item: T) -> None:
        """Append one item, evicting the oldest once the window is full."""
        async with self._lock_for(key):
            self._push(key, (item,))

    async def extend(self, key: Hashable, items: Sequence[T]) -> None:
        """Append several items as one serialized write."""
        if not items:
            return
        async with self._lock_for(key):
            self._push(key, items)

    def _push(self, key: Hashable, items: Iterable[T]) -> None:
        history = self._history_for(key)
        for item in items:
            if len(history) == history.maxlen:
                logger.debug(f"Evicting oldest history entry for {key}")
            history.append(item)

    def snapshot(self, key: Hashable) -> tuple[T, ...]:
        """Return the key's history, oldest first."""
        history = self._histories.get(key)
        return tuple(history) if history else ()

    def latest(self, key: Hashable, count: int) -> tuple[T, ...]:
        """Return up to the ``count`` most recent items, oldest first."""
        if count <= 0:
            return ()
        return self.snapshot(key)[-count:]

    def __len__(self) -> int:
        return len(self._histories)

    def size(self, key: Hashable) -> int:
        history = self._histories.get(key)
        return len(history) if history else 0

    def keys(self) -> list[Hashable]:
        return list(self._histories)

    def clear(self, key: Hashable) -> None:
        self._histories.pop(key, None)
