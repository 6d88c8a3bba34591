"""Frontier - Object paths discovered but not yet introspected.

Different frontier implementations give different traversal orders:
- QueueFrontier (FIFO): breadth-first, shallow objects first
- StackFrontier (LIFO): depth-first, finishes one subtree before the next

The order only affects scheduling. The assembled tree is normalized after
the walk, so both frontiers produce identical results.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from typing import Protocol, runtime_checkable


@runtime_checkable
class Frontier(Protocol):
    """Protocol for frontier implementations."""

    def add(self, path: str) -> None:
        """Schedule an object path for introspection."""
        ...

    def add_many(self, paths: list[str]) -> None:
        """Schedule several sibling paths."""
        ...

    def pop(self) -> str | None:
        """Remove and return the next path, or None if empty."""
        ...

    def is_empty(self) -> bool:
        ...

    def __len__(self) -> int:
        ...


class BaseFrontier(ABC):
    """Base class for frontier implementations."""

    @abstractmethod
    def add(self, path: str) -> None:
        ...

    def add_many(self, paths: list[str]) -> None:
        for path in paths:
            self.add(path)

    @abstractmethod
    def pop(self) -> str | None:
        ...

    def pop_many(self, limit: int) -> list[str]:
        """Pop up to ``limit`` paths for one concurrent round."""
        batch: list[str] = []
        while len(batch) < limit:
            path = self.pop()
            if path is None:
                break
            batch.append(path)
        return batch

    def drain(self) -> list[str]:
        """Remove and return everything still scheduled."""
        return self.pop_many(len(self))

    def is_empty(self) -> bool:
        return len(self) == 0

    @abstractmethod
    def __len__(self) -> int:
        ...


class QueueFrontier(BaseFrontier):
    """FIFO frontier for breadth-first walks."""

    def __init__(self) -> None:
        self._queue: deque[str] = deque()

    def add(self, path: str) -> None:
        self._queue.append(path)

    def pop(self) -> str | None:
        if not self._queue:
            return None
        return self._queue.popleft()

    def __len__(self) -> int:
        return len(self._queue)


class StackFrontier(BaseFrontier):
    """LIFO frontier for depth-first walks."""

    def __init__(self) -> None:
        self._stack: list[str] = []

    def add(self, path: str) -> None:
        self._stack.append(path)

    def add_many(self, paths: list[str]) -> None:
        # Reverse so the first sibling is explored first
        for path in reversed(paths):
            self._stack.append(path)

    def pop(self) -> str | None:
        if not self._stack:
            return None
        return self._stack.pop()

    def __len__(self) -> int:
        return len(self._stack)


def create_frontier(strategy: str) -> BaseFrontier:
    """Build the frontier for a strategy name ("bfs" or "dfs")."""
    if strategy == "bfs":
        return QueueFrontier()
    if strategy == "dfs":
        return StackFrontier()
    raise ValueError(f"Unknown traversal strategy: {strategy!r} (expected 'bfs' or 'dfs')")


__all__ = [
    "Frontier",
    "BaseFrontier",
    "QueueFrontier",
    "StackFrontier",
    "create_frontier",
]
