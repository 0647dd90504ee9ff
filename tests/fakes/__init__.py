"""Shared test doubles: the memory backends plus a controllable clock."""

from __future__ import annotations

from persona.persistence.memory_backend import (
    MemoryCacheBackend,
    MemoryDocumentStore,
    MemoryEntityStore,
    MemoryNotifier,
)


class FakeClock:
    """Monotonic clock for TTL tests; advance it instead of sleeping."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


__all__ = [
    "FakeClock",
    "MemoryCacheBackend",
    "MemoryDocumentStore",
    "MemoryEntityStore",
    "MemoryNotifier",
]
