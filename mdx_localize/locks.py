"""Keyed mutual exclusion for coroutines sharing one event loop."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Dict, List, TypeVar

T = TypeVar("T")


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class KeyedLock:
    """Serialize work per key while letting different keys run concurrently.

    Per-key locks are created on first use and dropped once the last holder or
    waiter leaves, so the mapping only ever contains keys that are in use.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, _Entry] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = _Entry()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0 and self._entries.get(key) is entry:
                del self._entries[key]

    async def with_lock(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Await ``fn()`` while holding the lock for ``key``."""
        async with self.hold(key):
            return await fn()

    def active_keys(self) -> List[str]:
        return sorted(self._entries)
