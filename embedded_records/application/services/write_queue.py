"""Per-container write serialization."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class ContainerWriteQueue:
    """Serializes writes per container id when enabled.

    Disabled, it is a pass-through: writes to sibling records that interleave
    between the pre-write reload and the store keep last-write-wins semantics.
    """

    def __init__(self, enabled: bool = False):
        self.enabled = enabled
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, container_id: str) -> asyncio.Lock:
        lock = self._locks.get(container_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[container_id] = lock
        return lock

    @asynccontextmanager
    async def slot(self, container_id: str) -> AsyncIterator[None]:
        if not self.enabled:
            yield
            return
        async with self._lock_for(container_id):
            yield

    def pending(self, container_id: str) -> bool:
        lock = self._locks.get(container_id)
        return bool(lock and lock.locked())
