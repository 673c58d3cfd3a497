"""
Per-document ingestion locks.

Keeps at most one ingestion run in flight per reference document within
this process. A second request for a held key fails fast with a 409 instead
of queueing behind the first run.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from .errors import IngestionInProgressError

logger = logging.getLogger(__name__)


class IngestionLockRegistry:
    """Registry of asyncio locks keyed by document id."""

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    def is_held(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """
        Hold the lock for ``key`` for the duration of the block.

        Raises:
            IngestionInProgressError: If another run already holds ``key``
        """
        lock = self._locks.setdefault(key, asyncio.Lock())
        if lock.locked():
            logger.warning(f"Ingestion already running for {key}, rejecting")
            raise IngestionInProgressError(key)

        await lock.acquire()
        logger.debug(f"Acquired ingestion lock for {key}")
        try:
            yield
        finally:
            lock.release()
            # Drop idle entries so the registry doesn't grow per document forever
            if not lock.locked() and self._locks.get(key) is lock:
                del self._locks[key]
            logger.debug(f"Released ingestion lock for {key}")


# Process-wide registry used by the API
ingestion_locks = IngestionLockRegistry()
