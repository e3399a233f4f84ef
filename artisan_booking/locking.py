"""
Per-provider booking locks.

Checking availability and persisting a booking are two separate store
calls, so two concurrent requests for the same artisan could both see a
free window and both write. Every "check availability -> persist" sequence
runs while holding its artisan's lock, which serialises writers per
provider and leaves different providers fully concurrent.

The locks live in process memory. Deployments running several worker
processes against one store also need a store-level exclusion constraint.
"""

import asyncio
import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import UUID

logger = logging.getLogger(__name__)


class ProviderLocks:
    """Registry of one ``asyncio.Lock`` per provider id.

    Locks are not reentrant: never acquire a provider's lock while
    already holding it.
    """

    def __init__(self) -> None:
        self._locks: defaultdict[UUID, asyncio.Lock] = defaultdict(asyncio.Lock)

    @asynccontextmanager
    async def hold(self, provider_id: UUID) -> AsyncIterator[None]:
        lock = self._locks[provider_id]
        if lock.locked():
            logger.debug("Waiting for booking lock on provider %s", provider_id)
        async with lock:
            yield

    def is_held(self, provider_id: UUID) -> bool:
        lock = self._locks.get(provider_id)
        return lock is not None and lock.locked()
