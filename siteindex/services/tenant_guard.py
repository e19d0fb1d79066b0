"""
Per-tenant single-flight guard

Serializes reindex and teardown for the same tenant within this process.
Different tenants never contend. Deployments running several worker
processes must route a tenant's operations to one worker.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from siteindex.core.exceptions import ReindexInProgressError
from siteindex.core.logging import get_logger

logger = get_logger(__name__)


class TenantGuard:
    """
    One asyncio.Lock per tenant with an operation holding or awaiting it.

    A lock entry is dropped once its last holder or waiter leaves, so the
    guard only tracks tenants that are currently active.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}
        self._cancel_events: dict[str, asyncio.Event] = {}

    def is_busy(self, tenant_id: str) -> bool:
        lock = self._locks.get(tenant_id)
        return lock is not None and lock.locked()

    def active_tenants(self) -> list[str]:
        return list(self._locks)

    @asynccontextmanager
    async def _hold(self, tenant_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(tenant_id, asyncio.Lock())
        self._users[tenant_id] = self._users.get(tenant_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[tenant_id] -= 1
            if self._users[tenant_id] == 0:
                del self._users[tenant_id]
                del self._locks[tenant_id]

    @asynccontextmanager
    async def single_flight(self, tenant_id: str) -> AsyncIterator[asyncio.Event]:
        """
        Hold the tenant exclusively or fail fast.

        Yields the cancel event for this run.

        Raises:
            ReindexInProgressError: If the tenant is already held
        """
        if self.is_busy(tenant_id):
            raise ReindexInProgressError(f"Reindex already running for tenant {tenant_id}")

        async with self._hold(tenant_id):
            event = asyncio.Event()
            self._cancel_events[tenant_id] = event
            try:
                yield event
            finally:
                self._cancel_events.pop(tenant_id, None)

    @asynccontextmanager
    async def exclusive(self, tenant_id: str) -> AsyncIterator[None]:
        """Hold the tenant exclusively, waiting for any running operation."""

        async with self._hold(tenant_id):
            yield

    def request_cancel(self, tenant_id: str) -> bool:
        """Signal the running reindex of a tenant to stop dispatching. Returns True if one was running."""

        event = self._cancel_events.get(tenant_id)
        if event is None:
            return False
        event.set()
        logger.info("reindex_cancel_requested", tenant_id=tenant_id)
        return True
