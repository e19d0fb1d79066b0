"""
In-memory VectorStore Implementation
For development and testing.
"""

import asyncio

from siteindex.core.logging import get_logger
from siteindex.vectorstore.schemas import LEGACY_DEFAULT_NAMESPACE, VectorRecord

logger = get_logger(__name__)


class InMemoryVectorStore:
    """
    VectorStore keeping namespaces in a dict of dicts.

    Mutations are guarded by one lock so concurrent upserts from the
    indexer's worker pool interleave cleanly.
    """

    def __init__(self) -> None:
        self._namespaces: dict[str, dict[str, VectorRecord]] = {}
        self._lock = asyncio.Lock()
        logger.info("memory_vectorstore_initialized")

    async def upsert(self, namespace: str, records: list[VectorRecord]) -> None:
        async with self._lock:
            bucket = self._namespaces.setdefault(namespace, {})
            for record in records:
                bucket[record.id] = record.model_copy(deep=True)
        logger.debug("memory_vectorstore_upserted", namespace=namespace, count=len(records))

    async def wipe_namespace(self, namespace: str) -> None:
        async with self._lock:
            removed = len(self._namespaces.pop(namespace, {}))
        logger.debug("memory_vectorstore_wiped", namespace=namespace, removed=removed)

    async def probe_namespace(self, namespace: str) -> bool:
        return bool(self._namespaces.get(namespace))

    async def scan_legacy_default(self, tenant_id: str, limit: int) -> list[str]:
        bucket = self._namespaces.get(LEGACY_DEFAULT_NAMESPACE, {})
        matches = [
            record_id
            for record_id, record in bucket.items()
            if record.metadata.get("websiteId") == tenant_id
        ]
        return matches[:limit]

    async def delete_by_ids(self, ids: list[str]) -> None:
        async with self._lock:
            bucket = self._namespaces.get(LEGACY_DEFAULT_NAMESPACE, {})
            for record_id in ids:
                bucket.pop(record_id, None)

    # Inspection helpers -----------------------------------------------

    def fetch_namespace(self, namespace: str) -> dict[str, VectorRecord]:
        return dict(self._namespaces.get(namespace, {}))

    def namespaces(self) -> list[str]:
        return [name for name, bucket in self._namespaces.items() if bucket]
