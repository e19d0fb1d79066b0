"""
Pinecone VectorStore implementation.

The Pinecone SDK is synchronous; every call runs in the default threadpool
executor so the event loop never blocks on network I/O.
"""

from __future__ import annotations

import asyncio
from functools import partial
from typing import Any, Callable

from pinecone import Pinecone

from siteindex.core.exceptions import VectorStoreError, VectorUpsertError
from siteindex.core.logging import get_logger
from siteindex.vectorstore.schemas import LEGACY_DEFAULT_NAMESPACE, VectorRecord

logger = get_logger(__name__)


class PineconeVectorStore:
    """
    Namespaced Pinecone index.

    The index handle is created lazily on first use.
    """

    def __init__(self, api_key: str, index_name: str, dimension: int) -> None:
        if not api_key:
            raise ValueError("PINECONE_API_KEY is required.")
        if not index_name:
            raise ValueError("Pinecone index_name is required.")

        self.api_key = api_key
        self.index_name = index_name
        self.dimension = dimension
        self._index: Any = None
        # Top-1 probes only need a valid non-zero vector
        self._probe_vector = [1.0] + [0.0] * (dimension - 1)
        logger.info("pinecone_vectorstore_initialized", index_name=index_name)

    async def upsert(self, namespace: str, records: list[VectorRecord]) -> None:
        if not records:
            return
        vectors = [
            {"id": record.id, "values": record.embedding, "metadata": record.metadata}
            for record in records
        ]
        try:
            await self._run(self._get_index().upsert, vectors=vectors, namespace=namespace)
        except Exception as exc:  # noqa: BLE001
            logger.error("pinecone_upsert_failed", namespace=namespace, error=str(exc))
            raise VectorUpsertError(f"Failed to upsert {len(records)} vectors") from exc

    async def wipe_namespace(self, namespace: str) -> None:
        await self._call(
            "wipe_namespace",
            "delete",
            delete_all=True,
            namespace=namespace,
        )
        logger.info("pinecone_namespace_wiped", namespace=namespace)

    async def probe_namespace(self, namespace: str) -> bool:
        response = await self._call(
            "probe_namespace",
            "query",
            vector=self._probe_vector,
            top_k=1,
            namespace=namespace,
            include_metadata=False,
        )
        return bool(response.matches)

    async def scan_legacy_default(self, tenant_id: str, limit: int) -> list[str]:
        response = await self._call(
            "scan_legacy_default",
            "query",
            vector=self._probe_vector,
            top_k=limit,
            namespace=LEGACY_DEFAULT_NAMESPACE,
            filter={"websiteId": {"$eq": tenant_id}},
            include_metadata=False,
        )
        return [match.id for match in response.matches]

    async def delete_by_ids(self, ids: list[str]) -> None:
        if not ids:
            return
        await self._call(
            "delete_by_ids",
            "delete",
            ids=ids,
            namespace=LEGACY_DEFAULT_NAMESPACE,
        )

    # Internal helpers -------------------------------------------------

    def _get_index(self) -> Any:
        if self._index is None:
            self._index = Pinecone(api_key=self.api_key).Index(self.index_name)
        return self._index

    async def _call(self, operation: str, method: str, **kwargs: Any) -> Any:
        try:
            return await self._run(getattr(self._get_index(), method), **kwargs)
        except Exception as exc:  # noqa: BLE001
            logger.error("pinecone_call_failed", operation=operation, error=str(exc))
            raise VectorStoreError(f"Pinecone {operation} failed") from exc

    @staticmethod
    async def _run(fn: Callable[..., Any], **kwargs: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(fn, **kwargs))
