"""
Indexer

Embeds and upserts a plan of index items with a bounded pool of asyncio
workers. A failing item is recorded in the stats and never stops the run.
"""

import asyncio

from siteindex.core.logging import get_logger, metrics_counter
from siteindex.embedding.protocol import EmbeddingClientProtocol
from siteindex.schemas.indexing import IndexRebuildStats
from siteindex.services.record_builder import IndexItem
from siteindex.vectorstore.protocol import VectorStoreProtocol

logger = get_logger(__name__)


class Indexer:
    def __init__(
        self,
        embedding_client: EmbeddingClientProtocol,
        store: VectorStoreProtocol,
        concurrency: int = 8,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.embedding_client = embedding_client
        self.store = store
        self.concurrency = concurrency

    async def index(
        self,
        namespace: str,
        items: list[IndexItem],
        cancel_event: asyncio.Event | None = None,
    ) -> IndexRebuildStats:
        """
        Index every item into `namespace`.

        Workers check `cancel_event` before taking the next item. Items
        already taken finish; items left in the queue count as skipped.
        """
        stats = IndexRebuildStats()
        queue: asyncio.Queue[IndexItem] = asyncio.Queue()
        for item in items:
            queue.put_nowait(item)

        workers = [
            asyncio.create_task(self._worker(namespace, queue, stats, cancel_event))
            for _ in range(min(self.concurrency, len(items)) or 1)
        ]
        await asyncio.gather(*workers)

        stats.skipped = queue.qsize()
        if stats.skipped:
            logger.warning("index_dispatch_cancelled", namespace=namespace, skipped=stats.skipped)

        logger.info(
            "index_completed",
            namespace=namespace,
            added=stats.added,
            errors=stats.errors,
            skipped=stats.skipped,
        )
        return stats

    async def _worker(
        self,
        namespace: str,
        queue: "asyncio.Queue[IndexItem]",
        stats: IndexRebuildStats,
        cancel_event: asyncio.Event | None,
    ) -> None:
        while True:
            if cancel_event is not None and cancel_event.is_set():
                return
            try:
                item = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            await self._index_one(namespace, item, stats)

    async def _index_one(self, namespace: str, item: IndexItem, stats: IndexRebuildStats) -> None:
        try:
            embedding = await self.embedding_client.embed(item.text)
            await self.store.upsert(namespace, [item.to_record(embedding)])
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "index_item_failed",
                vector_id=item.vector_id,
                kind=item.kind,
                error=str(exc),
            )
            stats.record_error(item.vector_id, str(exc))
            metrics_counter("index_items", kind=item.kind, outcome="error")
            return

        stats.record_added(item.vector_id)
        metrics_counter("index_items", kind=item.kind, outcome="added")
