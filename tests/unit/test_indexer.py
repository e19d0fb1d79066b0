"""
Unit tests for the Indexer worker pool
"""

import asyncio

import pytest

from siteindex.embedding.mock import MockEmbeddingClient
from siteindex.services.indexer import Indexer
from siteindex.services.record_builder import IndexItem
from siteindex.vectorstore.memory import InMemoryVectorStore


def _items(count: int) -> list[IndexItem]:
    return [
        IndexItem(
            kind="document",
            vector_id=f"document-{i}",
            text=f"text {i}",
            metadata={"type": "document", "websiteId": "t1"},
        )
        for i in range(count)
    ]


class CancellingEmbeddingClient(MockEmbeddingClient):
    """Sets the cancel event as soon as the first item is embedded."""

    def __init__(self, event: asyncio.Event) -> None:
        super().__init__(dimension=4)
        self.event = event

    async def embed(self, text: str) -> list[float]:
        self.event.set()
        return await super().embed(text)


@pytest.mark.asyncio
async def test_index_writes_every_item() -> None:
    store = InMemoryVectorStore()
    indexer = Indexer(MockEmbeddingClient(dimension=4), store, concurrency=3)

    stats = await indexer.index("t1", _items(7))

    assert stats.added == 7
    assert stats.errors == 0
    assert stats.skipped == 0
    assert sorted(stats.details.added) == sorted(f"document-{i}" for i in range(7))
    assert len(store.fetch_namespace("t1")) == 7


@pytest.mark.asyncio
async def test_failing_item_is_recorded_and_run_continues() -> None:
    store = InMemoryVectorStore()
    indexer = Indexer(MockEmbeddingClient(dimension=4, fail_on={"text 2"}), store, concurrency=2)

    stats = await indexer.index("t1", _items(4))

    assert stats.added == 3
    assert stats.errors == 1
    assert stats.details.errors[0].id == "document-2"
    assert "document-2" not in store.fetch_namespace("t1")


@pytest.mark.asyncio
async def test_empty_plan() -> None:
    stats = await Indexer(MockEmbeddingClient(dimension=4), InMemoryVectorStore()).index("t1", [])

    assert stats.attempted == 0
    assert stats.skipped == 0


@pytest.mark.asyncio
async def test_cancel_stops_dispatch_and_counts_skipped() -> None:
    event = asyncio.Event()
    store = InMemoryVectorStore()
    indexer = Indexer(CancellingEmbeddingClient(event), store, concurrency=1)

    stats = await indexer.index("t1", _items(5), cancel_event=event)

    assert stats.added == 1
    assert stats.skipped == 4
    assert stats.attempted + stats.skipped == 5


def test_concurrency_must_be_positive() -> None:
    with pytest.raises(ValueError):
        Indexer(MockEmbeddingClient(dimension=4), InMemoryVectorStore(), concurrency=0)
