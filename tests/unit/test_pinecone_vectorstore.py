"""
PineconeVectorStore against a fake index handle
"""

from types import SimpleNamespace

import pytest

from siteindex.core.exceptions import VectorStoreError, VectorUpsertError
from siteindex.vectorstore.pinecone import PineconeVectorStore
from siteindex.vectorstore.schemas import VectorRecord


class FakeIndex:
    def __init__(self, matches: list[str] | None = None, fail: bool = False) -> None:
        self.matches = matches or []
        self.fail = fail
        self.calls: list[tuple[str, dict]] = []

    def upsert(self, **kwargs):
        self.calls.append(("upsert", kwargs))
        if self.fail:
            raise RuntimeError("503 from pinecone")

    def delete(self, **kwargs):
        self.calls.append(("delete", kwargs))
        if self.fail:
            raise RuntimeError("503 from pinecone")

    def query(self, **kwargs):
        self.calls.append(("query", kwargs))
        if self.fail:
            raise RuntimeError("503 from pinecone")
        return SimpleNamespace(matches=[SimpleNamespace(id=m) for m in self.matches])


def _store(index: FakeIndex) -> PineconeVectorStore:
    store = PineconeVectorStore(api_key="test-key", index_name="widget", dimension=4)
    store._index = index
    return store


@pytest.mark.asyncio
async def test_upsert_sends_namespaced_vectors() -> None:
    index = FakeIndex()
    record = VectorRecord(id="document-1", embedding=[0.1] * 4, metadata={"websiteId": "t1"})

    await _store(index).upsert("t1", [record])

    assert index.calls == [
        (
            "upsert",
            {
                "vectors": [
                    {"id": "document-1", "values": [0.1] * 4, "metadata": {"websiteId": "t1"}}
                ],
                "namespace": "t1",
            },
        )
    ]


@pytest.mark.asyncio
async def test_probe_uses_non_zero_vector() -> None:
    index = FakeIndex(matches=["document-1"])

    assert await _store(index).probe_namespace("t1") is True
    assert index.calls[0][1]["vector"] == [1.0, 0.0, 0.0, 0.0]
    assert index.calls[0][1]["top_k"] == 1


@pytest.mark.asyncio
async def test_legacy_scan_filters_by_tenant() -> None:
    index = FakeIndex(matches=["review-1", "review-2"])

    ids = await _store(index).scan_legacy_default("t1", limit=100)

    assert ids == ["review-1", "review-2"]
    query = index.calls[0][1]
    assert query["namespace"] == ""
    assert query["filter"] == {"websiteId": {"$eq": "t1"}}
    assert query["top_k"] == 100


@pytest.mark.asyncio
async def test_wipe_and_delete_calls() -> None:
    index = FakeIndex()
    store = _store(index)

    await store.wipe_namespace("t1-qa")
    await store.delete_by_ids(["a", "b"])
    await store.delete_by_ids([])

    assert index.calls == [
        ("delete", {"delete_all": True, "namespace": "t1-qa"}),
        ("delete", {"ids": ["a", "b"], "namespace": ""}),
    ]


@pytest.mark.asyncio
async def test_failures_become_vectorstore_errors() -> None:
    store = _store(FakeIndex(fail=True))
    record = VectorRecord(id="document-1", embedding=[0.1] * 4)

    with pytest.raises(VectorUpsertError):
        await store.upsert("t1", [record])
    with pytest.raises(VectorStoreError):
        await store.wipe_namespace("t1")


def test_requires_credentials() -> None:
    with pytest.raises(ValueError):
        PineconeVectorStore(api_key="", index_name="widget", dimension=4)
