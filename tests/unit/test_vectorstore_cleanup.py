"""
Unit tests for InMemoryVectorStore and the index cleanup steps
"""

import pytest

from siteindex.core.exceptions import IndexCleanupFailedError, VectorStoreError
from siteindex.vectorstore.cleanup import (
    IndexCleaner,
    LegacyDefaultNamespaceStep,
    NamespaceWipeStep,
)
from siteindex.vectorstore.memory import InMemoryVectorStore
from siteindex.vectorstore.schemas import LEGACY_DEFAULT_NAMESPACE, VectorRecord, sanitize_metadata


def _record(record_id: str, tenant_id: str) -> VectorRecord:
    return VectorRecord(id=record_id, embedding=[1.0, 0.0], metadata={"websiteId": tenant_id})


class CountingStore(InMemoryVectorStore):
    def __init__(self) -> None:
        super().__init__()
        self.wiped: list[str] = []

    async def wipe_namespace(self, namespace: str) -> None:
        self.wiped.append(namespace)
        await super().wipe_namespace(namespace)


class FailingStep:
    name = "wipe_namespaces"

    async def run(self, store, tenant_id, namespaces):
        raise VectorStoreError("store down")


class RecordingStep:
    name = "legacy_default_namespace"

    def __init__(self) -> None:
        self.ran = False

    async def run(self, store, tenant_id, namespaces):
        self.ran = True
        return 0


@pytest.mark.asyncio
async def test_upsert_replaces_by_id() -> None:
    store = InMemoryVectorStore()
    await store.upsert("t1", [_record("document-1", "t1")])
    await store.upsert(
        "t1",
        [VectorRecord(id="document-1", embedding=[0.0, 1.0], metadata={"websiteId": "t1"})],
    )

    records = store.fetch_namespace("t1")
    assert list(records) == ["document-1"]
    assert records["document-1"].embedding == [0.0, 1.0]


@pytest.mark.asyncio
async def test_probe_and_wipe_namespace() -> None:
    store = InMemoryVectorStore()
    assert await store.probe_namespace("t1") is False

    await store.upsert("t1", [_record("document-1", "t1")])
    assert await store.probe_namespace("t1") is True

    await store.wipe_namespace("t1")
    await store.wipe_namespace("t1")
    assert await store.probe_namespace("t1") is False


@pytest.mark.asyncio
async def test_namespace_step_only_wipes_non_empty_namespaces() -> None:
    store = CountingStore()
    await store.upsert("t1", [_record("document-1", "t1")])

    wiped = await NamespaceWipeStep().run(store, "t1", ["t1", "t1-qa"])

    assert wiped == 1
    assert store.wiped == ["t1"]


@pytest.mark.asyncio
async def test_legacy_step_pages_until_tenant_is_gone() -> None:
    store = InMemoryVectorStore()
    await store.upsert(
        LEGACY_DEFAULT_NAMESPACE,
        [_record(f"document-{i}", "t1") for i in range(5)] + [_record("document-x", "t2")],
    )

    deleted = await LegacyDefaultNamespaceStep(page_size=2, max_pages=10).run(store, "t1", [])

    assert deleted == 5
    assert list(store.fetch_namespace(LEGACY_DEFAULT_NAMESPACE)) == ["document-x"]


@pytest.mark.asyncio
async def test_legacy_step_fails_when_page_limit_leaves_vectors() -> None:
    store = InMemoryVectorStore()
    await store.upsert(LEGACY_DEFAULT_NAMESPACE, [_record(f"review-{i}", "t1") for i in range(5)])

    with pytest.raises(VectorStoreError):
        await LegacyDefaultNamespaceStep(page_size=2, max_pages=1).run(store, "t1", [])

    assert len(store.fetch_namespace(LEGACY_DEFAULT_NAMESPACE)) == 3


@pytest.mark.asyncio
async def test_legacy_step_succeeds_when_last_page_empties_the_tenant() -> None:
    store = InMemoryVectorStore()
    await store.upsert(LEGACY_DEFAULT_NAMESPACE, [_record(f"review-{i}", "t1") for i in range(4)])

    deleted = await LegacyDefaultNamespaceStep(page_size=2, max_pages=2).run(store, "t1", [])

    assert deleted == 4
    assert store.fetch_namespace(LEGACY_DEFAULT_NAMESPACE) == {}


@pytest.mark.asyncio
async def test_cleaner_reports_unfinished_legacy_scan() -> None:
    store = InMemoryVectorStore()
    await store.upsert(LEGACY_DEFAULT_NAMESPACE, [_record(f"review-{i}", "t1") for i in range(5)])
    cleaner = IndexCleaner(store, [LegacyDefaultNamespaceStep(page_size=2, max_pages=1)])

    with pytest.raises(IndexCleanupFailedError) as exc_info:
        await cleaner.wipe_tenant("t1", ["t1"])

    assert exc_info.value.details == {
        "code": "IndexCleanupFailedError",
        "stage": "wipe",
        "step": "legacy_default_namespace",
    }


@pytest.mark.asyncio
async def test_failing_step_names_itself_and_stops_the_wipe() -> None:
    later = RecordingStep()
    cleaner = IndexCleaner(InMemoryVectorStore(), [FailingStep(), later])

    with pytest.raises(IndexCleanupFailedError) as exc_info:
        await cleaner.wipe_tenant("t1", ["t1"])

    assert exc_info.value.step == "wipe_namespaces"
    assert exc_info.value.details == {
        "code": "IndexCleanupFailedError",
        "stage": "wipe",
        "step": "wipe_namespaces",
    }
    assert later.ran is False


def test_sanitize_metadata_drops_nested_nones() -> None:
    assert sanitize_metadata({"a": None, "b": [1, None], "c": {"d": None, "e": "x"}}) == {
        "b": [1],
        "c": {"e": "x"},
    }
