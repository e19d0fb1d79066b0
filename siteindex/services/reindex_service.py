"""
Reindex Service

Full wipe-then-rebuild of one tenant's vector namespace.

Stages, in order:
    wipe      clear every namespace the tenant may have vectors in
    read      load the tenant's content snapshot
    index     embed + upsert each item; per-item failures are recorded
    register  persist the tenant's namespaces in the registry

A failure in wipe, read or register aborts the run. Nothing is written to
the index if the wipe fails.
"""

import asyncio
from contextlib import contextmanager
from typing import Iterator

from structlog.contextvars import bound_contextvars

from siteindex.core.exceptions import (
    IndexCleanupFailedError,
    ReindexCancelledError,
    RegistryUpdateFailedError,
    SiteIndexException,
)
from siteindex.core.logging import get_logger, measure_latency, metrics_counter
from siteindex.repositories.content_reader import ContentReader
from siteindex.repositories.namespace_registry import NamespaceRegistryRepository
from siteindex.schemas.indexing import IndexRebuildStats
from siteindex.services.indexer import Indexer
from siteindex.services.record_builder import RecordBuilder
from siteindex.services.tenant_guard import TenantGuard
from siteindex.vectorstore.cleanup import IndexCleaner

logger = get_logger(__name__)


async def candidate_namespaces(
    registry: NamespaceRegistryRepository,
    tenant_id: str,
    secondary_suffix: str,
) -> list[str]:
    """
    Namespaces that may hold the tenant's vectors.

    The registry entry (if any) comes first, then the defaults derived from
    the tenant id. Duplicates are removed, order is kept.
    """
    names: list[str] = []
    entry = await registry.get(tenant_id)
    if entry is not None:
        names.extend([entry.primary_namespace, entry.secondary_namespace])
    names.extend([tenant_id, f"{tenant_id}{secondary_suffix}"])
    return list(dict.fromkeys(name for name in names if name))


@contextmanager
def pipeline_stage(name: str) -> Iterator[None]:
    """Bind `stage` for logging and tag any SiteIndexException raised inside with it."""

    with bound_contextvars(stage=name):
        try:
            yield
        except SiteIndexException as exc:
            if exc.stage is None:
                exc.stage = name
            raise


class ReindexService:
    def __init__(
        self,
        *,
        reader: ContentReader,
        registry: NamespaceRegistryRepository,
        cleaner: IndexCleaner,
        indexer: Indexer,
        guard: TenantGuard,
        secondary_suffix: str = "-qa",
    ) -> None:
        self.reader = reader
        self.registry = registry
        self.cleaner = cleaner
        self.indexer = indexer
        self.guard = guard
        self.secondary_suffix = secondary_suffix

    @measure_latency("reindex")
    async def reindex(self, tenant_id: str) -> IndexRebuildStats:
        """
        Rebuild the tenant's index from its current content.

        Raises:
            ReindexInProgressError: Another reindex holds the tenant
            IndexCleanupFailedError: Wipe stage failed
            StoreUnavailableError / ContentRecordError: Read stage failed
            ReindexCancelledError: Teardown cancelled the run
            RegistryUpdateFailedError: Register stage failed
        """
        async with self.guard.single_flight(tenant_id) as cancel_event:
            with bound_contextvars(tenant_id=tenant_id):
                try:
                    stats = await self._run(tenant_id, cancel_event)
                except SiteIndexException as exc:
                    metrics_counter("reindex_runs", outcome="failed")
                    logger.error(
                        "reindex_failed",
                        code=exc.code,
                        stage=exc.stage,
                        error=exc.message,
                    )
                    raise

                metrics_counter("reindex_runs", outcome="completed")
                logger.info(
                    "reindex_completed",
                    added=stats.added,
                    errors=stats.errors,
                )
                return stats

    async def _run(self, tenant_id: str, cancel_event: asyncio.Event) -> IndexRebuildStats:
        namespace = tenant_id
        secondary = f"{tenant_id}{self.secondary_suffix}"

        with pipeline_stage("wipe"):
            logger.info("reindex_stage_start")
            try:
                namespaces = await candidate_namespaces(
                    self.registry, tenant_id, self.secondary_suffix
                )
            except SiteIndexException as exc:
                raise IndexCleanupFailedError(
                    "Could not resolve tenant namespaces", step="resolve_namespaces"
                ) from exc
            await self.cleaner.wipe_tenant(tenant_id, namespaces)

        with pipeline_stage("read"):
            logger.info("reindex_stage_start")
            snapshot = await self.reader.read_content(tenant_id)

        with pipeline_stage("index"):
            plan = RecordBuilder(tenant_id).build_plan(snapshot)
            logger.info("reindex_stage_start", items=len(plan))
            stats = await self.indexer.index(namespace, plan, cancel_event)
            if cancel_event.is_set():
                raise ReindexCancelledError(
                    f"Reindex cancelled after {stats.attempted} of {len(plan)} items"
                )

        with pipeline_stage("register"):
            logger.info("reindex_stage_start")
            try:
                await self.registry.upsert(tenant_id, namespace, secondary)
            except SiteIndexException as exc:
                raise RegistryUpdateFailedError("Namespace registry update failed") from exc

        return stats
