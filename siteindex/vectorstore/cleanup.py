"""
Index cleanup steps

Wiping a tenant's vectors is an ordered list of steps. Each step is
independent and idempotent; the first failing step aborts the wipe with
IndexCleanupFailedError naming that step.
"""

from typing import Protocol

from siteindex.core.exceptions import IndexCleanupFailedError, VectorStoreError
from siteindex.core.logging import get_logger
from siteindex.vectorstore.protocol import VectorStoreProtocol

logger = get_logger(__name__)


class CleanupStep(Protocol):
    name: str

    async def run(self, store: VectorStoreProtocol, tenant_id: str, namespaces: list[str]) -> int:
        """Remove the tenant's vectors this step is responsible for; return count hint."""
        ...


class NamespaceWipeStep:
    """Probe each candidate namespace and wipe the non-empty ones."""

    name = "wipe_namespaces"

    async def run(self, store: VectorStoreProtocol, tenant_id: str, namespaces: list[str]) -> int:
        wiped = 0
        for namespace in namespaces:
            if not await store.probe_namespace(namespace):
                logger.debug("namespace_already_empty", tenant_id=tenant_id, namespace=namespace)
                continue
            await store.wipe_namespace(namespace)
            wiped += 1
            logger.info("namespace_wiped", tenant_id=tenant_id, namespace=namespace)
        return wiped


class LegacyDefaultNamespaceStep:
    """
    Remove the tenant's vectors from the shared default namespace.

    Older deployments wrote every tenant into "" tagged with `websiteId`.
    Scans repeat until a page comes back empty, bounded by `max_pages`.
    If the bound is reached and the tenant still has vectors there, the
    step fails so the tenant is never treated as clean.
    """

    name = "legacy_default_namespace"

    def __init__(self, page_size: int = 100, max_pages: int = 50) -> None:
        self.page_size = page_size
        self.max_pages = max_pages

    async def run(self, store: VectorStoreProtocol, tenant_id: str, namespaces: list[str]) -> int:
        deleted = 0
        for _ in range(self.max_pages):
            ids = await store.scan_legacy_default(tenant_id, self.page_size)
            if not ids:
                break
            await store.delete_by_ids(ids)
            deleted += len(ids)
        else:
            if await store.scan_legacy_default(tenant_id, 1):
                logger.error(
                    "legacy_scan_page_limit_reached",
                    tenant_id=tenant_id,
                    max_pages=self.max_pages,
                    deleted=deleted,
                )
                raise VectorStoreError(
                    f"Legacy namespace still holds vectors for {tenant_id} "
                    f"after {self.max_pages} pages"
                )

        if deleted:
            logger.info("legacy_vectors_deleted", tenant_id=tenant_id, deleted=deleted)
        return deleted


class IndexCleaner:
    def __init__(self, store: VectorStoreProtocol, steps: list[CleanupStep]) -> None:
        self.store = store
        self.steps = steps

    async def wipe_tenant(self, tenant_id: str, namespaces: list[str]) -> None:
        """
        Run every cleanup step in order.

        Raises:
            IndexCleanupFailedError: On the first failing step
        """
        for step in self.steps:
            try:
                await step.run(self.store, tenant_id, namespaces)
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "index_cleanup_step_failed",
                    tenant_id=tenant_id,
                    step=step.name,
                    error=str(exc),
                )
                raise IndexCleanupFailedError(
                    f"Index cleanup failed at {step.name}", step=step.name
                ) from exc
