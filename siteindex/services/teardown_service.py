"""
Teardown Service

Permanently removes a tenant: vectors first, then relational rows in one
transaction. If the cascade fails the vectors are already gone and the
rows remain; running teardown again completes the removal.
"""

from structlog.contextvars import bound_contextvars

from siteindex.core.exceptions import (
    DatabaseError,
    IndexCleanupFailedError,
    RecordNotFoundError,
    TeardownFailedError,
)
from siteindex.core.logging import get_logger, measure_latency, metrics_counter
from siteindex.repositories.namespace_registry import NamespaceRegistryRepository
from siteindex.repositories.query_executor import QueryExecutorProtocol
from siteindex.services.reindex_service import candidate_namespaces
from siteindex.services.tenant_guard import TenantGuard
from siteindex.vectorstore.cleanup import IndexCleaner

logger = get_logger(__name__)


# Children before parents; every statement is scoped by the tenant id only
CASCADE_DELETE_STATEMENTS: tuple[tuple[str, str], ...] = (
    (
        "document_comments",
        "DELETE FROM document_comments WHERE document_id IN "
        "(SELECT id FROM documents WHERE tenant_id = :tenant_id)",
    ),
    (
        "commerce_reviews",
        "DELETE FROM commerce_reviews WHERE commerce_item_id IN "
        "(SELECT id FROM commerce_items WHERE tenant_id = :tenant_id)",
    ),
    (
        "commerce_item_categories",
        "DELETE FROM commerce_item_categories WHERE commerce_item_id IN "
        "(SELECT id FROM commerce_items WHERE tenant_id = :tenant_id)",
    ),
    ("commerce_categories", "DELETE FROM commerce_categories WHERE tenant_id = :tenant_id"),
    ("commerce_items", "DELETE FROM commerce_items WHERE tenant_id = :tenant_id"),
    ("collection_items", "DELETE FROM collection_items WHERE tenant_id = :tenant_id"),
    ("documents", "DELETE FROM documents WHERE tenant_id = :tenant_id"),
    ("authors", "DELETE FROM authors WHERE tenant_id = :tenant_id"),
    ("access_keys", "DELETE FROM access_keys WHERE tenant_id = :tenant_id"),
    ("namespace_registry", "DELETE FROM namespace_registry WHERE tenant_id = :tenant_id"),
    ("tenants", "DELETE FROM tenants WHERE id = :tenant_id"),
)


class TeardownService:
    def __init__(
        self,
        *,
        executor: QueryExecutorProtocol,
        registry: NamespaceRegistryRepository,
        cleaner: IndexCleaner,
        guard: TenantGuard,
        secondary_suffix: str = "-qa",
    ) -> None:
        self.executor = executor
        self.registry = registry
        self.cleaner = cleaner
        self.guard = guard
        self.secondary_suffix = secondary_suffix

    @measure_latency("teardown")
    async def teardown(self, tenant_id: str) -> None:
        """
        Remove every vector and row owned by the tenant.

        A running reindex of the same tenant is cancelled and awaited first.

        Raises:
            RecordNotFoundError: Unknown tenant
            TeardownFailedError: A step failed (`step` names it: lookup_tenant,
                wipe_vectors or cascade_delete_content)
        """
        with bound_contextvars(tenant_id=tenant_id):
            if self.guard.request_cancel(tenant_id):
                logger.info("teardown_waiting_for_reindex")

            async with self.guard.exclusive(tenant_id):
                await self._ensure_tenant_exists(tenant_id)
                await self._wipe_vectors(tenant_id)
                deleted = await self._cascade_delete(tenant_id)

            metrics_counter("teardown_runs", outcome="completed")
            logger.info("teardown_completed", rows_deleted=deleted)

    async def _ensure_tenant_exists(self, tenant_id: str) -> None:
        try:
            rows = await self.executor.fetch_all(
                "SELECT id FROM tenants WHERE id = :tenant_id", {"tenant_id": tenant_id}
            )
        except DatabaseError as exc:
            metrics_counter("teardown_runs", outcome="failed")
            logger.error("teardown_step_failed", step="lookup_tenant", error=str(exc))
            raise TeardownFailedError("Failed to look up tenant", step="lookup_tenant") from exc
        if not rows:
            raise RecordNotFoundError(f"Tenant {tenant_id} not found")

    async def _wipe_vectors(self, tenant_id: str) -> None:
        with bound_contextvars(step="wipe_vectors"):
            try:
                namespaces = await candidate_namespaces(
                    self.registry, tenant_id, self.secondary_suffix
                )
                await self.cleaner.wipe_tenant(tenant_id, namespaces)
            except (IndexCleanupFailedError, DatabaseError) as exc:
                metrics_counter("teardown_runs", outcome="failed")
                logger.error("teardown_step_failed", error=str(exc))
                raise TeardownFailedError(
                    "Failed to wipe tenant vectors", step="wipe_vectors"
                ) from exc

    async def _cascade_delete(self, tenant_id: str) -> int:
        params = {"tenant_id": tenant_id}
        deleted = 0
        with bound_contextvars(step="cascade_delete_content"):
            try:
                async with self.executor.transaction() as tx:
                    for table, sql in CASCADE_DELETE_STATEMENTS:
                        count = await tx.execute(sql, params)
                        deleted += max(count, 0)
                        logger.debug("teardown_rows_deleted", table=table, count=count)
            except DatabaseError as exc:
                metrics_counter("teardown_runs", outcome="failed")
                logger.error("teardown_step_failed", error=str(exc))
                raise TeardownFailedError(
                    "Failed to delete tenant content", step="cascade_delete_content"
                ) from exc
        return deleted
