"""
Namespace Registry Repository
Bookkeeping of which vector namespaces belong to a tenant
"""

from pydantic import BaseModel

from siteindex.models.base import new_id
from siteindex.repositories.query_executor import QueryExecutorProtocol


class NamespaceEntry(BaseModel):
    tenant_id: str
    primary_namespace: str
    secondary_namespace: str


class NamespaceRegistryRepository:
    """
    At most one registry row per tenant.

    `upsert` updates in place and only inserts when no row exists, inside
    one transaction, so repeated reindexes never accumulate rows.
    """

    def __init__(self, executor: QueryExecutorProtocol) -> None:
        self.executor = executor

    async def get(self, tenant_id: str) -> NamespaceEntry | None:
        rows = await self.executor.fetch_all(
            """
            SELECT tenant_id, primary_namespace, secondary_namespace
            FROM namespace_registry
            WHERE tenant_id = :tenant_id
            """,
            {"tenant_id": tenant_id},
        )
        if not rows:
            return None
        return NamespaceEntry.model_validate(rows[0])

    async def upsert(
        self,
        tenant_id: str,
        primary_namespace: str,
        secondary_namespace: str,
    ) -> NamespaceEntry:
        params = {
            "tenant_id": tenant_id,
            "primary_namespace": primary_namespace,
            "secondary_namespace": secondary_namespace,
        }
        async with self.executor.transaction() as tx:
            updated = await tx.execute(
                """
                UPDATE namespace_registry
                SET primary_namespace = :primary_namespace,
                    secondary_namespace = :secondary_namespace,
                    updated_at = CURRENT_TIMESTAMP
                WHERE tenant_id = :tenant_id
                """,
                params,
            )
            if updated == 0:
                await tx.execute(
                    """
                    INSERT INTO namespace_registry
                        (id, tenant_id, primary_namespace, secondary_namespace,
                         created_at, updated_at)
                    VALUES
                        (:id, :tenant_id, :primary_namespace, :secondary_namespace,
                         CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
                    """,
                    {"id": new_id(), **params},
                )
        return NamespaceEntry(**params)
