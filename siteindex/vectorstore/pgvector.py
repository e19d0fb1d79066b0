"""
PGVector VectorStore implementation.

Uses PostgreSQL + pgvector extension to persist tenant embeddings.
All namespaces share one table keyed by (namespace, id); the legacy
default namespace is the empty string.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any

from pgvector.sqlalchemy import Vector
from sqlalchemy import Integer, String, bindparam, text as sa_text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from siteindex.core.exceptions import VectorStoreError, VectorUpsertError
from siteindex.core.logging import get_logger
from siteindex.vectorstore.schemas import LEGACY_DEFAULT_NAMESPACE, VectorRecord

logger = get_logger(__name__)


class PGVectorStore:
    """PostgreSQL + pgvector-backed VectorStore.

    The table is created lazily on first use. Metadata is stored as JSONB
    so the legacy scan can filter on `metadata->>'websiteId'`.
    """

    def __init__(self, engine: AsyncEngine, table_name: str, dimension: int) -> None:
        if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", table_name):
            raise ValueError(f"Unsafe table name: {table_name}")

        self.engine = engine
        self.table_name = table_name
        self.dimension = dimension
        self._init_lock = asyncio.Lock()
        self._initialized = False

    async def upsert(self, namespace: str, records: list[VectorRecord]) -> None:
        if not records:
            return
        await self._ensure_initialized()

        upsert_sql = f"""
            INSERT INTO {self.table_name} (namespace, id, embedding, metadata, updated_at)
            VALUES (:namespace, :id, :embedding, :metadata, NOW())
            ON CONFLICT (namespace, id) DO UPDATE SET
                embedding = EXCLUDED.embedding,
                metadata = EXCLUDED.metadata,
                updated_at = NOW()
        """
        stmt = sa_text(upsert_sql).bindparams(
            bindparam("namespace", type_=String()),
            bindparam("id", type_=String()),
            bindparam("embedding", type_=Vector(self.dimension)),
            bindparam("metadata", type_=JSONB),
        )
        params = [
            {
                "namespace": namespace,
                "id": record.id,
                "embedding": record.embedding,
                "metadata": record.metadata,
            }
            for record in records
        ]

        try:
            async with self.engine.begin() as conn:
                await conn.execute(stmt, params)
        except SQLAlchemyError as exc:
            logger.error("pgvector_upsert_failed", namespace=namespace, error=str(exc))
            raise VectorUpsertError(f"Failed to upsert {len(records)} vectors") from exc

        logger.debug("pgvector_upserted", namespace=namespace, count=len(records))

    async def wipe_namespace(self, namespace: str) -> None:
        await self._ensure_initialized()
        deleted = await self._write(
            f"DELETE FROM {self.table_name} WHERE namespace = :namespace",
            {"namespace": namespace},
            operation="wipe_namespace",
        )
        logger.info("pgvector_namespace_wiped", namespace=namespace, deleted=deleted)

    async def probe_namespace(self, namespace: str) -> bool:
        await self._ensure_initialized()
        rows = await self._read(
            f"SELECT id FROM {self.table_name} WHERE namespace = :namespace LIMIT 1",
            {"namespace": namespace},
            operation="probe_namespace",
        )
        return bool(rows)

    async def scan_legacy_default(self, tenant_id: str, limit: int) -> list[str]:
        await self._ensure_initialized()
        stmt = sa_text(
            f"""
            SELECT id FROM {self.table_name}
            WHERE namespace = :namespace AND metadata->>'websiteId' = :tenant_id
            ORDER BY id
            LIMIT :limit
            """
        ).bindparams(bindparam("limit", type_=Integer()))
        rows = await self._read(
            stmt,
            {"namespace": LEGACY_DEFAULT_NAMESPACE, "tenant_id": tenant_id, "limit": limit},
            operation="scan_legacy_default",
        )
        return [row.id for row in rows]

    async def delete_by_ids(self, ids: list[str]) -> None:
        if not ids:
            return
        await self._ensure_initialized()
        stmt = sa_text(
            f"DELETE FROM {self.table_name} WHERE namespace = :namespace AND id IN :ids"
        ).bindparams(bindparam("ids", expanding=True))
        await self._write(
            stmt,
            {"namespace": LEGACY_DEFAULT_NAMESPACE, "ids": ids},
            operation="delete_by_ids",
        )

    # Internal helpers -------------------------------------------------

    async def _read(self, sql: Any, params: dict[str, Any], *, operation: str) -> list[Any]:
        stmt = sa_text(sql) if isinstance(sql, str) else sql
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(stmt, params)
                return list(result.fetchall())
        except SQLAlchemyError as exc:
            logger.error("pgvector_query_failed", operation=operation, error=str(exc))
            raise VectorStoreError(f"pgvector {operation} failed") from exc

    async def _write(self, sql: Any, params: dict[str, Any], *, operation: str) -> int:
        stmt = sa_text(sql) if isinstance(sql, str) else sql
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(stmt, params)
                return result.rowcount
        except SQLAlchemyError as exc:
            logger.error("pgvector_query_failed", operation=operation, error=str(exc))
            raise VectorStoreError(f"pgvector {operation} failed") from exc

    async def _ensure_initialized(self) -> None:
        if self._initialized:
            return
        async with self._init_lock:
            if self._initialized:
                return

            await self._create_extension_and_table()
            self._initialized = True

    async def _create_extension_and_table(self) -> None:
        create_table_sql = f"""
            CREATE TABLE IF NOT EXISTS {self.table_name} (
                namespace TEXT NOT NULL,
                id TEXT NOT NULL,
                embedding VECTOR({self.dimension}) NOT NULL,
                metadata JSONB NOT NULL DEFAULT '{{}}'::jsonb,
                updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                PRIMARY KEY (namespace, id)
            )
        """
        website_idx = (
            f"CREATE INDEX IF NOT EXISTS idx_{self.table_name}_website "
            f"ON {self.table_name} ((metadata->>'websiteId'))"
        )

        try:
            async with self.engine.begin() as conn:
                await conn.execute(sa_text("CREATE EXTENSION IF NOT EXISTS vector"))
                await conn.execute(sa_text(create_table_sql))
                await conn.execute(sa_text(website_idx))
        except SQLAlchemyError as exc:
            logger.error("pgvector_table_init_failed", table=self.table_name, error=str(exc))
            raise VectorStoreError(f"Failed to prepare table {self.table_name}") from exc

        logger.info("pgvector_table_ready", table=self.table_name, dimension=self.dimension)
