"""
Parameterized-query interface over the relational store

Repositories in this package speak plain SQL with named bind parameters.
The executor hides the engine/connection handling and translates driver
failures into domain exceptions.
"""

from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncIterator, Iterator, Protocol

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from siteindex.core.exceptions import DatabaseError, StoreUnavailableError
from siteindex.core.logging import get_logger

logger = get_logger(__name__)


class QueryExecutorProtocol(Protocol):
    async def fetch_all(self, sql: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Run a SELECT and return rows as plain dicts."""
        ...

    async def execute(self, sql: str, params: dict[str, Any] | None = None) -> int:
        """Run a write statement and return the affected row count."""
        ...

    def transaction(self) -> Any:
        """Async context manager yielding an executor bound to one transaction."""
        ...


class SQLAlchemyQueryExecutor:
    """
    QueryExecutorProtocol backed by an AsyncEngine.

    Outside a transaction every call checks out its own connection. Inside
    `transaction()` the yielded executor reuses a single connection and the
    whole block commits or rolls back together.
    """

    def __init__(self, engine: AsyncEngine, connection: AsyncConnection | None = None) -> None:
        self.engine = engine
        self._connection = connection

    async def fetch_all(self, sql: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        with _translate_errors("fetch_all"):
            if self._connection is not None:
                result = await self._connection.execute(text(sql), params or {})
                return [dict(row._mapping) for row in result]

            async with self.engine.connect() as conn:
                result = await conn.execute(text(sql), params or {})
                return [dict(row._mapping) for row in result]

    async def execute(self, sql: str, params: dict[str, Any] | None = None) -> int:
        with _translate_errors("execute"):
            if self._connection is not None:
                result = await self._connection.execute(text(sql), params or {})
                return result.rowcount

            async with self.engine.begin() as conn:
                result = await conn.execute(text(sql), params or {})
                return result.rowcount

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SQLAlchemyQueryExecutor"]:
        if self._connection is not None:
            # Already inside a transaction; nest into the same unit of work
            yield self
            return

        with _translate_errors("transaction"):
            async with self.engine.begin() as conn:
                yield SQLAlchemyQueryExecutor(self.engine, connection=conn)


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    """Map SQLAlchemy/driver failures onto DatabaseError subclasses."""

    try:
        yield
    except (OperationalError, InterfaceError, OSError) as exc:
        logger.error("store_unavailable", operation=operation, error=str(exc))
        raise StoreUnavailableError("Relational store is unavailable") from exc
    except DBAPIError as exc:
        if exc.connection_invalidated:
            logger.error("store_unavailable", operation=operation, error=str(exc))
            raise StoreUnavailableError("Relational store is unavailable") from exc
        logger.error("store_query_failed", operation=operation, error=str(exc))
        raise DatabaseError("Relational store query failed") from exc
    except SQLAlchemyError as exc:
        logger.error("store_query_failed", operation=operation, error=str(exc))
        raise DatabaseError("Relational store query failed") from exc
