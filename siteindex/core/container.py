"""
Dependency container

Every client is constructed once at startup and handed to the services
explicitly. The FastAPI app keeps the container on `app.state`.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine

from siteindex.core.config import Settings
from siteindex.core.db import close_db, create_engine_from_settings
from siteindex.core.logging import get_logger
from siteindex.embedding.factory import build_embedding_client
from siteindex.embedding.protocol import EmbeddingClientProtocol
from siteindex.repositories.access_key_repository import AccessKeyRepository
from siteindex.repositories.content_reader import ContentReader
from siteindex.repositories.namespace_registry import NamespaceRegistryRepository
from siteindex.repositories.query_executor import SQLAlchemyQueryExecutor
from siteindex.services.indexer import Indexer
from siteindex.services.reindex_service import ReindexService
from siteindex.services.teardown_service import TeardownService
from siteindex.services.tenant_guard import TenantGuard
from siteindex.vectorstore.factory import build_index_cleaner, build_vectorstore
from siteindex.vectorstore.protocol import VectorStoreProtocol

logger = get_logger(__name__)


@dataclass
class Container:
    settings: Settings
    engine: AsyncEngine
    executor: SQLAlchemyQueryExecutor
    embedding_client: EmbeddingClientProtocol
    vectorstore: VectorStoreProtocol
    guard: TenantGuard
    access_keys: AccessKeyRepository
    reindex_service: ReindexService
    teardown_service: TeardownService

    async def aclose(self) -> None:
        await self.embedding_client.aclose()
        await close_db(self.engine)
        logger.info("container_closed")


def build_container(
    settings: Settings,
    *,
    engine: AsyncEngine | None = None,
    embedding_client: EmbeddingClientProtocol | None = None,
    vectorstore: VectorStoreProtocol | None = None,
) -> Container:
    """
    Wire the application

    Args:
        settings: Application settings
        engine: Pre-built engine (tests pass an in-memory SQLite engine)
        embedding_client: Override for the configured embedding provider
        vectorstore: Override for the configured vector store
    """
    engine = engine or create_engine_from_settings(settings)
    executor = SQLAlchemyQueryExecutor(engine)
    embedding_client = embedding_client or build_embedding_client(settings)
    vectorstore = vectorstore or build_vectorstore(settings, engine=engine)

    guard = TenantGuard()
    registry = NamespaceRegistryRepository(executor)
    cleaner = build_index_cleaner(settings, vectorstore)

    reindex_service = ReindexService(
        reader=ContentReader(executor),
        registry=registry,
        cleaner=cleaner,
        indexer=Indexer(embedding_client, vectorstore, concurrency=settings.index_concurrency),
        guard=guard,
        secondary_suffix=settings.secondary_namespace_suffix,
    )
    teardown_service = TeardownService(
        executor=executor,
        registry=registry,
        cleaner=cleaner,
        guard=guard,
        secondary_suffix=settings.secondary_namespace_suffix,
    )

    logger.info(
        "container_built",
        vectorstore_type=settings.vectorstore_type,
        embedding_provider=settings.embedding_provider,
        index_concurrency=settings.index_concurrency,
    )

    return Container(
        settings=settings,
        engine=engine,
        executor=executor,
        embedding_client=embedding_client,
        vectorstore=vectorstore,
        guard=guard,
        access_keys=AccessKeyRepository(executor),
        reindex_service=reindex_service,
        teardown_service=teardown_service,
    )
