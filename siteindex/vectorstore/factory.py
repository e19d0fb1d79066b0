"""
VectorStore Factory
Creates appropriate VectorStore implementation based on configuration
"""

from sqlalchemy.ext.asyncio import AsyncEngine

from siteindex.core.config import Settings
from siteindex.core.logging import get_logger
from siteindex.vectorstore.cleanup import (
    CleanupStep,
    IndexCleaner,
    LegacyDefaultNamespaceStep,
    NamespaceWipeStep,
)
from siteindex.vectorstore.memory import InMemoryVectorStore
from siteindex.vectorstore.protocol import VectorStoreProtocol

logger = get_logger(__name__)


def build_vectorstore(settings: Settings, engine: AsyncEngine | None = None) -> VectorStoreProtocol:
    """
    Build the VectorStore implementation selected by `vectorstore_type`

    Args:
        settings: Application settings
        engine: Engine to reuse for the pgvector backend

    Raises:
        ValueError: If vectorstore_type is not supported or misconfigured
    """
    vectorstore_type = settings.vectorstore_type
    logger.info("vectorstore_factory", vectorstore_type=vectorstore_type)

    if vectorstore_type == "memory":
        return InMemoryVectorStore()

    if vectorstore_type == "pgvector":
        if engine is None:
            raise ValueError("pgvector vectorstore requires a database engine")
        from siteindex.vectorstore.pgvector import PGVectorStore

        return PGVectorStore(
            engine=engine,
            table_name=settings.pgvector_table,
            dimension=settings.vectorstore_dimension,
        )

    if vectorstore_type == "pinecone":
        from siteindex.vectorstore.pinecone import PineconeVectorStore

        return PineconeVectorStore(
            api_key=settings.pinecone_api_key or "",
            index_name=settings.pinecone_index_name or "",
            dimension=settings.vectorstore_dimension,
        )

    raise ValueError(
        f"Unsupported vectorstore_type: {vectorstore_type}. "
        "Supported types: memory, pgvector, pinecone"
    )


def build_cleanup_steps(settings: Settings) -> list[CleanupStep]:
    """Ordered cleanup run before every rebuild and on teardown."""

    return [
        NamespaceWipeStep(),
        LegacyDefaultNamespaceStep(
            page_size=settings.legacy_scan_page_size,
            max_pages=settings.legacy_scan_max_pages,
        ),
    ]


def build_index_cleaner(settings: Settings, store: VectorStoreProtocol) -> IndexCleaner:
    return IndexCleaner(store, build_cleanup_steps(settings))
