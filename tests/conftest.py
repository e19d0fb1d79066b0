"""
Shared fixtures: in-memory SQLite store, seeded content, wired services
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from siteindex.core.config import Settings
from siteindex.core.container import build_container
from siteindex.embedding.mock import MockEmbeddingClient
from siteindex.models import (
    Author,
    Base,
    CollectionItem,
    CommerceCategory,
    CommerceItem,
    CommerceReview,
    Document,
    DocumentComment,
    Tenant,
    commerce_item_categories,
)
from siteindex.repositories.query_executor import SQLAlchemyQueryExecutor
from siteindex.vectorstore.memory import InMemoryVectorStore

TEST_DIMENSION = 8


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        vectorstore_type="memory",
        embedding_provider="mock",
        vectorstore_dimension=TEST_DIMENSION,
        index_concurrency=4,
        legacy_scan_page_size=2,
        legacy_scan_max_pages=10,
    )


@pytest.fixture
async def async_engine():
    """
    Create in-memory SQLite database for testing

    StaticPool keeps a single connection so every checkout sees the same
    in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def async_session_factory(async_engine):
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def executor(async_engine) -> SQLAlchemyQueryExecutor:
    return SQLAlchemyQueryExecutor(async_engine)


class ContentSeeder:
    """Insert tenant content through the ORM models."""

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    async def _add(self, obj):
        async with self.session_factory() as session:
            session.add(obj)
            await session.commit()
        return obj

    async def tenant(self, tenant_id: str, name: str | None = None) -> Tenant:
        return await self._add(Tenant(id=tenant_id, name=name or tenant_id))

    async def author(self, tenant_id: str, natural_id: str, name: str) -> Author:
        return await self._add(Author(tenant_id=tenant_id, natural_id=natural_id, name=name))

    async def document(
        self,
        tenant_id: str,
        natural_id: str,
        title: str,
        body: str = "Body",
        **fields,
    ) -> Document:
        return await self._add(
            Document(
                tenant_id=tenant_id,
                natural_id=natural_id,
                title=title,
                body=body,
                url=fields.pop("url", f"https://{tenant_id}.example/{natural_id}"),
                **fields,
            )
        )

    async def comment(self, document: Document, natural_id: str, body: str) -> DocumentComment:
        return await self._add(
            DocumentComment(
                document_id=document.id,
                natural_id=natural_id,
                body=body,
                author_name="Reader",
                posted_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
            )
        )

    async def page(self, tenant_id: str, natural_id: str, title: str, body: str = "") -> CollectionItem:
        return await self._add(
            CollectionItem(
                tenant_id=tenant_id,
                natural_id=natural_id,
                title=title,
                body=body,
                url=f"https://{tenant_id}.example/p/{natural_id}",
            )
        )

    async def product(self, tenant_id: str, natural_id: str, name: str, **fields) -> CommerceItem:
        return await self._add(
            CommerceItem(
                tenant_id=tenant_id,
                natural_id=natural_id,
                name=name,
                description=fields.pop("description", f"{name} description"),
                url=f"https://{tenant_id}.example/shop/{natural_id}",
                **fields,
            )
        )

    async def review(self, item: CommerceItem, natural_id: str, body: str, rating: int = 5) -> CommerceReview:
        return await self._add(
            CommerceReview(
                commerce_item_id=item.id,
                natural_id=natural_id,
                body=body,
                rating=rating,
                reviewer_name="Buyer",
                verified=True,
                reviewed_at=datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc),
            )
        )

    async def category(self, item: CommerceItem, natural_id: str, name: str) -> CommerceCategory:
        async with self.session_factory() as session:
            category = CommerceCategory(tenant_id=item.tenant_id, natural_id=natural_id, name=name)
            session.add(category)
            await session.flush()
            await session.execute(
                commerce_item_categories.insert().values(
                    commerce_item_id=item.id, category_id=category.id
                )
            )
            await session.commit()
        return category


@pytest.fixture
def seeder(async_session_factory) -> ContentSeeder:
    return ContentSeeder(async_session_factory)


@pytest.fixture
async def scenario_t1(seeder: ContentSeeder) -> dict:
    """t1 with two documents, one product and one review on it."""

    await seeder.tenant("t1", "Tenant One")
    doc1 = await seeder.document("t1", "101", "Shipping policy", "<p>We ship worldwide.</p>")
    doc2 = await seeder.document("t1", "102", "Returns", "Returns within 30 days.")
    product = await seeder.product("t1", "301", "Widget", price=19.5)
    review = await seeder.review(product, "401", "Works great")
    return {"documents": [doc1, doc2], "product": product, "review": review}


@pytest.fixture
def embedding_client() -> MockEmbeddingClient:
    return MockEmbeddingClient(dimension=TEST_DIMENSION)


@pytest.fixture
def vectorstore() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def container(test_settings, async_engine, embedding_client, vectorstore):
    return build_container(
        test_settings,
        engine=async_engine,
        embedding_client=embedding_client,
        vectorstore=vectorstore,
    )
