"""
Content Reader

Loads everything a tenant owns that becomes part of its vector index.
Pure read: one query per content kind, each filtered by the tenant id.
Comments and reviews have no tenant column and are scoped through their
parent row.
"""

from collections import defaultdict
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from siteindex.core.exceptions import ContentRecordError
from siteindex.core.logging import get_logger
from siteindex.repositories.query_executor import QueryExecutorProtocol
from siteindex.schemas.content import (
    CategoryRecord,
    CollectionItemRecord,
    CommentRecord,
    CommerceItemRecord,
    ContentSnapshot,
    DocumentRecord,
    ReviewRecord,
)

logger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


DOCUMENTS_SQL = """
    SELECT
        d.id AS db_id,
        d.natural_id,
        d.title,
        d.body,
        d.excerpt,
        d.author_natural_id AS author_id,
        a.name AS author_name,
        d.url
    FROM documents d
    LEFT JOIN authors a
        ON a.tenant_id = d.tenant_id AND a.natural_id = d.author_natural_id
    WHERE d.tenant_id = :tenant_id
    ORDER BY d.natural_id
"""

COMMENTS_SQL = """
    SELECT
        c.natural_id,
        d.natural_id AS document_natural_id,
        c.body,
        c.author_name,
        c.posted_at
    FROM document_comments c
    JOIN documents d ON d.id = c.document_id
    WHERE d.tenant_id = :tenant_id
    ORDER BY d.natural_id, c.natural_id
"""

COLLECTION_ITEMS_SQL = """
    SELECT id AS db_id, natural_id, title, body, url
    FROM collection_items
    WHERE tenant_id = :tenant_id
    ORDER BY natural_id
"""

COMMERCE_ITEMS_SQL = """
    SELECT
        id AS db_id,
        natural_id,
        name,
        description,
        short_description,
        price,
        regular_price,
        sale_price,
        stock_quantity,
        url
    FROM commerce_items
    WHERE tenant_id = :tenant_id
    ORDER BY natural_id
"""

REVIEWS_SQL = """
    SELECT
        r.natural_id,
        i.natural_id AS commerce_item_natural_id,
        r.body,
        r.rating,
        r.reviewer_name,
        r.verified,
        r.reviewed_at
    FROM commerce_reviews r
    JOIN commerce_items i ON i.id = r.commerce_item_id
    WHERE i.tenant_id = :tenant_id
    ORDER BY i.natural_id, r.natural_id
"""

ITEM_CATEGORIES_SQL = """
    SELECT
        i.natural_id AS commerce_item_natural_id,
        c.natural_id,
        c.name
    FROM commerce_item_categories ic
    JOIN commerce_items i ON i.id = ic.commerce_item_id
    JOIN commerce_categories c ON c.id = ic.category_id
    WHERE i.tenant_id = :tenant_id
    ORDER BY i.natural_id, c.natural_id
"""


class ContentReader:
    """
    Read a tenant's content into a ContentSnapshot.

    Store failures propagate as StoreUnavailableError / DatabaseError from
    the executor; no retry happens here.
    """

    def __init__(self, executor: QueryExecutorProtocol) -> None:
        self.executor = executor

    async def read_content(self, tenant_id: str) -> ContentSnapshot:
        params = {"tenant_id": tenant_id}

        documents = self._coerce(
            "document", DocumentRecord, await self.executor.fetch_all(DOCUMENTS_SQL, params)
        )
        comments = self._coerce(
            "comment", CommentRecord, await self.executor.fetch_all(COMMENTS_SQL, params)
        )
        collection_items = self._coerce(
            "page",
            CollectionItemRecord,
            await self.executor.fetch_all(COLLECTION_ITEMS_SQL, params),
        )
        commerce_items = self._coerce(
            "product",
            CommerceItemRecord,
            await self.executor.fetch_all(COMMERCE_ITEMS_SQL, params),
        )
        reviews = self._coerce(
            "review", ReviewRecord, await self.executor.fetch_all(REVIEWS_SQL, params)
        )
        category_rows = await self.executor.fetch_all(ITEM_CATEGORIES_SQL, params)

        comments_by_document: dict[str, list[CommentRecord]] = defaultdict(list)
        for comment in comments:
            comments_by_document[comment.document_natural_id].append(comment)

        reviews_by_item: dict[str, list[ReviewRecord]] = defaultdict(list)
        for review in reviews:
            reviews_by_item[review.commerce_item_natural_id].append(review)

        categories_by_item: dict[str, list[CategoryRecord]] = defaultdict(list)
        for row in category_rows:
            item_id = str(row.pop("commerce_item_natural_id"))
            categories_by_item[item_id].extend(self._coerce("category", CategoryRecord, [row]))

        snapshot = ContentSnapshot(
            tenant_id=tenant_id,
            documents=tuple(documents),
            collection_items=tuple(collection_items),
            commerce_items=tuple(commerce_items),
            comments_by_document={k: tuple(v) for k, v in comments_by_document.items()},
            reviews_by_item={k: tuple(v) for k, v in reviews_by_item.items()},
            categories_by_item={k: tuple(v) for k, v in categories_by_item.items()},
        )

        logger.info(
            "content_read",
            tenant_id=tenant_id,
            documents=len(documents),
            comments=len(comments),
            pages=len(collection_items),
            products=len(commerce_items),
            reviews=len(reviews),
        )
        return snapshot

    @staticmethod
    def _coerce(kind: str, model: type[RecordT], rows: list[dict[str, Any]]) -> list[RecordT]:
        records: list[RecordT] = []
        for row in rows:
            try:
                records.append(model.model_validate(row))
            except PydanticValidationError as exc:
                row_id = row.get("natural_id")
                fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
                logger.error(
                    "content_record_invalid",
                    kind=kind,
                    row_id=row_id,
                    fields=fields,
                )
                raise ContentRecordError(
                    f"Invalid {kind} row: {fields}",
                    kind=kind,
                    row_id=str(row_id) if row_id is not None else None,
                ) from exc
        return records
