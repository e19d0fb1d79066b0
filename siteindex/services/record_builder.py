"""
Record Builder

Turns a ContentSnapshot into the ordered list of index items. Each item
carries its deterministic vector id, the text to embed and the metadata
to store, so the indexer only has to embed and upsert.
"""

from dataclasses import dataclass, field
from typing import Any

from siteindex.schemas.content import (
    CollectionItemRecord,
    CommentRecord,
    CommerceItemRecord,
    ContentSnapshot,
    DocumentRecord,
    ReviewRecord,
)
from siteindex.vectorstore.schemas import VectorRecord, sanitize_metadata


# Content kinds; the plan dispatches them in this order
KIND_DOCUMENT = "document"
KIND_COMMENT = "comment"
KIND_PAGE = "page"
KIND_PRODUCT = "product"
KIND_REVIEW = "review"


def vector_id(kind: str, natural_id: str) -> str:
    return f"{kind}-{natural_id}"


def category_id(natural_id: str) -> str:
    return f"category-{natural_id}"


@dataclass(frozen=True)
class IndexItem:
    kind: str
    vector_id: str
    text: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_record(self, embedding: list[float]) -> VectorRecord:
        return VectorRecord(id=self.vector_id, embedding=embedding, metadata=self.metadata)


# Embedding text -----------------------------------------------------------


def document_text(document: DocumentRecord) -> str:
    return f"{document.title}\n{document.body}"


def comment_text(comment: CommentRecord, document: DocumentRecord) -> str:
    return f'Comment on document "{document.title}": {comment.body}'


def page_text(page: CollectionItemRecord) -> str:
    return f"{page.title}\n{page.body}"


def product_text(item: CommerceItemRecord) -> str:
    return f"{item.name}\n{item.description}\n{item.short_description or ''}"


def review_text(review: ReviewRecord, item: CommerceItemRecord) -> str:
    return f'Review of product "{item.name}": {review.body}'


# Plan ---------------------------------------------------------------------


class RecordBuilder:
    """
    Build index items for one tenant.

    Every metadata dict carries `type` and `websiteId`; None values are
    dropped before the item leaves the builder.
    """

    def __init__(self, tenant_id: str) -> None:
        self.tenant_id = tenant_id

    def build_plan(self, snapshot: ContentSnapshot) -> list[IndexItem]:
        documents = [self.document_item(d, snapshot.comments_for(d)) for d in snapshot.documents]
        comments = [
            self.comment_item(c, d) for d in snapshot.documents for c in snapshot.comments_for(d)
        ]
        pages = [self.page_item(p) for p in snapshot.collection_items]
        products = [self.product_item(i, snapshot) for i in snapshot.commerce_items]
        reviews = [
            self.review_item(r, i) for i in snapshot.commerce_items for r in snapshot.reviews_for(i)
        ]
        return documents + comments + pages + products + reviews

    def document_item(
        self, document: DocumentRecord, comments: tuple[CommentRecord, ...]
    ) -> IndexItem:
        return self._item(
            KIND_DOCUMENT,
            document.natural_id,
            document_text(document),
            {
                "title": document.title,
                "url": document.url,
                "dbId": document.db_id,
                "excerpt": document.excerpt,
                "authorId": document.author_id,
                "authorName": document.author_name,
                "commentIds": [vector_id(KIND_COMMENT, c.natural_id) for c in comments],
            },
        )

    def comment_item(self, comment: CommentRecord, document: DocumentRecord) -> IndexItem:
        return self._item(
            KIND_COMMENT,
            comment.natural_id,
            comment_text(comment, document),
            {
                "content": comment.body,
                "authorName": comment.author_name,
                "documentTitle": document.title,
                "documentUrl": document.url,
                "documentId": document.natural_id,
                "date": comment.posted_at.isoformat(),
            },
        )

    def page_item(self, page: CollectionItemRecord) -> IndexItem:
        return self._item(
            KIND_PAGE,
            page.natural_id,
            page_text(page),
            {"title": page.title, "url": page.url, "dbId": page.db_id},
        )

    def product_item(self, item: CommerceItemRecord, snapshot: ContentSnapshot) -> IndexItem:
        categories = snapshot.categories_for(item)
        return self._item(
            KIND_PRODUCT,
            item.natural_id,
            product_text(item),
            {
                "name": item.name,
                "url": item.url,
                "dbId": item.db_id,
                "price": item.price,
                "shortDescription": item.short_description,
                "regularPrice": item.regular_price,
                "salePrice": item.sale_price,
                "stockQuantity": item.stock_quantity,
                "reviewIds": [vector_id(KIND_REVIEW, r.natural_id) for r in snapshot.reviews_for(item)],
                "categoryIds": [category_id(c.natural_id) for c in categories],
                "categoryNames": [c.name for c in categories],
            },
        )

    def review_item(self, review: ReviewRecord, item: CommerceItemRecord) -> IndexItem:
        return self._item(
            KIND_REVIEW,
            review.natural_id,
            review_text(review, item),
            {
                "content": review.body,
                "rating": review.rating,
                "reviewer": review.reviewer_name,
                "productName": item.name,
                "productUrl": item.url,
                "productId": item.natural_id,
                "verified": review.verified,
                "date": review.reviewed_at.isoformat(),
            },
        )

    def _item(self, kind: str, natural_id: str, text: str, fields: dict[str, Any]) -> IndexItem:
        metadata = {"type": kind, "websiteId": self.tenant_id, **fields}
        return IndexItem(
            kind=kind,
            vector_id=vector_id(kind, natural_id),
            text=text,
            metadata=sanitize_metadata(metadata),
        )
