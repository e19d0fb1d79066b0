"""
Typed content records

Rows read from the relational store are coerced into these frozen records
at the reader boundary. A row missing a required field never reaches the
indexer.
"""

import html
import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


def clean_text(value: str | None) -> str:
    """Strip HTML tags, unescape entities and collapse whitespace."""

    if not value:
        return ""
    text = _TAG_RE.sub(" ", value)
    text = html.unescape(text)
    return _WS_RE.sub(" ", text).strip()


class ContentRecord(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    natural_id: str = Field(..., min_length=1)


class DocumentRecord(ContentRecord):
    db_id: str
    title: str = Field(..., min_length=1)
    body: str = ""
    excerpt: str | None = None
    author_id: str | None = None
    author_name: str | None = None
    url: str = Field(..., min_length=1)

    @field_validator("body", mode="before")
    @classmethod
    def _clean_body(cls, value):
        return clean_text(value)

    @field_validator("excerpt", mode="before")
    @classmethod
    def _clean_excerpt(cls, value):
        return clean_text(value) or None


class CommentRecord(ContentRecord):
    document_natural_id: str = Field(..., min_length=1)
    body: str
    author_name: str
    posted_at: datetime

    @field_validator("body", mode="before")
    @classmethod
    def _clean_body(cls, value):
        return clean_text(value) if value is not None else None


class CollectionItemRecord(ContentRecord):
    db_id: str
    title: str = Field(..., min_length=1)
    body: str = ""
    url: str = Field(..., min_length=1)

    @field_validator("body", mode="before")
    @classmethod
    def _clean_body(cls, value):
        return clean_text(value)


class CommerceItemRecord(ContentRecord):
    db_id: str
    name: str = Field(..., min_length=1)
    description: str = ""
    short_description: str | None = None
    price: float | None = None
    regular_price: float | None = None
    sale_price: float | None = None
    stock_quantity: int | None = None
    url: str = Field(..., min_length=1)

    @field_validator("description", mode="before")
    @classmethod
    def _clean_description(cls, value):
        return clean_text(value)

    @field_validator("short_description", mode="before")
    @classmethod
    def _clean_short_description(cls, value):
        return clean_text(value) or None


class ReviewRecord(ContentRecord):
    commerce_item_natural_id: str = Field(..., min_length=1)
    body: str
    rating: int
    reviewer_name: str
    verified: bool = False
    reviewed_at: datetime

    @field_validator("body", mode="before")
    @classmethod
    def _clean_body(cls, value):
        return clean_text(value) if value is not None else None


class CategoryRecord(ContentRecord):
    name: str = Field(..., min_length=1)


class ContentSnapshot(BaseModel):
    """
    Everything a tenant owns, read once per reindex.

    Grouping keys are the parent's natural id.
    """

    model_config = ConfigDict(frozen=True)

    tenant_id: str
    documents: tuple[DocumentRecord, ...] = ()
    collection_items: tuple[CollectionItemRecord, ...] = ()
    commerce_items: tuple[CommerceItemRecord, ...] = ()
    comments_by_document: dict[str, tuple[CommentRecord, ...]] = Field(default_factory=dict)
    reviews_by_item: dict[str, tuple[ReviewRecord, ...]] = Field(default_factory=dict)
    categories_by_item: dict[str, tuple[CategoryRecord, ...]] = Field(default_factory=dict)

    def comments_for(self, document: DocumentRecord) -> tuple[CommentRecord, ...]:
        return self.comments_by_document.get(document.natural_id, ())

    def reviews_for(self, item: CommerceItemRecord) -> tuple[ReviewRecord, ...]:
        return self.reviews_by_item.get(item.natural_id, ())

    def categories_for(self, item: CommerceItemRecord) -> tuple[CategoryRecord, ...]:
        return self.categories_by_item.get(item.natural_id, ())
