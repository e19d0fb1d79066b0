"""
Tenant content models

ERD summary:
- Tenant 1 - N Author / Document / CollectionItem / CommerceItem / CommerceCategory
- Document 1 - N DocumentComment   (no tenant column; scoped through the document)
- CommerceItem 1 - N CommerceReview (no tenant column; scoped through the item)
- CommerceItem N - M CommerceCategory via commerce_item_categories

`natural_id` is the identifier from the tenant's own CMS/shop and is unique
per kind within a tenant.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from siteindex.models.base import Base, BaseModel


commerce_item_categories = Table(
    "commerce_item_categories",
    Base.metadata,
    Column(
        "commerce_item_id",
        String(36),
        ForeignKey("commerce_items.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "category_id",
        String(36),
        ForeignKey("commerce_categories.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Author(BaseModel):
    __tablename__ = "authors"
    __table_args__ = (UniqueConstraint("tenant_id", "natural_id", name="uq_authors_tenant_natural"),)

    tenant_id: Mapped[str] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    natural_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class Document(BaseModel):
    """Primary document (blog post / article)."""

    __tablename__ = "documents"
    __table_args__ = (
        UniqueConstraint("tenant_id", "natural_id", name="uq_documents_tenant_natural"),
    )

    tenant_id: Mapped[str] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    natural_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    excerpt: Mapped[str | None] = mapped_column(Text, nullable=True)
    author_natural_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)

    comments: Mapped[list["DocumentComment"]] = relationship(
        "DocumentComment",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Document(tenant_id={self.tenant_id}, natural_id={self.natural_id})>"


class DocumentComment(BaseModel):
    __tablename__ = "document_comments"

    document_id: Mapped[str] = mapped_column(
        ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    natural_id: Mapped[str] = mapped_column(String(64), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    author_name: Mapped[str] = mapped_column(String(255), nullable=False)
    posted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    document: Mapped["Document"] = relationship("Document", back_populates="comments")


class CollectionItem(BaseModel):
    """Static page."""

    __tablename__ = "collection_items"
    __table_args__ = (
        UniqueConstraint("tenant_id", "natural_id", name="uq_collection_items_tenant_natural"),
    )

    tenant_id: Mapped[str] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    natural_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    url: Mapped[str] = mapped_column(String(1000), nullable=False)


class CommerceItem(BaseModel):
    """Catalog product."""

    __tablename__ = "commerce_items"
    __table_args__ = (
        UniqueConstraint("tenant_id", "natural_id", name="uq_commerce_items_tenant_natural"),
    )

    tenant_id: Mapped[str] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    natural_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    short_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[float | None] = mapped_column(Float, nullable=True)
    regular_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    sale_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    stock_quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)

    reviews: Mapped[list["CommerceReview"]] = relationship(
        "CommerceReview",
        back_populates="commerce_item",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    categories: Mapped[list["CommerceCategory"]] = relationship(
        "CommerceCategory",
        secondary=commerce_item_categories,
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<CommerceItem(tenant_id={self.tenant_id}, natural_id={self.natural_id})>"


class CommerceReview(BaseModel):
    __tablename__ = "commerce_reviews"

    commerce_item_id: Mapped[str] = mapped_column(
        ForeignKey("commerce_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    natural_id: Mapped[str] = mapped_column(String(64), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    reviewer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reviewed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    commerce_item: Mapped["CommerceItem"] = relationship("CommerceItem", back_populates="reviews")


class CommerceCategory(BaseModel):
    __tablename__ = "commerce_categories"
    __table_args__ = (
        UniqueConstraint("tenant_id", "natural_id", name="uq_commerce_categories_tenant_natural"),
    )

    tenant_id: Mapped[str] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    natural_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
