"""Initial schema: tenants, content, namespace registry, vector table

Revision ID: 20261018_0001_initial_schema
Revises:
Create Date: 2026-10-18 00:01:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261018_0001_initial_schema"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def _tenant_fk() -> sa.Column:
    return sa.Column(
        "tenant_id",
        sa.String(length=64),
        sa.ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "tenants",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("domain", sa.String(length=255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "access_keys",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _tenant_fk(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("key_prefix", sa.String(length=16), nullable=False),
        sa.Column("hashed_key", sa.String(length=255), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_access_keys_tenant_id", "access_keys", ["tenant_id"])
    op.create_index("ix_access_keys_key_prefix", "access_keys", ["key_prefix"])

    op.create_table(
        "namespace_registry",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _tenant_fk(),
        sa.Column("primary_namespace", sa.String(length=128), nullable=False),
        sa.Column(
            "secondary_namespace",
            sa.String(length=128),
            nullable=False,
            comment="Reserved for a future split (QA) index",
        ),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", name="uq_namespace_registry_tenant_id"),
    )

    op.create_table(
        "authors",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _tenant_fk(),
        sa.Column("natural_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "natural_id", name="uq_authors_tenant_natural"),
    )

    op.create_table(
        "documents",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _tenant_fk(),
        sa.Column("natural_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=True),
        sa.Column("author_natural_id", sa.String(length=64), nullable=True),
        sa.Column("url", sa.String(length=1000), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "natural_id", name="uq_documents_tenant_natural"),
    )

    op.create_table(
        "document_comments",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "document_id",
            sa.String(length=36),
            sa.ForeignKey("documents.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("natural_id", sa.String(length=64), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("author_name", sa.String(length=255), nullable=False),
        sa.Column("posted_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_document_comments_document_id", "document_comments", ["document_id"])

    op.create_table(
        "collection_items",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _tenant_fk(),
        sa.Column("natural_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("url", sa.String(length=1000), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "tenant_id", "natural_id", name="uq_collection_items_tenant_natural"
        ),
    )

    op.create_table(
        "commerce_items",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _tenant_fk(),
        sa.Column("natural_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("short_description", sa.Text(), nullable=True),
        sa.Column("price", sa.Float(), nullable=True),
        sa.Column("regular_price", sa.Float(), nullable=True),
        sa.Column("sale_price", sa.Float(), nullable=True),
        sa.Column("stock_quantity", sa.Integer(), nullable=True),
        sa.Column("url", sa.String(length=1000), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "natural_id", name="uq_commerce_items_tenant_natural"),
    )

    op.create_table(
        "commerce_reviews",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "commerce_item_id",
            sa.String(length=36),
            sa.ForeignKey("commerce_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("natural_id", sa.String(length=64), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("reviewer_name", sa.String(length=255), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_commerce_reviews_commerce_item_id", "commerce_reviews", ["commerce_item_id"]
    )

    op.create_table(
        "commerce_categories",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _tenant_fk(),
        sa.Column("natural_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "tenant_id", "natural_id", name="uq_commerce_categories_tenant_natural"
        ),
    )

    op.create_table(
        "commerce_item_categories",
        sa.Column(
            "commerce_item_id",
            sa.String(length=36),
            sa.ForeignKey("commerce_items.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "category_id",
            sa.String(length=36),
            sa.ForeignKey("commerce_categories.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    for table in ("authors", "documents", "collection_items", "commerce_items", "commerce_categories"):
        op.create_index(f"ix_{table}_tenant_id", table, ["tenant_id"])

    # Vector table for the pgvector backend (PGVectorStore also creates it lazily)
    op.execute("CREATE EXTENSION IF NOT EXISTS vector")
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS tenant_vectors (
            namespace TEXT NOT NULL,
            id TEXT NOT NULL,
            embedding VECTOR(384) NOT NULL,
            metadata JSONB NOT NULL DEFAULT '{}'::jsonb,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            PRIMARY KEY (namespace, id)
        );
        """
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_tenant_vectors_website "
        "ON tenant_vectors ((metadata->>'websiteId'));"
    )


def downgrade() -> None:
    """Drop every table created by upgrade."""
    op.execute("DROP INDEX IF EXISTS idx_tenant_vectors_website")
    op.execute("DROP TABLE IF EXISTS tenant_vectors")
    for table in ("authors", "documents", "collection_items", "commerce_items", "commerce_categories"):
        op.drop_index(f"ix_{table}_tenant_id", table_name=table)
    op.drop_table("commerce_item_categories")
    op.drop_table("commerce_categories")
    op.drop_index("ix_commerce_reviews_commerce_item_id", table_name="commerce_reviews")
    op.drop_table("commerce_reviews")
    op.drop_table("commerce_items")
    op.drop_table("collection_items")
    op.drop_index("ix_document_comments_document_id", table_name="document_comments")
    op.drop_table("document_comments")
    op.drop_table("documents")
    op.drop_table("authors")
    op.drop_table("namespace_registry")
    op.drop_index("ix_access_keys_key_prefix", table_name="access_keys")
    op.drop_index("ix_access_keys_tenant_id", table_name="access_keys")
    op.drop_table("access_keys")
    op.drop_table("tenants")
