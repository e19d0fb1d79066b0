"""
SQLAlchemy 2.0 Models
"""

from siteindex.models.base import Base, BaseModel  # noqa: F401
from siteindex.models.content import (  # noqa: F401
    Author,
    CollectionItem,
    CommerceCategory,
    CommerceItem,
    CommerceReview,
    Document,
    DocumentComment,
    commerce_item_categories,
)
from siteindex.models.tenant import AccessKey, NamespaceRegistry, Tenant  # noqa: F401

__all__ = [
    "Base",
    "BaseModel",
    "Tenant",
    "AccessKey",
    "NamespaceRegistry",
    "Author",
    "Document",
    "DocumentComment",
    "CollectionItem",
    "CommerceItem",
    "CommerceReview",
    "CommerceCategory",
    "commerce_item_categories",
]
