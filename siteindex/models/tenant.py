"""
Tenant and caller-credential models

ERD summary:
- Tenant 1 - N AccessKey
- Tenant 1 - 0..1 NamespaceRegistry
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from siteindex.models.base import Base, BaseModel, TimestampMixin

if TYPE_CHECKING:
    from siteindex.models.content import CommerceItem, Document


class Tenant(Base, TimestampMixin):
    """
    One website/store account; the unit of data isolation.

    The id is opaque and assigned at onboarding, so it does not use the
    generated UUID mixin.
    """

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    domain: Mapped[str | None] = mapped_column(String(255), nullable=True)

    access_keys: Mapped[list["AccessKey"]] = relationship(
        "AccessKey",
        back_populates="tenant",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    documents: Mapped[list["Document"]] = relationship(
        "Document",
        passive_deletes=True,
    )
    commerce_items: Mapped[list["CommerceItem"]] = relationship(
        "CommerceItem",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name={self.name})>"


class AccessKey(BaseModel):
    """
    Bearer credential that resolves a caller to exactly one tenant.

    Only the hash is stored; `key_prefix` narrows verification to a handful
    of candidate rows.
    """

    __tablename__ = "access_keys"

    tenant_id: Mapped[str] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="Default")
    key_prefix: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    hashed_key: Mapped[str] = mapped_column(String(255), nullable=False)

    tenant: Mapped["Tenant"] = relationship("Tenant", back_populates="access_keys")

    def __repr__(self) -> str:
        return f"<AccessKey(tenant_id={self.tenant_id}, prefix={self.key_prefix})>"


class NamespaceRegistry(BaseModel):
    """
    Current vector namespaces of a tenant. At most one row per tenant.
    """

    __tablename__ = "namespace_registry"

    tenant_id: Mapped[str] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    primary_namespace: Mapped[str] = mapped_column(String(128), nullable=False)
    secondary_namespace: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        comment="Reserved for a future split (QA) index",
    )

    def __repr__(self) -> str:
        return (
            f"<NamespaceRegistry(tenant_id={self.tenant_id}, "
            f"primary={self.primary_namespace})>"
        )
