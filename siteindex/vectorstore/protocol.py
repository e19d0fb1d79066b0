"""
VectorStore Protocol (Interface)
Defines contract for all VectorStore implementations
"""

from typing import Protocol

from siteindex.vectorstore.schemas import VectorRecord


class VectorStoreProtocol(Protocol):
    """
    Protocol for namespaced VectorStore implementations

    - One namespace per tenant; namespaces never share vectors
    - Implementation can be swapped (in-memory, pgvector, Pinecone)
    - The default namespace ("") only exists for data written by older
      deployments and is cleaned, never written
    """

    async def upsert(self, namespace: str, records: list[VectorRecord]) -> None:
        """
        Insert or replace records by id

        Raises:
            VectorUpsertError: If the write fails
        """
        ...

    async def wipe_namespace(self, namespace: str) -> None:
        """
        Delete every vector in a namespace. No-op when it is empty.

        Raises:
            VectorStoreError: If the delete fails
        """
        ...

    async def probe_namespace(self, namespace: str) -> bool:
        """
        Return True when the namespace holds at least one vector

        Raises:
            VectorStoreError: If the lookup fails
        """
        ...

    async def scan_legacy_default(self, tenant_id: str, limit: int) -> list[str]:
        """
        Ids in the default namespace whose metadata `websiteId` is the tenant

        Raises:
            VectorStoreError: If the lookup fails
        """
        ...

    async def delete_by_ids(self, ids: list[str]) -> None:
        """
        Delete ids from the default namespace

        Raises:
            VectorStoreError: If the delete fails
        """
        ...
