"""
Access Key Repository
Resolves a bearer access key to the tenant it was issued for
"""

import secrets

from siteindex.core.security import hash_access_key, verify_access_key
from siteindex.models.base import new_id
from siteindex.repositories.query_executor import QueryExecutorProtocol

KEY_PREFIX_LENGTH = 8


class AccessKeyRepository:
    def __init__(self, executor: QueryExecutorProtocol) -> None:
        self.executor = executor

    async def resolve_tenant(self, plain_key: str) -> str | None:
        """
        Find the tenant owning `plain_key`.

        Candidates are narrowed by the stored prefix and each is verified
        against its hash. Returns None when no key matches.
        """
        if len(plain_key) < KEY_PREFIX_LENGTH:
            return None

        rows = await self.executor.fetch_all(
            """
            SELECT tenant_id, hashed_key
            FROM access_keys
            WHERE key_prefix = :key_prefix
            """,
            {"key_prefix": plain_key[:KEY_PREFIX_LENGTH]},
        )
        for row in rows:
            if verify_access_key(plain_key, row["hashed_key"]):
                return str(row["tenant_id"])
        return None

    async def issue(self, tenant_id: str, name: str = "Default") -> str:
        """Create a new access key for a tenant and return the plaintext once."""

        plain_key = secrets.token_urlsafe(32)
        await self.executor.execute(
            """
            INSERT INTO access_keys
                (id, tenant_id, name, key_prefix, hashed_key, created_at, updated_at)
            VALUES
                (:id, :tenant_id, :name, :key_prefix, :hashed_key,
                 CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
            """,
            {
                "id": new_id(),
                "tenant_id": tenant_id,
                "name": name,
                "key_prefix": plain_key[:KEY_PREFIX_LENGTH],
                "hashed_key": hash_access_key(plain_key),
            },
        )
        return plain_key
