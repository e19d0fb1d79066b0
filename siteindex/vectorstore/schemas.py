"""
Vector record schema
"""

from typing import Any

from pydantic import BaseModel, Field

# Namespace used by older deployments that wrote every tenant into one pool
LEGACY_DEFAULT_NAMESPACE = ""


class VectorRecord(BaseModel):
    """
    Single vector as written to the store

    Attributes:
        id: Deterministic id (`<kind>-<naturalId>`)
        embedding: Fixed-length embedding vector
        metadata: Flat, null-free metadata dict
    """

    id: str
    embedding: list[float]
    metadata: dict[str, Any] = Field(default_factory=dict)


def sanitize_metadata(value: Any) -> Any:
    """Drop None values recursively; vector databases reject null metadata."""

    if isinstance(value, dict):
        return {k: sanitize_metadata(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [sanitize_metadata(v) for v in value if v is not None]
    return value
