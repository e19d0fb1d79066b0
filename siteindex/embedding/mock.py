"""
Mock Embedding Client
For development and testing without a model or embedding server
"""

import hashlib
import math

from siteindex.core.exceptions import EmbeddingServiceError
from siteindex.core.logging import get_logger

logger = get_logger(__name__)


class MockEmbeddingClient:
    """
    Deterministic hash-based vectors.

    The same text always yields the same unit vector. Texts listed in
    `fail_on` raise EmbeddingServiceError, which tests use to simulate a
    single failing item.
    """

    def __init__(self, dimension: int = 384, fail_on: set[str] | None = None) -> None:
        self.dimension = dimension
        self.fail_on = fail_on or set()
        self.calls: list[str] = []
        logger.info("mock_embedding_initialized", dimension=dimension)

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if any(marker in text for marker in self.fail_on):
            raise EmbeddingServiceError("Mock embedding failure")
        return self._vector(text)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed(text) for text in texts]

    async def aclose(self) -> None:
        return None

    def _vector(self, text: str) -> list[float]:
        values: list[float] = []
        counter = 0
        while len(values) < self.dimension:
            digest = hashlib.sha256(f"{counter}:{text}".encode("utf-8")).digest()
            values.extend((byte - 127.5) / 127.5 for byte in digest)
            counter += 1
        values = values[: self.dimension]
        norm = math.sqrt(sum(v * v for v in values)) or 1.0
        return [v / norm for v in values]
