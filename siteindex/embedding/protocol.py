"""
Embedding Client Protocol (Interface)
Defines contract for all embedding implementations
"""

from typing import Protocol


class EmbeddingClientProtocol(Protocol):
    """
    Protocol for embedding client implementations

    Implementations must be safe to call concurrently and must never return
    a partial vector: any failure raises EmbeddingServiceError.
    """

    dimension: int

    async def embed(self, text: str) -> list[float]:
        """
        Embed a single text

        Returns:
            Fixed-length embedding vector

        Raises:
            EmbeddingServiceError: On any non-success response
        """
        ...

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """
        Embed several texts, one vector per input in input order

        Raises:
            EmbeddingServiceError: On any non-success response or count mismatch
        """
        ...

    async def aclose(self) -> None:
        """Release network clients / thread resources"""
        ...
