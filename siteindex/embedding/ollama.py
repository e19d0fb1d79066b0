"""
Ollama Embedding Client

Talks to a remote Ollama server's `/api/embed` endpoint.
"""

from __future__ import annotations

import httpx

from siteindex.core.exceptions import EmbeddingServiceError
from siteindex.core.logging import get_logger

logger = get_logger(__name__)


class OllamaEmbeddingClient:
    """Ollama-backed embedding client."""

    def __init__(
        self,
        *,
        base_url: str,
        model: str,
        dimension: int,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.dimension = dimension
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport
        )
        logger.info("ollama_embedding_initialized", base_url=self.base_url, model=model)

    async def embed(self, text: str) -> list[float]:
        vectors = await self.embed_batch([text])
        return vectors[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        try:
            resp = await self._client.post(
                "/api/embed", json={"model": self.model, "input": texts}
            )
        except httpx.HTTPError as exc:
            raise EmbeddingServiceError(f"Ollama request failed: {exc}") from exc

        if resp.status_code >= 400:
            raise EmbeddingServiceError(f"Ollama response error: {resp.status_code}")

        try:
            vectors = resp.json().get("embeddings") or []
        except ValueError as exc:
            raise EmbeddingServiceError("Ollama returned a non-JSON body") from exc

        if len(vectors) != len(texts):
            raise EmbeddingServiceError(
                f"Ollama returned {len(vectors)} embeddings for {len(texts)} inputs"
            )
        for vector in vectors:
            if not vector or len(vector) != self.dimension:
                raise EmbeddingServiceError(
                    f"Ollama returned a vector of length {len(vector or [])}, "
                    f"expected {self.dimension}"
                )
        return [[float(x) for x in vector] for vector in vectors]

    async def aclose(self) -> None:
        await self._client.aclose()
