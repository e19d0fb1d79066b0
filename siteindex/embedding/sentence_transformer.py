"""
E5 Semantic Embedding Client

Async-safe embedding for a local E5 model. Encoding runs in the default
threadpool executor behind a semaphore so the event loop never stalls and
the pool is never flooded.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

from sentence_transformers import SentenceTransformer

from siteindex.core.exceptions import EmbeddingServiceError
from siteindex.core.logging import get_logger

logger = get_logger(__name__)


class SentenceTransformerEmbeddingClient:
    """
    Local E5 embeddings via sentence-transformers.

    - Model loads lazily (or eagerly through `warmup()`)
    - Documents are embedded with the E5 "passage: " prefix
    - Vectors are L2-normalized
    """

    def __init__(
        self,
        model_name: str,
        device: str = "cpu",
        max_concurrency: int = 4,
        dimension: int = 384,
    ) -> None:
        self.model_name = model_name
        self.device = device
        self.max_concurrency = max_concurrency
        self.dimension = dimension
        self.model: Optional[SentenceTransformer] = None
        self._initialized = False
        self._load_lock = asyncio.Lock()
        self._semaphore = asyncio.Semaphore(max_concurrency)

        logger.info(
            "embedding_client_created",
            model_name=model_name,
            device=device,
            max_concurrency=max_concurrency,
        )

    async def warmup(self) -> None:
        """
        Load the model in the executor.

        Raises:
            EmbeddingServiceError: If model loading fails or times out
        """
        if self._initialized:
            return

        async with self._load_lock:
            if self._initialized:
                return

            t0 = time.perf_counter()
            logger.info("embedding_model_loading", model_name=self.model_name)
            loop = asyncio.get_running_loop()
            try:
                self.model = await asyncio.wait_for(
                    loop.run_in_executor(
                        None,
                        lambda: SentenceTransformer(self.model_name, device=self.device),
                    ),
                    timeout=300,  # 5 min for first download
                )
            except asyncio.TimeoutError as exc:
                logger.error("embedding_model_load_timeout", model_name=self.model_name)
                raise EmbeddingServiceError(
                    f"Timeout loading embedding model {self.model_name}"
                ) from exc
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "embedding_model_load_failed",
                    model_name=self.model_name,
                    error=str(exc),
                )
                raise EmbeddingServiceError(
                    f"Failed to load embedding model {self.model_name}"
                ) from exc

            self._initialized = True
            logger.info(
                "embedding_model_loaded",
                model_name=self.model_name,
                elapsed_seconds=f"{time.perf_counter() - t0:.2f}",
            )

    async def embed(self, text: str) -> list[float]:
        vectors = await self.embed_batch([text])
        return vectors[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        await self.warmup()

        prefixed = [f"passage: {text}" for text in texts]
        loop = asyncio.get_running_loop()
        model = self.model

        try:
            async with self._semaphore:
                array = await loop.run_in_executor(
                    None,
                    lambda: model.encode(prefixed, normalize_embeddings=True),
                )
        except Exception as exc:  # noqa: BLE001
            logger.error("passage_embedding_failed", count=len(texts), error=str(exc))
            raise EmbeddingServiceError("Failed to embed passages") from exc

        vectors = array.tolist()
        if len(vectors) != len(texts) or any(len(v) != self.dimension for v in vectors):
            raise EmbeddingServiceError(
                f"Embedding output mismatch: expected {len(texts)}x{self.dimension}"
            )
        return vectors

    async def aclose(self) -> None:
        self.model = None
        self._initialized = False
