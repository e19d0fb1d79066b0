"""
Embedding Client Factory
Creates appropriate embedding client based on configuration
"""

from siteindex.core.config import Settings
from siteindex.core.logging import get_logger
from siteindex.embedding.mock import MockEmbeddingClient
from siteindex.embedding.protocol import EmbeddingClientProtocol

logger = get_logger(__name__)


def build_embedding_client(settings: Settings) -> EmbeddingClientProtocol:
    """
    Build the embedding client selected by `embedding_provider`

    Raises:
        ValueError: If embedding_provider is not supported
    """
    provider = settings.embedding_provider
    logger.info("embedding_factory", provider=provider)

    if provider == "mock":
        return MockEmbeddingClient(dimension=settings.vectorstore_dimension)

    if provider == "e5":
        from siteindex.embedding.sentence_transformer import SentenceTransformerEmbeddingClient

        return SentenceTransformerEmbeddingClient(
            model_name=settings.e5_model_name,
            device=settings.embedding_device,
            max_concurrency=settings.embedding_max_concurrency,
            dimension=settings.vectorstore_dimension,
        )

    if provider == "ollama":
        from siteindex.embedding.ollama import OllamaEmbeddingClient

        return OllamaEmbeddingClient(
            base_url=settings.ollama_base_url,
            model=settings.ollama_embedding_model,
            dimension=settings.vectorstore_dimension,
            timeout=settings.ollama_timeout,
        )

    raise ValueError(
        f"Unsupported embedding_provider: {provider}. Supported providers: mock, e5, ollama"
    )
