"""
Unit tests for embedding clients and the client factory
"""

import json

import httpx
import pytest

from siteindex.core.config import Settings
from siteindex.core.exceptions import EmbeddingServiceError
from siteindex.embedding.factory import build_embedding_client
from siteindex.embedding.mock import MockEmbeddingClient
from siteindex.embedding.ollama import OllamaEmbeddingClient


def _ollama(handler, dimension: int = 3) -> OllamaEmbeddingClient:
    return OllamaEmbeddingClient(
        base_url="http://ollama.test/",
        model="nomic-embed-text",
        dimension=dimension,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_ollama_posts_model_and_inputs() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append({"path": request.url.path, "body": json.loads(request.content)})
        return httpx.Response(200, json={"embeddings": [[0.1, 0.2, 0.3], [1, 0, 0]]})

    client = _ollama(handler)
    vectors = await client.embed_batch(["a", "b"])
    await client.aclose()

    assert vectors == [[0.1, 0.2, 0.3], [1.0, 0.0, 0.0]]
    assert seen == [{"path": "/api/embed", "body": {"model": "nomic-embed-text", "input": ["a", "b"]}}]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="model not loaded"),
        httpx.Response(200, json={"embeddings": []}),
        httpx.Response(200, json={"embeddings": [[0.1, 0.2]]}),
        httpx.Response(200, text="not json"),
    ],
)
async def test_ollama_bad_responses_raise(response: httpx.Response) -> None:
    client = _ollama(lambda request: response)

    with pytest.raises(EmbeddingServiceError):
        await client.embed("hello")
    await client.aclose()


@pytest.mark.asyncio
async def test_ollama_transport_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = _ollama(handler)
    with pytest.raises(EmbeddingServiceError):
        await client.embed("hello")
    await client.aclose()


@pytest.mark.asyncio
async def test_mock_client_is_deterministic_unit_vectors() -> None:
    client = MockEmbeddingClient(dimension=16)

    first = await client.embed("same text")
    second = await client.embed("same text")
    other = await client.embed("other text")

    assert first == second
    assert first != other
    assert len(first) == 16
    assert abs(sum(v * v for v in first) - 1.0) < 1e-9


def test_factory_builds_configured_provider() -> None:
    mock = build_embedding_client(Settings(embedding_provider="mock", vectorstore_dimension=12))
    ollama = build_embedding_client(Settings(embedding_provider="ollama", vectorstore_dimension=12))

    assert isinstance(mock, MockEmbeddingClient)
    assert mock.dimension == 12
    assert isinstance(ollama, OllamaEmbeddingClient)
    assert ollama.dimension == 12
