from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt

from siteindex.api.main import create_app
from siteindex.core.config import settings
from siteindex.core.exceptions import StoreUnavailableError
from siteindex.core.jwt import create_admin_token
from siteindex.embedding.mock import MockEmbeddingClient

PREFIX = settings.api_v1_prefix


@pytest.fixture
async def client(container):
    transport = ASGITransport(app=create_app(container))
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
async def access_key(container, scenario_t1) -> str:
    return await container.access_keys.issue("t1")


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_reindex_returns_stats(client, access_key, vectorstore) -> None:
    response = await client.post(f"{PREFIX}/reindex", headers=_auth(access_key))

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["message"] == "Indexed 4 items with 0 errors"
    assert payload["stats"]["added"] == 4
    assert payload["stats"]["errors"] == 0
    assert "timestamp" in payload
    assert len(vectorstore.fetch_namespace("t1")) == 4


@pytest.mark.asyncio
async def test_reindex_reports_item_errors(client, access_key, container) -> None:
    container.reindex_service.indexer.embedding_client = MockEmbeddingClient(
        dimension=8, fail_on={"Returns"}
    )

    response = await client.post(f"{PREFIX}/reindex", headers=_auth(access_key))

    assert response.status_code == 200
    stats = response.json()["stats"]
    assert stats["errors"] == 1
    assert stats["details"]["errors"][0]["id"] == "document-102"


@pytest.mark.asyncio
async def test_reindex_requires_access_key(client) -> None:
    response = await client.post(f"{PREFIX}/reindex")

    assert response.status_code == 401
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_reindex_rejects_unknown_key(client, scenario_t1) -> None:
    response = await client.post(f"{PREFIX}/reindex", headers=_auth("unknown-key-value"))

    assert response.status_code == 401
    assert response.json()["details"] == {"code": "AuthenticationError"}


@pytest.mark.asyncio
async def test_concurrent_reindex_is_409(client, access_key, container) -> None:
    async with container.guard.single_flight("t1"):
        response = await client.post(f"{PREFIX}/reindex", headers=_auth(access_key))

    assert response.status_code == 409
    assert response.json()["details"] == {"code": "ReindexInProgressError"}


@pytest.mark.asyncio
async def test_reindex_read_outage_is_503_with_stage(client, access_key, container) -> None:
    container.reindex_service.reader.read_content = AsyncMock(
        side_effect=StoreUnavailableError("Relational store is unavailable")
    )

    response = await client.post(f"{PREFIX}/reindex", headers=_auth(access_key))

    assert response.status_code == 503
    payload = response.json()
    assert payload["success"] is False
    assert payload["details"] == {"code": "StoreUnavailableError", "stage": "read"}


@pytest.mark.asyncio
async def test_admin_deletes_tenant(client, access_key, container, vectorstore) -> None:
    await client.post(f"{PREFIX}/reindex", headers=_auth(access_key))

    response = await client.delete(
        f"{PREFIX}/tenants/t1", headers=_auth(create_admin_token("ops"))
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "tenant_id": "t1"}
    assert vectorstore.namespaces() == []
    assert await container.executor.fetch_all("SELECT id FROM tenants") == []


@pytest.mark.asyncio
async def test_delete_requires_admin_role(client, access_key) -> None:
    token = jwt.encode({"sub": "t1", "role": "tenant"}, settings.secret_key, algorithm=settings.algorithm)

    forbidden = await client.delete(f"{PREFIX}/tenants/t1", headers=_auth(token))
    with_access_key = await client.delete(f"{PREFIX}/tenants/t1", headers=_auth(access_key))

    assert forbidden.status_code == 403
    assert with_access_key.status_code == 401


@pytest.mark.asyncio
async def test_delete_unknown_tenant_is_404(client) -> None:
    response = await client.delete(
        f"{PREFIX}/tenants/ghost", headers=_auth(create_admin_token("ops"))
    )

    assert response.status_code == 404
    assert response.json()["details"] == {"code": "RecordNotFoundError"}


@pytest.mark.asyncio
async def test_health_reports_reindex_counts(client, access_key) -> None:
    before = (await client.get("/health")).json()["reindex_runs"]["completed"]
    await client.post(f"{PREFIX}/reindex", headers=_auth(access_key))

    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["reindex_runs"]["completed"] == before + 1


@pytest.mark.asyncio
async def test_delete_lookup_outage_is_502_with_step(client, container) -> None:
    executor = AsyncMock()
    executor.fetch_all.side_effect = StoreUnavailableError("Relational store is unavailable")
    container.teardown_service.executor = executor

    response = await client.delete(
        f"{PREFIX}/tenants/t1", headers=_auth(create_admin_token("ops"))
    )

    assert response.status_code == 502
    assert response.json()["details"] == {"code": "TeardownFailedError", "step": "lookup_tenant"}
