import pytest

from fastapi import FastAPI, Query
from httpx import ASGITransport, AsyncClient

from siteindex.api.error_handlers import (
    DEFAULT_ERROR_CODE,
    register_exception_handlers,
    resolve_status,
)
from siteindex.core.exceptions import (
    AuthenticationError,
    ContentRecordError,
    DatabaseError,
    IndexCleanupFailedError,
    RecordNotFoundError,
    RegistryUpdateFailedError,
    ReindexInProgressError,
    StoreUnavailableError,
    TeardownFailedError,
)


@pytest.fixture
def app() -> FastAPI:
    fastapi_app = FastAPI()
    register_exception_handlers(fastapi_app)

    @fastapi_app.get("/record")
    async def record_endpoint():
        raise RecordNotFoundError("Tenant t9 not found")

    @fastapi_app.get("/cleanup")
    async def cleanup_endpoint():
        raise IndexCleanupFailedError("connection reset by peer", step="wipe_namespaces")

    @fastapi_app.get("/teardown")
    async def teardown_endpoint():
        raise TeardownFailedError("boom", step="cascade_delete_content")

    @fastapi_app.get("/auth")
    async def auth_endpoint():
        raise AuthenticationError("Invalid access key")

    @fastapi_app.get("/crash")
    async def crash_endpoint():
        raise RuntimeError("secret internals")

    @fastapi_app.get("/query-validation")
    async def query_validation_endpoint(q: str = Query(..., min_length=1)):
        return {"q": q}

    return fastapi_app


async def _get(app: FastAPI, path: str, raise_app_exceptions: bool = True):
    transport = ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.get(path)


@pytest.mark.asyncio
async def test_record_not_found_body(app: FastAPI) -> None:
    response = await _get(app, "/record")

    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "error": "Not found",
        "details": {"code": "RecordNotFoundError"},
    }


@pytest.mark.asyncio
async def test_cleanup_failure_names_stage_without_leaking_cause(app: FastAPI) -> None:
    response = await _get(app, "/cleanup")

    assert response.status_code == 502
    body = response.json()
    assert body["details"] == {
        "code": "IndexCleanupFailedError",
        "stage": "wipe",
        "step": "wipe_namespaces",
    }
    assert "connection reset" not in response.text


@pytest.mark.asyncio
async def test_teardown_failure_names_step(app: FastAPI) -> None:
    response = await _get(app, "/teardown")

    assert response.status_code == 502
    assert response.json()["details"] == {
        "code": "TeardownFailedError",
        "step": "cascade_delete_content",
    }


@pytest.mark.asyncio
async def test_authentication_failure_sets_challenge_header(app: FastAPI) -> None:
    response = await _get(app, "/auth")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_unexpected_exception_is_generic(app: FastAPI) -> None:
    response = await _get(app, "/crash", raise_app_exceptions=False)

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["details"] == {"code": DEFAULT_ERROR_CODE}
    assert "secret internals" not in response.text


@pytest.mark.asyncio
async def test_request_validation_is_400(app: FastAPI) -> None:
    response = await _get(app, "/query-validation?q=")

    assert response.status_code == 400
    assert response.json()["details"]["fields"] == ["query.q"]


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (ContentRecordError("bad row", kind="document", row_id="1"), 400),
        (ReindexInProgressError("busy"), 409),
        (RegistryUpdateFailedError("nope"), 502),
        (StoreUnavailableError("down"), 503),
        (DatabaseError("query failed"), 500),
    ],
)
def test_resolve_status(exc, expected) -> None:
    assert resolve_status(exc)[0] == expected
