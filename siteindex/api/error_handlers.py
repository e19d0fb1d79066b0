"""Common exception handlers for API responses."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from siteindex.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DuplicateRecordError,
    IndexCleanupFailedError,
    PipelineStageError,
    RecordNotFoundError,
    RegistryUpdateFailedError,
    ReindexInProgressError,
    SiteIndexException,
    StoreUnavailableError,
    TeardownFailedError,
    ValidationError,
)
from siteindex.core.logging import get_logger
from siteindex.schemas.indexing import ErrorResponse

logger = get_logger(__name__)


# Checked in order; the first matching base class wins
EXCEPTION_RESPONSE_MAP: list[tuple[type[Exception], int, str]] = [
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND, "Not found"),
    (ValidationError, status.HTTP_400_BAD_REQUEST, "Invalid content"),
    (DuplicateRecordError, status.HTTP_409_CONFLICT, "Duplicate record"),
    (ReindexInProgressError, status.HTTP_409_CONFLICT, "Reindex already in progress"),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED, "Authentication failed"),
    (AuthorizationError, status.HTTP_403_FORBIDDEN, "Not authorized"),
    (IndexCleanupFailedError, status.HTTP_502_BAD_GATEWAY, "Index cleanup failed"),
    (RegistryUpdateFailedError, status.HTTP_502_BAD_GATEWAY, "Namespace registry update failed"),
    (TeardownFailedError, status.HTTP_502_BAD_GATEWAY, "Tenant teardown failed"),
    (StoreUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE, "Data store unavailable"),
    (PipelineStageError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Pipeline stage failed"),
]
DEFAULT_ERROR_CODE = "INTERNAL.UNEXPECTED"
DEFAULT_ERROR_MESSAGE = "Unexpected server error."


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers that render every failure as an ErrorResponse."""

    app.add_exception_handler(SiteIndexException, _siteindex_exception_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_error_handler)
    app.add_exception_handler(HTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)


def resolve_status(exc: SiteIndexException) -> tuple[int, str]:
    for exc_type, status_code, message in EXCEPTION_RESPONSE_MAP:
        if isinstance(exc, exc_type):
            return status_code, message
    return status.HTTP_500_INTERNAL_SERVER_ERROR, DEFAULT_ERROR_MESSAGE


def _render(status_code: int, error: str, details: dict[str, Any]) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body),
        headers=headers,
    )


async def _siteindex_exception_handler(request: Request, exc: SiteIndexException) -> JSONResponse:
    status_code, message = resolve_status(exc)
    # Short messages only; the cause is logged, never returned
    logger.warning(
        "request_failed",
        path=request.url.path,
        status_code=status_code,
        code=exc.code,
        error=exc.message,
    )
    return _render(status_code, message, exc.details)


async def _request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors() or []
    fields = [".".join(str(p) for p in err.get("loc", [])) for err in errors]
    return _render(
        status.HTTP_400_BAD_REQUEST,
        "Invalid request",
        {"code": "RequestValidationError", "fields": fields},
    )


async def _http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _render(exc.status_code, str(exc.detail), {"code": f"HTTP.{exc.status_code}"})


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return _render(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        DEFAULT_ERROR_MESSAGE,
        {"code": DEFAULT_ERROR_CODE},
    )
