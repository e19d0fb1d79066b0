"""Indexing router: reindex and tenant teardown"""

from fastapi import APIRouter, Depends

from siteindex.core.container import Container
from siteindex.core.dependencies import get_container, get_current_tenant_id, require_admin
from siteindex.core.logging import get_logger
from siteindex.schemas.indexing import ErrorResponse, ReindexResponse, TeardownResponse

logger = get_logger(__name__)

ERROR_RESPONSES = {
    code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 409, 500, 502, 503)
}

router = APIRouter(tags=["indexing"], responses=ERROR_RESPONSES)


@router.post(
    "/reindex",
    response_model=ReindexResponse,
    summary="Rebuild the caller's vector index",
)
async def reindex(
    tenant_id: str = Depends(get_current_tenant_id),
    container: Container = Depends(get_container),
) -> ReindexResponse:
    stats = await container.reindex_service.reindex(tenant_id)
    return ReindexResponse(
        message=f"Indexed {stats.added} items with {stats.errors} errors",
        stats=stats,
    )


@router.delete(
    "/tenants/{tenant_id}",
    response_model=TeardownResponse,
    summary="Permanently remove a tenant",
)
async def delete_tenant(
    tenant_id: str,
    admin: dict = Depends(require_admin),
    container: Container = Depends(get_container),
) -> TeardownResponse:
    logger.info("tenant_teardown_requested", tenant_id=tenant_id, operator=admin.get("sub"))
    await container.teardown_service.teardown(tenant_id)
    return TeardownResponse(tenant_id=tenant_id)
