"""
Common FastAPI dependencies
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from siteindex.core.container import Container
from siteindex.core.exceptions import AuthenticationError, AuthorizationError
from siteindex.core.jwt import decode_token


bearer_scheme = HTTPBearer(auto_error=False)


def get_container(request: Request) -> Container:
    return request.app.state.container


def _require_credentials(credentials: HTTPAuthorizationCredentials | None) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer credentials")
    return credentials.credentials


async def get_current_tenant_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    container: Container = Depends(get_container),
) -> str:
    """
    Resolve the bearer access key to exactly one tenant.
    """
    plain_key = _require_credentials(credentials)
    tenant_id = await container.access_keys.resolve_tenant(plain_key)
    if tenant_id is None:
        raise AuthenticationError("Invalid access key")
    return tenant_id


async def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict:
    """
    Admin JWT whose `role` claim is `admin`.
    """
    payload = decode_token(_require_credentials(credentials))
    if payload.get("role") != "admin":
        raise AuthorizationError("Admin role required")
    return payload
