"""
JWT utility functions for admin tokens
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from siteindex.core.config import settings
from siteindex.core.exceptions import JWTDecodeError


def create_admin_token(subject: str, expires_delta: timedelta | None = None) -> str:
    """
    Create an admin JWT

    Args:
        subject: Operator identifier stored in `sub`
        expires_delta: Optional override for expiration duration
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta if expires_delta is not None else timedelta(minutes=30)
    )
    claims = {"sub": subject, "role": "admin", "exp": expire}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> dict:
    """
    Decode and validate JWT

    Raises:
        JWTDecodeError: if token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise JWTDecodeError("Invalid or expired token") from exc
