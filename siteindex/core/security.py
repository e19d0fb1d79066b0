"""
Access key hashing utilities
"""

from passlib.context import CryptContext


access_key_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_access_key(plain: str) -> str:
    """Hash plain access key using PBKDF2-SHA256"""
    return access_key_context.hash(plain)


def verify_access_key(plain: str, hashed: str) -> bool:
    """Verify plain access key against hashed value"""
    return access_key_context.verify(plain, hashed)
