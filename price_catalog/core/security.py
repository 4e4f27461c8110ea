# price_catalog/core/security.py
from typing import Any, Optional, Protocol

from passlib.context import CryptContext

from price_catalog.core.config import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


# Password hashing
def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


class CredentialChecker(Protocol):
    def verify(self, password: Any) -> bool:
        ...


class SharedSecretChecker:
    """
    One shared admin secret, kept only as a hash.
    Not a security control: the issued token is static and never expires.
    """

    def __init__(self, secret: str):
        self._hashed_secret = get_password_hash(secret)

    def verify(self, password: Any) -> bool:
        if not isinstance(password, str) or not password:
            return False
        return verify_password(password, self._hashed_secret)


_checker: Optional[CredentialChecker] = None


def get_credential_checker() -> CredentialChecker:
    global _checker

    if _checker is None:
        _checker = SharedSecretChecker(settings.ADMIN_PASSWORD)
    return _checker


# Static opaque token handed to the admin UI
def issue_token() -> str:
    return settings.ADMIN_TOKEN


def is_valid_token(token: Optional[str]) -> bool:
    return bool(token) and token == settings.ADMIN_TOKEN
