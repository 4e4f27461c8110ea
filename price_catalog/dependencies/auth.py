from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from price_catalog.core.config import settings
from price_catalog.core.security import is_valid_token

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AdminSession:
    """Admin context handed to mutation routes instead of ambient client state."""
    token: Optional[str]
    authenticated: bool


def get_admin_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AdminSession:
    token = credentials.credentials if credentials else None
    return AdminSession(token=token, authenticated=is_valid_token(token))


def require_admin(session: AdminSession = Depends(get_admin_session)) -> AdminSession:
    if settings.REQUIRE_ADMIN_TOKEN and not session.authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session
