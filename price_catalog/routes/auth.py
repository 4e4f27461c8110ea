from fastapi import APIRouter, HTTPException, status

from price_catalog.core.logger import setup_logger
from price_catalog.core.security import get_credential_checker, issue_token
from price_catalog.schemas.auth import LoginRequest, LoginResponse

router = APIRouter(prefix="/api", tags=["Auth"])

logger = setup_logger("routes.auth")


@router.post("/login", response_model=LoginResponse)
def login(data: LoginRequest):
    if not get_credential_checker().verify(data.password):
        logger.warning("Rejected admin login attempt")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")

    return LoginResponse(token=issue_token())
