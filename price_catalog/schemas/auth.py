from typing import Any

from pydantic import BaseModel


class LoginRequest(BaseModel):
    # anything but the right string is a failed login, not a 422
    password: Any = None


class LoginResponse(BaseModel):
    success: bool = True
    token: str
