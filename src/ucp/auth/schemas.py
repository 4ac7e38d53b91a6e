"""Request/response schemas for authentication endpoints.

Field formats are checked by the services so the player gets the
localized message; the schemas only shape the payload.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    username: str = Field("", max_length=24)
    email: str = Field("", max_length=128)
    password: str = Field("", max_length=128)


class LoginRequest(BaseModel):
    username: str = Field("", max_length=24)
    password: str = Field("", max_length=128)


class UpdatePasswordRequest(BaseModel):
    """New password plus the reset link parameters it was issued for."""

    email: str
    token: str
    timestamp: int
    new_password: str = Field(..., max_length=128)


class SessionResponse(BaseModel):
    authenticated: bool
    user: str | None = None
    is_admin: bool = False
    is_tester: bool = False


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    session: SessionResponse


class MessageResponse(BaseModel):
    message: str = ""
