"""Request/response schemas for auth endpoints."""

from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["admin", "participant"]
ROLES: tuple[str, ...] = ("admin", "participant")


class RegisterRequest(BaseModel):
    """Registration payload. Fields are optional here; the auth service reports what is missing."""

    username: str | None = Field(default=None, description="Username (unique, case-sensitive)")
    password: str | None = Field(default=None, description="Password (at least 6 characters)")
    role: str | None = Field(default=None, description="'admin' or 'participant'")


class RegisterResponse(BaseModel):
    """Created identity (never the password or its hash)."""

    message: str
    username: str
    role: Role


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str | None = Field(default=None, description="Username")
    password: str | None = Field(default=None, description="Password")


class LoginResponse(BaseModel):
    """JWT access token returned after successful login."""

    message: str
    token: str = Field(..., description="JWT access token; send as Authorization: Bearer <token>")
    role: Role
    username: str


class TokenClaims(BaseModel):
    """Decoded token claims for the authenticated caller."""

    user_id: int
    username: str
    role: Role


class UserInfo(BaseModel):
    """Public view of the caller (username and role)."""

    username: str
    role: Role


class VerifyResponse(BaseModel):
    """Response for GET /api/verify."""

    valid: bool = True
    user: UserInfo
