"""Registration, JWT login, token verification, and auth dependencies (get_current_user, require_admin)."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from certportal.core.database import get_db
from certportal.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    TokenClaims,
    UserInfo,
    VerifyResponse,
)
from certportal.services import auth as auth_service

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> TokenClaims:
    """Dependency: require a valid Bearer JWT and return its claims. 401 if missing, 403 if invalid."""
    token = credentials.credentials if credentials is not None else None
    return auth_service.verify(token)


def require_admin(
    current_user: Annotated[TokenClaims, Depends(get_current_user)],
) -> TokenClaims:
    """Dependency: require authenticated user with role 'admin'. Raises 403 for non-admin."""
    return auth_service.require_role(current_user, "admin")


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
) -> RegisterResponse:
    """Create an account with role 'admin' or 'participant'. Passwords need at least 6 characters."""
    return auth_service.register(db, body.username, body.password, body.role)


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> LoginResponse:
    """
    Authenticate with username and password; returns a JWT valid for 24 hours.
    Include the token in the Authorization header as: Bearer <token>
    """
    return auth_service.authenticate(db, body.username, body.password)


@router.get("/verify", response_model=VerifyResponse)
def verify(
    current_user: Annotated[TokenClaims, Depends(get_current_user)],
) -> VerifyResponse:
    """Confirm the presented token is valid and echo who it belongs to."""
    return VerifyResponse(
        valid=True,
        user=UserInfo(username=current_user.username, role=current_user.role),
    )
