"""Pydantic request/response schemas."""

from certportal.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    TokenClaims,
    UserInfo,
    VerifyResponse,
)
from certportal.schemas.health import HealthResponse
from certportal.schemas.records import RecordData, SearchResponse, StatusResponse
from certportal.schemas.templates import (
    TemplateResponse,
    TemplateUpdateRequest,
    TemplateUpdateResponse,
)
from certportal.schemas.upload import IngestResponse

__all__ = [
    "HealthResponse",
    "IngestResponse",
    "LoginRequest",
    "LoginResponse",
    "RecordData",
    "RegisterRequest",
    "RegisterResponse",
    "SearchResponse",
    "StatusResponse",
    "TemplateResponse",
    "TemplateUpdateRequest",
    "TemplateUpdateResponse",
    "TokenClaims",
    "UserInfo",
    "VerifyResponse",
]
