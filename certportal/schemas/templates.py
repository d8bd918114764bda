"""Request/response schemas for the certificate template setting."""

from pydantic import BaseModel, Field


class TemplateResponse(BaseModel):
    """Response for GET /api/template."""

    template: str


class TemplateUpdateRequest(BaseModel):
    """Body for POST /api/template. Validated against the closed template set by the service."""

    template: str | None = Field(default=None, description="'classic' or 'modern'")


class TemplateUpdateResponse(BaseModel):
    """Response after the active template is changed."""

    message: str
    template: str
