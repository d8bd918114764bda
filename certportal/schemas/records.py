"""Schemas for participant records, search and status responses."""

from pydantic import BaseModel, Field

from certportal.schemas.auth import UserInfo


class RecordData(BaseModel):
    """One participant row mapped from the workbook. Missing columns stay None."""

    name: str | None = None
    certificate: str | None = None
    college: str | None = None
    link: str | None = None

    class Config:
        from_attributes = True


class SearchResponse(BaseModel):
    """Response for GET /api/search."""

    success: bool = True
    student: RecordData


class StatusResponse(BaseModel):
    """Response for GET /api/status."""

    status: str = Field(default="connected", description="Store connectivity")
    recordCount: int = Field(..., ge=0, description="Records in the current generation")
    template: str = Field(..., description="Active certificate template")
    message: str
    user: UserInfo
