"""Response schemas for workbook ingestion endpoints."""

from pydantic import BaseModel, Field


class IngestResponse(BaseModel):
    """Response after replacing the record set."""

    message: str
    recordCount: int = Field(
        ...,
        ge=0,
        description="Number of records in the record store after the operation.",
    )
