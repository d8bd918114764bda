"""Admin endpoints to read and change the active certificate template."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from certportal.api.auth import require_admin
from certportal.core.database import get_db
from certportal.schemas.auth import TokenClaims
from certportal.schemas.templates import (
    TemplateResponse,
    TemplateUpdateRequest,
    TemplateUpdateResponse,
)
from certportal.services import templates as template_service

router = APIRouter()


@router.get("", response_model=TemplateResponse)
def get_template(
    _admin: Annotated[TokenClaims, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> TemplateResponse:
    """Return the active template name ('classic' when never set)."""
    return TemplateResponse(template=template_service.get_active(db))


@router.post("", response_model=TemplateUpdateResponse)
def set_template(
    body: TemplateUpdateRequest,
    _admin: Annotated[TokenClaims, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> TemplateUpdateResponse:
    """Switch the layout used for every certificate generated from now on."""
    template = template_service.set_active(db, body.template)
    return TemplateUpdateResponse(message="Template updated successfully", template=template)
