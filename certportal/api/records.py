"""Search, certificate generation, and status endpoints."""

import html
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from certportal.api.auth import get_current_user, security
from certportal.core.config import get_settings
from certportal.core.database import get_db
from certportal.core.errors import AppError, AuthError, NotFoundError
from certportal.schemas.auth import TokenClaims
from certportal.schemas.records import RecordData, SearchResponse, StatusResponse
from certportal.services import auth as auth_service
from certportal.services import records as record_service

logger = logging.getLogger(__name__)
router = APIRouter()


def _error_page(title: str, message: str, status_code: int) -> HTMLResponse:
    """Inline HTML fragment for failures on the HTML-returning endpoint."""
    body = f"<h1>{html.escape(title)}</h1><p>{html.escape(message)}</p>"
    return HTMLResponse(content=body, status_code=status_code)


@router.get("/search", response_model=SearchResponse)
def search(
    current_user: Annotated[TokenClaims, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    name: Annotated[str | None, Query(description="Exact participant name")] = None,
) -> SearchResponse:
    """Look up a participant by exact name. 404 distinguishes an empty store from an unknown name."""
    logger.info(
        "Record search",
        extra={"requested_by": current_user.username, "role": current_user.role, "participant_name": name},
    )
    record = record_service.find_by_name(db, name)
    return SearchResponse(success=True, student=RecordData.model_validate(record))


@router.get("/generate-certificate", response_class=HTMLResponse)
def generate_certificate(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    name: Annotated[str | None, Query(description="Exact participant name")] = None,
    token: Annotated[str | None, Query(description="JWT, for links opened in a new tab")] = None,
) -> HTMLResponse:
    """
    Render the certificate for `name` as HTML using the active template.

    The token may come from the Authorization header or the `token` query
    parameter; the header wins when both are present. Any authenticated role
    may generate. Errors are returned as small HTML pages.
    """
    bearer = credentials.credentials if credentials is not None else None
    try:
        claims = auth_service.verify(bearer or token)
    except AuthError as e:
        if e.status_code == 401:
            return _error_page("Access Denied", "Please login first", e.status_code)
        return _error_page("Access Denied", e.message, e.status_code)

    try:
        document, _template = record_service.generate_document(
            db,
            name,
            claims,
            auto_print=get_settings().CERTIFICATE_AUTO_PRINT,
        )
    except NotFoundError as e:
        return _error_page("Not Found", e.message, e.status_code)
    except AppError as e:
        logger.error("Certificate generation failed", extra={"reason": e.message[:500]})
        return _error_page("Error", e.message, e.status_code)
    except Exception:
        logger.exception("Certificate generation failed")
        return _error_page("Error", "Error generating certificate", 500)
    return HTMLResponse(content=document)


@router.get("/status", response_model=StatusResponse)
def get_status(
    current_user: Annotated[TokenClaims, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> StatusResponse:
    """Record count, active template, and whether data has been uploaded."""
    return record_service.get_status(db, current_user)
