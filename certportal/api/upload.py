"""Workbook endpoints: upload a participant sheet or reload the staged one (admin only)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from certportal.api.auth import require_admin
from certportal.core.config import get_settings
from certportal.core.database import get_db
from certportal.core.errors import StoreError, ValidationError
from certportal.schemas.auth import TokenClaims
from certportal.schemas.upload import IngestResponse
from certportal.services.ingestion import ingest, reload_staged, stage_workbook

logger = logging.getLogger(__name__)

router = APIRouter()

UPLOAD_FIELD = "excel"
ALLOWED_WORKBOOK_EXTENSIONS = (".xlsx",)


def _is_upload_file(obj: object) -> bool:
    """True if obj is an uploaded file (UploadFile or file-like with filename and read)."""
    if isinstance(obj, UploadFile):
        return True
    return (
        hasattr(obj, "read")
        and callable(getattr(obj, "read", None))
        and hasattr(obj, "filename")
    )


async def _read_workbook_from_request(request: Request, max_bytes: int) -> tuple[str, bytes]:
    """Return (filename, content) of the uploaded workbook after basic checks."""
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type != "multipart/form-data":
        raise ValidationError(
            f"Content-Type must be multipart/form-data with an '{UPLOAD_FIELD}' file field."
        )
    form = await request.form()
    file = form.get(UPLOAD_FIELD)
    if file is None or not _is_upload_file(file):
        raise ValidationError(f"Multipart request must include an '{UPLOAD_FIELD}' file field.")
    filename = getattr(file, "filename", None) or ""
    if not filename.lower().endswith(ALLOWED_WORKBOOK_EXTENSIONS):
        raise ValidationError("Uploaded file must have a .xlsx extension.")
    content = await file.read()
    if len(content) > max_bytes:
        raise ValidationError(
            f"File size must not exceed {max_bytes // (1024 * 1024)} MB."
        )
    return filename, content


@router.post("/upload-excel", response_model=IngestResponse)
async def upload_excel(
    request: Request,
    admin: Annotated[TokenClaims, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> IngestResponse:
    """
    Replace all participant records with the rows of an uploaded .xlsx workbook.

    Send `multipart/form-data` with the file in a field named `excel`. Columns
    `NAME`, `CIRTIFICATES`, `links` and `college` are read from the first sheet;
    others are ignored. The previous records stay visible until the new set is
    committed. The workbook is kept on disk to re-seed an empty store on restart.
    """
    settings = get_settings()
    filename, content = await _read_workbook_from_request(
        request, settings.MAX_UPLOAD_FILE_BYTES
    )
    logger.info(
        "Workbook upload received",
        extra={"upload_name": filename, "size_bytes": len(content), "uploaded_by": admin.username},
    )
    # Parsing, commit and file write block; keep them off the event loop.
    count = await run_in_threadpool(ingest, db, content, source=filename)
    try:
        await run_in_threadpool(stage_workbook, content, settings.STAGED_WORKBOOK_PATH)
    except StoreError as e:
        # Records are already committed; only the restart seed is stale.
        logger.warning("Workbook staging failed", extra={"reason": e.message[:500]})
    return IngestResponse(message="Excel uploaded successfully!", recordCount=count)


@router.get("/api/reload-data", response_model=IngestResponse)
def reload_data(
    admin: Annotated[TokenClaims, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> IngestResponse:
    """Re-read the staged workbook and replace the record set with its rows."""
    logger.info("Reloading data from staged workbook", extra={"requested_by": admin.username})
    count = reload_staged(db, get_settings().STAGED_WORKBOOK_PATH)
    return IngestResponse(message="Data reloaded successfully!", recordCount=count)
