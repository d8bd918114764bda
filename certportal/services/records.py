"""Record store access: atomic generation swap, exact-name lookup, status and document generation."""

import logging
from collections.abc import Sequence
from datetime import date

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from certportal.core.errors import NotFoundError, StoreError, ValidationError
from certportal.models.record import (
    RECORD_STORE_STATE_ID,
    Record,
    RecordGeneration,
    RecordStoreState,
)
from certportal.schemas.auth import TokenClaims, UserInfo
from certportal.schemas.records import RecordData, StatusResponse
from certportal.services import templates

logger = logging.getLogger(__name__)

EMPTY_STORE_MESSAGE = "No data available. Please contact admin to upload student data."


def _current_records(db: Session):
    """Query over records of the generation the store state currently points at."""
    return db.query(Record).join(
        RecordStoreState,
        RecordStoreState.current_generation_id == Record.generation_id,
    )


def ensure_record_store(db: Session) -> None:
    """Create the store-state singleton if absent so ingests only ever update it."""
    if db.get(RecordStoreState, RECORD_STORE_STATE_ID) is None:
        db.add(RecordStoreState(id=RECORD_STORE_STATE_ID, current_generation_id=None))
        db.commit()


def count_records(db: Session) -> int:
    """Number of records in the current generation (0 before the first ingest)."""
    count = (
        db.query(func.count(Record.id))
        .join(
            RecordStoreState,
            RecordStoreState.current_generation_id == Record.generation_id,
        )
        .scalar()
    )
    return int(count or 0)


def replace_records(
    db: Session,
    records: Sequence[RecordData],
    source: str | None = None,
) -> int:
    """
    Replace the whole record set in one transaction.

    The new rows are written under a fresh generation, the store-state pointer
    is moved to it, and superseded generations are dropped before commit.
    Readers see either the old set or the new one, never an empty interim.
    On failure the transaction is rolled back and the previous set stays current.
    """
    try:
        generation = RecordGeneration(record_count=len(records), source=source)
        db.add(generation)
        db.flush()

        db.add_all(
            [
                Record(
                    generation_id=generation.id,
                    position=position,
                    name=record.name,
                    certificate=record.certificate,
                    college=record.college,
                    link=record.link,
                )
                for position, record in enumerate(records)
            ]
        )

        state = db.get(RecordStoreState, RECORD_STORE_STATE_ID)
        if state is None:
            state = RecordStoreState(id=RECORD_STORE_STATE_ID)
            db.add(state)
        state.current_generation_id = generation.id
        db.flush()

        stale_ids = [
            row_id
            for (row_id,) in db.query(RecordGeneration.id).filter(
                RecordGeneration.id != generation.id
            )
        ]
        if stale_ids:
            db.query(Record).filter(Record.generation_id.in_(stale_ids)).delete(
                synchronize_session=False
            )
            db.query(RecordGeneration).filter(RecordGeneration.id.in_(stale_ids)).delete(
                synchronize_session=False
            )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            "Record replacement failed",
            extra={"record_count": len(records), "reason": str(e)[:500]},
        )
        raise StoreError("Error saving data", cause=e) from e

    logger.info(
        "Record set replaced",
        extra={
            "generation_id": generation.id,
            "record_count": len(records),
            "superseded_generations": len(stale_ids),
        },
    )
    return len(records)


def find_by_name(db: Session, name: str | None) -> Record:
    """
    Return the record whose name matches exactly.

    Raises NotFoundError with distinct messages for an empty store and for a
    missing name. Duplicate names resolve to the first row of the upload.
    """
    if not name:
        raise ValidationError("Name is required")
    if count_records(db) == 0:
        raise NotFoundError(EMPTY_STORE_MESSAGE)
    record = (
        _current_records(db)
        .filter(Record.name == name)
        .order_by(Record.position)
        .first()
    )
    if record is None:
        raise NotFoundError(f'No record found for "{name}"')
    return record


def generate_document(
    db: Session,
    name: str | None,
    claims: TokenClaims,
    issued_on: date | None = None,
    auto_print: bool = False,
) -> tuple[str, str]:
    """
    Render the certificate for a name with the template active at request time.

    Any authenticated role may generate. Returns (html, template_name).
    """
    logger.info(
        "Generating certificate",
        extra={"requested_by": claims.username, "role": claims.role, "participant_name": name},
    )
    record = find_by_name(db, name)
    template = templates.get_active(db)
    html = templates.render(
        RecordData.model_validate(record),
        template,
        issued_on=issued_on,
        auto_print=auto_print,
    )
    logger.info("Certificate generated", extra={"participant_name": name, "template": template})
    return html, template


def get_status(db: Session, claims: TokenClaims) -> StatusResponse:
    """Record count, active template, and a readiness message for the caller."""
    count = count_records(db)
    return StatusResponse(
        status="connected",
        recordCount=count,
        template=templates.get_active(db),
        message="Database ready" if count > 0 else "No data uploaded yet",
        user=UserInfo(username=claims.username, role=claims.role),
    )
