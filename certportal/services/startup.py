"""Startup initialization: default template setting, record-store state, and seeding from the staged workbook."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from certportal.services import templates
from certportal.services.ingestion import ingest_if_present
from certportal.services.records import count_records, ensure_record_store

if TYPE_CHECKING:
    from certportal.core.config import Settings

logger = logging.getLogger(__name__)


def initialize_stores(db: Session, settings: "Settings") -> int:
    """
    Prepare the stores for serving and return the current record count.

    Database errors propagate so that startup aborts when the store is unreachable.
    """
    templates.ensure_default(db)
    ensure_record_store(db)

    count = count_records(db)
    logger.info("Record store opened", extra={"record_count": count})
    if count == 0:
        loaded = ingest_if_present(db, settings.STAGED_WORKBOOK_PATH)
        if loaded is not None:
            count = loaded
    return count
