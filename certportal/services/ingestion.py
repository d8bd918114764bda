"""Workbook ingestion: parse the first sheet, map known columns to records, replace the record store."""

import io
import logging
import os
from datetime import date, datetime
from pathlib import Path
from typing import Any

from openpyxl import load_workbook
from sqlalchemy.orm import Session

from certportal.core.errors import IngestionError, StoreError
from certportal.schemas.records import RecordData
from certportal.services.records import count_records, replace_records

logger = logging.getLogger(__name__)

# Source column (case-sensitive, spelled as in the participant sheets) -> record field.
COLUMN_MAP: dict[str, str] = {
    "NAME": "name",
    "CIRTIFICATES": "certificate",
    "links": "link",
    "college": "college",
}


def _cell_to_str(value: Any) -> str | None:
    """Convert a cell value to the string stored on the record; empty cells become None."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def parse_workbook(content: bytes) -> list[dict[str, Any]]:
    """
    Read the first worksheet into a list of {header: value} rows.

    The first row is the header; fully blank rows are skipped and cells under
    an empty header are ignored. Raises IngestionError if the bytes are not a
    readable .xlsx workbook.
    """
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise IngestionError(f"Could not read workbook: {e!s}", cause=e) from e

    try:
        if not workbook.worksheets:
            raise IngestionError("Workbook has no worksheets")
        sheet = workbook.worksheets[0]
        rows = sheet.iter_rows(values_only=True)
        header_row = next(rows, None)
        if header_row is None:
            return []
        headers = [str(h) if h is not None else None for h in header_row]

        parsed: list[dict[str, Any]] = []
        for values in rows:
            row = {
                header: value
                for header, value in zip(headers, values)
                if header is not None and value is not None
            }
            if row:
                parsed.append(row)
        return parsed
    except IngestionError:
        raise
    except Exception as e:
        raise IngestionError(f"Could not read workbook: {e!s}", cause=e) from e
    finally:
        workbook.close()


def map_row(row: dict[str, Any]) -> RecordData:
    """Map recognised columns to a record; unknown columns are dropped, missing ones stay None."""
    return RecordData(
        **{field: _cell_to_str(row.get(column)) for column, field in COLUMN_MAP.items()}
    )


def ingest(db: Session, content: bytes, source: str | None = None) -> int:
    """
    Parse a workbook and replace the record store with its rows.

    Returns the number of records now stored. Raises IngestionError on parse
    failure and StoreError on write failure; the previous record set stays
    current in both cases.
    """
    rows = parse_workbook(content)
    if rows:
        logger.info(
            "Workbook parsed",
            extra={"row_count": len(rows), "columns": sorted(rows[0].keys())},
        )
    else:
        logger.info("Workbook parsed", extra={"row_count": 0})

    records = [map_row(row) for row in rows]
    return replace_records(db, records, source=source)


def stage_workbook(content: bytes, path: str | Path) -> Path:
    """Save the uploaded workbook so a restart with an empty store can re-seed from it."""
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(target.name + ".tmp")
        tmp.write_bytes(content)
        os.replace(tmp, target)
    except OSError as e:
        raise StoreError(f"Could not stage workbook: {e!s}", cause=e) from e
    return target


def ingest_if_present(db: Session, path: str | Path) -> int | None:
    """
    Seed an empty record store from the staged workbook, if one exists.

    No-op (returns None) when records already exist or nothing is staged.
    A staged file that cannot be ingested is logged and left for an admin to replace.
    """
    existing = count_records(db)
    if existing > 0:
        logger.info("Record store already populated", extra={"record_count": existing})
        return None
    staged = Path(path)
    if not staged.is_file():
        logger.warning("No records found and no staged workbook; upload one to enable search")
        return None

    logger.info("Loading staged workbook", extra={"path": str(staged)})
    try:
        count = ingest(db, staged.read_bytes(), source=str(staged))
    except (IngestionError, StoreError, OSError) as e:
        logger.error(
            "Auto-load of staged workbook failed",
            extra={"path": str(staged), "reason": str(e)[:500]},
        )
        return None
    logger.info("Auto-loaded staged workbook", extra={"record_count": count})
    return count


def reload_staged(db: Session, path: str | Path) -> int:
    """
    Re-ingest the staged workbook, replacing the record store atomically.

    Without a staged workbook the store is left as-is. Returns the record count.
    """
    staged = Path(path)
    if not staged.is_file():
        logger.warning("Reload requested but no staged workbook exists", extra={"path": str(staged)})
        return count_records(db)
    try:
        content = staged.read_bytes()
    except OSError as e:
        raise IngestionError(f"Could not read staged workbook: {e!s}", cause=e) from e
    return ingest(db, content, source=str(staged))
