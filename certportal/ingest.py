"""
CLI entrypoint to replace the record store from a workbook on disk, e.g.:

  python -m certportal.ingest participants.xlsx

Pass --stage to also keep the workbook as the restart seed.
"""

import argparse
import logging
import sys
from pathlib import Path

from certportal.core.config import get_settings
from certportal.core.database import SessionLocal
from certportal.core.errors import AppError
from certportal.services.ingestion import ingest, stage_workbook

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Ingest a workbook: parse its first sheet and replace all records."""
    parser = argparse.ArgumentParser(description="Replace participant records from an .xlsx workbook.")
    parser.add_argument("path", help="Path to the .xlsx workbook")
    parser.add_argument(
        "--stage",
        action="store_true",
        help="Also copy the workbook to STAGED_WORKBOOK_PATH",
    )
    args = parser.parse_args(argv)

    path = Path(args.path)
    if not path.is_file():
        logger.error("Workbook not found: %s", path)
        return 1

    settings = get_settings()
    content = path.read_bytes()
    db = SessionLocal()
    try:
        count = ingest(db, content, source=str(path))
        if args.stage:
            stage_workbook(content, settings.STAGED_WORKBOOK_PATH)
        logger.info("Ingestion completed: record_count=%s", count)
        return 0
    except AppError as e:
        logger.error("Ingestion failed: %s", e.message)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
