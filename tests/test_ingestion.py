"""Tests for certportal.services.ingestion: workbook parsing, column mapping, atomic replacement, staging."""

import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from certportal.core.errors import IngestionError, NotFoundError, StoreError
from certportal.models import Record, RecordGeneration
from certportal.services.ingestion import (
    ingest,
    ingest_if_present,
    map_row,
    parse_workbook,
    reload_staged,
    stage_workbook,
)
from certportal.services.records import count_records, find_by_name
from tests.support import build_workbook, make_session_factory

ALICE = ("Alice", "ML", "http://x", "MIT")
BOB = ("Bob", "Data Science", "http://y", "CMU")


class IngestionTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.addCleanup(self.db.close)


class TestParseWorkbook(unittest.TestCase):
    """parse_workbook reads only the first sheet and keys rows by header text."""

    def test_rows_keyed_by_header(self) -> None:
        rows = parse_workbook(build_workbook([ALICE, BOB]))
        self.assertEqual(len(rows), 2)
        self.assertEqual(
            rows[0],
            {"NAME": "Alice", "CIRTIFICATES": "ML", "links": "http://x", "college": "MIT"},
        )

    def test_only_first_sheet_is_read(self) -> None:
        rows = parse_workbook(build_workbook([ALICE], extra_sheets=["Archive"]))
        self.assertEqual([r["NAME"] for r in rows], ["Alice"])

    def test_blank_rows_skipped(self) -> None:
        rows = parse_workbook(build_workbook([ALICE, (None, None, None, None), BOB]))
        self.assertEqual([r["NAME"] for r in rows], ["Alice", "Bob"])

    def test_header_only_sheet(self) -> None:
        self.assertEqual(parse_workbook(build_workbook([])), [])

    def test_corrupt_bytes_raise_ingestion_error(self) -> None:
        with self.assertRaises(IngestionError):
            parse_workbook(b"this is not a workbook")


class TestMapRow(unittest.TestCase):
    """map_row keeps the four recognised, case-sensitive columns."""

    def test_recognised_columns(self) -> None:
        record = map_row({"NAME": "Alice", "CIRTIFICATES": "ML", "links": "http://x", "college": "MIT"})
        self.assertEqual(record.name, "Alice")
        self.assertEqual(record.certificate, "ML")
        self.assertEqual(record.link, "http://x")
        self.assertEqual(record.college, "MIT")

    def test_unknown_columns_dropped_and_missing_are_none(self) -> None:
        record = map_row({"NAME": "Alice", "EMAIL": "a@example.com"})
        self.assertEqual(record.model_dump(), {"name": "Alice", "certificate": None, "college": None, "link": None})

    def test_header_match_is_case_sensitive(self) -> None:
        record = map_row({"name": "Alice", "Certificates": "ML"})
        self.assertIsNone(record.name)
        self.assertIsNone(record.certificate)

    def test_non_string_cells_become_strings(self) -> None:
        record = map_row({"NAME": 12345, "CIRTIFICATES": 2.0, "college": datetime(2024, 5, 1)})
        self.assertEqual(record.name, "12345")
        self.assertEqual(record.certificate, "2")
        self.assertEqual(record.college, "2024-05-01T00:00:00")


class TestIngest(IngestionTestCase):
    """ingest replaces the whole record set in one step."""

    def test_ingest_then_find(self) -> None:
        count = ingest(self.db, build_workbook([ALICE]))
        self.assertEqual(count, 1)
        record = find_by_name(self.db, "Alice")
        self.assertEqual(
            (record.name, record.certificate, record.link, record.college),
            ("Alice", "ML", "http://x", "MIT"),
        )

    def test_ingest_twice_replaces_rather_than_accumulates(self) -> None:
        content = build_workbook([ALICE, BOB])
        self.assertEqual(ingest(self.db, content), 2)
        self.assertEqual(ingest(self.db, content), 2)
        self.assertEqual(count_records(self.db), 2)
        self.assertEqual(self.db.query(Record).count(), 2)
        self.assertEqual(self.db.query(RecordGeneration).count(), 1)

    def test_new_set_replaces_old_names(self) -> None:
        ingest(self.db, build_workbook([ALICE]))
        ingest(self.db, build_workbook([BOB]))
        self.assertEqual(find_by_name(self.db, "Bob").college, "CMU")
        with self.assertRaises(NotFoundError):
            find_by_name(self.db, "Alice")

    def test_missing_columns_are_not_a_failure(self) -> None:
        ingest(self.db, build_workbook([("Carol", "MIT")], headers=("NAME", "college")))
        record = find_by_name(self.db, "Carol")
        self.assertIsNone(record.certificate)
        self.assertIsNone(record.link)
        self.assertEqual(record.college, "MIT")

    def test_parse_failure_leaves_previous_set(self) -> None:
        ingest(self.db, build_workbook([ALICE]))
        with self.assertRaises(IngestionError):
            ingest(self.db, b"garbage")
        self.assertEqual(find_by_name(self.db, "Alice").certificate, "ML")

    def test_store_failure_rolls_back_to_previous_set(self) -> None:
        ingest(self.db, build_workbook([ALICE]))
        with patch.object(
            self.db, "add_all", side_effect=OperationalError("INSERT", {}, Exception("disk full"))
        ):
            with self.assertRaises(StoreError):
                ingest(self.db, build_workbook([BOB]))
        self.assertEqual(count_records(self.db), 1)
        self.assertEqual(find_by_name(self.db, "Alice").college, "MIT")
        self.assertEqual(self.db.query(RecordGeneration).count(), 1)

    def test_empty_workbook_empties_store(self) -> None:
        ingest(self.db, build_workbook([ALICE]))
        self.assertEqual(ingest(self.db, build_workbook([])), 0)
        self.assertEqual(count_records(self.db), 0)


class TestStaging(IngestionTestCase):
    """Staged workbook seeds an empty store at startup and backs the reload operation."""

    def setUp(self) -> None:
        super().setUp()
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.staged = Path(tmp.name) / "uploads" / "excel" / "students.xlsx"

    def test_stage_workbook_creates_directories(self) -> None:
        content = build_workbook([ALICE])
        path = stage_workbook(content, self.staged)
        self.assertEqual(path.read_bytes(), content)

    def test_ingest_if_present_seeds_empty_store(self) -> None:
        stage_workbook(build_workbook([ALICE, BOB]), self.staged)
        self.assertEqual(ingest_if_present(self.db, self.staged), 2)
        self.assertEqual(count_records(self.db), 2)

    def test_ingest_if_present_noop_when_populated(self) -> None:
        ingest(self.db, build_workbook([ALICE]))
        stage_workbook(build_workbook([ALICE, BOB]), self.staged)
        self.assertIsNone(ingest_if_present(self.db, self.staged))
        self.assertEqual(count_records(self.db), 1)

    def test_ingest_if_present_without_file(self) -> None:
        self.assertIsNone(ingest_if_present(self.db, self.staged))
        self.assertEqual(count_records(self.db), 0)

    def test_ingest_if_present_with_corrupt_file_is_not_fatal(self) -> None:
        self.staged.parent.mkdir(parents=True)
        self.staged.write_bytes(b"corrupt")
        self.assertIsNone(ingest_if_present(self.db, self.staged))
        self.assertEqual(count_records(self.db), 0)

    def test_reload_staged_replaces_records(self) -> None:
        ingest(self.db, build_workbook([ALICE]))
        stage_workbook(build_workbook([ALICE, BOB]), self.staged)
        self.assertEqual(reload_staged(self.db, self.staged), 2)
        self.assertEqual(find_by_name(self.db, "Bob").certificate, "Data Science")

    def test_reload_without_staged_file_keeps_records(self) -> None:
        ingest(self.db, build_workbook([ALICE]))
        self.assertEqual(reload_staged(self.db, self.staged), 1)
        self.assertEqual(find_by_name(self.db, "Alice").college, "MIT")


if __name__ == "__main__":
    unittest.main()
