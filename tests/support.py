"""Shared helpers for tests: in-memory database, API client, workbook builder."""

import io
from collections.abc import Iterable, Sequence
from typing import Any

from fastapi.testclient import TestClient
from openpyxl import Workbook
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from certportal.core.database import get_db
from certportal.main import app
from certportal.models import Base

DEFAULT_HEADERS = ("NAME", "CIRTIFICATES", "links", "college")


def make_session_factory() -> sessionmaker:
    """Fresh in-memory SQLite database with all tables, shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_client(session_factory: sessionmaker) -> TestClient:
    """TestClient whose get_db dependency uses the given session factory (lifespan not run)."""

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    return TestClient(app)


def clear_overrides() -> None:
    app.dependency_overrides.clear()


def build_workbook(
    rows: Iterable[Sequence[Any]],
    headers: Sequence[str] = DEFAULT_HEADERS,
    extra_sheets: Sequence[str] = (),
) -> bytes:
    """Return .xlsx bytes whose first sheet has the given header row and data rows."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Participants"
    sheet.append(list(headers))
    for row in rows:
        sheet.append(list(row))
    for title in extra_sheets:
        other = workbook.create_sheet(title)
        other.append(["NAME", "CIRTIFICATES", "links", "college"])
        other.append(["Ignored", "Other", "http://ignored", "Nowhere"])
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
