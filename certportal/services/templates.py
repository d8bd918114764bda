"""Certificate templates: the closed set of layouts, the persisted active choice, and rendering."""

import logging
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Literal

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from certportal.core.errors import StoreError, ValidationError
from certportal.models.setting import CERTIFICATE_TEMPLATE_SETTING, TemplateSetting
from certportal.schemas.records import RecordData

logger = logging.getLogger(__name__)

TemplateName = Literal["classic", "modern"]

# Closed set of layouts; keys are the only names set_active accepts.
TEMPLATE_FILES: dict[str, str] = {
    "classic": "certificates/classic.html",
    "modern": "certificates/modern.html",
}
TEMPLATE_NAMES: tuple[str, ...] = tuple(TEMPLATE_FILES)
DEFAULT_TEMPLATE: TemplateName = "classic"

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)


def format_issue_date(value: date) -> str:
    """Long US date, e.g. 'October 18, 2026'."""
    return f"{value:%B} {value.day}, {value.year}"


def _get_setting(db: Session) -> TemplateSetting | None:
    return (
        db.query(TemplateSetting)
        .filter(TemplateSetting.type == CERTIFICATE_TEMPLATE_SETTING)
        .first()
    )


def get_active(db: Session) -> str:
    """Active template name, falling back to the default when unset or unknown."""
    setting = _get_setting(db)
    if setting is None or setting.template not in TEMPLATE_FILES:
        return DEFAULT_TEMPLATE
    return setting.template


def ensure_default(db: Session) -> None:
    """Create the template setting with the default layout if it does not exist."""
    if _get_setting(db) is not None:
        return
    db.add(
        TemplateSetting(
            type=CERTIFICATE_TEMPLATE_SETTING,
            template=DEFAULT_TEMPLATE,
            updated_at=datetime.now(UTC),
        )
    )
    db.commit()
    logger.info("Template setting initialized", extra={"template": DEFAULT_TEMPLATE})


def set_active(db: Session, name: str | None) -> str:
    """
    Persist the active template (upsert).

    Raises ValidationError for names outside the closed set; the stored
    setting is left unchanged in that case.
    """
    if name not in TEMPLATE_FILES:
        raise ValidationError("Invalid template")
    try:
        setting = _get_setting(db)
        if setting is None:
            setting = TemplateSetting(type=CERTIFICATE_TEMPLATE_SETTING)
            db.add(setting)
        setting.template = name
        setting.updated_at = datetime.now(UTC)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError("Error updating template", cause=e) from e
    logger.info("Template changed", extra={"template": name})
    return name


def render(
    record: RecordData,
    template: str,
    issued_on: date | None = None,
    auto_print: bool = False,
) -> str:
    """
    Render a certificate for one record with the named layout.

    Pure apart from the issue date (today when not given). Record values are
    HTML-escaped. An unknown template name raises KeyError.
    """
    path = TEMPLATE_FILES[template]
    issued = issued_on or date.today()
    return _env.get_template(path).render(
        name=record.name or "",
        certificate=record.certificate or "",
        college=record.college or "",
        issued_on=format_issue_date(issued),
        auto_print=auto_print,
    )
