"""SQLAlchemy ORM models."""

from certportal.models.base import Base
from certportal.models.record import Record, RecordGeneration, RecordStoreState
from certportal.models.setting import TemplateSetting
from certportal.models.user import User

__all__ = [
    "Base",
    "Record",
    "RecordGeneration",
    "RecordStoreState",
    "TemplateSetting",
    "User",
]
