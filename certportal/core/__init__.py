"""Core app configuration, database, and error types."""

from certportal.core.config import get_settings, settings
from certportal.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
