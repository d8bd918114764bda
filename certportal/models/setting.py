"""ORM model for the active certificate template setting."""

from sqlalchemy import Column, DateTime, Integer, String, func

from certportal.models.base import Base

CERTIFICATE_TEMPLATE_SETTING = "certificate_template"


class TemplateSetting(Base):
    """Singleton row keyed by type='certificate_template'."""

    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(
        String(64),
        nullable=False,
        unique=True,
        default=CERTIFICATE_TEMPLATE_SETTING,
    )
    template = Column(String(32), nullable=False, default="classic")
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
