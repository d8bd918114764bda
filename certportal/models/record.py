"""ORM models for participant records and the generation pointer that makes replacement atomic."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from certportal.models.base import Base

RECORD_STORE_STATE_ID = 1


class RecordGeneration(Base):
    """
    One uploaded record set. Each ingest writes a new generation; readers
    only see the generation referenced by RecordStoreState.
    """

    __tablename__ = "record_generations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    record_count = Column(Integer, nullable=False, default=0)
    source = Column(String(1024), nullable=True)


class Record(Base):
    """
    Participant certificate row. All fields are opaque strings from the workbook.

    position is the 0-based row index in the source sheet; lookups by name
    return the lowest position when names repeat.
    """

    __tablename__ = "records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    generation_id = Column(
        Integer,
        ForeignKey("record_generations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False)
    name = Column(Text, nullable=True, index=True)
    certificate = Column(Text, nullable=True)
    college = Column(Text, nullable=True)
    link = Column(Text, nullable=True)


class RecordStoreState(Base):
    """Singleton row (id=1) pointing at the current record generation."""

    __tablename__ = "record_store_state"

    id = Column(Integer, primary_key=True, default=RECORD_STORE_STATE_ID)
    current_generation_id = Column(
        Integer,
        ForeignKey("record_generations.id", ondelete="SET NULL"),
        nullable=True,
    )
