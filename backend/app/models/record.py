from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String

from app.models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoredRecord(Base):
    """One row of a named collection: opaque id plus a flat, loosely typed field map."""
    __tablename__ = "records"

    id = Column(String(32), primary_key=True, index=True)
    collection = Column(String(64), nullable=False, index=True)
    fields = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
