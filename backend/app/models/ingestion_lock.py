"""Sentinel rows used as a best-effort lock between pipeline runs."""

from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class IngestionLock(Base):
    """A named lock with an expiry; an expired lock may be taken over."""

    __tablename__ = "ingestion_locks"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    owner: Mapped[str] = mapped_column(String(64))
    acquired_at: Mapped[datetime]
    expires_at: Mapped[datetime]

    def __repr__(self) -> str:
        return f"<IngestionLock(name={self.name}, owner={self.owner}, expires_at={self.expires_at})>"
