"""SQLAlchemy ORM models."""

from app.models.holding import Holding
from app.models.ingestion_lock import IngestionLock
from app.models.nav_history import NavHistoryEntry
from app.models.nav_snapshot import NavSnapshot

__all__ = [
    "Holding",
    "IngestionLock",
    "NavHistoryEntry",
    "NavSnapshot",
]
