"""Best-effort lock between overlapping NAV runs.

Every pipeline write is an idempotent merge keyed by scheme code (and date),
so overlapping runs converge anyway. The lock only avoids duplicate feed
downloads and nondeterministic last-write ordering. A crashed holder is
released by TTL expiry.
"""

import logging
from datetime import timedelta
from uuid import uuid4

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import IngestionLock
from app.services.nav.exceptions import PipelineBusyError
from app.services.shared import utc_now
from app.services.repositories.upsert import merge_insert

logger = logging.getLogger(__name__)


class RunLock:
    """A named, expiring lock row in ``ingestion_locks``.

    Usage:
        with RunLock(db, "nav_ingestion", ttl_seconds=900):
            ...  # raises PipelineBusyError if another run holds it
    """

    def __init__(self, db: Session, name: str, ttl_seconds: int, owner: str | None = None) -> None:
        self._db = db
        self.name = name
        self.ttl = timedelta(seconds=ttl_seconds)
        self.owner = owner or uuid4().hex
        self.acquired = False

    def acquire(self) -> bool:
        """Take the lock if it is free or expired. Returns True on success."""
        now = utc_now()
        table = IngestionLock.__table__
        stmt = merge_insert(
            self._db,
            table,
            {
                "name": self.name,
                "owner": self.owner,
                "acquired_at": now,
                "expires_at": now + self.ttl,
            },
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["name"],
            set_={
                "owner": stmt.excluded.owner,
                "acquired_at": stmt.excluded.acquired_at,
                "expires_at": stmt.excluded.expires_at,
            },
            where=table.c.expires_at < now,
        )
        self._db.execute(stmt)
        self._db.commit()

        holder = self.current_owner()
        self.acquired = holder == self.owner
        if not self.acquired:
            logger.info("Lock %s is held by %s", self.name, holder)
        return self.acquired

    def current_owner(self) -> str | None:
        lock = (
            self._db.query(IngestionLock)
            .populate_existing()
            .filter(IngestionLock.name == self.name)
            .first()
        )
        return lock.owner if lock else None

    def release(self) -> None:
        """Drop the lock if this instance still owns it."""
        if not self.acquired:
            return
        try:
            self._db.execute(
                delete(IngestionLock).where(
                    IngestionLock.name == self.name, IngestionLock.owner == self.owner
                )
            )
            self._db.commit()
        except SQLAlchemyError:
            # The TTL frees it eventually
            logger.exception("Failed to release lock %s", self.name)
            self._db.rollback()
        finally:
            self.acquired = False

    def __enter__(self) -> "RunLock":
        if not self.acquire():
            raise PipelineBusyError(self.name, self.current_owner() or "unknown")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()
