"""NAV snapshot data access layer."""

import logging
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from app.models import NavSnapshot
from app.services.repositories.exceptions import NotFoundError
from app.services.repositories.upsert import merge_insert

logger = logging.getLogger(__name__)


class NavSnapshotRepository:
    """Latest-NAV-per-scheme access.

    Naming conventions:
    - find_* : Query that may return None or empty
    - get_* : Query that raises NotFoundError if missing
    - upsert_* : Merge write (only the given columns change)
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_scheme_code(self, scheme_code: str) -> NavSnapshot | None:
        """Find the stored snapshot for a scheme."""
        return (
            self._db.query(NavSnapshot)
            .populate_existing()
            .filter(NavSnapshot.scheme_code == scheme_code)
            .first()
        )

    def get_by_scheme_code(self, scheme_code: str) -> NavSnapshot:
        """Get the stored snapshot for a scheme or raise NotFoundError."""
        snapshot = self.find_by_scheme_code(scheme_code)
        if snapshot is None:
            raise NotFoundError("NavSnapshot", scheme_code)
        return snapshot

    def upsert_snapshot(
        self,
        scheme_code: str,
        scheme_name: str,
        nav: Decimal,
        nav_date: date,
        last_updated: datetime,
    ) -> None:
        """Create or merge-update the snapshot for a scheme (does not commit)."""
        stmt = merge_insert(
            self._db,
            NavSnapshot.__table__,
            {
                "scheme_code": scheme_code,
                "scheme_name": scheme_name,
                "current_nav": nav,
                "nav_date": nav_date,
                "last_updated": last_updated,
            },
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["scheme_code"],
            set_={
                "scheme_name": stmt.excluded.scheme_name,
                "current_nav": stmt.excluded.current_nav,
                "nav_date": stmt.excluded.nav_date,
                "last_updated": stmt.excluded.last_updated,
            },
        )
        self._db.execute(stmt)
