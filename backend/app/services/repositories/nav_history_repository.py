"""NAV history data access layer."""

import logging
from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models import NavHistoryEntry
from app.models.nav_history import history_key
from app.services.repositories.upsert import merge_insert

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

# Matches the Numeric(15, 4) storage scale
NAV_QUANTUM = Decimal("0.0001")


class HistoryWriteOutcome:
    """Result of a single history upsert."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


class NavHistoryRepository:
    """Access to the per-(scheme, date) NAV ledger.

    Naming conventions:
    - find_* : Query that may return None or empty list
    - upsert_* : Merge write keyed by ``history_key``
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_key(self, scheme_code: str, nav_date: date) -> NavHistoryEntry | None:
        """Find the entry for a scheme on a date."""
        return (
            self._db.query(NavHistoryEntry)
            .populate_existing()
            .filter(NavHistoryEntry.id == history_key(scheme_code, nav_date.isoformat()))
            .first()
        )

    def find_history(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        scheme_codes: Iterable[str] | None = None,
    ) -> "Sequence[NavHistoryEntry]":
        """Find entries in a date range, newest first, then by scheme code."""
        query = self._db.query(NavHistoryEntry).populate_existing()
        if start_date is not None:
            query = query.filter(NavHistoryEntry.nav_date >= start_date)
        if end_date is not None:
            query = query.filter(NavHistoryEntry.nav_date <= end_date)
        if scheme_codes is not None:
            codes = list(scheme_codes)
            if not codes:
                return []
            query = query.filter(NavHistoryEntry.scheme_code.in_(codes))
        return query.order_by(NavHistoryEntry.nav_date.desc(), NavHistoryEntry.scheme_code).all()

    def upsert_entry(
        self,
        scheme_code: str,
        scheme_name: str,
        nav: Decimal,
        nav_date: date,
        written_at: datetime,
    ) -> str:
        """Create or merge-update the entry for ``(scheme_code, nav_date)`` (does not commit).

        Rewriting the same NAV and name is a no-op; a different NAV replaces
        the stored one in place. ``created_at`` is never touched after insert.

        Returns:
            One of HistoryWriteOutcome
        """
        nav = nav.quantize(NAV_QUANTUM)
        existing = self.find_by_key(scheme_code, nav_date)
        if existing is not None and existing.nav == nav and existing.scheme_name == scheme_name:
            return HistoryWriteOutcome.UNCHANGED

        table = NavHistoryEntry.__table__
        stmt = merge_insert(
            self._db,
            table,
            {
                "id": history_key(scheme_code, nav_date.isoformat()),
                "scheme_code": scheme_code,
                "scheme_name": scheme_name,
                "nav": nav,
                "date": nav_date,
                "year": nav_date.year,
                "month": nav_date.month,
                "year_month": f"{nav_date.year}-{nav_date.month:02d}",
                "created_at": written_at,
                "updated_at": written_at,
            },
        )
        # A racing writer with identical values leaves the row untouched
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={
                "scheme_name": stmt.excluded.scheme_name,
                "nav": stmt.excluded.nav,
                "updated_at": stmt.excluded.updated_at,
            },
            where=or_(
                table.c.nav != stmt.excluded.nav,
                table.c.scheme_name != stmt.excluded.scheme_name,
            ),
        )
        self._db.execute(stmt)

        return HistoryWriteOutcome.CREATED if existing is None else HistoryWriteOutcome.UPDATED
