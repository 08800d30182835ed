"""Apply a NAV write set to holdings, snapshots and history."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.services.nav.date_normalizer import to_calendar_date
from app.services.nav.exceptions import NavPersistenceError
from app.services.nav.reconciliation import NavUpdate, NavWriteSet
from app.services.repositories import (
    HistoryWriteOutcome,
    HoldingRepository,
    NavHistoryRepository,
    NavSnapshotRepository,
    RepositoryError,
)
from app.services.shared import utc_now

logger = logging.getLogger(__name__)


@dataclass
class PersistenceOutcome:
    """Counters for one write-set application."""

    holdings_updated: int = 0
    snapshots_written: int = 0
    history_created: int = 0
    history_updated: int = 0
    history_unchanged: int = 0
    history_failed: int = 0
    skipped_scheme_codes: list[str] = field(default_factory=list)
    failed_history_scheme_codes: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "holdingsUpdated": self.holdings_updated,
            "snapshotsWritten": self.snapshots_written,
            "historyCreated": self.history_created,
            "historyUpdated": self.history_updated,
            "historyUnchanged": self.history_unchanged,
            "historyFailed": self.history_failed,
            "skippedSchemeCodes": self.skipped_scheme_codes,
            "failedHistorySchemeCodes": self.failed_history_scheme_codes,
        }


class NavPersistenceWriter:
    """Writes a reconciled NAV write set.

    Order matters:
    1. Holding NAV caches and snapshots go out as one transaction. It either
       commits fully or raises NavPersistenceError.
    2. History upserts follow, one transaction per scheme. A failing scheme
       is logged and skipped; it never undoes step 1.

    Usage:
        writer = NavPersistenceWriter(db)
        outcome = writer.apply(write_set)
    """

    def __init__(self, db: Session) -> None:
        self._db = db
        self._holdings = HoldingRepository(db)
        self._snapshots = NavSnapshotRepository(db)
        self._history = NavHistoryRepository(db)

    def apply(self, write_set: NavWriteSet) -> PersistenceOutcome:
        """Persist all updates in ``write_set``.

        Raises:
            NavPersistenceError: If the holdings/snapshot batch fails
        """
        outcome = PersistenceOutcome()
        if not write_set.updates:
            logger.info("Empty NAV write set, nothing to persist")
            return outcome

        resolved: list[tuple[NavUpdate, date]] = []
        for update in write_set.updates:
            nav_date = to_calendar_date(update.nav_date)
            if nav_date is None:
                logger.warning(
                    "Skipping scheme %s: unresolvable NAV date %r",
                    update.scheme_code,
                    update.nav_date,
                )
                outcome.skipped_scheme_codes.append(update.scheme_code)
                continue
            resolved.append((update, nav_date))

        if not resolved:
            return outcome

        written_at = utc_now()
        self._write_batch(resolved, written_at, outcome)
        self._write_history(resolved, written_at, outcome)

        logger.info(
            "Persisted NAVs: %d holdings, %d snapshots, history %d created / %d updated / "
            "%d unchanged / %d failed",
            outcome.holdings_updated,
            outcome.snapshots_written,
            outcome.history_created,
            outcome.history_updated,
            outcome.history_unchanged,
            outcome.history_failed,
        )
        return outcome

    def _write_batch(
        self,
        resolved: list[tuple[NavUpdate, date]],
        written_at: datetime,
        outcome: PersistenceOutcome,
    ) -> None:
        holdings_updated = 0
        try:
            for update, nav_date in resolved:
                holdings_updated += self._holdings.update_cached_nav(
                    update.scheme_code, update.nav, nav_date, written_at
                )
                self._snapshots.upsert_snapshot(
                    update.scheme_code, update.scheme_name, update.nav, nav_date, written_at
                )
            self._db.commit()
        except (SQLAlchemyError, RepositoryError) as e:
            logger.exception("Holding/snapshot NAV batch failed, rolling back")
            self._db.rollback()
            raise NavPersistenceError(f"Failed to commit NAV batch: {e}") from e

        outcome.holdings_updated = holdings_updated
        outcome.snapshots_written = len(resolved)

    def _write_history(
        self,
        resolved: list[tuple[NavUpdate, date]],
        written_at: datetime,
        outcome: PersistenceOutcome,
    ) -> None:
        for update, nav_date in resolved:
            try:
                result = self._history.upsert_entry(
                    update.scheme_code, update.scheme_name, update.nav, nav_date, written_at
                )
                self._db.commit()
            except (SQLAlchemyError, RepositoryError):
                logger.exception(
                    "Failed to store NAV history for %s on %s", update.scheme_code, nav_date
                )
                self._db.rollback()
                outcome.history_failed += 1
                outcome.failed_history_scheme_codes.append(update.scheme_code)
                continue

            if result == HistoryWriteOutcome.CREATED:
                outcome.history_created += 1
            elif result == HistoryWriteOutcome.UPDATED:
                outcome.history_updated += 1
            else:
                outcome.history_unchanged += 1
