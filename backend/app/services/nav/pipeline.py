"""NAV ingestion pipeline: fetch -> parse -> reconcile -> persist."""

import logging
from collections.abc import Iterable
from contextlib import nullcontext
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from app.config import settings
from app.constants import NAV_RUN_LOCK_NAME, TriggerSource
from app.services.nav.amfi_client import AmfiNavClient
from app.services.nav.exceptions import NavFeedFormatError
from app.services.nav.feed_parser import FeedRecord, NavFeedParseResult
from app.services.nav.persistence import NavPersistenceWriter, PersistenceOutcome
from app.services.nav.reconciliation import dedupe_scheme_codes, reconcile
from app.services.nav.run_lock import RunLock
from app.services.repositories import HoldingRepository

logger = logging.getLogger(__name__)


@dataclass
class NavUpdateResult:
    """Outcome of one successful pipeline run."""

    trigger: str
    total_schemes_fetched: int
    held_scheme_codes: int
    matched_scheme_codes: list[str]
    unmatched_scheme_codes: list[str]
    persistence: PersistenceOutcome
    parse_stats: dict[str, int] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def updated_count(self) -> int:
        """Number of holding documents whose cached NAV was refreshed."""
        return self.persistence.holdings_updated

    @property
    def message(self) -> str:
        return (
            f"Updated {self.persistence.snapshots_written} NAV records "
            f"and {self.updated_count} investments"
        )


class NavIngestionPipeline:
    """Runs one NAV refresh against an injected session and feed client.

    Usage:
        pipeline = NavIngestionPipeline(db)
        result = pipeline.run(TriggerSource.MANUAL)
    """

    def __init__(
        self,
        db: Session,
        client: AmfiNavClient | None = None,
        use_run_lock: bool | None = None,
        lock_ttl_seconds: int | None = None,
    ) -> None:
        self._db = db
        self._client = client
        self._use_run_lock = settings.nav_run_lock_enabled if use_run_lock is None else use_run_lock
        self._lock_ttl_seconds = lock_ttl_seconds or settings.nav_run_lock_ttl_seconds

    def run(self, trigger: str = TriggerSource.MANUAL) -> NavUpdateResult:
        """Fetch the feed and propagate NAVs into storage.

        Raises:
            NavFeedError: Feed could not be fetched
            NavFeedFormatError: Feed parsed to zero schemes
            NavPersistenceError: Holdings/snapshot batch failed
            PipelineBusyError: Run lock held by another run
        """
        lock = (
            RunLock(self._db, NAV_RUN_LOCK_NAME, self._lock_ttl_seconds)
            if self._use_run_lock
            else nullcontext()
        )
        with lock:
            return self._run(trigger)

    def _run(self, trigger: str) -> NavUpdateResult:
        logger.info("Starting %s NAV update", trigger)

        parsed = self._fetch()
        if parsed.is_empty:
            logger.error(
                "NAV feed parsed to zero schemes, layout may have changed: %s",
                parsed.stats.as_dict(),
            )
            raise NavFeedFormatError(
                "NAV feed contained no valid scheme rows", stats=parsed.stats.as_dict()
            )

        held_codes = HoldingRepository(self._db).find_scheme_codes()
        write_set = reconcile(parsed.records, held_codes)
        outcome = NavPersistenceWriter(self._db).apply(write_set)

        result = NavUpdateResult(
            trigger=trigger,
            total_schemes_fetched=len(parsed),
            held_scheme_codes=len(held_codes),
            matched_scheme_codes=write_set.scheme_codes,
            unmatched_scheme_codes=write_set.unmatched_scheme_codes,
            persistence=outcome,
            parse_stats=parsed.stats.as_dict(),
        )
        logger.info(
            "%s NAV update completed: %d investments updated from %d schemes fetched",
            trigger.capitalize(),
            result.updated_count,
            result.total_schemes_fetched,
        )
        return result

    def lookup(self, scheme_codes: Iterable[str]) -> dict[str, FeedRecord]:
        """Fetch the feed and return live NAVs for the given codes, without storing.

        Codes absent from the feed are left out of the result.
        """
        codes = dedupe_scheme_codes(scheme_codes)
        if not codes:
            return {}
        parsed = self._fetch()
        found = {code: parsed.records[code] for code in codes if code in parsed.records}
        missing = [code for code in codes if code not in found]
        if missing:
            logger.warning("Scheme codes not found in NAV feed: %s", ", ".join(missing))
        return found

    def _fetch(self) -> NavFeedParseResult:
        if self._client is not None:
            return self._client.fetch_navs()
        with AmfiNavClient() as client:
            return client.fetch_navs()
