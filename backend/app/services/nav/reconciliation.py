"""Match parsed feed records against the scheme codes users hold."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from app.services.nav.feed_parser import FeedRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavUpdate:
    """One scheme's new NAV, applied to its snapshot, history and holdings."""

    scheme_code: str
    scheme_name: str
    nav: Decimal
    nav_date: str


@dataclass
class NavWriteSet:
    """Everything a single run will write, plus diagnostics."""

    updates: list[NavUpdate] = field(default_factory=list)
    unmatched_scheme_codes: list[str] = field(default_factory=list)

    @property
    def scheme_codes(self) -> list[str]:
        return [update.scheme_code for update in self.updates]

    def __len__(self) -> int:
        return len(self.updates)


def dedupe_scheme_codes(scheme_codes: Iterable[str | None]) -> list[str]:
    """Strip, drop blanks and deduplicate, keeping first-seen order."""
    seen: dict[str, None] = {}
    for code in scheme_codes:
        if code is None:
            continue
        cleaned = str(code).strip()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


def reconcile(
    feed_records: Mapping[str, FeedRecord],
    holding_scheme_codes: Iterable[str | None],
) -> NavWriteSet:
    """Build the write set for held schemes present in the feed.

    Matching is exact scheme-code equality: no name matching, no ISIN
    fallback. Held codes missing from the feed are reported in
    ``unmatched_scheme_codes`` and otherwise left alone.

    Args:
        feed_records: Parsed feed keyed by scheme code
        holding_scheme_codes: Scheme codes of holdings (duplicates allowed)

    Returns:
        NavWriteSet with one update per matched scheme code
    """
    write_set = NavWriteSet()

    for scheme_code in sorted(dedupe_scheme_codes(holding_scheme_codes)):
        record = feed_records.get(scheme_code)
        if record is None:
            write_set.unmatched_scheme_codes.append(scheme_code)
            continue
        write_set.updates.append(
            NavUpdate(
                scheme_code=scheme_code,
                scheme_name=record.scheme_name,
                nav=record.nav,
                nav_date=record.nav_date,
            )
        )

    if write_set.unmatched_scheme_codes:
        logger.warning(
            "%d held scheme codes not found in NAV feed: %s",
            len(write_set.unmatched_scheme_codes),
            ", ".join(write_set.unmatched_scheme_codes),
        )
    logger.info(
        "Reconciled %d held schemes: %d matched, %d unmatched",
        len(write_set.updates) + len(write_set.unmatched_scheme_codes),
        len(write_set.updates),
        len(write_set.unmatched_scheme_codes),
    )
    return write_set
