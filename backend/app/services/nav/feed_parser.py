"""Parser for the AMFI NAVAll.txt feed.

The feed is one large semicolon-delimited text dump. Data rows are grouped
under section headers (fund house / scheme category) and, in some layouts,
bare ``DD-MMM-YYYY`` lines that set the report date for the rows below them:

    Scheme Code;ISIN Div Payout/ ISIN Growth;ISIN Div Reinvestment;Scheme Name;Net Asset Value;Date

    Open Ended Schemes(Debt Scheme - Banking and PSU Fund)

    Aditya Birla Sun Life Mutual Fund

    119551;INF209KA12Z1;INF209KA13Z9;Aditya Birla Sun Life Banking & PSU Debt Fund - DIRECT - IDCW;107.2714;29-Oct-2025

Parsing is a pure transform: malformed lines are counted and skipped, never
raised.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from app.constants import AmfiFeed
from app.services.nav.date_normalizer import is_feed_date_header, normalize_nav_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedRecord:
    """One priced scheme from a single feed fetch."""

    scheme_code: str
    scheme_name: str
    nav: Decimal
    nav_date: str  # YYYY-MM-DD


@dataclass
class FeedParseStats:
    """Counters describing what happened to each feed line."""

    total_lines: int = 0
    section_headers: int = 0
    data_rows: int = 0
    accepted: int = 0
    malformed: int = 0
    invalid_nav: int = 0
    missing_date: int = 0
    duplicates: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "total_lines": self.total_lines,
            "section_headers": self.section_headers,
            "data_rows": self.data_rows,
            "accepted": self.accepted,
            "malformed": self.malformed,
            "invalid_nav": self.invalid_nav,
            "missing_date": self.missing_date,
            "duplicates": self.duplicates,
        }


@dataclass
class NavFeedParseResult:
    """Parsed feed: scheme code -> record, plus line statistics."""

    records: dict[str, FeedRecord] = field(default_factory=dict)
    stats: FeedParseStats = field(default_factory=FeedParseStats)

    @property
    def is_empty(self) -> bool:
        """No usable rows at all; usually means the feed layout changed."""
        return not self.records

    def __len__(self) -> int:
        return len(self.records)


def parse_nav_value(raw: str) -> Decimal | None:
    """Parse a NAV field, returning None unless it is a finite positive number."""
    try:
        nav = Decimal(raw.strip().replace(",", ""))
    except InvalidOperation:
        return None
    if not nav.is_finite() or nav <= 0:
        return None
    return nav


def parse_nav_feed(text: str) -> NavFeedParseResult:
    """Parse the raw feed body into a scheme-code keyed mapping.

    Rules:
    - A bare ``DD-MMM-YYYY`` line sets the section date for following rows.
    - A line containing ``;`` is a data row; it needs at least
      ``AmfiFeed.MIN_FIELDS`` fields with non-empty code, name and NAV.
    - The per-row date wins over the section date; a row with neither is
      dropped.
    - A later row for the same scheme code replaces an earlier one.

    Args:
        text: Full response body of NAVAll.txt

    Returns:
        NavFeedParseResult with records and counters
    """
    result = NavFeedParseResult()
    stats = result.stats
    section_date: str | None = None

    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue
        stats.total_lines += 1

        if is_feed_date_header(trimmed):
            stats.section_headers += 1
            section_date = normalize_nav_date(trimmed)
            if section_date is None:
                logger.debug("Unresolvable section date line: %s", trimmed)
            continue

        if AmfiFeed.FIELD_SEPARATOR not in trimmed:
            # Fund house / category headings
            continue

        stats.data_rows += 1
        record = _parse_data_row(trimmed, section_date, stats)
        if record is None:
            continue

        if record.scheme_code in result.records:
            stats.duplicates += 1
        result.records[record.scheme_code] = record

    stats.accepted = len(result.records)
    logger.info(
        "Parsed NAV feed: %d schemes from %d data rows "
        "(invalid_nav=%d, missing_date=%d, malformed=%d)",
        stats.accepted,
        stats.data_rows,
        stats.invalid_nav,
        stats.missing_date,
        stats.malformed,
    )
    return result


def _parse_data_row(line: str, section_date: str | None, stats: FeedParseStats) -> FeedRecord | None:
    parts = [part.strip() for part in line.split(AmfiFeed.FIELD_SEPARATOR)]
    if len(parts) < AmfiFeed.MIN_FIELDS:
        stats.malformed += 1
        return None

    scheme_code = parts[AmfiFeed.SCHEME_CODE]
    scheme_name = parts[AmfiFeed.SCHEME_NAME]
    raw_nav = parts[AmfiFeed.NAV]
    if not scheme_code or not scheme_name or not raw_nav:
        stats.malformed += 1
        return None

    nav = parse_nav_value(raw_nav)
    if nav is None:
        # Column header row and unpriced share classes ("N.A.") land here
        stats.invalid_nav += 1
        return None

    row_date = None
    if len(parts) > AmfiFeed.DATE and parts[AmfiFeed.DATE]:
        row_date = normalize_nav_date(parts[AmfiFeed.DATE])
    nav_date = row_date or section_date
    if nav_date is None:
        stats.missing_date += 1
        return None

    return FeedRecord(
        scheme_code=scheme_code,
        scheme_name=scheme_name,
        nav=nav,
        nav_date=nav_date,
    )
