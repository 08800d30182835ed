"""Mutual-fund NAV ingestion from the AMFI feed."""

from app.services.nav.amfi_client import AmfiNavClient
from app.services.nav.date_normalizer import normalize_nav_date, to_calendar_date
from app.services.nav.exceptions import (
    NavFeedError,
    NavFeedFormatError,
    NavIngestionError,
    NavPersistenceError,
    PipelineBusyError,
)
from app.services.nav.feed_parser import FeedRecord, NavFeedParseResult, parse_nav_feed
from app.services.nav.pipeline import NavIngestionPipeline, NavUpdateResult
from app.services.nav.reconciliation import NavUpdate, NavWriteSet, reconcile

__all__ = [
    "AmfiNavClient",
    "FeedRecord",
    "NavFeedError",
    "NavFeedFormatError",
    "NavFeedParseResult",
    "NavIngestionError",
    "NavIngestionPipeline",
    "NavPersistenceError",
    "NavUpdate",
    "NavUpdateResult",
    "NavWriteSet",
    "PipelineBusyError",
    "normalize_nav_date",
    "parse_nav_feed",
    "reconcile",
    "to_calendar_date",
]
