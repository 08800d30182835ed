"""Read-side analysis of the NAV history ledger."""

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.orm import Session

from app.models import NavHistoryEntry
from app.services.repositories import HoldingRepository, NavHistoryRepository

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class NavChange:
    """Change between two consecutive stored NAVs of one scheme."""

    scheme_code: str
    scheme_name: str
    nav_date: date
    year: int
    month: int
    year_month: str
    current_nav: Decimal
    previous_nav: Decimal
    change_amount: Decimal
    change_percent: Decimal


def calculate_daily_changes(entries: Iterable[NavHistoryEntry]) -> list[NavChange]:
    """Derive day-over-day changes from history rows.

    Rows are grouped by scheme and ordered by date; each row after the first
    yields one change against its predecessor. Results are newest first.
    """
    by_scheme: dict[str, list[NavHistoryEntry]] = defaultdict(list)
    for entry in entries:
        by_scheme[entry.scheme_code].append(entry)

    changes: list[NavChange] = []
    for records in by_scheme.values():
        records.sort(key=lambda r: r.nav_date)
        for previous, current in zip(records, records[1:]):
            if not previous.nav:
                continue
            amount = current.nav - previous.nav
            percent = amount / previous.nav * 100
            changes.append(
                NavChange(
                    scheme_code=current.scheme_code,
                    scheme_name=current.scheme_name,
                    nav_date=current.nav_date,
                    year=current.year,
                    month=current.month,
                    year_month=current.year_month,
                    current_nav=current.nav,
                    previous_nav=previous.nav,
                    change_amount=amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP),
                    change_percent=percent.quantize(TWO_PLACES, rounding=ROUND_HALF_UP),
                )
            )

    changes.sort(key=lambda c: (c.nav_date, c.scheme_code), reverse=True)
    return changes


class NavHistoryService:
    """Queries over stored NAV history."""

    def __init__(self, db: Session) -> None:
        self._history = NavHistoryRepository(db)
        self._holdings = HoldingRepository(db)

    def get_history(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        scheme_codes: list[str] | None = None,
    ) -> list[NavHistoryEntry]:
        return list(self._history.find_history(start_date, end_date, scheme_codes or None))

    def get_daily_changes(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        scheme_codes: list[str] | None = None,
    ) -> list[NavChange]:
        return calculate_daily_changes(self.get_history(start_date, end_date, scheme_codes))

    def get_portfolio_changes(
        self,
        user_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[NavChange]:
        """Daily changes for the schemes a user holds; empty if they hold none."""
        scheme_codes = self._holdings.find_scheme_codes(user_id=user_id)
        if not scheme_codes:
            logger.info("User %s has no holdings with scheme codes", user_id)
            return []
        return calculate_daily_changes(
            self._history.find_history(start_date, end_date, scheme_codes)
        )
