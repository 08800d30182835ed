"""Holding data access layer.

The NAV pipeline reads scheme codes from holdings and writes only their
cached NAV columns; everything else on a holding belongs to the CRUD layer.
"""

import logging
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.models import Holding

logger = logging.getLogger(__name__)


class HoldingRepository:
    """Centralized holding data access.

    Naming conventions:
    - find_* : Query that may return None or empty list
    - update_* : Modify existing records
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_scheme_codes(self, user_id: str | None = None) -> list[str]:
        """Distinct non-null scheme codes across holdings (optionally one user's)."""
        query = self._db.query(Holding.scheme_code).filter(Holding.scheme_code.isnot(None))
        if user_id is not None:
            query = query.filter(Holding.user_id == user_id)
        return [code for (code,) in query.distinct().order_by(Holding.scheme_code).all()]

    def update_cached_nav(
        self,
        scheme_code: str,
        nav: Decimal,
        nav_date: date,
        updated_at: datetime,
    ) -> int:
        """Set the cached NAV on every holding of a scheme (does not commit).

        Returns:
            Number of holdings updated
        """
        stmt = (
            update(Holding)
            .where(Holding.scheme_code == scheme_code)
            .values(
                current_nav=nav,
                current_nav_date=nav_date,
                nav_last_updated=updated_at,
            )
            .execution_options(synchronize_session="fetch")
        )
        result = self._db.execute(stmt)
        return result.rowcount or 0
