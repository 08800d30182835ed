"""Daily NAV history model."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, Index, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.database import Base


def history_key(scheme_code: str, nav_date: str) -> str:
    """Deterministic identity of a history row, e.g. ``120503_2025-10-29``."""
    return f"{scheme_code}_{nav_date}"


class NavHistoryEntry(Base):
    """One NAV per (scheme code, calendar date).

    Append-mostly ledger: a row is created once per key and afterwards only
    updated in place when a corrected NAV arrives for the same date.
    """

    __tablename__ = "nav_history"
    __table_args__ = (
        UniqueConstraint("scheme_code", "date", name="uq_nav_history_scheme_date"),
        Index("idx_nav_history_scheme_date", "scheme_code", "date"),
        Index("idx_nav_history_year_month", "year_month"),
    )

    id: Mapped[str] = mapped_column(String(40), primary_key=True)
    scheme_code: Mapped[str] = mapped_column(String(20))
    scheme_name: Mapped[str] = mapped_column(String(255))
    nav: Mapped[Decimal] = mapped_column(Numeric(15, 4))
    nav_date: Mapped[date] = mapped_column("date", Date)
    year: Mapped[int]
    month: Mapped[int]
    year_month: Mapped[str] = mapped_column(String(7))
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now())

    def __repr__(self) -> str:
        return f"<NavHistoryEntry(id={self.id}, nav={self.nav})>"
