"""Holding model - one row per user mutual-fund investment."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.database import Base


class Holding(Base):
    """A user's mutual-fund investment transaction.

    Buy/sell columns are owned by the investment CRUD surface. The NAV
    ingestion pipeline only writes the cached ``current_nav``,
    ``current_nav_date`` and ``nav_last_updated`` columns.

    ``scheme_code`` is a weak reference to ``nav_snapshots.scheme_code``:
    looked up, never enforced.
    """

    __tablename__ = "holdings"
    __table_args__ = (
        Index("idx_holdings_user", "user_id"),
        Index("idx_holdings_scheme_code", "scheme_code"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(128))
    fund_name: Mapped[str] = mapped_column(String(255))
    scheme_code: Mapped[str | None] = mapped_column(String(20))

    buy_date: Mapped[date]
    buy_nav: Mapped[Decimal] = mapped_column(Numeric(15, 4))
    buy_quantity: Mapped[Decimal] = mapped_column(Numeric(20, 4))
    sell_date: Mapped[date | None]
    sell_nav: Mapped[Decimal | None] = mapped_column(Numeric(15, 4))
    sell_quantity: Mapped[Decimal | None] = mapped_column(Numeric(20, 4))

    # Cached latest NAV, refreshed by the ingestion pipeline
    current_nav: Mapped[Decimal | None] = mapped_column(Numeric(15, 4))
    current_nav_date: Mapped[date | None]
    nav_last_updated: Mapped[datetime | None]

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Holding(id={self.id}, user_id={self.user_id}, scheme_code={self.scheme_code}, current_nav={self.current_nav})>"
