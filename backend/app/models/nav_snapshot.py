"""Latest known NAV per scheme."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class NavSnapshot(Base):
    """Materialized "latest NAV" cache, independent of any holding.

    Merge-upserted by scheme code on every pipeline run; never deleted by it.
    """

    __tablename__ = "nav_snapshots"

    scheme_code: Mapped[str] = mapped_column(String(20), primary_key=True)
    scheme_name: Mapped[str] = mapped_column(String(255))
    current_nav: Mapped[Decimal] = mapped_column(Numeric(15, 4), comment="Latest published NAV")
    nav_date: Mapped[date]
    last_updated: Mapped[datetime]

    def __repr__(self) -> str:
        return f"<NavSnapshot(scheme_code={self.scheme_code}, nav_date={self.nav_date}, current_nav={self.current_nav})>"
