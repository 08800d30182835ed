"""Database initialization script with seed data."""

from datetime import date
from decimal import Decimal

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from app.database import Base, SessionLocal, engine
from app.models import Holding


def create_tables(bind: Engine | None = None) -> None:
    """Create all database tables."""
    print("Creating database tables...")
    Base.metadata.create_all(bind=bind or engine)
    print("Tables created successfully!")


def seed_data(db: Session, user_id: str = "demo-user") -> list[Holding]:
    """Seed a few holdings so the NAV pipeline has scheme codes to match."""
    print("\nSeeding database with sample holdings...")

    holdings = [
        Holding(
            user_id=user_id,
            fund_name="Axis Bluechip Fund - Direct Plan - Growth",
            scheme_code="120465",
            buy_date=date(2023, 4, 3),
            buy_nav=Decimal("45.2300"),
            buy_quantity=Decimal("221.0000"),
        ),
        Holding(
            user_id=user_id,
            fund_name="Parag Parikh Flexi Cap Fund - Direct Plan - Growth",
            scheme_code="122639",
            buy_date=date(2022, 11, 15),
            buy_nav=Decimal("50.1100"),
            buy_quantity=Decimal("199.5600"),
        ),
        Holding(
            user_id=user_id,
            fund_name="Parag Parikh Flexi Cap Fund - Direct Plan - Growth",
            scheme_code="122639",
            buy_date=date(2024, 1, 8),
            buy_nav=Decimal("68.4200"),
            buy_quantity=Decimal("73.0800"),
        ),
    ]
    db.add_all(holdings)
    db.commit()

    print(f"Seeded {len(holdings)} holdings for {user_id}")
    return holdings


if __name__ == "__main__":
    create_tables()
    session = SessionLocal()
    try:
        seed_data(session)
    finally:
        session.close()
