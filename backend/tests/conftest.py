"""Shared fixtures: in-memory SQLite database, API client and feed fakes."""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import Holding
from app.rate_limiter import limiter
from app.services.nav.amfi_client import AmfiNavClient
from app.services.nav.feed_parser import parse_nav_feed

SAMPLE_FEED = """Scheme Code;ISIN Div Payout/ ISIN Growth;ISIN Div Reinvestment;Scheme Name;Net Asset Value;Date

Open Ended Schemes(Equity Scheme - Large Cap Fund)

Axis Mutual Fund

120465;INF846K01DP8;-;Axis Bluechip Fund - Direct Plan - Growth;58.1200;29-Oct-2025
120503;INF846K01EW2;-;Axis ELSS Tax Saver Fund - Direct Plan - Growth;45.6700;29-Oct-2025

PPFAS Mutual Fund

122639;INF879O01027;-;Parag Parikh Flexi Cap Fund - Direct Plan - Growth;89.4521;29-Oct-2025
100001;INF000000001;-;Unpriced Fund - Growth;N.A.;29-Oct-2025
"""


def build_feed_client(text: str = SAMPLE_FEED) -> MagicMock:
    """A stand-in AmfiNavClient whose fetch_navs parses ``text``."""
    client = MagicMock(spec=AmfiNavClient)
    client.fetch_navs.return_value = parse_nav_feed(text)
    return client


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    """Test client whose requests share the in-memory database."""
    limiter.reset()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_holding(db):
    """Factory for holdings; commits each one."""

    def _make_holding(scheme_code: str | None, user_id: str = "user-1", **overrides) -> Holding:
        values = {
            "user_id": user_id,
            "fund_name": f"Fund {scheme_code}",
            "scheme_code": scheme_code,
            "buy_date": date(2024, 1, 15),
            "buy_nav": Decimal("40.0000"),
            "buy_quantity": Decimal("100.0000"),
        }
        values.update(overrides)
        holding = Holding(**values)
        db.add(holding)
        db.commit()
        db.refresh(holding)
        return holding

    return _make_holding


@pytest.fixture
def make_feed_client():
    return build_feed_client


@pytest.fixture
def feed_client():
    return build_feed_client()
