"""Tests for NAV response schemas."""

from datetime import UTC, date, datetime
from decimal import Decimal

from app.schemas.nav import (
    NavHistoryItem,
    NavLookupItem,
    NavUpdateDiagnostics,
    NavUpdateErrorResponse,
    NavUpdateResponse,
)
from app.services.nav.feed_parser import FeedRecord


class TestNavUpdateResponse:
    """Test camelCase serialization of run results."""

    def test_dump_by_alias(self):
        response = NavUpdateResponse(
            message="Updated 1 NAV records and 2 investments",
            updated_count=2,
            total_schemes_fetched=3,
            timestamp=datetime(2025, 10, 29, 12, 30, tzinfo=UTC),
            diagnostics=NavUpdateDiagnostics(trigger="manual", held_scheme_codes=2),
        )

        data = response.model_dump(by_alias=True)

        assert data["success"] is True
        assert data["updatedCount"] == 2
        assert data["totalSchemesFetched"] == 3
        assert data["diagnostics"]["heldSchemeCodes"] == 2
        assert data["diagnostics"]["unmatchedSchemeCodes"] == []

    def test_round_trips_through_aliases(self):
        """Aliased output validates back into the same model."""
        original = NavUpdateErrorResponse(error="boom", detail="RuntimeError")

        restored = NavUpdateErrorResponse.model_validate(original.model_dump(by_alias=True))

        assert restored == original
        assert restored.success is False


class TestNavReadSchemas:
    """Test building read schemas from domain objects."""

    def test_lookup_item_from_feed_record(self):
        record = FeedRecord(
            scheme_code="120503",
            scheme_name="Sample Fund",
            nav=Decimal("45.6700"),
            nav_date="2025-10-29",
        )

        item = NavLookupItem.model_validate(record)

        assert item.nav == 45.67
        assert item.nav_date == date(2025, 10, 29)

    def test_history_item_serializes_date_key(self):
        item = NavHistoryItem(
            id="120503_2025-10-29",
            scheme_code="120503",
            scheme_name="Sample Fund",
            nav=45.67,
            nav_date=date(2025, 10, 29),
            year=2025,
            month=10,
            year_month="2025-10",
        )

        data = item.model_dump(by_alias=True, mode="json")

        assert data["date"] == "2025-10-29"
        assert data["yearMonth"] == "2025-10"
        assert "navDate" not in data
