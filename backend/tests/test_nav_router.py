"""Tests for the NAV API endpoints."""

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from app.constants import NAV_RUN_LOCK_NAME
from app.services.nav.exceptions import NavFeedError
from app.services.nav.run_lock import RunLock
from app.services.repositories import NavHistoryRepository, NavSnapshotRepository

WRITTEN_AT = datetime(2025, 10, 30, 18, 0)


@pytest.fixture
def mock_feed(feed_client):
    """Route the pipeline's default client to the fake feed."""
    with patch("app.services.nav.pipeline.AmfiNavClient") as mock_client_cls:
        mock_client_cls.return_value.__enter__.return_value = feed_client
        yield feed_client


class TestUpdateNavsEndpoint:
    """Test the on-demand trigger endpoint."""

    def test_preflight_returns_empty_204(self, client, mock_feed):
        response = client.options("/api/nav/update")

        assert response.status_code == 204
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        mock_feed.fetch_navs.assert_not_called()

    def test_browser_preflight_returns_empty_204(self, client, mock_feed):
        response = client.options(
            "/api/nav/update",
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 204
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert "POST" in response.headers["access-control-allow-methods"]
        assert "content-type" not in response.headers
        mock_feed.fetch_navs.assert_not_called()

    def test_get_runs_pipeline(self, client, make_holding, mock_feed):
        make_holding("120465")
        make_holding("120465")
        make_holding("999999")

        response = client.get("/api/nav/update")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["updatedCount"] == 2
        assert data["totalSchemesFetched"] == 3
        assert data["message"] == "Updated 1 NAV records and 2 investments"
        assert "timestamp" in data
        diagnostics = data["diagnostics"]
        assert diagnostics["trigger"] == "manual"
        assert diagnostics["matchedSchemeCodes"] == ["120465"]
        assert diagnostics["unmatchedSchemeCodes"] == ["999999"]
        assert diagnostics["historyCreated"] == 1
        assert diagnostics["parseStats"]["accepted"] == 3

    def test_post_runs_pipeline(self, client, mock_feed):
        response = client.post("/api/nav/update")

        assert response.status_code == 200
        assert response.json()["updatedCount"] == 0

    def test_feed_failure_returns_structured_500(self, client, mock_feed):
        mock_feed.fetch_navs.side_effect = NavFeedError("Failed to fetch NAV feed: HTTP 503")

        response = client.get("/api/nav/update")

        assert response.status_code == 500
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Failed to fetch NAV feed: HTTP 503"
        assert data["detail"]

    def test_unexpected_failure_returns_500(self, client):
        with patch("app.routers.nav.run_manual_nav_update", side_effect=RuntimeError("boom")):
            response = client.post("/api/nav/update")

        assert response.status_code == 500
        assert response.json()["error"] == "boom"

    def test_detail_hidden_outside_debug(self, client):
        with (
            patch("app.routers.nav.settings") as mock_settings,
            patch("app.routers.nav.run_manual_nav_update", side_effect=RuntimeError("boom")),
        ):
            mock_settings.debug = False
            response = client.get("/api/nav/update")

        assert response.json()["detail"] == "RuntimeError"

    def test_held_lock_returns_409(self, client, db, mock_feed):
        RunLock(db, NAV_RUN_LOCK_NAME, ttl_seconds=60, owner="scheduled-run").acquire()

        with patch("app.services.nav.pipeline.settings") as mock_settings:
            mock_settings.nav_run_lock_enabled = True
            mock_settings.nav_run_lock_ttl_seconds = 60
            response = client.get("/api/nav/update")

        assert response.status_code == 409
        assert response.json()["success"] is False
        mock_feed.fetch_navs.assert_not_called()


class TestSnapshotEndpoint:
    """Test stored NAV reads."""

    def test_get_snapshot(self, client, db):
        NavSnapshotRepository(db).upsert_snapshot(
            "120503", "Sample Fund", Decimal("45.6700"), date(2025, 10, 29), WRITTEN_AT
        )
        db.commit()

        response = client.get("/api/nav/snapshots/120503")

        assert response.status_code == 200
        data = response.json()
        assert data["schemeCode"] == "120503"
        assert data["currentNav"] == 45.67
        assert data["navDate"] == "2025-10-29"

    def test_missing_snapshot_404(self, client):
        response = client.get("/api/nav/snapshots/000000")

        assert response.status_code == 404


class TestLookupEndpoint:
    """Test live feed lookups."""

    def test_lookup(self, client, mock_feed):
        response = client.get("/api/nav/lookup", params={"scheme_codes": ["122639", "999999"]})

        assert response.status_code == 200
        assert response.json() == [
            {
                "schemeCode": "122639",
                "schemeName": "Parag Parikh Flexi Cap Fund - Direct Plan - Growth",
                "nav": 89.4521,
                "navDate": "2025-10-29",
            }
        ]

    def test_lookup_requires_codes(self, client):
        response = client.get("/api/nav/lookup")

        assert response.status_code == 422

    def test_lookup_feed_failure_502(self, client):
        failing = MagicMock()
        failing.fetch_navs.side_effect = NavFeedError("Failed to fetch NAV feed")
        with patch("app.services.nav.pipeline.AmfiNavClient") as mock_client_cls:
            mock_client_cls.return_value.__enter__.return_value = failing
            response = client.get("/api/nav/lookup", params={"scheme_codes": "122639"})

        assert response.status_code == 502


class TestHistoryEndpoints:
    """Test NAV history reads."""

    @pytest.fixture
    def history(self, db):
        repo = NavHistoryRepository(db)
        repo.upsert_entry("100", "Fund A", Decimal("10.0000"), date(2025, 10, 28), WRITTEN_AT)
        repo.upsert_entry("100", "Fund A", Decimal("10.5000"), date(2025, 10, 29), WRITTEN_AT)
        repo.upsert_entry("200", "Fund B", Decimal("50.0000"), date(2025, 10, 29), WRITTEN_AT)
        db.commit()

    def test_history(self, client, history):
        response = client.get("/api/nav/history", params={"scheme_codes": "100"})

        assert response.status_code == 200
        data = response.json()
        assert [row["id"] for row in data] == ["100_2025-10-29", "100_2025-10-28"]
        assert data[0]["date"] == "2025-10-29"
        assert data[0]["yearMonth"] == "2025-10"
        assert data[0]["nav"] == 10.5

    def test_history_date_range(self, client, history):
        response = client.get("/api/nav/history", params={"start_date": "2025-10-29"})

        assert [row["id"] for row in response.json()] == ["100_2025-10-29", "200_2025-10-29"]

    def test_history_changes(self, client, history):
        response = client.get("/api/nav/history/changes")

        assert response.status_code == 200
        assert response.json() == [
            {
                "schemeCode": "100",
                "schemeName": "Fund A",
                "date": "2025-10-29",
                "year": 2025,
                "month": 10,
                "yearMonth": "2025-10",
                "currentNav": 10.5,
                "previousNav": 10.0,
                "changeAmount": 0.5,
                "changePercent": 5.0,
            }
        ]

    def test_portfolio_changes(self, client, history, make_holding):
        make_holding("100", user_id="alice")

        response = client.get("/api/nav/portfolio/alice/changes")

        assert response.status_code == 200
        assert [row["schemeCode"] for row in response.json()] == ["100"]

    def test_portfolio_changes_empty(self, client, history):
        response = client.get("/api/nav/portfolio/nobody/changes")

        assert response.status_code == 200
        assert response.json() == []


class TestHealthEndpoints:
    """Test service endpoints."""

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_root(self, client):
        assert client.get("/").json()["status"] == "running"
