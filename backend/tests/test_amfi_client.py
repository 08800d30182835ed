"""Tests for the AMFI NAV feed client."""

from decimal import Decimal
from unittest.mock import patch

import pytest

from app.services.nav.amfi_client import AmfiNavClient
from app.services.nav.exceptions import NavFeedError
from app.services.shared.http_client import HTTPClientError


class TestAmfiNavClientInit:
    """Test AmfiNavClient initialization."""

    @patch("app.services.nav.amfi_client.settings")
    def test_init_with_settings(self, mock_settings):
        mock_settings.nav_feed_url = "https://feed.test/NAVAll.txt"
        mock_settings.nav_feed_timeout = 12.0
        mock_settings.nav_feed_max_attempts = 4

        client = AmfiNavClient()

        assert client.feed_url == "https://feed.test/NAVAll.txt"
        assert client.timeout == 12.0
        assert client.max_retries == 4

    def test_init_with_explicit_params(self):
        client = AmfiNavClient(feed_url="https://explicit.test/nav.txt", timeout=5.0, max_attempts=1)

        assert client.feed_url == "https://explicit.test/nav.txt"
        assert client.timeout == 5.0
        assert client.max_retries == 1
        assert client.default_headers == {"Accept": "text/plain"}


class TestAmfiNavClientFetch:
    """Test feed download and parsing."""

    def test_fetch_feed_text(self):
        client = AmfiNavClient(feed_url="https://feed.test/NAVAll.txt")
        with patch.object(client, "get_text", return_value="29-Oct-2025\n") as mock_get:
            assert client.fetch_feed_text() == "29-Oct-2025\n"

        mock_get.assert_called_once_with("https://feed.test/NAVAll.txt")

    def test_transport_error_becomes_feed_error(self):
        client = AmfiNavClient()
        error = HTTPClientError("HTTP 503: Service Unavailable", status_code=503)
        with patch.object(client, "get_text", side_effect=error):
            with pytest.raises(NavFeedError) as exc_info:
                client.fetch_feed_text()

        assert exc_info.value.status_code == 503
        assert exc_info.value.__cause__ is error

    def test_empty_body_is_feed_error(self):
        client = AmfiNavClient()
        with patch.object(client, "get_text", return_value="  \n\n"):
            with pytest.raises(NavFeedError, match="empty body"):
                client.fetch_feed_text()

    def test_fetch_navs_parses_body(self):
        client = AmfiNavClient()
        body = "29-Oct-2025\n120503;ISIN1;ISIN2;Sample Fund;45.6700;\n"
        with patch.object(client, "get_text", return_value=body):
            result = client.fetch_navs()

        assert result.records["120503"].nav == Decimal("45.6700")
        assert result.records["120503"].nav_date == "2025-10-29"
