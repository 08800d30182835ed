"""AMFI NAV feed client."""

import logging

from app.config import settings
from app.services.nav.exceptions import NavFeedError
from app.services.nav.feed_parser import NavFeedParseResult, parse_nav_feed
from app.services.shared.http_client import HTTPClient, HTTPClientError

logger = logging.getLogger(__name__)


class AmfiNavClient(HTTPClient):
    """Downloads NAVAll.txt (a multi-megabyte text/plain body, no auth).

    Usage:
        with AmfiNavClient() as client:
            parsed = client.fetch_navs()
    """

    def __init__(
        self,
        feed_url: str | None = None,
        timeout: float | None = None,
        max_attempts: int | None = None,
    ) -> None:
        super().__init__(
            timeout=timeout if timeout is not None else settings.nav_feed_timeout,
            max_retries=max_attempts if max_attempts is not None else settings.nav_feed_max_attempts,
            headers={"Accept": "text/plain"},
        )
        self.feed_url = feed_url or settings.nav_feed_url

    def fetch_feed_text(self) -> str:
        """Fetch the raw feed body.

        Raises:
            NavFeedError: On transport failure or an empty body
        """
        logger.info("Fetching NAV feed from %s", self.feed_url)
        try:
            text = self.get_text(self.feed_url)
        except HTTPClientError as e:
            raise NavFeedError(f"Failed to fetch NAV feed: {e}", status_code=e.status_code) from e

        if not text.strip():
            raise NavFeedError("NAV feed returned an empty body")

        logger.info("Fetched NAV feed (%d bytes)", len(text))
        return text

    def fetch_navs(self) -> NavFeedParseResult:
        """Fetch and parse the feed."""
        return parse_nav_feed(self.fetch_feed_text())
