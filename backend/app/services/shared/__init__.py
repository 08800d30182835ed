"""Shared utilities and base classes for services layer.

- HTTPClient: Base class for external feed clients with retry logic
- HTTPClientError: Exception for HTTP client failures
- utc_now: Naive UTC timestamp used for stored audit columns
"""

from .http_client import HTTPClient, HTTPClientError
from .time_utils import utc_now

__all__ = [
    "HTTPClient",
    "HTTPClientError",
    "utc_now",
]
