"""NAV ingestion exceptions.

Transport, format and persistence failures are kept apart because each
needs a different operator response even though all of them end a run.
"""


class NavIngestionError(Exception):
    """Base exception for NAV pipeline runs."""


class NavFeedError(NavIngestionError):
    """The feed could not be fetched (unreachable, non-2xx, empty body)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NavFeedFormatError(NavIngestionError):
    """The feed was fetched but yielded no usable rows."""

    def __init__(self, message: str, stats: dict[str, int] | None = None):
        super().__init__(message)
        self.stats = stats or {}


class NavPersistenceError(NavIngestionError):
    """The holdings/snapshot batch could not be committed."""


class PipelineBusyError(NavIngestionError):
    """Another run currently holds the ingestion lock."""

    def __init__(self, lock_name: str, owner: str):
        self.lock_name = lock_name
        self.owner = owner
        super().__init__(f"NAV update already running ({lock_name} held by {owner})")
