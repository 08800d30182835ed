"""Repository layer - data access abstraction.

Repositories handle all database queries, providing a clean interface
for services. Services should use repositories for data access rather
than directly querying SQLAlchemy models.

The Repository pattern separates data access from business logic:
- Repositories: Pure data access (queries, merge upserts, updates)
- Services: Business logic that uses repositories

Dependency direction: Services -> Repositories -> Models
"""

from .exceptions import NotFoundError, RepositoryError, UnsupportedDialectError
from .holding_repository import HoldingRepository
from .nav_history_repository import HistoryWriteOutcome, NavHistoryRepository
from .nav_snapshot_repository import NavSnapshotRepository

__all__ = [
    "HistoryWriteOutcome",
    "HoldingRepository",
    "NavHistoryRepository",
    "NavSnapshotRepository",
    "NotFoundError",
    "RepositoryError",
    "UnsupportedDialectError",
]
