"""Services layer - business logic and external integrations.

This module is organized into domain-based subpackages:
- nav/: AMFI NAV ingestion pipeline and NAV history analysis
- repositories/: Data access layer
- shared/: Shared utilities

Common imports for convenience:
    from app.services import HoldingRepository, NavSnapshotRepository
"""

# Re-export commonly used components for convenience
from app.services.repositories import (
    HoldingRepository,
    NavHistoryRepository,
    NavSnapshotRepository,
    NotFoundError,
    RepositoryError,
)

__all__ = [
    # Repositories
    "HoldingRepository",
    "NavHistoryRepository",
    "NavSnapshotRepository",
    "NotFoundError",
    "RepositoryError",
]
