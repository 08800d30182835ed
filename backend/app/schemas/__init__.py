"""Pydantic schemas for API validation."""

from app.schemas.nav import (
    NavChangeItem,
    NavHistoryItem,
    NavLookupItem,
    NavSnapshotResponse,
    NavUpdateDiagnostics,
    NavUpdateErrorResponse,
    NavUpdateResponse,
)

__all__ = [
    "NavChangeItem",
    "NavHistoryItem",
    "NavLookupItem",
    "NavSnapshotResponse",
    "NavUpdateDiagnostics",
    "NavUpdateErrorResponse",
    "NavUpdateResponse",
]
