"""Pydantic schemas for NAV endpoints.

Responses are serialized in camelCase (``updatedCount``,
``totalSchemesFetched``) for the browser client.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model emitting camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class NavUpdateDiagnostics(CamelModel):
    """Per-run details useful to an operator."""

    trigger: str
    held_scheme_codes: int = Field(..., description="Distinct scheme codes across holdings")
    matched_scheme_codes: list[str] = Field(default_factory=list)
    unmatched_scheme_codes: list[str] = Field(
        default_factory=list, description="Held scheme codes missing from the feed"
    )
    skipped_scheme_codes: list[str] = Field(
        default_factory=list, description="Matched schemes skipped for an unresolvable date"
    )
    snapshots_written: int = 0
    history_created: int = 0
    history_updated: int = 0
    history_unchanged: int = 0
    history_failed: int = 0
    parse_stats: dict[str, int] = Field(default_factory=dict)


class NavUpdateResponse(CamelModel):
    """Successful on-demand NAV update."""

    success: bool = True
    message: str
    updated_count: int = Field(..., description="Holdings whose cached NAV was refreshed")
    total_schemes_fetched: int = Field(..., description="Schemes parsed from the feed")
    timestamp: datetime
    diagnostics: NavUpdateDiagnostics


class NavUpdateErrorResponse(CamelModel):
    """Failed on-demand NAV update."""

    success: bool = False
    error: str
    detail: str | None = None


class NavSnapshotResponse(CamelModel):
    """Stored latest NAV for a scheme."""

    scheme_code: str
    scheme_name: str
    current_nav: float
    nav_date: date
    last_updated: datetime


class NavLookupItem(CamelModel):
    """Live NAV read from the feed, not persisted."""

    scheme_code: str
    scheme_name: str
    nav: float
    nav_date: date


class NavHistoryItem(CamelModel):
    """One stored history row."""

    id: str
    scheme_code: str
    scheme_name: str
    nav: float
    nav_date: date = Field(..., alias="date")
    year: int
    month: int
    year_month: str


class NavChangeItem(CamelModel):
    """Day-over-day change between two stored NAVs."""

    scheme_code: str
    scheme_name: str
    nav_date: date = Field(..., alias="date")
    year: int
    month: int
    year_month: str
    current_nav: float
    previous_nav: float
    change_amount: float
    change_percent: float
