"""NAV API router - on-demand ingestion and NAV read endpoints."""

import logging
import traceback
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.rate_limiter import limiter
from app.schemas.nav import (
    NavChangeItem,
    NavHistoryItem,
    NavLookupItem,
    NavSnapshotResponse,
    NavUpdateDiagnostics,
    NavUpdateErrorResponse,
    NavUpdateResponse,
)
from app.services.nav.exceptions import NavFeedError, NavIngestionError, PipelineBusyError
from app.services.nav.history_service import NavHistoryService
from app.services.nav.pipeline import NavIngestionPipeline, NavUpdateResult
from app.services.nav.triggers import run_manual_nav_update
from app.services.repositories import NavSnapshotRepository, NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/nav", tags=["nav"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    """Structured failure body; the traceback is attached only in debug mode."""
    body = NavUpdateErrorResponse(
        error=str(exc) or type(exc).__name__,
        detail="".join(traceback.format_exception(exc)) if settings.debug else type(exc).__name__,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


def _to_response(result: NavUpdateResult) -> NavUpdateResponse:
    outcome = result.persistence
    return NavUpdateResponse(
        message=result.message,
        updated_count=result.updated_count,
        total_schemes_fetched=result.total_schemes_fetched,
        timestamp=result.timestamp,
        diagnostics=NavUpdateDiagnostics(
            trigger=result.trigger,
            held_scheme_codes=result.held_scheme_codes,
            matched_scheme_codes=result.matched_scheme_codes,
            unmatched_scheme_codes=result.unmatched_scheme_codes,
            skipped_scheme_codes=outcome.skipped_scheme_codes,
            snapshots_written=outcome.snapshots_written,
            history_created=outcome.history_created,
            history_updated=outcome.history_updated,
            history_unchanged=outcome.history_unchanged,
            history_failed=outcome.history_failed,
            parse_stats=result.parse_stats,
        ),
    )


@router.options("/update", status_code=status.HTTP_204_NO_CONTENT)
def update_navs_preflight() -> Response:
    """Answer a cross-origin pre-flight without running the pipeline."""
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=CORS_HEADERS)


@router.api_route(
    "/update",
    methods=["GET", "POST"],
    response_model=NavUpdateResponse,
    responses={
        status.HTTP_409_CONFLICT: {"model": NavUpdateErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": NavUpdateErrorResponse},
    },
)
@limiter.limit(settings.nav_update_rate_limit)
def update_navs(request: Request, db: Session = Depends(get_db)):
    """Fetch the AMFI feed now and refresh holdings, snapshots and history.

    Always answers with a structured body: ``success: true`` with counters,
    or ``success: false`` with an error message.
    """
    try:
        result = run_manual_nav_update(db)
    except PipelineBusyError as e:
        logger.info("Manual NAV update rejected: %s", e)
        return _error_response(status.HTTP_409_CONFLICT, e)
    except NavIngestionError as e:
        logger.error("Manual NAV update failed: %s", e)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
    except Exception as e:
        logger.exception("Unexpected error in manual NAV update")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, e)

    return _to_response(result)


@router.get("/snapshots/{scheme_code}", response_model=NavSnapshotResponse)
def get_stored_nav(scheme_code: str, db: Session = Depends(get_db)):
    """Latest stored NAV for a scheme."""
    try:
        snapshot = NavSnapshotRepository(db).get_by_scheme_code(scheme_code)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return NavSnapshotResponse.model_validate(snapshot)


@router.get("/lookup", response_model=list[NavLookupItem])
def lookup_live_navs(
    scheme_codes: list[str] = Query(..., min_length=1, description="Scheme codes to look up"),
    db: Session = Depends(get_db),
):
    """Read current NAVs straight from the feed, e.g. when adding an investment.

    Nothing is stored. Codes missing from the feed are omitted.
    """
    try:
        found = NavIngestionPipeline(db).lookup(scheme_codes)
    except NavFeedError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e
    return [NavLookupItem.model_validate(record) for record in found.values()]


@router.get("/history", response_model=list[NavHistoryItem])
def get_nav_history(
    start_date: date | None = None,
    end_date: date | None = None,
    scheme_codes: list[str] | None = Query(None),
    db: Session = Depends(get_db),
):
    """Stored NAV history, newest first."""
    entries = NavHistoryService(db).get_history(start_date, end_date, scheme_codes)
    return [NavHistoryItem.model_validate(entry) for entry in entries]


@router.get("/history/changes", response_model=list[NavChangeItem])
def get_nav_changes(
    start_date: date | None = None,
    end_date: date | None = None,
    scheme_codes: list[str] | None = Query(None),
    db: Session = Depends(get_db),
):
    """Day-over-day NAV changes, newest first."""
    changes = NavHistoryService(db).get_daily_changes(start_date, end_date, scheme_codes)
    return [NavChangeItem.model_validate(change) for change in changes]


@router.get("/portfolio/{user_id}/changes", response_model=list[NavChangeItem])
def get_portfolio_nav_changes(
    user_id: str,
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
):
    """Day-over-day NAV changes for the schemes a user holds."""
    changes = NavHistoryService(db).get_portfolio_changes(user_id, start_date, end_date)
    return [NavChangeItem.model_validate(change) for change in changes]
