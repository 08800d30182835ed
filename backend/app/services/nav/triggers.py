"""Entry points that start a NAV pipeline run.

The HTTP router uses :func:`run_manual_nav_update` and reports failures to
its caller. The Airflow DAG uses :func:`run_scheduled_nav_update`, which has
no caller to report to: it logs and always returns normally so the scheduler
never sees a retryable failure.
"""

import logging
from collections.abc import Callable

from sqlalchemy.orm import Session

from app.constants import TriggerSource
from app.services.nav.amfi_client import AmfiNavClient
from app.services.nav.exceptions import NavFeedError, NavFeedFormatError, NavIngestionError
from app.services.nav.pipeline import NavIngestionPipeline, NavUpdateResult

logger = logging.getLogger(__name__)


def run_manual_nav_update(db: Session, client: AmfiNavClient | None = None) -> NavUpdateResult:
    """Run the pipeline on demand; exceptions propagate to the caller."""
    return NavIngestionPipeline(db, client=client).run(TriggerSource.MANUAL)


def run_scheduled_nav_update(
    session_factory: Callable[[], Session],
    client: AmfiNavClient | None = None,
) -> dict:
    """Run the daily scheduled update; never raises.

    Returns:
        Status dict for the scheduler's task log
    """
    logger.info("Starting scheduled NAV update")
    db = None
    try:
        db = session_factory()
        result = NavIngestionPipeline(db, client=client).run(TriggerSource.SCHEDULED)
        return {
            "status": "success",
            "updated": result.updated_count,
            "schemes_fetched": result.total_schemes_fetched,
            "unmatched": len(result.unmatched_scheme_codes),
            "history_failed": result.persistence.history_failed,
        }
    except NavFeedError as e:
        logger.error("Scheduled NAV update could not fetch feed: %s", e)
        return {"status": "failed", "reason": "feed_unavailable", "error": str(e)}
    except NavFeedFormatError as e:
        logger.error("Scheduled NAV update parsed no schemes: %s (%s)", e, e.stats)
        return {"status": "failed", "reason": "feed_format", "error": str(e)}
    except NavIngestionError as e:
        logger.error("Scheduled NAV update failed: %s", e)
        return {"status": "failed", "reason": type(e).__name__, "error": str(e)}
    except Exception as e:
        logger.exception("Unexpected error in scheduled NAV update")
        return {"status": "failed", "reason": "unexpected", "error": str(e)}
    finally:
        if db is not None:
            db.close()
