"""
Daily NAV Update DAG

Pulls the AMFI NAVAll.txt feed and propagates the day's NAVs into holdings,
NAV snapshots and NAV history.

Schedule: 18:00 Asia/Kolkata, Monday to Friday
- AMFI publishes the day's NAVs in the evening (IST)
- No retries: a failed run is logged and the next business day catches up
"""

import logging
import os
import sys
from datetime import datetime

from airflow.sdk import dag, task
from airflow.timetables.trigger import CronTriggerTimetable

# Add dags folder to path for local imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from shared_db import SessionLocal

logger = logging.getLogger(__name__)

BACKEND_PATH = os.getenv("BACKEND_PATH", "/opt/airflow/backend")
NAV_SCHEDULE = "0 18 * * 1-5"
NAV_TIMEZONE = "Asia/Kolkata"

default_args = {
    "owner": "nav_tracker",
    "depends_on_past": False,
    "email_on_failure": False,
    "email_on_retry": False,
    "retries": 0,
}


@dag(
    dag_id="daily_nav_update",
    default_args=default_args,
    description="Refresh mutual fund NAVs from the AMFI feed",
    schedule=CronTriggerTimetable(NAV_SCHEDULE, timezone=NAV_TIMEZONE),
    start_date=datetime(2026, 1, 1),
    catchup=False,
    max_active_runs=1,
    tags=["nav", "daily", "amfi"],
)
def daily_nav_update():
    """DAG wrapping the backend NAV ingestion pipeline."""

    @task(task_id="update_navs")
    def update_navs() -> dict[str, int | str]:
        """Run the pipeline in-process; failures are logged, never raised."""
        if BACKEND_PATH not in sys.path:
            sys.path.insert(0, BACKEND_PATH)
        from app.services.nav.triggers import run_scheduled_nav_update

        result = run_scheduled_nav_update(SessionLocal)
        if result.get("status") == "success":
            logger.info(
                "NAV update complete: %s investments updated, %s schemes fetched",
                result.get("updated"),
                result.get("schemes_fetched"),
            )
        else:
            logger.error("NAV update failed (%s): %s", result.get("reason"), result.get("error"))
        return result

    update_navs()


# Instantiate the DAG
dag_instance = daily_nav_update()
