"""Database sessions for the NAV DAGs.

The DAG hands ``SessionLocal`` to the backend's scheduled trigger, which
opens and closes one session per run.
"""

import os

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Same .env the backend reads
load_dotenv(os.path.join(os.getenv("BACKEND_PATH", "/opt/airflow/backend"), ".env"))


def airflow_database_url() -> str:
    """DATABASE_URL rewritten for the Airflow containers.

    They cannot resolve the backend compose network's ``postgres`` host and
    reach it through the Docker host instead.
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        raise ValueError("DATABASE_URL not found in environment variables")
    return url.replace("postgres:5432", "host.docker.internal:5432")


engine = create_engine(
    airflow_database_url(),
    pool_size=2,
    max_overflow=2,
    pool_recycle=1800,
    pool_pre_ping=True,
    isolation_level="READ COMMITTED",
    connect_args={"options": "-c lock_timeout=10000"},  # 10s
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)
