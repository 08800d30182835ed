"""Dialect-aware merge-upsert statements.

``INSERT ... ON CONFLICT DO UPDATE`` is spelled the same way on PostgreSQL
and SQLite, but each dialect ships its own ``insert`` construct.
"""

from sqlalchemy import Table
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from app.services.repositories.exceptions import UnsupportedDialectError

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def merge_insert(db: Session, table: Table, values: dict):
    """Build a dialect-specific INSERT for ``table`` supporting ``on_conflict_do_update``.

    Args:
        db: Session whose bind decides the dialect
        table: Target table
        values: Column name -> value

    Raises:
        UnsupportedDialectError: If the database dialect has no upsert support here
    """
    dialect = db.get_bind().dialect.name
    insert = _INSERT_BY_DIALECT.get(dialect)
    if insert is None:
        raise UnsupportedDialectError(dialect)
    return insert(table).values(**values)
