"""Repository-specific exceptions.

The NAV writer catches RepositoryError alongside SQLAlchemyError, so every
data access failure here ends a batch the same way a database error does.
"""


class RepositoryError(Exception):
    """Base exception for repository operations."""


class NotFoundError(RepositoryError):
    """Entity not found in database."""

    def __init__(self, entity_type: str, identifier: str | int):
        self.entity_type = entity_type
        self.identifier = identifier
        super().__init__(f"{entity_type} not found: {identifier}")


class UnsupportedDialectError(RepositoryError):
    """Database backend has no ``INSERT ... ON CONFLICT`` support wired up."""

    def __init__(self, dialect: str):
        self.dialect = dialect
        super().__init__(f"Merge upsert not supported for dialect: {dialect}")
