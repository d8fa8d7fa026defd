"""Public port exports for concrete adapter implementations."""

from .db_api import (
    ConnectionManager,
    Database,
    Dialect,
    PostgresDialect,
    PreparedStatement,
    RowCursor,
    SQLiteDialect,
)

__all__ = [
    "ConnectionManager",
    "Database",
    "PreparedStatement",
    "RowCursor",
    "Dialect",
    "SQLiteDialect",
    "PostgresDialect",
]
