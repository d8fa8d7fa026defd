"""DB-API adapter, cursor, connection manager, and dialect exports."""

from .connector import ConnectionManager, load_postgres_connect
from .cursor import RowCursor
from .database import Database, PreparedStatement
from .dialects import CompiledStatement, Dialect, PostgresDialect, SQLiteDialect

__all__ = [
    "CompiledStatement",
    "ConnectionManager",
    "Database",
    "Dialect",
    "PostgresDialect",
    "PreparedStatement",
    "RowCursor",
    "SQLiteDialect",
    "load_postgres_connect",
]
