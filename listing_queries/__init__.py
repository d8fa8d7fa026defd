"""Data-access layer over a business listing database."""

from .config import ConnectionSettings, load_settings
from .core import (
    ParamType,
    StatementRegistry,
    StatementTemplate,
)
from .errors import (
    BindingError,
    ConnectionFailure,
    CursorInvalidatedError,
    ListingQueryError,
    QueryExecutionFailure,
    StatementPreparationFailure,
)
from .ports import ConnectionManager, Database, Dialect, PostgresDialect, RowCursor, SQLiteDialect
from .queries import ListingQueries

__all__ = [
    "ListingQueries",
    "ConnectionSettings",
    "load_settings",
    "ConnectionManager",
    "Database",
    "RowCursor",
    "Dialect",
    "PostgresDialect",
    "SQLiteDialect",
    "ParamType",
    "StatementTemplate",
    "StatementRegistry",
    "ListingQueryError",
    "ConnectionFailure",
    "StatementPreparationFailure",
    "QueryExecutionFailure",
    "BindingError",
    "CursorInvalidatedError",
]
