"""Exception hierarchy raised by the listing data-access layer."""

from __future__ import annotations


class ListingQueryError(Exception):
    """Base class for every error raised by `listing_queries`."""


class ConnectionFailure(ListingQueryError):
    """Raised when the database connection cannot be opened."""


class StatementPreparationFailure(ListingQueryError):
    """Raised when a statement template is malformed or rejected by the engine."""


class QueryExecutionFailure(ListingQueryError):
    """Raised when executing a bound statement or reading its rows fails."""


class BindingError(QueryExecutionFailure, ValueError):
    """Raised when call values do not match a template's declared parameters."""


class CursorInvalidatedError(QueryExecutionFailure):
    """Raised when a cursor is advanced after a newer statement was issued."""
