"""Forward-only row cursor over one executed DB-API statement."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any, Generic, Optional, TypeVar

from ...core.types import RowMapping
from ...errors import CursorInvalidatedError, QueryExecutionFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")

_OPEN = "open"
_EXHAUSTED = "exhausted"
_CLOSED = "closed"
_INVALIDATED = "invalidated"


def row_to_mapping(cursor: Any, row: Any) -> RowMapping:
    """Copy one driver row into a fresh dict.

    Supports mapping rows directly and tuple/list rows via
    `cursor.description`.
    """

    if isinstance(row, Mapping):
        return dict(row)

    if isinstance(row, (tuple, list)):
        desc = getattr(cursor, "description", None)
        if not desc:
            raise TypeError("Cursor has no description; cannot map tuple rows to dict.")
        cols = [d[0] for d in desc]
        return dict(zip(cols, row))

    keys = getattr(row, "keys", None)
    if callable(keys):
        return {key: row[key] for key in keys()}

    raise TypeError(f"Unsupported row type: {type(row)}")


class RowCursor(Generic[T]):
    """Single-pass, lazily fetched sequence of owned row values.

    Each step copies the driver row into a new dict and passes it through
    `transform`, so yielded values stay valid after the cursor advances.
    The cursor ends when exhausted or closed, and refuses to advance once
    a newer statement was issued on the same connection.
    """

    def __init__(
        self,
        cursor: Any,
        *,
        statement: str,
        transform: Optional[Callable[[RowMapping], T]] = None,
    ):
        self._cursor = cursor
        self._statement = statement
        self._transform = transform
        self._state = _OPEN

    @property
    def is_open(self) -> bool:
        return self._state == _OPEN

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        if self._state == _INVALIDATED:
            raise CursorInvalidatedError(
                f"Cursor for '{self._statement}' was invalidated by a newer statement."
            )
        if self._state != _OPEN:
            raise StopIteration

        try:
            row = self._cursor.fetchone()
        except Exception as exc:
            self._release(_CLOSED)
            raise QueryExecutionFailure(
                f"Fetching rows for '{self._statement}' failed: {exc}"
            ) from exc

        if row is None:
            self._release(_EXHAUSTED)
            raise StopIteration

        mapped = row_to_mapping(self._cursor, row)
        if self._transform is None:
            return mapped  # type: ignore[return-value]
        return self._transform(mapped)

    def invalidate(self) -> None:
        """Mark an unfinished cursor unusable; finished cursors are left as is."""

        if self._state == _OPEN:
            logger.debug("Invalidating open cursor for %s", self._statement)
            self._release(_INVALIDATED)

    def close(self) -> None:
        if self._state == _OPEN:
            self._release(_CLOSED)

    def _release(self, state: str) -> None:
        self._state = state
        close = getattr(self._cursor, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> RowCursor[T]:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()
