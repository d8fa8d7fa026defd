"""DB-API adapter implementation for the core database port."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional

from ...core.statements import StatementTemplate
from ...core.types import BindValues, DriverParams, RowMapping
from ...errors import QueryExecutionFailure, StatementPreparationFailure
from .cursor import RowCursor
from .dialects import CompiledStatement, Dialect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedStatement:
    """A template the engine has accepted, compiled for the adapter's dialect."""

    template: StatementTemplate
    compiled: CompiledStatement

    @property
    def name(self) -> str:
        return self.template.name


class Database:
    """Thin DB-API wrapper owning one connection and its single in-flight cursor."""

    def __init__(self, conn: Any, dialect: Dialect):
        """Create database adapter.

        Args:
            conn: DB-API connection object.
            dialect: Concrete SQL dialect instance.
        """

        self._closed = False
        self.conn: Any | None = conn
        self.dialect = dialect
        self._active: RowCursor[Any] | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    def _require_open_connection(self) -> Any:
        if self._closed or self.conn is None:
            raise RuntimeError("connection is closed")
        return self.conn

    def _should_begin_sqlite_transaction(self, conn: Any) -> bool:
        if self.dialect.name != "sqlite":
            return False
        if getattr(conn, "isolation_level", None) is not None:
            return False
        return not bool(getattr(conn, "in_transaction", False))

    def _new_cursor(self) -> Any:
        conn = self._require_open_connection()
        if self._active is not None:
            self._active.invalidate()
            self._active = None
        return conn.cursor()

    @contextlib.contextmanager
    def transaction(self):
        """Provide commit/rollback transaction scope."""

        conn = self._require_open_connection()
        try:
            if self._should_begin_sqlite_transaction(conn):
                conn.execute("BEGIN")
            yield
        except BaseException:
            self._rollback(conn)
            raise

        try:
            conn.commit()
        except Exception as exc:
            self._rollback(conn)
            raise QueryExecutionFailure(f"Commit failed: {exc}") from exc

    def _rollback(self, conn: Any) -> None:
        try:
            conn.rollback()
        except Exception as exc:
            raise QueryExecutionFailure(f"Rollback failed: {exc}") from exc

    def execute(self, sql: str, params: Optional[DriverParams] = None) -> Any:
        """Execute raw SQL with optional driver parameters and return the cursor."""

        cur = self._new_cursor()
        try:
            if params is None:
                cur.execute(sql)
            else:
                cur.execute(sql, params)
        except Exception:
            cur.close()
            raise
        return cur

    def prepare(self, template: StatementTemplate) -> PreparedStatement:
        """Have the engine validate `template` and return its prepared form.

        Raises:
            StatementPreparationFailure: If the engine rejects the statement.
        """

        self._require_open_connection()
        for sql, params in self.dialect.validation_steps(template):
            try:
                self.execute(sql, params).close()
            except Exception as exc:
                raise StatementPreparationFailure(
                    f"Statement '{template.name}' was rejected: {exc}"
                ) from exc

        logger.debug("Prepared statement %s", template.name)
        return PreparedStatement(template, self.dialect.compile(template))

    def _execute_bound(self, prepared: PreparedStatement, values: BindValues | None) -> Any:
        bound = prepared.template.bind(values)
        params = self.dialect.driver_params(prepared.compiled, bound)
        self._require_open_connection()
        logger.debug("Executing %s", prepared.name)
        try:
            cur = self.execute(prepared.compiled.sql, params)
        except Exception as exc:
            raise QueryExecutionFailure(
                f"Statement '{prepared.name}' failed: {exc}"
            ) from exc
        return cur

    def query(
        self,
        prepared: PreparedStatement,
        values: BindValues | None = None,
        *,
        transform: Optional[Callable[[RowMapping], Any]] = None,
    ) -> RowCursor[Any]:
        """Execute a read statement and return a lazy cursor over its rows.

        Raises:
            BindingError: If `values` do not match the declared parameters.
            QueryExecutionFailure: If the engine fails the statement.
        """

        cur = self._execute_bound(prepared, values)
        cursor: RowCursor[Any] = RowCursor(cur, statement=prepared.name, transform=transform)
        self._active = cursor
        return cursor

    def run(self, prepared: PreparedStatement, values: BindValues | None = None) -> int:
        """Execute a write statement and return the affected row count."""

        cur = self._execute_bound(prepared, values)
        try:
            return cur.rowcount
        finally:
            cur.close()

    def close(self) -> None:
        """Close the underlying connection; repeated calls are no-ops."""

        if self._closed:
            return
        if self._active is not None:
            self._active.invalidate()
            self._active = None
        conn = self.conn
        self._closed = True
        self.conn = None
        close = getattr(conn, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()
