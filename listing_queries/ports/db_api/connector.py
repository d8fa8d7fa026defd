"""Single-connection manager for the listing database."""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable
from typing import Any, Optional, Tuple

from ...config import ConnectionSettings
from ...errors import ConnectionFailure
from .database import Database
from .dialects import Dialect, PostgresDialect

logger = logging.getLogger(__name__)

POSTGRES_DRIVERS = ("psycopg", "psycopg2")


def load_postgres_connect() -> Tuple[str, Callable[..., Any]]:
    """Return the first importable PostgreSQL driver name and its `connect`.

    Raises:
        ConnectionFailure: If neither `psycopg` nor `psycopg2` is installed.
    """

    for module_name in POSTGRES_DRIVERS:
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            continue
        connect = getattr(module, "connect", None)
        if connect is not None:
            return module_name, connect
    raise ConnectionFailure(
        "No PostgreSQL driver found. Install dependency: pip install psycopg"
    )


class ConnectionManager:
    """Opens and owns exactly one database connection.

    With no `connect` callable the manager connects to PostgreSQL through
    `psycopg` (or `psycopg2`) using the settings' host, user, password and
    database name. A custom `connect` is called with no arguments and must
    be paired with the dialect matching its driver.
    """

    def __init__(
        self,
        settings: ConnectionSettings,
        *,
        connect: Optional[Callable[[], Any]] = None,
        dialect: Optional[Dialect] = None,
    ):
        self.settings = settings
        self._connect = connect
        self.dialect = dialect or PostgresDialect()
        self._database: Database | None = None

    @property
    def is_open(self) -> bool:
        return self._database is not None and not self._database.closed

    @property
    def database(self) -> Database:
        if not self.is_open or self._database is None:
            raise RuntimeError("connection is not open")
        return self._database

    def _raw_connect(self) -> Any:
        if self._connect is not None:
            return self._connect()

        driver, connect = load_postgres_connect()
        conn = connect(**self.settings.connect_kwargs())
        logger.debug("Connected with %s", driver)
        return conn

    def open(self) -> Database:
        """Open the connection and wrap it in a `Database` adapter.

        Raises:
            ConnectionFailure: If the driver is missing or refuses the connection.
            RuntimeError: If this manager already holds an open connection.
        """

        if self.is_open:
            raise RuntimeError("connection is already open")

        try:
            conn = self._raw_connect()
        except ConnectionFailure:
            raise
        except Exception as exc:
            raise ConnectionFailure(
                f"Could not connect to database '{self.settings.database}' "
                f"at {self.settings.host} as '{self.settings.user}': {exc}"
            ) from exc

        if isinstance(self.dialect, PostgresDialect) and hasattr(conn, "autocommit"):
            conn.autocommit = True

        self._database = Database(conn, self.dialect)
        logger.info(
            "Opened %s connection to %s/%s",
            self.dialect.name,
            self.settings.host,
            self.settings.database,
        )
        return self._database

    def close(self) -> None:
        """Close the connection if open; repeated calls are no-ops."""

        if self._database is None:
            return
        database = self._database
        self._database = None
        if not database.closed:
            database.close()
            logger.info("Closed connection to %s", self.settings.database)

    def __enter__(self) -> Database:
        return self.open()

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()
