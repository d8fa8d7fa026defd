"""Typed accessors over the business listing database."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date as date_type
from operator import itemgetter
from typing import Any, Optional

from .config import DEFAULT_HOST, ConnectionSettings
from .core.catalog import (
    ALL_STATES,
    BUSINESSES_IN_ZIP,
    BUSINESSES_IN_ZIP_WITH_CATEGORIES,
    CITIES_IN_STATE,
    INSERT_TIP,
    ZIPS_IN_CITY,
)
from .core.registry import StatementRegistry
from .core.types import RowMapping
from .errors import BindingError
from .ports.db_api.connector import ConnectionManager
from .ports.db_api.cursor import RowCursor
from .ports.db_api.database import Database
from .ports.db_api.dialects import Dialect


def _zip_text(row: RowMapping) -> Optional[str]:
    value = row["zip"]
    return None if value is None else str(value)


class ListingQueries:
    """Lookups over businesses and tip posting, on one shared connection.

    Usage:
        with ListingQueries("postgres", "secret", "yelpdb") as queries:
            states = set(queries.list_states())

    Read accessors return a `RowCursor`: single pass, lazily fetched, and
    invalidated by the next statement issued through this object. Yielded
    values are copies, so they may be kept after the cursor advances.
    The object is meant for sequential use from one thread.
    """

    def __init__(
        self,
        user: str,
        password: str,
        database: str,
        *,
        host: str = DEFAULT_HOST,
        connect: Optional[Callable[[], Any]] = None,
        dialect: Optional[Dialect] = None,
    ):
        self.settings = ConnectionSettings(
            user=user, password=password, database=database, host=host
        )
        self._manager = ConnectionManager(self.settings, connect=connect, dialect=dialect)
        self._registry = StatementRegistry()

    @classmethod
    def from_settings(
        cls,
        settings: ConnectionSettings,
        *,
        connect: Optional[Callable[[], Any]] = None,
        dialect: Optional[Dialect] = None,
    ) -> ListingQueries:
        return cls(
            settings.user,
            settings.password,
            settings.database,
            host=settings.host,
            connect=connect,
            dialect=dialect,
        )

    @property
    def is_open(self) -> bool:
        return self._manager.is_open

    @property
    def db(self) -> Database:
        """The open database adapter; raises `RuntimeError` before `open()`."""

        return self._manager.database

    def open(self) -> ListingQueries:
        """Open the connection and prepare every statement.

        Raises:
            ConnectionFailure: If the connection cannot be opened.
            StatementPreparationFailure: If the engine rejects a statement;
                the connection is closed again.
        """

        db = self._manager.open()
        try:
            self._registry.prepare_all(db)
        except BaseException:
            self._manager.close()
            raise
        return self

    def close(self) -> None:
        self._registry.clear()
        self._manager.close()

    def __enter__(self) -> ListingQueries:
        return self.open()

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def list_states(self) -> RowCursor[str]:
        """Distinct states that have at least one business."""

        return self.db.query(
            self._registry[ALL_STATES.name],
            transform=itemgetter("business_state"),
        )

    def list_cities(self, state: str) -> RowCursor[str]:
        """Distinct cities in `state`; empty for an unknown state."""

        return self.db.query(
            self._registry[CITIES_IN_STATE.name],
            {"state": state},
            transform=itemgetter("city"),
        )

    def list_zips(self, state: str, city: str) -> RowCursor[str]:
        """Distinct zip codes in `city`, `state`, as strings."""

        return self.db.query(
            self._registry[ZIPS_IN_CITY.name],
            {"state": state, "city": city},
            transform=_zip_text,
        )

    def list_businesses(
        self, zip: int | str, categories: Iterable[str] = ()
    ) -> RowCursor[RowMapping]:
        """Businesses in `zip`, each as a dict of `business` columns.

        With an empty `categories` every business in the zip that has a
        category is returned. Otherwise only businesses with at least one
        category in `categories` are returned.
        """

        if isinstance(categories, str):
            raise BindingError(
                "Parameter 'categories' expects a collection of names, got str."
            )
        selected = list(categories)
        if not selected:
            return self.db.query(self._registry[BUSINESSES_IN_ZIP.name], {"zip": zip})
        return self.db.query(
            self._registry[BUSINESSES_IN_ZIP_WITH_CATEGORIES.name],
            {"zip": zip, "categories": selected},
        )

    def insert_tip(
        self, user: str, business: str, body: str, date: str | date_type
    ) -> int:
        """Post a tip and return the number of rows inserted (0 or 1).

        The insert commits on success and rolls back on failure.
        """

        db = self.db
        with db.transaction():
            return db.run(
                self._registry[INSERT_TIP.name],
                {"user": user, "business": business, "date": date, "body": body},
            )
