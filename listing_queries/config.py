"""Connection settings for the listing database.

The data-access layer never reads the environment on its own; callers
(and the integration tests) decide whether to use `load_settings()`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_HOST = "127.0.0.1"


@dataclass(frozen=True)
class ConnectionSettings:
    """Credentials and location of the listing database.

    Attributes:
        user: Database role name.
        password: Password for `user`.
        database: Database holding the `business`, `Category` and `tip` tables.
        host: Server address, the local loopback unless overridden.
    """

    user: str
    password: str
    database: str
    host: str = DEFAULT_HOST

    def connect_kwargs(self) -> dict[str, str]:
        """Keyword arguments accepted by `psycopg.connect` and `psycopg2.connect`."""

        return {
            "host": self.host,
            "user": self.user,
            "password": self.password,
            "dbname": self.database,
        }


def _env(primary: str, fallback: str, default: Optional[str]) -> Optional[str]:
    return os.getenv(primary, os.getenv(fallback, default))


def load_settings() -> ConnectionSettings:
    """Load connection settings from environment variables.

    Recognized variables, with libpq names as fallbacks:
        `LISTING_DB_USER` / `PGUSER` (default "postgres"),
        `LISTING_DB_PASSWORD` / `PGPASSWORD` (default ""),
        `LISTING_DB_NAME` / `PGDATABASE` (default "yelpdb"),
        `LISTING_DB_HOST` / `PGHOST` (default "127.0.0.1").
    """

    return ConnectionSettings(
        user=_env("LISTING_DB_USER", "PGUSER", "postgres") or "postgres",
        password=_env("LISTING_DB_PASSWORD", "PGPASSWORD", "") or "",
        database=_env("LISTING_DB_NAME", "PGDATABASE", "yelpdb") or "yelpdb",
        host=_env("LISTING_DB_HOST", "PGHOST", DEFAULT_HOST) or DEFAULT_HOST,
    )
