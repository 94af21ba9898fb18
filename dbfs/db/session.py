"""
Database connection management for dbfs.

Provides a single lazily-opened connection per mounted database and
helpers for turning a command-line database argument into a URL.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine, Row, URL, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

logger = logging.getLogger(__name__)

# URL scheme prefix -> backend name
SCHEME_BACKENDS = {
    "mysql": "mysql",
    "mariadb": "mysql",
    "postgres": "postgresql",
    "postgresql": "postgresql",
    "sqlite": "sqlite",
}

# Driver used when a backend is selected without a URL
DEFAULT_DRIVERS = {
    "mysql": "mysql+pymysql",
    "postgresql": "postgresql",
    "sqlite": "sqlite",
}


def infer_backend(database: str) -> Optional[str]:
    """Infer the backend from a URI-style prefix.

    Args:
        database: Database argument, e.g. ``postgresql://host/db``

    Returns:
        Backend name, or None when the argument carries no scheme
    """
    if "://" not in database:
        return None
    scheme = database.split("://", 1)[0].split("+", 1)[0].lower()
    return SCHEME_BACKENDS.get(scheme)


def resolve_database(database: str, backend: Optional[str] = None) -> Tuple[URL, str]:
    """
    Resolve a database argument into a SQLAlchemy URL and backend name.

    Args:
        database: URL (``mysql://...``) or plain file path / database name
        backend: Explicit backend; overrides inference from the URL scheme

    Returns:
        Tuple of (url, backend)

    Raises:
        ValueError: If the backend cannot be determined or the URL is malformed
    """
    inferred = infer_backend(database)
    if "://" in database and inferred is None:
        raise ValueError(f"Cannot infer backend from '{database}'")
    backend = backend or inferred or "sqlite"

    if "://" in database:
        if database.startswith("postgres://"):
            database = "postgresql://" + database[len("postgres://"):]
        try:
            url = make_url(database)
        except ArgumentError as e:
            raise ValueError(f"Malformed database URL '{database}': {e}")
        if url.drivername == "mysql":
            url = url.set(drivername=DEFAULT_DRIVERS["mysql"])
    elif backend == "sqlite":
        url = URL.create("sqlite", database=str(Path(database).expanduser()))
    elif backend in DEFAULT_DRIVERS:
        url = URL.create(DEFAULT_DRIVERS[backend], database=database)
    else:
        raise ValueError(f"Unsupported backend '{backend}'")

    return url, backend


def mount_name(url: URL) -> str:
    """Derive a mount directory name from a database URL.

    ``/data/shop.db`` -> ``shop``; ``mysql://host/shop`` -> ``shop``.
    """
    name = url.database or url.host or "dbfs"
    return Path(name).stem or "dbfs"


class Database:
    """
    A single, lazily-opened database connection.

    The connection is created on first use and held until ``close()``.
    It is not safe for concurrent use; callers must serialize access.

    Usage:
        db = Database(url)
        rows = db.execute("SELECT name FROM sqlite_master", {})
        db.close()
    """

    def __init__(self, url: URL, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._connection: Optional[Connection] = None

    @property
    def schema(self) -> Optional[str]:
        """Database name from the URL (catalog scope for MySQL)."""
        return self.url.database

    @property
    def connection(self) -> Connection:
        if self._connection is None:
            self._engine = create_engine(self.url, echo=self.echo)
            self._connection = self._engine.connect().execution_options(
                isolation_level="AUTOCOMMIT"
            )
            logger.info(f"Connected to {self.url.render_as_string(hide_password=True)}")
        return self._connection

    def execute(self, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Row]:
        """
        Run one statement and return all rows.

        A failing statement is logged and reported as an empty result;
        callers see "nothing there" rather than a database error.

        Args:
            sql: Statement text with ``:name`` placeholders
            params: Bound parameter values

        Returns:
            List of result rows (empty on failure)
        """
        logger.debug(f"SQL: {sql} {params or {}}")
        try:
            result = self.connection.execute(text(sql), params or {})
            return result.fetchall()
        except SQLAlchemyError as e:
            logger.debug(f"Query failed: {e}")
            return []

    def close(self) -> None:
        """Close the connection and dispose of the engine."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
