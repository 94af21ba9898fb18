"""Backend dialects.

Each supported database has its own way of answering the catalog
questions the VFS asks: which tables exist, which columns a table has,
and whether a given table exists. Everything else (distinct values,
row paging, counting) is plain SQL shared by all three backends.

Dialects:
    - MySQLDialect: catalog queries filtered by the configured database
    - PostgreSQLDialect: information schema minus the system schemas
    - SQLiteDialect: ``sqlite_master`` plus parsing of the stored
      ``CREATE TABLE`` statement
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.engine import Dialect as SADialect

# (sql, params) pair handed to Database.execute
Statement = Tuple[str, Dict[str, Any]]

TABLE_CONSTRAINT_KEYWORDS = {"CONSTRAINT", "PRIMARY", "UNIQUE", "CHECK", "FOREIGN"}

_LEADING_TOKEN = re.compile(
    r'\s*(?:"((?:[^"]|"")+)"|`((?:[^`]|``)+)`|\[([^\]]+)\]|([^\s(]+))'
)


class Dialect(ABC):
    """Base class for backend dialects.

    Subclasses provide the catalog statements. Identifier quoting is
    delegated to the matching SQLAlchemy dialect so that names are
    escaped the way the backend expects.
    """

    name: str = ""
    system_schemas: Tuple[str, ...] = ()

    def __init__(self, schema: Optional[str] = None):
        """Initialize dialect.

        Args:
            schema: Database/schema name the catalog queries are scoped to
        """
        self.schema = schema
        self._sa_dialect: Optional[SADialect] = None

    @abstractmethod
    def sa_dialect(self) -> SADialect:
        pass

    def quote(self, identifier: str) -> str:
        """Quote a table or column name for interpolation into SQL."""
        if self._sa_dialect is None:
            self._sa_dialect = self.sa_dialect()
        return self._sa_dialect.identifier_preparer.quote_identifier(identifier)

    @abstractmethod
    def list_tables(self) -> Statement:
        pass

    @abstractmethod
    def list_columns(self, table: str) -> Statement:
        pass

    @abstractmethod
    def table_exists(self, table: str) -> Statement:
        pass

    def column_names(self, rows: Sequence[Sequence[Any]]) -> List[str]:
        """Extract column names from the rows of ``list_columns``.

        Args:
            rows: Result rows of the column listing statement

        Returns:
            Column names in catalog order
        """
        return [str(row[0]) for row in rows]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(schema={self.schema!r})"


class MySQLDialect(Dialect):
    """MySQL/MariaDB: catalog views scoped to the configured database."""

    name = "mysql"

    def sa_dialect(self) -> SADialect:
        return mysql.dialect()

    def list_tables(self) -> Statement:
        return (
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_schema = :schema",
            {"schema": self.schema},
        )

    def list_columns(self, table: str) -> Statement:
        return (
            "SELECT column_name FROM information_schema.columns "
            "WHERE table_schema = :schema AND table_name = :table "
            "ORDER BY ordinal_position",
            {"schema": self.schema, "table": table},
        )

    def table_exists(self, table: str) -> Statement:
        return (
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_schema = :schema AND table_name = :table",
            {"schema": self.schema, "table": table},
        )


class PostgreSQLDialect(Dialect):
    """PostgreSQL: standard information schema, system schemas excluded."""

    name = "postgresql"
    system_schemas = ("pg_catalog", "information_schema")

    def sa_dialect(self) -> SADialect:
        return postgresql.dialect()

    def _exclude_system(self) -> str:
        quoted = ", ".join(f"'{schema}'" for schema in self.system_schemas)
        return f"table_schema NOT IN ({quoted})"

    def list_tables(self) -> Statement:
        return (
            "SELECT table_name FROM information_schema.tables "
            f"WHERE {self._exclude_system()}",
            {},
        )

    def list_columns(self, table: str) -> Statement:
        return (
            "SELECT column_name FROM information_schema.columns "
            f"WHERE table_name = :table AND {self._exclude_system()} "
            "ORDER BY ordinal_position",
            {"table": table},
        )

    def table_exists(self, table: str) -> Statement:
        return (
            "SELECT table_name FROM information_schema.tables "
            f"WHERE table_name = :table AND {self._exclude_system()}",
            {"table": table},
        )


class SQLiteDialect(Dialect):
    """SQLite: ``sqlite_master`` and the stored ``CREATE TABLE`` text."""

    name = "sqlite"

    def sa_dialect(self) -> SADialect:
        return sqlite.dialect()

    def list_tables(self) -> Statement:
        return (
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%'",
            {},
        )

    def list_columns(self, table: str) -> Statement:
        return (
            "SELECT sql FROM sqlite_master WHERE type = 'table' AND name = :table",
            {"table": table},
        )

    def table_exists(self, table: str) -> Statement:
        return (
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name = :table AND name NOT LIKE 'sqlite_%'",
            {"table": table},
        )

    def column_names(self, rows: Sequence[Sequence[Any]]) -> List[str]:
        if not rows or not rows[0][0]:
            return []
        return parse_create_table(rows[0][0])


def split_top_level(clause: str) -> List[str]:
    """Split on commas that are not nested inside parentheses.

    ``DECIMAL(10, 2)`` and ``PRIMARY KEY (a, b)`` stay in one piece.
    """
    parts = []
    depth = 0
    current = []
    for char in clause:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return [part.strip() for part in parts if part.strip()]


def parse_create_table(create_sql: str) -> List[str]:
    """Extract column names from a ``CREATE TABLE`` statement.

    The column-definition clause is everything between the first opening
    and the last closing parenthesis. Each top-level comma-separated
    piece contributes its leading token, with SQLite's quoting styles
    (double quotes, backticks, brackets) removed. Table constraints are
    skipped.

    Args:
        create_sql: Statement text as stored in ``sqlite_master.sql``

    Returns:
        Column names in declaration order
    """
    start = create_sql.find("(")
    end = create_sql.rfind(")")
    if start == -1 or end <= start:
        return []

    columns = []
    for clause in split_top_level(create_sql[start + 1:end]):
        match = _LEADING_TOKEN.match(clause)
        if not match:
            continue
        double_quoted, backticked, bracketed, bare = match.groups()
        if bare is not None:
            if bare.upper() in TABLE_CONSTRAINT_KEYWORDS:
                continue
            columns.append(bare)
        elif double_quoted is not None:
            columns.append(double_quoted.replace('""', '"'))
        elif backticked is not None:
            columns.append(backticked.replace("``", "`"))
        else:
            columns.append(bracketed)
    return columns


DIALECTS = {
    MySQLDialect.name: MySQLDialect,
    PostgreSQLDialect.name: PostgreSQLDialect,
    SQLiteDialect.name: SQLiteDialect,
}


def get_dialect(backend: str, schema: Optional[str] = None) -> Dialect:
    """Create the dialect for a backend name.

    Args:
        backend: One of ``mysql``, ``postgresql``, ``sqlite``
        schema: Database name used to scope catalog queries

    Returns:
        Dialect instance

    Raises:
        ValueError: If the backend is not supported
    """
    try:
        dialect_class = DIALECTS[backend]
    except KeyError:
        supported = ", ".join(sorted(DIALECTS))
        raise ValueError(f"Unsupported backend '{backend}' (expected one of: {supported})")
    return dialect_class(schema=schema)
