"""Main DatabaseVFS class - the three read-only filesystem operations."""

import logging
from typing import Any, List, Mapping, Optional

from dbfs.db.dialects import Dialect, Statement, get_dialect
from dbfs.db.session import Database, resolve_database
from dbfs.vfs.base import (
    AddressKind,
    NodeAttributes,
    PathAddress,
    RowAddress,
    ValueGroupAddress,
)
from dbfs.vfs.codec import (
    DEFAULT_MARKER,
    DEFAULT_MAX_BYTES,
    ContentCodec,
    render_field,
    render_row,
)
from dbfs.vfs.planner import QueryPlanner
from dbfs.vfs.resolver import IsDirectoryError, NotFoundError, PathResolver, is_dot_entry

logger = logging.getLogger(__name__)

DOT_ENTRIES = [".", ".."]


class DatabaseVFS:
    """Virtual File System for a relational database.

    This is the main entry point. It owns the database connection, the
    query planner for the backend, and the content codec whose cache
    maps hashed names back to values. Calls must be serialized; nothing
    here is thread-safe.

    Usage:
        >>> vfs = DatabaseVFS.open("shop.db")
        >>> vfs.directory("/users/email")
        ['.', '..', 'a@example.com']
        >>> vfs.attributes("/users/email/a@example.com")
        NodeAttributes(node_type=<NodeType.FILE: 'file'>, size=52)
        >>> vfs.read("/users/email/a@example.com", 4096, 0)
        b'{\\n  "email": "a@example.com", ...'
    """

    def __init__(self, database: Database, dialect: Dialect,
                 codec: Optional[ContentCodec] = None):
        """Initialize VFS for a database.

        Args:
            database: Connection handle
            dialect: Backend dialect
            codec: Content codec (a fresh one with default settings if omitted)
        """
        self.database = database
        self.planner = QueryPlanner(dialect)
        self.codec = codec or ContentCodec()
        self.resolver = PathResolver()

    @classmethod
    def open(cls, database: str, backend: Optional[str] = None,
             marker: str = DEFAULT_MARKER, max_bytes: int = DEFAULT_MAX_BYTES,
             echo: bool = False) -> 'DatabaseVFS':
        """
        Open a VFS for a database argument.

        Args:
            database: Database URL or SQLite file path
            backend: Explicit backend name (inferred from the URL otherwise)
            marker: Prefix of content-addressed names
            max_bytes: Bytes of a hashed value kept for later lookup
            echo: If True, log all SQL statements

        Returns:
            DatabaseVFS instance (no connection is made until first use)
        """
        url, backend = resolve_database(database, backend)
        db = Database(url, echo=echo)
        dialect = get_dialect(backend, schema=db.schema)
        logger.info(f"Opened {backend} database {db.schema or url.host}")
        return cls(db, dialect, ContentCodec(marker=marker, max_bytes=max_bytes))

    def close(self) -> None:
        self.database.close()

    # ------------------------------------------------------------------
    # Filesystem operations
    # ------------------------------------------------------------------

    def attributes(self, path: str) -> NodeAttributes:
        """Describe a path.

        Args:
            path: Path to describe

        Returns:
            Directory attributes, or file attributes sized to the content
            ``read`` would return

        Raises:
            NotFoundError: If the path does not exist
        """
        address = self.resolver.resolve(path)
        kind = address.kind

        if kind is AddressKind.ROOT or is_dot_entry(path):
            return NodeAttributes.directory()

        table = self._name(address.table)
        if kind is AddressKind.TABLE:
            if not self.table_exists(table):
                raise NotFoundError(f"No such table: {table}")
            return NodeAttributes.directory()

        column = self._require_column(table, address.column)
        if kind is AddressKind.COLUMN:
            if not self._query(self.planner.column_sample(table, column)):
                raise NotFoundError(f"No rows in {table}")
            return NodeAttributes.directory()

        try:
            content = self._content(address, table, column)
        except IsDirectoryError:
            return NodeAttributes.directory()
        return NodeAttributes.file(len(content))

    def directory(self, path: str) -> List[str]:
        """List a directory.

        Args:
            path: Directory path

        Returns:
            ``.`` and ``..`` followed by the sorted entry names. Row
            indices under a value group are listed in numeric order
            (``0, 1, ..., 10``), not string order.
        """
        address = self.resolver.resolve(path)
        return DOT_ENTRIES + self._entries(address)

    def read(self, path: str, length: int, offset: int = 0) -> bytes:
        """Read file content.

        Args:
            path: Path to a value group or row
            length: Maximum number of bytes
            offset: Position of the first byte

        Returns:
            Requested slice of the content, clipped to its length

        Raises:
            NotFoundError: If no row matches
            IsDirectoryError: If the path is a directory or matches
                several rows
        """
        address = self.resolver.resolve(path)
        if is_dot_entry(path) or address.kind not in (AddressKind.VALUE_GROUP, AddressKind.ROW):
            raise IsDirectoryError(path)

        table = self._name(address.table)
        column = self._require_column(table, address.column)
        content = self._content(address, table, column)

        offset = max(offset, 0)
        return content[offset:offset + max(length, 0)]

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def tables(self) -> List[str]:
        return [str(row[0]) for row in self._query(self.planner.list_tables())]

    def columns(self, table: str) -> List[str]:
        rows = self._query(self.planner.list_columns(table))
        return self.planner.dialect.column_names(rows)

    def table_exists(self, table: str) -> bool:
        return bool(self._query(self.planner.table_exists(table)))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _query(self, statement: Statement) -> list:
        sql, params = statement
        return self.database.execute(sql, params)

    def _name(self, segment: str) -> str:
        """Decode a table or column segment back into an identifier."""
        return self.codec.decode(segment).decode("utf-8", "surrogateescape")

    def _require_column(self, table: str, segment: str) -> str:
        # Unknown identifiers are rejected before they reach a predicate;
        # SQLite reads a quoted unknown column as a string literal.
        column = self._name(segment)
        if column not in self.columns(table):
            raise NotFoundError(f"No such column: {table}.{column}")
        return column

    def _encoded_sorted(self, values: List[Any]) -> List[str]:
        return sorted({self.codec.encode(value) for value in values})

    def _entries(self, address: PathAddress) -> List[str]:
        kind = address.kind

        if kind is AddressKind.ROOT:
            return self._encoded_sorted(self.tables())

        if kind is AddressKind.TABLE:
            return self._encoded_sorted(self.columns(self._name(address.table)))

        if kind is AddressKind.COLUMN:
            table = self._name(address.table)
            column = self._name(address.column)
            if column not in self.columns(table):
                return []
            rows = self._query(self.planner.distinct_values(table, column))
            return self._encoded_sorted([row[0] for row in rows if row[0] is not None])

        if kind is AddressKind.VALUE_GROUP:
            table = self._name(address.table)
            column = self._name(address.column)
            if column not in self.columns(table):
                return []
            count = 0
            for value in self.codec.bind_candidates(address.value):
                rows = self._query(self.planner.count_matches(table, column, value))
                count = int(rows[0][0]) if rows else 0
                if count:
                    break
            return [str(index) for index in range(count)]

        return []

    def _matching_rows(self, table: str, column: str, name: str, offset: int = 0, limit: int = 1) -> list:
        """Rows whose ``column`` equals the value behind entry ``name``."""
        for value in self.codec.bind_candidates(name):
            rows = self._query(self.planner.page_rows(table, column, value, offset=offset, limit=limit))
            if rows:
                return rows
        return []

    def _row(self, address: PathAddress, table: str, column: str) -> Mapping[str, Any]:
        """Fetch the single row a value group or row address stands for."""
        if isinstance(address, RowAddress):
            rows = self._matching_rows(table, column, address.value, offset=address.offset)
            if not rows:
                raise NotFoundError(f"No row {address.offset} for {column}={address.value}")
            return rows[0]._mapping

        rows = self._matching_rows(table, column, address.value, limit=2)
        if not rows:
            raise NotFoundError(f"No row with {column}={address.value}")
        if len(rows) > 1:
            raise IsDirectoryError(f"Several rows with {column}={address.value}")
        return rows[0]._mapping

    def _content(self, address: PathAddress, table: str, column: str) -> bytes:
        """Render the content of a value group or row address.

        Whole rows become canonical JSON; a field selector serves that
        field's raw value.
        """
        row = self._row(address, table, column)
        field = address.field if isinstance(address, (ValueGroupAddress, RowAddress)) else None

        if field is None:
            return render_row(row)
        if field not in row:
            raise NotFoundError(f"No such field: {field}")
        return render_field(row[field])
