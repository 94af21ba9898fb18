"""Query planning for VFS addresses.

Builds the parameterized statements that answer attribute, listing and
read requests. Catalog statements come from the backend dialect; the
data statements are shared by every backend.
"""

from typing import Any

from dbfs.db.dialects import Dialect, Statement


class QueryPlanner:
    """Builds statements for one backend.

    Values are always bound as parameters. Table and column names are
    quoted through the dialect. Row offsets are interpolated as integer
    literals because not every backend accepts a bound OFFSET.
    """

    def __init__(self, dialect: Dialect):
        self.dialect = dialect

    def list_tables(self) -> Statement:
        return self.dialect.list_tables()

    def list_columns(self, table: str) -> Statement:
        return self.dialect.list_columns(table)

    def table_exists(self, table: str) -> Statement:
        return self.dialect.table_exists(table)

    def column_sample(self, table: str, column: str) -> Statement:
        """First value of a column; any row at all means the column is populated."""
        return (
            f"SELECT {self.dialect.quote(column)} FROM {self.dialect.quote(table)} LIMIT 1",
            {},
        )

    def distinct_values(self, table: str, column: str) -> Statement:
        column_sql = self.dialect.quote(column)
        return (
            f"SELECT DISTINCT {column_sql} FROM {self.dialect.quote(table)}",
            {},
        )

    def count_matches(self, table: str, column: str, value: Any) -> Statement:
        return (
            f"SELECT COUNT(*) FROM {self.dialect.quote(table)} "
            f"WHERE {self.dialect.quote(column)} = :value",
            {"value": value},
        )

    def page_rows(self, table: str, column: str, value: Any,
                  offset: int = 0, limit: int = 1) -> Statement:
        """Rows whose ``column`` equals ``value``, one page.

        Args:
            table: Table name
            column: Column to match on
            value: Decoded value bound as ``:value``
            offset: Index of the first matching row
            limit: Maximum number of rows

        Returns:
            (sql, params) statement
        """
        return (
            f"SELECT * FROM {self.dialect.quote(table)} "
            f"WHERE {self.dialect.quote(column)} = :value "
            f"LIMIT {int(limit)} OFFSET {int(offset)}",
            {"value": value},
        )
