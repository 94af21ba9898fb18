"""
Tests for backend dialects, the query planner and database resolution.
"""

import pytest

from dbfs.db.dialects import (
    Dialect,
    MySQLDialect,
    PostgreSQLDialect,
    SQLiteDialect,
    get_dialect,
    parse_create_table,
    split_top_level,
)
from dbfs.db.session import Database, infer_backend, mount_name, resolve_database
from dbfs.vfs.planner import QueryPlanner


class TestDialectSelection:

    @pytest.mark.parametrize("backend,cls", [
        ("mysql", MySQLDialect),
        ("postgresql", PostgreSQLDialect),
        ("sqlite", SQLiteDialect),
    ])
    def test_get_dialect(self, backend, cls):
        assert isinstance(get_dialect(backend), cls)

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="oracle"):
            get_dialect("oracle")

    def test_base_dialect_is_abstract(self):
        with pytest.raises(TypeError):
            Dialect()


class TestQuoting:

    def test_mysql_uses_backticks(self):
        assert MySQLDialect().quote("users") == "`users`"

    def test_postgresql_and_sqlite_use_double_quotes(self):
        assert PostgreSQLDialect().quote("users") == '"users"'
        assert SQLiteDialect().quote("order note") == '"order note"'

    def test_embedded_quote_is_doubled(self):
        assert SQLiteDialect().quote('a"b') == '"a""b"'
        assert MySQLDialect().quote("a`b") == "`a``b`"


class TestCatalogStatements:

    def test_mysql_tables_scoped_to_schema(self):
        sql, params = MySQLDialect(schema="shop").list_tables()
        assert "information_schema.tables" in sql
        assert "table_schema = :schema" in sql
        assert params == {"schema": "shop"}

    def test_mysql_columns(self):
        sql, params = MySQLDialect(schema="shop").list_columns("users")
        assert "information_schema.columns" in sql
        assert params == {"schema": "shop", "table": "users"}

    def test_postgresql_excludes_system_schemas(self):
        sql, params = PostgreSQLDialect().list_tables()
        assert "NOT IN ('pg_catalog', 'information_schema')" in sql
        assert params == {}

    def test_postgresql_table_exists(self):
        sql, params = PostgreSQLDialect().table_exists("users")
        assert "table_name = :table" in sql
        assert params == {"table": "users"}

    def test_sqlite_tables_exclude_internal(self):
        sql, _ = SQLiteDialect().list_tables()
        assert "sqlite_master" in sql
        assert "type = 'table'" in sql
        assert "NOT LIKE 'sqlite_%'" in sql

    def test_sqlite_column_names_from_create_statement(self):
        rows = [("CREATE TABLE users (id INTEGER PRIMARY KEY, email TEXT)",)]
        assert SQLiteDialect().column_names(rows) == ["id", "email"]

    def test_sqlite_column_names_for_missing_table(self):
        assert SQLiteDialect().column_names([]) == []

    def test_information_schema_column_names(self):
        assert PostgreSQLDialect().column_names([("id",), ("email",)]) == ["id", "email"]


class TestCreateTableParsing:

    def test_simple(self):
        assert parse_create_table("CREATE TABLE t (a, b, c)") == ["a", "b", "c"]

    def test_nested_commas(self):
        sql = "CREATE TABLE t (id INTEGER, amount DECIMAL(10, 2), note TEXT)"
        assert parse_create_table(sql) == ["id", "amount", "note"]

    def test_quoted_names(self):
        sql = 'CREATE TABLE t ("first name" TEXT, `last` TEXT, [age] INT, "say ""hi""" TEXT)'
        assert parse_create_table(sql) == ["first name", "last", "age", 'say "hi"']

    def test_table_constraints_are_skipped(self):
        sql = (
            "CREATE TABLE t (a INT, b INT, PRIMARY KEY (a, b), "
            "CONSTRAINT fk FOREIGN KEY (b) REFERENCES o(id), UNIQUE (a), CHECK (a > 0))"
        )
        assert parse_create_table(sql) == ["a", "b"]

    def test_trailing_options(self):
        sql = "CREATE TABLE t (k TEXT PRIMARY KEY, v BLOB) WITHOUT ROWID"
        assert parse_create_table(sql) == ["k", "v"]

    def test_no_column_clause(self):
        assert parse_create_table("CREATE TABLE t AS SELECT 1") == []

    def test_split_top_level(self):
        assert split_top_level("a, f(b, c), d") == ["a", "f(b, c)", "d"]


class TestQueryPlanner:

    @pytest.fixture
    def planner(self):
        return QueryPlanner(SQLiteDialect())

    def test_page_rows(self, planner):
        sql, params = planner.page_rows("users", "email", "a@example.com", offset=3)
        assert sql == 'SELECT * FROM "users" WHERE "email" = :value LIMIT 1 OFFSET 3'
        assert params == {"value": "a@example.com"}

    def test_page_rows_offset_is_integer_literal(self, planner):
        sql, _ = planner.page_rows("t", "c", "v", offset="2", limit=2)
        assert sql.endswith("LIMIT 2 OFFSET 2")

    def test_distinct_values(self, planner):
        sql, params = planner.distinct_values("users", "city")
        assert sql == 'SELECT DISTINCT "city" FROM "users"'
        assert params == {}

    def test_count_matches(self, planner):
        sql, params = planner.count_matches("users", "city", "Paris")
        assert sql == 'SELECT COUNT(*) FROM "users" WHERE "city" = :value'
        assert params == {"value": "Paris"}

    def test_mysql_quoting_in_data_statements(self):
        sql, _ = QueryPlanner(MySQLDialect(schema="shop")).column_sample("users", "email")
        assert sql == "SELECT `email` FROM `users` LIMIT 1"


class TestDatabaseResolution:

    def test_plain_path_is_sqlite(self):
        url, backend = resolve_database("data/shop.db")
        assert backend == "sqlite"
        assert url.drivername == "sqlite"
        assert url.database == "data/shop.db"

    def test_mysql_url_uses_pymysql(self):
        url, backend = resolve_database("mysql://me@localhost/shop")
        assert backend == "mysql"
        assert url.drivername == "mysql+pymysql"
        assert url.database == "shop"

    def test_explicit_driver_is_kept(self):
        url, _ = resolve_database("mysql+mysqldb://me@localhost/shop")
        assert url.drivername == "mysql+mysqldb"

    def test_postgres_alias(self):
        url, backend = resolve_database("postgres://me@localhost/shop")
        assert backend == "postgresql"
        assert url.drivername == "postgresql"

    def test_backend_option_with_plain_name(self):
        url, backend = resolve_database("shop", backend="postgresql")
        assert backend == "postgresql"
        assert url.database == "shop"

    def test_unknown_scheme(self):
        with pytest.raises(ValueError):
            resolve_database("oracle://host/db")

    def test_infer_backend(self):
        assert infer_backend("sqlite:///x.db") == "sqlite"
        assert infer_backend("postgresql+psycopg2://h/db") == "postgresql"
        assert infer_backend("x.db") is None

    def test_mount_name(self):
        assert mount_name(resolve_database("/tmp/shop.db")[0]) == "shop"
        assert mount_name(resolve_database("mysql://h/inventory")[0]) == "inventory"


class TestDatabase:

    def test_failed_query_returns_no_rows(self, db_path):
        db = Database(resolve_database(str(db_path))[0])
        try:
            assert db.execute("SELECT * FROM no_such_table") == []
            # Connection is still usable afterwards
            assert db.execute("SELECT COUNT(*) FROM users")[0][0] == 3
        finally:
            db.close()

    def test_connection_is_lazy_and_reused(self, db_path):
        db = Database(resolve_database(str(db_path))[0])
        assert db._connection is None
        first = db.connection
        assert db.connection is first
        db.close()
        assert db._connection is None
