"""
Database module for dbfs.

Provides the backend dialects and connection management.
"""

from .dialects import (
    Dialect, MySQLDialect, PostgreSQLDialect, SQLiteDialect,
    DIALECTS, get_dialect, parse_create_table
)
from .session import Database, infer_backend, resolve_database, mount_name

__all__ = [
    'Dialect',
    'MySQLDialect',
    'PostgreSQLDialect',
    'SQLiteDialect',
    'DIALECTS',
    'get_dialect',
    'parse_create_table',
    'Database',
    'infer_backend',
    'resolve_database',
    'mount_name',
]
