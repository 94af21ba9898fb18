"""
dbfs - relational databases as read-only filesystems.

Tables become directories, columns become subdirectories, distinct
values become entries, and rows become JSON files. Works with SQLite,
MySQL/MariaDB and PostgreSQL through SQLAlchemy.

Quick start:
    from dbfs import DatabaseVFS

    vfs = DatabaseVFS.open("shop.db")
    vfs.directory("/")                      # ['.', '..', 'orders', 'users']
    vfs.read("/users/email/a@example.com", 4096)
    vfs.close()
"""

from .vfs import DatabaseVFS, ContentCodec, PathResolver, NotFoundError, IsDirectoryError
from .config import DBFSConfig, load_config

__version__ = "0.1.0"
__all__ = [
    "DatabaseVFS",
    "ContentCodec",
    "PathResolver",
    "NotFoundError",
    "IsDirectoryError",
    "DBFSConfig",
    "load_config",
]
