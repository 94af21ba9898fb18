"""Virtual File System over a relational database.

The VFS presents a database as a read-only directory tree. Tables,
columns and distinct values are directories; a value held by exactly one
row is a file containing that row.

Architecture:

    ```
    /                                   # Tables
    ├── users/                          # Columns of "users"
    │   ├── email/                      # Distinct emails
    │   │   ├── a@example.com           # The one row with this email (JSON)
    │   │   └── a@example.com#name      # Just its "name" field
    │   └── city/
    │       └── Paris/                  # Several rows share this value
    │           ├── 0                   # First matching row
    │           └── 1#email             # Second row, "email" field only
    └── orders/
    ```

Values that contain control characters or are longer than 128 bytes are
listed under a content address (``x`` + SHA-256 hex digest) and can be
looked up by that name afterwards.

Usage Example:

    ```python
    from dbfs.vfs import DatabaseVFS

    vfs = DatabaseVFS.open("shop.db")
    print(vfs.directory("/users/email"))
    print(vfs.read("/users/email/a@example.com", 4096, 0).decode())
    vfs.close()
    ```
"""

from dbfs.vfs.base import (
    AddressKind,
    NodeAttributes,
    NodeType,
    PathAddress,
    RootAddress,
    TableAddress,
    ColumnAddress,
    ValueGroupAddress,
    RowAddress,
)
from dbfs.vfs.codec import ContentCodec, CacheEntry, render_row, render_field
from dbfs.vfs.resolver import PathResolver, PathError, NotFoundError, IsDirectoryError
from dbfs.vfs.planner import QueryPlanner
from dbfs.vfs.database_vfs import DatabaseVFS

__all__ = [
    # Main entry point
    "DatabaseVFS",
    # Addresses and attributes
    "AddressKind",
    "NodeAttributes",
    "NodeType",
    "PathAddress",
    "RootAddress",
    "TableAddress",
    "ColumnAddress",
    "ValueGroupAddress",
    "RowAddress",
    # Content codec
    "ContentCodec",
    "CacheEntry",
    "render_row",
    "render_field",
    # Path resolution
    "PathResolver",
    "PathError",
    "NotFoundError",
    "IsDirectoryError",
    # Query planning
    "QueryPlanner",
]
