"""Path resolution for the Virtual File System.

Turns slash-separated paths into typed addresses. Resolution is purely
lexical: it never touches the database.
"""

from typing import List, Optional, Tuple

from dbfs.vfs.base import (
    PathAddress,
    RootAddress,
    TableAddress,
    ColumnAddress,
    ValueGroupAddress,
    RowAddress,
)

MAX_DEPTH = 4
FIELD_SEPARATOR = "#"
RESERVED_PREFIX = "."


class PathResolver:
    """Resolves paths into addresses.

    Handles:
    - Absolute and relative-looking paths (both are taken from the root)
    - Special segments: ``.`` is dropped, ``..`` goes up one level
    - Field selectors: ``/users/email/a@example.com#name``
    - Reserved names: a first segment starting with ``.`` never resolves
    """

    def resolve(self, path: str) -> PathAddress:
        """Resolve a path to an address.

        Args:
            path: Path like ``/users/email/a@example.com/0#name``

        Returns:
            Address whose kind matches the number of segments

        Raises:
            NotFoundError: If the path is deeper than a row, names a
                reserved entry, or has a non-numeric row index
        """
        parts = self.split(path)

        if len(parts) > MAX_DEPTH:
            raise NotFoundError(f"Path too deep: {path}")

        field = None
        if len(parts) >= 3:
            parts[-1], field = split_field(parts[-1])

        if len(parts) == 0:
            return RootAddress()
        if len(parts) == 1:
            return TableAddress(parts[0])
        if len(parts) == 2:
            return ColumnAddress(parts[0], parts[1])
        if len(parts) == 3:
            return ValueGroupAddress(parts[0], parts[1], parts[2], field)

        offset = parse_offset(parts[3])
        return RowAddress(parts[0], parts[1], parts[2], offset, field)

    def split(self, path: str) -> List[str]:
        """Split a path into segments, applying ``.`` and ``..``.

        Args:
            path: Path to split

        Returns:
            List of non-empty path components

        Raises:
            NotFoundError: If a reserved name is ever the first segment,
                even if a later ``..`` removes it
        """
        parts: List[str] = []
        for part in path.split("/"):
            if part == "" or part == ".":
                continue
            if part == "..":
                # Stay at root if already at root
                if parts:
                    parts.pop()
                continue
            if not parts and part.startswith(RESERVED_PREFIX):
                raise NotFoundError(f"Reserved name: {part}")
            parts.append(part)
        return parts


def is_dot_entry(path: str) -> bool:
    """Whether the last segment of ``path`` is ``.`` or ``..``."""
    last = path.rstrip("/").rsplit("/", 1)[-1]
    return last in (".", "..")


def split_field(segment: str) -> Tuple[str, Optional[str]]:
    """Split ``value#field`` into its value and field selector.

    Only the last ``#`` counts, and only if something follows it:
    ``C#`` stays ``C#`` with no field.
    """
    value, separator, field = segment.rpartition(FIELD_SEPARATOR)
    if not separator or not field or not value:
        return segment, None
    return value, field


def parse_offset(segment: str) -> int:
    """Parse a row index segment."""
    if not segment.isdigit() or not segment.isascii():
        raise NotFoundError(f"Not a row index: {segment}")
    return int(segment)


class PathError(Exception):
    """Error resolving a path."""
    pass


class NotFoundError(PathError):
    """Path does not exist."""
    pass


class IsDirectoryError(PathError):
    """Attempted to read a directory, or a value shared by several rows."""
    pass
