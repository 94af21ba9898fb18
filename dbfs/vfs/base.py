"""Base types for the Virtual File System.

The VFS maps a relational database to a read-only filesystem-like
structure. Paths are never stored; each one is parsed into a typed
address whose kind depends only on how many segments it has.

Architecture:
    - AddressKind: The five address kinds (root, table, column,
      value group, row)
    - PathAddress and subclasses: Parsed, typed form of a path
    - NodeType / NodeAttributes: What an address turned out to be
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class NodeType(Enum):
    """Type of VFS node."""
    DIRECTORY = "directory"
    FILE = "file"


class AddressKind(Enum):
    """Kind of path address, by segment count."""
    ROOT = 0
    TABLE = 1
    COLUMN = 2
    VALUE_GROUP = 3
    ROW = 4


@dataclass(frozen=True)
class PathAddress(ABC):
    """Base class for all parsed paths.

    Attributes:
        kind: Address kind (always equal to the segment count)
    """

    @property
    @abstractmethod
    def kind(self) -> AddressKind:
        pass

    @property
    def depth(self) -> int:
        return self.kind.value


@dataclass(frozen=True)
class RootAddress(PathAddress):
    """``/`` - lists tables."""

    @property
    def kind(self) -> AddressKind:
        return AddressKind.ROOT


@dataclass(frozen=True)
class TableAddress(PathAddress):
    """``/<table>`` - lists columns."""
    table: str

    @property
    def kind(self) -> AddressKind:
        return AddressKind.TABLE


@dataclass(frozen=True)
class ColumnAddress(PathAddress):
    """``/<table>/<column>`` - lists distinct values."""
    table: str
    column: str

    @property
    def kind(self) -> AddressKind:
        return AddressKind.COLUMN


@dataclass(frozen=True)
class ValueGroupAddress(PathAddress):
    """``/<table>/<column>/<value>[#<field>]`` - rows sharing a value.

    ``value`` is the encoded (filename-safe) form. A single match is a
    file; several matches make this a directory of row indices.
    """
    table: str
    column: str
    value: str
    field: Optional[str] = None

    @property
    def kind(self) -> AddressKind:
        return AddressKind.VALUE_GROUP


@dataclass(frozen=True)
class RowAddress(PathAddress):
    """``/<table>/<column>/<value>/<n>[#<field>]`` - the n-th matching row."""
    table: str
    column: str
    value: str
    offset: int
    field: Optional[str] = None

    @property
    def kind(self) -> AddressKind:
        return AddressKind.ROW


@dataclass(frozen=True)
class NodeAttributes:
    """Resolved attributes of a path.

    Attributes:
        node_type: Directory or file
        size: Content length in bytes (0 for directories)
    """
    node_type: NodeType
    size: int = 0

    @property
    def is_directory(self) -> bool:
        return self.node_type is NodeType.DIRECTORY

    @classmethod
    def directory(cls) -> 'NodeAttributes':
        return cls(NodeType.DIRECTORY, 0)

    @classmethod
    def file(cls, size: int) -> 'NodeAttributes':
        return cls(NodeType.FILE, size)
