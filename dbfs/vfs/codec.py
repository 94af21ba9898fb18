"""Content codec: database values <-> filesystem names.

Most column values can be used as directory entry names unchanged. Values
containing control bytes, or longer than ``MAX_NAME_BYTES``, are replaced
by a content address: the configured marker followed by the SHA-256 hex
digest of the value. The value (up to ``max_bytes``) is remembered so a
later lookup of that name can recover it.

A content address can only be decoded by the codec that produced it.
Names are not persisted; after a restart a hashed name resolves again
only once its column has been listed.
"""

import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Dict, List, Mapping

logger = logging.getLogger(__name__)

DEFAULT_MARKER = "x"
DEFAULT_MAX_BYTES = 16384
MAX_NAME_BYTES = 128
HASH_ENCODING = "hash"


@dataclass(frozen=True)
class CacheEntry:
    """Cached original of a content-addressed name.

    Attributes:
        encoding: How the name was derived (always "hash")
        original: Original value, cut to the codec's ``max_bytes``
        truncated: True if bytes were dropped from ``original``
        binary: True if the value came from a binary column
    """
    encoding: str
    original: bytes
    truncated: bool = False
    binary: bool = False


def to_bytes(value: Any) -> bytes:
    """Raw byte form of a database value."""
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    return str(value).encode("utf-8", "surrogateescape")


def is_safe_name(raw: bytes) -> bool:
    """Whether ``raw`` can be used as an entry name as-is."""
    if len(raw) > MAX_NAME_BYTES:
        return False
    return not any(byte < 0x20 for byte in raw)


class ContentCodec:
    """Encodes values into filesystem-safe names and back.

    The cache has a single writer (``encode``) and many readers
    (``decode``). It grows for as long as the codec lives.

    Attributes:
        marker: Prefix character of content-addressed names
        max_bytes: How much of a hashed value is kept for decoding
    """

    def __init__(self, marker: str = DEFAULT_MARKER, max_bytes: int = DEFAULT_MAX_BYTES):
        if len(marker) != 1:
            raise ValueError(f"Marker must be a single character, got {marker!r}")
        if max_bytes <= 0:
            raise ValueError(f"max_bytes must be positive, got {max_bytes}")
        self.marker = marker
        self.max_bytes = max_bytes
        self._cache: Dict[str, CacheEntry] = {}

    def encode(self, value: Any) -> str:
        """Convert a value into an entry name.

        Args:
            value: Column value (bytes, text, number, ...)

        Returns:
            The value itself if it is filename-safe, otherwise a
            content address like ``x3a7bd3e2...``
        """
        raw = to_bytes(value)
        if is_safe_name(raw):
            return raw.decode("utf-8", "surrogateescape")

        name = self.marker + hashlib.sha256(raw).hexdigest()
        truncated = len(raw) > self.max_bytes
        if truncated:
            logger.debug(f"Value for {name} truncated from {len(raw)} to {self.max_bytes} bytes")
        binary = isinstance(value, (bytes, bytearray, memoryview))
        self._cache[name] = CacheEntry(HASH_ENCODING, raw[:self.max_bytes], truncated, binary)
        return name

    def decode(self, name: str) -> bytes:
        """Recover the value behind an entry name.

        Args:
            name: Entry name, possibly a content address

        Returns:
            Cached (possibly truncated) original for known content
            addresses, otherwise the name itself as bytes
        """
        if name.startswith(self.marker):
            entry = self._cache.get(name)
            if entry is not None and entry.encoding == HASH_ENCODING:
                return entry.original
        return name.encode("utf-8", "surrogateescape")

    def lookup(self, name: str) -> CacheEntry:
        """Get the cache entry for a content address (KeyError if unknown)."""
        return self._cache[name]

    def bind_candidates(self, name: str) -> List[Any]:
        """Predicate parameters to try, in order, when looking up a name.

        Text never equals a blob, so a value that came from a binary
        column must be bound as bytes. Hashed names remember where their
        value came from. Plain names are tried as text first, then as
        bytes.

        Args:
            name: Entry name, possibly a content address

        Returns:
            One or two parameter values
        """
        raw = self.decode(name)
        entry = self._cache.get(name) if name.startswith(self.marker) else None
        if entry is not None and entry.binary:
            return [raw]

        value = bind_value(raw)
        if entry is None and isinstance(value, str):
            return [value, raw]
        return [value]

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, name: str) -> bool:
        return name in self._cache


def bind_value(raw: bytes) -> Any:
    """Predicate parameter for a decoded value: text when valid UTF-8."""
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw


def _json_default(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", "replace")
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def render_row(row: Mapping[str, Any]) -> bytes:
    """Serialize a whole row as canonical JSON.

    Keys are sorted and the output is indented, so the same row always
    produces the same bytes.
    """
    return json.dumps(
        dict(row), sort_keys=True, indent=2, ensure_ascii=False, default=_json_default
    ).encode("utf-8")


def render_field(value: Any) -> bytes:
    """Serialize a single field's raw value."""
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    return str(value).encode("utf-8")
