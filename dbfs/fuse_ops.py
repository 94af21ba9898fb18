"""FUSE adapter: serves a DatabaseVFS through fusepy."""

import errno
import logging
import os
import stat
import time
from typing import Any, Dict, List

from fuse import FUSE, FuseOSError, LoggingMixIn, Operations, fuse_get_context

from dbfs.vfs import DatabaseVFS, IsDirectoryError, NodeAttributes, NotFoundError

logger = logging.getLogger(__name__)

DIRECTORY_MODE = stat.S_IFDIR | 0o555
FILE_MODE = stat.S_IFREG | 0o444
BLOCK_SIZE = 4096
WRITE_FLAGS = os.O_WRONLY | os.O_RDWR | os.O_APPEND | os.O_CREAT | os.O_TRUNC


class DatabaseOperations(Operations):
    """Read-only FUSE operations backed by a DatabaseVFS.

    Timestamps are the mount time; owner and group are taken from the
    calling process.
    """

    def __init__(self, vfs: DatabaseVFS):
        self.vfs = vfs
        self.started = time.time()

    def getattr(self, path: str, fh=None) -> Dict[str, Any]:
        try:
            attributes = self.vfs.attributes(path)
        except NotFoundError:
            raise FuseOSError(errno.ENOENT)
        return self._stat(attributes)

    def readdir(self, path: str, fh) -> List[str]:
        try:
            return self.vfs.directory(path)
        except NotFoundError:
            raise FuseOSError(errno.ENOENT)

    def open(self, path: str, flags: int) -> int:
        if flags & WRITE_FLAGS:
            raise FuseOSError(errno.EROFS)
        return 0

    def release(self, path: str, fh) -> int:
        return 0

    def read(self, path: str, size: int, offset: int, fh) -> bytes:
        try:
            return self.vfs.read(path, size, offset)
        except NotFoundError:
            raise FuseOSError(errno.ENOENT)
        except IsDirectoryError:
            raise FuseOSError(errno.EISDIR)

    def utime(self, path: str, times=None) -> int:
        return 0

    def destroy(self, path: str) -> None:
        self.vfs.close()

    def _stat(self, attributes: NodeAttributes) -> Dict[str, Any]:
        uid, gid, _pid = fuse_get_context()
        size = attributes.size
        return {
            "st_mode": DIRECTORY_MODE if attributes.is_directory else FILE_MODE,
            "st_nlink": 2 if attributes.is_directory else 1,
            "st_uid": uid,
            "st_gid": gid,
            "st_size": size,
            "st_atime": self.started,
            "st_mtime": self.started,
            "st_ctime": self.started,
            "st_blksize": BLOCK_SIZE,
            "st_blocks": (size + 511) // 512,
        }


class LoggingDatabaseOperations(LoggingMixIn, DatabaseOperations):
    """DatabaseOperations that logs every call (fuse.log-mixin logger)."""
    pass


def mount(vfs: DatabaseVFS, mountpoint: str, foreground: bool = False,
          allow_other: bool = False, trace: bool = False) -> None:
    """
    Mount a DatabaseVFS and serve it until unmounted.

    Calls are dispatched one at a time; the VFS holds a single
    connection and an unsynchronized cache.

    Args:
        vfs: VFS to serve
        mountpoint: Existing directory to mount on
        foreground: Stay attached to the terminal instead of daemonizing
        allow_other: Let other users access the mount
        trace: Log every FUSE call
    """
    operations_class = LoggingDatabaseOperations if trace else DatabaseOperations
    logger.info(f"Mounting on {mountpoint}")
    FUSE(
        operations_class(vfs),
        mountpoint,
        foreground=foreground,
        nothreads=True,
        ro=True,
        allow_other=allow_other,
        fsname="dbfs",
    )
