"""Directory listing utilities for sync operations."""

from __future__ import annotations

import logging
import posixpath
import stat
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..client import TYPE_DIRECTORY, TYPE_FILE, FtpClient
from ..exceptions import ListError
from .paths import PathMapper

logger = logging.getLogger(__name__)


class Side(str, Enum):
    """The two trees being reconciled."""

    LOCAL = "local"
    """Local filesystem"""

    REMOTE = "remote"
    """FTP server"""

    @property
    def other(self) -> Side:
        return Side.REMOTE if self is Side.LOCAL else Side.LOCAL


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


# FTP listing type codes
REMOTE_FILE_TYPES = {
    TYPE_FILE: EntryKind.FILE,
    TYPE_DIRECTORY: EntryKind.DIRECTORY,
}


@dataclass(frozen=True)
class FileEntry:
    """A file or directory found by listing one side."""

    origin: Side
    """Side the entry was listed from"""

    kind: EntryKind
    """File or directory"""

    name: str
    """Base name"""

    path: str
    """Local-namespace path, e.g. ``./assets/app.js``"""

    size: int
    """Size in bytes (meaningless for directories)"""

    modified_at: int
    """Modification time in epoch milliseconds"""

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


def join_path(directory: str, name: str) -> str:
    """Join a directory path and a child name with a forward slash."""
    return posixpath.join(directory, name) if directory else name


class TreeLister:
    """Produces one-level listings of a directory on either side.

    Listings are normalized into FileEntry objects whose paths are always
    in the local namespace, regardless of the side they came from.
    """

    def __init__(self, client: FtpClient, mapper: PathMapper):
        """Initialize the lister.

        Args:
            client: FTP client for remote listings
            mapper: Path mapper for namespace translation
        """
        self.client = client
        self.mapper = mapper

    def list(self, side: Side, path: str) -> list[FileEntry]:
        """List the immediate children of ``path`` on ``side``.

        Raises:
            ListError: If the directory does not exist on that side
        """
        if side is Side.LOCAL:
            return self.list_local(path)
        return self.list_remote(path)

    def list_local(self, path: str) -> list[FileEntry]:
        path = self.mapper.to_local(path)
        directory = self.mapper.local_fs_path(path)
        try:
            children = sorted(directory.iterdir(), key=lambda item: item.name)
        except OSError as e:
            raise ListError(f"Cannot list local path {path}: {e}", path) from e

        entries: list[FileEntry] = []
        for child in children:
            try:
                info = child.stat()
            except OSError as e:
                # Broken symlinks and files removed mid-listing
                logger.debug(f"Skipping unreadable local entry {child}: {e}")
                continue
            entries.append(self._as_local_entry(join_path(path, child.name), info))

        logger.debug(f"Listed {len(entries)} local entries in {path}")
        return entries

    def list_remote(self, path: str) -> list[FileEntry]:
        path = self.mapper.to_local(path)
        remote_path = self.mapper.to_remote(path)
        items = self.client.list(remote_path)

        entries: list[FileEntry] = []
        for item in items:
            entry = self._as_remote_entry(path, item)
            if entry is not None:
                entries.append(entry)

        logger.debug(f"Listed {len(entries)} remote entries in {remote_path}")
        return entries

    def _as_local_entry(self, path: str, info: Any) -> FileEntry:
        kind = EntryKind.DIRECTORY if stat.S_ISDIR(info.st_mode) else EntryKind.FILE
        return FileEntry(
            origin=Side.LOCAL,
            kind=kind,
            name=posixpath.basename(path),
            path=path,
            size=info.st_size,
            modified_at=info.st_mtime_ns // 1_000_000,
        )

    def _as_remote_entry(self, path: str, item: dict[str, Any]) -> FileEntry | None:
        kind = REMOTE_FILE_TYPES.get(item.get("type"))
        if kind is None:
            logger.debug(f"Skipping remote entry of unknown type: {item!r}")
            return None
        return FileEntry(
            origin=Side.REMOTE,
            kind=kind,
            name=item["name"],
            path=join_path(path, item["name"]),
            size=_parse_int(item.get("size")),
            modified_at=_parse_int(item.get("time")),
        )


def _parse_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
