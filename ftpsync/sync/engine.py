"""Core sync engine for the initial full-tree reconciliation."""

import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, TypeVar

from ..client import FtpClient
from ..exceptions import ListError
from ..output import OutputFormatter
from .comparator import TreeDiffer, dirs_only, files_only
from .ignore import IgnoreMatcher
from .operations import DirectoryMaterializer, SyncOperations
from .paths import PathMapper
from .scanner import FileEntry, Side, TreeLister

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


@dataclass
class SyncStats:
    """Counters collected during a sync run."""

    uploads: int = 0
    downloads: int = 0
    directories: int = 0
    bytes_transferred: int = 0

    @property
    def transfers(self) -> int:
        return self.uploads + self.downloads


class SyncEngine:
    """Recursively mirrors the local and remote trees.

    Each directory level is handled the same way: make sure the directory
    exists on both sides, list both sides, diff the listings, transfer the
    files one at a time and finally recurse into subdirectories. Nothing is
    ever deleted.
    """

    def __init__(
        self,
        client: FtpClient,
        mapper: PathMapper,
        ignore: IgnoreMatcher,
        output: Optional[OutputFormatter] = None,
        dry_run: bool = False,
    ):
        """Initialize sync engine.

        Args:
            client: FTP client (one shared session)
            mapper: Path mapper between local and remote namespace
            ignore: Ignore matcher applied to diff results
            output: Output formatter for displaying progress
            dry_run: If True, only report what would be transferred
        """
        self.client = client
        self.mapper = mapper
        self.ignore = ignore
        self.output = output or OutputFormatter()
        self.dry_run = dry_run

        self.lister = TreeLister(client, mapper)
        self.differ = TreeDiffer()
        self.materializer = DirectoryMaterializer(client, mapper)
        self.operations = SyncOperations(client, mapper, self.materializer)
        self.stats = SyncStats()

    def run(self, path: str = ".") -> SyncStats:
        """Sync ``path`` and everything below it.

        Returns:
            Statistics for this run
        """
        self.stats = SyncStats()
        start_time = time.time()
        self.sync_dir(path)
        logger.debug(f"Sync of {path} took {time.time() - start_time:.2f}s")
        return self.stats

    def _fan_out(self, local_call: Callable[[], T], remote_call: Callable[[], U]) -> tuple[T, U]:
        """Run one local and one remote call concurrently."""
        with ThreadPoolExecutor(max_workers=2) as executor:
            local_future = executor.submit(local_call)
            remote_future = executor.submit(remote_call)
            return local_future.result(), remote_future.result()

    def sync_dir(self, path: str) -> None:
        """Sync one directory level, then recurse into its subdirectories."""
        self.output.action("SYNC", path)
        self.stats.directories += 1

        if not self.dry_run:
            self._fan_out(
                lambda: self.materializer.ensure_dir(Side.LOCAL, path),
                lambda: self.materializer.ensure_dir(Side.REMOTE, path),
            )

        items = self.get_sync_items(path)
        self.sync(items)

    def get_sync_items(self, path: str) -> list[FileEntry]:
        """List both sides of a directory and diff them."""
        local_items, remote_items = self._fan_out(
            lambda: self._list(Side.LOCAL, path),
            lambda: self._list(Side.REMOTE, path),
        )
        return self.differ.diff(local_items, remote_items)

    def _list(self, side: Side, path: str) -> list[FileEntry]:
        if not self.dry_run:
            return self.lister.list(side, path)
        try:
            return self.lister.list(side, path)
        except ListError:
            # Missing on this side; the real run would create it
            return []

    def wanted_only(self, items: list[FileEntry]) -> list[FileEntry]:
        """Filter out items matched by the ignore rules."""
        return [item for item in items if not self.ignore.is_ignored([item.name, item.path])]

    def sync(self, items: list[FileEntry]) -> None:
        """Transfer the files of one diff result, then recurse into its directories."""
        items = self.wanted_only(items)
        for item in files_only(items):
            self.sync_file(item)
        for item in dirs_only(items):
            self.sync_dir(item.path)

    def sync_file(self, item: FileEntry) -> None:
        """Copy a file to the side it is missing from (or older on)."""
        if item.origin is Side.LOCAL:
            self.output.action("UPLD", item.path)
            if not self.dry_run:
                self.operations.upload(item.path)
            self.stats.uploads += 1
        else:
            self.output.action("DOWN", item.path)
            if not self.dry_run:
                self.operations.download(item.path)
            self.stats.downloads += 1
        self.stats.bytes_transferred += item.size
