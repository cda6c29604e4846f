"""Syncer session: validate, connect, sync once, then optionally watch."""

import logging
import threading
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .client import FtpClient
from .config import SyncerConfig, validate_config
from .exceptions import SyncerError
from .output import OutputFormatter
from .reload import BrowserSyncNotifier
from .sync.engine import SyncEngine, SyncStats
from .sync.ignore import IgnoreMatcher, path_candidates
from .sync.paths import PathMapper
from .sync.queue import TransferQueue
from .sync.watcher import ChangeWatcher

logger = logging.getLogger(__name__)


class SyncerState(str, Enum):
    """Lifecycle of a syncer session."""

    VALIDATING = "validating"
    CONNECTING = "connecting"
    SYNCING = "syncing"
    WATCHING = "watching"
    EXITING = "exiting"


class Syncer:
    """One sync session: owns one config, one FTP session and one queue.

    Examples:
        >>> syncer = Syncer(load_config_data())
        >>> exit_code = syncer.run(watch=True)
    """

    def __init__(
        self,
        config: Any,
        local_root: Optional[Path] = None,
        output: Optional[OutputFormatter] = None,
        client_factory: Callable[[SyncerConfig], FtpClient] = FtpClient.from_config,
        notifier: Optional[Callable[[str], None]] = None,
        watcher_factory: Callable[..., ChangeWatcher] = ChangeWatcher,
        config_file: Optional[Path] = None,
    ):
        """Initialize a syncer.

        Args:
            config: Raw config document (validated by :meth:`run`)
            local_root: Local sync root (defaults to the working directory)
            output: Output formatter for displaying progress
            client_factory: Builds the FTP client from the validated config
            notifier: Reload hook; defaults to a browser-sync notifier when
                enabled in the config
            watcher_factory: Builds the change watcher for watch mode
            config_file: Path of the config file; never synced when it lives
                inside the local root
        """
        self.raw_config = config
        self.local_root = (local_root or Path.cwd()).resolve()
        self.output = output or OutputFormatter()
        self.client_factory = client_factory
        self.notifier = notifier
        self.watcher_factory = watcher_factory
        self.config_file = config_file

        self.state = SyncerState.VALIDATING
        self.config: Optional[SyncerConfig] = None
        self.client: Optional[FtpClient] = None
        self.mapper: Optional[PathMapper] = None
        self.ignore: Optional[IgnoreMatcher] = None
        self.queue: Optional[TransferQueue] = None
        self.stats: Optional[SyncStats] = None

        self._stop = threading.Event()
        self._fatal: Optional[BaseException] = None

    def run(self, watch: bool = False, dry_run: bool = False) -> int:
        """Run the session to completion.

        Args:
            watch: Keep uploading local changes after the initial sync
            dry_run: Only report what the initial sync would transfer

        Returns:
            Process exit code: 0 on success or user stop, 1 on a fatal error
        """
        try:
            self.validate()
            self.connect()
            self.sync(dry_run=dry_run)
            if watch and not dry_run:
                self.watch()
        except KeyboardInterrupt:
            return self.exit()
        except Exception as e:
            return self.exit(e)
        return self.exit()

    def validate(self) -> SyncerConfig:
        self.state = SyncerState.VALIDATING
        self.config = validate_config(self.raw_config)
        self.mapper = PathMapper(self.config.sync.path, local_root=self.local_root)
        self.ignore = IgnoreMatcher(
            self.config.sync.ignore, config_file=self._relative_config_file()
        )
        return self.config

    def _relative_config_file(self) -> Optional[str]:
        if self.config_file is None:
            return None
        try:
            return Path(self.config_file).resolve().relative_to(self.local_root).as_posix()
        except ValueError:
            return None

    def connect(self) -> FtpClient:
        """Create the FTP session handle; the handshake happens on first use."""
        if self.config is None:
            raise SyncerError("Config must be validated before connecting")
        self.state = SyncerState.CONNECTING
        self.client = self.client_factory(self.config)
        return self.client

    def _engine(self, dry_run: bool = False) -> SyncEngine:
        if self.client is None or self.mapper is None or self.ignore is None:
            raise SyncerError("Syncer is not connected")
        return SyncEngine(
            self.client, self.mapper, self.ignore, output=self.output, dry_run=dry_run
        )

    def sync(self, dry_run: bool = False) -> SyncStats:
        """Run the initial full-tree sync from the root."""
        engine = self._engine(dry_run=dry_run)
        self.state = SyncerState.SYNCING
        self.stats = engine.run(".")
        self._display_summary(self.stats, dry_run)
        return self.stats

    def _display_summary(self, stats: SyncStats, dry_run: bool) -> None:
        if self.output.quiet:
            return
        verb = "Would transfer" if dry_run else "Transferred"
        self.output.print("")
        self.output.success(
            f"{verb} {stats.transfers} file(s) "
            f"({stats.uploads} up, {stats.downloads} down, "
            f"{self.output.format_size(stats.bytes_transferred)}) "
            f"across {stats.directories} director(y/ies)"
        )

    def _build_queue(self) -> TransferQueue:
        engine = self._engine()
        if self.notifier is None and self.config is not None and self.config.reload.enabled:
            self.notifier = BrowserSyncNotifier(self.config.reload.url)
        return TransferQueue(
            engine.operations,
            engine.materializer,
            on_transfer=self._on_transfer,
            output=self.output,
        )

    def _on_transfer(self, path: str) -> None:
        if self.notifier is not None:
            self.output.action("RELOAD", path)
            self.notifier(path)

    def on_file_change(self, path: str) -> None:
        """Queue a changed file and work the queue.

        Called by the watcher with an absolute path.
        """
        if self.queue is None or self.mapper is None or self.ignore is None:
            return
        local_path = self.mapper.to_local(path)
        if not local_path.startswith("./"):
            logger.debug(f"Dropping change outside the local root: {path}")
            return
        if self.ignore.is_ignored(path_candidates(local_path, include_ancestors=True)):
            return
        self.queue.push(local_path)
        try:
            self.queue.work()
        except Exception as e:
            self._fatal = e
            self._stop.set()

    def watch(self) -> None:
        """Upload local changes until stopped or until an upload fails for good."""
        self.queue = self._build_queue()
        self.state = SyncerState.WATCHING
        watcher = self.watcher_factory(self.local_root, self.on_file_change)
        watcher.start()
        self.output.info(f"Watching {self.local_root} for changes (Ctrl+C to stop)")
        try:
            while not self._stop.wait(0.5):
                pass
        finally:
            watcher.stop()
        if self._fatal is not None:
            raise self._fatal

    def stop(self) -> None:
        """Ask a watching syncer to exit cleanly."""
        self._stop.set()

    def exit(self, err: Optional[BaseException] = None) -> int:
        """Close the FTP session and report how the session ended.

        Returns:
            1 if ``err`` is given, otherwise 0
        """
        self.state = SyncerState.EXITING
        if err is not None:
            logger.debug("Syncer failed", exc_info=err)
            self.output.error_pair(type(err).__name__, str(err))
        if self.client is not None:
            self.client.quit()
        if isinstance(self.notifier, BrowserSyncNotifier):
            self.notifier.close()
        return 1 if err is not None else 0
