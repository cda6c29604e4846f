"""Local file change watcher for watch mode."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class _ChangeHandler(FileSystemEventHandler):
    """Forwards one absolute path per file change to a callback."""

    def __init__(self, callback: Callable[[str], None]) -> None:
        super().__init__()
        self._callback = callback

    def _emit(self, path: str | bytes) -> None:
        if isinstance(path, bytes):
            path = path.decode()
        self._callback(path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(event.src_path)

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(event.dest_path)


class ChangeWatcher:
    """Watches the local root recursively and reports changed files.

    Events are delivered on the observer thread, one at a time.
    """

    def __init__(self, root: Path, callback: Callable[[str], None]) -> None:
        self._root = Path(root).absolute()
        self._handler = _ChangeHandler(callback)
        self._observer: Observer | None = None

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        if self._observer is not None:
            return
        observer = Observer()
        observer.schedule(self._handler, str(self._root), recursive=True)
        observer.start()
        self._observer = observer
        logger.debug(f"Watching {self._root}")

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        logger.debug(f"Stopped watching {self._root}")
