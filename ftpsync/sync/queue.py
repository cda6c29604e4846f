"""Serialized upload queue for watch mode."""

import logging
import posixpath
import threading
from collections import deque
from collections.abc import Callable
from enum import Enum
from typing import Optional

from ..exceptions import QueueExhaustionError, TransferError
from ..output import OutputFormatter
from ..reload import is_reloadable
from .operations import DirectoryMaterializer, SyncOperations

logger = logging.getLogger(__name__)


class QueueState(str, Enum):
    IDLE = "idle"
    DRAINING = "draining"


class TransferQueue:
    """FIFO of local paths waiting to be uploaded.

    Only one drain loop runs at a time: a ``work()`` call made while the
    queue is draining returns immediately and its items are picked up by
    the running loop. Duplicate pushes are uploaded twice.

    Each failed upload gets exactly one retry, after recreating every
    ancestor of its remote parent directory. If the retry fails too the
    drain is aborted with :class:`QueueExhaustionError`. Paths whose file
    is gone by the time they are dequeued (editor temp files) are skipped.
    """

    def __init__(
        self,
        operations: SyncOperations,
        materializer: DirectoryMaterializer,
        on_transfer: Optional[Callable[[str], None]] = None,
        output: Optional[OutputFormatter] = None,
    ):
        """Initialize the queue.

        Args:
            operations: Performs the uploads
            materializer: Recreates missing remote directories before a retry
            on_transfer: Called with the path of each uploaded reloadable file
            output: Output formatter for transfer log lines
        """
        self.operations = operations
        self.materializer = materializer
        self.on_transfer = on_transfer
        self.output = output or OutputFormatter()
        self.items: deque[str] = deque()
        self.state = QueueState.IDLE
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self.items)

    @property
    def draining(self) -> bool:
        return self.state is QueueState.DRAINING

    def push(self, path: str) -> None:
        """Append a local path to the queue."""
        with self._lock:
            self.items.append(path)
        logger.debug(f"Queued {path} ({len(self.items)} waiting)")

    def _next(self) -> Optional[str]:
        with self._lock:
            if not self.items:
                self.state = QueueState.IDLE
                return None
            return self.items.popleft()

    def work(self) -> int:
        """Drain the queue until it is empty.

        Returns:
            Number of files uploaded by this call (0 if another drain is running)

        Raises:
            QueueExhaustionError: If an upload failed after its retry
        """
        with self._lock:
            if self.state is QueueState.DRAINING:
                return 0
            self.state = QueueState.DRAINING

        uploaded = 0
        try:
            while True:
                path = self._next()
                if path is None:
                    break
                if not self.operations.mapper.local_fs_path(path).is_file():
                    logger.debug(f"Skipping {path}: no longer exists locally")
                    continue
                self._upload_with_retry(path)
                uploaded += 1
                if self.on_transfer is not None and is_reloadable(path):
                    self.on_transfer(path)
        except BaseException:
            with self._lock:
                self.state = QueueState.IDLE
            raise
        return uploaded

    def _upload_with_retry(self, path: str) -> None:
        self.output.action("UPLD", path)
        try:
            self.operations.upload(path)
            return
        except TransferError as e:
            logger.debug(f"Upload of {path} failed, recreating directories: {e}")

        parent = posixpath.dirname(path) or "."
        try:
            self.materializer.ensure_dir_recursive(parent)
            self.operations.upload(path)
        except TransferError as e:
            raise QueueExhaustionError(
                "Upload failed! If you have created new deeply nested directories, "
                "please exit and run sync or watch again."
            ) from e
