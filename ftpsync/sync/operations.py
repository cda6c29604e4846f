"""Directory creation and file transfer operations."""

import logging
import posixpath
from enum import Enum

from ..client import FtpClient
from ..exceptions import ListError
from .paths import PathMapper
from .scanner import Side

logger = logging.getLogger(__name__)


class EnsureResult(str, Enum):
    """Outcome of ensuring a directory exists."""

    EXISTS = "exists"
    """Directory was already there"""

    CREATED = "created"
    """Directory was missing and has been created"""


def ancestor_paths(path: str) -> list[str]:
    """Return every ancestor prefix of ``path``, root to leaf, including itself.

    The bare local root ``.`` is not included.

    Examples:
        >>> ancestor_paths("a/b/c")
        ['a', 'a/b', 'a/b/c']
        >>> ancestor_paths("./a/b")
        ['./a', './a/b']
    """
    parts = [part for part in path.split("/") if part]
    start = 2 if parts and parts[0] == "." else 1
    return ["/".join(parts[:end]) for end in range(start, len(parts) + 1)]


class DirectoryMaterializer:
    """Makes sure directories exist on either side before transfers."""

    def __init__(self, client: FtpClient, mapper: PathMapper):
        self.client = client
        self.mapper = mapper

    def exists(self, side: Side, path: str) -> bool:
        """Probe whether a directory exists on a side.

        Locally this is a stat call; remotely the listing of the path
        must be non-empty.
        """
        if side is Side.LOCAL:
            try:
                self.mapper.local_fs_path(path).stat()
            except OSError:
                return False
            return True

        remote_path = self.mapper.to_remote(self.mapper.to_local(path))
        try:
            return bool(self.client.ls(remote_path))
        except ListError as e:
            logger.debug(f"Remote probe failed for {remote_path}: {e}")
            return False

    def ensure_dir(self, side: Side, path: str) -> EnsureResult:
        """Create a single directory on a side unless it exists.

        Parent directories are not created.

        Raises:
            OSError: If a local directory cannot be created
            TransferError: If a remote directory cannot be created
        """
        path = self.mapper.to_local(path)
        if self.exists(side, path):
            return EnsureResult.EXISTS

        if side is Side.LOCAL:
            logger.debug(f"Creating local directory {path}")
            self.mapper.local_fs_path(path).mkdir()
        else:
            remote_path = self.mapper.to_remote(path)
            logger.debug(f"Creating remote directory {remote_path}")
            self.client.mkdir(remote_path)
        return EnsureResult.CREATED

    def ensure_dir_recursive(self, path: str, side: Side = Side.REMOTE) -> list[EnsureResult]:
        """Ensure every ancestor of ``path`` exists, root to leaf.

        Slow path used when an upload failed because of missing directories.

        Returns:
            The result for each level, in order
        """
        results = []
        for prefix in ancestor_paths(self.mapper.to_local(path)):
            results.append(self.ensure_dir(side, prefix))
        return results


class SyncOperations:
    """Uploads and downloads single files between the two sides."""

    def __init__(
        self,
        client: FtpClient,
        mapper: PathMapper,
        materializer: DirectoryMaterializer,
    ):
        """Initialize sync operations.

        Args:
            client: FTP client
            mapper: Path mapper for namespace translation
            materializer: Used to create the local parent before downloads
        """
        self.client = client
        self.mapper = mapper
        self.materializer = materializer

    def upload(self, path: str) -> str:
        """Upload a local file to the same place under the remote root.

        Returns:
            The remote path written

        Raises:
            TransferError: If the upload fails
        """
        path = self.mapper.to_local(path)
        remote_path = self.mapper.to_remote(path)
        self.client.put(self.mapper.local_fs_path(path), remote_path)
        return remote_path

    def download(self, path: str) -> str:
        """Download a remote file into the local tree.

        The local parent directory is created if missing.

        Returns:
            The local path written

        Raises:
            TransferError: If the download fails
        """
        path = self.mapper.to_local(path)
        self.materializer.ensure_dir(Side.LOCAL, posixpath.dirname(path) or ".")
        self.client.get(self.mapper.to_remote(path), self.mapper.local_fs_path(path))
        return path
