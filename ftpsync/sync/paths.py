"""Translation between the local and the remote path namespace.

Local paths are relative to the sync root and start with ``.``
(``./assets/app.js``). Remote paths start with the configured remote root
instead (``theme/assets/app.js``). Translation is pure string manipulation.
"""

import posixpath
from pathlib import Path
from typing import Optional, Union


def _split(path: str) -> list[str]:
    return path.replace("\\", "/").split("/")


class PathMapper:
    """Maps paths between the local and remote namespace.

    Examples:
        >>> mapper = PathMapper("theme", local_root=Path("/work"))
        >>> mapper.to_remote("./assets/app.js")
        'theme/assets/app.js'
        >>> mapper.to_local("theme/assets/app.js")
        './assets/app.js'
        >>> mapper.to_local("/work/assets/app.js")
        './assets/app.js'
    """

    def __init__(self, remote_root: str, local_root: Optional[Path] = None):
        """Initialize the mapper.

        Args:
            remote_root: Remote root directory (``sync.path`` in the config)
            local_root: Absolute local root (defaults to the working directory)
        """
        if len(remote_root) > 1:
            remote_root = remote_root.rstrip("/")
        self.remote_root = remote_root
        self.local_root = (local_root or Path.cwd()).absolute()
        self._local_prefix = self.local_root.as_posix()
        self._remote_parts = _split(remote_root) if remote_root != "/" else [""]

    def to_local(self, path: str) -> str:
        """Convert an absolute, local or remote path into a local path."""
        path = path.replace("\\", "/")
        if path == self._local_prefix:
            path = "."
        elif path.startswith(self._local_prefix.rstrip("/") + "/"):
            path = "." + path[len(self._local_prefix.rstrip("/")) :]

        parts = _split(path)
        root_len = len(self._remote_parts)
        if parts[:root_len] == self._remote_parts:
            parts = ["."] + parts[root_len:]
        return "/".join(parts)

    def to_remote(self, path: str) -> str:
        """Convert a local path into a remote path."""
        parts = _split(path)
        if parts[0] != ".":
            return "/".join(parts)
        rest = parts[1:]
        if not rest:
            return self.remote_root
        return posixpath.join(self.remote_root, *rest)

    def local_fs_path(self, path: Union[str, Path]) -> Path:
        """Return the filesystem location of a local path."""
        return self.local_root / self.to_local(str(path))
