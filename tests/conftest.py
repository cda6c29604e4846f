"""Shared fixtures for ftpsync tests."""

import posixpath
from pathlib import Path

import pytest

from ftpsync.exceptions import ListError, TransferError
from ftpsync.output import OutputFormatter
from ftpsync.sync.paths import PathMapper


class FakeFtpClient:
    """In-memory stand-in for FtpClient.

    Directories and files are keyed by remote path. Every call is recorded
    in ``calls`` as ``(operation, path)``.
    """

    def __init__(self, root: str = "theme", root_exists: bool = True):
        self.dirs: set[str] = {root} if root_exists else set()
        self.files: dict[str, tuple[bytes, int]] = {}
        self.calls: list[tuple[str, str]] = []
        self.put_failures = 0
        self.quit_count = 0
        self.clock = 1_000

    def add_dir(self, path: str) -> None:
        self.dirs.add(path)

    def add_file(self, path: str, content: bytes, time: int = 1_000) -> None:
        self.files[path] = (content, time)

    def _parent_exists(self, path: str) -> bool:
        parent = posixpath.dirname(path)
        return parent == "" or parent in self.dirs

    def ls(self, path: str) -> list[dict]:
        self.calls.append(("ls", path))
        if path not in self.dirs:
            raise ListError(f"Cannot list remote path {path}", path)
        rows = [{"type": 1, "name": ".", "size": "0", "time": "0"}]
        for d in sorted(self.dirs):
            if posixpath.dirname(d) == path:
                rows.append({"type": 1, "name": posixpath.basename(d), "size": "0", "time": "0"})
        for f, (content, time) in sorted(self.files.items()):
            if posixpath.dirname(f) == path:
                rows.append(
                    {
                        "type": 0,
                        "name": posixpath.basename(f),
                        "size": str(len(content)),
                        "time": str(time),
                    }
                )
        return rows

    def list(self, path: str) -> list[dict]:
        return [row for row in self.ls(path) if row["name"] not in (".", "..")]

    def put(self, local_path: Path, remote_path: str) -> None:
        self.calls.append(("put", remote_path))
        if self.put_failures > 0:
            self.put_failures -= 1
            raise TransferError(f"Upload of {remote_path} failed: 553", remote_path)
        if not self._parent_exists(remote_path):
            raise TransferError(f"Upload of {remote_path} failed: 550", remote_path)
        try:
            content = Path(local_path).read_bytes()
        except OSError as e:
            raise TransferError(str(e), remote_path) from e
        self.clock += 1
        self.files[remote_path] = (content, self.clock)

    def get(self, remote_path: str, local_path: Path) -> None:
        self.calls.append(("get", remote_path))
        if remote_path not in self.files:
            raise TransferError(f"Download of {remote_path} failed: 550", remote_path)
        Path(local_path).write_bytes(self.files[remote_path][0])

    def mkdir(self, path: str) -> None:
        self.calls.append(("mkdir", path))
        if path in self.dirs or not self._parent_exists(path):
            raise TransferError(f"Cannot create remote directory {path}: 550", path)
        self.dirs.add(path)

    def quit(self) -> None:
        self.quit_count += 1

    def operations(self) -> set[str]:
        return {op for op, _ in self.calls}


@pytest.fixture
def fake_client():
    """Provide an in-memory FTP client rooted at ``theme``."""
    return FakeFtpClient()


@pytest.fixture
def mapper(tmp_path):
    """Provide a path mapper between ``tmp_path`` and remote ``theme``."""
    return PathMapper("theme", local_root=tmp_path)


@pytest.fixture
def quiet_output():
    """Provide an output formatter that prints nothing."""
    return OutputFormatter(quiet=True)


@pytest.fixture
def config_data():
    """Provide a valid raw config document."""
    return {
        "ftp": {"host": "ftp.example.com", "port": 21, "user": "me", "pass": "secret"},
        "sync": {"url": "https://shop.example.com", "path": "theme", "ignore": ["*.scss"]},
    }


@pytest.fixture
def fake_client_class():
    """Provide the FakeFtpClient class for tests needing custom roots."""
    return FakeFtpClient
