"""FTP client used as the remote side of the sync."""

from __future__ import annotations

import ftplib
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Optional

from .exceptions import ListError, TransferError
from .utils import DEFAULT_FTP_PORT, parse_list_timestamp, parse_mlsd_timestamp

logger = logging.getLogger(__name__)

# Entry type codes reported by list()/ls()
TYPE_FILE = 0
TYPE_DIRECTORY = 1

_MLSD_TYPES = {
    "file": TYPE_FILE,
    "dir": TYPE_DIRECTORY,
    "cdir": TYPE_DIRECTORY,
    "pdir": TYPE_DIRECTORY,
}

_MARKER_NAMES = (".", "..")


def _parse_mlsd_entry(name: str, facts: dict[str, str]) -> Optional[dict[str, Any]]:
    """Convert one MLSD row into a listing entry.

    Returns:
        Entry dict, or None for types other than files and directories
    """
    kind = facts.get("type", "").lower()
    if kind not in _MLSD_TYPES:
        return None
    if kind == "cdir":
        name = "."
    elif kind == "pdir":
        name = ".."
    return {
        "type": _MLSD_TYPES[kind],
        "name": name,
        "size": facts.get("size", facts.get("sizd", "0")),
        "time": str(parse_mlsd_timestamp(facts.get("modify"))),
    }


def _parse_list_line(line: str) -> Optional[dict[str, Any]]:
    """Parse a unix-style ``LIST`` line.

    Example line::

        -rw-r--r--   1 owner group   1024 Oct 18 07:22 index.html

    Returns:
        Entry dict, or None for totals, links and unparsable lines
    """
    parts = line.split(None, 8)
    if len(parts) < 9 or parts[0][0] not in "-d":
        return None
    return {
        "type": TYPE_DIRECTORY if parts[0][0] == "d" else TYPE_FILE,
        "name": parts[8],
        "size": parts[4],
        "time": str(parse_list_timestamp(parts[5], parts[6], parts[7])),
    }


class FtpClient:
    """Single FTP session shared by every remote operation.

    The connection is opened lazily by the first operation. Requests are
    serialized with a lock because an FTP control connection cannot carry
    overlapping commands.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_FTP_PORT,
        user: str = "anonymous",
        password: str = "",
        timeout: Optional[float] = None,
    ):
        """Initialize the FTP client.

        Args:
            host: FTP server host name
            port: FTP control port
            user: Login user
            password: Login password
            timeout: Socket timeout in seconds (None waits forever)
        """
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.timeout = timeout

        self._ftp: Optional[ftplib.FTP] = None
        self._mlsd_supported = True
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: Any) -> "FtpClient":
        """Build a client from the ``ftp`` section of a SyncerConfig."""
        return cls(
            host=config.ftp.host,
            port=config.ftp.port,
            user=config.ftp.user,
            password=config.ftp.password,
        )

    @property
    def connected(self) -> bool:
        return self._ftp is not None

    def _get_client(self) -> ftplib.FTP:
        """Get or open the FTP connection."""
        if self._ftp is None:
            logger.debug(f"Connecting to {self.host}:{self.port} as {self.user}")
            ftp = ftplib.FTP()
            if self.timeout is None:
                ftp.connect(self.host, self.port)
            else:
                ftp.connect(self.host, self.port, timeout=self.timeout)
            ftp.login(self.user, self.password)
            self._ftp = ftp
        return self._ftp

    def ls(self, path: str) -> list[dict[str, Any]]:
        """List a remote directory including its ``.`` self entry.

        Each entry is a dict with ``type`` (0 file, 1 directory), ``name``,
        ``size`` and ``time`` (epoch milliseconds). Size and time are strings,
        as FTP servers report them.

        Raises:
            ListError: If the path cannot be listed
        """
        with self._lock:
            try:
                ftp = self._get_client()
                if self._mlsd_supported:
                    try:
                        rows = list(ftp.mlsd(path, facts=["type", "size", "modify"]))
                        entries = [_parse_mlsd_entry(name, facts) for name, facts in rows]
                        return [entry for entry in entries if entry is not None]
                    except ftplib.error_perm as e:
                        if not str(e).startswith(("500", "502")):
                            raise
                        logger.debug("MLSD not supported, falling back to LIST")
                        self._mlsd_supported = False

                lines: list[str] = []
                ftp.retrlines(f"LIST -a {path}", lines.append)
                entries = [_parse_list_line(line) for line in lines]
                return [entry for entry in entries if entry is not None]
            except ftplib.all_errors as e:
                raise ListError(f"Cannot list remote path {path}: {e}", path) from e

    def list(self, path: str) -> list[dict[str, Any]]:
        """List the children of a remote directory.

        Raises:
            ListError: If the path cannot be listed
        """
        return [entry for entry in self.ls(path) if entry["name"] not in _MARKER_NAMES]

    def get(self, remote_path: str, local_path: Path) -> None:
        """Download a remote file.

        The data is written to a temporary file next to ``local_path`` and
        moved into place only once the transfer completed, so a failed
        download leaves an existing local file untouched.

        Raises:
            TransferError: If the download fails
        """
        local_path = Path(local_path)
        with self._lock:
            temp_path: Optional[Path] = None
            try:
                ftp = self._get_client()
                with tempfile.NamedTemporaryFile(
                    dir=local_path.parent, prefix=f".{local_path.name}.", delete=False
                ) as tmp_file:
                    temp_path = Path(tmp_file.name)
                    ftp.retrbinary(f"RETR {remote_path}", tmp_file.write)
                # Temporary files are private; keep the usual file mode
                mode = local_path.stat().st_mode if local_path.exists() else 0o644
                os.chmod(temp_path, mode & 0o777)
                os.replace(temp_path, local_path)
                temp_path = None
            except ftplib.all_errors as e:
                raise TransferError(
                    f"Download of {remote_path} failed: {e}", remote_path
                ) from e
            finally:
                if temp_path is not None:
                    temp_path.unlink(missing_ok=True)

    def put(self, local_path: Path, remote_path: str) -> None:
        """Upload a local file.

        Raises:
            TransferError: If the upload fails
        """
        with self._lock:
            try:
                ftp = self._get_client()
                with open(local_path, "rb") as f:
                    ftp.storbinary(f"STOR {remote_path}", f)
            except ftplib.all_errors as e:
                raise TransferError(
                    f"Upload of {local_path} to {remote_path} failed: {e}", remote_path
                ) from e

    def mkdir(self, path: str) -> None:
        """Create a single remote directory.

        Raises:
            TransferError: If the directory cannot be created
        """
        with self._lock:
            try:
                self._get_client().mkd(path)
            except ftplib.all_errors as e:
                raise TransferError(f"Cannot create remote directory {path}: {e}", path) from e

    def quit(self) -> None:
        """Close the session, politely if the server still answers."""
        with self._lock:
            if self._ftp is None:
                return
            try:
                self._ftp.quit()
            except ftplib.all_errors as e:
                logger.debug(f"QUIT failed, closing socket: {e}")
                self._ftp.close()
            finally:
                self._ftp = None
