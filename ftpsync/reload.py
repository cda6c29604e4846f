"""Live-reload notifications for a running browser-sync server."""

from __future__ import annotations

import logging
import posixpath

import httpx

from .utils import DEFAULT_RELOAD_URL

logger = logging.getLogger(__name__)

# Transfers of these file types trigger a browser reload
RELOAD_EXTENSIONS = (".css", ".html", ".js")


def is_reloadable(path: str) -> bool:
    """Return True if a transferred path should refresh connected browsers."""
    return posixpath.splitext(path)[1].lower() in RELOAD_EXTENSIONS


class BrowserSyncNotifier:
    """Asks a browser-sync server to reload its clients.

    Uses browser-sync's HTTP protocol endpoint, so the server can be started
    separately, for example with ``browser-sync start --proxy <sync.url>``.
    """

    def __init__(
        self,
        url: str = DEFAULT_RELOAD_URL,
        timeout: float = 5.0,
        client: httpx.Client | None = None,
    ):
        """Initialize the notifier.

        Args:
            url: Base URL of the browser-sync server
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client
        """
        self.url = url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.Client:
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(timeout=httpx.Timeout(self.timeout))
        return self._client

    def reload(self, path: str) -> bool:
        """Tell browser-sync that ``path`` changed.

        Failures are logged, never raised: a missing reload server must not
        stop uploads.

        Returns:
            True if browser-sync accepted the notification
        """
        try:
            response = self._get_client().get(
                f"{self.url}/__browser_sync__",
                params={"method": "reload", "args": posixpath.basename(path)},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Reload notification for {path} failed: {e}")
            return False
        logger.debug(f"Reload sent for {path}")
        return True

    def __call__(self, path: str) -> None:
        self.reload(path)

    def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None
