"""ftpsync - keep a local directory and an FTP directory mirrored."""

from .client import FtpClient
from .config import SyncerConfig, load_config_data, validate_config
from .exceptions import (
    ConfigValidationError,
    ListError,
    QueueExhaustionError,
    SyncerError,
    TransferError,
)
from .syncer import Syncer, SyncerState

__version__ = "0.2.0"

__all__ = [
    "FtpClient",
    "Syncer",
    "SyncerState",
    "SyncerConfig",
    "load_config_data",
    "validate_config",
    "SyncerError",
    "ConfigValidationError",
    "ListError",
    "QueueExhaustionError",
    "TransferError",
]
