"""Exceptions raised by ftpsync."""


class SyncerError(Exception):
    """Base exception for all syncer errors."""


class ConfigValidationError(SyncerError):
    """The config file is missing, unreadable or does not match the schema."""


class ListError(SyncerError):
    """A directory could not be listed on one side (usually: it does not exist)."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class TransferError(SyncerError):
    """An upload, download or remote mkdir failed."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class QueueExhaustionError(SyncerError):
    """An upload failed again after its parent directories were recreated."""
