"""Sync engine for ftpsync - tree listing, diffing, transfers and the upload queue."""

from .comparator import TreeDiffer, dirs_only, files_only
from .engine import SyncEngine, SyncStats
from .ignore import BASE_IGNORES, IgnoreMatcher, IgnoreRule, path_candidates
from .operations import (
    DirectoryMaterializer,
    EnsureResult,
    SyncOperations,
    ancestor_paths,
)
from .paths import PathMapper
from .queue import QueueState, TransferQueue
from .scanner import REMOTE_FILE_TYPES, EntryKind, FileEntry, Side, TreeLister
from .watcher import ChangeWatcher

__all__ = [
    "SyncEngine",
    "SyncStats",
    "TreeDiffer",
    "files_only",
    "dirs_only",
    "BASE_IGNORES",
    "IgnoreMatcher",
    "IgnoreRule",
    "path_candidates",
    "DirectoryMaterializer",
    "EnsureResult",
    "SyncOperations",
    "ancestor_paths",
    "PathMapper",
    "QueueState",
    "TransferQueue",
    "REMOTE_FILE_TYPES",
    "EntryKind",
    "FileEntry",
    "Side",
    "TreeLister",
    "ChangeWatcher",
]
