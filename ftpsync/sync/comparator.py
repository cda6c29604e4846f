"""Listing comparison logic for sync operations."""

import logging
from collections.abc import Sequence

from .scanner import FileEntry

logger = logging.getLogger(__name__)


class TreeDiffer:
    """Reconciles the listings of one directory from both sides.

    The result contains every entry that needs action:

    - directories, always (they are recursed into)
    - entries that exist on one side only (copied to the other side)
    - files whose sizes differ; the newer one wins

    Files with equal sizes are considered in sync, whatever their timestamps.
    Nothing is ever scheduled for deletion.
    """

    def diff(
        self,
        local_entries: Sequence[FileEntry],
        remote_entries: Sequence[FileEntry],
    ) -> list[FileEntry]:
        """Compare the two listings of one directory.

        Args:
            local_entries: Entries listed from the local side
            remote_entries: Entries listed from the remote side

        Returns:
            Entries needing action, local sweep first, each in input order
        """
        items: list[FileEntry] = []
        recorded: set[str] = set()

        self._add_syncables(local_entries, remote_entries, items, recorded)
        self._add_syncables(remote_entries, local_entries, items, recorded)

        logger.debug(
            f"Diff: {len(local_entries)} local, {len(remote_entries)} remote, "
            f"{len(items)} needing action"
        )
        return items

    def _add_syncables(
        self,
        entries_a: Sequence[FileEntry],
        entries_b: Sequence[FileEntry],
        items: list[FileEntry],
        recorded: set[str],
    ) -> None:
        counterparts = {}
        for entry in entries_b:
            counterparts.setdefault(entry.name, entry)

        for a in entries_a:
            if a.name in recorded:
                continue
            b = counterparts.get(a.name)
            if a.is_dir or b is None:
                items.append(a)
            elif a.size != b.size:
                # Size differs: newer wins
                items.append(a if a.modified_at > b.modified_at else b)
            recorded.add(a.name)


def files_only(items: Sequence[FileEntry]) -> list[FileEntry]:
    return [item for item in items if item.is_file]


def dirs_only(items: Sequence[FileEntry]) -> list[FileEntry]:
    return [item for item in items if item.is_dir]
