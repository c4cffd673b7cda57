"""One-way directory synchronisation from an incoming tree to an installed tree.

Every file under the source root produces exactly one ``ChangeRecord``,
in sorted relative-path order.  Files that only exist in the destination
are never visited, reported or deleted: this is an overlay copy, not a
mirror.

``SIMULATE`` never touches the destination and returns the same records
``APPLY`` would produce against the same snapshot.  ``APPLY`` creates
parent directories as needed and copies each file's bytes (no
permissions, no timestamps).  The first I/O failure aborts the call with
``SyncError``; files copied before it stay copied.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from kit_updater.errors import SyncError
from kit_updater.sync.models import ChangeKind, ChangeRecord, SyncMode

logger = logging.getLogger(__name__)


class DirectorySynchronizer:
    """Diff and copy *source* onto *destination*.

    Args:
        source: Root of the incoming tree.
        destination: Root of the installed tree (may not exist yet).
    """

    def __init__(self, source: Path, destination: Path) -> None:
        self.source = source
        self.destination = destination

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def sync(self, mode: SyncMode = SyncMode.SIMULATE) -> list[ChangeRecord]:
        """Classify every source file and, in ``APPLY`` mode, copy it.

        Returns:
            One ``ChangeRecord`` per source file, sorted by relative path.

        Raises:
            SyncError: If the source cannot be read or a destination path
                cannot be written.
        """
        if mode == SyncMode.APPLY:
            return self.apply()
        return self.plan()

    def plan(self) -> list[ChangeRecord]:
        """Classify source files without touching the destination."""
        changes = []
        for rel_path in self.source_files():
            target = self.destination / rel_path
            kind = ChangeKind.UPDATE if target.exists() else ChangeKind.ADD
            changes.append(ChangeRecord(kind=kind, relative_path=rel_path))
        logger.debug(
            "Planned %d changes from %s to %s",
            len(changes),
            self.source,
            self.destination,
        )
        return changes

    def apply(
        self, changes: list[ChangeRecord] | None = None
    ) -> list[ChangeRecord]:
        """Copy files onto the destination.

        Args:
            changes: A previously computed plan to execute.  When ``None``
                the plan is computed first from the current state.

        Returns:
            The records that were applied.
        """
        if changes is None:
            changes = self.plan()

        for change in changes:
            self._copy(change)

        logger.info(
            "Applied %d changes to %s", len(changes), self.destination
        )
        return list(changes)

    def source_files(self) -> list[str]:
        """Return POSIX paths of all files under the source, sorted."""
        if not self.source.is_dir():
            raise SyncError(
                f"Incoming tree is not a directory: {self.source}",
                hints=["Check that the fetched repository contains the expected tree"],
            )
        try:
            rel_paths = [
                path.relative_to(self.source).as_posix()
                for path in self.source.rglob("*")
                if path.is_file()
            ]
        except OSError as exc:
            raise SyncError(f"Cannot read incoming tree {self.source}: {exc}") from exc
        return sorted(rel_paths)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _copy(self, change: ChangeRecord) -> None:
        src = self.source / change.relative_path
        dst = self.destination / change.relative_path
        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(src, dst)
        except OSError as exc:
            raise SyncError(
                f"Failed to {change.kind.value} {change.relative_path}: {exc}",
                hints=[
                    f"Check permissions on {dst.parent}",
                    "Restore from the backup if the installed tree is now inconsistent",
                ],
            ) from exc
        logger.debug("%s %s", change.kind.value, change.relative_path)


def sync_trees(
    source: Path, destination: Path, mode: SyncMode = SyncMode.SIMULATE
) -> list[ChangeRecord]:
    """Convenience wrapper around ``DirectorySynchronizer.sync``."""
    return DirectorySynchronizer(source, destination).sync(mode)
