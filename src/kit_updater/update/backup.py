"""Backup snapshots of the installed tree.

A snapshot is a full copy placed next to the installed tree as
``<name>.backup-<timestamp>``.  It exists for manual recovery only:
nothing in the engine ever restores from it.
"""

from __future__ import annotations

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from kit_updater.errors import BackupError
from kit_updater.update.models import Backup, BackupOutcome, BackupPolicy

logger = logging.getLogger(__name__)

_MAX_NAME_ATTEMPTS = 100


class BackupManager:
    """Create and finalize snapshots of an installed tree.

    Args:
        clock: Returns the current UTC time; injectable for tests.
    """

    def __init__(
        self, clock: Callable[[], datetime] | None = None
    ) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def snapshot(self, destination: Path) -> Backup:
        """Copy *destination* to a sibling backup directory.

        Raises:
            BackupError: If the copy fails.  A partial copy is removed.
        """
        created_at = self._clock()
        backup_path = self.backup_path_for(destination, created_at)

        try:
            shutil.copytree(destination, backup_path, symlinks=True)
        except (shutil.Error, OSError) as exc:
            if backup_path.exists():
                shutil.rmtree(backup_path, ignore_errors=True)
            raise BackupError(
                f"Backup of {destination} failed: {exc}",
                hints=[f"Check free space and permissions in {destination.parent}"],
            ) from exc

        logger.info("Backup created: %s", backup_path)
        return Backup(path=backup_path, created_at=created_at)

    def finalize(
        self,
        backup: Backup,
        outcome: BackupOutcome,
        policy: BackupPolicy,
    ) -> Path | None:
        """Keep or remove *backup* after the apply step.

        The backup is removed only on ``SUCCESS`` with ``DISCARD``.  In every
        other case it stays on disk as the recovery point.

        Returns:
            The backup path if it was retained, else ``None``.
        """
        if outcome == BackupOutcome.SUCCESS and policy == BackupPolicy.DISCARD:
            try:
                shutil.rmtree(backup.path)
            except OSError as exc:
                logger.warning(
                    "Could not remove backup %s: %s", backup.path, exc
                )
                return backup.path
            logger.info("Backup removed: %s", backup.path)
            return None

        logger.info("Backup retained: %s", backup.path)
        return backup.path

    @staticmethod
    def backup_path_for(destination: Path, created_at: datetime) -> Path:
        """Return a free ``<name>.backup-<timestamp>`` path next to *destination*."""
        stamp = created_at.strftime("%Y%m%d-%H%M%S")
        base = destination.parent / f"{destination.name}.backup-{stamp}"
        candidate = base
        counter = 0
        while candidate.exists():
            counter += 1
            if counter > _MAX_NAME_ATTEMPTS:
                raise BackupError(f"Too many existing backups named {base}")
            candidate = base.with_name(f"{base.name}-{counter}")
        return candidate
