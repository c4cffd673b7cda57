"""One-way tree synchronisation.

Public API for diffing an incoming directory tree against an installed
one and copying it over.

Modules:

- ``models``       -- ``SyncMode``, ``ChangeKind``, ``ChangeRecord``.
- ``synchronizer`` -- ``DirectorySynchronizer`` and ``sync_trees``.

Usage example
-------------
::

    from pathlib import Path
    from kit_updater.sync import SyncMode, sync_trees

    preview = sync_trees(Path("incoming"), Path(".kit-core"))
    for change in preview:
        print(change.marker, change.relative_path)

    sync_trees(Path("incoming"), Path(".kit-core"), SyncMode.APPLY)
"""

from .models import ChangeKind, ChangeRecord, SyncMode
from .synchronizer import DirectorySynchronizer, sync_trees

__all__ = [
    "ChangeKind",
    "ChangeRecord",
    "DirectorySynchronizer",
    "SyncMode",
    "sync_trees",
]
