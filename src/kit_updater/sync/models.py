"""Pydantic models for directory synchronisation.

- ``SyncMode``: simulate (read-only) or apply.
- ``ChangeKind``: whether a file is new or overwrites an existing one.
- ``ChangeRecord``: one classified file of the incoming tree.

Models are frozen (immutable).
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class SyncMode(str, Enum):
    """How ``DirectorySynchronizer.sync`` treats the destination."""

    SIMULATE = "simulate"
    APPLY = "apply"


class ChangeKind(str, Enum):
    """Classification of one incoming file against the installed tree."""

    ADD = "add"
    UPDATE = "update"


class ChangeRecord(BaseModel):
    """A file of the incoming tree and what syncing it does.

    Attributes:
        kind: ``ADD`` if nothing exists at the path yet, else ``UPDATE``.
        relative_path: POSIX path relative to both tree roots.
    """

    kind: ChangeKind
    relative_path: str

    model_config = {"frozen": True}

    @property
    def marker(self) -> str:
        """One-character marker used in plan listings."""
        return "+" if self.kind == ChangeKind.ADD else "~"
