"""Pydantic models for an update run.

- ``UpdateTarget``: repository and branch to pull from.
- ``UpdateContext``: everything one run needs, threaded through every state.
- ``UpdatePlan``: computed once in the Plan state, then read-only.
- ``Backup``: snapshot of the installed tree taken before Apply.
- ``UpdateResult``: what the CLI reports after a successful run.

All models are frozen (immutable).
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from kit_updater.sync.models import ChangeKind, ChangeRecord

DEFAULT_BRANCH = "main"
DEFAULT_CONFIG_FILE = "core-config.yaml"
DEFAULT_TREE_DIR = ".kit-core"


class UpdateState(str, Enum):
    """States of the update state machine."""

    IDLE = "idle"
    PREFLIGHT = "preflight"
    FETCH = "fetch"
    PLAN = "plan"
    REPORT = "report"
    BACKUP = "backup"
    APPLY = "apply"
    CLEANUP = "cleanup"
    DONE = "done"
    FAILED = "failed"


class BackupPolicy(str, Enum):
    """What happens to a backup after a successful apply."""

    RETAIN = "retain"
    DISCARD = "discard"


class BackupOutcome(str, Enum):
    """Outcome passed to ``BackupManager.finalize``."""

    SUCCESS = "success"
    FAILURE = "failure"


class HookStatus(str, Enum):
    """Outcome of the post-update command."""

    OK = "ok"
    FAILED = "failed"
    NOT_RUN = "not_run"


class ConfigAction(str, Enum):
    """How the configuration document is handled during Apply."""

    MERGE = "merge"
    REPLACE = "replace"
    INSTALL = "install"
    KEEP = "keep"

    @property
    def description(self) -> str:
        return _CONFIG_ACTION_DESCRIPTIONS[self]


_CONFIG_ACTION_DESCRIPTIONS = {
    ConfigAction.MERGE: "preserve user values, add new fields",
    ConfigAction.REPLACE: "overwrite with incoming config (force)",
    ConfigAction.INSTALL: "no installed config, use incoming config",
    ConfigAction.KEEP: "no incoming config, installed config untouched",
}


class UpdateTarget(BaseModel):
    """Remote source of the incoming tree.

    Attributes:
        repository: ``owner/name`` shorthand, clone URL or local path.
        branch: Branch to fetch.
    """

    repository: str
    branch: str = DEFAULT_BRANCH

    model_config = {"frozen": True}


class UpdateContext(BaseModel):
    """Inputs of one orchestrator run.

    Attributes:
        installed_root: Directory holding the installed tree.
        target: Where to fetch from; ``None`` fails Preflight.
        config_file: Config document path relative to both tree roots.
        source_dir: Directory inside the fetched checkout that holds the
            incoming tree.
        force: Replace the config document instead of merging it.
        dry_run: Stop after Plan and report.
        backup_policy: Keep or drop the backup after a successful apply.
        post_update_command: Optional shell command run after Apply.
    """

    installed_root: Path
    target: UpdateTarget | None = None
    config_file: str = DEFAULT_CONFIG_FILE
    source_dir: str = DEFAULT_TREE_DIR
    force: bool = False
    dry_run: bool = False
    backup_policy: BackupPolicy = BackupPolicy.DISCARD
    post_update_command: str | None = None

    model_config = {"frozen": True}

    @property
    def config_path(self) -> Path:
        """Absolute path of the installed config document."""
        return self.installed_root / self.config_file


class UpdatePlan(BaseModel):
    """Everything Apply (or the dry-run report) needs.

    Attributes:
        changes: One record per incoming file, sorted by path.
        merged_config: Tree to persist; the incoming tree when forced,
            ``None`` when there is no incoming config.
        config_action: How the config document will be written.
        config_text: Serialised merged document (``MERGE`` only).
        config_encoding: Encoding of the installed document, reused on write.
        new_settings: Dotted keys the merge adds to the installed config.
        skipped_lines: Number of config lines the parser dropped.
        from_version: Installed version.
        to_version: Incoming version.
    """

    changes: list[ChangeRecord] = []
    merged_config: dict[str, Any] | None = None
    config_action: ConfigAction = ConfigAction.KEEP
    config_text: str | None = None
    config_encoding: str = "utf-8"
    new_settings: list[str] = []
    skipped_lines: int = 0
    from_version: str
    to_version: str

    model_config = {"frozen": True}

    @property
    def added(self) -> list[ChangeRecord]:
        """Records for files new to the installed tree."""
        return [c for c in self.changes if c.kind == ChangeKind.ADD]

    @property
    def updated(self) -> list[ChangeRecord]:
        """Records for files that overwrite an installed file."""
        return [c for c in self.changes if c.kind == ChangeKind.UPDATE]

    def summary(self) -> str:
        """One-line count summary."""
        return (
            f"{len(self.changes)} files "
            f"({len(self.added)} added, {len(self.updated)} updated)"
        )


class Backup(BaseModel):
    """A snapshot of the installed tree.

    Attributes:
        path: Directory holding the copy, sibling of the installed tree.
        created_at: When the snapshot was taken (UTC).
    """

    path: Path
    created_at: datetime

    model_config = {"frozen": True}


class UpdateResult(BaseModel):
    """Outcome of a run that did not fail.

    Attributes:
        state: Terminal state, ``REPORT`` for dry runs or ``DONE``.
        plan: The plan that was reported or applied.
        context: The run's inputs.
        backup_path: Backup left on disk, if any.
        history: Every state visited, in order.
        post_update: Outcome of the post-update command, ``None`` when
            none ran.
    """

    state: UpdateState
    plan: UpdatePlan
    context: UpdateContext
    backup_path: Path | None = None
    history: list[UpdateState] = []
    post_update: HookStatus | None = None

    model_config = {"frozen": True}

    @property
    def dry_run(self) -> bool:
        return self.state == UpdateState.REPORT
