"""State machine that runs one update of an installed tree.

``Idle -> Preflight -> Fetch -> Plan -> [Report] | Backup -> Apply -> Cleanup -> Done``

Any failure moves the run to ``Failed``.  ``Cleanup`` runs on every path:
it removes the temporary fetch workspace and finalizes the backup (kept on
failure, dropped on success unless the policy retains it).  There is no
retry and no rollback; a failed run is re-invoked from scratch by the
caller.

All inputs come from the ``UpdateContext``; the orchestrator holds no
module-level state, so independent runs never interfere.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
import tempfile
from pathlib import Path

from kit_updater.document import (
    ParsedDocument,
    dump_config,
    merge_config,
    new_keys,
    parse_config_document,
)
from kit_updater.errors import (
    FetchError,
    PreconditionError,
    SyncError,
    UpdateError,
    fetch_hints,
)
from kit_updater.file_handler import read_text_if_exists, write_text_atomic
from kit_updater.sync import DirectorySynchronizer
from kit_updater.update.backup import BackupManager
from kit_updater.update.fetch import Fetcher, create_fetcher, display_repository
from kit_updater.update.models import (
    Backup,
    BackupOutcome,
    ConfigAction,
    HookStatus,
    UpdateContext,
    UpdatePlan,
    UpdateResult,
    UpdateState,
    UpdateTarget,
)
from kit_updater.validators import validate_branch_name, validate_repository
from kit_updater.version import detect_version

logger = logging.getLogger(__name__)


class UpdateOrchestrator:
    """Drive a single update run.

    Args:
        context: Inputs of the run.
        fetcher: Fetch collaborator; defaults to ``GitFetcher``.
        backup_manager: Snapshot provider; defaults to ``BackupManager()``.
    """

    def __init__(
        self,
        context: UpdateContext,
        fetcher: Fetcher | None = None,
        backup_manager: BackupManager | None = None,
    ) -> None:
        self.context = context
        self.fetcher = fetcher or create_fetcher("git")
        self.backup_manager = backup_manager or BackupManager()

        self.state = UpdateState.IDLE
        self.history: list[UpdateState] = []
        self.plan: UpdatePlan | None = None
        self.backup: Backup | None = None
        self.post_update: HookStatus | None = None
        self._workspace: Path | None = None

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def run(self) -> UpdateResult:
        """Execute the run.

        Returns:
            ``UpdateResult`` in state ``REPORT`` (dry run) or ``DONE``.

        Raises:
            UpdateError: On any fatal failure, after Cleanup.  When a backup
                was taken, ``backup_path`` names the recovery point.
        """
        if self.state != UpdateState.IDLE:
            raise RuntimeError("An UpdateOrchestrator can only run once")

        try:
            plan = self._run_steps()
        except BaseException as exc:
            retained = self._cleanup(BackupOutcome.FAILURE)
            self._enter(UpdateState.FAILED)
            if isinstance(exc, UpdateError) and retained is not None:
                exc.backup_path = retained
            logger.error("Update failed: %s", exc)
            raise

        retained = self._cleanup(BackupOutcome.SUCCESS)
        self._enter(
            UpdateState.REPORT if self.context.dry_run else UpdateState.DONE
        )
        return UpdateResult(
            state=self.state,
            plan=plan,
            context=self.context,
            backup_path=retained,
            history=list(self.history),
            post_update=self.post_update,
        )

    def _run_steps(self) -> UpdatePlan:
        self._enter(UpdateState.PREFLIGHT)
        target = self._preflight()

        self._enter(UpdateState.FETCH)
        incoming_root = self._fetch(target)

        self._enter(UpdateState.PLAN)
        plan = self.plan = self._plan(incoming_root)

        if self.context.dry_run:
            return plan

        self._enter(UpdateState.BACKUP)
        self.backup = self.backup_manager.snapshot(self.context.installed_root)

        self._enter(UpdateState.APPLY)
        self._apply(incoming_root, plan)
        return plan

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _preflight(self) -> UpdateTarget:
        root = self.context.installed_root
        if not root.is_dir():
            raise PreconditionError(
                f"No installed tree found at {root}",
                hints=[
                    "Run the installer in this project first",
                    "Or point --path at an existing installation",
                ],
            )

        target = self.context.target
        if target is None or not target.repository.strip():
            raise PreconditionError(
                "Could not determine the repository to update from",
                hints=[
                    "Pass --repo=owner/name",
                    "Or set KIT_UPDATE_REPO / update.repository in the config file",
                ],
            )

        for ok, message in (
            validate_repository(target.repository),
            validate_branch_name(target.branch),
        ):
            if not ok:
                raise PreconditionError(message)

        logger.info(
            "Updating %s from %s (branch %s)",
            root,
            target.repository,
            target.branch,
        )
        return target

    def _fetch(self, target: UpdateTarget) -> Path:
        self._workspace = Path(tempfile.mkdtemp(prefix="kit-update-"))
        hints = fetch_hints(display_repository(target.repository), target.branch)

        try:
            checkout = self.fetcher.fetch(target, self._workspace)
        except FetchError:
            raise
        except Exception as exc:
            raise FetchError(f"Fetch failed: {exc}", hints=hints) from exc

        incoming_root = checkout / self.context.source_dir
        if not incoming_root.is_dir():
            raise FetchError(
                f"{self.context.source_dir} not found in repository {target.repository}",
                hints=[
                    f"Check that branch {target.branch!r} ships the {self.context.source_dir} tree"
                ],
            )
        return incoming_root

    def _plan(self, incoming_root: Path) -> UpdatePlan:
        ctx = self.context
        try:
            current = read_text_if_exists(ctx.config_path)
            incoming = read_text_if_exists(incoming_root / ctx.config_file)
        except OSError as exc:
            raise UpdateError(
                f"Cannot read configuration document: {exc}"
            ) from exc

        current_doc = parse_config_document(current[0]) if current else None
        incoming_doc = parse_config_document(incoming[0]) if incoming else None

        skipped = _skipped_count(current_doc) + _skipped_count(incoming_doc)
        if skipped:
            logger.warning(
                "%d line(s) of %s are outside the supported format and were ignored",
                skipped,
                ctx.config_file,
            )

        merged = None
        config_text = None
        settings: list[str] = []
        if incoming_doc is None:
            action = ConfigAction.KEEP
        elif ctx.force:
            action = ConfigAction.REPLACE
            merged = incoming_doc.tree
        elif current_doc is None:
            action = ConfigAction.INSTALL
            merged = incoming_doc.tree
        else:
            action = ConfigAction.MERGE
            merged = merge_config(current_doc.tree, incoming_doc.tree)
            config_text = dump_config(merged)
            settings = new_keys(current_doc.tree, incoming_doc.tree)

        changes = DirectorySynchronizer(incoming_root, ctx.installed_root).plan()

        plan = UpdatePlan(
            changes=changes,
            merged_config=merged,
            config_action=action,
            config_text=config_text,
            config_encoding=current[1] if current else "utf-8",
            new_settings=settings,
            skipped_lines=skipped,
            from_version=detect_version(current_doc.tree if current_doc else None),
            to_version=detect_version(incoming_doc.tree if incoming_doc else None),
        )
        logger.info(
            "Plan: %s -> %s, %s, config %s",
            plan.from_version,
            plan.to_version,
            plan.summary(),
            action.value,
        )
        return plan

    def _apply(self, incoming_root: Path, plan: UpdatePlan) -> None:
        ctx = self.context
        DirectorySynchronizer(incoming_root, ctx.installed_root).apply(plan.changes)

        try:
            if plan.config_text is not None:
                write_text_atomic(
                    ctx.config_path, plan.config_text, plan.config_encoding
                )
            elif plan.config_action in (ConfigAction.REPLACE, ConfigAction.INSTALL):
                shutil.copyfile(incoming_root / ctx.config_file, ctx.config_path)
        except OSError as exc:
            raise SyncError(
                f"Failed to write {ctx.config_file}: {exc}",
                hints=[f"Check permissions on {ctx.config_path.parent}"],
            ) from exc
        logger.info("Config %s: %s", plan.config_action.value, ctx.config_path)

        if ctx.post_update_command:
            self.post_update = self._run_post_update_command(
                ctx.post_update_command
            )

    def _cleanup(self, outcome: BackupOutcome) -> Path | None:
        """Remove the workspace and finalize the backup. Never raises."""
        self._enter(UpdateState.CLEANUP)
        if self._workspace is not None:
            shutil.rmtree(self._workspace, ignore_errors=True)
            logger.debug("Removed workspace %s", self._workspace)
            self._workspace = None

        if self.backup is None:
            return None
        return self.backup_manager.finalize(
            self.backup, outcome, self.context.backup_policy
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _enter(self, state: UpdateState) -> None:
        logger.debug("State %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _run_post_update_command(self, command: str) -> HookStatus:
        """Run the hook in the project directory. Failures only warn."""
        cwd = self.context.installed_root.parent
        logger.info("Running post-update command: %s", command)
        try:
            result = subprocess.run(
                shlex.split(command),
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except (OSError, ValueError) as exc:
            logger.warning(
                "Could not run post-update command %r: %s (run it manually)",
                command,
                exc,
            )
            return HookStatus.NOT_RUN

        if result.stdout:
            logger.debug("post-update stdout: %s", result.stdout.strip())
        if result.returncode != 0:
            logger.warning(
                "Post-update command %r exited with status %d (run it manually): %s",
                command,
                result.returncode,
                result.stderr.strip(),
            )
            return HookStatus.FAILED
        return HookStatus.OK


def _skipped_count(doc: ParsedDocument | None) -> int:
    return len(doc.skipped) if doc else 0
