"""Update report formatting functions.

Provides human-readable and machine-readable output for update runs:

- ``format_update_plan`` -- dry-run preview, one line per file.
- ``format_update_result`` -- summary after a run (dry or applied).
- ``plan_to_json`` / ``result_to_json`` -- structured dicts for ``--json``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from kit_updater.update.fetch import display_repository

if TYPE_CHECKING:
    from .models import UpdateContext, UpdatePlan, UpdateResult

from .models import ConfigAction, HookStatus

# ------------------------------------------------------------------
# Human-readable report
# ------------------------------------------------------------------


def format_update_plan(plan: UpdatePlan, context: UpdateContext) -> str:
    """Format a plan as a dry-run preview.

    Every change record is listed in plan order, ``+`` for files new to
    the installed tree and ``~`` for files that would be overwritten.

    Args:
        plan: The computed plan.
        context: Inputs of the run.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []
    lines.append("DRY RUN -- No changes will be made")
    if context.target is not None:
        lines.append(
            f"Source: {display_repository(context.target.repository)} "
            f"(branch {context.target.branch})"
        )
    lines.append(f"Installed: {context.installed_root}")
    lines.append(f"Version: {plan.from_version} -> {plan.to_version}")
    lines.append(_config_line(plan, context))
    if plan.skipped_lines:
        lines.append(
            f"Warning: {plan.skipped_lines} unsupported config line(s) ignored"
        )
    lines.append("")

    if plan.changes:
        lines.append("Files:")
        for change in plan.changes:
            lines.append(f"  {change.marker} {change.relative_path}")
        lines.append("")
    else:
        lines.append("No files in incoming tree.")
        lines.append("")

    if context.post_update_command:
        lines.append(f"Would run: {context.post_update_command}")
        lines.append("")

    lines.append(f"Total: {plan.summary()}")
    return "\n".join(lines).rstrip()


def format_update_result(result: UpdateResult) -> str:
    """Format the outcome of a run.

    Dry runs render the full preview; applied runs render a summary.
    """
    if result.dry_run:
        return format_update_plan(result.plan, result.context)

    plan = result.plan
    lines: list[str] = []
    lines.append(f"Updated {result.context.installed_root}")
    lines.append(f"Version: {plan.from_version} -> {plan.to_version}")
    lines.append(f"Files: {plan.summary()}")
    lines.append(_config_line(plan, result.context))

    if plan.new_settings:
        lines.append("New settings:")
        for key in plan.new_settings:
            lines.append(f"  + {key}")

    if result.backup_path is not None:
        lines.append(f"Backup kept at: {result.backup_path}")
    command = result.context.post_update_command
    if command and result.post_update is not None:
        label = _HOOK_LABELS[result.post_update]
        lines.append(f"{label}: {command}")

    return "\n".join(lines).rstrip()


_HOOK_LABELS = {
    HookStatus.OK: "Ran",
    HookStatus.FAILED: "Failed",
    HookStatus.NOT_RUN: "Could not run",
}


def _config_line(plan: UpdatePlan, context: UpdateContext) -> str:
    line = (
        f"Config: {context.config_file} "
        f"[{plan.config_action.value}] {plan.config_action.description}"
    )
    if plan.config_action == ConfigAction.MERGE:
        line += f", {len(plan.new_settings)} new setting(s)"
    return line


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def plan_to_json(plan: UpdatePlan) -> dict:
    """Convert a plan to a structured dict for JSON serialisation."""
    return {
        "from_version": plan.from_version,
        "to_version": plan.to_version,
        "config": {
            "action": plan.config_action.value,
            "new_settings": list(plan.new_settings),
            "skipped_lines": plan.skipped_lines,
        },
        "counts": {
            "total": len(plan.changes),
            "added": len(plan.added),
            "updated": len(plan.updated),
        },
        "changes": [
            {"kind": c.kind.value, "path": c.relative_path}
            for c in plan.changes
        ],
    }


def result_to_json(result: UpdateResult) -> dict:
    """Convert an update result to a structured dict for JSON serialisation.

    Args:
        result: The finished run.

    Returns:
        Dict with run info, the plan, and the visited states.
    """
    target = result.context.target
    return {
        "state": result.state.value,
        "dry_run": result.dry_run,
        "installed_root": str(result.context.installed_root),
        "repository": target.repository if target else None,
        "branch": target.branch if target else None,
        "force": result.context.force,
        "backup_path": str(result.backup_path) if result.backup_path else None,
        "post_update": result.post_update.value if result.post_update else None,
        "plan": plan_to_json(result.plan),
        "history": [state.value for state in result.history],
    }
