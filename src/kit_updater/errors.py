"""Error taxonomy for the update engine.

Every fatal condition is an ``UpdateError`` subclass carrying a
human-readable message plus corrective hints, so the CLI can tell the
operator what to do next without inspecting the exception type.

Parse skips are not errors: the config parser drops
unsupported lines and reports them through ``ParsedDocument.skipped``.
"""

from __future__ import annotations

from pathlib import Path


class UpdateError(Exception):
    """Base class for fatal update failures.

    Attributes:
        message: Human-readable error description.
        hints: Corrective actions the operator can take.
        backup_path: Recovery point left on disk, if a backup was taken
            before the failure.
    """

    kind = "update_error"

    def __init__(
        self,
        message: str,
        hints: list[str] | tuple[str, ...] = (),
        backup_path: Path | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.hints = tuple(hints)
        self.backup_path = backup_path


class PreconditionError(UpdateError):
    """Installed tree missing or update target unresolvable. Nothing was changed."""

    kind = "precondition"


class FetchError(UpdateError):
    """The incoming tree could not be obtained. Nothing was changed."""

    kind = "fetch"


class BackupError(UpdateError):
    """The pre-apply snapshot could not be created. Nothing was changed."""

    kind = "backup"


class SyncError(UpdateError):
    """I/O failure while copying files. Files already written stay written."""

    kind = "sync"


# ---------------------------------------------------------------------------
# Corrective hints
# ---------------------------------------------------------------------------


def fetch_hints(repository: str, branch: str) -> list[str]:
    """Standard checklist printed when a remote tree cannot be fetched."""
    return [
        f"Check that the repository exists: {repository}",
        f'Check that the branch "{branch}" exists',
        "Check that you have network access",
    ]


def format_error(error: UpdateError) -> str:
    """Render an ``UpdateError`` for the terminal.

    Examples:
        >>> print(format_error(FetchError("clone failed", ["Check network"])))
        Error (fetch): clone failed
        <BLANKLINE>
        Action:
          - Check network
    """
    lines = [f"Error ({error.kind}): {error.message}"]
    if error.hints:
        lines.append("")
        lines.append("Action:")
        lines.extend(f"  - {hint}" for hint in error.hints)
    if error.backup_path is not None:
        lines.append("")
        lines.append(f"Backup retained for manual recovery: {error.backup_path}")
    return "\n".join(lines)
