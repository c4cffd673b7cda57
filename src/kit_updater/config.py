"""Runtime settings for the kit-update CLI.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    KIT_UPDATE_REPO: Repository to update from (owner/name, URL or path)
    KIT_UPDATE_BRANCH: Branch to fetch (default: main)
    KIT_UPDATE_TRANSPORT: git or archive (default: git)
    KIT_UPDATE_BACKUP_RETENTION: discard or retain (default: discard)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .config_schema import UnifiedConfig
from .update.fetch import TRANSPORTS, normalize_repository
from .update.models import BackupPolicy, UpdateContext, UpdateTarget

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    repository: str | None
    branch: str
    installed_root: Path
    source_dir: str
    config_file: str
    transport: str = "git"
    backup_policy: BackupPolicy = BackupPolicy.DISCARD
    post_update_command: str | None = None

    def to_context(self, force: bool = False, dry_run: bool = False) -> UpdateContext:
        """Build the orchestrator input for one run."""
        target = (
            UpdateTarget(repository=self.repository, branch=self.branch)
            if self.repository
            else None
        )
        return UpdateContext(
            installed_root=self.installed_root,
            target=target,
            config_file=self.config_file,
            source_dir=self.source_dir,
            force=force,
            dry_run=dry_run,
            backup_policy=self.backup_policy,
            post_update_command=self.post_update_command,
        )


def validate_settings(settings: Settings) -> None:
    """Validate settings values and raise ValueError if invalid.

    Normalises GitHub URLs to ``owner/name`` shorthand in place.
    """
    if settings.transport not in TRANSPORTS:
        raise ValueError(
            f"Invalid transport '{settings.transport}': "
            f"must be one of {', '.join(TRANSPORTS)}"
        )

    if settings.repository is not None:
        settings.repository = normalize_repository(settings.repository) or None

    settings.branch = settings.branch.strip()
    if not settings.branch:
        raise ValueError(
            "Branch cannot be empty. Set KIT_UPDATE_BRANCH or pass --branch."
        )

    if not settings.config_file.strip():
        raise ValueError("update.config_file cannot be empty")


def _parse_retention(raw: str, source: str) -> BackupPolicy:
    try:
        return BackupPolicy(raw.strip().lower())
    except ValueError:
        raise ValueError(
            f"Invalid {source} '{raw}': must be 'discard' or 'retain'"
        ) from None


def load_settings(
    unified: UnifiedConfig | None = None,
    path: str | None = None,
    repo: str | None = None,
    branch: str | None = None,
    transport: str | None = None,
    keep_backup: bool = False,
) -> Settings:
    """Resolve settings with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > YAML config > built-in default

    The caller is responsible for calling ``load_dotenv()`` first so that
    .env values are visible through ``os.getenv()``.

    Args:
        unified: Parsed YAML config (``build_config`` output).
        path: ``--path`` override for the installed tree.
        repo: ``--repo`` override.
        branch: ``--branch`` override.
        transport: ``--transport`` override.
        keep_backup: ``--keep-backup`` flag; forces ``RETAIN``.

    Returns:
        Validated Settings instance.

    Raises:
        ValueError: For unknown transports, retention policies or an empty
            branch.
    """
    section = (unified or UnifiedConfig()).update
    backup = (unified or UnifiedConfig()).backup

    repository = repo or os.getenv("KIT_UPDATE_REPO") or section.repository
    final_branch = branch or os.getenv("KIT_UPDATE_BRANCH") or section.branch
    final_transport = (
        transport or os.getenv("KIT_UPDATE_TRANSPORT") or section.transport
    )

    if keep_backup:
        policy = BackupPolicy.RETAIN
    else:
        env_retention = os.getenv("KIT_UPDATE_BACKUP_RETENTION")
        if env_retention:
            policy = _parse_retention(env_retention, "KIT_UPDATE_BACKUP_RETENTION")
        else:
            policy = backup.retention

    installed_root = (
        Path(path).expanduser() if path else Path.cwd() / section.installed_dir
    )

    settings = Settings(
        repository=repository,
        branch=final_branch,
        installed_root=installed_root.resolve(),
        source_dir=section.source_dir,
        config_file=section.config_file,
        transport=final_transport,
        backup_policy=policy,
        post_update_command=section.post_update_command,
    )

    validate_settings(settings)
    logger.debug("Resolved settings: %s", settings)
    return settings
