"""Update engine: fetch a remote tree and apply it over the installed one.

Usage::

    from kit_updater.update import UpdateContext, UpdateOrchestrator, UpdateTarget

    ctx = UpdateContext(
        installed_root=Path(".kit-core"),
        target=UpdateTarget(repository="acme/kit"),
        dry_run=True,
    )
    result = UpdateOrchestrator(ctx).run()
"""

from .backup import BackupManager
from .fetch import (
    TRANSPORTS,
    ArchiveFetcher,
    Fetcher,
    GitFetcher,
    create_fetcher,
    normalize_repository,
)
from .models import (
    DEFAULT_BRANCH,
    DEFAULT_CONFIG_FILE,
    DEFAULT_TREE_DIR,
    Backup,
    BackupOutcome,
    BackupPolicy,
    ConfigAction,
    HookStatus,
    UpdateContext,
    UpdatePlan,
    UpdateResult,
    UpdateState,
    UpdateTarget,
)
from .orchestrator import UpdateOrchestrator
from .reporter import (
    format_update_plan,
    format_update_result,
    plan_to_json,
    result_to_json,
)

__all__ = [
    "DEFAULT_BRANCH",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_TREE_DIR",
    "TRANSPORTS",
    "ArchiveFetcher",
    "Backup",
    "BackupManager",
    "BackupOutcome",
    "BackupPolicy",
    "ConfigAction",
    "Fetcher",
    "GitFetcher",
    "HookStatus",
    "UpdateContext",
    "UpdateOrchestrator",
    "UpdatePlan",
    "UpdateResult",
    "UpdateState",
    "UpdateTarget",
    "create_fetcher",
    "format_update_plan",
    "format_update_result",
    "normalize_repository",
    "plan_to_json",
    "result_to_json",
]
