"""Unified configuration schema for kit_updater.

Defines Pydantic models for the tool's own YAML config (not the config
document inside the installed tree) with sections for the update source,
backup handling and logging.

Usage:
    from kit_updater.config_schema import UnifiedConfig, build_config

    raw = load_hierarchical_config()
    unified = build_config(raw)
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, field_validator

from .update.fetch import TRANSPORTS
from .update.models import (
    DEFAULT_BRANCH,
    DEFAULT_CONFIG_FILE,
    DEFAULT_TREE_DIR,
    BackupPolicy,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class UpdateSection(BaseModel):
    """Where updates come from and where they go.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    repository: str | None = Field(
        default=None, description="owner/name, clone URL or local path"
    )
    branch: str = Field(default=DEFAULT_BRANCH, description="Branch to fetch")
    installed_dir: str = Field(
        default=DEFAULT_TREE_DIR,
        description="Installed tree, relative to the working directory",
    )
    source_dir: str = Field(
        default=DEFAULT_TREE_DIR,
        description="Tree directory inside the fetched repository",
    )
    config_file: str = Field(
        default=DEFAULT_CONFIG_FILE,
        description="Config document path relative to the tree root",
    )
    transport: str = Field(default="git", description="git or archive")
    post_update_command: str | None = Field(
        default=None, description="Command run after a successful apply"
    )

    model_config = {"frozen": True}

    @field_validator("transport")
    @classmethod
    def _check_transport(cls, value: str) -> str:
        if value not in TRANSPORTS:
            raise ValueError(
                f"transport must be one of {', '.join(TRANSPORTS)}, got {value!r}"
            )
        return value


class BackupSection(BaseModel):
    """Backup handling.

    Attributes:
        retention: ``discard`` removes the backup after a successful
            update, ``retain`` keeps it.
    """

    retention: BackupPolicy = Field(default=BackupPolicy.DISCARD)

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has sensible defaults, so ``UnifiedConfig()``
    (zero-config) is always valid.
    """

    update: UpdateSection = Field(default_factory=UpdateSection)
    backup: BackupSection = Field(default_factory=BackupSection)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Handles missing sections gracefully; anything absent gets defaults.

    Raises:
        pydantic.ValidationError: For malformed sections or unknown values.
            It subclasses ``ValueError``.
    """
    if not raw_data:
        return UnifiedConfig()

    unknown = set(raw_data) - set(UnifiedConfig.model_fields)
    if unknown:
        logger.warning(
            "Ignoring unknown config sections: %s", ", ".join(sorted(unknown))
        )
    known = {k: v for k, v in raw_data.items() if k in UnifiedConfig.model_fields}
    return UnifiedConfig(**known)
