"""Describe an installed tree: location, config, version and file counts."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel

from kit_updater.document import parse_config
from kit_updater.file_handler import read_text_if_exists
from kit_updater.update.models import DEFAULT_CONFIG_FILE
from kit_updater.version import UNKNOWN_VERSION, detect_version

logger = logging.getLogger(__name__)


class InstallInfo(BaseModel):
    """Snapshot of an installed tree.

    Attributes:
        installed_root: The inspected directory.
        installed: Whether the directory exists.
        config_path: Path of the config document.
        config_present: Whether the config document exists.
        version: Detected version, ``"unknown"`` when not found.
        file_counts: Files per top-level directory (``.`` for root files).
    """

    installed_root: Path
    installed: bool
    config_path: Path
    config_present: bool = False
    version: str = UNKNOWN_VERSION
    file_counts: dict[str, int] = {}

    model_config = {"frozen": True}

    @property
    def total_files(self) -> int:
        return sum(self.file_counts.values())


def collect_install_info(
    installed_root: Path, config_file: str = DEFAULT_CONFIG_FILE
) -> InstallInfo:
    """Inspect *installed_root* without modifying anything."""
    config_path = installed_root / config_file
    if not installed_root.is_dir():
        return InstallInfo(
            installed_root=installed_root,
            installed=False,
            config_path=config_path,
        )

    loaded = read_text_if_exists(config_path)
    version = detect_version(parse_config(loaded[0])) if loaded else UNKNOWN_VERSION

    counts: dict[str, int] = {}
    for path in installed_root.rglob("*"):
        if not path.is_file():
            continue
        rel = path.relative_to(installed_root)
        bucket = rel.parts[0] if len(rel.parts) > 1 else "."
        counts[bucket] = counts.get(bucket, 0) + 1

    logger.debug("Collected info for %s: %d files", installed_root, sum(counts.values()))
    return InstallInfo(
        installed_root=installed_root,
        installed=True,
        config_path=config_path,
        config_present=loaded is not None,
        version=version,
        file_counts=dict(sorted(counts.items())),
    )


def format_install_info(info: InstallInfo) -> str:
    """Human-readable rendering of ``InstallInfo``."""
    if not info.installed:
        return f"Not installed: {info.installed_root}"

    lines = [
        f"Installed: {info.installed_root}",
        f"Config: {info.config_path}" + ("" if info.config_present else " (missing)"),
        f"Version: {info.version}",
        "",
        "Files:",
    ]
    for name, count in info.file_counts.items():
        label = "(root)" if name == "." else f"{name}/"
        lines.append(f"  {label}: {count}")
    lines.append(f"Total: {info.total_files} files")
    return "\n".join(lines)


def info_to_json(info: InstallInfo) -> dict:
    return {
        "installed_root": str(info.installed_root),
        "installed": info.installed,
        "config_path": str(info.config_path),
        "config_present": info.config_present,
        "version": info.version,
        "file_counts": dict(info.file_counts),
        "total_files": info.total_files,
    }
