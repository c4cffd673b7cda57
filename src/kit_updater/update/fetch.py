"""Fetch collaborators: obtain a local checkout of a remote branch.

The orchestrator only depends on the ``Fetcher`` protocol: given a target
and an empty workspace directory, return the path of a full checkout or
raise ``FetchError``.  Two transports ship with the package:

* ``GitFetcher``     -- shallow single-branch ``git clone`` (default).
* ``ArchiveFetcher`` -- GitHub branch tarball over HTTPS via ``requests``.
"""

from __future__ import annotations

import logging
import re
import subprocess
import tarfile
from pathlib import Path
from typing import Protocol

import requests

from kit_updater.errors import FetchError, fetch_hints
from kit_updater.update.models import UpdateTarget

logger = logging.getLogger(__name__)

TRANSPORTS = ("git", "archive")

_GITHUB_RE = re.compile(r"github\.com[/:]([\w.-]+)/([\w.-]+?)(?:\.git)?/?$")
_SHORTHAND_RE = re.compile(r"^[\w.-]+/[\w.-]+$")


class Fetcher(Protocol):
    """Anything that can materialise a remote branch on local disk."""

    def fetch(self, target: UpdateTarget, workspace: Path) -> Path:
        """Return the root of a checkout of *target* inside *workspace*."""
        ...


# ---------------------------------------------------------------------------
# Repository identifiers
# ---------------------------------------------------------------------------


def normalize_repository(value: str) -> str:
    """Reduce GitHub URLs to ``owner/name``; return other values stripped.

    Examples:
        >>> normalize_repository("git+https://github.com/acme/kit.git")
        'acme/kit'
        >>> normalize_repository("git@github.com:acme/kit.git")
        'acme/kit'
    """
    value = value.strip()
    match = _GITHUB_RE.search(value)
    if match:
        return f"{match.group(1)}/{match.group(2)}"
    return value


def repository_url(identifier: str) -> str:
    """Turn a repository identifier into something ``git clone`` accepts.

    ``owner/name`` shorthand maps to GitHub over HTTPS.  URLs, ``git@``
    addresses and existing local paths are passed through unchanged.
    """
    if "://" in identifier or identifier.startswith("git@"):
        return identifier
    if Path(identifier).expanduser().exists():
        return str(Path(identifier).expanduser().resolve())
    if _SHORTHAND_RE.match(identifier):
        return f"https://github.com/{identifier}.git"
    return identifier


def display_repository(identifier: str) -> str:
    """Human-readable location of *identifier* for hints and reports."""
    if _SHORTHAND_RE.match(identifier):
        return f"https://github.com/{identifier}"
    return identifier


# ---------------------------------------------------------------------------
# Git transport
# ---------------------------------------------------------------------------


class GitFetcher:
    """Shallow-clone a single branch with the ``git`` executable.

    Args:
        git: Name or path of the git executable.
        timeout: Seconds before the clone is abandoned.
    """

    def __init__(self, git: str = "git", timeout: float = 300) -> None:
        self.git = git
        self.timeout = timeout

    def fetch(self, target: UpdateTarget, workspace: Path) -> Path:
        checkout = workspace / "repo"
        cmd = [
            self.git,
            "clone",
            "--depth",
            "1",
            "--branch",
            target.branch,
            repository_url(target.repository),
            str(checkout),
        ]
        hints = fetch_hints(display_repository(target.repository), target.branch)
        logger.info(
            "Cloning %s (branch %s)", target.repository, target.branch
        )
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise FetchError(
                f"git executable not found: {self.git}",
                hints=["Install git or use --transport archive"],
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise FetchError(
                f"git clone timed out after {self.timeout:g}s", hints=hints
            ) from exc

        if result.returncode != 0:
            detail = result.stderr.strip() or f"exit status {result.returncode}"
            raise FetchError(f"Failed to clone repository: {detail}", hints=hints)

        return checkout


# ---------------------------------------------------------------------------
# Archive transport
# ---------------------------------------------------------------------------


class ArchiveFetcher:
    """Download and unpack a GitHub branch tarball.

    Only ``owner/name`` shorthand (or a GitHub URL) is supported.

    Args:
        base_url: Archive host.
        timeout: ``(connect, read)`` timeout passed to ``requests``.
    """

    def __init__(
        self,
        base_url: str = "https://codeload.github.com",
        timeout: tuple[float, float] = (10, 60),
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def archive_url(self, target: UpdateTarget) -> str:
        repo = normalize_repository(target.repository)
        if not _SHORTHAND_RE.match(repo):
            raise FetchError(
                f"Archive transport needs an owner/name repository, got {target.repository!r}",
                hints=["Use --transport git for non-GitHub repositories"],
            )
        return f"{self.base_url}/{repo}/tar.gz/refs/heads/{target.branch}"

    def fetch(self, target: UpdateTarget, workspace: Path) -> Path:
        url = self.archive_url(target)
        hints = fetch_hints(display_repository(target.repository), target.branch)
        archive_path = workspace / "repo.tar.gz"
        logger.info("Downloading %s", url)

        try:
            with requests.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                with open(archive_path, "wb") as fh:
                    for chunk in response.iter_content(chunk_size=65536):
                        fh.write(chunk)
        except requests.RequestException as exc:
            raise FetchError(f"Failed to download {url}: {exc}", hints=hints) from exc

        extract_root = workspace / "repo"
        try:
            with tarfile.open(archive_path, "r:gz") as tar:
                members = _safe_members(tar, extract_root)
                if hasattr(tarfile, "data_filter"):
                    tar.extractall(extract_root, members=members, filter="data")
                else:
                    tar.extractall(extract_root, members=members)
        except (tarfile.TarError, OSError) as exc:
            raise FetchError(f"Failed to unpack {url}: {exc}", hints=hints) from exc

        # GitHub archives hold a single top-level "<name>-<branch>/" directory.
        entries = [p for p in extract_root.iterdir() if p.is_dir()]
        if len(entries) != 1:
            raise FetchError(
                f"Unexpected archive layout from {url}", hints=hints
            )
        return entries[0]


def _safe_members(tar: tarfile.TarFile, root: Path) -> list[tarfile.TarInfo]:
    """Return regular files and directories that stay inside *root*."""
    root = root.resolve()
    members = []
    for member in tar.getmembers():
        if not (member.isfile() or member.isdir()):
            logger.debug("Skipping archive member %s", member.name)
            continue
        dest = (root / member.name).resolve()
        if not dest.is_relative_to(root):
            raise FetchError(f"Archive member escapes workspace: {member.name}")
        members.append(member)
    return members


def create_fetcher(transport: str = "git") -> Fetcher:
    """Return the fetcher for *transport* (``git`` or ``archive``).

    Raises:
        ValueError: For unknown transports.
    """
    if transport == "git":
        return GitFetcher()
    if transport == "archive":
        return ArchiveFetcher()
    raise ValueError(
        f"Unknown transport {transport!r}; expected one of: {', '.join(TRANSPORTS)}"
    )
