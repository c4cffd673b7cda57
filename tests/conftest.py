"""Shared pytest fixtures for kit-updater tests."""

import shutil
from pathlib import Path

import pytest
from dotenv import load_dotenv

from kit_updater.update.models import UpdateContext, UpdateTarget

load_dotenv()


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Create *files* (relative path -> text) under *root*."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def read_tree(root: Path) -> dict[str, str]:
    """Return every file under *root* as relative path -> text."""
    return {
        p.relative_to(root).as_posix(): p.read_text(encoding="utf-8")
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


class FakeFetcher:
    """Fetcher that copies a prepared local repository into the workspace."""

    def __init__(self, repo_root: Path | None = None, error: Exception | None = None):
        self.repo_root = repo_root
        self.error = error
        self.calls: list[tuple[UpdateTarget, Path]] = []
        self.workspaces: list[Path] = []

    def fetch(self, target: UpdateTarget, workspace: Path) -> Path:
        self.calls.append((target, workspace))
        self.workspaces.append(workspace)
        if self.error is not None:
            raise self.error
        checkout = workspace / "repo"
        shutil.copytree(self.repo_root, checkout)
        return checkout


@pytest.fixture
def installed_root(tmp_path):
    """An installed tree with a user-customised config document."""
    return write_tree(
        tmp_path / "project" / ".kit-core",
        {
            "core-config.yaml": (
                "version: 1.0\n"
                "project:\n"
                "  name: custom\n"
                "  lang: en\n"
            ),
            "agents/dev.md": "old dev agent\n",
            "notes/local.md": "user notes\n",
        },
    )


@pytest.fixture
def remote_repo(tmp_path):
    """A repository checkout whose ``.kit-core`` tree is newer."""
    repo = tmp_path / "remote"
    write_tree(
        repo / ".kit-core",
        {
            "core-config.yaml": (
                "version: 2.0\n"
                "project:\n"
                "  name: default\n"
                "  lang: en\n"
                "  theme: dark\n"
                "features:\n"
                "  telemetry: false\n"
            ),
            "agents/dev.md": "new dev agent\n",
            "agents/qa.md": "qa agent\n",
        },
    )
    (repo / "README.md").write_text("repo readme\n", encoding="utf-8")
    return repo


@pytest.fixture
def fake_fetcher(remote_repo):
    return FakeFetcher(remote_repo)


@pytest.fixture
def make_context(installed_root):
    """Factory for ``UpdateContext`` pointing at the installed tree."""

    def _make(**overrides) -> UpdateContext:
        values = {
            "installed_root": installed_root,
            "target": UpdateTarget(repository="acme/kit", branch="main"),
        }
        values.update(overrides)
        return UpdateContext(**values)

    return _make


@pytest.fixture
def make_tree():
    """Fixture form of ``write_tree`` for test modules."""
    return write_tree


@pytest.fixture
def snapshot_tree():
    """Fixture form of ``read_tree`` for test modules."""
    return read_tree
