"""Version detection for installed and incoming trees."""

from __future__ import annotations

from .document.values import ConfigTree, ValueKind, is_mapping

UNKNOWN_VERSION = "unknown"


def detect_version(tree: ConfigTree | None) -> str:
    """Return the version recorded in a configuration tree.

    Searches depth-first in document order for the first scalar whose key
    is exactly ``version`` and returns its literal text, so ``1.10`` is
    reported as ``1.10``.

    Args:
        tree: Parsed configuration, or ``None`` when the document is missing.

    Returns:
        The version text, or ``"unknown"`` if no ``version`` key is found.
    """
    if not tree:
        return UNKNOWN_VERSION
    found = _find_version(tree)
    return found if found else UNKNOWN_VERSION


def _find_version(tree: ConfigTree) -> str | None:
    for key, value in tree.items():
        if is_mapping(value):
            nested = _find_version(value)
            if nested:
                return nested
        elif key == "version" and value.kind != ValueKind.NULL:
            if value.text.strip():
                return value.text.strip()
    return None
