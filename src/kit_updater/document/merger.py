"""Deep merge of configuration trees with user-value precedence.

Rules for every key ``k`` of the incoming tree:

* both sides hold a mapping  -> merge recursively;
* incoming holds a mapping, current has no mapping at ``k`` -> copy the
  incoming subtree;
* current has no ``k`` -> copy the incoming value;
* otherwise -> keep the current value.

Keys only present in the current tree are kept untouched, so a second
merge with the same incoming tree changes nothing.
"""

from __future__ import annotations

import copy

from .values import ConfigTree, is_mapping


def merge_config(current: ConfigTree, incoming: ConfigTree) -> ConfigTree:
    """Merge *incoming* into *current* and return a new tree.

    Neither argument is modified.  Keys keep the order of *current*;
    keys new in *incoming* are appended in their incoming order.

    Args:
        current: The installed (user-edited) configuration.
        incoming: The configuration shipped with the new version.

    Returns:
        The merged configuration.
    """
    merged: ConfigTree = copy.deepcopy(current)

    for key, value in incoming.items():
        existing = merged.get(key)
        if is_mapping(value):
            if is_mapping(existing):
                merged[key] = merge_config(existing, value)
            else:
                merged[key] = copy.deepcopy(value)
        elif key not in merged:
            merged[key] = value

    return merged


def new_keys(
    current: ConfigTree, incoming: ConfigTree, prefix: str = ""
) -> list[str]:
    """List the dotted key paths a merge would add to *current*.

    A mapping that replaces a scalar counts as one new path.

    Examples:
        >>> from kit_updater.document.values import from_plain
        >>> new_keys(from_plain({"a": 1}), from_plain({"a": 2, "b": {"c": 3}}))
        ['b']
    """
    added: list[str] = []
    for key, value in incoming.items():
        path = f"{prefix}{key}"
        existing = current.get(key)
        if is_mapping(value) and is_mapping(existing):
            added.extend(new_keys(existing, value, prefix=f"{path}."))
        elif key not in current or (is_mapping(value) and not is_mapping(existing)):
            added.append(path)
    return added
