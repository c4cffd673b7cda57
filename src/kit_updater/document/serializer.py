"""Write a ``ConfigTree`` back out in the format the parser reads.

The output is the inverse of ``parse_config`` for every tree the grammar
can express: scalars keep their literal text, and strings that would be
re-read as another kind are double-quoted.  Comments and skipped lines
from the original document are not preserved.
"""

from __future__ import annotations

from .values import ConfigTree, Scalar, ValueKind, coerce_scalar, is_mapping

_BLOCK_MARKERS = frozenset({"|", ">", "|-", "|+", ">-", ">+"})


def dump_config(tree: ConfigTree, indent: int = 2) -> str:
    """Serialise *tree* to ``key: value`` text.

    Args:
        tree: The configuration tree.
        indent: Spaces per nesting level.

    Returns:
        The document text, newline terminated (empty string for an empty tree).

    Raises:
        ValueError: If a key cannot be written so that it parses back.
    """
    lines: list[str] = []
    _dump_mapping(tree, 0, indent, lines)
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def render_scalar(scalar: Scalar) -> str:
    """Return the text for *scalar* as it should appear after ``key: ``."""
    if scalar.kind != ValueKind.STRING:
        return scalar.text
    if scalar.quote:
        return f"{scalar.quote}{scalar.text}{scalar.quote}"
    if _needs_quotes(scalar.text):
        return f'"{scalar.text}"'
    return scalar.text


def _dump_mapping(
    tree: ConfigTree, level: int, indent: int, lines: list[str]
) -> None:
    pad = " " * (level * indent)
    for key, value in tree.items():
        _check_key(key)
        if is_mapping(value):
            lines.append(f"{pad}{key}:")
            _dump_mapping(value, level + 1, indent, lines)
        else:
            lines.append(f"{pad}{key}: {render_scalar(value)}")


def _needs_quotes(text: str) -> bool:
    if text != text.strip() or not text:
        return True
    if text.startswith("#") or text in _BLOCK_MARKERS:
        return True
    # Anything the parser would re-read differently must be quoted.
    return coerce_scalar(text) != Scalar(ValueKind.STRING, text)


def _check_key(key: str) -> None:
    if not key or key != key.strip():
        raise ValueError(f"Key {key!r} is empty or padded with whitespace")
    if ":" in key or "\n" in key or "\r" in key:
        raise ValueError(f"Key {key!r} contains ':' or a line break")
    if key.startswith("#") or key == "-" or key.startswith("- "):
        raise ValueError(f"Key {key!r} would be read as a comment or list item")
