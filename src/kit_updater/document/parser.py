"""Best-effort parser for indentation-scoped ``key: value`` documents.

Understands the subset of YAML that installed config documents actually
use: nested mappings of scalars.  Lines outside that subset (sequence
items, continuation lines, anything without a ``key:`` prefix) are
skipped.  Skipped lines never raise; they are collected in
``ParsedDocument.skipped`` so callers can warn about them.

Algorithm: a stack of ``(indent, mapping)`` frames.  Each content line
pops frames whose indent is >= its own, inserts its key into the frame
left on top, and pushes a new frame when the value is empty or a block
scalar marker.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from .values import ConfigTree, coerce_scalar

logger = logging.getLogger(__name__)

_LINE_RE = re.compile(r"^(\s*)([^:]+):\s*(.*)$")

# Values that open a nested mapping.
_BLOCK_MARKERS = frozenset({"", "|", ">", "|-", "|+", ">-", ">+"})


@dataclass(frozen=True)
class SkippedLine:
    """A document line the parser could not model.

    Attributes:
        lineno: 1-based line number.
        text: The line without its trailing newline.
        reason: Short description of why it was dropped.
    """

    lineno: int
    text: str
    reason: str


@dataclass
class ParsedDocument:
    """Parse result: the tree plus every line that was dropped."""

    tree: ConfigTree = field(default_factory=dict)
    skipped: list[SkippedLine] = field(default_factory=list)


def parse_config_document(text: str) -> ParsedDocument:
    """Parse *text* into a ``ParsedDocument``.

    Args:
        text: Raw document content.

    Returns:
        The parsed tree and the list of skipped lines.
    """
    result = ParsedDocument()
    stack: list[tuple[int, ConfigTree]] = [(-1, result.tree)]

    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        if stripped == "-" or stripped.startswith("- "):
            _skip(result, lineno, line, "sequence item")
            continue

        match = _LINE_RE.match(line)
        if match is None:
            _skip(result, lineno, line, "not a key: value line")
            continue

        indent = len(match.group(1))
        key = match.group(2).strip()
        raw_value = match.group(3).strip()
        if not key:
            _skip(result, lineno, line, "empty key")
            continue

        while len(stack) > 1 and stack[-1][0] >= indent:
            stack.pop()
        parent = stack[-1][1]

        if raw_value in _BLOCK_MARKERS:
            child: ConfigTree = {}
            parent[key] = child
            stack.append((indent, child))
        else:
            parent[key] = coerce_scalar(raw_value)

    return result


def parse_config(text: str) -> ConfigTree:
    """Parse *text* and return only the tree, discarding skip records."""
    return parse_config_document(text).tree


def _skip(result: ParsedDocument, lineno: int, line: str, reason: str) -> None:
    logger.debug("Skipping line %d (%s): %r", lineno, reason, line)
    result.skipped.append(SkippedLine(lineno=lineno, text=line, reason=reason))
