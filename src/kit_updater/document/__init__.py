"""Configuration document handling.

The installed tree carries one configuration document in a restricted
``key: value`` format.  This package parses it into a tree of tagged
scalars, merges an incoming tree into the installed one and writes the
result back.

Modules:

- ``values``     -- ``Scalar``, ``ValueKind`` and the ``ConfigTree`` alias.
- ``parser``     -- ``parse_config`` / ``parse_config_document``.
- ``serializer`` -- ``dump_config``.
- ``merger``     -- ``merge_config`` and ``new_keys``.
"""

from .merger import merge_config, new_keys
from .parser import ParsedDocument, SkippedLine, parse_config, parse_config_document
from .serializer import dump_config
from .values import (
    ConfigTree,
    Scalar,
    ValueKind,
    from_plain,
    to_plain,
)

__all__ = [
    "ConfigTree",
    "ParsedDocument",
    "Scalar",
    "SkippedLine",
    "ValueKind",
    "dump_config",
    "from_plain",
    "merge_config",
    "new_keys",
    "parse_config",
    "parse_config_document",
    "to_plain",
]
