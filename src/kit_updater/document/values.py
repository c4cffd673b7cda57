"""Tagged scalar values for configuration trees.

A ``ConfigTree`` is a plain ``dict`` mapping keys to either a ``Scalar``
or a nested ``ConfigTree``.  Scalars keep the literal text they were
written with, so a value like ``1.10`` is reported as a float but written
back as ``1.10`` rather than ``1.1``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

_INT_RE = re.compile(r"^\d+$")
_FLOAT_RE = re.compile(r"^\d+\.\d+$")

PlainScalar = Union[bool, int, float, str, None]


class ValueKind(str, Enum):
    """Type tag of a configuration scalar."""

    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    NULL = "null"


@dataclass(frozen=True)
class Scalar:
    """A single configuration value.

    Attributes:
        kind: Type tag decided once, at parse time.
        text: Literal text without surrounding quotes.
        quote: Quote character used in the document, ``""`` if unquoted.
    """

    kind: ValueKind
    text: str
    quote: str = ""

    @property
    def value(self) -> PlainScalar:
        """The Python value this scalar stands for."""
        match self.kind:
            case ValueKind.BOOL:
                return self.text == "true"
            case ValueKind.INT:
                return int(self.text)
            case ValueKind.FLOAT:
                return float(self.text)
            case ValueKind.NULL:
                return None
            case _:
                return self.text

    def __eq__(self, other: object) -> bool:
        # Quoting style is presentation only.
        if not isinstance(other, Scalar):
            return NotImplemented
        return self.kind == other.kind and self.text == other.text

    def __hash__(self) -> int:
        return hash((self.kind, self.text))

    @classmethod
    def from_value(cls, value: PlainScalar) -> Scalar:
        """Build a scalar from a plain Python value.

        Raises:
            ValueError: If the value cannot be written in the supported
                grammar (negative or exponent numbers, multi-line text).
        """
        if value is None:
            return cls(ValueKind.NULL, "null")
        if isinstance(value, bool):
            return cls(ValueKind.BOOL, "true" if value else "false")
        if isinstance(value, int):
            text = str(value)
            if not _INT_RE.match(text):
                raise ValueError(f"Integer {value!r} is not representable")
            return cls(ValueKind.INT, text)
        if isinstance(value, float):
            text = repr(value)
            if not math.isfinite(value) or not _FLOAT_RE.match(text):
                raise ValueError(f"Float {value!r} is not representable")
            return cls(ValueKind.FLOAT, text)
        if isinstance(value, str):
            if "\n" in value or "\r" in value:
                raise ValueError("Multi-line strings are not representable")
            return cls(ValueKind.STRING, value)
        raise ValueError(
            f"Unsupported configuration value type: {type(value).__name__}"
        )


ConfigValue = Union[Scalar, "ConfigTree"]
ConfigTree = dict[str, ConfigValue]


def coerce_scalar(raw: str) -> Scalar:
    """Classify the raw (already stripped) text of a value.

    ``true``/``false`` become booleans, ``null`` becomes null, digit runs
    become integers, ``digits.digits`` becomes a float and text wrapped in
    matching quotes becomes an unwrapped string.  Everything else is a raw
    string.
    """
    if raw in ("true", "false"):
        return Scalar(ValueKind.BOOL, raw)
    if raw == "null":
        return Scalar(ValueKind.NULL, raw)
    if _INT_RE.match(raw):
        return Scalar(ValueKind.INT, raw)
    if _FLOAT_RE.match(raw):
        return Scalar(ValueKind.FLOAT, raw)
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in ("'", '"'):
        return Scalar(ValueKind.STRING, raw[1:-1], quote=raw[0])
    return Scalar(ValueKind.STRING, raw)


def is_mapping(value: Any) -> bool:
    """Return ``True`` if *value* is a nested configuration mapping."""
    return isinstance(value, dict)


def to_plain(tree: ConfigTree) -> dict[str, Any]:
    """Convert a tree of ``Scalar`` values to plain Python values."""
    return {
        key: to_plain(value) if is_mapping(value) else value.value
        for key, value in tree.items()
    }


def from_plain(data: dict[str, Any]) -> ConfigTree:
    """Build a ``ConfigTree`` from nested plain dicts.

    Raises:
        ValueError: For lists or values ``Scalar.from_value`` rejects.
    """
    tree: ConfigTree = {}
    for key, value in data.items():
        if isinstance(value, dict):
            tree[str(key)] = from_plain(value)
        elif isinstance(value, (list, tuple)):
            raise ValueError(f"List values are not supported (key {key!r})")
        else:
            tree[str(key)] = Scalar.from_value(value)
    return tree
