"""
Feature Property Values

Tagged representation of the scalar values that appear both in decoded tile
feature properties and as comparison operands in style filters.
"""

import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


class ValueKind(Enum):
    """Tag of a ``Value``."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class Value:
    """A string, number or boolean property value."""
    kind: ValueKind
    raw: Union[str, float, bool]

    @classmethod
    def string(cls, text: str) -> "Value":
        return cls(ValueKind.STRING, text)

    @classmethod
    def number(cls, number: Union[int, float]) -> "Value":
        return cls(ValueKind.NUMBER, float(number))

    @classmethod
    def boolean(cls, flag: bool) -> "Value":
        return cls(ValueKind.BOOLEAN, flag)

    def equals(self, other: "Value") -> bool:
        return equals(self, other)


def equals(a: Value, b: Value) -> bool:
    """
    Compare two values.

    Values of different kinds are never equal. Numbers are equal when their
    absolute difference is below machine epsilon, which absorbs float32/float64
    round-trip noise from the tile encoding.
    """
    if a.kind is not b.kind:
        return False
    if a.kind is ValueKind.NUMBER:
        return abs(a.raw - b.raw) < sys.float_info.epsilon
    return a.raw == b.raw


def to_value(raw: Any) -> Optional[Value]:
    """
    Convert a plain Python scalar into a ``Value``.

    Returns None for ``None`` and for anything that is not a string, number or
    boolean (lists, dicts), which callers treat as an absent value.
    """
    # bool must be checked before int, it is a subclass
    if isinstance(raw, bool):
        return Value.boolean(raw)
    if isinstance(raw, (int, float)):
        return Value.number(raw)
    if isinstance(raw, str):
        return Value.string(raw)
    return None
