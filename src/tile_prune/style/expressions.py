"""
Filter Expression Tree

Closed set of frozen dataclasses describing style layer filters and the nested
value expressions that may appear in their key positions, plus the parser that
turns decoded style JSON into that tree.

Parsing never raises. A malformed filter or sub-expression becomes
``UnknownFilter`` so that one bad rule cannot invalidate the whole style.
Evaluation lives in ``evaluator`` and never looks at raw JSON.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union

from .values import Value, to_value


# ---------------------------------------------------------------------------
# Value expressions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Get:
    """Property lookup; also used for bare string keys."""
    name: str


@dataclass(frozen=True)
class Literal:
    value: Value


@dataclass(frozen=True)
class ZoomRef:
    """The zoom level the filter is evaluated at."""


@dataclass(frozen=True)
class GeometryTypeRef:
    pass


@dataclass(frozen=True)
class FeatureIdRef:
    pass


@dataclass(frozen=True)
class Match:
    input: "Expression"
    # each label is a tuple of candidate values, any of which selects the output
    cases: Tuple[Tuple[Tuple[Value, ...], "Expression"], ...]
    default: "Expression"


@dataclass(frozen=True)
class Case:
    branches: Tuple[Tuple["Filter", "Expression"], ...]
    default: "Expression"


@dataclass(frozen=True)
class Coalesce:
    expressions: Tuple["Expression", ...]


Expression = Union[Get, Literal, ZoomRef, GeometryTypeRef, FeatureIdRef, Match, Case, Coalesce]


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Eq:
    key: Expression
    value: Value


@dataclass(frozen=True)
class NotEq:
    key: Expression
    value: Value


@dataclass(frozen=True)
class In:
    key: Expression
    values: Tuple[Value, ...]


@dataclass(frozen=True)
class NotIn:
    key: Expression
    values: Tuple[Value, ...]


@dataclass(frozen=True)
class Has:
    key: str


@dataclass(frozen=True)
class NotHas:
    key: str


@dataclass(frozen=True)
class AllOf:
    filters: Tuple["Filter", ...]


@dataclass(frozen=True)
class AnyOf:
    filters: Tuple["Filter", ...]


@dataclass(frozen=True)
class NoneOf:
    filters: Tuple["Filter", ...]


@dataclass(frozen=True)
class UnknownFilter:
    """A filter form that could not be parsed; always evaluates to Unknown."""


Filter = Union[Eq, NotEq, In, NotIn, Has, NotHas, AllOf, AnyOf, NoneOf, UnknownFilter]

UNKNOWN_FILTER = UnknownFilter()


class _Malformed(Exception):
    """Internal signal used while parsing; never escapes this module."""


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_filter(raw: Any) -> Optional[Filter]:
    """
    Parse a style ``filter`` value.

    Returns None when the layer effectively has no filter (an empty array),
    which callers treat as "always matches". JSON booleans become the
    constant combinators ``AllOf(())`` (true) and ``AnyOf(())`` (false).
    """
    if isinstance(raw, list) and not raw:
        return None
    return _parse_filter_node(raw)


def _parse_filter_node(raw: Any) -> Filter:
    if isinstance(raw, bool):
        return AllOf(()) if raw else AnyOf(())
    if not isinstance(raw, list) or not raw or not isinstance(raw[0], str):
        return UNKNOWN_FILTER

    op = raw[0]
    try:
        if op in ("==", "!="):
            if len(raw) != 3:
                return UNKNOWN_FILTER
            key = _parse_key(raw[1])
            value = _parse_scalar(raw[2])
            return Eq(key, value) if op == "==" else NotEq(key, value)

        if op in ("in", "!in"):
            if len(raw) < 3:
                return UNKNOWN_FILTER
            key = _parse_key(raw[1])
            values = _parse_value_list(raw[2:])
            return In(key, values) if op == "in" else NotIn(key, values)

        if op in ("has", "!has"):
            if len(raw) != 2 or not isinstance(raw[1], str):
                return UNKNOWN_FILTER
            return Has(raw[1]) if op == "has" else NotHas(raw[1])

        if op in ("all", "any", "none"):
            children = tuple(_parse_filter_node(item) for item in raw[1:])
            if op == "all":
                return AllOf(children)
            if op == "any":
                return AnyOf(children)
            return NoneOf(children)
    except _Malformed:
        return UNKNOWN_FILTER

    return UNKNOWN_FILTER


def parse_expression(raw: Any) -> Optional[Expression]:
    """Parse a nested value expression, returning None if it is malformed."""
    try:
        return _parse_expression(raw)
    except _Malformed:
        return None


def _parse_key(raw: Any) -> Expression:
    # A bare string in key position names a property, elsewhere it is a literal
    if isinstance(raw, str):
        return Get(raw)
    if isinstance(raw, list):
        return _parse_expression(raw)
    raise _Malformed(raw)


def _parse_expression(raw: Any) -> Expression:
    if not isinstance(raw, list):
        value = to_value(raw)
        if value is None:
            raise _Malformed(raw)
        return Literal(value)

    if not raw or not isinstance(raw[0], str):
        raise _Malformed(raw)

    op, args = raw[0], raw[1:]

    if op == "get":
        if len(args) != 1 or not isinstance(args[0], str):
            raise _Malformed(raw)
        return Get(args[0])

    if op == "literal":
        if len(args) != 1:
            raise _Malformed(raw)
        return Literal(_parse_scalar(args[0]))

    if op == "zoom":
        return ZoomRef()

    if op == "geometry-type":
        return GeometryTypeRef()

    if op == "id":
        return FeatureIdRef()

    if op == "match":
        # input, label/output pairs, default
        if len(args) < 2 or len(args) % 2 != 0:
            raise _Malformed(raw)
        input_expr = _parse_expression(args[0])
        pairs = args[1:-1]
        cases = tuple(
            (_parse_match_label(pairs[i]), _parse_expression(pairs[i + 1]))
            for i in range(0, len(pairs), 2)
        )
        return Match(input_expr, cases, _parse_expression(args[-1]))

    if op == "case":
        # condition/output pairs, default
        if len(args) < 1 or len(args) % 2 != 1:
            raise _Malformed(raw)
        pairs = args[:-1]
        branches = tuple(
            (_parse_filter_node(pairs[i]), _parse_expression(pairs[i + 1]))
            for i in range(0, len(pairs), 2)
        )
        return Case(branches, _parse_expression(args[-1]))

    if op == "coalesce":
        return Coalesce(tuple(_parse_expression(arg) for arg in args))

    raise _Malformed(raw)


def _parse_match_label(raw: Any) -> Tuple[Value, ...]:
    if isinstance(raw, list):
        if not raw:
            raise _Malformed(raw)
        return tuple(_parse_scalar(item) for item in raw)
    return (_parse_scalar(raw),)


def _parse_scalar(raw: Any) -> Value:
    if isinstance(raw, list) and len(raw) == 2 and raw[0] == "literal":
        raw = raw[1]
    value = to_value(raw)
    if value is None:
        raise _Malformed(raw)
    return value


def _parse_value_list(items: List[Any]) -> Tuple[Value, ...]:
    # ["in", key, [a, b]] / ["in", key, ["literal", [a, b]]] / ["in", key, a, b]
    if len(items) == 1 and isinstance(items[0], list):
        inner = items[0]
        if len(inner) == 2 and inner[0] == "literal" and isinstance(inner[1], list):
            inner = inner[1]
        return tuple(_parse_scalar(item) for item in inner)
    return tuple(_parse_scalar(item) for item in items)
