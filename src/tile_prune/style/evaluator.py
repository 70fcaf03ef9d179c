"""
Filter Evaluator

Evaluates a parsed filter tree against one ``FeatureView`` using three-valued
(Kleene) logic. ``UNKNOWN`` is produced only when a comparison depends on a
value the feature does not carry; it is never coerced to True or False here.
"""

from enum import Enum
from typing import Iterable, Optional

from .expressions import (
    Case, Coalesce, Eq, Expression, FeatureIdRef, Filter, GeometryTypeRef,
    Get, Has, In, Literal, Match, NotEq, NotHas, NotIn, AllOf, AnyOf,
    NoneOf, UnknownFilter, ZoomRef
)
from .features import FeatureView
from .values import Value, equals


ZOOM_KEY = "zoom"


class FilterResult(Enum):
    TRUE = "true"
    FALSE = "false"
    UNKNOWN = "unknown"

    @classmethod
    def from_bool(cls, value: bool) -> "FilterResult":
        return cls.TRUE if value else cls.FALSE


def combine_any(results: Iterable[FilterResult]) -> FilterResult:
    """OR with unknown tracking; stops consuming at the first TRUE."""
    saw_unknown = False
    for result in results:
        if result is FilterResult.TRUE:
            return FilterResult.TRUE
        if result is FilterResult.UNKNOWN:
            saw_unknown = True
    return FilterResult.UNKNOWN if saw_unknown else FilterResult.FALSE


def combine_all(results: Iterable[FilterResult]) -> FilterResult:
    """AND with unknown tracking; stops consuming at the first FALSE."""
    saw_unknown = False
    for result in results:
        if result is FilterResult.FALSE:
            return FilterResult.FALSE
        if result is FilterResult.UNKNOWN:
            saw_unknown = True
    return FilterResult.UNKNOWN if saw_unknown else FilterResult.TRUE


def combine_none(results: Iterable[FilterResult]) -> FilterResult:
    """NOR with unknown tracking; stops consuming at the first TRUE."""
    saw_unknown = False
    for result in results:
        if result is FilterResult.TRUE:
            return FilterResult.FALSE
        if result is FilterResult.UNKNOWN:
            saw_unknown = True
    return FilterResult.UNKNOWN if saw_unknown else FilterResult.TRUE


def evaluate_filter(node: Filter, feature: FeatureView, zoom: float = 0) -> FilterResult:
    """
    Evaluate ``node`` against ``feature`` at ``zoom``.

    Combinators are lazy: sub-filters after a deciding result are not
    evaluated.
    """
    if isinstance(node, (Eq, NotEq)):
        actual = evaluate_expression(node.key, feature, zoom)
        if actual is None:
            return FilterResult.UNKNOWN
        matched = equals(actual, node.value)
        return FilterResult.from_bool(matched if isinstance(node, Eq) else not matched)

    if isinstance(node, (In, NotIn)):
        actual = evaluate_expression(node.key, feature, zoom)
        if actual is None:
            return FilterResult.UNKNOWN
        member = any(equals(actual, candidate) for candidate in node.values)
        return FilterResult.from_bool(member if isinstance(node, In) else not member)

    if isinstance(node, Has):
        return FilterResult.from_bool(feature.has(node.key))

    if isinstance(node, NotHas):
        return FilterResult.from_bool(not feature.has(node.key))

    if isinstance(node, AllOf):
        return combine_all(evaluate_filter(sub, feature, zoom) for sub in node.filters)

    if isinstance(node, AnyOf):
        return combine_any(evaluate_filter(sub, feature, zoom) for sub in node.filters)

    if isinstance(node, NoneOf):
        return combine_none(evaluate_filter(sub, feature, zoom) for sub in node.filters)

    if isinstance(node, UnknownFilter):
        return FilterResult.UNKNOWN

    raise TypeError(f"Unsupported filter node: {node!r}")


def evaluate_expression(
    expression: Expression,
    feature: FeatureView,
    zoom: float = 0
) -> Optional[Value]:
    """Evaluate a value expression; None means the value is absent."""
    if isinstance(expression, Get):
        value = feature.get(expression.name)
        if value is None and expression.name == ZOOM_KEY:
            # legacy filters reference the zoom level by bare name
            return Value.number(zoom)
        return value

    if isinstance(expression, Literal):
        return expression.value

    if isinstance(expression, ZoomRef):
        return Value.number(zoom)

    if isinstance(expression, GeometryTypeRef):
        return Value.string(feature.geometry_type.value)

    if isinstance(expression, FeatureIdRef):
        return feature.feature_id()

    if isinstance(expression, Match):
        actual = evaluate_expression(expression.input, feature, zoom)
        if actual is None:
            # absent input, absent result
            return None
        for labels, output in expression.cases:
            if any(equals(actual, label) for label in labels):
                return evaluate_expression(output, feature, zoom)
        return evaluate_expression(expression.default, feature, zoom)

    if isinstance(expression, Case):
        for condition, output in expression.branches:
            if evaluate_filter(condition, feature, zoom) is FilterResult.TRUE:
                return evaluate_expression(output, feature, zoom)
        return evaluate_expression(expression.default, feature, zoom)

    if isinstance(expression, Coalesce):
        for candidate in expression.expressions:
            value = evaluate_expression(candidate, feature, zoom)
            if value is not None:
                return value
        return None

    raise TypeError(f"Unsupported expression node: {expression!r}")
