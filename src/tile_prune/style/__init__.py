"""
Style Module

In-memory model of a vector style document and the feature visibility engine
used to prune tiles:

- Tri-valued filter expression evaluation over sparse feature properties
- Zoom range and paint opacity visibility checks per style layer
- Source-layer indexed style documents shared read-only across workers
"""

from .document import StyleDocument, load_style, read_style, read_style_source_layers
from .evaluator import FilterResult, evaluate_expression, evaluate_filter
from .expressions import parse_expression, parse_filter
from .features import FeatureView, GeometryType
from .paint import StyleLayer
from .values import Value, ValueKind

__all__ = [
    "StyleDocument",
    "load_style",
    "read_style",
    "read_style_source_layers",
    "FilterResult",
    "evaluate_expression",
    "evaluate_filter",
    "parse_expression",
    "parse_filter",
    "FeatureView",
    "GeometryType",
    "StyleLayer",
    "Value",
    "ValueKind"
]
