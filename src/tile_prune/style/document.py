"""
Style Document

Loads a vector style document, indexes its layers by source-layer name and
answers the two questions the tile pruning pass asks:

- is anything from this source-layer drawn at this zoom?
- would any style rule draw this particular feature at this zoom?

A ``StyleDocument`` is built once and never mutated, so a single instance can
be shared by every worker of a tile pruning pool.
"""

import json
import math
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple, Union

import structlog

from ..exceptions import MissingLayersError, StyleParseError, StyleReadError
from .evaluator import FilterResult, evaluate_filter
from .expressions import parse_filter
from .features import FeatureView
from .paint import StyleLayer, parse_paint


logger = structlog.get_logger(component="StyleDocument")


class StyleDocument:
    """Read-only index of style layers keyed by source-layer name."""

    def __init__(self, layers_by_source_layer: Mapping[str, List[StyleLayer]]):
        self._layers: Dict[str, Tuple[StyleLayer, ...]] = {
            name: tuple(layers) for name, layers in layers_by_source_layer.items()
        }

    def __repr__(self) -> str:
        return f"StyleDocument(source_layers={sorted(self._layers)!r})"

    def source_layers(self) -> Set[str]:
        return set(self._layers)

    def layers_for(self, name: str) -> Tuple[StyleLayer, ...]:
        return self._layers.get(name, ())

    def is_layer_visible_on_zoom(self, name: str, zoom: int) -> bool:
        """True if at least one layer bound to ``name`` is drawn at ``zoom``, ignoring filters."""
        return any(layer.is_drawn(zoom) for layer in self.layers_for(name))

    def visible_source_layers(self, zoom: int) -> Set[str]:
        return {name for name in self._layers if self.is_layer_visible_on_zoom(name, zoom)}

    def should_keep_feature(
        self,
        name: str,
        zoom: int,
        feature: FeatureView
    ) -> FilterResult:
        """
        Decide whether any drawn layer bound to ``name`` matches ``feature``.

        Layers sharing a source-layer are alternatives, so their filter
        results are OR-ed: one TRUE wins, otherwise UNKNOWN if any layer was
        undecidable, otherwise FALSE. No drawn layer at all gives FALSE.
        """
        result, _ = self.evaluate_feature(name, zoom, feature)
        return result

    def evaluate_feature(
        self,
        name: str,
        zoom: int,
        feature: FeatureView
    ) -> Tuple[FilterResult, int]:
        """
        Same decision as ``should_keep_feature`` plus the number of drawn
        layers whose filter came out UNKNOWN before the decision was reached.
        """
        unknown_count = 0
        for layer in self.layers_for(name):
            if not layer.is_drawn(zoom):
                continue
            if layer.filter is None:
                return FilterResult.TRUE, unknown_count
            result = evaluate_filter(layer.filter, feature, zoom)
            if result is FilterResult.TRUE:
                return FilterResult.TRUE, unknown_count
            if result is FilterResult.UNKNOWN:
                unknown_count += 1

        if unknown_count:
            return FilterResult.UNKNOWN, unknown_count
        return FilterResult.FALSE, unknown_count


def _optional_number(raw: Any) -> Optional[float]:
    if isinstance(raw, (int, float)) and not isinstance(raw, bool) and math.isfinite(raw):
        return float(raw)
    return None


def _parse_layer(raw: Mapping[str, Any], source_layer: str) -> StyleLayer:
    layout = raw.get("layout")
    visibility = layout.get("visibility") if isinstance(layout, Mapping) else None
    filter_spec = raw.get("filter")

    return StyleLayer(
        source_layer=source_layer,
        id=raw.get("id") if isinstance(raw.get("id"), str) else None,
        minzoom=_optional_number(raw.get("minzoom")),
        maxzoom=_optional_number(raw.get("maxzoom")),
        visibility=visibility if isinstance(visibility, str) else None,
        paint=parse_paint(raw.get("paint")),
        filter=parse_filter(filter_spec) if filter_spec is not None else None
    )


def load_style(style: Mapping[str, Any], path: Optional[Union[str, Path]] = None) -> StyleDocument:
    """
    Build a ``StyleDocument`` from an already decoded style object.

    Layers without a ``source`` (background layers) or without a string
    ``source-layer`` are skipped.

    Raises:
        StyleParseError: the object has no ``layers`` array
        MissingLayersError: no layer is bound to a source-layer
    """
    if not isinstance(style, Mapping):
        raise StyleParseError("style json must be an object", path)
    raw_layers = style.get("layers")
    if not isinstance(raw_layers, list):
        raise StyleParseError("style json missing layers array", path)

    layers_by_source_layer: Dict[str, List[StyleLayer]] = {}
    skipped = 0

    for raw in raw_layers:
        if not isinstance(raw, Mapping):
            skipped += 1
            logger.debug("Skipping non-object layer entry", entry_type=type(raw).__name__)
            continue
        if raw.get("source") is None:
            skipped += 1
            logger.debug("Skipping layer without source", layer_id=raw.get("id"))
            continue
        source_layer = raw.get("source-layer")
        if not isinstance(source_layer, str):
            skipped += 1
            logger.debug("Skipping layer without source-layer", layer_id=raw.get("id"))
            continue
        layers_by_source_layer.setdefault(source_layer, []).append(
            _parse_layer(raw, source_layer)
        )

    if not layers_by_source_layer:
        raise MissingLayersError("style json contains no source-layer entries", path)

    logger.info(
        "Style loaded",
        path=str(path) if path is not None else None,
        source_layers=len(layers_by_source_layer),
        layers=sum(len(layers) for layers in layers_by_source_layer.values()),
        skipped_layers=skipped
    )

    return StyleDocument(layers_by_source_layer)


def read_style(path: Union[str, Path]) -> StyleDocument:
    """
    Read and index a style JSON file.

    Raises:
        StyleReadError: the file cannot be read
        StyleParseError: the file is not UTF-8 JSON with a ``layers`` array
        MissingLayersError: no layer is bound to a source-layer
    """
    path = Path(path)

    try:
        contents = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise StyleParseError(f"style file is not valid UTF-8: {path}", path) from e
    except OSError as e:
        raise StyleReadError(f"failed to read style file: {path}", path) from e

    def reject_constant(name: str) -> None:
        raise StyleParseError(f"style json contains non-standard constant {name}", path)

    try:
        style = json.loads(contents, parse_constant=reject_constant)
    except json.JSONDecodeError as e:
        raise StyleParseError(f"failed to parse style json: {e}", path) from e

    return load_style(style, path)


def read_style_source_layers(path: Union[str, Path]) -> Set[str]:
    return read_style(path).source_layers()
