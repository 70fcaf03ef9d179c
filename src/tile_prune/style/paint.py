"""
Paint Visibility

Style layer model and the zoom/paint checks that decide whether a layer is
drawn at a given zoom level. Opacity and size-like paint properties serve as
a visibility proxy: a property that is zero at a zoom hides the layer there.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .expressions import Filter


# Paint properties whose zero value makes a layer invisible
PAINT_PROPERTIES_TO_CHECK: Tuple[str, ...] = (
    "fill-opacity",
    "fill-outline-color",
    "line-opacity",
    "line-width",
    "icon-size",
    "text-size",
    "text-max-width",
    "text-opacity",
    "raster-opacity",
    "circle-radius",
    "circle-opacity",
    "fill-extrusion-opacity",
    "heatmap-opacity",
)

MAX_ZOOM = 255


@dataclass(frozen=True)
class ConstantPaint:
    value: float

    def is_nonzero_at_zoom(self, zoom: int) -> bool:
        return self.value != 0.0


@dataclass(frozen=True)
class StopsPaint:
    """
    Zoom stop table.

    Only a stop sitting exactly on the queried zoom can hide the layer;
    values between stops are not interpolated, so any other zoom counts as
    non-zero.
    """
    stops: Tuple[Tuple[int, float], ...]

    def is_nonzero_at_zoom(self, zoom: int) -> bool:
        for stop_zoom, value in self.stops:
            if stop_zoom == zoom:
                return value != 0.0
        return True


PaintValue = Union[ConstantPaint, StopsPaint]


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def parse_paint_value(raw: Any) -> Optional[PaintValue]:
    """
    Parse a paint property value.

    Numbers become ``ConstantPaint``; ``{"stops": [[zoom, value], ...]}``
    becomes ``StopsPaint``. Anything else (colors, expressions, stops with
    non-numeric values) returns None so the property is treated as absent.
    """
    if _is_number(raw):
        return ConstantPaint(float(raw))

    if not isinstance(raw, Mapping):
        return None
    stops = raw.get("stops")
    if not isinstance(stops, list):
        return None

    parsed = []
    for stop in stops:
        if not isinstance(stop, list):
            return None
        if len(stop) < 2:
            continue
        stop_zoom, value = stop[0], stop[1]
        if not _is_number(stop_zoom) or not _is_number(value):
            return None
        stop_zoom = int(stop_zoom)
        if not 0 <= stop_zoom <= MAX_ZOOM:
            continue
        parsed.append((stop_zoom, float(value)))

    if not parsed:
        return None
    return StopsPaint(tuple(parsed))


@dataclass(frozen=True)
class StyleLayer:
    """One style layer bound to a source-layer."""
    source_layer: str
    id: Optional[str] = None
    minzoom: Optional[float] = None
    maxzoom: Optional[float] = None
    visibility: Optional[str] = None
    paint: Mapping[str, PaintValue] = field(default_factory=dict)
    filter: Optional[Filter] = None

    def check_layout_visibility(self) -> bool:
        return self.visibility != "none"

    def check_zoom_underflow(self, zoom: int) -> bool:
        return self.minzoom is None or zoom >= self.minzoom

    def check_zoom_overflow(self, zoom: int) -> bool:
        # maxzoom is exclusive
        return self.maxzoom is None or self.maxzoom > zoom

    def is_visible_on_zoom(self, zoom: int) -> bool:
        return (
            self.check_layout_visibility()
            and self.check_zoom_underflow(zoom)
            and self.check_zoom_overflow(zoom)
        )

    def check_paint_property_not_zero(self, prop: str, zoom: int) -> bool:
        value = self.paint.get(prop)
        if value is None:
            return True
        return value.is_nonzero_at_zoom(zoom)

    def is_rendered(self, zoom: int) -> bool:
        return all(
            self.check_paint_property_not_zero(prop, zoom)
            for prop in PAINT_PROPERTIES_TO_CHECK
        )

    def is_drawn(self, zoom: int) -> bool:
        """True when the layer is both in range and painted at ``zoom``."""
        return self.is_visible_on_zoom(zoom) and self.is_rendered(zoom)


def parse_paint(raw: Any) -> Dict[str, PaintValue]:
    """Parse a layer's ``paint`` object, dropping values that do not parse."""
    paint: Dict[str, PaintValue] = {}
    if not isinstance(raw, Mapping):
        return paint
    for name, value in raw.items():
        parsed = parse_paint_value(value)
        if parsed is not None:
            paint[name] = parsed
    return paint
