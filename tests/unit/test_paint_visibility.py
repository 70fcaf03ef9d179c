"""
Unit Tests for Paint Visibility

Zoom range bounds, layout visibility and the paint opacity heuristic for a
single style layer.
"""

import unittest

from tile_prune.style.paint import (
    PAINT_PROPERTIES_TO_CHECK, ConstantPaint, StopsPaint, StyleLayer,
    parse_paint, parse_paint_value
)


class TestParsePaintValue(unittest.TestCase):
    """Paint JSON to paint values."""

    def test_constant(self):
        self.assertEqual(parse_paint_value(1), ConstantPaint(1.0))
        self.assertEqual(parse_paint_value(0.5), ConstantPaint(0.5))

    def test_stops(self):
        parsed = parse_paint_value({"base": 1, "stops": [[3, 0], [4.7, 2]]})
        self.assertEqual(parsed, StopsPaint(((3, 0.0), (4, 2.0))))

    def test_out_of_range_and_short_stops_are_skipped(self):
        parsed = parse_paint_value({"stops": [[-1, 0], [300, 0], [5], [6, 1]]})
        self.assertEqual(parsed, StopsPaint(((6, 1.0),)))

    def test_unparsable_values(self):
        for raw in (
            "#ff0000",
            True,
            None,
            ["interpolate", ["linear"], ["zoom"], 5, 0, 10, 1],
            {"stops": [[3, "#fff"], [4, "#000"]]},
            {"stops": []},
            {"stops": [[-2, 1]]},
            {"property": "rank"},
        ):
            with self.subTest(raw=raw):
                self.assertIsNone(parse_paint_value(raw))

    def test_parse_paint_drops_unparsable_entries(self):
        paint = parse_paint({"fill-opacity": 0, "fill-color": "#123456"})
        self.assertEqual(paint, {"fill-opacity": ConstantPaint(0.0)})
        self.assertEqual(parse_paint(None), {})


class TestZoomVisibility(unittest.TestCase):
    """Half-open [minzoom, maxzoom) ranges and layout visibility."""

    def test_half_open_range(self):
        layer = StyleLayer(source_layer="water", minzoom=2, maxzoom=5)
        for zoom in range(0, 10):
            with self.subTest(zoom=zoom):
                self.assertEqual(layer.is_visible_on_zoom(zoom), 2 <= zoom < 5)

    def test_unbounded(self):
        layer = StyleLayer(source_layer="water")
        self.assertTrue(layer.is_visible_on_zoom(0))
        self.assertTrue(layer.is_visible_on_zoom(255))

    def test_fractional_bounds(self):
        layer = StyleLayer(source_layer="water", minzoom=2.5, maxzoom=4.5)
        self.assertFalse(layer.check_zoom_underflow(2))
        self.assertTrue(layer.check_zoom_underflow(3))
        self.assertTrue(layer.check_zoom_overflow(4))
        self.assertFalse(layer.check_zoom_overflow(5))

    def test_layout_visibility(self):
        self.assertFalse(StyleLayer(source_layer="a", visibility="none").check_layout_visibility())
        self.assertTrue(StyleLayer(source_layer="a", visibility="visible").check_layout_visibility())
        self.assertTrue(StyleLayer(source_layer="a").check_layout_visibility())

    def test_hidden_layer_never_drawn(self):
        layer = StyleLayer(
            source_layer="a",
            visibility="none",
            paint={"fill-opacity": ConstantPaint(1.0)}
        )
        for zoom in (0, 5, 22):
            self.assertFalse(layer.is_drawn(zoom))


class TestPaintRendering(unittest.TestCase):
    """Opacity and size-like paint properties."""

    def test_absent_properties_do_not_block(self):
        layer = StyleLayer(source_layer="roads")
        self.assertTrue(layer.is_rendered(0))
        self.assertTrue(layer.check_paint_property_not_zero("line-width", 3))

    def test_constant_zero_blocks_every_zoom(self):
        for prop in PAINT_PROPERTIES_TO_CHECK:
            layer = StyleLayer(source_layer="roads", paint={prop: ConstantPaint(0.0)})
            with self.subTest(prop=prop):
                self.assertFalse(any(layer.is_rendered(zoom) for zoom in range(0, 23)))

    def test_unchecked_property_is_ignored(self):
        layer = StyleLayer(source_layer="roads", paint={"line-blur": ConstantPaint(0.0)})
        self.assertTrue(layer.is_rendered(5))

    def test_every_present_property_must_be_nonzero(self):
        layer = StyleLayer(
            source_layer="roads",
            paint={"line-width": ConstantPaint(2.0), "line-opacity": ConstantPaint(0.0)}
        )
        self.assertFalse(layer.is_rendered(5))

    def test_stops_exact_match_only(self):
        layer = StyleLayer(
            source_layer="roads",
            paint={"line-width": StopsPaint(((3, 0.0), (4, 2.0), (8, 0.0)))}
        )
        self.assertFalse(layer.is_rendered(3))
        self.assertTrue(layer.is_rendered(4))
        # between stops: not interpolated
        self.assertTrue(layer.is_rendered(6))
        self.assertFalse(layer.is_rendered(8))
        self.assertTrue(layer.is_rendered(12))

    def test_drawn_requires_range_and_paint(self):
        layer = StyleLayer(
            source_layer="roads",
            minzoom=4,
            paint={"line-width": StopsPaint(((5, 0.0),))}
        )
        self.assertFalse(layer.is_drawn(3))
        self.assertTrue(layer.is_drawn(4))
        self.assertFalse(layer.is_drawn(5))


if __name__ == '__main__':
    unittest.main(verbosity=2)
