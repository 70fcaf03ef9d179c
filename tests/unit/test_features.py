"""
Unit Tests for the Feature Adapter
"""

import unittest

from shapely.geometry import MultiPolygon, Point, Polygon

from tile_prune.style.features import FeatureView, GeometryType, geometry_type_from_name
from tile_prune.style.values import Value


class TestGeometryType(unittest.TestCase):
    """Geometry class resolution."""

    def test_multi_geometries_collapse(self):
        self.assertEqual(geometry_type_from_name("MultiPoint"), GeometryType.POINT)
        self.assertEqual(geometry_type_from_name("MultiLineString"), GeometryType.LINESTRING)
        self.assertEqual(geometry_type_from_name("MultiPolygon"), GeometryType.POLYGON)

    def test_collections_and_unknown_names(self):
        self.assertEqual(geometry_type_from_name("GeometryCollection"), GeometryType.UNKNOWN)
        self.assertEqual(geometry_type_from_name("Curve"), GeometryType.UNKNOWN)
        self.assertEqual(geometry_type_from_name(None), GeometryType.UNKNOWN)


class TestFeatureView(unittest.TestCase):
    """Property and synthetic attribute lookup."""

    def setUp(self):
        self.feature = FeatureView(
            geometry_type=GeometryType.LINESTRING,
            properties={"class": "primary", "lanes": 2, "oneway": False, "ref": None},
            id=42
        )

    def test_from_mvt_geojson_geometry(self):
        view = FeatureView.from_mvt({
            "geometry": {"type": "MultiPolygon", "coordinates": []},
            "properties": {"kind": "lake"},
            "id": 5,
            "type": "Feature"
        })
        self.assertEqual(view.geometry_type, GeometryType.POLYGON)
        self.assertEqual(view.get("kind"), Value.string("lake"))
        self.assertEqual(view.id, 5)

    def test_from_mvt_type_code(self):
        view = FeatureView.from_mvt({"geometry": [[1, 2]], "type": 1, "properties": {}})
        self.assertEqual(view.geometry_type, GeometryType.POINT)

    def test_from_mvt_shapely_geometry(self):
        square = Polygon([(0, 0), (1, 0), (1, 1), (0, 1)])
        self.assertEqual(
            FeatureView.from_mvt({"geometry": MultiPolygon([square])}).geometry_type,
            GeometryType.POLYGON
        )
        self.assertEqual(
            FeatureView.from_mvt({"geometry": Point(0, 0)}).geometry_type,
            GeometryType.POINT
        )

    def test_type_always_resolves(self):
        self.assertEqual(self.feature.get("$type"), Value.string("LineString"))
        self.assertTrue(self.feature.has("$type"))
        self.assertTrue(FeatureView().has("$type"))

    def test_property_lookup(self):
        self.assertEqual(self.feature.get("lanes"), Value.number(2))
        self.assertEqual(self.feature.get("oneway"), Value.boolean(False))
        self.assertIsNone(self.feature.get("name"))

    def test_null_property_is_absent_but_present_as_key(self):
        self.assertIsNone(self.feature.get("ref"))
        self.assertTrue(self.feature.has("ref"))

    def test_feature_without_properties(self):
        feature = FeatureView(geometry_type=GeometryType.POINT)
        self.assertIsNone(feature.get("class"))
        self.assertFalse(feature.has("class"))

    def test_feature_id(self):
        self.assertEqual(self.feature.get("$id"), Value.number(42))
        self.assertTrue(self.feature.has("$id"))
        self.assertFalse(FeatureView().has("$id"))
        self.assertIsNone(FeatureView().get("$id"))


if __name__ == '__main__':
    unittest.main(verbosity=2)
