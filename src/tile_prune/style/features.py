"""
Feature Adapter

Presents a decoded vector tile feature to the filter evaluator: a geometry
class, an optional property mapping and an optional feature id. Handles the
synthetic ``$type`` and ``$id`` attributes used by style filters.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .values import Value, to_value


TYPE_KEY = "$type"
ID_KEY = "$id"


class GeometryType(Enum):
    """Geometry class as seen by style filters."""
    POINT = "Point"
    LINESTRING = "LineString"
    POLYGON = "Polygon"
    UNKNOWN = "Unknown"


# Multi-geometries collapse into their singular class
_GEOMETRY_NAMES: Dict[str, GeometryType] = {
    "Point": GeometryType.POINT,
    "MultiPoint": GeometryType.POINT,
    "LineString": GeometryType.LINESTRING,
    "MultiLineString": GeometryType.LINESTRING,
    "LinearRing": GeometryType.LINESTRING,
    "Polygon": GeometryType.POLYGON,
    "MultiPolygon": GeometryType.POLYGON,
    "GeometryCollection": GeometryType.UNKNOWN,
}

# Raw MVT geometry type codes (vector tile spec 4.3.4)
_MVT_TYPE_CODES: Dict[int, GeometryType] = {
    1: GeometryType.POINT,
    2: GeometryType.LINESTRING,
    3: GeometryType.POLYGON,
}


def geometry_type_from_name(name: Optional[str]) -> GeometryType:
    """Map a GeoJSON/shapely geometry type name to a ``GeometryType``."""
    if name is None:
        return GeometryType.UNKNOWN
    return _GEOMETRY_NAMES.get(name, GeometryType.UNKNOWN)


@dataclass(frozen=True)
class FeatureView:
    """
    Read-only view over one decoded feature.

    ``properties`` holds plain Python scalars as produced by the tile decoder;
    conversion into ``Value`` happens on lookup.
    """
    geometry_type: GeometryType = GeometryType.UNKNOWN
    properties: Optional[Mapping[str, Any]] = None
    id: Optional[int] = None

    @classmethod
    def from_mvt(cls, feature: Mapping[str, Any]) -> "FeatureView":
        """
        Build a view from a feature dict produced by ``mapbox_vector_tile.decode``.

        Accepts both the GeoJSON-style geometry dict and the raw integer
        geometry type code, as well as shapely geometries.
        """
        geometry = feature.get("geometry")
        if isinstance(geometry, Mapping):
            geometry_type = geometry_type_from_name(geometry.get("type"))
        elif hasattr(geometry, "geom_type"):
            geometry_type = geometry_type_from_name(geometry.geom_type)
        else:
            code = feature.get("type")
            if isinstance(code, int) and not isinstance(code, bool):
                geometry_type = _MVT_TYPE_CODES.get(code, GeometryType.UNKNOWN)
            else:
                geometry_type = geometry_type_from_name(code)

        return cls(
            geometry_type=geometry_type,
            properties=feature.get("properties"),
            id=feature.get("id")
        )

    def get(self, key: str) -> Optional[Value]:
        """Resolve a property name, returning None when the value is absent."""
        if key == TYPE_KEY:
            return Value.string(self.geometry_type.value)
        if key == ID_KEY:
            return self.feature_id()
        if not self.properties:
            return None
        return to_value(self.properties.get(key))

    def has(self, key: str) -> bool:
        if key == TYPE_KEY:
            return True
        if key == ID_KEY:
            return self.id is not None
        if not self.properties:
            return False
        return key in self.properties

    def feature_id(self) -> Optional[Value]:
        if self.id is None:
            return None
        return to_value(self.id)
