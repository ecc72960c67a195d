"""
Geometry utilities for coordinate conversions and geodesic measurements
"""

import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pyproj import Geod
from shapely import make_valid
from shapely.geometry import GeometryCollection, MultiPolygon, Polygon, shape
from shapely.geometry.base import BaseGeometry

from ..exceptions import InvalidPolygonError
from .types import BoundingBox

_GEOD = Geod(ellps="WGS84")


class GeometryUtils:
    """Utility functions for geometric operations"""

    @staticmethod
    def polygon_from_ring(ring: Sequence[Sequence[float]]) -> BaseGeometry:
        """
        Build a polygon from a [lon, lat] ring.

        The ring may or may not repeat its first vertex. A self-intersecting
        ring comes back as its repaired Polygon or MultiPolygon. Raises
        InvalidPolygonError when fewer than 3 distinct finite vertices remain
        or nothing areal is left.
        """
        if ring is None:
            raise InvalidPolygonError("polygon ring is missing")

        try:
            coords: List[Tuple[float, float]] = [(float(v[0]), float(v[1])) for v in ring]
        except (TypeError, IndexError, ValueError) as e:
            raise InvalidPolygonError(f"unreadable polygon ring: {e}") from e

        for lon, lat in coords:
            if not (math.isfinite(lon) and math.isfinite(lat)):
                raise InvalidPolygonError(f"non-finite vertex ({lon}, {lat})")

        if len(coords) > 1 and coords[0] == coords[-1]:
            coords = coords[:-1]

        if len(set(coords)) < 3:
            raise InvalidPolygonError(f"polygon needs at least 3 distinct vertices, got {len(set(coords))}")

        polygon = Polygon(coords)
        if not polygon.is_valid:
            # Self-intersecting rings are repaired into their areal pieces
            polygon = GeometryUtils.polygonal_part(make_valid(polygon))
        if polygon is None or polygon.is_empty or polygon.area == 0:
            raise InvalidPolygonError("polygon ring encloses no area")
        return polygon

    @staticmethod
    def polygon_from_geojson(geometry: Dict[str, Any]) -> BaseGeometry:
        """Parse a GeoJSON Polygon / MultiPolygon mapping into a shapely geometry"""
        geom = shape(geometry)
        if not isinstance(geom, (Polygon, MultiPolygon)):
            raise InvalidPolygonError(f"expected a polygonal geometry, got {geom.geom_type}")
        if geom.is_empty:
            raise InvalidPolygonError("empty polygon geometry")
        return geom

    @staticmethod
    def bounding_box(geom: BaseGeometry) -> BoundingBox:
        return BoundingBox.from_bounds(geom.bounds)

    @staticmethod
    def degrees_per_meter(lat: float, meters_per_degree: float = 111320.0) -> Tuple[float, float]:
        """
        Degrees spanned by one meter at latitude lat, as (lon, lat) steps.
        """
        dlat = 1.0 / meters_per_degree
        cos_lat = max(math.cos(math.radians(lat)), 1e-6)
        dlon = 1.0 / (meters_per_degree * cos_lat)
        return dlon, dlat

    @staticmethod
    def query_box(
        lon: float,
        lat: float,
        radius_m: float,
        meters_per_degree: float = 111320.0
    ) -> BoundingBox:
        """Box of +/- radius_m around a point"""
        dlon, dlat = GeometryUtils.degrees_per_meter(lat, meters_per_degree)
        return BoundingBox(
            lon - radius_m * dlon,
            lat - radius_m * dlat,
            lon + radius_m * dlon,
            lat + radius_m * dlat,
        )

    @staticmethod
    def geodesic_distance_m(a: Tuple[float, float], b: Tuple[float, float]) -> float:
        """WGS84 geodesic distance in meters between two (lon, lat) points"""
        _, _, distance = _GEOD.inv(a[0], a[1], b[0], b[1])
        return abs(distance)

    @staticmethod
    def geodesic_area_m2(geom: BaseGeometry) -> float:
        """Geodesic area of a lon/lat polygon in square meters"""
        area, _ = _GEOD.geometry_area_perimeter(geom)
        return abs(area)

    @staticmethod
    def polygonal_part(geom: Optional[BaseGeometry]) -> Optional[BaseGeometry]:
        """
        Keep only the areal part of an overlay result.

        Returns None for empty or zero-area results.
        """
        if geom is None or geom.is_empty:
            return None
        if isinstance(geom, (Polygon, MultiPolygon)):
            return geom if geom.area > 0 else None
        if isinstance(geom, GeometryCollection):
            parts = []
            for part in geom.geoms:
                if isinstance(part, Polygon) and part.area > 0:
                    parts.append(part)
                elif isinstance(part, MultiPolygon):
                    parts.extend(p for p in part.geoms if p.area > 0)
            if not parts:
                return None
            return parts[0] if len(parts) == 1 else MultiPolygon(parts)
        return None
