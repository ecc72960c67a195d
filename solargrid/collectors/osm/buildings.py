"""
Building-specific logic

Turns OSM building ways and relations into footprint features
"""

from typing import Any, Dict, List, Optional

from loguru import logger
from shapely.errors import GEOSException
from shapely.geometry import MultiPolygon, Polygon, mapping
from shapely.ops import unary_union

from .models import OSMRelation, OSMWay

# Tags passed through to footprint properties
HEIGHT_TAGS = ("height", "building:levels", "building")


def _close_ring(coords: List[List[float]]) -> Optional[List[List[float]]]:
    # Skip point-like rings (less than 3 unique points)
    if len(set((round(c[0], 8), round(c[1], 8)) for c in coords)) < 3:
        return None
    if coords[0] != coords[-1]:
        coords = coords + [coords[0]]
    return coords


class BuildingProcessor:
    """Converts OSM building elements into GeoJSON-like footprint features"""

    def parse_buildings(self, ways: List[OSMWay], relations: List[OSMRelation]) -> List[Dict[str, Any]]:
        """
        Parse building ways and multipolygon relations

        Args:
            ways: Ways from the Overpass response
            relations: Relations from the Overpass response

        Returns:
            List of features with 'id', 'geometry' and 'properties'
        """
        features = []

        for way in ways:
            if "building" not in way.tags:
                continue
            ring = _close_ring(way.get_coordinates())
            if ring is None:
                continue
            polygon = Polygon(ring)
            if not polygon.is_valid:
                polygon = polygon.buffer(0)
            if polygon.is_empty:
                continue
            features.append(self.to_feature(f"way/{way.id}", polygon, way.tags))

        for relation in relations:
            if "building" not in relation.tags:
                continue
            geometry = self._relation_geometry(relation)
            if geometry is None:
                continue
            features.append(self.to_feature(f"relation/{relation.id}", geometry, relation.tags))

        logger.info(f"Parsed {len(features)} building footprints ({len(ways)} ways, {len(relations)} relations)")
        return features

    def _relation_geometry(self, relation: OSMRelation):
        try:
            outers = [Polygon(r) for r in (_close_ring(c) for c in relation.outer) if r]
            inners = [Polygon(r) for r in (_close_ring(c) for c in relation.inner) if r]
            if not outers:
                return None
            geometry = unary_union([p.buffer(0) for p in outers])
            if inners:
                geometry = geometry.difference(unary_union([p.buffer(0) for p in inners]))
        except (GEOSException, ValueError) as e:
            logger.warning(f"Failed to assemble building relation {relation.id}: {e}")
            return None
        if geometry.is_empty or not isinstance(geometry, (Polygon, MultiPolygon)):
            return None
        return geometry

    def to_feature(self, feature_id: str, geometry, tags: Dict[str, str]) -> Dict[str, Any]:
        """Convert a building geometry and its tags to feature dictionary format"""
        return {
            "type": "Feature",
            "id": feature_id,
            "geometry": mapping(geometry),
            "properties": {k: tags[k] for k in HEIGHT_TAGS if k in tags},
        }
