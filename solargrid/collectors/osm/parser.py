"""
OSM response parser

Parses Overpass 'out geom' responses into OSMWay and OSMRelation objects
"""

from typing import Any, Dict, List, Tuple

from .models import OSMRelation, OSMWay


def _geometry_to_coords(geometry: List[Any]) -> List[List[float]]:
    # Overpass 'out geom' provides geometry as list of {lat, lon} objects
    coords = []
    for node in geometry or []:
        if isinstance(node, dict):
            if node.get("lon") is None or node.get("lat") is None:
                continue
            coords.append([node["lon"], node["lat"]])
        elif isinstance(node, list) and len(node) >= 2:
            coords.append([node[0], node[1]])
    return coords


class OSMResponseParser:
    """Parses Overpass API responses"""

    @staticmethod
    def parse_elements(data: Dict[str, Any]) -> Tuple[List[OSMWay], List[OSMRelation]]:
        """
        Parse Overpass response into ways and relations

        Args:
            data: JSON response from Overpass API (queried with 'out geom')

        Returns:
            Tuple of (ways list, relations list)
        """
        ways = []
        relations = []

        for element in data.get("elements", []):
            element_type = element.get("type")
            if element_type == "way":
                ways.append(OSMWay(
                    id=element["id"],
                    tags=element.get("tags", {}),
                    geometry=_geometry_to_coords(element.get("geometry", []))
                ))
            elif element_type == "relation":
                relation = OSMRelation(id=element["id"], tags=element.get("tags", {}))
                for member in element.get("members", []):
                    if member.get("type") != "way":
                        continue
                    coords = _geometry_to_coords(member.get("geometry", []))
                    if not coords:
                        continue
                    if member.get("role") == "inner":
                        relation.inner.append(coords)
                    else:
                        relation.outer.append(coords)
                relations.append(relation)

        return ways, relations
