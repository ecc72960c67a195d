"""
OSM data models

Data classes for representing OSM ways and relations
"""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class OSMWay:
    """Represents an OSM way (line or polygon)"""
    id: int
    tags: Dict[str, str]
    geometry: List[List[float]] = field(default_factory=list)  # [[lon, lat], ...] from 'out geom'

    def get_coordinates(self) -> List[List[float]]:
        """Get coordinates as [lon, lat] list"""
        return [list(c) for c in self.geometry]


@dataclass
class OSMRelation:
    """Represents an OSM multipolygon relation with resolved member geometry"""
    id: int
    tags: Dict[str, str]
    outer: List[List[List[float]]] = field(default_factory=list)
    inner: List[List[List[float]]] = field(default_factory=list)
