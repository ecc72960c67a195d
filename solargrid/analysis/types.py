"""
Run-local data types shared by the analysis components
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Tuple

from shapely.geometry import Polygon, box
from shapely.geometry.base import BaseGeometry


class Classification(str, Enum):
    """Solar potential class of a cell"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @property
    def color(self) -> str:
        return _CLASS_STYLE[self][0]

    @property
    def label(self) -> str:
        return _CLASS_STYLE[self][1]


_CLASS_STYLE = {
    Classification.LOW: ("#e63946", "No potential"),
    Classification.MEDIUM: ("#f4d35e", "Medium potential"),
    Classification.HIGH: ("#2a9d8f", "High potential"),
}


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in degrees"""
    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    @classmethod
    def from_bounds(cls, bounds: Tuple[float, float, float, float]) -> "BoundingBox":
        """Create from a shapely-style (minx, miny, maxx, maxy) tuple"""
        return cls(*(float(v) for v in bounds))

    @property
    def width(self) -> float:
        return self.max_lon - self.min_lon

    @property
    def height(self) -> float:
        return self.max_lat - self.min_lat

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.min_lon + self.max_lon) / 2, (self.min_lat + self.max_lat) / 2)

    def as_list(self) -> List[float]:
        return [self.min_lon, self.min_lat, self.max_lon, self.max_lat]

    def expand(self, margin_m: float, meters_per_degree: float = 111320.0) -> "BoundingBox":
        """Grow the box by margin_m meters on every side"""
        if margin_m <= 0:
            return self
        center_lat = self.center[1]
        dlat = margin_m / meters_per_degree
        dlon = margin_m / (meters_per_degree * max(math.cos(math.radians(center_lat)), 1e-6))
        return BoundingBox(
            self.min_lon - dlon,
            self.min_lat - dlat,
            self.max_lon + dlon,
            self.max_lat + dlat,
        )

    def to_polygon(self) -> Polygon:
        return box(self.min_lon, self.min_lat, self.max_lon, self.max_lat)


@dataclass
class GridCell:
    """One square tile of the subdivision grid (or its clipped remainder)"""
    id: str
    geometry: BaseGeometry
    row: int = 0
    col: int = 0

    @property
    def centroid(self) -> Tuple[float, float]:
        c = self.geometry.centroid
        return (c.x, c.y)


@dataclass(frozen=True)
class BuildingFootprint:
    """Obstruction candidate with its height resolved once"""
    id: str
    geometry: BaseGeometry
    height_m: float
    properties: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def centroid(self) -> Tuple[float, float]:
        c = self.geometry.centroid
        return (c.x, c.y)

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        return self.geometry.bounds


@dataclass(frozen=True)
class SunSample:
    """Sun position at one instant, angles in radians"""
    when: datetime
    altitude: float
    azimuth: float

    @property
    def above_horizon(self) -> bool:
        return self.altitude > 0


@dataclass
class CellAnalysis:
    """Scored cell"""
    cell_id: str
    score: float
    shading_fraction: float
    classification: Classification
    geometry: BaseGeometry
    blocked_samples: int = 0
