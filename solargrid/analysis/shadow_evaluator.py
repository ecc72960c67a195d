"""
Shadow occlusion test for one cell centroid and one sun position
"""

import math
from typing import Optional, Tuple

from .geometry_utils import GeometryUtils
from .spatial_index import SpatialIndex
from .types import BuildingFootprint, SunSample


class ShadowEvaluator:
    """
    Decide whether nearby buildings block the sun at a point.

    A building blocks the sun when it lies within the search radius and is
    taller than tan(altitude) x distance, i.e. its roof edge is above the
    sun line seen from the point.
    """

    def __init__(
        self,
        index: SpatialIndex,
        search_radius_m: float = 200.0,
        meters_per_degree: float = 111320.0
    ):
        self.index = index
        self.search_radius_m = search_radius_m
        self.meters_per_degree = meters_per_degree

    def is_blocked(self, centroid: Tuple[float, float], sample: SunSample) -> bool:
        """Sun below the horizon counts as blocked"""
        if sample.altitude <= 0:
            return True
        return self.blocking_building(centroid, sample) is not None

    def blocking_building(
        self,
        centroid: Tuple[float, float],
        sample: SunSample
    ) -> Optional[BuildingFootprint]:
        """
        First building that blocks the sun for this sample, if any.

        Always None when the sun is at or below the horizon, since no
        building lookup is needed then.
        """
        if sample.altitude <= 0:
            return None

        lon, lat = centroid
        query = GeometryUtils.query_box(lon, lat, self.search_radius_m, self.meters_per_degree)
        tan_alt = math.tan(sample.altitude)

        for building in self.index.query(query):
            distance = GeometryUtils.geodesic_distance_m(centroid, building.centroid)
            if distance >= self.search_radius_m:
                continue
            if building.height_m > tan_alt * distance:
                return building
        return None
