"""Shared fixtures for the solar grid tests."""

import math
from datetime import datetime, timezone
from typing import List, Sequence

import pytest
from pyproj import Geod

from solargrid.analysis.types import SunSample
from solargrid.config import PipelineConfig

METERS_PER_DEGREE = 111320.0
ORIGIN = (10.0, 45.0)  # lon, lat

_GEOD = Geod(ellps="WGS84")


def square_ring(center_lon: float, center_lat: float, size_m: float) -> List[List[float]]:
    """Closed ring of a square of size_m meters, using the engine's degree scale."""
    half = size_m / 2
    dlat = half / METERS_PER_DEGREE
    dlon = half / (METERS_PER_DEGREE * math.cos(math.radians(center_lat)))
    return [
        [center_lon - dlon, center_lat - dlat],
        [center_lon + dlon, center_lat - dlat],
        [center_lon + dlon, center_lat + dlat],
        [center_lon - dlon, center_lat + dlat],
        [center_lon - dlon, center_lat - dlat],
    ]


def offset_point(lon: float, lat: float, azimuth_deg: float, distance_m: float):
    """Point at a geodesic distance and bearing from (lon, lat)."""
    out_lon, out_lat, _ = _GEOD.fwd(lon, lat, azimuth_deg, distance_m)
    return out_lon, out_lat


def building_feature(center, size_m: float = 4.0, **properties):
    """Square footprint feature centred on center."""
    return {
        "type": "Feature",
        "id": properties.pop("id", "b1"),
        "geometry": {"type": "Polygon", "coordinates": [square_ring(center[0], center[1], size_m)]},
        "properties": properties,
    }


def make_samples(altitudes_deg: Sequence[float]) -> List[SunSample]:
    base = datetime(2024, 6, 21, 9, tzinfo=timezone.utc)
    return [
        SunSample(when=base.replace(hour=9 + i), altitude=math.radians(a), azimuth=math.radians(180.0))
        for i, a in enumerate(altitudes_deg)
    ]


class FixedSunSampler:
    """Sun sampler returning a predetermined sample set."""

    def __init__(self, altitudes_deg: Sequence[float]):
        self.samples = make_samples(altitudes_deg)
        self.calls = []

    def sample(self, lat: float, lon: float) -> List[SunSample]:
        self.calls.append((lat, lon))
        return list(self.samples)


class FailingProvider:
    """Provider whose fetch always fails."""

    def __init__(self):
        self.calls = 0

    def fetch(self, bbox):
        self.calls += 1
        raise ConnectionError("overpass unreachable")


class RecordingProvider:
    """Provider returning fixed features and remembering requested boxes."""

    def __init__(self, features=None):
        self.features = list(features or [])
        self.requests = []

    def fetch(self, bbox):
        self.requests.append(list(bbox))
        return list(self.features)


@pytest.fixture
def config():
    return PipelineConfig()


@pytest.fixture
def square_100m():
    return square_ring(ORIGIN[0], ORIGIN[1], 100.0)


@pytest.fixture
def daylight_sampler():
    return FixedSunSampler([20, 40, 60, 15, 25, 35])


@pytest.fixture
def night_sampler():
    return FixedSunSampler([0, -5, -10, -20, -1, 0])
