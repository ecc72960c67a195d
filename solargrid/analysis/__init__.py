"""
Analysis modules for the Solar Grid Analysis engine
"""

from .types import (
    BoundingBox, BuildingFootprint, CellAnalysis, Classification, GridCell, SunSample
)
from .geometry_utils import GeometryUtils
from .grid_builder import GridBuilder, SquareGrid
from .polygon_clipper import PolygonClipper
from .footprints import footprints_from_features, resolve_height
from .spatial_index import SpatialIndex
from .sun_sampler import SunSampler
from .shadow_evaluator import ShadowEvaluator
from .score_aggregator import ScoreAggregator, classify

__all__ = [
    "BoundingBox",
    "BuildingFootprint",
    "CellAnalysis",
    "Classification",
    "GridCell",
    "SunSample",
    "GeometryUtils",
    "GridBuilder",
    "SquareGrid",
    "PolygonClipper",
    "footprints_from_features",
    "resolve_height",
    "SpatialIndex",
    "SunSampler",
    "ShadowEvaluator",
    "ScoreAggregator",
    "classify",
]
