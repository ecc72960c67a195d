"""
Building footprint providers for the Solar Grid Analysis engine
"""

from .base import FootprintProvider, StaticFootprintProvider
from .osm import OSMBuildingProvider

__all__ = [
    "FootprintProvider",
    "StaticFootprintProvider",
    "OSMBuildingProvider",
]
