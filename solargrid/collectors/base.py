"""
Building footprint provider interface and in-memory provider
"""

from typing import Any, Dict, List, Optional, Protocol, Sequence

from loguru import logger
from shapely.errors import GEOSException
from shapely.geometry import box, shape


class FootprintProvider(Protocol):
    """
    Supplies building footprints for a bounding box.

    fetch returns GeoJSON-like features:
    {"geometry": {...polygon...}, "properties": {"height"?: str, "building:levels"?: str}}
    and raises on failure.
    """

    def fetch(self, bbox: Sequence[float]) -> List[Dict[str, Any]]:
        ...


class StaticFootprintProvider:
    """
    Serve footprints from an in-memory feature list

    Only features whose bounding box intersects the requested bbox are returned.
    """

    def __init__(self, features: Optional[Sequence[Dict[str, Any]]] = None):
        self.features = list(features or [])

    @classmethod
    def from_geojson(cls, data: Dict[str, Any]) -> "StaticFootprintProvider":
        """Accept a FeatureCollection, a single Feature or a list of features"""
        if isinstance(data, list):
            return cls(data)
        if data.get("type") == "FeatureCollection":
            return cls(data.get("features", []))
        if data.get("type") == "Feature":
            return cls([data])
        raise ValueError(f"Unsupported footprint document type: {data.get('type')}")

    def fetch(self, bbox: Sequence[float]) -> List[Dict[str, Any]]:
        query = box(*bbox)
        selected = []
        for feature in self.features:
            try:
                geom = shape(feature["geometry"])
            except (KeyError, TypeError, ValueError, AttributeError, GEOSException) as e:
                logger.warning(f"Skipping footprint without usable geometry: {e}")
                continue
            if geom.is_empty:
                continue
            if box(*geom.bounds).intersects(query):
                selected.append(feature)
        logger.info(f"Static provider: {len(selected)}/{len(self.features)} footprints in bbox")
        return selected
