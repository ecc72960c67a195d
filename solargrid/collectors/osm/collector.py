"""
OSM building footprint provider

Orchestrates the Overpass client, cache, parser and building processor
"""

from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from ...config import PipelineConfig, get_config
from .api_client import OverpassAPIClient
from .buildings import BuildingProcessor
from .cache import OSMCache
from .parser import OSMResponseParser


class OSMBuildingProvider:
    """
    Fetch building footprints for a bounding box from OpenStreetMap

    Supports caching raw Overpass responses to disk for reuse.
    Raises FootprintFetchError when the API cannot be reached.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        cache_dir: Optional[str] = None,
        api_client: Optional[OverpassAPIClient] = None
    ):
        self.config = config or get_config()
        self.api_client = api_client or OverpassAPIClient(self.config.api)
        max_age_hours = self.config.cache_max_age_hours
        self.cache = OSMCache(
            cache_dir if cache_dir is not None else self.config.cache_dir,
            max_age_s=max_age_hours * 3600 if max_age_hours is not None else None,
        )
        self.parser = OSMResponseParser()
        self.building_processor = BuildingProcessor()

    def build_query(self, bbox: Sequence[float]) -> str:
        """Overpass QL for buildings in bbox ([min_lon, min_lat, max_lon, max_lat])"""
        min_lon, min_lat, max_lon, max_lat = bbox
        # Overpass bbox order is south, west, north, east
        area = f"{min_lat:.7f},{min_lon:.7f},{max_lat:.7f},{max_lon:.7f}"
        return f"""
        [out:json][timeout:{self.config.api.overpass_timeout}];
        (
            way["building"]({area});
            relation["building"]({area});
        );
        out geom;
        """

    def fetch(self, bbox: Sequence[float]) -> List[Dict[str, Any]]:
        """
        Fetch building footprints intersecting bbox

        Args:
            bbox: [min_lon, min_lat, max_lon, max_lat]

        Returns:
            List of footprint features
        """
        data = self.cache.get(bbox)
        if data is None:
            logger.info(f"Fetching OSM buildings in bbox {list(bbox)}")
            data = self.api_client.query(self.build_query(bbox))
            self.cache.put(bbox, data)

        ways, relations = self.parser.parse_elements(data)
        return self.building_processor.parse_buildings(ways, relations)
