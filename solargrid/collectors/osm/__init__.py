"""
OpenStreetMap building footprint collection

Modular components:
- API client: Overpass API communication
- Models: Data structures (OSMWay, OSMRelation)
- Parser: Response parsing
- Buildings: Footprint feature conversion
- Cache: Caching functionality
- Collector: Provider orchestrating the above
"""

from .models import OSMWay, OSMRelation
from .collector import OSMBuildingProvider

__all__ = [
    "OSMWay",
    "OSMRelation",
    "OSMBuildingProvider",
]
