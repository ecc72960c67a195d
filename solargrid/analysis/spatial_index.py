"""
Bounding-box R-tree over building footprints
"""

from typing import List, Sequence

import numpy as np
from shapely import STRtree
from shapely.geometry import box

from .types import BoundingBox, BuildingFootprint


class SpatialIndex:
    """
    Read-only STR-packed R-tree of footprint bounding boxes.

    All footprints are bulk-loaded at construction; the index is not
    modified afterwards.
    """

    def __init__(self, footprints: Sequence[BuildingFootprint]):
        self._footprints = list(footprints)
        envelopes = [box(*fp.bounds) for fp in self._footprints]
        self._tree = STRtree(envelopes) if envelopes else None

    def __len__(self) -> int:
        return len(self._footprints)

    def query(self, bbox: BoundingBox) -> List[BuildingFootprint]:
        """Footprints whose bounding box intersects bbox, in load order"""
        if self._tree is None:
            return []
        hits = self._tree.query(bbox.to_polygon(), predicate="intersects")
        return [self._footprints[i] for i in np.sort(hits)]
