"""
Clip grid cells to the installation-area polygon
"""

from typing import Iterable, List, Optional

from loguru import logger
from shapely.errors import GEOSException
from shapely.geometry.base import BaseGeometry
from shapely.prepared import prep

from .geometry_utils import GeometryUtils
from .types import GridCell


class PolygonClipper:
    """
    Intersect candidate cells with a target polygon.

    The polygon is prepared once so the intersects test is cheap for every
    cell of the grid.
    """

    def __init__(self, polygon: BaseGeometry):
        self.polygon = polygon
        self._prepared = prep(polygon)

    def clip(self, cell: GridCell) -> Optional[BaseGeometry]:
        """
        Return the part of cell inside the polygon, or None for no overlap.

        Overlay failures on a single cell are reported as no overlap.
        """
        try:
            if not self._prepared.intersects(cell.geometry):
                return None
            clipped = cell.geometry.intersection(self.polygon)
            return GeometryUtils.polygonal_part(clipped)
        except (GEOSException, ValueError) as e:
            logger.debug(f"Dropping cell {cell.id}: clip failed ({e})")
            return None

    def clip_all(self, cells: Iterable[GridCell]) -> List[GridCell]:
        """Clip every cell, keeping only those that overlap the polygon"""
        clipped_cells = []
        for cell in cells:
            clipped = self.clip(cell)
            if clipped is None:
                continue
            clipped_cells.append(GridCell(id=cell.id, geometry=clipped, row=cell.row, col=cell.col))
        return clipped_cells
