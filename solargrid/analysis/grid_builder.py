"""
Square grid generation over a bounding box
"""

import math
from typing import Iterator

from shapely.geometry import box

from .geometry_utils import GeometryUtils
from .types import BoundingBox, GridCell


class SquareGrid:
    """
    Axis-aligned square cells covering a bounding box.

    Cells are anchored at the south-west corner and laid out row-major
    (south to north, west to east). The last row and column may extend past
    the box so that it is covered without gaps. Iterating again yields the
    same cells.
    """

    def __init__(self, bbox: BoundingBox, step_lon: float, step_lat: float):
        self.bbox = bbox
        self.step_lon = step_lon
        self.step_lat = step_lat
        self.cols = max(1, math.ceil(bbox.width / step_lon - 1e-9))
        self.rows = max(1, math.ceil(bbox.height / step_lat - 1e-9))

    def __len__(self) -> int:
        return self.rows * self.cols

    def __iter__(self) -> Iterator[GridCell]:
        x0, y0 = self.bbox.min_lon, self.bbox.min_lat
        for row in range(self.rows):
            min_lat = y0 + row * self.step_lat
            for col in range(self.cols):
                min_lon = x0 + col * self.step_lon
                yield GridCell(
                    id=f"r{row}c{col}",
                    geometry=box(min_lon, min_lat, min_lon + self.step_lon, min_lat + self.step_lat),
                    row=row,
                    col=col,
                )


class GridBuilder:
    """Tile a bounding box into square cells of a given ground size"""

    def __init__(self, meters_per_degree: float = 111320.0):
        self.meters_per_degree = meters_per_degree

    def build(self, bbox: BoundingBox, cell_size_m: float) -> SquareGrid:
        """
        Build the grid for bbox.

        The cell size in meters is converted to degrees at the box's centre
        latitude so cells are square on the ground.
        """
        if cell_size_m <= 0:
            raise ValueError(f"cell_size_m must be positive, got {cell_size_m}")
        dlon, dlat = GeometryUtils.degrees_per_meter(bbox.center[1], self.meters_per_degree)
        return SquareGrid(bbox, cell_size_m * dlon, cell_size_m * dlat)
