"""
Main Pipeline Orchestrator for Solar Grid Analysis

One run per polygon draw/edit event:

  1. Issue a run version for the polygon
  2. Validate the polygon, compute bbox and centroid
  3. Fetch building footprints for the bbox (tolerating failure)
  4. Build the spatial index
  5. Generate and clip grid cells
  6. Compute the sun-sample set once
  7. Score every cell
  8. Assemble the result and publish it if this run is still the latest
  9. Report status: ok, or degraded when the footprint fetch failed
"""

import json
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence

from loguru import logger

from .analysis import (
    GeometryUtils, GridBuilder, PolygonClipper, ScoreAggregator, ShadowEvaluator,
    SpatialIndex, SunSampler, footprints_from_features
)
from .analysis.types import CellAnalysis, GridCell
from .collectors.base import FootprintProvider
from .config import PipelineConfig, get_config
from .exceptions import InvalidPolygonError
from .models import AnalysisMetadata, AnalysisResult, CellFeature
from .register import ResultRegister

STATUS_OK = "ok"
STATUS_DEGRADED = "degraded"


class AnalysisPipeline:
    """
    Grid-based solar potential analysis for installation-area polygons

    Usage:
        pipeline = AnalysisPipeline(provider=OSMBuildingProvider())
        result = pipeline.run(ring, cell_size_m=10)
        pipeline.save(result, "output/analysis.geojson")
    """

    def __init__(
        self,
        provider: Optional[FootprintProvider] = None,
        config: Optional[PipelineConfig] = None,
        sun_sampler: Optional[SunSampler] = None,
        register: Optional[ResultRegister] = None
    ):
        self.config = config or get_config()
        self.provider = provider
        self.sun_sampler = sun_sampler or SunSampler.from_config(self.config.analysis)
        self.register = register or ResultRegister()
        self.grid_builder = GridBuilder(self.config.analysis.meters_per_degree)

    def run(
        self,
        polygon: Sequence[Sequence[float]],
        cell_size_m: Optional[float] = None,
        polygon_id: str = "default",
        version: Optional[int] = None
    ) -> AnalysisResult:
        """
        Run the complete analysis for one polygon

        Args:
            polygon: Closed ring of [lon, lat] pairs
            cell_size_m: Grid cell size in meters (default from config)
            polygon_id: Logical polygon the run belongs to
            version: Version issued by the caller; a new one is issued when omitted

        Returns:
            The assembled AnalysisResult (published only if still current)
        """
        if version is None:
            version = self.register.issue(polygon_id)
        cell_size = self._normalize_cell_size(cell_size_m)
        analysis_config = self.config.analysis

        logger.info(f"Starting analysis run {polygon_id}#{version} (cell size {cell_size}m)")

        try:
            target = GeometryUtils.polygon_from_ring(polygon)
        except InvalidPolygonError as e:
            logger.warning(f"Run {polygon_id}#{version}: degenerate polygon ({e}), returning empty result")
            result = AnalysisResult(metadata=AnalysisMetadata(
                cell_size_m=cell_size,
                sample_count=0,
                status=STATUS_OK,
                version=version,
            ))
            self._publish(polygon_id, version, result)
            return result

        bbox = GeometryUtils.bounding_box(target)
        centroid = target.centroid

        # ============================================================
        # Obstructions
        # ============================================================
        fetch_bbox = bbox.expand(analysis_config.fetch_margin_m, analysis_config.meters_per_degree)
        features, status = self._fetch_footprints(fetch_bbox.as_list())
        footprints = footprints_from_features(
            features,
            default_height_m=analysis_config.default_height_m,
            meters_per_level=analysis_config.meters_per_level,
        )
        index = SpatialIndex(footprints)
        logger.info(f"Indexed {len(index)} building footprints")

        # ============================================================
        # Grid
        # ============================================================
        grid = self.grid_builder.build(bbox, cell_size)
        cells = PolygonClipper(target).clip_all(grid)
        logger.info(f"Grid {grid.rows}x{grid.cols}: {len(cells)} of {len(grid)} cells overlap the polygon")

        # ============================================================
        # Sun samples and scoring
        # ============================================================
        samples = self.sun_sampler.sample(centroid.y, centroid.x)
        evaluator = ShadowEvaluator(
            index,
            search_radius_m=analysis_config.search_radius_m,
            meters_per_degree=analysis_config.meters_per_degree,
        )
        aggregator = ScoreAggregator(
            evaluator,
            samples,
            usable_fraction=analysis_config.usable_fraction,
            irradiance_factor=analysis_config.irradiance_factor,
            low_threshold=analysis_config.low_threshold,
            high_threshold=analysis_config.high_threshold,
        )
        analyses = self._score_cells(aggregator, cells)

        result = AnalysisResult(
            features=[CellFeature.from_analysis(a) for a in analyses],
            metadata=AnalysisMetadata(
                cell_size_m=cell_size,
                sample_count=len(samples),
                status=status,
                version=version,
                cell_count=len(analyses),
                building_count=len(index),
                area_sqm=float(round(GeometryUtils.geodesic_area_m2(target))),
                center=list(bbox.center),
            ),
        )

        self._publish(polygon_id, version, result)
        logger.info(f"Run {polygon_id}#{version} finished: {len(analyses)} cells, status {status}")
        return result

    def save(self, result: AnalysisResult, output_path: str) -> str:
        """Save analysis result to a GeoJSON file"""
        os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(result.to_geojson(), f, indent=2, ensure_ascii=False)

        logger.info(f"Saved analysis result to {output_path}")
        return output_path

    # ============================================================
    # Helper Methods
    # ============================================================

    def _normalize_cell_size(self, cell_size_m: Optional[float]) -> int:
        analysis_config = self.config.analysis
        if cell_size_m is None:
            return int(analysis_config.cell_size_m)
        size = int(round(cell_size_m))
        clamped = min(analysis_config.max_cell_size_m, max(analysis_config.min_cell_size_m, size))
        if clamped != cell_size_m:
            logger.warning(
                f"Cell size {cell_size_m}m adjusted to {clamped}m "
                f"(allowed {analysis_config.min_cell_size_m}-{analysis_config.max_cell_size_m}m)"
            )
        return clamped

    def _fetch_footprints(self, bbox: List[float]):
        """Return (features, status); a failing provider yields an empty set"""
        if self.provider is None:
            return [], STATUS_OK
        try:
            response = self.provider.fetch(bbox)
            if isinstance(response, dict):
                # A FeatureCollection document instead of a feature list
                response = response.get("features")
            if response is not None and not isinstance(response, Iterable):
                raise TypeError(f"provider returned {type(response).__name__}, expected a list of features")
            features = list(response or [])
        except Exception as e:
            logger.warning(f"Building footprint fetch failed, continuing without obstructions: {e}")
            return [], STATUS_DEGRADED
        return features, STATUS_OK

    def _score_cells(self, aggregator: ScoreAggregator, cells: List[GridCell]) -> List[CellAnalysis]:
        analysis_config = self.config.analysis
        if len(cells) < analysis_config.parallel_threshold or analysis_config.max_workers <= 1:
            return [aggregator.aggregate(cell) for cell in cells]

        logger.info(f"Scoring {len(cells)} cells with {analysis_config.max_workers} workers")
        with ThreadPoolExecutor(max_workers=analysis_config.max_workers) as executor:
            return list(executor.map(aggregator.aggregate, cells))

    def _publish(self, polygon_id: str, version: int, result: AnalysisResult) -> bool:
        published = self.register.publish(polygon_id, version, result)
        if not published:
            logger.debug(f"Run {polygon_id}#{version} superseded, result not published")
        return published
