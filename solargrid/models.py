"""
Pydantic models for the Solar Grid analysis output
GeoJSON FeatureCollection with one feature per clipped cell
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from shapely.geometry import mapping
from shapely.geometry.base import BaseGeometry

from .analysis.types import CellAnalysis, Classification


# ============================================================
# GeoJSON Types
# ============================================================

class GeoJSONPolygon(BaseModel):
    type: Literal["Polygon"] = "Polygon"
    coordinates: List[List[List[float]]]  # [[[lon, lat], ...]]


class GeoJSONMultiPolygon(BaseModel):
    type: Literal["MultiPolygon"] = "MultiPolygon"
    coordinates: List[List[List[List[float]]]]


CellGeometry = Union[GeoJSONPolygon, GeoJSONMultiPolygon]


def _to_lists(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [_to_lists(v) for v in value]
    return value


def geometry_to_geojson(geom: BaseGeometry) -> CellGeometry:
    """Convert a shapely Polygon / MultiPolygon into its GeoJSON model"""
    geo = mapping(geom)
    coordinates = _to_lists(geo["coordinates"])
    if geo["type"] == "Polygon":
        return GeoJSONPolygon(coordinates=coordinates)
    if geo["type"] == "MultiPolygon":
        return GeoJSONMultiPolygon(coordinates=coordinates)
    raise ValueError(f"Unsupported cell geometry type: {geo['type']}")


# ============================================================
# Cell Features
# ============================================================

class CellProperties(BaseModel):
    id: str
    score: float = Field(ge=0.0, le=1.0)
    shading_fraction: float = Field(ge=0.0, le=1.0)
    color: str
    label: str
    classification: Classification


class CellFeature(BaseModel):
    type: Literal["Feature"] = "Feature"
    geometry: CellGeometry
    properties: CellProperties

    @classmethod
    def from_analysis(cls, cell: CellAnalysis) -> "CellFeature":
        return cls(
            geometry=geometry_to_geojson(cell.geometry),
            properties=CellProperties(
                id=cell.cell_id,
                score=round(cell.score, 3),
                shading_fraction=round(cell.shading_fraction, 3),
                color=cell.classification.color,
                label=cell.classification.label,
                classification=cell.classification,
            ),
        )


# ============================================================
# Result
# ============================================================

class AnalysisMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cell_size_m: int = Field(alias="cellSizeMeters")
    sample_count: int = Field(alias="sampleCount")
    status: Literal["ok", "degraded"] = "ok"
    version: int = 0
    cell_count: int = Field(default=0, alias="cellCount")
    building_count: int = Field(default=0, alias="buildingCount")
    area_sqm: float = Field(default=0.0, alias="areaSqm")
    center: Optional[List[float]] = None  # [lon, lat] of the polygon bbox


class AnalysisResult(BaseModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[CellFeature] = Field(default_factory=list)
    metadata: AnalysisMetadata

    @property
    def status(self) -> str:
        return self.metadata.status

    @property
    def is_empty(self) -> bool:
        return not self.features

    def summary(self) -> Dict[str, Any]:
        """Cell counts per classification plus run metadata"""
        counts = {c.value: 0 for c in Classification}
        for feature in self.features:
            counts[feature.properties.classification.value] += 1
        mean_score = (
            round(sum(f.properties.score for f in self.features) / len(self.features), 3)
            if self.features else 0.0
        )
        return {
            "status": self.metadata.status,
            "version": self.metadata.version,
            "cells": len(self.features),
            "area_sqm": self.metadata.area_sqm,
            "mean_score": mean_score,
            "classes": counts,
        }

    def to_geojson(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: Optional[int] = None) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)
