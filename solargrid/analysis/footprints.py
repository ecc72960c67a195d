"""
Building footprint parsing and height resolution

Provider features carry loosely-typed tags; they are turned into
BuildingFootprint values once, when the spatial index is built.
"""

import math
import re
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger
from shapely.errors import GEOSException

from ..exceptions import InvalidPolygonError
from .geometry_utils import GeometryUtils
from .types import BuildingFootprint

_HEIGHT_PATTERN = re.compile(r"^\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+))\s*(?:m|meters?|metres?)?\s*$", re.IGNORECASE)


def _parse_number(raw: Any, pattern: Optional[re.Pattern] = None) -> Optional[float]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw)
        if pattern is not None:
            match = pattern.match(text)
            if not match:
                return None
            text = match.group(1)
        try:
            value = float(text)
        except ValueError:
            return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def resolve_height(
    properties: Optional[Dict[str, Any]],
    default_height_m: float = 6.0,
    meters_per_level: float = 3.0
) -> float:
    """
    Effective building height in meters.

    Priority:
    1. ``height`` tag, with a trailing unit marker stripped ("12", "12m", "12 m")
    2. ``building:levels`` x meters_per_level
    3. default_height_m
    """
    properties = properties or {}

    height = _parse_number(properties.get("height"), _HEIGHT_PATTERN)
    if height is not None:
        return height
    if properties.get("height") is not None:
        logger.debug(f"Unparseable height tag {properties.get('height')!r}, falling back")

    levels = _parse_number(properties.get("building:levels"))
    if levels is not None:
        return levels * meters_per_level

    return default_height_m


def footprints_from_features(
    features: Iterable[Dict[str, Any]],
    default_height_m: float = 6.0,
    meters_per_level: float = 3.0
) -> List[BuildingFootprint]:
    """
    Convert provider features into footprints.

    Features without a usable polygonal geometry are skipped with a warning.
    """
    footprints = []
    for i, feature in enumerate(features):
        if not isinstance(feature, dict):
            logger.warning(f"Skipping footprint {i}: expected a feature mapping, got {type(feature).__name__}")
            continue
        feature_id = str(feature.get("id", f"building_{i}"))
        try:
            geometry = GeometryUtils.polygon_from_geojson(feature.get("geometry") or {})
        except (InvalidPolygonError, GEOSException, ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning(f"Skipping footprint {feature_id}: {e}")
            continue

        properties = feature.get("properties") or {}
        footprints.append(BuildingFootprint(
            id=feature_id,
            geometry=geometry,
            height_m=resolve_height(properties, default_height_m, meters_per_level),
            properties=dict(properties),
        ))
    return footprints
