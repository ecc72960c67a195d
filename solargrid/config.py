"""
Configuration settings for the Solar Grid Analysis engine
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple
import os

from dotenv import load_dotenv
from loguru import logger


@dataclass
class AnalysisConfig:
    """Grid, sun sampling and shading parameters"""
    # Grid cell size (meters)
    cell_size_m: int = 10
    min_cell_size_m: int = 5
    max_cell_size_m: int = 20

    # Obstruction search
    search_radius_m: float = 200.0
    meters_per_degree: float = 111320.0  # Equator scale, used for grid steps and query boxes

    # Building height fallbacks (meters)
    default_height_m: float = 6.0
    meters_per_level: float = 3.0

    # Sun sampling: (month, day) pairs and local hours
    sample_dates: List[Tuple[int, int]] = field(default_factory=lambda: [
        (6, 21),   # June solstice
        (12, 21),  # December solstice
    ])
    sample_hours: List[int] = field(default_factory=lambda: [9, 12, 15])
    sample_year: int = 2024
    timezone: Optional[str] = None  # None = UTC offset derived from longitude

    # Score multipliers (reserved, 1.0 = inactive)
    usable_fraction: float = 1.0
    irradiance_factor: float = 1.0

    # Classification thresholds
    low_threshold: float = 0.25
    high_threshold: float = 0.60

    # Extra margin around the polygon bbox when requesting footprints (meters)
    fetch_margin_m: float = 0.0

    # Cell evaluation worker pool
    max_workers: int = 4
    parallel_threshold: int = 200  # Below this cell count, evaluate sequentially


@dataclass
class APIConfig:
    """API endpoints and configuration"""
    # Overpass API (OSM)
    overpass_url: str = "https://overpass-api.de/api/interpreter"
    overpass_timeout: int = 25  # Server-side query timeout

    # Request settings
    request_timeout: int = 30
    max_retries: int = 3
    retry_delay: float = 2.0
    min_request_interval: float = 1.0

    # User agent for API requests
    user_agent: str = "SolarGridAnalysis/1.0"


@dataclass
class PipelineConfig:
    """Pipeline configuration"""
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    api: APIConfig = field(default_factory=APIConfig)

    # On-disk cache for provider responses (None disables caching)
    cache_dir: Optional[str] = None
    cache_max_age_hours: Optional[float] = None  # None = entries never expire


# Global config instance
config = PipelineConfig()


def get_config() -> PipelineConfig:
    """Get global configuration"""
    return config


def load_config(env_file: Optional[str] = None) -> PipelineConfig:
    """
    Build a configuration from defaults plus SOLARGRID_* environment overrides.

    Reads a .env file first (without overriding variables already set).
    """
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(override=False)

    cfg = PipelineConfig()

    if os.getenv("SOLARGRID_OVERPASS_URL"):
        cfg.api.overpass_url = os.environ["SOLARGRID_OVERPASS_URL"]
    if os.getenv("SOLARGRID_CACHE_DIR"):
        cfg.cache_dir = os.environ["SOLARGRID_CACHE_DIR"]
    if os.getenv("SOLARGRID_TIMEZONE"):
        cfg.analysis.timezone = os.environ["SOLARGRID_TIMEZONE"]

    int_overrides = {
        "SOLARGRID_CELL_SIZE_M": ("analysis", "cell_size_m"),
        "SOLARGRID_MAX_WORKERS": ("analysis", "max_workers"),
        "SOLARGRID_SAMPLE_YEAR": ("analysis", "sample_year"),
        "SOLARGRID_MAX_RETRIES": ("api", "max_retries"),
    }
    for env_name, (section, attr) in int_overrides.items():
        raw = os.getenv(env_name)
        if raw is None:
            continue
        try:
            setattr(getattr(cfg, section), attr, int(raw))
        except ValueError:
            logger.warning(f"Ignoring {env_name}={raw!r}: not an integer")

    raw_radius = os.getenv("SOLARGRID_SEARCH_RADIUS_M")
    if raw_radius is not None:
        try:
            cfg.analysis.search_radius_m = float(raw_radius)
        except ValueError:
            logger.warning(f"Ignoring SOLARGRID_SEARCH_RADIUS_M={raw_radius!r}: not a number")

    validate_config(cfg)
    return cfg


def validate_config(config: PipelineConfig) -> None:
    """
    Validate that all required configuration values are set.
    Raises ValueError if any required value is missing or invalid.
    """
    errors = []

    analysis = getattr(config, "analysis", None)
    if analysis is None:
        errors.append("analysis configuration is required but not set")
    else:
        if analysis.min_cell_size_m <= 0 or analysis.min_cell_size_m > analysis.max_cell_size_m:
            errors.append(
                f"cell size range must be positive and ordered, got "
                f"[{analysis.min_cell_size_m}, {analysis.max_cell_size_m}]"
            )
        elif not analysis.min_cell_size_m <= analysis.cell_size_m <= analysis.max_cell_size_m:
            errors.append(
                f"cell_size_m must be within [{analysis.min_cell_size_m}, {analysis.max_cell_size_m}], "
                f"got {analysis.cell_size_m}"
            )
        if analysis.search_radius_m <= 0:
            errors.append(f"search_radius_m must be positive, got {analysis.search_radius_m}")
        if analysis.meters_per_degree <= 0:
            errors.append(f"meters_per_degree must be positive, got {analysis.meters_per_degree}")
        if not analysis.sample_dates:
            errors.append("sample_dates must not be empty")
        if not analysis.sample_hours:
            errors.append("sample_hours must not be empty")
        elif any(h < 0 or h > 23 for h in analysis.sample_hours):
            errors.append(f"sample_hours must be within 0-23, got {analysis.sample_hours}")
        if not 0.0 <= analysis.low_threshold <= analysis.high_threshold <= 1.0:
            errors.append(
                f"thresholds must satisfy 0 <= low <= high <= 1, got "
                f"{analysis.low_threshold}, {analysis.high_threshold}"
            )
        if analysis.max_workers < 1:
            errors.append(f"max_workers must be at least 1, got {analysis.max_workers}")
        if analysis.fetch_margin_m < 0:
            errors.append(f"fetch_margin_m must not be negative, got {analysis.fetch_margin_m}")

    api = getattr(config, "api", None)
    if api is None:
        errors.append("api configuration is required but not set")
    else:
        if not api.overpass_url:
            errors.append("api.overpass_url is required but not set")
        if api.max_retries < 1:
            errors.append(f"api.max_retries must be at least 1, got {api.max_retries}")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(error_msg)
