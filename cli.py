#!/usr/bin/env python
"""
Command-line interface for the Solar Grid Analysis engine

Usage:
    python cli.py analyze --polygon area.geojson --cell-size 10 --osm --output result.geojson
    python cli.py batch --input areas.geojson --buildings buildings.geojson --output ./results/
    python cli.py sun --lat 51.5074 --lon -0.1276
"""

import argparse
import json
import math
import os
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from solargrid.analysis import SunSampler
from solargrid.collectors import OSMBuildingProvider, StaticFootprintProvider
from solargrid.config import load_config
from solargrid.pipeline import AnalysisPipeline


def setup_logging(verbose: bool = False):
    """Configure logging"""
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=level
    )


def _load_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def extract_polygons(data: Any) -> List[Tuple[str, List[List[float]]]]:
    """
    Pull (id, outer ring) pairs out of a GeoJSON document or a bare ring
    """
    if isinstance(data, list):
        return [("default", data)]

    kind = data.get("type")
    if kind == "FeatureCollection":
        polygons = []
        for i, feature in enumerate(data.get("features") or []):
            properties = feature.get("properties") or {}
            feature_id = str(feature.get("id") or properties.get("name") or f"area_{i:03d}")
            parts = extract_polygons(feature)
            if len(parts) == 1:
                polygons.append((feature_id, parts[0][1]))
                continue
            # Each part of a multi-part feature is its own polygon and output file
            for j, (_, ring) in enumerate(parts):
                polygons.append((f"{feature_id}_part_{j}", ring))
        return polygons
    if kind == "Feature":
        return extract_polygons(data.get("geometry") or {})
    if kind == "Polygon":
        return [("default", data["coordinates"][0])]
    if kind == "MultiPolygon":
        return [(f"part_{i}", poly[0]) for i, poly in enumerate(data["coordinates"])]

    raise ValueError(f"Unsupported polygon document type: {kind}")


def build_provider(args, cache_dir: Optional[str]):
    """Footprint provider selected by the command-line flags"""
    if getattr(args, "buildings", None):
        return StaticFootprintProvider.from_geojson(_load_json(args.buildings))
    if getattr(args, "osm", False):
        return OSMBuildingProvider(cache_dir=cache_dir)
    return None


def _print_summary(summary: Dict[str, Any]):
    print(json.dumps(summary, indent=2))


def cmd_analyze(args):
    """Analyze a single installation-area polygon"""
    setup_logging(args.verbose)

    if not os.path.exists(args.polygon):
        logger.error(f"Polygon file not found: {args.polygon}")
        return 1

    try:
        polygons = extract_polygons(_load_json(args.polygon))
    except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
        logger.error(f"Could not read polygon: {e}")
        return 1
    if not polygons:
        logger.error("No polygon found in input")
        return 1
    if len(polygons) > 1:
        logger.warning(f"{len(polygons)} polygons in input, analyzing the first one only")

    polygon_id, ring = polygons[0]
    config = load_config()
    cache_dir = args.cache_dir or config.cache_dir
    output_path = args.output or f"solar_grid_{datetime.now().strftime('%Y%m%d_%H%M%S')}.geojson"

    pipeline = AnalysisPipeline(provider=build_provider(args, cache_dir), config=config)

    try:
        result = pipeline.run(ring, cell_size_m=args.cell_size, polygon_id=polygon_id)
        pipeline.save(result, output_path)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to analyze polygon: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1

    logger.info(f"✓ Generated: {output_path}")
    logger.info(f"  Cells: {len(result.features)}")
    logger.info(f"  Area: {result.metadata.area_sqm:,.0f} m²")
    logger.info(f"  Status: {result.status}")
    if result.is_empty:
        logger.warning("No grid cells overlap the polygon; check that it is a valid lon/lat ring")

    if args.summary:
        _print_summary(result.summary())

    return 0


def cmd_batch(args):
    """Analyze every polygon of a FeatureCollection"""
    setup_logging(args.verbose)

    if not os.path.exists(args.input):
        logger.error(f"Input file not found: {args.input}")
        return 1

    try:
        polygons = extract_polygons(_load_json(args.input))
    except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
        logger.error(f"Could not read polygons: {e}")
        return 1

    if not polygons:
        logger.error("No polygons found in input")
        return 1

    logger.info(f"Processing {len(polygons)} polygons...")
    os.makedirs(args.output, exist_ok=True)

    config = load_config()
    cache_dir = args.cache_dir or config.cache_dir
    pipeline = AnalysisPipeline(provider=build_provider(args, cache_dir), config=config)
    success = 0
    failed = 0

    for i, (polygon_id, ring) in enumerate(polygons, 1):
        logger.info(f"[{i}/{len(polygons)}] {polygon_id}")
        try:
            result = pipeline.run(ring, cell_size_m=args.cell_size, polygon_id=polygon_id)
            filename = f"{polygon_id.replace(' ', '_').lower()}.geojson"
            pipeline.save(result, os.path.join(args.output, filename))
            logger.info(f"  ✓ {filename} ({len(result.features)} cells, {result.status})")
            success += 1
        except (OSError, ValueError) as e:
            logger.error(f"  ✗ Failed: {e}")
            failed += 1

    logger.info(f"Complete: {success} succeeded, {failed} failed")
    return 0 if failed == 0 else 1


def cmd_sun(args):
    """Print the sun-sample table for a location"""
    setup_logging(args.verbose)

    config = load_config()
    sampler = SunSampler.from_config(config.analysis)
    if args.timezone:
        sampler.timezone_name = args.timezone

    for sample in sampler.sample(args.lat, args.lon):
        print(
            f"{sample.when.isoformat()}  "
            f"altitude {math.degrees(sample.altitude):6.1f}°  "
            f"azimuth {math.degrees(sample.azimuth):6.1f}°"
        )
    return 0


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Solar Grid Analysis CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Analyze one polygon against OSM buildings:
    python cli.py analyze --polygon area.geojson --osm --output result.geojson

  Analyze with local building footprints and 5m cells:
    python cli.py analyze --polygon area.geojson --buildings buildings.geojson --cell-size 5

  Batch analyze a FeatureCollection:
    python cli.py batch --input areas.geojson --osm --output ./results/

  Show sun samples:
    python cli.py sun --lat 51.5074 --lon -0.1276
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    def add_provider_args(sub):
        source = sub.add_mutually_exclusive_group()
        source.add_argument("--buildings", "-b", help="GeoJSON file with building footprints")
        source.add_argument("--osm", action="store_true", help="Fetch building footprints from OpenStreetMap")
        sub.add_argument("--cache-dir", help="Directory for cached Overpass responses")
        sub.add_argument("--cell-size", "-c", type=int, default=None, help="Grid cell size in meters (5-20)")

    # Analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Analyze one installation-area polygon")
    analyze_parser.add_argument("--polygon", "-p", required=True, help="GeoJSON polygon / feature file")
    analyze_parser.add_argument("--output", "-o", help="Output GeoJSON file")
    analyze_parser.add_argument("--summary", "-s", action="store_true", help="Print summary to stdout")
    add_provider_args(analyze_parser)
    analyze_parser.set_defaults(func=cmd_analyze)

    # Batch command
    batch_parser = subparsers.add_parser("batch", help="Analyze every polygon in a FeatureCollection")
    batch_parser.add_argument("--input", "-i", required=True, help="Input GeoJSON FeatureCollection")
    batch_parser.add_argument("--output", "-o", default="output", help="Output directory")
    add_provider_args(batch_parser)
    batch_parser.set_defaults(func=cmd_batch)

    # Sun command
    sun_parser = subparsers.add_parser("sun", help="Show sun samples for a location")
    sun_parser.add_argument("--lat", type=float, required=True, help="Latitude")
    sun_parser.add_argument("--lon", type=float, required=True, help="Longitude")
    sun_parser.add_argument("--timezone", help="IANA timezone for the sample hours")
    sun_parser.set_defaults(func=cmd_sun)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
