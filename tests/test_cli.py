"""Tests for the command-line interface."""

import json

import pytest

from cli import extract_polygons, main

from conftest import ORIGIN, building_feature, offset_point, square_ring


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


class TestExtractPolygons:
    """Tests for reading polygons from input documents."""

    def test_bare_ring(self):
        ring = square_ring(*ORIGIN, 50.0)
        assert extract_polygons(ring) == [("default", ring)]

    def test_feature_collection_ids(self):
        ring = square_ring(*ORIGIN, 50.0)
        data = {
            "type": "FeatureCollection",
            "features": [
                {"type": "Feature", "id": "roof-a", "geometry": {"type": "Polygon", "coordinates": [ring]}},
                {"type": "Feature", "properties": {"name": "Yard"},
                 "geometry": {"type": "Polygon", "coordinates": [ring]}},
                {"type": "Feature", "properties": {}, "geometry": {"type": "Polygon", "coordinates": [ring]}},
            ],
        }
        assert [pid for pid, _ in extract_polygons(data)] == ["roof-a", "Yard", "area_002"]

    def test_multipolygon_parts(self):
        ring = square_ring(*ORIGIN, 50.0)
        data = {"type": "MultiPolygon", "coordinates": [[ring], [ring]]}
        assert [pid for pid, _ in extract_polygons(data)] == ["part_0", "part_1"]

    def test_multipolygon_feature_parts_get_distinct_ids(self):
        ring = square_ring(*ORIGIN, 50.0)
        data = {
            "type": "FeatureCollection",
            "features": [
                {"type": "Feature", "id": "site", "geometry": {"type": "MultiPolygon", "coordinates": [[ring], [ring]]}},
            ],
        }
        assert [pid for pid, _ in extract_polygons(data)] == ["site_part_0", "site_part_1"]

    def test_null_properties(self):
        ring = square_ring(*ORIGIN, 50.0)
        data = {
            "type": "FeatureCollection",
            "features": [{"type": "Feature", "properties": None, "geometry": {"type": "Polygon", "coordinates": [ring]}}],
        }
        assert extract_polygons(data) == [("area_000", ring)]

    def test_unsupported_document(self):
        with pytest.raises(ValueError):
            extract_polygons({"type": "Point", "coordinates": [0, 0]})


class TestCommands:
    """Tests for the analyze and batch commands."""

    def test_analyze_with_local_buildings(self, tmp_path):
        polygon = _write(tmp_path / "area.geojson", {
            "type": "Feature", "geometry": {"type": "Polygon", "coordinates": [square_ring(*ORIGIN, 100.0)]},
        })
        tower = offset_point(ORIGIN[0], ORIGIN[1], 180.0, 40.0)
        buildings = _write(tmp_path / "buildings.geojson", {
            "type": "FeatureCollection", "features": [building_feature(tower, size_m=10.0, height="30")],
        })
        output = tmp_path / "result.geojson"

        code = main([
            "analyze", "--polygon", polygon, "--buildings", buildings,
            "--cell-size", "20", "--output", str(output),
        ])

        assert code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert len(data["features"]) == 25
        assert data["metadata"]["cellSizeMeters"] == 20
        assert data["metadata"]["buildingCount"] == 1

    def test_analyze_missing_file(self, tmp_path):
        assert main(["analyze", "--polygon", str(tmp_path / "nope.geojson")]) == 1

    def test_batch_writes_one_file_per_polygon(self, tmp_path):
        areas = _write(tmp_path / "areas.geojson", {
            "type": "FeatureCollection",
            "features": [
                {"type": "Feature", "id": "North Roof",
                 "geometry": {"type": "Polygon", "coordinates": [square_ring(*ORIGIN, 40.0)]}},
                {"type": "Feature", "id": "south",
                 "geometry": {"type": "Polygon", "coordinates": [square_ring(ORIGIN[0], ORIGIN[1] - 0.01, 40.0)]}},
            ],
        })
        out_dir = tmp_path / "results"

        assert main(["batch", "--input", areas, "--output", str(out_dir), "--cell-size", "20"]) == 0
        assert sorted(p.name for p in out_dir.iterdir()) == ["north_roof.geojson", "south.geojson"]

    def test_batch_keeps_every_part_of_a_multipolygon(self, tmp_path):
        west = square_ring(ORIGIN[0], ORIGIN[1], 40.0)
        east = square_ring(ORIGIN[0] + 0.01, ORIGIN[1], 40.0)
        areas = _write(tmp_path / "site.geojson", {
            "type": "FeatureCollection",
            "features": [{
                "type": "Feature", "id": "site", "properties": None,
                "geometry": {"type": "MultiPolygon", "coordinates": [[west], [east]]},
            }],
        })
        out_dir = tmp_path / "results"

        assert main(["batch", "--input", areas, "--output", str(out_dir), "--cell-size", "20"]) == 0
        assert sorted(p.name for p in out_dir.iterdir()) == ["site_part_0.geojson", "site_part_1.geojson"]

    def test_analyze_degenerate_polygon_writes_empty_result(self, tmp_path):
        polygon = _write(tmp_path / "line.geojson", {
            "type": "Polygon", "coordinates": [[[10.0, 45.0], [10.001, 45.0], [10.0, 45.0]]],
        })
        output = tmp_path / "empty.geojson"

        assert main(["analyze", "--polygon", polygon, "--output", str(output)]) == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["features"] == []
        assert data["metadata"]["status"] == "ok"

    def test_unreadable_feature_is_reported(self, tmp_path):
        polygon = _write(tmp_path / "bad.geojson", {"type": "FeatureCollection", "features": ["not a feature"]})
        assert main(["analyze", "--polygon", polygon]) == 1
