"""Tests for shadow evaluation and score aggregation."""

import math

import pytest

from solargrid.analysis import (
    Classification, ScoreAggregator, ShadowEvaluator, SpatialIndex, classify, footprints_from_features
)
from solargrid.analysis.types import GridCell
from shapely.geometry import box

from conftest import ORIGIN, building_feature, make_samples, offset_point


def _evaluator(*features, radius=200.0):
    return ShadowEvaluator(SpatialIndex(footprints_from_features(features)), search_radius_m=radius)


def _building_at(distance_m, height, azimuth=0.0, **extra):
    center = offset_point(ORIGIN[0], ORIGIN[1], azimuth, distance_m)
    return building_feature(center, size_m=2.0, height=str(height), **extra)


class TestShadowEvaluator:
    """Blocked iff altitude <= 0 or (d < radius and h > tan(alt) * d)."""

    def test_sun_below_horizon_is_blocked_without_buildings(self):
        evaluator = _evaluator()
        for altitude in (0.0, -3.0, -45.0):
            assert evaluator.is_blocked(ORIGIN, make_samples([altitude])[0]) is True

    def test_open_sky_is_not_blocked(self):
        assert _evaluator().is_blocked(ORIGIN, make_samples([10.0])[0]) is False

    def test_tall_building_at_45_degrees_blocks(self):
        # 30 m building 20 m away: required height tan(45) x 20 = 20 m
        evaluator = _evaluator(_building_at(20.0, 30))
        assert evaluator.is_blocked(ORIGIN, make_samples([45.0])[0]) is True

    def test_short_building_at_45_degrees_does_not_block(self):
        evaluator = _evaluator(_building_at(20.0, 19))
        assert evaluator.is_blocked(ORIGIN, make_samples([45.0])[0]) is False

    @pytest.mark.parametrize("azimuth", [0.0, 90.0, 180.0, 270.0, 45.0])
    def test_threshold_holds_in_every_direction(self, azimuth):
        distance = 120.0
        altitude = 30.0
        required = math.tan(math.radians(altitude)) * distance  # ~69.3 m
        sample = make_samples([altitude])[0]

        assert _evaluator(_building_at(distance, required + 1, azimuth)).is_blocked(ORIGIN, sample) is True
        assert _evaluator(_building_at(distance, required - 1, azimuth)).is_blocked(ORIGIN, sample) is False

    def test_building_beyond_search_radius_is_ignored(self):
        evaluator = _evaluator(_building_at(250.0, 1000))
        assert evaluator.is_blocked(ORIGIN, make_samples([5.0])[0]) is False

    def test_building_just_inside_radius_is_considered(self):
        evaluator = _evaluator(_building_at(190.0, 500, azimuth=90.0))
        assert evaluator.is_blocked(ORIGIN, make_samples([5.0])[0]) is True

    def test_any_blocking_candidate_is_enough(self):
        evaluator = _evaluator(
            _building_at(50.0, 3, id="low"),
            _building_at(60.0, 200, azimuth=180.0, id="tower"),
        )
        sample = make_samples([30.0])[0]
        assert evaluator.is_blocked(ORIGIN, sample) is True
        assert evaluator.blocking_building(ORIGIN, sample).id == "tower"

    def test_levels_height_is_used(self):
        center = offset_point(ORIGIN[0], ORIGIN[1], 0.0, 10.0)
        feature = building_feature(center, size_m=2.0, **{"building:levels": "5"})  # 15 m
        sample = make_samples([45.0])[0]
        assert _evaluator(feature).is_blocked(ORIGIN, sample) is True


class _StubEvaluator:
    """Blocks the samples whose index is in blocked."""

    def __init__(self, samples, blocked):
        self._blocked = {id(samples[i]) for i in blocked}

    def is_blocked(self, centroid, sample):
        return id(sample) in self._blocked


class TestClassify:
    """Half-open threshold classification."""

    @pytest.mark.parametrize("score, expected", [
        (0.0, Classification.LOW),
        (0.2499, Classification.LOW),
        (0.25, Classification.MEDIUM),
        (0.5999, Classification.MEDIUM),
        (0.60, Classification.HIGH),
        (1.0, Classification.HIGH),
    ])
    def test_boundaries(self, score, expected):
        assert classify(score) is expected

    def test_styles(self):
        assert (Classification.LOW.color, Classification.LOW.label) == ("#e63946", "No potential")
        assert (Classification.MEDIUM.color, Classification.MEDIUM.label) == ("#f4d35e", "Medium potential")
        assert (Classification.HIGH.color, Classification.HIGH.label) == ("#2a9d8f", "High potential")


class TestScoreAggregator:
    """Tests for per-cell aggregation."""

    cell = GridCell(id="r0c0", geometry=box(10.0, 45.0, 10.0001, 45.0001))

    def test_fraction_and_score(self):
        samples = make_samples([10, 20, 30, 40, 50, 60])
        aggregator = ScoreAggregator(_StubEvaluator(samples, [0, 5]), samples)
        result = aggregator.aggregate(self.cell)

        assert result.blocked_samples == 2
        assert result.shading_fraction == pytest.approx(2 / 6)
        assert result.score == pytest.approx(4 / 6)
        assert result.classification is Classification.HIGH

    def test_fully_blocked_cell(self):
        samples = make_samples([10, 20, 30])
        result = ScoreAggregator(_StubEvaluator(samples, [0, 1, 2]), samples).aggregate(self.cell)
        assert (result.shading_fraction, result.score) == (1.0, 0.0)
        assert result.classification is Classification.LOW

    def test_multipliers_scale_score(self):
        samples = make_samples([10, 20])
        aggregator = ScoreAggregator(_StubEvaluator(samples, []), samples, usable_fraction=0.5)
        result = aggregator.aggregate(self.cell)
        assert result.score == 0.5
        assert result.classification is Classification.MEDIUM

    def test_score_is_clamped(self):
        samples = make_samples([10])
        aggregator = ScoreAggregator(_StubEvaluator(samples, []), samples, irradiance_factor=1.5)
        assert aggregator.aggregate(self.cell).score == 1.0

    def test_no_samples_means_unshaded(self):
        result = ScoreAggregator(_StubEvaluator([], []), []).aggregate(self.cell)
        assert (result.shading_fraction, result.score) == (0.0, 1.0)
