"""
Per-cell shading fraction, score and classification
"""

from typing import Sequence

from .shadow_evaluator import ShadowEvaluator
from .types import CellAnalysis, Classification, GridCell, SunSample


def classify(score: float, low_threshold: float = 0.25, high_threshold: float = 0.60) -> Classification:
    """Half-open thresholds: [0, low) Low, [low, high) Medium, [high, 1] High"""
    if score < low_threshold:
        return Classification.LOW
    if score < high_threshold:
        return Classification.MEDIUM
    return Classification.HIGH


class ScoreAggregator:
    """Combine per-sample occlusion results into a cell score"""

    def __init__(
        self,
        evaluator: ShadowEvaluator,
        samples: Sequence[SunSample],
        usable_fraction: float = 1.0,
        irradiance_factor: float = 1.0,
        low_threshold: float = 0.25,
        high_threshold: float = 0.60
    ):
        self.evaluator = evaluator
        self.samples = list(samples)
        self.usable_fraction = usable_fraction
        self.irradiance_factor = irradiance_factor
        self.low_threshold = low_threshold
        self.high_threshold = high_threshold

    def aggregate(self, cell: GridCell) -> CellAnalysis:
        centroid = cell.centroid
        blocked = sum(1 for s in self.samples if self.evaluator.is_blocked(centroid, s))

        shading_fraction = blocked / len(self.samples) if self.samples else 0.0
        score = (1.0 - shading_fraction) * self.usable_fraction * self.irradiance_factor
        score = min(1.0, max(0.0, score))

        return CellAnalysis(
            cell_id=cell.id,
            score=score,
            shading_fraction=shading_fraction,
            classification=classify(score, self.low_threshold, self.high_threshold),
            geometry=cell.geometry,
            blocked_samples=blocked,
        )
