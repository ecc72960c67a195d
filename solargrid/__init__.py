"""
Solar Grid Analysis

Grid-based solar potential screening for installation-area polygons.
"""

from .pipeline import AnalysisPipeline
from .models import AnalysisResult
from .register import ResultRegister

__version__ = "1.0.0"

__all__ = [
    "AnalysisPipeline",
    "AnalysisResult",
    "ResultRegister",
]
