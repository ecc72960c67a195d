"""
Last-published-version register

Each logical polygon gets monotonically increasing run versions. A run's
result is only published if no newer version was issued in the meantime,
so the newest edit always wins regardless of which run finishes last.
"""

import threading
from dataclasses import dataclass
from typing import Dict, Optional

from loguru import logger

from .models import AnalysisResult


@dataclass(frozen=True)
class PublishedResult:
    polygon_id: str
    version: int
    result: AnalysisResult


class ResultRegister:
    """Thread-safe version issuer and result slot per polygon"""

    def __init__(self):
        self._lock = threading.Lock()
        self._latest_issued: Dict[str, int] = {}
        self._published: Dict[str, PublishedResult] = {}

    def issue(self, polygon_id: str) -> int:
        """Issue the next version id for polygon_id"""
        with self._lock:
            version = self._latest_issued.get(polygon_id, 0) + 1
            self._latest_issued[polygon_id] = version
            return version

    def is_current(self, polygon_id: str, version: int) -> bool:
        with self._lock:
            return self._latest_issued.get(polygon_id, 0) == version

    def publish(self, polygon_id: str, version: int, result: AnalysisResult) -> bool:
        """
        Publish result if version is still the latest issued.

        Returns False (and keeps the previous result) for superseded runs.
        """
        with self._lock:
            if self._latest_issued.get(polygon_id, 0) != version:
                logger.debug(
                    f"Discarding stale result for {polygon_id}: version {version}, "
                    f"latest {self._latest_issued.get(polygon_id, 0)}"
                )
                return False
            self._published[polygon_id] = PublishedResult(polygon_id, version, result)
            return True

    def discard(self, polygon_id: str) -> None:
        """
        Drop the published result for a deleted polygon.

        A new version is issued so in-flight runs cannot publish afterwards.
        """
        with self._lock:
            self._latest_issued[polygon_id] = self._latest_issued.get(polygon_id, 0) + 1
            self._published.pop(polygon_id, None)

    def current(self, polygon_id: str) -> Optional[PublishedResult]:
        with self._lock:
            return self._published.get(polygon_id)
