"""
On-disk cache of raw Overpass responses, keyed by bounding box
"""

import hashlib
import json
import os
import tempfile
import time
from typing import Any, Dict, Optional, Sequence

from loguru import logger


class OSMCache:
    """
    JSON files named after a hash of the requested bbox.

    Writes go through a temporary file and os.replace, so concurrent runs
    sharing a directory never read a half-written entry. With max_age_s set,
    older entries count as misses.
    """

    def __init__(self, cache_dir: Optional[str] = None, max_age_s: Optional[float] = None):
        self.cache_dir = cache_dir
        self.max_age_s = max_age_s

    @property
    def enabled(self) -> bool:
        return bool(self.cache_dir)

    def path_for(self, bbox: Sequence[float]) -> Optional[str]:
        if not self.enabled:
            return None
        key = ",".join(f"{v:.6f}" for v in bbox)
        digest = hashlib.md5(key.encode()).hexdigest()[:12]
        return os.path.join(self.cache_dir, f"osm_buildings_{digest}.json")

    def get(self, bbox: Sequence[float]) -> Optional[Dict[str, Any]]:
        """Cached response for bbox, or None on a miss"""
        path = self.path_for(bbox)
        if path is None or not os.path.exists(path):
            return None
        if self.max_age_s is not None and time.time() - os.path.getmtime(path) > self.max_age_s:
            logger.debug(f"Cache entry expired: {path}")
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable cache entry {path}: {e}")
            return None
        logger.info(f"Loaded buildings for bbox {list(bbox)} from cache")
        return data

    def put(self, bbox: Sequence[float], data: Dict[str, Any]) -> Optional[str]:
        """Store a response; failures are logged, not raised"""
        path = self.path_for(bbox)
        if path is None:
            return None
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.cache_dir, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.warning(f"Failed to write cache entry {path}: {e}")
            return None
        logger.debug(f"Cached Overpass response: {path}")
        return path
