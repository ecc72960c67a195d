"""
Overpass API client

Handles communication with Overpass API including:
- Rate limiting
- Retry logic
- Error handling
"""

import time
from typing import Any, Dict, Optional

import requests
from loguru import logger

from ...config import APIConfig, get_config
from ...exceptions import FootprintFetchError


class OverpassAPIClient:
    """Client for interacting with Overpass API"""

    def __init__(self, api_config: Optional[APIConfig] = None, session: Optional[requests.Session] = None):
        self.api = api_config or get_config().api
        self.session = session or requests.Session()
        self._last_request_time = 0.0

    def _rate_limit(self):
        """Ensure we don't exceed rate limits"""
        elapsed = time.time() - self._last_request_time
        if elapsed < self.api.min_request_interval:
            time.sleep(self.api.min_request_interval - elapsed)
        self._last_request_time = time.time()

    def query(self, query: str) -> Dict[str, Any]:
        """
        Execute Overpass API query with retry logic

        Args:
            query: Overpass QL query string

        Returns:
            JSON response from Overpass API

        Raises:
            FootprintFetchError: If query fails after all retries
        """
        self._rate_limit()

        headers = {
            "User-Agent": self.api.user_agent,
            "Content-Type": "application/x-www-form-urlencoded"
        }
        max_retries = self.api.max_retries

        for attempt in range(max_retries):
            last_attempt = attempt == max_retries - 1
            wait_time = self.api.retry_delay * (attempt + 1)
            try:
                response = self.session.post(
                    self.api.overpass_url,
                    data={"data": query},
                    headers=headers,
                    timeout=self.api.request_timeout
                )
                response.raise_for_status()
                return response.json()
            except requests.exceptions.Timeout as e:
                if last_attempt:
                    logger.error(f"Overpass timeout after {max_retries} attempts")
                    raise FootprintFetchError(f"Overpass API timeout after {max_retries} attempts") from e
                logger.warning(f"Overpass timeout (attempt {attempt + 1}/{max_retries}). Retrying in {wait_time}s...")
                time.sleep(wait_time)
            except requests.exceptions.HTTPError as e:
                status = e.response.status_code if e.response is not None else None
                if status in (429, 504) and not last_attempt:
                    logger.warning(f"Overpass {status} (attempt {attempt + 1}/{max_retries}). Retrying in {wait_time}s...")
                    time.sleep(wait_time)
                else:
                    logger.error(f"Overpass HTTP {status} after {attempt + 1} attempts")
                    raise FootprintFetchError(f"Overpass API HTTP error {status}") from e
            except ValueError as e:
                # Bad JSON and malformed URLs are not worth retrying
                raise FootprintFetchError(f"Overpass API returned an unusable response: {e}") from e
            except requests.exceptions.RequestException as e:
                if last_attempt:
                    logger.error(f"Overpass request failed after {max_retries} attempts: {e}")
                    raise FootprintFetchError(f"Overpass API request failed after {max_retries} attempts: {e}") from e
                logger.warning(f"Overpass request failed (attempt {attempt + 1}): {e}")
                time.sleep(wait_time)

        raise FootprintFetchError("Overpass API query was not attempted")
