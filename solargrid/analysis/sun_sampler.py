"""
Representative sun positions using pvlib
"""

import math
from datetime import timedelta, timezone, tzinfo
from typing import List, Optional, Sequence, Tuple, Union

import pandas as pd
import pvlib
from loguru import logger

from .types import SunSample


class SunSampler:
    """
    Produce a fixed set of sun altitude/azimuth samples for a location.

    One sample per (date, hour) pair, date-major. Hours are local clock hours
    in the configured timezone, or in the standard-time offset implied by the
    longitude when no timezone is given.
    """

    def __init__(
        self,
        dates: Sequence[Tuple[int, int]] = ((6, 21), (12, 21)),
        hours: Sequence[int] = (9, 12, 15),
        year: int = 2024,
        timezone_name: Optional[str] = None
    ):
        self.dates = list(dates)
        self.hours = list(hours)
        self.year = year
        self.timezone_name = timezone_name

    @classmethod
    def from_config(cls, analysis_config) -> "SunSampler":
        return cls(
            dates=analysis_config.sample_dates,
            hours=analysis_config.sample_hours,
            year=analysis_config.sample_year,
            timezone_name=analysis_config.timezone,
        )

    def _timezone_for(self, lon: float) -> Union[str, tzinfo]:
        if self.timezone_name:
            return self.timezone_name
        offset_hours = int(round(lon / 15.0))
        return timezone(timedelta(hours=offset_hours))

    def sample_times(self, lon: float) -> pd.DatetimeIndex:
        tz = self._timezone_for(lon)
        stamps = [
            pd.Timestamp(year=self.year, month=month, day=day, hour=hour, tz=tz)
            for month, day in self.dates
            for hour in self.hours
        ]
        return pd.DatetimeIndex(stamps)

    def sample(self, lat: float, lon: float) -> List[SunSample]:
        """
        Compute sun positions at (lat, lon) for every configured date/hour.

        Returns altitude (true elevation) and azimuth (clockwise from north)
        in radians.
        """
        times = self.sample_times(lon)
        solar_pos = pvlib.solarposition.get_solarposition(times, lat, lon)

        samples = []
        for when, elevation, azimuth in zip(times, solar_pos["elevation"], solar_pos["azimuth"]):
            samples.append(SunSample(
                when=when.to_pydatetime(),
                altitude=math.radians(float(elevation)),
                azimuth=math.radians(float(azimuth)),
            ))

        above = sum(1 for s in samples if s.above_horizon)
        logger.info(f"Computed {len(samples)} sun samples at ({lat:.5f}, {lon:.5f}), {above} above horizon")
        return samples
