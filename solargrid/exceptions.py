"""
Exception types for the Solar Grid Analysis engine
"""


class SolarGridError(Exception):
    """Base class for engine errors"""


class FootprintFetchError(SolarGridError, RuntimeError):
    """Building footprints could not be obtained from a provider"""


class InvalidPolygonError(SolarGridError, ValueError):
    """Input ring cannot be used as an installation-area polygon"""
