# salat_engine/exceptions.py


class CalculationError(Exception):
    """Base class for every error the prayer time engine surfaces to callers."""


class InvalidConfiguration(CalculationError, ValueError):
    """
    Raised when a coordinate, method, madhab or timezone is malformed.
    Detected while the configuration is being built, never inside the solver.
    """


class PolarDayError(CalculationError):
    """
    No valid sun-angle solution exists for the date and location, even after
    applying the high latitude rule. The caller decides how to present it.
    """

    def __init__(self, message, date=None, coordinate=None, prayer=None):
        super().__init__(message)
        self.date = date
        self.coordinate = coordinate
        self.prayer = prayer


class CacheUnavailable(Exception):
    """Internal to the cache layer. Always downgraded to a cache miss."""
