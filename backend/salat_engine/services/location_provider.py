# salat_engine/services/location_provider.py
# The engine never touches device sensors; callers hand it a snapshot from one of these.
import datetime
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from salat_engine.exceptions import InvalidConfiguration
from .prayer_time.entities import Coordinate


@dataclass(frozen=True)
class LocationSnapshot:
    coordinate: Coordinate
    accuracy_m: Optional[float] = None
    timestamp: datetime.datetime = field(default_factory=lambda: datetime.datetime.now(datetime.timezone.utc))

    def age(self, now: Optional[datetime.datetime] = None) -> datetime.timedelta:
        now = now or datetime.datetime.now(datetime.timezone.utc)
        return now - self.timestamp


class BaseLocationProvider(ABC):
    """
    Abstract base class for a location source (GPS, IP lookup, saved city...).
    Permission handling and sensor polling live entirely in the implementation.
    """

    @abstractmethod
    def current_location(self) -> LocationSnapshot:
        """Returns the latest known position."""
        pass


class StaticLocationProvider(BaseLocationProvider):
    """A fixed position, e.g. a saved home location."""

    def __init__(self, latitude: float, longitude: float, accuracy_m: Optional[float] = None):
        self.coordinate = Coordinate(latitude, longitude)
        self.accuracy_m = accuracy_m

    def current_location(self) -> LocationSnapshot:
        return LocationSnapshot(self.coordinate, self.accuracy_m)


def validate_snapshot(snapshot: LocationSnapshot, max_age: Optional[datetime.timedelta] = None,
                      max_accuracy_m: Optional[float] = None,
                      now: Optional[datetime.datetime] = None) -> Coordinate:
    """Rejects snapshots that are too old or too imprecise to compute prayer times from."""
    if max_age is not None and snapshot.age(now) > max_age:
        raise InvalidConfiguration(f"Location snapshot is older than {max_age}")
    if max_accuracy_m is not None and snapshot.accuracy_m is not None and snapshot.accuracy_m > max_accuracy_m:
        raise InvalidConfiguration(
            f"Location accuracy {snapshot.accuracy_m} m is worse than the required {max_accuracy_m} m"
        )
    return snapshot.coordinate
