# salat_engine/services/prayer_time/entities.py
# Value types passed into and returned from the engine. All of them are immutable.
import datetime
import enum
import math
import zoneinfo
from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, Optional, Tuple, Union

from salat_engine.exceptions import InvalidConfiguration
from .madhab import Madhab, parse_madhab
from .methods import CalculationMethod, HighLatitudeRule, get_method


class Prayer(enum.Enum):
    FAJR = "fajr"
    SUNRISE = "sunrise"
    DHUHR = "dhuhr"
    ASR = "asr"
    MAGHRIB = "maghrib"
    ISHA = "isha"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def is_obligatory(self) -> bool:
        return self is not Prayer.SUNRISE


PRAYER_ORDER = (Prayer.FAJR, Prayer.SUNRISE, Prayer.DHUHR, Prayer.ASR, Prayer.MAGHRIB, Prayer.ISHA)


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    def __post_init__(self):
        for label, value, limit in (("Latitude", self.latitude, 90), ("Longitude", self.longitude, 180)):
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidConfiguration(f"{label} must be a finite number, got {value!r}")
            if not -limit <= value <= limit:
                raise InvalidConfiguration(f"{label} must be within [-{limit}, {limit}], got {value}")
        object.__setattr__(self, "latitude", float(self.latitude))
        object.__setattr__(self, "longitude", float(self.longitude))

    def rounded(self, precision: int = 4) -> Tuple[float, float]:
        return round(self.latitude, precision), round(self.longitude, precision)


def load_timezone(identifier: str) -> zoneinfo.ZoneInfo:
    if not isinstance(identifier, str) or not identifier.strip():
        raise InvalidConfiguration(f"Timezone identifier is required, got {identifier!r}")
    try:
        return zoneinfo.ZoneInfo(identifier)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidConfiguration(f"Unknown timezone identifier: {identifier}") from e


@dataclass(frozen=True)
class PrayerCalculationConfig:
    """
    Everything that determines the prayer times of a given date. Two equal configs
    always produce identical results, which is what makes caching safe.

    `method` and `madhab` accept either the typed value or its name, e.g.
    PrayerCalculationConfig("MWL", "hanafi", Coordinate(51.5, -0.12), "Europe/London").
    """
    method: CalculationMethod
    madhab: Madhab
    coordinate: Coordinate
    timezone: str
    high_latitude_rule: Optional[HighLatitudeRule] = None

    def __post_init__(self):
        object.__setattr__(self, "method", get_method(self.method))
        object.__setattr__(self, "madhab", parse_madhab(self.madhab))
        if not isinstance(self.coordinate, Coordinate):
            raise InvalidConfiguration(f"coordinate must be a Coordinate, got {type(self.coordinate).__name__}")
        load_timezone(self.timezone)
        if self.high_latitude_rule is not None:
            object.__setattr__(self, "high_latitude_rule", HighLatitudeRule.parse(self.high_latitude_rule))

    @property
    def tzinfo(self) -> zoneinfo.ZoneInfo:
        return load_timezone(self.timezone)

    @property
    def effective_high_latitude_rule(self) -> HighLatitudeRule:
        return self.high_latitude_rule or self.method.high_latitude_rule


@dataclass(frozen=True)
class PrayerTimes:
    """The six time points of one day, as timezone-aware datetimes."""
    date: datetime.date
    fajr: datetime.datetime
    sunrise: datetime.datetime
    dhuhr: datetime.datetime
    asr: datetime.datetime
    maghrib: datetime.datetime
    isha: datetime.datetime
    method_key: str = field(default="")

    def time_for(self, prayer: Union[Prayer, str]) -> datetime.datetime:
        prayer = prayer if isinstance(prayer, Prayer) else Prayer(str(prayer).lower())
        return getattr(self, prayer.value)

    def items(self) -> Iterator[Tuple[Prayer, datetime.datetime]]:
        for prayer in PRAYER_ORDER:
            yield prayer, getattr(self, prayer.value)

    def as_dict(self) -> Dict[str, datetime.datetime]:
        return {prayer.value: time for prayer, time in self.items()}

    def first_out_of_order(self) -> Optional[Prayer]:
        """The first time point not strictly after the one before it, if any."""
        entries = list(self.items())
        for (_, earlier), (prayer, later) in zip(entries, entries[1:]):
            if not earlier < later:
                return prayer
        return None

    def is_ordered(self) -> bool:
        return self.first_out_of_order() is None

    def in_timezone(self, tz: Union[str, datetime.tzinfo]) -> "PrayerTimes":
        tzinfo = load_timezone(tz) if isinstance(tz, str) else tz
        return replace(self, **{prayer.value: time.astimezone(tzinfo) for prayer, time in self.items()})
