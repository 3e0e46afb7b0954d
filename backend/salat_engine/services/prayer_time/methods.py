# salat_engine/services/prayer_time/methods.py
# Registry of calculation conventions: twilight angles, minute rules and high latitude defaults.
import enum
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from salat_engine.exceptions import InvalidConfiguration


class HighLatitudeRule(enum.Enum):
    NONE = "none"
    ANGLE_BASED = "angle_based"
    ONE_SEVENTH = "one_seventh"
    MIDDLE_OF_THE_NIGHT = "middle_of_the_night"

    @classmethod
    def parse(cls, value: Union[str, "HighLatitudeRule"]) -> "HighLatitudeRule":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        for rule in cls:
            if rule.value == normalized or rule.name.lower() == normalized:
                return rule
        raise InvalidConfiguration(f"Unknown high latitude rule: {value}")


def _check_angle(label: str, angle: Optional[float]) -> None:
    if angle is None:
        return
    if not isinstance(angle, (int, float)) or math.isnan(angle) or not 0 < angle < 90:
        raise InvalidConfiguration(f"{label} angle must be between 0 and 90 degrees (exclusive), got {angle}")


def _check_minutes(label: str, minutes: Optional[float], allow_zero: bool) -> None:
    if minutes is None:
        return
    if not isinstance(minutes, (int, float)) or math.isnan(minutes):
        raise InvalidConfiguration(f"{label} minutes must be a number, got {minutes}")
    if minutes < 0 or (minutes == 0 and not allow_zero):
        raise InvalidConfiguration(f"{label} minutes must be positive, got {minutes}")


@dataclass(frozen=True)
class CalculationMethod:
    """
    A prayer time convention. Isha is either a depression angle or a fixed number
    of minutes after Maghrib, never both.
    """
    key: str
    name: str
    fajr_angle: float
    isha_angle: Optional[float] = None
    isha_minutes: Optional[float] = None
    maghrib_minutes: float = 0
    maghrib_angle: Optional[float] = None
    dhuhr_minutes: float = 0
    high_latitude_rule: HighLatitudeRule = HighLatitudeRule.MIDDLE_OF_THE_NIGHT

    def __post_init__(self):
        _check_angle("Fajr", self.fajr_angle)
        if self.fajr_angle is None:
            raise InvalidConfiguration("Fajr angle is required")
        if (self.isha_angle is None) == (self.isha_minutes is None):
            raise InvalidConfiguration("Exactly one of isha_angle or isha_minutes must be set")
        _check_angle("Isha", self.isha_angle)
        _check_minutes("Isha", self.isha_minutes, allow_zero=False)
        _check_angle("Maghrib", self.maghrib_angle)
        _check_minutes("Maghrib", self.maghrib_minutes, allow_zero=True)
        _check_minutes("Dhuhr", self.dhuhr_minutes, allow_zero=True)
        if not isinstance(self.high_latitude_rule, HighLatitudeRule):
            object.__setattr__(self, "high_latitude_rule", HighLatitudeRule.parse(self.high_latitude_rule))

    @property
    def uses_isha_interval(self) -> bool:
        return self.isha_minutes is not None

    @property
    def composite_key(self) -> str:
        """Stable identifier covering every parameter that changes the result."""
        if self.key != CUSTOM_KEY:
            return self.key
        isha = f"{self.isha_minutes}min" if self.uses_isha_interval else f"{self.isha_angle}"
        maghrib = f"{self.maghrib_angle}deg" if self.maghrib_angle is not None else f"{self.maghrib_minutes}min"
        return f"{CUSTOM_KEY}({self.fajr_angle},{isha},{maghrib},{self.dhuhr_minutes})"

    @classmethod
    def custom(cls, fajr_angle: float, isha_angle: Optional[float] = None, isha_minutes: Optional[float] = None,
               maghrib_minutes: float = 0, dhuhr_minutes: float = 0,
               high_latitude_rule: Union[str, HighLatitudeRule] = HighLatitudeRule.MIDDLE_OF_THE_NIGHT) -> "CalculationMethod":
        return cls(
            key=CUSTOM_KEY,
            name="Custom",
            fajr_angle=fajr_angle,
            isha_angle=isha_angle,
            isha_minutes=isha_minutes,
            maghrib_minutes=maghrib_minutes,
            dhuhr_minutes=dhuhr_minutes,
            high_latitude_rule=HighLatitudeRule.parse(high_latitude_rule),
        )


CUSTOM_KEY = "Custom"

METHODS: Dict[str, CalculationMethod] = {
    m.key: m for m in (
        CalculationMethod("MuslimWorldLeague", "Muslim World League", 18, isha_angle=17, dhuhr_minutes=1),
        CalculationMethod("Egyptian", "Egyptian General Authority of Survey", 19.5, isha_angle=17.5, dhuhr_minutes=1),
        CalculationMethod("Karachi", "University of Islamic Sciences, Karachi", 18, isha_angle=18, dhuhr_minutes=1),
        CalculationMethod("UmmAlQura", "Umm al-Qura University, Makkah", 18.5, isha_minutes=90),
        CalculationMethod("Dubai", "Dubai", 18.2, isha_angle=18.2, maghrib_minutes=3, dhuhr_minutes=3),
        CalculationMethod("MoonsightingCommittee", "Moonsighting Committee Worldwide", 18, isha_angle=18,
                          maghrib_minutes=3, dhuhr_minutes=5),
        CalculationMethod("ISNA", "Islamic Society of North America", 15, isha_angle=15, dhuhr_minutes=1),
        CalculationMethod("Kuwait", "Kuwait", 18, isha_angle=17.5),
        CalculationMethod("Qatar", "Qatar", 18, isha_minutes=90),
        CalculationMethod("Singapore", "Majlis Ugama Islam Singapura", 20, isha_angle=18, dhuhr_minutes=1),
        CalculationMethod("Tehran", "Institute of Geophysics, University of Tehran", 17.7, isha_angle=14,
                          maghrib_angle=4.5),
    )
}

# Keys used by other prayer time services and by older settings files.
METHOD_ALIASES = {
    "mwl": "MuslimWorldLeague",
    "muslim_world_league": "MuslimWorldLeague",
    "makkah": "UmmAlQura",
    "umm_al_qura": "UmmAlQura",
    "northamerica": "ISNA",
    "north_america": "ISNA",
    "moonsighting": "MoonsightingCommittee",
    "egypt": "Egyptian",
}


def get_method(method: Union[str, CalculationMethod]) -> CalculationMethod:
    """Resolves a method key (case-insensitive, aliases allowed) to its definition."""
    if isinstance(method, CalculationMethod):
        return method
    if not isinstance(method, str) or not method.strip():
        raise InvalidConfiguration(f"Unknown calculation method: {method!r}")

    lowered = method.strip().lower()
    for key, definition in METHODS.items():
        if key.lower() == lowered:
            return definition
    alias = METHOD_ALIASES.get(lowered.replace(" ", "_").replace("-", "_"))
    if alias:
        return METHODS[alias]
    raise InvalidConfiguration(f"Unknown calculation method: {method}")


def available_methods() -> List[CalculationMethod]:
    return list(METHODS.values())
