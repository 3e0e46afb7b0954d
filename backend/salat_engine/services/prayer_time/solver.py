# salat_engine/services/prayer_time/solver.py
# Turns a date and a PrayerCalculationConfig into PrayerTimes. Stateless and deterministic.
import datetime
import logging
from typing import Dict, Optional

from salat_engine.exceptions import PolarDayError
from .astronomy import SUNRISE_SUNSET_ANGLE, asr_shadow_angle, fix_hour, hour_angle, julian_date, solar_position
from .entities import Prayer, PrayerCalculationConfig, PrayerTimes
from .madhab import shadow_multiplier
from .methods import CalculationMethod, HighLatitudeRule

logger = logging.getLogger(__name__)

# Each pass samples the sun at the instants found by the previous one.
ITERATIONS = 2

# Initial sample instants, in local mean hours.
DEFAULT_GUESSES = {
    "fajr": 5.0,
    "sunrise": 6.0,
    "dhuhr": 12.0,
    "asr": 13.0,
    "sunset": 18.0,
    "maghrib": 18.0,
    "isha": 18.0,
}

BEFORE_NOON = "ccw"
AFTER_NOON = "cw"


def _mid_day(jdate: float, time: float) -> float:
    _, eqt = solar_position(jdate + time / 24.0)
    return 12.0 - eqt


def _sun_angle_time(jdate: float, latitude: float, angle: float, time: float, direction: str) -> Optional[float]:
    decl, eqt = solar_position(jdate + time / 24.0)
    noon = 12.0 - eqt
    t = hour_angle(latitude, decl, angle)
    if t is None:
        return None
    return noon - t if direction == BEFORE_NOON else noon + t


def _asr_time(jdate: float, latitude: float, multiplier: int, time: float) -> Optional[float]:
    decl, _ = solar_position(jdate + time / 24.0)
    angle = asr_shadow_angle(latitude, decl, multiplier)
    return _sun_angle_time(jdate, latitude, angle, time, AFTER_NOON)


def _compute_pass(jdate: float, latitude: float, method: CalculationMethod, multiplier: int,
                  times: Dict[str, float]) -> Dict[str, Optional[float]]:
    raw = {
        "fajr": _sun_angle_time(jdate, latitude, method.fajr_angle, times["fajr"], BEFORE_NOON),
        "sunrise": _sun_angle_time(jdate, latitude, SUNRISE_SUNSET_ANGLE, times["sunrise"], BEFORE_NOON),
        "dhuhr": _mid_day(jdate, times["dhuhr"]),
        "asr": _asr_time(jdate, latitude, multiplier, times["asr"]),
        "sunset": _sun_angle_time(jdate, latitude, SUNRISE_SUNSET_ANGLE, times["sunset"], AFTER_NOON),
        "maghrib": None,
        "isha": None,
    }
    if method.maghrib_angle is not None:
        raw["maghrib"] = _sun_angle_time(jdate, latitude, method.maghrib_angle, times["maghrib"], AFTER_NOON)
    if not method.uses_isha_interval:
        raw["isha"] = _sun_angle_time(jdate, latitude, method.isha_angle, times["isha"], AFTER_NOON)
    return raw


def _night_portion(rule: HighLatitudeRule, angle: float, night: float) -> float:
    if rule is HighLatitudeRule.ANGLE_BASED:
        return angle / 60.0 * night
    if rule is HighLatitudeRule.ONE_SEVENTH:
        return night / 7.0
    return night / 2.0


def _adjust_high_latitude(time: Optional[float], base: float, angle: float, night: float,
                          rule: HighLatitudeRule, direction: str) -> float:
    """Clamps a twilight time to within the rule's share of the night from `base`."""
    portion = _night_portion(rule, angle, night)
    distance = None
    if time is not None:
        distance = base - time if direction == BEFORE_NOON else time - base
    if distance is None or distance > portion:
        return base - portion if direction == BEFORE_NOON else base + portion
    return time


def _hours_to_datetime(day: datetime.date, utc_hours: float, tzinfo: datetime.tzinfo) -> datetime.datetime:
    midnight_utc = datetime.datetime(day.year, day.month, day.day, tzinfo=datetime.timezone.utc)
    return (midnight_utc + datetime.timedelta(seconds=round(utc_hours * 3600))).astimezone(tzinfo)


def solve(date: datetime.date, config: PrayerCalculationConfig) -> PrayerTimes:
    """
    Computes the six time points of `date` for the location in `config`.

    Raises:
        PolarDayError: when the sun never reaches a required angle and the
            configured high latitude rule cannot stand in for it.
    """
    if isinstance(date, datetime.datetime):
        date = date.date()

    method = config.method
    latitude = config.coordinate.latitude
    longitude = config.coordinate.longitude
    multiplier = shadow_multiplier(config.madhab)
    rule = config.effective_high_latitude_rule

    jdate = julian_date(date) - longitude / (15.0 * 24.0)

    times = dict(DEFAULT_GUESSES)
    raw = {}
    for _ in range(ITERATIONS):
        raw = _compute_pass(jdate, latitude, method, multiplier, times)
        times = {key: (value if value is not None else DEFAULT_GUESSES[key]) for key, value in raw.items()}

    def polar(prayer: Prayer, reason: str) -> PolarDayError:
        return PolarDayError(
            f"Prayer times cannot be determined for {date.isoformat()} at "
            f"({latitude}, {longitude}): {reason}",
            date=date, coordinate=config.coordinate, prayer=prayer,
        )

    sunrise, sunset = raw["sunrise"], raw["sunset"]
    if sunrise is None:
        raise polar(Prayer.SUNRISE, "the sun does not rise or set on this day")
    if sunset is None:
        raise polar(Prayer.MAGHRIB, "the sun does not rise or set on this day")
    if raw["asr"] is None:
        raise polar(Prayer.ASR, "the sun never reaches the Asr shadow angle")

    fajr = raw["fajr"]
    dhuhr = raw["dhuhr"] + method.dhuhr_minutes / 60.0
    asr = raw["asr"]
    maghrib = sunset + method.maghrib_minutes / 60.0
    isha = raw["isha"]

    night = fix_hour(sunrise - sunset)
    if rule is HighLatitudeRule.NONE:
        if fajr is None:
            raise polar(Prayer.FAJR, f"the sun never reaches {method.fajr_angle} degrees below the horizon")
        if not method.uses_isha_interval and isha is None:
            raise polar(Prayer.ISHA, f"the sun never reaches {method.isha_angle} degrees below the horizon")
    else:
        if fajr is None or (not method.uses_isha_interval and isha is None):
            logger.debug(f"Applying high latitude rule '{rule.value}' for {date} at ({latitude}, {longitude}).")
        fajr = _adjust_high_latitude(fajr, sunrise, method.fajr_angle, night, rule, BEFORE_NOON)
        if not method.uses_isha_interval:
            isha = _adjust_high_latitude(isha, sunset, method.isha_angle, night, rule, AFTER_NOON)

    # An angle based Maghrib only counts between sunset and Isha; otherwise sunset plus minutes.
    angle_maghrib = raw["maghrib"]
    if angle_maghrib is not None and angle_maghrib > sunset and (method.uses_isha_interval or angle_maghrib < isha):
        maghrib = angle_maghrib
    elif method.maghrib_angle is not None:
        logger.debug(f"Maghrib angle {method.maghrib_angle} unusable for {date}, falling back to sunset.")

    if method.uses_isha_interval:
        isha = maghrib + method.isha_minutes / 60.0

    tzinfo = config.tzinfo
    offset = longitude / 15.0
    local = {
        "fajr": fajr,
        "sunrise": sunrise,
        "dhuhr": dhuhr,
        "asr": asr,
        "maghrib": maghrib,
        "isha": isha,
    }
    result = PrayerTimes(
        date=date,
        method_key=method.composite_key,
        **{key: _hours_to_datetime(date, value - offset, tzinfo) for key, value in local.items()},
    )
    misplaced = result.first_out_of_order()
    if misplaced is not None:
        raise polar(misplaced, f"{misplaced.display_name} is out of prayer order")
    return result
