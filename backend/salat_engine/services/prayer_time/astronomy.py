# salat_engine/services/prayer_time/astronomy.py
# Pure solar-position routines. Every angle is in degrees, every clock value in hours.
import math
import datetime
from typing import Optional, Tuple

J2000 = 2451545.0

# Sunrise/sunset depression: atmospheric refraction plus the solar disk radius.
SUNRISE_SUNSET_ANGLE = 0.833


def dsin(d: float) -> float:
    return math.sin(math.radians(d))


def dcos(d: float) -> float:
    return math.cos(math.radians(d))


def dtan(d: float) -> float:
    return math.tan(math.radians(d))


def darcsin(x: float) -> float:
    return math.degrees(math.asin(x))


def darccos(x: float) -> float:
    return math.degrees(math.acos(x))


def darctan(x: float) -> float:
    return math.degrees(math.atan(x))


def darccot(x: float) -> float:
    return math.degrees(math.atan(1.0 / x))


def darctan2(y: float, x: float) -> float:
    return math.degrees(math.atan2(y, x))


def fix_angle(a: float) -> float:
    return a - 360.0 * math.floor(a / 360.0)


def fix_hour(h: float) -> float:
    return h - 24.0 * math.floor(h / 24.0)


def julian_date(date_obj: datetime.date) -> float:
    """
    Converts a proleptic Gregorian calendar date to the Julian day number at 0h UT.
    e.g. 2000-01-01 -> 2451544.5
    """
    year, month, day = date_obj.year, date_obj.month, date_obj.day
    if month <= 2:
        year -= 1
        month += 12
    a = math.floor(year / 100)
    b = 2 - a + math.floor(a / 4)
    return math.floor(365.25 * (year + 4716)) + math.floor(30.6001 * (month + 1)) + day + b - 1524.5


def solar_position(jd: float) -> Tuple[float, float]:
    """
    Low precision solar coordinates for the given Julian date.

    Returns:
        tuple: (declination in degrees, equation of time in hours)
    """
    d = jd - J2000
    g = fix_angle(357.529 + 0.98560028 * d)
    q = fix_angle(280.459 + 0.98564736 * d)
    ecliptic_longitude = fix_angle(q + 1.915 * dsin(g) + 0.020 * dsin(2 * g))
    obliquity = 23.439 - 0.00000036 * d

    right_ascension = fix_hour(darctan2(dcos(obliquity) * dsin(ecliptic_longitude), dcos(ecliptic_longitude)) / 15.0)
    declination = darcsin(dsin(obliquity) * dsin(ecliptic_longitude))

    # q/15 and the right ascension can sit on opposite sides of the 0h/24h seam.
    equation_of_time = q / 15.0 - right_ascension
    equation_of_time = fix_hour(equation_of_time + 12.0) - 12.0
    return declination, equation_of_time


def solar_declination(jd: float) -> float:
    return solar_position(jd)[0]


def equation_of_time_minutes(jd: float) -> float:
    return solar_position(jd)[1] * 60.0


def hour_angle(latitude: float, declination: float, depression_angle: float) -> Optional[float]:
    """
    Hours between solar noon and the instant the sun sits `depression_angle`
    degrees below the horizon (negative angles are above the horizon).

    Returns None when the sun never reaches that altitude on this day, e.g. no
    sunset during polar summer.
    """
    numerator = -dsin(depression_angle) - dsin(latitude) * dsin(declination)
    denominator = dcos(latitude) * dcos(declination)
    if denominator == 0:
        return None
    cos_h = numerator / denominator
    if cos_h < -1.0 or cos_h > 1.0 or math.isnan(cos_h):
        return None
    return darccos(cos_h) / 15.0


def asr_shadow_angle(latitude: float, declination: float, shadow_multiplier: float) -> float:
    """
    Depression angle at which an object's shadow equals `shadow_multiplier` times
    its height plus its shadow at noon. Negative, as Asr happens with the sun up.
    """
    return -darccot(shadow_multiplier + dtan(abs(latitude - declination)))
