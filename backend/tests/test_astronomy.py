import datetime
import math

import pytest

from salat_engine.services.prayer_time import astronomy


def test_julian_date_epochs():
    assert astronomy.julian_date(datetime.date(2000, 1, 1)) == 2451544.5
    assert astronomy.julian_date(datetime.date(2025, 3, 21)) == 2460755.5
    # January and February are counted as months 13 and 14 of the previous year.
    assert astronomy.julian_date(datetime.date(2024, 2, 29)) + 1 == astronomy.julian_date(datetime.date(2024, 3, 1))


@pytest.mark.parametrize("day, expected", [
    (datetime.date(2024, 6, 20), 23.44),
    (datetime.date(2024, 12, 21), -23.44),
    (datetime.date(2025, 3, 20), 0.0),
])
def test_solar_declination_at_solstices_and_equinox(day, expected):
    jd = astronomy.julian_date(day) + 0.5
    assert astronomy.solar_declination(jd) == pytest.approx(expected, abs=0.3)


@pytest.mark.parametrize("day, expected_minutes", [
    (datetime.date(2024, 11, 3), 16.4),
    (datetime.date(2024, 2, 11), -14.2),
    (datetime.date(2024, 7, 26), -6.5),
])
def test_equation_of_time_extremes(day, expected_minutes):
    jd = astronomy.julian_date(day) + 0.5
    assert astronomy.equation_of_time_minutes(jd) == pytest.approx(expected_minutes, abs=0.5)


def test_equation_of_time_stays_small_across_the_year():
    start = astronomy.julian_date(datetime.date(2025, 1, 1))
    for offset in range(0, 366, 5):
        assert abs(astronomy.equation_of_time_minutes(start + offset)) < 17.0


def test_hour_angle_at_equator_on_equinox_is_six_hours():
    assert astronomy.hour_angle(0.0, 0.0, 0.0) == pytest.approx(6.0)


def test_hour_angle_grows_with_depression():
    sunrise = astronomy.hour_angle(21.4, 0.4, astronomy.SUNRISE_SUNSET_ANGLE)
    twilight = astronomy.hour_angle(21.4, 0.4, 18.0)
    assert twilight > sunrise > 6.0


@pytest.mark.parametrize("latitude, declination", [
    (80.0, 23.0),   # midnight sun
    (80.0, -23.0),  # polar night
    (90.0, 10.0),   # pole
])
def test_hour_angle_returns_none_outside_the_domain(latitude, declination):
    assert astronomy.hour_angle(latitude, declination, astronomy.SUNRISE_SUNSET_ANGLE) is None


def test_hour_angle_for_unreachable_twilight_is_none():
    # At 60N in late June the sun only dips about 6.5 degrees.
    assert astronomy.hour_angle(60.0, 23.4, 18.0) is None
    assert astronomy.hour_angle(60.0, 23.4, 0.833) is not None


def test_asr_shadow_angle():
    assert astronomy.asr_shadow_angle(10.0, 10.0, 1) == pytest.approx(-45.0)
    assert astronomy.asr_shadow_angle(10.0, 10.0, 2) == pytest.approx(-math.degrees(math.atan(0.5)))
    # A longer shadow means a lower sun.
    assert astronomy.asr_shadow_angle(40.0, 5.0, 2) > astronomy.asr_shadow_angle(40.0, 5.0, 1)


def test_angle_helpers():
    assert astronomy.fix_angle(-30.0) == 330.0
    assert astronomy.fix_angle(725.0) == 5.0
    assert astronomy.fix_hour(-1.5) == 22.5
    assert astronomy.fix_hour(25.0) == 1.0
    assert astronomy.dsin(30.0) == pytest.approx(0.5)
    assert astronomy.darccos(0.5) == pytest.approx(60.0)
