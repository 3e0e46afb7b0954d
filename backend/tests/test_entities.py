import datetime

import pytest

from salat_engine.exceptions import InvalidConfiguration
from salat_engine.services.prayer_time.entities import (
    Coordinate, Prayer, PrayerCalculationConfig, PrayerTimes
)
from salat_engine.services.prayer_time.madhab import Madhab
from salat_engine.services.prayer_time.methods import HighLatitudeRule, get_method


@pytest.mark.parametrize("latitude, longitude", [
    (90.5, 0), (-91, 0), (0, 180.01), (0, -181), (float("nan"), 0), (0, float("inf")), ("21.4", 39.8), (True, 0),
])
def test_coordinate_rejects_out_of_range_values(latitude, longitude):
    with pytest.raises(InvalidConfiguration):
        Coordinate(latitude, longitude)


def test_coordinate_accepts_the_boundaries():
    assert Coordinate(90, 180).latitude == 90.0
    assert Coordinate(-90, -180).longitude == -180.0


def test_coordinate_is_immutable():
    coordinate = Coordinate(21.4225, 39.8262)
    with pytest.raises(AttributeError):
        coordinate.latitude = 0


def test_config_normalizes_method_and_madhab_names():
    config = PrayerCalculationConfig('mwl', 'Hanafi', Coordinate(0, 0), 'UTC')
    assert config.method is get_method('MuslimWorldLeague')
    assert config.madhab is Madhab.HANAFI
    assert config == PrayerCalculationConfig(get_method('MuslimWorldLeague'), Madhab.HANAFI, Coordinate(0, 0), 'UTC')


@pytest.mark.parametrize("timezone", ["Mars/Olympus_Mons", "", None, "../etc/passwd"])
def test_config_rejects_unknown_timezones(timezone):
    with pytest.raises(InvalidConfiguration):
        PrayerCalculationConfig('MuslimWorldLeague', 'shafi', Coordinate(0, 0), timezone)


def test_config_rejects_plain_tuples_as_coordinates():
    with pytest.raises(InvalidConfiguration):
        PrayerCalculationConfig('MuslimWorldLeague', 'shafi', (21.4, 39.8), 'UTC')


def test_config_high_latitude_override():
    config = PrayerCalculationConfig('ISNA', 'shafi', Coordinate(60, 10), 'Europe/Oslo', 'one_seventh')
    assert config.effective_high_latitude_rule is HighLatitudeRule.ONE_SEVENTH
    default = PrayerCalculationConfig('ISNA', 'shafi', Coordinate(60, 10), 'Europe/Oslo')
    assert default.effective_high_latitude_rule is HighLatitudeRule.MIDDLE_OF_THE_NIGHT


def _times(hours):
    tz = datetime.timezone.utc
    day = datetime.date(2025, 1, 1)
    return PrayerTimes(day, *[datetime.datetime(2025, 1, 1, h, tzinfo=tz) for h in hours], method_key="Test")


def test_prayer_times_ordering_check():
    assert _times([5, 6, 12, 15, 18, 19]).is_ordered()
    assert not _times([5, 6, 12, 12, 18, 19]).is_ordered()
    assert not _times([7, 6, 12, 15, 18, 19]).is_ordered()


def test_prayer_times_accessors():
    times = _times([5, 6, 12, 15, 18, 19])
    assert [prayer for prayer, _ in times.items()] == list(Prayer)
    assert times.time_for(Prayer.ASR).hour == 15
    assert times.time_for("Maghrib").hour == 18
    assert list(times.as_dict()) == ["fajr", "sunrise", "dhuhr", "asr", "maghrib", "isha"]
    assert not Prayer.SUNRISE.is_obligatory
    assert Prayer.ISHA.display_name == "Isha"


def test_prayer_times_in_timezone_keeps_the_instants():
    times = _times([5, 6, 12, 15, 18, 19])
    riyadh = times.in_timezone("Asia/Riyadh")
    assert riyadh == times
    assert riyadh.fajr.hour == 8
    assert riyadh.fajr.utcoffset() == datetime.timedelta(hours=3)


def test_first_out_of_order_names_the_offending_prayer():
    assert _times([5, 6, 12, 15, 18, 19]).first_out_of_order() is None
    assert _times([5, 6, 12, 12, 18, 19]).first_out_of_order() is Prayer.ASR
    assert _times([7, 6, 12, 15, 18, 19]).first_out_of_order() is Prayer.SUNRISE
