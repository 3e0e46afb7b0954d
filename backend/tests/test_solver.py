import datetime

import pytest

from conftest import LONDON, MECCA, REFERENCE_DATE
from salat_engine.exceptions import PolarDayError
from salat_engine.services.prayer_time import solver
from salat_engine.services.prayer_time.entities import Coordinate, Prayer, PrayerCalculationConfig
from salat_engine.services.prayer_time.methods import CalculationMethod, METHODS


def _seconds(delta):
    return delta.total_seconds()


# Hand-checked against the praytimes reference values for Mecca on the March equinox.
MECCA_EXPECTED = {
    Prayer.FAJR: (5, 10),
    Prayer.SUNRISE: (6, 24),
    Prayer.DHUHR: (12, 29),
    Prayer.ASR: (15, 53),
    Prayer.MAGHRIB: (18, 32),
    Prayer.ISHA: (19, 42),
}


@pytest.mark.parametrize("prayer, expected", list(MECCA_EXPECTED.items()))
def test_mecca_reference_times(mecca_config, prayer, expected):
    times = solver.solve(REFERENCE_DATE, mecca_config)
    actual = times.time_for(prayer)
    target = datetime.datetime(2025, 3, 21, *expected, tzinfo=mecca_config.tzinfo)
    assert abs(_seconds(actual - target)) <= 60
    assert actual.utcoffset() == datetime.timedelta(hours=3)


def test_result_carries_date_and_method(mecca_config):
    times = solver.solve(REFERENCE_DATE, mecca_config)
    assert times.date == REFERENCE_DATE
    assert times.method_key == "MuslimWorldLeague"
    assert all(time.microsecond == 0 for _, time in times.items())


def test_solve_is_deterministic(mecca_config):
    assert solver.solve(REFERENCE_DATE, mecca_config) == solver.solve(REFERENCE_DATE, mecca_config)


def test_solve_accepts_a_datetime(mecca_config):
    moment = datetime.datetime(2025, 3, 21, 23, 59)
    assert solver.solve(moment, mecca_config) == solver.solve(REFERENCE_DATE, mecca_config)


@pytest.mark.parametrize("method_key", sorted(METHODS))
@pytest.mark.parametrize("madhab", ["shafi", "hanafi"])
@pytest.mark.parametrize("latitude", [-45.0, -30.0, 0.0, 21.42, 35.0, 45.0, 55.0])
@pytest.mark.parametrize("day", [
    datetime.date(2025, 3, 21), datetime.date(2025, 6, 21), datetime.date(2025, 9, 22), datetime.date(2025, 12, 21),
])
def test_times_are_strictly_ordered(method_key, madhab, latitude, day):
    config = PrayerCalculationConfig(method_key, madhab, Coordinate(latitude, 10.0), 'UTC')
    assert solver.solve(day, config).is_ordered()


@pytest.mark.parametrize("day", [datetime.date(2025, 1, 15), datetime.date(2025, 6, 21), datetime.date(2025, 10, 3)])
def test_hanafi_asr_is_never_earlier(day):
    shafi = PrayerCalculationConfig('MuslimWorldLeague', 'shafi', LONDON, 'Europe/London')
    hanafi = PrayerCalculationConfig('MuslimWorldLeague', 'hanafi', LONDON, 'Europe/London')
    shafi_times = solver.solve(day, shafi)
    hanafi_times = solver.solve(day, hanafi)
    assert hanafi_times.asr > shafi_times.asr
    assert hanafi_times.dhuhr == shafi_times.dhuhr


def test_arctic_circle_midsummer_either_fails_cleanly_or_is_ordered():
    config = PrayerCalculationConfig('MuslimWorldLeague', 'shafi', Coordinate(66.0, 25.0), 'Europe/Helsinki')
    try:
        times = solver.solve(datetime.date(2025, 6, 21), config)
    except PolarDayError as e:
        assert e.date == datetime.date(2025, 6, 21)
    else:
        assert times.is_ordered()


def test_polar_night_raises_with_context():
    coordinate = Coordinate(70.0, 25.0)
    config = PrayerCalculationConfig('MuslimWorldLeague', 'shafi', coordinate, 'Europe/Oslo')
    with pytest.raises(PolarDayError) as excinfo:
        solver.solve(datetime.date(2025, 12, 21), config)
    assert excinfo.value.prayer is Prayer.SUNRISE
    assert excinfo.value.coordinate == coordinate


class TestHighLatitudeRules:
    coordinate = Coordinate(60.0, 10.0)
    day = datetime.date(2025, 6, 21)

    def _config(self, rule):
        return PrayerCalculationConfig('MuslimWorldLeague', 'shafi', self.coordinate, 'Europe/Oslo', rule)

    def test_no_rule_raises_when_twilight_never_ends(self):
        with pytest.raises(PolarDayError) as excinfo:
            solver.solve(self.day, self._config('none'))
        assert excinfo.value.prayer is Prayer.FAJR

    def test_middle_of_the_night_splits_the_night(self):
        times = solver.solve(self.day, self._config('middle_of_the_night'))
        assert times.is_ordered()
        assert abs(_seconds(times.sunrise - times.fajr) - _seconds(times.isha - times.maghrib)) <= 2

    def test_one_seventh_uses_a_seventh_of_the_night(self):
        times = solver.solve(self.day, self._config('one_seventh'))
        night = 86400 - _seconds(times.maghrib - times.sunrise)
        assert abs(_seconds(times.sunrise - times.fajr) * 7 - night) <= 15

    def test_angle_based_is_ordered(self):
        assert solver.solve(self.day, self._config('angle_based')).is_ordered()

    def test_rules_do_not_touch_sunrise_or_sunset(self):
        middle = solver.solve(self.day, self._config('middle_of_the_night'))
        seventh = solver.solve(self.day, self._config('one_seventh'))
        assert middle.sunrise == seventh.sunrise
        assert middle.maghrib == seventh.maghrib
        assert middle.dhuhr == seventh.dhuhr


def test_isha_interval_methods_add_minutes_to_maghrib():
    config = PrayerCalculationConfig('UmmAlQura', 'shafi', MECCA, 'Asia/Riyadh')
    times = solver.solve(REFERENCE_DATE, config)
    assert abs(_seconds(times.isha - times.maghrib) - 90 * 60) <= 1


def test_maghrib_minutes_are_added_to_sunset():
    mwl = solver.solve(REFERENCE_DATE, PrayerCalculationConfig('MuslimWorldLeague', 'shafi', MECCA, 'Asia/Riyadh'))
    dubai = solver.solve(REFERENCE_DATE, PrayerCalculationConfig('Dubai', 'shafi', MECCA, 'Asia/Riyadh'))
    assert abs(_seconds(dubai.maghrib - mwl.maghrib) - 180) <= 1
    assert dubai.sunrise == mwl.sunrise


def test_maghrib_angle_falls_after_sunset():
    mwl = solver.solve(REFERENCE_DATE, PrayerCalculationConfig('MuslimWorldLeague', 'shafi', MECCA, 'Asia/Riyadh'))
    tehran = solver.solve(REFERENCE_DATE, PrayerCalculationConfig('Tehran', 'shafi', MECCA, 'Asia/Riyadh'))
    assert tehran.maghrib > mwl.maghrib


def test_custom_method_is_solved_with_its_own_angles():
    custom = CalculationMethod.custom(fajr_angle=16.5, isha_minutes=75)
    times = solver.solve(REFERENCE_DATE, PrayerCalculationConfig(custom, 'shafi', MECCA, 'Asia/Riyadh'))
    mwl = solver.solve(REFERENCE_DATE, PrayerCalculationConfig('MuslimWorldLeague', 'shafi', MECCA, 'Asia/Riyadh'))
    assert times.fajr > mwl.fajr
    assert abs(_seconds(times.isha - times.maghrib) - 75 * 60) <= 1
    assert times.method_key.startswith("Custom(")


def test_daylight_saving_offset_is_applied(london_config):
    summer = solver.solve(datetime.date(2025, 7, 1), london_config)
    winter = solver.solve(datetime.date(2025, 1, 15), london_config)
    assert summer.dhuhr.hour == 13
    assert summer.dhuhr.utcoffset() == datetime.timedelta(hours=1)
    assert winter.dhuhr.hour == 12
    assert winter.dhuhr.utcoffset() == datetime.timedelta(0)


def test_far_east_times_stay_on_the_requested_local_date():
    config = PrayerCalculationConfig('Karachi', 'hanafi', Coordinate(35.6762, 139.6503), 'Asia/Tokyo')
    day = datetime.date(2025, 5, 10)
    times = solver.solve(day, config)
    assert times.fajr.date() == day
    assert times.dhuhr.date() == day
    assert times.fajr.hour < 5


def test_tehran_in_reykjavik_midsummer_falls_back_to_sunset_maghrib():
    reykjavik = Coordinate(64.1466, -21.9426)
    day = datetime.date(2025, 6, 1)
    tehran = solver.solve(day, PrayerCalculationConfig('Tehran', 'shafi', reykjavik, 'Atlantic/Reykjavik'))
    mwl = solver.solve(day, PrayerCalculationConfig('MuslimWorldLeague', 'shafi', reykjavik, 'Atlantic/Reykjavik'))
    assert tehran.is_ordered()
    assert tehran.maghrib == mwl.maghrib
    assert tehran.maghrib < tehran.isha


@pytest.mark.parametrize("rule", ["one_seventh", "middle_of_the_night", "angle_based"])
@pytest.mark.parametrize("latitude, day", [
    (60.0, datetime.date(2025, 5, 15)),
    (60.0, datetime.date(2025, 6, 21)),
    (62.0, datetime.date(2025, 6, 21)),
    (64.0, datetime.date(2025, 5, 15)),
    (64.0, datetime.date(2025, 6, 21)),
    (-60.0, datetime.date(2025, 12, 21)),
    (-64.0, datetime.date(2025, 12, 21)),
])
def test_maghrib_angle_methods_stay_ordered_at_high_latitudes(rule, latitude, day):
    config = PrayerCalculationConfig('Tehran', 'shafi', Coordinate(latitude, 10.0), 'UTC', rule)
    times = solver.solve(day, config)
    assert times.is_ordered()


def test_tehran_one_seventh_keeps_maghrib_between_sunset_and_isha():
    coordinate = Coordinate(60.0, 10.0)
    day = datetime.date(2025, 6, 1)
    tehran = solver.solve(day, PrayerCalculationConfig('Tehran', 'shafi', coordinate, 'Europe/Oslo', 'one_seventh'))
    sunset = solver.solve(day, PrayerCalculationConfig('MuslimWorldLeague', 'shafi', coordinate, 'Europe/Oslo')).maghrib
    assert sunset <= tehran.maghrib < tehran.isha


def test_ordering_failure_names_the_first_misplaced_prayer(mocker, mecca_config):
    compute_pass = solver._compute_pass

    def late_asr(*args):
        raw = compute_pass(*args)
        raw["asr"] = raw["sunset"] + 1.0
        return raw

    mocker.patch.object(solver, "_compute_pass", side_effect=late_asr)
    with pytest.raises(PolarDayError) as excinfo:
        solver.solve(REFERENCE_DATE, mecca_config)
    assert excinfo.value.prayer is Prayer.MAGHRIB
