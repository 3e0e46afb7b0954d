# salat_engine/services/prayer_time_service.py

import datetime
import logging
import threading
from typing import List, Optional, Tuple, Union

from flask import current_app, has_app_context

from ..exceptions import PolarDayError
from ..metrics import SOLVE_FAILURES_TOTAL
from .location_provider import BaseLocationProvider, LocationSnapshot, validate_snapshot
from .prayer_time import solver
from .prayer_time.cache_layer import DEFAULT_RETENTION_DAYS, PrayerTimeCache
from .prayer_time.entities import Coordinate, Prayer, PrayerCalculationConfig, PrayerTimes
from .prayer_time.madhab import Madhab
from .prayer_time.methods import CalculationMethod, HighLatitudeRule

logger = logging.getLogger(__name__)

DEFAULT_CURRENT_PRAYER_TOLERANCE = datetime.timedelta(seconds=300)


class PrayerTimeEngine:
    """
    Cache-first entry point to the solver. The solver always produces a correct
    answer on its own; the cache only saves recomputation.
    """

    def __init__(self, cache: Optional[PrayerTimeCache] = None):
        self.cache = cache if cache is not None else PrayerTimeCache()

    def solve(self, date: datetime.date, config: PrayerCalculationConfig) -> PrayerTimes:
        """
        Returns the prayer times of `date` for `config`.

        Raises:
            PolarDayError: prayer times cannot be determined for this location/date.
        """
        if isinstance(date, datetime.datetime):
            date = date.date()

        cached = self.cache.get(date, config)
        if cached is not None:
            return cached

        try:
            result = solver.solve(date, config)
        except PolarDayError as e:
            reason = e.prayer.value if e.prayer else "unknown"
            SOLVE_FAILURES_TOTAL.labels(method=config.method.composite_key, reason=reason).inc()
            logger.warning(f"Solve failed for {date}: {e}")
            raise

        self.cache.put(date, config, result)
        return result

    def cleanup_cache(self, retention_days: int = DEFAULT_RETENTION_DAYS) -> int:
        """Maintenance hook. Safe to call at any time; running it twice removes nothing more."""
        return self.cache.cleanup(retention_days)

    def get_prayer_times_range(self, start_date: datetime.date, end_date: datetime.date,
                               config: PrayerCalculationConfig) -> List[PrayerTimes]:
        """Prayer times for every day from start_date to end_date, both inclusive."""
        results = []
        current = start_date
        while current <= end_date:
            results.append(self.solve(current, config))
            current += datetime.timedelta(days=1)
        return results

    def get_next_prayer(self, config: PrayerCalculationConfig,
                        now: Optional[datetime.datetime] = None) -> Tuple[Prayer, datetime.datetime]:
        """
        The first of the five prayers strictly after `now`, falling back to
        tomorrow's Fajr once Isha has passed. Sunrise is skipped.
        """
        now = self._localize(now, config)
        today = now.date()
        for prayer, time in self.solve(today, config).items():
            if prayer.is_obligatory and time > now:
                return prayer, time
        tomorrow = self.solve(today + datetime.timedelta(days=1), config)
        return Prayer.FAJR, tomorrow.fajr

    def get_current_prayer(self, config: PrayerCalculationConfig, now: Optional[datetime.datetime] = None,
                           tolerance: datetime.timedelta = DEFAULT_CURRENT_PRAYER_TOLERANCE) -> Optional[Prayer]:
        """The prayer whose start lies within `tolerance` of `now`, if any."""
        now = self._localize(now, config)
        try:
            times = self.solve(now.date(), config)
        except PolarDayError as e:
            logger.info(f"No current prayer: {e}")
            return None
        for prayer, time in times.items():
            if prayer.is_obligatory and abs(now - time) <= tolerance:
                return prayer
        return None

    @staticmethod
    def config_from_location(location: Union[LocationSnapshot, BaseLocationProvider], timezone: str,
                             method: Union[str, CalculationMethod], madhab: Union[str, Madhab],
                             high_latitude_rule: Optional[Union[str, HighLatitudeRule]] = None,
                             max_age: Optional[datetime.timedelta] = None,
                             max_accuracy_m: Optional[float] = None) -> PrayerCalculationConfig:
        """Builds a config from a location provider or one of its snapshots."""
        snapshot = location.current_location() if isinstance(location, BaseLocationProvider) else location
        coordinate = validate_snapshot(snapshot, max_age=max_age, max_accuracy_m=max_accuracy_m)
        return PrayerCalculationConfig(method, madhab, coordinate, timezone, high_latitude_rule)

    @staticmethod
    def _localize(now: Optional[datetime.datetime], config: PrayerCalculationConfig) -> datetime.datetime:
        tzinfo = config.tzinfo
        if now is None:
            return datetime.datetime.now(tzinfo)
        if now.tzinfo is None:
            return now.replace(tzinfo=tzinfo)
        return now.astimezone(tzinfo)


_default_engine = None
_default_engine_lock = threading.Lock()


def get_engine() -> PrayerTimeEngine:
    """The engine of the current Flask app if there is one, else a process-wide default."""
    global _default_engine
    if has_app_context():
        engine = current_app.extensions.get('prayer_engine')
        if engine is not None:
            return engine
    if _default_engine is None:
        with _default_engine_lock:
            if _default_engine is None:
                _default_engine = PrayerTimeEngine()
    return _default_engine


def solve(date: datetime.date, config: PrayerCalculationConfig) -> PrayerTimes:
    return get_engine().solve(date, config)


def cleanup_cache(retention_days: int = DEFAULT_RETENTION_DAYS) -> int:
    return get_engine().cleanup_cache(retention_days)


def build_default_config(app_config) -> PrayerCalculationConfig:
    """Config for the default location and convention declared in the app settings."""
    return PrayerCalculationConfig(
        method=app_config['DEFAULT_CALCULATION_METHOD'],
        madhab=app_config['DEFAULT_MADHAB'],
        coordinate=Coordinate(float(app_config['DEFAULT_LATITUDE']), float(app_config['DEFAULT_LONGITUDE'])),
        timezone=app_config['DEFAULT_TIMEZONE'],
    )
