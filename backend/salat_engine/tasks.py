"""
Celery tasks for cache housekeeping and for solving upcoming days ahead of time.
"""
import datetime

from flask import current_app
from marshmallow import ValidationError

from .celery_utils import celery
from .exceptions import CalculationError
from .metrics import BACKGROUND_TASK_RUNS_TOTAL, BACKGROUND_TASK_DURATION_SECONDS
from .schemas import PrecacheRequestSchema


@celery.task(name='tasks.cleanup_prayer_cache')
def cleanup_prayer_cache(retention_days=None):
    """
    Removes cached prayer times older than the retention window.
    Meant to run once a day or once per worker start, never per lookup.
    """
    with BACKGROUND_TASK_DURATION_SECONDS.labels(task_name='cleanup_prayer_cache').time():
        from .services.prayer_time_service import get_engine

        if retention_days is None:
            retention_days = current_app.config.get('PRAYER_CACHE_RETENTION_DAYS', 30)
        current_app.logger.info(f"[CELERY TASK] Starting prayer cache cleanup (retention {retention_days} days).")
        removed = get_engine().cleanup_cache(retention_days)
        current_app.logger.info(f"[CELERY TASK] Prayer cache cleanup removed {removed} entries.")
        BACKGROUND_TASK_RUNS_TOTAL.labels(task_name='cleanup_prayer_cache', status='success').inc()
        return removed


@celery.task(name='tasks.precache_prayer_times')
def precache_prayer_times(latitude, longitude, timezone, method='MuslimWorldLeague', madhab='shafi',
                          start_date=None, days=None):
    """
    Solves and caches `days` consecutive days for one location so lookups during
    the coming week are cache hits.

    Returns:
        dict: counts of days cached and days that could not be solved.
    """
    with BACKGROUND_TASK_DURATION_SECONDS.labels(task_name='precache_prayer_times').time():
        from .services.prayer_time.entities import Coordinate, PrayerCalculationConfig
        from .services.prayer_time_service import get_engine

        try:
            request = PrecacheRequestSchema().load({
                'latitude': latitude,
                'longitude': longitude,
                'timezone': timezone,
                'method': method,
                'madhab': madhab,
                'start_date': start_date.isoformat() if isinstance(start_date, datetime.date) else start_date,
                'days': days if days is not None else current_app.config.get('PRECACHE_DAYS', 7),
            })
            config = PrayerCalculationConfig(
                method=request['method'],
                madhab=request['madhab'],
                coordinate=Coordinate(request['latitude'], request['longitude']),
                timezone=request['timezone'],
            )
        except (ValidationError, CalculationError) as e:
            current_app.logger.error(f"[CELERY TASK] Invalid precache request: {e}")
            BACKGROUND_TASK_RUNS_TOTAL.labels(task_name='precache_prayer_times', status='failure').inc()
            raise

        first_day = request['start_date'] or datetime.datetime.now(config.tzinfo).date()
        engine = get_engine()
        cached, failed = 0, 0
        for offset in range(request['days']):
            day = first_day + datetime.timedelta(days=offset)
            try:
                engine.solve(day, config)
                cached += 1
            except CalculationError as e:
                # Polar days are expected near the poles; keep going with the rest.
                current_app.logger.warning(f"[CELERY TASK] Could not precache {day}: {e}")
                failed += 1

        current_app.logger.info(
            f"[CELERY TASK] Precached {cached} days ({failed} unsolvable) for ({latitude}, {longitude}) from {first_day}."
        )
        BACKGROUND_TASK_RUNS_TOTAL.labels(task_name='precache_prayer_times', status='success').inc()
        return {'cached': cached, 'failed': failed}
