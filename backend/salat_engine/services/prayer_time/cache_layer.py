# salat_engine/services/prayer_time/cache_layer.py
# Caches solved days. A pure optimization: every failure in here degrades to a miss.
import datetime
import json
import logging
import threading
from typing import Optional

from marshmallow import ValidationError

from salat_engine.metrics import CACHE_ERRORS, CACHE_HITS, CACHE_MISSES
from salat_engine.schemas import CacheEntrySchema
from .entities import PrayerCalculationConfig, PrayerTimes
from .key_utils import DEFAULT_COORDINATE_PRECISION, generate_prayer_cache_key
from .stores import BasePersistentStore, InMemoryStore

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 30

_entry_schema = CacheEntrySchema()


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class PrayerTimeCache:
    """
    Maps (date, rounded coordinate, method, madhab) to a solved PrayerTimes.

    get/put/cleanup serialize on one lock so a cleanup can never interleave
    with a write to the same store.
    """

    def __init__(self, store: Optional[BasePersistentStore] = None, retention_days: int = DEFAULT_RETENTION_DAYS,
                 precision: int = DEFAULT_COORDINATE_PRECISION, schema_version: str = "v1"):
        self.store = store if store is not None else InMemoryStore()
        self.retention_days = retention_days
        self.precision = precision
        self.schema_version = schema_version
        self._lock = threading.RLock()

    @property
    def cache_type(self) -> str:
        return type(self.store).__name__

    def key_for(self, date_obj: datetime.date, config: PrayerCalculationConfig) -> str:
        return generate_prayer_cache_key(date_obj, config, self.precision, self.schema_version)

    def get(self, date_obj: datetime.date, config: PrayerCalculationConfig) -> Optional[PrayerTimes]:
        key = self.key_for(date_obj, config)
        method_key = config.method.composite_key
        with self._lock:
            try:
                blob = self.store.load(key)
                entry = self._decode(blob) if blob else None
            except Exception as e:
                CACHE_ERRORS.labels(cache_type=self.cache_type, operation="get").inc()
                logger.error(f"Cache GET failed for key {key}, treating as a miss: {e}", exc_info=True)
                entry = None

            if entry is None or entry["key"] != key or self._is_expired(entry["created_at"], self.retention_days):
                CACHE_MISSES.labels(cache_type=self.cache_type, method=method_key).inc()
                logger.debug(f"Prayer cache MISS for {date_obj} ({method_key}).")
                return None

        CACHE_HITS.labels(cache_type=self.cache_type, method=method_key).inc()
        logger.debug(f"Prayer cache HIT for {date_obj} ({method_key}).")
        return entry["prayer_times"].in_timezone(config.tzinfo)

    def put(self, date_obj: datetime.date, config: PrayerCalculationConfig, result: PrayerTimes) -> None:
        key = self.key_for(date_obj, config)
        with self._lock:
            try:
                payload = json.dumps(_entry_schema.dump({
                    "key": key,
                    "schema_version": self.schema_version,
                    "created_at": _utcnow(),
                    "prayer_times": result,
                }), sort_keys=True).encode("utf-8")
                self.store.save(key, payload)
            except Exception as e:
                CACHE_ERRORS.labels(cache_type=self.cache_type, operation="put").inc()
                logger.error(f"Cache PUT failed for key {key}: {e}", exc_info=True)

    def cleanup(self, retention_days: Optional[int] = None) -> int:
        """
        Removes every entry older than the retention window and returns how many
        were removed. Entries that cannot be decoded are removed too.
        """
        retention_days = self.retention_days if retention_days is None else retention_days
        removed = 0
        with self._lock:
            try:
                for key in sorted(self.store.keys()):
                    blob = self.store.load(key)
                    if blob is None:
                        continue
                    entry = self._decode(blob)
                    if entry is None or self._is_expired(entry["created_at"], retention_days):
                        self.store.delete(key)
                        removed += 1
            except Exception as e:
                CACHE_ERRORS.labels(cache_type=self.cache_type, operation="cleanup").inc()
                logger.error(f"Cache cleanup aborted after removing {removed} entries: {e}", exc_info=True)
        logger.info(f"Prayer cache cleanup removed {removed} entries older than {retention_days} days.")
        return removed

    def clear(self) -> int:
        """Evicts every entry regardless of age."""
        removed = 0
        with self._lock:
            try:
                for key in self.store.keys():
                    self.store.delete(key)
                    removed += 1
            except Exception as e:
                CACHE_ERRORS.labels(cache_type=self.cache_type, operation="clear").inc()
                logger.error(f"Cache clear aborted after removing {removed} entries: {e}", exc_info=True)
        return removed

    def _decode(self, blob: bytes) -> Optional[dict]:
        try:
            return _entry_schema.load(json.loads(blob))
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Discarding undecodable prayer cache entry: {e}")
            return None

    @staticmethod
    def _is_expired(created_at: datetime.datetime, retention_days: int) -> bool:
        return _utcnow() - created_at > datetime.timedelta(days=retention_days)
