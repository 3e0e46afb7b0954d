# salat_engine/services/prayer_time/stores.py
# Key -> bytes backends used by the prayer time cache to survive restarts.
import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional, Set

from redis import exceptions as redis_exceptions
from sqlalchemy.exc import SQLAlchemyError

from salat_engine.exceptions import CacheUnavailable

logger = logging.getLogger(__name__)


class BasePersistentStore(ABC):
    """
    Abstract base class for a cache backend. Implementations raise CacheUnavailable
    for any storage failure; the cache layer turns that into a miss.
    """

    @abstractmethod
    def load(self, key: str) -> Optional[bytes]:
        """Returns the stored blob, or None when the key is absent."""
        pass

    @abstractmethod
    def save(self, key: str, data: bytes) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Deleting an absent key is not an error."""
        pass

    @abstractmethod
    def keys(self) -> Set[str]:
        pass


class InMemoryStore(BasePersistentStore):
    def __init__(self):
        self._data: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def load(self, key):
        with self._lock:
            return self._data.get(key)

    def save(self, key, data):
        with self._lock:
            self._data[key] = bytes(data)

    def delete(self, key):
        with self._lock:
            self._data.pop(key, None)

    def keys(self):
        with self._lock:
            return set(self._data)


class RedisStore(BasePersistentStore):
    """
    Stores each entry under its own Redis key. `ttl_seconds` lets Redis expire
    entries on its own, on top of the explicit cleanup.
    """

    def __init__(self, client, key_pattern: str = "prayer:*", ttl_seconds: Optional[int] = None):
        self.client = client
        self.key_pattern = key_pattern
        self.ttl_seconds = ttl_seconds

    def load(self, key):
        try:
            return self.client.get(key)
        except redis_exceptions.RedisError as e:
            raise CacheUnavailable(f"Redis GET failed for key {key}: {e}") from e

    def save(self, key, data):
        try:
            self.client.set(key, data, ex=self.ttl_seconds)
        except redis_exceptions.RedisError as e:
            raise CacheUnavailable(f"Redis SET failed for key {key}: {e}") from e

    def delete(self, key):
        try:
            self.client.delete(key)
        except redis_exceptions.RedisError as e:
            raise CacheUnavailable(f"Redis DELETE failed for key {key}: {e}") from e

    def keys(self):
        try:
            return {k.decode("utf-8") if isinstance(k, bytes) else k for k in self.client.scan_iter(match=self.key_pattern)}
        except redis_exceptions.RedisError as e:
            raise CacheUnavailable(f"Redis SCAN failed for pattern {self.key_pattern}: {e}") from e


class DatabaseStore(BasePersistentStore):
    """Backed by the PrayerCacheRecord table. Needs an active Flask app context."""

    def __init__(self, db=None):
        if db is None:
            from salat_engine.extensions import db
        self.db = db

    def load(self, key):
        from salat_engine.models import PrayerCacheRecord
        try:
            record = self.db.session.get(PrayerCacheRecord, key)
            return record.payload if record else None
        except (SQLAlchemyError, RuntimeError) as e:
            self._rollback()
            raise CacheUnavailable(f"DB load failed for key {key}: {e}") from e

    def save(self, key, data):
        from salat_engine.models import PrayerCacheRecord
        try:
            self.db.session.merge(PrayerCacheRecord(cache_key=key, payload=bytes(data)))
            self.db.session.commit()
        except (SQLAlchemyError, RuntimeError) as e:
            self._rollback()
            raise CacheUnavailable(f"DB save failed for key {key}: {e}") from e

    def delete(self, key):
        from salat_engine.models import PrayerCacheRecord
        try:
            self.db.session.query(PrayerCacheRecord).filter(
                PrayerCacheRecord.cache_key == key
            ).delete(synchronize_session=False)
            self.db.session.commit()
        except (SQLAlchemyError, RuntimeError) as e:
            self._rollback()
            raise CacheUnavailable(f"DB delete failed for key {key}: {e}") from e

    def keys(self):
        from salat_engine.models import PrayerCacheRecord
        try:
            return {row[0] for row in self.db.session.query(PrayerCacheRecord.cache_key).all()}
        except (SQLAlchemyError, RuntimeError) as e:
            self._rollback()
            raise CacheUnavailable(f"DB key listing failed: {e}") from e

    def _rollback(self):
        try:
            self.db.session.rollback()
        except (SQLAlchemyError, RuntimeError) as e:
            logger.error(f"DB rollback failed after a cache error: {e}", exc_info=True)


def get_selected_store(app_config, redis_client=None) -> BasePersistentStore:
    """
    Returns the store named by PRAYER_CACHE_BACKEND ('memory', 'redis' or 'database').
    Unknown names fall back to the in-memory store.
    """
    backend = str(app_config.get("PRAYER_CACHE_BACKEND", "memory")).lower()
    if backend == "redis":
        if redis_client is None:
            from salat_engine.extensions import redis_client
        schema_version = app_config.get("CACHE_SCHEMA_VERSION", "v1")
        retention_days = int(app_config.get("PRAYER_CACHE_RETENTION_DAYS", 30))
        return RedisStore(redis_client, key_pattern=f"prayer:{schema_version}:*", ttl_seconds=retention_days * 86400)
    if backend == "database":
        return DatabaseStore()
    if backend != "memory":
        logger.warning(f"Unknown PRAYER_CACHE_BACKEND '{backend}'. Falling back to the in-memory store.")
    return InMemoryStore()
