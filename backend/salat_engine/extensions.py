# salat_engine/extensions.py

from flask_sqlalchemy import SQLAlchemy
from redis import from_url


class FlaskRedis:
    """A wrapper class to provide a Flask-like interface for the Redis client."""
    def __init__(self, app=None):
        self.redis_client = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Initialize the Redis client from the Flask app configuration."""
        self.redis_client = from_url(app.config.get('REDIS_URL'))

    def __getattr__(self, name):
        """Proxy attribute access to the underlying Redis client."""
        if name == 'redis_client':
            raise AttributeError(name)
        return getattr(self.redis_client, name)


class FlaskPrayerEngine:
    """
    Builds the PrayerTimeEngine from the app configuration and keeps it on
    `app.extensions['prayer_engine']`.
    """
    def __init__(self, app=None):
        self.engine = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        from .services.prayer_time.cache_layer import PrayerTimeCache
        from .services.prayer_time.stores import get_selected_store
        from .services.prayer_time_service import PrayerTimeEngine

        store = get_selected_store(app.config, redis_client=redis_client)
        cache = PrayerTimeCache(
            store,
            retention_days=int(app.config.get('PRAYER_CACHE_RETENTION_DAYS', 30)),
            precision=int(app.config.get('PRAYER_CACHE_COORD_PRECISION', 4)),
            schema_version=app.config.get('CACHE_SCHEMA_VERSION', 'v1'),
        )
        self.engine = PrayerTimeEngine(cache=cache)
        app.extensions['prayer_engine'] = self.engine
        app.logger.info(f"Prayer engine initialized with {cache.cache_type} cache backend.")

    def __getattr__(self, name):
        """Proxy attribute access to the underlying engine."""
        if name == 'engine':
            raise AttributeError(name)
        return getattr(self.engine, name)


db = SQLAlchemy()

redis_client = FlaskRedis()

prayer_engine = FlaskPrayerEngine()
