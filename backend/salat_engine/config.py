import os
from dotenv import load_dotenv

# Load .env file
dotenv_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path)


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'a_very_long_and_random_secret_key_for_salat_engine'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///salat_engine.db'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Sentry Configuration
    SENTRY_DSN = os.environ.get('SENTRY_DSN')

    # Redis and Caching Configuration
    # Used for Celery broker, result backend, and the 'redis' prayer cache backend.
    REDIS_URL = os.environ.get('REDIS_URL') or 'redis://localhost:6379/0'

    # Celery Configuration
    CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL') or REDIS_URL
    CELERY_RESULT_BACKEND = os.environ.get('CELERY_RESULT_BACKEND') or REDIS_URL

    # Prayer Cache Configuration
    # One of 'memory', 'redis' or 'database'.
    PRAYER_CACHE_BACKEND = os.environ.get('PRAYER_CACHE_BACKEND', 'memory')
    PRAYER_CACHE_RETENTION_DAYS = int(os.environ.get('PRAYER_CACHE_RETENTION_DAYS', 30))
    # Decimal places kept from coordinates before hashing (4 ~ 11 m).
    PRAYER_CACHE_COORD_PRECISION = int(os.environ.get('PRAYER_CACHE_COORD_PRECISION', 4))
    # Bump to invalidate every cached entry after a change in the calculation.
    CACHE_SCHEMA_VERSION = os.environ.get('CACHE_SCHEMA_VERSION', 'v1')

    # Number of upcoming days solved ahead of time by the precache task.
    PRECACHE_DAYS = int(os.environ.get('PRECACHE_DAYS', 7))
    # Hour (UTC) at which celery beat runs the cache cleanup.
    PRAYER_CACHE_CLEANUP_HOUR = int(os.environ.get('PRAYER_CACHE_CLEANUP_HOUR', 3))

    # Default Location and Calculation Method
    DEFAULT_LATITUDE = float(os.environ.get('DEFAULT_LATITUDE', 21.4225))
    DEFAULT_LONGITUDE = float(os.environ.get('DEFAULT_LONGITUDE', 39.8262))
    DEFAULT_TIMEZONE = os.environ.get('DEFAULT_TIMEZONE', 'Asia/Riyadh')
    DEFAULT_CALCULATION_METHOD = os.environ.get('DEFAULT_CALCULATION_METHOD', 'MuslimWorldLeague')
    DEFAULT_MADHAB = os.environ.get('DEFAULT_MADHAB', 'shafi')


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = "DEBUG"


class ProductionConfig(Config):
    DEBUG = False
    PRAYER_CACHE_BACKEND = os.environ.get('PRAYER_CACHE_BACKEND', 'redis')


class TestingConfig(Config):
    TESTING = True
    # Use an in-memory SQLite database for tests to ensure speed and isolation.
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    PRAYER_CACHE_BACKEND = 'memory'
    SENTRY_DSN = None
    SECRET_KEY = 'test-secret-key'


config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
