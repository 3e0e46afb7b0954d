# backend/tests/conftest.py

import datetime

import pytest

from salat_engine import create_app
from salat_engine.services.prayer_time.cache_layer import PrayerTimeCache
from salat_engine.services.prayer_time.entities import Coordinate, PrayerCalculationConfig
from salat_engine.services.prayer_time.stores import InMemoryStore
from salat_engine.services.prayer_time_service import PrayerTimeEngine

MECCA = Coordinate(21.4225, 39.8262)
LONDON = Coordinate(51.5074, -0.1278)
REFERENCE_DATE = datetime.date(2025, 3, 21)


@pytest.fixture(scope='function')
def app():
    """A fresh testing application (in-memory SQLite, in-memory prayer cache) per test."""
    app = create_app('testing')
    with app.app_context():
        yield app


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def cache(store):
    return PrayerTimeCache(store, retention_days=30)


@pytest.fixture
def engine(cache):
    return PrayerTimeEngine(cache=cache)


@pytest.fixture
def mecca_config():
    """Muslim World League, Shafi, Mecca."""
    return PrayerCalculationConfig('MuslimWorldLeague', 'shafi', MECCA, 'Asia/Riyadh')


@pytest.fixture
def london_config():
    return PrayerCalculationConfig('MuslimWorldLeague', 'shafi', LONDON, 'Europe/London')
