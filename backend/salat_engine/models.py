# salat_engine/models.py

from datetime import datetime
from .extensions import db


class PrayerCacheRecord(db.Model):
    """
    One cached day of prayer times, persisted by the 'database' cache backend.
    The payload is the serialized cache entry; its own created_at drives expiry,
    the column copy only helps manual inspection.
    """
    __tablename__ = 'prayer_cache_record'

    # sha256 based key built by key_utils.generate_prayer_cache_key
    cache_key = db.Column(db.String(128), primary_key=True)

    payload = db.Column(db.LargeBinary, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f'<PrayerCacheRecord {self.cache_key}>'
