# salat_engine/schemas.py

from marshmallow import Schema, fields, post_load


class PrayerTimesSchema(Schema):
    date = fields.Date(required=True)
    fajr = fields.AwareDateTime(required=True)
    sunrise = fields.AwareDateTime(required=True)
    dhuhr = fields.AwareDateTime(required=True)
    asr = fields.AwareDateTime(required=True)
    maghrib = fields.AwareDateTime(required=True)
    isha = fields.AwareDateTime(required=True)
    method_key = fields.Str(required=True)

    @post_load
    def make_prayer_times(self, data, **kwargs):
        from salat_engine.services.prayer_time.entities import PrayerTimes
        return PrayerTimes(**data)


class CacheEntrySchema(Schema):
    """Envelope persisted for every cached day."""
    key = fields.Str(required=True)
    schema_version = fields.Str(required=True)
    created_at = fields.AwareDateTime(required=True)
    prayer_times = fields.Nested(PrayerTimesSchema, required=True)


class CoordinateSchema(Schema):
    latitude = fields.Float(required=True)
    longitude = fields.Float(required=True)


class PrecacheRequestSchema(Schema):
    """Validates the arguments handed to the pre-computation task and script."""
    latitude = fields.Float(required=True)
    longitude = fields.Float(required=True)
    timezone = fields.Str(required=True)
    method = fields.Str(load_default="MuslimWorldLeague")
    madhab = fields.Str(load_default="shafi")
    start_date = fields.Date(load_default=None)
    days = fields.Int(load_default=7)
