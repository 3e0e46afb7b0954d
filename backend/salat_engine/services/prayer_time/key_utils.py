# salat_engine/services/prayer_time/key_utils.py
import datetime
import hashlib

# 4 decimal places is roughly 11 m, well inside GPS jitter.
DEFAULT_COORDINATE_PRECISION = 4
KEY_PREFIX = "prayer"


def generate_composite_method_key(config) -> str:
    """Method, madhab and effective high latitude rule, e.g. 'MuslimWorldLeague-shafi-middle_of_the_night'."""
    return f"{config.method.composite_key}-{config.madhab.value}-{config.effective_high_latitude_rule.value}"


def generate_prayer_cache_key(date_obj: datetime.date, config, precision: int = DEFAULT_COORDINATE_PRECISION,
                              schema_version: str = "v1") -> str:
    """Generates a consistent store key for one day of prayer times at one location."""
    latitude, longitude = config.coordinate.rounded(precision)
    # -0.0 and 0.0 must map to the same key.
    latitude, longitude = latitude + 0.0, longitude + 0.0
    raw = (
        f"{schema_version}|{date_obj.isoformat()}|{latitude:.{precision}f}|{longitude:.{precision}f}|"
        f"{generate_composite_method_key(config)}"
    )
    digest = hashlib.sha256(raw.encode("utf-8")).hexdigest()
    return f"{KEY_PREFIX}:{schema_version}:{digest}"
