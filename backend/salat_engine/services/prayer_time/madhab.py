# salat_engine/services/prayer_time/madhab.py
import enum
from typing import Union

from salat_engine.exceptions import InvalidConfiguration


class Madhab(enum.Enum):
    """Juristic school. Only the Asr shadow ratio depends on it."""
    SHAFI = "shafi"
    HANAFI = "hanafi"


# Maliki and Hanbali share the Shafi shadow ratio.
_MADHAB_NAMES = {
    "shafi": Madhab.SHAFI,
    "shafii": Madhab.SHAFI,
    "standard": Madhab.SHAFI,
    "maliki": Madhab.SHAFI,
    "hanbali": Madhab.SHAFI,
    "hanafi": Madhab.HANAFI,
}

_SHADOW_MULTIPLIERS = {
    Madhab.SHAFI: 1,
    Madhab.HANAFI: 2,
}


def parse_madhab(value: Union[str, Madhab]) -> Madhab:
    if isinstance(value, Madhab):
        return value
    madhab = _MADHAB_NAMES.get(str(value).strip().lower().replace("'", ""))
    if madhab is None:
        raise InvalidConfiguration(f"Unknown madhab: {value}")
    return madhab


def shadow_multiplier(madhab: Union[str, Madhab]) -> int:
    return _SHADOW_MULTIPLIERS[parse_madhab(madhab)]
