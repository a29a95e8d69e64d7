"""Runtime settings for the prosody engine.

Every setting can come from an environment variable so editors embedding the
engine can tune it without code changes. Malformed values fall back to the
default rather than failing at start-up.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from verse_prosody.utils.logging_config import LOG_LEVEL_ENV
from verse_prosody.utils.observability import get_logger

CMUDICT_PATH_ENV = "VERSE_PROSODY_CMUDICT"
USE_PRONOUNCING_ENV = "VERSE_PROSODY_USE_PRONOUNCING"
AUTOLOAD_ENV = "VERSE_PROSODY_AUTOLOAD"
SLANT_VOWELS_ENV = "VERSE_PROSODY_SLANT_VOWELS"
SPELLING_FALLBACK_ENV = "VERSE_PROSODY_SPELLING_FALLBACK"
INTERNAL_DISTANCE_ENV = "VERSE_PROSODY_INTERNAL_DISTANCE"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_SLANT_CHOICES = ("exact", "related")

_logger = get_logger(__name__).bind(component="config")


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    _logger.warning("Ignoring malformed boolean setting", context={"name": name, "value": raw})
    return default


def _env_optional_int(environ: Mapping[str, str], name: str) -> Optional[int]:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw)
    except ValueError:
        _logger.warning("Ignoring malformed integer setting", context={"name": name, "value": raw})
        return None
    return value if value >= 0 else None


def _env_choice(environ: Mapping[str, str], name: str, choices, default: str) -> str:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in choices:
        return value
    _logger.warning("Ignoring unknown setting value", context={"name": name, "value": raw})
    return default


@dataclass(frozen=True)
class ProsodySettings:
    cmudict_path: Optional[str] = None
    use_pronouncing: bool = True
    autoload: bool = True
    slant_vowel_classes: str = "exact"
    spelling_fallback: bool = False
    internal_rhyme_max_distance: Optional[int] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProsodySettings":
        env = os.environ if environ is None else environ
        path = (env.get(CMUDICT_PATH_ENV) or "").strip() or None
        return cls(
            cmudict_path=path,
            use_pronouncing=_env_bool(env, USE_PRONOUNCING_ENV, True),
            autoload=_env_bool(env, AUTOLOAD_ENV, True),
            slant_vowel_classes=_env_choice(env, SLANT_VOWELS_ENV, _SLANT_CHOICES, "exact"),
            spelling_fallback=_env_bool(env, SPELLING_FALLBACK_ENV, False),
            internal_rhyme_max_distance=_env_optional_int(env, INTERNAL_DISTANCE_ENV),
            log_level=(env.get(LOG_LEVEL_ENV) or "INFO").strip().upper() or "INFO",
        )


__all__ = [
    "AUTOLOAD_ENV",
    "CMUDICT_PATH_ENV",
    "INTERNAL_DISTANCE_ENV",
    "ProsodySettings",
    "SLANT_VOWELS_ENV",
    "SPELLING_FALLBACK_ENV",
    "USE_PRONOUNCING_ENV",
]
