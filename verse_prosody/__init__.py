"""Prosody analysis for poetry editors: syllables, stress, meter and rhyme.

The module-level functions delegate to a process-wide :class:`ProsodyEngine`
configured from ``VERSE_PROSODY_*`` environment variables. Create an engine
directly to use a specific dictionary file or settings.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

from .config import ProsodySettings
from .core.cmudict_loader import CMUDictLoader, PronunciationStore
from .core.models import (
    ComplianceStatus,
    FootType,
    InternalRhyme,
    LineCompliance,
    MeterLabel,
    PronunciationSource,
    Resolution,
    RhymeQuality,
    RhymeScheme,
    StressSequence,
    TextMeter,
)
from .engine import PoemAnalysis, ProsodyEngine, get_default_engine, set_default_engine
from .utils.logging_config import configure_logging

__version__ = "0.1.0"


def is_loaded() -> bool:
    return get_default_engine().is_loaded()


def load(timeout: Optional[float] = None) -> bool:
    return get_default_engine().load(timeout=timeout)


def resolve(word: str) -> Resolution:
    return get_default_engine().resolve(word)


def syllables(word: str) -> List[str]:
    return get_default_engine().syllables(word)


def classify_line(stresses: Union[StressSequence, Sequence[int], str]) -> MeterLabel:
    return get_default_engine().classify_line(stresses)


def classify_text(text: str) -> TextMeter:
    return get_default_engine().classify_text(text)


def assign_scheme(lines: Sequence[str]) -> RhymeScheme:
    return get_default_engine().assign_scheme(lines)


def check_form_compliance(
    lines: Sequence[str], expected: Union[str, Sequence[str]]
) -> List[LineCompliance]:
    return get_default_engine().check_form_compliance(lines, expected)


def internal_rhymes(text: str) -> List[InternalRhyme]:
    return get_default_engine().internal_rhymes(text)


def is_haiku(text: str) -> bool:
    return get_default_engine().is_haiku(text)


def analyze(text: str) -> PoemAnalysis:
    return get_default_engine().analyze(text)


__all__ = [
    "CMUDictLoader",
    "ComplianceStatus",
    "FootType",
    "InternalRhyme",
    "LineCompliance",
    "MeterLabel",
    "PoemAnalysis",
    "PronunciationSource",
    "PronunciationStore",
    "ProsodyEngine",
    "ProsodySettings",
    "Resolution",
    "RhymeQuality",
    "RhymeScheme",
    "StressSequence",
    "TextMeter",
    "analyze",
    "assign_scheme",
    "check_form_compliance",
    "classify_line",
    "classify_text",
    "configure_logging",
    "get_default_engine",
    "internal_rhymes",
    "is_haiku",
    "is_loaded",
    "load",
    "resolve",
    "set_default_engine",
    "syllables",
]
