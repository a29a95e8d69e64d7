"""Metrical foot scoring for lines and meter verdicts for whole texts."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from verse_prosody.utils.observability import get_logger
from verse_prosody.utils.text import require_text, split_lines

from .models import FootType, MeterLabel, StressSequence, TextMeter
from .resolver import PronunciationResolver

_logger = get_logger(__name__).bind(component="meter")

FREE_VERSE = "Free verse or irregular"
MIXED_OR_FREE_VERSE = "Mixed or Free Verse"
NO_TEXT = "No text to analyze"
WITH_VARIATIONS = "(with variations)"
SOME_WORDS_UNKNOWN = "(some words unknown)"

STRICT_CONSISTENCY = 0.8
LOOSE_CONSISTENCY = 0.5

LENGTH_NAMES: Dict[int, str] = {
    1: "Monometer",
    2: "Dimeter",
    3: "Trimeter",
    4: "Tetrameter",
    5: "Pentameter",
    6: "Hexameter",
    7: "Heptameter",
    8: "Octameter",
}

SCORED_FEET: Tuple[FootType, ...] = (
    FootType.IAMB,
    FootType.TROCHEE,
    FootType.ANAPEST,
    FootType.DACTYL,
)
_FOOT_PRIORITY = {foot: index for index, foot in enumerate(SCORED_FEET)}

# Used when the dictionary is not loaded: syllables per line -> (foot, feet, name).
SYLLABLE_COUNT_METERS: Dict[int, Tuple[FootType, int, str]] = {
    10: (FootType.IAMB, 5, "Iambic Pentameter"),
    8: (FootType.IAMB, 4, "Iambic Tetrameter"),
    6: (FootType.IAMB, 3, "Iambic Trimeter"),
    12: (FootType.ANAPEST, 4, "Anapestic or Dactylic Tetrameter"),
    9: (FootType.ANAPEST, 3, "Anapestic Trimeter"),
    14: (FootType.IAMB, 7, "Iambic Heptameter (Fourteener)"),
    7: (FootType.NONE, 0, "Heptasyllabic"),
    5: (FootType.NONE, 0, "Pentasyllabic"),
    17: (FootType.DACTYL, 6, "Dactylic Hexameter"),
    18: (FootType.DACTYL, 6, "Dactylic Hexameter"),
}


@dataclass(frozen=True)
class MeterPattern:
    name: str
    foot: FootType
    description: str


METER_PATTERNS: Tuple[MeterPattern, ...] = (
    MeterPattern("Iambic Pentameter", FootType.IAMB, "10 syllables per line (5 iambs: da-DUM da-DUM da-DUM da-DUM da-DUM)"),
    MeterPattern("Iambic Tetrameter", FootType.IAMB, "8 syllables per line (4 iambs: da-DUM da-DUM da-DUM da-DUM)"),
    MeterPattern("Iambic Trimeter", FootType.IAMB, "6 syllables per line (3 iambs: da-DUM da-DUM da-DUM)"),
    MeterPattern("Trochaic Tetrameter", FootType.TROCHEE, "8 syllables per line (4 trochees: DUM-da DUM-da DUM-da DUM-da)"),
    MeterPattern("Trochaic Trimeter", FootType.TROCHEE, "6 syllables per line (3 trochees: DUM-da DUM-da DUM-da)"),
    MeterPattern("Anapestic Tetrameter", FootType.ANAPEST, "12 syllables per line (4 anapests: da-da-DUM da-da-DUM da-da-DUM da-da-DUM)"),
    MeterPattern("Anapestic Trimeter", FootType.ANAPEST, "9 syllables per line (3 anapests: da-da-DUM da-da-DUM da-da-DUM)"),
    MeterPattern("Dactylic Hexameter", FootType.DACTYL, "17-18 syllables per line (6 dactyls: DUM-da-da DUM-da-da...)"),
    MeterPattern("Dactylic Tetrameter", FootType.DACTYL, "12 syllables per line (4 dactyls: DUM-da-da DUM-da-da DUM-da-da DUM-da-da)"),
)


def meter_info(name: str) -> Optional[MeterPattern]:
    """Return the description of a named meter, if it is a known one."""

    for pattern in METER_PATTERNS:
        if pattern.name == name:
            return pattern
    return None


def foot_sort_key(foot: FootType, score: int) -> Tuple[int, int]:
    """Ordering key for candidate feet: higher score first, then priority."""

    return (-score, _FOOT_PRIORITY[foot])


def best_foot(scores: Mapping[FootType, int]) -> Tuple[FootType, int]:
    foot = min(scores, key=lambda candidate: foot_sort_key(candidate, scores[candidate]))
    return foot, scores[foot]


def score_foot(stresses: Sequence[int], foot: FootType) -> int:
    """Count non-overlapping windows from offset 0 that match ``foot`` exactly.

    Any level of 1 or more counts as stressed; a trailing partial window is
    ignored.
    """

    binary = [1 if level >= 1 else 0 for level in stresses]
    size = foot.length
    template = list(foot.template)
    return sum(
        1
        for start in range(0, len(binary) - size + 1, size)
        if binary[start : start + size] == template
    )


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def length_name(feet: int) -> str:
    return LENGTH_NAMES.get(feet, f"{feet}-meter")


def classify_line(stresses: Union[StressSequence, Sequence[int]]) -> MeterLabel:
    """Classify one line's stress sequence as a named meter."""

    if not isinstance(stresses, StressSequence):
        stresses = StressSequence(tuple(stresses))

    scores = {foot: score_foot(stresses.stresses, foot) for foot in SCORED_FEET}
    foot, score = best_foot(scores)
    if score == 0:
        return MeterLabel(FootType.NONE, 0, FREE_VERSE)

    feet = round_half_up(len(stresses) / foot.length)
    return MeterLabel(foot, feet, f"{foot.adjective} {length_name(feet)}")


def syllable_count_label(count: int) -> MeterLabel:
    """Best-guess meter from a line's syllable count alone."""

    known = SYLLABLE_COUNT_METERS.get(count)
    if known is None:
        return MeterLabel(FootType.NONE, 0, f"{count} syllables per line")
    foot, feet, name = known
    return MeterLabel(foot, feet, name)


def dominant_label(names: Sequence[str]) -> Tuple[str, int]:
    """Most frequent name; ties go to the name that appeared first."""

    counts: Dict[str, int] = {}
    for name in names:
        counts[name] = counts.get(name, 0) + 1

    best_name = names[0]
    for name, count in counts.items():
        if count > counts[best_name]:
            best_name = name
    return best_name, counts[best_name]


def summarize(
    per_line: Sequence[Optional[MeterLabel]],
    *,
    has_unknown_words: bool = False,
    degraded: bool = False,
) -> TextMeter:
    """Aggregate per-line labels into the whole-text verdict.

    ``None`` entries (blank lines) are left out of the tally.
    """

    names = [label.name for label in per_line if label is not None]
    if not names:
        return TextMeter(per_line=tuple(per_line), overall=NO_TEXT, degraded=degraded)

    dominant, count = dominant_label(names)
    consistency = count / len(names)

    if consistency >= STRICT_CONSISTENCY:
        overall = dominant
    elif consistency >= LOOSE_CONSISTENCY:
        overall = f"{dominant} {WITH_VARIATIONS}"
    else:
        overall = MIXED_OR_FREE_VERSE

    if has_unknown_words and not degraded:
        overall = f"{overall} {SOME_WORDS_UNKNOWN}"

    return TextMeter(
        per_line=tuple(per_line),
        overall=overall,
        dominant=dominant,
        consistency=consistency,
        has_unknown_words=has_unknown_words,
        degraded=degraded,
    )


def classify_text(
    text: str,
    resolver: PronunciationResolver,
    *,
    degraded: Optional[bool] = None,
) -> TextMeter:
    """Classify every line of ``text`` and aggregate.

    ``degraded`` defaults to whether ``resolver`` lacks a dictionary; in that
    mode lines are labelled by syllable count alone.
    """

    require_text(text)
    if degraded is None:
        degraded = resolver.is_degraded

    per_line: List[Optional[MeterLabel]] = []
    has_unknown = False
    for line in split_lines(text):
        sequence = resolver.resolve_line(line)
        if not len(sequence):
            per_line.append(None)
            continue
        has_unknown = has_unknown or sequence.has_unknown_words
        per_line.append(syllable_count_label(len(sequence)) if degraded else classify_line(sequence))

    if degraded:
        _logger.debug("Meter classified by syllable count", context={"lines": len(per_line)})
    return summarize(per_line, has_unknown_words=has_unknown, degraded=degraded)


__all__ = [
    "FREE_VERSE",
    "LENGTH_NAMES",
    "METER_PATTERNS",
    "MIXED_OR_FREE_VERSE",
    "MeterPattern",
    "NO_TEXT",
    "SCORED_FEET",
    "SYLLABLE_COUNT_METERS",
    "best_foot",
    "classify_line",
    "classify_text",
    "dominant_label",
    "foot_sort_key",
    "length_name",
    "meter_info",
    "round_half_up",
    "score_foot",
    "summarize",
    "syllable_count_label",
]
