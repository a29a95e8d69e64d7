"""Presentation helpers: syllable counts, syllable forms and stress marks."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple, Union

from verse_prosody.utils.text import require_text, split_lines

from .models import Resolution, StressSequence
from .resolver import PronunciationResolver

STRESS_NOTATION: Dict[int, str] = {0: "u", 1: "'", 2: ","}

SYLLABLE_PATTERNS: Dict[str, Tuple[int, ...]] = {
    "Haiku": (5, 7, 5),
    "Tanka": (5, 7, 5, 7, 7),
    "Cinquain": (2, 4, 6, 8, 2),
}


@dataclass(frozen=True)
class LineStressAnalysis:
    line: str
    words: Tuple[str, ...]
    stresses: StressSequence
    notation: str
    syllable_count: int
    unknown_words: Tuple[str, ...]

    @property
    def has_unknown_words(self) -> bool:
        return bool(self.unknown_words)


@dataclass(frozen=True)
class StressMark:
    """One character of a line with the stress of the syllable it belongs to."""

    char: str
    stress: int
    is_unknown: bool = False


@dataclass(frozen=True)
class SyllablePatternCheck:
    expected: Tuple[int, ...]
    actual: Tuple[int, ...]

    @property
    def matches(self) -> bool:
        return self.actual == self.expected

    @property
    def line_matches(self) -> Tuple[bool, ...]:
        return tuple(
            index < len(self.actual) and self.actual[index] == count
            for index, count in enumerate(self.expected)
        )


@dataclass(frozen=True)
class SyllableConsistency:
    is_consistent: bool
    variance: float
    average: float


def stress_pattern_to_string(stresses: Sequence[int]) -> str:
    """Render stresses as ``'`` (primary), ``,`` (secondary) and ``u``."""

    return "".join(STRESS_NOTATION.get(level, "u") for level in stresses)


def analyze_line(line: str, resolver: PronunciationResolver) -> LineStressAnalysis:
    pairs = resolver.resolve_tokens(line)
    stresses = StressSequence.from_resolutions(resolution for _, resolution in pairs)
    return LineStressAnalysis(
        line=line,
        words=tuple(token.normalized for token, _ in pairs),
        stresses=stresses,
        notation=stress_pattern_to_string(stresses),
        syllable_count=len(stresses),
        unknown_words=stresses.unknown_words,
    )


def line_syllable_counts(text: str, resolver: PronunciationResolver) -> List[int]:
    """Syllables per line of ``text``; blank lines count zero."""

    return [resolver.line_syllable_count(line) for line in split_lines(text)]


def _nonblank_counts(text: str, resolver: PronunciationResolver) -> Tuple[int, ...]:
    return tuple(count for count in line_syllable_counts(text, resolver) if count > 0)


def check_syllable_pattern(
    text: str,
    pattern: Union[str, Sequence[int]],
    resolver: PronunciationResolver,
) -> SyllablePatternCheck:
    """Compare nonblank line syllable counts with a named or explicit pattern."""

    if isinstance(pattern, str):
        try:
            expected = SYLLABLE_PATTERNS[pattern]
        except KeyError:
            raise ValueError(f"unknown syllable pattern {pattern!r}") from None
    else:
        expected = tuple(int(count) for count in pattern)
    return SyllablePatternCheck(expected=expected, actual=_nonblank_counts(text, resolver))


def is_haiku(text: str, resolver: PronunciationResolver) -> bool:
    return check_syllable_pattern(text, "Haiku", resolver).matches


def syllable_consistency(text: str, resolver: PronunciationResolver) -> SyllableConsistency:
    """Mean and population variance of nonblank line syllable counts."""

    counts = _nonblank_counts(text, resolver)
    if not counts:
        return SyllableConsistency(is_consistent=False, variance=0.0, average=0.0)
    average = sum(counts) / len(counts)
    variance = sum((count - average) ** 2 for count in counts) / len(counts)
    return SyllableConsistency(
        is_consistent=variance < 2,
        variance=round(variance, 2),
        average=round(average, 1),
    )


def _syllable_offsets(length: int, syllables: int) -> List[int]:
    # Floor-based boundaries, matching spell_syllables.
    per_syllable = length / syllables
    return [math.floor(index * per_syllable) for index in range(syllables)]


def _word_marks(text: str, resolution: Resolution) -> List[StressMark]:
    stresses = resolution.stresses
    if not stresses:
        return [StressMark(char, 0) for char in text]

    offsets = _syllable_offsets(len(text), len(stresses)) + [len(text)]
    marks: List[StressMark] = []
    for index, stress in enumerate(stresses):
        for char in text[offsets[index] : offsets[index + 1]]:
            marks.append(StressMark(char, stress, resolution.is_unknown))
    return marks


def stress_visualization(line: str, resolver: PronunciationResolver) -> List[StressMark]:
    """One :class:`StressMark` per character of ``line``.

    Separators carry stress 0. A word's syllables are spread evenly over its
    characters.
    """

    require_text(line, "line")
    marks: List[StressMark] = []
    cursor = 0
    for token, resolution in resolver.resolve_tokens(line):
        marks.extend(StressMark(char, 0) for char in line[cursor : token.start])
        marks.extend(_word_marks(line[token.start : token.end], resolution))
        cursor = token.end
    marks.extend(StressMark(char, 0) for char in line[cursor:])
    return marks


def render_scansion(line: str, resolver: PronunciationResolver) -> str:
    """A mark line to print under ``line``: one stress mark per syllable.

    Each mark sits at the first character of its syllable inside the word's
    span, e.g. ``"the day"`` renders as ``"u   '"``.
    """

    require_text(line, "line")
    row = [" "] * len(line)
    for token, resolution in resolver.resolve_tokens(line):
        if not resolution.stresses:
            continue
        offsets = _syllable_offsets(token.end - token.start, len(resolution.stresses))
        for offset, level in zip(offsets, resolution.stresses):
            position = min(token.start + offset, token.end - 1)
            row[position] = STRESS_NOTATION[level]
    return "".join(row).rstrip()


__all__ = [
    "LineStressAnalysis",
    "STRESS_NOTATION",
    "SYLLABLE_PATTERNS",
    "StressMark",
    "SyllableConsistency",
    "SyllablePatternCheck",
    "analyze_line",
    "check_syllable_pattern",
    "is_haiku",
    "line_syllable_counts",
    "render_scansion",
    "stress_pattern_to_string",
    "syllable_consistency",
]
