"""Dataclasses and enums describing pronunciations, meter and rhyme results."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple

_STRESS_DIGIT = re.compile(r"[012]$")

STRESS_LEVELS = (0, 1, 2)

VOWEL_PHONEMES = frozenset(
    {
        "AA",
        "AE",
        "AH",
        "AO",
        "AW",
        "AY",
        "EH",
        "ER",
        "EY",
        "IH",
        "IY",
        "OW",
        "OY",
        "UH",
        "UW",
    }
)


def phone_stress(phone: str) -> Optional[int]:
    """Return the stress digit carried by a CMU vowel phone, if any."""

    match = _STRESS_DIGIT.search(phone)
    return int(match.group(0)) if match else None


def strip_stress(phone: str) -> str:
    return _STRESS_DIGIT.sub("", phone)


class PronunciationSource(str, Enum):
    """Where a word's syllables and stresses came from."""

    DICTIONARY = "dictionary"
    HEURISTIC = "heuristic"


@dataclass(frozen=True)
class Syllable:
    """One syllable of a dictionary pronunciation."""

    phonemes: Tuple[str, ...]
    stress: int

    @property
    def text(self) -> str:
        return " ".join(self.phonemes)


@dataclass(frozen=True)
class Pronunciation:
    """An ordered CMU phone sequence, e.g. ``("T", "AY1", "M")``."""

    phones: Tuple[str, ...]

    @property
    def syllables(self) -> Tuple[Syllable, ...]:
        # Each vowel closes a syllable; trailing consonants join the last one.
        syllables: list[Syllable] = []
        pending: list[str] = []
        for phone in self.phones:
            pending.append(phone)
            stress = phone_stress(phone)
            if stress is not None:
                syllables.append(Syllable(tuple(pending), stress))
                pending = []
        if pending and syllables:
            last = syllables[-1]
            syllables[-1] = Syllable(last.phonemes + tuple(pending), last.stress)
        return tuple(syllables)

    @property
    def stresses(self) -> Tuple[int, ...]:
        return tuple(
            stress for stress in (phone_stress(phone) for phone in self.phones) if stress is not None
        )


@dataclass(frozen=True)
class PronunciationEntry:
    """All known pronunciations of a normalized word; variant 0 is canonical."""

    word: str
    variants: Tuple[Pronunciation, ...]

    @property
    def canonical(self) -> Pronunciation:
        return self.variants[0]


@dataclass(frozen=True)
class Resolution:
    """Result of resolving one word, tagged with its source."""

    word: str
    stresses: Tuple[int, ...]
    syllables: Tuple[str, ...]
    source: PronunciationSource
    pronunciation: Optional[Pronunciation] = None

    @property
    def is_unknown(self) -> bool:
        return self.source is PronunciationSource.HEURISTIC and bool(self.stresses)

    def __len__(self) -> int:
        return len(self.stresses)


@dataclass(frozen=True)
class StressSequence:
    """Stress levels for one line, in reading order."""

    stresses: Tuple[int, ...] = ()
    unknown_words: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        stresses = tuple(self.stresses)
        for level in stresses:
            if level not in STRESS_LEVELS:
                raise ValueError(f"stress level must be 0, 1 or 2, got {level!r}")
        object.__setattr__(self, "stresses", stresses)
        object.__setattr__(self, "unknown_words", tuple(self.unknown_words))

    @classmethod
    def from_resolutions(cls, resolutions: Iterable[Resolution]) -> "StressSequence":
        stresses: list[int] = []
        unknown: list[str] = []
        for resolution in resolutions:
            stresses.extend(resolution.stresses)
            if resolution.is_unknown:
                unknown.append(resolution.word)
        return cls(tuple(stresses), tuple(unknown))

    @property
    def has_unknown_words(self) -> bool:
        return bool(self.unknown_words)

    def __len__(self) -> int:
        return len(self.stresses)

    def __iter__(self) -> Iterator[int]:
        return iter(self.stresses)

    def __getitem__(self, index: int) -> int:
        return self.stresses[index]


class FootType(Enum):
    """Metrical feet in tie-break priority order."""

    IAMB = ("Iambic", (0, 1))
    TROCHEE = ("Trochaic", (1, 0))
    ANAPEST = ("Anapestic", (0, 0, 1))
    DACTYL = ("Dactylic", (1, 0, 0))
    NONE = ("", ())

    def __init__(self, adjective: str, template: Tuple[int, ...]) -> None:
        self.adjective = adjective
        self.template = template

    @property
    def length(self) -> int:
        return len(self.template)


@dataclass(frozen=True)
class MeterLabel:
    """Verdict for one line, e.g. ``Iambic Pentameter``."""

    foot: FootType
    feet: int
    name: str

    @property
    def is_free_verse(self) -> bool:
        return self.foot is FootType.NONE

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class TextMeter:
    """Whole-text meter verdict with the per-line labels it was built from.

    ``per_line`` has one entry per input line; blank lines hold ``None``.
    """

    per_line: Tuple[Optional[MeterLabel], ...]
    overall: str
    dominant: Optional[str] = None
    consistency: float = 0.0
    has_unknown_words: bool = False
    degraded: bool = False


class RhymeQuality(str, Enum):
    PERFECT = "perfect"
    SLANT = "slant"
    NONE = "none"


@dataclass(frozen=True)
class RhymeFingerprint:
    """Stress-stripped phoneme tail from the last stressed vowel onwards."""

    word: str
    phonemes: Tuple[str, ...]
    stresses: Tuple[int, ...] = ()
    approximate: bool = False

    @property
    def nucleus(self) -> Optional[str]:
        """The vowel that opens the tail, i.e. the stressed vowel."""

        for phone in self.phonemes:
            if phone in VOWEL_PHONEMES:
                return phone
        return None

    @property
    def key(self) -> str:
        return " ".join(self.phonemes)


@dataclass(frozen=True)
class LineRhyme:
    """Rhyme label for one line. ``matched_line`` is the line it was grouped with."""

    line: int
    word: Optional[str]
    label: str
    quality: RhymeQuality
    fingerprint: Optional[RhymeFingerprint] = None
    matched_line: Optional[int] = None


UNLABELED = "X"


@dataclass(frozen=True)
class RhymeScheme:
    lines: Tuple[LineRhyme, ...]
    label_groups: Mapping[str, Tuple[int, ...]] = field(default_factory=dict)

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(entry.label for entry in self.lines)

    @property
    def qualities(self) -> Tuple[RhymeQuality, ...]:
        return tuple(entry.quality for entry in self.lines)

    @property
    def pattern(self) -> str:
        return "".join(self.labels)

    @property
    def end_words(self) -> Tuple[Optional[str], ...]:
        return tuple(entry.word for entry in self.lines)

    def as_dict(self) -> Dict[str, object]:
        return {
            "labels": list(self.labels),
            "qualities": [quality.value for quality in self.qualities],
            "end_words": list(self.end_words),
            "label_groups": {label: list(lines) for label, lines in self.label_groups.items()},
        }


class ComplianceStatus(str, Enum):
    CORRECT = "correct"
    SLANT = "slant"
    INCORRECT = "incorrect"
    PENDING = "pending"


@dataclass(frozen=True)
class LineCompliance:
    line: int
    expected: str
    word: Optional[str]
    status: ComplianceStatus
    matched_lines: Tuple[int, ...] = ()


@dataclass(frozen=True)
class InternalRhyme:
    """A perfect rhyme between two word occurrences anywhere in a text."""

    word1: str
    word2: str
    line1: int
    line2: int
    position1: int = 0
    position2: int = 0
    quality: RhymeQuality = RhymeQuality.PERFECT


__all__ = [
    "STRESS_LEVELS",
    "UNLABELED",
    "VOWEL_PHONEMES",
    "ComplianceStatus",
    "FootType",
    "InternalRhyme",
    "LineCompliance",
    "LineRhyme",
    "MeterLabel",
    "Pronunciation",
    "PronunciationEntry",
    "PronunciationSource",
    "Resolution",
    "RhymeFingerprint",
    "RhymeQuality",
    "RhymeScheme",
    "StressSequence",
    "Syllable",
    "TextMeter",
    "phone_stress",
    "strip_stress",
]
