"""Rhyme fingerprints, end-rhyme labelling, form compliance and internal rhymes.

A fingerprint is the stress-stripped phoneme tail of a word starting at its
last primary or secondary stressed vowel (the last vowel of any stress when a
word has none). Two fingerprints are a *perfect* rhyme when the tails are
identical and a *slant* rhyme when only the vowel opening the tail agrees, where
"agrees" is decided by a :class:`SlantPolicy`.
"""

from __future__ import annotations

import re
import string
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union

from verse_prosody.utils.observability import get_logger
from verse_prosody.utils.text import require_text, split_lines, tokenize_line, trailing_word

from .models import (
    UNLABELED,
    ComplianceStatus,
    InternalRhyme,
    LineCompliance,
    LineRhyme,
    Pronunciation,
    RhymeFingerprint,
    RhymeQuality,
    RhymeScheme,
    phone_stress,
    strip_stress,
)
from .resolver import PronunciationResolver

_logger = get_logger(__name__).bind(component="rhyme_scheme")


@dataclass(frozen=True)
class SlantPolicy:
    """Which stressed vowels count as "the same" for a slant rhyme."""

    name: str = "exact"
    related_vowels: Tuple[FrozenSet[str], ...] = field(default=())

    def same_class(self, first: str, second: str) -> bool:
        if first == second:
            return True
        return any(first in group and second in group for group in self.related_vowels)

    @classmethod
    def from_name(cls, name: str) -> "SlantPolicy":
        try:
            return SLANT_POLICIES[name.strip().lower()]
        except KeyError:
            raise ValueError(
                f"unknown slant policy {name!r}; expected one of {sorted(SLANT_POLICIES)}"
            ) from None


EXACT_VOWELS = SlantPolicy("exact")
RELATED_VOWELS = SlantPolicy(
    "related",
    (
        frozenset({"AH", "EH"}),
        frozenset({"IH", "IY"}),
        frozenset({"UH", "UW"}),
    ),
)
SLANT_POLICIES = {policy.name: policy for policy in (EXACT_VOWELS, RELATED_VOWELS)}


# Spelling endings -> approximate rhyme tail, tried in order.
_SPELLING_TAILS: Tuple[Tuple[re.Pattern, Tuple[str, ...]], ...] = tuple(
    (re.compile(pattern), tuple(phones.split()))
    for pattern, phones in (
        (r"(ay|ey|eigh|ae)$", "EY1"),
        (r"(ee|ea|ie)$", "IY1"),
        (r"[^aeiou]y$", "IY1"),
        (r"(ow|ough|oe|eau)$", "OW1"),
        (r"(ue|ew|oo|ou)$", "UW1"),
        (r"(ade|aid|ayed)$", "EY1 D"),
        (r"ate$", "EY1 T"),
        (r"(ine|ign)$", "AY1 N"),
        (r"ight$", "AY1 T"),
        (r"ound$", "AW1 N D"),
        (r"own$", "OW1 N"),
        (r"(and|anned)$", "AE1 N D"),
        (r"end$", "EH1 N D"),
        (r"(ind|ined)$", "AY1 N D"),
        (r"ead$", "EH1 D"),
        (r"[^aeiou]ed$", "EH1 D"),
        (r"(ome|oam)$", "OW1 M"),
        (r"oom$", "UW1 M"),
        (r"(air|are|ear)$", "EH1 R"),
        (r"(eer|ere)$", "IY1 R"),
        (r"(ore|oar|our)$", "AO1 R"),
        (r"(ire|yre)$", "AY1 R"),
        (r"^(do|who|two|through)$", "UW1"),
        (r"(tion|sion)$", "SH AH0 N"),
        (r"(ious|eous)$", "IY0 AH0 S"),
        (r"ble$", "B AH0 L"),
        (r"ple$", "P AH0 L"),
        (r"tle$", "T AH0 L"),
        (r"ck$", "AH1 K"),
        (r"ass$", "AE1 S"),
        (r"ess$", "EH1 S"),
        (r"iss$", "IH1 S"),
        (r"oss$", "AO1 S"),
        (r"uss$", "AH1 S"),
        (r"ent$", "EH1 N T"),
    )
)

# Common words that rarely carry an intentional internal rhyme.
FUNCTION_WORDS: FrozenSet[str] = frozenset(
    "the and but for are was were has had have is it as at to of in or be so no if an by do we he me a".split()
)

FORM_SCHEMES: Dict[str, str] = {
    "Shakespearean Sonnet": "ABABCDCDEFEFGG",
    "Petrarchan Sonnet": "ABBAABBACDECDE",
    "Spenserian Sonnet": "ABABBCBCCDCDEE",
    "Limerick": "AABBA",
    "Villanelle": "ABA" * 5 + "ABAA",
    "Ottava Rima": "ABABABCC",
    "Terza Rima": "ABABCBCDC",
    "Ballad Stanza": "ABCB",
    "Quatrain (Alternate)": "ABAB",
    "Quatrain (Enclosed)": "ABBA",
    "Quatrain (Couplet)": "AABB",
    "Couplet": "AA",
}


def expected_scheme(form: str) -> str:
    """Return the rhyme template of a named form, e.g. ``"Limerick"``."""

    try:
        return FORM_SCHEMES[form]
    except KeyError:
        raise ValueError(f"unknown form {form!r}") from None


def scheme_label(index: int) -> str:
    """0 -> ``A`` ... 25 -> ``Z``, 26 -> ``AA``."""

    letters = string.ascii_uppercase
    label = ""
    index += 1
    while index:
        index, remainder = divmod(index - 1, 26)
        label = letters[remainder] + label
    return label


def _tail_start(phones: Sequence[str]) -> Optional[int]:
    fallback = None
    for index in range(len(phones) - 1, -1, -1):
        stress = phone_stress(phones[index])
        if stress is None:
            continue
        if stress >= 1:
            return index
        if fallback is None:
            fallback = index
    return fallback


def fingerprint_from_pronunciation(
    word: str, pronunciation: Pronunciation, *, approximate: bool = False
) -> Optional[RhymeFingerprint]:
    phones = pronunciation.phones
    start = _tail_start(phones)
    if start is None:
        return None
    tail = phones[start:]
    return RhymeFingerprint(
        word=word,
        phonemes=tuple(strip_stress(phone) for phone in tail),
        stresses=tuple(s for s in (phone_stress(phone) for phone in tail) if s is not None),
        approximate=approximate,
    )


def approximate_fingerprint(word: str) -> Optional[RhymeFingerprint]:
    """Guess a rhyme tail from the spelling of ``word``."""

    letters = re.sub(r"[^a-z]", "", word.lower())
    for pattern, phones in _SPELLING_TAILS:
        if pattern.search(letters):
            return fingerprint_from_pronunciation(word, Pronunciation(phones), approximate=True)
    return None


def _rhyme_part(word: str) -> str:
    parts = [part for part in word.split("-") if any(ch.isalpha() for ch in part)]
    return parts[-1] if parts else word


def fingerprint(
    word: str,
    resolver: PronunciationResolver,
    *,
    spelling_fallback: bool = False,
) -> Optional[RhymeFingerprint]:
    """Fingerprint a single word; hyphenated words rhyme on their last part."""

    require_text(word, "word")
    resolution = resolver.resolve(word)
    if not resolution.stresses:
        return None
    if resolution.pronunciation is None:
        part = _rhyme_part(resolution.word)
        if part != resolution.word:
            resolution = resolver.resolve(part)
    if resolution.pronunciation is not None:
        return fingerprint_from_pronunciation(resolution.word, resolution.pronunciation)
    if spelling_fallback:
        return approximate_fingerprint(resolution.word)
    return None


def compare(
    first: Optional[RhymeFingerprint],
    second: Optional[RhymeFingerprint],
    policy: SlantPolicy = EXACT_VOWELS,
) -> RhymeQuality:
    """Perfect when tails are identical, slant when only the stressed vowel agrees."""

    if first is None or second is None:
        return RhymeQuality.NONE
    if first.phonemes == second.phonemes:
        return RhymeQuality.PERFECT
    first_vowel, second_vowel = first.nucleus, second.nucleus
    if first_vowel and second_vowel and policy.same_class(first_vowel, second_vowel):
        return RhymeQuality.SLANT
    return RhymeQuality.NONE


def _end_fingerprint(
    line: str,
    resolver: PronunciationResolver,
    spelling_fallback: bool,
) -> Tuple[Optional[str], Optional[RhymeFingerprint]]:
    token = trailing_word(line)
    if token is None:
        return None, None
    return token.normalized, fingerprint(
        token.normalized, resolver, spelling_fallback=spelling_fallback
    )


def _require_lines(lines: Sequence[str]) -> List[str]:
    if isinstance(lines, str):
        raise TypeError("lines must be a sequence of str, not a single str")
    return [require_text(line, "line") for line in lines]


def assign_scheme(
    lines: Sequence[str],
    resolver: PronunciationResolver,
    *,
    policy: SlantPolicy = EXACT_VOWELS,
    spelling_fallback: bool = False,
) -> RhymeScheme:
    """Greedily label line endings ``A``, ``B``, ``C`` ... in first-appearance order.

    Each line joins the first earlier labelled line it rhymes with perfectly,
    otherwise the first it slant-rhymes with, otherwise opens a new label.
    Lines without a fingerprint get ``X`` and stay out of every group.
    """

    checked = _require_lines(lines)
    entries: List[LineRhyme] = []
    groups: Dict[str, List[int]] = {}
    labelled: List[LineRhyme] = []

    for index, line in enumerate(checked):
        word, tail = _end_fingerprint(line, resolver, spelling_fallback)
        if tail is None:
            entries.append(LineRhyme(index, word, UNLABELED, RhymeQuality.NONE))
            continue

        match: Optional[LineRhyme] = None
        quality = RhymeQuality.NONE
        for previous in labelled:
            candidate = compare(tail, previous.fingerprint, policy)
            if candidate is RhymeQuality.PERFECT:
                match, quality = previous, candidate
                break
            if candidate is RhymeQuality.SLANT and match is None:
                match, quality = previous, candidate

        if match is None:
            label = scheme_label(len(groups))
            entry = LineRhyme(index, word, label, RhymeQuality.NONE, tail)
        else:
            label = match.label
            entry = LineRhyme(index, word, label, quality, tail, matched_line=match.line)

        groups.setdefault(label, []).append(index)
        entries.append(entry)
        labelled.append(entry)

    return RhymeScheme(
        lines=tuple(entries),
        label_groups={label: tuple(members) for label, members in groups.items()},
    )


def parse_scheme(expected: Union[str, Sequence[str]]) -> List[str]:
    """Normalize an expected scheme such as ``"ABAB CDCD"`` to a label list."""

    text = expected if isinstance(expected, str) else "".join(expected)
    labels = [ch for ch in text.upper() if not ch.isspace()]
    invalid = sorted({ch for ch in labels if ch not in string.ascii_uppercase})
    if invalid:
        raise ValueError(f"expected scheme may only contain letters A-Z, got {invalid!r}")
    return labels


def check_form_compliance(
    lines: Sequence[str],
    expected: Union[str, Sequence[str]],
    resolver: PronunciationResolver,
    *,
    policy: SlantPolicy = EXACT_VOWELS,
    spelling_fallback: bool = False,
) -> List[LineCompliance]:
    """Check each line against the rhyme partners its expected label implies.

    One result per expected label. Lines missing from ``lines`` count as
    empty; lines beyond the template are ignored. The earliest line of a
    label is compared with later filled partners, every other line with its
    earlier partners.
    """

    checked = _require_lines(lines)
    template = parse_scheme(expected)

    ends: List[Tuple[Optional[str], Optional[RhymeFingerprint]]] = [
        _end_fingerprint(checked[index], resolver, spelling_fallback)
        if index < len(checked)
        else (None, None)
        for index in range(len(template))
    ]

    positions: Dict[str, List[int]] = defaultdict(list)
    for index, label in enumerate(template):
        positions[label].append(index)

    results: List[LineCompliance] = []
    for index, label in enumerate(template):
        word, tail = ends[index]
        same_label = positions[label]
        if index == same_label[0]:
            partners = [other for other in same_label if other != index]
        else:
            partners = [other for other in same_label if other < index]
        # Words without a fingerprint cannot be judged yet, e.g. before the store loads.
        filled = [other for other in partners if ends[other][1] is not None]

        if tail is None or not filled:
            results.append(LineCompliance(index, label, word, ComplianceStatus.PENDING))
            continue

        qualities = {other: compare(tail, ends[other][1], policy) for other in filled}
        perfect = tuple(o for o in filled if qualities[o] is RhymeQuality.PERFECT)
        slant = tuple(o for o in filled if qualities[o] is RhymeQuality.SLANT)
        if perfect:
            results.append(LineCompliance(index, label, word, ComplianceStatus.CORRECT, perfect))
        elif slant:
            results.append(LineCompliance(index, label, word, ComplianceStatus.SLANT, slant))
        else:
            results.append(LineCompliance(index, label, word, ComplianceStatus.INCORRECT))
    return results


@dataclass(frozen=True)
class _Occurrence:
    word: str
    line: int
    position: int


def internal_rhymes(
    text: str,
    resolver: PronunciationResolver,
    *,
    max_line_distance: Optional[int] = None,
    skip_words: Optional[Iterable[str]] = None,
    spelling_fallback: bool = False,
) -> List[InternalRhyme]:
    """Report every pair of word occurrences in ``text`` that rhyme perfectly.

    Each unordered pair appears once, sorted by the first occurrence's line
    and position. Repeats of the same word are not rhymes. ``position`` is
    the word index within its line.
    """

    require_text(text)
    skipped = frozenset(skip_words or ())
    prints: Dict[str, Optional[RhymeFingerprint]] = {}
    buckets: Dict[Tuple[str, ...], List[_Occurrence]] = defaultdict(list)

    for line_index, line in enumerate(split_lines(text)):
        for position, token in enumerate(tokenize_line(line)):
            word = token.normalized
            if word in skipped:
                continue
            if word not in prints:
                prints[word] = fingerprint(word, resolver, spelling_fallback=spelling_fallback)
            tail = prints[word]
            if tail is not None:
                buckets[tail.phonemes].append(_Occurrence(word, line_index, position))

    rhymes: List[InternalRhyme] = []
    for occurrences in buckets.values():
        for offset, first in enumerate(occurrences):
            for second in occurrences[offset + 1 :]:
                if first.word == second.word:
                    continue
                if max_line_distance is not None and second.line - first.line > max_line_distance:
                    continue
                rhymes.append(
                    InternalRhyme(
                        word1=first.word,
                        word2=second.word,
                        line1=first.line,
                        line2=second.line,
                        position1=first.position,
                        position2=second.position,
                    )
                )

    rhymes.sort(key=lambda r: (r.line1, r.position1, r.line2, r.position2))
    _logger.debug("Internal rhymes detected", context={"pairs": len(rhymes)})
    return rhymes


def identify_scheme_type(labels: Sequence[str]) -> str:
    """Name a label sequence such as ``ABAB`` or ``AABBA``."""

    if not labels:
        return "No rhyme scheme"

    pattern = "".join(labels)
    total = len(labels)

    if total == 4 and pattern == "AABB":
        return "Quatrain - Couplet (AABB)"
    pairs = [pattern[index : index + 2] for index in range(0, total, 2)]
    if (
        total % 2 == 0
        and all(pair[0] == pair[1] != UNLABELED for pair in pairs)
        and len({pair[0] for pair in pairs}) == len(pairs)
    ):
        return "Couplets (AA BB...)"
    if re.fullmatch(r"(ABAB)+", pattern):
        return "Alternate Rhyme (ABAB)"
    if re.fullmatch(r"(ABBA)+", pattern):
        return "Enclosed Rhyme (ABBA)"
    if re.fullmatch(r"A+", pattern):
        return "Monorhyme (AAAA...)"
    if re.fullmatch(r"ABA(BCB)*(CDC)*", pattern):
        return "Terza Rima (ABA BCB CDC)"

    if pattern == "AABBA":
        return "Limerick (AABBA)"

    if total == 14:
        if pattern == "ABBAABBACDCDCD":
            return "Petrarchan Sonnet"
        if pattern == "ABBAABBACDECDE":
            return "Petrarchan Sonnet (variant)"
        if pattern == "ABABCDCDEFEFGG":
            return "Shakespearean Sonnet"
        if pattern == "ABABBCBCCDCDEE":
            return "Spenserian Sonnet"

    rhymed = [label for label in labels if label != UNLABELED]
    if len(set(rhymed)) == len(rhymed):
        return "Free Verse (No rhyme)"
    return f"Mixed Rhyme Scheme ({pattern})"


__all__ = [
    "EXACT_VOWELS",
    "FORM_SCHEMES",
    "FUNCTION_WORDS",
    "RELATED_VOWELS",
    "SLANT_POLICIES",
    "SlantPolicy",
    "approximate_fingerprint",
    "assign_scheme",
    "check_form_compliance",
    "compare",
    "expected_scheme",
    "fingerprint",
    "fingerprint_from_pronunciation",
    "identify_scheme_type",
    "internal_rhymes",
    "parse_scheme",
    "scheme_label",
]
