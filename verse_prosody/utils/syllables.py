"""Grapheme-based syllable estimation used when a word has no dictionary entry."""

from __future__ import annotations

import math
import re
from typing import List


__all__ = ["estimate_syllable_count", "spell_syllables"]


_VOWEL_GROUP_PATTERN = re.compile(r"[aeiouy]+")
_NON_LETTERS = re.compile(r"[^a-z]+")
_PLAIN_VOWELS = "aeiou"


def estimate_syllable_count(word: str) -> int:
    """Estimate the number of syllables in ``word`` from its spelling.

    Counts vowel-letter groups (``y`` included), then adjusts for a silent
    trailing ``e`` on words longer than three letters, for ``-ed``/``-es``
    endings after a consonant, and for a consonant + ``-le`` ending. The result
    never drops below one.
    """

    normalized = _NON_LETTERS.sub("", word.lower())
    count = len(_VOWEL_GROUP_PATTERN.findall(normalized))

    if normalized.endswith("e") and len(normalized) > 3:
        count -= 1

    if (
        len(normalized) >= 3
        and normalized[-2:] in ("ed", "es")
        and normalized[-3] not in _PLAIN_VOWELS
    ):
        count -= 1

    if len(normalized) > 2 and normalized.endswith("le") and normalized[-3] not in "aeiouy":
        count += 1

    return max(1, count)


def spell_syllables(word: str, count: int) -> List[str]:
    """Split the letters of ``word`` into ``count`` roughly equal chunks.

    This is a display approximation only; it keeps the original casing and
    never returns empty chunks for words at least ``count`` letters long.
    """

    if count <= 0 or not word:
        return []
    if count == 1:
        return [word]

    per_syllable = len(word) / count
    chunks: List[str] = []
    for index in range(count):
        start = math.floor(index * per_syllable)
        end = len(word) if index == count - 1 else math.floor((index + 1) * per_syllable)
        chunks.append(word[start:end])
    return chunks
