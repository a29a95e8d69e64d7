"""Word to syllables and stress levels, with a spelling heuristic on a miss."""

from __future__ import annotations

from typing import List, Optional, Tuple

from verse_prosody.utils.observability import get_logger
from verse_prosody.utils.syllables import estimate_syllable_count, spell_syllables
from verse_prosody.utils.text import WordToken, normalize_word, require_text, tokenize_line

from .cmudict_loader import PronunciationStore
from .models import Pronunciation, PronunciationSource, Resolution, StressSequence

_logger = get_logger(__name__).bind(component="resolver")


class PronunciationResolver:
    """Resolve words against a loaded :class:`PronunciationStore`.

    ``store`` may be ``None`` (dataset still loading or unavailable); every
    word then takes the heuristic path. Resolution never raises for a string
    argument.
    """

    def __init__(self, store: Optional[PronunciationStore] = None) -> None:
        self.store = store

    @property
    def is_degraded(self) -> bool:
        return self.store is None

    def _from_dictionary(self, word: str) -> Optional[Resolution]:
        if self.store is None:
            return None
        entry = self.store.lookup(word)
        if entry is None:
            return None
        pronunciation = entry.canonical
        return Resolution(
            word=word,
            stresses=pronunciation.stresses,
            syllables=tuple(syllable.text for syllable in pronunciation.syllables),
            source=PronunciationSource.DICTIONARY,
            pronunciation=pronunciation,
        )

    @staticmethod
    def _from_spelling(word: str) -> Resolution:
        count = estimate_syllable_count(word)
        return Resolution(
            word=word,
            stresses=(1,) * count,
            syllables=tuple(spell_syllables(word, count)),
            source=PronunciationSource.HEURISTIC,
        )

    def _resolve_compound(self, word: str, parts: List[str]) -> Resolution:
        resolved = [self._resolve_simple(part) for part in parts]
        heuristic = any(part.source is PronunciationSource.HEURISTIC for part in resolved)
        pronunciation = None
        if not heuristic:
            phones: Tuple[str, ...] = ()
            for part in resolved:
                phones += part.pronunciation.phones
            pronunciation = Pronunciation(phones)
        return Resolution(
            word=word,
            stresses=tuple(level for part in resolved for level in part.stresses),
            syllables=tuple(text for part in resolved for text in part.syllables),
            source=PronunciationSource.HEURISTIC if heuristic else PronunciationSource.DICTIONARY,
            pronunciation=pronunciation,
        )

    def _resolve_simple(self, word: str) -> Resolution:
        return self._from_dictionary(word) or self._from_spelling(word)

    def resolve(self, word: str) -> Resolution:
        """Return stresses and syllables for ``word``.

        Hyphenated compounds missing from the dictionary resolve part by part
        and concatenate. Words with no letters resolve to zero syllables.
        """

        require_text(word, "word")
        normalized = normalize_word(word)
        if not any(ch.isalpha() for ch in normalized):
            return Resolution(normalized, (), (), PronunciationSource.HEURISTIC)

        found = self._from_dictionary(normalized)
        if found is not None:
            return found

        parts = [part for part in normalized.split("-") if any(ch.isalpha() for ch in part)]
        if len(parts) > 1:
            return self._resolve_compound(normalized, parts)
        return self._from_spelling(normalized)

    def syllables(self, word: str) -> List[str]:
        """Syllable texts: phonemes for dictionary words, letter chunks otherwise."""

        return list(self.resolve(word).syllables)

    def stress_sequence(self, word: str) -> StressSequence:
        return StressSequence.from_resolutions([self.resolve(word)])

    def resolve_tokens(self, line: str) -> List[Tuple[WordToken, Resolution]]:
        return [(token, self.resolve(token.normalized)) for token in tokenize_line(line)]

    def resolve_line(self, line: str) -> StressSequence:
        """Concatenate the stress levels of every word of ``line``."""

        sequence = StressSequence.from_resolutions(
            resolution for _, resolution in self.resolve_tokens(line)
        )
        if sequence.has_unknown_words:
            _logger.debug(
                "Heuristic syllabification used",
                context={"unknown_words": list(sequence.unknown_words)},
            )
        return sequence

    def line_syllable_count(self, line: str) -> int:
        return len(self.resolve_line(line))


__all__ = ["PronunciationResolver"]
