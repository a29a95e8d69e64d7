import pytest

from verse_prosody.core import PronunciationSource
from verse_prosody.utils.syllables import estimate_syllable_count


def test_dictionary_words_resolve_to_canonical_variant(resolver):
    resolution = resolver.resolve("The")

    assert resolution.source is PronunciationSource.DICTIONARY
    assert resolution.stresses == (0,)
    assert not resolution.is_unknown


def test_punctuation_is_stripped_before_lookup(resolver):
    assert resolver.resolve("Splash!").stresses == (1,)
    assert resolver.resolve("“Day,”").source is PronunciationSource.DICTIONARY


def test_stress_and_syllable_lengths_agree_for_every_entry(resolver, store):
    for word in store:
        assert len(resolver.resolve(word)) == len(resolver.syllables(word)), word


def test_dictionary_syllables_are_phoneme_groups(resolver):
    assert resolver.syllables("silent") == ["S AY1", "L AH0 N T"]


def test_unknown_word_uses_heuristic_with_full_stress(resolver):
    resolution = resolver.resolve("zorbling")

    assert resolution.source is PronunciationSource.HEURISTIC
    assert resolution.is_unknown
    assert resolution.stresses == (1,) * estimate_syllable_count("zorbling")
    assert len(resolution.syllables) == len(resolution.stresses)
    assert "".join(resolution.syllables) == "zorbling"


def test_hyphenated_compound_concatenates_parts(resolver):
    known = resolver.resolve("sun-day")
    assert known.stresses == (1, 1)
    assert known.source is PronunciationSource.DICTIONARY
    assert known.pronunciation.phones == ("S", "AH1", "N", "D", "EY1")

    partly_unknown = resolver.resolve("sun-zorb")
    assert partly_unknown.source is PronunciationSource.HEURISTIC
    assert partly_unknown.stresses == (1, 1)


def test_words_without_letters_have_no_syllables(resolver):
    resolution = resolver.resolve("...")

    assert resolution.stresses == ()
    assert not resolution.is_unknown


def test_resolve_line_flags_unknown_words(resolver):
    sequence = resolver.resolve_line("The zorbling day")

    assert sequence.stresses[0] == 0
    assert sequence.stresses[-1] == 1
    assert sequence.has_unknown_words
    assert sequence.unknown_words == ("zorbling",)


def test_blank_line_has_no_syllables(resolver):
    sequence = resolver.resolve_line("   ")

    assert len(sequence) == 0
    assert not sequence.has_unknown_words


def test_resolver_without_store_is_degraded(degraded_resolver):
    resolution = degraded_resolver.resolve("day")

    assert degraded_resolver.is_degraded
    assert resolution.source is PronunciationSource.HEURISTIC
    assert resolution.stresses == (1,)


def test_non_string_input_fails_fast(resolver):
    with pytest.raises(TypeError):
        resolver.resolve(None)
    with pytest.raises(TypeError):
        resolver.resolve_line(42)
