import string

import pytest

from verse_prosody.core import PronunciationResolver, PronunciationStore, RhymeQuality
from verse_prosody.core.rhyme_scheme import (
    EXACT_VOWELS,
    RELATED_VOWELS,
    SlantPolicy,
    approximate_fingerprint,
    assign_scheme,
    compare,
    expected_scheme,
    fingerprint,
    identify_scheme_type,
    scheme_label,
)


def test_day_way_sun_fun_play(resolver):
    scheme = assign_scheme(["day", "way", "sun", "fun", "play"], resolver)

    assert list(scheme.labels) == ["A", "A", "B", "B", "A"]
    assert list(scheme.qualities) == [
        RhymeQuality.NONE,
        RhymeQuality.PERFECT,
        RhymeQuality.NONE,
        RhymeQuality.PERFECT,
        RhymeQuality.PERFECT,
    ]
    assert dict(scheme.label_groups) == {"A": (0, 1, 4), "B": (2, 3)}
    assert scheme.pattern == "AABBA"


def test_end_word_is_taken_after_trailing_punctuation(resolver):
    scheme = assign_scheme(["I saw the day,", "and went away... no, the way!"], resolver)

    assert scheme.end_words == ("day", "way")
    assert scheme.labels == ("A", "A")


def test_fingerprint_starts_at_last_stressed_vowel(resolver):
    assert fingerprint("silent", resolver).phonemes == ("AY", "L", "AH", "N", "T")
    assert fingerprint("after", resolver).phonemes == ("AE", "F", "T", "ER")
    assert fingerprint("the", resolver).phonemes == ("AH",)
    assert fingerprint("zorbix", resolver) is None


def test_hyphenated_end_word_rhymes_on_last_part(resolver):
    assert fingerprint("sun-day", resolver).phonemes == ("EY",)
    assert fingerprint("zorb-day", resolver).phonemes == ("EY",)


def test_time_and_mine_are_slant_not_perfect(resolver):
    time, mine = fingerprint("time", resolver), fingerprint("mine", resolver)

    assert compare(time, mine) is RhymeQuality.SLANT
    assert compare(time, fingerprint("time", resolver)) is RhymeQuality.PERFECT

    scheme = assign_scheme(["time", "mine"], resolver)
    assert scheme.labels == ("A", "A")
    assert scheme.qualities == (RhymeQuality.NONE, RhymeQuality.SLANT)


def test_trailing_unstressed_vowel_is_not_a_slant_rhyme(resolver):
    assert compare(fingerprint("silent", resolver), fingerprint("sun", resolver)) is RhymeQuality.NONE
    assert assign_scheme(["sun", "silent"], resolver).labels == ("A", "B")


def test_slant_compares_the_stressed_vowel():
    store = PronunciationStore.from_lines(
        ["REVEL  R EH1 V AH0 L", "UNGRATEFUL  AH0 N G R EY1 T F AH0 L", "HEAVEN  HH EH1 V AH0 N"]
    )
    resolver = PronunciationResolver(store)
    revel = fingerprint("revel", resolver)

    assert revel.nucleus == "EH"
    assert compare(revel, fingerprint("ungrateful", resolver)) is RhymeQuality.NONE
    assert compare(revel, fingerprint("heaven", resolver)) is RhymeQuality.SLANT


def test_perfect_partner_wins_over_earlier_slant_partner(resolver):
    scheme = assign_scheme(["time", "mine", "mine"], resolver)

    assert scheme.lines[2].quality is RhymeQuality.PERFECT
    assert scheme.lines[2].matched_line == 1
    assert scheme.lines[1].quality is RhymeQuality.SLANT


def test_unresolvable_lines_are_x_and_do_not_consume_letters(resolver):
    scheme = assign_scheme(["day", "zorbix", "", "sun", "way"], resolver)

    assert scheme.labels == ("A", "X", "X", "B", "A")
    assert scheme.lines[2].word is None
    assert scheme.lines[1].word == "zorbix"
    assert "X" not in scheme.label_groups


def test_labels_are_assigned_in_first_appearance_order(resolver):
    words = ["sun", "day", "night", "rose", "fun", "zorbix", "time", "prose", "way", "pen", "bright"]
    scheme = assign_scheme(words, resolver)

    seen = []
    for entry in scheme.lines:
        if entry.fingerprint is None:
            continue
        if entry.label not in seen:
            seen.append(entry.label)
        assert seen == list(string.ascii_uppercase[: len(seen)])


def test_assign_scheme_is_deterministic(resolver):
    lines = ["bright", "night", "rose", "prose", "time", "mine"]

    assert assign_scheme(lines, resolver) == assign_scheme(lines, resolver)


def test_slant_policies(resolver):
    sun, pen = fingerprint("sun", resolver), fingerprint("pen", resolver)

    assert compare(sun, pen, EXACT_VOWELS) is RhymeQuality.NONE
    assert compare(sun, pen, RELATED_VOWELS) is RhymeQuality.SLANT
    assert SlantPolicy.from_name("Related") is RELATED_VOWELS
    with pytest.raises(ValueError):
        SlantPolicy.from_name("loose")


def test_spelling_fallback_is_opt_in(resolver):
    assert assign_scheme(["day", "zorbay"], resolver).labels == ("A", "X")

    scheme = assign_scheme(["day", "zorbay"], resolver, spelling_fallback=True)
    assert scheme.labels == ("A", "A")
    assert scheme.lines[1].fingerprint.approximate


def test_approximate_fingerprint_table():
    assert approximate_fingerprint("glight").phonemes == ("AY", "T")
    assert approximate_fingerprint("fround").phonemes == ("AW", "N", "D")
    assert approximate_fingerprint("xyzzq") is None


def test_assign_scheme_rejects_bad_input(resolver):
    with pytest.raises(TypeError):
        assign_scheme("day\nway", resolver)
    with pytest.raises(TypeError):
        assign_scheme(["day", None], resolver)


def test_scheme_as_dict(resolver):
    data = assign_scheme(["day", "way"], resolver).as_dict()

    assert data["labels"] == ["A", "A"]
    assert data["qualities"] == ["none", "perfect"]
    assert data["label_groups"] == {"A": [0, 1]}


def test_scheme_label_sequence():
    assert scheme_label(0) == "A"
    assert scheme_label(25) == "Z"
    assert scheme_label(26) == "AA"


@pytest.mark.parametrize(
    "labels, expected",
    [
        ("AABBA", "Limerick (AABBA)"),
        ("ABAB", "Alternate Rhyme (ABAB)"),
        ("ABBA", "Enclosed Rhyme (ABBA)"),
        ("AABBCC", "Couplets (AA BB...)"),
        ("AAA", "Monorhyme (AAAA...)"),
        ("AAAA", "Monorhyme (AAAA...)"),
        ("AABB", "Quatrain - Couplet (AABB)"),
        ("ABABCDCDEFEFGG", "Shakespearean Sonnet"),
        ("ABBAABBACDECDE", "Petrarchan Sonnet (variant)"),
        ("ABCD", "Free Verse (No rhyme)"),
        ("AAB", "Mixed Rhyme Scheme (AAB)"),
        ("", "No rhyme scheme"),
    ],
)
def test_identify_scheme_type(labels, expected):
    assert identify_scheme_type(list(labels)) == expected


def test_expected_scheme_for_named_forms():
    assert expected_scheme("Shakespearean Sonnet") == "ABABCDCDEFEFGG"
    assert expected_scheme("Limerick") == "AABBA"
    assert len(expected_scheme("Villanelle")) == 19
    with pytest.raises(ValueError):
        expected_scheme("Rondeau Redoublé")
