from concurrent.futures import ThreadPoolExecutor

import pytest

import verse_prosody
from verse_prosody import ProsodyEngine, ProsodySettings, RhymeQuality
from verse_prosody.core import CMUDictLoader

from conftest import HAIKU

LIMERICK = "\n".join(
    [
        "There once was a poet so bright",
        "Who wrote every day and each night",
        "She counted each rose",
        "In her verses and prose",
        "And she gave all her readers delight",
    ]
)


def test_analyze_reports_every_view(engine):
    report = engine.analyze(HAIKU)

    assert report.is_haiku
    assert report.syllable_counts == (5, 7, 5)
    assert not report.degraded
    assert report.rhyme_scheme.end_words == ("pond", "pond", "again")
    assert report.rhyme_scheme.labels == ("A", "A", "B")
    assert report.scheme_type == "Mixed Rhyme Scheme (AAB)"
    assert len(report.meter.per_line) == 3


def test_analyze_limerick_scheme(engine):
    report = engine.analyze(LIMERICK)

    assert report.rhyme_scheme.labels[:4] == ("A", "A", "B", "B")
    assert report.rhyme_scheme.labels[4] == "X"


def test_analyze_with_spelling_fallback(store):
    engine = ProsodyEngine.from_store(store, ProsodySettings(spelling_fallback=True))
    report = engine.analyze(LIMERICK)

    assert report.rhyme_scheme.pattern == "AABBA"
    assert report.scheme_type == "Limerick (AABBA)"


def test_engine_form_compliance(engine):
    results = engine.check_form_compliance(["bright", "night", "rose", "prose", ""], "AABBA")

    assert [result.status.value for result in results] == [
        "correct",
        "correct",
        "correct",
        "correct",
        "pending",
    ]


def test_related_slant_setting(store):
    exact = ProsodyEngine.from_store(store)
    related = ProsodyEngine.from_store(store, ProsodySettings(slant_vowel_classes="related"))

    assert exact.assign_scheme(["sun", "pen"]).labels == ("A", "B")
    scheme = related.assign_scheme(["sun", "pen"])
    assert scheme.labels == ("A", "A")
    assert scheme.qualities[1] is RhymeQuality.SLANT


def test_internal_distance_setting(store):
    engine = ProsodyEngine.from_store(store, ProsodySettings(internal_rhyme_max_distance=1))

    assert engine.internal_rhymes("sun\n\nfun") == []
    assert len(engine.internal_rhymes("sun\n\nfun", max_line_distance=None)) == 1


def test_degraded_engine_never_blocks(degraded_engine):
    assert not degraded_engine.is_loaded()

    meter = degraded_engine.classify_text(" ".join(["the day"] * 5))
    assert meter.degraded
    assert meter.overall == "Iambic Pentameter"

    report = degraded_engine.analyze(HAIKU)
    assert report.degraded
    assert report.is_haiku
    assert set(report.rhyme_scheme.labels) == {"X"}
    assert not degraded_engine.loader.is_loading()


def test_autoload_starts_background_load(cmu_path):
    loader = CMUDictLoader(cmu_path)
    engine = ProsodyEngine(loader, ProsodySettings(autoload=True))

    engine.resolve("day")

    assert loader.is_loading() or loader.is_loaded()
    assert loader.load_async().result(timeout=10) is not None
    assert engine.is_loaded()
    assert engine.resolve("day").source.value == "dictionary"


def test_autoload_disabled_leaves_loader_idle(cmu_path):
    loader = CMUDictLoader(cmu_path)
    engine = ProsodyEngine(loader, ProsodySettings(autoload=False))

    engine.classify_text("the day")

    assert not loader.is_loading()
    assert not loader.is_loaded()
    assert engine.load(timeout=10)
    assert engine.classify_text(" ".join(["the day"] * 5)).overall == "Iambic Pentameter"


def test_classify_line_accepts_text_or_stresses(engine):
    assert engine.classify_line(" ".join(["the day"] * 5)).name == "Iambic Pentameter"
    assert engine.classify_line([1, 0, 1, 0]).name == "Trochaic Dimeter"


def test_concurrent_analyses_match_sequential(engine):
    texts = [HAIKU, LIMERICK, "the day\nthe way", "after after\nsun fun"] * 5
    expected = [engine.analyze(text) for text in texts]

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(engine.analyze, texts))

    assert results == expected


def test_engine_rejects_non_string_text(engine):
    with pytest.raises(TypeError):
        engine.classify_text(None)
    with pytest.raises(TypeError):
        engine.analyze(["not", "a", "string"])


def test_metrics_count_analyses(engine, degraded_engine):
    prometheus_client = pytest.importorskip("prometheus_client")
    registry = prometheus_client.REGISTRY

    def sample(name, operation):
        return registry.get_sample_value(name, {"operation": operation}) or 0.0

    before = sample("verse_prosody_analyses_total", "is_haiku")
    degraded_before = sample("verse_prosody_degraded_analyses_total", "is_haiku")

    engine.is_haiku(HAIKU)
    degraded_engine.is_haiku(HAIKU)

    assert sample("verse_prosody_analyses_total", "is_haiku") == before + 2
    assert sample("verse_prosody_degraded_analyses_total", "is_haiku") == degraded_before + 1


def test_module_level_api_uses_default_engine(engine):
    verse_prosody.set_default_engine(engine)

    assert verse_prosody.is_loaded()
    assert verse_prosody.assign_scheme(["day", "way", "sun", "fun", "play"]).pattern == "AABBA"
    assert verse_prosody.is_haiku(HAIKU)
    assert verse_prosody.syllables("silent") == ["S AY1", "L AH0 N T"]
    assert verse_prosody.classify_line([0, 1] * 5).name == "Iambic Pentameter"


def test_default_engine_reads_environment(monkeypatch, cmu_path):
    monkeypatch.setenv("VERSE_PROSODY_CMUDICT", str(cmu_path))
    monkeypatch.setenv("VERSE_PROSODY_AUTOLOAD", "0")
    verse_prosody.set_default_engine(None)

    engine = verse_prosody.get_default_engine()

    assert engine.loader.dict_path == cmu_path
    assert verse_prosody.get_default_engine() is engine
    assert verse_prosody.load(timeout=10)
