"""High level facade tying the loader, settings and analysers together."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from .config import ProsodySettings
from .core.cmudict_loader import CMUDictLoader, PronunciationStore
from .core import meter, rhyme_scheme, scansion
from .core.models import (
    InternalRhyme,
    LineCompliance,
    MeterLabel,
    Resolution,
    RhymeFingerprint,
    RhymeScheme,
    StressSequence,
    TextMeter,
)
from .core.resolver import PronunciationResolver
from .core.rhyme_scheme import SlantPolicy
from .utils.logging_config import configure_logging
from .utils.observability import (
    add_span_attributes,
    create_counter,
    get_logger,
    record_exception,
    start_span,
)
from .utils.text import require_text, split_lines

_logger = get_logger(__name__).bind(component="engine")

_metric_analyses = create_counter(
    "verse_prosody_analyses_total",
    "Analysis calls by operation.",
    label_names=("operation",),
)
_metric_degraded = create_counter(
    "verse_prosody_degraded_analyses_total",
    "Analysis calls served without the pronunciation dataset.",
    label_names=("operation",),
)

_UNSET = object()


@dataclass(frozen=True)
class PoemAnalysis:
    """Everything the editor panels show for one version of a poem."""

    lines: Tuple[str, ...]
    syllable_counts: Tuple[int, ...]
    meter: TextMeter
    rhyme_scheme: RhymeScheme
    scheme_type: str
    internal_rhymes: Tuple[InternalRhyme, ...]
    is_haiku: bool
    degraded: bool


class ProsodyEngine:
    """Bind a :class:`CMUDictLoader` and settings to every analysis entry point.

    Calls made before the dictionary finishes loading never block; they use
    the heuristic and syllable-count paths. Each call snapshots the store once
    so a single result never mixes the two modes.
    """

    def __init__(
        self,
        loader: Optional[CMUDictLoader] = None,
        settings: Optional[ProsodySettings] = None,
    ) -> None:
        self.settings = settings if settings is not None else ProsodySettings.from_env()
        self.loader = loader if loader is not None else CMUDictLoader(
            self.settings.cmudict_path,
            use_pronouncing=self.settings.use_pronouncing,
        )
        self.slant_policy = SlantPolicy.from_name(self.settings.slant_vowel_classes)

    @classmethod
    def from_store(
        cls, store: PronunciationStore, settings: Optional[ProsodySettings] = None
    ) -> "ProsodyEngine":
        return cls(CMUDictLoader.preloaded(store), settings or ProsodySettings())

    def is_loaded(self) -> bool:
        return self.loader.is_loaded()

    def load(self, timeout: Optional[float] = None) -> bool:
        return self.loader.load(timeout=timeout)

    def load_async(self) -> Future:
        return self.loader.load_async()

    def configure_logging(self, *, force: bool = False) -> None:
        """Install the log handler at this engine's configured ``log_level``."""

        configure_logging(self.settings.log_level, force=force)

    def resolver(self) -> PronunciationResolver:
        """Resolver over the store as it is right now."""

        if self.settings.autoload and self.loader.store is None:
            self.loader.load_async()
        return PronunciationResolver(self.loader.store)

    def _begin(self, operation: str) -> PronunciationResolver:
        resolver = self.resolver()
        _metric_analyses.labels(operation=operation).inc()
        if resolver.is_degraded:
            _metric_degraded.labels(operation=operation).inc()
            _logger.debug(
                "Analysing without pronunciation dataset", context={"operation": operation}
            )
        return resolver

    # Pronunciation -----------------------------------------------------

    def resolve(self, word: str) -> Resolution:
        return self._begin("resolve").resolve(word)

    def syllables(self, word: str) -> List[str]:
        return self._begin("syllables").syllables(word)

    def resolve_line(self, line: str) -> StressSequence:
        return self._begin("resolve_line").resolve_line(line)

    def analyze_line(self, line: str) -> scansion.LineStressAnalysis:
        return scansion.analyze_line(line, self._begin("analyze_line"))

    # Meter -------------------------------------------------------------

    def classify_line(self, stresses: Union[StressSequence, Sequence[int], str]) -> MeterLabel:
        """Classify a stress sequence, or a line of text after resolving it."""

        if isinstance(stresses, str):
            stresses = self._begin("classify_line").resolve_line(stresses)
        return meter.classify_line(stresses)

    def classify_text(self, text: str) -> TextMeter:
        return meter.classify_text(text, self._begin("classify_text"))

    # Rhyme -------------------------------------------------------------

    def fingerprint(self, word: str) -> Optional[RhymeFingerprint]:
        return rhyme_scheme.fingerprint(
            word, self._begin("fingerprint"), spelling_fallback=self.settings.spelling_fallback
        )

    def assign_scheme(self, lines: Sequence[str]) -> RhymeScheme:
        return rhyme_scheme.assign_scheme(
            lines,
            self._begin("assign_scheme"),
            policy=self.slant_policy,
            spelling_fallback=self.settings.spelling_fallback,
        )

    def check_form_compliance(
        self, lines: Sequence[str], expected: Union[str, Sequence[str]]
    ) -> List[LineCompliance]:
        return rhyme_scheme.check_form_compliance(
            lines,
            expected,
            self._begin("check_form_compliance"),
            policy=self.slant_policy,
            spelling_fallback=self.settings.spelling_fallback,
        )

    def internal_rhymes(self, text: str, max_line_distance=_UNSET) -> List[InternalRhyme]:
        if max_line_distance is _UNSET:
            max_line_distance = self.settings.internal_rhyme_max_distance
        return rhyme_scheme.internal_rhymes(
            text,
            self._begin("internal_rhymes"),
            max_line_distance=max_line_distance,
            spelling_fallback=self.settings.spelling_fallback,
        )

    # Syllables and scansion --------------------------------------------

    def line_syllable_counts(self, text: str) -> List[int]:
        return scansion.line_syllable_counts(text, self._begin("line_syllable_counts"))

    def is_haiku(self, text: str) -> bool:
        return scansion.is_haiku(text, self._begin("is_haiku"))

    def check_syllable_pattern(
        self, text: str, pattern: Union[str, Sequence[int]]
    ) -> scansion.SyllablePatternCheck:
        return scansion.check_syllable_pattern(text, pattern, self._begin("check_syllable_pattern"))

    def syllable_consistency(self, text: str) -> scansion.SyllableConsistency:
        return scansion.syllable_consistency(text, self._begin("syllable_consistency"))

    def stress_visualization(self, line: str) -> List[scansion.StressMark]:
        return scansion.stress_visualization(line, self._begin("stress_visualization"))

    def render_scansion(self, line: str) -> str:
        return scansion.render_scansion(line, self._begin("render_scansion"))

    # Whole poem --------------------------------------------------------

    def analyze(self, text: str) -> PoemAnalysis:
        """Run every analysis over ``text`` against one store snapshot."""

        require_text(text)
        resolver = self._begin("analyze")
        lines = split_lines(text)
        with start_span("verse_prosody.analyze", {"lines": len(lines)}) as span:
            try:
                scheme = rhyme_scheme.assign_scheme(
                    lines,
                    resolver,
                    policy=self.slant_policy,
                    spelling_fallback=self.settings.spelling_fallback,
                )
                text_meter = meter.classify_text(text, resolver)
                rhymes = rhyme_scheme.internal_rhymes(
                    text,
                    resolver,
                    max_line_distance=self.settings.internal_rhyme_max_distance,
                    spelling_fallback=self.settings.spelling_fallback,
                )
                counts = scansion.line_syllable_counts(text, resolver)
                haiku = scansion.is_haiku(text, resolver)
            except Exception as exc:
                record_exception(span, exc)
                raise
            add_span_attributes(span, {"degraded": resolver.is_degraded, "meter": text_meter.overall})

        written = [entry.label for entry in scheme.lines if entry.word is not None]
        return PoemAnalysis(
            lines=tuple(lines),
            syllable_counts=tuple(counts),
            meter=text_meter,
            rhyme_scheme=scheme,
            scheme_type=rhyme_scheme.identify_scheme_type(written),
            internal_rhymes=tuple(rhymes),
            is_haiku=haiku,
            degraded=resolver.is_degraded,
        )


_DEFAULT_ENGINE: Optional[ProsodyEngine] = None
_DEFAULT_LOCK = threading.Lock()


def get_default_engine() -> ProsodyEngine:
    """Process-wide engine configured from the environment."""

    global _DEFAULT_ENGINE
    with _DEFAULT_LOCK:
        if _DEFAULT_ENGINE is None:
            _DEFAULT_ENGINE = ProsodyEngine()
        return _DEFAULT_ENGINE


def set_default_engine(engine: Optional[ProsodyEngine]) -> None:
    global _DEFAULT_ENGINE
    with _DEFAULT_LOCK:
        _DEFAULT_ENGINE = engine


__all__ = [
    "PoemAnalysis",
    "ProsodyEngine",
    "get_default_engine",
    "set_default_engine",
]
