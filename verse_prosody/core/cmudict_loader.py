"""Loading and querying the CMU pronouncing dictionary.

The dictionary is parsed once per :class:`CMUDictLoader` on a background
thread into an immutable :class:`PronunciationStore`. Every caller that asks
for the load observes the same future, so concurrent editors share one parse.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from verse_prosody.utils.observability import (
    add_span_attributes,
    create_counter,
    create_histogram,
    get_logger,
    start_span,
)

from .models import Pronunciation, PronunciationEntry, phone_stress

try:  # pragma: no cover - optional dependency
    import pronouncing  # type: ignore
except ImportError:  # pragma: no cover - gracefully handle missing package
    pronouncing = None  # type: ignore


_WORD_VARIANT_PATTERN = re.compile(r"\(\d+\)$")
_PHONE_PATTERN = re.compile(r"^[A-Z]+[012]?$")
_UN_PREFIX_PHONES = ("AH0", "N")

_logger = get_logger(__name__).bind(component="cmudict_loader")

_metric_loads = create_counter(
    "verse_prosody_store_loads_total",
    "Pronunciation store loads by outcome.",
    label_names=("outcome",),
)
_metric_load_seconds = create_histogram(
    "verse_prosody_store_load_seconds",
    "Time spent parsing the pronunciation dataset.",
)


def _strip_variant(word: str) -> str:
    return _WORD_VARIANT_PATTERN.sub("", word).lower()


def parse_cmu_line(line: str) -> Optional[Tuple[str, Tuple[str, ...]]]:
    """Parse ``WORD  P H O N E S`` into ``(word, phones)``.

    Handles both the ``cmudict.7b`` and ``cmudict.dict`` spellings: ``;;;``
    comment lines, ``WORD(2)`` variant markers and trailing ``# comment``
    annotations. Entries without a single vowel are skipped.
    """

    entry = line.split("#", 1)[0].strip()
    if not entry or entry.startswith(";;;"):
        return None

    parts = entry.split()
    if len(parts) < 2:
        return None

    raw_word, *raw_phones = parts
    word = _strip_variant(raw_word)
    phones = tuple(phone for phone in raw_phones if _PHONE_PATTERN.match(phone))
    if not word or not any(phone_stress(phone) is not None for phone in phones):
        return None
    return word, phones


class PronunciationStore(Mapping):
    """Read-only mapping of normalized word to :class:`PronunciationEntry`.

    Variants keep dictionary order, so variant 0 is the canonical one.
    """

    def __init__(self, pronunciations: Mapping[str, Sequence[Sequence[str]]]) -> None:
        frozen: Dict[str, Tuple[Tuple[str, ...], ...]] = {}
        for word, variants in pronunciations.items():
            cleaned = tuple(tuple(phones) for phones in variants if phones)
            if cleaned:
                frozen[word] = cleaned
        self._pronunciations = MappingProxyType(frozen)

    @classmethod
    def from_entries(cls, entries: Iterable[Tuple[str, Sequence[str]]]) -> "PronunciationStore":
        grouped: Dict[str, List[Tuple[str, ...]]] = {}
        for word, phones in entries:
            variants = grouped.setdefault(word, [])
            phone_tuple = tuple(phones)
            if phone_tuple not in variants:
                variants.append(phone_tuple)
        return cls(grouped)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "PronunciationStore":
        return cls.from_entries(
            parsed for parsed in (parse_cmu_line(line) for line in lines) if parsed
        )

    def __getitem__(self, word: str) -> PronunciationEntry:
        variants = self._pronunciations[word]
        return PronunciationEntry(word, tuple(Pronunciation(phones) for phones in variants))

    def __iter__(self) -> Iterator[str]:
        return iter(self._pronunciations)

    def __len__(self) -> int:
        return len(self._pronunciations)

    def __contains__(self, word: object) -> bool:
        return word in self._pronunciations

    def lookup(self, word: str) -> Optional[PronunciationEntry]:
        """Find ``word`` (already normalized), trying spelling fallbacks.

        Order: exact form, apostrophes removed (``o'er`` → ``oer``), then an
        ``un-`` word built from its base entry.
        """

        if not word:
            return None
        if word in self._pronunciations:
            return self[word]

        bare = word.replace("'", "")
        if bare and bare in self._pronunciations:
            return PronunciationEntry(word, self[bare].variants)

        if bare.startswith("un") and bare[2:] in self._pronunciations:
            base = self[bare[2:]]
            return PronunciationEntry(
                word,
                tuple(Pronunciation(_UN_PREFIX_PHONES + variant.phones) for variant in base.variants),
            )
        return None

    def get_pronunciations(self, word: str) -> List[List[str]]:
        entry = self.lookup(word.lower())
        if entry is None:
            return []
        return [list(variant.phones) for variant in entry.variants]


class CMUDictLoader:
    """Idempotent, thread-backed loader for the pronunciation dataset.

    ``dict_path`` points at a CMU-format file; without it the loader reads
    the copy bundled with :mod:`pronouncing`. The first call to
    :meth:`load_async` (or :meth:`load`) starts the parse; later calls return
    the same future whether it is still running or finished.
    """

    def __init__(
        self,
        dict_path: Optional[Path | str] = None,
        *,
        use_pronouncing: bool = True,
    ) -> None:
        self.dict_path: Optional[Path] = Path(dict_path) if dict_path is not None else None
        self.use_pronouncing = use_pronouncing
        self._lock = threading.Lock()
        self._future: Optional[Future] = None

    @classmethod
    def preloaded(cls, store: PronunciationStore) -> "CMUDictLoader":
        """Return a loader that is already complete with ``store``."""

        loader = cls(use_pronouncing=False)
        future: Future = Future()
        future.set_result(store)
        loader._future = future
        return loader

    @property
    def source_name(self) -> str:
        if self.dict_path is not None:
            return str(self.dict_path)
        return "pronouncing" if self.use_pronouncing else "none"

    def _read_entries(self) -> Iterator[Tuple[str, Tuple[str, ...]]]:
        if self.dict_path is not None:
            with self.dict_path.open("r", encoding="utf-8") as handle:
                for line in handle:
                    parsed = parse_cmu_line(line)
                    if parsed:
                        yield parsed
            return

        if not self.use_pronouncing or pronouncing is None:
            raise LookupError("no pronunciation dataset available")

        pronouncing.init_cmu()
        for word, phones in pronouncing.pronunciations:
            parsed = parse_cmu_line(f"{word} {phones}")
            if parsed:
                yield parsed

    def _build(self) -> Optional[PronunciationStore]:
        _logger.info("Loading pronunciation dataset", context={"source": self.source_name})
        with start_span("verse_prosody.store.load", {"source": self.source_name}) as span:
            with _metric_load_seconds.time():
                try:
                    store = PronunciationStore.from_entries(self._read_entries())
                except (OSError, UnicodeDecodeError, LookupError) as exc:
                    _logger.warning(
                        "Pronunciation dataset unavailable; continuing with heuristics",
                        context={"source": self.source_name, "error": str(exc)},
                    )
                    _metric_loads.labels(outcome="failed").inc()
                    return None

            if not store:
                _logger.warning(
                    "Pronunciation dataset contained no entries",
                    context={"source": self.source_name},
                )
                _metric_loads.labels(outcome="empty").inc()
                return None

            add_span_attributes(span, {"words": len(store)})
        _metric_loads.labels(outcome="loaded").inc()
        _logger.info(
            "Pronunciation dataset loaded",
            context={"source": self.source_name, "words": len(store)},
        )
        return store

    def load_async(self) -> Future:
        """Start the load if needed and return the shared future."""

        with self._lock:
            if self._future is None:
                executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="verse-prosody-load")
                self._future = executor.submit(self._build)
                executor.shutdown(wait=False)
            return self._future

    def load(self, timeout: Optional[float] = None) -> bool:
        """Block until the load finishes; ``True`` when a store is available."""

        return self.load_async().result(timeout=timeout) is not None

    @property
    def store(self) -> Optional[PronunciationStore]:
        """The loaded store, or ``None`` while loading or after a failed load."""

        future = self._future
        if future is None or not future.done() or future.exception() is not None:
            return None
        return future.result()

    def is_loaded(self) -> bool:
        return self.store is not None

    def is_loading(self) -> bool:
        future = self._future
        return future is not None and not future.done()

    def get_pronunciations(self, word: str) -> List[List[str]]:
        store = self.store
        return store.get_pronunciations(word) if store is not None else []


__all__ = [
    "CMUDictLoader",
    "PronunciationStore",
    "parse_cmu_line",
]
