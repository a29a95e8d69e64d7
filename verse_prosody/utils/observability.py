"""Instrumentation for dictionary loads and poem analyses.

The loader records `verse_prosody_store_loads_total{outcome}` and the load
duration; the engine counts analyses per operation, flags the ones served
without the dictionary, and wraps `analyze()` in a `verse_prosody.analyze`
span. Log lines carry a bound `component` (loader, engine, config, ...) plus
per-event context rendered as sorted JSON.

Without Prometheus or OpenTelemetry the handles do nothing and analysis
results are unchanged.
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, Optional


try:  # pragma: no cover - optional dependency probing
    from prometheus_client import REGISTRY as _PROM_REGISTRY
    from prometheus_client import Counter as _PromCounter
    from prometheus_client import Histogram as _PromHistogram
except ImportError:  # pragma: no cover - Prometheus not installed
    _PROM_REGISTRY = None
    _PromCounter = None
    _PromHistogram = None

try:  # pragma: no cover - optional dependency probing
    from opentelemetry import trace as _otel_trace
except ImportError:  # pragma: no cover - OpenTelemetry not installed
    _otel_trace = None


_TRACER_NAME = "verse_prosody"


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """Logger that appends bound context (e.g. ``component="loader"``) and the
    ``context=`` of each call as sorted JSON, e.g.
    ``Pronunciation store loaded | {"component": "cmudict_loader", "words": 3}``.
    """

    def bind(self, **context: Any) -> "StructuredLoggerAdapter":
        merged = dict(self.extra or {})
        merged.update(context)
        return StructuredLoggerAdapter(self.logger, merged)

    def process(self, msg: str, kwargs: Dict[str, Any]):
        event_context: Dict[str, Any] = dict(self.extra or {})
        provided = kwargs.pop("context", None)
        if isinstance(provided, dict):
            event_context.update(provided)
        if event_context:
            payload = json.dumps(event_context, sort_keys=True, default=str)
            msg = f"{msg} | {payload}"
        return msg, kwargs


def get_logger(name: str, **context: Any) -> StructuredLoggerAdapter:
    """Structured logger for a ``verse_prosody`` module."""

    return StructuredLoggerAdapter(logging.getLogger(name), context)


class _MetricHandle:
    """Wraps a Prometheus metric, or nothing; ``labels()`` returns the same kind of handle."""

    def __init__(self, impl: Any = None) -> None:
        self._impl = impl

    def labels(self, **labels: Any):
        if self._impl is None:
            return self.__class__(None)
        return self.__class__(self._impl.labels(**labels))


class CounterHandle(_MetricHandle):
    def inc(self, amount: float = 1.0) -> None:
        if self._impl is not None:
            self._impl.inc(amount)


class HistogramHandle(_MetricHandle):
    def observe(self, value: float) -> None:
        if self._impl is not None:
            self._impl.observe(value)

    @contextmanager
    def time(self) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self.observe(time.perf_counter() - start)


def _registered(name: str) -> Any:
    # prometheus_client keys counters by their base name without ``_total``.
    collectors = getattr(_PROM_REGISTRY, "_names_to_collectors", {})
    return collectors.get(name) or collectors.get(name[: -len("_total")] if name.endswith("_total") else name)


def _register(
    factory: Any, name: str, documentation: str, label_names: Optional[Iterable[str]]
) -> Any:
    if factory is None:
        return None
    try:
        return factory(name, documentation, labelnames=tuple(label_names or ()))
    except ValueError:
        return _registered(name)


def create_counter(
    name: str,
    documentation: str,
    label_names: Optional[Iterable[str]] = None,
) -> CounterHandle:
    """Counter such as ``verse_prosody_analyses_total``; registering the same
    name twice (a second engine in one process) reuses the first collector.
    """

    return CounterHandle(_register(_PromCounter, name, documentation, label_names))


def create_histogram(
    name: str,
    documentation: str,
    label_names: Optional[Iterable[str]] = None,
) -> HistogramHandle:
    """Histogram such as ``verse_prosody_store_load_seconds``."""

    return HistogramHandle(_register(_PromHistogram, name, documentation, label_names))


@contextmanager
def start_span(name: str, attributes: Optional[Dict[str, Any]] = None):
    """Span under the ``verse_prosody`` tracer; yields ``None`` without OpenTelemetry."""

    if _otel_trace is None:
        yield None
        return

    tracer = _otel_trace.get_tracer(_TRACER_NAME)
    with tracer.start_as_current_span(name) as span:
        if attributes:
            add_span_attributes(span, attributes)
        yield span


def add_span_attributes(span: Any, attributes: Dict[str, Any]) -> None:
    """Set non-``None`` attributes such as ``degraded`` or ``meter`` on ``span``."""

    if span is None:
        return
    for key, value in attributes.items():
        if isinstance(key, str) and value is not None:
            span.set_attribute(key, value)


def record_exception(span: Any, error: BaseException) -> None:
    """Mark ``span`` as failed with ``error``."""

    if span is None:
        return
    span.record_exception(error)
    span.set_attribute("error", True)


__all__ = [
    "StructuredLoggerAdapter",
    "get_logger",
    "CounterHandle",
    "HistogramHandle",
    "create_counter",
    "create_histogram",
    "start_span",
    "add_span_attributes",
    "record_exception",
]
