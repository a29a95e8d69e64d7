import logging

import pytest

from verse_prosody.utils import logging_config
from verse_prosody.utils.observability import (
    CounterHandle,
    HistogramHandle,
    create_counter,
    get_logger,
    start_span,
)


def test_structured_logger_appends_sorted_context(caplog):
    caplog.set_level(logging.INFO, logger="verse_prosody.tests")
    logger = get_logger("verse_prosody.tests").bind(component="loader")

    logger.info("Loaded", context={"words": 3, "source": "file"})

    message = caplog.records[-1].getMessage()
    assert message == 'Loaded | {"component": "loader", "source": "file", "words": 3}'


def test_bind_does_not_mutate_parent(caplog):
    caplog.set_level(logging.INFO, logger="verse_prosody.tests")
    parent = get_logger("verse_prosody.tests")
    parent.bind(component="child")

    parent.info("plain")

    assert caplog.records[-1].getMessage() == "plain"


def test_unconfigured_metric_handles_are_noops():
    counter = CounterHandle()
    counter.labels(operation="x").inc()

    histogram = HistogramHandle()
    with histogram.time():
        pass
    histogram.labels(stage="y").observe(1.0)


def test_counter_registered_twice_shares_samples():
    prometheus_client = pytest.importorskip("prometheus_client")
    first = create_counter("verse_prosody_test_events_total", "Test events.", label_names=("kind",))
    second = create_counter("verse_prosody_test_events_total", "Test events.", label_names=("kind",))

    def sample():
        return prometheus_client.REGISTRY.get_sample_value(
            "verse_prosody_test_events_total", {"kind": "reuse"}
        ) or 0.0

    before = sample()
    first.labels(kind="reuse").inc()
    second.labels(kind="reuse").inc()

    assert sample() == before + 2


def test_start_span_works_with_or_without_tracing():
    with start_span("verse_prosody.test", {"lines": 2}) as span:
        assert span is None or hasattr(span, "set_attribute")


def test_resolve_level():
    assert logging_config.resolve_level(None) == logging.INFO
    assert logging_config.resolve_level("debug") == logging.DEBUG
    assert logging_config.resolve_level("15") == 15
    assert logging_config.resolve_level("chatty") == logging.INFO


def test_configure_logging_runs_once(monkeypatch):
    calls = []
    monkeypatch.setattr(logging_config, "_CONFIGURED", False)
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    monkeypatch.setenv("VERSE_PROSODY_LOG_LEVEL", "WARNING")
    package_logger = logging.getLogger("verse_prosody")
    original_level = package_logger.level

    try:
        logging_config.configure_logging()
        logging_config.configure_logging()

        assert len(calls) == 1
        assert calls[0]["level"] == logging.WARNING
        assert package_logger.level == logging.WARNING

        logging_config.configure_logging("ERROR", force=True)
        assert len(calls) == 2
        assert calls[1]["force"] is True
    finally:
        package_logger.setLevel(original_level)
