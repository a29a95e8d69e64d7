"""Utility helpers shared across the :mod:`verse_prosody` package."""

from __future__ import annotations

from .logging_config import configure_logging
from .observability import (
    StructuredLoggerAdapter,
    add_span_attributes,
    create_counter,
    create_histogram,
    get_logger,
    record_exception,
    start_span,
)
from .syllables import estimate_syllable_count, spell_syllables
from .text import WordToken, normalize_word, split_lines, tokenize_line, trailing_word

__all__ = [
    "configure_logging",
    "estimate_syllable_count",
    "spell_syllables",
    "WordToken",
    "normalize_word",
    "split_lines",
    "tokenize_line",
    "trailing_word",
    "StructuredLoggerAdapter",
    "add_span_attributes",
    "create_counter",
    "create_histogram",
    "get_logger",
    "record_exception",
    "start_span",
]
