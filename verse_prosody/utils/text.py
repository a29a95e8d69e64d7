"""Normalization and tokenization helpers shared by the prosody engine."""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import List, Optional

__all__ = [
    "WordToken",
    "normalize_word",
    "require_text",
    "split_lines",
    "tokenize_line",
    "trailing_word",
]

_SMART_QUOTES = {
    "‘": "'",
    "’": "'",
    "‚": "'",
    "‛": "'",
    "ʼ": "'",
}

_TOKEN_PATTERN = re.compile(r"[\w'‘’ʼ-]+", re.UNICODE)
_DISALLOWED = re.compile(r"[^a-z'-]+")
_EDGE_MARKS = "'-"


@dataclass(frozen=True)
class WordToken:
    """A word occurrence inside a line with its character span."""

    text: str
    normalized: str
    start: int
    end: int


def require_text(value: object, name: str = "text") -> str:
    """Fail fast when a caller hands the engine something other than ``str``."""

    if not isinstance(value, str):
        raise TypeError(f"{name} must be str, not {type(value).__name__}")
    return value


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_word(word: str) -> str:
    """Lowercase ``word`` and drop everything outside ``[a-z'-]``.

    Accents are folded and curly apostrophes straightened first so that
    ``café`` and ``o’er`` normalize the same way as their ASCII spellings.
    Leading and trailing apostrophes or hyphens are trimmed.
    """

    require_text(word, "word")
    fixed = word
    for src, dst in _SMART_QUOTES.items():
        fixed = fixed.replace(src, dst)
    fixed = _strip_accents(fixed).lower()
    return _DISALLOWED.sub("", fixed).strip(_EDGE_MARKS)


def split_lines(text: str) -> List[str]:
    """Split ``text`` on newlines, tolerating Windows line endings."""

    require_text(text)
    return [line.rstrip("\r") for line in text.split("\n")]


def tokenize_line(line: str) -> List[WordToken]:
    """Return the word occurrences of ``line`` in reading order.

    Tokens whose normalized form is empty (numbers, lone dashes) are skipped.
    """

    require_text(line, "line")
    tokens: List[WordToken] = []
    for match in _TOKEN_PATTERN.finditer(line):
        normalized = normalize_word(match.group(0))
        if not normalized or not any(ch.isalpha() for ch in normalized):
            continue
        tokens.append(
            WordToken(
                text=match.group(0),
                normalized=normalized,
                start=match.start(),
                end=match.end(),
            )
        )
    return tokens


def trailing_word(line: str) -> Optional[WordToken]:
    """Return the last word of ``line`` with trailing punctuation removed."""

    tokens = tokenize_line(line)
    return tokens[-1] if tokens else None
