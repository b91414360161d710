"""Small text utilities shared by the detector, scorer and phase controller."""

import re
from functools import lru_cache
from typing import Any, Iterable, Optional, Pattern

_NUMBER_SUFFIXES = {"k": 1_000, "m": 1_000_000, "b": 1_000_000_000}


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> Pattern[str]:
    """Compile a rule regex once; every rule matches case-insensitively."""
    return re.compile(pattern, re.IGNORECASE)


@lru_cache(maxsize=1024)
def word_pattern(phrase: str) -> Pattern[str]:
    """Regex matching ``phrase`` as a whole word or phrase."""
    return re.compile(rf"(?<!\w){re.escape(phrase)}(?!\w)", re.IGNORECASE)


def normalize_text(text: Any, max_length: Optional[int] = None) -> str:
    """Coerce input to a lower-cased string, truncated to ``max_length``.

    None becomes the empty string; any other non-string is passed through str().
    """
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)
    if max_length is not None and len(text) > max_length:
        text = text[:max_length]
    return text.lower()


def word_count(text: str) -> int:
    return len(text.split())


def count_matches(pattern: str, text: str) -> int:
    """Number of non-overlapping matches of ``pattern`` in ``text``."""
    return sum(1 for _ in compile_pattern(pattern).finditer(text))


def matches(pattern: str, text: str) -> bool:
    return compile_pattern(pattern).search(text) is not None


def contains_word(phrase: str, text: str) -> bool:
    return word_pattern(phrase).search(text) is not None


def count_words_present(phrases: Iterable[str], text: str) -> int:
    """Number of distinct phrases that appear in ``text`` on word boundaries."""
    return sum(1 for phrase in phrases if contains_word(phrase, text))


def count_substrings_present(phrases: Iterable[str], text: str) -> int:
    """Number of distinct phrases that appear anywhere in ``text``."""
    return sum(1 for phrase in phrases if phrase in text)


def parse_number(raw: str) -> Optional[float]:
    """Parse '10K', '2.5m', '$40', '15%' into a float. Returns None if unparseable."""
    cleaned = raw.strip().lower().replace(",", "").lstrip("$€¥£").rstrip("%")
    multiplier = 1
    if cleaned and cleaned[-1] in _NUMBER_SUFFIXES:
        multiplier = _NUMBER_SUFFIXES[cleaned[-1]]
        cleaned = cleaned[:-1]
    try:
        return float(cleaned) * multiplier
    except ValueError:
        return None


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))
