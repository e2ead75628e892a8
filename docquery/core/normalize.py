"""Value normalization applied before comparisons.

Covers accent folding, case folding, numeric coercion, and timestamp
coercion. None of these helpers raise on unexpected input: a value that
cannot be coerced comes back as ``None`` and the caller treats the
comparison as not satisfied.
"""

import math
import re
import unicodedata
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any

from .options import MatchOptions

# Leading numeric prefix, e.g. "42px" -> 42
_NUMBER_PREFIX = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")
_NUMBER_FULL = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*")

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%Y",
)


def is_number(value: Any) -> bool:
    """Check for a real number. Booleans are not numbers."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_sequence(value: Any) -> bool:
    """Check for an ordered sequence of values (strings excluded)."""
    return isinstance(value, (list, tuple))


def is_mapping(value: Any) -> bool:
    """Check for a map of named fields."""
    return isinstance(value, Mapping)


def fold_accents(text: str) -> str:
    """Remove diacritical marks from text."""
    # Normalize to NFD (decomposed form)
    nfd = unicodedata.normalize("NFD", text)
    # Filter out combining characters (accents)
    stripped = "".join(char for char in nfd if unicodedata.category(char) != "Mn")
    return unicodedata.normalize("NFC", stripped)


def normalize_text(
    text: str, options: MatchOptions, fold_case: bool | None = None
) -> str:
    """Apply the accent and case folding enabled in options.

    Args:
        text: Text to normalize
        options: Match options for this search
        fold_case: Override for ``options.ignore_case``
    """
    if options.ignore_accents:
        text = fold_accents(text)
    if options.ignore_case if fold_case is None else fold_case:
        text = text.lower()
    return text


def to_number(value: Any) -> float | None:
    """Coerce a value to a float.

    Numbers pass through. Strings are read by their leading numeric
    prefix, so ``"42px"`` gives 42.0. Integers too large for a float
    become infinite, as long numeric strings do. Anything else is not a
    number.
    """
    if is_number(value):
        try:
            number = float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
        return None if math.isnan(number) else number

    if isinstance(value, str):
        match = _NUMBER_PREFIX.match(value)
        if match:
            return float(match.group(1))

    return None


def parse_numeric_string(text: str) -> float | None:
    """Parse a string that is entirely a number, or return None."""
    if _NUMBER_FULL.fullmatch(text):
        return float(text)
    return None


def strict_equal(value1: Any, value2: Any) -> bool:
    """Equality without normalization.

    Booleans only equal booleans, and sequences and maps compare
    element by element under the same rule.
    """
    if isinstance(value1, bool) or isinstance(value2, bool):
        return type(value1) is type(value2) and value1 == value2

    if is_sequence(value1) and is_sequence(value2):
        return len(value1) == len(value2) and all(
            strict_equal(a, b) for a, b in zip(value1, value2)
        )

    if is_mapping(value1) and is_mapping(value2):
        return value1.keys() == value2.keys() and all(
            strict_equal(value1[key], value2[key]) for key in value1
        )

    if is_sequence(value1) or is_sequence(value2):
        return False

    return value1 == value2


def is_equal(value1: Any, value2: Any, options: MatchOptions) -> bool:
    """Normalized equality: strings are folded, other values compared strictly.

    Sequences and maps compare element by element, so strings nested
    inside them are folded too.
    """
    if isinstance(value1, str) and isinstance(value2, str):
        return normalize_text(value1, options) == normalize_text(value2, options)

    if is_sequence(value1) and is_sequence(value2):
        return len(value1) == len(value2) and all(
            is_equal(a, b, options) for a, b in zip(value1, value2)
        )

    if is_mapping(value1) and is_mapping(value2):
        return value1.keys() == value2.keys() and all(
            is_equal(value1[key], value2[key], options) for key in value1
        )

    return strict_equal(value1, value2)


def to_timestamp(value: Any) -> float | None:
    """Coerce a value to epoch milliseconds.

    Numbers are taken as epoch milliseconds. Naive datetimes are read as
    UTC and dates as midnight UTC. Strings are parsed as ISO-8601 or one
    of ``DATE_FORMATS``.
    """
    if is_number(value):
        number = to_number(value)
        return number if number is not None and math.isfinite(number) else None

    if isinstance(value, datetime):
        return _datetime_millis(value)

    if isinstance(value, date):
        return _datetime_millis(datetime(value.year, value.month, value.day))

    if isinstance(value, str):
        parsed = parse_date(value)
        if parsed is not None:
            return _datetime_millis(parsed)

    return None


def parse_date(text: str) -> datetime | None:
    """Parse a date string, returning None when no format applies."""
    text = text.strip()
    if not text:
        return None

    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return datetime.fromisoformat(iso_text)
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    return None


def _datetime_millis(value: datetime) -> float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp() * 1000
