#!/usr/bin/env python3
"""
Locale-independent number handling and UTC calendar instants.

Every reader and writer goes through these helpers so that decimal
separators and time zones are pinned (period separator, UTC) instead of
being inherited from the host.
"""

from datetime import datetime, timedelta, timezone
from functools import total_ordering
from typing import Optional
import math
import re

UTC = timezone.utc
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_DOUBLE_PATTERN = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?$")
_INTEGER_PATTERN = re.compile(r"^[-+]?\d+$")


def trim(text: Optional[str]) -> Optional[str]:
    """Strip surrounding whitespace, mapping empty results to None."""
    if text is None:
        return None
    stripped = text.strip()
    return stripped if stripped else None


def single_line(text: Optional[str]) -> str:
    """Join the lines of a text with spaces; None becomes an empty string."""
    if text is None:
        return ""
    return " ".join(text.splitlines())


def parse_double(text: Optional[str]) -> Optional[float]:
    """
    Parse a decimal number with a period separator.

    Surrounding whitespace is ignored. Empty, non-numeric and non-finite
    input yields None; this never raises.
    """
    text = trim(text)
    if text is None or not _DOUBLE_PATTERN.match(text):
        return None
    value = float(text)
    return value if math.isfinite(value) else None


def parse_int(text: Optional[str]) -> Optional[int]:
    """Parse a signed integer, returning None for empty or malformed input."""
    text = trim(text)
    if text is None or not _INTEGER_PATTERN.match(text):
        return None
    return int(text)


def format_double(value: Optional[float], fraction_digits: int) -> str:
    """
    Format a number with a fixed count of fraction digits.

    Args:
        value: Number to format, None yields an empty string
        fraction_digits: Exact number of digits after the period

    Returns:
        The formatted number, always with a period decimal separator
    """
    if value is None:
        return ""
    formatted = f"{value:.{fraction_digits}f}"
    # -0.0000000 and 0.0000000 describe the same coordinate
    if formatted.startswith("-") and float(formatted) == 0.0:
        formatted = formatted[1:]
    return formatted


def format_int(value: Optional[float]) -> str:
    """Round half away from zero and format as integer."""
    if value is None:
        return ""
    return str(int(math.floor(abs(value) + 0.5)) * (-1 if value < 0 else 1))


def is_empty(value: Optional[float]) -> bool:
    """True for absent values and for exactly zero."""
    return value is None or value == 0.0


@total_ordering
class CompactCalendar:
    """
    A UTC instant with millisecond resolution.

    Equality and hashing only look at the instant, so two calendars built
    from datetimes with and without sub-second fields describing the same
    millisecond compare equal.
    """

    __slots__ = ("_millis",)

    def __init__(self, millis: int):
        self._millis = int(millis)

    @classmethod
    def from_millis(cls, millis: int) -> "CompactCalendar":
        return cls(millis)

    @classmethod
    def from_datetime(cls, value: datetime) -> "CompactCalendar":
        """Naive datetimes are taken to be UTC already."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        delta = value.astimezone(UTC) - EPOCH
        return cls(delta // timedelta(milliseconds=1))

    @classmethod
    def parse(cls, text: str, pattern: str) -> "CompactCalendar":
        """
        Parse text against a strptime pattern, interpreting it as UTC.

        Raises:
            ValueError: If the text does not match the pattern
        """
        return cls.from_datetime(datetime.strptime(text, pattern))

    @classmethod
    def now(cls) -> "CompactCalendar":
        return cls.from_datetime(datetime.now(UTC))

    @property
    def millis(self) -> int:
        return self._millis

    @property
    def datetime(self) -> datetime:
        return EPOCH + timedelta(milliseconds=self._millis)

    def format(self, pattern: str) -> str:
        return self.datetime.strftime(pattern)

    def add_millis(self, millis: int) -> "CompactCalendar":
        return CompactCalendar(self._millis + millis)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CompactCalendar):
            return NotImplemented
        return self._millis == other._millis

    def __lt__(self, other: "CompactCalendar") -> bool:
        if not isinstance(other, CompactCalendar):
            return NotImplemented
        return self._millis < other._millis

    def __hash__(self) -> int:
        return hash(self._millis)

    def __repr__(self) -> str:
        return f"CompactCalendar({self.datetime.isoformat(timespec='milliseconds')})"
