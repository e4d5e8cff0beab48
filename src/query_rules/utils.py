"""
Shared utility functions for the query-rules package.

These are pure-Python helpers with no infrastructure dependencies.
"""

from __future__ import annotations

import datetime
import re

# ---------------------------------------------------------------------------
# Relative period parsing
# ---------------------------------------------------------------------------

_PERIOD_RE = re.compile(r"^\s*(\d*)[\d\s]*(\S{0,3})")

# Units are recognised by their first three letters; anything else is days.
_UNIT_DAYS: dict[str, int] = {
    "wee": 7,
    "mon": 31,
    "yea": 365,
}


def parse_period(value: str) -> datetime.timedelta:
    """
    Parse a relative time period into a ``timedelta``.

    Supported formats:
    - ``"7"``, ``"7 days"`` → 7 days
    - ``"2 weeks"`` → 14 days
    - ``"1 months"`` → 31 days
    - ``"1 year"`` → 365 days

    A period without a leading number counts as zero days.
    """
    if isinstance(value, datetime.timedelta):
        return value

    m = _PERIOD_RE.match(str(value))
    if m is None:
        return datetime.timedelta()
    amount = int(m.group(1)) if m.group(1) else 0
    unit = m.group(2).lower()
    return datetime.timedelta(days=amount * _UNIT_DAYS.get(unit, 1))


# ---------------------------------------------------------------------------
# List parsing
# ---------------------------------------------------------------------------


def split_list_value(value: str, separator: str = ",") -> list[str]:
    """
    Split a comma-separated set into trimmed pieces.

    ``"Rock, Pop ,Jazz"`` → ``["Rock", "Pop", "Jazz"]``.  Empty pieces are
    kept so the piece count always matches the separator count.
    """
    return [piece.strip() for piece in value.split(separator)]


def split_parameters(value: str, separator: str) -> list[str]:
    """Split a joined parameter string; an empty string yields no parameters."""
    if not value:
        return []
    return value.split(separator)


_NUMBER_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def is_number(value: str) -> bool:
    """
    True when *value* is a plain SQL numeric literal.

    ``"7"``, ``"-2.5"``, ``"1e3"`` qualify; ``"nan"``, ``"7 OR 1=1"`` do not.
    """
    return _NUMBER_RE.match(value) is not None


# ---------------------------------------------------------------------------
# Text conversion
# ---------------------------------------------------------------------------

_UTF8_NAMES = frozenset({"", "utf-8", "utf8"})


def to_utf8(value: str | bytes, encoding: str) -> str:
    """
    Convert markup text declared in *encoding* to a UTF-8 ``str``.

    Text already decoded by the XML parser passes through unchanged; raw
    bytes are decoded with the declared encoding, replacing undecodable
    sequences.
    """
    if isinstance(value, bytes):
        codec = "utf-8" if encoding.lower() in _UTF8_NAMES else encoding
        return value.decode(codec, errors="replace")
    return value
