"""Normalization helpers turning raw page substrings into typed values.

Every helper is total: unparseable input yields ``None`` instead of raising,
so extraction stages can treat "could not parse" the same as "not found"
and fall through to the next source.
"""

from __future__ import annotations

import math
import re
from urllib.parse import urlparse

from .helpers import normalize_whitespace

# Named entities decoded by :func:`decode_html_entities`.  Anything outside
# this table is left untouched.
_NAMED_ENTITIES: dict[str, str] = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
    "nbsp": " ",
}

_ENTITY_PATTERN = re.compile(r"&(?:#(?P<dec>\d+)|#[xX](?P<hex>[0-9a-fA-F]+)|(?P<name>[a-zA-Z]+));")
_MONEY_NOISE = re.compile(r"[^0-9.,]")
_ABBREVIATED_PATTERN = re.compile(
    r"^\s*(?P<number>\d[\d,]*(?:\.\d+)?|\.\d+)\s*(?P<suffix>[kmb])?\s*$",
    re.IGNORECASE,
)
_NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d+)?|\.\d+)$")

_MAGNITUDES: dict[str, int] = {
    "k": 1_000,
    "m": 1_000_000,
    "b": 1_000_000_000,
}


def _round_half_up(value: float) -> int | None:
    if not math.isfinite(value):
        return None
    return int(math.floor(value + 0.5))


def _finite(value: float) -> float | None:
    return value if math.isfinite(value) else None


def _join_thousands(cleaned: str, separator: str) -> str | None:
    head, *groups = cleaned.split(separator)
    if not head or any(len(group) != 3 for group in groups):
        return None
    return "".join([head, *groups])


def parse_money(raw: str | None) -> float | None:
    """Parse a price string such as ``"$1,234.56"`` or ``"12,99 €"``.

    Currency symbols and other noise are stripped.  When both ``,`` and ``.``
    appear, the right-most one is the decimal separator.  A lone separator
    followed by exactly three digits is read as a thousands separator when it
    is a comma (``"1,234"``) and as a decimal point when it is a dot
    (``"1.234"``).  Repeated separators are thousands separators only when
    every group after the first has exactly three digits (``"1.234.567"``);
    anything else, such as a price range, yields ``None``.
    """

    if not raw:
        return None
    cleaned = _MONEY_NOISE.sub("", str(raw))
    if not cleaned or not any(ch.isdigit() for ch in cleaned):
        return None

    last_comma = cleaned.rfind(",")
    last_dot = cleaned.rfind(".")
    if last_comma >= 0 and last_dot >= 0:
        if last_comma > last_dot:
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif last_comma >= 0:
        tail = cleaned[last_comma + 1 :]
        if cleaned.count(",") > 1:
            cleaned = _join_thousands(cleaned, ",")
        elif len(tail) == 3:
            cleaned = cleaned.replace(",", "")
        else:
            cleaned = cleaned.replace(",", ".")
    elif cleaned.count(".") > 1:
        cleaned = _join_thousands(cleaned, ".")

    if cleaned is None:
        return None

    cleaned = cleaned.rstrip(".")
    if not _NUMBER_PATTERN.match(cleaned):
        return None
    return _finite(float(cleaned))


def parse_abbreviated_number(raw: str | None) -> int | None:
    """Parse counts like ``"1.2k"``, ``"45.6K"``, ``"2M"`` or ``"1,234"``.

    Suffixes are case-insensitive multipliers (k, m, b) and the result is
    rounded to the nearest integer, halves rounding up.
    """

    if raw is None:
        return None
    match = _ABBREVIATED_PATTERN.match(str(raw))
    if not match:
        return None
    number = float(match.group("number").replace(",", ""))
    suffix = (match.group("suffix") or "").lower()
    multiplier = _MAGNITUDES.get(suffix, 1)
    return _round_half_up(number * multiplier)


def parse_number(raw: str | None) -> int | float | None:
    """Parse a plain or abbreviated numeric string.

    Integral values come back as ``int`` (``"1,234"`` -> ``1234``) while
    fractional values stay ``float`` (``"4.5"`` -> ``4.5``).  Abbreviated
    magnitudes defer to :func:`parse_abbreviated_number`.
    """

    if raw is None:
        return None
    text = normalize_whitespace(str(raw))
    if not text:
        return None
    if text[-1].lower() in _MAGNITUDES:
        return parse_abbreviated_number(text)
    candidate = text.replace(",", "").replace(" ", "")
    if not _NUMBER_PATTERN.match(candidate):
        return None
    value = float(candidate)
    if not math.isfinite(value):
        return None
    if value.is_integer() and "." not in candidate:
        return int(candidate)
    return value


def decode_html_entities(text: str | None) -> str | None:
    """Decode a fixed table of named entities plus numeric character references."""

    if text is None:
        return None

    def _replace(match: re.Match[str]) -> str:
        name = match.group("name")
        if name is not None:
            return _NAMED_ENTITIES.get(name.lower(), match.group(0))
        digits = match.group("dec")
        base = 10
        if digits is None:
            digits = match.group("hex")
            base = 16
        try:
            return chr(int(digits, base))
        except (ValueError, OverflowError):
            return match.group(0)

    return _ENTITY_PATTERN.sub(_replace, text)


def clean_text(text: str | None) -> str | None:
    """Collapse whitespace; blank input yields ``None``."""

    if text is None:
        return None
    collapsed = normalize_whitespace(str(text))
    return collapsed or None


def truncate_text(text: str | None, limit: int, *, suffix: str = "...") -> str | None:
    """Cut *text* to *limit* characters, appending *suffix* when shortened."""

    if text is None:
        return None
    if limit <= 0 or len(text) <= limit:
        return text
    return text[:limit] + suffix


def extract_domain(url: str | None) -> str | None:
    """Return the hostname of *url* without a leading ``www.`` label."""

    if not url:
        return None
    try:
        hostname = urlparse(str(url).strip()).hostname
    except ValueError:
        return None
    if not hostname:
        return None
    hostname = hostname.lower()
    if hostname.startswith("www."):
        hostname = hostname[len("www.") :]
    return hostname or None


__all__ = [
    "clean_text",
    "decode_html_entities",
    "extract_domain",
    "parse_abbreviated_number",
    "parse_money",
    "parse_number",
    "truncate_text",
]
