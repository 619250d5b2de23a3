"""Type coercion applied to every value before it lands in a field map."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Final

from ..entities.core import FieldType, RecipeField
from ..utils.normalization import clean_text, decode_html_entities, parse_money, parse_number


class _Missing:
    """Marker for "no usable value"; distinct from any legitimate value."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final = _Missing()

_TRUE_WORDS = frozenset({"true", "yes", "y", "1", "on"})
_FALSE_WORDS = frozenset({"false", "no", "n", "0", "off"})


def is_missing(value: Any) -> bool:
    return value is None or value is MISSING


def _is_real_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _finite_real(value: Any) -> bool:
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _coerce_text(raw: Any) -> Any:
    if isinstance(raw, str):
        return clean_text(decode_html_entities(raw)) or MISSING
    if _is_real_number(raw):
        return str(raw)
    return MISSING


def _coerce_number(raw: Any) -> Any:
    if _is_real_number(raw):
        return raw if isinstance(raw, int) or math.isfinite(raw) else MISSING
    if isinstance(raw, str):
        parsed = parse_number(raw)
        return MISSING if parsed is None else parsed
    return MISSING


def _coerce_money(raw: Any) -> Any:
    if _is_real_number(raw):
        return float(raw) if _finite_real(raw) else MISSING
    if isinstance(raw, str):
        parsed = parse_money(raw)
        return MISSING if parsed is None else parsed
    return MISSING


def _coerce_boolean(raw: Any) -> Any:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        word = raw.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return MISSING


def _coerce_url(raw: Any) -> Any:
    if isinstance(raw, str):
        return raw.strip() or MISSING
    return MISSING


def _coerce_timestamp(raw: Any) -> Any:
    if isinstance(raw, datetime):
        moment = raw if raw.tzinfo is not None else raw.replace(tzinfo=timezone.utc)
        return moment.isoformat()
    if _is_real_number(raw):
        try:
            return datetime.fromtimestamp(raw, tz=timezone.utc).isoformat()
        except (OverflowError, OSError, ValueError):
            return MISSING
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return MISSING
        candidate = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
        try:
            datetime.fromisoformat(candidate)
        except ValueError:
            return MISSING
        return text
    return MISSING


_COERCERS = {
    FieldType.TEXT: _coerce_text,
    FieldType.NUMBER: _coerce_number,
    FieldType.MONEY: _coerce_money,
    FieldType.BOOLEAN: _coerce_boolean,
    FieldType.URL: _coerce_url,
    FieldType.TIMESTAMP: _coerce_timestamp,
}


def coerce_value(field: RecipeField, raw: Any) -> Any:
    """Convert *raw* to the representation declared by *field*.

    Returns :data:`MISSING` when the value is absent or cannot be expressed
    in the declared type; callers treat that exactly like "not found".
    """

    if is_missing(raw):
        return MISSING
    coercer = _COERCERS.get(field.value_type) if field.value_type is not None else None
    if coercer is None:
        return raw
    return coercer(raw)


__all__ = ["MISSING", "coerce_value", "is_missing"]
