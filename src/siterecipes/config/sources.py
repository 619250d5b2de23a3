"""Configuration sources: YAML files, prefixed environment variables, overrides.

Every source produces a plain nested mapping; callers layer them with
:func:`deep_merge` from lowest to highest precedence.
"""

from __future__ import annotations

import os
from datetime import date
from pathlib import Path
from typing import Any, Dict, Mapping, Sequence, Tuple

import yaml


def parse_scalar(raw: str) -> Any:
    """Interpret *raw* as a YAML scalar (``"false"`` -> ``False``, ``"10"`` -> ``10``).

    Dates stay strings so version stamps like ``2025-01-15`` are not reinterpreted.
    """

    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    return raw if isinstance(parsed, date) else parsed


def nest(path: Sequence[str], value: Any) -> Dict[str, Any]:
    """Build ``{"a": {"b": value}}`` from the path ``["a", "b"]``."""

    if not path:
        raise ValueError("Override path must not be empty")
    nested: Any = value
    for segment in reversed(path):
        nested = {segment: nested}
    return nested


def deep_merge(
    base: Mapping[str, Any],
    override: Mapping[str, Any],
    *,
    _path: Tuple[str, ...] = (),
) -> Dict[str, Any]:
    """Recursively merge *override* onto *base* without mutating either.

    A mapping may not replace an existing scalar: that is almost always a
    mistyped override path, so it raises :class:`ValueError`.
    """

    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(value, Mapping):
            if current is not None and not isinstance(current, Mapping):
                dotted = ".".join((*_path, key))
                raise ValueError(f"Cannot merge a mapping into non-mapping value at '{dotted}'")
            result[key] = deep_merge(current or {}, value, _path=(*_path, key))
        else:
            result[key] = value
    return result


def env_overrides(prefix: str, environ: Mapping[str, str] | None = None) -> Dict[str, Any]:
    """Collect ``<prefix>SECTION__KEY=value`` variables into a nested mapping.

    Path segments are lower-cased and values parsed with :func:`parse_scalar`.
    """

    source = os.environ if environ is None else environ
    collected: Dict[str, Any] = {}
    for name in sorted(source):
        if not name.startswith(prefix):
            continue
        path = [segment.lower() for segment in name[len(prefix) :].split("__") if segment]
        if path:
            collected = deep_merge(collected, nest(path, parse_scalar(source[name])))
    return collected


def read_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping; a missing or empty file is an empty layer."""

    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle)
    if loaded is None:
        return {}
    if not isinstance(loaded, Mapping):
        raise ValueError(f"Configuration file '{path}' must contain a mapping at the top level")
    return dict(loaded)


__all__ = ["deep_merge", "env_overrides", "nest", "parse_scalar", "read_yaml"]
