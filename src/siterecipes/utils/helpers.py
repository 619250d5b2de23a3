"""General-purpose helpers shared across the engine."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Mapping, Sequence, Union

_WHITESPACE_PATTERN = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """Collapse repeated whitespace into single spaces."""

    return _WHITESPACE_PATTERN.sub(" ", text.strip())


def serialize_json(data: object, destination: Path | str, *, indent: int = 2) -> Path:
    """Serialize data to JSON, creating parent directories as needed."""

    dest_path = Path(destination)
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    dest_path.write_text(
        json.dumps(data, indent=indent, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    return dest_path


def dig(data: Any, *path: Union[str, int], default: Any = None) -> Any:
    """Walk nested mappings and sequences, returning *default* on any miss."""

    cursor = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(cursor, Sequence) or isinstance(cursor, str):
                return default
            if not -len(cursor) <= step < len(cursor):
                return default
            cursor = cursor[step]
        else:
            if not isinstance(cursor, Mapping) or step not in cursor:
                return default
            cursor = cursor[step]
    return default if cursor is None else cursor


__all__ = ["dig", "normalize_whitespace", "serialize_json"]
