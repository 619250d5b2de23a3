"""Readers pulling raw values out of page payloads.

Meta tags and JSON-LD are read through BeautifulSoup; the regex readers
operate on the raw payload text so recipes can target markup fragments that
carry no structure at all.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Pattern, Tuple

from bs4 import BeautifulSoup

from ..utils.logging import get_logger

_LOGGER = get_logger(module=__name__)

_JSON_LD_TYPE = re.compile(r"application/ld\+json", re.IGNORECASE)


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def extract_meta_tags(html: str) -> Dict[str, str]:
    """Map lower-cased meta ``name``/``property`` keys to their content.

    The first occurrence of a key wins.  The document ``<title>`` is stored
    under ``title`` unless a meta tag already claimed that key.
    """

    soup = _soup(html)
    tags: Dict[str, str] = {}
    for node in soup.find_all("meta"):
        key = node.get("property") or node.get("name")
        content = node.get("content")
        if not key or content is None:
            continue
        key = key.strip().lower()
        content = content.strip()
        if not key or not content:
            continue
        tags.setdefault(key, content)

    title = soup.find("title")
    if title is not None and "title" not in tags:
        text = title.get_text(strip=True)
        if text:
            tags["title"] = text
    return tags


def _flatten_graph(node: Any) -> List[Dict[str, Any]]:
    if isinstance(node, list):
        flattened: List[Dict[str, Any]] = []
        for item in node:
            flattened.extend(_flatten_graph(item))
        return flattened
    if not isinstance(node, dict):
        return []
    graph = node.get("@graph")
    if isinstance(graph, list):
        return _flatten_graph(graph)
    return [node]


def extract_json_ld(html: str) -> List[Dict[str, Any]]:
    """Return every JSON-LD object embedded in *html*, in document order.

    Top-level arrays and ``@graph`` containers are flattened.  Blocks that
    fail to parse are skipped.
    """

    objects: List[Dict[str, Any]] = []
    for index, script in enumerate(_soup(html).find_all("script", attrs={"type": _JSON_LD_TYPE})):
        raw = script.string if script.string is not None else script.get_text()
        if not raw or not raw.strip():
            continue
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            _LOGGER.debug("Skipping invalid JSON-LD block", block=index, error=str(exc))
            continue
        objects.extend(_flatten_graph(parsed))
    return objects


def load_json_document(payload: str) -> Any | None:
    """Parse *payload* as a JSON document, returning ``None`` when it is not one."""

    if not payload or not payload.strip():
        return None
    try:
        return json.loads(payload)
    except json.JSONDecodeError:
        _LOGGER.debug("Payload is not a JSON document", size=len(payload))
        return None


def schema_types(obj: Any) -> Tuple[str, ...]:
    """Normalise a schema.org ``@type`` entry to a tuple of type names."""

    if not isinstance(obj, dict):
        return ()
    declared = obj.get("@type")
    if isinstance(declared, str):
        return (declared,)
    if isinstance(declared, list):
        return tuple(item for item in declared if isinstance(item, str))
    return ()


def _compiled(pattern: str | Pattern[str]) -> Pattern[str]:
    if isinstance(pattern, str):
        return re.compile(pattern)
    return pattern


def _group(match: re.Match[str]) -> str | None:
    value = match.group(1) if match.re.groups else match.group(0)
    if value is None:
        return None
    return value.strip()


def extract_first(text: str, pattern: str | Pattern[str]) -> str | None:
    """First capture group of *pattern* in *text* (whole match when it has none)."""

    if not text:
        return None
    match = _compiled(pattern).search(text)
    if match is None:
        return None
    return _group(match)


def extract_all(text: str, pattern: str | Pattern[str]) -> List[str]:
    """Every non-empty capture of *pattern* in *text*, in order."""

    if not text:
        return []
    results: List[str] = []
    for match in _compiled(pattern).finditer(text):
        value = _group(match)
        if value:
            results.append(value)
    return results


__all__ = [
    "extract_all",
    "extract_first",
    "extract_json_ld",
    "extract_meta_tags",
    "load_json_document",
    "schema_types",
]
