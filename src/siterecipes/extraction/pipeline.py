"""Multi-source fallback extraction pipeline.

An :class:`ExtractionPipeline` is declared once per recipe and is itself an
async extraction routine ``(payload, url) -> dict``.  Stages run in a fixed
order and only ever fill gaps:

1. URL-derived fields
2. structured data (JSON-LD objects or the payload as a JSON document)
3. meta tags (ordered alias lists per field)
4. regex patterns (ordered alternatives per field)
5. derived fields computed from what has been resolved so far
6. cleanup of absent values

Every value for a declared field is coerced to the field's type before it is
stored; values that cannot be coerced count as absent so later stages may
still supply them.
"""

from __future__ import annotations

import inspect
import re
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Mapping,
    Pattern,
    Sequence,
    Tuple,
    Union,
)

from ..entities.core import ExtractedData, RecipeField
from ..utils.logging import get_logger
from .coerce import MISSING, coerce_value, is_missing
from .readers import extract_json_ld, extract_meta_tags, load_json_document

_LOGGER = get_logger(module=__name__)

FieldValues = Mapping[str, Any]
MaybeAwaitable = Union[FieldValues, None, Awaitable[Union[FieldValues, None]]]
StructuredMapper = Callable[[Any], MaybeAwaitable]


class StructuredSource(str, Enum):
    """Where the structured-data stage reads its objects from."""

    JSON_LD = "json_ld"
    DOCUMENT = "document"


class PageContext:
    """Lazily parsed views of one payload, shared by every stage of a run."""

    def __init__(self, payload: str, url: str) -> None:
        self.payload = payload or ""
        self.url = url or ""

    @cached_property
    def meta_tags(self) -> Dict[str, str]:
        return extract_meta_tags(self.payload)

    @cached_property
    def json_ld(self) -> List[Dict[str, Any]]:
        return extract_json_ld(self.payload)

    @cached_property
    def document(self) -> Any | None:
        return load_json_document(self.payload)


Derivation = Callable[[Dict[str, Any], PageContext], MaybeAwaitable]


@dataclass(frozen=True)
class PatternRule:
    """One regex alternative for a field.

    The first capture group (or the whole match when the pattern has none) is
    passed through ``transform`` when given; a rule succeeds only when the
    result survives coercion.  ``url_filter`` restricts the rule to URLs it
    matches.
    """

    pattern: Pattern[str]
    transform: Callable[[str], Any] | None = None
    url_filter: Pattern[str] | None = None

    def applies_to(self, url: str) -> bool:
        return self.url_filter is None or self.url_filter.search(url) is not None

    def apply(self, text: str) -> Any:
        match = self.pattern.search(text)
        if match is None:
            return MISSING
        captured = match.group(1) if self.pattern.groups else match.group(0)
        if captured is None:
            return MISSING
        captured = captured.strip()
        if self.transform is not None:
            return self.transform(captured)
        return captured


def rule(
    pattern: str | Pattern[str],
    *,
    flags: int = re.IGNORECASE,
    transform: Callable[[str], Any] | None = None,
    url_filter: str | None = None,
) -> PatternRule:
    """Build a :class:`PatternRule`, compiling string patterns with *flags*."""

    compiled = re.compile(pattern, flags) if isinstance(pattern, str) else pattern
    compiled_filter = re.compile(url_filter, re.IGNORECASE) if url_filter else None
    return PatternRule(pattern=compiled, transform=transform, url_filter=compiled_filter)


async def _resolve(result: MaybeAwaitable) -> FieldValues | None:
    if inspect.isawaitable(result):
        result = await result
    return result


class ExtractionPipeline:
    """Declarative extraction routine built from ordered fallback sources."""

    def __init__(
        self,
        schema: Mapping[str, RecipeField],
        *,
        url_fields: Mapping[str, Sequence[PatternRule]] | None = None,
        structured: Sequence[StructuredMapper] = (),
        structured_source: StructuredSource = StructuredSource.JSON_LD,
        meta_tags: Mapping[str, Sequence[str]] | None = None,
        patterns: Mapping[str, Sequence[PatternRule]] | None = None,
        derived: Sequence[Derivation] = (),
    ) -> None:
        self.schema = dict(schema)
        self.url_fields = {key: tuple(rules) for key, rules in (url_fields or {}).items()}
        self.structured = tuple(structured)
        self.structured_source = StructuredSource(structured_source)
        self.meta_tags = {key: tuple(aliases) for key, aliases in (meta_tags or {}).items()}
        self.patterns = {key: tuple(rules) for key, rules in (patterns or {}).items()}
        self.derived = tuple(derived)

    async def __call__(self, payload: str, url: str) -> ExtractedData:
        return await self.run(payload, url)

    async def run(self, payload: str, url: str) -> ExtractedData:
        """Populate the field map for *payload* fetched from *url*."""

        page = PageContext(payload, url)
        data: Dict[str, Any] = {}

        self._fill(data, self._apply_rules(self.url_fields, page.url, page.url), stage="url")
        for obj in self._structured_objects(page):
            for mapper in self.structured:
                self._fill(data, await _resolve(mapper(obj)), stage="structured")
        if self.meta_tags:
            self._fill(data, self._meta_values(data, page.meta_tags), stage="meta")
        self._fill(data, self._apply_rules(self.patterns, page.payload, page.url, skip=data), stage="pattern")
        for derivation in self.derived:
            self._fill(data, await _resolve(derivation(dict(data), page)), stage="derived")

        return {key: value for key, value in data.items() if not is_missing(value)}

    # -- internals -----------------------------------------------------------------

    def _structured_objects(self, page: PageContext) -> List[Any]:
        if not self.structured:
            return []
        if self.structured_source is StructuredSource.DOCUMENT:
            document = page.document
            return [] if document is None else [document]
        return list(page.json_ld)

    def _meta_values(self, data: Mapping[str, Any], tags: Mapping[str, str]) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for key, aliases in self.meta_tags.items():
            if key in data:
                continue
            field = self.schema.get(key)
            for alias in aliases:
                raw = tags.get(alias.lower())
                if field is not None and not is_missing(coerce_value(field, raw)):
                    values[key] = raw
                    break
        return values

    def _apply_rules(
        self,
        rules: Mapping[str, Tuple[PatternRule, ...]],
        text: str,
        url: str,
        *,
        skip: Mapping[str, Any] | None = None,
    ) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for key, alternatives in rules.items():
            if skip is not None and key in skip:
                continue
            field = self.schema.get(key)
            if field is None:
                continue
            for alternative in alternatives:
                if not alternative.applies_to(url):
                    continue
                raw = alternative.apply(text)
                if not is_missing(coerce_value(field, raw)):
                    values[key] = raw
                    break
        return values

    def _fill(self, data: Dict[str, Any], values: FieldValues | None, *, stage: str) -> None:
        if not values:
            return
        filled: List[str] = []
        for key, raw in values.items():
            if key in data:
                continue
            field = self.schema.get(key)
            if field is None:
                _LOGGER.debug("Ignoring undeclared field", stage=stage, field=key)
                continue
            value = coerce_value(field, raw)
            if value is MISSING:
                continue
            data[key] = value
            filled.append(key)
        if filled:
            _LOGGER.debug("Extraction stage filled fields", stage=stage, fields=filled)


__all__ = [
    "Derivation",
    "ExtractionPipeline",
    "PageContext",
    "PatternRule",
    "StructuredMapper",
    "StructuredSource",
    "rule",
]
