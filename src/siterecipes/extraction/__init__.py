"""Extraction engine: payload readers, value coercion and the fallback pipeline."""

from .coerce import MISSING, coerce_value, is_missing
from .pipeline import ExtractionPipeline, PageContext, PatternRule, StructuredSource, rule
from .readers import (
    extract_all,
    extract_first,
    extract_json_ld,
    extract_meta_tags,
    load_json_document,
    schema_types,
)

__all__ = [
    "MISSING",
    "coerce_value",
    "is_missing",
    "ExtractionPipeline",
    "PageContext",
    "PatternRule",
    "StructuredSource",
    "rule",
    "extract_all",
    "extract_first",
    "extract_json_ld",
    "extract_meta_tags",
    "load_json_document",
    "schema_types",
]
