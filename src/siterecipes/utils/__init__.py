"""Utility helpers shared across siterecipes modules."""

from .helpers import dig, normalize_whitespace, serialize_json
from .logging import configure_logging, get_logger, log_timing, recipe_scope
from .normalization import (
    clean_text,
    decode_html_entities,
    extract_domain,
    parse_abbreviated_number,
    parse_money,
    parse_number,
    truncate_text,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "recipe_scope",
    "log_timing",
    "dig",
    "normalize_whitespace",
    "serialize_json",
    "clean_text",
    "decode_html_entities",
    "extract_domain",
    "parse_abbreviated_number",
    "parse_money",
    "parse_number",
    "truncate_text",
]
