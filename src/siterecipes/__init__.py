"""Catalog-driven content extraction engine for site recipes."""

from __future__ import annotations

from importlib.metadata import version

try:
    __version__ = version("siterecipes")
except Exception:  # pragma: no cover - fallback during local development
    __version__ = "0.1.0"

from .catalog import RecipeRegistry, to_client_recipe
from .config.settings import Settings, get_settings
from .entities import (
    ExtractionCheck,
    FieldType,
    Recipe,
    RecipeField,
    UrlMatcher,
    ValidationIssue,
    ValidationResult,
)
from .errors import RecipeNotFoundError, SiteRecipesError
from .extraction import ExtractionPipeline
from .recipes import get_registry, list_all, lookup_by_identity, resolve
from .validation import test_extraction_routine, validate_all_recipes, validate_recipe

__all__ = [
    "__version__",
    "Settings",
    "get_settings",
    "Recipe",
    "RecipeField",
    "FieldType",
    "UrlMatcher",
    "ValidationIssue",
    "ValidationResult",
    "ExtractionCheck",
    "ExtractionPipeline",
    "RecipeRegistry",
    "RecipeNotFoundError",
    "SiteRecipesError",
    "get_registry",
    "list_all",
    "lookup_by_identity",
    "resolve",
    "to_client_recipe",
    "test_extraction_routine",
    "validate_all_recipes",
    "validate_recipe",
]
