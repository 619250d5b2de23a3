"""Domain entities for the recipe engine."""

from .core import (
    CATEGORY_INFO,
    AlertTemplate,
    Category,
    CategoryInfo,
    ExtractedData,
    ExtractionCheck,
    ExtractionRoutine,
    FieldType,
    MatchKind,
    Recipe,
    RecipeExample,
    RecipeField,
    RecipeMeta,
    UrlMatcher,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "AlertTemplate",
    "CATEGORY_INFO",
    "Category",
    "CategoryInfo",
    "ExtractedData",
    "ExtractionCheck",
    "ExtractionRoutine",
    "FieldType",
    "MatchKind",
    "Recipe",
    "RecipeExample",
    "RecipeField",
    "RecipeMeta",
    "UrlMatcher",
    "ValidationIssue",
    "ValidationResult",
]
