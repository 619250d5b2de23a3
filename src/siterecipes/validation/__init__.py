"""Recipe validation: per-recipe rules, catalog checks and routine smoke tests."""

from .catalog import validate_all_recipes
from .extraction import test_extraction_routine
from .rules import RecipeValidator, validate_recipe

__all__ = [
    "RecipeValidator",
    "test_extraction_routine",
    "validate_all_recipes",
    "validate_recipe",
]
