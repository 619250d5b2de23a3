"""Recipe catalog: dispatch registry and client-facing projections."""

from .projection import (
    ClientAlert,
    ClientCategory,
    ClientExample,
    ClientField,
    ClientRecipe,
    client_categories,
    client_fallback_recipe,
    client_recipes,
    to_client_recipe,
)
from .registry import RecipeRegistry

__all__ = [
    "RecipeRegistry",
    "ClientAlert",
    "ClientCategory",
    "ClientExample",
    "ClientField",
    "ClientRecipe",
    "client_categories",
    "client_fallback_recipe",
    "client_recipes",
    "to_client_recipe",
]
