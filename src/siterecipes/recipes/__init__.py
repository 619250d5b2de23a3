"""Bundled site recipes and the default registry built from them."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Tuple

from ..catalog.registry import RecipeRegistry
from ..entities.core import Recipe
from .amazon import AMAZON
from .generic import GENERIC
from .github import GITHUB
from .hackernews import HACKERNEWS
from .npm import NPM
from .reddit import REDDIT

# Registration order is dispatch priority.
SITE_RECIPES: Tuple[Recipe, ...] = (AMAZON, GITHUB, HACKERNEWS, NPM, REDDIT)


@lru_cache(maxsize=1)
def get_registry() -> RecipeRegistry:
    """Return the registry of bundled recipes, built once per process."""

    return RecipeRegistry(SITE_RECIPES, GENERIC)


def resolve(url: str) -> Recipe:
    return get_registry().resolve(url)


def lookup_by_identity(identity: str) -> Recipe | None:
    return get_registry().get(identity)


def list_all() -> List[Recipe]:
    return get_registry().list_all()


__all__ = [
    "AMAZON",
    "GENERIC",
    "GITHUB",
    "HACKERNEWS",
    "NPM",
    "REDDIT",
    "SITE_RECIPES",
    "get_registry",
    "list_all",
    "lookup_by_identity",
    "resolve",
]
