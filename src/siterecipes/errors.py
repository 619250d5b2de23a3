"""Exception hierarchy for the recipe engine."""

from __future__ import annotations


class SiteRecipesError(RuntimeError):
    """Base class for errors raised by siterecipes."""


class RecipeNotFoundError(SiteRecipesError, LookupError):
    """Raised when an identity lookup must succeed but the recipe is absent."""

    def __init__(self, identity: str) -> None:
        super().__init__(f"No recipe registered under identity '{identity}'")
        self.identity = identity


__all__ = ["RecipeNotFoundError", "SiteRecipesError"]
