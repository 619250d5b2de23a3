"""Ordered recipe registry and URL dispatch."""

from __future__ import annotations

from typing import Iterator, List, Sequence, Tuple

from ..entities.core import Recipe
from ..errors import RecipeNotFoundError
from ..utils.logging import get_logger

_LOGGER = get_logger(module=__name__)


class RecipeRegistry:
    """Site recipes in registration order plus one fallback owning every URL.

    Dispatch is first-match-wins over the site recipes; the fallback is only
    returned when none of them claims the URL.  Identities are not checked for
    uniqueness here, that is the validator's job.
    """

    def __init__(self, recipes: Sequence[Recipe], fallback: Recipe) -> None:
        self._recipes: Tuple[Recipe, ...] = tuple(recipes)
        self._fallback = fallback

    @property
    def recipes(self) -> Tuple[Recipe, ...]:
        return self._recipes

    @property
    def fallback(self) -> Recipe:
        return self._fallback

    def __len__(self) -> int:
        return len(self._recipes) + 1

    def __iter__(self) -> Iterator[Recipe]:
        return iter(self.list_all())

    def resolve(self, url: str) -> Recipe:
        """Return the first site recipe owning *url*, else the fallback."""

        for recipe in self._recipes:
            if self._owns(recipe, url):
                _LOGGER.debug("Resolved recipe", recipe=recipe.identity, url=url)
                return recipe
        _LOGGER.debug("No site recipe matched; using fallback", recipe=self._fallback.identity, url=url)
        return self._fallback

    def get(self, identity: str) -> Recipe | None:
        """Look a recipe up by identity; the fallback is included."""

        for recipe in self.list_all():
            if recipe.identity == identity:
                return recipe
        return None

    lookup_by_identity = get

    def require(self, identity: str) -> Recipe:
        recipe = self.get(identity)
        if recipe is None:
            raise RecipeNotFoundError(identity)
        return recipe

    def list_all(self) -> List[Recipe]:
        """Site recipes in order followed by the fallback."""

        return [*self._recipes, self._fallback]

    @staticmethod
    def _owns(recipe: Recipe, url: str) -> bool:
        try:
            return recipe.owns(url)
        except Exception as exc:
            _LOGGER.warning(
                "Recipe matcher raised; treating URL as not owned",
                recipe=recipe.identity,
                url=url,
                error=repr(exc),
            )
            return False


__all__ = ["RecipeRegistry"]
