"""Serializable catalog views of recipes for UI consumers.

Projections drop every callable (matchers, routines, URL transforms) and keep
only JSON-safe data, so ``model_dump(mode="json")`` can be sent to a browser
as-is.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from ..entities.core import CATEGORY_INFO, Category, Recipe
from .registry import RecipeRegistry


class ClientExample(BaseModel):
    url: str
    title: str
    subtitle: str | None = None
    image: str | None = None


class ClientField(BaseModel):
    key: str
    label: str
    type: str | None
    primary: bool = False


class ClientAlert(BaseModel):
    id: str
    label: str
    description: str = ""
    when: str = ""
    icon: str | None = None


class ClientRecipe(BaseModel):
    """Function-free projection of a :class:`~siterecipes.entities.Recipe`."""

    identity: str
    name: str
    description: str
    icon: str
    category: str | None
    tags: List[str] = Field(default_factory=list)
    examples: List[ClientExample] = Field(default_factory=list)
    match_pattern: str | None = Field(
        default=None,
        description="Regex source for pattern matchers; None for predicate matchers",
    )
    match_flags: str | None = Field(
        default=None,
        description="Flag letters for match_pattern ('i' means case-insensitive); None for predicate matchers",
    )
    fields: List[ClientField] = Field(default_factory=list)
    alerts: List[ClientAlert] = Field(default_factory=list)


class ClientCategory(BaseModel):
    id: str
    name: str
    icon: str
    description: str


def _enum_value(value: object) -> str | None:
    if value is None:
        return None
    return str(getattr(value, "value", value))


def to_client_recipe(recipe: Recipe) -> ClientRecipe:
    """Project *recipe* into its serializable catalog form."""

    meta = recipe.meta
    if meta is None:
        raise ValueError("Cannot project a recipe without metadata")
    return ClientRecipe(
        identity=meta.identity,
        name=meta.name,
        description=meta.description,
        icon=meta.icon,
        category=_enum_value(meta.category),
        tags=list(meta.tags),
        examples=[
            ClientExample(url=ex.url, title=ex.title, subtitle=ex.subtitle, image=ex.image)
            for ex in meta.examples
        ],
        match_pattern=recipe.match.source if recipe.match is not None else None,
        match_flags=recipe.match.flags if recipe.match is not None else None,
        fields=[
            ClientField(key=key, label=field.label, type=_enum_value(field.value_type), primary=field.primary)
            for key, field in recipe.fields.items()
        ],
        alerts=[
            ClientAlert(
                id=alert.id,
                label=alert.label,
                description=alert.description,
                when=alert.when,
                icon=alert.icon,
            )
            for alert in recipe.alerts or ()
        ],
    )


def client_recipes(registry: RecipeRegistry) -> List[ClientRecipe]:
    """Projections of the registry's site recipes, in registration order."""

    return [to_client_recipe(recipe) for recipe in registry.recipes]


def client_fallback_recipe(registry: RecipeRegistry) -> ClientRecipe:
    return to_client_recipe(registry.fallback)


def client_categories() -> List[ClientCategory]:
    """The category catalogue in declaration order."""

    categories: List[ClientCategory] = []
    for category in Category:
        info = CATEGORY_INFO[category]
        categories.append(
            ClientCategory(id=category.value, name=info.name, icon=info.icon, description=info.description)
        )
    return categories


__all__ = [
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
