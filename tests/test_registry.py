"""Tests for recipe dispatch through the registry."""

from __future__ import annotations

import pytest

from siterecipes.catalog.registry import RecipeRegistry
from siterecipes.entities.core import (
    Category,
    FieldType,
    Recipe,
    RecipeField,
    RecipeMeta,
    UrlMatcher,
)
from siterecipes.errors import RecipeNotFoundError


async def _noop(payload: str, url: str) -> dict:
    return {}


def _recipe(identity: str, matcher: UrlMatcher) -> Recipe:
    return Recipe(
        meta=RecipeMeta(
            identity=identity,
            name=identity.title(),
            description=f"Recipe for {identity} pages in tests",
            icon="🧪",
            category=Category.OTHER,
        ),
        match=matcher,
        fields={"title": RecipeField(FieldType.TEXT, "Title", primary=True)},
        extract=_noop,
    )


def _explode(url: str) -> bool:
    raise RuntimeError("matcher bug")


SHOP = _recipe("shop", UrlMatcher.regex(r"^https?://shop\.test/"))
SHOP_PRODUCT = _recipe("shop-product", UrlMatcher.regex(r"shop\.test/product/"))
BROKEN = _recipe("broken", UrlMatcher.where(_explode))
FALLBACK = _recipe("generic", UrlMatcher.where(lambda url: True))


def test_first_matching_site_recipe_wins() -> None:
    registry = RecipeRegistry([SHOP, SHOP_PRODUCT], FALLBACK)

    assert registry.resolve("https://shop.test/product/42") is SHOP


def test_registration_order_breaks_ties() -> None:
    registry = RecipeRegistry([SHOP_PRODUCT, SHOP], FALLBACK)

    assert registry.resolve("https://shop.test/product/42") is SHOP_PRODUCT
    assert registry.resolve("https://shop.test/cart") is SHOP


def test_unmatched_urls_fall_back() -> None:
    registry = RecipeRegistry([SHOP], FALLBACK)

    assert registry.resolve("https://elsewhere.test/") is FALLBACK
    assert registry.resolve("") is FALLBACK


def test_raising_matcher_is_treated_as_not_owned() -> None:
    registry = RecipeRegistry([BROKEN, SHOP], FALLBACK)

    assert registry.resolve("https://shop.test/") is SHOP
    assert registry.resolve("https://nowhere.test/") is FALLBACK


def test_lookup_by_identity_includes_fallback() -> None:
    registry = RecipeRegistry([SHOP, SHOP_PRODUCT], FALLBACK)

    assert registry.get("shop-product") is SHOP_PRODUCT
    assert registry.lookup_by_identity("generic") is FALLBACK
    assert registry.get("missing") is None


def test_require_raises_for_unknown_identity() -> None:
    registry = RecipeRegistry([SHOP], FALLBACK)

    with pytest.raises(RecipeNotFoundError):
        registry.require("missing")
    assert registry.require("shop") is SHOP


def test_list_all_appends_fallback() -> None:
    registry = RecipeRegistry([SHOP, SHOP_PRODUCT], FALLBACK)

    assert registry.list_all() == [SHOP, SHOP_PRODUCT, FALLBACK]
    assert list(registry) == registry.list_all()
    assert len(registry) == 3
    assert registry.recipes == (SHOP, SHOP_PRODUCT)
    assert registry.fallback is FALLBACK
