"""Tests for catalog-wide validation."""

from __future__ import annotations

from siterecipes.config.policies import ValidationPolicy
from siterecipes.entities.core import (
    AlertTemplate,
    Category,
    FieldType,
    Recipe,
    RecipeExample,
    RecipeField,
    RecipeMeta,
    UrlMatcher,
)
from siterecipes.validation import validate_all_recipes


async def _noop(payload: str, url: str) -> dict:
    return {}


def _recipe(identity: str, matcher: UrlMatcher, *examples: str) -> Recipe:
    return Recipe(
        meta=RecipeMeta(
            identity=identity,
            name=identity.title(),
            description=f"Recipe covering {identity} pages for tests",
            icon="🧪",
            category=Category.OTHER,
            tags=("test",),
            maintainers=("team",),
            examples=tuple(RecipeExample(url=url, title=f"Example {url}") for url in examples),
        ),
        match=matcher,
        fields={"title": RecipeField(FieldType.TEXT, "Title", primary=True)},
        extract=_noop,
        alerts=(AlertTemplate(id="change", label="Changed", when="title != previous.title"),),
    )


SHOP = _recipe("shop", UrlMatcher.regex(r"shop\.test"), "https://shop.test/product/1")
SHOP_PRODUCT = _recipe("shop-product", UrlMatcher.regex(r"shop\.test/product/"), "https://shop.test/product/2")
FALLBACK = _recipe("generic", UrlMatcher.where(lambda url: True), "https://anything.test/")


def test_overlapping_ownership_is_a_warning_on_the_earlier_recipe() -> None:
    result = validate_all_recipes([SHOP, SHOP_PRODUCT, FALLBACK])

    assert result.valid
    assert [(w.recipe, w.field, w.message) for w in result.warnings] == [
        ("shop", "match", 'Example "https://shop.test/product/1" also matches shop-product recipe'),
    ]


def test_overlap_scan_only_tests_earlier_examples_against_later_matchers() -> None:
    result = validate_all_recipes([SHOP_PRODUCT, SHOP, FALLBACK])

    assert [(w.recipe, w.message) for w in result.warnings] == [
        ("shop-product", 'Example "https://shop.test/product/2" also matches shop recipe'),
    ]


def test_fallback_is_excluded_from_overlap_scan() -> None:
    result = validate_all_recipes([FALLBACK, SHOP])

    assert result.warnings == []


def test_fallback_identity_comes_from_policy() -> None:
    policy = ValidationPolicy(fallback_identity="shop-product")

    result = validate_all_recipes([SHOP, SHOP_PRODUCT], policy)

    assert result.warnings == []


def test_duplicate_identities_are_errors() -> None:
    twin = _recipe("shop", UrlMatcher.regex(r"elsewhere\.test"), "https://elsewhere.test/")

    result = validate_all_recipes([SHOP, twin, FALLBACK])

    assert not result.valid
    assert [(e.recipe, e.field, e.message) for e in result.errors] == [
        ("shop", "meta.identity", "Duplicate identity found 2 times"),
    ]


def test_per_recipe_errors_are_merged() -> None:
    broken = Recipe(meta=None, match=None, fields={}, extract=None)

    result = validate_all_recipes([SHOP, broken, FALLBACK])

    assert not result.valid
    assert [(e.recipe, e.field) for e in result.errors] == [("unknown", "meta")]
