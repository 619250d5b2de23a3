"""Unit tests for per-recipe validation rules."""

from __future__ import annotations

from siterecipes.config.policies import ValidationPolicy
from siterecipes.entities.core import (
    AlertTemplate,
    Category,
    FieldType,
    MatchKind,
    Recipe,
    RecipeExample,
    RecipeField,
    RecipeMeta,
    UrlMatcher,
)
from siterecipes.validation.rules import RecipeValidator, validate_recipe


async def _noop(payload: str, url: str) -> dict:
    return {}


def _meta(**overrides) -> RecipeMeta:
    values = dict(
        identity="shop",
        name="Shop Product",
        description="Track prices and stock on the example shop",
        icon="🛒",
        category=Category.ECOMMERCE,
        tags=("shopping",),
        maintainers=("team",),
        examples=(RecipeExample(url="https://shop.test/p/1", title="Widget"),),
    )
    values.update(overrides)
    return RecipeMeta(**values)


def _recipe(**overrides) -> Recipe:
    values = dict(
        meta=_meta(),
        match=UrlMatcher.regex(r"^https://shop\.test/"),
        fields={"price": RecipeField(FieldType.MONEY, "Price", primary=True)},
        extract=_noop,
        alerts=(AlertTemplate(id="price-drop", label="Price Drop", when="price < previous.price"),),
    )
    values.update(overrides)
    return Recipe(**values)


def _messages(issues) -> list[tuple[str, str]]:
    return [(issue.field, issue.message) for issue in issues]


def test_well_formed_recipe_is_valid_without_warnings() -> None:
    result = validate_recipe(_recipe())

    assert result.valid
    assert result.errors == []
    assert result.warnings == []


def test_missing_meta_short_circuits() -> None:
    result = validate_recipe(_recipe(meta=None))

    assert not result.valid
    assert _messages(result.errors) == [("meta", "Recipe must have meta object")]
    assert result.errors[0].recipe == "unknown"


def test_identity_must_match_policy_pattern() -> None:
    result = validate_recipe(_recipe(meta=_meta(identity="Shop_Product")))

    assert ("meta.identity", "Identity must be lowercase alphanumeric with hyphens only") in _messages(result.errors)
    assert all(issue.recipe == "Shop_Product" for issue in result.errors)


def test_identity_with_trailing_newline_is_rejected() -> None:
    result = validate_recipe(_recipe(meta=_meta(identity="shop\n")))

    assert not result.valid
    assert _messages(result.errors) == [
        ("meta.identity", "Identity must be lowercase alphanumeric with hyphens only")
    ]


def test_missing_identity_alone_yields_one_error() -> None:
    result = validate_recipe(_recipe(meta=_meta(identity="")))

    assert len(result.errors) == 1
    assert _messages(result.errors) == [("meta.identity", "Recipe must have an identity")]


def test_missing_required_meta_fields_are_errors() -> None:
    result = validate_recipe(
        _recipe(meta=_meta(identity="", name="", description="", icon="", category=None, maintainers=()))
    )

    fields = {field for field, _ in _messages(result.errors)}
    assert {"meta.identity", "meta.name", "meta.description", "meta.icon", "meta.category", "meta.maintainers"} <= fields
    assert result.errors[0].recipe == "unknown"


def test_unknown_category_is_an_error() -> None:
    result = validate_recipe(_recipe(meta=_meta(category="gardening")))

    assert any(
        field == "meta.category" and message.startswith("Invalid category. Must be one of: ecommerce")
        for field, message in _messages(result.errors)
    )


def test_length_bounds_and_missing_tags_only_warn() -> None:
    result = validate_recipe(_recipe(meta=_meta(name="N" * 51, description="Too short", tags=())))

    assert result.valid
    assert _messages(result.warnings) == [
        ("meta.name", "Name should be under 50 characters"),
        ("meta.description", "Description should be at least 20 characters"),
        ("meta.tags", "Recipe should have at least one tag for discoverability"),
    ]


def test_policy_bounds_are_configurable() -> None:
    policy = ValidationPolicy(name_max_length=5, description_max_length=30)
    validator = RecipeValidator(policy)

    result = validator.validate(_recipe())

    assert ("meta.name", "Name should be under 5 characters") in _messages(result.warnings)
    assert ("meta.description", "Description should be under 30 characters") in _messages(result.warnings)


def test_matcher_checks() -> None:
    missing = validate_recipe(_recipe(match=None))
    malformed = validate_recipe(_recipe(match=UrlMatcher(kind=MatchKind.PATTERN, pattern=None)))
    wrong_type = validate_recipe(_recipe(match="shop.test"))

    assert ("match", "Recipe must have a match pattern") in _messages(missing.errors)
    assert any(field == "match" and message.startswith("Invalid URL matcher") for field, message in _messages(malformed.errors))
    assert ("match", "Match must be a URL pattern or predicate") in _messages(wrong_type.errors)


def test_field_checks() -> None:
    empty = validate_recipe(_recipe(fields={}))
    broken = validate_recipe(
        _recipe(
            fields={
                "a": RecipeField(None, "A"),
                "b": RecipeField("colour", "B"),
                "c": RecipeField(FieldType.TEXT, ""),
            }
        )
    )

    assert _messages(empty.errors) == [("fields", "Recipe must have at least one field")]
    assert _messages(broken.errors) == [
        ("fields.a", "Field must have a type"),
        ("fields.b", "Unknown field type: colour"),
        ("fields.c", "Field must have a label"),
    ]
    assert ("fields", "Recipe should have at least one primary field") in _messages(broken.warnings)


def test_extract_checks() -> None:
    missing = validate_recipe(_recipe(extract=None))
    not_callable = validate_recipe(_recipe(extract="extract"))

    assert _messages(missing.errors) == [("extract", "Recipe must have an extract routine")]
    assert _messages(not_callable.errors) == [("extract", "Extract must be callable")]


def test_alert_checks() -> None:
    result = validate_recipe(
        _recipe(
            alerts=(
                AlertTemplate(id="dup", label="One", when="a"),
                AlertTemplate(id="dup", label="Two", when="b"),
                AlertTemplate(id="", label="", when=""),
            )
        )
    )

    assert _messages(result.errors) == [
        ("alerts", "Duplicate alert id: dup"),
        ("alerts", "Alert must have an id"),
        ("alerts", "Alert  must have a label"),
        ("alerts", "Alert  must have a when condition"),
    ]


def test_undeclared_alerts_warn_but_empty_tuple_does_not() -> None:
    undeclared = validate_recipe(_recipe(alerts=None))
    empty = validate_recipe(_recipe(alerts=()))

    assert ("alerts", "Recipe should have at least one default alert") in _messages(undeclared.warnings)
    assert empty.warnings == []


def test_example_checks() -> None:
    result = validate_recipe(
        _recipe(
            meta=_meta(
                examples=(
                    RecipeExample(url="not a url", title="Broken"),
                    RecipeExample(url="https://other.test/p/2", title=" "),
                )
            )
        )
    )

    assert _messages(result.errors) == [
        ("meta.examples", "Invalid example URL: not a url"),
        ("meta.examples", "Example URL does not match recipe pattern: not a url"),
        ("meta.examples", "Example missing title for URL: https://other.test/p/2"),
        ("meta.examples", "Example URL does not match recipe pattern: https://other.test/p/2"),
    ]


def test_missing_examples_warn() -> None:
    result = validate_recipe(_recipe(meta=_meta(examples=())))

    assert result.valid
    assert _messages(result.warnings) == [("meta.examples", "Recipe should have worked examples")]


def test_validator_never_raises_for_exploding_predicates() -> None:
    def _explode(url: str) -> bool:
        raise RuntimeError("boom")

    result = validate_recipe(_recipe(match=UrlMatcher.where(_explode)))

    assert _messages(result.errors) == [("match", "Invalid URL matcher: boom")]
