"""End-to-end smoke tests for the Typer-based siterecipes CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from siterecipes.catalog.registry import RecipeRegistry
from siterecipes.cli.common import CLIError, merge_overrides, parse_override
from siterecipes.cli.main import app, handle_cli_error, handle_engine_error, handle_unknown_recipe
from siterecipes.entities.core import Category, FieldType, Recipe, RecipeField, RecipeMeta, UrlMatcher
from siterecipes.errors import RecipeNotFoundError, SiteRecipesError
from siterecipes.recipes import GENERIC


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def cli_env(tmp_path: Path) -> dict[str, str]:
    return {"SITERECIPES_SETTINGS__LOG__DIRECTORY": str(tmp_path / "logs")}


@pytest.fixture()
def npm_payload(tmp_path: Path) -> Path:
    path = tmp_path / "left-pad.json"
    path.write_text(
        json.dumps({"name": "left-pad", "dist-tags": {"latest": "1.3.0"}, "license": "WTFPL"}),
        encoding="utf-8",
    )
    return path


def test_parse_override_builds_nested_mapping() -> None:
    assert parse_override("policies.validation.name_max_length=10") == {
        "policies": {"validation": {"name_max_length": 10}}
    }
    assert parse_override("log.level=DEBUG") == {"log": {"level": "DEBUG"}}
    assert parse_override("policies.smoke.payload=a=b") == {"policies": {"smoke": {"payload": "a=b"}}}


def test_merge_overrides_is_deep() -> None:
    merged = merge_overrides(
        [
            parse_override("policies.smoke.enabled=false"),
            parse_override("policies.validation.name_max_length=10"),
        ]
    )

    assert merged == {"policies": {"smoke": {"enabled": False}, "validation": {"name_max_length": 10}}}


def test_validate_passes_for_bundled_catalog(runner: CliRunner, cli_env: dict[str, str]) -> None:
    result = runner.invoke(app, ["validate"], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "Validation Summary" in result.output
    assert "0 failure(s)" in result.output
    assert "All recipes valid" in result.output


def test_validate_smoke_can_be_disabled_by_override(runner: CliRunner, cli_env: dict[str, str]) -> None:
    result = runner.invoke(app, ["-o", "policies.smoke.enabled=false", "validate"], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "skipped" in result.output


def test_malformed_override_is_a_usage_error(runner: CliRunner, cli_env: dict[str, str]) -> None:
    result = runner.invoke(app, ["-o", "novalue", "validate"], env=cli_env)

    assert result.exit_code == 2


def test_resolve_shows_fetch_url(runner: CliRunner, cli_env: dict[str, str]) -> None:
    result = runner.invoke(app, ["resolve", "https://www.npmjs.com/package/react"], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "npm Package" in result.output
    assert "https://registry.npmjs.org/react" in result.output


def test_resolve_unclaimed_url_uses_fallback(runner: CliRunner, cli_env: dict[str, str]) -> None:
    result = runner.invoke(app, ["resolve", "https://blog.example.org/"], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "generic" in result.output


def test_resolve_reports_failing_url_transform(
    runner: CliRunner, cli_env: dict[str, str], monkeypatch: pytest.MonkeyPatch
) -> None:
    async def _noop(payload: str, url: str) -> dict:
        return {}

    def _broken_transform(url: str) -> str:
        raise ValueError("no api route")

    shop = Recipe(
        meta=RecipeMeta(
            identity="shop",
            name="Shop",
            description="Recipe for shop pages in tests",
            icon="🧪",
            category=Category.OTHER,
        ),
        match=UrlMatcher.regex(r"^https?://shop\.test/"),
        fields={"title": RecipeField(FieldType.TEXT, "Title", primary=True)},
        extract=_noop,
        transform_url=_broken_transform,
    )
    monkeypatch.setattr("siterecipes.cli.common.get_registry", lambda: RecipeRegistry([shop], GENERIC))

    result = runner.invoke(app, ["resolve", "https://shop.test/p/1"], env=cli_env)

    assert result.exit_code != 0
    assert isinstance(result.exception, CLIError)
    assert "URL transform for recipe 'shop' failed: no api route" in str(result.exception)


def test_catalog_writes_projection(runner: CliRunner, cli_env: dict[str, str], tmp_path: Path) -> None:
    destination = tmp_path / "out" / "catalog.json"

    result = runner.invoke(app, ["catalog", "--output", str(destination)], env=cli_env)

    assert result.exit_code == 0, result.output
    document = json.loads(destination.read_text(encoding="utf-8"))
    assert [recipe["identity"] for recipe in document["recipes"]] == [
        "amazon",
        "github",
        "hackernews",
        "npm",
        "reddit",
    ]
    assert document["fallback"]["identity"] == "generic"
    assert document["fallback"]["match_pattern"] is None
    assert len(document["categories"]) == 11


def test_extract_runs_routine_on_payload(
    runner: CliRunner, cli_env: dict[str, str], npm_payload: Path
) -> None:
    result = runner.invoke(
        app,
        ["extract", "https://www.npmjs.com/package/left-pad", "--payload", str(npm_payload)],
        env=cli_env,
    )

    assert result.exit_code == 0, result.output
    assert '"recipe": "npm"' in result.output
    assert '"version": "1.3.0"' in result.output


def test_extract_with_unknown_recipe_fails(
    runner: CliRunner, cli_env: dict[str, str], npm_payload: Path
) -> None:
    result = runner.invoke(
        app,
        ["extract", "https://example.com", "--payload", str(npm_payload), "--recipe", "nope"],
        env=cli_env,
    )

    assert result.exit_code != 0
    assert isinstance(result.exception, RecipeNotFoundError)


def test_extract_with_missing_payload_fails(runner: CliRunner, cli_env: dict[str, str], tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["extract", "https://example.com", "--payload", str(tmp_path / "absent.html")],
        env=cli_env,
    )

    assert result.exit_code != 0
    assert isinstance(result.exception, CLIError)


def test_invalid_configuration_is_reported(runner: CliRunner, cli_env: dict[str, str]) -> None:
    result = runner.invoke(app, ["-o", "log.level=LOUD", "validate"], env=cli_env)

    assert result.exit_code != 0
    assert isinstance(result.exception, CLIError)


def test_exception_handlers_resolve_most_specific_type() -> None:
    assert app.handler_for(RecipeNotFoundError("nope")) is handle_unknown_recipe
    assert app.handler_for(SiteRecipesError("boom")) is handle_engine_error
    assert app.handler_for(CLIError("bad input")) is handle_cli_error
    assert app.handler_for(KeyError("other")) is None
