"""Typer application exposing catalog checks and offline extraction."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional, Sequence

import typer
from rich.table import Table

from siterecipes.catalog import client_categories, client_fallback_recipe, client_recipes
from siterecipes.config.policies import SmokeTestPolicy
from siterecipes.entities.core import Recipe, ValidationIssue
from siterecipes.errors import RecipeNotFoundError, SiteRecipesError
from siterecipes.utils.logging import log_timing
from siterecipes.validation import test_extraction_routine, validate_all_recipes

from .common import CLIError, build_state, console, get_state, parse_override, read_payload, write_json

ExitHandler = Callable[[BaseException], int]


class SiteRecipesTyper(typer.Typer):
    """Typer app that turns known exceptions into exit codes instead of tracebacks.

    Handlers are resolved along the exception's MRO, so the most specific
    registration wins regardless of registration order.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._handlers: Dict[type[BaseException], ExitHandler] = {}

    def exception_handler(self, exception_type: type[BaseException]) -> Callable[[ExitHandler], ExitHandler]:
        def register(handler: ExitHandler) -> ExitHandler:
            self._handlers[exception_type] = handler
            return handler

        return register

    def handler_for(self, exception: BaseException) -> ExitHandler | None:
        for kind in type(exception).__mro__:
            if kind in self._handlers:
                return self._handlers[kind]
        return None

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        try:
            return super().__call__(*args, **kwargs)
        except Exception as exc:  # pragma: no cover - exercised through the console script
            handler = self.handler_for(exc)
            if handler is None:
                raise
            raise SystemExit(handler(exc)) from None


app = SiteRecipesTyper(
    add_completion=False,
    help="Validate the recipe catalog, inspect URL dispatch, and run extractions offline.",
    no_args_is_help=True,
)


@app.exception_handler(CLIError)
def handle_cli_error(exception: BaseException) -> int:
    console.print(f"[bold red]Error:[/bold red] {exception}")
    return 2


@app.exception_handler(RecipeNotFoundError)
def handle_unknown_recipe(exception: BaseException) -> int:
    identity = getattr(exception, "identity", "?")
    console.print(f"[bold red]Unknown recipe:[/bold red] {identity}")
    return 2


@app.exception_handler(SiteRecipesError)
def handle_engine_error(exception: BaseException) -> int:
    console.print(f"[bold red]Engine error:[/bold red] {exception}")
    return 1


@app.callback()
def main(
    ctx: typer.Context,
    environment: Optional[str] = typer.Option(
        None,
        "--environment",
        "-e",
        help="Configuration environment (development, testing, production).",
        show_default=False,
    ),
    override: List[str] = typer.Option(  # noqa: B008 - Typer callback signature
        [],
        "--override",
        "-o",
        metavar="KEY=VALUE",
        help="Settings override such as policies.smoke.enabled=false (repeatable).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log at DEBUG and print the resolved CLI context.",
    ),
) -> None:
    """Resolve settings and the recipe registry for the subcommand."""

    state = build_state(
        environment=environment,
        overrides=[parse_override(item) for item in override],
        verbose=verbose,
    )
    ctx.obj = state

    if verbose:
        table = Table(title="CLI Context", show_header=False, box=None)
        table.add_row("Environment", state.environment)
        table.add_row("Policy version", state.settings.policy_version)
        table.add_row("Recipes", str(len(state.registry)))
        table.add_row("Log file", str(state.settings.log_file or "disabled"))
        console.print(table)


def _smoke_url(recipe: Recipe, policy: SmokeTestPolicy) -> str:
    if recipe.meta is not None and recipe.meta.examples:
        return recipe.meta.examples[0].url
    return policy.default_url


async def _smoke_failures(recipes: Sequence[Recipe], policy: SmokeTestPolicy) -> List[tuple[str, str]]:
    failures: List[tuple[str, str]] = []
    for recipe in recipes:
        check = await test_extraction_routine(recipe, policy.payload, _smoke_url(recipe, policy))
        if not check.success:
            failures.append((recipe.identity or "unknown", check.error or "unknown error"))
    return failures


def _issue_table(title: str, issues: Sequence[ValidationIssue], style: str) -> Table:
    table = Table(title=title, title_style=style)
    table.add_column("Recipe")
    table.add_column("Field")
    table.add_column("Message")
    for issue in issues:
        table.add_row(issue.recipe, issue.field, issue.message)
    return table


@app.command("validate")
def validate_command(
    ctx: typer.Context,
    smoke: Optional[bool] = typer.Option(
        None,
        "--smoke/--no-smoke",
        help="Smoke-test every extraction routine; defaults to the smoke policy.",
        show_default=False,
    ),
) -> None:
    """Validate every bundled recipe; exit 1 on errors or smoke failures."""

    state = get_state(ctx)
    policies = state.settings.policies
    recipes = state.registry.list_all()

    with log_timing("validate", recipes=len(recipes)):
        result = validate_all_recipes(recipes, policies.validation)

    run_smoke = policies.smoke.enabled if smoke is None else smoke
    failures = asyncio.run(_smoke_failures(recipes, policies.smoke)) if run_smoke else []

    if result.errors:
        console.print(_issue_table("Errors", result.errors, "bold red"))
    if result.warnings:
        console.print(_issue_table("Warnings", result.warnings, "yellow"))
    if failures:
        table = Table(title="Extraction smoke test failures", title_style="bold red")
        table.add_column("Recipe")
        table.add_column("Error")
        for identity, error in failures:
            table.add_row(identity, error)
        console.print(table)

    summary = Table(title="Validation Summary", show_header=False, box=None)
    summary.add_row("Policy version", policies.policy_version)
    summary.add_row("Recipes", str(len(recipes)))
    summary.add_row("Errors", str(len(result.errors)))
    summary.add_row("Warnings", str(len(result.warnings)))
    summary.add_row("Smoke test", f"{len(failures)} failure(s)" if run_smoke else "skipped")
    console.print(summary)

    if result.errors or failures:
        raise typer.Exit(code=1)
    console.print("[bold green]All recipes valid[/bold green]")


@app.command("resolve")
def resolve_command(ctx: typer.Context, url: str = typer.Argument(..., help="URL to dispatch.")) -> None:
    """Show which recipe owns URL and how it would be fetched."""

    recipe = get_state(ctx).registry.resolve(url)
    try:
        fetch_url = recipe.fetch_url(url)
    except Exception as exc:
        raise CLIError(f"URL transform for recipe '{recipe.identity}' failed: {exc}") from exc
    table = Table(title="Resolved Recipe", show_header=False, box=None)
    table.add_row("Identity", recipe.identity or "<unknown>")
    table.add_row("Name", recipe.meta.name if recipe.meta is not None else "<unknown>")
    table.add_row("Fetch URL", fetch_url)
    table.add_row("Headers", json.dumps(dict(recipe.headers or {})))
    table.add_row("Requires rendering", "yes" if recipe.requires_rendering else "no")
    console.print(table)


@app.command("catalog")
def catalog_command(
    ctx: typer.Context,
    output: Optional[str] = typer.Option(
        None,
        "--output",
        help="Write the catalog JSON to this file instead of stdout.",
        show_default=False,
    ),
) -> None:
    """Emit the serializable catalog projection as JSON."""

    registry = get_state(ctx).registry
    document = {
        "recipes": [recipe.model_dump(mode="json") for recipe in client_recipes(registry)],
        "fallback": client_fallback_recipe(registry).model_dump(mode="json"),
        "categories": [category.model_dump(mode="json") for category in client_categories()],
    }
    if output:
        console.print(f"Catalog written to {write_json(document, output)}")
        return
    console.print_json(data=document)


@app.command("extract")
def extract_command(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="URL the payload was fetched from."),
    payload: str = typer.Option(..., "--payload", "-p", help="File holding the fetched payload."),
    recipe_id: Optional[str] = typer.Option(
        None,
        "--recipe",
        "-r",
        help="Force a recipe identity instead of dispatching on URL.",
        show_default=False,
    ),
) -> None:
    """Run an extraction routine against a saved payload."""

    registry = get_state(ctx).registry
    recipe = registry.require(recipe_id) if recipe_id else registry.resolve(url)
    content = read_payload(payload)

    check = asyncio.run(test_extraction_routine(recipe, content, url))
    if not check.success:
        raise CLIError(f"Extraction with recipe '{recipe.identity}' failed: {check.error}")
    console.print_json(data={"recipe": recipe.identity, "data": check.data})


__all__ = ["app"]
