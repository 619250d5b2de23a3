"""Shared state and argument helpers for the siterecipes CLI."""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping

import typer
from rich.console import Console

from siterecipes.catalog.registry import RecipeRegistry
from siterecipes.config.settings import Settings
from siterecipes.config.sources import deep_merge, nest, parse_scalar
from siterecipes.recipes import get_registry
from siterecipes.utils.helpers import serialize_json
from siterecipes.utils.logging import configure_logging

console = Console()


class CLIError(RuntimeError):
    """User-facing failure rendered without a traceback."""


@dataclass(slots=True)
class CLIState:
    """Resolved settings and registry shared by every subcommand."""

    settings: Settings
    registry: RecipeRegistry
    overrides: Dict[str, Any]
    verbose: bool

    @property
    def environment(self) -> str:
        return self.settings.environment


def parse_override(argument: str) -> Dict[str, Any]:
    """Turn ``dotted.key=value`` into a nested mapping; values are YAML scalars."""

    dotted, separator, raw = argument.partition("=")
    path = [segment.strip() for segment in dotted.split(".") if segment.strip()]
    if not separator or not path:
        raise typer.BadParameter(f"Expected dotted.key=value, got {argument!r}")
    return nest(path, parse_scalar(raw))


def merge_overrides(overrides: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """Deep-merge repeated ``--override`` values, later ones winning."""

    try:
        return reduce(deep_merge, overrides, {})
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def build_state(
    *,
    environment: str | None,
    overrides: Iterable[Mapping[str, Any]],
    verbose: bool,
) -> CLIState:
    """Resolve settings, configure logging, and bundle the registry."""

    merged = merge_overrides(overrides)
    if environment:
        merged["environment"] = environment
    try:
        settings = Settings(**merged)
    except ValueError as exc:
        raise CLIError(f"Invalid configuration: {exc}") from exc
    configure_logging(settings, level="DEBUG" if verbose else None)
    return CLIState(settings=settings, registry=get_registry(), overrides=merged, verbose=verbose)


def get_state(ctx: typer.Context) -> CLIState:
    state = ctx.find_object(CLIState)
    if state is None:
        raise CLIError("CLI state is missing; run commands through the siterecipes app")
    return state


def read_payload(path: str | Path) -> str:
    """Read a saved page payload from disk."""

    target = Path(path).expanduser()
    if not target.is_file():
        raise CLIError(f"Payload file not found: {target}")
    return target.read_text(encoding="utf-8", errors="replace")


def write_json(document: Any, destination: str | Path) -> Path:
    return serialize_json(document, Path(destination).expanduser().resolve())
