"""Catalog-wide validation: per-recipe rules plus cross-recipe consistency."""

from __future__ import annotations

from collections import Counter
from typing import List, Sequence

from ..config.policies import ValidationPolicy
from ..entities.core import Recipe, ValidationIssue, ValidationResult
from ..utils.logging import get_logger
from .rules import RecipeValidator

_LOGGER = get_logger(module=__name__)


def _identity(recipe: Recipe) -> str | None:
    meta = getattr(recipe, "meta", None)
    return getattr(meta, "identity", None) or None


def _duplicate_identities(recipes: Sequence[Recipe]) -> List[ValidationIssue]:
    counts = Counter(identity for identity in map(_identity, recipes) if identity)
    return [
        ValidationIssue(
            recipe=identity,
            field="meta.identity",
            message=f"Duplicate identity found {count} times",
            severity="error",
        )
        for identity, count in counts.items()
        if count > 1
    ]


def _ownership_overlaps(recipes: Sequence[Recipe], fallback_identity: str) -> List[ValidationIssue]:
    """Warn when an earlier recipe's example would also be owned by a later one.

    Dispatch resolves such ambiguity by registration order, so this is only
    ever reported as a warning.
    """

    warnings: List[ValidationIssue] = []
    for i, earlier in enumerate(recipes):
        if earlier.meta is None or _identity(earlier) == fallback_identity:
            continue
        for later in recipes[i + 1 :]:
            if later.meta is None or _identity(later) == fallback_identity:
                continue
            for example in earlier.meta.examples:
                try:
                    overlaps = later.owns(example.url)
                except Exception:
                    overlaps = False
                if overlaps:
                    warnings.append(
                        ValidationIssue(
                            recipe=_identity(earlier) or "unknown",
                            field="match",
                            message=f'Example "{example.url}" also matches {_identity(later)} recipe',
                            severity="warning",
                        )
                    )
    return warnings


def validate_all_recipes(
    recipes: Sequence[Recipe], policy: ValidationPolicy | None = None
) -> ValidationResult:
    """Validate every recipe and check the catalog for cross-recipe defects."""

    validator = RecipeValidator(policy)
    recipes = list(recipes)

    merged = ValidationResult.merge([validator.validate(recipe) for recipe in recipes])
    errors = [*merged.errors, *_duplicate_identities(recipes)]
    warnings = [*merged.warnings, *_ownership_overlaps(recipes, validator.policy.fallback_identity)]
    result = ValidationResult(errors=errors, warnings=warnings)

    log = _LOGGER.info if result.valid else _LOGGER.warning
    log(
        "Catalog validation finished",
        recipes=len(recipes),
        errors=len(result.errors),
        warnings=len(result.warnings),
    )
    return result


__all__ = ["validate_all_recipes"]
