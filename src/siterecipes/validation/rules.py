"""Per-recipe validation rules."""

from __future__ import annotations

import re
from typing import Any, List, Set
from urllib.parse import urlparse

from ..config.policies import ValidationPolicy
from ..entities.core import (
    Category,
    FieldType,
    Recipe,
    RecipeMeta,
    UrlMatcher,
    ValidationIssue,
    ValidationResult,
)

_VALID_CATEGORIES = ", ".join(category.value for category in Category)


class _IssueCollector:
    """Accumulates findings attributed to a single recipe."""

    def __init__(self, recipe: str) -> None:
        self.recipe = recipe
        self.errors: List[ValidationIssue] = []
        self.warnings: List[ValidationIssue] = []

    def error(self, field: str, message: str) -> None:
        self.errors.append(ValidationIssue(recipe=self.recipe, field=field, message=message, severity="error"))

    def warning(self, field: str, message: str) -> None:
        self.warnings.append(
            ValidationIssue(recipe=self.recipe, field=field, message=message, severity="warning")
        )

    def result(self) -> ValidationResult:
        return ValidationResult(errors=self.errors, warnings=self.warnings)


def _is_absolute_http_url(url: Any) -> bool:
    if not isinstance(url, str) or not url:
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def _is_known(enum_type: type, value: Any) -> bool:
    try:
        enum_type(value)
    except ValueError:
        return False
    return True


class RecipeValidator:
    """Apply structural and catalog-quality checks to a single recipe.

    Malformed recipes never raise; every defect becomes a
    :class:`~siterecipes.entities.ValidationIssue`.
    """

    def __init__(self, policy: ValidationPolicy | None = None) -> None:
        self._policy = policy or ValidationPolicy()
        self._identity_pattern = re.compile(self._policy.identity_pattern)

    @property
    def policy(self) -> ValidationPolicy:
        return self._policy

    def validate(self, recipe: Recipe) -> ValidationResult:
        meta = getattr(recipe, "meta", None)
        issues = _IssueCollector(getattr(meta, "identity", None) or "unknown")

        if meta is None:
            issues.error("meta", "Recipe must have meta object")
            return issues.result()

        self._check_meta(meta, issues)
        matcher_ok = self._check_matcher(recipe, issues)
        self._check_fields(recipe, issues)
        self._check_extract(recipe, issues)
        self._check_alerts(recipe, issues)
        self._check_examples(recipe, meta, issues, matcher_ok=matcher_ok)
        return issues.result()

    # -- internals -----------------------------------------------------------------

    def _check_meta(self, meta: RecipeMeta, issues: _IssueCollector) -> None:
        policy = self._policy
        if not meta.identity:
            issues.error("meta.identity", "Recipe must have an identity")
        elif not self._identity_pattern.fullmatch(meta.identity):
            issues.error("meta.identity", "Identity must be lowercase alphanumeric with hyphens only")

        if not meta.name:
            issues.error("meta.name", "Recipe must have a name")
        elif len(meta.name) > policy.name_max_length:
            issues.warning("meta.name", f"Name should be under {policy.name_max_length} characters")

        if not meta.description:
            issues.error("meta.description", "Recipe must have a description")
        elif len(meta.description) < policy.description_min_length:
            issues.warning(
                "meta.description",
                f"Description should be at least {policy.description_min_length} characters",
            )
        elif len(meta.description) > policy.description_max_length:
            issues.warning(
                "meta.description",
                f"Description should be under {policy.description_max_length} characters",
            )

        if not meta.icon:
            issues.error("meta.icon", "Recipe must have an icon")

        if not meta.category:
            issues.error("meta.category", "Recipe must have a category")
        elif not _is_known(Category, meta.category):
            issues.error("meta.category", f"Invalid category. Must be one of: {_VALID_CATEGORIES}")

        if not meta.maintainers:
            issues.error("meta.maintainers", "Recipe must have at least one maintainer")

        if not meta.tags:
            issues.warning("meta.tags", "Recipe should have at least one tag for discoverability")

    def _check_matcher(self, recipe: Recipe, issues: _IssueCollector) -> bool:
        matcher = recipe.match
        if matcher is None:
            issues.error("match", "Recipe must have a match pattern")
            return False
        if not isinstance(matcher, UrlMatcher):
            issues.error("match", "Match must be a URL pattern or predicate")
            return False
        try:
            matcher.matches(self._policy.probe_url)
        except Exception as exc:
            issues.error("match", f"Invalid URL matcher: {exc}")
            return False
        return True

    def _check_fields(self, recipe: Recipe, issues: _IssueCollector) -> None:
        if not recipe.fields:
            issues.error("fields", "Recipe must have at least one field")
            return

        has_primary = False
        for name, field in recipe.fields.items():
            path = f"fields.{name}"
            value_type = getattr(field, "value_type", None)
            if not value_type:
                issues.error(path, "Field must have a type")
            elif not _is_known(FieldType, value_type):
                issues.error(path, f"Unknown field type: {value_type}")
            if not getattr(field, "label", None):
                issues.error(path, "Field must have a label")
            if getattr(field, "primary", False):
                has_primary = True

        if not has_primary:
            issues.warning("fields", "Recipe should have at least one primary field")

    def _check_extract(self, recipe: Recipe, issues: _IssueCollector) -> None:
        if recipe.extract is None:
            issues.error("extract", "Recipe must have an extract routine")
        elif not callable(recipe.extract):
            issues.error("extract", "Extract must be callable")

    def _check_alerts(self, recipe: Recipe, issues: _IssueCollector) -> None:
        if recipe.alerts is None:
            issues.warning("alerts", "Recipe should have at least one default alert")
            return

        seen: Set[str] = set()
        for alert in recipe.alerts:
            if not alert.id:
                issues.error("alerts", "Alert must have an id")
            elif alert.id in seen:
                issues.error("alerts", f"Duplicate alert id: {alert.id}")
            else:
                seen.add(alert.id)

            if not alert.label:
                issues.error("alerts", f"Alert {alert.id} must have a label")
            if not alert.when:
                issues.error("alerts", f"Alert {alert.id} must have a when condition")

    def _check_examples(
        self,
        recipe: Recipe,
        meta: RecipeMeta,
        issues: _IssueCollector,
        *,
        matcher_ok: bool,
    ) -> None:
        if not meta.examples:
            issues.warning("meta.examples", "Recipe should have worked examples")
            return

        for example in meta.examples:
            if not _is_absolute_http_url(example.url):
                issues.error("meta.examples", f"Invalid example URL: {example.url}")

            if not example.title or not example.title.strip():
                issues.error("meta.examples", f"Example missing title for URL: {example.url}")

            if matcher_ok and not self._owns(recipe, example.url):
                issues.error("meta.examples", f"Example URL does not match recipe pattern: {example.url}")

    @staticmethod
    def _owns(recipe: Recipe, url: str) -> bool:
        try:
            return recipe.owns(url)
        except Exception:
            return False


def validate_recipe(recipe: Recipe, policy: ValidationPolicy | None = None) -> ValidationResult:
    """Validate a single recipe for completeness and correctness."""

    return RecipeValidator(policy).validate(recipe)


__all__ = ["RecipeValidator", "validate_recipe"]
