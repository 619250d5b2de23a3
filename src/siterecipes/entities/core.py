"""Core domain entities: recipes, their schema, and validation results."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, List, Literal, Mapping, Sequence

from pydantic import BaseModel, Field, computed_field


class FieldType(str, Enum):
    """Closed set of value types a recipe field may declare."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    MONEY = "money"
    URL = "url"
    TIMESTAMP = "timestamp"


class Category(str, Enum):
    """Catalog categories recipes are filed under."""

    ECOMMERCE = "ecommerce"
    DEVELOPER = "developer"
    JOBS = "jobs"
    SOCIAL = "social"
    NEWS = "news"
    FINANCE = "finance"
    STATUS = "status"
    ENTERTAINMENT = "entertainment"
    TRAVEL = "travel"
    GOVERNMENT = "government"
    OTHER = "other"


@dataclass(frozen=True)
class CategoryInfo:
    name: str
    icon: str
    description: str


CATEGORY_INFO: Mapping[Category, CategoryInfo] = MappingProxyType(
    {
        Category.ECOMMERCE: CategoryInfo("E-commerce", "🛒", "Price drops, stock alerts, and deal tracking"),
        Category.DEVELOPER: CategoryInfo("Developer", "💻", "GitHub releases, package updates, and changelogs"),
        Category.JOBS: CategoryInfo("Jobs", "💼", "Job postings and career page updates"),
        Category.SOCIAL: CategoryInfo("Social", "📱", "Social media profiles and content"),
        Category.NEWS: CategoryInfo("News", "📰", "News sites, blogs, and publications"),
        Category.FINANCE: CategoryInfo("Finance", "📈", "Stock prices, SEC filings, and financial data"),
        Category.STATUS: CategoryInfo("Status Pages", "🟢", "Service status and incident monitoring"),
        Category.ENTERTAINMENT: CategoryInfo("Entertainment", "🎬", "Movies, TV shows, games, and media"),
        Category.TRAVEL: CategoryInfo("Travel", "✈️", "Flight prices, hotel rates, and travel deals"),
        Category.GOVERNMENT: CategoryInfo("Government", "🏛️", "Government sites, permits, and public data"),
        Category.OTHER: CategoryInfo("Other", "🌐", "Miscellaneous websites"),
    }
)


@dataclass(frozen=True)
class RecipeField:
    """Typed description of one value an extraction routine may produce.

    ``noise`` marks fields whose changes are expected and uninteresting
    (view counts, image URLs); consumers use it to filter alerts.
    """

    value_type: FieldType | None
    label: str
    description: str | None = None
    primary: bool = False
    noise: bool = False
    currency: str | None = None


@dataclass(frozen=True)
class AlertTemplate:
    """Pre-configured alert a user can enable for a recipe.

    ``when`` is an opaque condition expression (e.g. ``"price < previous.price"``)
    evaluated by a downstream alerting service, never by this engine.
    """

    id: str
    label: str
    description: str = ""
    when: str = ""
    icon: str | None = None


@dataclass(frozen=True)
class RecipeExample:
    """Worked example URL shown in the catalog and used for overlap checks."""

    url: str
    title: str
    subtitle: str | None = None
    image: str | None = None


@dataclass(frozen=True)
class RecipeMeta:
    """Catalog metadata for a recipe."""

    identity: str
    name: str
    description: str
    icon: str
    category: Category | str | None
    maintainers: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    examples: tuple[RecipeExample, ...] = ()
    long_description: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "maintainers", tuple(self.maintainers or ()))
        object.__setattr__(self, "tags", tuple(self.tags or ()))
        object.__setattr__(self, "examples", tuple(self.examples or ()))


class MatchKind(str, Enum):
    PATTERN = "pattern"
    PREDICATE = "predicate"


_PORTABLE_FLAGS = ((re.IGNORECASE, "i"), (re.MULTILINE, "m"), (re.DOTALL, "s"))


@dataclass(frozen=True)
class UrlMatcher:
    """URL ownership test: either a compiled pattern or a predicate.

    Build instances with :meth:`regex` or :meth:`where`; :meth:`matches`
    branches on :attr:`kind` rather than inspecting the payload type.
    """

    kind: MatchKind
    pattern: re.Pattern[str] | None = None
    predicate: Callable[[str], bool] | None = None

    @classmethod
    def regex(cls, source: str, flags: int = re.IGNORECASE) -> "UrlMatcher":
        return cls(kind=MatchKind.PATTERN, pattern=re.compile(source, flags))

    @classmethod
    def where(cls, predicate: Callable[[str], bool]) -> "UrlMatcher":
        return cls(kind=MatchKind.PREDICATE, predicate=predicate)

    @property
    def source(self) -> str | None:
        """Pattern source text, or ``None`` for predicates."""
        if self.kind is MatchKind.PATTERN and self.pattern is not None:
            return self.pattern.pattern
        return None

    @property
    def flags(self) -> str | None:
        """Portable flag letters for the pattern, e.g. ``"i"`` when case-insensitive."""
        if self.kind is not MatchKind.PATTERN or self.pattern is None:
            return None
        return "".join(letter for flag, letter in _PORTABLE_FLAGS if self.pattern.flags & flag)

    def matches(self, url: str) -> bool:
        if self.kind is MatchKind.PATTERN:
            if self.pattern is None:
                raise TypeError("pattern matcher has no compiled pattern")
            return self.pattern.search(url) is not None
        if self.kind is MatchKind.PREDICATE:
            if not callable(self.predicate):
                raise TypeError("predicate matcher has no callable predicate")
            return bool(self.predicate(url))
        raise TypeError(f"unknown matcher kind: {self.kind!r}")


ExtractedData = Dict[str, Any]
ExtractionRoutine = Callable[[str, str], Awaitable[ExtractedData]]


@dataclass(frozen=True, eq=False)
class Recipe:
    """Declarative extraction definition for one class of URL.

    Construction never validates: a malformed recipe can be built and is
    reported by :func:`siterecipes.validation.validate_recipe` instead.
    """

    meta: RecipeMeta | None
    match: UrlMatcher | None
    fields: Mapping[str, RecipeField]
    extract: ExtractionRoutine | None
    alerts: tuple[AlertTemplate, ...] | None = None
    transform_url: Callable[[str], str] | None = None
    headers: Mapping[str, str] | None = None
    requires_rendering: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields or {})))
        if self.alerts is not None:
            object.__setattr__(self, "alerts", tuple(self.alerts))
        if self.headers is not None:
            object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def identity(self) -> str | None:
        return self.meta.identity if self.meta is not None else None

    def owns(self, url: str) -> bool:
        return self.match is not None and self.match.matches(url)

    def fetch_url(self, url: str) -> str:
        """URL the external fetcher should request for *url*."""
        if self.transform_url is None:
            return url
        return self.transform_url(url)


class ValidationIssue(BaseModel):
    """Single validator finding attributed to a recipe and field path."""

    recipe: str = Field(..., description="Identity of the offending recipe ('unknown' if absent)")
    field: str = Field(..., description="Dotted path of the offending attribute, e.g. meta.identity")
    message: str
    severity: Literal["error", "warning"]


class ValidationResult(BaseModel):
    """Outcome of a validation run; warnings never affect :attr:`valid`."""

    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def valid(self) -> bool:
        return not self.errors

    @classmethod
    def merge(cls, results: Sequence["ValidationResult"]) -> "ValidationResult":
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []
        for result in results:
            errors.extend(result.errors)
            warnings.extend(result.warnings)
        return cls(errors=errors, warnings=warnings)


class ExtractionCheck(BaseModel):
    """Result of smoke-testing an extraction routine."""

    success: bool
    data: Dict[str, Any] | None = None
    error: str | None = None


__all__ = [
    "AlertTemplate",
    "CATEGORY_INFO",
    "Category",
    "CategoryInfo",
    "ExtractedData",
    "ExtractionCheck",
    "ExtractionRoutine",
    "FieldType",
    "MatchKind",
    "Recipe",
    "RecipeExample",
    "RecipeField",
    "RecipeMeta",
    "UrlMatcher",
    "ValidationIssue",
    "ValidationResult",
]
