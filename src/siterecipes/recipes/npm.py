"""npm package pages, read through the public registry API."""

from __future__ import annotations

import re
from typing import Any, Dict
from urllib.parse import quote

from ..entities.core import (
    AlertTemplate,
    Category,
    FieldType,
    Recipe,
    RecipeExample,
    RecipeField,
    RecipeMeta,
    UrlMatcher,
)
from ..extraction import ExtractionPipeline, StructuredSource, rule
from ..utils.helpers import dig

REGISTRY_URL = "https://registry.npmjs.org/{name}"

_PACKAGE_NAME = re.compile(r"npmjs\.com/package/((?:@[^/?#]+/)?[^/?#]+)", re.IGNORECASE)

FIELDS = {
    "name": RecipeField(FieldType.TEXT, "Package Name", primary=True),
    "version": RecipeField(FieldType.TEXT, "Latest Version", primary=True),
    "description": RecipeField(FieldType.TEXT, "Description"),
    "weekly_downloads": RecipeField(FieldType.NUMBER, "Weekly Downloads", noise=True),
    "license": RecipeField(FieldType.TEXT, "License"),
    "dependencies": RecipeField(FieldType.NUMBER, "Dependencies"),
    "last_publish": RecipeField(FieldType.TIMESTAMP, "Last Published"),
    "deprecated": RecipeField(FieldType.BOOLEAN, "Deprecated"),
    "deprecation_message": RecipeField(FieldType.TEXT, "Deprecation Message"),
    "maintainer_count": RecipeField(FieldType.NUMBER, "Maintainers"),
    "types_included": RecipeField(FieldType.BOOLEAN, "TypeScript Types"),
    "repository": RecipeField(FieldType.URL, "Repository"),
    "homepage": RecipeField(FieldType.URL, "Homepage"),
    "keywords": RecipeField(FieldType.TEXT, "Keywords"),
}


def registry_url(url: str) -> str:
    """Rewrite an npmjs.com package page URL to its registry document."""

    match = _PACKAGE_NAME.search(url)
    if match is None:
        return url
    return REGISTRY_URL.format(name=quote(match.group(1), safe="!~*'()"))


def _repository(doc: Dict[str, Any]) -> str | None:
    raw = dig(doc, "repository", "url")
    if not isinstance(raw, str):
        return None
    cleaned = re.sub(r"^git\+", "", raw)
    cleaned = re.sub(r"\.git$", "", cleaned)
    return cleaned.replace("git://", "https://")


def _package_document(doc: Any) -> Dict[str, Any] | None:
    if not isinstance(doc, dict):
        return None
    name = doc.get("name")
    license_info = doc.get("license")
    latest = dig(doc, "dist-tags", "latest")
    values: Dict[str, Any] = {
        "name": name,
        "description": doc.get("description"),
        "license": license_info if isinstance(license_info, str) else dig(license_info, "type"),
        "version": latest,
        "repository": _repository(doc),
        "homepage": doc.get("homepage"),
    }

    release = dig(doc, "versions", latest) if isinstance(latest, str) else None
    if isinstance(release, dict):
        deprecated = release.get("deprecated")
        values["dependencies"] = len(release.get("dependencies") or {})
        values["types_included"] = bool(
            release.get("types")
            or release.get("typings")
            or (isinstance(name, str) and name.startswith("@types/"))
        )
        values["deprecated"] = bool(deprecated)
        if isinstance(deprecated, str) and deprecated:
            values["deprecation_message"] = deprecated

    maintainers = doc.get("maintainers")
    if isinstance(maintainers, list):
        values["maintainer_count"] = len(maintainers)
    if isinstance(latest, str):
        values["last_publish"] = dig(doc, "time", latest)
    keywords = doc.get("keywords")
    if isinstance(keywords, list) and keywords:
        values["keywords"] = ", ".join(str(keyword) for keyword in keywords)
    return values


NPM = Recipe(
    meta=RecipeMeta(
        identity="npm",
        name="npm Package",
        description="Track downloads, versions, and dependencies on npm",
        long_description=(
            "Monitor npm packages for new releases, download trends, and dependency updates. "
            "Stay on top of package updates, security patches, and library popularity."
        ),
        icon="https://static.npmjs.com/b0f1a8318363185cc2ea6a40ac23eeb2.png",
        category=Category.DEVELOPER,
        tags=("javascript", "nodejs", "packages", "libraries"),
        maintainers=("siterecipes",),
        examples=(
            RecipeExample(url="https://www.npmjs.com/package/react", title="react"),
            RecipeExample(url="https://www.npmjs.com/package/lodash", title="lodash"),
            RecipeExample(url="https://www.npmjs.com/package/express", title="express"),
        ),
    ),
    match=UrlMatcher.regex(r"^https?://(www\.)?npmjs\.com/package/"),
    fields=FIELDS,
    alerts=(
        AlertTemplate(
            id="new-version",
            label="New Version",
            description="Get notified when a new version is published",
            when="version != previous.version",
            icon="📦",
        ),
        AlertTemplate(
            id="major-update",
            label="Major Update",
            description="Get notified on major version bumps",
            when='int(version.split(".")[0]) > int(previous.version.split(".")[0])',
            icon="🚀",
        ),
        AlertTemplate(
            id="deprecated",
            label="Package Deprecated",
            description="Get notified if package is deprecated",
            when="deprecated == true && previous.deprecated == false",
            icon="⚠️",
        ),
        AlertTemplate(
            id="popularity-spike",
            label="Popularity Spike",
            description="Get notified when downloads double",
            when="weekly_downloads > previous.weekly_downloads * 2",
            icon="📈",
        ),
    ),
    transform_url=registry_url,
    headers={"Accept": "application/json"},
    extract=ExtractionPipeline(
        FIELDS,
        structured=(_package_document,),
        structured_source=StructuredSource.DOCUMENT,
        patterns={
            "version": [rule(r'"version":\s*"([^"]+)"')],
            "name": [rule(r'"name":\s*"([^"]+)"')],
        },
    ),
)
