"""GitHub repository landing pages."""

from __future__ import annotations

import re
from typing import Any, Dict
from urllib.parse import unquote

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

_DOTALL = re.IGNORECASE | re.DOTALL
_COUNT = r"([0-9,.kKmM]+)"

FIELDS = {
    "title": RecipeField(FieldType.TEXT, "Repository", primary=True),
    "owner": RecipeField(FieldType.TEXT, "Owner"),
    "repo": RecipeField(FieldType.TEXT, "Repository Name"),
    "description": RecipeField(FieldType.TEXT, "Description"),
    "stars": RecipeField(FieldType.NUMBER, "Stars", primary=True),
    "forks": RecipeField(FieldType.NUMBER, "Forks"),
    "watchers": RecipeField(FieldType.NUMBER, "Watchers"),
    "open_issues": RecipeField(FieldType.NUMBER, "Open Issues"),
    "latest_release": RecipeField(FieldType.TEXT, "Latest Release", primary=True),
    "release_date": RecipeField(FieldType.TIMESTAMP, "Release Date"),
    "primary_language": RecipeField(FieldType.TEXT, "Primary Language"),
    "license": RecipeField(FieldType.TEXT, "License"),
    "topics": RecipeField(FieldType.TEXT, "Topics"),
    "default_branch": RecipeField(FieldType.TEXT, "Default Branch"),
    "created_at": RecipeField(FieldType.TIMESTAMP, "Created"),
    "updated_at": RecipeField(FieldType.TIMESTAMP, "Last Updated", noise=True),
    "pushed_at": RecipeField(FieldType.TIMESTAMP, "Last Push"),
    "size": RecipeField(FieldType.NUMBER, "Size (KB)", noise=True),
    "is_archived": RecipeField(FieldType.BOOLEAN, "Archived"),
    "is_fork": RecipeField(FieldType.BOOLEAN, "Is Fork"),
    "has_wiki": RecipeField(FieldType.BOOLEAN, "Has Wiki"),
    "has_pages": RecipeField(FieldType.BOOLEAN, "Has Pages"),
    "homepage": RecipeField(FieldType.URL, "Homepage"),
}


def _repository_api(doc: Any) -> Dict[str, Any] | None:
    """Map a REST API repository document, when the payload is one."""

    if not isinstance(doc, dict) or not doc.get("full_name"):
        return None
    topics = doc.get("topics")
    return {
        "owner": dig(doc, "owner", "login"),
        "repo": doc.get("name"),
        "title": doc.get("full_name"),
        "description": doc.get("description"),
        "stars": doc.get("stargazers_count"),
        "forks": doc.get("forks_count"),
        "watchers": doc.get("subscribers_count"),
        "open_issues": doc.get("open_issues_count"),
        "primary_language": doc.get("language"),
        "license": dig(doc, "license", "spdx_id") or dig(doc, "license", "name"),
        "topics": ", ".join(topics) if isinstance(topics, list) and topics else None,
        "default_branch": doc.get("default_branch"),
        "created_at": doc.get("created_at"),
        "updated_at": doc.get("updated_at"),
        "pushed_at": doc.get("pushed_at"),
        "size": doc.get("size"),
        "is_archived": doc.get("archived"),
        "is_fork": doc.get("fork"),
        "has_wiki": doc.get("has_wiki"),
        "has_pages": doc.get("has_pages"),
        "homepage": doc.get("homepage") or None,
    }


def _meaningful_description(text: str) -> str | None:
    return text if len(text) > 10 else None


GITHUB = Recipe(
    meta=RecipeMeta(
        identity="github",
        name="GitHub Repository",
        description="Track releases, stars, forks, and activity on GitHub repositories",
        long_description=(
            "Monitor any GitHub repository for new releases, star milestones, and activity "
            "changes. Useful for tracking dependencies and open source projects."
        ),
        icon="https://github.githubassets.com/favicons/favicon.svg",
        category=Category.DEVELOPER,
        tags=("code", "open-source", "releases", "git"),
        maintainers=("siterecipes",),
        examples=(
            RecipeExample(url="https://github.com/facebook/react", title="facebook/react"),
            RecipeExample(url="https://github.com/vercel/next.js", title="vercel/next.js"),
            RecipeExample(url="https://github.com/tailwindlabs/tailwindcss", title="tailwindlabs/tailwindcss"),
        ),
    ),
    match=UrlMatcher.regex(r"^https?://(www\.)?github\.com/[^/]+/[^/]+/?$"),
    fields=FIELDS,
    alerts=(
        AlertTemplate(
            id="new-release",
            label="New Release",
            description="Get notified when a new version is released",
            when="latest_release != previous.latest_release",
            icon="🚀",
        ),
        AlertTemplate(
            id="star-milestone",
            label="Star Milestone",
            description="Get notified when stars reach a milestone (1k, 10k, etc)",
            when="floor(stars / 1000) > floor(previous.stars / 1000)",
            icon="⭐",
        ),
        AlertTemplate(
            id="trending",
            label="Trending Activity",
            description="Get notified when stars increase significantly",
            when="stars - previous.stars > 100",
            icon="📈",
        ),
        AlertTemplate(
            id="archived",
            label="Repository Archived",
            description="Get notified if the repository is archived",
            when="is_archived == true && previous.is_archived == false",
            icon="📦",
        ),
        AlertTemplate(
            id="new-push",
            label="New Code Push",
            description="Get notified when new code is pushed",
            when="pushed_at != previous.pushed_at",
            icon="💻",
        ),
    ),
    requires_rendering=True,
    extract=ExtractionPipeline(
        FIELDS,
        url_fields={
            "owner": [rule(r"github\.com/([^/?#]+)/[^/?#]+")],
            "repo": [rule(r"github\.com/[^/?#]+/([^/?#]+)")],
            "title": [rule(r"github\.com/([^/?#]+/[^/?#]+)")],
        },
        structured=(_repository_api,),
        structured_source=StructuredSource.DOCUMENT,
        patterns={
            "description": [
                rule(r'<p[^>]*class="[^"]*f4[^"]*my-3[^"]*"[^>]*>([^<]+)</p>', transform=_meaningful_description),
                rule(r'<meta[^>]*name="description"[^>]*content="([^"]+)"', transform=_meaningful_description),
                rule(r'<meta[^>]*property="og:description"[^>]*content="([^"]+)"', transform=_meaningful_description),
            ],
            "stars": [
                rule(rf'<a[^>]*href="[^"]*/stargazers"[^>]*>.*?<span[^>]*>{_COUNT}</span>', flags=_DOTALL),
                rule(rf"<strong[^>]*>{_COUNT}</strong>\s*stars"),
                rule(rf'id="repo-stars-counter-star"[^>]*>{_COUNT}<'),
                rule(rf'<span[^>]*class="[^"]*Counter[^"]*"[^>]*>{_COUNT}</span>\s*<span[^>]*>Star'),
            ],
            "forks": [
                rule(rf'<a[^>]*href="[^"]*/forks"[^>]*>.*?<span[^>]*>{_COUNT}</span>', flags=_DOTALL),
                rule(rf"<strong[^>]*>{_COUNT}</strong>\s*forks"),
                rule(rf'id="repo-network-counter"[^>]*>{_COUNT}<'),
            ],
            "watchers": [
                rule(rf'<a[^>]*href="[^"]*/watchers"[^>]*>.*?<span[^>]*>{_COUNT}</span>', flags=_DOTALL),
                rule(rf"<strong[^>]*>{_COUNT}</strong>\s*watching"),
            ],
            "open_issues": [
                rule(rf'<span[^>]*class="[^"]*Counter[^"]*"[^>]*>{_COUNT}</span>\s*<span[^>]*>Issues'),
                rule(rf'Issues.*?<span[^>]*class="[^"]*Counter[^"]*"[^>]*>{_COUNT}</span>', flags=_DOTALL),
            ],
            "latest_release": [
                rule(r'<a[^>]*href="[^"]*/releases/tag/([^"]+)"', transform=unquote),
                rule(r'<span[^>]*class="[^"]*css-truncate-target[^"]*"[^>]*>([^<]+)</span>\s*Latest'),
            ],
            "primary_language": [
                rule(
                    r'<span[^>]*class="[^"]*color-fg-default[^"]*text-bold[^"]*mr-1[^"]*"[^>]*>([^<]+)</span>\s*<span[^>]*>[0-9.]+%'
                ),
            ],
            "license": [rule(r'<a[^>]*href="[^"]*/blob/[^"]*LICENSE[^"]*"[^>]*>([^<]+)</a>')],
        },
    ),
)
