"""Hacker News items and listings, read through the Firebase API."""

from __future__ import annotations

import re
from urllib.parse import urlparse
from typing import Any, Dict, List

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
from ..extraction import ExtractionPipeline, PageContext, StructuredSource, extract_all, rule
from ..utils.normalization import decode_html_entities, extract_domain, truncate_text

API_ROOT = "https://hacker-news.firebaseio.com/v0"
TEXT_LIMIT = 500

_ITEM_ID = re.compile(r"item\?id=(\d+)")
_ITEM_PAGE = r"item\?id="
_STORY_TITLE = re.compile(
    r'<tr[^>]*class="athing"[^>]*>.*?<span[^>]*class="titleline"[^>]*>.*?<a[^>]*>([^<]+)</a>',
    re.IGNORECASE | re.DOTALL,
)
_STORY_POINTS = re.compile(r'<span[^>]*class="score"[^>]*>(\d+)\s*points?</span>', re.IGNORECASE)

FIELDS = {
    "title": RecipeField(FieldType.TEXT, "Title", primary=True),
    "points": RecipeField(FieldType.NUMBER, "Points", primary=True),
    "comments": RecipeField(FieldType.NUMBER, "Comments", primary=True),
    "author": RecipeField(FieldType.TEXT, "Author"),
    "rank": RecipeField(FieldType.NUMBER, "Front Page Rank", description="Position on the front page (1-30)"),
    "url": RecipeField(FieldType.URL, "Link URL"),
    "domain": RecipeField(FieldType.TEXT, "Domain"),
    "item_id": RecipeField(FieldType.NUMBER, "Item ID"),
    "created_at": RecipeField(FieldType.TIMESTAMP, "Posted"),
    "item_type": RecipeField(FieldType.TEXT, "Type", description="story, comment, job, poll, pollopt"),
    "is_deleted": RecipeField(FieldType.BOOLEAN, "Deleted"),
    "is_dead": RecipeField(FieldType.BOOLEAN, "Dead"),
    "text": RecipeField(FieldType.TEXT, "Text"),
    "top_story_count": RecipeField(
        FieldType.NUMBER, "Top Stories", description="Number of stories on the front page"
    ),
    "top_story_id": RecipeField(FieldType.NUMBER, "Top Story ID"),
    "top_story_title": RecipeField(FieldType.TEXT, "Top Story"),
    "top_story_points": RecipeField(FieldType.NUMBER, "Top Story Points"),
    "story_count": RecipeField(FieldType.NUMBER, "Stories Listed"),
    "total_front_page_points": RecipeField(FieldType.NUMBER, "Total Front Page Points", noise=True),
}


def api_url(url: str) -> str:
    """Rewrite an item or listing URL to the matching Firebase endpoint."""

    item = _ITEM_ID.search(url)
    if item is not None:
        return f"{API_ROOT}/item/{item.group(1)}.json"
    path = urlparse(url).path.rstrip("/")
    if path in ("", "/front", "/news"):
        return f"{API_ROOT}/topstories.json"
    if path == "/newest":
        return f"{API_ROOT}/newstories.json"
    if path == "/best":
        return f"{API_ROOT}/beststories.json"
    return url


def _api_document(doc: Any) -> Dict[str, Any] | None:
    if isinstance(doc, list):
        return {
            "top_story_count": len(doc),
            "top_story_id": doc[0] if doc else None,
        }
    if not isinstance(doc, dict) or not doc.get("id"):
        return None

    comments = doc.get("descendants")
    if comments is None and isinstance(doc.get("kids"), list):
        comments = len(doc["kids"])
    link = doc.get("url")
    text = doc.get("text")
    return {
        "item_id": doc.get("id"),
        "title": doc.get("title"),
        "points": doc.get("score"),
        "author": doc.get("by"),
        "item_type": doc.get("type"),
        "is_deleted": bool(doc.get("deleted")),
        "is_dead": bool(doc.get("dead")),
        "comments": comments,
        "url": link,
        "domain": extract_domain(link) if isinstance(link, str) else None,
        "created_at": doc.get("time"),
        "text": truncate_text(text, TEXT_LIMIT) if isinstance(text, str) else None,
    }


def _front_page(data: Dict[str, Any], page: PageContext) -> Dict[str, Any] | None:
    """Summarise a listing page scraped from HTML."""

    if page.document is not None or re.search(_ITEM_PAGE, page.url):
        return None
    titles = [decode_html_entities(title) for title in extract_all(page.payload, _STORY_TITLE)]
    points: List[int] = [int(value) for value in extract_all(page.payload, _STORY_POINTS)][: len(titles)]
    if not titles:
        return None
    return {
        "top_story_title": titles[0],
        "top_story_points": points[0] if points else 0,
        "story_count": len(titles),
        "total_front_page_points": sum(points),
    }


HACKERNEWS = Recipe(
    meta=RecipeMeta(
        identity="hackernews",
        name="Hacker News",
        description="Track stories, comments, and points on Hacker News",
        long_description=(
            "Monitor Hacker News stories for point changes, new comments, and front page "
            "activity. Great for tracking your submissions or stories you are interested in."
        ),
        icon="https://news.ycombinator.com/favicon.ico",
        category=Category.NEWS,
        tags=("tech", "news", "startup", "programming"),
        maintainers=("siterecipes",),
        examples=(
            RecipeExample(
                url="https://news.ycombinator.com/item?id=46183294",
                title="I failed to recreate the 1996 Space Jam website with Claude",
            ),
            RecipeExample(
                url="https://news.ycombinator.com/item?id=46147285",
                title="Uninitialized garbage on ia64 can be deadly (2004)",
            ),
        ),
    ),
    match=UrlMatcher.regex(r"^https?://(www\.)?news\.ycombinator\.com/(item|front|news|newest|best)"),
    fields=FIELDS,
    alerts=(
        AlertTemplate(
            id="front-page",
            label="Hit Front Page",
            description="Get notified when story reaches the front page",
            when="rank <= 30 && previous.rank > 30",
            icon="🔥",
        ),
        AlertTemplate(
            id="points-milestone",
            label="Points Milestone",
            description="Get notified at point milestones (100, 500, 1000)",
            when="floor(points / 100) > floor(previous.points / 100)",
            icon="⬆️",
        ),
        AlertTemplate(
            id="viral",
            label="Going Viral",
            description="Get notified when points increase rapidly",
            when="points - previous.points > 50",
            icon="🚀",
        ),
    ),
    transform_url=api_url,
    headers={"Accept": "application/json", "User-Agent": "siterecipes"},
    extract=ExtractionPipeline(
        FIELDS,
        url_fields={"item_id": [rule(_ITEM_ID.pattern)]},
        structured=(_api_document,),
        structured_source=StructuredSource.DOCUMENT,
        patterns={
            "title": [
                rule(
                    r'<span[^>]*class="titleline"[^>]*>.*?<a[^>]*>([^<]+)</a>',
                    flags=re.IGNORECASE | re.DOTALL,
                    url_filter=_ITEM_PAGE,
                )
            ],
            "points": [rule(r'<span[^>]*class="score"[^>]*>(\d+)\s*points?</span>', url_filter=_ITEM_PAGE)],
            "comments": [rule(r"(\d+)\s*comments?", url_filter=_ITEM_PAGE)],
            "author": [rule(r'<a[^>]*class="hnuser"[^>]*>([^<]+)</a>', url_filter=_ITEM_PAGE)],
        },
        derived=(_front_page,),
    ),
)
