"""Behavioural tests for the bundled site recipes."""

from __future__ import annotations

import asyncio
import json

import pytest

from siterecipes.config.policies import SmokeTestPolicy
from siterecipes.recipes import (
    AMAZON,
    GENERIC,
    GITHUB,
    HACKERNEWS,
    NPM,
    REDDIT,
    SITE_RECIPES,
    get_registry,
    list_all,
    lookup_by_identity,
    resolve,
)
from siterecipes.recipes.hackernews import api_url
from siterecipes.recipes.npm import registry_url
from siterecipes.recipes.reddit import json_url
from siterecipes.validation import test_extraction_routine, validate_all_recipes


def _extract(recipe, payload, url: str) -> dict:
    if not isinstance(payload, str):
        payload = json.dumps(payload)
    return asyncio.run(recipe.extract(payload, url))


def test_bundled_catalog_has_no_errors() -> None:
    result = validate_all_recipes(list_all())

    assert result.errors == []
    assert result.valid


def test_registry_is_built_once() -> None:
    assert get_registry() is get_registry()
    assert list_all()[-1] is GENERIC
    assert lookup_by_identity("npm") is NPM
    assert lookup_by_identity("generic") is GENERIC


@pytest.mark.parametrize("recipe", SITE_RECIPES, ids=lambda recipe: recipe.identity)
def test_examples_dispatch_to_their_recipe(recipe) -> None:
    for example in recipe.meta.examples:
        assert resolve(example.url) is recipe


def test_unclaimed_urls_fall_back_to_generic() -> None:
    assert resolve("https://blog.example.org/posts/1") is GENERIC
    assert resolve("https://github.com/facebook/react/issues") is GENERIC


def test_npm_registry_url() -> None:
    assert registry_url("https://www.npmjs.com/package/react") == "https://registry.npmjs.org/react"
    assert (
        registry_url("https://www.npmjs.com/package/@types/node?activeTab=readme")
        == "https://registry.npmjs.org/%40types%2Fnode"
    )
    assert registry_url("https://example.com/other") == "https://example.com/other"
    assert NPM.fetch_url("https://www.npmjs.com/package/lodash") == "https://registry.npmjs.org/lodash"


def test_reddit_json_url() -> None:
    thread = "https://www.reddit.com/r/python/comments/abc123/a_title"

    assert json_url(f"{thread}/") == f"{thread}.json"
    assert json_url(f"{thread}/?utm_source=share#comments") == f"{thread}.json"
    assert json_url(thread) == f"{thread}.json"


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://news.ycombinator.com/item?id=8863", "/item/8863.json"),
        ("https://news.ycombinator.com/news", "/topstories.json"),
        ("https://news.ycombinator.com/front", "/topstories.json"),
        ("https://news.ycombinator.com/", "/topstories.json"),
        ("https://news.ycombinator.com", "/topstories.json"),
        ("https://news.ycombinator.com/news?p=2", "/topstories.json"),
        ("https://news.ycombinator.com/newest", "/newstories.json"),
        ("https://news.ycombinator.com/best", "/beststories.json"),
        ("https://news.ycombinator.com/newest/", "/newstories.json"),
    ],
)
def test_hackernews_api_url(url: str, expected: str) -> None:
    assert api_url(url) == f"https://hacker-news.firebaseio.com/v0{expected}"


def test_npm_registry_document() -> None:
    document = {
        "name": "left-pad",
        "description": "String left pad",
        "dist-tags": {"latest": "1.3.0"},
        "license": "WTFPL",
        "repository": {"url": "git+https://github.com/stevemao/left-pad.git"},
        "maintainers": [{"name": "stevemao"}, {"name": "azer"}],
        "keywords": ["leftpad", "pad"],
        "time": {"1.3.0": "2018-04-09T01:22:32.000Z"},
        "versions": {
            "1.3.0": {
                "dependencies": {"tap": "*"},
                "deprecated": "use String.prototype.padStart()",
            }
        },
    }

    data = _extract(NPM, document, "https://www.npmjs.com/package/left-pad")

    assert data == {
        "name": "left-pad",
        "version": "1.3.0",
        "description": "String left pad",
        "license": "WTFPL",
        "repository": "https://github.com/stevemao/left-pad",
        "dependencies": 1,
        "types_included": False,
        "deprecated": True,
        "deprecation_message": "use String.prototype.padStart()",
        "maintainer_count": 2,
        "last_publish": "2018-04-09T01:22:32.000Z",
        "keywords": "leftpad, pad",
    }


def test_hackernews_item_document() -> None:
    item = {
        "id": 8863,
        "by": "dhouston",
        "descendants": 71,
        "score": 111,
        "time": 1175714200,
        "title": "My YC app: Dropbox - Throw away your USB drive",
        "type": "story",
        "url": "http://www.getdropbox.com/u/2/screencast.html",
    }

    data = _extract(HACKERNEWS, item, "https://news.ycombinator.com/item?id=8863")

    assert data["item_id"] == 8863
    assert data["title"] == "My YC app: Dropbox - Throw away your USB drive"
    assert data["points"] == 111
    assert data["comments"] == 71
    assert data["author"] == "dhouston"
    assert data["domain"] == "getdropbox.com"
    assert data["created_at"] == "2007-04-04T19:16:40+00:00"
    assert data["is_deleted"] is False
    assert "text" not in data


def test_hackernews_story_listing() -> None:
    data = _extract(HACKERNEWS, [9001, 9002, 9003], "https://news.ycombinator.com/news")

    assert data == {"top_story_count": 3, "top_story_id": 9001}


def test_hackernews_front_page_html() -> None:
    page = (
        '<table><tr class="athing" id="1"><td><span class="titleline"><a href="x">Fast &amp; small</a>'
        '</span></td></tr><tr><td><span class="score" id="s1">120 points</span></td></tr>'
        '<tr class="athing" id="2"><td><span class="titleline"><a href="y">Second</a></span></td></tr>'
        '<tr><td><span class="score" id="s2">30 points</span></td></tr></table>'
    )

    data = _extract(HACKERNEWS, page, "https://news.ycombinator.com/news")

    assert data["top_story_title"] == "Fast & small"
    assert data["top_story_points"] == 120
    assert data["story_count"] == 2
    assert data["total_front_page_points"] == 150
    assert "title" not in data


def _reddit_listing(**post) -> list:
    return [{"data": {"children": [{"data": post}]}}, {"data": {"children": []}}]


def test_reddit_thread_document() -> None:
    listing = _reddit_listing(
        title="Show r/python: a tiny parser",
        score=1234,
        upvote_ratio=0.97,
        num_comments=56,
        author="alice",
        subreddit="Python",
        link_flair_text="Showcase",
        locked=False,
        is_original_content=True,
        num_crossposts=0,
        is_self=True,
        thumbnail="self",
        created_utc=1700000000.0,
        edited=1700003600.0,
        selftext="Hello world",
        all_awardings=[{"name": "Helpful", "count": 2}, {"name": "Wholesome", "count": 1}],
    )

    data = _extract(REDDIT, listing, "https://www.reddit.com/r/Python/comments/abc123/show_rpython/")

    assert data["title"] == "Show r/python: a tiny parser"
    assert data["subreddit"] == "Python"
    assert data["score"] == 1234
    assert data["comments"] == 56
    assert data["post_type"] == "text"
    assert data["award_count"] == 3
    assert data["awards"] == "Helpful, Wholesome"
    assert data["gilded"] == 0
    assert data["crosspost_count"] == 0
    assert data["is_locked"] is False
    assert data["created_at"] == "2023-11-14T22:13:20+00:00"
    assert data["edited_at"] == "2023-11-14T23:13:20+00:00"
    assert "link_url" not in data
    assert "thumbnail_url" not in data


def test_reddit_poll_end_is_in_milliseconds() -> None:
    listing = _reddit_listing(
        title="Which parser?",
        is_self=False,
        url="https://www.reddit.com/poll/1",
        domain="reddit.com",
        edited=False,
        poll_data={"total_vote_count": 10, "voting_end_timestamp": 1700000000000},
    )

    data = _extract(REDDIT, listing, "https://www.reddit.com/r/Python/comments/def456/which_parser/")

    assert data["post_type"] == "poll"
    assert data["poll_total_votes"] == 10
    assert data["poll_ends_at"] == "2023-11-14T22:13:20+00:00"
    assert data["link_url"] == "https://www.reddit.com/poll/1"
    assert "edited_at" not in data


def test_amazon_prefers_json_ld() -> None:
    page = (
        '<html><head><script type="application/ld+json">{"@type": "Product", "name": "Echo Dot",'
        ' "brand": {"@type": "Brand", "name": "Amazon"},'
        ' "offers": {"@type": "Offer", "price": "49.99", "availability": "https://schema.org/InStock"},'
        ' "aggregateRating": {"ratingValue": "4.7", "reviewCount": "12,345"}}</script></head>'
        "<body></body></html>"
    )

    data = _extract(AMAZON, page, "https://www.amazon.com/dp/B09B8V1LZ3")

    assert data["asin"] == "B09B8V1LZ3"
    assert data["title"] == "Echo Dot"
    assert data["brand"] == "Amazon"
    assert data["price"] == pytest.approx(49.99)
    assert data["in_stock"] is True
    assert data["rating"] == pytest.approx(4.7)
    assert data["review_count"] == 12345
    assert data["is_prime"] is False
    assert data["is_deal"] is False


def test_amazon_falls_back_to_markup() -> None:
    page = (
        '<span id="productTitle"> Kindle Paperwhite </span>'
        '<span class="a-price-whole">1,139</span><span class="a-price-fraction">99</span>'
        '<div id="outOfStock">Currently unavailable.</div>'
    )

    data = _extract(AMAZON, page, "https://www.amazon.co.uk/gp/product/B08KTZ8249")

    assert data["title"] == "Kindle Paperwhite"
    assert data["price"] == pytest.approx(1139.99)
    assert data["in_stock"] is False
    assert data["asin"] == "B08KTZ8249"


def test_github_reads_repository_from_url() -> None:
    data = _extract(GITHUB, "<html></html>", "https://github.com/facebook/react")

    assert data["owner"] == "facebook"
    assert data["repo"] == "react"
    assert data["title"] == "facebook/react"
    assert GITHUB.requires_rendering


@pytest.mark.parametrize("recipe", list_all(), ids=lambda recipe: recipe.identity)
def test_every_routine_survives_the_smoke_payload(recipe) -> None:
    policy = SmokeTestPolicy()
    url = recipe.meta.examples[0].url if recipe.meta.examples else policy.default_url

    check = asyncio.run(test_extraction_routine(recipe, policy.payload, url))

    assert check.success, check.error
