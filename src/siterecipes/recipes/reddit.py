"""Reddit comment threads, read through the ``.json`` listing endpoint."""

from __future__ import annotations

from typing import Any, Dict

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
from ..utils.normalization import truncate_text

SELFTEXT_LIMIT = 500
MAX_AWARD_NAMES = 5

FIELDS = {
    "title": RecipeField(FieldType.TEXT, "Post Title", primary=True),
    "description": RecipeField(FieldType.TEXT, "Description"),
    "score": RecipeField(FieldType.NUMBER, "Score", description="Net upvotes (upvotes - downvotes)", primary=True),
    "upvote_ratio": RecipeField(FieldType.NUMBER, "Upvote Ratio", description="Share of votes that are upvotes"),
    "comments": RecipeField(FieldType.NUMBER, "Comments", primary=True),
    "author": RecipeField(FieldType.TEXT, "Author"),
    "subreddit": RecipeField(FieldType.TEXT, "Subreddit"),
    "subreddit_subscribers": RecipeField(FieldType.NUMBER, "Subreddit Subscribers"),
    "flair": RecipeField(FieldType.TEXT, "Post Flair"),
    "author_flair": RecipeField(FieldType.TEXT, "Author Flair"),
    "is_locked": RecipeField(FieldType.BOOLEAN, "Locked"),
    "is_pinned": RecipeField(FieldType.BOOLEAN, "Pinned"),
    "is_archived": RecipeField(FieldType.BOOLEAN, "Archived"),
    "award_count": RecipeField(FieldType.NUMBER, "Awards"),
    "awards": RecipeField(FieldType.TEXT, "Award Types", description="List of award types received"),
    "crosspost_count": RecipeField(FieldType.NUMBER, "Crossposts", noise=True),
    "post_type": RecipeField(FieldType.TEXT, "Post Type", description="text, link, image, video, poll, gallery"),
    "domain": RecipeField(FieldType.TEXT, "Link Domain"),
    "link_url": RecipeField(FieldType.URL, "Link URL"),
    "thumbnail_url": RecipeField(FieldType.URL, "Thumbnail", noise=True),
    "created_at": RecipeField(FieldType.TIMESTAMP, "Created"),
    "edited_at": RecipeField(FieldType.TIMESTAMP, "Edited"),
    "is_nsfw": RecipeField(FieldType.BOOLEAN, "NSFW"),
    "is_spoiler": RecipeField(FieldType.BOOLEAN, "Spoiler"),
    "is_oc": RecipeField(FieldType.BOOLEAN, "Original Content"),
    "gilded": RecipeField(FieldType.NUMBER, "Gold Awards"),
    "selftext": RecipeField(FieldType.TEXT, "Post Text"),
    "video_duration": RecipeField(FieldType.NUMBER, "Video Duration"),
    "video_url": RecipeField(FieldType.URL, "Video URL", noise=True),
    "image_count": RecipeField(FieldType.NUMBER, "Gallery Images"),
    "poll_total_votes": RecipeField(FieldType.NUMBER, "Poll Votes"),
    "poll_ends_at": RecipeField(FieldType.TIMESTAMP, "Poll Ends"),
}


def json_url(url: str) -> str:
    """Rewrite a thread URL to its ``.json`` listing endpoint."""

    base = url.split("#", 1)[0].split("?", 1)[0]
    if base.endswith("/"):
        base = base[:-1]
    return f"{base}.json"


def _post_type(post: Dict[str, Any]) -> str:
    if post.get("is_self"):
        return "text"
    if post.get("is_video"):
        return "video"
    if post.get("is_gallery"):
        return "gallery"
    if post.get("poll_data"):
        return "poll"
    if post.get("post_hint") == "image":
        return "image"
    return "link"


def _thread_document(doc: Any) -> Dict[str, Any] | None:
    post = dig(doc, 0, "data", "children", 0, "data")
    if not isinstance(post, dict):
        return None

    values: Dict[str, Any] = {
        "title": post.get("title"),
        "score": post.get("score"),
        "upvote_ratio": post.get("upvote_ratio"),
        "comments": post.get("num_comments"),
        "author": post.get("author"),
        "subreddit": post.get("subreddit"),
        "subreddit_subscribers": post.get("subreddit_subscribers"),
        "flair": post.get("link_flair_text"),
        "author_flair": post.get("author_flair_text"),
        "is_locked": post.get("locked"),
        "is_pinned": post.get("stickied"),
        "is_archived": post.get("archived"),
        "is_nsfw": post.get("over_18"),
        "is_spoiler": post.get("spoiler"),
        "is_oc": post.get("is_original_content"),
        "crosspost_count": post.get("num_crossposts"),
        "post_type": _post_type(post),
        "gilded": post.get("gilded") or 0,
        "created_at": post.get("created_utc"),
    }

    if not post.get("is_self"):
        values["domain"] = post.get("domain")
        values["link_url"] = post.get("url")

    thumbnail = post.get("thumbnail")
    if thumbnail and thumbnail not in ("self", "default"):
        values["thumbnail_url"] = thumbnail

    awardings = post.get("all_awardings")
    if isinstance(awardings, list) and awardings:
        values["award_count"] = sum(award.get("count", 0) for award in awardings if isinstance(award, dict))
        names = [award.get("name") for award in awardings[:MAX_AWARD_NAMES] if isinstance(award, dict)]
        values["awards"] = ", ".join(name for name in names if name)

    edited = post.get("edited")
    if edited and not isinstance(edited, bool):
        values["edited_at"] = edited

    selftext = post.get("selftext")
    if isinstance(selftext, str) and selftext:
        values["selftext"] = truncate_text(selftext, SELFTEXT_LIMIT)

    video = dig(post, "media", "reddit_video")
    if isinstance(video, dict):
        values["video_duration"] = video.get("duration")
        values["video_url"] = video.get("fallback_url")

    if post.get("is_gallery"):
        items = dig(post, "gallery_data", "items")
        if isinstance(items, list):
            values["image_count"] = len(items)

    poll = post.get("poll_data")
    if isinstance(poll, dict):
        values["poll_total_votes"] = poll.get("total_vote_count")
        ends_at = poll.get("voting_end_timestamp")
        if isinstance(ends_at, (int, float)) and not isinstance(ends_at, bool):
            values["poll_ends_at"] = ends_at / 1000

    return values


REDDIT = Recipe(
    meta=RecipeMeta(
        identity="reddit",
        name="Reddit Post",
        description="Track upvotes, comments, and awards on Reddit posts",
        long_description=(
            "Monitor Reddit posts for engagement metrics like upvotes, comments, and awards. "
            "Supports old.reddit.com and new Reddit."
        ),
        icon="https://www.reddit.com/favicon.ico",
        category=Category.SOCIAL,
        tags=("social", "discussions", "community", "viral"),
        maintainers=("siterecipes",),
        examples=(
            RecipeExample(
                url="https://www.reddit.com/r/programming/comments/1pe2quy/remember_xkcds_legendary_dependency_comic_i/",
                title="Remember XKCD's legendary dependency comic? I finally built the thing",
            ),
            RecipeExample(
                url="https://www.reddit.com/r/programming/comments/1pc4rim/the_death_of_software_engineering_as_a_profession/",
                title="The Death of Software Engineering as a Profession",
            ),
        ),
    ),
    match=UrlMatcher.regex(r"^https?://(www\.|old\.|new\.)?reddit\.com/r/[^/]+/comments/"),
    fields=FIELDS,
    alerts=(
        AlertTemplate(
            id="going-viral",
            label="Going Viral",
            description="Get notified when score increases rapidly",
            when="score - previous.score > 100",
            icon="🚀",
        ),
        AlertTemplate(
            id="score-milestone",
            label="Score Milestone",
            description="Get notified at major milestones (100, 1k, 10k)",
            when="floor(log10(score)) > floor(log10(previous.score))",
            icon="🎯",
        ),
        AlertTemplate(
            id="new-award",
            label="New Award",
            description="Get notified when post receives an award",
            when="award_count > previous.award_count",
            icon="🏆",
        ),
        AlertTemplate(
            id="hot-discussion",
            label="Hot Discussion",
            description="Get notified when comments spike",
            when="comments - previous.comments > 50",
            icon="💬",
        ),
        AlertTemplate(
            id="locked",
            label="Post Locked",
            description="Get notified when post is locked by moderators",
            when="is_locked == true && previous.is_locked == false",
            icon="🔒",
        ),
        AlertTemplate(
            id="gilded",
            label="Post Gilded",
            description="Get notified when post receives gold",
            when="gilded > previous.gilded",
            icon="🥇",
        ),
        AlertTemplate(
            id="edited",
            label="Post Edited",
            description="Get notified when post is edited",
            when="edited_at != previous.edited_at",
            icon="✏️",
        ),
    ),
    transform_url=json_url,
    headers={
        "Accept": "application/json",
        "User-Agent": "Mozilla/5.0 (compatible; siterecipes/1.0)",
    },
    extract=ExtractionPipeline(
        FIELDS,
        url_fields={"subreddit": [rule(r"/r/([^/]+)")]},
        structured=(_thread_document,),
        structured_source=StructuredSource.DOCUMENT,
        meta_tags={
            "title": ("og:title", "twitter:title", "title"),
            "description": ("og:description",),
        },
        patterns={
            "score": [rule(r"(\d+(?:\.\d+)?[kKmM]?)\s*points?")],
            "comments": [rule(r"(\d+(?:\.\d+)?[kKmM]?)\s*comments?")],
        },
    ),
)
