"""Catch-all recipe owning every URL no site recipe claims."""

from __future__ import annotations

import re
from typing import Any, Dict

from bs4 import BeautifulSoup

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
from ..extraction import ExtractionPipeline, PageContext, schema_types
from ..utils.helpers import dig
from ..utils.normalization import clean_text, truncate_text

MAIN_CONTENT_LIMIT = 5000

_BOILERPLATE_TAGS = ["script", "style", "nav", "header", "footer", "aside", "noscript"]
_ARTICLE_TYPES = {"Article", "NewsArticle", "BlogPosting"}

FIELDS = {
    "title": RecipeField(FieldType.TEXT, "Page Title", primary=True),
    "description": RecipeField(FieldType.TEXT, "Description"),
    "author": RecipeField(FieldType.TEXT, "Author"),
    "published_at": RecipeField(FieldType.TIMESTAMP, "Published"),
    "last_modified": RecipeField(FieldType.TIMESTAMP, "Last Modified", noise=True),
    "main_content": RecipeField(FieldType.TEXT, "Main Content", description="Extracted main text content"),
    "word_count": RecipeField(FieldType.NUMBER, "Word Count", noise=True),
    "price": RecipeField(FieldType.MONEY, "Price"),
    "currency": RecipeField(FieldType.TEXT, "Currency"),
    "in_stock": RecipeField(FieldType.BOOLEAN, "In Stock"),
}


def _author_name(author: Any) -> Any:
    if isinstance(author, list):
        author = author[0] if author else None
    if isinstance(author, dict):
        return author.get("name")
    return author


def _article(obj: Dict[str, Any]) -> Dict[str, Any] | None:
    if not _ARTICLE_TYPES.intersection(schema_types(obj)):
        return None
    return {
        "title": obj.get("headline") or obj.get("name"),
        "description": obj.get("description"),
        "author": _author_name(obj.get("author")),
        "published_at": obj.get("datePublished"),
        "last_modified": obj.get("dateModified"),
    }


def _product(obj: Dict[str, Any]) -> Dict[str, Any] | None:
    if "Product" not in schema_types(obj):
        return None
    offers = obj.get("offers")
    offer = offers[0] if isinstance(offers, list) and offers else offers
    availability = dig(offer, "availability")
    return {
        "title": obj.get("name"),
        "description": obj.get("description"),
        "price": dig(offer, "price"),
        "currency": dig(offer, "priceCurrency"),
        "in_stock": "InStock" in availability if isinstance(availability, str) else None,
    }


def _main_content(data: Dict[str, Any], page: PageContext) -> Dict[str, Any] | None:
    soup = BeautifulSoup(page.payload, "html.parser")
    for node in soup.find_all(_BOILERPLATE_TAGS):
        node.decompose()
    container = (
        soup.find("main")
        or soup.find("article")
        or soup.find("div", class_=re.compile("content"))
        or soup.find(id="content")
        or soup.body
        or soup
    )
    text = clean_text(container.get_text(" "))
    if not text:
        return None
    return {
        "main_content": truncate_text(text, MAIN_CONTENT_LIMIT),
        "word_count": len(text.split()),
    }


GENERIC = Recipe(
    meta=RecipeMeta(
        identity="generic",
        name="Web Page",
        description="Monitor any web page for content changes",
        long_description=(
            "A generic recipe that works with any web page. Extracts metadata and main "
            "content, and tracks changes to the page. Used as the fallback when no "
            "specific recipe exists for a website."
        ),
        icon="🌐",
        category=Category.OTHER,
        tags=("general", "any", "webpage"),
        maintainers=("siterecipes",),
        examples=(
            RecipeExample(url="https://www.apple.com/shop/buy-mac/macbook-pro", title="Apple MacBook Pro"),
            RecipeExample(url="https://www.tesla.com/model3", title="Tesla Model 3"),
        ),
    ),
    match=UrlMatcher.where(lambda url: True),
    fields=FIELDS,
    alerts=(
        AlertTemplate(
            id="content-change",
            label="Content Changed",
            description="Get notified when the page content changes",
            when="main_content != previous.main_content",
            icon="📝",
        ),
        AlertTemplate(
            id="title-change",
            label="Title Changed",
            description="Get notified when the page title changes",
            when="title != previous.title",
            icon="📄",
        ),
    ),
    extract=ExtractionPipeline(
        FIELDS,
        structured=(_article, _product),
        meta_tags={
            "title": ("og:title", "twitter:title", "title"),
            "description": ("og:description", "twitter:description", "description"),
            "author": ("author", "article:author", "og:article:author"),
        },
        derived=(_main_content,),
    ),
)
