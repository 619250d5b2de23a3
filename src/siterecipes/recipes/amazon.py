"""Amazon product pages across regional storefronts."""

from __future__ import annotations

import re
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
from ..extraction import ExtractionPipeline, PageContext, extract_first, rule, schema_types
from ..utils.helpers import dig
from ..utils.normalization import parse_money

_DOTALL = re.IGNORECASE | re.DOTALL

FIELDS = {
    "title": RecipeField(FieldType.TEXT, "Product Title", primary=True),
    "description": RecipeField(FieldType.TEXT, "Description"),
    "price": RecipeField(FieldType.MONEY, "Price", primary=True, currency="USD"),
    "original_price": RecipeField(FieldType.MONEY, "Original Price", description="List price before discount"),
    "discount": RecipeField(FieldType.TEXT, "Discount", description="Discount percentage"),
    "in_stock": RecipeField(FieldType.BOOLEAN, "In Stock", primary=True),
    "rating": RecipeField(FieldType.NUMBER, "Rating", description="Customer rating out of 5"),
    "review_count": RecipeField(FieldType.NUMBER, "Review Count", noise=True),
    "seller": RecipeField(FieldType.TEXT, "Sold By"),
    "asin": RecipeField(FieldType.TEXT, "ASIN", description="Amazon Standard Identification Number"),
    "brand": RecipeField(FieldType.TEXT, "Brand"),
    "category": RecipeField(FieldType.TEXT, "Category"),
    "best_seller_rank": RecipeField(FieldType.NUMBER, "Best Seller Rank"),
    "is_prime": RecipeField(FieldType.BOOLEAN, "Prime Eligible"),
    "is_deal": RecipeField(FieldType.BOOLEAN, "Deal Active"),
    "coupon": RecipeField(FieldType.TEXT, "Coupon", description="Available coupon discount"),
    "delivery_date": RecipeField(FieldType.TEXT, "Delivery Date"),
    "image_url": RecipeField(FieldType.URL, "Product Image", noise=True),
}

_PRICE_WHOLE = re.compile(r'<span[^>]*class="[^"]*a-price-whole[^"]*"[^>]*>([0-9,]+)</span>')
_PRICE_FRACTION = re.compile(r'<span[^>]*class="[^"]*a-price-fraction[^"]*"[^>]*>([0-9]+)</span>')
_PRIME_BADGE = re.compile(r'id="[^"]*prime[^"]*"|class="[^"]*prime[^"]*"|data-a-badge-type="prime"', re.IGNORECASE)
_DEAL_BADGE = re.compile(r'id="[^"]*deal[^"]*badge|class="[^"]*dealBadge|Lightning Deal|Deal of the Day', re.IGNORECASE)
_BRAND_PREFIX = re.compile(r"^(?:Visit the |Brand: )", re.IGNORECASE)
_STOCK_WORDS = ("in stock", "available", "only", "left in stock")


def _product(obj: Dict[str, Any]) -> Dict[str, Any] | None:
    if "Product" not in schema_types(obj):
        return None
    offers = obj.get("offers")
    offer = offers[0] if isinstance(offers, list) and offers else offers
    availability = dig(offer, "availability")
    image = obj.get("image")
    return {
        "title": obj.get("name"),
        "description": obj.get("description"),
        "brand": dig(obj, "brand", "name") if isinstance(obj.get("brand"), dict) else obj.get("brand"),
        "image_url": image[0] if isinstance(image, list) and image else image,
        "price": dig(offer, "price"),
        "in_stock": "InStock" in availability if isinstance(availability, str) else None,
        "rating": dig(obj, "aggregateRating", "ratingValue"),
        "review_count": dig(obj, "aggregateRating", "reviewCount"),
    }


def _positive_price(text: str) -> float | None:
    price = parse_money(text)
    return price if price is not None and price > 0 else None


def _stock_message(text: str) -> bool:
    lowered = text.lower()
    return any(word in lowered for word in _STOCK_WORDS)


def _brand(text: str) -> str:
    cleaned = _BRAND_PREFIX.sub("", text.strip())
    return cleaned[: -len(" Store")] if cleaned.endswith(" Store") else cleaned


def _coupon(text: str) -> str:
    return text if text.endswith("%") else f"${text}"


def _split_price(data: Dict[str, Any], page: PageContext) -> Dict[str, Any] | None:
    """Combine the whole/fraction price spans Amazon renders separately."""

    if "price" in data:
        return None
    whole = extract_first(page.payload, _PRICE_WHOLE)
    if not whole:
        return None
    fraction = extract_first(page.payload, _PRICE_FRACTION) or "00"
    return {"price": f"{whole.replace(',', '')}.{fraction}"}


def _badges(data: Dict[str, Any], page: PageContext) -> Dict[str, Any]:
    return {
        "is_prime": _PRIME_BADGE.search(page.payload) is not None,
        "is_deal": _DEAL_BADGE.search(page.payload) is not None,
    }


def _assume_in_stock(data: Dict[str, Any], page: PageContext) -> Dict[str, Any] | None:
    if "in_stock" not in data and "price" in data:
        return {"in_stock": True}
    return None


AMAZON = Recipe(
    meta=RecipeMeta(
        identity="amazon",
        name="Amazon Product",
        description="Track price drops, stock changes, and deals on Amazon products",
        long_description=(
            "Monitor any Amazon product for price changes, back-in-stock alerts, and deal "
            "notifications. Works with all Amazon regions including US, UK, Germany, France, "
            "and more."
        ),
        icon="https://www.amazon.com/favicon.ico",
        category=Category.ECOMMERCE,
        tags=("shopping", "price-tracking", "deals", "retail"),
        maintainers=("siterecipes",),
        examples=(
            RecipeExample(url="https://www.amazon.com/dp/B0D1XD1ZV3", title="Apple AirPods Pro (2nd Gen)"),
            RecipeExample(url="https://www.amazon.com/dp/B09XS7JWHH", title="Sony WH-1000XM5 Headphones"),
            RecipeExample(url="https://www.amazon.com/dp/B0CL61F39H", title="PlayStation 5 Console (slim)"),
        ),
    ),
    match=UrlMatcher.regex(
        r"amazon\.(com|co\.uk|de|fr|es|it|ca|com\.au|co\.jp|in|com\.mx|com\.br|nl|se|pl|be|sg|ae|sa|eg|com\.tr)"
    ),
    fields=FIELDS,
    alerts=(
        AlertTemplate(
            id="price-drop",
            label="Price Drop",
            description="Get notified when the price decreases",
            when="price < previous.price",
            icon="💰",
        ),
        AlertTemplate(
            id="back-in-stock",
            label="Back in Stock",
            description="Get notified when the item is back in stock",
            when="in_stock == true && previous.in_stock == false",
            icon="📦",
        ),
        AlertTemplate(
            id="price-threshold",
            label="Price Under Target",
            description="Get notified when price drops below your target",
            when="price < $threshold",
            icon="🎯",
        ),
        AlertTemplate(
            id="deal-started",
            label="Deal Started",
            description="Get notified when a deal becomes available",
            when="is_deal == true && previous.is_deal == false",
            icon="🔥",
        ),
        AlertTemplate(
            id="coupon-available",
            label="Coupon Available",
            description="Get notified when a coupon is available",
            when="coupon != previous.coupon && coupon != null",
            icon="🎟️",
        ),
        AlertTemplate(
            id="significant-drop",
            label="Significant Price Drop (10%+)",
            description="Get notified when price drops by 10% or more",
            when="price < previous.price * 0.9",
            icon="📉",
        ),
    ),
    extract=ExtractionPipeline(
        FIELDS,
        url_fields={
            "asin": [rule(r"/(?:dp|gp/product|gp/aw/d)/([A-Z0-9]{10})")],
        },
        structured=(_product,),
        meta_tags={
            "title": ("og:title", "twitter:title"),
        },
        patterns={
            "title": [rule(r'<span[^>]*id="productTitle"[^>]*>([^<]+)</span>')],
            "price": [
                rule(r'<span[^>]*class="[^"]*a-offscreen[^"]*"[^>]*>\s*\$?([0-9,.]+)\s*</span>', transform=_positive_price),
                rule(r'<span[^>]*id="priceblock_ourprice"[^>]*>([^<]+)</span>', transform=_positive_price),
                rule(r'<span[^>]*id="priceblock_dealprice"[^>]*>([^<]+)</span>', transform=_positive_price),
                rule(r'<span[^>]*id="priceblock_saleprice"[^>]*>([^<]+)</span>', transform=_positive_price),
                rule(r'class="a-price"[^>]*>.*?<span[^>]*>([^<]+)</span>', flags=_DOTALL, transform=_positive_price),
            ],
            "original_price": [
                rule(r'<span[^>]*class="[^"]*a-text-price[^"]*"[^>]*data-a-strike="true"[^>]*>.*?\$?([0-9,.]+)', flags=_DOTALL),
            ],
            "discount": [rule(r'<span[^>]*class="[^"]*savingsPercentage[^"]*"[^>]*>-?(\d+%)</span>')],
            "in_stock": [
                rule(
                    r'<span[^>]*class="[^"]*a-color-success[^"]*"[^>]*>([^<]*(?:in stock|available)[^<]*)</span>',
                    transform=_stock_message,
                ),
                rule(r'id="availability"[^>]*>.*?<span[^>]*>([^<]+)<', flags=_DOTALL, transform=_stock_message),
                rule(r'<span[^>]*class="[^"]*availabilityMessage[^"]*"[^>]*>([^<]+)</span>', transform=_stock_message),
                rule(r"currently unavailable", transform=lambda _: False),
                rule(r"out of stock", transform=lambda _: False),
                rule(r"not available", transform=lambda _: False),
                rule(r"we don't know when or if this item will be back", transform=lambda _: False),
            ],
            "rating": [rule(r'<span[^>]*class="[^"]*a-icon-alt[^"]*"[^>]*>([0-9.]+)\s*out\s*of\s*5')],
            "review_count": [
                rule(r'<span[^>]*id="acrCustomerReviewText"[^>]*>([0-9,]+)\s*(?:global\s*)?ratings?'),
                rule(r"(\d[\d,]*)\s*(?:global\s*)?(?:ratings?|reviews?)"),
            ],
            "brand": [
                rule(r'<a[^>]*id="bylineInfo"[^>]*>(?:Visit the |Brand: )?([^<]+)</a>', transform=_brand),
                rule(r'id="bylineInfo"[^>]*>([^<]+)<', transform=_brand),
                rule(
                    r'<tr[^>]*class="[^"]*po-brand[^"]*"[^>]*>.*?<span[^>]*class="[^"]*po-break-word[^"]*"[^>]*>([^<]+)</span>',
                    flags=_DOTALL,
                    transform=_brand,
                ),
            ],
            "seller": [
                rule(r'<a[^>]*id="sellerProfileTriggerId"[^>]*>([^<]+)</a>'),
                rule(r"Ships from and sold by\s*<[^>]*>([^<]+)<"),
            ],
            "coupon": [
                rule(r"Save\s*(?:an\s*extra\s*)?\$?(\d+(?:\.\d+)?%?)\s*(?:with\s*coupon|coupon)", transform=_coupon),
            ],
            "best_seller_rank": [rule(r"#([\d,]+)\s*in\s*[^<(]+")],
            "category": [rule(r"#[\d,]+\s*in\s*([^<(]+)")],
            "delivery_date": [
                rule(r"delivery[^<]*<[^>]*>([^<]*(?:Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday)[^<]*)<"),
            ],
            "image_url": [
                rule(r'<img[^>]*id="landingImage"[^>]*src="([^"]+)"'),
                rule(r'<img[^>]*id="imgBlkFront"[^>]*src="([^"]+)"'),
                rule(r'<img[^>]*class="[^"]*a-dynamic-image[^"]*"[^>]*src="([^"]+)"'),
            ],
        },
        derived=(_split_price, _badges, _assume_in_stock),
    ),
)
