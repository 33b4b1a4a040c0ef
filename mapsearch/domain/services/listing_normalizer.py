"""
Sanitisation of raw listing records returned by the scraper.

Raw records come from an external service and are loosely typed: ratings may
arrive as strings, review counts as "1,234 reviews", blanks as whitespace.
"""
import math
import re
from typing import Any

_NON_DIGITS = re.compile(r"[^0-9]")
_LEADING_NUMBER = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _clean_str(value: Any) -> str | None:
    if value is None:
        return None
    cleaned = " ".join(str(value).split())
    return cleaned or None


def _to_float(value: Any) -> float | None:
    # Leading number only ("4.5 stars" -> 4.5); NaN and infinities are not JSON.
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value))
        if match is None:
            return None
        number = float(match.group())
    return number if math.isfinite(number) else None


def _to_review_count(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    digits = _NON_DIGITS.sub("", str(value))
    return int(digits) if digits else 0


def normalize_listing(raw: dict[str, Any]) -> dict[str, Any]:
    """Map one raw scraper record onto the public listing shape."""
    review_count = raw.get("reviewCount", raw.get("reviews"))
    return {
        "name": _clean_str(raw.get("name")),
        "rating": _to_float(raw.get("rating")),
        "review_count": _to_review_count(review_count),
        "address": _clean_str(raw.get("address")),
        "phone": _clean_str(raw.get("phone")),
        "website": _clean_str(raw.get("website")),
        "latitude": _to_float(raw.get("latitude")),
        "longitude": _to_float(raw.get("longitude")),
        "source_url": _clean_str(raw.get("sourceUrl")),
        "image_url": _clean_str(raw.get("imageUrl", raw.get("image"))),
    }


def normalize_listings(raw_items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Normalise every record and drop the ones without a name."""
    listings = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        listing = normalize_listing(raw)
        if listing["name"]:
            listings.append(listing)
    return listings
