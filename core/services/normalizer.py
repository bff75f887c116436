# =============================================================================
# core/services/normalizer.py - TrackResult Normalization
# =============================================================================
# Every lookup path (market data, generative, mock) funnels its result
# through normalize_result() before it is returned:
#
#   1. Drop history entries with an unparseable date or non-finite price
#   2. Collapse duplicate dates (last occurrence wins)
#   3. Sort newest first
#   4. Keep at most MAX_HISTORY_POINTS entries
#   5. Backfill specs["Image URL"] with a placeholder derived from the slug
#
# Normalizing an already-normalized result returns an equal result.
# =============================================================================

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Iterable
from urllib.parse import quote

from core.models.track import MAX_HISTORY_POINTS, PricePoint, TrackResult
from lib.utils import title_from_slug

IMAGE_URL_KEY = "Image URL"
NAME_KEY = "Name"
DESCRIPTION_KEY = "Description"

PLACEHOLDER_IMAGE_TEMPLATE = "https://via.placeholder.com/256x256/4F46E5/FFFFFF?text={text}"


# =============================================================================
# Placeholders
# =============================================================================

def placeholder_image_url(slug: str) -> str:
    """Deterministic placeholder image for an item slug."""
    return PLACEHOLDER_IMAGE_TEMPLATE.format(text=quote(slug.upper(), safe="-"))


def placeholder_description(slug: str) -> str:
    return f"Premium {slug.replace('-', ' ')} with historical value tracking via TrackAura."


def backfill_specs(specs: dict[str, str], slug: str) -> dict[str, str]:
    """
    Fill missing Name / Description / Image URL from the slug.

    Blank values count as missing. Returns a new dict; existing values win.
    """
    filled = dict(specs)
    defaults = {
        NAME_KEY: title_from_slug(slug),
        DESCRIPTION_KEY: placeholder_description(slug),
        IMAGE_URL_KEY: placeholder_image_url(slug),
    }
    for key, value in defaults.items():
        if not str(filled.get(key) or "").strip():
            filled[key] = value
    return filled


# =============================================================================
# History
# =============================================================================

def _parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _parse_price(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    return price if math.isfinite(price) else None


def parse_price_point(entry: Any) -> PricePoint | None:
    """
    Coerce one raw history entry into a PricePoint.

    Accepts PricePoint instances and {"date": ..., "price": ...} mappings.
    Returns None for anything unusable.
    """
    if isinstance(entry, PricePoint):
        raw_date, raw_price = entry.date, entry.price
    elif isinstance(entry, dict):
        raw_date, raw_price = entry.get("date"), entry.get("price")
    else:
        return None

    day = _parse_date(raw_date)
    price = _parse_price(raw_price)
    if day is None or price is None:
        return None
    return PricePoint(date=day, price=price)


def normalize_history(entries: Iterable[Any]) -> list[PricePoint]:
    """
    Filter, de-duplicate, sort (newest first) and cap a price history.

    Args:
        entries: PricePoints or raw {"date", "price"} dicts

    Returns:
        At most MAX_HISTORY_POINTS points with unique dates, newest first
    """
    by_date: dict[date, PricePoint] = {}
    for entry in entries:
        point = parse_price_point(entry)
        if point is not None:
            by_date[point.date] = point

    ordered = sorted(by_date.values(), key=lambda point: point.date, reverse=True)
    return ordered[:MAX_HISTORY_POINTS]


# =============================================================================
# Result
# =============================================================================

def normalize_result(result: TrackResult, slug: str) -> TrackResult:
    """
    Apply the history rules and the image placeholder to a TrackResult.

    Args:
        result: Result from any price source
        slug: Item slug, used for the placeholder image

    Returns:
        A new, normalized TrackResult
    """
    specs = dict(result.specs)
    if not specs.get(IMAGE_URL_KEY, "").strip():
        specs[IMAGE_URL_KEY] = placeholder_image_url(slug)

    return TrackResult(
        current_price=result.current_price,
        history=normalize_history(result.history),
        specs=specs,
    )
