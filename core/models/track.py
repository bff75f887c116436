# =============================================================================
# core/models/track.py - Item Lookup Schemas
# =============================================================================
# These models define the API contract for the item lookup endpoint:
# - TrackRequest: Input ({ item, category? })
# - PricePoint: One day of price history
# - TrackResult: Current price, history and specs for a single item
# - TeaserResult: A bounded list of category teaser items
#
# JSON uses camelCase (currentPrice) to match what the pages consume;
# Python code uses snake_case field names.
# =============================================================================

import datetime

from pydantic import BaseModel, ConfigDict, Field

from .catalog import CategoryTeaserItem

# Newest-first history is capped at this many entries
MAX_HISTORY_POINTS = 30


class TrackRequest(BaseModel):
    """
    Body of POST /api/track.

    `item` is optional at the schema level so that a missing or blank item
    surfaces as a 400 BadRequest from the service rather than a 422.

    Example:
        {"item": "bitcoin"}
        {"item": "top-6-crypto", "category": "crypto"}
    """

    item: str | None = Field(
        default=None,
        description="Item slug, free-text name, or top-<N>-<category> teaser id",
        examples=["bitcoin", "top-6-crypto", "1909-s-vdb-lincoln-cent"],
    )

    category: str | None = Field(
        default=None,
        description="Optional category hint (slug or display name)",
        examples=["crypto"],
    )


class PricePoint(BaseModel):
    """A single daily price observation (USD)."""

    date: datetime.date
    price: float

    model_config = ConfigDict(frozen=True)


class TrackResult(BaseModel):
    """
    Current price, recent history and descriptive specs for one item.

    Produced fresh per request and never persisted. After normalization
    `history` holds unique dates, newest first, at most 30 entries.

    Example:
        {
            "currentPrice": 95000.0,
            "history": [{"date": "2025-11-08", "price": 95000.0}, ...],
            "specs": {"Name": "Bitcoin", "Image URL": "https://..."}
        }
    """

    current_price: float = Field(
        ...,
        alias="currentPrice",
        description="Current average price in USD"
    )

    history: list[PricePoint] = Field(
        default_factory=list,
        description="Daily prices, newest first"
    )

    specs: dict[str, str] = Field(
        default_factory=dict,
        description="Flat map of descriptive attributes"
    )

    model_config = ConfigDict(populate_by_name=True)

    @property
    def trend(self) -> float | None:
        """
        Percentage change over the last 24 hours.

        Computed from the two newest history points; None when there are
        fewer than two or the older price is zero.
        """
        if len(self.history) < 2 or self.history[1].price == 0:
            return None
        newest, previous = self.history[0].price, self.history[1].price
        return round((newest - previous) / previous * 100, 2)


class TeaserResult(BaseModel):
    """Teaser items for a category, returned for top-<N>-<category> lookups."""

    related: list[CategoryTeaserItem] = Field(default_factory=list)
