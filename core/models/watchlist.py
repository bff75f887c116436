# =============================================================================
# core/models/watchlist.py - Watchlist Schemas
# =============================================================================
# A watchlist entry is one item a signed-in user saved from an item page.
# Entries are created by the user and never mutated; the app exposes no
# delete.
#
# Table: watchlists (id, user_id, item_slug, category, notes, created_at)
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class WatchlistCreate(BaseModel):
    """
    Schema for saving an item to the current user's watchlist.

    Example:
        {"itemSlug": "bitcoin", "category": "crypto", "notes": "buy the dip"}
    """

    item_slug: str = Field(
        ...,
        min_length=1,
        max_length=200,
        alias="itemSlug",
        description="Slug of the saved item"
    )

    category: str = Field(
        default="",
        max_length=100,
        description="Category the item was saved from"
    )

    notes: str = Field(
        default="",
        max_length=1000,
        description="Free-text notes"
    )

    model_config = ConfigDict(populate_by_name=True)


class WatchlistEntry(BaseModel):
    """A persisted watchlist row."""

    id: str
    user_id: str = Field(..., alias="userId")
    item_slug: str = Field(..., alias="itemSlug")
    category: str = ""
    notes: str = ""
    created_at: datetime = Field(..., alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_row(cls, row: dict) -> "WatchlistEntry":
        """Build from a Supabase row (snake_case, nullable text columns)."""
        return cls(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            item_slug=row["item_slug"],
            category=row.get("category") or "",
            notes=row.get("notes") or "",
            created_at=row["created_at"],
        )


class WatchlistItem(WatchlistEntry):
    """
    A watchlist entry enriched with live data for the dashboard.

    Live fields stay None when the price lookup for that entry failed.
    """

    current_price: float | None = Field(default=None, alias="currentPrice")
    trend: float | None = Field(
        default=None,
        description="Percentage change over the last 24 hours"
    )
    image_url: str | None = Field(default=None, alias="imageUrl")


class WatchlistResponse(BaseModel):
    """Response for GET /watchlist."""

    items: list[WatchlistItem] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
