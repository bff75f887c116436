# =============================================================================
# core/services/watchlist_service.py - Watchlist Business Logic
# =============================================================================
# Saves items to a signed-in user's watchlist and lists them back, optionally
# enriched with live prices for the dashboard.
# Separates HTTP concerns from database/business logic.
# =============================================================================

import asyncio
import logging
from uuid import UUID

from app.exceptions import TrackAuraException
from core.models.track import TrackResult
from core.models.watchlist import WatchlistCreate, WatchlistEntry, WatchlistItem
from core.services.normalizer import IMAGE_URL_KEY, placeholder_image_url
from core.services.track_service import TrackService
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


class WatchlistService:
    """
    Service for watchlist operations.

    Provides a clean interface between API routes and database.
    """

    def __init__(self, supabase: SupabaseClient, track_service: TrackService):
        self.supabase = supabase
        self.track_service = track_service

    def add_entry(self, user_id: UUID | str, data: WatchlistCreate) -> WatchlistEntry:
        """
        Save an item for a user.

        Args:
            user_id: Owner of the entry
            data: Item slug, category and notes

        Returns:
            The created WatchlistEntry
        """
        row = self.supabase.insert_watchlist_entry(
            user_id=user_id,
            item_slug=data.item_slug.strip().lower(),
            category=data.category.strip(),
            notes=data.notes,
        )
        logger.info(f"Saved {data.item_slug} to watchlist of user {user_id}")
        return WatchlistEntry.from_row(row)

    def list_entries(self, user_id: UUID | str) -> list[WatchlistEntry]:
        """A user's entries, newest first."""
        return [WatchlistEntry.from_row(row) for row in self.supabase.fetch_watchlist(user_id)]

    async def list_with_prices(self, user_id: UUID | str) -> list[WatchlistItem]:
        """
        A user's entries with live price, 24h trend and image.

        Every entry is looked up concurrently through the TrackService. An
        entry whose lookup fails keeps empty live fields; the rest of the
        list is still returned.
        """
        entries = self.list_entries(user_id)
        if not entries:
            return []

        results = await asyncio.gather(
            *(self._lookup(entry) for entry in entries)
        )
        return [self._enrich(entry, result) for entry, result in zip(entries, results)]

    async def _lookup(self, entry: WatchlistEntry) -> TrackResult | None:
        try:
            result = await self.track_service.lookup(entry.item_slug, entry.category or None)
        except TrackAuraException as e:
            logger.warning(f"Price fetch failed for {entry.item_slug}: {e}")
            return None
        return result if isinstance(result, TrackResult) else None

    @staticmethod
    def _enrich(entry: WatchlistEntry, result: TrackResult | None) -> WatchlistItem:
        base = entry.model_dump()
        if result is None:
            return WatchlistItem(**base, image_url=placeholder_image_url(entry.item_slug))
        return WatchlistItem(
            **base,
            current_price=result.current_price,
            trend=result.trend,
            image_url=result.specs.get(IMAGE_URL_KEY) or placeholder_image_url(entry.item_slug),
        )
