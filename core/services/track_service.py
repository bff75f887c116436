# =============================================================================
# core/services/track_service.py - Item Lookup Service
# =============================================================================
# The single entry point behind POST /api/track. Given { item, category? } it
# routes the lookup (first match wins):
#
#   1. "top-<N>-<category>"   -> up to N teaser items from the catalog
#   2. known market id        -> MarketDataPriceSource (bitcoin, eth, ...)
#   3. anything else          -> generic source (oracle, or dev mock)
#
# Item results are normalized (history filtered, sorted newest first, capped
# at 30; placeholder image) before they are returned.
#
# Usage:
#   service = TrackService.from_settings(settings, http_client, supabase)
#   result = await service.lookup("bitcoin")
# =============================================================================

from __future__ import annotations

import asyncio
import logging
import re

import httpx

from app.config import Settings
from app.exceptions import (
    BadRequestError,
    CategoryNotFoundError,
    ConfigurationError,
    SubCategoryNotFoundError,
)
from agents.price_oracle import PriceOracleAgent
from core.models.catalog import CategoryCatalog, CategorySummary, CategoryTeaserItem
from core.models.track import TeaserResult, TrackResult
from core.services.catalog_service import CatalogSource, build_catalog_source
from core.services.normalizer import normalize_result
from core.services.price_sources import (
    GenerativePriceSource,
    MarketDataPriceSource,
    MockPriceSource,
    PriceSource,
)
from lib.market_data import MarketDataClient, resolve_coin_id
from lib.supabase_client import SupabaseClient
from lib.utils import slugify

logger = logging.getLogger(__name__)

TEASER_PREFIX = "top-"
TEASER_PATTERN = re.compile(r"^top-(\d+)-(.+)$", re.IGNORECASE)


class TrackService:
    """
    Routes item lookups to the catalog or a price source.

    Attributes:
        catalog_source: Where category teasers come from
        market_source: Source for known market identifiers
        generic_source: Source for everything else; None when no generative
            key is configured outside development
        market: Market client for live teaser refresh (optional)
        live_teaser_prices: Refresh known-coin teasers on each request
    """

    def __init__(
        self,
        catalog_source: CatalogSource,
        market_source: PriceSource,
        generic_source: PriceSource | None,
        market: MarketDataClient | None = None,
        live_teaser_prices: bool = False,
    ):
        self.catalog_source = catalog_source
        self.market_source = market_source
        self.generic_source = generic_source
        self.market = market
        self.live_teaser_prices = live_teaser_prices

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http: httpx.AsyncClient,
        supabase: SupabaseClient | None = None,
    ) -> "TrackService":
        """
        Wire up the service from settings.

        The generic source is the price oracle when GROK_API_KEY is set, the
        deterministic mock in development without a key, and None otherwise
        (generic lookups then fail with ConfigurationError).
        """
        market = MarketDataClient(
            http,
            settings.MARKET_DATA_BASE_URL,
            api_key=settings.MARKET_DATA_API_KEY,
            timeout=settings.MARKET_TIMEOUT_SECONDS,
        )

        generic_source: PriceSource | None
        if settings.has_grok_key:
            generic_source = GenerativePriceSource(PriceOracleAgent.from_settings(settings))
        elif settings.is_development:
            generic_source = MockPriceSource()
        else:
            generic_source = None

        return cls(
            catalog_source=build_catalog_source(settings, http=http, supabase=supabase),
            market_source=MarketDataPriceSource(market, history_days=settings.MARKET_HISTORY_DAYS),
            generic_source=generic_source,
            market=market,
            live_teaser_prices=settings.LIVE_TEASER_PRICES,
        )

    # -------------------------------------------------------------------------
    # Main Entry Point
    # -------------------------------------------------------------------------

    async def lookup(self, item: str | None, category: str | None = None) -> TrackResult | TeaserResult:
        """
        Look up an item or a category teaser list.

        Args:
            item: Item slug/name, or "top-<N>-<category>"
            category: Optional category hint

        Returns:
            TeaserResult for teaser ids, normalized TrackResult otherwise

        Raises:
            BadRequestError: If item is missing/blank or a malformed teaser id
            CategoryNotFoundError, SubCategoryNotFoundError: Teaser lookups
            ConfigurationError: Generic item without a generative key
            UpstreamUnavailableError, MalformedUpstreamResponseError,
            IncompleteUpstreamDataError: Upstream failures
        """
        item = (item or "").strip()
        category = (category or "").strip() or None
        if not item:
            raise BadRequestError(
                "Missing item slug",
                suggestion='Send a JSON body like {"item": "bitcoin"}',
            )

        if item.lower().startswith(TEASER_PREFIX):
            return await self.lookup_teasers(item, category)

        slug = slugify(item)
        if not slug:
            raise BadRequestError("Item must contain letters or digits", item=item)

        if resolve_coin_id(item):
            logger.info(f"Routing '{item}' to {self.market_source.name}")
            result = await self.market_source.fetch(item, category)
        else:
            if self.generic_source is None:
                raise ConfigurationError("GROK_API_KEY")
            logger.info(f"Routing '{item}' to {self.generic_source.name}")
            result = await self.generic_source.fetch(item, category)

        return normalize_result(result, slug)

    # -------------------------------------------------------------------------
    # Teasers
    # -------------------------------------------------------------------------

    async def lookup_teasers(self, item: str, category: str | None = None) -> TeaserResult:
        """
        Resolve "top-<N>-<category>" to at most N teaser items.

        The main category is the `category` hint when given, else the name in
        the id. If the id names something other than the main category, it
        is looked up as a sub-category of the main one.
        """
        match = TEASER_PATTERN.match(item)
        if not match:
            raise BadRequestError(
                "Invalid teaser format (e.g., top-6-crypto)",
                item=item,
            )
        limit = int(match.group(1))
        teaser_category = slugify(match.group(2))

        items = await self.category_items(category or teaser_category, teaser_category, limit)
        logger.info(f"Teaser return for {category or teaser_category}: {len(items)} items")
        return TeaserResult(related=items)

    async def category_items(
        self,
        category: str,
        sub_category: str | None = None,
        limit: int | None = None,
    ) -> list[CategoryTeaserItem]:
        """
        Items of a category (or one of its sub-categories).

        Args:
            category: Main category slug or name
            sub_category: Sub-category slug or name; ignored when it names
                the main category itself
            limit: Maximum number of items (None = all)

        Raises:
            CategoryNotFoundError, SubCategoryNotFoundError
        """
        catalog = await self.catalog_source.load()
        main = catalog.find(category)
        if main is None:
            logger.info(f"Category '{category}' missing; available: {catalog.slugs()}")
            raise CategoryNotFoundError(category, catalog.slugs())

        if sub_category is None or main.matches(sub_category):
            items = main.items
        else:
            sub = main.find_sub(sub_category)
            if sub is None:
                raise SubCategoryNotFoundError(sub_category, main.slug)
            items = sub.items

        selected = list(items if limit is None else items[:limit])
        if self.live_teaser_prices and self.market is not None:
            selected = await self.refresh_teaser_prices(selected)
        return selected

    async def refresh_teaser_prices(self, items: list[CategoryTeaserItem]) -> list[CategoryTeaserItem]:
        """
        Replace price/trend of known-coin teasers with live quotes.

        One quote call per known coin, all issued concurrently; other items
        are returned unchanged.
        """
        known = [(index, resolve_coin_id(teaser.slug)) for index, teaser in enumerate(items)]
        known = [(index, coin_id) for index, coin_id in known if coin_id]
        if not known:
            return items

        quotes = await asyncio.gather(*(self.market.fetch_quote(coin_id) for _, coin_id in known))

        refreshed = list(items)
        for (index, _), quote in zip(known, quotes):
            update = {"teaser_price": quote.price}
            if quote.change_24h is not None:
                update["trend"] = round(quote.change_24h, 2)
            refreshed[index] = refreshed[index].model_copy(update=update)
        return refreshed

    # -------------------------------------------------------------------------
    # Catalog Listing
    # -------------------------------------------------------------------------

    async def load_catalog(self) -> CategoryCatalog:
        return await self.catalog_source.load()

    async def list_categories(self) -> list[CategorySummary]:
        """Category summaries for the home page."""
        catalog = await self.catalog_source.load()
        return catalog.summaries()
