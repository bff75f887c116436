# =============================================================================
# core/services/price_sources.py - Price Source Strategies
# =============================================================================
# One interface, three ways to price an item:
#
#   PriceSource.fetch(item_id, category) -> TrackResult
#
# - MarketDataPriceSource: known crypto ids via CoinGecko (price, history
#   and metadata fetched concurrently)
# - GenerativePriceSource: anything else via the price oracle
# - MockPriceSource: deterministic data for development without API keys
#
# Results are returned un-normalized; TrackService normalizes them.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
import math
from abc import ABC, abstractmethod
from datetime import date, timedelta
from typing import Callable

from app.exceptions import IncompleteUpstreamDataError
from agents.price_oracle import SERVICE_NAME as ORACLE_SERVICE_NAME
from agents.price_oracle import PriceOracleAgent
from core.models.track import MAX_HISTORY_POINTS, PricePoint, TrackResult
from core.services.normalizer import (
    DESCRIPTION_KEY,
    IMAGE_URL_KEY,
    NAME_KEY,
    backfill_specs,
    normalize_history,
    placeholder_description,
    placeholder_image_url,
)
from lib.market_data import SERVICE_NAME as MARKET_SERVICE_NAME
from lib.market_data import MarketDataClient, resolve_coin_id
from lib.utils import slugify, title_from_slug

logger = logging.getLogger(__name__)


def _usable_price(price: float | None) -> bool:
    """A price is usable when it is a finite, positive number."""
    return price is not None and math.isfinite(price) and price > 0


class PriceSource(ABC):
    """Strategy for turning an item id into a TrackResult."""

    name: str = "price source"

    @abstractmethod
    async def fetch(self, item_id: str, category: str | None = None) -> TrackResult:
        """
        Price one item.

        Args:
            item_id: Item as typed by the caller (slug, ticker or free text)
            category: Optional category hint
        """


# =============================================================================
# Market Data
# =============================================================================

class MarketDataPriceSource(PriceSource):
    """Prices known coins from CoinGecko."""

    name = "market data"

    def __init__(self, market: MarketDataClient, history_days: int = 30):
        self.market = market
        self.history_days = history_days

    async def fetch(self, item_id: str, category: str | None = None) -> TrackResult:
        coin_id = resolve_coin_id(item_id) or item_id.strip().lower()

        # Three independent calls; the first failure fails the lookup
        quote, history, metadata = await asyncio.gather(
            self.market.fetch_quote(coin_id),
            self.market.fetch_history(coin_id, days=self.history_days),
            self.market.fetch_metadata(coin_id),
        )

        if not _usable_price(quote.price):
            raise IncompleteUpstreamDataError(MARKET_SERVICE_NAME, missing=["currentPrice"])

        specs = {
            NAME_KEY: metadata.name,
            "Symbol": metadata.symbol.upper(),
            DESCRIPTION_KEY: metadata.plain_description or placeholder_description(coin_id),
            IMAGE_URL_KEY: metadata.image.large or metadata.image.small,
            "Category": category or "crypto",
            "Source": "CoinGecko",
        }
        if quote.change_24h is not None:
            specs["24h Change"] = f"{quote.change_24h:+.2f}%"
        if metadata.market_cap_rank is not None:
            specs["Market Cap Rank"] = str(metadata.market_cap_rank)
        if metadata.genesis_date:
            specs["Genesis Date"] = metadata.genesis_date
        if metadata.hashing_algorithm:
            specs["Hashing Algorithm"] = metadata.hashing_algorithm

        return TrackResult(current_price=quote.price, history=history, specs=specs)


# =============================================================================
# Generative
# =============================================================================

class GenerativePriceSource(PriceSource):
    """
    Prices arbitrary items through the generative price oracle.

    A usable answer has a positive currentPrice, at least one valid history
    point and a specs object. Missing Name / Description / Image URL are
    filled from the slug.
    """

    name = "generative"

    def __init__(self, oracle: PriceOracleAgent):
        self.oracle = oracle

    async def fetch(self, item_id: str, category: str | None = None) -> TrackResult:
        slug = slugify(item_id)
        payload = await self.oracle.lookup_item(item_id, category)

        history = normalize_history(payload.history or [])
        missing = []
        if not _usable_price(payload.current_price):
            missing.append("currentPrice")
        if not history:
            missing.append("history")
        if payload.specs is None:
            missing.append("specs")
        if missing:
            logger.warning(f"Incomplete oracle answer for {slug}: missing {missing}")
            raise IncompleteUpstreamDataError(ORACLE_SERVICE_NAME, missing=missing)

        return TrackResult(
            current_price=payload.current_price,
            history=history,
            specs=backfill_specs(payload.specs, slug),
        )


# =============================================================================
# Development Mock
# =============================================================================

class MockPriceSource(PriceSource):
    """
    Deterministic stand-in used in development when no generative key is set.

    The same item, category and day always give the same result: a base
    price (95,000 for crypto, 9,500 otherwise) with a sine wave over the
    last 30 days.
    """

    name = "dev mock"

    def __init__(self, today: Callable[[], date] = date.today):
        self.today = today

    async def fetch(self, item_id: str, category: str | None = None) -> TrackResult:
        slug = slugify(item_id)
        is_crypto = slugify(category or "") == "crypto"
        base = 95000.0 if is_crypto else 9500.0
        amplitude = 5000.0 if is_crypto else 500.0

        today = self.today()
        history = [
            PricePoint(
                date=today - timedelta(days=i),
                price=round(base + math.sin(i / 3) * amplitude, 2),
            )
            for i in range(MAX_HISTORY_POINTS)
        ]

        logger.debug(f"Serving mock data for {slug}")
        return TrackResult(
            current_price=base,
            history=history,
            specs={
                NAME_KEY: title_from_slug(slug),
                DESCRIPTION_KEY: placeholder_description(slug),
                IMAGE_URL_KEY: placeholder_image_url(slug),
                "Source": "TrackAura Dev Mock",
            },
        )
