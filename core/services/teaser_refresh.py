# =============================================================================
# core/services/teaser_refresh.py - Teaser Price Refresh
# =============================================================================
# Refreshes teaser_price / trend of every catalog item:
#
# - crypto category (and its sub-categories): one batched market-data call
#   for all coins
# - every other category: one generative teaser prompt per item, answered
#   as { "price": number, "trend": number }
#
# Items whose refresh fails, or whose answer has neither a usable price nor
# a trend, keep their previous values. The same slug is
# quoted once even when it appears in several (sub-)categories.
#
# Used by workers.tasks.refresh_teasers (beat-scheduled) and
# scripts/populate.py.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field

from app.exceptions import TrackAuraException
from agents.price_oracle import PriceOracleAgent
from core.models.catalog import Category, CategoryCatalog, CategoryTeaserItem, SubCategory
from lib.market_data import MarketDataClient, MarketQuote, resolve_coin_id

logger = logging.getLogger(__name__)

MARKET_CATEGORY = "crypto"


@dataclass
class RefreshReport:
    """Outcome of one refresh run."""

    catalog: CategoryCatalog
    market_updated: int = 0
    generative_updated: int = 0
    failed: list[str] = field(default_factory=list)
    refreshed: dict[str, CategoryTeaserItem] = field(default_factory=dict)

    @property
    def updated(self) -> int:
        return self.market_updated + self.generative_updated


def _groups(category: Category) -> list[SubCategory]:
    return [category, *category.sub_categories]


class TeaserRefresher:
    """
    Re-prices catalog teasers.

    Attributes:
        market: Market-data client for the crypto category
        oracle: Generative oracle for everything else; None skips those items
        delay_seconds: Pause between generative calls (rate limiting)
    """

    def __init__(
        self,
        market: MarketDataClient,
        oracle: PriceOracleAgent | None = None,
        delay_seconds: float = 0.0,
    ):
        self.market = market
        self.oracle = oracle
        self.delay_seconds = delay_seconds

    async def refresh(self, catalog: CategoryCatalog) -> RefreshReport:
        """
        Refresh every teaser of a catalog.

        Returns:
            RefreshReport holding the updated catalog (the input is not
            modified) and per-source counts
        """
        report = RefreshReport(catalog=catalog.model_copy(deep=True))

        market_items: list[CategoryTeaserItem] = []
        generative_items: list[tuple[CategoryTeaserItem, str]] = []
        for category in report.catalog.categories:
            for group in _groups(category):
                for item in group.items:
                    if category.slug == MARKET_CATEGORY:
                        market_items.append(item)
                    else:
                        generative_items.append((item, category.slug))

        await self._refresh_market(market_items, report)
        await self._refresh_generative(generative_items, report)

        logger.info(
            f"Teaser refresh done: {report.market_updated} market, "
            f"{report.generative_updated} generative, {len(report.failed)} failed"
        )
        return report

    async def _refresh_market(self, items: list[CategoryTeaserItem], report: RefreshReport) -> None:
        if not items:
            return

        coin_ids = {item.slug: resolve_coin_id(item.slug) or item.slug for item in items}
        try:
            quotes = await self.market.fetch_quotes(list(coin_ids.values()))
        except TrackAuraException as e:
            logger.error(f"Market batch refresh failed: {e}")
            report.failed.extend(item.slug for item in items)
            return

        for item in items:
            quote: MarketQuote | None = quotes.get(coin_ids[item.slug])
            if quote is None or not math.isfinite(quote.price) or quote.price <= 0:
                logger.warning(f"No usable market quote for {item.slug}")
                report.failed.append(item.slug)
                continue
            item.teaser_price = quote.price
            if quote.change_24h is not None and math.isfinite(quote.change_24h):
                item.trend = round(quote.change_24h, 2)
            report.market_updated += 1
            report.refreshed[item.slug] = item

    async def _refresh_generative(
        self,
        items: list[tuple[CategoryTeaserItem, str]],
        report: RefreshReport,
    ) -> None:
        if not items:
            return
        if self.oracle is None:
            logger.warning(f"No generative key; skipping {len(items)} non-crypto teasers")
            return

        quoted: dict[str, tuple[float | None, float | None] | None] = {}
        for item, category in items:
            if item.slug not in quoted:
                quoted[item.slug] = await self._quote(item.slug, category)
            result = quoted[item.slug]
            if result is None:
                report.failed.append(item.slug)
                continue

            price, trend = result
            has_price = price is not None and math.isfinite(price) and price > 0
            has_trend = trend is not None and math.isfinite(trend)
            if not (has_price or has_trend):
                logger.warning(f"Teaser for {item.slug} had no usable price or trend")
                report.failed.append(item.slug)
                continue

            if has_price:
                item.teaser_price = price
            if has_trend:
                item.trend = round(trend, 2)
            report.generative_updated += 1
            report.refreshed[item.slug] = item

    async def _quote(self, slug: str, category: str) -> tuple[float | None, float | None] | None:
        logger.info(f"Starting teaser for {slug} ({category})")
        try:
            quote = await self.oracle.quote_teaser(slug, category)
        except TrackAuraException as e:
            logger.error(f"Teaser for {slug} failed: {e}")
            return None
        finally:
            if self.delay_seconds:
                await asyncio.sleep(self.delay_seconds)

        logger.info(f"Updated {slug}: {quote.price} (trend {quote.trend}%)")
        return quote.price, quote.trend
