# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Defines background tasks for catalog maintenance.
#
# Tasks:
# - refresh_teasers: Re-price every catalog teaser (beat-scheduled)
# =============================================================================

import asyncio
import logging
from typing import Any

import httpx
from celery import shared_task

from app.config import Settings, get_settings
from agents.price_oracle import PriceOracleAgent
from core.services.catalog_service import StaticCatalogSource, SupabaseCatalogSource
from core.services.teaser_refresh import RefreshReport, TeaserRefresher
from lib.market_data import MarketDataClient
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

# Pause between generative calls
GENERATIVE_DELAY_SECONDS = 1.5


async def run_teaser_refresh(
    settings: Settings,
    delay_seconds: float = GENERATIVE_DELAY_SECONDS,
    http: httpx.AsyncClient | None = None,
) -> RefreshReport:
    """
    Load the configured catalog, refresh its teasers and write them back.

    File catalogs are rewritten in place; Supabase catalogs get one update
    per refreshed item. A client is created for the run unless `http` is
    given.
    """
    if http is None:
        async with httpx.AsyncClient(timeout=settings.MARKET_TIMEOUT_SECONDS) as client:
            return await _refresh_catalog(settings, client, delay_seconds)
    return await _refresh_catalog(settings, http, delay_seconds)


async def _refresh_catalog(settings: Settings, http: httpx.AsyncClient, delay_seconds: float) -> RefreshReport:
    oracle = PriceOracleAgent.from_settings(settings) if settings.has_grok_key else None
    market = MarketDataClient(
        http,
        settings.MARKET_DATA_BASE_URL,
        api_key=settings.MARKET_DATA_API_KEY,
        timeout=settings.MARKET_TIMEOUT_SECONDS,
    )
    refresher = TeaserRefresher(market, oracle, delay_seconds=delay_seconds)

    if settings.CATALOG_SOURCE == "supabase":
        supabase = SupabaseClient.from_settings(settings)
        report = await refresher.refresh(await SupabaseCatalogSource(supabase).load())
        for slug, item in report.refreshed.items():
            supabase.update_item_teaser(slug, item.teaser_price, item.trend)
    else:
        source = StaticCatalogSource(settings.CATALOG_PATH)
        report = await refresher.refresh(await source.load())
        source.save(report.catalog)

    return report


@shared_task(bind=True, name="workers.tasks.refresh_teasers")
def refresh_teasers(self) -> dict[str, Any]:
    """
    Re-price every catalog teaser.

    Returns:
        Dict with success, updated, market_updated, generative_updated and
        the slugs that failed
    """
    report = asyncio.run(run_teaser_refresh(get_settings()))
    return {
        "success": True,
        "updated": report.updated,
        "market_updated": report.market_updated,
        "generative_updated": report.generative_updated,
        "failed": report.failed,
    }
