#!/usr/bin/env python3
# =============================================================================
# scripts/seed.py - Seed the Supabase Catalog
# =============================================================================
# Rebuilds the `categories` and `items` tables used by
# CATALOG_SOURCE=supabase:
#
# 1. Clear items and categories
# 2. Crypto: root category, the first 20 CoinGecko categories, the top 100
#    coins by market cap, and an `altcoins` sub-category holding 3 of them
# 3. Stocks (only with ALPHA_VANTAGE_API_KEY): sector categories, up to 500
#    symbols from the listing CSV, and a `tech-giants` sub-category (sectors
#    and tech-giants are sub-categories of `stocks`)
#
# Usage:
#   poetry run python scripts/seed.py
#   poetry run python scripts/seed.py --skip-stocks
#
# Prerequisites:
#   - SUPABASE_URL / SUPABASE_SERVICE_KEY in .env (writes bypass RLS)
# =============================================================================

import argparse
import asyncio
import logging
import os
import sys
from typing import Any

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv()

import httpx

from app.config import Settings, get_settings
from app.exceptions import TrackAuraException
from lib.alpha_vantage import AlphaVantageClient
from lib.market_data import MarketDataClient
from lib.supabase_client import SupabaseClient
from lib.utils import slugify

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("seed")

COINGECKO_CATEGORY_COUNT = 20
TOP_COINS = 100
LISTING_LIMIT = 500
SUB_CATEGORY_ITEMS = 3

ROOT_CATEGORIES = [
    {"name": "crypto", "slug": "crypto", "label": "Crypto", "icon": "₿", "description": "Cryptocurrencies"},
    {"name": "stocks", "slug": "stocks", "label": "Stocks", "icon": "📈", "description": "Listed equities"},
]

STOCK_SECTORS = [
    {"name": "technology", "slug": "technology", "label": "Technology", "icon": "💻"},
    {"name": "finance", "slug": "finance", "label": "Finance", "icon": "🏦"},
    {"name": "healthcare", "slug": "healthcare", "label": "Healthcare", "icon": "🏥"},
]


def require_category_id(supabase: SupabaseClient, slug: str) -> str:
    category_id = supabase.fetch_category_id(slug)
    if category_id is None:
        raise RuntimeError(f"Category '{slug}' missing after upsert")
    return category_id


def add_sub_category(
    supabase: SupabaseClient,
    slug: str,
    label: str,
    icon: str,
    parent_slug: str,
    items: list[dict[str, Any]],
) -> None:
    """Create a sub-category and move the given items into it."""
    parent_id = require_category_id(supabase, parent_slug)
    supabase.upsert_rows(
        "categories",
        [{"name": slug, "slug": slug, "label": label, "icon": icon, "parent_id": parent_id}],
        on_conflict="name",
    )
    sub_id = require_category_id(supabase, slug)
    moved = [{**item, "category_id": sub_id} for item in items[:SUB_CATEGORY_ITEMS]]
    supabase.upsert_rows("items", moved, on_conflict="slug")


async def seed_crypto(supabase: SupabaseClient, market: MarketDataClient) -> int:
    print("Seeding Crypto...")

    coin_categories = (await market.fetch_category_list())[:COINGECKO_CATEGORY_COUNT]
    supabase.upsert_rows(
        "categories",
        [
            {
                "name": row["name"],
                "slug": row.get("category_id") or slugify(row["name"]),
                "label": row["name"],
                "icon": "₿",
                "description": f"Crypto: {row['name']}",
            }
            for row in coin_categories
        ],
        on_conflict="name",
    )

    crypto_id = require_category_id(supabase, "crypto")
    markets = await market.fetch_markets(per_page=TOP_COINS)
    items = [
        {
            "slug": coin["id"],
            "name": coin["name"],
            "category_id": crypto_id,
            "teaser_price": coin.get("current_price") or 0,
            "trend": coin.get("price_change_percentage_24h") or 0,
            "image_url": coin.get("image") or "",
            "description": f"{coin['name']} - Cap: ${coin.get('market_cap') or 0:,}",
        }
        for coin in markets
    ]
    supabase.upsert_rows("items", items, on_conflict="slug")

    add_sub_category(supabase, "altcoins", "Altcoins", "🪙", "crypto", items)

    print(f"Crypto: {len(coin_categories)} categories + {len(items)} items "
          f"({SUB_CATEGORY_ITEMS} in altcoins)")
    return len(items)


async def seed_stocks(supabase: SupabaseClient, alpha: AlphaVantageClient) -> int:
    print("Seeding Stocks...")
    stocks_id = require_category_id(supabase, "stocks")
    supabase.upsert_rows(
        "categories",
        [{**sector, "parent_id": stocks_id} for sector in STOCK_SECTORS],
        on_conflict="name",
    )

    listings = await alpha.fetch_listings(limit=LISTING_LIMIT)
    items = [
        {
            "slug": row.symbol,
            "name": f"{row.name} Stock",
            "category_id": stocks_id,
            "teaser_price": 0,
            "trend": 0,
            "image_url": "",
            "description": f"{row.name} - {row.exchange or 'NASDAQ'}",
        }
        for row in listings.itertuples(index=False)
    ]
    supabase.upsert_rows("items", items, on_conflict="slug")

    add_sub_category(supabase, "tech-giants", "Tech Giants", "🚀", "stocks", items)

    print(f"Stocks: {len(STOCK_SECTORS)} sectors + {len(items)} items "
          f"({SUB_CATEGORY_ITEMS} in tech-giants)")
    return len(items)


async def seed(settings: Settings, skip_stocks: bool = False) -> None:
    supabase = SupabaseClient.from_settings(settings)

    print("Clearing existing data...")
    supabase.clear_table("items")
    supabase.clear_table("categories")
    supabase.upsert_rows("categories", ROOT_CATEGORIES, on_conflict="name")

    async with httpx.AsyncClient(timeout=settings.MARKET_TIMEOUT_SECONDS) as http:
        market = MarketDataClient(
            http,
            settings.MARKET_DATA_BASE_URL,
            api_key=settings.MARKET_DATA_API_KEY,
            timeout=settings.MARKET_TIMEOUT_SECONDS,
        )
        await seed_crypto(supabase, market)

        if skip_stocks:
            print("Skipping stocks (--skip-stocks)")
        elif not settings.ALPHA_VANTAGE_API_KEY:
            print("Skipping stocks - no ALPHA_VANTAGE_API_KEY in .env")
        else:
            await seed_stocks(supabase, AlphaVantageClient(http, settings.ALPHA_VANTAGE_API_KEY))


def main():
    parser = argparse.ArgumentParser(description="Seed the Supabase catalog tables")
    parser.add_argument("--skip-stocks", action="store_true", help="Only seed crypto")
    args = parser.parse_args()

    print("=" * 60)
    print("TrackAura Seed")
    print("=" * 60)

    try:
        asyncio.run(seed(get_settings(), skip_stocks=args.skip_stocks))
    except TrackAuraException as e:
        logger.error(f"Seeding failed: {e}")
        if e.suggestion:
            print(f"Suggestion: {e.suggestion}")
        sys.exit(1)

    print("Seeding done! Check Supabase > Tables for nested categories/items.")


if __name__ == "__main__":
    main()
