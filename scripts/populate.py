#!/usr/bin/env python3
# =============================================================================
# scripts/populate.py - One-off Teaser Price Refresh
# =============================================================================
# Re-prices every teaser in the configured catalog right now, without a
# Celery worker: crypto from one batched market-data call, everything else
# via one generative teaser prompt per item. Items that fail keep their
# previous price.
#
# Usage:
#   poetry run python scripts/populate.py
#   poetry run python scripts/populate.py --delay 0
#
# Prerequisites:
#   - GROK_API_KEY in .env for non-crypto items
# =============================================================================

import argparse
import asyncio
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv()

from app.config import get_settings
from workers.tasks import GENERATIVE_DELAY_SECONDS, run_teaser_refresh

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("populate")


def main():
    parser = argparse.ArgumentParser(description="Refresh catalog teaser prices")
    parser.add_argument(
        "--delay",
        type=float,
        default=GENERATIVE_DELAY_SECONDS,
        help="Seconds to wait between generative calls",
    )
    args = parser.parse_args()

    settings = get_settings()
    print("=" * 60)
    print("TrackAura Populate")
    print("=" * 60)
    print(f"Catalog source: {settings.CATALOG_SOURCE}")
    print(f"GROK_API_KEY loaded: {'Yes' if settings.has_grok_key else 'No'}")
    print()

    report = asyncio.run(run_teaser_refresh(settings, delay_seconds=args.delay))

    print()
    print(f"Updated {report.market_updated} crypto teasers via market data")
    print(f"Updated {report.generative_updated} general teasers")
    if report.failed:
        print(f"Failed: {', '.join(report.failed)}")
    print("Populate complete!")


if __name__ == "__main__":
    main()
