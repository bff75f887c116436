# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable clients and utilities:
# - supabase_client.py: Typed Supabase wrapper (catalog, watchlists, auth)
# - market_data.py: Async CoinGecko client (prices, history, metadata)
# - alpha_vantage.py: Stock listing CSV for the seed script
# - utils.py: Shared utilities (slugs, JSON extraction)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.utils import extract_json_object, slugify, strip_code_fences, title_from_slug

__all__ = [
    "extract_json_object",
    "slugify",
    "strip_code_fences",
    "title_from_slug",
]
