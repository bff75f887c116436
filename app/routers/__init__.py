# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - track.py: Item lookup (POST /api/track) and category items
# - categories.py: Category listing, category pages, static catalog file
# - watchlist.py: Saved items of the signed-in user
# - health.py: Health check endpoints
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import track
from . import categories
from . import watchlist

__all__ = [
    "health",
    "track",
    "categories",
    "watchlist",
]
