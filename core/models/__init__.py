# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - track.py: Item lookup request/result schemas
# - catalog.py: Category catalog and teaser item schemas
# - watchlist.py: Watchlist entry schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Catalog Models - Category tree and teasers
# -----------------------------------------------------------------------------
from .catalog import (
    Category,
    CategoryCatalog,
    CategorySummary,
    CategoryTeaserItem,
    SubCategory,
)

# -----------------------------------------------------------------------------
# Track Models - Item lookup
# -----------------------------------------------------------------------------
from .track import (
    MAX_HISTORY_POINTS,
    PricePoint,
    TeaserResult,
    TrackRequest,
    TrackResult,
)

# -----------------------------------------------------------------------------
# Watchlist Models - Saved items
# -----------------------------------------------------------------------------
from .watchlist import (
    WatchlistCreate,
    WatchlistEntry,
    WatchlistItem,
    WatchlistResponse,
)

__all__ = [
    # Catalog
    "Category",
    "CategoryCatalog",
    "CategorySummary",
    "CategoryTeaserItem",
    "SubCategory",
    # Track
    "MAX_HISTORY_POINTS",
    "PricePoint",
    "TeaserResult",
    "TrackRequest",
    "TrackResult",
    # Watchlist
    "WatchlistCreate",
    "WatchlistEntry",
    "WatchlistItem",
    "WatchlistResponse",
]
