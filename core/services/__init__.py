# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .catalog_service import (
    CatalogSource,
    StaticCatalogSource,
    SupabaseCatalogSource,
    build_catalog_source,
)
from .normalizer import normalize_history, normalize_result
from .price_sources import (
    GenerativePriceSource,
    MarketDataPriceSource,
    MockPriceSource,
    PriceSource,
)
from .teaser_refresh import RefreshReport, TeaserRefresher
from .track_service import TrackService
from .watchlist_service import WatchlistService

__all__ = [
    "CatalogSource",
    "StaticCatalogSource",
    "SupabaseCatalogSource",
    "build_catalog_source",
    "normalize_history",
    "normalize_result",
    "GenerativePriceSource",
    "MarketDataPriceSource",
    "MockPriceSource",
    "PriceSource",
    "RefreshReport",
    "TeaserRefresher",
    "TrackService",
    "WatchlistService",
]
