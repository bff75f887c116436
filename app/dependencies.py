# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# The shared objects are built once in the app lifespan (see app.main) and
# stored on app.state; tests replace them with app.dependency_overrides.
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from app.config import Settings, get_settings
from core.services.track_service import TrackService
from core.services.watchlist_service import WatchlistService
from lib.supabase_client import SupabaseClient


def get_supabase_client(request: Request) -> SupabaseClient:
    """
    Get the Supabase client wrapper.

    Returns the instance created at startup.
    """
    return request.app.state.supabase


def get_track_service(request: Request) -> TrackService:
    """Item lookup service wired at startup from settings."""
    return request.app.state.track_service


def get_watchlist_service(
    supabase: Annotated[SupabaseClient, Depends(get_supabase_client)],
    track_service: Annotated[TrackService, Depends(get_track_service)],
) -> WatchlistService:
    return WatchlistService(supabase, track_service)


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
SupabaseDep = Annotated[SupabaseClient, Depends(get_supabase_client)]
TrackServiceDep = Annotated[TrackService, Depends(get_track_service)]
WatchlistServiceDep = Annotated[WatchlistService, Depends(get_watchlist_service)]
