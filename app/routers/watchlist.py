# =============================================================================
# app/routers/watchlist.py - Watchlist Endpoints
# =============================================================================
# Saved items of the signed-in user. All endpoints require authentication.
#
#   POST /api/v1/watchlist            -> save an item
#   GET  /api/v1/watchlist?live=true  -> list entries, optionally with live
#                                        price / trend / image
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from app.auth import AuthUser, get_current_user
from app.dependencies import WatchlistServiceDep
from core.models.watchlist import (
    WatchlistCreate,
    WatchlistEntry,
    WatchlistItem,
    WatchlistResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=WatchlistEntry,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def add_to_watchlist(
    body: WatchlistCreate,
    service: WatchlistServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """Save an item from its item page to the current user's watchlist."""
    return service.add_entry(user.id, body)


@router.get("", response_model=WatchlistResponse, response_model_by_alias=True)
async def get_watchlist(
    service: WatchlistServiceDep,
    user: AuthUser = Depends(get_current_user),
    live: Annotated[bool, Query(description="Attach live price, 24h trend and image")] = False,
):
    """
    List the current user's watchlist, newest first.

    With `live=true` every entry is priced concurrently; entries whose
    lookup fails are returned with empty live fields.
    """
    if live:
        items = await service.list_with_prices(user.id)
    else:
        items = [WatchlistItem(**entry.model_dump()) for entry in service.list_entries(user.id)]
    return WatchlistResponse(items=items, total=len(items))
