# =============================================================================
# app/routers/track.py - Item Lookup Endpoints
# =============================================================================
# The endpoint every page calls:
#
#   POST /api/track  { item, category? }
#     -> TrackResult   { currentPrice, history, specs }
#     -> TeaserResult  { related: [...] }          for "top-<N>-<category>"
#
#   GET /api/track?category=<slug>
#     -> { items: [...] }                          all teasers of a category
#
# Routing and normalization live in core.services.track_service.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from app.dependencies import TrackServiceDep
from app.exceptions import BadRequestError
from core.models.catalog import CategoryTeaserItem
from core.models.track import TeaserResult, TrackRequest, TrackResult

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Endpoints
# =============================================================================

@router.post(
    "",
    response_model=TrackResult | TeaserResult,
    responses={
        400: {"description": "Missing item or malformed teaser id"},
        404: {"description": "Unknown category or sub-category"},
        502: {"description": "Upstream price source failed"},
    },
)
async def track_item(request: TrackRequest, service: TrackServiceDep):
    """
    Look up an item's price, history and specs, or a category teaser list.

    Examples:
    - `{"item": "bitcoin"}` - live market data
    - `{"item": "top-6-crypto"}` - first six crypto teasers
    - `{"item": "1909-s-vdb-lincoln-cent", "category": "coins"}` - generative lookup
    """
    logger.info(f"Track request: item={request.item!r} category={request.category!r}")
    result = await service.lookup(request.item, request.category)
    return JSONResponse(content=result.model_dump(mode="json", by_alias=True))


@router.get("")
async def list_category_items(
    service: TrackServiceDep,
    category: Annotated[str | None, Query(description="Category slug, e.g. crypto")] = None,
) -> dict[str, list[CategoryTeaserItem]]:
    """All teaser items of one category."""
    if not category or not category.strip():
        raise BadRequestError(
            "Missing category",
            suggestion="Call GET /api/track?category=crypto",
        )
    items = await service.category_items(category.strip())
    return {"items": items}
