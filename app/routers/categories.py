# =============================================================================
# app/routers/categories.py - Category Catalog Endpoints
# =============================================================================
# Home page and category pages:
#
#   GET /api/v1/categories                 -> category summaries
#   GET /api/v1/categories/{slug}          -> first 6 teasers of a category
#   GET /api/v1/categories/{slug}/{sub}    -> first 3 teasers of a sub-category
#
# Plus the raw catalog file at GET /data/categories.json (static_router).
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, Query
from fastapi.responses import FileResponse
from pydantic import BaseModel, ConfigDict, Field

from app.dependencies import SettingsDep, TrackServiceDep
from app.exceptions import UpstreamUnavailableError
from core.models.catalog import CategorySummary, CategoryTeaserItem
from core.services.catalog_service import SERVICE_NAME, StaticCatalogSource

router = APIRouter()
static_router = APIRouter()

# Teasers shown per page when no limit is given
MAIN_CATEGORY_LIMIT = 6
SUB_CATEGORY_LIMIT = 3


# =============================================================================
# Response Models
# =============================================================================

class CategoryListResponse(BaseModel):
    categories: list[CategorySummary]
    total: int


class CategoryItemsResponse(BaseModel):
    """Teasers for one category page."""
    category: str
    sub_category: str | None = Field(default=None, alias="subCategory")
    items: list[CategoryTeaserItem]

    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=CategoryListResponse)
async def list_categories(service: TrackServiceDep):
    """List every top-level category with its item count and sub-categories."""
    summaries = await service.list_categories()
    return CategoryListResponse(categories=summaries, total=len(summaries))


@router.get("/{slug}", response_model=CategoryItemsResponse, response_model_by_alias=True)
async def get_category(
    slug: Annotated[str, Path(description="Category slug, e.g. crypto")],
    service: TrackServiceDep,
    limit: Annotated[int, Query(ge=1, le=100)] = MAIN_CATEGORY_LIMIT,
):
    """Teasers of a main category."""
    items = await service.category_items(slug, limit=limit)
    return CategoryItemsResponse(category=slug, items=items)


@router.get("/{slug}/{sub}", response_model=CategoryItemsResponse, response_model_by_alias=True)
async def get_sub_category(
    slug: Annotated[str, Path(description="Main category slug")],
    sub: Annotated[str, Path(description="Sub-category slug, e.g. altcoins")],
    service: TrackServiceDep,
    limit: Annotated[int, Query(ge=1, le=100)] = SUB_CATEGORY_LIMIT,
):
    """Teasers of a sub-category inside its main category."""
    items = await service.category_items(slug, sub, limit=limit)
    return CategoryItemsResponse(category=slug, sub_category=sub, items=items)


@static_router.get("/data/categories.json", include_in_schema=False)
async def categories_file(settings: SettingsDep):
    """Serve the static catalog file the pages fetch directly."""
    path = StaticCatalogSource(settings.CATALOG_PATH).path
    if not path.is_file():
        raise UpstreamUnavailableError(SERVICE_NAME, error=f"ensure {path.name} exists at {path}")
    return FileResponse(path, media_type="application/json")
