# =============================================================================
# core/services/catalog_service.py - Category Catalog Sources
# =============================================================================
# Where category teasers come from. Two interchangeable sources:
# - StaticCatalogSource: data/categories.json on disk, or the same file
#   served at an absolute URL
# - SupabaseCatalogSource: the `categories` table (self-referential
#   parent_id) joined with the `items` table
#
# Both return the same CategoryCatalog tree. The active source is picked by
# settings.CATALOG_SOURCE (see build_catalog_source).
# =============================================================================

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from app.config import Settings
from app.exceptions import MalformedUpstreamResponseError, UpstreamUnavailableError
from core.models.catalog import Category, CategoryCatalog, CategoryTeaserItem, SubCategory
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

SERVICE_NAME = "Category data"

# Project root: data/categories.json is resolved relative to it
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class CatalogSource(ABC):
    """Loads the full category catalog."""

    @abstractmethod
    async def load(self) -> CategoryCatalog:
        """
        Load the catalog.

        Raises:
            UpstreamUnavailableError: If the catalog can't be fetched
            MalformedUpstreamResponseError: If it can't be parsed
        """


# =============================================================================
# Static JSON
# =============================================================================

def parse_catalog(data: Any) -> CategoryCatalog:
    """Validate raw categories.json content."""
    try:
        return CategoryCatalog.model_validate(data)
    except ValidationError as e:
        raise MalformedUpstreamResponseError(SERVICE_NAME, str(e)) from e


class StaticCatalogSource(CatalogSource):
    """
    Catalog backed by a categories.json file.

    When `url` is set the file is fetched over HTTP with the shared client;
    otherwise it is read from `path`.
    """

    def __init__(
        self,
        path: str | Path = "data/categories.json",
        url: str | None = None,
        http: httpx.AsyncClient | None = None,
    ):
        path = Path(path)
        self.path = path if path.is_absolute() else PROJECT_ROOT / path
        self.url = url or None
        self.http = http

    async def load(self) -> CategoryCatalog:
        if self.url:
            return await self._load_url()
        return self._load_file()

    def _load_file(self) -> CategoryCatalog:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            logger.error(f"Catalog file missing: {self.path}")
            raise UpstreamUnavailableError(
                SERVICE_NAME, error=f"ensure {self.path.name} exists at {self.path}"
            ) from e
        except json.JSONDecodeError as e:
            raise MalformedUpstreamResponseError(SERVICE_NAME, str(e)) from e

        return parse_catalog(data)

    async def _load_url(self) -> CategoryCatalog:
        if self.http is None:
            raise ValueError("StaticCatalogSource needs an http client to load from a URL")
        try:
            response = await self.http.get(self.url)
        except httpx.HTTPError as e:
            logger.error(f"Catalog fetch failed: {e}")
            raise UpstreamUnavailableError(SERVICE_NAME, error=str(e)) from e

        if not response.is_success:
            logger.error(f"Catalog fetch failed: {response.status_code}")
            raise UpstreamUnavailableError(SERVICE_NAME, status=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedUpstreamResponseError(SERVICE_NAME, str(e)) from e
        return parse_catalog(data)

    def save(self, catalog: CategoryCatalog) -> None:
        """Write the catalog back to disk (teaser refresh job)."""
        payload = catalog.model_dump(mode="json", by_alias=False)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
            f.write("\n")
        logger.info(f"Saved catalog with {len(catalog.categories)} categories to {self.path}")


# =============================================================================
# Supabase
# =============================================================================

def _teaser_from_row(row: dict[str, Any]) -> CategoryTeaserItem:
    return CategoryTeaserItem(
        slug=row["slug"],
        name=row.get("name") or row["slug"],
        image_url=row.get("image_url") or "",
        teaser_price=row.get("teaser_price") or 0.0,
        trend=row.get("trend") or 0.0,
    )


def build_catalog_tree(
    category_rows: list[dict[str, Any]],
    item_rows: list[dict[str, Any]],
) -> CategoryCatalog:
    """
    Assemble a two-level catalog from flat category and item rows.

    Rows without a parent_id are top-level categories; rows whose parent is
    a top-level category become its sub-categories. Deeper rows are ignored.
    """
    items_by_category: dict[str, list[CategoryTeaserItem]] = defaultdict(list)
    for row in item_rows:
        if row.get("category_id") is not None:
            items_by_category[str(row["category_id"])].append(_teaser_from_row(row))

    children: dict[str, list[dict[str, Any]]] = defaultdict(list)
    for row in category_rows:
        if row.get("parent_id") is not None:
            children[str(row["parent_id"])].append(row)

    def fields(row: dict[str, Any]) -> dict[str, Any]:
        return {
            "slug": row.get("slug") or row.get("name"),
            "label": row.get("label") or row.get("name") or "",
            "icon": row.get("icon") or "",
            "description": row.get("description") or "",
            "items": items_by_category.get(str(row["id"]), []),
        }

    categories = [
        Category(
            **fields(row),
            sub_categories=[SubCategory(**fields(child)) for child in children.get(str(row["id"]), [])],
        )
        for row in category_rows
        if row.get("parent_id") is None
    ]
    return CategoryCatalog(categories=categories)


class SupabaseCatalogSource(CatalogSource):
    """Catalog backed by the Supabase categories/items tables."""

    def __init__(self, supabase: SupabaseClient):
        self.supabase = supabase

    async def load(self) -> CategoryCatalog:
        catalog = build_catalog_tree(
            self.supabase.fetch_categories(),
            self.supabase.fetch_items(),
        )
        logger.debug(f"Loaded {len(catalog.categories)} categories from Supabase")
        return catalog


def build_catalog_source(
    settings: Settings,
    http: httpx.AsyncClient | None = None,
    supabase: SupabaseClient | None = None,
) -> CatalogSource:
    """Pick the catalog source configured by CATALOG_SOURCE."""
    if settings.CATALOG_SOURCE == "supabase":
        if supabase is None:
            raise ValueError("CATALOG_SOURCE=supabase requires a SupabaseClient")
        return SupabaseCatalogSource(supabase)
    return StaticCatalogSource(settings.CATALOG_PATH, url=settings.CATALOG_URL, http=http)
